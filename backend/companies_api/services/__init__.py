# Services package init
"""
Companies API: Services Package
=================================

What:  Database-facing logic, independent of HTTP.

    company_service.py: insert and list company records
"""
