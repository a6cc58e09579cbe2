# Routes package init
"""
Companies API: Routes Package
===============================

Route Inventory:
    - companies.py:  GET/POST /companies    (list / create, 405 otherwise)
    - health.py:     GET      /health       (service health check)
"""
