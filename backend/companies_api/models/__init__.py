from companies_api.models.company import Company

__all__ = ["Company"]
