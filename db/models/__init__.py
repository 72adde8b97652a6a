"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.competitor_url import CompetitorURL
from db.models.price_history import PriceHistory
from db.models.product import Product

__all__ = [
    "CompetitorURL",
    "PriceHistory",
    "Product",
]
