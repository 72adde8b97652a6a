"""
Storage layer exports.
"""

from pricewatch.scraping.storage.base import PriceTrackingStorage
from pricewatch.scraping.storage.sqlalchemy_storage import SQLAlchemyPriceStorage

__all__ = ["PriceTrackingStorage", "SQLAlchemyPriceStorage"]
