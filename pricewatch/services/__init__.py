"""
pricewatch/services package marker.
"""

from pricewatch.services.price_scraping_service import (
    PriceScrapingService,
    get_price_scraping_service,
)

__all__ = [
    "PriceScrapingService",
    "get_price_scraping_service",
]
