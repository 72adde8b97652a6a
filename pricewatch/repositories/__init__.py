"""
pricewatch/repositories package marker.
"""

from pricewatch.repositories.competitor_url_repository import CompetitorURLRepository
from pricewatch.repositories.price_history_repository import PriceHistoryRepository

__all__ = [
    "CompetitorURLRepository",
    "PriceHistoryRepository",
]
