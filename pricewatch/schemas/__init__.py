"""
pricewatch/schemas package marker.
"""

from pricewatch.schemas.price_scraping import (
    PriceExtractionRequest,
    PriceExtractionResponse,
    ScrapeRunSummaryResponse,
)

__all__ = [
    "PriceExtractionRequest",
    "PriceExtractionResponse",
    "ScrapeRunSummaryResponse",
]
