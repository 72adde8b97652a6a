"""
pricewatch/schemas/price_scraping.py

Request and response schemas for price scraping operations.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from pricewatch.scraping.types import ScrapeResult, ScrapeRunSummary


class ScrapeRunSummaryResponse(BaseModel):
    """
    API response model for one scrape run.
    """

    total: int = Field(..., ge=0)
    succeeded: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    rate_limited: int = Field(..., ge=0)
    started_at: datetime
    finished_at: datetime
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: ScrapeRunSummary) -> "ScrapeRunSummaryResponse":
        return cls(
            total=summary.total,
            succeeded=summary.succeeded,
            failed=summary.failed,
            rate_limited=summary.rate_limited,
            started_at=summary.started_at,
            finished_at=summary.finished_at,
            errors=summary.errors,
        )


class PriceExtractionRequest(BaseModel):
    """
    HTML document to scan, with an optional CSS selector override.
    """

    html: str = Field(..., max_length=5_000_000)
    selector: str | None = Field(default=None, max_length=500)


class PriceExtractionResponse(BaseModel):
    """
    Extraction preview; all fields are null when no price was found.
    """

    price: float | None = None
    raw_text: str | None = None
    rank: str | None = None

    @classmethod
    def from_result(cls, result: ScrapeResult) -> "PriceExtractionResponse":
        return cls(
            price=result.price,
            raw_text=result.raw_text,
            rank=result.rank.name.lower() if result.rank is not None else None,
        )
