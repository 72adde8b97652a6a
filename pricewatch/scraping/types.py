"""
Shared scraping runtime data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum


class ObservationStatus:
    SUCCESS = "success"
    FAILED = "failed"
    RATE_LIMITED = "rate_limited"


class ScrapeState:
    PENDING = "pending"
    FETCHING = "fetching"
    SCRAPED = "scraped"
    FETCH_FAILED = "fetch_failed"
    RATE_LIMITED = "rate_limited"
    PERSISTED = "persisted"


class CandidateRank(IntEnum):
    """
    Selection priority of a candidate; lower values are tried first.
    """

    SELECTOR_OVERRIDE = 0
    MICRODATA = 1
    CLASS_OR_ID = 2
    DATA_ATTRIBUTE = 3
    COMMON_SELECTOR = 4
    BODY_TEXT = 5


@dataclass(frozen=True)
class Candidate:
    """
    One text fragment that may contain the page price.
    """

    text: str
    rank: CandidateRank


@dataclass(frozen=True)
class ScrapeResult:
    """
    Outcome of one page scan.

    `raw_text` and `rank` are set exactly when `price` is.
    """

    price: float | None = None
    raw_text: str | None = None
    rank: CandidateRank | None = None

    def __post_init__(self) -> None:
        has_price = self.price is not None
        if has_price != (self.raw_text is not None) or has_price != (self.rank is not None):
            raise ValueError("ScrapeResult requires price, raw_text and rank to be set together.")

    @property
    def found(self) -> bool:
        return self.price is not None

    @classmethod
    def not_found(cls) -> "ScrapeResult":
        return cls()


@dataclass(frozen=True)
class ScrapeTarget:
    """
    One active competitor URL and the product context needed to scrape it.
    """

    competitor_url_id: str
    url: str
    product_id: str
    currency: str
    competitor_name: str = ""
    product_name: str = ""
    user_id: str | None = None
    scrape_selector: str | None = None
    consecutive_failures: int = 0
    own_price: float | None = None
    alert_email: str | None = None


@dataclass(frozen=True)
class PriceObservation:
    """
    One price-history row written after a scrape attempt.
    """

    competitor_url_id: str
    product_id: str
    currency: str
    status: str
    scraped_at: datetime
    user_id: str | None = None
    scraped_price: float | None = None
    raw_price_text: str | None = None
    error_message: str | None = None
    price_delta: float | None = None
    price_delta_pct: float | None = None


@dataclass(frozen=True)
class ScrapeRunSummary:
    """
    Run-level tally for one worker pass.
    """

    total: int
    succeeded: int
    failed: int
    rate_limited: int
    started_at: datetime
    finished_at: datetime
    errors: list[str] = field(default_factory=list)
