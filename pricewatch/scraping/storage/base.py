"""
Storage layer interfaces for price tracking.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime

from pricewatch.scraping.types import PriceObservation, ScrapeTarget


class PriceTrackingStorage(ABC):
    """
    Storage abstraction consumed by the scrape worker.

    Implementations raise `StorageError` on backend failures; calls are not
    transactionally coupled to each other.
    """

    @abstractmethod
    def list_active_targets(
        self,
        *,
        max_consecutive_failures: int = 0,
        competitor_url_ids: Sequence[str] | None = None,
    ) -> list[ScrapeTarget]:
        """
        Active competitor URLs with product context.

        When `max_consecutive_failures` is positive, URLs that reached that many
        consecutive failures are skipped.
        """

    @abstractmethod
    def latest_successful_price(self, competitor_url_id: str) -> float | None:
        """
        Price of the most recent successful observation for a URL.
        """

    @abstractmethod
    def insert_observation(self, observation: PriceObservation) -> None:
        """
        Persist one immutable observation row.
        """

    @abstractmethod
    def update_url_health(
        self,
        competitor_url_id: str,
        *,
        scraped_at: datetime,
        status: str,
        consecutive_failures: int,
    ) -> None:
        """
        Record the latest scrape status and failure streak for a URL.
        """
