"""
SQLAlchemy-backed storage implementation for price tracking.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pricewatch.repositories.competitor_url_repository import CompetitorURLRepository
from pricewatch.repositories.price_history_repository import PriceHistoryRepository
from pricewatch.scraping.errors import StorageError
from pricewatch.scraping.storage.base import PriceTrackingStorage
from pricewatch.scraping.types import PriceObservation, ScrapeTarget


class SQLAlchemyPriceStorage(PriceTrackingStorage):
    """
    Persist observations and URL health through repositories, one commit per call.
    """

    def __init__(self, *, session: Session, default_currency: str = "HUF") -> None:
        self._session = session
        self._urls = CompetitorURLRepository(session, default_currency=default_currency)
        self._history = PriceHistoryRepository(session)

    def list_active_targets(
        self,
        *,
        max_consecutive_failures: int = 0,
        competitor_url_ids: Sequence[str] | None = None,
    ) -> list[ScrapeTarget]:
        try:
            return self._urls.list_active_targets(
                max_consecutive_failures=max_consecutive_failures,
                competitor_url_ids=competitor_url_ids,
            )
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StorageError(f"Failed to load active competitor URLs: {exc}") from exc

    def latest_successful_price(self, competitor_url_id: str) -> float | None:
        try:
            return self._history.latest_successful_price(competitor_url_id)
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StorageError(f"Failed to read previous price: {exc}") from exc

    def insert_observation(self, observation: PriceObservation) -> None:
        try:
            self._history.insert(observation)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StorageError(f"Failed to insert price observation: {exc}") from exc

    def update_url_health(
        self,
        competitor_url_id: str,
        *,
        scraped_at: datetime,
        status: str,
        consecutive_failures: int,
    ) -> None:
        try:
            self._urls.update_health(
                competitor_url_id,
                scraped_at=scraped_at,
                status=status,
                consecutive_failures=consecutive_failures,
            )
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StorageError(f"Failed to update competitor URL health: {exc}") from exc
