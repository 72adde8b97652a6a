"""
pricewatch/repositories/price_history_repository.py

Persistence layer for price observations.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.price_history import PriceHistory
from pricewatch.scraping.types import ObservationStatus, PriceObservation


class PriceHistoryRepository:
    """
    Append-only repository for `price_history` rows.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def insert(self, observation: PriceObservation) -> PriceHistory:
        row = PriceHistory(
            competitor_url_id=uuid.UUID(str(observation.competitor_url_id)),
            product_id=uuid.UUID(str(observation.product_id)),
            user_id=uuid.UUID(str(observation.user_id)) if observation.user_id else None,
            scraped_price=_to_decimal(observation.scraped_price),
            currency=observation.currency,
            raw_price_text=observation.raw_price_text,
            status=observation.status,
            error_message=observation.error_message,
            price_delta=_to_decimal(observation.price_delta),
            price_delta_pct=_to_decimal(observation.price_delta_pct),
            scraped_at=observation.scraped_at,
        )
        self._session.add(row)
        self._session.flush()
        return row

    def latest_successful_price(self, competitor_url_id: str) -> float | None:
        statement = (
            select(PriceHistory.scraped_price)
            .where(
                PriceHistory.competitor_url_id == uuid.UUID(str(competitor_url_id)),
                PriceHistory.status == ObservationStatus.SUCCESS,
                PriceHistory.scraped_price.is_not(None),
            )
            .order_by(PriceHistory.scraped_at.desc())
            .limit(1)
        )
        value = self._session.execute(statement).scalar_one_or_none()
        return float(value) if value is not None else None


def _to_decimal(value: float | None) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(round(value, 2)))
