"""
pricewatch/repositories/competitor_url_repository.py

Reads and health updates for tracked competitor URLs.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from db.models.competitor_url import CompetitorURL
from db.models.product import Product
from pricewatch.scraping.types import ScrapeTarget


class CompetitorURLRepository:
    """
    Repository for `competitor_urls` joined with their product.
    """

    def __init__(self, session: Session, *, default_currency: str = "HUF") -> None:
        self._session = session
        self._default_currency = default_currency

    def list_active_targets(
        self,
        *,
        max_consecutive_failures: int = 0,
        competitor_url_ids: Sequence[str] | None = None,
    ) -> list[ScrapeTarget]:
        statement = (
            select(CompetitorURL, Product)
            .join(Product, Product.id == CompetitorURL.product_id)
            .where(CompetitorURL.is_active.is_(True))
            .order_by(CompetitorURL.created_at, CompetitorURL.id)
        )
        if max_consecutive_failures > 0:
            statement = statement.where(
                CompetitorURL.consecutive_failures < max_consecutive_failures
            )
        if competitor_url_ids:
            statement = statement.where(
                CompetitorURL.id.in_([uuid.UUID(str(value)) for value in competitor_url_ids])
            )

        targets: list[ScrapeTarget] = []
        for competitor_url, product in self._session.execute(statement).all():
            targets.append(
                ScrapeTarget(
                    competitor_url_id=str(competitor_url.id),
                    url=competitor_url.url,
                    product_id=str(product.id),
                    currency=product.currency or self._default_currency,
                    competitor_name=competitor_url.competitor_name,
                    product_name=product.name,
                    user_id=str(competitor_url.user_id) if competitor_url.user_id else None,
                    scrape_selector=competitor_url.scrape_selector,
                    consecutive_failures=competitor_url.consecutive_failures or 0,
                    own_price=float(product.own_price) if product.own_price is not None else None,
                    alert_email=product.notification_email,
                )
            )
        return targets

    def update_health(
        self,
        competitor_url_id: str,
        *,
        scraped_at: datetime,
        status: str,
        consecutive_failures: int,
    ) -> int:
        """
        Update scrape health fields and return the affected row count.
        """

        result = self._session.execute(
            update(CompetitorURL)
            .where(CompetitorURL.id == uuid.UUID(str(competitor_url_id)))
            .values(
                last_scraped_at=scraped_at,
                last_status=status,
                consecutive_failures=consecutive_failures,
            )
        )
        return result.rowcount or 0
