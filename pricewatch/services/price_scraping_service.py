"""
pricewatch/services/price_scraping_service.py

Service orchestration for competitor price scraping runs.
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache

from sqlalchemy.orm import Session

from pricewatch.config import (
    PriceScrapingSettings,
    SMTPSettings,
    get_price_scraping_settings,
    get_smtp_settings,
)
from pricewatch.notifications import PriceAlertNotifier, SMTPPriceAlertNotifier
from pricewatch.scraping.storage import SQLAlchemyPriceStorage
from pricewatch.scraping.types import ScrapeRunSummary
from pricewatch.scraping.worker import PriceScrapeWorker


class PriceScrapingService:
    """
    Wires storage, notifier and settings into one worker run.
    """

    def __init__(
        self,
        *,
        settings: PriceScrapingSettings | None = None,
        smtp_settings: SMTPSettings | None = None,
    ) -> None:
        self._settings = settings or get_price_scraping_settings()
        self._smtp_settings = smtp_settings or get_smtp_settings()

    def run(
        self,
        *,
        db: Session,
        competitor_url_ids: Sequence[str] | None = None,
    ) -> ScrapeRunSummary:
        storage = SQLAlchemyPriceStorage(
            session=db,
            default_currency=self._settings.default_currency,
        )
        worker = PriceScrapeWorker(
            storage=storage,
            settings=self._settings,
            notifier=self._build_notifier(),
        )
        return worker.run(competitor_url_ids=competitor_url_ids or None)

    def _build_notifier(self) -> PriceAlertNotifier | None:
        if not self._settings.alerts_enabled or not self._smtp_settings.enabled:
            return None
        return SMTPPriceAlertNotifier(self._smtp_settings)


@lru_cache(maxsize=1)
def get_price_scraping_service() -> PriceScrapingService:
    """
    Build and cache the price scraping service.
    """

    return PriceScrapingService()
