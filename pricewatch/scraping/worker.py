"""
Fetch-scrape-persist worker for tracked competitor URLs.

URLs are processed strictly one after another. Each goes through
``pending -> fetching -> {scraped | fetch_failed | rate_limited} -> persisted``
and yields exactly one observation, followed by the politeness delay.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

import requests

from pricewatch.config import PriceScrapingSettings
from pricewatch.notifications.base import PriceAlert, PriceAlertNotifier
from pricewatch.scraping.context import ScrapeRunContext
from pricewatch.scraping.errors import (
    AlertDeliveryError,
    PageFetchError,
    RateLimitedError,
    StorageError,
)
from pricewatch.scraping.fetcher import FetchedPage
from pricewatch.scraping.logging_utils import describe_exception, log_event
from pricewatch.scraping.page_scanner import scan_page
from pricewatch.scraping.storage.base import PriceTrackingStorage
from pricewatch.scraping.types import (
    CandidateRank,
    ObservationStatus,
    PriceObservation,
    ScrapeRunSummary,
    ScrapeState,
    ScrapeTarget,
)

logger = logging.getLogger(__name__)

PRICE_NOT_FOUND_MESSAGE = "Price could not be extracted from the page."
ALERT_FAILED_STATUS = "alert_failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ScrapeOutcome:
    """
    Result of fetching and scanning one target, before persistence.
    """

    state: str
    status: str
    price: float | None = None
    raw_text: str | None = None
    rank: CandidateRank | None = None
    error_message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == ObservationStatus.SUCCESS


class PriceScrapeWorker:
    """
    Runs one sequential scrape pass over all active competitor URLs.
    """

    def __init__(
        self,
        *,
        storage: PriceTrackingStorage,
        settings: PriceScrapingSettings,
        notifier: PriceAlertNotifier | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._storage = storage
        self._settings = settings
        self._notifier = notifier
        self._session = session
        self._sleep = sleep
        self._clock = clock

    def run(self, *, competitor_url_ids: Sequence[str] | None = None) -> ScrapeRunSummary:
        """
        Scrape every active target and return run-level counts.

        A failing target never aborts the run; only failing to load the
        target list does. A target whose price alert could not be sent is
        counted as failed even though its observation was stored.
        """

        started_at = self._clock()
        targets = self._storage.list_active_targets(
            max_consecutive_failures=self._settings.max_consecutive_failures,
            competitor_url_ids=competitor_url_ids,
        )
        log_event(
            logger,
            logging.INFO,
            "price_scrape_run_started",
            targets=len(targets),
        )

        succeeded = 0
        rate_limited = 0
        errors: list[str] = []

        with ScrapeRunContext.create(
            settings=self._settings,
            session=self._session,
            sleep=self._sleep,
        ) as context:
            for index, target in enumerate(targets):
                try:
                    outcome = self.process_target(target, context)
                except AlertDeliveryError as exc:
                    outcome = self._alert_failed(target, exc)
                except Exception as exc:
                    outcome = self._record_unexpected_failure(target, exc, context)

                if outcome.succeeded:
                    succeeded += 1
                else:
                    if outcome.status == ObservationStatus.RATE_LIMITED:
                        rate_limited += 1
                    errors.append(
                        f"url={target.url} status={outcome.status} error={outcome.error_message}"
                    )

                if index < len(targets) - 1 and self._settings.request_delay_seconds > 0:
                    self._sleep(self._settings.request_delay_seconds)

        summary = ScrapeRunSummary(
            total=len(targets),
            succeeded=succeeded,
            failed=len(targets) - succeeded,
            rate_limited=rate_limited,
            started_at=started_at,
            finished_at=self._clock(),
            errors=errors,
        )
        log_event(
            logger,
            logging.INFO,
            "price_scrape_run_completed",
            total=summary.total,
            succeeded=summary.succeeded,
            failed=summary.failed,
            rate_limited=summary.rate_limited,
        )
        return summary

    def process_target(self, target: ScrapeTarget, context: ScrapeRunContext) -> ScrapeOutcome:
        """
        Fetch, scan and persist one target, then alert on undercutting.

        Raises `AlertDeliveryError` when the notifier fails; the observation
        is already stored by then.
        """

        self._transition(target, ScrapeState.PENDING)
        outcome = self._scrape(target, context)
        observation = self._build_observation(target, outcome)
        self._persist(target, observation, context)
        self._transition(target, ScrapeState.PERSISTED, status=outcome.status)
        self._maybe_alert(target, outcome)
        return outcome

    def _scrape(self, target: ScrapeTarget, context: ScrapeRunContext) -> ScrapeOutcome:
        self._transition(target, ScrapeState.FETCHING)
        page: FetchedPage | None = None
        try:
            context.rate_limiter.wait(url=target.url)
            page = context.fetcher.fetch(target.url)
            result = scan_page(page.text, target.scrape_selector)
        except RateLimitedError as exc:
            log_event(
                logger,
                logging.WARNING,
                "target_rate_limited",
                competitor_url_id=target.competitor_url_id,
                url=target.url,
            )
            return self._finish(
                target,
                ScrapeOutcome(
                    state=ScrapeState.RATE_LIMITED,
                    status=ObservationStatus.RATE_LIMITED,
                    error_message=describe_exception(exc),
                ),
            )
        except PageFetchError as exc:
            message = describe_exception(exc)
            log_event(
                logger,
                logging.WARNING,
                "target_fetch_failed",
                competitor_url_id=target.competitor_url_id,
                url=target.url,
                status_code=exc.status_code,
                error=message,
            )
            return self._finish(
                target,
                ScrapeOutcome(
                    state=ScrapeState.FETCH_FAILED,
                    status=ObservationStatus.FAILED,
                    error_message=message,
                ),
            )
        except Exception as exc:
            message = describe_exception(exc)
            log_event(
                logger,
                logging.ERROR,
                "target_unexpected_error",
                competitor_url_id=target.competitor_url_id,
                url=target.url,
                error=message,
            )
            return self._finish(
                target,
                ScrapeOutcome(
                    state=ScrapeState.SCRAPED if page is not None else ScrapeState.FETCH_FAILED,
                    status=ObservationStatus.FAILED,
                    error_message=message,
                ),
            )

        if not result.found:
            log_event(
                logger,
                logging.WARNING,
                "target_price_not_found",
                competitor_url_id=target.competitor_url_id,
                url=target.url,
            )
            return self._finish(
                target,
                ScrapeOutcome(
                    state=ScrapeState.SCRAPED,
                    status=ObservationStatus.FAILED,
                    error_message=PRICE_NOT_FOUND_MESSAGE,
                ),
            )

        log_event(
            logger,
            logging.INFO,
            "target_scraped",
            competitor_url_id=target.competitor_url_id,
            url=target.url,
            price=result.price,
            currency=target.currency,
            rank=result.rank.name if result.rank is not None else None,
            raw_text=(result.raw_text or "")[:60],
        )
        return self._finish(
            target,
            ScrapeOutcome(
                state=ScrapeState.SCRAPED,
                status=ObservationStatus.SUCCESS,
                price=result.price,
                raw_text=result.raw_text,
                rank=result.rank,
            ),
        )

    def _finish(self, target: ScrapeTarget, outcome: ScrapeOutcome) -> ScrapeOutcome:
        self._transition(target, outcome.state, status=outcome.status)
        return outcome

    def _alert_failed(self, target: ScrapeTarget, exc: AlertDeliveryError) -> ScrapeOutcome:
        message = describe_exception(exc)
        log_event(
            logger,
            logging.ERROR,
            "price_alert_failed",
            competitor_url_id=target.competitor_url_id,
            url=target.url,
            recipient=exc.recipient,
            error=message,
        )
        return ScrapeOutcome(
            state=ScrapeState.PERSISTED,
            status=ALERT_FAILED_STATUS,
            error_message=message,
        )

    def _record_unexpected_failure(
        self,
        target: ScrapeTarget,
        exc: Exception,
        context: ScrapeRunContext,
    ) -> ScrapeOutcome:
        """
        Log an error that escaped `process_target` and store one failed attempt.

        Nothing is written when the target's observation is already stored.
        """

        message = describe_exception(exc)
        log_event(
            logger,
            logging.ERROR,
            "target_unexpected_error",
            competitor_url_id=target.competitor_url_id,
            url=target.url,
            error=message,
        )
        outcome = ScrapeOutcome(
            state=ScrapeState.FETCH_FAILED,
            status=ObservationStatus.FAILED,
            error_message=message,
        )
        if target.competitor_url_id in context.recorded_targets:
            return outcome

        try:
            self._persist(target, self._build_observation(target, outcome), context)
        except Exception as record_exc:
            log_event(
                logger,
                logging.ERROR,
                "target_failure_record_failed",
                competitor_url_id=target.competitor_url_id,
                url=target.url,
                error=describe_exception(record_exc),
            )
        else:
            self._transition(target, ScrapeState.PERSISTED, status=outcome.status)
        return outcome

    def _build_observation(self, target: ScrapeTarget, outcome: ScrapeOutcome) -> PriceObservation:
        delta: float | None = None
        delta_pct: float | None = None
        if outcome.succeeded and outcome.price is not None:
            previous = self._previous_price(target)
            if previous is not None:
                delta = round(outcome.price - previous, 2)
                if previous != 0:
                    delta_pct = round(delta / previous * 100, 2)

        return PriceObservation(
            competitor_url_id=target.competitor_url_id,
            product_id=target.product_id,
            user_id=target.user_id,
            currency=target.currency or self._settings.default_currency,
            status=outcome.status,
            scraped_at=self._clock(),
            scraped_price=outcome.price,
            raw_price_text=outcome.raw_text,
            error_message=outcome.error_message,
            price_delta=delta,
            price_delta_pct=delta_pct,
        )

    def _previous_price(self, target: ScrapeTarget) -> float | None:
        try:
            return self._storage.latest_successful_price(target.competitor_url_id)
        except StorageError as exc:
            log_event(
                logger,
                logging.ERROR,
                "previous_price_lookup_failed",
                competitor_url_id=target.competitor_url_id,
                error=describe_exception(exc),
            )
            return None

    def _persist(
        self,
        target: ScrapeTarget,
        observation: PriceObservation,
        context: ScrapeRunContext,
    ) -> None:
        try:
            self._storage.insert_observation(observation)
            context.recorded_targets.add(target.competitor_url_id)
        except StorageError as exc:
            log_event(
                logger,
                logging.ERROR,
                "observation_persist_failed",
                competitor_url_id=target.competitor_url_id,
                url=target.url,
                status=observation.status,
                error=describe_exception(exc),
            )

        if observation.status == ObservationStatus.SUCCESS:
            consecutive_failures = 0
        else:
            consecutive_failures = target.consecutive_failures + 1
        try:
            self._storage.update_url_health(
                target.competitor_url_id,
                scraped_at=observation.scraped_at,
                status=observation.status,
                consecutive_failures=consecutive_failures,
            )
        except StorageError as exc:
            log_event(
                logger,
                logging.ERROR,
                "url_health_update_failed",
                competitor_url_id=target.competitor_url_id,
                url=target.url,
                error=describe_exception(exc),
            )

    def _maybe_alert(self, target: ScrapeTarget, outcome: ScrapeOutcome) -> None:
        if not self._settings.alerts_enabled or self._notifier is None:
            return
        if not outcome.succeeded or outcome.price is None:
            return
        if not target.alert_email or not target.own_price or target.own_price <= 0:
            return
        if outcome.price >= target.own_price:
            return

        alert = PriceAlert(
            recipient=target.alert_email,
            product_name=target.product_name,
            competitor_name=target.competitor_name,
            competitor_price=outcome.price,
            own_price=target.own_price,
            currency=target.currency,
            url=target.url,
        )
        try:
            self._notifier.send(alert)
        except Exception as exc:
            raise AlertDeliveryError(
                f"Price alert to {target.alert_email} failed: {describe_exception(exc)}",
                competitor_url_id=target.competitor_url_id,
                recipient=target.alert_email,
            ) from exc

    @staticmethod
    def _transition(target: ScrapeTarget, state: str, **fields: object) -> None:
        log_event(
            logger,
            logging.DEBUG,
            "target_state_changed",
            competitor_url_id=target.competitor_url_id,
            state=state,
            **fields,
        )
