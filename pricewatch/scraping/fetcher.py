"""
HTTP page fetcher for competitor product pages.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import requests

from pricewatch.config import PriceScrapingSettings
from pricewatch.scraping.errors import PageFetchError, RateLimitedError
from pricewatch.scraping.logging_utils import describe_exception, log_event

logger = logging.getLogger(__name__)

RATE_LIMITED_STATUS_CODE = 429
RETRYABLE_STATUS_CODES = {500, 502, 503, 504}
ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"


@dataclass(frozen=True)
class FetchedPage:
    url: str
    status_code: int
    text: str


class PageFetcher:
    """
    Issues browser-like GET requests with a bounded timeout.

    Redirects follow the session's own `max_redirects`; the fetcher never
    changes session settings.
    """

    def __init__(
        self,
        *,
        session: requests.Session,
        settings: PriceScrapingSettings,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._session = session
        self._settings = settings
        self._sleep = sleep
        self.request_headers = {
            "User-Agent": settings.user_agent,
            "Accept": ACCEPT_HEADER,
            "Accept-Language": settings.accept_language,
        }

    def fetch(self, url: str) -> FetchedPage:
        """
        Fetch `url` and return its body.

        Raises `RateLimitedError` on HTTP 429 without retrying, and
        `PageFetchError` for every other failure once retries are spent.
        """

        last_error = "no attempt made"
        last_status: int | None = None

        for attempt in range(self._settings.max_retries + 1):
            try:
                response = self._session.get(
                    url,
                    headers=self.request_headers,
                    timeout=self._settings.timeout_seconds,
                    allow_redirects=True,
                )
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = describe_exception(exc)
                last_status = None
            except requests.RequestException as exc:
                raise PageFetchError(describe_exception(exc), url=url) from exc
            else:
                status_code = response.status_code
                if status_code == RATE_LIMITED_STATUS_CODE:
                    raise RateLimitedError(
                        f"HTTP {status_code} Too Many Requests",
                        url=url,
                        status_code=status_code,
                    )
                if status_code in RETRYABLE_STATUS_CODES:
                    last_error = f"HTTP {status_code}"
                    last_status = status_code
                elif status_code >= 400:
                    raise PageFetchError(
                        f"HTTP {status_code}",
                        url=url,
                        status_code=status_code,
                    )
                else:
                    return FetchedPage(
                        url=response.url or url,
                        status_code=status_code,
                        text=response.text,
                    )

            if attempt >= self._settings.max_retries:
                break

            backoff_seconds = self._settings.backoff_initial_seconds * (
                self._settings.backoff_multiplier**attempt
            )
            log_event(
                logger,
                logging.WARNING,
                "fetch_retry",
                url=url,
                attempt=attempt + 1,
                backoff_seconds=backoff_seconds,
                error=last_error,
            )
            self._sleep(backoff_seconds)

        raise PageFetchError(
            f"Failed to fetch {url} after {self._settings.max_retries + 1} attempt(s): {last_error}",
            url=url,
            status_code=last_status,
        )
