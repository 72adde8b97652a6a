"""
Per-run resources for the fetch-scrape-persist worker.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

import requests

from pricewatch.config import PriceScrapingSettings
from pricewatch.scraping.fetcher import PageFetcher
from pricewatch.scraping.rate_limiter import DomainRateLimiter


@dataclass
class ScrapeRunContext:
    """
    HTTP session, fetcher and politeness limiter shared by one run, plus the
    ids of targets whose observation has been written.

    Built once at run start and closed at run end; nothing here outlives
    the run. A session created here carries the configured redirect cap; a
    caller-supplied session is used as given and left open.
    """

    session: requests.Session
    fetcher: PageFetcher
    rate_limiter: DomainRateLimiter
    owns_session: bool = True
    recorded_targets: set[str] = field(default_factory=set)

    @classmethod
    def create(
        cls,
        *,
        settings: PriceScrapingSettings,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "ScrapeRunContext":
        owns_session = session is None
        if session is None:
            session = requests.Session()
            session.max_redirects = settings.max_redirects
        return cls(
            session=session,
            fetcher=PageFetcher(session=session, settings=settings, sleep=sleep),
            rate_limiter=DomainRateLimiter(
                rate_limit_per_second=settings.rate_limit_per_second,
                sleep=sleep,
            ),
            owns_session=owns_session,
        )

    def close(self) -> None:
        if self.owns_session:
            self.session.close()

    def __enter__(self) -> "ScrapeRunContext":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
