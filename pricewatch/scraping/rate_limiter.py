"""
Per-host politeness limiter for outbound page requests.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from urllib.parse import urlparse


class DomainRateLimiter:
    """
    Enforces a minimum interval between requests to the same host.
    """

    def __init__(
        self,
        *,
        rate_limit_per_second: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._min_interval = 1.0 / max(0.1, rate_limit_per_second)
        self._clock = clock
        self._sleep = sleep
        self._last_request_by_host: dict[str, float] = {}
        self._lock = threading.Lock()

    def wait(self, *, url: str) -> float:
        """
        Sleep as needed so requests to the host of `url` stay spaced out.

        Returns the number of seconds slept.
        """

        host = self._host(url)
        if not host:
            return 0.0

        with self._lock:
            now = self._clock()
            last_time = self._last_request_by_host.get(host)
            wait_seconds = 0.0
            if last_time is not None:
                wait_seconds = max(0.0, self._min_interval - (now - last_time))
            if wait_seconds > 0:
                self._sleep(wait_seconds)
            self._last_request_by_host[host] = self._clock()
            return wait_seconds

    @staticmethod
    def _host(url: str) -> str:
        parsed = urlparse(url)
        return (parsed.hostname or parsed.netloc or "").lower()
