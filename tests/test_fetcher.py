from __future__ import annotations

import unittest
from dataclasses import replace
from typing import Any

import requests

from pricewatch.config import PriceScrapingSettings
from pricewatch.scraping.context import ScrapeRunContext
from pricewatch.scraping.errors import PageFetchError, RateLimitedError
from pricewatch.scraping.fetcher import PageFetcher
from pricewatch.scraping.rate_limiter import DomainRateLimiter


class _FakeResponse:
    def __init__(self, status_code: int, text: str = "", url: str = "") -> None:
        self.status_code = status_code
        self.text = text
        self.url = url


class _ScriptedSession:
    """Returns (or raises) the queued items in order, recording each call."""

    def __init__(self, *script: Any) -> None:
        self.script = list(script)
        self.calls: list[dict[str, Any]] = []
        self.max_redirects = 30
        self.closed = False

    def get(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append({"url": url, **kwargs})
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


class TestPageFetcher(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = PriceScrapingSettings(max_retries=2, backoff_initial_seconds=0.5)
        self.sleeps: list[float] = []

    def _fetcher(self, session: _ScriptedSession) -> PageFetcher:
        return PageFetcher(session=session, settings=self.settings, sleep=self.sleeps.append)

    def test_returns_page_on_success(self) -> None:
        session = _ScriptedSession(_FakeResponse(200, "<p>ok</p>", "https://shop.example/p/1"))

        page = self._fetcher(session).fetch("https://shop.example/p/1")

        self.assertEqual(page.status_code, 200)
        self.assertEqual(page.text, "<p>ok</p>")
        self.assertEqual(page.url, "https://shop.example/p/1")
        self.assertEqual(self.sleeps, [])

    def test_sends_browser_headers_and_timeout(self) -> None:
        session = _ScriptedSession(_FakeResponse(200, ""))

        self._fetcher(session).fetch("https://shop.example/p/1")

        call = session.calls[0]
        self.assertEqual(call["timeout"], 15.0)
        self.assertTrue(call["allow_redirects"])
        self.assertIn("Chrome", call["headers"]["User-Agent"])
        self.assertTrue(call["headers"]["Accept-Language"].startswith("hu-HU"))
        self.assertIn("text/html", call["headers"]["Accept"])

    def test_rate_limited_response_is_not_retried(self) -> None:
        session = _ScriptedSession(_FakeResponse(429))

        with self.assertRaises(RateLimitedError) as ctx:
            self._fetcher(session).fetch("https://shop.example/p/1")

        self.assertEqual(ctx.exception.status_code, 429)
        self.assertEqual(len(session.calls), 1)
        self.assertEqual(self.sleeps, [])

    def test_client_error_is_not_retried(self) -> None:
        session = _ScriptedSession(_FakeResponse(404))

        with self.assertRaises(PageFetchError) as ctx:
            self._fetcher(session).fetch("https://shop.example/p/1")

        self.assertNotIsInstance(ctx.exception, RateLimitedError)
        self.assertEqual(str(ctx.exception), "HTTP 404")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(len(session.calls), 1)

    def test_server_error_is_retried_with_backoff(self) -> None:
        session = _ScriptedSession(
            _FakeResponse(503),
            requests.Timeout("read timed out"),
            _FakeResponse(200, "<p>ok</p>"),
        )

        page = self._fetcher(session).fetch("https://shop.example/p/1")

        self.assertEqual(page.text, "<p>ok</p>")
        self.assertEqual(len(session.calls), 3)
        self.assertEqual(self.sleeps, [0.5, 1.0])

    def test_gives_up_after_retries(self) -> None:
        session = _ScriptedSession(
            requests.ConnectionError("refused"),
            requests.ConnectionError("refused"),
            _FakeResponse(502),
        )

        with self.assertRaises(PageFetchError) as ctx:
            self._fetcher(session).fetch("https://shop.example/p/1")

        self.assertIn("after 3 attempt(s)", str(ctx.exception))
        self.assertIn("HTTP 502", str(ctx.exception))
        self.assertEqual(ctx.exception.status_code, 502)
        self.assertEqual(len(self.sleeps), 2)

    def test_non_transient_request_error_is_raised_immediately(self) -> None:
        session = _ScriptedSession(requests.TooManyRedirects("Exceeded 5 redirects."))

        with self.assertRaises(PageFetchError) as ctx:
            self._fetcher(session).fetch("https://shop.example/p/1")

        self.assertIn("redirects", str(ctx.exception))
        self.assertEqual(len(session.calls), 1)

    def test_no_retries_configured(self) -> None:
        self.settings = replace(self.settings, max_retries=0)
        session = _ScriptedSession(_FakeResponse(500))

        with self.assertRaises(PageFetchError):
            self._fetcher(session).fetch("https://shop.example/p/1")

        self.assertEqual(self.sleeps, [])

    def test_fetcher_leaves_session_redirect_setting_alone(self) -> None:
        session = _ScriptedSession(_FakeResponse(200, ""))

        self._fetcher(session).fetch("https://shop.example/p/1")

        self.assertEqual(session.max_redirects, 30)


class TestScrapeRunContext(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = PriceScrapingSettings()

    def test_owned_session_gets_redirect_cap(self) -> None:
        with ScrapeRunContext.create(settings=self.settings) as context:
            self.assertTrue(context.owns_session)
            self.assertIsInstance(context.session, requests.Session)
            self.assertEqual(context.session.max_redirects, 5)

    def test_caller_session_is_not_reconfigured_or_closed(self) -> None:
        session = _ScriptedSession()

        with ScrapeRunContext.create(settings=self.settings, session=session) as context:
            self.assertIs(context.session, session)
            self.assertFalse(context.owns_session)

        self.assertEqual(session.max_redirects, 30)
        self.assertFalse(session.closed)


class _FakeClock:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class TestDomainRateLimiter(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _FakeClock()
        self.limiter = DomainRateLimiter(
            rate_limit_per_second=0.5,
            clock=self.clock,
            sleep=self.clock.sleep,
        )

    def test_first_request_to_host_does_not_wait(self) -> None:
        self.assertEqual(self.limiter.wait(url="https://a.example/x"), 0.0)
        self.assertEqual(self.clock.sleeps, [])

    def test_same_host_is_spaced_out(self) -> None:
        self.limiter.wait(url="https://a.example/x")
        self.clock.now += 0.5

        waited = self.limiter.wait(url="https://A.example/y")

        self.assertAlmostEqual(waited, 1.5)
        self.assertEqual(self.clock.sleeps, [1.5])

    def test_hosts_are_tracked_independently(self) -> None:
        self.limiter.wait(url="https://a.example/x")

        self.assertEqual(self.limiter.wait(url="https://b.example/x"), 0.0)

    def test_no_wait_once_interval_has_passed(self) -> None:
        self.limiter.wait(url="https://a.example/x")
        self.clock.now += 5

        self.assertEqual(self.limiter.wait(url="https://a.example/x"), 0.0)

    def test_url_without_host_is_not_limited(self) -> None:
        self.assertEqual(self.limiter.wait(url="not a url"), 0.0)
        self.assertEqual(self.limiter.wait(url="not a url"), 0.0)


if __name__ == "__main__":
    unittest.main()
