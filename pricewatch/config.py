"""
pricewatch/config.py

Environment-driven settings for the price scraper, alerts and API.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)
DEFAULT_ACCEPT_LANGUAGE = "hu-HU,hu;q=0.9,en-US;q=0.8,en;q=0.7"


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class PriceScrapingSettings:
    """
    Runtime settings for the fetch-scrape-persist worker.
    """

    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE
    timeout_seconds: float = 15.0
    max_redirects: int = 5
    request_delay_seconds: float = 2.0
    rate_limit_per_second: float = 0.5
    max_retries: int = 1
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    max_consecutive_failures: int = 5
    default_currency: str = "HUF"
    alerts_enabled: bool = True


@dataclass(frozen=True)
class SMTPSettings:
    """
    Outbound mail settings for price alerts.
    """

    host: str | None = None
    port: int = 587
    username: str | None = None
    password: str | None = None
    sender: str = "pricewatch@localhost"
    use_tls: bool = True
    timeout_seconds: float = 15.0

    @property
    def enabled(self) -> bool:
        return bool(self.host)


@lru_cache(maxsize=1)
def get_price_scraping_settings() -> PriceScrapingSettings:
    """
    Return cached scraper settings from environment variables.
    """

    return PriceScrapingSettings(
        user_agent=_get_str_env("PRICE_SCRAPE_USER_AGENT", DEFAULT_USER_AGENT),
        accept_language=_get_str_env("PRICE_SCRAPE_ACCEPT_LANGUAGE", DEFAULT_ACCEPT_LANGUAGE),
        timeout_seconds=max(1.0, _get_float_env("PRICE_SCRAPE_TIMEOUT_SECONDS", 15.0)),
        max_redirects=max(0, _get_int_env("PRICE_SCRAPE_MAX_REDIRECTS", 5)),
        request_delay_seconds=max(
            0.0,
            _get_float_env("PRICE_SCRAPE_REQUEST_DELAY_SECONDS", 2.0),
        ),
        rate_limit_per_second=max(
            0.1,
            _get_float_env("PRICE_SCRAPE_RATE_LIMIT_PER_SECOND", 0.5),
        ),
        max_retries=max(0, _get_int_env("PRICE_SCRAPE_MAX_RETRIES", 1)),
        backoff_initial_seconds=max(
            0.1,
            _get_float_env("PRICE_SCRAPE_BACKOFF_INITIAL_SECONDS", 0.5),
        ),
        backoff_multiplier=max(1.0, _get_float_env("PRICE_SCRAPE_BACKOFF_MULTIPLIER", 2.0)),
        max_consecutive_failures=max(
            0,
            _get_int_env("PRICE_SCRAPE_MAX_CONSECUTIVE_FAILURES", 5),
        ),
        default_currency=_get_str_env("PRICE_SCRAPE_DEFAULT_CURRENCY", "HUF").upper(),
        alerts_enabled=_get_bool_env("PRICE_ALERTS_ENABLED", True),
    )


@lru_cache(maxsize=1)
def get_smtp_settings() -> SMTPSettings:
    """
    Return cached SMTP settings; alerts stay disabled without SMTP_HOST.
    """

    return SMTPSettings(
        host=_get_optional_str_env("SMTP_HOST"),
        port=max(1, _get_int_env("SMTP_PORT", 587)),
        username=_get_optional_str_env("SMTP_USERNAME"),
        password=_get_optional_str_env("SMTP_PASSWORD"),
        sender=_get_str_env("SMTP_SENDER", "pricewatch@localhost"),
        use_tls=_get_bool_env("SMTP_USE_TLS", True),
        timeout_seconds=max(1.0, _get_float_env("SMTP_TIMEOUT_SECONDS", 15.0)),
    )


def get_scrape_cron_secret() -> str | None:
    """
    Bearer token guarding the scrape trigger endpoint.
    """

    return _get_optional_str_env("SCRAPE_CRON_SECRET")
