"""
Exception types raised by the price scraping pipeline.
"""

from __future__ import annotations


class ScrapingError(Exception):
    """Base exception for price scraping failures."""


class PageFetchError(ScrapingError):
    """Raised when a page cannot be fetched."""

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class RateLimitedError(PageFetchError):
    """Raised when the target answers with HTTP 429."""


class StorageError(ScrapingError):
    """Raised when the storage collaborator fails to read or write."""


class AlertDeliveryError(ScrapingError):
    """Raised when a price alert could not be handed to the notifier."""

    def __init__(self, message: str, *, competitor_url_id: str, recipient: str) -> None:
        super().__init__(message)
        self.competitor_url_id = competitor_url_id
        self.recipient = recipient
