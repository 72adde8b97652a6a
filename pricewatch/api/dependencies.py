"""
pricewatch/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

import hmac

from fastapi import Header, HTTPException, status

from pricewatch.config import get_scrape_cron_secret


def require_scrape_secret(authorization: str | None = Header(default=None)) -> None:
    """
    Accept only `Authorization: Bearer <SCRAPE_CRON_SECRET>`.
    """

    expected = get_scrape_cron_secret()
    if expected is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Scrape trigger is not configured.",
        )

    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not hmac.compare_digest(token.strip(), expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
