"""
Structured logging helpers for price scraping workflows.
"""

from __future__ import annotations

import json
import logging
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


def describe_exception(exc: BaseException) -> str:
    """
    Human-readable message for an exception, falling back to its type name.
    """

    message = str(exc).strip()
    return message or exc.__class__.__name__
