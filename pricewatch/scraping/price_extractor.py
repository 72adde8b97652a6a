"""
Currency-aware price extraction from free text.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

from pricewatch.scraping.number_parser import parse_generic_number, parse_hungarian_number

# A run starts with a digit and never nests quantifiers, so `finditer` stays
# linear in the text length.
_NUMERIC_RUN_RE = re.compile(r"[0-9][0-9\s.,]*")
_HUF_MARKER_RE = re.compile(r"\s*(?:,\s*[-–]\s*)?(?:Ft|HUF|forint)", flags=re.IGNORECASE)

NOTATION_HUF = "huf"
NOTATION_GENERIC = "generic"


@dataclass(frozen=True)
class PriceMatch:
    """
    A parsed price and the substring it came from.
    """

    value: float | None
    matched_text: str
    notation: str
    start: int
    end: int


def match_price(text: str | None) -> PriceMatch | None:
    """
    Locate the first price-like substring in `text`.

    Hungarian Forint notation (``12 990 Ft``, ``12.990 HUF``) takes
    precedence: once a Forint-marked number is found, its Locale-A parse is
    the answer even if it fails. Otherwise the first numeric run, with or
    without a ``$``/``€``/``£`` or ``USD``/``EUR``/``GBP`` marker, is parsed
    with position-based separator detection.
    """

    if not isinstance(text, str):
        return None
    cleaned = text.strip()
    if not cleaned:
        return None

    first_run: tuple[int, int] | None = None
    for start, end in _numeric_runs(cleaned):
        if first_run is None:
            first_run = (start, end)
        marker = _HUF_MARKER_RE.match(cleaned, end)
        if marker is None:
            continue
        raw_number = cleaned[start:end]
        return PriceMatch(
            value=parse_hungarian_number(raw_number),
            matched_text=cleaned[start : marker.end()],
            notation=NOTATION_HUF,
            start=start,
            end=marker.end(),
        )

    if first_run is None:
        return None
    start, end = first_run
    return PriceMatch(
        value=parse_generic_number(cleaned[start:end]),
        matched_text=cleaned[start:end],
        notation=NOTATION_GENERIC,
        start=start,
        end=end,
    )


def extract_price(text: str | None) -> float | None:
    """
    Return the first price found in `text`, or ``None``.
    """

    match = match_price(text)
    if match is None:
        return None
    return match.value


def _numeric_runs(text: str) -> Iterator[tuple[int, int]]:
    """
    Yield ``(start, end)`` spans of numeric runs trimmed to their last digit.
    """

    for run in _NUMERIC_RUN_RE.finditer(text):
        end = run.end()
        while not "0" <= text[end - 1] <= "9":
            end -= 1
        yield run.start(), end
