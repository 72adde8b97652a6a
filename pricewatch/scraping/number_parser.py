"""
Locale-aware number parsing for scraped price strings.

Both parsers are pure and fail closed: malformed, empty or ambiguous input
returns ``None`` instead of raising.
"""

from __future__ import annotations

import math
import re

_WHITESPACE_RE = re.compile(r"\s+")
_DECIMAL_RE = re.compile(r"[0-9]+(?:\.[0-9]*)?|\.[0-9]+")


def parse_hungarian_number(value: str | None) -> float | None:
    """
    Parse a Hungarian-formatted number.

    Thousands are separated by spaces or periods, the decimal separator is a
    comma: ``"12 990"`` -> 12990, ``"12.990"`` -> 12990, ``"12.990,50"`` ->
    12990.5. More than one comma is ambiguous and yields ``None``.
    """

    if not isinstance(value, str):
        return None
    compact = _WHITESPACE_RE.sub("", value.strip())
    if not compact:
        return None

    comma_count = compact.count(",")
    if comma_count > 1:
        return None
    normalized = compact.replace(".", "")
    if comma_count == 1:
        normalized = normalized.replace(",", ".")
    return _to_float(normalized)


def parse_generic_number(value: str | None) -> float | None:
    """
    Parse a number whose separator roles are decided by position.

    Whichever of ``.`` and ``,`` appears last is the decimal separator:
    ``"1,234.56"`` and ``"1.234,56"`` both parse to 1234.56.
    """

    if not isinstance(value, str):
        return None
    stripped = value.strip()
    if not stripped:
        return None

    compact = _WHITESPACE_RE.sub("", stripped)
    last_dot = compact.rfind(".")
    last_comma = compact.rfind(",")

    if last_comma > last_dot:
        if compact.count(",") > 1:
            return None
        normalized = compact.replace(".", "").replace(",", ".")
    else:
        normalized = compact.replace(",", "")
    return _to_float(normalized)


def _to_float(normalized: str) -> float | None:
    if _DECIMAL_RE.fullmatch(normalized) is None:
        return None
    parsed = float(normalized)
    if not math.isfinite(parsed):
        return None
    return parsed
