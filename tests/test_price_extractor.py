"""
tests/test_price_extractor.py

Pytest unit tests for free-text price extraction.

Coverage
--------
- Forint notation with space, period and ",-" suffix forms
- Generic currency notation with position-based separators
- Forint precedence over earlier generic numbers
- Failed Forint parse does not fall through to the generic parser
- Absent, empty, markup-laden and oversized input
"""

from __future__ import annotations

import pytest

from pricewatch.scraping.price_extractor import (
    NOTATION_GENERIC,
    NOTATION_HUF,
    extract_price,
    match_price,
)


# ---------------------------------------------------------------------------
# Forint notation
# ---------------------------------------------------------------------------


class TestForintNotation:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("12 990 Ft", 12990),
            ("12.990 Ft", 12990),
            ("12990Ft", 12990),
            ("12 990 HUF", 12990),
            ("12 990 forint", 12990),
            ("12 990 FT", 12990),
            ("Ár: 12.990,50 Ft", 12990.5),
            ("12 990,- Ft", 12990),
            ("12.990,– Ft", 12990),
        ],
    )
    def test_parses_forint_amounts(self, text: str, expected: float) -> None:
        assert extract_price(text) == expected

    def test_match_reports_notation_and_span(self) -> None:
        match = match_price("Most csak 12 990 Ft!")
        assert match is not None
        assert match.notation == NOTATION_HUF
        assert match.matched_text == "12 990 Ft"
        assert "Most csak 12 990 Ft!"[match.start : match.end] == "12 990 Ft"

    def test_forint_takes_precedence_over_earlier_number(self) -> None:
        assert extract_price("3 darab raktáron, ára 4 590 Ft") == 4590

    def test_failed_forint_parse_does_not_fall_through(self) -> None:
        match = match_price("Shipping $5, price 12,990,50 Ft")
        assert match is not None
        assert match.notation == NOTATION_HUF
        assert match.value is None


# ---------------------------------------------------------------------------
# Generic notation
# ---------------------------------------------------------------------------


class TestGenericNotation:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("$99.99", 99.99),
            ("€1.234,56", 1234.56),
            ("£1,234.56", 1234.56),
            ("1,234.56 USD", 1234.56),
            ("EUR 19,99", 19.99),
            ("Price: 250", 250),
        ],
    )
    def test_parses_generic_amounts(self, text: str, expected: float) -> None:
        assert extract_price(text) == pytest.approx(expected)

    def test_first_run_wins(self) -> None:
        match = match_price("$10.00 or $20.00")
        assert match is not None
        assert match.notation == NOTATION_GENERIC
        assert match.value == 10.0
        assert match.matched_text == "10.00"

    def test_trailing_separator_is_not_part_of_run(self) -> None:
        assert extract_price("Only 99.99. Hurry!") == 99.99


# ---------------------------------------------------------------------------
# Absence
# ---------------------------------------------------------------------------


class TestAbsence:
    @pytest.mark.parametrize("text", [None, "", "   ", "Product name only"])
    def test_no_number_yields_none(self, text: str | None) -> None:
        assert extract_price(text) is None
        assert match_price(text) is None

    def test_non_string_input(self) -> None:
        assert extract_price(12990) is None  # type: ignore[arg-type]

    def test_markup_is_treated_as_plain_text(self) -> None:
        assert extract_price("<script>alert('x')</script>") is None

    def test_oversized_text_without_digits(self) -> None:
        assert extract_price("a" * 10_000) is None

    def test_oversized_separator_run(self) -> None:
        assert extract_price("1" + " ." * 5_000 + "x") == 1
