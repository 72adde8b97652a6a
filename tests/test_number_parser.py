from __future__ import annotations

import random
import unittest

from pricewatch.scraping.number_parser import parse_generic_number, parse_hungarian_number


def _format_hungarian(integer_part: int, cents: int | None) -> str:
    grouped = f"{integer_part:,}".replace(",", ".")
    if cents is None:
        return grouped
    return f"{grouped},{cents:02d}"


class TestParseHungarianNumber(unittest.TestCase):
    def test_space_separated_thousands(self) -> None:
        self.assertEqual(parse_hungarian_number("12 990"), 12990)

    def test_no_break_space_thousands(self) -> None:
        self.assertEqual(parse_hungarian_number("12 990"), 12990)

    def test_period_separated_thousands(self) -> None:
        self.assertEqual(parse_hungarian_number("12.990"), 12990)
        self.assertEqual(parse_hungarian_number("1.234.567"), 1234567)

    def test_comma_decimal(self) -> None:
        self.assertEqual(parse_hungarian_number("12.990,50"), 12990.50)
        self.assertEqual(parse_hungarian_number("99,9"), 99.9)

    def test_plain_integers(self) -> None:
        self.assertEqual(parse_hungarian_number("12990"), 12990)
        self.assertEqual(parse_hungarian_number("5"), 5)
        self.assertEqual(parse_hungarian_number("  42  "), 42)

    def test_absent_inputs(self) -> None:
        self.assertIsNone(parse_hungarian_number(None))
        self.assertIsNone(parse_hungarian_number(""))
        self.assertIsNone(parse_hungarian_number("   "))

    def test_non_numeric_inputs(self) -> None:
        self.assertIsNone(parse_hungarian_number("..."))
        self.assertIsNone(parse_hungarian_number("abc"))
        self.assertIsNone(parse_hungarian_number(","))
        self.assertIsNone(parse_hungarian_number("12abc"))
        self.assertIsNone(parse_hungarian_number("-5"))
        self.assertIsNone(parse_hungarian_number("inf"))

    def test_multiple_commas_are_ambiguous_and_fail_closed(self) -> None:
        # "12,990,50" could be 12990.50 or 1299050; neither is guessed.
        self.assertIsNone(parse_hungarian_number("12,990,50"))
        self.assertIsNone(parse_hungarian_number("1.234,56,7"))

    def test_non_string_input(self) -> None:
        self.assertIsNone(parse_hungarian_number(12990))  # type: ignore[arg-type]

    def test_huge_number_is_rejected_when_not_finite(self) -> None:
        self.assertIsNone(parse_hungarian_number("9" * 400))

    def test_thousands_grouping_round_trip(self) -> None:
        rng = random.Random(20261019)
        for _ in range(200):
            integer_part = rng.randint(0, 99_999_999)
            cents = rng.choice([None, rng.randint(0, 99)])
            text = _format_hungarian(integer_part, cents)
            expected = integer_part + (cents or 0) / 100
            with self.subTest(text=text):
                self.assertAlmostEqual(parse_hungarian_number(text), expected, places=6)


class TestParseGenericNumber(unittest.TestCase):
    def test_separator_role_follows_position(self) -> None:
        self.assertEqual(parse_generic_number("1,234.56"), 1234.56)
        self.assertEqual(parse_generic_number("1.234,56"), 1234.56)

    def test_plain_and_simple_decimal(self) -> None:
        self.assertEqual(parse_generic_number("9999"), 9999)
        self.assertEqual(parse_generic_number("99.99"), 99.99)
        self.assertEqual(parse_generic_number("0.5"), 0.5)

    def test_whitespace_thousands(self) -> None:
        self.assertEqual(parse_generic_number("1 234.56"), 1234.56)
        self.assertEqual(parse_generic_number("1 234,56"), 1234.56)

    def test_only_comma_is_decimal(self) -> None:
        self.assertEqual(parse_generic_number("19,99"), 19.99)

    def test_multiple_commas_as_thousands_before_period(self) -> None:
        self.assertEqual(parse_generic_number("1,234,567.89"), 1234567.89)

    def test_multiple_commas_without_period_fail_closed(self) -> None:
        self.assertIsNone(parse_generic_number("1,234,567"))

    def test_absent_and_garbage(self) -> None:
        self.assertIsNone(parse_generic_number(None))
        self.assertIsNone(parse_generic_number(""))
        self.assertIsNone(parse_generic_number("   "))
        self.assertIsNone(parse_generic_number("abc"))
        self.assertIsNone(parse_generic_number("..."))
        self.assertIsNone(parse_generic_number("1.2.3"))


if __name__ == "__main__":
    unittest.main()
