"""Tests for date, age and numeric cell coercion."""

from __future__ import annotations

from datetime import date
import unittest

from hoop_data.core.coerce import (
    age_from_birth_date,
    coerce_cell,
    coerce_number_or_text,
    parse_born_date,
    to_float,
    to_non_negative_int,
)


class ParseBornDateTestCase(unittest.TestCase):
    def test_iso_date_is_returned_unchanged(self) -> None:
        self.assertEqual(parse_born_date("1984-12-30"), "1984-12-30")

    def test_month_day_year(self) -> None:
        self.assertEqual(parse_born_date("December 30, 1984"), "1984-12-30")
        self.assertEqual(parse_born_date("march 5, 1990"), "1990-03-05")

    def test_month_abbreviations(self) -> None:
        self.assertEqual(parse_born_date("Feb. 17, 1963"), "1963-02-17")
        self.assertEqual(parse_born_date("Sept 9, 2001"), "2001-09-09")

    def test_day_is_clamped(self) -> None:
        self.assertEqual(parse_born_date("January 0, 2000"), "2000-01-01")
        self.assertEqual(parse_born_date("January 45, 2000"), "2000-01-31")

    def test_bare_year(self) -> None:
        self.assertEqual(parse_born_date("1963"), "1963-01-01")

    def test_unparseable_text(self) -> None:
        self.assertIsNone(parse_born_date("sometime in the 80s"))
        self.assertIsNone(parse_born_date("Smarch 3, 1999"))
        self.assertIsNone(parse_born_date(""))
        self.assertIsNone(parse_born_date(None))


class AgeFromBirthDateTestCase(unittest.TestCase):
    def test_after_birthday(self) -> None:
        self.assertEqual(age_from_birth_date("1984-12-30", date(2025, 1, 15)), 40)

    def test_day_before_birthday(self) -> None:
        self.assertEqual(age_from_birth_date("1984-12-30", date(2024, 12, 29)), 39)

    def test_on_birthday(self) -> None:
        self.assertEqual(age_from_birth_date("1984-12-30", date(2024, 12, 30)), 40)

    def test_invalid_inputs(self) -> None:
        self.assertIsNone(age_from_birth_date(None))
        self.assertIsNone(age_from_birth_date("December 30, 1984"))
        self.assertIsNone(age_from_birth_date("1984-13-45"))

    def test_future_birth_date(self) -> None:
        self.assertIsNone(age_from_birth_date("2030-01-01", date(2025, 1, 1)))


class CoerceNumberTestCase(unittest.TestCase):
    def test_numbers(self) -> None:
        self.assertEqual(coerce_number_or_text(" 27.1 "), 27.1)
        self.assertEqual(coerce_number_or_text(".513"), 0.513)
        self.assertEqual(coerce_number_or_text("-3"), -3.0)

    def test_text_is_trimmed(self) -> None:
        self.assertEqual(coerce_number_or_text(" 2023-24 "), "2023-24")
        self.assertEqual(coerce_number_or_text("LAL"), "LAL")
        self.assertEqual(coerce_number_or_text("inf"), "inf")

    def test_empty_cell_is_none(self) -> None:
        self.assertIsNone(coerce_cell("   "))
        self.assertIsNone(coerce_cell(None))
        self.assertEqual(coerce_cell("0"), 0.0)

    def test_lenient_conversions(self) -> None:
        self.assertEqual(to_float("12.5"), 12.5)
        self.assertIsNone(to_float("Career"))
        self.assertIsNone(to_float(True))
        self.assertEqual(to_non_negative_int(55.0), 55)
        self.assertIsNone(to_non_negative_int(-1))
        self.assertIsNone(to_non_negative_int(2.5))


if __name__ == "__main__":
    unittest.main()
