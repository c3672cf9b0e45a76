"""Locale-free parsing of dates, ages and numeric table cells."""

from __future__ import annotations

from datetime import date
import logging
import math
import re
from typing import Any

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_DAY_YEAR = re.compile(r"^([A-Za-z]+)\.?\s+(\d{1,2}),?\s+(\d{4})$")
_BARE_YEAR = re.compile(r"^\d{4}$")
_DECIMAL = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")

_MONTHS = {
    "january": 1,
    "february": 2,
    "march": 3,
    "april": 4,
    "may": 5,
    "june": 6,
    "july": 7,
    "august": 8,
    "september": 9,
    "october": 10,
    "november": 11,
    "december": 12,
}
_MONTH_ABBREVIATIONS = {name[:3]: number for name, number in _MONTHS.items()}
_MONTH_ABBREVIATIONS["sept"] = 9


def _month_number(name: str) -> int | None:
    lowered = name.lower()
    return _MONTHS.get(lowered) or _MONTH_ABBREVIATIONS.get(lowered)


def parse_born_date(text: str | None) -> str | None:
    """Normalise a birth date to ``YYYY-MM-DD``.

    Accepts ISO dates (returned unchanged), ``"Month D, YYYY"`` and a bare
    four digit year (defaults to January 1st). Anything else yields ``None``.
    """

    if not text:
        return None
    value = " ".join(str(text).split())
    if _ISO_DATE.match(value):
        return value

    matcher = _MONTH_DAY_YEAR.match(value)
    if matcher:
        month = _month_number(matcher.group(1))
        if month is None:
            return None
        day = min(max(int(matcher.group(2)), 1), 31)
        return f"{matcher.group(3)}-{month:02d}-{day:02d}"

    if _BARE_YEAR.match(value):
        return f"{value}-01-01"
    return None


def age_from_birth_date(iso_date: str | None, today: date | None = None) -> int | None:
    """Return whole years elapsed between ``iso_date`` and ``today``."""

    if not iso_date or not _ISO_DATE.match(iso_date):
        return None
    try:
        born = date.fromisoformat(iso_date)
    except ValueError:
        logger.debug("Unable to parse birth date '%s'", iso_date)
        return None

    today = today or date.today()
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age if age >= 0 else None


def coerce_number_or_text(text: str) -> float | str:
    """Return ``text`` as a float when it is a finite number, else trimmed text."""

    value = text.strip()
    if _DECIMAL.match(value):
        number = float(value)
        if math.isfinite(number):
            return number
    return value


def coerce_cell(text: str | None) -> float | str | None:
    """Coerce a table cell, mapping empty cells to ``None``."""

    if text is None:
        return None
    value = coerce_number_or_text(text)
    if value == "":
        return None
    return value


def to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    coerced = coerce_number_or_text(str(value))
    return coerced if isinstance(coerced, float) else None


def to_non_negative_int(value: Any) -> int | None:
    number = to_float(value)
    if number is None or number < 0 or not number.is_integer():
        return None
    return int(number)


__all__ = [
    "age_from_birth_date",
    "coerce_cell",
    "coerce_number_or_text",
    "parse_born_date",
    "to_float",
    "to_non_negative_int",
]
