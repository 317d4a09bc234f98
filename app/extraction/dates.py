"""Turns the raw date tokens found by the extractor into dates."""

from __future__ import annotations

import re
from datetime import date

_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

_ISO_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_NUMERIC_RE = re.compile(r"^(\d{1,2})([./])(\d{1,2})(?:[./](\d{2}|\d{4}))?$")
_DAY_MONTH_NAME_RE = re.compile(r"^(\d{1,2})\s+([A-Za-z]{3})[a-z]*\s+(\d{4})$")
_MONTH_NAME_DAY_RE = re.compile(r"^([A-Za-z]{3})[a-z]*\s+(\d{1,2}),?\s+(\d{4})$")


def parse_raw_date(raw: str, language: str = "ru", today: date | None = None) -> date | None:
    """Parse a raw date token. Returns None when it is not a valid date.

    Dotted dates are always day first. Slashed dates are day first unless
    the document is English or the first part cannot be a day; a part
    greater than 12 settles the order either way. Two-digit years are in
    the 2000s, and a missing year is the current one.
    """
    token = raw.strip()
    today = today or date.today()

    if m := _ISO_RE.match(token):
        return _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    if m := _NUMERIC_RE.match(token):
        first, separator, second, year_text = m.groups()
        a, b = int(first), int(second)
        year = today.year if year_text is None else int(year_text)
        if year < 100:
            year += 2000
        month_first = separator == "/" and language == "en"
        if a > 12:
            month_first = False
        elif b > 12:
            month_first = True
        if month_first:
            return _safe_date(year, a, b)
        return _safe_date(year, b, a)

    if m := _DAY_MONTH_NAME_RE.match(token):
        month = _MONTHS.get(m.group(2).lower())
        if month is not None:
            return _safe_date(int(m.group(3)), month, int(m.group(1)))

    if m := _MONTH_NAME_DAY_RE.match(token):
        month = _MONTHS.get(m.group(1).lower())
        if month is not None:
            return _safe_date(int(m.group(3)), month, int(m.group(2)))

    return None


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None
