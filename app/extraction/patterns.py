"""Ordered date and amount pattern tables used by the local extractor.

Both tables are evaluated first-match-wins, so more specific patterns come
first. New locales are added by appending rows, not by touching the
extractor.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CURRENCY_SYMBOLS_RE = re.compile(r"[₸€₽£¥$]")

CURRENCY_BY_SYMBOL: dict[str, str] = {
    "₸": "KZT",
    "$": "USD",
    "€": "EUR",
    "₽": "RUB",
    "£": "GBP",
    "¥": "JPY",
}

CURRENCY_CODES: tuple[str, ...] = ("KZT", "USD", "EUR", "RUB", "GBP", "JPY", "CNY", "CHF")

CURRENCY_CODES_RE = re.compile(r"\b(?:" + "|".join(CURRENCY_CODES) + r")\b", re.IGNORECASE)

_MONTHS_SHORT = "Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec"
_MONTHS_LONG = (
    "January|February|March|April|May|June|July|August"
    "|September|October|November|December"
)

DATE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\d{4}-\d{1,2}-\d{1,2}"),  # ISO
    re.compile(r"\d{1,2}[./]\d{1,2}[./]\d{4}"),  # DD.MM.YYYY, MM/DD/YYYY
    re.compile(r"\d{1,2}[./]\d{1,2}[./]\d{2}(?!\d)"),  # DD.MM.YY
    re.compile(rf"\d{{1,2}}\s+(?:{_MONTHS_SHORT})\s+\d{{4}}", re.IGNORECASE),
    re.compile(rf"(?:{_MONTHS_LONG})\s+\d{{1,2}},?\s+\d{{4}}", re.IGNORECASE),
    re.compile(r"\d{1,2}/\d{1,2}(?=\s)"),  # MM/DD
]


def to_minor_units(number: str) -> int | None:
    """Convert a "1234.56" style string to minor units, rounding half up."""
    try:
        value = Decimal(number)
    except InvalidOperation:
        return None
    return int((value * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _preceded_by_minus(match: re.Match[str], line: str) -> bool:
    return line[: match.start()].rstrip().endswith("-")


def _signed(value: int | None, negative: bool) -> int | None:
    if value is None:
        return None
    return -value if negative else value


def _parse_kaspi(match: re.Match[str], line: str) -> int | None:
    raw = match.group(0)
    digits = re.sub(r"[₸€₽£¥$+\-\s]", "", raw).replace(",", ".")
    return _signed(to_minor_units(digits), "-" in raw)


def _parse_symbol_prefixed(match: re.Match[str], line: str) -> int | None:
    raw = match.group(0)
    digits = re.sub(r"[+\-$£]", "", raw).replace(",", "")
    return _signed(to_minor_units(digits), raw.startswith("-"))


def _parse_eu(match: re.Match[str], line: str) -> int | None:
    raw = match.group(0)
    digits = re.sub(r"[+\-€\s]", "", raw).replace(".", "").replace(",", ".")
    negative = raw.startswith("-") or _preceded_by_minus(match, line)
    return _signed(to_minor_units(digits), negative)


def _parse_space_grouped(match: re.Match[str], line: str) -> int | None:
    raw = match.group(0)
    digits = re.sub(r"[₸€₽£¥$+\-\s]", "", raw).replace(",", ".")
    return _signed(to_minor_units(digits), raw.startswith("-"))


def _parse_signed(match: re.Match[str], line: str) -> int | None:
    raw = match.group(0)
    digits = re.sub(r"[+\-\s]", "", raw).replace(",", ".")
    return _signed(to_minor_units(digits), raw.startswith("-"))


def _parse_currency_adjacent(match: re.Match[str], line: str) -> int | None:
    raw = match.group(0)
    digits = re.sub(r"[₸€₽£¥$\s]", "", raw)
    if "." in digits:
        digits = digits.replace(",", "")
    else:
        digits = digits.replace(",", ".")
    return _signed(to_minor_units(digits), _preceded_by_minus(match, line))


def _parse_unsigned(match: re.Match[str], line: str) -> int | None:
    return to_minor_units(match.group(0))


AmountParser = Callable[[re.Match[str], str], int | None]


@dataclass(frozen=True)
class AmountPattern:
    """One row of the amount table: a matcher and how to read its value."""

    name: str
    regex: re.Pattern[str]
    parse: AmountParser


AMOUNT_PATTERNS: list[AmountPattern] = [
    # "- 3 700,00 ₸", "+ 50 000 ₸"
    AmountPattern(
        "kaspi",
        re.compile(r"[+\-]\s*\d{1,3}(?:\s\d{3})+(?:,\d{2})?\s*[₸€₽£¥$]?"),
        _parse_kaspi,
    ),
    # "-$1,234.56"
    AmountPattern("usd", re.compile(r"-?\$[\d,]+(?:\.\d{1,2})?"), _parse_symbol_prefixed),
    # "-£1,234.56"
    AmountPattern("gbp", re.compile(r"-?£[\d,]+(?:\.\d{1,2})?"), _parse_symbol_prefixed),
    # "-1.234,56 €"
    AmountPattern("eu", re.compile(r"-?\d{1,3}(?:\.\d{3})+,\d{2}\s*€?"), _parse_eu),
    # "1 234,56 ₽", "50 000 ₸"
    AmountPattern(
        "ru",
        re.compile(r"-?\d{1,3}(?:\s\d{3})+(?:,\d{2})?\s*[₽₸]"),
        _parse_space_grouped,
    ),
    # "+5000", "-1234.56", "-100,00"
    AmountPattern("signed", re.compile(r"[+\-]\d+(?:[.,]\d{1,2})?"), _parse_signed),
    # "$100", "5000₸"
    AmountPattern(
        "currency",
        re.compile(r"[₸€₽£¥$]\s*[\d,]+(?:\.\d{1,2})?|\d[\d,.]*\s*[₸€₽£¥$]"),
        _parse_currency_adjacent,
    ),
    # "9.99" at end of line, separate debit/credit columns
    AmountPattern("unsigned", re.compile(r"\d+\.\d{2}$"), _parse_unsigned),
]
