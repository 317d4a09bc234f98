"""Regex-cascade extraction of transactions from preprocessed document text."""

from __future__ import annotations

import re

from app.extraction.models import AmountMatch, PartialTransaction
from app.extraction.patterns import (
    AMOUNT_PATTERNS,
    CURRENCY_BY_SYMBOL,
    CURRENCY_CODES,
    CURRENCY_CODES_RE,
    CURRENCY_SYMBOLS_RE,
    DATE_PATTERNS,
)
from app.logging.logger import Log
from app.preprocessing.models import DocumentType

_RECEIPT_HEADER_MAX_LENGTH = 40
_LEADING_SIGNS_RE = re.compile(r"^[\-+\s]+")
_WHITESPACE_RE = re.compile(r"\s+")


class LocalTransactionExtractor:
    """Single-pass, stateful line parser.

    A date seen on a line without an amount becomes the context date for
    the amount-only lines that follow it (one receipt header, many items).
    In receipt mode an amount without an explicit sign is an expense.
    """

    def extract(
        self,
        text: str,
        doc_type: DocumentType | None = None,
    ) -> list[PartialTransaction]:
        """Extract partial transactions from *text*.

        Args:
            text: Preprocessed document text, one candidate per line.
            doc_type: Optional explicit document type. When given, receipt
                      mode is fixed by it instead of being inferred.

        Returns:
            Transactions in line order. Lines without a usable date or
            amount are skipped.
        """
        if not text or not text.strip():
            return []

        transactions: list[PartialTransaction] = []
        context_date: str | None = None
        receipt_mode = doc_type == DocumentType.RECEIPT

        for line in text.splitlines():
            trimmed = line.strip()
            if not trimmed:
                continue

            date_match = self.find_date(trimmed)
            amount = self.find_amount(trimmed, date_match)

            if date_match is not None and amount is not None:
                context_date = date_match.group(0)
                if doc_type is None:
                    receipt_mode = False
                transactions.append(
                    self._build(trimmed, context_date, amount, receipt_mode, date_match)
                )
            elif date_match is not None:
                if doc_type is None and self._looks_like_receipt_header(trimmed, date_match):
                    receipt_mode = True
                context_date = date_match.group(0)
            elif amount is not None and context_date is not None:
                transactions.append(
                    self._build(trimmed, context_date, amount, receipt_mode, None)
                )

        Log.debug(f"Local extraction found {len(transactions)} transactions")
        return transactions

    # ------------------------------------------------------------------
    # Token search
    # ------------------------------------------------------------------

    @staticmethod
    def find_date(line: str) -> re.Match[str] | None:
        for pattern in DATE_PATTERNS:
            match = pattern.search(line)
            if match is not None:
                return match
        return None

    @staticmethod
    def find_amount(
        line: str,
        date_match: re.Match[str] | None = None,
    ) -> AmountMatch | None:
        """Return the first amount the ordered pattern table can parse.

        The date token, when present, is blanked out first so its digits
        and separators are never read as an amount.
        """
        search_line = line
        if date_match is not None:
            blank = " " * (date_match.end() - date_match.start())
            search_line = line[: date_match.start()] + blank + line[date_match.end():]

        for pattern in AMOUNT_PATTERNS:
            match = pattern.regex.search(search_line)
            if match is None:
                continue
            value = pattern.parse(match, search_line)
            if value is None:
                continue
            return AmountMatch(
                minor_units=value,
                raw_value=match.group(0),
                start=match.start(),
                end=match.end(),
            )
        return None

    @staticmethod
    def detect_currency(line: str) -> str | None:
        """Symbol first, then a three-letter ISO code anywhere in the line."""
        for symbol, code in CURRENCY_BY_SYMBOL.items():
            if symbol in line:
                return code
        upper = line.upper()
        for code in CURRENCY_CODES:
            if code in upper:
                return code
        return None

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def _build(
        self,
        line: str,
        raw_date: str,
        amount: AmountMatch,
        receipt_mode: bool,
        date_match: re.Match[str] | None,
    ) -> PartialTransaction:
        value = amount.minor_units
        if receipt_mode and value > 0:
            value = -value

        if date_match is None:
            description = self._item_description(line, amount)
        else:
            description = self._statement_description(line, date_match, amount)

        return PartialTransaction(
            raw_date=raw_date,
            amount_minor_units=value,
            currency=self.detect_currency(line),
            raw_description=description,
        )

    @staticmethod
    def _looks_like_receipt_header(line: str, date_match: re.Match[str]) -> bool:
        # "15.01.2026 12:45" is a header, "Period: 01.01.2026" is not.
        has_label_colon = ":" in line[: date_match.start()]
        return len(line) < _RECEIPT_HEADER_MAX_LENGTH and not has_label_colon

    @staticmethod
    def _item_description(line: str, amount: AmountMatch) -> str:
        text = line[: amount.start] + line[amount.end:]
        return CURRENCY_SYMBOLS_RE.sub("", text).strip()

    @staticmethod
    def _statement_description(
        line: str,
        date_match: re.Match[str],
        amount: AmountMatch,
    ) -> str:
        spans = sorted([(date_match.start(), date_match.end()), (amount.start, amount.end)])
        text = line
        for start, end in reversed(spans):
            text = text[:start] + " " + text[end:]
        text = CURRENCY_SYMBOLS_RE.sub("", text)
        text = CURRENCY_CODES_RE.sub("", text).strip()
        text = _LEADING_SIGNS_RE.sub("", text)
        return _WHITESPACE_RE.sub(" ", text).strip()
