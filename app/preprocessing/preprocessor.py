"""Line filter and document hints for raw statement, receipt and invoice text.

Only lines that can carry a transaction survive: lines with a date, an amount
or a transaction keyword. Page numbers and header/footer boilerplate are
dropped. Kept lines are returned verbatim.
"""

from __future__ import annotations

import re
from typing import ClassVar

from app.logging.logger import Log
from app.preprocessing.models import DocumentHints, DocumentType, PreprocessResult


class DocumentPreprocessor:
    """Reduces document text before extraction and detects type and language."""

    _DATE_PATTERNS: ClassVar[list[re.Pattern[str]]] = [
        re.compile(r"\d{1,2}[./]\d{1,2}[./]\d{2,4}"),
        re.compile(r"\d{4}-\d{1,2}-\d{1,2}"),
        re.compile(r"\d{1,2}\s+[A-Za-zА-Яа-яЁё]+\s+\d{4}"),
        re.compile(
            r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?\s+\d{1,2},?\s+\d{4}",
            re.IGNORECASE,
        ),
    ]

    _AMOUNT_PATTERNS: ClassVar[list[re.Pattern[str]]] = [
        re.compile(r"[+-]?\s*\d[\d\s]*[.,]\d{2}"),
        re.compile(r"[+-]\s*\d+(?:\s*\d{3})*"),
        re.compile(r"\d+\s*[₸$€₽£¥]"),
        re.compile(r"[₸$€₽£¥]\s*\d+"),
        re.compile(r"\d+\s*(?:KZT|USD|EUR|RUB|GBP|JPY|CNY|CHF)\b", re.IGNORECASE),
    ]

    _TRANSACTION_KEYWORDS: ClassVar[tuple[str, ...]] = (
        # ru
        "перевод", "оплата", "покупка", "списание", "пополнение",
        "возврат", "комиссия", "остаток", "баланс",
        # kk
        "аударым", "төлем", "сатып алу",
        # en
        "transfer", "payment", "purchase", "withdrawal", "deposit",
        "refund", "fee", "balance",
    )

    _PAGE_NUMBER_PATTERNS: ClassVar[list[re.Pattern[str]]] = [
        re.compile(r"^-\s*\d+\s*-$"),
        re.compile(r"^page\s+\d+.*$", re.IGNORECASE),
        re.compile(r"^\d+\s*/\s*\d+$"),
        re.compile(r"^стр\.?\s*\d+.*$", re.IGNORECASE),
    ]

    _HEADER_FOOTER_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"generated|confidential|\bpage\b|дата формирования|конфиденциально"
        r"|www\.|https?:|tel:|тел:",
        re.IGNORECASE,
    )

    # Ordered: the first matching rule decides the document type.
    _DOC_TYPE_RULES: ClassVar[list[tuple[re.Pattern[str], DocumentType]]] = [
        (re.compile(r"чек|касса|фискальн", re.IGNORECASE), DocumentType.RECEIPT),
        (
            re.compile(r"сч[её]т-фактура|invoice|bill to|amount due", re.IGNORECASE),
            DocumentType.INVOICE,
        ),
        (
            re.compile(
                r"order\s*#|order date|order total|order confirmation"
                r"|заказ\s*№|дата заказа",
                re.IGNORECASE,
            ),
            DocumentType.INVOICE,
        ),
        (re.compile(r"итого к оплате|к оплате", re.IGNORECASE), DocumentType.INVOICE),
        (re.compile(r"итого|\btotal\b|receipt", re.IGNORECASE), DocumentType.RECEIPT),
        (
            re.compile(
                r"statement|выписка|account|сч[её]т|bank|банк|period|период",
                re.IGNORECASE,
            ),
            DocumentType.BANK_STATEMENT,
        ),
    ]

    _KAZAKH_RE: ClassVar[re.Pattern[str]] = re.compile(r"[әіңғүұқөһӘІҢҒҮҰҚӨҺ]")
    _CYRILLIC_RE: ClassVar[re.Pattern[str]] = re.compile(r"[а-яёА-ЯЁ]")
    _LATIN_RE: ClassVar[re.Pattern[str]] = re.compile(r"[a-zA-Z]")

    def preprocess(self, raw_text: str) -> PreprocessResult:
        """Filter *raw_text* down to financially relevant lines.

        Returns:
            PreprocessResult with the kept lines (verbatim, original order)
            and the detected document hints. Blank input gives an empty
            result with UNKNOWN type and "en" language.
        """
        if not raw_text or not raw_text.strip():
            return PreprocessResult()

        hints = DocumentHints(
            type=self.detect_document_type(raw_text),
            language=self.detect_language(raw_text),
        )
        lines = [
            line
            for line in raw_text.splitlines()
            if self._is_relevant(line)
            and not self._is_page_number(line)
            and not self._is_header_or_footer(line)
        ]

        Log.debug(
            f"Preprocessed {len(raw_text)} chars into {len(lines)} lines "
            f"(type={hints.type.value}, language={hints.language})"
        )
        return PreprocessResult(cleaned_lines=lines, hints=hints)

    def detect_document_type(self, text: str) -> DocumentType:
        for pattern, doc_type in self._DOC_TYPE_RULES:
            if pattern.search(text):
                return doc_type
        return DocumentType.UNKNOWN

    def detect_language(self, text: str) -> str:
        if self._KAZAKH_RE.search(text):
            return "kk"
        cyrillic = len(self._CYRILLIC_RE.findall(text))
        latin = len(self._LATIN_RE.findall(text))
        return "ru" if cyrillic > latin else "en"

    @staticmethod
    def estimate_token_reduction(original: str, cleaned: str) -> float:
        """Fraction of characters removed by preprocessing, in [0, 1]."""
        if not original:
            return 0.0
        return max(0.0, 1.0 - len(cleaned) / len(original))

    # ------------------------------------------------------------------
    # Line classification
    # ------------------------------------------------------------------

    def _is_relevant(self, line: str) -> bool:
        trimmed = line.strip()
        if not trimmed:
            return False
        if any(p.search(trimmed) for p in self._DATE_PATTERNS):
            return True
        if any(p.search(trimmed) for p in self._AMOUNT_PATTERNS):
            return True
        lower = trimmed.lower()
        return any(keyword in lower for keyword in self._TRANSACTION_KEYWORDS)

    def _is_page_number(self, line: str) -> bool:
        trimmed = line.strip()
        return any(p.match(trimmed) for p in self._PAGE_NUMBER_PATTERNS)

    def _is_header_or_footer(self, line: str) -> bool:
        return self._HEADER_FOOTER_RE.search(line) is not None
