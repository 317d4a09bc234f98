"""Deterministic PII anonymizer for financial documents.

Processing flow:
1. Detect structured PII on the original text with ordered regex rules
   (IBAN, email, card, phone, IIN, account number, personal names).
2. Detect user dictionary words on an ICU Latin-ASCII transliteration
   and map the spans back to the original text.
3. Drop false positives: dates read as phones, decimal amounts, fiscal
   identifiers (receipt numbers, tax IDs) and business names.
4. Keep the first non-overlapping span in rule order.
5. Replace spans with ``[KIND_N]`` placeholders, one per distinct value.

``deanonymize`` reverses step 5 in a single pass, so
``deanonymize(r.anonymized_text, r.mapping)`` restores the input exactly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar

import icu  # type: ignore[import-untyped]

from app.anonymization.base import BaseAnonymizer
from app.anonymization.exceptions import AnonymizationError
from app.anonymization.models import AnonymizationResult, DetectedPII, PIIType
from app.logging.logger import Log

_UPPER_CYR = "А-ЯЁӘІҢҒҮҰҚӨҺ"
_LOWER_CYR = "а-яёәіңғүұқөһ"


@dataclass
class _Span:
    """A candidate PII span in the original text."""

    type: PIIType
    start: int
    end: int


class RegexPIIAnonymizer(BaseAnonymizer):
    """Regex and dictionary anonymizer. No AI, no network."""

    _ICU_TRANSFORM: ClassVar[str] = "Any-Latin; Latin-ASCII; Lower"

    # Order is priority: earlier rules win overlapping spans.
    _RULES: ClassVar[list[tuple[PIIType, re.Pattern[str]]]] = [
        (PIIType.IBAN, re.compile(r"\b[A-Z]{2}\d{2}[A-Z0-9]{10,30}\b", re.IGNORECASE)),
        (PIIType.EMAIL, re.compile(r"[\w.+-]+@[\w.-]+\.\w{2,}")),
        (
            PIIType.CARD_NUMBER,
            re.compile(r"\b\d{4}[ \t-]?\d{4}[ \t-]?\d{4}[ \t-]?\d{4}\b"),
        ),
        (
            PIIType.PHONE,
            re.compile(
                r"(?<![\d\w])\+?[78][ \t]*[(\-]?\d{3}[)\-]?[ \t]*\d{3}[\- \t]?\d{2}[\- \t]?\d{2}\b"
            ),
        ),
        (PIIType.PHONE, re.compile(r"\b87\d{9}\b")),
        (PIIType.IIN, re.compile(r"\b\d{12}\b")),
        (PIIType.ACCOUNT, re.compile(r"\b\d{10,20}\b")),
        # Иванов А.С.
        (
            PIIType.PERSON_NAME,
            re.compile(rf"[{_UPPER_CYR}][{_LOWER_CYR}]+[ \t]+[{_UPPER_CYR}]\.[ \t]*[{_UPPER_CYR}]\."),
        ),
        # Иванов Иван Иванович / Иванова Анна Сергеевна
        (
            PIIType.PERSON_NAME,
            re.compile(
                rf"[{_UPPER_CYR}][{_LOWER_CYR}]+[ \t]+[{_UPPER_CYR}][{_LOWER_CYR}]+"
                rf"[ \t]+[{_UPPER_CYR}][{_LOWER_CYR}]+(?:ич|вна)\b"
            ),
        ),
        # Иванов Иван
        (
            PIIType.PERSON_NAME,
            re.compile(rf"[{_UPPER_CYR}][{_LOWER_CYR}]+[ \t]+[{_UPPER_CYR}][{_LOWER_CYR}]+"),
        ),
        (PIIType.PERSON_NAME, re.compile(r"\b[A-Z][a-z]+[ \t]+[A-Z][a-z]+\b")),  # John Smith
        (PIIType.PERSON_NAME, re.compile(r"\b[A-Z][a-z]+,[ \t]*[A-Z][a-z]+\b")),  # Smith, John
        (PIIType.PERSON_NAME, re.compile(r"\b[A-Z]\.[ \t]*[A-Z][a-z]+\b")),  # J. Smith
        (PIIType.PERSON_NAME, re.compile(r"\b[A-Z][a-z]+[ \t]+[A-Z]\.(?!\w)")),  # Smith J.
    ]

    _DATE_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*\d{1,2}[./-]\d{1,2}[./-]\d{2,4}\s*$|^\s*\d{4}-\d{1,2}-\d{1,2}\s*$"
    )
    _DECIMAL_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[+-]?\d+[.,]\d+$")

    # Label immediately before a number that makes it a fiscal identifier.
    _FISCAL_LABEL_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"(?:БИН|BIN|ИНН|INN|КПП|ОГРН|ФПД|ФП|ФН|ФД|РНМ|ЗНМ|РН\s*ККТ|ЗН\s*ККТ"
        r"|чек|receipt|invoice|tax\s*id|TIN|VAT|НДС)"
        r"\s*(?:№|#|no\.?)?\s*[:.]?\s*$",
        re.IGNORECASE,
    )
    _FISCAL_TYPES: ClassVar[frozenset[PIIType]] = frozenset(
        {PIIType.IIN, PIIType.ACCOUNT, PIIType.PHONE, PIIType.CARD_NUMBER}
    )

    # Words that make a capitalized pair a business or a transaction label.
    _NON_PERSON_WORDS: ClassVar[frozenset[str]] = frozenset(
        {
            "bank", "банк", "store", "магазин", "shop", "market", "маркет",
            "restaurant", "ресторан", "cafe", "кафе", "hotel", "отель",
            "company", "компания", "corp", "corporation", "inc", "ltd", "llc",
            "gmbh", "ag", "sa", "ооо", "оао", "ао", "зао", "тоо", "ип",
            "service", "сервис", "services", "center", "центр", "clinic",
            "клиника", "pharmacy", "аптека", "studio", "студия", "agency",
            "агентство", "payment", "платёж", "платеж", "transfer", "перевод",
            "exchange", "обмен", "insurance", "страхование", "credit", "кредит",
            "loan", "займ", "express", "экспресс", "plus", "плюс", "pro",
            "premium", "gold", "mobile", "мобайл", "online", "онлайн",
            "digital", "smart", "kaspi", "halyk", "jusan", "forte", "bcc",
            "eurasian", "supermarket", "супермаркет",
            # transaction vocabulary
            "покупка", "оплата", "пополнение", "списание", "возврат",
            "комиссия", "снятие", "зачисление", "зарплата", "кэшбэк", "итого",
            "сумма", "остаток", "баланс", "дата", "чек", "выписка", "счет",
            "счёт", "карта", "purchase", "refund", "deposit", "withdrawal",
            "balance", "total", "statement", "account", "card", "fee",
        }
    )

    _PLACEHOLDER_RE: ClassVar[re.Pattern[str]] = re.compile(r"\[[A-Z_]+_\d+\]")

    def __init__(self) -> None:
        self._transliterator: icu.Transliterator = icu.Transliterator.createInstance(
            self._ICU_TRANSFORM
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def anonymize(
        self,
        text: str,
        sensitive_words: list[str] | None = None,
    ) -> AnonymizationResult:
        try:
            return self._run(text, sensitive_words or [])
        except AnonymizationError:
            raise
        except Exception as exc:
            raise AnonymizationError(f"Anonymization failed: {exc}") from exc

    def deanonymize(self, text: str, mapping: dict[str, str]) -> str:
        if not text or not mapping:
            return text
        return self._PLACEHOLDER_RE.sub(
            lambda m: mapping.get(m.group(0), m.group(0)),
            text,
        )

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    def _run(self, text: str, dictionary: list[str]) -> AnonymizationResult:
        if not text:
            return AnonymizationResult(anonymized_text="")

        candidates = self._detect_regex(text)
        candidates.extend(self._detect_dictionary(text, dictionary))

        spans = self._select(candidates)
        if not spans:
            return AnonymizationResult(anonymized_text=text)

        result = self._replace(text, spans)
        Log.debug(f"Anonymized: {len(result.detected_pii)} PII spans replaced")
        return result

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def _detect_regex(self, text: str) -> list[_Span]:
        spans: list[_Span] = []
        for pii_type, pattern in self._RULES:
            pos = 0
            while (m := pattern.search(text, pos)) is not None:
                if self._is_false_positive(pii_type, m.group(0), text, m.start()):
                    # Retry one character later: "Оплата Иванов Иван" still yields the name.
                    pos = m.start() + 1
                    continue
                spans.append(_Span(pii_type, m.start(), m.end()))
                pos = m.end()
        return spans

    def _detect_dictionary(self, text: str, dictionary: list[str]) -> list[_Span]:
        """Find user dictionary words on the transliterated text."""
        words = {w for w in dictionary if w}
        if not words:
            return []

        transliterated, trans_to_orig = self._transliterate_with_mapping(text)
        spans: list[_Span] = []
        for word in words:
            start = 0
            while True:
                idx = transliterated.find(word, start)
                if idx == -1:
                    break
                end = idx + len(word)
                before_ok = idx == 0 or not transliterated[idx - 1].isalnum()
                after_ok = end == len(transliterated) or not transliterated[end].isalnum()
                if before_ok and after_ok:
                    spans.append(
                        _Span(
                            PIIType.PERSON_NAME,
                            trans_to_orig[idx],
                            trans_to_orig[end - 1] + 1,
                        )
                    )
                start = idx + 1
        return spans

    def _transliterate_with_mapping(self, text: str) -> tuple[str, list[int]]:
        """Transliterate *text* character by character via ICU.

        Returns:
            (transliterated_text, trans_to_orig) where trans_to_orig[j]
            is the index in *text* that produced transliterated char j.
        """
        parts: list[str] = []
        trans_to_orig: list[int] = []
        for orig_idx, ch in enumerate(text):
            t = self._transliterator.transliterate(ch)
            parts.append(t)
            trans_to_orig.extend([orig_idx] * len(t))
        return "".join(parts), trans_to_orig

    # ------------------------------------------------------------------
    # False positives
    # ------------------------------------------------------------------

    def _is_false_positive(
        self,
        pii_type: PIIType,
        value: str,
        text: str,
        start: int,
    ) -> bool:
        if pii_type == PIIType.PHONE and self._DATE_RE.match(value):
            return True
        if pii_type not in (PIIType.IIN, PIIType.ACCOUNT) and self._DECIMAL_RE.match(value):
            return True
        if pii_type in self._FISCAL_TYPES and self._has_fiscal_label(text, start):
            return True
        if pii_type == PIIType.PERSON_NAME and self._is_business_name(value):
            return True
        return False

    def _has_fiscal_label(self, text: str, start: int) -> bool:
        line_start = text.rfind("\n", 0, start) + 1
        return self._FISCAL_LABEL_RE.search(text[line_start:start]) is not None

    def _is_business_name(self, value: str) -> bool:
        lowered = value.lower()
        words = set(re.findall(r"\w+", lowered))
        words.update(re.findall(r"\w+", self._transliterator.transliterate(lowered)))
        return not words.isdisjoint(self._NON_PERSON_WORDS)

    # ------------------------------------------------------------------
    # Selection and replacement
    # ------------------------------------------------------------------

    @staticmethod
    def _select(candidates: list[_Span]) -> list[_Span]:
        """Keep candidates in priority order, dropping any that overlap a kept one."""
        kept: list[_Span] = []
        for span in candidates:
            if span.start >= span.end:
                continue
            if any(span.start < k.end and k.start < span.end for k in kept):
                continue
            kept.append(span)
        kept.sort(key=lambda s: s.start)
        return kept

    @classmethod
    def _replace(cls, original: str, spans: list[_Span]) -> AnonymizationResult:
        """Replace spans with placeholders; the same value always gets the same one.

        Placeholders already present in the input are never reused, so
        deanonymizing leaves them as they were.
        """
        taken = set(cls._PLACEHOLDER_RE.findall(original))
        counters: dict[PIIType, int] = {}
        placeholders: dict[tuple[PIIType, str], str] = {}
        mapping: dict[str, str] = {}
        detected: list[DetectedPII] = []
        parts: list[str] = []
        cursor = 0

        for span in spans:
            value = original[span.start:span.end]
            key = (span.type, value)
            placeholder = placeholders.get(key)
            if placeholder is None:
                placeholder = cls._next_placeholder(span.type, counters, taken)
                placeholders[key] = placeholder
                mapping[placeholder] = value
            parts.append(original[cursor:span.start])
            parts.append(placeholder)
            cursor = span.end
            detected.append(
                DetectedPII(
                    type=span.type,
                    original=value,
                    placeholder=placeholder,
                    start=span.start,
                    end=span.end,
                )
            )
        parts.append(original[cursor:])

        return AnonymizationResult(
            anonymized_text="".join(parts),
            mapping=mapping,
            detected_pii=detected,
        )

    @staticmethod
    def _next_placeholder(
        pii_type: PIIType,
        counters: dict[PIIType, int],
        taken: set[str],
    ) -> str:
        while True:
            counters[pii_type] = counters.get(pii_type, 0) + 1
            placeholder = f"[{pii_type.value}_{counters[pii_type]}]"
            if placeholder not in taken:
                return placeholder
