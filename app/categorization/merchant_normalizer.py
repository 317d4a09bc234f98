"""Merchant name normalization shared by learning and Tier 0 matching.

Steps: uppercase, drop card masks, terminal ids, dates, times, currency
markers and order numbers, drop business suffixes and city or branch
words, keep letters only, collapse whitespace.
"""

import re
from typing import ClassVar

_LETTERS = "A-ZА-ЯЁӘҒҚҢӨҰҮҺІ"


class MerchantNormalizer:
    BUSINESS_SUFFIXES: ClassVar[tuple[str, ...]] = (
        "ТОО", "АО", "ИП", "КХ", "ПК",
        "LLC", "LTD", "INC", "CORP", "CO", "PLC", "GMBH", "AG", "SA",
    )

    LOCATIONS: ClassVar[tuple[str, ...]] = (
        "ALMATY", "АЛМАТЫ", "ASTANA", "АСТАНА", "NUR-SULTAN", "НУР-СУЛТАН",
        "SHYMKENT", "ШЫМКЕНТ", "КАРАГАНДА", "KARAGANDA", "АКТОБЕ", "AKTOBE",
        "BRANCH", "ФИЛИАЛ", "ОТДЕЛЕНИЕ",
    )

    COMMON_WORDS: ClassVar[frozenset[str]] = frozenset({
        "THE", "AND", "OF", "FOR", "IN", "AT", "TO", "BY",
        "И", "В", "НА", "ДЛЯ", "ИЗ", "ОТ", "ПО", "С",
    })

    _NOISE_PATTERNS: ClassVar[tuple[re.Pattern[str], ...]] = (
        re.compile(r"\*+\d+"),                      # card mask *1234
        re.compile(r"\d{6,}"),                      # terminal ids
        re.compile(r"\bPOS\s*\d*", re.IGNORECASE),
        re.compile(r"\bTERMINAL\s*\d*", re.IGNORECASE),
        re.compile(r"\bТЕРМИНАЛ\s*\d*", re.IGNORECASE),
        re.compile(r"\d{2}[./]\d{2}[./]\d{2,4}"),   # dates
        re.compile(r"\d{2}:\d{2}(?::\d{2})?"),      # times
        re.compile(r"\b(?:KZT|KZ)\b|₸"),
        re.compile(r"#\d+"),                        # order numbers
    )

    _SUFFIX_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"\b(?:" + "|".join(BUSINESS_SUFFIXES) + r")\b"
    )
    _LOCATION_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"(?<![\w-])(?:" + "|".join(re.escape(word) for word in LOCATIONS) + r")(?![\w-])"
    )
    _NON_LETTER_RE: ClassVar[re.Pattern[str]] = re.compile(rf"[^{_LETTERS}\s]")
    _WORD_RE: ClassVar[re.Pattern[str]] = re.compile(rf"[{_LETTERS}]+")
    _WHITESPACE_RE: ClassVar[re.Pattern[str]] = re.compile(r"\s+")

    MAX_KEYWORDS: ClassVar[int] = 5

    def normalize(self, merchant_name: str | None) -> str:
        """Normalize a raw merchant name. Blank input gives ''.

        When the cleanup removes everything, the first alphabetic word of at
        least two letters is returned instead, else the first 20 characters.
        """
        if merchant_name is None or not merchant_name.strip():
            return ""

        original = merchant_name.upper().strip()
        result = original
        for pattern in self._NOISE_PATTERNS:
            result = pattern.sub(" ", result)
        result = self._SUFFIX_RE.sub(" ", result)
        result = self._LOCATION_RE.sub(" ", result)
        result = self._NON_LETTER_RE.sub(" ", result)
        result = self._WHITESPACE_RE.sub(" ", result).strip()

        if not result:
            words = [word for word in self._WORD_RE.findall(original) if len(word) >= 2]
            return words[0] if words else original[:20].strip()
        return result

    def extract_keywords(self, merchant_name: str) -> list[str]:
        normalized = self.normalize(merchant_name)
        if not normalized:
            return []
        keywords = [
            word
            for word in normalized.split(" ")
            if len(word) >= 2 and word not in self.COMMON_WORDS
        ]
        return keywords[: self.MAX_KEYWORDS]

    def is_similar(self, first: str, second: str) -> bool:
        """Equal or contained after normalization, or keyword Jaccard >= 0.5."""
        norm_first = self.normalize(first)
        norm_second = self.normalize(second)
        if not norm_first or not norm_second:
            return False
        if norm_first == norm_second or norm_first in norm_second or norm_second in norm_first:
            return True

        keywords_first = set(self.extract_keywords(first))
        keywords_second = set(self.extract_keywords(second))
        if not keywords_first or not keywords_second:
            return False
        overlap = len(keywords_first & keywords_second) / len(keywords_first | keywords_second)
        return overlap >= 0.5

    def to_pattern(self, normalized_name: str) -> str:
        """First two keywords of a normalized name, the stored learning key."""
        if not normalized_name.strip():
            return ""
        keywords = self.extract_keywords(normalized_name)
        if not keywords:
            return normalized_name
        return " ".join(keywords[:2])
