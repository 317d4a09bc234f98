import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

HIGH_CONFIDENCE_THRESHOLD = 0.90
CONFIRMATION_THRESHOLD = 0.70


class CategorizationSource(str, Enum):
    USER_LEARNED = "USER_LEARNED"
    MERCHANT_DATABASE = "MERCHANT_DATABASE"
    RULE_BASED = "RULE_BASED"
    USER_HISTORY = "USER_HISTORY"
    LLM_TIER2 = "LLM_TIER2"
    LLM_TIER3 = "LLM_TIER3"

    @property
    def is_local(self) -> bool:
        return self not in (CategorizationSource.LLM_TIER2, CategorizationSource.LLM_TIER3)


class LearnedMerchantSource(str, Enum):
    USER = "USER"
    ML = "ML"


@dataclass(frozen=True)
class CategorizationResult:
    """A suggested category for one transaction."""

    transaction_id: str
    category_id: str
    confidence: float
    source: CategorizationSource

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", min(1.0, max(0.0, self.confidence)))

    @property
    def is_high_confidence(self) -> bool:
        return self.confidence >= HIGH_CONFIDENCE_THRESHOLD

    @property
    def requires_user_confirmation(self) -> bool:
        return self.confidence < CONFIRMATION_THRESHOLD


@dataclass(frozen=True)
class TransactionForCategorization:
    """The slice of a transaction the categorizers look at."""

    id: str
    description: str
    amount: int = 0  # signed, minor units
    merchant: str | None = None

    @property
    def match_text(self) -> str:
        return (self.merchant or self.description or "").strip()

    @property
    def amount_formatted(self) -> str:
        sign = "-" if self.amount < 0 else ""
        major, minor = divmod(abs(self.amount), 100)
        return f"{sign}{major}.{minor:02d}"


@dataclass(frozen=True)
class MerchantPattern:
    """A static merchant matcher compiled case-insensitively."""

    pattern: str
    category_id: str
    confidence: float
    display_name: str | None = None
    regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", re.compile(self.pattern, re.IGNORECASE))

    def matches(self, text: str) -> bool:
        return self.regex.search(text) is not None


@dataclass(frozen=True)
class LearnedMerchant:
    """A user-taught merchant -> category mapping."""

    id: str
    merchant_pattern: str
    category_id: str
    confidence: float
    source: LearnedMerchantSource
    sample_count: int
    last_used_at: datetime
    created_at: datetime


@dataclass(frozen=True)
class CategorizationStats:
    total_learned_mappings: int
    high_confidence_mappings: int
    total_samples: int
