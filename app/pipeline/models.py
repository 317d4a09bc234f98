from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from app.preprocessing.models import DocumentType


class ImportSource(str, Enum):
    """Which stage produced an imported transaction."""

    RULE_BASED = "RULE_BASED"
    DOCUMENT_AI = "DOCUMENT_AI"
    LLM_ENHANCED = "LLM_ENHANCED"


class FailureStage(str, Enum):
    """Pipeline stage at which an import failed."""

    EXTRACTION = "EXTRACTION"
    OCR = "OCR"
    PARSING = "PARSING"


class DocumentKind(str, Enum):
    TEXT = "TEXT"
    PDF = "PDF"
    IMAGE = "IMAGE"


@dataclass(frozen=True)
class RawDocument:
    """Uploaded document bytes and their declared kind. Consumed once."""

    content: bytes
    kind: DocumentKind
    filename: str = ""

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class ImportedTransaction:
    """Final normalized transaction ready for review and persistence."""

    date: date
    amount: int  # signed, minor units
    description: str
    merchant: str | None = None
    category_id: str | None = None
    currency: str | None = None
    counterparty_name: str | None = None
    confidence: float = 1.0
    source: ImportSource = ImportSource.RULE_BASED

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", min(1.0, max(0.0, self.confidence)))

    @property
    def is_income(self) -> bool:
        return self.amount > 0

    @property
    def is_expense(self) -> bool:
        return self.amount < 0


@dataclass(frozen=True)
class ImportSuccess:
    transactions: list[ImportedTransaction]
    document_type: DocumentType
    total_confidence: float


@dataclass(frozen=True)
class ImportFailure:
    message: str
    stage: FailureStage = FailureStage.PARSING
    document_type: DocumentType | None = None
    partial_transactions: list[ImportedTransaction] = field(default_factory=list)


@dataclass(frozen=True)
class ImportNeedsUserInput:
    transactions: list[ImportedTransaction]
    document_type: DocumentType
    issues: list[str] = field(default_factory=list)


ImportResult = ImportSuccess | ImportFailure | ImportNeedsUserInput
