from dataclasses import dataclass, field
from enum import Enum


class DocumentType(str, Enum):
    """Kind of financial document detected from its text."""

    BANK_STATEMENT = "BANK_STATEMENT"
    RECEIPT = "RECEIPT"
    INVOICE = "INVOICE"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class DocumentHints:
    """Type and language guessed for a document."""

    type: DocumentType = DocumentType.UNKNOWN
    language: str = "en"  # one of "ru", "kk", "en"


@dataclass(frozen=True)
class PreprocessResult:
    """Output of the preprocessing step."""

    cleaned_lines: list[str] = field(default_factory=list)
    hints: DocumentHints = field(default_factory=DocumentHints)

    @property
    def cleaned_text(self) -> str:
        return "\n".join(self.cleaned_lines)
