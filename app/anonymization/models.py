from dataclasses import dataclass, field
from enum import Enum


class PIIType(str, Enum):
    """Kinds of personal data the anonymizer replaces."""

    PERSON_NAME = "PERSON_NAME"
    IBAN = "IBAN"
    ACCOUNT = "ACCOUNT"
    CARD_NUMBER = "CARD_NUMBER"
    PHONE = "PHONE"
    EMAIL = "EMAIL"
    IIN = "IIN"


@dataclass(frozen=True)
class DetectedPII:
    """Single PII replacement record."""

    type: PIIType
    original: str  # original text, exactly as it appeared
    placeholder: str  # e.g. "[PHONE_1]"
    start: int  # span in the original text
    end: int


@dataclass(frozen=True)
class AnonymizationResult:
    """Output of the anonymizer step."""

    anonymized_text: str
    mapping: dict[str, str] = field(default_factory=dict)  # placeholder -> original
    detected_pii: list[DetectedPII] = field(default_factory=list)

    @property
    def was_modified(self) -> bool:
        return bool(self.detected_pii)
