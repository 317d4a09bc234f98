from abc import ABC, abstractmethod

from app.anonymization.models import AnonymizationResult


class BaseAnonymizer(ABC):
    """Contract for all anonymization adapters."""

    @abstractmethod
    def anonymize(
        self,
        text: str,
        sensitive_words: list[str] | None = None,
    ) -> AnonymizationResult:
        """Replace PII in text with reversible ``[KIND_N]`` placeholders.

        Args:
            text: Document text or a single transaction description.
            sensitive_words: Optional user-defined words (lowercase Latin
                             tokens) that must always be masked.

        Returns:
            AnonymizationResult with anonymized text and placeholder mapping.

        Raises:
            AnonymizationError: on any unexpected failure.
        """

    @abstractmethod
    def deanonymize(self, text: str, mapping: dict[str, str]) -> str:
        """Put the original values back in place of their placeholders."""
