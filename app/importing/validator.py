from collections.abc import Callable, Sequence
from datetime import date

from app.importing.models import ValidationResult, ValidationWarning
from app.pipeline.models import ImportedTransaction

LARGE_AMOUNT_THRESHOLD = 100_000_000  # minor units


class ImportValidator:
    """Flags suspicious transactions. Findings never block an import."""

    def __init__(self, today: Callable[[], date] = date.today) -> None:
        self._today = today

    def validate(self, transactions: Sequence[ImportedTransaction]) -> ValidationResult:
        today = self._today()
        warnings: list[ValidationWarning] = []
        for index, transaction in enumerate(transactions):
            if transaction.date > today:
                warnings.append(
                    ValidationWarning(index, f"Future date detected ({transaction.date.isoformat()})")
                )
            if transaction.amount == 0:
                warnings.append(ValidationWarning(index, "Zero amount"))
            elif abs(transaction.amount) > LARGE_AMOUNT_THRESHOLD:
                warnings.append(ValidationWarning(index, "Unusually large amount"))
            if not transaction.description.strip():
                warnings.append(ValidationWarning(index, "Empty description"))
        return ValidationResult(warnings=warnings)
