from dataclasses import dataclass, field

from app.categorization.models import CategorizationResult
from app.dedup.models import DuplicateStatus, Unique
from app.pipeline.models import ImportedTransaction
from app.preprocessing.models import DocumentType


@dataclass(frozen=True)
class ValidationWarning:
    """A non-fatal finding about one imported transaction (index is 0-based)."""

    index: int
    message: str

    def __str__(self) -> str:
        return f"Transaction {self.index + 1}: {self.message}"


@dataclass(frozen=True)
class ValidationResult:
    warnings: list[ValidationWarning] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


@dataclass(frozen=True)
class ReviewableTransaction:
    """One row of the import preview."""

    index: int
    transaction: ImportedTransaction
    duplicate_status: DuplicateStatus = field(default_factory=Unique)
    is_selected: bool = True
    category_override: str | None = None
    suggested_category: CategorizationResult | None = None

    @property
    def effective_category_id(self) -> str | None:
        return self.category_override or self.transaction.category_id


@dataclass(frozen=True)
class ImportPreviewResult:
    """Everything the user reviews before confirming an import."""

    transactions: list[ReviewableTransaction]
    document_type: DocumentType
    duplicate_count: int = 0
    validation_warnings: list[ValidationWarning] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.transactions)

    @property
    def selected_count(self) -> int:
        return sum(1 for row in self.transactions if row.is_selected)

    @property
    def has_warnings(self) -> bool:
        return bool(self.validation_warnings)

    @property
    def has_duplicates(self) -> bool:
        return self.duplicate_count > 0

    @property
    def total_income(self) -> int:
        return sum(
            row.transaction.amount
            for row in self.transactions
            if row.is_selected and row.transaction.amount > 0
        )

    @property
    def total_expenses(self) -> int:
        return sum(
            row.transaction.amount
            for row in self.transactions
            if row.is_selected and row.transaction.amount < 0
        )


@dataclass(frozen=True)
class ImportConfirmationResult:
    saved_count: int
    skipped_count: int


@dataclass(frozen=True)
class CategorizationBatchResult:
    """Outcome of running the categorization cascade over a batch."""

    results: list[CategorizationResult]
    uncategorized_ids: list[str]
    local_count: int = 0
    tier2_count: int = 0
    tier3_count: int = 0

    def by_transaction_id(self) -> dict[str, CategorizationResult]:
        return {result.transaction_id: result for result in self.results}
