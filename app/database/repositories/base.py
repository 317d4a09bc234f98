from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import date

from app.categorization.models import LearnedMerchant, LearnedMerchantSource
from app.database.models import TransactionRecord
from app.learning.models import CategoryCorrection
from app.pipeline.models import ImportedTransaction


class BaseLearnedMerchantRepository(ABC):
    """Contract for learned merchant mapping storage."""

    @abstractmethod
    def save(self, merchant: LearnedMerchant) -> None: ...

    @abstractmethod
    def update(self, merchant: LearnedMerchant) -> None: ...

    @abstractmethod
    def get_by_pattern(self, pattern: str) -> LearnedMerchant | None: ...

    @abstractmethod
    def find_match(self, description: str) -> LearnedMerchant | None:
        """Best mapping whose pattern occurs in the description, case-insensitively.

        Ties are broken by confidence, then sample count.
        """

    @abstractmethod
    def get_all(self) -> list[LearnedMerchant]: ...

    @abstractmethod
    def get_high_confidence(self, min_confidence: float = 0.85) -> list[LearnedMerchant]: ...

    @abstractmethod
    def get_by_source(self, source: LearnedMerchantSource) -> list[LearnedMerchant]: ...

    @abstractmethod
    def delete_by_id(self, merchant_id: str) -> None: ...


class BaseCategoryCorrectionRepository(ABC):
    """Contract for the category correction audit trail."""

    @abstractmethod
    def save(self, correction: CategoryCorrection) -> None: ...

    @abstractmethod
    def get_by_merchant_and_category(
        self, merchant_normalized: str, category_id: str
    ) -> list[CategoryCorrection]: ...

    @abstractmethod
    def get_by_transaction_id(self, transaction_id: str) -> list[CategoryCorrection]: ...

    @abstractmethod
    def count_by_merchant(self, merchant_normalized: str) -> int: ...


class BaseTransactionRepository(ABC):
    """Contract for the stored ledger used by duplicate detection and saving."""

    @abstractmethod
    def get_by_date_range(self, account_id: str, start: date, end: date) -> list[TransactionRecord]:
        """Transactions of one account with start <= date <= end."""

    @abstractmethod
    def insert(self, account_id: str, transactions: Sequence[ImportedTransaction]) -> list[str]:
        """Persist transactions in one unit of work and return their new ids."""
