from dataclasses import dataclass
from enum import Enum

from app.extraction.models import PartialTransaction


class TransactionType(str, Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"
    TRANSFER = "TRANSFER"
    FEE = "FEE"
    INTEREST = "INTEREST"
    REFUND = "REFUND"


@dataclass(frozen=True)
class EnhancedTransaction:
    """A partial transaction plus the fields inferred by the remote model."""

    raw_date: str
    amount_minor_units: int
    currency: str | None
    raw_description: str
    merchant: str | None = None
    counterparty_name: str | None = None
    category_hint: str | None = None
    transaction_type: TransactionType | None = None

    @classmethod
    def from_partial(
        cls,
        partial: PartialTransaction,
        *,
        merchant: str | None = None,
        counterparty_name: str | None = None,
        category_hint: str | None = None,
        transaction_type: TransactionType | None = None,
    ) -> "EnhancedTransaction":
        return cls(
            raw_date=partial.raw_date,
            amount_minor_units=partial.amount_minor_units,
            currency=partial.currency,
            raw_description=partial.raw_description,
            merchant=merchant,
            counterparty_name=counterparty_name,
            category_hint=category_hint,
            transaction_type=transaction_type,
        )

    @property
    def is_credit(self) -> bool:
        return self.amount_minor_units > 0

    @property
    def is_debit(self) -> bool:
        return self.amount_minor_units < 0
