from dataclasses import dataclass
from datetime import date, datetime


@dataclass
class TransactionRecord:
    """Represents a row from the transactions table."""

    id: str
    account_id: str
    date: date
    amount: int
    description: str | None = None
    merchant: str | None = None
    category_id: str | None = None
    currency: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
