import uuid
from collections.abc import Sequence
from datetime import date

from psycopg.rows import dict_row

from app.database.connection import get_connection
from app.database.models import TransactionRecord
from app.database.repositories.base import BaseTransactionRepository
from app.pipeline.models import ImportedTransaction


class TransactionRepository(BaseTransactionRepository):
    """Database operations for the transactions table."""

    def get_by_date_range(self, account_id: str, start: date, end: date) -> list[TransactionRecord]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, account_id, date, amount, description, merchant,
                           category_id, currency, created_at, updated_at
                    FROM transactions
                    WHERE account_id = %s
                      AND date BETWEEN %s AND %s
                    ORDER BY date, id
                    """,
                    (account_id, start, end),
                )
                rows = cur.fetchall()
        return [TransactionRecord(**row) for row in rows]

    def insert(self, account_id: str, transactions: Sequence[ImportedTransaction]) -> list[str]:
        """Insert all transactions in one database transaction.

        Raises:
            psycopg.Error: if any row fails; nothing is committed then.
        """
        ids = [str(uuid.uuid4()) for _ in transactions]
        if not ids:
            return []
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.executemany(
                    """
                    INSERT INTO transactions
                        (id, account_id, date, amount, description, merchant, category_id, currency)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    [
                        (
                            transaction_id,
                            account_id,
                            tx.date,
                            tx.amount,
                            tx.description,
                            tx.merchant,
                            tx.category_id,
                            tx.currency,
                        )
                        for transaction_id, tx in zip(ids, transactions)
                    ],
                )
            conn.commit()
        return ids
