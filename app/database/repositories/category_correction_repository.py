from typing import Any

from psycopg.rows import dict_row

from app.database.connection import get_connection
from app.database.repositories.base import BaseCategoryCorrectionRepository
from app.learning.models import CategoryCorrection

_COLUMNS = (
    "id, transaction_id, original_category_id, corrected_category_id, "
    "merchant_name, merchant_normalized, created_at"
)


class CategoryCorrectionRepository(BaseCategoryCorrectionRepository):
    """Database operations for the category_corrections table."""

    def save(self, correction: CategoryCorrection) -> None:
        with get_connection() as conn:
            conn.execute(
                f"""
                INSERT INTO category_corrections ({_COLUMNS})
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    correction.id,
                    correction.transaction_id,
                    correction.original_category_id,
                    correction.corrected_category_id,
                    correction.merchant_name,
                    correction.merchant_normalized,
                    correction.created_at,
                ),
            )
            conn.commit()

    def get_by_merchant_and_category(
        self, merchant_normalized: str, category_id: str
    ) -> list[CategoryCorrection]:
        return self._fetch(
            f"""
            SELECT {_COLUMNS} FROM category_corrections
            WHERE merchant_normalized = %s AND corrected_category_id = %s
            ORDER BY created_at
            """,
            (merchant_normalized, category_id),
        )

    def get_by_transaction_id(self, transaction_id: str) -> list[CategoryCorrection]:
        return self._fetch(
            f"""
            SELECT {_COLUMNS} FROM category_corrections
            WHERE transaction_id = %s
            ORDER BY created_at
            """,
            (transaction_id,),
        )

    def count_by_merchant(self, merchant_normalized: str) -> int:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT COUNT(*) FROM category_corrections WHERE merchant_normalized = %s",
                    (merchant_normalized,),
                )
                row = cur.fetchone()
        return int(row[0]) if row is not None else 0

    @staticmethod
    def _fetch(query: str, params: tuple[Any, ...]) -> list[CategoryCorrection]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
        return [CategoryCorrection(**row) for row in rows]
