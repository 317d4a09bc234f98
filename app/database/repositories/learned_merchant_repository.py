from typing import Any

from psycopg.rows import dict_row

from app.categorization.models import LearnedMerchant, LearnedMerchantSource
from app.database.connection import get_connection
from app.database.repositories.base import BaseLearnedMerchantRepository

_COLUMNS = (
    "id, merchant_pattern, category_id, confidence, source, "
    "sample_count, last_used_at, created_at"
)


def _to_model(row: dict[str, Any]) -> LearnedMerchant:
    return LearnedMerchant(
        id=row["id"],
        merchant_pattern=row["merchant_pattern"],
        category_id=row["category_id"],
        confidence=float(row["confidence"]),
        source=LearnedMerchantSource(row["source"]),
        sample_count=row["sample_count"],
        last_used_at=row["last_used_at"],
        created_at=row["created_at"],
    )


class LearnedMerchantRepository(BaseLearnedMerchantRepository):
    """Database operations for the learned_merchants table."""

    def save(self, merchant: LearnedMerchant) -> None:
        with get_connection() as conn:
            conn.execute(
                f"""
                INSERT INTO learned_merchants ({_COLUMNS})
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    merchant.id,
                    merchant.merchant_pattern,
                    merchant.category_id,
                    merchant.confidence,
                    merchant.source.value,
                    merchant.sample_count,
                    merchant.last_used_at,
                    merchant.created_at,
                ),
            )
            conn.commit()

    def update(self, merchant: LearnedMerchant) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE learned_merchants
                SET merchant_pattern = %s,
                    category_id = %s,
                    confidence = %s,
                    source = %s,
                    sample_count = %s,
                    last_used_at = %s
                WHERE id = %s
                """,
                (
                    merchant.merchant_pattern,
                    merchant.category_id,
                    merchant.confidence,
                    merchant.source.value,
                    merchant.sample_count,
                    merchant.last_used_at,
                    merchant.id,
                ),
            )
            conn.commit()

    def get_by_pattern(self, pattern: str) -> LearnedMerchant | None:
        rows = self._fetch(
            f"SELECT {_COLUMNS} FROM learned_merchants WHERE merchant_pattern = %s",
            (pattern,),
        )
        return rows[0] if rows else None

    def find_match(self, description: str) -> LearnedMerchant | None:
        if not description.strip():
            return None
        rows = self._fetch(
            f"""
            SELECT {_COLUMNS} FROM learned_merchants
            WHERE merchant_pattern <> ''
              AND POSITION(UPPER(merchant_pattern) IN UPPER(%s)) > 0
            ORDER BY confidence DESC, sample_count DESC
            LIMIT 1
            """,
            (description,),
        )
        return rows[0] if rows else None

    def get_all(self) -> list[LearnedMerchant]:
        return self._fetch(
            f"SELECT {_COLUMNS} FROM learned_merchants ORDER BY last_used_at DESC", ()
        )

    def get_high_confidence(self, min_confidence: float = 0.85) -> list[LearnedMerchant]:
        return self._fetch(
            f"""
            SELECT {_COLUMNS} FROM learned_merchants
            WHERE confidence >= %s
            ORDER BY confidence DESC
            """,
            (min_confidence,),
        )

    def get_by_source(self, source: LearnedMerchantSource) -> list[LearnedMerchant]:
        return self._fetch(
            f"""
            SELECT {_COLUMNS} FROM learned_merchants
            WHERE source = %s
            ORDER BY last_used_at DESC
            """,
            (source.value,),
        )

    def delete_by_id(self, merchant_id: str) -> None:
        with get_connection() as conn:
            conn.execute("DELETE FROM learned_merchants WHERE id = %s", (merchant_id,))
            conn.commit()

    @staticmethod
    def _fetch(query: str, params: tuple[Any, ...]) -> list[LearnedMerchant]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
        return [_to_model(row) for row in rows]
