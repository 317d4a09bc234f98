from datetime import date

import pytest

from app.database.repositories.transaction_repository import TransactionRepository
from app.pipeline.models import ImportedTransaction


@pytest.mark.integration
class TestTransactionRepository:
    def test_insert_and_read_back(self, account_id: str, db_conn) -> None:
        repo = TransactionRepository()
        ids = repo.insert(
            account_id,
            [
                ImportedTransaction(date(2026, 1, 15), -370000, "Покупка MAGNUM", currency="KZT"),
                ImportedTransaction(
                    date(2026, 1, 16), 15000000, "ЗАРПЛАТА", category_id="salary"
                ),
            ],
        )
        assert len(ids) == 2
        assert len(set(ids)) == 2

        records = repo.get_by_date_range(account_id, date(2026, 1, 15), date(2026, 1, 16))
        assert [record.id for record in records] == ids
        assert records[0].amount == -370000
        assert records[0].currency == "KZT"
        assert records[1].category_id == "salary"

    def test_date_range_is_inclusive_and_per_account(self, account_id: str) -> None:
        repo = TransactionRepository()
        repo.insert(
            account_id,
            [
                ImportedTransaction(date(2026, 1, 10), -100, "A"),
                ImportedTransaction(date(2026, 1, 12), -200, "B"),
                ImportedTransaction(date(2026, 1, 14), -300, "C"),
            ],
        )
        records = repo.get_by_date_range(account_id, date(2026, 1, 12), date(2026, 1, 14))
        assert [record.description for record in records] == ["B", "C"]
        assert repo.get_by_date_range("no-such-account", date(2026, 1, 1), date(2026, 2, 1)) == []

    def test_insert_nothing(self, account_id: str) -> None:
        assert TransactionRepository().insert(account_id, []) == []
