import threading
from unittest.mock import MagicMock

import pytest

from app.categorization.models import (
    CategorizationResult,
    CategorizationSource,
    TransactionForCategorization,
)
from app.importing.categorize_pending import CategorizePendingTransactionsUseCase
from app.pipeline.exceptions import ImportCancelledError


def _tx(tx_id: str) -> TransactionForCategorization:
    return TransactionForCategorization(id=tx_id, description=f"Payment {tx_id}")


def _result(tx_id: str, source: CategorizationSource) -> CategorizationResult:
    return CategorizationResult(
        transaction_id=tx_id, category_id="other", confidence=0.9, source=source
    )


def _local(resolved: list[str], unresolved: list[str]) -> MagicMock:
    categorizer = MagicMock()
    categorizer.categorize_batch_local.return_value = (
        [_result(tx_id, CategorizationSource.RULE_BASED) for tx_id in resolved],
        [_tx(tx_id) for tx_id in unresolved],
    )
    return categorizer


def _remote(source: CategorizationSource, resolves: list[str]) -> MagicMock:
    tier = MagicMock()
    tier.categorize.return_value = [_result(tx_id, source) for tx_id in resolves]
    return tier


class TestExecute:
    def test_each_tier_sees_only_unresolved(self) -> None:
        tier2 = _remote(CategorizationSource.LLM_TIER2, ["b"])
        tier3 = _remote(CategorizationSource.LLM_TIER3, ["c"])
        use_case = CategorizePendingTransactionsUseCase(_local(["a"], ["b", "c", "d"]), tier2, tier3)

        result = use_case.execute([_tx(x) for x in "abcd"])

        assert [tx.id for tx in tier2.categorize.call_args.args[0]] == ["b", "c", "d"]
        assert [tx.id for tx in tier3.categorize.call_args.args[0]] == ["c", "d"]
        assert result.uncategorized_ids == ["d"]
        assert (result.local_count, result.tier2_count, result.tier3_count) == (1, 1, 1)
        assert set(result.by_transaction_id()) == {"a", "b", "c"}

    def test_remote_tiers_skipped_when_all_resolved_locally(self) -> None:
        tier2 = _remote(CategorizationSource.LLM_TIER2, [])
        use_case = CategorizePendingTransactionsUseCase(_local(["a"], []), tier2)
        result = use_case.execute([_tx("a")])
        tier2.categorize.assert_not_called()
        assert result.uncategorized_ids == []

    def test_without_remote_tiers(self) -> None:
        use_case = CategorizePendingTransactionsUseCase(_local([], ["a", "b"]))
        result = use_case.execute([_tx("a"), _tx("b")])
        assert result.results == []
        assert result.uncategorized_ids == ["a", "b"]

    def test_passes_language_and_categories(self) -> None:
        tier2 = _remote(CategorizationSource.LLM_TIER2, [])
        use_case = CategorizePendingTransactionsUseCase(
            _local([], ["a"]), tier2, categories=["groceries", "other"]
        )
        use_case.execute([_tx("a")], language="en")
        assert tier2.categorize.call_args.args[1:] == (("groceries", "other"), "en")

    def test_cancel_before_remote_tier(self) -> None:
        tier2 = _remote(CategorizationSource.LLM_TIER2, [])
        cancel = threading.Event()
        cancel.set()
        use_case = CategorizePendingTransactionsUseCase(_local([], ["a"]), tier2)
        with pytest.raises(ImportCancelledError):
            use_case.execute([_tx("a")], cancel_event=cancel)
        tier2.categorize.assert_not_called()
