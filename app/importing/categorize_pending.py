import threading
from collections.abc import Mapping, Sequence

from app.categorization.ai_categorizer import AICategorizer
from app.categorization.categorizer import TransactionCategorizer
from app.categorization.models import CategorizationResult, TransactionForCategorization
from app.categorization.prompt import DEFAULT_CATEGORIES
from app.importing.models import CategorizationBatchResult
from app.logging.logger import Log
from app.pipeline.exceptions import ImportCancelledError


class CategorizePendingTransactionsUseCase:
    """Runs the full cascade: Tier 0/1 locally, then Tier 2, then Tier 3.

    Each remote tier only sees what the tiers before it left unresolved.
    """

    def __init__(
        self,
        categorizer: TransactionCategorizer,
        tier2: AICategorizer | None = None,
        tier3: AICategorizer | None = None,
        categories: Sequence[str] = DEFAULT_CATEGORIES,
    ) -> None:
        self._categorizer = categorizer
        self._tier2 = tier2
        self._tier3 = tier3
        self._categories = tuple(categories)

    def execute(
        self,
        transactions: Sequence[TransactionForCategorization],
        user_history: Mapping[str, str] | None = None,
        language: str = "ru",
        cancel_event: threading.Event | None = None,
    ) -> CategorizationBatchResult:
        """Categorize a batch.

        Raises:
            ImportCancelledError: if ``cancel_event`` is set before a remote tier runs.
        """
        results, unresolved = self._categorizer.categorize_batch_local(transactions, user_history)
        local_count = len(results)

        tier2_results = self._run_remote(self._tier2, unresolved, language, cancel_event)
        unresolved = self._remaining(unresolved, tier2_results)
        tier3_results = self._run_remote(self._tier3, unresolved, language, cancel_event)
        unresolved = self._remaining(unresolved, tier3_results)

        results = [*results, *tier2_results, *tier3_results]
        Log.info(
            f"Categorized {len(results)}/{len(transactions)} transactions "
            f"(local={local_count}, tier2={len(tier2_results)}, tier3={len(tier3_results)})"
        )
        return CategorizationBatchResult(
            results=results,
            uncategorized_ids=[tx.id for tx in unresolved],
            local_count=local_count,
            tier2_count=len(tier2_results),
            tier3_count=len(tier3_results),
        )

    def _run_remote(
        self,
        categorizer: AICategorizer | None,
        pending: list[TransactionForCategorization],
        language: str,
        cancel_event: threading.Event | None,
    ) -> list[CategorizationResult]:
        if categorizer is None or not pending:
            return []
        if cancel_event is not None and cancel_event.is_set():
            raise ImportCancelledError("Import was cancelled")
        return categorizer.categorize(pending, self._categories, language)

    @staticmethod
    def _remaining(
        pending: list[TransactionForCategorization],
        resolved: list[CategorizationResult],
    ) -> list[TransactionForCategorization]:
        resolved_ids = {result.transaction_id for result in resolved}
        return [tx for tx in pending if tx.id not in resolved_ids]
