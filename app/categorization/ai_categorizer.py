from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path
from typing import Any, ClassVar

from app.anonymization.base import BaseAnonymizer
from app.categorization.models import (
    CategorizationResult,
    CategorizationSource,
    TransactionForCategorization,
)
from app.categorization.prompt import DEFAULT_CATEGORIES, CategorizationPromptBuilder
from app.llm.base import BaseCostTracker, BaseLLMProvider
from app.llm.json_parsing import extract_json_array
from app.llm.models import CompletionRequest
from app.logging.logger import Log


class AICategorizer:
    """Batch categorization by a remote model (Tier 2, or Tier 3 with a stronger model).

    Descriptions are anonymized before they leave the process. Results
    below ``min_confidence`` are dropped. Any provider, budget or parsing
    failure yields fewer results, never an exception.
    """

    MAX_BATCH_SIZE: ClassVar[int] = 10
    ESTIMATED_COST_PER_TRANSACTION_USD: ClassVar[float] = 0.00045

    def __init__(
        self,
        *,
        provider: BaseLLMProvider | None,
        cost_tracker: BaseCostTracker,
        anonymizer: BaseAnonymizer,
        source: CategorizationSource = CategorizationSource.LLM_TIER2,
        min_confidence: float = 0.70,
        batch_size: int = MAX_BATCH_SIZE,
        max_tokens: int = 1024,
        prompt_dir: Path | None = None,
    ) -> None:
        self._provider = provider
        self._cost_tracker = cost_tracker
        self._anonymizer = anonymizer
        self._source = source
        self._min_confidence = min_confidence
        self._batch_size = max(1, min(batch_size, self.MAX_BATCH_SIZE))
        self._max_tokens = max_tokens
        self._prompt_builder = CategorizationPromptBuilder(prompt_dir)

    @property
    def source(self) -> CategorizationSource:
        return self._source

    def is_available(self) -> bool:
        return (
            self._provider is not None
            and self._provider.is_available()
            and self._cost_tracker.can_execute(self.estimate_cost(1))
        )

    @classmethod
    def estimate_cost(cls, count: int) -> float:
        return count * cls.ESTIMATED_COST_PER_TRANSACTION_USD

    def categorize(
        self,
        transactions: Sequence[TransactionForCategorization],
        categories: Sequence[str] = DEFAULT_CATEGORIES,
        language: str = "ru",
    ) -> list[CategorizationResult]:
        candidates = [tx for tx in transactions if tx.description.strip()]
        if not candidates or self._provider is None or not self._provider.is_available():
            return []

        results: list[CategorizationResult] = []
        for start in range(0, len(candidates), self._batch_size):
            batch = candidates[start:start + self._batch_size]
            estimated = self.estimate_cost(len(batch))
            if not self._cost_tracker.try_reserve(estimated):
                Log.warning(f"{self._source.value}: AI budget exceeded, stopping")
                break
            results.extend(
                self._categorize_batch(self._provider, batch, categories, language, estimated)
            )

        Log.info(f"{self._source.value}: categorized {len(results)}/{len(candidates)}")
        return results

    def _categorize_batch(
        self,
        provider: BaseLLMProvider,
        batch: list[TransactionForCategorization],
        categories: Sequence[str],
        language: str,
        estimated: float,
    ) -> list[CategorizationResult]:
        try:
            anonymized = self._anonymize(batch)
            response = provider.complete(
                CompletionRequest(
                    prompt=self._prompt_builder.build(anonymized, categories, language),
                    max_tokens=self._max_tokens,
                    temperature=0.1,
                )
            )
        except Exception as exc:
            self._cost_tracker.release(estimated)
            Log.error(f"{self._source.value}: batch failed: {exc}")
            return []

        self._cost_tracker.record(
            response.input_tokens,
            response.output_tokens,
            response.model,
            reserved_usd=estimated,
        )

        items = extract_json_array(response.content)
        if items is None:
            return []
        allowed_ids = {tx.id for tx in batch}
        allowed_categories = set(categories)
        results: dict[str, CategorizationResult] = {}
        for item in items:
            result = self._to_result(item, allowed_ids, allowed_categories)
            if result is not None and result.transaction_id not in results:
                results[result.transaction_id] = result
        return list(results.values())

    def _anonymize(
        self, batch: list[TransactionForCategorization]
    ) -> list[TransactionForCategorization]:
        joined = "\n".join(" ".join(tx.description.split()) for tx in batch)
        lines = self._anonymizer.anonymize(joined).anonymized_text.split("\n")
        return [replace(tx, description=line) for tx, line in zip(batch, lines)]

    def _to_result(
        self,
        item: Any,
        allowed_ids: set[str],
        allowed_categories: set[str],
    ) -> CategorizationResult | None:
        if not isinstance(item, dict):
            return None
        transaction_id = item.get("transactionId")
        category_id = item.get("categoryId")
        confidence = item.get("confidence")
        if transaction_id is None or str(transaction_id) not in allowed_ids:
            return None
        if not isinstance(category_id, str) or category_id not in allowed_categories:
            return None
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            return None
        if confidence < self._min_confidence:
            return None
        return CategorizationResult(
            transaction_id=str(transaction_id),
            category_id=category_id,
            confidence=float(confidence),
            source=self._source,
        )
