"""Remote enrichment of locally extracted transactions."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from app.enhancement.models import EnhancedTransaction, TransactionType
from app.extraction.models import PartialTransaction
from app.llm.base import BaseCostTracker, BaseLLMProvider
from app.llm.json_parsing import extract_json_array
from app.llm.models import CompletionRequest
from app.llm.prompt_loader import load_json_schema, load_prompt_template
from app.logging.logger import Log

_ESTIMATED_COST_PER_CALL_USD = 0.0003
_ESTIMATED_COST_PER_TRANSACTION_USD = 0.00005


class CloudTransactionEnhancer:
    """Asks the remote model for merchant, counterparty, category hint and type.

    The input must already be anonymized. Any failure degrades to the input
    transactions with every enhancement field set to None: this class never
    raises, never drops and never reorders transactions.
    """

    def __init__(
        self,
        *,
        provider: BaseLLMProvider | None,
        cost_tracker: BaseCostTracker,
        max_tokens: int = 2048,
        prompt_dir: Path | None = None,
    ) -> None:
        self._provider = provider
        self._cost_tracker = cost_tracker
        self._max_tokens = max_tokens
        self._prompt_template = load_prompt_template("enhancement_prompt.txt", prompt_dir)
        self._json_schema = load_json_schema("enhancement_schema.json", prompt_dir)

    def enhance(self, transactions: list[PartialTransaction]) -> list[EnhancedTransaction]:
        if not transactions:
            return []
        if self._provider is None or not self._provider.is_available():
            Log.debug("Enhancer: no provider available, skipping")
            return self._unenhanced(transactions)

        estimated = self.estimate_cost(len(transactions))
        if not self._cost_tracker.try_reserve(estimated):
            Log.warning("Enhancer: AI budget exceeded, skipping")
            return self._unenhanced(transactions)

        try:
            response = self._provider.complete(
                CompletionRequest(
                    prompt=self.build_prompt(transactions),
                    max_tokens=self._max_tokens,
                    temperature=0.1,
                    json_schema=self._json_schema,
                )
            )
        except Exception as exc:
            self._cost_tracker.release(estimated)
            Log.error(f"Enhancer: completion failed, using local data only: {exc}")
            return self._unenhanced(transactions)

        self._cost_tracker.record(
            response.input_tokens,
            response.output_tokens,
            response.model,
            reserved_usd=estimated,
        )

        items = extract_json_array(response.content)
        if items is None:
            return self._unenhanced(transactions)

        enhancements = self._index_enhancements(items)
        Log.info(f"Enhancer: {len(enhancements)}/{len(transactions)} transactions enriched")
        return [
            self._merge(tx, enhancements.get(i)) for i, tx in enumerate(transactions)
        ]

    @staticmethod
    def estimate_cost(count: int) -> float:
        return _ESTIMATED_COST_PER_CALL_USD + count * _ESTIMATED_COST_PER_TRANSACTION_USD

    def build_prompt(self, transactions: list[PartialTransaction]) -> str:
        lines = [
            f"{i}: {tx.raw_date} | {tx.amount_formatted} {tx.currency or ''} | "
            f"{tx.raw_description}"
            for i, tx in enumerate(transactions)
        ]
        return self._prompt_template.format(transactions="\n".join(lines))

    # ------------------------------------------------------------------
    # Merging
    # ------------------------------------------------------------------

    @staticmethod
    def _index_enhancements(items: list[Any]) -> dict[int, dict[str, Any]]:
        indexed: dict[int, dict[str, Any]] = {}
        for item in items:
            if not isinstance(item, dict):
                continue
            index = item.get("index")
            if isinstance(index, int) and not isinstance(index, bool):
                indexed.setdefault(index, item)
        return indexed

    @classmethod
    def _merge(
        cls,
        tx: PartialTransaction,
        item: dict[str, Any] | None,
    ) -> EnhancedTransaction:
        if item is None:
            return EnhancedTransaction.from_partial(tx)
        return EnhancedTransaction.from_partial(
            tx,
            merchant=cls._optional_str(item.get("merchant")),
            counterparty_name=cls._optional_str(item.get("counterpartyName")),
            category_hint=cls._optional_str(item.get("categoryHint")),
            transaction_type=cls._transaction_type(item.get("transactionType")),
        )

    @staticmethod
    def _optional_str(value: Any) -> str | None:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    @staticmethod
    def _transaction_type(value: Any) -> TransactionType | None:
        if not isinstance(value, str):
            return None
        try:
            return TransactionType(value.upper())
        except ValueError:
            return None

    @staticmethod
    def _unenhanced(transactions: list[PartialTransaction]) -> list[EnhancedTransaction]:
        return [EnhancedTransaction.from_partial(tx) for tx in transactions]
