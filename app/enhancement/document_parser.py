"""Remote fallback parser used when local extraction finds nothing."""

from __future__ import annotations

import math
from datetime import date
from pathlib import Path
from typing import Any

from app.anonymization.base import BaseAnonymizer
from app.llm.base import BaseCostTracker, BaseLLMProvider
from app.llm.json_parsing import extract_json_array
from app.llm.models import CompletionRequest
from app.llm.prompt_loader import load_prompt_template
from app.logging.logger import Log
from app.pipeline.models import ImportedTransaction, ImportSource

_ESTIMATED_COST_USD = 0.0003
_LLM_CONFIDENCE = 0.85


class LLMDocumentParser:
    """Free-form extraction of a whole document by the remote model.

    The text is anonymized before it leaves the process and placeholders in
    the answer are restored. Every failure yields an empty list.
    """

    def __init__(
        self,
        *,
        provider: BaseLLMProvider | None,
        cost_tracker: BaseCostTracker,
        anonymizer: BaseAnonymizer,
        max_tokens: int = 2048,
        prompt_dir: Path | None = None,
    ) -> None:
        self._provider = provider
        self._cost_tracker = cost_tracker
        self._anonymizer = anonymizer
        self._max_tokens = max_tokens
        self._prompt_template = load_prompt_template("document_parser_prompt.txt", prompt_dir)

    def parse(self, text: str) -> list[ImportedTransaction]:
        if not text or not text.strip():
            return []
        if self._provider is None or not self._provider.is_available():
            Log.debug("Document parser: no provider available")
            return []
        if not self._cost_tracker.try_reserve(_ESTIMATED_COST_USD):
            Log.warning("Document parser: AI budget exceeded")
            return []

        try:
            anonymized = self._anonymizer.anonymize(text)
            response = self._provider.complete(
                CompletionRequest(
                    prompt=self._prompt_template.format(
                        document_text=anonymized.anonymized_text
                    ),
                    max_tokens=self._max_tokens,
                    temperature=0.1,
                )
            )
        except Exception as exc:
            self._cost_tracker.release(_ESTIMATED_COST_USD)
            Log.error(f"Document parser: completion failed: {exc}")
            return []

        self._cost_tracker.record(
            response.input_tokens,
            response.output_tokens,
            response.model,
            reserved_usd=_ESTIMATED_COST_USD,
        )

        items = extract_json_array(response.content)
        if items is None:
            return []

        transactions = [
            tx
            for tx in (self._build(item, anonymized.mapping) for item in items)
            if tx is not None
        ]
        Log.info(f"Document parser: extracted {len(transactions)} transactions")
        return transactions

    def _build(self, item: Any, mapping: dict[str, str]) -> ImportedTransaction | None:
        if not isinstance(item, dict):
            return None
        try:
            tx_date = date.fromisoformat(str(item["date"]))
            amount = item["amount"]
            if isinstance(amount, bool) or not isinstance(amount, (int, float)):
                raise ValueError(f"amount must be a number, got {amount!r}")
            if not math.isfinite(amount):
                raise ValueError(f"amount must be finite, got {amount!r}")
            minor_units = int(round(amount))
            description = str(item.get("description") or "")
        except (KeyError, TypeError, ValueError) as exc:
            Log.warning(f"Document parser: skipping malformed item: {exc}")
            return None

        merchant = item.get("merchant")
        currency = item.get("currency")
        return ImportedTransaction(
            date=tx_date,
            amount=minor_units,
            description=self._anonymizer.deanonymize(description, mapping),
            merchant=(
                self._anonymizer.deanonymize(merchant, mapping)
                if isinstance(merchant, str) and merchant
                else None
            ),
            currency=currency.upper() if isinstance(currency, str) and currency else None,
            confidence=_LLM_CONFIDENCE,
            source=ImportSource.LLM_ENHANCED,
        )
