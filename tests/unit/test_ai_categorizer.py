import json
from unittest.mock import MagicMock

import pytest

from app.anonymization.models import AnonymizationResult
from app.categorization.ai_categorizer import AICategorizer
from app.categorization.models import CategorizationSource, TransactionForCategorization
from app.llm.exceptions import LLMNetworkError
from app.llm.models import CompletionResponse

CARD = "4400 1234 5678 9012"


def _transactions(count: int) -> list[TransactionForCategorization]:
    return [
        TransactionForCategorization(id=f"t{i}", description=f"Shop {i}", amount=-1000)
        for i in range(count)
    ]


def _response(items: list[dict[str, object]] | str) -> CompletionResponse:
    content = items if isinstance(items, str) else json.dumps(items)
    return CompletionResponse(
        content=content, input_tokens=200, output_tokens=50, model="gpt-4o-mini"
    )


def _provider(*responses: CompletionResponse) -> MagicMock:
    provider = MagicMock()
    provider.is_available.return_value = True
    provider.complete.side_effect = list(responses)
    return provider


def _tracker(*allow: bool) -> MagicMock:
    tracker = MagicMock()
    if allow:
        tracker.try_reserve.side_effect = list(allow)
    else:
        tracker.try_reserve.return_value = True
    tracker.can_execute.return_value = True
    return tracker


def _anonymizer() -> MagicMock:
    anonymizer = MagicMock()
    anonymizer.anonymize.side_effect = lambda text, *args, **kwargs: AnonymizationResult(
        anonymized_text=text.replace(CARD, "[CARD_NUMBER_1]")
    )
    return anonymizer


def _categorizer(provider: MagicMock, tracker: MagicMock | None = None, **kwargs) -> AICategorizer:
    return AICategorizer(
        provider=provider,
        cost_tracker=tracker or _tracker(),
        anonymizer=_anonymizer(),
        **kwargs,
    )


class TestCategorize:
    def test_parses_results(self) -> None:
        provider = _provider(
            _response(
                [
                    {"transactionId": "t0", "categoryId": "groceries", "confidence": 0.9},
                    {"transactionId": "t1", "categoryId": "dining", "confidence": 0.8},
                ]
            )
        )
        results = _categorizer(provider).categorize(_transactions(2))
        assert [(r.transaction_id, r.category_id) for r in results] == [
            ("t0", "groceries"),
            ("t1", "dining"),
        ]
        assert all(r.source == CategorizationSource.LLM_TIER2 for r in results)

    def test_drops_low_confidence(self) -> None:
        provider = _provider(
            _response([{"transactionId": "t0", "categoryId": "groceries", "confidence": 0.65}])
        )
        assert _categorizer(provider).categorize(_transactions(1)) == []

    def test_drops_unknown_category_and_id(self) -> None:
        provider = _provider(
            _response(
                [
                    {"transactionId": "t0", "categoryId": "crypto", "confidence": 0.9},
                    {"transactionId": "t9", "categoryId": "groceries", "confidence": 0.9},
                ]
            )
        )
        assert _categorizer(provider).categorize(_transactions(1)) == []

    def test_keeps_first_result_per_transaction(self) -> None:
        provider = _provider(
            _response(
                [
                    {"transactionId": "t0", "categoryId": "groceries", "confidence": 0.9},
                    {"transactionId": "t0", "categoryId": "dining", "confidence": 0.95},
                ]
            )
        )
        results = _categorizer(provider).categorize(_transactions(1))
        assert len(results) == 1
        assert results[0].category_id == "groceries"

    def test_malformed_response(self) -> None:
        provider = _provider(_response("I cannot categorize these."))
        assert _categorizer(provider).categorize(_transactions(2)) == []

    def test_batches_of_ten(self) -> None:
        provider = _provider(_response([]), _response([]), _response([]))
        _categorizer(provider).categorize(_transactions(23))
        assert provider.complete.call_count == 3

    def test_budget_refusal_stops_remaining_batches(self) -> None:
        provider = _provider(
            _response([{"transactionId": "t0", "categoryId": "other", "confidence": 0.9}])
        )
        tracker = _tracker(True, False)
        results = _categorizer(provider, tracker).categorize(_transactions(15))
        assert len(results) == 1
        assert provider.complete.call_count == 1

    def test_provider_failure_releases_reservation(self) -> None:
        provider = MagicMock()
        provider.is_available.return_value = True
        provider.complete.side_effect = LLMNetworkError("timeout")
        tracker = _tracker()
        assert _categorizer(provider, tracker).categorize(_transactions(2)) == []
        tracker.release.assert_called_once_with(AICategorizer.estimate_cost(2))
        tracker.record.assert_not_called()

    def test_records_usage(self) -> None:
        tracker = _tracker()
        _categorizer(_provider(_response([])), tracker).categorize(_transactions(4))
        tracker.record.assert_called_once_with(
            200, 50, "gpt-4o-mini", reserved_usd=AICategorizer.estimate_cost(4)
        )

    def test_prompt_is_anonymized(self) -> None:
        provider = _provider(_response([]))
        transactions = [TransactionForCategorization(id="t0", description=f"Transfer {CARD}")]
        _categorizer(provider).categorize(transactions)
        prompt = provider.complete.call_args.args[0].prompt
        assert CARD not in prompt
        assert "[CARD_NUMBER_1]" in prompt

    def test_skips_blank_descriptions(self) -> None:
        provider = _provider()
        transactions = [TransactionForCategorization(id="t0", description="  ")]
        assert _categorizer(provider).categorize(transactions) == []
        provider.complete.assert_not_called()

    def test_unavailable_provider(self) -> None:
        provider = MagicMock()
        provider.is_available.return_value = False
        tracker = _tracker()
        assert _categorizer(provider, tracker).categorize(_transactions(1)) == []
        tracker.try_reserve.assert_not_called()

    def test_tier3_source(self) -> None:
        provider = _provider(
            _response([{"transactionId": "t0", "categoryId": "other", "confidence": 0.75}])
        )
        categorizer = _categorizer(provider, source=CategorizationSource.LLM_TIER3)
        (result,) = categorizer.categorize(_transactions(1))
        assert result.source == CategorizationSource.LLM_TIER3


class TestAvailability:
    def test_estimate_cost(self) -> None:
        assert AICategorizer.estimate_cost(10) == pytest.approx(0.0045)

    def test_missing_provider(self) -> None:
        categorizer = AICategorizer(provider=None, cost_tracker=_tracker(), anonymizer=_anonymizer())
        assert not categorizer.is_available()

    def test_budget_exhausted(self) -> None:
        tracker = _tracker()
        tracker.can_execute.return_value = False
        assert not _categorizer(_provider(), tracker).is_available()
