from collections.abc import Callable, Mapping, Sequence
from dataclasses import replace
from datetime import datetime

from app.categorization.merchant_normalizer import MerchantNormalizer
from app.categorization.models import (
    HIGH_CONFIDENCE_THRESHOLD,
    CategorizationResult,
    CategorizationSource,
    CategorizationStats,
    LearnedMerchant,
    TransactionForCategorization,
)
from app.categorization.rule_based import RuleBasedCategorizer
from app.database.repositories.base import BaseLearnedMerchantRepository
from app.logging.logger import Log

USER_LEARNED_MIN_CONFIDENCE = 0.95


class TransactionCategorizer:
    """Local categorization: Tier 0 learned mappings, then Tier 1 rules.

    Returns None when no local tier matches; the caller decides whether
    to fall through to the remote tiers.
    """

    def __init__(
        self,
        learned_merchant_repository: BaseLearnedMerchantRepository,
        rule_based_categorizer: RuleBasedCategorizer,
        normalizer: MerchantNormalizer,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._learned = learned_merchant_repository
        self._rules = rule_based_categorizer
        self._normalizer = normalizer
        self._clock = clock

    def categorize(
        self,
        transaction_id: str,
        description: str,
        user_history: Mapping[str, str] | None = None,
    ) -> CategorizationResult | None:
        text = description.strip()
        if not text:
            return None

        learned = self._find_learned(text)
        if learned is not None:
            self._touch(learned)
            Log.debug(f"Tier 0 match for {transaction_id}: {learned.category_id}")
            return CategorizationResult(
                transaction_id=transaction_id,
                category_id=learned.category_id,
                confidence=max(learned.confidence, USER_LEARNED_MIN_CONFIDENCE),
                source=CategorizationSource.USER_LEARNED,
            )

        return self._rules.categorize(transaction_id, text, user_history)

    def categorize_batch_local(
        self,
        transactions: Sequence[TransactionForCategorization],
        user_history: Mapping[str, str] | None = None,
    ) -> tuple[list[CategorizationResult], list[TransactionForCategorization]]:
        """Split transactions into local results and the ones left unresolved."""
        results: list[CategorizationResult] = []
        unresolved: list[TransactionForCategorization] = []
        for transaction in transactions:
            result = self.categorize(transaction.id, transaction.match_text, user_history)
            if result is None:
                unresolved.append(transaction)
            else:
                results.append(result)
        return results, unresolved

    def get_stats(self) -> CategorizationStats:
        mappings = self._learned.get_all()
        return CategorizationStats(
            total_learned_mappings=len(mappings),
            high_confidence_mappings=sum(
                1 for mapping in mappings if mapping.confidence >= HIGH_CONFIDENCE_THRESHOLD
            ),
            total_samples=sum(mapping.sample_count for mapping in mappings),
        )

    def _find_learned(self, text: str) -> LearnedMerchant | None:
        learned = self._learned.find_match(text)
        if learned is not None:
            return learned
        normalized = self._normalizer.normalize(text)
        if normalized and normalized != text.upper():
            return self._learned.find_match(normalized)
        return None

    def _touch(self, learned: LearnedMerchant) -> None:
        self._learned.update(
            replace(
                learned,
                last_used_at=self._clock(),
                sample_count=learned.sample_count + 1,
            )
        )
