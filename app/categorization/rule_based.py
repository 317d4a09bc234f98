import re
from collections.abc import Mapping
from typing import ClassVar

from app.categorization.merchant_database import MerchantDatabase
from app.categorization.models import CategorizationResult, CategorizationSource
from app.logging.logger import Log

USER_HISTORY_CONFIDENCE = 0.92
RULE_CONFIDENCE = 0.88


class RuleBasedCategorizer:
    """Tier 1: merchant database, then user history, then keyword rules.

    The merchant database always outranks user history, even when both
    match the same description.
    """

    RULES: ClassVar[tuple[tuple[re.Pattern[str], str, float], ...]] = (
        (re.compile(r"\bATM\b|БАНКОМАТ", re.IGNORECASE), "transfer", RULE_CONFIDENCE),
        (re.compile(r"CASH.*WITHDRAW|СНЯТИЕ.*НАЛИЧ", re.IGNORECASE), "transfer", RULE_CONFIDENCE),
        (re.compile(r"ЗАРПЛАТА|SALARY|ЗАРАБОТН|ЖАЛАҚЫ", re.IGNORECASE), "salary", 0.95),
        (re.compile(r"ПЕНСИЯ|PENSION|ЗЕЙНЕТАҚЫ", re.IGNORECASE), "salary", 0.95),
        (re.compile(r"СТИПЕНДИ|SCHOLARSHIP", re.IGNORECASE), "salary", 0.90),
        (re.compile(r"ДИВИДЕНД|DIVIDEND", re.IGNORECASE), "salary", 0.90),
        (re.compile(r"ПЕРЕВОД|TRANSFER|АУДАРЫМ", re.IGNORECASE), "transfer", 0.80),
        (re.compile(r"ПРОЦЕНТ|INTEREST", re.IGNORECASE), "other", 0.85),
        (re.compile(r"ВОЗВРАТ|REFUND", re.IGNORECASE), "other", 0.85),
        (re.compile(r"КЭШБЭК|КЕШБЕК|CASHBACK", re.IGNORECASE), "other", 0.90),
    )

    def __init__(self, merchant_database: MerchantDatabase) -> None:
        self._merchant_database = merchant_database

    def categorize(
        self,
        transaction_id: str,
        description: str,
        user_history: Mapping[str, str] | None = None,
    ) -> CategorizationResult | None:
        text = description.strip()
        if not text:
            return None

        result = self._merchant_database.find_match(text, transaction_id)
        if result is not None:
            Log.debug(f"Tier 1a match for {transaction_id}: {result.category_id}")
            return result

        result = self._find_in_user_history(transaction_id, text, user_history or {})
        if result is not None:
            Log.debug(f"Tier 1b match for {transaction_id}: {result.category_id}")
            return result

        result = self._apply_rules(transaction_id, text)
        if result is not None:
            Log.debug(f"Tier 1c match for {transaction_id}: {result.category_id}")
        return result

    @staticmethod
    def _find_in_user_history(
        transaction_id: str,
        text: str,
        user_history: Mapping[str, str],
    ) -> CategorizationResult | None:
        upper = text.upper()
        for pattern, category_id in user_history.items():
            if pattern.strip() and pattern.strip().upper() in upper:
                return CategorizationResult(
                    transaction_id=transaction_id,
                    category_id=category_id,
                    confidence=USER_HISTORY_CONFIDENCE,
                    source=CategorizationSource.USER_HISTORY,
                )
        return None

    def _apply_rules(self, transaction_id: str, text: str) -> CategorizationResult | None:
        for regex, category_id, confidence in self.RULES:
            if regex.search(text):
                return CategorizationResult(
                    transaction_id=transaction_id,
                    category_id=category_id,
                    confidence=confidence,
                    source=CategorizationSource.RULE_BASED,
                )
        return None
