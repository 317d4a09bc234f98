import pytest

from app.categorization.merchant_database import MerchantDatabase
from app.categorization.models import CategorizationSource
from app.categorization.rule_based import RuleBasedCategorizer


@pytest.fixture
def categorizer() -> RuleBasedCategorizer:
    return RuleBasedCategorizer(MerchantDatabase())


class TestCategorize:
    def test_merchant_database_beats_user_history(
        self, categorizer: RuleBasedCategorizer
    ) -> None:
        result = categorizer.categorize("t1", "MAGNUM", {"MAGNUM": "dining"})
        assert result is not None
        assert result.category_id == "groceries"
        assert result.source == CategorizationSource.MERCHANT_DATABASE

    def test_user_history_matches_case_insensitively(
        self, categorizer: RuleBasedCategorizer
    ) -> None:
        result = categorizer.categorize("t1", "Кофейня Ромашка", {"ромашка": "coffee_shops"})
        assert result is not None
        assert result.category_id == "coffee_shops"
        assert result.confidence == pytest.approx(0.92)
        assert result.source == CategorizationSource.USER_HISTORY

    @pytest.mark.parametrize(
        "description, category, confidence",
        [
            ("ЗАРПЛАТА ЗА ЯНВАРЬ", "salary", 0.95),
            ("ATM WITHDRAWAL 123", "transfer", 0.88),
            ("Перевод Иванову", "transfer", 0.80),
            ("Cashback за покупки", "other", 0.90),
        ],
    )
    def test_keyword_rules(
        self,
        categorizer: RuleBasedCategorizer,
        description: str,
        category: str,
        confidence: float,
    ) -> None:
        result = categorizer.categorize("t1", description)
        assert result is not None
        assert result.category_id == category
        assert result.confidence == pytest.approx(confidence)
        assert result.source == CategorizationSource.RULE_BASED

    def test_atm_rule_needs_word_boundary(self, categorizer: RuleBasedCategorizer) -> None:
        assert categorizer.categorize("t1", "TREATMENT CENTER") is None

    def test_blank_description(self, categorizer: RuleBasedCategorizer) -> None:
        assert categorizer.categorize("t1", "  ", {"X": "other"}) is None
