import pytest

from app.categorization.merchant_database import MerchantDatabase
from app.categorization.models import CategorizationSource, MerchantPattern
from app.categorization.prompt import DEFAULT_CATEGORIES


@pytest.fixture(scope="module")
def database() -> MerchantDatabase:
    return MerchantDatabase()


class TestTable:
    def test_has_broad_coverage(self, database: MerchantDatabase) -> None:
        assert len(database.all_patterns()) >= 100

    def test_every_entry_is_high_confidence(self, database: MerchantDatabase) -> None:
        assert all(pattern.confidence >= 0.90 for pattern in database.all_patterns())

    def test_categories_are_known(self, database: MerchantDatabase) -> None:
        assert database.category_ids() <= set(DEFAULT_CATEGORIES)

    def test_counts_by_category(self, database: MerchantDatabase) -> None:
        counts = database.pattern_count_by_category()
        assert sum(counts.values()) == len(database.all_patterns())
        assert counts["groceries"] > 0


class TestFindMatch:
    @pytest.mark.parametrize(
        "description, category",
        [
            ("Покупка MAGNUM ALMATY", "groceries"),
            ("МАГНУМ СУПЕР", "groceries"),
            ("GLOVO *1234", "food_delivery"),
            ("YANDEX EDA", "food_delivery"),
            ("YANDEX GO", "transport"),
            ("uber trip", "transport"),
            ("NETFLIX.COM", "subscriptions"),
            ("STARBUCKS MEGA", "coffee_shops"),
            ("Аптека Биосфера", "healthcare"),
            ("Перевод на карту", "transfer"),
        ],
    )
    def test_known_merchants(
        self, database: MerchantDatabase, description: str, category: str
    ) -> None:
        result = database.find_match(description, "t1")
        assert result is not None
        assert result.category_id == category
        assert result.transaction_id == "t1"
        assert result.source == CategorizationSource.MERCHANT_DATABASE

    def test_word_boundary_patterns(self, database: MerchantDatabase) -> None:
        assert database.find_match("SMALLVILLE") is None

    def test_blank(self, database: MerchantDatabase) -> None:
        assert database.find_match("   ") is None

    def test_first_match_wins(self) -> None:
        database = MerchantDatabase(
            (
                MerchantPattern(r"SHOP", "shopping", 0.90),
                MerchantPattern(r"COFFEE", "coffee_shops", 0.95),
            )
        )
        result = database.find_match("COFFEE SHOP")
        assert result is not None
        assert result.category_id == "shopping"
