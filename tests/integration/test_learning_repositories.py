import uuid
from datetime import datetime, timezone

import pytest

from app.categorization.models import LearnedMerchant, LearnedMerchantSource
from app.database.repositories.category_correction_repository import CategoryCorrectionRepository
from app.database.repositories.learned_merchant_repository import LearnedMerchantRepository
from app.learning.models import CategoryCorrection

NOW = datetime(2026, 1, 20, 12, 0, tzinfo=timezone.utc)


def _merchant(pattern: str, confidence: float = 0.90, sample_count: int = 2) -> LearnedMerchant:
    return LearnedMerchant(
        id=str(uuid.uuid4()),
        merchant_pattern=pattern,
        category_id="groceries",
        confidence=confidence,
        source=LearnedMerchantSource.USER,
        sample_count=sample_count,
        last_used_at=NOW,
        created_at=NOW,
    )


@pytest.fixture
def saved_merchant(integration_cleanup: list[tuple[str, str]]):
    repo = LearnedMerchantRepository()

    def _save(pattern: str, **kwargs) -> LearnedMerchant:
        merchant = _merchant(f"{pattern} {uuid.uuid4().hex[:8].upper()}", **kwargs)
        repo.save(merchant)
        integration_cleanup.append(("learned_merchants", merchant.id))
        return merchant

    return _save


@pytest.mark.integration
class TestLearnedMerchantRepository:
    def test_save_and_get_by_pattern(self, saved_merchant) -> None:
        merchant = saved_merchant("MAGNUM")
        loaded = LearnedMerchantRepository().get_by_pattern(merchant.merchant_pattern)
        assert loaded is not None
        assert loaded.id == merchant.id
        assert loaded.source == LearnedMerchantSource.USER
        assert loaded.confidence == pytest.approx(0.90)

    def test_find_match_is_case_insensitive_substring(self, saved_merchant) -> None:
        merchant = saved_merchant("MAGNUM")
        description = f"Покупка {merchant.merchant_pattern.lower()} ALMATY"
        loaded = LearnedMerchantRepository().find_match(description)
        assert loaded is not None
        assert loaded.id == merchant.id

    def test_find_match_blank(self, integration_pool: None) -> None:
        assert LearnedMerchantRepository().find_match("  ") is None

    def test_update(self, saved_merchant) -> None:
        repo = LearnedMerchantRepository()
        merchant = saved_merchant("GLOVO")
        repo.update(
            LearnedMerchant(
                id=merchant.id,
                merchant_pattern=merchant.merchant_pattern,
                category_id="food_delivery",
                confidence=0.94,
                source=merchant.source,
                sample_count=3,
                last_used_at=NOW,
                created_at=merchant.created_at,
            )
        )
        loaded = repo.get_by_pattern(merchant.merchant_pattern)
        assert loaded is not None
        assert loaded.category_id == "food_delivery"
        assert loaded.sample_count == 3

    def test_high_confidence_filter(self, saved_merchant) -> None:
        high = saved_merchant("HIGH", confidence=0.95)
        low = saved_merchant("LOW", confidence=0.60)
        ids = {m.id for m in LearnedMerchantRepository().get_high_confidence()}
        assert high.id in ids
        assert low.id not in ids

    def test_delete(self, saved_merchant) -> None:
        repo = LearnedMerchantRepository()
        merchant = saved_merchant("TEMP")
        repo.delete_by_id(merchant.id)
        assert repo.get_by_pattern(merchant.merchant_pattern) is None


@pytest.mark.integration
class TestCategoryCorrectionRepository:
    def test_save_and_query(self, integration_cleanup: list[tuple[str, str]]) -> None:
        repo = CategoryCorrectionRepository()
        merchant = f"MERCHANT {uuid.uuid4().hex[:8].upper()}"
        corrections = [
            CategoryCorrection(
                id=str(uuid.uuid4()),
                transaction_id=f"tx-{merchant}-{i}",
                original_category_id="other",
                corrected_category_id=category,
                merchant_name=merchant.lower(),
                merchant_normalized=merchant,
                created_at=NOW,
            )
            for i, category in enumerate(["groceries", "groceries", "dining"])
        ]
        for correction in corrections:
            repo.save(correction)
            integration_cleanup.append(("category_corrections", correction.id))

        assert len(repo.get_by_merchant_and_category(merchant, "groceries")) == 2
        assert repo.count_by_merchant(merchant) == 3
        (by_tx,) = repo.get_by_transaction_id(f"tx-{merchant}-2")
        assert by_tx.corrected_category_id == "dining"
