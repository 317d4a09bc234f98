from datetime import datetime
from unittest.mock import MagicMock

import pytest

from app.categorization.merchant_normalizer import MerchantNormalizer
from app.categorization.models import LearnedMerchant, LearnedMerchantSource
from app.learning.exceptions import BlankMerchantError
from app.learning.learner import LearnFromCorrectionUseCase, confidence_for_samples
from app.learning.models import CorrectionSaved, MappingCreated, MappingUpdated

NOW = datetime(2026, 1, 20, 10, 0)


@pytest.fixture
def corrections() -> MagicMock:
    repository = MagicMock()
    repository.get_by_merchant_and_category.return_value = []
    return repository


@pytest.fixture
def merchants() -> MagicMock:
    repository = MagicMock()
    repository.get_by_pattern.return_value = None
    return repository


@pytest.fixture
def learner(corrections: MagicMock, merchants: MagicMock) -> LearnFromCorrectionUseCase:
    return LearnFromCorrectionUseCase(
        correction_repository=corrections,
        merchant_repository=merchants,
        normalizer=MerchantNormalizer(),
        threshold=2,
        clock=lambda: NOW,
    )


class TestExecute:
    def test_first_correction_is_only_saved(
        self, learner: LearnFromCorrectionUseCase, corrections: MagicMock, merchants: MagicMock
    ) -> None:
        corrections.get_by_merchant_and_category.return_value = [MagicMock()]
        result = learner.execute("t1", "other", "groceries", "MAGNUM ALMATY *1234")
        assert isinstance(result, CorrectionSaved)
        saved = corrections.save.call_args.args[0]
        assert saved.merchant_normalized == "MAGNUM"
        assert saved.corrected_category_id == "groceries"
        corrections.get_by_merchant_and_category.assert_called_once_with("MAGNUM", "groceries")
        merchants.save.assert_not_called()

    def test_second_correction_creates_mapping(
        self, learner: LearnFromCorrectionUseCase, corrections: MagicMock, merchants: MagicMock
    ) -> None:
        corrections.get_by_merchant_and_category.return_value = [MagicMock(), MagicMock()]
        result = learner.execute("t2", "other", "groceries", "MAGNUM ALMATY *1234")
        assert isinstance(result, MappingCreated)
        assert result.mapping.merchant_pattern == "MAGNUM"
        assert result.mapping.confidence == pytest.approx(0.90)
        assert result.mapping.sample_count == 2
        assert result.mapping.source == LearnedMerchantSource.USER
        merchants.save.assert_called_once_with(result.mapping)

    def test_existing_mapping_is_updated(
        self, learner: LearnFromCorrectionUseCase, merchants: MagicMock
    ) -> None:
        merchants.get_by_pattern.return_value = LearnedMerchant(
            id="m1",
            merchant_pattern="MAGNUM",
            category_id="groceries",
            confidence=0.90,
            source=LearnedMerchantSource.USER,
            sample_count=2,
            last_used_at=datetime(2026, 1, 1),
            created_at=datetime(2026, 1, 1),
        )
        result = learner.execute("t3", "groceries", "dining", "MAGNUM")
        assert isinstance(result, MappingUpdated)
        assert result.mapping.category_id == "dining"
        assert result.mapping.sample_count == 3
        assert result.mapping.confidence == pytest.approx(0.94)
        assert result.mapping.last_used_at == NOW
        merchants.update.assert_called_once_with(result.mapping)

    @pytest.mark.parametrize("merchant", [None, "", "   "])
    def test_blank_merchant_is_rejected(
        self,
        learner: LearnFromCorrectionUseCase,
        corrections: MagicMock,
        merchant: str | None,
    ) -> None:
        with pytest.raises(BlankMerchantError):
            learner.execute("t1", None, "groceries", merchant)
        corrections.save.assert_not_called()


class TestConfidence:
    @pytest.mark.parametrize(
        "samples, expected",
        [(1, 0.90), (2, 0.92), (4, 0.96), (5, 0.98), (20, 0.98)],
    )
    def test_grows_and_caps(self, samples: int, expected: float) -> None:
        assert confidence_for_samples(samples) == pytest.approx(expected)
