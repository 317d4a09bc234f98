import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from app.categorization.merchant_normalizer import MerchantNormalizer
from app.categorization.models import LearnedMerchant, LearnedMerchantSource
from app.config.settings import Settings
from app.database.repositories.base import (
    BaseCategoryCorrectionRepository,
    BaseLearnedMerchantRepository,
)
from app.database.repositories.category_correction_repository import CategoryCorrectionRepository
from app.database.repositories.learned_merchant_repository import LearnedMerchantRepository
from app.learning.exceptions import BlankMerchantError
from app.learning.models import (
    CategoryCorrection,
    CorrectionSaved,
    LearnResult,
    MappingCreated,
    MappingUpdated,
)
from app.logging.logger import Log

INITIAL_CONFIDENCE = 0.90
MAX_CONFIDENCE = 0.98
CONFIDENCE_STEP = 0.02


def confidence_for_samples(sample_count: int) -> float:
    return min(INITIAL_CONFIDENCE + (sample_count - 1) * CONFIDENCE_STEP, MAX_CONFIDENCE)


class LearnFromCorrectionUseCase:
    """Turns repeated user category corrections into Tier 0 mappings.

    Every correction is stored. Once ``threshold`` corrections share the
    same normalized merchant and category, a mapping is created; later
    corrections for that mapping raise its sample count and confidence.
    """

    def __init__(
        self,
        correction_repository: BaseCategoryCorrectionRepository,
        merchant_repository: BaseLearnedMerchantRepository,
        normalizer: MerchantNormalizer,
        threshold: int = 2,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._corrections = correction_repository
        self._merchants = merchant_repository
        self._normalizer = normalizer
        self._threshold = threshold
        self._clock = clock

    def execute(
        self,
        transaction_id: str,
        original_category_id: str | None,
        corrected_category_id: str,
        merchant_name: str | None,
    ) -> LearnResult:
        """Record a correction and learn from it.

        Raises:
            BlankMerchantError: if the merchant name is blank or normalizes
                to nothing. Nothing is stored in that case.
        """
        if merchant_name is None or not merchant_name.strip():
            raise BlankMerchantError("Merchant name required for learning")
        normalized = self._normalizer.normalize(merchant_name)
        if not normalized:
            raise BlankMerchantError(f"Cannot normalize merchant name '{merchant_name}'")

        now = self._clock()
        correction = CategoryCorrection(
            id=str(uuid.uuid4()),
            transaction_id=transaction_id,
            original_category_id=original_category_id,
            corrected_category_id=corrected_category_id,
            merchant_name=merchant_name,
            merchant_normalized=normalized,
            created_at=now,
        )
        self._corrections.save(correction)

        similar = self._corrections.get_by_merchant_and_category(normalized, corrected_category_id)
        pattern = self._normalizer.to_pattern(normalized)
        existing = self._merchants.get_by_pattern(pattern)

        if existing is not None:
            sample_count = existing.sample_count + 1
            updated = replace(
                existing,
                category_id=corrected_category_id,
                confidence=max(existing.confidence, confidence_for_samples(sample_count)),
                sample_count=sample_count,
                last_used_at=now,
            )
            self._merchants.update(updated)
            Log.info(
                f"Learned mapping '{pattern}' -> {corrected_category_id} updated "
                f"({sample_count} samples, confidence {updated.confidence:.2f})"
            )
            return MappingUpdated(correction_id=correction.id, mapping=updated)

        if len(similar) >= self._threshold:
            mapping = LearnedMerchant(
                id=str(uuid.uuid4()),
                merchant_pattern=pattern,
                category_id=corrected_category_id,
                confidence=INITIAL_CONFIDENCE,
                source=LearnedMerchantSource.USER,
                sample_count=len(similar),
                last_used_at=now,
                created_at=now,
            )
            self._merchants.save(mapping)
            Log.info(f"Learned mapping '{pattern}' -> {corrected_category_id} created")
            return MappingCreated(correction_id=correction.id, mapping=mapping)

        Log.debug(
            f"Correction for '{normalized}' saved ({len(similar)}/{self._threshold} samples)"
        )
        return CorrectionSaved(correction_id=correction.id)


def build_learner(settings: Settings) -> LearnFromCorrectionUseCase:
    """Build a LearnFromCorrectionUseCase backed by PostgreSQL repositories."""
    Log.configure(settings.log_level)
    return LearnFromCorrectionUseCase(
        correction_repository=CategoryCorrectionRepository(),
        merchant_repository=LearnedMerchantRepository(),
        normalizer=MerchantNormalizer(),
        threshold=settings.learning_threshold,
    )
