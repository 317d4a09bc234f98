from dataclasses import dataclass
from datetime import datetime

from app.categorization.models import LearnedMerchant


@dataclass(frozen=True)
class CategoryCorrection:
    """One user category correction, kept as an audit trail."""

    id: str
    transaction_id: str
    original_category_id: str | None
    corrected_category_id: str
    merchant_name: str
    merchant_normalized: str
    created_at: datetime


@dataclass(frozen=True)
class CorrectionSaved:
    """Correction stored; not enough samples for a mapping yet."""

    correction_id: str


@dataclass(frozen=True)
class MappingCreated:
    correction_id: str
    mapping: LearnedMerchant


@dataclass(frozen=True)
class MappingUpdated:
    correction_id: str
    mapping: LearnedMerchant


LearnResult = CorrectionSaved | MappingCreated | MappingUpdated
