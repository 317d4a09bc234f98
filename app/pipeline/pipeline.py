from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from app.anonymization.models import AnonymizationResult
from app.enhancement.models import EnhancedTransaction
from app.extraction.models import PartialTransaction
from app.pipeline.models import ImportedTransaction
from app.preprocessing.models import PreprocessResult


@dataclass(slots=True)
class PipelineContext:
    raw_text: str
    sensitive_words: list[str] = field(default_factory=list)
    preprocess_result: PreprocessResult | None = None
    partial_transactions: list[PartialTransaction] = field(default_factory=list)
    anonymization_result: AnonymizationResult | None = None
    anonymized_transactions: list[PartialTransaction] = field(default_factory=list)
    enhanced_transactions: list[EnhancedTransaction] = field(default_factory=list)
    used_enhancer: bool = False
    used_fallback_parser: bool = False
    transactions: list[ImportedTransaction] = field(default_factory=list)


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
