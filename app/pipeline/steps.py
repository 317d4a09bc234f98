from dataclasses import replace
from datetime import date

from app.anonymization.base import BaseAnonymizer
from app.enhancement.cloud_enhancer import CloudTransactionEnhancer
from app.enhancement.document_parser import LLMDocumentParser
from app.enhancement.models import EnhancedTransaction
from app.extraction.dates import parse_raw_date
from app.extraction.extractor import LocalTransactionExtractor
from app.logging.logger import Log
from app.pipeline.models import ImportedTransaction, ImportSource
from app.pipeline.pipeline import PipelineContext, PipelineStep
from app.preprocessing.preprocessor import DocumentPreprocessor

LOCAL_CONFIDENCE = 0.9
UNPARSED_DATE_CONFIDENCE = 0.3


class PreprocessStep(PipelineStep):
    def __init__(self, preprocessor: DocumentPreprocessor) -> None:
        self._preprocessor = preprocessor

    def run(self, context: PipelineContext) -> PipelineContext:
        result = self._preprocessor.preprocess(context.raw_text)
        context.preprocess_result = result
        Log.info(
            f"Preprocessed document: {len(result.cleaned_lines)} lines kept, "
            f"type={result.hints.type.value}, language={result.hints.language}"
        )
        return context


class LocalExtractStep(PipelineStep):
    def __init__(self, extractor: LocalTransactionExtractor) -> None:
        self._extractor = extractor

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.preprocess_result is None:
            raise ValueError("PipelineContext.preprocess_result must be set before extraction")
        # Receipt mode is inferred per line by the extractor.
        context.partial_transactions = self._extractor.extract(
            context.preprocess_result.cleaned_text
        )
        Log.info(f"Extracted {len(context.partial_transactions)} transactions locally")
        return context


class FallbackParseStep(PipelineStep):
    """Hands the cleaned text to the remote parser when local extraction found nothing."""

    def __init__(self, document_parser: LLMDocumentParser | None) -> None:
        self._document_parser = document_parser

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.partial_transactions or self._document_parser is None:
            return context
        if context.preprocess_result is None:
            raise ValueError("PipelineContext.preprocess_result must be set before fallback parsing")
        context.transactions = self._document_parser.parse(
            context.preprocess_result.cleaned_text
        )
        context.used_fallback_parser = True
        Log.info(f"Fallback parser returned {len(context.transactions)} transactions")
        return context


class AnonymizeStep(PipelineStep):
    """Masks PII in every description with one document-wide placeholder mapping."""

    def __init__(self, anonymizer: BaseAnonymizer) -> None:
        self._anonymizer = anonymizer

    def run(self, context: PipelineContext) -> PipelineContext:
        partials = context.partial_transactions
        joined = "\n".join(tx.raw_description for tx in partials)
        result = self._anonymizer.anonymize(joined, sensitive_words=context.sensitive_words)
        descriptions = result.anonymized_text.split("\n")
        if len(descriptions) != len(partials):
            raise ValueError("Anonymization changed the number of description lines")
        context.anonymization_result = result
        context.anonymized_transactions = [
            replace(tx, raw_description=description)
            for tx, description in zip(partials, descriptions)
        ]
        Log.info(f"Anonymized descriptions: {len(result.detected_pii)} PII spans masked")
        return context


class EnhanceStep(PipelineStep):
    def __init__(self, enhancer: CloudTransactionEnhancer | None) -> None:
        self._enhancer = enhancer

    def run(self, context: PipelineContext) -> PipelineContext:
        if self._enhancer is None:
            context.enhanced_transactions = [
                EnhancedTransaction.from_partial(tx) for tx in context.anonymized_transactions
            ]
            context.used_enhancer = False
            return context
        context.enhanced_transactions = self._enhancer.enhance(context.anonymized_transactions)
        context.used_enhancer = True
        return context


class DeanonymizeStep(PipelineStep):
    def __init__(self, anonymizer: BaseAnonymizer) -> None:
        self._anonymizer = anonymizer

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.anonymization_result is None:
            raise ValueError("PipelineContext.anonymization_result must be set before deanonymization")
        mapping = context.anonymization_result.mapping
        context.enhanced_transactions = [
            replace(
                tx,
                raw_description=self._anonymizer.deanonymize(tx.raw_description, mapping),
                counterparty_name=(
                    self._anonymizer.deanonymize(tx.counterparty_name, mapping)
                    if tx.counterparty_name
                    else None
                ),
                merchant=(
                    self._anonymizer.deanonymize(tx.merchant, mapping) if tx.merchant else None
                ),
            )
            for tx in context.enhanced_transactions
        ]
        return context


class BuildTransactionsStep(PipelineStep):
    """Turns enhanced transactions into dated, sourced ImportedTransactions."""

    def __init__(self, today: date | None = None) -> None:
        self._today = today

    def run(self, context: PipelineContext) -> PipelineContext:
        language = (
            context.preprocess_result.hints.language
            if context.preprocess_result is not None
            else "ru"
        )
        source = ImportSource.LLM_ENHANCED if context.used_enhancer else ImportSource.DOCUMENT_AI
        context.transactions = [
            self._build(tx, source, language) for tx in context.enhanced_transactions
        ]
        return context

    def _build(
        self,
        tx: EnhancedTransaction,
        source: ImportSource,
        language: str,
    ) -> ImportedTransaction:
        today = self._today or date.today()
        parsed = parse_raw_date(tx.raw_date, language=language, today=today)
        confidence = LOCAL_CONFIDENCE
        if parsed is None:
            Log.warning(f"Unparseable date '{tx.raw_date}', using {today.isoformat()}")
            parsed = today
            confidence = UNPARSED_DATE_CONFIDENCE

        if tx.counterparty_name and not tx.merchant:
            description = f"Перевод: {tx.counterparty_name}"
        else:
            description = tx.raw_description or tx.merchant or ""

        return ImportedTransaction(
            date=parsed,
            amount=tx.amount_minor_units,
            description=description,
            merchant=tx.merchant,
            currency=tx.currency,
            counterparty_name=tx.counterparty_name,
            category_id=tx.category_hint,
            confidence=confidence,
            source=source,
        )
