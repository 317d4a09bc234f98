import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date

from app.anonymization.base import BaseAnonymizer
from app.anonymization.factory import AnonymizerFactory
from app.config.settings import Settings
from app.enhancement.cloud_enhancer import CloudTransactionEnhancer
from app.enhancement.document_parser import LLMDocumentParser
from app.extraction.extractor import LocalTransactionExtractor
from app.llm.base import BaseCostTracker
from app.llm.cost_tracker import AICostTracker
from app.llm.factory import LLMProviderFactory
from app.logging.logger import Log
from app.ocr.base import BaseOcrService, BasePageExtractor
from app.ocr.exceptions import OcrError, PdfExtractionError
from app.ocr.factory import PageExtractorFactory
from app.ocr.models import DocumentPage
from app.pipeline.exceptions import ImportCancelledError
from app.pipeline.models import (
    DocumentKind,
    FailureStage,
    ImportedTransaction,
    ImportFailure,
    ImportNeedsUserInput,
    ImportResult,
    ImportSuccess,
    RawDocument,
)
from app.pipeline.pipeline import PipelineContext, PipelineStep
from app.pipeline.steps import (
    AnonymizeStep,
    BuildTransactionsStep,
    DeanonymizeStep,
    EnhanceStep,
    FallbackParseStep,
    LocalExtractStep,
    PreprocessStep,
)
from app.preprocessing.models import DocumentType
from app.preprocessing.preprocessor import DocumentPreprocessor

PAGE_SEPARATOR = "\n\n--- PAGE BREAK ---\n\n"


class DocumentImportPipeline:
    """Turns one raw document into an ImportResult.

    Pipeline: pages -> text -> preprocess -> extract -> anonymize ->
    enhance -> deanonymize -> classify. Remote-service failures degrade
    inside their steps; only document-level failures surface here.
    """

    def __init__(
        self,
        *,
        preprocessor: DocumentPreprocessor,
        extractor: LocalTransactionExtractor,
        anonymizer: BaseAnonymizer,
        page_extractor: BasePageExtractor | None = None,
        ocr_service: BaseOcrService | None = None,
        enhancer: CloudTransactionEnhancer | None = None,
        document_parser: LLMDocumentParser | None = None,
        ocr_max_workers: int = 4,
        low_confidence_threshold: float = 0.5,
        today: date | None = None,
    ) -> None:
        self._page_extractor = page_extractor
        self._ocr_service = ocr_service
        self._ocr_max_workers = max(1, ocr_max_workers)
        self._low_confidence_threshold = low_confidence_threshold
        self._local_steps: list[PipelineStep] = [
            PreprocessStep(preprocessor),
            LocalExtractStep(extractor),
        ]
        self._fallback_step = FallbackParseStep(document_parser)
        self._remote_steps: list[PipelineStep] = [
            AnonymizeStep(anonymizer),
            EnhanceStep(enhancer),
            DeanonymizeStep(anonymizer),
            BuildTransactionsStep(today=today),
        ]

    def parse(
        self,
        document: RawDocument,
        *,
        sensitive_words: list[str] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ImportResult:
        """Parse a document into transactions.

        Raises:
            ImportCancelledError: if ``cancel_event`` is set between stages.
        """
        Log.info(
            f"Parsing {document.kind.value} document '{document.filename}' "
            f"({document.size_bytes} bytes)"
        )
        if document.kind == DocumentKind.TEXT:
            text = document.content.decode("utf-8", errors="replace")
        else:
            text_or_failure = self._document_text(document, cancel_event)
            if isinstance(text_or_failure, ImportFailure):
                return text_or_failure
            text = text_or_failure
        return self.parse_text(text, sensitive_words=sensitive_words, cancel_event=cancel_event)

    def parse_text(
        self,
        text: str,
        *,
        sensitive_words: list[str] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ImportResult:
        context = PipelineContext(raw_text=text, sensitive_words=list(sensitive_words or []))

        for step in self._local_steps:
            self._check_cancelled(cancel_event)
            with Log.stage(type(step).__name__):
                context = step.run(context)

        self._check_cancelled(cancel_event)
        if context.partial_transactions:
            for step in self._remote_steps:
                self._check_cancelled(cancel_event)
                with Log.stage(type(step).__name__):
                    context = step.run(context)
        else:
            with Log.stage(type(self._fallback_step).__name__):
                context = self._fallback_step.run(context)

        document_type = (
            context.preprocess_result.hints.type
            if context.preprocess_result is not None
            else DocumentType.UNKNOWN
        )
        return self._classify(context.transactions, document_type)

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def _document_text(
        self,
        document: RawDocument,
        cancel_event: threading.Event | None,
    ) -> str | ImportFailure:
        if document.kind == DocumentKind.IMAGE:
            pages = [DocumentPage(index=0, width=0, height=0, image_bytes=document.content)]
        else:
            if self._page_extractor is None:
                return ImportFailure("Ошибка извлечения: нет обработчика PDF", FailureStage.EXTRACTION)
            try:
                pages = self._page_extractor.extract_pages(document.content)
            except PdfExtractionError as exc:
                Log.error(f"Page extraction failed: {exc}")
                return ImportFailure(f"Ошибка извлечения: {exc}", FailureStage.EXTRACTION)
            if not pages:
                return ImportFailure("PDF не содержит страниц", FailureStage.EXTRACTION)

        self._check_cancelled(cancel_event)
        texts = self._recognize_pages(pages, cancel_event)
        self._check_cancelled(cancel_event)

        successful = [text for text in texts if text.strip()]
        if not successful:
            return ImportFailure("Не удалось распознать текст в PDF", FailureStage.OCR)
        Log.info(f"Recognized text on {len(successful)} of {len(pages)} pages")
        return PAGE_SEPARATOR.join(successful)

    def _recognize_pages(
        self,
        pages: list[DocumentPage],
        cancel_event: threading.Event | None,
    ) -> list[str]:
        ordered = sorted(pages, key=lambda page: page.index)
        if len(ordered) == 1:
            return [self._page_text(ordered[0], cancel_event)]
        with ThreadPoolExecutor(max_workers=self._ocr_max_workers) as executor:
            return list(executor.map(lambda page: self._page_text(page, cancel_event), ordered))

    def _page_text(self, page: DocumentPage, cancel_event: threading.Event | None) -> str:
        if page.text_layer.strip():
            return page.text_layer
        if cancel_event is not None and cancel_event.is_set():
            return ""
        if self._ocr_service is None:
            Log.warning(f"Page {page.index} has no text layer and no OCR service is configured")
            return ""
        try:
            return self._ocr_service.recognize_text(page.image_bytes).full_text
        except OcrError as exc:
            Log.warning(f"OCR failed on page {page.index}: {exc}")
            return ""

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def _classify(
        self,
        transactions: list[ImportedTransaction],
        document_type: DocumentType,
    ) -> ImportResult:
        if not transactions:
            return ImportNeedsUserInput(
                transactions=[],
                document_type=document_type,
                issues=[
                    "Не удалось распознать транзакции.",
                    "Попробуйте загрузить файл в формате CSV.",
                ],
            )

        average = sum(tx.confidence for tx in transactions) / len(transactions)
        if average < self._low_confidence_threshold:
            return ImportNeedsUserInput(
                transactions=transactions,
                document_type=document_type,
                issues=[
                    f"Низкая уверенность ({round(average * 100)}%).",
                    "Проверьте распознанные транзакции.",
                ],
            )

        Log.info(f"Parsed {len(transactions)} transactions, confidence {average:.2f}")
        return ImportSuccess(
            transactions=transactions,
            document_type=document_type,
            total_confidence=average,
        )

    @staticmethod
    def _check_cancelled(cancel_event: threading.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise ImportCancelledError("Import was cancelled")


def build_pipeline(
    settings: Settings,
    *,
    ocr_service: BaseOcrService | None = None,
    cost_tracker: BaseCostTracker | None = None,
) -> DocumentImportPipeline:
    """Build a DocumentImportPipeline with all configured adapters."""
    anonymizer = AnonymizerFactory.create(settings)
    provider = LLMProviderFactory.create(settings)
    tracker = cost_tracker or AICostTracker(
        daily_budget_usd=settings.ai_daily_budget_usd,
        monthly_budget_usd=settings.ai_monthly_budget_usd,
    )
    enhancer = None
    document_parser = None
    if provider is not None:
        enhancer = CloudTransactionEnhancer(provider=provider, cost_tracker=tracker)
        document_parser = LLMDocumentParser(
            provider=provider, cost_tracker=tracker, anonymizer=anonymizer
        )
    return DocumentImportPipeline(
        preprocessor=DocumentPreprocessor(),
        extractor=LocalTransactionExtractor(),
        anonymizer=anonymizer,
        page_extractor=PageExtractorFactory.create(settings),
        ocr_service=ocr_service,
        enhancer=enhancer,
        document_parser=document_parser,
        ocr_max_workers=settings.ocr_max_workers,
        low_confidence_threshold=settings.low_confidence_threshold,
    )
