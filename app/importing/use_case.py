import threading
from collections.abc import Collection, Mapping
from dataclasses import replace
from datetime import timedelta

from app.anonymization.factory import AnonymizerFactory
from app.categorization.ai_categorizer import AICategorizer
from app.categorization.categorizer import TransactionCategorizer
from app.categorization.merchant_database import MerchantDatabase
from app.categorization.merchant_normalizer import MerchantNormalizer
from app.categorization.models import CategorizationSource, TransactionForCategorization
from app.categorization.rule_based import RuleBasedCategorizer
from app.config.settings import Settings
from app.database.repositories.base import BaseTransactionRepository
from app.database.repositories.learned_merchant_repository import LearnedMerchantRepository
from app.database.repositories.transaction_repository import TransactionRepository
from app.dedup.detector import FuzzyDuplicateDetector
from app.dedup.models import DuplicateStatus, ExactDuplicate, Unique
from app.importing.categorize_pending import CategorizePendingTransactionsUseCase
from app.importing.exceptions import ImportSessionError
from app.importing.models import (
    ImportConfirmationResult,
    ImportPreviewResult,
    ReviewableTransaction,
)
from app.importing.validator import ImportValidator
from app.llm.cost_tracker import AICostTracker
from app.llm.factory import LLMProviderFactory
from app.logging.logger import Log
from app.ocr.base import BaseOcrService
from app.pipeline.exceptions import ImportCancelledError, InvalidProgressTransitionError
from app.pipeline.models import (
    ImportedTransaction,
    ImportFailure,
    ImportNeedsUserInput,
    ImportResult,
    ImportSuccess,
    RawDocument,
)
from app.pipeline.orchestrator import DocumentImportPipeline, build_pipeline
from app.pipeline.progress import (
    AwaitingConfirmation,
    Cancelled,
    Categorizing,
    Completed,
    Deduplicating,
    DetectingFormat,
    Failed,
    Idle,
    ImportProgress,
    ImportProgressMachine,
    Parsing,
    ProgressListener,
    Saving,
    Validating,
)

_CATEGORIZATION_ID_PREFIX = "import-"


class ImportTransactionsUseCase:
    """One import session: parse, validate, deduplicate, categorize, confirm.

    Progress moves strictly forward through ImportProgressMachine. A
    cancel request stops the session before its next stage or remote call.
    """

    def __init__(
        self,
        *,
        pipeline: DocumentImportPipeline,
        transaction_repository: BaseTransactionRepository,
        duplicate_detector: FuzzyDuplicateDetector,
        validator: ImportValidator,
        categorize_pending: CategorizePendingTransactionsUseCase,
        progress: ImportProgressMachine | None = None,
        duplicate_date_tolerance_days: int = 1,
    ) -> None:
        self._pipeline = pipeline
        self._transactions = transaction_repository
        self._duplicate_detector = duplicate_detector
        self._validator = validator
        self._categorize_pending = categorize_pending
        self._progress = progress or ImportProgressMachine()
        self._date_tolerance = timedelta(days=duplicate_date_tolerance_days)
        self._cancel_event = threading.Event()
        self._current_preview: ImportPreviewResult | None = None

    @property
    def progress(self) -> ImportProgress:
        return self._progress.state

    @property
    def current_preview(self) -> ImportPreviewResult | None:
        return self._current_preview

    def subscribe(self, listener: ProgressListener) -> None:
        self._progress.subscribe(listener)

    # ------------------------------------------------------------------
    # Session steps
    # ------------------------------------------------------------------

    def process_document(
        self,
        document: RawDocument,
        account_id: str,
        *,
        sensitive_words: list[str] | None = None,
        user_history: Mapping[str, str] | None = None,
    ) -> ImportPreviewResult:
        """Parse a raw document and build its preview.

        Raises:
            ImportSessionError: if the document yields no usable transactions.
            ImportCancelledError: if the session is cancelled meanwhile.
        """
        self._start_session()
        self._advance(DetectingFormat(filename=document.filename, size_bytes=document.size_bytes))
        self._advance(Parsing(document_type=document.kind.value))
        try:
            result = self._pipeline.parse(
                document,
                sensitive_words=sensitive_words,
                cancel_event=self._cancel_event,
            )
        except ImportCancelledError:
            raise
        except Exception as exc:
            self._fail(f"Ошибка извлечения: {exc}", recoverable=False)
            raise
        return self._build_preview(result, account_id, user_history)

    def start_import(
        self,
        parse_result: ImportResult,
        account_id: str,
        *,
        user_history: Mapping[str, str] | None = None,
    ) -> ImportPreviewResult:
        """Validate, deduplicate and categorize a parse result into a preview.

        Raises:
            ImportSessionError: if the parse result carries no transactions.
            ImportCancelledError: if the session is cancelled meanwhile.
        """
        self._start_session()
        return self._build_preview(parse_result, account_id, user_history)

    def _build_preview(
        self,
        parse_result: ImportResult,
        account_id: str,
        user_history: Mapping[str, str] | None,
    ) -> ImportPreviewResult:
        match parse_result:
            case ImportFailure(message=message, partial_transactions=partial):
                self._fail(message, recoverable=False, partial=partial)
                raise ImportSessionError(message)
            case ImportNeedsUserInput(transactions=[], issues=issues):
                message = " ".join(issues) or "Не удалось распознать транзакции."
                self._fail(message, recoverable=True)
                raise ImportSessionError(message)
            case ImportNeedsUserInput(transactions=transactions, document_type=document_type):
                Log.info(f"Parse needs review: {' '.join(parse_result.issues)}")
            case ImportSuccess(transactions=transactions, document_type=document_type):
                pass
            case _:
                raise TypeError(f"Unexpected parse result {type(parse_result).__name__}")

        total = len(transactions)
        self._advance(Validating(total=total))
        validation = self._validator.validate(transactions)
        self._advance(Validating(total=total, processed=total))

        self._advance(Deduplicating(total=total))
        statuses = self._detect_duplicates(transactions, account_id)
        duplicate_count = sum(1 for status in statuses.values() if status.is_duplicate)
        self._advance(Deduplicating(total=total, processed=total, duplicates_found=duplicate_count))

        self._advance(Categorizing(total=total, current_tier="LOCAL"))
        batch = self._categorize_pending.execute(
            [
                TransactionForCategorization(
                    id=f"{_CATEGORIZATION_ID_PREFIX}{index}",
                    description=tx.description,
                    amount=tx.amount,
                    merchant=tx.merchant,
                )
                for index, tx in enumerate(transactions)
            ],
            user_history=user_history,
            cancel_event=self._cancel_event,
        )
        suggestions = batch.by_transaction_id()
        self._advance(
            Categorizing(
                total=total,
                categorized=len(batch.results),
                current_tier="LLM" if batch.tier2_count or batch.tier3_count else "LOCAL",
            )
        )

        rows = []
        for index, transaction in enumerate(transactions):
            status = statuses.get(index, Unique())
            suggestion = suggestions.get(f"{_CATEGORIZATION_ID_PREFIX}{index}")
            if suggestion is not None and transaction.category_id is None:
                transaction = replace(transaction, category_id=suggestion.category_id)
            rows.append(
                ReviewableTransaction(
                    index=index,
                    transaction=transaction,
                    duplicate_status=status,
                    is_selected=not isinstance(status, ExactDuplicate),
                    suggested_category=suggestion,
                )
            )

        preview = ImportPreviewResult(
            transactions=rows,
            document_type=document_type,
            duplicate_count=duplicate_count,
            validation_warnings=validation.warnings,
        )
        self._current_preview = preview
        self._advance(AwaitingConfirmation(preview=preview))
        Log.info(
            f"Import preview ready: {preview.total_count} transactions, "
            f"{duplicate_count} duplicates, {len(validation.warnings)} warnings"
        )
        return preview

    def confirm_import(
        self,
        selected_indices: Collection[int],
        account_id: str,
        category_overrides: Mapping[int, str] | None = None,
    ) -> ImportConfirmationResult:
        """Save the selected preview rows.

        Raises:
            ImportSessionError: if no preview is pending or saving fails.
        """
        preview = self._current_preview
        if preview is None:
            raise ImportSessionError("No import in progress")

        overrides = category_overrides or {}
        selected = [row for row in preview.transactions if row.index in selected_indices]
        to_save = [
            replace(
                row.transaction,
                category_id=overrides.get(row.index) or row.effective_category_id,
            )
            for row in selected
        ]

        self._advance(Saving(total=len(to_save)))
        try:
            saved_ids = self._transactions.insert(account_id, to_save)
        except Exception as exc:
            Log.exception(f"Saving {len(to_save)} imported transactions failed")
            self._fail(str(exc), recoverable=True, partial=to_save)
            raise ImportSessionError(f"Failed to save transactions: {exc}") from exc

        skipped = preview.total_count - len(selected)
        self._advance(Saving(total=len(to_save), saved=len(saved_ids)))
        self._advance(
            Completed(
                saved_count=len(saved_ids),
                skipped_count=skipped,
                duplicate_count=preview.duplicate_count,
            )
        )
        self._current_preview = None
        Log.info(f"Import completed: saved={len(saved_ids)}, skipped={skipped}")
        return ImportConfirmationResult(saved_count=len(saved_ids), skipped_count=skipped)

    def cancel_import(self) -> None:
        Log.info("Import cancelled")
        self._cancel_event.set()
        self._current_preview = None
        if not self._progress.state.terminal:
            self._progress.transition(Cancelled())

    def reset(self) -> None:
        self._cancel_event = threading.Event()
        self._current_preview = None
        self._progress.reset()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _start_session(self) -> None:
        if not isinstance(self._progress.state, Idle) or self._cancel_event.is_set():
            self.reset()

    def _advance(self, state: ImportProgress) -> None:
        if self._cancel_event.is_set():
            raise ImportCancelledError("Import was cancelled")
        try:
            self._progress.transition(state)
        except InvalidProgressTransitionError:
            if self._cancel_event.is_set():
                raise ImportCancelledError("Import was cancelled") from None
            raise

    def _fail(
        self,
        message: str,
        *,
        recoverable: bool,
        partial: list[ImportedTransaction] | None = None,
    ) -> None:
        Log.error(f"Import failed: {message}")
        if not self._progress.state.terminal:
            self._progress.transition(
                Failed(message=message, recoverable=recoverable, partial_transactions=list(partial or []))
            )

    def _detect_duplicates(
        self,
        transactions: list[ImportedTransaction],
        account_id: str,
    ) -> dict[int, DuplicateStatus]:
        if not transactions:
            return {}
        start = min(tx.date for tx in transactions) - self._date_tolerance
        end = max(tx.date for tx in transactions) + self._date_tolerance
        existing = self._transactions.get_by_date_range(account_id, start, end)
        return self._duplicate_detector.check_duplicates(transactions, existing)


def build_import_use_case(
    settings: Settings,
    *,
    ocr_service: BaseOcrService | None = None,
) -> ImportTransactionsUseCase:
    """Build an ImportTransactionsUseCase backed by PostgreSQL repositories.

    The connection pool must be initialized with ``init_pool`` first.
    """
    Log.configure(settings.log_level)
    cost_tracker = AICostTracker(
        daily_budget_usd=settings.ai_daily_budget_usd,
        monthly_budget_usd=settings.ai_monthly_budget_usd,
    )
    anonymizer = AnonymizerFactory.create(settings)
    pipeline = build_pipeline(settings, ocr_service=ocr_service, cost_tracker=cost_tracker)

    categorizer = TransactionCategorizer(
        learned_merchant_repository=LearnedMerchantRepository(),
        rule_based_categorizer=RuleBasedCategorizer(MerchantDatabase()),
        normalizer=MerchantNormalizer(),
    )
    tier2_provider = LLMProviderFactory.create(settings)
    tier3_provider = LLMProviderFactory.create_tier3(settings)
    tier2 = None
    tier3 = None
    if tier2_provider is not None:
        tier2 = AICategorizer(
            provider=tier2_provider,
            cost_tracker=cost_tracker,
            anonymizer=anonymizer,
            min_confidence=settings.categorization_min_confidence,
            batch_size=settings.categorization_batch_size,
        )
    if tier3_provider is not None:
        tier3 = AICategorizer(
            provider=tier3_provider,
            cost_tracker=cost_tracker,
            anonymizer=anonymizer,
            source=CategorizationSource.LLM_TIER3,
            min_confidence=settings.categorization_min_confidence,
            batch_size=settings.categorization_batch_size,
        )

    return ImportTransactionsUseCase(
        pipeline=pipeline,
        transaction_repository=TransactionRepository(),
        duplicate_detector=FuzzyDuplicateDetector(
            date_tolerance_days=settings.duplicate_date_tolerance_days,
            exact_similarity=settings.duplicate_exact_similarity,
            probable_similarity=settings.duplicate_probable_similarity,
        ),
        validator=ImportValidator(),
        categorize_pending=CategorizePendingTransactionsUseCase(categorizer, tier2, tier3),
        duplicate_date_tolerance_days=settings.duplicate_date_tolerance_days,
    )
