import re
from collections.abc import Sequence

from rapidfuzz.distance import Levenshtein

from app.database.models import TransactionRecord
from app.dedup.models import DuplicateStatus, ExactDuplicate, ProbableDuplicate, Unique
from app.logging.logger import Log
from app.pipeline.models import ImportedTransaction


class FuzzyDuplicateDetector:
    """Classifies imported transactions against the stored ledger.

    Amounts must match exactly and dates must fall within the tolerance
    window. Descriptions are compared after normalization with a
    normalized Levenshtein similarity. Detection is a pure function of its
    inputs, so re-running it against an unchanged ledger gives the same
    statuses.
    """

    _SPECIAL_CHARS_RE = re.compile(r"[^\w\s]|_")
    _WHITESPACE_RE = re.compile(r"\s+")

    def __init__(
        self,
        date_tolerance_days: int = 1,
        exact_similarity: float = 0.95,
        probable_similarity: float = 0.5,
    ) -> None:
        self._date_tolerance_days = date_tolerance_days
        self._exact_similarity = exact_similarity
        self._probable_similarity = probable_similarity

    def check_duplicate(
        self,
        imported: ImportedTransaction,
        existing: Sequence[TransactionRecord],
    ) -> DuplicateStatus:
        """A same-date match at the exact threshold wins over any adjacent-day match."""
        best: tuple[TransactionRecord, float] | None = None
        normalized_imported = self.normalize_description(imported.description)

        for record in existing:
            if record.amount != imported.amount:
                continue
            if abs((record.date - imported.date).days) > self._date_tolerance_days:
                continue
            similarity = self.similarity(
                normalized_imported, self.normalize_description(record.description or "")
            )
            if record.date == imported.date and similarity >= self._exact_similarity:
                return ExactDuplicate(matched_id=record.id)
            if best is None or similarity > best[1]:
                best = (record, similarity)

        if best is None:
            return Unique()

        record, similarity = best
        if similarity >= self._probable_similarity:
            return ProbableDuplicate(
                matched_id=record.id,
                similarity=similarity,
                reason=self._reason(similarity),
            )
        return Unique()

    def check_duplicates(
        self,
        imported: Sequence[ImportedTransaction],
        existing: Sequence[TransactionRecord],
    ) -> dict[int, DuplicateStatus]:
        statuses = {
            index: self.check_duplicate(transaction, existing)
            for index, transaction in enumerate(imported)
        }
        duplicates = sum(1 for status in statuses.values() if status.is_duplicate)
        Log.debug(f"Duplicate check: {duplicates} of {len(imported)} flagged")
        return statuses

    @classmethod
    def normalize_description(cls, description: str) -> str:
        """Uppercase, drop punctuation and collapse whitespace."""
        cleaned = cls._SPECIAL_CHARS_RE.sub("", description.upper())
        return cls._WHITESPACE_RE.sub(" ", cleaned).strip()

    @staticmethod
    def similarity(first: str, second: str) -> float:
        if not first and not second:
            return 1.0
        if not first or not second:
            return 0.0
        return Levenshtein.normalized_similarity(first, second)

    @staticmethod
    def _reason(similarity: float) -> str:
        if similarity >= 0.9:
            return "Same date and amount, similar description"
        if similarity >= 0.8:
            return "Same date and amount, partially matching description"
        return "Same date and amount"
