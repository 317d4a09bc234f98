from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class Unique:
    is_duplicate: ClassVar[bool] = False


@dataclass(frozen=True)
class ExactDuplicate:
    matched_id: str
    similarity: float = 1.0
    is_duplicate: ClassVar[bool] = True


@dataclass(frozen=True)
class ProbableDuplicate:
    """Same amount within the date window and a similar description."""

    matched_id: str
    similarity: float
    reason: str
    is_duplicate: ClassVar[bool] = True


DuplicateStatus = Unique | ExactDuplicate | ProbableDuplicate
