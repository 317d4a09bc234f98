"""Import progress states and the machine that moves between them.

Every state is an immutable value. A transition replaces the current value
wholesale; nothing is mutated in place.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from app.logging.logger import Log
from app.pipeline.exceptions import InvalidProgressTransitionError

if TYPE_CHECKING:
    from app.importing.models import ImportPreviewResult
    from app.pipeline.models import ImportedTransaction


@dataclass(frozen=True)
class Idle:
    terminal: ClassVar[bool] = False


@dataclass(frozen=True)
class DetectingFormat:
    filename: str
    size_bytes: int
    terminal: ClassVar[bool] = False


@dataclass(frozen=True)
class Parsing:
    document_type: str | None = None
    terminal: ClassVar[bool] = False


@dataclass(frozen=True)
class Validating:
    total: int
    processed: int = 0
    terminal: ClassVar[bool] = False


@dataclass(frozen=True)
class Deduplicating:
    total: int
    processed: int = 0
    duplicates_found: int = 0
    terminal: ClassVar[bool] = False


@dataclass(frozen=True)
class Categorizing:
    total: int
    categorized: int = 0
    current_tier: str = ""
    terminal: ClassVar[bool] = False


@dataclass(frozen=True)
class AwaitingConfirmation:
    preview: ImportPreviewResult
    terminal: ClassVar[bool] = False


@dataclass(frozen=True)
class Saving:
    total: int
    saved: int = 0
    terminal: ClassVar[bool] = False


@dataclass(frozen=True)
class Completed:
    saved_count: int
    skipped_count: int = 0
    duplicate_count: int = 0
    terminal: ClassVar[bool] = True


@dataclass(frozen=True)
class Failed:
    message: str
    recoverable: bool = False
    partial_transactions: list[ImportedTransaction] = field(default_factory=list)
    terminal: ClassVar[bool] = True


@dataclass(frozen=True)
class Cancelled:
    terminal: ClassVar[bool] = True


ImportProgress = (
    Idle
    | DetectingFormat
    | Parsing
    | Validating
    | Deduplicating
    | Categorizing
    | AwaitingConfirmation
    | Saving
    | Completed
    | Failed
    | Cancelled
)

ProgressListener = Callable[[ImportProgress], None]

_ALLOWED: dict[type, tuple[type, ...]] = {
    Idle: (DetectingFormat, Parsing, Validating),
    DetectingFormat: (Parsing,),
    Parsing: (Parsing, Validating),
    Validating: (Validating, Deduplicating),
    Deduplicating: (Deduplicating, Categorizing),
    Categorizing: (Categorizing, AwaitingConfirmation),
    AwaitingConfirmation: (Saving,),
    Saving: (Saving, Completed),
    Completed: (),
    Failed: (),
    Cancelled: (),
}


class ImportProgressMachine:
    """Holds the single live progress value of one import session.

    Any non-terminal state may move to Failed or Cancelled. Terminal
    states only leave through ``reset``, which returns to Idle.
    """

    def __init__(self) -> None:
        self._state: ImportProgress = Idle()
        self._listeners: list[ProgressListener] = []
        self._lock = threading.Lock()

    @property
    def state(self) -> ImportProgress:
        return self._state

    @property
    def is_cancelled(self) -> bool:
        return isinstance(self._state, Cancelled)

    def subscribe(self, listener: ProgressListener) -> None:
        self._listeners.append(listener)

    def transition(self, new_state: ImportProgress) -> None:
        with self._lock:
            current = self._state
            if not self._is_allowed(current, new_state):
                raise InvalidProgressTransitionError(
                    f"Cannot move from {type(current).__name__} to {type(new_state).__name__}"
                )
            self._state = new_state
        Log.debug(f"Import progress: {type(current).__name__} -> {type(new_state).__name__}")
        self._notify(new_state)

    def reset(self) -> None:
        with self._lock:
            self._state = Idle()
        self._notify(self._state)

    @staticmethod
    def _is_allowed(current: ImportProgress, new_state: ImportProgress) -> bool:
        if current.terminal:
            return False
        if isinstance(new_state, (Failed, Cancelled)):
            return True
        return isinstance(new_state, _ALLOWED[type(current)])

    def _notify(self, state: ImportProgress) -> None:
        for listener in self._listeners:
            listener(state)
