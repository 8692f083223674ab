"""Linear undo/redo history for reversible operations."""

import logging
from typing import Any, List, Optional

from .exceptions.history_exception import (
    InvalidStateError,
    RedoFailedError,
    UndoFailedError,
)
from .models.operation import Operation
from .models.results import HistoryResult, HistoryStatus, OperationResult

logger = logging.getLogger(__name__)


class HistoryLedger:
    """
    Owns the applied and undone stacks of operations for one subject.

    Undo always targets the most recently applied operation and redo the most
    recently undone one. Executing a new operation discards the redo side.
    """

    def __init__(self, subject: Any, max_history: Optional[int] = None):
        if max_history is not None and max_history <= 0:
            raise ValueError(f"max_history must be positive: {max_history}")

        self.subject = subject
        self.max_history = max_history
        self._applied: List[Operation] = []
        self._undone: List[Operation] = []

    def execute(self, operation: Operation) -> HistoryResult:
        """Apply an operation and record it if it changed the subject."""
        if operation.is_applied:
            raise InvalidStateError(
                f"Operation '{operation.label}' is already applied and owned by a history"
            )

        result = operation.apply(self.subject)
        if result is not OperationResult.APPLIED:
            logger.debug("Operation '%s' had no effect, not recorded", operation.label)
            return HistoryResult(HistoryStatus.NO_EFFECT, operation.label)

        self._push_applied(operation)
        if self._undone:
            logger.debug("Discarding %d redoable operations", len(self._undone))
            self._undone.clear()
        self._enforce_limit()

        logger.info("Executed '%s'", operation.label)
        return HistoryResult(HistoryStatus.APPLIED, operation.label)

    def undo(self) -> HistoryResult:
        """Invert the most recently applied operation."""
        if not self._applied:
            return HistoryResult(HistoryStatus.NOTHING_TO_UNDO)

        operation = self._applied[-1]
        try:
            operation._revert(self.subject)
        except InvalidStateError:
            raise
        except Exception as e:
            logger.warning("Undo of '%s' failed: %s", operation.label, e)
            raise UndoFailedError(operation.label, str(e)) from e

        self._applied.pop()
        operation._ledger = None
        self._undone.append(operation)

        logger.info("Undid '%s'", operation.label)
        return HistoryResult(HistoryStatus.UNDONE, operation.label)

    def redo(self) -> HistoryResult:
        """Re-apply the most recently undone operation."""
        if not self._undone:
            return HistoryResult(HistoryStatus.NOTHING_TO_REDO)

        operation = self._undone[-1]
        try:
            result = operation.apply(self.subject)
        except InvalidStateError:
            raise
        except Exception as e:
            logger.warning("Redo of '%s' failed: %s", operation.label, e)
            raise RedoFailedError(operation.label, str(e)) from e

        if result is not OperationResult.APPLIED:
            logger.warning("Redo of '%s' had no effect", operation.label)
            raise RedoFailedError(operation.label, "operation had no effect")

        self._undone.pop()
        self._push_applied(operation)
        self._enforce_limit()

        logger.info("Redid '%s'", operation.label)
        return HistoryResult(HistoryStatus.REDONE, operation.label)

    def peek_undo_label(self) -> Optional[str]:
        return self._applied[-1].label if self._applied else None

    def peek_redo_label(self) -> Optional[str]:
        return self._undone[-1].label if self._undone else None

    def can_undo(self) -> bool:
        return len(self._applied) > 0

    def can_redo(self) -> bool:
        return len(self._undone) > 0

    @property
    def undo_count(self) -> int:
        return len(self._applied)

    @property
    def redo_count(self) -> int:
        return len(self._undone)

    def undo_labels(self) -> List[str]:
        """Labels of the applied operations, oldest first."""
        return [operation.label for operation in self._applied]

    def redo_labels(self) -> List[str]:
        """Labels of the undone operations, next redo candidate last."""
        return [operation.label for operation in self._undone]

    def clear(self) -> None:
        """Drop both stacks without touching the subject."""
        for operation in self._applied:
            operation._ledger = None
        self._applied.clear()
        self._undone.clear()

    def _push_applied(self, operation: Operation) -> None:
        self._applied.append(operation)
        operation._ledger = self

    def _enforce_limit(self) -> None:
        # Evicted operations are dropped, never inverted.
        if self.max_history is None:
            return

        overflow = len(self._applied) - self.max_history
        if overflow > 0:
            evicted = self._applied[:overflow]
            del self._applied[:overflow]
            for operation in evicted:
                operation._ledger = None
            logger.debug(
                "History cap %d reached, evicted %s",
                self.max_history,
                [operation.label for operation in evicted],
            )
