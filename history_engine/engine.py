"""Facade combining undo/redo history and named checkpoints for one subject."""

import logging
import threading
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from .checkpoint_store import CheckpointStore, RestoreCheckpointOperation
from .history_ledger import HistoryLedger
from .models.operation import CompositeOperation, Operation
from .models.results import HistoryResult
from .models.snapshot import CheckpointInfo
from .subject import check_subject

logger = logging.getLogger(__name__)


class RestorePolicy(Enum):
    """How restoring a checkpoint interacts with undo/redo history."""

    CLEAR_HISTORY = "clear_history"
    UNDOABLE = "undoable"


class HistoryEngine:
    """
    Reversible-operation history for a single subject.

    - execute/undo/redo in strict LIFO order, with redo discarded on execute
    - atomic composite operations
    - named checkpoints that can be restored at any time

    Every public call holds ``self.lock`` for its full duration. Callers get
    labels and ``CheckpointInfo`` handles back, never operations or captured
    state.
    """

    def __init__(
        self,
        subject: Any,
        max_history: Optional[int] = None,
        max_checkpoints: Optional[int] = None,
        restore_policy: RestorePolicy = RestorePolicy.CLEAR_HISTORY,
    ):
        check_subject(subject)

        self.subject = subject
        self.lock = threading.RLock()

        # Component managers
        self.ledger = HistoryLedger(subject, max_history)
        self.checkpoints = CheckpointStore(subject, max_checkpoints)

        # Configuration
        self.restore_policy = RestorePolicy(restore_policy)

    def execute(self, operation: Operation) -> HistoryResult:
        """Apply an operation; it is recorded only if it changed the subject."""
        with self.lock:
            return self.ledger.execute(operation)

    def execute_composite(self, composite: CompositeOperation) -> HistoryResult:
        """Apply a builder-populated composite as one undoable step."""
        if not isinstance(composite, CompositeOperation):
            raise TypeError(
                f"execute_composite expects a CompositeOperation, got "
                f"{type(composite).__name__}"
            )
        with self.lock:
            return self.ledger.execute(composite)

    def execute_all(
        self, operations: Iterable[Operation], label: Optional[str] = None
    ) -> HistoryResult:
        """Group ``operations`` into a composite and execute it."""
        return self.execute_composite(CompositeOperation(label, operations))

    def undo(self) -> HistoryResult:
        with self.lock:
            return self.ledger.undo()

    def redo(self) -> HistoryResult:
        with self.lock:
            return self.ledger.redo()

    def peek_undo_label(self) -> Optional[str]:
        with self.lock:
            return self.ledger.peek_undo_label()

    def peek_redo_label(self) -> Optional[str]:
        with self.lock:
            return self.ledger.peek_redo_label()

    def can_undo(self) -> bool:
        with self.lock:
            return self.ledger.can_undo()

    def can_redo(self) -> bool:
        with self.lock:
            return self.ledger.can_redo()

    def clear_history(self) -> None:
        """Forget all undo/redo history. The subject and checkpoints are kept."""
        with self.lock:
            self.ledger.clear()
            logger.info("History cleared")

    def save_checkpoint(self, name: str) -> CheckpointInfo:
        with self.lock:
            return self.checkpoints.save(name).info()

    def restore_checkpoint(self, name: str) -> CheckpointInfo:
        """
        Restore the subject to the named checkpoint.

        With ``RestorePolicy.CLEAR_HISTORY`` the undo and redo stacks are
        emptied. With ``RestorePolicy.UNDOABLE`` the restore is recorded as an
        operation, so undo returns to the pre-restore state.

        Raises:
            CheckpointNotFoundError: If no checkpoint has that name
        """
        with self.lock:
            if self.restore_policy is RestorePolicy.UNDOABLE:
                snapshot = self.checkpoints.get(name)
                self.ledger.execute(RestoreCheckpointOperation(snapshot))
                return snapshot.info()

            snapshot = self.checkpoints.restore(name)
            self.ledger.clear()
            logger.info("History cleared after restoring checkpoint '%s'", name)
            return snapshot.info()

    def get_checkpoint(self, name: str) -> CheckpointInfo:
        with self.lock:
            return self.checkpoints.get(name).info()

    def delete_checkpoint(self, name: str) -> None:
        with self.lock:
            self.checkpoints.delete(name)

    def list_checkpoints(self) -> Tuple[str, ...]:
        """Checkpoint names in no particular order."""
        with self.lock:
            return self.checkpoints.names()

    def get_status(self) -> Dict[str, Any]:
        """Get current history status."""
        with self.lock:
            return {
                "undo_count": self.ledger.undo_count,
                "redo_count": self.ledger.redo_count,
                "next_undo": self.ledger.peek_undo_label(),
                "next_redo": self.ledger.peek_redo_label(),
                "undo_history": self.ledger.undo_labels(),
                "checkpoints": sorted(self.checkpoints.names()),
                "max_history": self.ledger.max_history,
                "restore_policy": self.restore_policy.value,
            }

    def print_status(self) -> None:
        """Print current history status."""
        status = self.get_status()
        print("\n=== HISTORY STATUS ===")
        print(f"Undo steps: {status['undo_count']} (next: {status['next_undo']})")
        print(f"Redo steps: {status['redo_count']} (next: {status['next_redo']})")
        print(f"History: {status['undo_history']}")
        print(f"Checkpoints: {status['checkpoints']}")
        print("======================\n")
