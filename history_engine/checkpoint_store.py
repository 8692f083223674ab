"""Named checkpoints of a subject's full state."""

import copy
import logging
import time
from typing import Any, Dict, Optional, Tuple

from .exceptions.history_exception import CheckpointNotFoundError
from .models.operation import Operation
from .models.results import OperationResult
from .models.snapshot import Snapshot

logger = logging.getLogger(__name__)


class CheckpointStore:
    """Maps checkpoint names to snapshots, independent of undo/redo history."""

    def __init__(self, subject: Any, max_checkpoints: Optional[int] = None):
        if max_checkpoints is not None and max_checkpoints <= 0:
            raise ValueError(f"max_checkpoints must be positive: {max_checkpoints}")

        self.subject = subject
        self.max_checkpoints = max_checkpoints
        self.sequence_counter = 0
        self._checkpoints: Dict[str, Snapshot] = {}

    def _next_sequence(self) -> int:
        self.sequence_counter += 1
        return self.sequence_counter

    def save(self, name: str) -> Snapshot:
        """Capture the subject's state under ``name``, replacing any older one."""
        if not isinstance(name, str) or not name:
            raise ValueError(f"Checkpoint name must be a non-empty string: {name!r}")

        snapshot = Snapshot(
            sequence=self._next_sequence(),
            timestamp=time.time(),
            data=self.subject.capture_snapshot(),
            name=name,
        )

        replaced = name in self._checkpoints
        self._checkpoints[name] = snapshot
        self._enforce_limit()

        logger.info(
            "Checkpoint '%s' %s (sequence %d)",
            name,
            "replaced" if replaced else "saved",
            snapshot.sequence,
        )
        return snapshot

    def get(self, name: str) -> Snapshot:
        try:
            return self._checkpoints[name]
        except KeyError:
            raise CheckpointNotFoundError(name) from None

    def restore(self, name: str) -> Snapshot:
        """Replace the subject's state wholesale with the named checkpoint."""
        snapshot = self.get(name)

        # The stored snapshot must survive later mutations of the subject.
        self.subject.restore_snapshot(copy.deepcopy(snapshot.data))

        logger.info("Restored checkpoint '%s' (sequence %d)", name, snapshot.sequence)
        return snapshot

    def delete(self, name: str) -> None:
        if name not in self._checkpoints:
            raise CheckpointNotFoundError(name)

        del self._checkpoints[name]
        logger.info("Deleted checkpoint '%s'", name)

    def names(self) -> Tuple[str, ...]:
        """Stored checkpoint names, detached from the store."""
        return tuple(self._checkpoints)

    def __contains__(self, name: object) -> bool:
        return name in self._checkpoints

    def __len__(self):
        return len(self._checkpoints)

    def _enforce_limit(self) -> None:
        if self.max_checkpoints is None:
            return

        while len(self._checkpoints) > self.max_checkpoints:
            oldest = min(self._checkpoints.values(), key=lambda s: s.sequence)
            del self._checkpoints[oldest.name]
            logger.debug(
                "Checkpoint cap %d reached, evicted '%s'",
                self.max_checkpoints,
                oldest.name,
            )


class RestoreCheckpointOperation(Operation):
    """Restores a snapshot as an undoable operation."""

    def __init__(self, snapshot: Snapshot):
        super().__init__(f"restore checkpoint '{snapshot.name}'")
        self._snapshot = snapshot
        self._previous_state: Any = None

    def _apply(self, subject: Any) -> OperationResult:
        self._previous_state = subject.capture_snapshot()
        subject.restore_snapshot(copy.deepcopy(self._snapshot.data))
        return OperationResult.APPLIED

    def _invert(self, subject: Any) -> None:
        subject.restore_snapshot(self._previous_state)
        self._previous_state = None
