"""Result values returned by the history ledger and engine."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OperationResult(Enum):
    """Outcome of applying a single operation to a subject."""

    APPLIED = "applied"
    NO_EFFECT = "no_effect"


class HistoryStatus(Enum):
    """Outcome of an execute, undo or redo request."""

    APPLIED = "applied"
    NO_EFFECT = "no_effect"
    UNDONE = "undone"
    NOTHING_TO_UNDO = "nothing_to_undo"
    REDONE = "redone"
    NOTHING_TO_REDO = "nothing_to_redo"


@dataclass(frozen=True)
class HistoryResult:
    """Status of a history request plus the label of the operation it touched."""

    status: HistoryStatus
    label: Optional[str] = None

    @property
    def changed(self) -> bool:
        """True when the subject was mutated by the request."""
        return self.status in (
            HistoryStatus.APPLIED,
            HistoryStatus.UNDONE,
            HistoryStatus.REDONE,
        )
