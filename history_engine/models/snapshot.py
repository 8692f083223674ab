"""Snapshot data model for named checkpoints."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Snapshot:
    """Immutable capture of a subject's full state."""

    sequence: int
    timestamp: float
    data: Any
    name: Optional[str] = None

    def info(self) -> "CheckpointInfo":
        return CheckpointInfo(
            name=self.name, sequence=self.sequence, timestamp=self.timestamp
        )


@dataclass(frozen=True)
class CheckpointInfo:
    """Caller-facing handle for a checkpoint. Carries no captured state."""

    name: Optional[str]
    sequence: int
    timestamp: float
