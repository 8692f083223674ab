"""Exceptions raised by the reversible history engine."""

from typing import Optional


class HistoryError(Exception):
    """Base class for all exceptions raised by the history engine."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return f"{type(self).__name__}: {self.message}"


class InvalidStateError(HistoryError):
    """Programmer error: an operation or composite was used out of protocol."""


class OperationFailedError(HistoryError):
    """A composite child failed; the children already applied were inverted."""

    def __init__(self, message: str, label: Optional[str] = None):
        super().__init__(message)
        self.label = label


class UndoFailedError(HistoryError):
    """The subject failed while inverting an operation. History is unchanged."""

    def __init__(self, label: str, reason: str = ""):
        message = f"Undo of '{label}' failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.label = label


class RedoFailedError(HistoryError):
    """The subject failed while re-applying an operation. History is unchanged."""

    def __init__(self, label: str, reason: str = ""):
        message = f"Redo of '{label}' failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.label = label


class CheckpointNotFoundError(HistoryError, KeyError):
    """No checkpoint is stored under the requested name."""

    def __init__(self, name: str):
        super().__init__(f"Checkpoint '{name}' not found")
        self.name = name

    def __str__(self):
        return HistoryError.__str__(self)
