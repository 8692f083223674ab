"""Reversible operation models: single operations and atomic composites."""

import logging
from typing import Any, Iterable, List, Optional, Tuple

from ..exceptions.history_exception import InvalidStateError, OperationFailedError
from .results import OperationResult

logger = logging.getLogger(__name__)


class Operation:
    """
    Base class for reversible operations.

    Subclasses implement ``_apply`` and ``_invert``. Any pre-state needed to
    invert is kept on private attributes of the instance and is only read by
    ``_invert``; the public surface is ``apply``, ``invert`` and ``label``.

    ``_apply`` must return ``OperationResult.NO_EFFECT`` without touching the
    subject when the mutation is not valid for the current state.
    """

    def __init__(self, label: Optional[str] = None):
        self.label = label or type(self).__name__
        self._applied = False
        # HistoryLedger holding this operation on its applied stack, if any
        self._ledger = None

    @property
    def is_applied(self) -> bool:
        return self._applied

    def apply(self, subject: Any) -> OperationResult:
        """Mutate the subject forward."""
        if self._applied:
            raise InvalidStateError(f"Operation '{self.label}' is already applied")

        result = self._apply(subject)
        if result is OperationResult.APPLIED:
            self._applied = True
        return result

    def invert(self, subject: Any) -> None:
        """Return the subject to the state it had before the matching apply."""
        if self._ledger is not None:
            raise InvalidStateError(
                f"Operation '{self.label}' is recorded in a history and can only "
                f"be inverted by undo"
            )
        self._revert(subject)

    def _revert(self, subject: Any) -> None:
        if not self._applied:
            raise InvalidStateError(
                f"Operation '{self.label}' cannot be inverted before it is applied"
            )

        self._invert(subject)
        self._applied = False

    def _apply(self, subject: Any) -> OperationResult:
        raise NotImplementedError

    def _invert(self, subject: Any) -> None:
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}(label={self.label!r})"


class CompositeOperation(Operation):
    """
    Ordered group of operations applied and inverted as one atomic unit.

    Children apply in insertion order and invert in reverse order. If a child
    raises during apply, the children that already applied are inverted (best
    effort) and ``OperationFailedError`` is raised. Once the composite has
    applied it is sealed and ``add`` raises ``InvalidStateError``.
    """

    def __init__(
        self, label: Optional[str] = None, operations: Iterable[Operation] = ()
    ):
        super().__init__(label or "composite")
        self._children: List[Operation] = []
        self._completed: List[Operation] = []
        self._sealed = False

        for operation in operations:
            self.add(operation)

    @property
    def children(self) -> Tuple[Operation, ...]:
        return tuple(self._children)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def __len__(self):
        return len(self._children)

    def add(self, operation: Operation) -> "CompositeOperation":
        """Append a child operation. Returns the composite for chaining."""
        if self._sealed:
            raise InvalidStateError(
                f"Composite '{self.label}' is sealed and cannot accept new operations"
            )
        if operation is self:
            raise InvalidStateError("A composite cannot contain itself")
        if any(child is operation for child in self._children):
            raise InvalidStateError(
                f"Operation '{operation.label}' is already part of '{self.label}'"
            )
        if operation.is_applied:
            raise InvalidStateError(
                f"Operation '{operation.label}' is already applied elsewhere"
            )

        self._children.append(operation)
        return self

    def _apply(self, subject: Any) -> OperationResult:
        completed: List[Operation] = []

        for index, child in enumerate(self._children):
            try:
                result = child.apply(subject)
            except Exception as e:
                logger.warning(
                    "Child %d (%s) of composite '%s' failed, rolling back %d applied",
                    index,
                    child.label,
                    self.label,
                    len(completed),
                )
                self._rollback(subject, completed)
                raise OperationFailedError(
                    f"Composite '{self.label}' failed at child {index} "
                    f"'{child.label}': {e}",
                    label=self.label,
                ) from e

            if result is OperationResult.APPLIED:
                completed.append(child)
            else:
                logger.debug(
                    "Child '%s' of composite '%s' had no effect", child.label, self.label
                )

        if not completed:
            return OperationResult.NO_EFFECT

        self._completed = completed
        self._sealed = True
        return OperationResult.APPLIED

    def _invert(self, subject: Any) -> None:
        # A child that fails here stays in _completed so a retry resumes with it.
        while self._completed:
            child = self._completed[-1]
            child.invert(subject)
            self._completed.pop()

    def _rollback(self, subject: Any, completed: List[Operation]) -> None:
        for child in reversed(completed):
            try:
                child.invert(subject)
            except Exception:
                logger.exception(
                    "Rollback of '%s' in composite '%s' failed", child.label, self.label
                )
