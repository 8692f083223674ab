from typing import Any, Callable, Iterable, Optional

from history_engine.engine import HistoryEngine
from history_engine.models.operation import CompositeOperation, Operation
from history_engine.models.results import OperationResult

from .chaos_config import ChaosConfig


class ChaosOperation(Operation):

    """Operation wrapper that can fail before the wrapped operation touches the subject.

    Args:
        operation (Operation): The operation to wrap.
        config (ChaosConfig): The configuration for chaos operations.
        fail_on (iterable): Which phases may fail, "apply" and/or "invert".
    """
    def __init__(
            self,
            operation: Operation,
            config: ChaosConfig,
            fail_on: Iterable[str] = ("apply", "invert"),
    ):
        super().__init__(operation.label)
        self.operation = operation
        self.chaos = config
        self.fail_on = frozenset(fail_on)

    def _apply(self, subject: Any) -> OperationResult:
        if "apply" in self.fail_on:
            self.chaos.maybe_fail("operation_apply")
        return self.operation.apply(subject)

    def _invert(self, subject: Any) -> None:
        if "invert" in self.fail_on:
            self.chaos.maybe_fail("operation_invert")
        self.operation.invert(subject)


class ChaosProxy:

    """Proxy class to inject chaos into history engine calls.
    This class wraps the HistoryEngine and applies chaos
    configurations such as random failures and delays before each call.

    Args:
        engine (HistoryEngine): The engine instance to wrap.
        config (ChaosConfig): The configuration for chaos operations.
    """
    def __init__(self, engine: HistoryEngine, config: ChaosConfig):
        self.engine = engine
        self.chaos = config

    def _with_chaos(self, operation: Callable, *args, context: str, **kwargs) -> Any:
        self.chaos.maybe_fail(context)
        self.chaos.maybe_delay(context)
        return operation(*args, **kwargs)

    def wrap(self, operation: Operation, fail_on: Iterable[str] = ("apply", "invert")) -> ChaosOperation:
        """Wrap an operation so the subject-level work can fail."""
        return ChaosOperation(operation, self.chaos, fail_on)

    def composite(self, operations: Iterable[Operation], label: Optional[str] = None) -> CompositeOperation:
        """Build a composite whose children may fail while applying."""
        return CompositeOperation(label, [self.wrap(op, fail_on=("apply",)) for op in operations])

    def execute(self, operation: Operation):
        """Execute an operation with chaos injection."""
        return self._with_chaos(self.engine.execute, operation, context="execute")

    def execute_composite(self, composite: CompositeOperation):
        """Execute a composite with chaos injection."""
        return self._with_chaos(self.engine.execute_composite, composite, context="execute_composite")

    def undo(self):
        """Undo with chaos injection."""
        return self._with_chaos(self.engine.undo, context="undo")

    def redo(self):
        """Redo with chaos injection."""
        return self._with_chaos(self.engine.redo, context="redo")

    def save_checkpoint(self, name: str):
        """Save a checkpoint with chaos injection."""
        return self._with_chaos(self.engine.save_checkpoint, name, context="save_checkpoint")

    def restore_checkpoint(self, name: str):
        """Restore a checkpoint with chaos injection."""
        return self._with_chaos(self.engine.restore_checkpoint, name, context="restore_checkpoint")
