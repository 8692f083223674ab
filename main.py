"""Main entry point for the reversible history engine demonstration."""

import logging

from history_engine.engine import HistoryEngine, RestorePolicy
from history_engine.exceptions.history_exception import OperationFailedError
from history_engine.models.operation import CompositeOperation, Operation
from history_engine.record_operations import DeleteRecord, PutRecord, RecordStore, SetField
from history_engine.text_operations import DeleteText, InsertText, TextDocument


def text_editor_demo():
    """Undo, redo and branch discarding on a text buffer."""
    document = TextDocument()
    editor = HistoryEngine(document, max_history=50)

    print("=== TEXT EDITOR ===")
    for operation in (InsertText("Hello"), InsertText(", world")):
        result = editor.execute(operation)
        print(f"{result.status.value:>10}: {result.label:<20} -> {document.content!r}")

    for _ in range(2):
        result = editor.undo()
        print(f"{result.status.value:>10}: {result.label:<20} -> {document.content!r}")

    result = editor.redo()
    print(f"{result.status.value:>10}: {result.label:<20} -> {document.content!r}")

    result = editor.execute(InsertText("!"))
    print(f"{result.status.value:>10}: {result.label:<20} -> {document.content!r}")

    result = editor.redo()
    print(f"{result.status.value:>10}: (redo branch was discarded)")

    result = editor.execute(DeleteText(100))
    print(f"{result.status.value:>10}: {result.label:<20} -> {document.content!r}")
    editor.print_status()


def record_store_demo():
    """Composite operations and checkpoints on a keyed record store."""
    store = RecordStore()
    engine = HistoryEngine(store, restore_policy=RestorePolicy.CLEAR_HISTORY)

    print("=== RECORD STORE ===")
    setup = CompositeOperation("initial stock")
    setup.add(PutRecord("MILK-1GAL", {"quantity": 48, "price": 3.99}))
    setup.add(PutRecord("BREAD-LOAF", {"quantity": 36, "price": 2.49}))
    engine.execute_composite(setup)
    print(f"After setup: {store.data}")

    engine.save_checkpoint("opening")

    engine.execute_all(
        [SetField("MILK-1GAL", "quantity", 46), SetField("BREAD-LOAF", "quantity", 35)],
        label="sale",
    )
    engine.execute(DeleteRecord("BREAD-LOAF"))
    print(f"After sale and delist: {store.data}")

    engine.undo()
    print(f"After undoing delist: {store.data}")

    try:
        engine.execute_all([SetField("MILK-1GAL", "quantity", 40), FailingOperation()])
    except OperationFailedError as e:
        print(f"Composite rolled back: {e}")
    print(f"Unchanged: {store.data}")

    info = engine.restore_checkpoint("opening")
    print(f"Restored checkpoint {info.name!r} (sequence {info.sequence}): {store.data}")
    print(f"Undo after restore: {engine.undo().status.value}")
    engine.print_status()


class FailingOperation(Operation):
    """Operation whose subject raises, used to show composite rollback."""

    def __init__(self):
        super().__init__("broken write")

    def _apply(self, store):
        raise IOError("storage unavailable")

    def _invert(self, store):
        pass


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    text_editor_demo()
    record_store_demo()


if __name__ == "__main__":
    main()
