import logging
import time
from typing import Any, Dict, List, Optional

from history_engine.engine import HistoryEngine
from history_engine.exceptions.history_exception import (
    CheckpointNotFoundError,
    HistoryError,
    OperationFailedError,
    RedoFailedError,
    UndoFailedError,
)
from history_engine.models.results import HistoryStatus
from history_engine.record_operations import DeleteRecord, PutRecord, RecordStore, SetField

from .chaos_config import ChaosConfig
from .chaos_proxy import ChaosProxy
from .exceptions.chaos_exception import ChaosException

logger = logging.getLogger(__name__)

ACTIONS = ["put", "delete", "set_field", "composite", "undo", "redo", "save", "restore"]
KEYS = [f"item_{i}" for i in range(10)]
CHECKPOINTS = ["alpha", "beta", "gamma"]


def run_chaos(
        iterations: int = 200,
        duration: Optional[float] = None,
        config: Optional[ChaosConfig] = None,
        seed: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Drive random history calls through a ChaosProxy and check the engine against
    a shadow model of the expected record store states.

    Every failure injected by chaos happens before the subject is touched, so after
    any failed call the subject and history counts must be exactly as they were.

    Returns a report with per-outcome counts and a list of invariant violations.
    """
    if config is None:
        config = ChaosConfig(enabled=True, failure_rate=0.3, delay_chance=0.0, seed=seed)
    rng = config.random

    engine = HistoryEngine(RecordStore(), max_history=None)
    db = ChaosProxy(engine, config)

    # Shadow model: states before each applied step, states before each undo
    past: List[Dict[str, Any]] = []
    future: List[Dict[str, Any]] = []
    saved: Dict[str, Dict[str, Any]] = {}

    outcomes: Dict[str, int] = {}
    violations: List[str] = []

    def record(outcome: str) -> None:
        outcomes[outcome] = outcomes.get(outcome, 0) + 1

    def check(condition: bool, message: str) -> None:
        if not condition:
            violations.append(message)
            logger.error("[CHAOS TEST] Invariant violated: %s", message)

    def random_operation():
        action = rng.choice(["put", "delete", "set_field"])
        key = rng.choice(KEYS)
        if action == "put":
            return PutRecord(key, {"value": rng.randint(1, 100)})
        if action == "delete":
            return DeleteRecord(key)
        return SetField(key, "value", rng.randint(1, 100))

    start_time = time.time()
    step = 0
    while step < iterations:
        if duration is not None and time.time() - start_time >= duration:
            break
        step += 1

        action = rng.choice(ACTIONS)
        before = engine.subject.capture_snapshot()
        counts_before = (engine.ledger.undo_count, engine.ledger.redo_count)

        try:
            if action in ("put", "delete", "set_field"):
                result = db.execute(db.wrap(random_operation()))
                if result.status is HistoryStatus.APPLIED:
                    past.append(before)
                    future.clear()
            elif action == "composite":
                operations = [random_operation() for _ in range(rng.randint(1, 4))]
                result = db.execute_composite(db.composite(operations, label=f"batch_{step}"))
                if result.status is HistoryStatus.APPLIED:
                    past.append(before)
                    future.clear()
            elif action == "undo":
                result = db.undo()
                if result.status is HistoryStatus.UNDONE:
                    check(bool(past), f"step {step}: undo succeeded with empty shadow history")
                    if past:
                        check(engine.subject.data == past.pop(), f"step {step}: undo state mismatch")
                    future.append(before)
                else:
                    check(not past, f"step {step}: nothing to undo but shadow has {len(past)}")
            elif action == "redo":
                result = db.redo()
                if result.status is HistoryStatus.REDONE:
                    check(bool(future), f"step {step}: redo succeeded with empty shadow future")
                    if future:
                        check(engine.subject.data == future.pop(), f"step {step}: redo state mismatch")
                    past.append(before)
                else:
                    check(not future, f"step {step}: nothing to redo but shadow has {len(future)}")
            elif action == "save":
                name = rng.choice(CHECKPOINTS)
                db.save_checkpoint(name)
                saved[name] = before
            else:
                name = rng.choice(CHECKPOINTS)
                db.restore_checkpoint(name)
                check(name in saved, f"step {step}: restored unknown checkpoint {name}")
                check(engine.subject.data == saved.get(name), f"step {step}: restore state mismatch")
                check(not engine.can_undo() and not engine.can_redo(), f"step {step}: history survived restore")
                past.clear()
                future.clear()
            record(action)
        except CheckpointNotFoundError:
            check(name not in saved, f"step {step}: checkpoint {name} reported missing")
            record("checkpoint_not_found")
        except (ChaosException, OperationFailedError, UndoFailedError, RedoFailedError) as e:
            logger.info("[CHAOS TEST] %s failed: %s", action, e)
            record(f"{action}_failed")
            check(engine.subject.data == before, f"step {step}: state changed by failed {action}")
            check(
                (engine.ledger.undo_count, engine.ledger.redo_count) == counts_before,
                f"step {step}: history changed by failed {action}",
            )
        except HistoryError as e:
            check(False, f"step {step}: unexpected {e}")

        check(engine.ledger.undo_count == len(past), f"step {step}: undo depth diverged")
        check(engine.ledger.redo_count == len(future), f"step {step}: redo depth diverged")

    return {
        "steps": step,
        "outcomes": outcomes,
        "violations": violations,
        "final_state": engine.subject.capture_snapshot(),
        "metrics": config.get_metrics(),
    }


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    chaos = ChaosConfig(enabled=True, failure_rate=0.3, delay_chance=0.4, max_delay=0.2)
    report = run_chaos(iterations=100, duration=10, config=chaos)

    print("[CHAOS TEST] Outcomes:", report["outcomes"])
    print("[CHAOS TEST] Final state:", report["final_state"])
    if report["violations"]:
        print(f"[CHAOS TEST] {len(report['violations'])} invariant violations:")
        for violation in report["violations"]:
            print(f"  {violation}")
    else:
        print("[CHAOS TEST] No invariant violations.")

    print("\n[CHAOS TEST] Chaos metrics:")
    chaos.print_metrics()


if __name__ == "__main__":
    main()
