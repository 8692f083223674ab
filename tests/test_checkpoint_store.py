"""Unit tests for CheckpointStore."""

import dataclasses
import logging
from unittest.mock import patch

import pytest

from history_engine.checkpoint_store import CheckpointStore, RestoreCheckpointOperation
from history_engine.exceptions.history_exception import CheckpointNotFoundError
from history_engine.models.results import OperationResult
from history_engine.models.snapshot import CheckpointInfo, Snapshot
from history_engine.record_operations import RecordStore


# Test fixtures
@pytest.fixture
def store():
    """Provide a record store with sample accounts."""
    return RecordStore(
        {
            "user_1": {"name": "Alice", "balance": 1000},
            "user_2": {"name": "Bob", "balance": 500},
        }
    )


@pytest.fixture
def checkpoints(store):
    """Provide a fresh CheckpointStore over the record store."""
    return CheckpointStore(store)


class TestCheckpointStoreSetup:
    """Test CheckpointStore initialization."""

    def test_init_defaults(self, checkpoints, store):
        assert checkpoints.subject is store
        assert checkpoints.max_checkpoints is None
        assert checkpoints.sequence_counter == 0
        assert len(checkpoints) == 0

    @pytest.mark.parametrize("max_checkpoints", [0, -1])
    def test_init_rejects_non_positive_cap(self, store, max_checkpoints):
        with pytest.raises(ValueError):
            CheckpointStore(store, max_checkpoints=max_checkpoints)


class TestSave:
    """Tests for saving checkpoints."""

    def test_save_captures_state(self, checkpoints, store):
        snapshot = checkpoints.save("A")

        assert isinstance(snapshot, Snapshot)
        assert snapshot.name == "A"
        assert snapshot.sequence == 1
        assert snapshot.timestamp > 0
        assert snapshot.data == store.data
        assert snapshot.data is not store.data
        assert "A" in checkpoints

    def test_snapshot_isolated_from_subject(self, checkpoints, store):
        snapshot = checkpoints.save("A")
        store.data["user_1"]["balance"] = 0

        assert snapshot.data["user_1"]["balance"] == 1000

    def test_snapshot_is_immutable(self, checkpoints):
        snapshot = checkpoints.save("A")

        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.name = "B"

    def test_sequence_increases(self, checkpoints):
        sequences = [checkpoints.save(name).sequence for name in ("A", "B", "A")]
        assert sequences == [1, 2, 3]

    def test_save_overwrites_name(self, checkpoints, store):
        checkpoints.save("A")
        store.data["user_3"] = {"name": "Carol", "balance": 10}

        snapshot = checkpoints.save("A")

        assert len(checkpoints) == 1
        assert checkpoints.get("A") is snapshot
        assert "user_3" in checkpoints.get("A").data

    @pytest.mark.parametrize("name", ["", None, 7])
    def test_save_rejects_invalid_name(self, checkpoints, name):
        with pytest.raises(ValueError):
            checkpoints.save(name)

    @patch("time.time")
    def test_save_records_timestamp(self, mock_time, checkpoints):
        mock_time.return_value = 1234567890.123
        assert checkpoints.save("A").timestamp == 1234567890.123

    def test_save_logs(self, checkpoints, caplog):
        with caplog.at_level(logging.INFO, logger="history_engine.checkpoint_store"):
            checkpoints.save("A")
            checkpoints.save("A")

        assert "Checkpoint 'A' saved (sequence 1)" in caplog.text
        assert "Checkpoint 'A' replaced (sequence 2)" in caplog.text


class TestRestore:
    """Tests for restoring and deleting checkpoints."""

    def test_restore_replaces_state(self, checkpoints, store):
        checkpoints.save("A")
        store.data.clear()

        snapshot = checkpoints.restore("A")

        assert snapshot.name == "A"
        assert store.data["user_1"] == {"name": "Alice", "balance": 1000}

    def test_restore_twice_after_mutation(self, checkpoints, store):
        """Mutating restored state must not corrupt the stored snapshot."""
        checkpoints.save("A")
        checkpoints.restore("A")
        store.data["user_1"]["balance"] = 1

        checkpoints.restore("A")

        assert store.data["user_1"]["balance"] == 1000

    def test_restore_unknown_raises(self, checkpoints):
        with pytest.raises(CheckpointNotFoundError) as exc_info:
            checkpoints.restore("missing")

        assert exc_info.value.name == "missing"
        assert str(exc_info.value) == "CheckpointNotFoundError: Checkpoint 'missing' not found"

    def test_not_found_is_key_error(self, checkpoints):
        with pytest.raises(KeyError):
            checkpoints.get("missing")

    def test_delete(self, checkpoints):
        checkpoints.save("A")
        checkpoints.delete("A")

        assert "A" not in checkpoints
        with pytest.raises(CheckpointNotFoundError):
            checkpoints.restore("A")

    def test_delete_unknown_raises(self, checkpoints):
        with pytest.raises(CheckpointNotFoundError):
            checkpoints.delete("missing")


class TestNames:
    """Tests for listing checkpoint names."""

    def test_names_empty(self, checkpoints):
        assert list(checkpoints.names()) == []

    def test_names_is_restartable(self, checkpoints):
        for name in ("A", "B", "C"):
            checkpoints.save(name)

        names = checkpoints.names()

        assert sorted(names) == ["A", "B", "C"]
        assert sorted(names) == ["A", "B", "C"]

    def test_names_detached_from_store(self, checkpoints):
        checkpoints.save("A")
        checkpoints.save("B")
        names = checkpoints.names()

        checkpoints.delete("A")

        assert sorted(names) == ["A", "B"]
        assert checkpoints.names() == ("B",)

    def test_delete_while_iterating_names(self, checkpoints):
        for name in ("A", "B", "C"):
            checkpoints.save(name)

        for name in checkpoints.names():
            checkpoints.delete(name)

        assert len(checkpoints) == 0


class TestCheckpointLimits:
    """Test checkpoint cap enforcement."""

    def test_lowest_sequence_evicted(self, store):
        checkpoints = CheckpointStore(store, max_checkpoints=2)
        checkpoints.save("A")
        checkpoints.save("B")
        checkpoints.save("A")

        checkpoints.save("C")

        assert sorted(checkpoints.names()) == ["A", "C"]

    def test_overwrite_does_not_evict(self, store):
        checkpoints = CheckpointStore(store, max_checkpoints=2)
        checkpoints.save("A")
        checkpoints.save("B")
        checkpoints.save("B")

        assert sorted(checkpoints.names()) == ["A", "B"]


class TestRestoreCheckpointOperation:
    """Tests for restoring a snapshot as an undoable operation."""

    def test_apply_and_invert(self, checkpoints, store):
        snapshot = checkpoints.save("A")
        store.data["user_3"] = {"name": "Carol", "balance": 10}
        operation = RestoreCheckpointOperation(snapshot)

        assert operation.apply(store) is OperationResult.APPLIED
        assert "user_3" not in store.data

        operation.invert(store)
        assert store.data["user_3"] == {"name": "Carol", "balance": 10}

    def test_label(self, checkpoints):
        operation = RestoreCheckpointOperation(checkpoints.save("A"))
        assert operation.label == "restore checkpoint 'A'"

    def test_snapshot_info_has_no_state(self, checkpoints):
        info = checkpoints.save("A").info()

        assert info == CheckpointInfo(name="A", sequence=1, timestamp=info.timestamp)
        assert not hasattr(info, "data")
