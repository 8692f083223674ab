"""Keyed record store subject with put, delete and field-update operations."""

import copy
from typing import Any, Dict, Optional

from .models.operation import Operation
from .models.results import OperationResult
from .subject import Subject

_MISSING = object()


class RecordStore(Subject):
    """
    In-memory key/value store of records.

    Values are usually dicts (for ``SetField``) but may be any deep-copyable
    object.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = copy.deepcopy(data) if data else {}

    def get(self, key: str) -> Any:
        return self.data.get(key)

    def capture_snapshot(self) -> Dict[str, Any]:
        return copy.deepcopy(self.data)

    def restore_snapshot(self, state: Dict[str, Any]) -> None:
        self.data = state


class PutRecord(Operation):
    """Create or overwrite the record stored under ``key``."""

    def __init__(self, key: str, value: Any):
        super().__init__(f"put {key}")
        self.key = key
        self.value = value
        self._old_value: Any = _MISSING

    def _apply(self, store: RecordStore) -> OperationResult:
        if not isinstance(self.key, str):
            return OperationResult.NO_EFFECT

        self._old_value = store.data.get(self.key, _MISSING)
        store.data[self.key] = copy.deepcopy(self.value)
        return OperationResult.APPLIED

    def _invert(self, store: RecordStore) -> None:
        if self._old_value is _MISSING:
            # Key was newly created
            del store.data[self.key]
        else:
            store.data[self.key] = self._old_value
        self._old_value = _MISSING


class DeleteRecord(Operation):
    """Remove the record stored under ``key``; a missing key has no effect."""

    def __init__(self, key: str):
        super().__init__(f"delete {key}")
        self.key = key
        self._old_value: Any = _MISSING

    def _apply(self, store: RecordStore) -> OperationResult:
        if self.key not in store.data:
            return OperationResult.NO_EFFECT

        self._old_value = store.data.pop(self.key)
        return OperationResult.APPLIED

    def _invert(self, store: RecordStore) -> None:
        store.data[self.key] = self._old_value
        self._old_value = _MISSING


class SetField(Operation):
    """
    Set one field of a dict record.

    Has no effect if the record does not exist, is not a dict, or already
    holds ``value`` in that field.
    """

    def __init__(self, key: str, field: str, value: Any):
        super().__init__(f"set {key}.{field}")
        self.key = key
        self.field = field
        self.value = value
        self._old_value: Any = _MISSING

    def _apply(self, store: RecordStore) -> OperationResult:
        record = store.data.get(self.key)
        if not isinstance(record, dict):
            return OperationResult.NO_EFFECT
        if self.field in record and record[self.field] == self.value:
            return OperationResult.NO_EFFECT

        self._old_value = record.get(self.field, _MISSING)
        record[self.field] = copy.deepcopy(self.value)
        return OperationResult.APPLIED

    def _invert(self, store: RecordStore) -> None:
        record = store.data[self.key]
        if self._old_value is _MISSING:
            del record[self.field]
        else:
            record[self.field] = self._old_value
        self._old_value = _MISSING
