"""In-memory record store for development and testing.

Keeps every collection in a dict guarded by a single lock, which makes each
`update` an atomic read-modify-write for one record. It can be configured at
runtime to fail, and accepts one-shot hooks that run just before an
operation, which is how tests interleave a competing writer between the
reads and writes of a multi-step operation.
"""

import copy
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from uuid import uuid4

from fleet.exceptions import AdapterUnavailable, NotFound, PreconditionFailed
from fleet.store.port import Collection, RecordStore


class InMemoryRecordStore(RecordStore):
    """Dict-backed record store."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: dict[str, dict[str, dict]] = {c.value: {} for c in Collection}
        self._hooks: dict[tuple[str, str], list[Callable[[], None]]] = {}
        self._failures: set[tuple[str, str]] = set()
        self.available: bool = True
        self.failure_reason: str = "Record store unavailable"
        self.calls: list[dict] = []

    # -------------------------------------------------------------------
    # Test controls
    # -------------------------------------------------------------------
    def configure(self, available: bool, failure_reason: str = "Record store unavailable") -> None:
        """Make every subsequent call succeed or fail."""
        self.available = available
        self.failure_reason = failure_reason

    def fail_next(self, operation: str, collection: Collection) -> None:
        """Fail the next `operation` ("list", "get", "create", "update") on `collection`."""
        self._failures.add((operation, Collection(collection).value))

    def before_next(self, operation: str, collection: Collection, hook: Callable[[], None]) -> None:
        """Run `hook` once, right before the next `operation` on `collection`."""
        self._hooks.setdefault((operation, Collection(collection).value), []).append(hook)

    def reset(self) -> None:
        """Drop all records, hooks and failure settings."""
        with self._lock:
            for records in self._records.values():
                records.clear()
        self._hooks.clear()
        self._failures.clear()
        self.available = True
        self.failure_reason = "Record store unavailable"
        self.calls.clear()

    # -------------------------------------------------------------------
    # RecordStore
    # -------------------------------------------------------------------
    def list(self, collection, where=None, order_by=None, limit=None):
        name = self._enter("list", collection, where=where, order_by=order_by, limit=limit)
        with self._lock:
            records = [
                copy.deepcopy(record)
                for record in self._records[name].values()
                if all(record.get(field) == value for field, value in (where or {}).items())
            ]

        if order_by:
            field = order_by.lstrip("-")
            records.sort(
                key=lambda r: (r.get(field) is not None, r.get(field) if r.get(field) is not None else ""),
                reverse=order_by.startswith("-"),
            )
        if limit is not None:
            records = records[:limit]
        return records

    def get(self, collection, record_id):
        name = self._enter("get", collection, record_id=record_id)
        with self._lock:
            record = self._records[name].get(str(record_id))
            if record is None:
                raise NotFound(name, record_id)
            return copy.deepcopy(record)

    def create(self, collection, record):
        name = self._enter("create", collection, record=record)
        now = datetime.now(UTC)
        stored = copy.deepcopy(record)
        stored["id"] = str(uuid4())
        stored.setdefault("created_at", now)
        stored.setdefault("updated_at", stored["created_at"])
        with self._lock:
            self._records[name][stored["id"]] = stored
            return copy.deepcopy(stored)

    def update(self, collection, record_id, patch, expected=None):
        name = self._enter("update", collection, record_id=record_id, patch=patch, expected=expected)
        with self._lock:
            record = self._records[name].get(str(record_id))
            if record is None:
                raise NotFound(name, record_id)

            if expected:
                actual = {field: record.get(field) for field in expected}
                if actual != expected:
                    raise PreconditionFailed(name, str(record_id), expected, actual)

            record.update(copy.deepcopy(patch))
            return copy.deepcopy(record)

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _enter(self, operation: str, collection, **details) -> str:
        name = Collection(collection).value
        self.calls.append({"method": operation, "collection": name, **details})

        for hook in self._hooks.pop((operation, name), []):
            hook()

        if not self.available:
            raise AdapterUnavailable(self.failure_reason)
        if (operation, name) in self._failures:
            self._failures.discard((operation, name))
            raise AdapterUnavailable(f"{self.failure_reason}: {operation} on {name}")
        return name
