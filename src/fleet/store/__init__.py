"""Record store factory.

Provides get_store() / set_store() to swap implementations. Uses the
in-memory store by default; RECORD_STORE_ADAPTER selects another adapter.
"""

import os

from fleet.store.port import Collection, RecordStore

__all__ = ["Collection", "RecordStore", "get_store", "reset_store", "set_store"]

_current_store: RecordStore | None = None


def get_store() -> RecordStore:
    """Return the configured record store (singleton)."""
    global _current_store
    if _current_store is None:
        adapter = os.environ.get("RECORD_STORE_ADAPTER", "memory")
        if adapter == "memory":
            from fleet.store.memory_adapter import InMemoryRecordStore

            _current_store = InMemoryRecordStore()
        else:
            raise ValueError(f"Unknown record store adapter: {adapter}")
    return _current_store


def set_store(store: RecordStore) -> None:
    """Override the active record store (useful for tests)."""
    global _current_store
    _current_store = store


def reset_store() -> None:
    """Reset to the default store."""
    global _current_store
    _current_store = None
