"""Scheduling state persistence interface and its in-memory implementation.

Real storage is provided by the host application. The in-memory store keeps
the flat record encoding, so every save/load goes through serialization
exactly as a database-backed store would.
"""

from __future__ import annotations

from typing import Any, Protocol

from recall.srs.state import SchedulingState, from_record, to_record


class ItemNotFoundError(Exception):
    """Raised when an item has no scheduling state."""

    pass


class PersistenceError(Exception):
    """Raised when the store rejects or fails to write a state."""

    pass


class StateStore(Protocol):
    """Capability the review session uses to persist scheduling state."""

    async def save(self, item_id: str, state: SchedulingState) -> None:
        ...

    async def load(self, item_id: str) -> SchedulingState | None:
        ...

    async def list_states(self) -> dict[str, SchedulingState]:
        ...

    async def delete(self, item_id: str) -> None:
        ...


class InMemoryStateStore:
    """State store backed by a dict of flat records."""

    def __init__(self, records: dict[str, dict[str, Any]] | None = None):
        """Initialize the store with optional pre-existing records."""
        self._records: dict[str, dict[str, Any]] = dict(records or {})

    async def save(self, item_id: str, state: SchedulingState) -> None:
        self._records[item_id] = to_record(state)

    async def load(self, item_id: str) -> SchedulingState | None:
        record = self._records.get(item_id)
        if record is None:
            return None
        return from_record(record)

    async def list_states(self) -> dict[str, SchedulingState]:
        return {item_id: from_record(record) for item_id, record in self._records.items()}

    async def delete(self, item_id: str) -> None:
        """Delete an item's state."""
        if self._records.pop(item_id, None) is None:
            raise ItemNotFoundError(f"Item with ID {item_id} not found")

    def records(self) -> dict[str, dict[str, Any]]:
        """Copy of the raw persisted records."""
        return {item_id: dict(record) for item_id, record in self._records.items()}


# Per-user store instances
_state_stores: dict[str, InMemoryStateStore] = {}


def get_state_store(user_id: str) -> InMemoryStateStore:
    """Get the state store for a user, creating it on first use."""
    store = _state_stores.get(user_id)
    if store is None:
        store = _state_stores[user_id] = InMemoryStateStore()
    return store


def reset_state_stores() -> None:
    """Drop all stores (for testing)."""
    _state_stores.clear()
