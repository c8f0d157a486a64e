"""Per-user registry of per-item review locks.

Every ReviewSession of a user shares that user's ItemLocks, so a session that
was replaced or expired still serializes against its successor. Locks are held
weakly and disappear once no review holds or waits on them.
"""

from __future__ import annotations

import asyncio
import threading
import weakref


class ItemLocks:
    """Lazily created asyncio locks keyed by item id."""

    def __init__(self):
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def lock_for(self, item_id: str) -> asyncio.Lock:
        lock = self._locks.get(item_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[item_id] = lock
        return lock

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._locks

    def __len__(self) -> int:
        return len(self._locks)


_item_locks: dict[str, ItemLocks] = {}
_registry_lock = threading.Lock()


def get_item_locks(user_id: str) -> ItemLocks:
    """Get the lock registry shared by all of the user's sessions."""
    with _registry_lock:
        locks = _item_locks.get(user_id)
        if locks is None:
            locks = _item_locks[user_id] = ItemLocks()
        return locks


def reset_item_locks() -> None:
    """Drop all lock registries (for testing)."""
    with _registry_lock:
        _item_locks.clear()
