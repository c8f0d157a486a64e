"""TTL-based registry of active review sessions."""

from __future__ import annotations

import threading
from typing import Callable

from cachetools import TTLCache

from recall.services.review_session import ReviewSession


class SessionStore:
    """Thread-safe TTL-based session store.

    Stores one ReviewSession per user id. Sessions expire after TTL seconds
    of inactivity (sliding window).
    """

    # Default TTL: 30 minutes
    DEFAULT_TTL_SECONDS = 30 * 60
    # Max sessions to cache
    MAX_SESSIONS = 10000

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, maxsize: int = MAX_SESSIONS):
        """Initialize the session store.

        Args:
            ttl_seconds: Time-to-live for sessions in seconds
            maxsize: Maximum number of sessions to cache
        """
        self._cache: TTLCache[str, ReviewSession] = TTLCache(maxsize=maxsize, ttl=ttl_seconds)
        self._lock = threading.Lock()

    def get(self, user_id: str) -> ReviewSession | None:
        """Get the user's session, refreshing its TTL.

        Returns None if no session exists or it has expired.
        """
        with self._lock:
            session = self._cache.get(user_id)
            if session is not None:
                # Re-set to refresh TTL (sliding window)
                self._cache[user_id] = session
            return session

    def get_or_create(self, user_id: str, factory: Callable[[], ReviewSession]) -> ReviewSession:
        """Get the user's session or create one with ``factory``."""
        with self._lock:
            session = self._cache.get(user_id)
            if session is None:
                session = factory()
            self._cache[user_id] = session
            return session

    def replace(self, user_id: str, session: ReviewSession) -> None:
        """Install a new session for the user (also refreshes TTL)."""
        with self._lock:
            self._cache[user_id] = session

    def reset(self, user_id: str) -> None:
        """Remove the user's session."""
        with self._lock:
            self._cache.pop(user_id, None)

    def clear(self) -> None:
        """Clear all sessions (for testing)."""
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


# Singleton instance
_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Get the singleton session store instance."""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store


def reset_session_store() -> None:
    """Reset the session store (for testing)."""
    global _session_store
    _session_store = None
