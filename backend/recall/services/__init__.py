"""Review session orchestration."""

from .item_locks import ItemLocks, get_item_locks, reset_item_locks
from .review_session import ReviewNotSavedError, ReviewSession, RetryPolicy, SessionStats
from .session_store import SessionStore, get_session_store, reset_session_store

__all__ = [
    "ItemLocks",
    "ReviewNotSavedError",
    "ReviewSession",
    "RetryPolicy",
    "SessionStats",
    "SessionStore",
    "get_item_locks",
    "get_session_store",
    "reset_item_locks",
    "reset_session_store",
]
