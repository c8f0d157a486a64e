"""Repositories module for the external collaborators of the review session."""

from .state_repository import (
    InMemoryStateStore,
    ItemNotFoundError,
    PersistenceError,
    StateStore,
    get_state_store,
    reset_state_stores,
)
from .learning_day_repository import (
    InMemoryLearningDayLog,
    LearningDay,
    LearningDayLog,
    get_learning_day_log,
    reset_learning_day_logs,
)

__all__ = [
    "InMemoryStateStore",
    "ItemNotFoundError",
    "PersistenceError",
    "StateStore",
    "get_state_store",
    "reset_state_stores",
    "InMemoryLearningDayLog",
    "LearningDay",
    "LearningDayLog",
    "get_learning_day_log",
    "reset_learning_day_logs",
]
