"""SRS engine (grading, SM-2 scheduling, due-set selection)."""

from .config import SchedulerConfig, get_scheduler_config
from .due import count_due, due_items, new_items, next_due_at
from .grading import Grade, ReviewAction, classify, classify_swipe
from .sm2 import advance, is_temporal_inversion, preview_intervals, reset
from .state import (
    CardState,
    InvalidStateRecordError,
    SchedulingState,
    from_record,
    invariant_violations,
    new_state,
    to_record,
)

__all__ = [
    "SchedulerConfig",
    "get_scheduler_config",
    "count_due",
    "due_items",
    "new_items",
    "next_due_at",
    "Grade",
    "ReviewAction",
    "classify",
    "classify_swipe",
    "advance",
    "is_temporal_inversion",
    "preview_intervals",
    "reset",
    "CardState",
    "InvalidStateRecordError",
    "SchedulingState",
    "from_record",
    "invariant_violations",
    "new_state",
    "to_record",
]
