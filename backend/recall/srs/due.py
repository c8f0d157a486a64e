"""Due-set selection.

Every function here recomputes its result from the given mapping, so calls
are idempotent and safe to repeat while states change.
"""

from __future__ import annotations

from datetime import datetime
from typing import Mapping

from .state import SchedulingState
from .time import ensure_utc


def due_items(
    states: Mapping[str, SchedulingState],
    now: datetime,
    limit: int | None = None,
) -> list[str]:
    """Return ids of items due at ``now``, oldest-overdue first.

    Ties on nextDueAt are broken by ascending item id.

    Args:
        states: Scheduling state per item id
        now: Reference time
        limit: Optional maximum number of ids (daily review cap)

    Raises:
        ValueError: If limit is negative
    """
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")

    now = ensure_utc(now)
    due = sorted(
        (state.next_due_at, item_id)
        for item_id, state in states.items()
        if state.next_due_at <= now
    )
    ids = [item_id for _, item_id in due]
    if limit is not None:
        return ids[:limit]
    return ids


def count_due(states: Mapping[str, SchedulingState], now: datetime) -> int:
    now = ensure_utc(now)
    return sum(1 for state in states.values() if state.next_due_at <= now)


def next_due_at(states: Mapping[str, SchedulingState]) -> datetime | None:
    """Earliest nextDueAt across all items (None when there are none)."""
    return min((state.next_due_at for state in states.values()), default=None)


def new_items(states: Mapping[str, SchedulingState]) -> list[str]:
    """Ids of items never reviewed since enrollment or reset."""
    return sorted(item_id for item_id, state in states.items() if state.is_new)
