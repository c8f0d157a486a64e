"""Daily learning aggregate (LearningDay) interface and in-memory implementation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Protocol


@dataclass
class LearningDay:
    """Counters for one calendar day (UTC)."""

    day: date
    reviewed: int = 0
    learned: int = 0
    lapsed: int = 0


class LearningDayLog(Protocol):
    """Capability the review session uses to emit day-bucketed counters."""

    async def record(self, day: date, reviewed: int = 0, learned: int = 0, lapsed: int = 0) -> None:
        ...


class InMemoryLearningDayLog:
    """LearningDay aggregate kept in a dict keyed by date."""

    def __init__(self) -> None:
        self._days: dict[date, LearningDay] = {}

    async def record(self, day: date, reviewed: int = 0, learned: int = 0, lapsed: int = 0) -> None:
        entry = self._days.get(day)
        if entry is None:
            entry = self._days[day] = LearningDay(day=day)
        entry.reviewed += reviewed
        entry.learned += learned
        entry.lapsed += lapsed

    def get(self, day: date) -> LearningDay:
        """Counters for a day; days without activity read as zero."""
        entry = self._days.get(day)
        if entry is None:
            return LearningDay(day=day)
        return LearningDay(day=entry.day, reviewed=entry.reviewed, learned=entry.learned, lapsed=entry.lapsed)

    def list_days(self) -> list[LearningDay]:
        return [self.get(day) for day in sorted(self._days)]


# Per-user logs
_day_logs: dict[str, InMemoryLearningDayLog] = {}


def get_learning_day_log(user_id: str) -> InMemoryLearningDayLog:
    """Get the LearningDay log for a user, creating it on first use."""
    log = _day_logs.get(user_id)
    if log is None:
        log = _day_logs[user_id] = InMemoryLearningDayLog()
    return log


def reset_learning_day_logs() -> None:
    """Drop all logs (for testing)."""
    _day_logs.clear()
