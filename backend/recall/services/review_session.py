"""Review session controller.

Sequences one review pass: builds the due queue, applies the scheduler to each
graded item, persists the result and emits daily counters. It never does any
scheduling math itself.

Reviews of the same item are serialized with a per-item lock covering the
whole load, advance, save and commit sequence. The locks come from an
ItemLocks registry that the sessions of one user share. Different items run
concurrently; persistence is the only suspension point.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, TypeVar

from recall.repositories import LearningDayLog, PersistenceError, StateStore
from recall.services.item_locks import ItemLocks
from recall.srs import (
    Grade,
    ReviewAction,
    SchedulerConfig,
    SchedulingState,
    advance,
    classify,
    due_items,
    get_scheduler_config,
    is_temporal_inversion,
    new_state,
)
from recall.srs.time import day_bucket, ensure_utc, to_iso_z

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReviewNotSavedError(Exception):
    """Raised when a review could not be persisted; the item keeps its previous state."""

    def __init__(self, item_id: str, cause: Exception | None = None):
        super().__init__(f"Review of item {item_id} was not saved")
        self.item_id = item_id
        self.cause = cause


@dataclass
class RetryPolicy:
    """Exponential backoff for store calls."""

    max_attempts: int = 3
    base_delay: float = 0.05
    max_delay: float = 1.0
    exponential_base: float = 2.0
    exceptions: tuple[type[Exception], ...] = (PersistenceError, ConnectionError, TimeoutError, OSError)

    def calculate_delay(self, attempt: int) -> float:
        """Delay in seconds before retrying after the given (0-indexed) attempt."""
        return min(self.base_delay * (self.exponential_base**attempt), self.max_delay)


@dataclass
class SessionStats:
    """Summary of the reviews committed during a session."""

    total_reviewed: int = 0
    learned: int = 0
    again_count: int = 0
    grade_distribution: dict[Grade, int] = field(default_factory=dict)

    @property
    def average_grade(self) -> float:
        count = sum(self.grade_distribution.values())
        if count == 0:
            return 0.0
        total = sum(int(grade) * n for grade, n in self.grade_distribution.items())
        return total / count

    def record(self, grade: Grade, learned: bool) -> None:
        self.total_reviewed += 1
        self.grade_distribution[grade] = self.grade_distribution.get(grade, 0) + 1
        if grade is Grade.AGAIN:
            self.again_count += 1
        if learned:
            self.learned += 1


class ReviewSession:
    """One user's review pass over their items."""

    def __init__(
        self,
        store: StateStore,
        day_log: LearningDayLog,
        config: SchedulerConfig | None = None,
        retry: RetryPolicy | None = None,
        locks: ItemLocks | None = None,
    ):
        self._store = store
        self._day_log = day_log
        self._config = config or get_scheduler_config()
        self._retry = retry or RetryPolicy()

        self._states: dict[str, SchedulingState] = {}
        self._queue: list[str] = []
        self._limit: int | None = self._config.daily_review_limit
        self._locks = locks if locks is not None else ItemLocks()
        self.stats = SessionStats()

    @property
    def config(self) -> SchedulerConfig:
        return self._config

    @property
    def queue(self) -> list[str]:
        """Due ids computed when the session started."""
        return list(self._queue)

    @property
    def states(self) -> dict[str, SchedulingState]:
        """Snapshot of the committed in-memory states."""
        return dict(self._states)

    @property
    def remaining(self) -> int | None:
        """Reviews left under the daily limit (None when unlimited)."""
        if self._limit is None:
            return None
        return max(0, self._limit - self.stats.total_reviewed)

    async def start(self, now: datetime, limit: int | None = None) -> list[str]:
        """Load all states from the store and build the due queue."""
        self._states = await self._call_with_retry(self._store.list_states)
        if limit is not None:
            self._limit = limit
        self._queue = due_items(self._states, now, self._limit)
        logger.info(f"Review session started: due={len(self._queue)}, limit={self._limit}")
        return self.queue

    def next_item(self, now: datetime) -> str | None:
        """Next item to present, or None when nothing is due or the limit is reached."""
        if self.remaining == 0:
            return None
        due = due_items(self._states, now, limit=1)
        return due[0] if due else None

    def _lock_for(self, item_id: str) -> asyncio.Lock:
        return self._locks.lock_for(item_id)

    async def _call_with_retry(self, func: Callable[..., Awaitable[T]], *args) -> T:
        policy = self._retry
        last_exception: Exception | None = None

        for attempt in range(policy.max_attempts):
            try:
                return await func(*args)
            except policy.exceptions as e:
                last_exception = e
                if attempt < policy.max_attempts - 1:
                    delay = policy.calculate_delay(attempt)
                    logger.warning(
                        f"Retry {attempt + 1}/{policy.max_attempts} for {func.__name__}: "
                        f"{type(e).__name__}: {e}. Waiting {delay:.2f}s"
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.error(
                        f"All {policy.max_attempts} attempts failed for {func.__name__}: "
                        f"{type(e).__name__}: {e}"
                    )

        if last_exception:
            raise last_exception
        raise RuntimeError(f"Retry failed for {func.__name__}")

    async def enroll(self, item_id: str, now: datetime) -> SchedulingState:
        """Create the state of an item entering the learning set.

        Returns the existing state when the item is already enrolled.
        """
        state, _ = await self.ensure_enrolled(item_id, now)
        return state

    async def ensure_enrolled(self, item_id: str, now: datetime) -> tuple[SchedulingState, bool]:
        """Like enroll, also telling whether a new state was created."""
        async with self._lock_for(item_id):
            existing = await self._call_with_retry(self._store.load, item_id)
            if existing is not None:
                self._states[item_id] = existing
                return existing, False

            state = new_state(now, self._config)
            await self._call_with_retry(self._store.save, item_id, state)
            self._states[item_id] = state
            logger.info(f"Item enrolled: item={item_id}, due={to_iso_z(state.next_due_at)}")
            return state, True

    async def remove(self, item_id: str) -> None:
        """Delete an item's state from the store and the session."""
        async with self._lock_for(item_id):
            await self._store.delete(item_id)
            self._states.pop(item_id, None)
            if item_id in self._queue:
                self._queue.remove(item_id)

    async def _load_snapshot(self, item_id: str, now: datetime) -> SchedulingState:
        stored = await self._call_with_retry(self._store.load, item_id)
        if stored is not None:
            return stored
        cached = self._states.get(item_id)
        if cached is not None:
            return cached
        return new_state(now, self._config)

    async def submit(self, item_id: str, grade: Grade | ReviewAction, now: datetime) -> SchedulingState:
        """Apply a graded review of one item and persist it.

        The in-memory state is only replaced once the store has accepted the
        new state. Every retry writes the state computed from the same
        pre-review snapshot, so a retried review advances the item once.

        Raises:
            ReviewNotSavedError: If the store kept failing after all retries
        """
        grade = classify(grade)
        now = ensure_utc(now)

        async with self._lock_for(item_id):
            previous = self._states.get(item_id)
            try:
                snapshot = await self._load_snapshot(item_id, now)
            except self._retry.exceptions as e:
                raise ReviewNotSavedError(item_id, e) from e

            if is_temporal_inversion(snapshot, now):
                logger.warning(
                    f"Review time precedes last review: item={item_id}, "
                    f"now={to_iso_z(now)}, lastReviewedAt={to_iso_z(snapshot.last_reviewed_at)}"
                )

            updated = advance(snapshot, grade, now, self._config)

            try:
                await self._call_with_retry(self._store.save, item_id, updated)
            except asyncio.CancelledError:
                self._rollback(item_id, previous)
                logger.warning(f"Review save cancelled, state rolled back: item={item_id}")
                raise
            except self._retry.exceptions as e:
                self._rollback(item_id, previous)
                raise ReviewNotSavedError(item_id, e) from e

            self._states[item_id] = updated
            learned = grade.is_success and updated.repetition_count == self._config.learned_repetitions
            self.stats.record(grade, learned=learned)

            logger.info(
                f"Review applied: item={item_id}, grade={grade.action}, "
                f"interval={updated.interval_days}d, state={updated.state.name}, "
                f"next_due_at={to_iso_z(updated.next_due_at)}"
            )

        await self._emit_day(now, grade, learned)
        return updated

    def _rollback(self, item_id: str, previous: SchedulingState | None) -> None:
        if previous is None:
            self._states.pop(item_id, None)
        else:
            self._states[item_id] = previous

    async def _emit_day(self, now: datetime, grade: Grade, learned: bool) -> None:
        # The review is already durable; a failing aggregate must not undo it
        try:
            await self._day_log.record(
                day_bucket(now),
                reviewed=1,
                learned=1 if learned else 0,
                lapsed=1 if grade is Grade.AGAIN else 0,
            )
        except Exception:
            logger.exception(f"Failed to record learning day counters for {day_bucket(now)}")
