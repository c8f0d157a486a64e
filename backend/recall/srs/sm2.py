"""SM-2 family scheduler.

``advance`` is pure and deterministic: the same state, grade and ``now``
always produce the same next state. Grades use a 0-3 scale
(again=0, hard=1, good=2, easy=3).
"""

from __future__ import annotations

from datetime import datetime, timedelta

from .config import SchedulerConfig, get_scheduler_config
from .grading import Grade
from .state import CardState, SchedulingState, new_state
from .time import ensure_utc


def _clamp_ease_factor(ef: float, config: SchedulerConfig) -> float:
    return max(config.minimum_ease, ef)


def _ease_after_success(ef: float, grade: Grade, config: SchedulerConfig) -> float:
    """EF' = EF + (0.1 - (3-g)*(0.08 + (3-g)*0.02)), clamped to the floor.

    Good leaves EF unchanged, Easy raises it by 0.1, Hard lowers it by 0.14.
    """
    distance = 3 - int(grade)
    return _clamp_ease_factor(ef + (0.1 - distance * (0.08 + distance * 0.02)), config)


def _interval_multiplier(grade: Grade, config: SchedulerConfig) -> float:
    if grade is Grade.HARD:
        return config.hard_interval_multiplier
    if grade is Grade.EASY:
        return config.easy_interval_multiplier
    return 1.0


def _success_interval(
    previous_interval: int, repetitions: int, ef_prime: float, grade: Grade, config: SchedulerConfig
) -> int:
    if repetitions == 1:
        interval = config.first_interval_days
    elif repetitions == 2:
        interval = config.second_interval_days
    else:
        interval = max(1, round(previous_interval * ef_prime * _interval_multiplier(grade, config)))
    return min(interval, config.max_interval_days)


def is_temporal_inversion(state: SchedulingState, now: datetime) -> bool:
    """True when ``now`` precedes the state's last review (a caller-contract violation)."""
    return state.last_reviewed_at is not None and ensure_utc(now) < state.last_reviewed_at


def advance(
    state: SchedulingState,
    grade: Grade,
    now: datetime,
    config: SchedulerConfig | None = None,
) -> SchedulingState:
    """Apply one review to the given state and return the next state.

    Rules:
    - again: lapses += 1, repetitions = 0, intervalDays = 0, EF -= penalty, state = LAPSED
    - otherwise:
        repetitions += 1, EF' from the grade
        repetitions == 1: intervalDays = 1
        repetitions == 2: intervalDays = 6
        else: intervalDays = round(previousIntervalDays * EF' * m), m = 0.8 hard / 1.0 good / 1.3 easy
        state = REVIEW once intervalDays exceeds the maturity threshold, LEARNING before
    - intervalDays is capped at max_interval_days
    - lastReviewedAt = now, nextDueAt = now + intervalDays

    A ``now`` earlier than ``lastReviewedAt`` is not corrected; the schedule
    is computed forward from ``now``.
    """
    config = config or get_scheduler_config()
    now = ensure_utc(now)

    if grade is Grade.AGAIN:
        return SchedulingState(
            ease_factor=_clamp_ease_factor(state.ease_factor - config.lapse_ease_penalty, config),
            interval_days=0,
            repetition_count=0,
            lapse_count=state.lapse_count + 1,
            last_reviewed_at=now,
            next_due_at=now,
            state=CardState.LAPSED,
        )

    reps_prime = state.repetition_count + 1
    ef_prime = _ease_after_success(state.ease_factor, grade, config)
    interval_prime = _success_interval(state.interval_days, reps_prime, ef_prime, grade, config)

    if interval_prime > config.maturity_threshold_days:
        card_state = CardState.REVIEW
    else:
        card_state = CardState.LEARNING

    return SchedulingState(
        ease_factor=ef_prime,
        interval_days=interval_prime,
        repetition_count=reps_prime,
        lapse_count=state.lapse_count,
        last_reviewed_at=now,
        next_due_at=now + timedelta(days=interval_prime),
        state=card_state,
    )


def preview_intervals(
    state: SchedulingState, now: datetime, config: SchedulerConfig | None = None
) -> dict[Grade, int]:
    """Interval in days each grade would schedule, for labelling the grade buttons."""
    return {grade: advance(state, grade, now, config).interval_days for grade in Grade}


def reset(now: datetime, config: SchedulerConfig | None = None) -> SchedulingState:
    """Forget an item's history; it becomes new and due at ``now``."""
    return new_state(now, config)
