"""Per-item scheduling state and its flat record encoding."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import IntEnum
from typing import Any, Mapping

from .config import MINIMUM_EASE_FLOOR, SchedulerConfig, get_scheduler_config
from .time import ensure_utc, from_epoch_seconds, parse_iso_z, to_iso_z


class CardState(IntEnum):
    """Derived classification of an item, used for grouping in the client.

    The integer values are the stable persisted encoding.
    """

    NEW = 0
    LEARNING = 1
    REVIEW = 2
    LAPSED = 3


class InvalidStateRecordError(Exception):
    """Raised when a persisted record cannot be decoded into a valid state."""

    pass


@dataclass(frozen=True)
class SchedulingState:
    ease_factor: float
    interval_days: int
    repetition_count: int
    lapse_count: int
    last_reviewed_at: datetime | None
    next_due_at: datetime
    state: CardState

    def __post_init__(self) -> None:
        if self.interval_days < 0:
            raise ValueError(f"interval_days must be >= 0, got {self.interval_days}")
        if self.repetition_count < 0:
            raise ValueError(f"repetition_count must be >= 0, got {self.repetition_count}")
        if self.lapse_count < 0:
            raise ValueError(f"lapse_count must be >= 0, got {self.lapse_count}")
        if self.next_due_at.tzinfo is None:
            raise ValueError("next_due_at must be timezone-aware")
        if self.last_reviewed_at is not None and self.last_reviewed_at.tzinfo is None:
            raise ValueError("last_reviewed_at must be timezone-aware")
        if not isinstance(self.state, CardState):
            raise ValueError(f"state must be a CardState, got {self.state!r}")

    @property
    def is_new(self) -> bool:
        return self.state is CardState.NEW

    def is_due(self, now: datetime) -> bool:
        return self.next_due_at <= ensure_utc(now)


def new_state(now: datetime, config: SchedulerConfig | None = None) -> SchedulingState:
    """Create the state of an item that just entered the learning set (due immediately)."""
    config = config or get_scheduler_config()
    return SchedulingState(
        ease_factor=config.default_ease,
        interval_days=0,
        repetition_count=0,
        lapse_count=0,
        last_reviewed_at=None,
        next_due_at=ensure_utc(now),
        state=CardState.NEW,
    )


def invariant_violations(state: SchedulingState) -> list[str]:
    """Return a description of every invariant the state breaks (empty when consistent)."""
    problems: list[str] = []

    if state.ease_factor < MINIMUM_EASE_FLOOR:
        problems.append(f"easeFactor {state.ease_factor} is below {MINIMUM_EASE_FLOOR}")
    if state.interval_days == 0 and state.state not in (CardState.NEW, CardState.LAPSED):
        problems.append(f"intervalDays is 0 but state is {state.state.name}")
    if state.repetition_count > 0 and state.state not in (CardState.LEARNING, CardState.REVIEW):
        problems.append(f"repetitionCount is {state.repetition_count} but state is {state.state.name}")
    if state.state in (CardState.NEW, CardState.LAPSED) and (state.repetition_count or state.interval_days):
        problems.append(f"{state.state.name} items must have no repetitions and a zero interval")

    if state.last_reviewed_at is None:
        if state.state is not CardState.NEW:
            problems.append(f"never reviewed but state is {state.state.name}")
    else:
        expected = state.last_reviewed_at + timedelta(days=state.interval_days)
        if state.next_due_at != expected:
            problems.append(
                f"nextDueAt {to_iso_z(state.next_due_at)} != lastReviewedAt + intervalDays "
                f"({to_iso_z(expected)})"
            )

    return problems


def to_record(state: SchedulingState) -> dict[str, Any]:
    """Encode a state as a flat, JSON-friendly record."""
    return {
        "easeFactor": state.ease_factor,
        "intervalDays": state.interval_days,
        "repetitionCount": state.repetition_count,
        "lapseCount": state.lapse_count,
        "lastReviewedAt": to_iso_z(state.last_reviewed_at) if state.last_reviewed_at else None,
        "nextDueAt": to_iso_z(state.next_due_at),
        "state": int(state.state),
    }


def _decode_timestamp(value: Any, field_name: str) -> datetime:
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, str):
        return parse_iso_z(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return from_epoch_seconds(value)
    raise InvalidStateRecordError(f"{field_name}: unsupported timestamp {value!r}")


def from_record(record: Mapping[str, Any]) -> SchedulingState:
    """Decode a flat record produced by ``to_record``.

    Timestamps may be ISO-8601 strings or epoch seconds.

    Raises:
        InvalidStateRecordError: If a field is missing or malformed, or the
            decoded state breaks an invariant
    """
    try:
        last_raw = record["lastReviewedAt"]
        state = SchedulingState(
            ease_factor=float(record["easeFactor"]),
            interval_days=int(record["intervalDays"]),
            repetition_count=int(record["repetitionCount"]),
            lapse_count=int(record["lapseCount"]),
            last_reviewed_at=None if last_raw is None else _decode_timestamp(last_raw, "lastReviewedAt"),
            next_due_at=_decode_timestamp(record["nextDueAt"], "nextDueAt"),
            state=CardState(int(record["state"])),
        )
    except KeyError as e:
        raise InvalidStateRecordError(f"Missing field {e.args[0]!r}") from e
    except (TypeError, ValueError) as e:
        raise InvalidStateRecordError(str(e)) from e

    problems = invariant_violations(state)
    if problems:
        raise InvalidStateRecordError("; ".join(problems))
    return state
