"""Reviews (SRS) API router."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Header, HTTPException, Query, Response, status

from recall.models import (
    DueResponse,
    GradeRequest,
    LearningDayResponse,
    PreviewResponse,
    SchedulingStateResponse,
    SessionStartRequest,
    SessionStartResponse,
    SessionStatsResponse,
)
from recall.repositories import ItemNotFoundError, get_learning_day_log, get_state_store
from recall.services import ReviewNotSavedError, ReviewSession, get_item_locks, get_session_store
from recall.srs import classify, due_items, next_due_at, preview_intervals
from recall.srs.time import parse_iso_z, to_iso_z, utc_now

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/reviews", tags=["reviews"])


def _new_session(user_id: str) -> ReviewSession:
    return ReviewSession(
        get_state_store(user_id),
        get_learning_day_log(user_id),
        locks=get_item_locks(user_id),
    )


def _session_for(user_id: str) -> ReviewSession:
    return get_session_store().get_or_create(user_id, lambda: _new_session(user_id))


async def _load_or_404(user_id: str, item_id: str):
    state = await get_state_store(user_id).load(item_id)
    if state is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Item with ID {item_id} not found",
        )
    return state


@router.post("/items/{item_id}", response_model=SchedulingStateResponse, status_code=status.HTTP_201_CREATED)
async def enroll_item(item_id: str, response: Response, x_user_id: str = Header(...)) -> SchedulingStateResponse:
    """Add an item to the learning set (due immediately).

    Returns 201 for a new item and 200 with the unchanged state for one already enrolled.
    """
    state, created = await _session_for(x_user_id).ensure_enrolled(item_id, utc_now())
    if not created:
        response.status_code = status.HTTP_200_OK
    return SchedulingStateResponse.from_state(item_id, state)


@router.get("/items/{item_id}", response_model=SchedulingStateResponse)
async def get_item(item_id: str, x_user_id: str = Header(...)) -> SchedulingStateResponse:
    """Get an item's scheduling state."""
    state = await _load_or_404(x_user_id, item_id)
    return SchedulingStateResponse.from_state(item_id, state)


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_item(item_id: str, x_user_id: str = Header(...)) -> None:
    """Remove an item and its scheduling state."""
    try:
        await _session_for(x_user_id).remove(item_id)
    except ItemNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Item with ID {item_id} not found",
        )


@router.get("/items/{item_id}/preview", response_model=PreviewResponse)
async def preview_item(item_id: str, x_user_id: str = Header(...)) -> PreviewResponse:
    """Interval each action would schedule for the item right now."""
    state = await _load_or_404(x_user_id, item_id)
    intervals = preview_intervals(state, utc_now())
    return PreviewResponse(
        itemId=item_id,
        intervals={grade.action: days for grade, days in intervals.items()},
    )


@router.get("/due", response_model=DueResponse)
async def list_due(
    x_user_id: str = Header(...),
    limit: int | None = Query(None, ge=0),
) -> DueResponse:
    """Return the ids of items due now, oldest-overdue first."""
    states = await get_state_store(x_user_id).list_states()
    ids = due_items(states, utc_now(), limit)
    if ids:
        return DueResponse(itemIds=ids, count=len(ids), nextDueAt=None)

    upcoming = next_due_at(states)
    return DueResponse(itemIds=[], count=0, nextDueAt=to_iso_z(upcoming) if upcoming else None)


@router.post("/session", response_model=SessionStartResponse)
async def start_session(
    request: SessionStartRequest | None = None,
    x_user_id: str = Header(...),
) -> SessionStartResponse:
    """Start (or restart) the user's review session."""
    session = _new_session(x_user_id)
    now = utc_now()
    queue = await session.start(now, request.limit if request else None)
    get_session_store().replace(x_user_id, session)
    return SessionStartResponse(queue=queue, count=len(queue), nextItemId=session.next_item(now))


@router.get("/session/stats", response_model=SessionStatsResponse)
async def session_stats(x_user_id: str = Header(...)) -> SessionStatsResponse:
    """Summary of the reviews done in the current session."""
    session = get_session_store().get(x_user_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No active review session",
        )

    stats = session.stats
    return SessionStatsResponse(
        totalReviewed=stats.total_reviewed,
        learned=stats.learned,
        againCount=stats.again_count,
        gradeDistribution={grade.action: n for grade, n in sorted(stats.grade_distribution.items())},
        averageGrade=stats.average_grade,
        remaining=session.remaining,
        nextItemId=session.next_item(utc_now()),
    )


@router.post("/items/{item_id}/grade", response_model=SchedulingStateResponse)
async def grade_item(item_id: str, request: GradeRequest, x_user_id: str = Header(...)) -> SchedulingStateResponse:
    """Apply a review grade to an item and persist its new schedule."""
    await _load_or_404(x_user_id, item_id)

    if request.reviewedAt is not None:
        try:
            now = parse_iso_z(request.reviewedAt)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Invalid reviewedAt timestamp: {request.reviewedAt}",
            )
    else:
        now = utc_now()

    try:
        state = await _session_for(x_user_id).submit(item_id, classify(request.action), now)
    except ReviewNotSavedError:
        logger.error(f"Review not saved: user={x_user_id}, item={item_id}, action={request.action}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Review not saved, please try again",
        )
    return SchedulingStateResponse.from_state(item_id, state)


@router.get("/days/{day}", response_model=LearningDayResponse)
async def learning_day(day: date, x_user_id: str = Header(...)) -> LearningDayResponse:
    """Daily review counters."""
    entry = get_learning_day_log(x_user_id).get(day)
    return LearningDayResponse(
        date=entry.day.isoformat(),
        reviewed=entry.reviewed,
        learned=entry.learned,
        lapsed=entry.lapsed,
    )
