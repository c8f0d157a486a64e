"""Models for the review API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from recall.srs import ReviewAction, SchedulingState, to_record


class SchedulingStateResponse(BaseModel):
    """Flat scheduling record of one item."""

    itemId: str
    easeFactor: float = Field(..., description="Ease factor (min 1.3)")
    intervalDays: int = Field(..., description="Days between lastReviewedAt and nextDueAt")
    repetitionCount: int = Field(..., description="Consecutive successful reviews since the last lapse")
    lapseCount: int = Field(..., description="Total failed reviews")
    lastReviewedAt: str | None = Field(None, description="Last review timestamp (UTC ISO Z)")
    nextDueAt: str = Field(..., description="Next due timestamp (UTC ISO Z)")
    state: int = Field(..., description="0=new, 1=learning, 2=review, 3=lapsed")
    stateName: str

    @classmethod
    def from_state(cls, item_id: str, state: SchedulingState) -> "SchedulingStateResponse":
        return cls(itemId=item_id, stateName=state.state.name.lower(), **to_record(state))


class GradeRequest(BaseModel):
    """Request body for grading an item."""

    action: ReviewAction = Field(..., description="again, hard, good or easy")
    reviewedAt: str | None = Field(None, description="Review time (UTC ISO Z); defaults to now")

    class Config:
        """Pydantic config."""

        json_schema_extra = {"example": {"action": "good"}}


class PreviewResponse(BaseModel):
    """Interval each action would schedule."""

    itemId: str
    intervals: dict[str, int]


class DueResponse(BaseModel):
    """Items due now."""

    itemIds: list[str]
    count: int
    nextDueAt: str | None = Field(None, description="Earliest upcoming nextDueAt when nothing is due")


class SessionStartRequest(BaseModel):
    limit: int | None = Field(None, ge=0, description="Max reviews in this session")


class SessionStartResponse(BaseModel):
    queue: list[str]
    count: int
    nextItemId: str | None


class SessionStatsResponse(BaseModel):
    totalReviewed: int
    learned: int
    againCount: int
    gradeDistribution: dict[str, int]
    averageGrade: float
    remaining: int | None = Field(None, description="Reviews left under the limit (null when unlimited)")
    nextItemId: str | None = None


class LearningDayResponse(BaseModel):
    date: str
    reviewed: int
    learned: int
    lapsed: int
