"""Models module for Pydantic schemas."""

from .review import (
    DueResponse,
    GradeRequest,
    LearningDayResponse,
    PreviewResponse,
    SchedulingStateResponse,
    SessionStartRequest,
    SessionStartResponse,
    SessionStatsResponse,
)

__all__ = [
    "DueResponse",
    "GradeRequest",
    "LearningDayResponse",
    "PreviewResponse",
    "SchedulingStateResponse",
    "SessionStartRequest",
    "SessionStartResponse",
    "SessionStatsResponse",
]
