"""Review quality classification.

The client sends one of four review actions. They are mapped here onto a
closed ``Grade`` enumeration that the scheduler uses uniformly.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Literal


ReviewAction = Literal["again", "hard", "good", "easy"]

SwipeDirection = Literal["left", "right"]


class Grade(IntEnum):
    """Normalized review grade, ordered from worst to best."""

    AGAIN = 0
    HARD = 1
    GOOD = 2
    EASY = 3

    @property
    def is_success(self) -> bool:
        return self is not Grade.AGAIN

    @property
    def action(self) -> ReviewAction:
        """Wire name of the grade ("again", "hard", "good", "easy")."""
        return self.name.lower()  # type: ignore[return-value]


_ACTION_TO_GRADE: dict[str, Grade] = {
    "again": Grade.AGAIN,
    "hard": Grade.HARD,
    "good": Grade.GOOD,
    "easy": Grade.EASY,
}

_SWIPE_TO_GRADE: dict[str, Grade] = {
    "right": Grade.GOOD,
    "left": Grade.AGAIN,
}


def classify(action: ReviewAction | Grade) -> Grade:
    """Map a raw review action to a Grade.

    Args:
        action: One of "again", "hard", "good", "easy" (case-insensitive),
            or an already classified Grade.

    Returns:
        The matching Grade.

    Raises:
        ValueError: If a string outside the four review actions is given
    """
    if isinstance(action, Grade):
        return action

    grade = _ACTION_TO_GRADE.get(str(action).strip().lower())
    if grade is None:
        raise ValueError(f"Unknown review action: {action!r}")
    return grade


def classify_swipe(direction: SwipeDirection) -> Grade:
    """Map a flashcard swipe to a Grade: right is "good", left is "again"."""
    grade = _SWIPE_TO_GRADE.get(str(direction).strip().lower())
    if grade is None:
        raise ValueError(f"Unknown swipe direction: {direction!r}")
    return grade
