"""
SM-2 review engine for quick flashcard review.

Flashcards are rated hard/medium/easy, which map to SM-2 qualities 3/4/5.
Qualities 0-2 (failed recall) reset the repetition count; the three-level
flashcard vocabulary never produces them, so flashcard review never resets.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Mapping, Optional

from medrecall.fsrs.constants import DEFAULT_MAXIMUM_INTERVAL

MIN_EASINESS = 1.3
DEFAULT_EASINESS = 2.5
MIN_INTERVAL_DAYS = 1
MAX_INTERVAL_DAYS = DEFAULT_MAXIMUM_INTERVAL

# Seed intervals for the first two successful repetitions
FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6

PASSING_GRADE = 3


@dataclass(frozen=True)
class Sm2State:
    """SM-2 schedule of a flashcard."""
    repetitions: int = 0                 # Consecutive successful reviews
    interval: int = 0                    # Current interval (days)
    easiness: float = DEFAULT_EASINESS   # Easiness factor, >= 1.3
    due_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: Mapping) -> Sm2State:
        """Read the sm2* fields of a flashcard document."""
        return cls(
            repetitions=doc.get("sm2Repetitions") or 0,
            interval=min(doc.get("sm2Interval") or 0, MAX_INTERVAL_DAYS),
            easiness=doc.get("sm2Easiness") or DEFAULT_EASINESS,
            due_at=doc.get("dueAt"),
        )

    def to_document(self) -> dict:
        return {
            "sm2Repetitions": self.repetitions,
            "sm2Interval": self.interval,
            "sm2Easiness": self.easiness,
            "dueAt": self.due_at,
        }


def _clamp_interval(days: int) -> int:
    return min(max(days, MIN_INTERVAL_DAYS), MAX_INTERVAL_DAYS)


def apply_sm2(prev: Optional[Sm2State], grade: int, now: datetime) -> Sm2State:
    """
    Update the SM-2 schedule after a review.

    Args:
        prev: Previous schedule (None for a card never reviewed)
        grade: Quality of recall (0-5)
            0-2 - Failed recall
            3 - Correct with serious difficulty (hard)
            4 - Correct after hesitation (medium)
            5 - Perfect response (easy)
        now: Review timestamp

    Returns:
        New Sm2State with due_at = now + interval days

    Raises:
        ValueError: If grade is outside 0-5
    """
    if isinstance(grade, bool) or not isinstance(grade, int) or not 0 <= grade <= 5:
        raise ValueError(f"SM-2 grade must be an integer 0-5, got {grade!r}")

    prev = prev or Sm2State()
    easiness = max(MIN_EASINESS, prev.easiness)

    if grade < PASSING_GRADE:
        # Failed recall - start over
        repetitions = 0
        interval = FIRST_INTERVAL_DAYS
    else:
        if prev.repetitions == 0:
            interval = FIRST_INTERVAL_DAYS
        elif prev.repetitions == 1:
            interval = SECOND_INTERVAL_DAYS
        else:
            interval = _clamp_interval(round(min(prev.interval, MAX_INTERVAL_DAYS) * prev.easiness))

        # Low grade -> large diff -> easiness shrinks
        diff = 5 - grade
        easiness = max(MIN_EASINESS, prev.easiness + (0.1 - diff * (0.08 + diff * 0.02)))
        repetitions = prev.repetitions + 1

    return Sm2State(
        repetitions=repetitions,
        interval=interval,
        easiness=easiness,
        due_at=now + timedelta(days=interval),
    )
