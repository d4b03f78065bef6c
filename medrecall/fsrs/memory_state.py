"""
Memory State - card record and derived quantities.

Key concepts:
- Stability (S): days until recall probability decays to 90%
- Difficulty (D): item-intrinsic hardness (1-10 scale)
- Retrievability (R): probability of successful recall at time t
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from medrecall.fsrs.constants import DECAY, FACTOR, State


# Persisted field names, as stored on flashcard/question documents
DOCUMENT_FIELDS = {
    "state": "fsrsState",
    "stability": "fsrsStability",
    "difficulty": "fsrsDifficulty",
    "elapsed_days": "fsrsElapsedDays",
    "scheduled_days": "fsrsScheduledDays",
    "learning_step": "fsrsLearningSteps",
    "reps": "fsrsReps",
    "lapses": "fsrsLapses",
}


@dataclass(frozen=True)
class CardState:
    """
    Schedule of a single reviewable item (flashcard or question).

    A fresh item is NEW with zero counters, no memory state and no
    previous review.
    """
    state: State = State.NEW
    stability: float = 0.0       # S, in days (0 until first review)
    difficulty: float = 0.0      # D, range 1-10 (0 until first review)
    elapsed_days: float = 0.0    # Days since previous review, at this review
    scheduled_days: float = 0.0  # Interval that was scheduled, in days
    learning_step: int = 0       # Index into learning/relearning steps
    reps: int = 0                # Successful (non-Again) reviews
    lapses: int = 0              # Review -> Again transitions
    due_at: Optional[datetime] = None
    last_reviewed_at: Optional[datetime] = None

    def evolve(self, **changes) -> CardState:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    @classmethod
    def new(cls, now: datetime) -> CardState:
        """A NEW card that is due immediately."""
        return cls(due_at=now)

    @classmethod
    def from_document(cls, doc: dict, now: datetime) -> CardState:
        """
        Build a card from a persisted item document.

        Fields that are missing or of the wrong type keep the fresh-card
        default, so partially migrated documents still schedule.

        Args:
            doc: Flashcard or question document (fsrs* fields, dueAt, lastReviewedAt)
            now: Current time, used as due date for a fresh card

        Returns:
            CardState
        """
        values = {}
        for attr, key in DOCUMENT_FIELDS.items():
            value = doc.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            if attr == "state":
                try:
                    value = State(int(value))
                except ValueError:
                    continue
            elif attr in ("learning_step", "reps", "lapses"):
                value = max(0, int(value))
            else:
                value = float(value)
            values[attr] = value

        due_at = doc.get("dueAt")
        last_reviewed_at = doc.get("lastReviewedAt")
        values["due_at"] = _as_utc(due_at) if isinstance(due_at, datetime) else now
        if isinstance(last_reviewed_at, datetime):
            values["last_reviewed_at"] = _as_utc(last_reviewed_at)

        return cls(**values)

    def to_document(self) -> dict:
        """Fields to $set on the item document after a review."""
        doc = {key: getattr(self, attr) for attr, key in DOCUMENT_FIELDS.items()}
        doc["fsrsState"] = int(self.state)
        doc["dueAt"] = self.due_at
        doc["lastReviewedAt"] = self.last_reviewed_at
        return doc


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by pymongo) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def calculate_retrievability(stability: float, elapsed_days: float) -> float:
    """
    Probability of recall after elapsed_days.

    Formula: R = (1 + FACTOR * t / S) ^ DECAY

    Returns 1.0 for non-positive elapsed time or an item without stability.
    """
    if elapsed_days <= 0 or stability <= 0:
        return 1.0
    return (1.0 + FACTOR * elapsed_days / stability) ** DECAY


def get_elapsed_days(last_reviewed_at: Optional[datetime], now: datetime) -> float:
    """
    Days between the previous review and now.

    Clamped to zero so clock skew or a back-dated review never produces a
    negative elapsed time. Returns 0 for an item never reviewed.
    """
    if last_reviewed_at is None:
        return 0.0

    delta = _as_utc(now) - _as_utc(last_reviewed_at)
    return max(0.0, delta.total_seconds() / 86400.0)
