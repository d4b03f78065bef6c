"""
Pydantic models for stored study documents.

These models define the structure of the MongoDB documents written by the
review service. Keys are camelCase in storage, snake_case in Python.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemType(str, Enum):
    """Kind of reviewable item."""
    FLASHCARD = "flashcard"
    QUESTION = "question"


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


# ---- Schedule updates ----

class FlashcardScheduleUpdate(_Document):
    """Fields set on a flashcard after an SM-2 review."""
    sm2_repetitions: int = Field(..., alias="sm2Repetitions", ge=0)
    sm2_interval: int = Field(..., alias="sm2Interval", ge=1)
    sm2_easiness: float = Field(..., alias="sm2Easiness", ge=1.3)
    due_at: datetime = Field(..., alias="dueAt")
    last_reviewed_at: datetime = Field(..., alias="lastReviewedAt")
    review_rating: str = Field(..., alias="reviewRating")
    updated_at: datetime = Field(..., alias="updatedAt")


class QuestionScheduleUpdate(_Document):
    """Fields set on a question after an FSRS review."""
    fsrs_state: int = Field(..., alias="fsrsState", ge=0, le=3)
    fsrs_stability: float = Field(..., alias="fsrsStability")
    fsrs_difficulty: float = Field(..., alias="fsrsDifficulty")
    fsrs_elapsed_days: float = Field(..., alias="fsrsElapsedDays", ge=0)
    fsrs_scheduled_days: float = Field(..., alias="fsrsScheduledDays", ge=0)
    fsrs_learning_steps: int = Field(..., alias="fsrsLearningSteps", ge=0)
    fsrs_reps: int = Field(..., alias="fsrsReps", ge=0)
    fsrs_lapses: int = Field(..., alias="fsrsLapses", ge=0)
    due_at: datetime = Field(..., alias="dueAt")
    last_reviewed_at: datetime = Field(..., alias="lastReviewedAt")
    review_rating: str = Field(..., alias="reviewRating")
    review_interval_minutes: int = Field(..., alias="reviewIntervalMinutes", ge=1)
    updated_at: datetime = Field(..., alias="updatedAt")


# ---- Review log ----

class ReviewLogDocument(_Document):
    """One graded review, as it was before scheduling."""
    deck_id: Any = Field(None, alias="deckId")
    item_type: ItemType = Field(..., alias="itemType")
    item_id: Any = Field(..., alias="itemId")
    rating: str
    state: str
    due_at: Optional[datetime] = Field(None, alias="dueAt")
    next_due_at: datetime = Field(..., alias="nextDueAt")
    stability: float
    difficulty: float
    elapsed_days: float = Field(..., alias="elapsedDays")
    scheduled_days: float = Field(..., alias="scheduledDays")
    learning_steps: int = Field(..., alias="learningSteps")
    reps: int
    lapses: int
    reviewed_at: datetime = Field(..., alias="reviewedAt")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    def to_document(self) -> dict:
        doc = super().to_document()
        doc["itemType"] = self.item_type.value
        return doc
