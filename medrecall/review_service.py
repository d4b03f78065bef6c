"""
Review submission - load an item, schedule it, persist the result.

Main workflow:
1. Load the item document
2. Map the submitted rating to a grade
3. Run the scheduler (SM-2 for flashcards, FSRS for questions)
4. Save the new schedule fields and, for questions, a review log

This is the only place that reads the clock; the engines take `now`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from pymongo.database import Database

from medrecall import config, item_repo
from medrecall.fsrs.constants import FsrsParameters
from medrecall.fsrs.memory_state import CardState
from medrecall.fsrs.scheduler import review_card
from medrecall.ratings import (
    InvalidRatingError,
    flashcard_rating_to_sm2_grade,
    grade_to_label,
    map_review_rating,
    parse_flashcard_rating,
    resolve_review_rating,
)
from medrecall.schemas import (
    FlashcardScheduleUpdate,
    ItemType,
    QuestionScheduleUpdate,
    ReviewLogDocument,
)
from medrecall.sm2 import Sm2State, apply_sm2
from medrecall.study_queue import state_to_label

logger = logging.getLogger(__name__)


class ItemNotFoundError(LookupError):
    """No flashcard or question with the given id."""


@dataclass(frozen=True)
class ReviewResponse:
    """Summary returned to the caller after a review."""
    item_id: str
    rating: str
    interval_days: int
    interval_minutes: int
    due_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_id(item_id: Any, item_type: ItemType):
    object_id = item_repo.to_object_id(item_id)
    if object_id is None:
        raise ItemNotFoundError(f"Invalid {item_type.value} id: {item_id!r}")
    return object_id


def _interval_minutes(due_at: datetime, now: datetime) -> int:
    return max(1, round((due_at - now).total_seconds() / 60))


def review_flashcard(
    card_id: Any,
    rating: str,
    now: Optional[datetime] = None,
    db: Optional[Database] = None
) -> ReviewResponse:
    """
    Apply a hard/medium/easy rating to a flashcard with SM-2.

    Raises:
        InvalidRatingError: If rating is not hard/medium/easy
        ItemNotFoundError: If the flashcard does not exist
    """
    flashcard_rating = parse_flashcard_rating(rating)
    object_id = _parse_id(card_id, ItemType.FLASHCARD)
    now = now or _utcnow()

    card = item_repo.get_item(ItemType.FLASHCARD, object_id, db=db)
    if card is None:
        raise ItemNotFoundError(f"Flashcard {card_id} not found")

    grade = flashcard_rating_to_sm2_grade(flashcard_rating)
    next_state = apply_sm2(Sm2State.from_document(card), grade, now)

    update = FlashcardScheduleUpdate(
        sm2_repetitions=next_state.repetitions,
        sm2_interval=next_state.interval,
        sm2_easiness=next_state.easiness,
        due_at=next_state.due_at,
        last_reviewed_at=now,
        review_rating=flashcard_rating.value,
        updated_at=now,
    )
    item_repo.update_item_schedule(ItemType.FLASHCARD, object_id, update.to_document(), db=db)

    logger.info(
        "Flashcard %s rated %s: interval %sd, easiness %.2f",
        object_id, flashcard_rating.value, next_state.interval, next_state.easiness
    )

    return ReviewResponse(
        item_id=str(object_id),
        rating=flashcard_rating.value,
        interval_days=next_state.interval,
        interval_minutes=_interval_minutes(next_state.due_at, now),
        due_at=next_state.due_at,
    )


def review_question(
    question_id: Any,
    rating: Optional[str] = None,
    is_correct: Optional[bool] = None,
    now: Optional[datetime] = None,
    db: Optional[Database] = None,
    parameters: Optional[FsrsParameters] = None
) -> ReviewResponse:
    """
    Apply an again/hard/good/easy rating (or is_correct) to a question with FSRS.

    Uses the owning deck's normalized options for the step sequences.

    Raises:
        InvalidRatingError: If no rating can be resolved
        ItemNotFoundError: If the question does not exist
    """
    review_rating = resolve_review_rating(rating, is_correct)
    object_id = _parse_id(question_id, ItemType.QUESTION)
    now = now or _utcnow()
    parameters = parameters or config.get_fsrs_parameters()

    question = item_repo.get_item(ItemType.QUESTION, object_id, db=db)
    if question is None:
        raise ItemNotFoundError(f"Question {question_id} not found")

    deck_id = question.get("deckId")
    options = item_repo.get_deck_options(deck_id, db=db)

    grade = map_review_rating(review_rating)
    outcome = review_card(CardState.from_document(question, now), grade, now, options, parameters)
    next_card, log = outcome.card, outcome.log

    interval_minutes = _interval_minutes(next_card.due_at, now)
    interval_days = max(0, round(next_card.scheduled_days))

    update = QuestionScheduleUpdate(
        fsrs_state=int(next_card.state),
        fsrs_stability=next_card.stability,
        fsrs_difficulty=next_card.difficulty,
        fsrs_elapsed_days=next_card.elapsed_days,
        fsrs_scheduled_days=next_card.scheduled_days,
        fsrs_learning_steps=next_card.learning_step,
        fsrs_reps=next_card.reps,
        fsrs_lapses=next_card.lapses,
        due_at=next_card.due_at,
        last_reviewed_at=now,
        review_rating=review_rating.value,
        review_interval_minutes=interval_minutes,
        updated_at=now,
    )
    item_repo.update_item_schedule(ItemType.QUESTION, object_id, update.to_document(), db=db)

    review_log = ReviewLogDocument(
        deck_id=deck_id,
        item_type=ItemType.QUESTION,
        item_id=object_id,
        rating=grade_to_label(log.grade),
        state=state_to_label(log.state),
        due_at=log.due_at,
        next_due_at=next_card.due_at,
        stability=log.stability,
        difficulty=log.difficulty,
        elapsed_days=log.elapsed_days,
        scheduled_days=log.scheduled_days,
        learning_steps=log.learning_step,
        reps=next_card.reps,
        lapses=next_card.lapses,
        reviewed_at=log.reviewed_at,
        created_at=now,
        updated_at=now,
    )
    item_repo.insert_review_log(review_log.to_document(), db=db)

    logger.info(
        "Question %s rated %s: %s -> %s, due in %s min",
        object_id, review_rating.value, state_to_label(log.state),
        state_to_label(next_card.state), interval_minutes
    )

    return ReviewResponse(
        item_id=str(object_id),
        rating=review_rating.value,
        interval_days=interval_days,
        interval_minutes=interval_minutes,
        due_at=next_card.due_at,
    )


__all__ = [
    "InvalidRatingError",
    "ItemNotFoundError",
    "ReviewResponse",
    "review_flashcard",
    "review_question",
]
