"""
Rating vocabularies exposed to users, mapped onto scheduler grades.

Flashcards use three buttons (hard/medium/easy) and the SM-2 engine.
Questions use four buttons (again/hard/good/easy) and the FSRS engine;
callers that only know right/wrong pass is_correct instead.
Everything is converted here, before it reaches an engine.
"""

from __future__ import annotations
from enum import Enum
from typing import Optional, Union

from medrecall.fsrs.constants import Grade


class InvalidRatingError(ValueError):
    """Rating is not part of the accepted vocabulary."""


class FlashcardRating(str, Enum):
    """Three-level flashcard rating."""
    HARD = "hard"
    MEDIUM = "medium"
    EASY = "easy"


class ReviewRating(str, Enum):
    """Four-level question rating."""
    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"


_FLASHCARD_SM2_GRADES = {
    FlashcardRating.HARD: 3,
    FlashcardRating.MEDIUM: 4,
    FlashcardRating.EASY: 5,
}

_REVIEW_GRADES = {
    ReviewRating.AGAIN: Grade.AGAIN,
    ReviewRating.HARD: Grade.HARD,
    ReviewRating.GOOD: Grade.GOOD,
    ReviewRating.EASY: Grade.EASY,
}


def parse_flashcard_rating(value: Union[str, FlashcardRating]) -> FlashcardRating:
    try:
        return FlashcardRating(value)
    except ValueError:
        raise InvalidRatingError(
            f"rating must be 'hard' | 'medium' | 'easy', got {value!r}"
        ) from None


def parse_review_rating(value: Union[str, ReviewRating]) -> ReviewRating:
    try:
        return ReviewRating(value)
    except ValueError:
        raise InvalidRatingError(
            f"rating must be 'again' | 'hard' | 'good' | 'easy', got {value!r}"
        ) from None


def flashcard_rating_to_sm2_grade(rating: Union[str, FlashcardRating]) -> int:
    """hard/medium/easy -> SM-2 quality 3/4/5."""
    return _FLASHCARD_SM2_GRADES[parse_flashcard_rating(rating)]


def map_review_rating(rating: Union[str, ReviewRating]) -> Grade:
    """again/hard/good/easy -> Grade."""
    return _REVIEW_GRADES[parse_review_rating(rating)]


def resolve_review_rating(
    rating: Optional[str] = None,
    is_correct: Optional[bool] = None
) -> ReviewRating:
    """
    Pick the rating from a review submission.

    A recognised rating string wins; otherwise a boolean is_correct maps
    True -> good and False -> again.

    Raises:
        InvalidRatingError: If neither gives a rating
    """
    if isinstance(rating, str):
        try:
            return ReviewRating(rating)
        except ValueError:
            pass

    if isinstance(is_correct, bool):
        return ReviewRating.GOOD if is_correct else ReviewRating.AGAIN

    raise InvalidRatingError(
        "rating must be 'again' | 'hard' | 'good' | 'easy' or provide isCorrect"
    )


def grade_to_label(grade: Grade) -> str:
    """Grade -> again/hard/good/easy."""
    return ReviewRating[Grade(grade).name].value
