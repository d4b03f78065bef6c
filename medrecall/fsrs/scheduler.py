"""
Scheduler - step-based FSRS state machine.

Pure scheduling logic (no database calls, no clock reads).

Main workflow:
1. Caller builds a CardState from the stored item
2. Compute elapsed days since the previous review
3. Update stability and difficulty for the grade
4. Move the card through New/Learning/Review/Relearning using the
   deck's step sequences
5. Return the new CardState plus a log of the state before the review

Database I/O and the current time are the caller's responsibility.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

from medrecall.fsrs import memory_model
from medrecall.fsrs.constants import DEFAULT_PARAMETERS, FsrsParameters, Grade, State
from medrecall.fsrs.deck_options import DeckOptions, normalize_deck_options
from medrecall.fsrs.memory_state import CardState, calculate_retrievability, get_elapsed_days
from medrecall.fsrs.steps import parse_steps, to_days


@dataclass(frozen=True)
class ReviewLog:
    """Snapshot of a card as it was when graded."""
    grade: Grade
    state: State
    due_at: Optional[datetime]
    stability: float
    difficulty: float
    elapsed_days: float
    scheduled_days: float
    learning_step: int
    reviewed_at: datetime


@dataclass(frozen=True)
class ReviewOutcome:
    """Result of grading a card."""
    card: CardState
    log: ReviewLog

    @property
    def interval(self) -> timedelta:
        """Time from this review until the card is due again."""
        return self.card.due_at - self.log.reviewed_at


def review_card(
    card: CardState,
    grade: Union[Grade, int],
    now: datetime,
    options: DeckOptions,
    parameters: Optional[FsrsParameters] = None
) -> ReviewOutcome:
    """
    Grade a card and compute its next schedule.

    Args:
        card: Current schedule of the item (CardState() for a fresh item)
        grade: AGAIN, HARD, GOOD or EASY
        now: Review timestamp
        options: Deck options supplying the step sequences
        parameters: FSRS model parameters (defaults to the FSRS-5 set)

    Returns:
        ReviewOutcome with the updated card and a log of the previous state

    Raises:
        ValueError: If grade is not one of the four grades
    """
    grade = _validate_grade(grade)
    params = parameters or DEFAULT_PARAMETERS
    options = normalize_deck_options(options)

    elapsed_days = 0.0 if card.state == State.NEW else get_elapsed_days(card.last_reviewed_at, now)

    stability, difficulty = _update_memory(card, grade, elapsed_days, params)
    state, step, interval = _next_position(card, grade, stability, options, params)

    lapses = card.lapses
    if card.state == State.REVIEW and grade == Grade.AGAIN:
        lapses += 1

    reps = card.reps if grade == Grade.AGAIN else card.reps + 1

    next_card = card.evolve(
        state=state,
        stability=stability,
        difficulty=difficulty,
        elapsed_days=elapsed_days,
        scheduled_days=to_days(interval),
        learning_step=step,
        reps=reps,
        lapses=lapses,
        due_at=now + interval,
        last_reviewed_at=now,
    )

    log = ReviewLog(
        grade=grade,
        state=card.state,
        due_at=card.due_at,
        stability=card.stability,
        difficulty=card.difficulty,
        elapsed_days=elapsed_days,
        scheduled_days=card.scheduled_days,
        learning_step=card.learning_step,
        reviewed_at=now,
    )

    return ReviewOutcome(card=next_card, log=log)


def preview_review(
    card: CardState,
    now: datetime,
    options: DeckOptions,
    parameters: Optional[FsrsParameters] = None
) -> dict[Grade, ReviewOutcome]:
    """Outcome of each of the four grades, e.g. to label answer buttons."""
    return {grade: review_card(card, grade, now, options, parameters) for grade in Grade}


def schedule_review(
    document: dict,
    grade: Union[Grade, int],
    now: datetime,
    options: DeckOptions,
    parameters: Optional[FsrsParameters] = None
) -> ReviewOutcome:
    """Grade a stored item document (see CardState.from_document)."""
    card = CardState.from_document(document, now)
    return review_card(card, grade, now, options, parameters)


def _validate_grade(grade: Union[Grade, int]) -> Grade:
    if isinstance(grade, bool):
        raise ValueError(f"Invalid grade: {grade!r}")
    try:
        return Grade(grade)
    except ValueError:
        raise ValueError(f"Invalid grade: {grade!r}") from None


def _update_memory(
    card: CardState,
    grade: Grade,
    elapsed_days: float,
    params: FsrsParameters
) -> tuple[float, float]:
    """
    New stability and difficulty for this review.

    First review -> initial values for the grade.
    Same-day review -> short-term stability.
    Otherwise -> recall/forget stability at the current retrievability.
    """
    if card.state == State.NEW or card.stability <= 0 or card.difficulty <= 0:
        return (
            memory_model.initial_stability(grade, params),
            memory_model.initial_difficulty(grade, params),
        )

    if params.enable_short_term and elapsed_days < 1:
        stability = memory_model.next_short_term_stability(card.stability, grade, params)
    else:
        retrievability = calculate_retrievability(card.stability, elapsed_days)
        if grade == Grade.AGAIN:
            stability = memory_model.next_forget_stability(
                card.stability, card.difficulty, retrievability, params
            )
        else:
            stability = memory_model.next_recall_stability(
                card.stability, card.difficulty, retrievability, grade, params
            )

    difficulty = memory_model.next_difficulty(card.difficulty, grade, params)
    return stability, difficulty


def _next_position(
    card: CardState,
    grade: Grade,
    stability: float,
    options: DeckOptions,
    params: FsrsParameters
) -> tuple[State, int, timedelta]:
    """Next (state, step index, interval) for the card's current state."""
    if card.state == State.NEW:
        return _step_transition(State.LEARNING, options.learning_steps, 0, grade, stability, params)

    if card.state == State.LEARNING:
        return _step_transition(
            State.LEARNING, options.learning_steps, card.learning_step, grade, stability, params
        )

    if card.state == State.RELEARNING:
        return _step_transition(
            State.RELEARNING, options.relearning_steps, card.learning_step, grade, stability, params
        )

    if card.state == State.REVIEW:
        if grade == Grade.AGAIN and options.relearning_steps:
            first_step = parse_steps(options.relearning_steps)[0]
            return State.RELEARNING, 0, first_step
        # Without relearning steps a lapse stays in Review on the shrunk stability
        return State.REVIEW, 0, _graduating_interval(stability, params)

    raise ValueError(f"Unknown card state: {card.state!r}")


def _step_transition(
    phase: State,
    step_tokens: tuple[str, ...],
    index: int,
    grade: Grade,
    stability: float,
    params: FsrsParameters
) -> tuple[State, int, timedelta]:
    """
    Advance through a Learning or Relearning step sequence.

    Again restarts at step 0, Hard repeats the current step, Good moves to
    the next step and Easy skips the rest. Leaving the last step enters Review.
    """
    steps = parse_steps(step_tokens)

    # No steps configured, or the deck lost steps while the card was mid-sequence
    if not steps or (index >= len(steps) and grade != Grade.AGAIN):
        return State.REVIEW, 0, _graduating_interval(stability, params)

    if grade == Grade.AGAIN:
        return phase, 0, steps[0]

    if grade == Grade.HARD:
        if index == 0 and len(steps) == 1:
            return phase, 0, steps[0] * 1.5
        if index == 0:
            return phase, 0, (steps[0] + steps[1]) / 2
        return phase, index, steps[index]

    if grade == Grade.GOOD:
        if index + 1 >= len(steps):
            return State.REVIEW, 0, _graduating_interval(stability, params)
        return phase, index + 1, steps[index + 1]

    if grade == Grade.EASY:
        return State.REVIEW, 0, _graduating_interval(stability, params)

    raise ValueError(f"Invalid grade: {grade!r}")


def _graduating_interval(stability: float, params: FsrsParameters) -> timedelta:
    return timedelta(days=memory_model.next_interval(stability, params))
