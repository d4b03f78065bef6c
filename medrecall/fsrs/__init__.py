"""
FSRS - step-based spaced repetition engine

Schedules flashcards and questions through New -> Learning -> Review,
with Relearning after a lapse. Step sequences and daily limits come from
per-deck options; the memory model (stability, difficulty) uses the fixed
FSRS-5 parameter set.

Quick start:
    from medrecall import fsrs

    options = fsrs.normalize_deck_options(deck.get("options"))
    card = fsrs.CardState.from_document(question, now)
    outcome = fsrs.review_card(card, fsrs.Grade.GOOD, now, options)
    update = outcome.card.to_document()
"""

# Core scheduler API (algorithm logic)
from medrecall.fsrs.scheduler import (
    ReviewLog,
    ReviewOutcome,
    preview_review,
    review_card,
    schedule_review
)

# Deck options
from medrecall.fsrs.deck_options import (
    DeckOptions,
    default_deck_options,
    normalize_deck_options,
    normalize_deck_options_with_warnings
)

# Constants and parameters
from medrecall.fsrs.constants import (
    Grade,
    State,
    FsrsParameters,
    DEFAULT_PARAMETERS,
    DEFAULT_WEIGHTS,
    S_MIN,
    D_MIN,
    D_MAX
)

# Memory state (for advanced usage)
from medrecall.fsrs.memory_state import (
    CardState,
    calculate_retrievability,
    get_elapsed_days
)

from medrecall.fsrs.steps import (
    STEP_PATTERN,
    format_interval,
    parse_step,
    parse_steps
)


__all__ = [
    # Core algorithm
    "review_card",
    "preview_review",
    "schedule_review",
    "ReviewLog",
    "ReviewOutcome",

    # Deck options
    "DeckOptions",
    "default_deck_options",
    "normalize_deck_options",
    "normalize_deck_options_with_warnings",

    # Enums
    "Grade",
    "State",

    # Memory state
    "CardState",
    "calculate_retrievability",
    "get_elapsed_days",

    # Steps
    "STEP_PATTERN",
    "format_interval",
    "parse_step",
    "parse_steps",

    # Parameters
    "FsrsParameters",
    "DEFAULT_PARAMETERS",
    "DEFAULT_WEIGHTS",
    "S_MIN",
    "D_MIN",
    "D_MAX",
]
