"""
Deck Options - per-deck scheduler configuration.

DeckOptions is a frozen value passed into the scheduler at call time.
normalize_deck_options() turns untrusted, partial input (form data, a stored
deck document) into a complete DeckOptions and never fails: anything absent
or unusable falls back to the defaults, and malformed step tokens are dropped.

Dropped tokens are reported through normalize_deck_options_with_warnings()
and logged.
"""

from __future__ import annotations
import logging
import math
import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from medrecall.fsrs.constants import MAX_COUNT
from medrecall.fsrs.steps import normalize_step

logger = logging.getLogger(__name__)


# ---- Defaults ----

DEFAULT_NEW_PER_DAY = 20
DEFAULT_REVIEW_PER_DAY = 200
DEFAULT_LEARNING_STEPS = ("1m", "10m")
DEFAULT_RELEARNING_STEPS = ("10m",)

_STEP_SEPARATOR = re.compile(r"[,\n]")
_LEADING_INT = re.compile(r"^\s*([+-]?)(\d+)")


class DeckOptions(BaseModel):
    """Scheduling configuration owned by a deck."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    new_per_day: int = Field(DEFAULT_NEW_PER_DAY, alias="newPerDay", ge=0, le=MAX_COUNT)
    review_per_day: int = Field(DEFAULT_REVIEW_PER_DAY, alias="reviewPerDay", ge=0, le=MAX_COUNT)
    learning_steps: tuple[str, ...] = Field(DEFAULT_LEARNING_STEPS, alias="learningSteps")
    relearning_steps: tuple[str, ...] = Field(DEFAULT_RELEARNING_STEPS, alias="relearningSteps")

    @field_validator("learning_steps", "relearning_steps", mode="before")
    @classmethod
    def _canonical_steps(cls, value: Any) -> tuple[str, ...]:
        """Strict check for directly built options: every token must be valid."""
        if isinstance(value, str) or not isinstance(value, (list, tuple)):
            raise ValueError("steps must be a sequence of step tokens")
        steps = []
        for token in value:
            step = normalize_step(token) if isinstance(token, str) else None
            if step is None:
                raise ValueError(f"invalid step token {token!r}")
            steps.append(step)
        return tuple(steps)

    def to_document(self) -> dict:
        """Stored/JSON form with camelCase keys and list-valued steps."""
        return self.model_dump(by_alias=True, mode="json")


def default_deck_options() -> DeckOptions:
    """Build a fresh default DeckOptions value."""
    return DeckOptions()


# ---- Normalization ----

def _parse_count(value: Any, fallback: int, name: str, warnings: list[str]) -> int:
    """
    Coerce a per-day count to an int in [0, MAX_COUNT].

    Numbers are truncated, strings are read by their leading integer
    ("12 cards" -> 12), everything else falls back.
    """
    parsed = None
    if isinstance(value, bool):
        parsed = None
    elif isinstance(value, int):
        parsed = value
    elif isinstance(value, float) and math.isfinite(value):
        parsed = int(value)
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            sign, digits = match.group(1), match.group(2).lstrip("0") or "0"
            # Anything longer than MAX_COUNT is clamped without converting it
            magnitude = MAX_COUNT + 1 if len(digits) > len(str(MAX_COUNT)) else int(digits)
            parsed = -magnitude if sign == "-" else magnitude

    if parsed is None:
        if value is not None:
            warnings.append(f"{name}: {value!r} is not a number, using {fallback}")
        parsed = fallback

    return min(max(parsed, 0), MAX_COUNT)


def _normalize_steps(
    value: Any,
    fallback: tuple[str, ...],
    name: str,
    warnings: list[str]
) -> list[str]:
    """
    Normalize a step sequence.

    None -> fallback. A string is split on commas/newlines, a list keeps its
    string members, any other type yields an empty sequence.
    """
    if value is None:
        return list(fallback)

    if isinstance(value, str):
        raw = _STEP_SEPARATOR.split(value)
    elif isinstance(value, (list, tuple)):
        raw = list(value)
    else:
        warnings.append(f"{name}: unsupported value {value!r}, using no steps")
        return []

    steps = []
    for item in raw:
        step = normalize_step(item) if isinstance(item, str) else None
        if step is None:
            # Blank fragments ("1m,,10m", trailing comma) are skipped silently
            if not (isinstance(item, str) and not item.strip()):
                warnings.append(f"{name}: dropped invalid step {item!r}")
            continue
        steps.append(step)
    return steps


def normalize_deck_options_with_warnings(raw: Any) -> tuple[DeckOptions, list[str]]:
    """
    Normalize deck options and report what was discarded.

    Args:
        raw: A mapping with any subset of newPerDay, reviewPerDay,
            learningSteps, relearningSteps (camelCase or snake_case keys),
            an existing DeckOptions, or None

    Returns:
        (options, warnings) where warnings lists every dropped token or
        unusable count, in input order
    """
    if isinstance(raw, DeckOptions):
        return raw, []

    data: Mapping = raw if isinstance(raw, Mapping) else {}
    warnings: list[str] = []

    def pick(camel: str, snake: str) -> Any:
        return data.get(camel, data.get(snake))

    options = DeckOptions(
        new_per_day=_parse_count(
            pick("newPerDay", "new_per_day"), DEFAULT_NEW_PER_DAY, "newPerDay", warnings
        ),
        review_per_day=_parse_count(
            pick("reviewPerDay", "review_per_day"), DEFAULT_REVIEW_PER_DAY, "reviewPerDay", warnings
        ),
        learning_steps=_normalize_steps(
            pick("learningSteps", "learning_steps"), DEFAULT_LEARNING_STEPS, "learningSteps", warnings
        ),
        relearning_steps=_normalize_steps(
            pick("relearningSteps", "relearning_steps"), DEFAULT_RELEARNING_STEPS, "relearningSteps", warnings
        ),
    )

    for message in warnings:
        logger.warning("Deck options normalized: %s", message)

    return options, warnings


def normalize_deck_options(raw: Any) -> DeckOptions:
    """Normalize untrusted deck options; never raises."""
    options, _ = normalize_deck_options_with_warnings(raw)
    return options
