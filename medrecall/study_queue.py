"""
Study queues and daily limits.

Items are grouped into three queues by scheduler state:
- learn: Learning and Relearning items (short steps, never limited)
- review: Review items, limited by the deck's reviewPerDay
- new: New items, limited by the deck's newPerDay

build_study_queue() works on already-loaded item documents (no DB calls).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Literal, Optional

from medrecall.fsrs.constants import State
from medrecall.fsrs.deck_options import DeckOptions

QueueName = Literal["new", "learn", "review"]
StateLabel = Literal["new", "learning", "review", "relearning"]

_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


def _coerce_state(state: Any) -> Optional[State]:
    if isinstance(state, bool) or not isinstance(state, (int, float)):
        return None
    try:
        return State(int(state))
    except ValueError:
        return None


def state_to_queue(state: Any) -> QueueName:
    """Queue for a stored state code; anything unrecognised counts as new."""
    state = _coerce_state(state)
    if state in (State.LEARNING, State.RELEARNING):
        return "learn"
    if state == State.REVIEW:
        return "review"
    return "new"


def state_to_label(state: Any) -> StateLabel:
    """Display label for a stored state code; anything unrecognised is new."""
    state = _coerce_state(state)
    if state is None:
        return "new"
    return state.name.lower()


@dataclass
class StudyQueue:
    """Items to study now, in presentation order per queue."""
    learn: list[dict] = field(default_factory=list)
    review: list[dict] = field(default_factory=list)
    new: list[dict] = field(default_factory=list)

    def items(self) -> list[dict]:
        """All queued items: learning first, then reviews, then new items."""
        return self.learn + self.review + self.new

    def counts(self) -> dict[str, int]:
        return {"new": len(self.new), "learn": len(self.learn), "review": len(self.review)}


def _due_key(item: dict) -> datetime:
    due_at = item.get("dueAt")
    if not isinstance(due_at, datetime):
        return _FAR_FUTURE
    if due_at.tzinfo is None:
        return due_at.replace(tzinfo=timezone.utc)
    return due_at


def _is_due(item: dict, now: datetime) -> bool:
    due_at = item.get("dueAt")
    # Items never scheduled are available immediately
    if not isinstance(due_at, datetime):
        return True
    return _due_key(item) <= now


def build_study_queue(
    items: Iterable[dict],
    now: datetime,
    options: DeckOptions,
    new_done_today: int = 0,
    reviews_done_today: int = 0
) -> StudyQueue:
    """
    Select the items to study now under the deck's daily limits.

    Args:
        items: Item documents of one deck (fsrsState, dueAt)
        now: Current time (timezone-aware)
        options: Normalized deck options
        new_done_today: New items already introduced today
        reviews_done_today: Review items already answered today

    Returns:
        StudyQueue with each queue sorted by due date
    """
    pools: dict[str, list[dict]] = {"new": [], "learn": [], "review": []}
    for item in items:
        queue = state_to_queue(item.get("fsrsState"))
        if queue == "new" or _is_due(item, now):
            pools[queue].append(item)

    for pool in pools.values():
        pool.sort(key=_due_key)

    review_quota = max(0, options.review_per_day - reviews_done_today)
    new_quota = max(0, options.new_per_day - new_done_today)

    return StudyQueue(
        learn=pools["learn"],
        review=pools["review"][:review_quota],
        new=pools["new"][:new_quota],
    )


def count_due(items: Iterable[dict], now: datetime) -> dict[str, int]:
    """Per-queue counts of available items, ignoring daily limits."""
    counts = {"new": 0, "learn": 0, "review": 0}
    for item in items:
        queue = state_to_queue(item.get("fsrsState"))
        if queue == "new" or _is_due(item, now):
            counts[queue] += 1
    return counts
