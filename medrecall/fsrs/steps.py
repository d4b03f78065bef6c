"""
Step tokens for learning and relearning sequences.

A token is a positive integer followed by a unit: m (minutes),
h (hours) or d (days), e.g. "1m", "10m", "1d". Steps longer than the
maximum interval are shortened to it.
"""

from __future__ import annotations
import re
from datetime import timedelta
from typing import Iterable, Optional

from medrecall.fsrs.constants import DEFAULT_MAXIMUM_INTERVAL


STEP_PATTERN = re.compile(r"^(\d+)\s*(m|h|d)$", re.IGNORECASE)

_UNITS = {
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}

MAX_STEP = timedelta(days=DEFAULT_MAXIMUM_INTERVAL)


def normalize_step(token: str) -> Optional[str]:
    """
    Return the canonical form of a step token, or None if it is invalid.

    Canonical form is trimmed, lower-case, without inner whitespace or
    leading zeros, so "  5 M " becomes "5m". Zero-length steps are invalid
    and amounts beyond MAX_STEP are capped ("99999d" -> "36500d").
    """
    match = STEP_PATTERN.match(token.strip())
    if not match:
        return None

    digits, unit = match.group(1).lstrip("0"), match.group(2).lower()
    if not digits:
        return None

    limit = MAX_STEP // _UNITS[unit]
    # Compare lengths first so a long digit run is never converted
    amount = limit if len(digits) > len(str(limit)) else min(int(digits), limit)
    return f"{amount}{unit}"


def parse_step(token: str) -> timedelta:
    """
    Parse a single step token into a duration.

    Raises:
        ValueError: If the token is not a positive step (see normalize_step)
    """
    canonical = normalize_step(token) if isinstance(token, str) else None
    if canonical is None:
        raise ValueError(f"Invalid step token: {token!r}")

    amount, unit = int(canonical[:-1]), canonical[-1]
    return amount * _UNITS[unit]


def parse_steps(tokens: Iterable[str]) -> list[timedelta]:
    """Parse an ordered sequence of step tokens."""
    return [parse_step(token) for token in tokens]


def to_days(duration: timedelta) -> float:
    """Express a duration in fractional days."""
    return duration.total_seconds() / 86400.0


def format_interval(duration: timedelta) -> str:
    """
    Short label for an interval ("<1m", "10m", "3h", "4d", "1.5mo", "2.1y").

    Used for answer-button previews.
    """
    minutes = duration.total_seconds() / 60.0
    if minutes < 1:
        return "<1m"
    if minutes < 60:
        return f"{round(minutes)}m"
    hours = minutes / 60.0
    if hours < 24:
        return f"{round(hours)}h"
    days = hours / 24.0
    if days < 30:
        return f"{round(days)}d"
    if days < 365:
        return f"{days / 30:.1f}mo"
    return f"{days / 365:.1f}y"
