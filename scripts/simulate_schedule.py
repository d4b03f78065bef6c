"""
Replay a sequence of grades against a fresh item and print the schedule.

Useful for checking how deck step settings play out.

Usage:
    python -m scripts.simulate_schedule again,good,good,good
    python -m scripts.simulate_schedule good,easy --learning-steps "1m, 10m, 1h" --gap-days 3
"""

from __future__ import annotations
import argparse
from datetime import datetime, timedelta, timezone
from typing import Optional

from medrecall import fsrs
from medrecall.ratings import InvalidRatingError, map_review_rating


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate FSRS scheduling for one item")
    parser.add_argument("grades", help="Comma-separated ratings: again,hard,good,easy")
    parser.add_argument("--learning-steps", default=None, help='e.g. "1m, 10m"')
    parser.add_argument("--relearning-steps", default=None, help='e.g. "10m"')
    parser.add_argument(
        "--gap-days",
        type=float,
        default=None,
        help="Review this many days after each review instead of exactly when due"
    )
    parser.add_argument("--start", default="2024-01-01T09:00:00+00:00", help="ISO start time")
    return parser.parse_args(argv)


def simulate(
    ratings: list[str],
    options: fsrs.DeckOptions,
    start: datetime,
    gap_days: Optional[float] = None
) -> list[tuple[str, fsrs.CardState]]:
    """
    Review a fresh item once per rating.

    Each review happens when the item is due, or gap_days after the
    previous review if given.
    """
    card = fsrs.CardState.new(start)
    now = start
    history = []
    for rating in ratings:
        outcome = fsrs.review_card(card, map_review_rating(rating), now, options)
        card = outcome.card
        history.append((rating, card))
        now = now + timedelta(days=gap_days) if gap_days is not None else card.due_at
    return history


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    raw_options = {}
    if args.learning_steps is not None:
        raw_options["learningSteps"] = args.learning_steps
    if args.relearning_steps is not None:
        raw_options["relearningSteps"] = args.relearning_steps

    options, warnings = fsrs.normalize_deck_options_with_warnings(raw_options)
    for message in warnings:
        print(f"warning: {message}")

    start = datetime.fromisoformat(args.start)
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)

    ratings = [r.strip().lower() for r in args.grades.split(",") if r.strip()]

    print("=" * 72)
    print(f"learning steps: {', '.join(options.learning_steps) or '-'}  "
          f"relearning steps: {', '.join(options.relearning_steps) or '-'}")
    print("=" * 72)

    try:
        history = simulate(ratings, options, start, args.gap_days)
    except InvalidRatingError as exc:
        print(f"error: {exc}")
        return 2

    for rating, card in history:
        interval = fsrs.format_interval(card.due_at - card.last_reviewed_at)
        print(
            f"{rating:<6} -> {card.state.name.lower():<10} step={card.learning_step} "
            f"S={card.stability:7.2f} D={card.difficulty:5.2f} "
            f"reps={card.reps} lapses={card.lapses} due in {interval}"
        )

    if history:
        print("-" * 72)
        print(f"final due: {history[-1][1].due_at.isoformat()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
