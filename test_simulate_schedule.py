"""
Tests for the schedule simulation script.
"""

from datetime import datetime, timezone

from medrecall.fsrs import State, default_deck_options
from scripts.simulate_schedule import main, simulate

START = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def test_simulate_walks_learning_steps():
    history = simulate(["good", "good", "again"], default_deck_options(), START)

    states = [card.state for _, card in history]
    assert states == [State.LEARNING, State.REVIEW, State.RELEARNING]
    assert history[-1][1].lapses == 1


def test_simulate_with_fixed_gap():
    history = simulate(["easy", "good"], default_deck_options(), START, gap_days=3)

    second = history[1][1]
    assert second.last_reviewed_at == datetime(2024, 1, 4, 9, 0, tzinfo=timezone.utc)
    assert second.elapsed_days == 3


def test_main_prints_schedule(capsys):
    assert main(["good,good"]) == 0

    out = capsys.readouterr().out
    assert "learning" in out
    assert "review" in out
    assert "final due" in out


def test_main_reports_step_warnings(capsys):
    assert main(["good", "--learning-steps", "1m, soon"]) == 0

    assert "warning" in capsys.readouterr().out


def test_main_rejects_unknown_rating(capsys):
    assert main(["bogus"]) == 2

    assert "error" in capsys.readouterr().out
