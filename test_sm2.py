"""Tests for the SM-2 flashcard engine."""

from datetime import datetime, timedelta, timezone

import pytest

from medrecall.sm2 import MAX_INTERVAL_DAYS, MIN_EASINESS, Sm2State, apply_sm2

NOW = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def test_first_review_easy_uses_one_day_seed():
    result = apply_sm2(Sm2State(repetitions=0, interval=0, easiness=2.5), 5, NOW)

    assert result.repetitions == 1
    assert result.interval == 1
    assert result.due_at == NOW + timedelta(days=1)


def test_missing_previous_state_is_a_new_card():
    assert apply_sm2(None, 4, NOW) == apply_sm2(Sm2State(), 4, NOW)


def test_second_review_uses_six_day_seed():
    result = apply_sm2(Sm2State(repetitions=1, interval=1, easiness=2.5), 4, NOW)

    assert result.repetitions == 2
    assert result.interval == 6
    assert result.due_at == NOW + timedelta(days=6)


def test_third_review_multiplies_interval_by_previous_easiness():
    # 6 * 2.5 = 15, even though easiness moves after a grade 3
    result = apply_sm2(Sm2State(repetitions=2, interval=6, easiness=2.5), 3, NOW)

    assert result.repetitions == 3
    assert result.interval == 15
    assert result.easiness < 2.5


def test_hard_twice_lowers_easiness_each_time():
    first = apply_sm2(Sm2State(repetitions=1, interval=1, easiness=2.5), 3, NOW)
    second = apply_sm2(first, 3, NOW)

    assert first.easiness == pytest.approx(2.36)
    assert second.easiness == pytest.approx(2.22)
    assert 2.5 > first.easiness > second.easiness >= MIN_EASINESS


def test_hard_grades_never_reset_repetitions():
    state = Sm2State()
    for expected in range(1, 6):
        state = apply_sm2(state, 3, NOW)
        assert state.repetitions == expected


def test_easiness_never_drops_below_floor():
    state = Sm2State(repetitions=3, interval=10, easiness=1.31)
    for _ in range(10):
        state = apply_sm2(state, 3, NOW)
        assert state.easiness >= MIN_EASINESS
        assert state.interval >= 1


def test_easy_raises_easiness():
    result = apply_sm2(Sm2State(easiness=2.5), 5, NOW)

    assert result.easiness == pytest.approx(2.6)


def test_failed_grade_resets_repetitions():
    result = apply_sm2(Sm2State(repetitions=5, interval=30, easiness=2.6), 1, NOW)

    assert result.repetitions == 0
    assert result.interval == 1
    assert result.easiness == 2.6
    assert result.due_at == NOW + timedelta(days=1)


def test_interval_floor_applies_to_zero_previous_interval():
    result = apply_sm2(Sm2State(repetitions=4, interval=0, easiness=2.5), 4, NOW)

    assert result.interval == 1


@pytest.mark.parametrize("grade", [-1, 6, 4.0, True, "5"])
def test_invalid_grade_is_rejected(grade):
    with pytest.raises(ValueError):
        apply_sm2(Sm2State(), grade, NOW)


def test_document_round_trip_keeps_defaults_for_missing_fields():
    state = Sm2State.from_document({"sm2Repetitions": 2})

    assert state.repetitions == 2
    assert state.interval == 0
    assert state.easiness == 2.5
    assert set(state.to_document()) == {"sm2Repetitions", "sm2Interval", "sm2Easiness", "dueAt"}


def test_interval_is_capped_after_many_easy_reviews():
    state = None
    for _ in range(30):
        state = apply_sm2(state, 5, NOW)

    assert state.interval == MAX_INTERVAL_DAYS
    assert state.due_at == NOW + timedelta(days=MAX_INTERVAL_DAYS)


def test_oversized_stored_interval_is_capped():
    state = Sm2State.from_document({"sm2Repetitions": 14, "sm2Interval": 2038878, "sm2Easiness": 3.9})

    assert state.interval == MAX_INTERVAL_DAYS
    assert apply_sm2(state, 5, NOW).interval == MAX_INTERVAL_DAYS
    assert apply_sm2(Sm2State(repetitions=14, interval=2038878, easiness=3.9), 4, NOW).interval == MAX_INTERVAL_DAYS
