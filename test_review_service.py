"""
Tests for review submission against a mocked database.

The database is a dict of MagicMock collections keyed by collection name,
which is all the repository functions use.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from medrecall import item_repo
from medrecall.fsrs.constants import DEFAULT_PARAMETERS
from medrecall.ratings import InvalidRatingError
from medrecall.review_service import ItemNotFoundError, review_flashcard, review_question

NOW = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def db():
    collections = {
        item_repo.FLASHCARDS: MagicMock(),
        item_repo.QUESTIONS: MagicMock(),
        item_repo.DECKS: MagicMock(),
        item_repo.REVIEW_LOGS: MagicMock(),
    }
    for collection in collections.values():
        collection.update_one.return_value.matched_count = 1
    return collections


def set_fields(collection):
    """The $set payload of the single update_one call."""
    collection.update_one.assert_called_once()
    query, update = collection.update_one.call_args.args
    return query, update["$set"]


# ---- Flashcards ----

def test_review_new_flashcard(db):
    card_id = ObjectId()
    db[item_repo.FLASHCARDS].find_one.return_value = {"_id": card_id, "front": "MI", "back": "Heart attack"}

    response = review_flashcard(str(card_id), "easy", now=NOW, db=db)

    query, fields = set_fields(db[item_repo.FLASHCARDS])
    assert query == {"_id": card_id}
    assert fields["sm2Repetitions"] == 1
    assert fields["sm2Interval"] == 1
    assert fields["sm2Easiness"] == pytest.approx(2.6)
    assert fields["dueAt"] == NOW + timedelta(days=1)
    assert fields["lastReviewedAt"] == NOW
    assert fields["reviewRating"] == "easy"
    assert fields["updatedAt"] == NOW
    assert response.interval_days == 1
    assert response.interval_minutes == 1440
    assert response.item_id == str(card_id)


def test_review_flashcard_continues_existing_schedule(db):
    card_id = ObjectId()
    db[item_repo.FLASHCARDS].find_one.return_value = {
        "_id": card_id, "sm2Repetitions": 2, "sm2Interval": 6, "sm2Easiness": 2.5
    }

    review_flashcard(card_id, "hard", now=NOW, db=db)

    _, fields = set_fields(db[item_repo.FLASHCARDS])
    assert fields["sm2Repetitions"] == 3
    assert fields["sm2Interval"] == 15
    assert fields["sm2Easiness"] == pytest.approx(2.36)


def test_review_flashcard_rejects_bad_rating_before_loading(db):
    with pytest.raises(InvalidRatingError):
        review_flashcard(str(ObjectId()), "again", now=NOW, db=db)

    db[item_repo.FLASHCARDS].find_one.assert_not_called()


def test_review_missing_flashcard(db):
    db[item_repo.FLASHCARDS].find_one.return_value = None

    with pytest.raises(ItemNotFoundError):
        review_flashcard(str(ObjectId()), "easy", now=NOW, db=db)

    db[item_repo.FLASHCARDS].update_one.assert_not_called()


def test_invalid_id_is_not_found(db):
    with pytest.raises(ItemNotFoundError):
        review_flashcard("not-an-id", "easy", now=NOW, db=db)


# ---- Questions ----

def test_review_new_question_uses_deck_steps(db):
    question_id, deck_id = ObjectId(), ObjectId()
    db[item_repo.QUESTIONS].find_one.return_value = {"_id": question_id, "deckId": deck_id}
    db[item_repo.DECKS].find_one.return_value = {"_id": deck_id, "options": {"learningSteps": "2m, 30m"}}

    response = review_question(str(question_id), "good", now=NOW, db=db, parameters=DEFAULT_PARAMETERS)

    _, fields = set_fields(db[item_repo.QUESTIONS])
    assert fields["fsrsState"] == 1
    assert fields["fsrsLearningSteps"] == 1
    assert fields["fsrsReps"] == 1
    assert fields["fsrsLapses"] == 0
    assert fields["dueAt"] == NOW + timedelta(minutes=30)
    assert fields["lastReviewedAt"] == NOW
    assert fields["reviewRating"] == "good"
    assert fields["reviewIntervalMinutes"] == 30

    assert response.interval_minutes == 30
    assert response.interval_days == 0
    assert response.due_at == NOW + timedelta(minutes=30)


def test_review_question_writes_review_log(db):
    question_id, deck_id = ObjectId(), ObjectId()
    db[item_repo.QUESTIONS].find_one.return_value = {"_id": question_id, "deckId": deck_id}
    db[item_repo.DECKS].find_one.return_value = None

    review_question(question_id, "easy", now=NOW, db=db, parameters=DEFAULT_PARAMETERS)

    log = db[item_repo.REVIEW_LOGS].insert_one.call_args.args[0]
    assert log["deckId"] == deck_id
    assert log["itemType"] == "question"
    assert log["itemId"] == question_id
    assert log["rating"] == "easy"
    assert log["state"] == "new"
    assert log["nextDueAt"] == NOW + timedelta(days=16)
    assert log["reviewedAt"] == NOW
    assert log["reps"] == 1


def test_review_question_lapse(db):
    question_id = ObjectId()
    db[item_repo.QUESTIONS].find_one.return_value = {
        "_id": question_id,
        "deckId": None,
        "fsrsState": 2,
        "fsrsStability": 10.0,
        "fsrsDifficulty": 5.0,
        "fsrsReps": 5,
        "fsrsLapses": 0,
        "dueAt": NOW,
        "lastReviewedAt": NOW - timedelta(days=10),
    }

    review_question(question_id, is_correct=False, now=NOW, db=db, parameters=DEFAULT_PARAMETERS)

    _, fields = set_fields(db[item_repo.QUESTIONS])
    assert fields["fsrsState"] == 3
    assert fields["fsrsLapses"] == 1
    assert fields["reviewRating"] == "again"
    assert fields["dueAt"] == NOW + timedelta(minutes=10)
    # No deck: defaults apply without a lookup
    db[item_repo.DECKS].find_one.assert_not_called()


def test_review_question_requires_a_rating(db):
    with pytest.raises(InvalidRatingError):
        review_question(str(ObjectId()), now=NOW, db=db)


def test_review_missing_question(db):
    db[item_repo.QUESTIONS].find_one.return_value = None

    with pytest.raises(ItemNotFoundError):
        review_question(str(ObjectId()), "good", now=NOW, db=db, parameters=DEFAULT_PARAMETERS)

    db[item_repo.REVIEW_LOGS].insert_one.assert_not_called()


def test_review_question_reads_retention_from_environment(db, monkeypatch):
    monkeypatch.setenv("MEDRECALL_DESIRED_RETENTION", "0.8")
    question_id = ObjectId()
    db[item_repo.QUESTIONS].find_one.return_value = {"_id": question_id}

    response = review_question(question_id, "easy", now=NOW, db=db)

    # Lower retention stretches the 15.7 day initial Easy stability
    assert response.interval_days > 16


# ---- Deck options ----

def test_save_deck_options_normalizes_before_storing(db):
    deck_id = ObjectId()

    options, warnings = item_repo.save_deck_options(deck_id, {"newPerDay": "50", "learningSteps": "1m, later"}, db=db)

    query, update = db[item_repo.DECKS].update_one.call_args.args
    assert query == {"_id": deck_id}
    assert update["$set"]["options"] == {
        "newPerDay": 50,
        "reviewPerDay": 200,
        "learningSteps": ["1m"],
        "relearningSteps": ["10m"],
    }
    assert options.new_per_day == 50
    assert len(warnings) == 1


def test_get_deck_options_defaults_for_missing_deck(db):
    db[item_repo.DECKS].find_one.return_value = None

    options = item_repo.get_deck_options(ObjectId(), db=db)

    assert options.learning_steps == ("1m", "10m")


def test_get_items_for_deck(db):
    deck_id = ObjectId()
    db[item_repo.QUESTIONS].find.return_value = iter([{"_id": 1}, {"_id": 2}])

    items = item_repo.get_items_for_deck("question", deck_id, db=db)

    db[item_repo.QUESTIONS].find.assert_called_once_with({"deckId": deck_id})
    assert len(items) == 2
