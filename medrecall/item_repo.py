"""
MongoDB repository for study items.

Provides functions to load and update flashcards, questions, decks and
review logs. Scheduling logic lives in medrecall.fsrs and medrecall.sm2;
this module only moves documents.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient
from pymongo.database import Database

from medrecall import config
from medrecall.fsrs.deck_options import (
    DeckOptions,
    normalize_deck_options,
    normalize_deck_options_with_warnings
)
from medrecall.schemas import ItemType

logger = logging.getLogger(__name__)

# Collection names
FLASHCARDS = "flashcards"
QUESTIONS = "questions"
DECKS = "decks"
REVIEW_LOGS = "reviewLogs"

_ITEM_COLLECTIONS = {
    ItemType.FLASHCARD: FLASHCARDS,
    ItemType.QUESTION: QUESTIONS,
}

# Global connection pool (reused across requests)
_client: Optional[MongoClient] = None
_database: Optional[Database] = None


# ---- Connection Management ----

def get_database() -> Database:
    """
    Get the study database.

    Uses a persistent connection pool that's reused across requests.

    Returns:
        MongoDB database object
    """
    global _client, _database

    # Return cached database if it exists
    if _database is not None:
        return _database

    _client = MongoClient(
        config.get_mongo_uri(),
        maxPoolSize=10,  # Connection pool size
        minPoolSize=1,   # Keep at least 1 connection alive
        maxIdleTimeMS=60000  # Keep connections alive for 60 seconds
    )
    _database = _client[config.get_db_name()]
    logger.info("Connected to MongoDB database %s", _database.name)

    return _database


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an id string; None if it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


# ---- Items ----

def get_item(item_type: ItemType, item_id: ObjectId, db: Optional[Database] = None) -> Optional[dict]:
    """
    Load a flashcard or question.

    Returns:
        The item document, or None if not found
    """
    db = db if db is not None else get_database()
    return db[_ITEM_COLLECTIONS[ItemType(item_type)]].find_one({"_id": item_id})


def get_items_for_deck(item_type: ItemType, deck_id: ObjectId, db: Optional[Database] = None) -> list[dict]:
    """All items of one type in a deck."""
    db = db if db is not None else get_database()
    return list(db[_ITEM_COLLECTIONS[ItemType(item_type)]].find({"deckId": deck_id}))


def update_item_schedule(
    item_type: ItemType,
    item_id: ObjectId,
    fields: dict,
    db: Optional[Database] = None
) -> bool:
    """
    Set schedule fields on an item.

    Returns:
        True if a document matched
    """
    db = db if db is not None else get_database()
    result = db[_ITEM_COLLECTIONS[ItemType(item_type)]].update_one(
        {"_id": item_id},
        {"$set": fields}
    )
    return result.matched_count > 0


# ---- Decks ----

def get_deck_options(deck_id: Any, db: Optional[Database] = None) -> DeckOptions:
    """
    Normalized options of a deck.

    A missing deck or missing options yields the defaults.
    """
    db = db if db is not None else get_database()
    deck = db[DECKS].find_one({"_id": deck_id}, {"options": 1}) if deck_id is not None else None
    return normalize_deck_options((deck or {}).get("options"))


def save_deck_options(deck_id: ObjectId, raw_options: Any, db: Optional[Database] = None) -> tuple[DeckOptions, list[str]]:
    """
    Normalize and store deck options.

    Returns:
        (stored options, normalization warnings)
    """
    db = db if db is not None else get_database()
    options, warnings = normalize_deck_options_with_warnings(raw_options)
    db[DECKS].update_one(
        {"_id": deck_id},
        {"$set": {"options": options.to_document()}}
    )
    return options, warnings


# ---- Review logs ----

def insert_review_log(log: dict, db: Optional[Database] = None) -> Any:
    """Insert a review log document and return its id."""
    db = db if db is not None else get_database()
    return db[REVIEW_LOGS].insert_one(log).inserted_id
