"""
Environment configuration.

Values come from the process environment, with a .env file loaded first
for local development.
"""

from __future__ import annotations
import os

from dotenv import load_dotenv

from medrecall.fsrs.constants import DEFAULT_DESIRED_RETENTION, FsrsParameters

# Load environment
load_dotenv()

DEFAULT_DB_NAME = "medrecall"


def is_test_mode() -> bool:
    """Check if running in test mode."""
    return os.getenv("TEST_MODE", "false").lower() == "true"


def get_mongo_uri() -> str:
    """
    MongoDB connection string.

    Raises:
        ValueError: If MONGO_URI is not set
    """
    mongo_uri = os.getenv("MONGO_URI")
    if not mongo_uri:
        raise ValueError("MONGO_URI not found in environment variables")
    return mongo_uri


def get_db_name() -> str:
    """
    Database name, suffixed with _test in test mode.
    """
    name = os.getenv("MEDRECALL_DB_NAME", DEFAULT_DB_NAME)
    if is_test_mode():
        return f"{name}_test"
    return name


def get_fsrs_parameters() -> FsrsParameters:
    """
    FSRS parameters for the review service.

    Only the desired retention is configurable (MEDRECALL_DESIRED_RETENTION);
    the weights are the fixed default set.

    Raises:
        ValueError: If the retention is not a number in (0, 1)
    """
    raw = os.getenv("MEDRECALL_DESIRED_RETENTION")
    if raw is None or not raw.strip():
        return FsrsParameters(desired_retention=DEFAULT_DESIRED_RETENTION)

    try:
        retention = float(raw)
    except ValueError:
        raise ValueError(f"MEDRECALL_DESIRED_RETENTION must be a number, got {raw!r}") from None
    return FsrsParameters(desired_retention=retention)
