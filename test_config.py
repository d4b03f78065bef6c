"""
Tests for environment configuration.
"""

import pytest

from medrecall import config
from medrecall.fsrs.constants import DEFAULT_DESIRED_RETENTION


def test_db_name_defaults(monkeypatch):
    monkeypatch.delenv("MEDRECALL_DB_NAME", raising=False)
    monkeypatch.delenv("TEST_MODE", raising=False)
    assert config.get_db_name() == "medrecall"


def test_db_name_in_test_mode(monkeypatch):
    monkeypatch.setenv("MEDRECALL_DB_NAME", "study")
    monkeypatch.setenv("TEST_MODE", "TRUE")
    assert config.is_test_mode()
    assert config.get_db_name() == "study_test"


def test_missing_mongo_uri(monkeypatch):
    monkeypatch.delenv("MONGO_URI", raising=False)
    with pytest.raises(ValueError, match="MONGO_URI"):
        config.get_mongo_uri()


def test_mongo_uri(monkeypatch):
    monkeypatch.setenv("MONGO_URI", "mongodb://localhost:27017")
    assert config.get_mongo_uri() == "mongodb://localhost:27017"


def test_default_retention(monkeypatch):
    monkeypatch.delenv("MEDRECALL_DESIRED_RETENTION", raising=False)
    assert config.get_fsrs_parameters().desired_retention == DEFAULT_DESIRED_RETENTION


def test_configured_retention(monkeypatch):
    monkeypatch.setenv("MEDRECALL_DESIRED_RETENTION", "0.85")
    assert config.get_fsrs_parameters().desired_retention == 0.85


@pytest.mark.parametrize("raw", ["high", "1.5", "0"])
def test_invalid_retention(monkeypatch, raw):
    monkeypatch.setenv("MEDRECALL_DESIRED_RETENTION", raw)
    with pytest.raises(ValueError):
        config.get_fsrs_parameters()
