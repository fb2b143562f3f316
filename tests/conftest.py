from __future__ import annotations

import pytest

import crmpro.db as db_module
from crmpro.config import reset_settings
from crmpro.db import init_db
from crmpro.store import CustomerStore


@pytest.fixture(autouse=True)
def use_temp_db(tmp_path, monkeypatch):
    """Use a temporary database for each test."""
    test_db = tmp_path / "test.db"
    monkeypatch.setattr(db_module, "DB_PATH", test_db)
    init_db(test_db)
    return test_db


@pytest.fixture
def store(use_temp_db):
    return CustomerStore(use_temp_db)


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()
