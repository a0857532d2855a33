"""Pytest fixtures for wellflow tests."""

from __future__ import annotations

import tempfile
from datetime import datetime
from pathlib import Path

import pytest

from wellflow.db.connection import DatabaseConnection, set_db
from wellflow.db.store import StateStore
from wellflow.tracking.state import AppState, WellnessTracker
from wellflow.tracking.timeutils import from_local_datetime


def local_ms(*args: int) -> int:
    """Epoch ms for a local wall-clock time, e.g. local_ms(2024, 6, 15, 9, 30)."""
    return from_local_datetime(datetime(*args))


@pytest.fixture
def temp_db():
    """Create a temporary database with schema."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    db = DatabaseConnection(db_path)
    db.initialize_schema()

    yield db

    # Cleanup
    db_path.unlink(missing_ok=True)


@pytest.fixture
def store(temp_db):
    """State store backed by the temporary database."""
    return StateStore(temp_db)


@pytest.fixture
def noon():
    """A fixed local midday, far from any midnight or DST switch."""
    return local_ms(2024, 6, 15, 12, 0)


@pytest.fixture
def tracker(store, noon):
    """Tracker over fresh default state, persisted to the temp store."""
    return WellnessTracker(AppState(last_reset=noon), store)


@pytest.fixture
def cli_db(temp_db):
    """Point the CLI at the temporary database for the duration of a test."""
    set_db(temp_db)
    yield temp_db
    set_db(None)
