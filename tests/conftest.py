"""
Point the app at an in-memory SQLite database before anything imports
accumulation_tracker.db, and give each test empty tables.
"""
import os

os.environ["DB_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["STORAGE_BACKEND"] = "sql"
os.environ["TABLE_API_KEY"] = ""   # never mirror to a real table API from tests

from datetime import datetime, timedelta, timezone

import pytest

from accumulation_tracker.db import Base, engine
from accumulation_tracker import models  # noqa: F401


class FakeClock:
    def __init__(self, start=datetime(2026, 3, 1, 7, 30, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture(autouse=True)
def fresh_tables():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def clock():
    return FakeClock()
