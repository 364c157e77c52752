import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

# Keep the application's module-level store and exports out of the working tree
_TEST_DIR = tempfile.mkdtemp(prefix="journal-tests-")
os.environ.setdefault("JOURNAL_DB_PATH", os.path.join(_TEST_DIR, "journal.db"))
os.environ.setdefault("JOURNAL_EXPORT_DIR", os.path.join(_TEST_DIR, "exports"))

from db import JournalStore  # noqa: E402
from service import JournalEntryService  # noqa: E402


class FakeClock:
    """Controllable replacement for datetime.now."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture(scope="function")
def clock():
    return FakeClock(datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc))


@pytest.fixture(scope="function")
def store(tmp_path):
    """A store backed by a fresh SQLite file."""
    return JournalStore(f"sqlite+aiosqlite:///{tmp_path / 'journal.db'}")


@pytest.fixture(scope="function")
def service(store, clock):
    return JournalEntryService(store, clock=clock)


@pytest.fixture(scope="function")
def write_entry(service):
    """Upsert an entry for a day with sensible defaults."""

    async def write(day, **overrides):
        fields = {
            "category": "Personal Growth",
            "title": f"Entry for {day}",
            "body": "Nothing much happened.",
            "primary_mood": "Calm",
            "secondary_moods": [],
            "tags": [],
        }
        fields.update(overrides)
        return await service.upsert_for_date(day, **fields)

    return write
