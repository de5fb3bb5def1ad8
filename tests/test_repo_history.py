from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from accumulation_tracker.db import SessionLocal
from accumulation_tracker.errors import PersistenceFailure
from accumulation_tracker.repositories.history_repo import HistoryRepository, ScopedHistoryRepository
from accumulation_tracker.repositories.preset_repo import PresetRepository
from accumulation_tracker.schemas.history import AttemptCreate, HistoryCreate, HistoryRead
from accumulation_tracker.schemas.preset import PresetCreate, PresetUpdate

WHEN = datetime(2026, 3, 1, 7, 30, tzinfo=timezone.utc)


@pytest.fixture
def db():
    s = SessionLocal()
    yield s
    s.close()


@pytest.fixture
def preset(db):
    return PresetRepository(db).create(PresetCreate(name="Handstand", mode="time", target=60, rest_time=15, adjustment=5))


def finished(preset_id, duration, when=WHEN, holds=(40, 30)):
    return HistoryCreate(
        preset_id=preset_id, date=when, total_accumulated=sum(h - 5 for h in holds), target=60,
        attempt_count=len(holds), session_duration=duration,
        attempts=[AttemptCreate(value=h, adjustment=5, total_counted=h - 5, timestamp=when) for h in holds],
    )


def test_preset_crud(db, preset):
    repo = PresetRepository(db)
    assert repo.get(preset.id).name == "Handstand"
    updated = repo.update(preset.id, PresetUpdate(adjustment=3))
    assert updated.adjustment == 3 and updated.target == 60
    assert repo.update(999, PresetUpdate(target=5)) is None
    page = repo.list(limit=10)
    assert page.total == 1 and page.items[0].id == preset.id


def test_ensure_defaults_only_on_empty_table(db):
    repo = PresetRepository(db)
    repo.ensure_defaults()
    repo.ensure_defaults()
    assert repo.count() == 3


def test_history_attempts_numbered_in_order(db, preset):
    row = HistoryRepository(db).save(finished(preset.id, 72, holds=(40, 30, 12)))
    assert [a.attempt_number for a in row.attempts] == [1, 2, 3]
    assert [a.value for a in row.attempts] == [40, 30, 12]


def test_history_listed_newest_first(db, preset):
    repo = HistoryRepository(db)
    repo.save(finished(preset.id, 90, WHEN))
    repo.save(finished(preset.id, 70, WHEN + timedelta(days=2)))
    repo.save(finished(preset.id, 80, WHEN + timedelta(days=1)))
    assert [h.session_duration for h in repo.list_for_preset(preset.id)] == [70, 80, 90]
    assert repo.list_for_preset(preset.id + 1) == []


def test_preset_delete_cascades(db, preset):
    histories = HistoryRepository(db)
    saved = histories.save(finished(preset.id, 90))
    history_id = saved.id
    assert PresetRepository(db).delete(preset.id) is True
    db.expire_all()
    assert histories.get(history_id) is None
    assert PresetRepository(db).delete(preset.id) is False


def test_failed_commit_is_persistence_failure(db, preset, monkeypatch):
    def boom():
        raise OperationalError("INSERT", {}, Exception("database is locked"))
    monkeypatch.setattr(db, "commit", boom)
    with pytest.raises(PersistenceFailure):
        HistoryRepository(db).save(finished(preset.id, 90))


def test_scoped_repository_returns_detached_reads(preset):
    store = ScopedHistoryRepository()
    saved = store.save(finished(preset.id, 72))
    assert isinstance(saved, HistoryRead)
    assert [a.attempt_number for a in saved.attempts] == [1, 2]

    rows = store.list_for_preset(preset.id)
    assert [r.id for r in rows] == [saved.id]
    assert rows[0].attempts[1].total_counted == 25
    assert store.get(saved.id).session_duration == 72
    assert store.delete(saved.id) is True
    assert store.get(saved.id) is None


def test_scoped_repository_uses_given_factory(preset):
    opened = []

    def factory():
        opened.append(1)
        return SessionLocal()

    ScopedHistoryRepository(factory).list_for_preset(preset.id)
    assert opened == [1]
