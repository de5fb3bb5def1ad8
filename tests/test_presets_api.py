from datetime import datetime, timezone
from fastapi.testclient import TestClient
from accumulation_tracker.main import app
from accumulation_tracker.db import SessionLocal
from accumulation_tracker.deps.stores import get_history_store, get_preset_store
from accumulation_tracker.repositories.history_repo import HistoryRepository
from accumulation_tracker.schemas.history import AttemptCreate, HistoryCreate
from accumulation_tracker.storage.kv_store import JsonFileKeyValueStore
from accumulation_tracker.storage.local_store import LocalCollections, LocalHistoryStore, LocalPresetStore

client = TestClient(app)

HANDSTAND = {"name": "Handstand", "mode": "time", "target": 60, "rest_time": 15, "adjustment": 5}

def make_preset(**overrides):
    r = client.post("/presets", json={**HANDSTAND, **overrides})
    assert r.status_code == 201, r.text
    return r.json()

def save_history(preset_id, duration, when, total=60, attempt_count=1):
    db = SessionLocal()
    HistoryRepository(db).save(HistoryCreate(
        preset_id=preset_id,
        date=when,
        total_accumulated=total,
        target=60,
        attempt_count=attempt_count,
        session_duration=duration,
        attempts=[AttemptCreate(value=65, adjustment=5, total_counted=60, timestamp=when)],
    ))
    db.close()

def test_list_seeds_default_presets_once():
    r = client.get("/presets")
    assert r.status_code == 200
    names = [p["name"] for p in r.json()]
    assert names == ["Straight Handstand", "Tuck 7 Straddle", "Pull-ups"]
    pullups = r.json()[2]
    assert (pullups["mode"], pullups["target"], pullups["rest_time"], pullups["adjustment"]) == ("reps", 20, 30, 2)
    # second call doesn't duplicate
    assert len(client.get("/presets").json()) == 3

def test_no_seeding_when_presets_exist():
    make_preset()
    assert [p["name"] for p in client.get("/presets").json()] == ["Handstand"]

def test_create_get_update_preset():
    p = make_preset(name="  L-sit  ")
    assert p["name"] == "L-sit"
    assert client.get(f"/presets/{p['id']}").json()["target"] == 60

    r = client.patch(f"/presets/{p['id']}", json={"target": 45, "rest_time": 20})
    assert r.status_code == 200
    body = r.json()
    assert body["target"] == 45 and body["rest_time"] == 20 and body["adjustment"] == 5

def test_preset_validation():
    for bad in ({"target": 0}, {"rest_time": -1}, {"adjustment": -2}, {"name": "   "}, {"mode": "distance"}):
        r = client.post("/presets", json={**HANDSTAND, **bad})
        assert r.status_code == 422, bad

def test_missing_preset_404s():
    assert client.get("/presets/999999").status_code == 404
    assert client.patch("/presets/999999", json={"target": 10}).status_code == 404
    assert client.delete("/presets/999999").status_code == 404
    assert client.get("/presets/999999/history").status_code == 404
    assert client.get("/presets/999999/stats").status_code == 404

def test_history_and_stats_newest_first():
    p = make_preset()
    assert client.get(f"/presets/{p['id']}/stats").json() is None
    save_history(p["id"], 100, datetime(2026, 1, 1, tzinfo=timezone.utc))
    save_history(p["id"], 80, datetime(2026, 1, 3, tzinfo=timezone.utc))
    save_history(p["id"], 90, datetime(2026, 1, 2, tzinfo=timezone.utc))

    history = client.get(f"/presets/{p['id']}/history").json()
    assert [h["session_duration"] for h in history] == [80, 90, 100]
    assert history[0]["attempts"][0]["attempt_number"] == 1

    stats = client.get(f"/presets/{p['id']}/stats").json()
    assert stats == {
        "total_sessions": 3,
        "average_duration": 90,
        "best_duration": 80,
        "average_attempts": 1.0,
        "trend": "stable",
    }

    progress = client.get(f"/presets/{p['id']}/progress").json()
    assert [pt["session_duration"] for pt in progress] == [100, 90, 80]
    assert progress[0]["best_hold"] == 65

def test_delete_history_and_cascade():
    p = make_preset()
    save_history(p["id"], 100, datetime(2026, 1, 1, tzinfo=timezone.utc))
    save_history(p["id"], 90, datetime(2026, 1, 2, tzinfo=timezone.utc))
    first, second = client.get(f"/presets/{p['id']}/history").json()

    assert client.delete(f"/history/{first['id']}").status_code == 204
    assert client.get(f"/history/{first['id']}").status_code == 404
    assert client.delete(f"/history/{first['id']}").status_code == 404

    assert client.delete(f"/presets/{p['id']}").status_code == 204
    assert client.get(f"/history/{second['id']}").status_code == 404

def test_local_backend_behind_same_routes(tmp_path):
    collections = LocalCollections(JsonFileKeyValueStore(tmp_path / "store.json"))
    app.dependency_overrides[get_preset_store] = lambda: LocalPresetStore(collections)
    app.dependency_overrides[get_history_store] = lambda: LocalHistoryStore(collections)
    try:
        assert len(client.get("/presets").json()) == 3
        p = make_preset(name="Front lever")
        assert p["id"] == 4
        assert client.get(f"/presets/{p['id']}/history").json() == []
    finally:
        app.dependency_overrides.pop(get_preset_store, None)
        app.dependency_overrides.pop(get_history_store, None)

def test_overview_across_presets():
    handstand = make_preset()
    pullups = make_preset(name="Pull-ups", mode="reps", target=20, rest_time=30, adjustment=2)
    make_preset(name="Never trained")
    save_history(handstand["id"], 100, datetime(2026, 1, 1, tzinfo=timezone.utc), total=60, attempt_count=2)
    save_history(handstand["id"], 80, datetime(2026, 1, 3, tzinfo=timezone.utc), total=66, attempt_count=4)
    save_history(pullups["id"], 50, datetime(2026, 1, 2, tzinfo=timezone.utc), total=21)

    r = client.get("/presets/stats")
    assert r.status_code == 200
    first, second = r.json()
    assert first["name"] == "Handstand"
    assert first["total_sessions"] == 2
    assert first["best_session"] == 66
    assert first["average_accumulated"] == 63
    assert first["average_attempts"] == 3
    assert first["average_session_duration"] == 90
    assert first["last_session_date"].startswith("2026-01-03")
    assert first["trend"] == "stable"
    assert (second["preset_id"], second["total_sessions"], second["best_session"]) == (pullups["id"], 1, 21)

def test_overview_empty_without_sessions():
    make_preset()
    assert client.get("/presets/stats").json() == []

def test_storage_failure_is_503(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    collections = LocalCollections(JsonFileKeyValueStore(blocker / "store.json"))   # parent is a file
    app.dependency_overrides[get_preset_store] = lambda: LocalPresetStore(collections)
    app.dependency_overrides[get_history_store] = lambda: LocalHistoryStore(collections)
    try:
        assert client.post("/presets", json=HANDSTAND).status_code == 503
        assert client.get("/presets").status_code == 503
        assert collections.presets == []
    finally:
        app.dependency_overrides.pop(get_preset_store, None)
        app.dependency_overrides.pop(get_history_store, None)
