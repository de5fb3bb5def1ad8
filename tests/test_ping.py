from fastapi.testclient import TestClient
from accumulation_tracker import main as app_main
from accumulation_tracker.main import app
from accumulation_tracker.settings import get_settings

client = TestClient(app)

def test_root():
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["name"] == "Accumulation Tracker API"

def test_ping():
    r = client.get("/ping")
    assert r.status_code == 200
    assert r.json() == {"pong": True}

def test_healthz():
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

def test_healthz_reports_unreachable_store(monkeypatch):
    def refuse():
        raise ConnectionError("sqlite file locked")
    monkeypatch.setattr(app_main, "SessionLocal", refuse)
    body = client.get("/healthz").json()
    assert body == {"status": "degraded", "error": "sqlite file locked"}
    # the live endpoints don't need the database
    assert client.post("/live", json={"config": {"mode": "reps", "target": 10}}).status_code == 201

def test_version_comes_from_settings(monkeypatch):
    monkeypatch.setattr(get_settings(), "API_VERSION", "1.4.0")
    assert client.get("/version").json() == {"version": "1.4.0"}

def test_cors_origins_from_settings():
    assert app_main.ALLOW_ORIGINS == [o.strip() for o in get_settings().ALLOW_ORIGINS.split(",")]
    r = client.get("/ping", headers={"Origin": "http://phone.local"})
    assert r.headers["access-control-allow-origin"] == "*"

def test_request_id_echoed():
    r = client.get("/ping", headers={"X-Request-ID": "abc123"})
    assert r.headers["X-Request-ID"] == "abc123"
    assert client.get("/ping").headers["X-Request-ID"]
