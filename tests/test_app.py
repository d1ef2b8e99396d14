# tests/test_app.py
import sqlite3

from infra.config import Settings, get_settings
from reviews_api.app import create_app

def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.get_json() == {"status": "ok", "database": "ok"}

def test_health_stays_up_when_store_is_down(client, monkeypatch, store):
    monkeypatch.setattr(store, "ping", lambda: False)
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.get_json()["database"] == "unavailable"

def test_unknown_route_is_json_404(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert "error" in r.get_json()

def test_store_failure_is_generic_500(client, monkeypatch, store):
    def boom():
        raise sqlite3.OperationalError("disk I/O error")
    monkeypatch.setattr(store, "connect", boom)
    r = client.get("/api/airlines")
    assert r.status_code == 500
    assert r.get_json() == {"error": "Server error"}

def test_cors_header_on_api_routes(client):
    r = client.get("/api/health", headers={"Origin": "http://localhost:5173"})
    assert r.headers.get("Access-Control-Allow-Origin") == "*"

def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("DUPLICATE_WINDOW_MINUTES", "3")
    get_settings.cache_clear()
    s = get_settings()
    assert s.port == 8080
    assert s.duplicate_window_minutes == 3
    assert s.validate() == []
    get_settings.cache_clear()

def test_settings_validate_flags_bad_values():
    s = Settings(duplicate_window_minutes=-1, max_upload_mb=0)
    assert len(s.validate()) == 2

def test_seed_on_startup(tmp_path):
    s = Settings(db_path=str(tmp_path / "seed.db"), upload_dir=str(tmp_path / "up"), seed_sample_airlines=True)
    client = create_app(settings=s).test_client()
    names = [a["name"] for a in client.get("/api/airlines").get_json()]
    assert "Delta Air Lines" in names and len(names) == 5
