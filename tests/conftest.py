# tests/conftest.py
import os, sys, pathlib
import pytest

# Put repo root on sys.path so 'reviews_api', 'infra', 'schemas', etc. import cleanly.
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from infra.config import Settings
from infra.store import Store, airline_name_key
from reviews_api.app import create_app

@pytest.fixture(autouse=True)
def _env_isolation(monkeypatch, tmp_path):
    monkeypatch.setenv("REVIEWS_DB_PATH", str(tmp_path / "reviews.db"))
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("CORS_ORIGIN", "*")
    monkeypatch.setenv("DUPLICATE_WINDOW_MINUTES", "10")
    monkeypatch.setenv("SEED_SAMPLE_AIRLINES", "0")
    return

@pytest.fixture
def settings():
    return Settings(
        db_path=os.environ["REVIEWS_DB_PATH"],
        upload_dir=os.environ["UPLOAD_DIR"],
    )

@pytest.fixture
def store(settings):
    s = Store(settings.db_path)
    s.ensure_schema()
    return s

@pytest.fixture
def app(settings, store):
    app = create_app(settings=settings, store=store)
    app.config["TESTING"] = True
    return app

@pytest.fixture
def client(app):
    return app.test_client()

def _insert(store, sql, params):
    with store.connection() as conn:
        return conn.execute(sql, params).lastrowid

@pytest.fixture
def make_user(store):
    def _make(google_id="g-1", email=None, display_name="Alice"):
        return _insert(store,
            "INSERT INTO users (google_id, email, display_name) VALUES (?,?,?)",
            (google_id, email or f"{google_id}@example.com", display_name))
    return _make

@pytest.fixture
def make_airline(store):
    def _make(name="Delta", logo_url=None):
        return _insert(store, "INSERT INTO airlines (name, name_key, logo_url) VALUES (?,?,?)",
                       (name, airline_name_key(name), logo_url))
    return _make

@pytest.fixture
def user_id(make_user):
    return make_user()

@pytest.fixture
def other_user_id(make_user):
    return make_user(google_id="g-2", display_name="Bob")

@pytest.fixture
def airline_id(make_airline):
    return make_airline()

@pytest.fixture
def review_payload(user_id, airline_id):
    return {
        "user_id": user_id,
        "airline_id": airline_id,
        "departure_city": "Atlanta",
        "arrival_city": "Boston",
        "rating": 5,
        "heading": "Great flight",
        "description": "Friendly crew and on time.",
    }
