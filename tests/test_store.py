# tests/test_store.py
import sqlite3
import pytest

from db.setup_db import main as setup_main
from infra.store import Store

def test_ensure_schema_is_idempotent(store):
    store.ensure_schema()
    with store.connection() as conn:
        tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert {"users", "airlines", "reviews"} <= tables

def test_airline_name_unique_ignores_case(store, make_airline):
    make_airline("Delta")
    with pytest.raises(sqlite3.IntegrityError):
        make_airline("DELTA")

def test_rating_check_constraint(store, user_id, airline_id):
    with store.connection() as conn, pytest.raises(sqlite3.IntegrityError):
        conn.execute(
            "INSERT INTO reviews (user_id, airline_id, departure_city, arrival_city, rating, heading, description, created_at)"
            " VALUES (?,?,?,?,?,?,?,?)",
            (user_id, airline_id, "a", "b", 6, "h", "d", "2026-01-01T00:00:00+00:00"))

def test_transaction_rolls_back_on_error(store):
    with pytest.raises(RuntimeError):
        with store.transaction() as conn:
            conn.execute("INSERT INTO airlines (name, name_key) VALUES ('Ghost Air', 'ghost air')")
            raise RuntimeError("abort")
    with store.connection() as conn:
        assert conn.execute("SELECT COUNT(*) FROM airlines").fetchone()[0] == 0

def test_seed_only_when_empty(store):
    assert store.seed_sample_airlines() == 5
    assert store.seed_sample_airlines() == 0

def test_check_reports_counts(store, make_airline):
    make_airline("Delta")
    report = store.check()
    assert report["counts"] == {"users": 0, "airlines": 1, "reviews": 0}
    assert report["duplicate_airline_names"] == []

def test_ping_false_for_unreachable_path(tmp_path):
    assert Store(str(tmp_path / "missing" / "x.db")).ping() is False

def test_setup_cli_seeds_and_checks(tmp_path, capsys):
    db = tmp_path / "cli.db"
    assert setup_main(["--db", str(db), "--seed", "--check"]) == 0
    out = capsys.readouterr().out
    assert "Seeded 5 airline(s)." in out
    assert "- airlines: 5 row(s)" in out
    assert "No duplicate airline names." in out
