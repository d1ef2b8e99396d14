# infra/store.py
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)

DDL = """
CREATE TABLE IF NOT EXISTS users (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  google_id TEXT NOT NULL UNIQUE,
  email TEXT NOT NULL UNIQUE,
  display_name TEXT,
  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now'))
);
CREATE TABLE IF NOT EXISTS airlines (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL COLLATE NOCASE,
  name_key TEXT NOT NULL UNIQUE,
  logo_url TEXT,
  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now'))
);
CREATE TABLE IF NOT EXISTS reviews (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
  airline_id INTEGER NOT NULL REFERENCES airlines(id) ON DELETE CASCADE,
  departure_city TEXT NOT NULL,
  arrival_city TEXT NOT NULL,
  rating INTEGER NOT NULL CHECK (rating >= 1 AND rating <= 5),
  heading TEXT NOT NULL,
  description TEXT NOT NULL,
  image_url TEXT,
  created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_reviews_airline_created ON reviews(airline_id, created_at DESC);
CREATE INDEX IF NOT EXISTS idx_reviews_submission ON reviews(user_id, airline_id, heading, created_at);
"""

SAMPLE_AIRLINES = [
    ("Delta Air Lines", "https://example.com/delta-logo.png"),
    ("United Airlines", "https://example.com/united-logo.png"),
    ("American Airlines", "https://example.com/american-logo.png"),
    ("Southwest Airlines", "https://example.com/southwest-logo.png"),
    ("British Airways", "https://example.com/british-logo.png"),
]

TABLES = ("users", "airlines", "reviews")


def is_unique_violation(err: sqlite3.IntegrityError) -> bool:
    return "UNIQUE constraint failed" in str(err)


def airline_name_key(name: str) -> str:
    """Unicode-aware case-insensitive key behind the airlines.name_key UNIQUE."""
    return name.strip().casefold()


class Store:
    """
    Handle on the relational store (users, airlines, reviews).

    Built once by the application factory and handed to the views; every
    request checks out its own connection and closes it when done.

    Usage:
        store = Store("reviews.db")
        store.ensure_schema()

        with store.connection() as conn:
            conn.execute("SELECT * FROM airlines").fetchall()

        with store.transaction() as conn:
            conn.execute("INSERT INTO ...")
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    def connect(self) -> sqlite3.Connection:
        # autocommit mode; transaction() issues BEGIN/COMMIT itself
        conn = sqlite3.connect(self.db_path, isolation_level=None, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self.connect()
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self, immediate: bool = True) -> Iterator[sqlite3.Connection]:
        """
        Dedicated connection wrapped in one transaction.

        BEGIN IMMEDIATE takes the write lock up-front, so reads made inside the
        block cannot go stale before the writes that depend on them. Any
        exception rolls back; a normal exit commits.
        """
        conn = self.connect()
        try:
            conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    def ensure_schema(self) -> None:
        with self.connection() as conn:
            conn.executescript(DDL)
        logger.info("Schema ready: %s", self.db_path)

    def seed_sample_airlines(self) -> int:
        """Insert the sample airlines when the table is empty; returns rows added."""
        with self.transaction() as conn:
            count = conn.execute("SELECT COUNT(*) FROM airlines").fetchone()[0]
            if count:
                return 0
            conn.executemany(
                "INSERT INTO airlines (name, name_key, logo_url) VALUES (?, ?, ?)",
                [(name, airline_name_key(name), logo) for name, logo in SAMPLE_AIRLINES],
            )
        logger.info("Seeded %d sample airlines", len(SAMPLE_AIRLINES))
        return len(SAMPLE_AIRLINES)

    def ping(self) -> bool:
        try:
            with self.connection() as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except sqlite3.Error as e:
            logger.warning("Store unreachable at %s: %s", self.db_path, e)
            return False

    def check(self) -> dict:
        """Row counts per table plus airline names duplicated case-insensitively."""
        with self.connection() as conn:
            counts = {t: conn.execute(f"SELECT COUNT(*) FROM {t}").fetchone()[0] for t in TABLES}
            dupes = conn.execute("""
                SELECT name_key AS name, COUNT(*) AS count
                FROM airlines
                GROUP BY name_key
                HAVING COUNT(*) > 1
                ORDER BY name_key
            """).fetchall()
        return {
            "counts": counts,
            "duplicate_airline_names": [dict(r) for r in dupes],
        }
