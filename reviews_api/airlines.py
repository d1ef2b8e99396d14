# reviews_api/airlines.py
from __future__ import annotations

import logging
import sqlite3

from flask import Blueprint, jsonify

from infra.store import airline_name_key, is_unique_violation
from reviews_api.errors import ConflictError, NotFoundError, ValidationError
from reviews_api.extensions import get_store, request_data
from schemas import as_str, average_rating, dedupe_reviews

logger = logging.getLogger(__name__)

bp = Blueprint("airlines", __name__, url_prefix="/api/airlines")

# ------------------------ DB helpers ------------------------

def _get_airline(conn: sqlite3.Connection, airline_id: int) -> dict:
    row = conn.execute(
        "SELECT id, name, logo_url, created_at FROM airlines WHERE id = ?", (airline_id,)
    ).fetchone()
    if row is None:
        raise NotFoundError("Airline not found")
    return dict(row)

def _airline_reviews(conn: sqlite3.Connection, airline_id: int) -> list[dict]:
    """Newest-first reviews with the author's display name, one per (user, heading)."""
    rows = conn.execute("""
        SELECT r.*, u.display_name AS user_name
        FROM reviews r
        JOIN users u ON r.user_id = u.id
        WHERE r.airline_id = ?
        ORDER BY r.created_at DESC, r.id DESC
    """, (airline_id,)).fetchall()
    return dedupe_reviews([dict(r) for r in rows])

# ------------------------ Views ------------------------

@bp.get("")
def index():
    """All airlines with their aggregate rating, ordered by name."""
    with get_store().connection() as conn:
        rows = conn.execute("""
            SELECT a.id, a.name, a.logo_url, a.created_at,
                   COALESCE(AVG(r.rating), 0) AS average_rating,
                   COUNT(r.id) AS review_count
            FROM airlines a
            LEFT JOIN reviews r ON a.id = r.airline_id
            GROUP BY a.id, a.name, a.logo_url, a.created_at
            ORDER BY a.name
        """).fetchall()

    airlines = []
    for r in rows:
        item = dict(r)
        item["average_rating"] = round(float(item["average_rating"]), 1) if item["review_count"] else 0
        airlines.append(item)
    return jsonify(airlines)

@bp.post("")
def create():
    data = request_data()
    name = as_str(data.get("name")).strip()
    if not name:
        raise ValidationError({"name": "Airline name is required"})
    logo_url = as_str(data.get("logo_url")).strip() or None

    # the UNIQUE on airlines.name_key (casefolded name) decides; no pre-check
    with get_store().connection() as conn:
        try:
            cur = conn.execute(
                "INSERT INTO airlines (name, name_key, logo_url) VALUES (?, ?, ?)",
                (name, airline_name_key(name), logo_url),
            )
        except sqlite3.IntegrityError as e:
            if is_unique_violation(e):
                logger.warning("Rejected duplicate airline name %r", name)
                raise ConflictError("An airline with this name already exists")
            raise
        airline = _get_airline(conn, cur.lastrowid)

    logger.info("Created airline %s (%s)", airline["id"], airline["name"])
    return jsonify({**airline, "average_rating": 0, "review_count": 0}), 201

@bp.get("/<int:airline_id>")
def detail(airline_id: int):
    with get_store().connection() as conn:
        airline = _get_airline(conn, airline_id)
        reviews = _airline_reviews(conn, airline_id)
    return jsonify({
        "airline": airline,
        "reviews": reviews,
        "average_rating": average_rating(reviews),
        "review_count": len(reviews),
    })

@bp.get("/<int:airline_id>/reviews")
def reviews(airline_id: int):
    with get_store().connection() as conn:
        _get_airline(conn, airline_id)
        items = _airline_reviews(conn, airline_id)
    return jsonify(items)
