# reviews_api/users.py
from __future__ import annotations

import logging
import sqlite3

from flask import Blueprint, jsonify

from reviews_api.errors import ConflictError, NotFoundError, ValidationError
from reviews_api.extensions import get_store, request_data
from schemas import as_str

logger = logging.getLogger(__name__)

bp = Blueprint("users", __name__, url_prefix="/api/users")

USER_COLUMNS = "id, google_id, email, display_name, created_at"


@bp.post("")
def sign_in():
    """
    Create-or-get a user by identity-provider id.
    Existing users only ever get their display name refreshed.
    """
    data = request_data()
    google_id = as_str(data.get("google_id")).strip()
    email = as_str(data.get("email")).strip()
    display_name = as_str(data.get("display_name")).strip() or None

    errors = {}
    if not google_id:
        errors["google_id"] = "google_id is required"
    if not email:
        errors["email"] = "Email is required"
    if errors:
        raise ValidationError(errors)

    with get_store().connection() as conn:
        row = conn.execute(f"SELECT {USER_COLUMNS} FROM users WHERE google_id = ?", (google_id,)).fetchone()
        if row:
            if display_name and display_name != row["display_name"]:
                conn.execute("UPDATE users SET display_name = ? WHERE id = ?", (display_name, row["id"]))
                row = conn.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (row["id"],)).fetchone()
            return jsonify(dict(row)), 200

        try:
            cur = conn.execute(
                "INSERT INTO users (google_id, email, display_name) VALUES (?, ?, ?)",
                (google_id, email, display_name),
            )
        except sqlite3.IntegrityError:
            logger.warning("Sign-in for %s conflicts with an existing account", email)
            raise ConflictError("A user with this email already exists")
        row = conn.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (cur.lastrowid,)).fetchone()

    logger.info("Created user %s", row["id"])
    return jsonify(dict(row)), 201


@bp.get("/<int:user_id>")
def detail(user_id: int):
    with get_store().connection() as conn:
        row = conn.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
    if row is None:
        raise NotFoundError("User not found")
    return jsonify(dict(row))
