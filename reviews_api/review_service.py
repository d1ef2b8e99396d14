# reviews_api/review_service.py
"""
Review mutations: create (with the duplicate-submission window), update and
delete (owner only), plus single-review lookup.

Views pass in the Store and ImageStore; functions raise ApiError subclasses
that the app's error handlers render as JSON.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

from werkzeug.datastructures import FileStorage

from infra.store import Store
from infra.uploads import ALLOWED_EXTENSIONS, ImageStore
from reviews_api.errors import ForbiddenError, NotFoundError, ValidationError
from schemas import HEADING_PAD, as_str, heading_key, require_positive_int, validate_review

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(minutes=10)

REVIEW_COLUMNS = (
    "id, user_id, airline_id, departure_city, arrival_city, rating, "
    "heading, description, image_url, created_at"
)


def _now() -> datetime:
    return datetime.now(timezone.utc)

def _iso(dt: datetime) -> str:
    return dt.isoformat(timespec="seconds")

def _check_image(image: Optional[FileStorage], images: ImageStore) -> None:
    if image is not None and not images.is_allowed(image.filename):
        allowed = ", ".join(sorted(ALLOWED_EXTENSIONS))
        raise ValidationError({"image": f"Image must be one of: {allowed}"})

def _load(conn, review_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute(f"SELECT {REVIEW_COLUMNS} FROM reviews WHERE id = ?", (review_id,)).fetchone()
    return dict(row) if row else None


def create_review(
    store: Store,
    images: ImageStore,
    data: Mapping[str, Any],
    image: Optional[FileStorage] = None,
    *,
    window: timedelta = DEFAULT_WINDOW,
) -> Tuple[Dict[str, Any], bool]:
    """
    Persist a review and return (row, created).

    A review from the same user for the same airline with the same heading,
    created within `window`, is returned as-is with created=False.
    """
    fields = validate_review(data)
    _check_image(image, images)
    image_url = as_str(data.get("image_url")).strip() or None
    stored: Optional[str] = None

    try:
        with store.transaction() as conn:
            if conn.execute("SELECT 1 FROM users WHERE id = ?", (fields["user_id"],)).fetchone() is None:
                raise NotFoundError("User not found")
            if conn.execute("SELECT 1 FROM airlines WHERE id = ?", (fields["airline_id"],)).fetchone() is None:
                raise NotFoundError("Airline not found")

            now = _now()
            existing = conn.execute(f"""
                SELECT {REVIEW_COLUMNS} FROM reviews
                WHERE user_id = ? AND airline_id = ? AND TRIM(heading, ?) = ? AND created_at >= ?
                ORDER BY created_at DESC, id DESC
                LIMIT 1
            """, (
                fields["user_id"], fields["airline_id"], HEADING_PAD,
                heading_key(fields["heading"]), _iso(now - window),
            )).fetchone()
            if existing:
                logger.info(
                    "Duplicate submission by user %s for airline %s matched review %s",
                    fields["user_id"], fields["airline_id"], existing["id"],
                )
                return dict(existing), False

            if image is not None:
                stored = images.save(image)
                image_url = stored

            cur = conn.execute(f"""
                INSERT INTO reviews
                    (user_id, airline_id, departure_city, arrival_city, rating,
                     heading, description, image_url, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                fields["user_id"], fields["airline_id"], fields["departure_city"],
                fields["arrival_city"], fields["rating"], fields["heading"],
                fields["description"], image_url, _iso(now),
            ))
            row = _load(conn, cur.lastrowid)
    except Exception:
        if stored:
            images.discard(stored)
        raise

    logger.info("Created review %s by user %s for airline %s", row["id"], row["user_id"], row["airline_id"])
    return row, True


def update_review(
    store: Store,
    images: ImageStore,
    review_id: int,
    data: Mapping[str, Any],
    image: Optional[FileStorage] = None,
) -> Dict[str, Any]:
    """
    Replace the mutable fields of a review owned by data["user_id"].

    Image: an uploaded file replaces the reference, an explicit empty
    image_url clears it, a non-empty image_url replaces it, absence keeps it.

    Checks run user_id (400), existence (404), ownership (403), then the
    remaining fields (400).
    """
    user_id = require_positive_int(data.get("user_id"), "user_id")
    stored: Optional[str] = None

    try:
        with store.transaction() as conn:
            current = _load(conn, review_id)
            if current is None:
                raise NotFoundError("Review not found")
            if current["user_id"] != user_id:
                logger.warning("User %s tried to edit review %s owned by %s", user_id, review_id, current["user_id"])
                raise ForbiddenError("You can only edit your own reviews")
            fields = validate_review(data, require_ids=False)
            _check_image(image, images)

            previous = current["image_url"]
            image_url = previous
            if image is not None:
                stored = images.save(image)
                image_url = stored
            elif "image_url" in data:
                image_url = as_str(data.get("image_url")).strip() or None

            cur = conn.execute("""
                UPDATE reviews
                   SET departure_city = ?, arrival_city = ?, rating = ?,
                       heading = ?, description = ?, image_url = ?
                 WHERE id = ? AND user_id = ?
            """, (
                fields["departure_city"], fields["arrival_city"], fields["rating"],
                fields["heading"], fields["description"], image_url,
                review_id, user_id,
            ))
            if cur.rowcount == 0:
                raise NotFoundError("Review not found")
            row = _load(conn, review_id)
    except Exception:
        if stored:
            images.discard(stored)
        raise

    if previous and previous != image_url:
        images.discard(previous)
    logger.info("Updated review %s", review_id)
    return row


def delete_review(store: Store, images: ImageStore, review_id: int, raw_user_id: Any) -> Dict[str, Any]:
    user_id = require_positive_int(raw_user_id, "user_id")

    with store.connection() as conn:
        current = _load(conn, review_id)
        if current is None:
            raise NotFoundError("Review not found")
        if current["user_id"] != user_id:
            logger.warning("User %s tried to delete review %s owned by %s", user_id, review_id, current["user_id"])
            raise ForbiddenError("You can only delete your own reviews")
        # owner re-checked in the statement itself
        cur = conn.execute("DELETE FROM reviews WHERE id = ? AND user_id = ?", (review_id, user_id))
        if cur.rowcount == 0:
            raise NotFoundError("Review not found")

    images.discard(current["image_url"])
    logger.info("Deleted review %s by user %s", review_id, user_id)
    return {"message": "Review deleted", "id": review_id}


def get_review(store: Store, review_id: int) -> Dict[str, Any]:
    with store.connection() as conn:
        row = conn.execute("""
            SELECT r.*, u.display_name AS user_name, a.name AS airline_name
            FROM reviews r
            JOIN users u ON r.user_id = u.id
            JOIN airlines a ON r.airline_id = a.id
            WHERE r.id = ?
        """, (review_id,)).fetchone()
    if row is None:
        raise NotFoundError("Review not found")
    return dict(row)
