# schemas.py
from __future__ import annotations
from typing import Dict, Any, List, Mapping, Optional, Tuple
import re

from reviews_api.errors import ValidationError

INT_RE = re.compile(r"^\d+$")
RATING_MIN, RATING_MAX = 1, 5
# trimmed from headings before comparing submissions (also passed to SQLite TRIM)
HEADING_PAD = " \t\r\n"

REVIEW_TEXT_FIELDS = ("departure_city", "arrival_city", "heading", "description")
FIELD_LABELS = {
    "user_id": "User ID",
    "airline_id": "Airline ID",
    "departure_city": "Departure city",
    "arrival_city": "Arrival city",
    "heading": "Heading",
    "description": "Description",
    "rating": "Rating",
}

def as_str(x: Any) -> str:
    return "" if x is None else str(x)

def is_blank(x: Any) -> bool:
    return not as_str(x).strip()

def parse_positive_int(value: Any) -> Optional[int]:
    """Strict boundary parse: 7 and "7" pass; 0, -1, "7.0", True and "" do not."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    s = as_str(value).strip()
    if not INT_RE.match(s):
        return None
    n = int(s)
    return n if n > 0 else None

def parse_rating(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        n = value
    else:
        s = as_str(value).strip()
        if not INT_RE.match(s):
            return None
        n = int(s)
    return n if RATING_MIN <= n <= RATING_MAX else None

def _id_error(field: str, value: Any) -> Optional[str]:
    label = FIELD_LABELS[field]
    if is_blank(value):
        return f"{label} is required"
    if parse_positive_int(value) is None:
        return f"{label} must be a positive integer"
    return None

def require_positive_int(value: Any, field: str) -> int:
    """Parse an id field or raise a ValidationError naming it."""
    err = _id_error(field, value)
    if err:
        raise ValidationError({field: err})
    return parse_positive_int(value)

def validate_review(data: Mapping[str, Any], *, require_ids: bool = True) -> Dict[str, Any]:
    """
    Validate a review payload (JSON dict or form MultiDict).
    - text fields must be non-blank; values are kept as submitted
    - rating must be an integer 1..5
    - with require_ids, user_id/airline_id must be positive integers
    Raises ValidationError carrying one message per bad field.
    """
    data = data or {}
    errors: Dict[str, str] = {}
    out: Dict[str, Any] = {}

    if require_ids:
        for field in ("user_id", "airline_id"):
            err = _id_error(field, data.get(field))
            if err:
                errors[field] = err
            else:
                out[field] = parse_positive_int(data.get(field))

    for field in REVIEW_TEXT_FIELDS:
        value = data.get(field)
        if is_blank(value):
            errors[field] = f"{FIELD_LABELS[field]} is required"
        else:
            out[field] = as_str(value)

    raw_rating = data.get("rating")
    if is_blank(raw_rating):
        errors["rating"] = "Rating is required"
    else:
        rating = parse_rating(raw_rating)
        if rating is None:
            errors["rating"] = f"Rating must be an integer between {RATING_MIN} and {RATING_MAX}"
        else:
            out["rating"] = rating

    if errors:
        raise ValidationError(errors)
    return out

def heading_key(heading: Any) -> str:
    return as_str(heading).strip(HEADING_PAD)

def dedupe_reviews(reviews: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    De-duplicate by (user_id, heading), heading compared after trimming.
    Keeps the first occurrence (stable), i.e. the newest for a newest-first list.
    """
    out: List[Dict[str, Any]] = []
    seen: set[Tuple[Any, str]] = set()
    for r in reviews:
        key = (r.get("user_id"), heading_key(r.get("heading")))
        if key in seen:
            continue
        seen.add(key)
        out.append(r)
    return out

def average_rating(reviews: List[Dict[str, Any]]) -> float:
    if not reviews:
        return 0
    return round(sum(r["rating"] for r in reviews) / len(reviews), 1)
