# reviews_api/reviews.py
from __future__ import annotations

from flask import Blueprint, jsonify, request

from reviews_api import review_service
from reviews_api.extensions import (
    duplicate_window, get_images, get_store, request_data, uploaded_image,
)

bp = Blueprint("reviews", __name__, url_prefix="/api/reviews")


@bp.post("")
def create():
    """Create a review (JSON or multipart with an optional `image` part)."""
    review, created = review_service.create_review(
        get_store(), get_images(), request_data(),
        image=uploaded_image(), window=duplicate_window(),
    )
    # a duplicate within the window is reported as an already-completed submission
    return jsonify(review), (201 if created else 200)


@bp.get("/<int:review_id>")
def detail(review_id: int):
    return jsonify(review_service.get_review(get_store(), review_id))


@bp.put("/<int:review_id>")
def update(review_id: int):
    review = review_service.update_review(
        get_store(), get_images(), review_id, request_data(), image=uploaded_image(),
    )
    return jsonify(review)


@bp.delete("/<int:review_id>")
def delete(review_id: int):
    result = review_service.delete_review(get_store(), get_images(), review_id, request.args.get("user_id"))
    return jsonify(result)
