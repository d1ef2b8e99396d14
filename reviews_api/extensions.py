# reviews_api/extensions.py
from __future__ import annotations

from datetime import timedelta
from typing import Any, Mapping, Optional

from flask import current_app, request
from werkzeug.datastructures import FileStorage

from infra.config import Settings
from infra.store import Store
from infra.uploads import ImageStore


def get_store() -> Store:
    return current_app.extensions["store"]


def get_images() -> ImageStore:
    return current_app.extensions["images"]


def get_settings() -> Settings:
    return current_app.extensions["settings"]


def duplicate_window() -> timedelta:
    return timedelta(minutes=get_settings().duplicate_window_minutes)


def request_data() -> Mapping[str, Any]:
    """JSON body when sent as JSON, otherwise the (multipart) form."""
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form


def uploaded_image(field: str = "image") -> Optional[FileStorage]:
    f = request.files.get(field)
    if f is None or not f.filename:
        return None
    return f
