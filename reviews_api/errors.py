# reviews_api/errors.py
from __future__ import annotations

import logging
import sqlite3
from typing import Dict, Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Error with an HTTP status; rendered as {"error": message}."""
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(ApiError):
    """One message per missing or malformed field."""
    status_code = 400

    def __init__(self, fields: Dict[str, str]):
        self.fields = dict(fields)
        super().__init__(next(iter(self.fields.values()), "Invalid request"))

    def to_dict(self) -> dict:
        return {"error": self.message, "fields": self.fields}


class NotFoundError(ApiError):
    status_code = 404


class ForbiddenError(ApiError):
    status_code = 403


class ConflictError(ApiError):
    status_code = 409


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def _api_error(err: ApiError):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        return jsonify({"error": err.description}), err.code

    @app.errorhandler(sqlite3.Error)
    def _store_error(err: sqlite3.Error):
        logger.exception("Store error: %s", err)
        return jsonify({"error": "Server error"}), 500
