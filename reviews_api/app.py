# reviews_api/app.py
from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify, send_from_directory
from flask_cors import CORS

from infra.config import Settings, get_settings
from infra.store import Store
from infra.uploads import ImageStore
from reviews_api.airlines import bp as airlines_bp
from reviews_api.errors import register_error_handlers
from reviews_api.extensions import get_images, get_store
from reviews_api.reviews import bp as reviews_bp
from reviews_api.users import bp as users_bp

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, store: Optional[Store] = None) -> Flask:
    """
    Build the API. The store handle lives as long as the returned app; pass
    `settings`/`store` explicitly to point it at another database.
    """
    settings = settings or get_settings()
    for issue in settings.validate():
        logger.warning(issue)

    store = store or Store(settings.db_path)
    store.ensure_schema()
    if settings.seed_sample_airlines:
        store.seed_sample_airlines()

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_mb * 1024 * 1024
    app.extensions["settings"] = settings
    app.extensions["store"] = store
    app.extensions["images"] = ImageStore(settings.upload_dir)

    CORS(app, resources={r"/api/*": {"origins": settings.cors_origin}}, send_wildcard=True)
    register_error_handlers(app)

    # --- Register blueprints --------------------------------------------------
    app.register_blueprint(airlines_bp)  # /api/airlines
    app.register_blueprint(reviews_bp)   # /api/reviews
    app.register_blueprint(users_bp)     # /api/users

    @app.get("/api/health")
    def health():
        return jsonify({"status": "ok", "database": "ok" if get_store().ping() else "unavailable"}), 200

    @app.get("/uploads/<path:filename>")
    def uploads(filename: str):
        return send_from_directory(get_images().root.resolve(), filename)

    logger.info("API ready (db=%s, uploads=%s)", settings.db_path, settings.upload_dir)
    return app
