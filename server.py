#!/usr/bin/env python3
"""
server.py

Starts the airline reviews API.

    python server.py

Host, port, database path, upload directory and CORS origin come from the
environment (see infra/config.py); a local .env file is honoured.
"""
from __future__ import annotations

import logging
import os

from infra.config import get_settings
from reviews_api.app import create_app


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(settings)
    app.run(host=settings.host, port=settings.port, debug=os.getenv("FLASK_DEBUG", "0") == "1")


if __name__ == "__main__":
    main()
