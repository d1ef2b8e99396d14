# infra/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration, read from the environment (and .env when present).

    Tests build their own instance with explicit paths instead of going
    through get_settings().
    """
    db_path: str = field(default_factory=lambda: os.getenv("REVIEWS_DB_PATH", "reviews.db"))
    upload_dir: str = field(default_factory=lambda: os.getenv("UPLOAD_DIR", "uploads"))
    cors_origin: str = field(default_factory=lambda: os.getenv("CORS_ORIGIN", "*"))
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("PORT", 5000))
    duplicate_window_minutes: int = field(default_factory=lambda: _env_int("DUPLICATE_WINDOW_MINUTES", 10))
    max_upload_mb: int = field(default_factory=lambda: _env_int("MAX_UPLOAD_MB", 5))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    seed_sample_airlines: bool = field(default_factory=lambda: os.getenv("SEED_SAMPLE_AIRLINES", "0") == "1")

    def validate(self) -> list[str]:
        """Return human-readable problems; empty when the settings are usable."""
        issues = []
        if self.duplicate_window_minutes < 0:
            issues.append("DUPLICATE_WINDOW_MINUTES must not be negative.")
        if self.max_upload_mb <= 0:
            issues.append("MAX_UPLOAD_MB must be positive.")
        if not self.cors_origin:
            issues.append("CORS_ORIGIN is empty; browsers will reject cross-origin calls.")
        return issues


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
