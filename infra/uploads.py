# infra/uploads.py
from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Optional

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}
URL_PREFIX = "/uploads/"


def _extension(filename: Optional[str]) -> str:
    name = secure_filename(filename or "")
    return name.rsplit(".", 1)[-1].lower() if "." in name else ""


class ImageStore:
    """Review images on local disk; only the returned reference is persisted."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def is_allowed(self, filename: Optional[str]) -> bool:
        return _extension(filename) in ALLOWED_EXTENSIONS

    def save(self, upload: FileStorage) -> str:
        ext = _extension(upload.filename)
        if ext not in ALLOWED_EXTENSIONS:
            raise ValueError(f"Unsupported image type: {upload.filename!r}")
        self.root.mkdir(parents=True, exist_ok=True)
        name = f"{uuid.uuid4().hex}.{ext}"
        upload.save(self.root / name)
        logger.info("Stored image %s (%s)", name, upload.filename)
        return URL_PREFIX + name

    def path_for(self, ref: Optional[str]) -> Optional[Path]:
        """Local path behind a reference we issued; None for foreign URLs."""
        if not ref or not ref.startswith(URL_PREFIX):
            return None
        return self.root / Path(ref[len(URL_PREFIX):]).name

    def discard(self, ref: Optional[str]) -> bool:
        path = self.path_for(ref)
        if path is None:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info("Discarded image %s", path.name)
        return True
