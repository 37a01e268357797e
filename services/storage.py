"""
Disk storage for uploaded files, namespaced by application id.
Only the generated filename and the path relative to the upload root are persisted.
"""
from __future__ import annotations

import logging
import re
import time
import uuid
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

SAFE_NAME = re.compile(r"[^A-Za-z0-9.-]")


def sanitize_filename(name: str) -> str:
    base = Path(name or "upload").name
    return SAFE_NAME.sub("_", base) or "upload"


@dataclass(frozen=True)
class StoredFile:
    file_name: str
    file_path: str  # relative to the storage root
    size: int


class FileStorage:
    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _app_dir(self, application_id: str) -> Path:
        return self.root / sanitize_filename(application_id)

    def save(self, application_id: str, original_name: str, content: bytes) -> StoredFile:
        """Write content under the application's directory with a collision-resistant name."""
        app_dir = self._app_dir(application_id)
        app_dir.mkdir(parents=True, exist_ok=True)
        file_name = f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}_{sanitize_filename(original_name)}"
        dest = app_dir / file_name
        tmp = dest.with_suffix(dest.suffix + ".part")
        tmp.write_bytes(content)
        tmp.replace(dest)
        logger.debug("Stored %s (%d bytes)", dest, len(content))
        return StoredFile(
            file_name=file_name,
            file_path=f"{app_dir.name}/{file_name}",
            size=len(content),
        )

    def remove(self, stored: StoredFile) -> None:
        try:
            (self.root / stored.file_path).unlink(missing_ok=True)
        except OSError:
            logger.exception("Failed to remove %s", stored.file_path)
