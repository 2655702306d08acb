from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from memory_companion.storage.base import (
    SCREENSHOTS_PREFIX,
    TRANSCRIPTS_PREFIX,
    ArtifactStorage,
    artifact_stamp,
)

logger = logging.getLogger(__name__)


class DiskArtifactStorage(ArtifactStorage):
    """Local filesystem layout::

        <base>/screenshots/screenshot-<stamp>.png
        <base>/transcripts/transcript-<stamp>.txt
    """

    def __init__(self, base_path: str) -> None:
        self._base = Path(base_path)
        self._base.mkdir(parents=True, exist_ok=True)

    def _resolve(self, key: str) -> Path:
        path = (self._base / key).resolve()
        if not path.is_relative_to(self._base.resolve()):
            raise ValueError(f"Key escapes storage root: {key}")
        return path

    def _free_key(self, prefix: str, stem: str, suffix: str) -> str:
        """Return an unused key, numbering duplicates within one timestamp."""
        key = f"{prefix}/{stem}{suffix}"
        n = 1
        while self._resolve(key).exists():
            key = f"{prefix}/{stem}-{n}{suffix}"
            n += 1
        return key

    def _write(self, key: str, data: bytes) -> str:
        path = self._resolve(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug("Wrote %d bytes to %s", len(data), key)
        return key

    def save_screenshot(self, data: bytes, now: datetime) -> str:
        key = self._free_key(
            SCREENSHOTS_PREFIX, f"screenshot-{artifact_stamp(now)}", ".png"
        )
        return self._write(key, data)

    def save_transcript(self, text: str, now: datetime) -> str:
        key = self._free_key(
            TRANSCRIPTS_PREFIX, f"transcript-{artifact_stamp(now)}", ".txt"
        )
        return self._write(key, text.encode("utf-8"))

    def read(self, key: str) -> bytes:
        return self._resolve(key).read_bytes()

    def exists(self, key: str) -> bool:
        return self._resolve(key).exists()

    def clear(self) -> int:
        removed = 0
        for prefix in (SCREENSHOTS_PREFIX, TRANSCRIPTS_PREFIX):
            folder = self._base / prefix
            if not folder.exists():
                continue
            for path in folder.iterdir():
                # keep .gitkeep and other dotfiles
                if path.is_file() and not path.name.startswith("."):
                    path.unlink()
                    removed += 1
        logger.info("Removed %d artifacts from %s", removed, self._base)
        return removed
