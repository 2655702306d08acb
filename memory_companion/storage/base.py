from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

SCREENSHOTS_PREFIX = "screenshots"
TRANSCRIPTS_PREFIX = "transcripts"


def artifact_stamp(now: datetime) -> str:
    """Filesystem-safe ISO timestamp, e.g. ``2025-11-08T14-30-00-123Z``."""
    iso = now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return iso.replace(":", "-").replace(".", "-")


class ArtifactStorage(ABC):
    """Stores the raw screenshot and transcript artifacts of a session."""

    @abstractmethod
    def save_screenshot(self, data: bytes, now: datetime) -> str:
        """Write a screenshot and return its key."""
        ...

    @abstractmethod
    def save_transcript(self, text: str, now: datetime) -> str:
        """Write a transcript text file and return its key."""
        ...

    @abstractmethod
    def read(self, key: str) -> bytes: ...

    @abstractmethod
    def exists(self, key: str) -> bool: ...

    @abstractmethod
    def clear(self) -> int:
        """Delete every stored artifact.  Returns the number of files removed."""
        ...
