from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from memory_companion.models.utils import generate_person_id

PLACEHOLDER_PREFIX = "Unknown-"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def is_placeholder_name(name: str) -> bool:
    return name.startswith(PLACEHOLDER_PREFIX)


def make_placeholder_name(now: datetime | None = None) -> str:
    """Return ``Unknown-<epoch millis>`` for *now* (defaults to the current time)."""
    now = now or _utcnow()
    return f"{PLACEHOLDER_PREFIX}{int(now.timestamp() * 1000)}"


@dataclass
class Identity:
    """One recognized person.

    ``face_embedding`` is the text embedding of an LLM-written face
    description, not a geometric face descriptor.
    """

    name: str
    face_embedding: list[float] | None = None

    id: str = field(default_factory=generate_person_id)
    first_seen: datetime = field(default_factory=_utcnow)
    last_seen: datetime = field(default_factory=_utcnow)
    times_recognized: int = 1
    conversation_count: int = 0
    profile_photo_key: str | None = None
    name_extracted_at: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def is_placeholder(self) -> bool:
        return is_placeholder_name(self.name)

    def touch(self, now: datetime) -> None:
        """Move ``last_seen`` forward; never behind ``first_seen``."""
        self.last_seen = max(now, self.first_seen)
        self.updated_at = now
