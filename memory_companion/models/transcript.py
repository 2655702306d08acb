from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from memory_companion.models.utils import generate_id


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class Transcript:
    """One captured conversation with its semantic embedding.

    ``identity_id`` is a lookup-only reference to an :class:`Identity`;
    the transcript never owns the identity.
    """

    text: str
    word_count: int
    identity_id: str | None = None
    embedding: list[float] | None = None
    screenshot_key: str | None = None
    transcript_key: str | None = None

    id: str = field(default_factory=generate_id)
    timestamp: datetime = field(default_factory=_utcnow)
    created_at: datetime = field(default_factory=_utcnow)
