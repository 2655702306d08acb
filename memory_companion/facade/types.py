"""Public return types for the memory_companion API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from memory_companion.models import Identity, Transcript
from memory_companion.people.career import CareerInfo


@dataclass
class CaptureResult:
    """Result from :meth:`MemoryCompanion.capture`."""

    no_face_detected: bool = False
    identity: Identity | None = None
    is_new: bool = False
    distance: float | None = None
    screenshot_key: str | None = None

    @property
    def confidence(self) -> float | None:
        """``1 - distance`` for a match, ``None`` otherwise."""
        if self.distance is None:
            return None
        return 1.0 - self.distance


@dataclass
class SaveTranscriptResult:
    """Result from :meth:`MemoryCompanion.save_transcript`."""

    transcript: Transcript
    identity: Identity | None = None
    name_extracted: bool = False
    new_name: str | None = None


@dataclass
class PersonDetails:
    """An identity with its conversations, newest first."""

    identity: Identity
    transcripts: list[Transcript] = field(default_factory=list)


@dataclass
class PersonSummary:
    """Result from :meth:`MemoryCompanion.summarize_person`."""

    identity_id: str
    name: str
    summary: str
    conversation_count: int
    first_seen: datetime
    last_seen: datetime
    career_info: str | None = None
    career_lookup: CareerInfo | None = None
