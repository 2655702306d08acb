from __future__ import annotations

from datetime import UTC, datetime

from pgvector.sqlalchemy import Vector
from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy import Identity as IdentityColumn
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from memory_companion.models import EMBEDDING_DIMENSIONS
from memory_companion.models.utils import generate_id


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Declarative base for all memory_companion ORM rows."""

    pass


class TimeStampMixin:
    """Mixin that adds created_at / updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )


class IdentityRow(TimeStampMixin, Base):
    __tablename__ = "identities"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)

    face_embedding: Mapped[list[float] | None] = mapped_column(
        Vector(EMBEDDING_DIMENSIONS),
        nullable=True,
        comment="Text embedding of an LLM-written face description",
    )

    first_seen: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_seen: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    times_recognized: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    conversation_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    profile_photo_key: Mapped[str | None] = mapped_column(Text, nullable=True)
    name_extracted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Monotonic insertion sequence; gives the roster scan a stable order.
    seq: Mapped[int] = mapped_column(Integer, IdentityColumn(), unique=True)

    __table_args__ = (Index("idx_identities_last_seen", "last_seen"),)


class TranscriptRow(Base):
    __tablename__ = "transcripts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)

    # Lookup-only reference; no FK so identities can be purged independently.
    identity_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    embedding: Mapped[list[float] | None] = mapped_column(
        Vector(EMBEDDING_DIMENSIONS),
        nullable=True,
    )
    word_count: Mapped[int] = mapped_column(Integer, nullable=False)
    screenshot_key: Mapped[str | None] = mapped_column(Text, nullable=True)
    transcript_key: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index("idx_transcripts_identity_id", "identity_id"),
        Index("idx_transcripts_timestamp", "timestamp"),
    )
