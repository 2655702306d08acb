from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.sql import text

from memory_companion.db.models import Base, IdentityRow, TranscriptRow
from memory_companion.exceptions import IdentityNotFoundError
from memory_companion.models import Identity, Transcript
from memory_companion.store.base import Store, TranscriptSearchResult

logger = logging.getLogger(__name__)

# Key for the transaction-scoped advisory lock that serialises roster writes.
ROSTER_LOCK_KEY = 0x6D656D6F


class PostgresStore(Store):
    """Store backed by PostgreSQL + pgvector via SQLAlchemy + asyncpg.

    Wraps the ORM rows in ``memory_companion.db.models`` and translates
    to/from domain dataclasses at the boundary.
    """

    def __init__(
        self,
        host: str,
        port: int,
        database: str,
        user: str,
        password: str,
        *,
        pool_size: int = 5,
        max_overflow: int = 10,
    ) -> None:
        url = f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{database}"
        self._engine = create_async_engine(
            url,
            echo=False,
            pool_size=pool_size,
            max_overflow=max_overflow,
        )
        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)
        # Visible only to the task that entered atomic().
        self._scoped_session: ContextVar[AsyncSession | None] = ContextVar(
            f"pg_scoped_session_{id(self)}", default=None
        )

    @asynccontextmanager
    async def _auto_session(self) -> AsyncIterator[AsyncSession]:
        """Yield the scoped session if inside ``atomic()``, else a fresh
        auto-committing session that is closed after use."""
        scoped = self._scoped_session.get()
        if scoped is not None:
            yield scoped
            return
        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    # ── Lifecycle ────────────────────────────────────────────────────

    async def init(self) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
            await conn.run_sync(Base.metadata.create_all)

    async def reset(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("Dropped identities and transcripts tables")
        await self.init()

    async def close(self) -> None:
        await self._engine.dispose()

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        session = self._session_factory()
        token = self._scoped_session.set(session)
        try:
            yield
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            self._scoped_session.reset(token)
            await session.close()

    async def lock_roster(self) -> None:
        session = self._scoped_session.get()
        if session is None:
            return
        await session.execute(
            text("SELECT pg_advisory_xact_lock(:key)"), {"key": ROSTER_LOCK_KEY}
        )

    # ── Identities ───────────────────────────────────────────────────

    async def create_identity(self, identity: Identity) -> Identity:
        async with self._auto_session() as s:
            s.add(
                IdentityRow(
                    id=identity.id,
                    name=identity.name,
                    face_embedding=identity.face_embedding,
                    first_seen=identity.first_seen,
                    last_seen=identity.last_seen,
                    times_recognized=identity.times_recognized,
                    conversation_count=identity.conversation_count,
                    profile_photo_key=identity.profile_photo_key,
                    name_extracted_at=identity.name_extracted_at,
                    created_at=identity.created_at,
                    updated_at=identity.updated_at,
                )
            )
            await s.flush()
        return identity

    async def get_identity(self, identity_id: str) -> Identity | None:
        async with self._auto_session() as s:
            row = await s.get(IdentityRow, identity_id)
        return _identity_from_orm(row) if row is not None else None

    async def update_identity(self, identity: Identity) -> None:
        async with self._auto_session() as s:
            row = await s.get(IdentityRow, identity.id)
            if row is None:
                raise IdentityNotFoundError(identity.id)
            row.name = identity.name
            row.face_embedding = identity.face_embedding
            row.last_seen = identity.last_seen
            row.times_recognized = identity.times_recognized
            row.conversation_count = identity.conversation_count
            row.profile_photo_key = identity.profile_photo_key
            row.name_extracted_at = identity.name_extracted_at
            row.updated_at = identity.updated_at

    async def list_identities(self) -> list[Identity]:
        async with self._auto_session() as s:
            stmt = select(IdentityRow).order_by(IdentityRow.seq)
            rows = list((await s.execute(stmt)).scalars().all())
        return [_identity_from_orm(r) for r in rows]

    async def count_identities(self) -> int:
        async with self._auto_session() as s:
            stmt = select(func.count()).select_from(IdentityRow)
            return (await s.execute(stmt)).scalar() or 0

    # ── Transcripts ──────────────────────────────────────────────────

    async def create_transcript(self, transcript: Transcript) -> Transcript:
        async with self._auto_session() as s:
            s.add(
                TranscriptRow(
                    id=transcript.id,
                    identity_id=transcript.identity_id,
                    timestamp=transcript.timestamp,
                    text=transcript.text,
                    embedding=transcript.embedding,
                    word_count=transcript.word_count,
                    screenshot_key=transcript.screenshot_key,
                    transcript_key=transcript.transcript_key,
                    created_at=transcript.created_at,
                )
            )
            await s.flush()
        return transcript

    async def list_transcripts(
        self, *, identity_id: str | None = None
    ) -> list[Transcript]:
        async with self._auto_session() as s:
            stmt = select(TranscriptRow).order_by(TranscriptRow.timestamp.desc())
            if identity_id is not None:
                stmt = stmt.where(TranscriptRow.identity_id == identity_id)
            rows = list((await s.execute(stmt)).scalars().all())
        return [_transcript_from_orm(r) for r in rows]

    async def count_transcripts(self, *, identity_id: str | None = None) -> int:
        async with self._auto_session() as s:
            stmt = select(func.count()).select_from(TranscriptRow)
            if identity_id is not None:
                stmt = stmt.where(TranscriptRow.identity_id == identity_id)
            return (await s.execute(stmt)).scalar() or 0

    async def search_transcripts(
        self,
        query_embedding: list[float],
        *,
        num_candidates: int,
        limit: int,
        identity_id: str | None = None,
    ) -> list[TranscriptSearchResult]:
        async with self._auto_session() as s:
            distance_col = TranscriptRow.embedding.cosine_distance(
                query_embedding
            ).label("distance")
            candidates = (
                select(TranscriptRow.id.label("id"), distance_col)
                .where(TranscriptRow.embedding.isnot(None))
                .order_by(distance_col)
                .limit(num_candidates)
                .subquery()
            )
            stmt = (
                select(TranscriptRow, candidates.c.distance)
                .join(candidates, TranscriptRow.id == candidates.c.id)
                .order_by(candidates.c.distance)
            )
            if identity_id is not None:
                stmt = stmt.where(TranscriptRow.identity_id == identity_id)
            stmt = stmt.limit(limit)
            rows = (await s.execute(stmt)).all()

        return [
            TranscriptSearchResult(
                transcript=_transcript_from_orm(row),
                score=1.0 - distance,
            )
            for row, distance in rows
        ]


# ── ORM → domain converters ─────────────────────────────────────────


def _identity_from_orm(row: IdentityRow) -> Identity:
    return Identity(
        name=row.name,
        face_embedding=(
            list(row.face_embedding) if row.face_embedding is not None else None
        ),
        id=row.id,
        first_seen=row.first_seen,
        last_seen=row.last_seen,
        times_recognized=row.times_recognized,
        conversation_count=row.conversation_count,
        profile_photo_key=row.profile_photo_key,
        name_extracted_at=row.name_extracted_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _transcript_from_orm(row: TranscriptRow) -> Transcript:
    return Transcript(
        text=row.text,
        word_count=row.word_count,
        identity_id=row.identity_id,
        embedding=list(row.embedding) if row.embedding is not None else None,
        screenshot_key=row.screenshot_key,
        transcript_key=row.transcript_key,
        id=row.id,
        timestamp=row.timestamp,
        created_at=row.created_at,
    )
