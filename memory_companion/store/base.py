from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from types import TracebackType

from memory_companion.models import Identity, Transcript


@dataclass(frozen=True)
class TranscriptSearchResult:
    """A transcript search hit with the store's relevance score."""

    transcript: Transcript
    score: float


class Store(ABC):
    """Abstract record store for identities and transcripts.

    Implementations must override every ``@abstractmethod``.
    The default ``atomic()`` is a no-op suitable for in-memory stores;
    database-backed stores should override it to provide a transactional
    boundary.
    """

    # ── Lifecycle ────────────────────────────────────────────────────

    @abstractmethod
    async def init(self) -> None:
        """Create tables / indices (idempotent)."""
        ...

    @abstractmethod
    async def reset(self) -> None:
        """Drop all data and recreate from scratch."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release any held resources (connections, file handles)."""
        ...

    async def __aenter__(self) -> Store:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """Wrap multiple operations in a single commit.

        The default implementation is a no-op (each operation is
        auto-committed).
        """
        yield

    async def lock_roster(self) -> None:
        """Serialise roster read-decide-write sequences across processes.

        Call inside ``atomic()``.  The default is a no-op; the in-process
        ``asyncio.Lock`` held by the caller is the only guard then.
        """
        return None

    # ── Identities ───────────────────────────────────────────────────

    @abstractmethod
    async def create_identity(self, identity: Identity) -> Identity:
        """Persist a new identity and return it."""
        ...

    @abstractmethod
    async def get_identity(self, identity_id: str) -> Identity | None:
        """Return an identity by ID, or ``None``."""
        ...

    @abstractmethod
    async def update_identity(self, identity: Identity) -> None:
        """Persist changes to an existing identity.

        Raises ``IdentityNotFoundError`` if it was never created.
        """
        ...

    @abstractmethod
    async def list_identities(self) -> list[Identity]:
        """Return the full roster in a stable order (creation order)."""
        ...

    @abstractmethod
    async def count_identities(self) -> int: ...

    # ── Transcripts ──────────────────────────────────────────────────

    @abstractmethod
    async def create_transcript(self, transcript: Transcript) -> Transcript:
        """Persist a new transcript.  Transcripts are never updated."""
        ...

    @abstractmethod
    async def list_transcripts(
        self, *, identity_id: str | None = None
    ) -> list[Transcript]:
        """Return transcripts newest first, optionally for one identity."""
        ...

    @abstractmethod
    async def count_transcripts(self, *, identity_id: str | None = None) -> int: ...

    @abstractmethod
    async def search_transcripts(
        self,
        query_embedding: list[float],
        *,
        num_candidates: int,
        limit: int,
        identity_id: str | None = None,
    ) -> list[TranscriptSearchResult]:
        """Nearest-neighbour search over transcript embeddings.

        Takes the *num_candidates* nearest transcripts by cosine
        similarity, then keeps those linked to *identity_id* (when
        given), then returns at most *limit* of them by descending
        score.  Ties keep the store's native order.
        """
        ...
