from __future__ import annotations

import copy

from memory_companion.exceptions import DimensionMismatchError, IdentityNotFoundError
from memory_companion.matching.distance import cosine_similarity
from memory_companion.models import Identity, Transcript
from memory_companion.store.base import Store, TranscriptSearchResult


class InMemoryStore(Store):
    """Store backed by plain Python dicts.

    Thread-safe within a single asyncio event loop (no concurrent
    mutation).  ``atomic()`` is inherited as a no-op from the base class.
    Records are copied on the way in and out so callers cannot mutate
    stored state without going through ``update_identity``.
    """

    def __init__(self, dimensions: int | None = None) -> None:
        self._dimensions = dimensions
        self._identities: dict[str, Identity] = {}
        self._transcripts: dict[str, Transcript] = {}
        self._face_dims: int | None = dimensions
        self._text_dims: int | None = dimensions

    # ── Lifecycle ────────────────────────────────────────────────────

    async def init(self) -> None:
        pass

    async def reset(self) -> None:
        self.__init__(self._dimensions)  # type: ignore[misc]

    async def close(self) -> None:
        pass

    # ── Identities ───────────────────────────────────────────────────

    async def create_identity(self, identity: Identity) -> Identity:
        if identity.id in self._identities:
            raise ValueError(f"Identity {identity.id} already exists")
        self._face_dims = _check_dims(identity.face_embedding, self._face_dims)
        self._identities[identity.id] = copy.deepcopy(identity)
        return identity

    async def get_identity(self, identity_id: str) -> Identity | None:
        identity = self._identities.get(identity_id)
        return copy.deepcopy(identity) if identity is not None else None

    async def update_identity(self, identity: Identity) -> None:
        if identity.id not in self._identities:
            raise IdentityNotFoundError(identity.id)
        self._face_dims = _check_dims(identity.face_embedding, self._face_dims)
        self._identities[identity.id] = copy.deepcopy(identity)

    async def list_identities(self) -> list[Identity]:
        # dicts keep insertion order, which is creation order here
        return [copy.deepcopy(i) for i in self._identities.values()]

    async def count_identities(self) -> int:
        return len(self._identities)

    # ── Transcripts ──────────────────────────────────────────────────

    async def create_transcript(self, transcript: Transcript) -> Transcript:
        self._text_dims = _check_dims(transcript.embedding, self._text_dims)
        self._transcripts[transcript.id] = copy.deepcopy(transcript)
        return transcript

    async def list_transcripts(
        self, *, identity_id: str | None = None
    ) -> list[Transcript]:
        result = [
            copy.deepcopy(t)
            for t in self._transcripts.values()
            if identity_id is None or t.identity_id == identity_id
        ]
        result.sort(key=lambda t: t.timestamp, reverse=True)
        return result

    async def count_transcripts(self, *, identity_id: str | None = None) -> int:
        if identity_id is None:
            return len(self._transcripts)
        return sum(1 for t in self._transcripts.values() if t.identity_id == identity_id)

    async def search_transcripts(
        self,
        query_embedding: list[float],
        *,
        num_candidates: int,
        limit: int,
        identity_id: str | None = None,
    ) -> list[TranscriptSearchResult]:
        scored: list[tuple[Transcript, float]] = []
        for t in self._transcripts.values():
            if t.embedding is None:
                continue
            scored.append((t, cosine_similarity(query_embedding, t.embedding)))

        # stable sort: equal scores keep insertion order
        scored.sort(key=lambda x: x[1], reverse=True)
        candidates = scored[:num_candidates]

        if identity_id is not None:
            candidates = [(t, s) for t, s in candidates if t.identity_id == identity_id]

        return [
            TranscriptSearchResult(transcript=copy.deepcopy(t), score=s)
            for t, s in candidates[:limit]
        ]


def _check_dims(embedding: list[float] | None, expected: int | None) -> int | None:
    """Validate *embedding* against the collection's dimensionality.

    Returns the (possibly newly fixed) dimensionality.
    """
    if embedding is None:
        return expected
    if expected is not None and len(embedding) != expected:
        raise DimensionMismatchError(expected, len(embedding))
    return expected if expected is not None else len(embedding)
