"""Transcript indexing and semantic search.

Indexing fails loudly: if the embedding provider fails, nothing is
stored, so every stored transcript is searchable.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from memory_companion.llm.base import EmbeddingProvider
from memory_companion.models import Transcript
from memory_companion.store.base import Store, TranscriptSearchResult

logger = logging.getLogger(__name__)

# Candidate pool handed to the store's nearest-neighbour query before the
# identity post-filter is applied.
DEFAULT_NUM_CANDIDATES = 100
DEFAULT_SEARCH_LIMIT = 10


def count_words(text: str) -> int:
    return len(text.split())


class TranscriptIndexer:
    def __init__(
        self,
        store: Store,
        embedder: EmbeddingProvider,
        *,
        num_candidates: int = DEFAULT_NUM_CANDIDATES,
    ) -> None:
        if num_candidates < 1:
            raise ValueError("num_candidates must be >= 1")
        self._store = store
        self._embedder = embedder
        self.num_candidates = num_candidates

    async def index(
        self,
        text: str,
        identity_id: str | None = None,
        *,
        screenshot_key: str | None = None,
        transcript_key: str | None = None,
        timestamp: datetime | None = None,
    ) -> Transcript:
        """Embed and persist *text*.  ``ProviderError`` propagates."""
        embedding = await self._embedder.embed(text)
        now = timestamp or datetime.now(UTC)
        transcript = Transcript(
            text=text,
            word_count=count_words(text),
            identity_id=identity_id,
            embedding=embedding,
            screenshot_key=screenshot_key,
            transcript_key=transcript_key,
            timestamp=now,
            created_at=now,
        )
        await self._store.create_transcript(transcript)
        logger.info(
            "Indexed transcript %s (%d words, identity=%s)",
            transcript.id,
            transcript.word_count,
            identity_id,
        )
        return transcript

    async def search(
        self,
        query: str,
        identity_id: str | None = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> list[TranscriptSearchResult]:
        """Return up to *limit* transcripts by descending relevance.

        The identity filter is applied after the nearest-neighbour
        candidate pool is drawn, so a scoped search may return fewer than
        *limit* hits when the identity's transcripts rank low overall.
        """
        if not 1 <= limit <= self.num_candidates:
            raise ValueError(f"limit must be between 1 and {self.num_candidates}")

        query_embedding = await self._embedder.embed(query)
        results = await self._store.search_transcripts(
            query_embedding,
            num_candidates=self.num_candidates,
            limit=limit,
            identity_id=identity_id,
        )
        logger.info("Search %.50r returned %d results", query, len(results))
        return results
