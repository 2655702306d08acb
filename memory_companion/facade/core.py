"""Main facade for the memory_companion library."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from memory_companion.exceptions import IdentityNotFoundError
from memory_companion.facade.types import (
    CaptureResult,
    PersonDetails,
    PersonSummary,
    SaveTranscriptResult,
)
from memory_companion.matching.names import maybe_extract_name
from memory_companion.matching.resolver import FACE_MATCH_THRESHOLD, IdentityResolver
from memory_companion.models import is_placeholder_name
from memory_companion.people import (
    LLMCareerLookup,
    extract_career_info,
    summarize_person,
)
from memory_companion.transcripts.indexer import (
    DEFAULT_NUM_CANDIDATES,
    DEFAULT_SEARCH_LIMIT,
    TranscriptIndexer,
)

if TYPE_CHECKING:
    from memory_companion.llm.base import BaseLLMClient
    from memory_companion.models import Identity
    from memory_companion.people import CareerLookup
    from memory_companion.storage.base import ArtifactStorage
    from memory_companion.store.base import Store, TranscriptSearchResult

logger = logging.getLogger(__name__)


class MemoryCompanion:
    """Main entry point for the memory_companion library.

    Ties together face capture, identity resolution, transcript indexing
    and per-person summaries.

    Usage::

        from memory_companion.llm import LiteLLMClient
        from memory_companion.storage import DiskArtifactStorage
        from memory_companion.store import InMemoryStore

        companion = MemoryCompanion(
            store=InMemoryStore(),
            llm_client=LiteLLMClient(api_key="..."),
            storage=DiskArtifactStorage("./data"),
        )
        await companion.init()
        result = await companion.capture(png_bytes)
        await companion.save_transcript("Hi, I'm Ada", result.identity.id)

    The roster read-decide-write sequences run under one ``asyncio.Lock``
    per companion and inside ``store.atomic()``, so concurrent captures in
    one process never create two identities for the same face.
    """

    def __init__(
        self,
        store: Store,
        llm_client: BaseLLMClient,
        storage: ArtifactStorage,
        *,
        career_lookup: CareerLookup | None = None,
        threshold: float = FACE_MATCH_THRESHOLD,
        num_candidates: int = DEFAULT_NUM_CANDIDATES,
    ) -> None:
        self._store = store
        self._llm_client = llm_client
        self._storage = storage
        self._career_lookup = career_lookup or LLMCareerLookup(llm_client)
        self._resolver = IdentityResolver(threshold)
        self._indexer = TranscriptIndexer(
            store, llm_client, num_candidates=num_candidates
        )
        self._roster_lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> MemoryCompanion:
        """Construct a companion from a configuration dict (see :func:`parse_config`)."""
        from memory_companion.config import parse_config

        storage, store, llm_client = parse_config(config)
        return cls(store=store, llm_client=llm_client, storage=storage)

    async def init(self) -> None:
        """Create missing tables / indices (non-destructive)."""
        await self._store.init()

    async def reset(self) -> None:
        """Drop all records and delete every stored artifact."""
        await self._store.reset()
        removed = self._storage.clear()
        logger.info("Reset complete (%d artifacts removed)", removed)

    async def close(self) -> None:
        await self._store.close()

    # ── Capture ──────────────────────────────────────────────────────

    async def capture(self, image: bytes, mime_type: str = "image/png") -> CaptureResult:
        """Recognise the face in *image*, creating a new identity if unseen.

        The screenshot is always kept.  When no face is visible nothing
        else is written.  ``ProviderError`` from the describe or embed
        step propagates with no roster change.
        """
        now = datetime.now(UTC)
        screenshot_key = self._storage.save_screenshot(image, now)

        description = await self._llm_client.describe_face(image, mime_type)
        if description is None:
            logger.info("No face detected in %s", screenshot_key)
            return CaptureResult(no_face_detected=True, screenshot_key=screenshot_key)

        embedding = await self._llm_client.embed(description)

        async with self._roster_lock, self._store.atomic():
            await self._store.lock_roster()
            identities = await self._store.list_identities()
            resolution = self._resolver.resolve(embedding, identities)

            if resolution.matched is not None:
                identity = self._resolver.record_match(resolution.matched, now)
                await self._store.update_identity(identity)
            else:
                identity = self._resolver.new_identity(
                    embedding, profile_photo_key=screenshot_key, now=now
                )
                identity = await self._store.create_identity(identity)
                logger.info("Created identity %s (%s)", identity.id, identity.name)

        return CaptureResult(
            identity=identity,
            is_new=resolution.is_new,
            distance=resolution.distance,
            screenshot_key=screenshot_key,
        )

    # ── Transcripts ──────────────────────────────────────────────────

    async def save_transcript(
        self,
        text: str,
        identity_id: str | None = None,
        screenshot_key: str | None = None,
    ) -> SaveTranscriptResult:
        """Store and index a transcript, optionally linked to an identity.

        A linked identity gets its conversation count and ``last_seen``
        bumped, and a placeholder name is replaced when the transcript
        contains a valid self-introduction.
        """
        if not text or not text.strip():
            raise ValueError("Transcript text must not be empty")

        identity: Identity | None = None
        if identity_id is not None:
            identity = await self._require_identity(identity_id)

        now = datetime.now(UTC)
        transcript_key = self._storage.save_transcript(text, now)
        transcript = await self._indexer.index(
            text,
            identity_id,
            screenshot_key=screenshot_key,
            transcript_key=transcript_key,
            timestamp=now,
        )

        if identity is None:
            return SaveTranscriptResult(transcript=transcript)

        # Extraction is slow; run it before taking the roster lock and
        # re-check the placeholder under it.
        new_name = await maybe_extract_name(identity.name, text, self._llm_client)

        async with self._roster_lock, self._store.atomic():
            await self._store.lock_roster()
            identity = await self._require_identity(identity_id)
            identity.conversation_count += 1
            identity.touch(now)
            applied = new_name is not None and is_placeholder_name(identity.name)
            if applied:
                logger.info("Renamed %s: %s -> %s", identity.id, identity.name, new_name)
                identity.name = new_name
                identity.name_extracted_at = now
            await self._store.update_identity(identity)

        return SaveTranscriptResult(
            transcript=transcript,
            identity=identity,
            name_extracted=applied,
            new_name=new_name if applied else None,
        )

    async def search_conversations(
        self,
        query: str,
        identity_id: str | None = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> list[TranscriptSearchResult]:
        """Semantic search over stored transcripts, best first."""
        return await self._indexer.search(query, identity_id, limit)

    # ── People ───────────────────────────────────────────────────────

    async def list_people(self) -> list[Identity]:
        """Return every identity, most recently seen first."""
        identities = await self._store.list_identities()
        return sorted(identities, key=lambda i: i.last_seen, reverse=True)

    async def get_person(self, identity_id: str) -> PersonDetails:
        identity = await self._require_identity(identity_id)
        transcripts = await self._store.list_transcripts(identity_id=identity_id)
        return PersonDetails(identity=identity, transcripts=transcripts)

    async def summarize_person(self, identity_id: str) -> PersonSummary:
        """Summarise a person's conversation history and career details.

        The summary itself propagates ``ProviderError``; the career
        enrichments are best-effort.
        """
        details = await self.get_person(identity_id)
        identity = details.identity

        summary = await summarize_person(identity, details.transcripts, self._llm_client)

        career_info = await extract_career_info(details.transcripts, self._llm_client)
        career_lookup = None
        if career_info is not None:
            career_lookup = await self._career_lookup.lookup(identity.name, career_info)

        return PersonSummary(
            identity_id=identity.id,
            name=identity.name,
            summary=summary,
            conversation_count=len(details.transcripts),
            first_seen=identity.first_seen,
            last_seen=identity.last_seen,
            career_info=career_info,
            career_lookup=career_lookup,
        )

    # ── Private helpers ──────────────────────────────────────────────

    async def _require_identity(self, identity_id: str) -> Identity:
        identity = await self._store.get_identity(identity_id)
        if identity is None:
            raise IdentityNotFoundError(identity_id)
        return identity
