"""Identity resolution: map a face-description embedding onto the roster.

The decision is a pure function of its inputs.  Allocating, updating and
persisting identity records is the caller's responsibility (see
:class:`memory_companion.facade.core.MemoryCompanion`).

The scan is linear, O(records x dimension), with no index structure.
That is only acceptable for small rosters (tens to low hundreds of
people).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from memory_companion.matching.distance import euclidean_distance
from memory_companion.models import Identity, make_placeholder_name

logger = logging.getLogger(__name__)

# Euclidean distance over embeddings of LLM-written face descriptions.
# Stricter than the usual 0.6 for geometric face descriptors because the
# text proxy is semantically noisier.
FACE_MATCH_THRESHOLD = 0.3


@dataclass(frozen=True)
class Resolution:
    """Outcome of :func:`resolve`."""

    matched: Identity | None
    distance: float | None

    @property
    def is_new(self) -> bool:
        return self.matched is None

    @property
    def confidence(self) -> float | None:
        """Heuristic display score ``1 - distance``; not a probability."""
        if self.distance is None:
            return None
        return 1.0 - self.distance


def resolve(
    new_embedding: Sequence[float],
    identities: Iterable[Identity],
    threshold: float = FACE_MATCH_THRESHOLD,
) -> Resolution:
    """Find the closest identity strictly under *threshold*.

    Records without an embedding are skipped.  A record only replaces the
    current best when its distance is strictly smaller, so on ties the
    record met first in iteration order wins.
    """
    best: Identity | None = None
    best_distance = float("inf")

    for identity in identities:
        if identity.face_embedding is None:
            continue
        distance = euclidean_distance(new_embedding, identity.face_embedding)
        if distance < best_distance and distance < threshold:
            best = identity
            best_distance = distance

    if best is None:
        return Resolution(matched=None, distance=None)
    return Resolution(matched=best, distance=best_distance)


class IdentityResolver:
    """Resolution policy with a fixed threshold, plus record bookkeeping."""

    def __init__(self, threshold: float = FACE_MATCH_THRESHOLD) -> None:
        self.threshold = threshold

    def resolve(
        self,
        new_embedding: Sequence[float],
        identities: Iterable[Identity],
    ) -> Resolution:
        resolution = resolve(new_embedding, identities, self.threshold)
        if resolution.matched is not None:
            logger.info(
                "Matched %s (distance=%.4f)",
                resolution.matched.id,
                resolution.distance,
            )
        else:
            logger.info("No identity within threshold %.2f", self.threshold)
        return resolution

    @staticmethod
    def new_identity(
        embedding: list[float],
        *,
        profile_photo_key: str | None = None,
        now: datetime | None = None,
    ) -> Identity:
        """Allocate a fresh identity with a placeholder name and count 1."""
        now = now or datetime.now(UTC)
        return Identity(
            name=make_placeholder_name(now),
            face_embedding=embedding,
            profile_photo_key=profile_photo_key,
            first_seen=now,
            last_seen=now,
            times_recognized=1,
            conversation_count=0,
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def record_match(identity: Identity, now: datetime | None = None) -> Identity:
        identity.touch(now or datetime.now(UTC))
        identity.times_recognized += 1
        return identity
