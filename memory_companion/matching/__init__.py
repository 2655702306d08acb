from memory_companion.matching.distance import cosine_similarity, euclidean_distance
from memory_companion.matching.names import maybe_extract_name, validate_name
from memory_companion.matching.resolver import (
    FACE_MATCH_THRESHOLD,
    IdentityResolver,
    Resolution,
    resolve,
)

__all__ = [
    "FACE_MATCH_THRESHOLD",
    "IdentityResolver",
    "Resolution",
    "cosine_similarity",
    "euclidean_distance",
    "maybe_extract_name",
    "resolve",
    "validate_name",
]
