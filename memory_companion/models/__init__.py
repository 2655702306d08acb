"""Domain models: pure Python dataclasses with no infrastructure dependencies.

These are the canonical types used by the Store protocol, the matching
code and the facade.  The SQLAlchemy ORM rows used by ``PostgresStore``
live separately in ``memory_companion.db.models`` and are mapped to/from
these dataclasses at the store boundary.
"""

from memory_companion.models.identity import (
    PLACEHOLDER_PREFIX,
    Identity,
    is_placeholder_name,
    make_placeholder_name,
)
from memory_companion.models.transcript import Transcript
from memory_companion.models.utils import generate_id, generate_person_id

# Dimensionality of the default embedding model (gemini/text-embedding-004).
EMBEDDING_DIMENSIONS = 768

__all__ = [
    "EMBEDDING_DIMENSIONS",
    "PLACEHOLDER_PREFIX",
    "Identity",
    "Transcript",
    "generate_id",
    "generate_person_id",
    "is_placeholder_name",
    "make_placeholder_name",
]
