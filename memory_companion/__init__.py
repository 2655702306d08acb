from memory_companion.config import parse_config
from memory_companion.exceptions import (
    DimensionMismatchError,
    IdentityNotFoundError,
    ProviderError,
)
from memory_companion.facade import (
    CaptureResult,
    MemoryCompanion,
    PersonDetails,
    PersonSummary,
    SaveTranscriptResult,
)
from memory_companion.models import Identity, Transcript

__version__ = "0.1.0"

__all__ = [
    "CaptureResult",
    "DimensionMismatchError",
    "Identity",
    "IdentityNotFoundError",
    "MemoryCompanion",
    "PersonDetails",
    "PersonSummary",
    "ProviderError",
    "SaveTranscriptResult",
    "Transcript",
    "parse_config",
]
