from memory_companion.facade.core import MemoryCompanion
from memory_companion.facade.types import (
    CaptureResult,
    PersonDetails,
    PersonSummary,
    SaveTranscriptResult,
)

__all__ = [
    "CaptureResult",
    "MemoryCompanion",
    "PersonDetails",
    "PersonSummary",
    "SaveTranscriptResult",
]
