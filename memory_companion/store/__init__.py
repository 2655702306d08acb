from memory_companion.store.base import Store, TranscriptSearchResult
from memory_companion.store.memory import InMemoryStore

__all__ = ["InMemoryStore", "Store", "TranscriptSearchResult"]
