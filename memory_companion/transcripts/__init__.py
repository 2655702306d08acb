from memory_companion.transcripts.indexer import TranscriptIndexer, count_words

__all__ = ["TranscriptIndexer", "count_words"]
