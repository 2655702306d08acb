from __future__ import annotations

from datetime import UTC, datetime

import pytest

from memory_companion.exceptions import ProviderError
from memory_companion.store.memory import InMemoryStore
from memory_companion.transcripts.indexer import TranscriptIndexer, count_words


@pytest.fixture()
def indexer(store: InMemoryStore, llm) -> TranscriptIndexer:
    return TranscriptIndexer(store, llm)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("hello world", 2),
        ("  spaced   out\ttabs\nnewlines  ", 4),
        ("", 0),
        ("   ", 0),
        ("one", 1),
    ],
)
def test_count_words(text: str, expected: int):
    assert count_words(text) == expected


async def test_index_persists_embedding_and_metadata(
    indexer: TranscriptIndexer, store: InMemoryStore, llm
):
    llm.embeddings["we talked about coffee"] = [0.3, 0.4]
    ts = datetime(2025, 6, 1, 9, 30, tzinfo=UTC)

    transcript = await indexer.index(
        "we talked about coffee",
        "person-abc",
        screenshot_key="screenshots/s.png",
        transcript_key="transcripts/t.txt",
        timestamp=ts,
    )

    stored = await store.list_transcripts()
    assert len(stored) == 1
    assert stored[0].id == transcript.id
    assert stored[0].embedding == [0.3, 0.4]
    assert stored[0].word_count == 4
    assert stored[0].identity_id == "person-abc"
    assert stored[0].timestamp == ts
    assert stored[0].screenshot_key == "screenshots/s.png"
    assert stored[0].transcript_key == "transcripts/t.txt"


async def test_index_without_identity(indexer: TranscriptIndexer, store: InMemoryStore):
    transcript = await indexer.index("nobody in frame today")
    assert transcript.identity_id is None
    assert await store.count_transcripts() == 1


async def test_embedding_failure_stores_nothing(
    indexer: TranscriptIndexer, store: InMemoryStore, llm
):
    llm.fail_embed = True
    with pytest.raises(ProviderError):
        await indexer.index("this should not be saved")
    assert await store.count_transcripts() == 0


async def test_search_ranks_by_similarity(indexer: TranscriptIndexer, llm):
    llm.embeddings.update(
        {
            "we talked about coffee": [1.0, 0.0],
            "the weather was grim": [0.0, 1.0],
            "coffee": [0.9, 0.1],
        }
    )
    await indexer.index("the weather was grim")
    await indexer.index("we talked about coffee")

    results = await indexer.search("coffee", limit=1)

    assert len(results) == 1
    assert results[0].transcript.text == "we talked about coffee"
    assert results[0].score == pytest.approx(0.9939, abs=1e-4)


async def test_search_scoped_to_identity(indexer: TranscriptIndexer, llm):
    await indexer.index("espresso and croissants in Lisbon", "p1")
    await indexer.index("espresso machines are expensive", "p2")

    results = await indexer.search("espresso", "p1")
    assert [r.transcript.identity_id for r in results] == ["p1"]


async def test_search_with_bag_of_words_embedder(indexer: TranscriptIndexer):
    await indexer.index("my sister just moved to Berlin")
    await indexer.index("the quarterly numbers look fine")

    results = await indexer.search("Berlin sister moved")
    assert results[0].transcript.text == "my sister just moved to Berlin"


@pytest.mark.parametrize("limit", [0, -1, 101])
async def test_search_rejects_bad_limit(indexer: TranscriptIndexer, limit: int):
    with pytest.raises(ValueError):
        await indexer.search("anything", limit=limit)


async def test_search_provider_failure_propagates(indexer: TranscriptIndexer, llm):
    llm.fail_embed = True
    with pytest.raises(ProviderError):
        await indexer.search("anything")


def test_num_candidates_must_be_positive(store: InMemoryStore, llm):
    with pytest.raises(ValueError):
        TranscriptIndexer(store, llm, num_candidates=0)


async def test_fixed_vector_stub_returns_record_first(
    store: InMemoryStore, llm, monkeypatch: pytest.MonkeyPatch
):
    async def fixed(text: str) -> list[float]:
        return [0.6, 0.8]

    monkeypatch.setattr(llm, "embed", fixed)
    indexer = TranscriptIndexer(store, llm)
    transcript = await indexer.index("anything at all")

    results = await indexer.search("something else entirely")
    assert results[0].transcript.id == transcript.id
    assert results[0].score == pytest.approx(1.0)
