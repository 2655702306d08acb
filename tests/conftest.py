from __future__ import annotations

import re
import zlib
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from memory_companion import MemoryCompanion
from memory_companion.exceptions import ProviderError
from memory_companion.llm.base import BaseLLMClient
from memory_companion.storage.disk import DiskArtifactStorage
from memory_companion.store.memory import InMemoryStore

TEXT_DIMENSIONS = 64

_WORD_RE = re.compile(r"[a-z']+")


def bag_of_words(text: str, dims: int = TEXT_DIMENSIONS) -> list[float]:
    """Deterministic hashed bag-of-words vector (crc32 is not salted)."""
    vec = [0.0] * dims
    for word in _WORD_RE.findall(text.lower()):
        vec[zlib.crc32(word.encode()) % dims] += 1.0
    return vec


class FakeLLMClient(BaseLLMClient):
    """Scriptable stand-in for a real provider.

    * ``describe_face`` treats the image bytes as the description itself;
      ``b"NO_FACE"`` (or anything listed in ``no_face``) means no face.
    * ``embed`` returns ``embeddings[text]`` when scripted, else a hashed
      bag-of-words vector.
    * ``extract_name`` returns ``names.get(text)``.
    * ``completion`` pops answers from ``completions`` ("OK" when empty).
    * ``fail_*`` flags raise :class:`ProviderError`.
    """

    def __init__(self) -> None:
        self.embeddings: dict[str, list[float]] = {}
        self.names: dict[str, str] = {}
        self.completions: list[str] = []
        self.no_face: set[bytes] = {b"NO_FACE"}
        self.fail_embed = False
        self.fail_describe = False
        self.fail_name = False
        self.fail_completion = False
        self.prompts: list[str] = []
        self.embed_calls: list[str] = []
        self.name_calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.embed_calls.append(text)
        if self.fail_embed:
            raise ProviderError("embedding", "quota exceeded")
        if text in self.embeddings:
            return list(self.embeddings[text])
        return bag_of_words(text)

    async def describe_face(
        self, image: bytes, mime_type: str = "image/png"
    ) -> str | None:
        if self.fail_describe:
            raise ProviderError("face description", "unavailable")
        if image in self.no_face:
            return None
        return image.decode()

    async def extract_name(self, text: str) -> str | None:
        self.name_calls.append(text)
        if self.fail_name:
            raise ProviderError("completion", "timeout")
        return self.names.get(text)

    async def completion(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail_completion:
            raise ProviderError("completion", "unavailable")
        if self.completions:
            return self.completions.pop(0)
        return "OK"


@pytest.fixture()
def llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def storage(tmp_path: Path) -> DiskArtifactStorage:
    return DiskArtifactStorage(str(tmp_path / "data"))


@pytest.fixture()
async def companion(
    store: InMemoryStore,
    llm: FakeLLMClient,
    storage: DiskArtifactStorage,
) -> AsyncGenerator[MemoryCompanion]:
    mc = MemoryCompanion(store=store, llm_client=llm, storage=storage)
    await mc.init()
    yield mc
    await mc.close()
