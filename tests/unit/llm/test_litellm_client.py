from __future__ import annotations

from types import SimpleNamespace

import litellm
import pytest

from memory_companion.exceptions import ProviderError
from memory_companion.llm.litellm import LiteLLMClient
from memory_companion.llm.models import OpenAIEmbeddingModel, OpenAIModel
from memory_companion.models import EMBEDDING_DIMENSIONS


def _completion_response(text: str) -> SimpleNamespace:
    message = SimpleNamespace(content=text)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture()
def calls(monkeypatch: pytest.MonkeyPatch) -> dict:
    """Route litellm calls to scripted answers and record the kwargs."""
    state: dict = {"answer": "OK", "completion": [], "embedding": []}

    async def fake_acompletion(**kwargs):
        state["completion"].append(kwargs)
        if isinstance(state["answer"], Exception):
            raise state["answer"]
        return _completion_response(state["answer"])

    async def fake_aembedding(**kwargs):
        state["embedding"].append(kwargs)
        if isinstance(state["answer"], Exception):
            raise state["answer"]
        return SimpleNamespace(data=[{"embedding": [0.1, 0.2, 0.3]}])

    monkeypatch.setattr(litellm, "acompletion", fake_acompletion)
    monkeypatch.setattr(litellm, "aembedding", fake_aembedding)
    return state


async def test_describe_face_sends_data_url(calls: dict):
    calls["answer"] = "Oval face, green eyes, short brown hair."
    client = LiteLLMClient(api_key="k")

    description = await client.describe_face(b"\x89PNG", "image/png")

    assert description == "Oval face, green eyes, short brown hair."
    parts = calls["completion"][0]["messages"][0]["content"]
    assert parts[0]["image_url"]["url"] == "data:image/png;base64,iVBORw=="
    assert calls["completion"][0]["model"] == "gemini/gemini-2.5-flash"


@pytest.mark.parametrize("answer", ["NO_FACE", "There is no face in this image."])
async def test_describe_face_no_face(calls: dict, answer: str):
    calls["answer"] = answer
    assert await LiteLLMClient(api_key="k").describe_face(b"img") is None


@pytest.mark.parametrize("answer", ["NO_NAME", "No name was mentioned."])
async def test_extract_name_none(calls: dict, answer: str):
    calls["answer"] = answer
    assert await LiteLLMClient(api_key="k").extract_name("hello there") is None


async def test_extract_name_returns_raw_answer(calls: dict):
    calls["answer"] = "Ada"
    assert await LiteLLMClient(api_key="k").extract_name("Hi, I'm Ada") == "Ada"


async def test_embed(calls: dict):
    assert await LiteLLMClient(api_key="k").embed("hello") == [0.1, 0.2, 0.3]
    assert calls["embedding"][0]["model"] == "gemini/text-embedding-004"
    assert "dimensions" not in calls["embedding"][0]


async def test_openai_embedding_requests_column_width(calls: dict):
    client = LiteLLMClient(
        api_key="k",
        model=OpenAIModel.GPT_4O_MINI,
        embedding_model=OpenAIEmbeddingModel.TEXT_EMBEDDING_3_SMALL,
    )
    await client.embed("hello")
    assert calls["embedding"][0]["dimensions"] == EMBEDDING_DIMENSIONS


async def test_failures_are_wrapped(calls: dict):
    calls["answer"] = ConnectionError("network down")
    client = LiteLLMClient(api_key="k")

    with pytest.raises(ProviderError, match="embedding failed: network down"):
        await client.embed("hello")
    with pytest.raises(ProviderError) as exc_info:
        await client.completion("hello")
    assert isinstance(exc_info.value.__cause__, ConnectionError)


async def test_empty_completion_is_an_error(calls: dict):
    calls["answer"] = ""
    with pytest.raises(ProviderError):
        await LiteLLMClient(api_key="k").completion("hello")


def test_from_config():
    client = LiteLLMClient.from_config({"api_key": "k", "model": "openai/gpt-4o"})
    assert client._model == "openai/gpt-4o"
