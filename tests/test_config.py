from __future__ import annotations

from pathlib import Path

import pytest

from memory_companion.config import parse_config, store_registry
from memory_companion.llm.litellm import LiteLLMClient
from memory_companion.llm.models import (
    GeminiEmbeddingModel,
    GeminiModel,
    OpenAIEmbeddingModel,
    OpenAIModel,
)
from memory_companion.storage.disk import DiskArtifactStorage
from memory_companion.store.memory import InMemoryStore


def test_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    storage, store, llm = parse_config({"llm": {"api_key": "k"}})

    assert isinstance(storage, DiskArtifactStorage)
    assert (tmp_path / "data").is_dir()
    assert isinstance(store, InMemoryStore)
    assert isinstance(llm, LiteLLMClient)
    assert llm._model == GeminiModel.GEMINI_25_FLASH
    assert llm._embedding_model == GeminiEmbeddingModel.TEXT_EMBEDDING_004


def test_llm_section_required():
    with pytest.raises(ValueError, match="llm"):
        parse_config({})


def test_openai_preset(tmp_path: Path):
    _, _, llm = parse_config(
        {
            "storage": {"config": {"base_path": str(tmp_path)}},
            "llm": {"provider": "openai", "api_key": "sk-test"},
        }
    )
    assert llm._model == OpenAIModel.GPT_4O_MINI
    assert llm._embedding_model == OpenAIEmbeddingModel.TEXT_EMBEDDING_3_SMALL


def test_explicit_model_overrides_preset(tmp_path: Path):
    _, _, llm = parse_config(
        {
            "storage": {"config": {"base_path": str(tmp_path)}},
            "llm": {"provider": "openai", "api_key": "sk", "model": "gpt-4o"},
        }
    )
    assert llm._model == "gpt-4o"


def test_unknown_store_provider(tmp_path: Path):
    with pytest.raises(ValueError, match="Unknown store provider 'mongo'"):
        parse_config(
            {
                "storage": {"config": {"base_path": str(tmp_path)}},
                "store": {"provider": "mongo"},
                "llm": {"api_key": "k"},
            }
        )


def test_store_config_passed_through(tmp_path: Path):
    _, store, _ = parse_config(
        {
            "storage": {"config": {"base_path": str(tmp_path)}},
            "store": {"provider": "memory", "config": {"dimensions": 3}},
            "llm": {"api_key": "k"},
        }
    )
    assert isinstance(store, InMemoryStore)
    assert store._dimensions == 3


def test_registry_accepts_custom_backend():
    class _CustomStore(InMemoryStore):
        pass

    store_registry.register("custom", _CustomStore)
    assert isinstance(store_registry.build("custom", {}), _CustomStore)
