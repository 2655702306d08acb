from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from memory_companion.storage.base import ArtifactStorage
from memory_companion.store.base import Store

if TYPE_CHECKING:
    from memory_companion.llm.base import BaseLLMClient


T = TypeVar("T")


class _Registry(Generic[T]):
    """Lazily-populated factory registry.

    Each backend module registers itself via :meth:`register`.
    :meth:`build` resolves a provider name to a factory, calling
    ``factory.from_config(config)`` if available, otherwise
    ``factory(**config)``.
    """

    def __init__(self, label: str) -> None:
        self._label = label
        self._factories: dict[str, type[T]] = {}
        self._defaults_loaded = False

    def register(self, name: str, cls: type[T]) -> None:
        self._factories[name] = cls

    def build(self, provider: str, config: dict[str, Any]) -> T:
        if not self._defaults_loaded:
            self._load_defaults()
            self._defaults_loaded = True

        factory = self._factories.get(provider)
        if factory is None:
            raise ValueError(
                f"Unknown {self._label} provider '{provider}'. "
                f"Available: {list(self._factories)}"
            )
        if hasattr(factory, "from_config"):
            return factory.from_config(config)  # type: ignore[return-value]
        return factory(**config)  # type: ignore[return-value]

    def _load_defaults(self) -> None:
        """Override point: subclasses populate built-in factories here."""


class _StorageRegistry(_Registry[ArtifactStorage]):
    def _load_defaults(self) -> None:
        from memory_companion.storage.disk import DiskArtifactStorage

        self.register("disk", DiskArtifactStorage)


class _StoreRegistry(_Registry[Store]):
    def _load_defaults(self) -> None:
        from memory_companion.store.memory import InMemoryStore

        self.register("memory", InMemoryStore)

        try:
            from memory_companion.store.postgres import PostgresStore

            self.register("postgres", PostgresStore)
        except ImportError:
            pass


class _LLMRegistry(_Registry["BaseLLMClient"]):
    def _load_defaults(self) -> None:
        from memory_companion.llm.litellm import LiteLLMClient

        self.register("litellm", LiteLLMClient)
        self.register("gemini", LiteLLMClient)
        self.register("openai", LiteLLMClient)

    def build(self, provider: str, config: dict[str, Any]) -> BaseLLMClient:
        if provider == "openai":
            from memory_companion.llm.models import OpenAIEmbeddingModel, OpenAIModel

            config = {
                "model": OpenAIModel.GPT_4O_MINI,
                "embedding_model": OpenAIEmbeddingModel.TEXT_EMBEDDING_3_SMALL,
                **{k: v for k, v in config.items() if v},
            }
        return super().build(provider, config)


# Singleton instances
storage_registry = _StorageRegistry("storage")
store_registry = _StoreRegistry("store")
llm_registry = _LLMRegistry("llm")


def parse_config(
    config: dict[str, Any],
) -> tuple[ArtifactStorage, Store, BaseLLMClient]:
    """Parse a user config dict and return (storage, store, llm_client).

    Expected shape::

        {
            "storage": {"provider": "disk", "config": {"base_path": "./data"}},
            "store": {"provider": "memory", "config": {}},
            "llm": {"provider": "gemini", "api_key": "..."},
        }

    ``storage`` defaults to disk under ``./data`` and ``store`` to
    in-memory.  The ``llm`` section is required.
    """
    storage_cfg = config.get("storage", {})
    store_cfg = config.get("store", {})
    llm_cfg = config.get("llm")
    if not llm_cfg:
        raise ValueError(
            "Missing 'llm' config section. "
            'Provide at least {"llm": {"api_key": "..."}}.'
        )

    storage = storage_registry.build(
        storage_cfg.get("provider", "disk"),
        storage_cfg.get("config", {"base_path": "./data"}),
    )
    store = store_registry.build(
        store_cfg.get("provider", "memory"),
        store_cfg.get("config", {}),
    )
    llm_client = llm_registry.build(
        llm_cfg.get("provider", "gemini"),
        {k: v for k, v in llm_cfg.items() if k != "provider"},
    )

    return storage, store, llm_client
