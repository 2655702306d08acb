from __future__ import annotations

from abc import ABC, abstractmethod


class EmbeddingProvider(ABC):
    """Text to fixed-length vector.

    Identical input text must yield identical vectors.
    """

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Return the embedding for *text*; raise ``ProviderError`` on failure."""
        ...


class FaceDescriber(ABC):
    """Turns an image into a prose face description (the embedding proxy)."""

    @abstractmethod
    async def describe_face(
        self, image: bytes, mime_type: str = "image/png"
    ) -> str | None:
        """Return a detailed face description, or ``None`` when no face is visible."""
        ...


class NameExtractor(ABC):
    @abstractmethod
    async def extract_name(self, text: str) -> str | None:
        """Return the speaker's self-introduced name, or ``None``."""
        ...


class BaseLLMClient(EmbeddingProvider, FaceDescriber, NameExtractor):
    """Everything the companion needs from a generative-AI provider."""

    @abstractmethod
    async def completion(self, prompt: str) -> str:
        """Single-turn text completion."""
        ...
