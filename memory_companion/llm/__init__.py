from memory_companion.llm.base import (
    BaseLLMClient,
    EmbeddingProvider,
    FaceDescriber,
    NameExtractor,
)
from memory_companion.llm.litellm import LiteLLMClient
from memory_companion.llm.models import (
    GeminiEmbeddingModel,
    GeminiModel,
    OpenAIEmbeddingModel,
    OpenAIModel,
)

__all__ = [
    "BaseLLMClient",
    "EmbeddingProvider",
    "FaceDescriber",
    "GeminiEmbeddingModel",
    "GeminiModel",
    "LiteLLMClient",
    "NameExtractor",
    "OpenAIEmbeddingModel",
    "OpenAIModel",
]
