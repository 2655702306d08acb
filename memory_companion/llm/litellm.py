from __future__ import annotations

import base64
import logging

import litellm
from litellm.exceptions import RateLimitError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from memory_companion.exceptions import ProviderError
from memory_companion.llm.base import BaseLLMClient
from memory_companion.llm.models import (
    CompletionModel,
    EmbeddingModel,
    GeminiEmbeddingModel,
    GeminiModel,
    OpenAIEmbeddingModel,
)
from memory_companion.llm.prompts import (
    FACE_DESCRIPTION_PROMPT,
    NO_FACE,
    NO_NAME,
    build_name_prompt,
)
from memory_companion.models import EMBEDDING_DIMENSIONS

logger = logging.getLogger(__name__)

_NO_FACE_MARKERS = ("no face", "not visible")
_NO_NAME_MARKERS = ("no name", "not mentioned")


def _encode_image_as_data_url(image: bytes, mime_type: str) -> str:
    b64 = base64.b64encode(image).decode()
    return f"data:{mime_type};base64,{b64}"


def _looks_like(text: str, sentinel: str, markers: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return sentinel in text or any(m in lowered for m in markers)


class LiteLLMClient(BaseLLMClient):
    """litellm-backed client for completions, vision and embeddings.

    All provider failures surface as :class:`ProviderError`.  Completions
    back off on rate limits; embeddings are never retried here.
    """

    def __init__(
        self,
        api_key: str,
        model: CompletionModel = GeminiModel.GEMINI_25_FLASH,
        embedding_model: EmbeddingModel = GeminiEmbeddingModel.TEXT_EMBEDDING_004,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._embedding_model = embedding_model

    @classmethod
    def from_config(cls, config: dict) -> LiteLLMClient:
        kwargs: dict = {"api_key": config.get("api_key", "")}
        if config.get("model"):
            kwargs["model"] = config["model"]
        if config.get("embedding_model"):
            kwargs["embedding_model"] = config["embedding_model"]
        return cls(**kwargs)

    @retry(
        retry=retry_if_exception_type(RateLimitError),
        stop=stop_after_attempt(3),
        wait=wait_exponential_jitter(initial=1, max=10, jitter=2),
        reraise=True,
    )
    async def _acompletion(self, messages: list[dict]) -> str:
        response = await litellm.acompletion(
            model=str(self._model),
            messages=messages,
            api_key=self._api_key,
        )
        text: str | None = response.choices[0].message.content  # type: ignore[union-attr]
        if not text:
            raise ValueError("Empty completion response")
        return text.strip()

    async def completion(self, prompt: str) -> str:
        try:
            return await self._acompletion([{"role": "user", "content": prompt}])
        except Exception as exc:
            raise ProviderError("completion", str(exc)) from exc

    async def embed(self, text: str) -> list[float]:
        try:
            kwargs: dict = {}
            if self._embedding_model in OpenAIEmbeddingModel:
                # text-embedding-3 is truncated to the shared column width
                kwargs["dimensions"] = EMBEDDING_DIMENSIONS
            response = await litellm.aembedding(
                model=str(self._embedding_model),
                input=[text],
                api_key=self._api_key,
                **kwargs,
            )
            return list(response.data[0]["embedding"])
        except Exception as exc:
            raise ProviderError("embedding", str(exc)) from exc

    async def describe_face(
        self, image: bytes, mime_type: str = "image/png"
    ) -> str | None:
        messages = [
            {
                "role": "user",
                "content": [
                    {
                        "type": "image_url",
                        "image_url": {
                            "url": _encode_image_as_data_url(image, mime_type)
                        },
                    },
                    {"type": "text", "text": FACE_DESCRIPTION_PROMPT},
                ],
            }
        ]
        try:
            description = await self._acompletion(messages)
        except Exception as exc:
            raise ProviderError("face description", str(exc)) from exc

        if _looks_like(description, NO_FACE, _NO_FACE_MARKERS):
            logger.info("No face detected in image")
            return None
        logger.debug("Face description: %.100s", description)
        return description

    async def extract_name(self, text: str) -> str | None:
        answer = await self.completion(build_name_prompt(text))
        if _looks_like(answer, NO_NAME, _NO_NAME_MARKERS):
            return None
        return answer
