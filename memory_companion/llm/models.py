from enum import StrEnum


class GeminiModel(StrEnum):
    GEMINI_25_FLASH = "gemini/gemini-2.5-flash"
    GEMINI_25_PRO = "gemini/gemini-2.5-pro"


class OpenAIModel(StrEnum):
    GPT_4O = "openai/gpt-4o"
    GPT_4O_MINI = "openai/gpt-4o-mini"
    GPT_4_1_MINI = "openai/gpt-4.1-mini"


class GeminiEmbeddingModel(StrEnum):
    TEXT_EMBEDDING_004 = "gemini/text-embedding-004"


class OpenAIEmbeddingModel(StrEnum):
    TEXT_EMBEDDING_3_SMALL = "openai/text-embedding-3-small"


CompletionModel = GeminiModel | OpenAIModel
EmbeddingModel = GeminiEmbeddingModel | OpenAIEmbeddingModel
