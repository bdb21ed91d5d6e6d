# memrag/llm/__init__.py
from memrag.llm.chat import ChatStream, OllamaChatClient, iter_tokens
from memrag.llm.embedding import OllamaEmbedder
from memrag.llm.exceptions import (
    LLMError,
    LLMResponseError,
    StreamCancelledError,
    StreamTimeoutError,
)
from memrag.llm.protocols import ChatGateway, EmbeddingGateway, Message

__all__ = [
    "OllamaChatClient",
    "OllamaEmbedder",
    "ChatStream",
    "iter_tokens",
    "ChatGateway",
    "EmbeddingGateway",
    "Message",
    "LLMError",
    "LLMResponseError",
    "StreamTimeoutError",
    "StreamCancelledError",
]
