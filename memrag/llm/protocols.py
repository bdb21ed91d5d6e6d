# memrag/llm/protocols.py
"""
Gateway protocols consumed by the core.

Any object with matching methods works; the Ollama clients in this package
are the default implementations and tests use in-memory fakes.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Protocol, runtime_checkable

Message = Dict[str, str]
TokenCallback = Callable[[str], None]
DoneCallback = Callable[[], None]
ErrorCallback = Callable[[BaseException], None]


@runtime_checkable
class EmbeddingGateway(Protocol):
    def embed(self, model: str, text: str) -> List[float]:
        """Return the embedding vector for text. Raises on network or timeout failure."""
        ...


@runtime_checkable
class StreamHandle(Protocol):
    def cancel(self) -> None: ...

    def wait(self, timeout: Optional[float] = None) -> bool: ...


@runtime_checkable
class ChatGateway(Protocol):
    def complete(self, model: str, messages: List[Message]) -> str:
        """Return the full assistant reply."""
        ...

    def complete_stream(
        self,
        model: str,
        messages: List[Message],
        on_token: TokenCallback,
        on_done: DoneCallback,
        on_error: ErrorCallback,
        timeout: Optional[float] = None,
    ) -> StreamHandle:
        """
        Deliver tokens in arrival order, then exactly one of on_done or on_error.
        """
        ...
