# memrag/llm/chat.py
"""
Ollama chat gateway with blocking and streaming calls.

Streaming:
    handle = client.complete_stream(
        model, messages,
        on_token=print_token,
        on_done=lambda: print("\\n[done]"),
        on_error=lambda e: print(f"\\n[error] {e}"),
        timeout=300,
    )
    handle.wait()

Exactly one of on_done / on_error fires per stream, whether it finishes,
fails, times out or is cancelled. Tokens arriving after that are dropped.
"""

from __future__ import annotations

import json
import queue
import threading
from typing import Any, Dict, Iterator, List, Optional

import httpx

from memrag.core.http import (
    DEFAULT_TIMEOUTS,
    APIError,
    create_api_client,
    handle_api_error,
    raise_for_status,
)
from memrag.llm.exceptions import (
    LLMError,
    LLMResponseError,
    StreamCancelledError,
    StreamTimeoutError,
)
from memrag.llm.protocols import DoneCallback, ErrorCallback, Message, TokenCallback
from memrag.logging.logger import get_logger
from memrag.logging.tags import CHAT

logger = get_logger(__name__)

CHAT_ENDPOINT = "/api/chat"


def _as_llm_error(exc: Exception) -> LLMError:
    if isinstance(exc, LLMError):
        return exc
    if isinstance(exc, APIError):
        return LLMError(str(exc))
    if isinstance(exc, httpx.HTTPError):
        return LLMError(str(handle_api_error(exc, provider="ollama", endpoint=CHAT_ENDPOINT)))
    return LLMError(f"ollama chat failed: {exc}")


def _extract_content(data: Any) -> str:
    if not isinstance(data, dict):
        raise LLMResponseError(f"Unexpected chat response: {data!r}")
    if data.get("error"):
        raise LLMResponseError(f"ollama error: {data['error']}")
    message = data.get("message") or {}
    return str(message.get("content") or "")


# =============================================================================
# Stream handle
# =============================================================================


class ChatStream:
    """
    A running streaming chat request.

    The request runs on its own thread. A timer bound to the request fails
    the stream with StreamTimeoutError once the timeout elapses.
    """

    def __init__(
        self,
        client: httpx.Client,
        payload: Dict[str, Any],
        on_token: TokenCallback,
        on_done: DoneCallback,
        on_error: ErrorCallback,
        timeout: float,
    ) -> None:
        self._client = client
        self._payload = payload
        self._on_token = on_token
        self._on_done = on_done
        self._on_error = on_error
        self.timeout = timeout

        self._lock = threading.RLock()
        self._finished = False
        self._done = threading.Event()
        self._response: Optional[httpx.Response] = None
        self.error: Optional[BaseException] = None

        self._timer = threading.Timer(timeout, self._expire)
        self._timer.daemon = True
        self._thread = threading.Thread(target=self._run, name="memrag-chat-stream", daemon=True)

    def start(self) -> "ChatStream":
        self._timer.start()
        self._thread.start()
        return self

    @property
    def finished(self) -> bool:
        return self._finished

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the terminal callback has fired. Returns False on wait timeout."""
        return self._done.wait(timeout)

    def cancel(self) -> None:
        self._fail(StreamCancelledError("Stream cancelled"))

    def _expire(self) -> None:
        if self._fail(StreamTimeoutError(f"Stream exceeded {self.timeout}s timeout")):
            logger.warning(f"{CHAT} Streaming request timed out after {self.timeout}s")

    def _close_response(self) -> None:
        response = self._response
        if response is not None:
            try:
                response.close()
            except httpx.HTTPError as e:
                logger.debug(f"{CHAT} Error closing stream: {e}")

    # -------------------------------------------------------------------------
    # Terminal state
    # -------------------------------------------------------------------------

    def _finish(self, error: Optional[BaseException]) -> bool:
        with self._lock:
            if self._finished:
                return False
            self._finished = True
            self.error = error
            self._timer.cancel()
            try:
                if error is None:
                    self._on_done()
                else:
                    self._on_error(error)
            except Exception as e:
                logger.warning(f"{CHAT} Terminal stream callback raised: {e}")
            finally:
                self._done.set()
        return True

    def _fail(self, error: BaseException) -> bool:
        fired = self._finish(error)
        if fired:
            # Unblocks the reader thread; it then sees the finished flag
            self._close_response()
        return fired

    def _emit(self, token: str) -> None:
        with self._lock:
            if self._finished:
                return
            self._on_token(token)

    # -------------------------------------------------------------------------
    # Reader thread
    # -------------------------------------------------------------------------

    def _run(self) -> None:
        try:
            with self._client.stream(
                "POST", CHAT_ENDPOINT, json=self._payload, timeout=self.timeout
            ) as response:
                self._response = response
                if self._finished:
                    return
                if response.status_code >= 400:
                    response.read()
                    raise_for_status(response, provider="ollama", endpoint=CHAT_ENDPOINT)

                for line in response.iter_lines():
                    if self._finished:
                        return
                    if not line.strip():
                        continue
                    try:
                        data = json.loads(line)
                    except ValueError as e:
                        raise LLMResponseError(f"Invalid stream line: {line[:200]!r}") from e
                    token = _extract_content(data)
                    if token:
                        self._emit(token)
                    if data.get("done"):
                        break
            self._finish(None)
        except Exception as e:
            if self._finished:
                logger.debug(f"{CHAT} Reader stopped after stream finished: {e}")
                return
            error = _as_llm_error(e)
            logger.error(f"{CHAT} Streaming request failed: {error}")
            self._finish(error)


# =============================================================================
# Client
# =============================================================================


class OllamaChatClient:
    """
    Chat adapter for a local Ollama runtime.

    complete() blocks for the whole reply; complete_stream() returns a
    ChatStream immediately; iter_stream() wraps the stream as a generator.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        timeout: Optional[float] = None,
        stream_timeout: Optional[float] = None,
        **client_kwargs: Any,
    ) -> None:
        self.base_url = base_url
        self.stream_timeout = stream_timeout or DEFAULT_TIMEOUTS["stream"]
        self._client = create_api_client(
            base_url, timeout=timeout, timeout_type="chat", **client_kwargs
        )

    @staticmethod
    def _payload(model: str, messages: List[Message], stream: bool) -> Dict[str, Any]:
        return {
            "model": model,
            "messages": [
                {"role": m.get("role", "user"), "content": m.get("content", "")}
                for m in messages
            ],
            "stream": stream,
        }

    def complete(self, model: str, messages: List[Message]) -> str:
        try:
            response = self._client.post(
                CHAT_ENDPOINT, json=self._payload(model, messages, stream=False)
            )
            raise_for_status(response, provider="ollama", endpoint=CHAT_ENDPOINT)
            data = response.json()
        except ValueError as e:
            raise LLMResponseError(f"Invalid JSON from {CHAT_ENDPOINT}: {e}") from e
        except (APIError, httpx.HTTPError) as e:
            raise _as_llm_error(e) from e

        text = _extract_content(data)
        logger.debug(f"{CHAT} {model}: {len(text)} chars")
        return text

    def complete_stream(
        self,
        model: str,
        messages: List[Message],
        on_token: TokenCallback,
        on_done: DoneCallback,
        on_error: ErrorCallback,
        timeout: Optional[float] = None,
    ) -> ChatStream:
        stream = ChatStream(
            client=self._client,
            payload=self._payload(model, messages, stream=True),
            on_token=on_token,
            on_done=on_done,
            on_error=on_error,
            timeout=timeout or self.stream_timeout,
        )
        logger.debug(f"{CHAT} Starting stream with {model}")
        return stream.start()

    def iter_stream(
        self,
        model: str,
        messages: List[Message],
        timeout: Optional[float] = None,
    ) -> Iterator[str]:
        """
        Yield tokens as they arrive.

        Raises:
            LLMError: After the last delivered token, if the stream failed
        """
        return iter_tokens(self, model, messages, timeout)

    def close(self) -> None:
        self._client.close()


_END = object()


def iter_tokens(
    gateway: Any,
    model: str,
    messages: List[Message],
    timeout: Optional[float] = None,
) -> Iterator[str]:
    """Adapt any callback-style ChatGateway stream into a token generator."""
    items: "queue.Queue[Any]" = queue.Queue()
    failure: List[BaseException] = []

    def on_error(error: BaseException) -> None:
        failure.append(error)
        items.put(_END)

    handle = gateway.complete_stream(
        model,
        messages,
        on_token=items.put,
        on_done=lambda: items.put(_END),
        on_error=on_error,
        timeout=timeout,
    )
    try:
        while True:
            item = items.get()
            if item is _END:
                break
            yield item
    finally:
        # Consumer stopped early
        if not failure and not getattr(handle, "finished", True):
            handle.cancel()

    if failure:
        raise failure[0]
