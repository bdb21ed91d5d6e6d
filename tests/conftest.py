# tests/conftest.py
"""
Root conftest - shared fakes and fixtures.

Test Tiers:
=====================================
- tier1: Critical path tests - pure logic, no I/O (<30s)
         Run: pytest -m tier1
- tier2: Unit tests with mocks - fake gateways, httpx.MockTransport (<2min)
         Run: pytest -m "tier1 or tier2"

No test talks to a real Ollama runtime.
"""

from __future__ import annotations

import hashlib
import math
import threading
import time
from typing import Dict, Iterable, List, Optional

import pytest

from memrag.core.chunk import Chunk
from memrag.runtime.pool import WorkerPool

# =============================================================================
# Helpers
# =============================================================================


def unit_at(score: float) -> List[float]:
    """2-d unit vector whose cosine with [1, 0] is exactly `score`."""
    return [score, math.sqrt(max(0.0, 1.0 - score * score))]


QUERY_VECTOR = [1.0, 0.0]


def wait_until(predicate, timeout: float = 5.0) -> bool:
    """Poll predicate until it holds or timeout elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def make_chunk(
    content: str,
    file_id: Optional[str] = None,
    file_name: Optional[str] = None,
    index: int = 0,
    **metadata,
) -> Chunk:
    return Chunk(
        id=f"{file_id or 'loose'}:{index}:{content[:12]}",
        content=content,
        file_id=file_id,
        file_name=file_name,
        file_size=len(content) if file_id else None,
        chunk_index=index,
        metadata=metadata,
    )


# =============================================================================
# Fake gateways
# =============================================================================


class FakeEmbedder:
    """
    Deterministic, thread-safe embedding gateway.

    Texts listed in `vectors` get that vector; anything else gets a stable
    hash-derived vector. Texts in `fail_on` raise ConnectionError.
    """

    def __init__(
        self,
        vectors: Optional[Dict[str, List[float]]] = None,
        fail_on: Iterable[str] = (),
        delay: float = 0.0,
        dim: int = 2,
    ) -> None:
        self.vectors = dict(vectors or {})
        self.fail_on = set(fail_on)
        self.delay = delay
        self.dim = dim
        self.calls: List[str] = []
        self._lock = threading.Lock()

    @property
    def call_count(self) -> int:
        with self._lock:
            return len(self.calls)

    def calls_for(self, text: str) -> int:
        with self._lock:
            return self.calls.count(text)

    def embed(self, model: str, text: str) -> List[float]:
        with self._lock:
            self.calls.append(text)
        if self.delay:
            time.sleep(self.delay)
        if text in self.fail_on:
            raise ConnectionError(f"embedding backend unavailable for {text!r}")
        if text in self.vectors:
            return list(self.vectors[text])
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [b / 255.0 - 0.5 for b in digest[: self.dim]]

    def close(self) -> None:
        pass


class _DoneHandle:
    finished = True

    def cancel(self) -> None:
        pass

    def wait(self, timeout: Optional[float] = None) -> bool:
        return True


class FakeChat:
    """Chat gateway that echoes and records the prompt it was given."""

    def __init__(self, reply: str = "42", fail: Optional[Exception] = None) -> None:
        self.reply = reply
        self.fail = fail
        self.requests: List[list] = []

    def complete(self, model: str, messages: list) -> str:
        self.requests.append(messages)
        if self.fail is not None:
            raise self.fail
        return self.reply

    def complete_stream(self, model, messages, on_token, on_done, on_error, timeout=None):
        self.requests.append(messages)
        if self.fail is not None:
            on_error(self.fail)
        else:
            for word in self.reply.split(" "):
                on_token(word)
            on_done()
        return _DoneHandle()

    def close(self) -> None:
        pass


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def pool():
    p = WorkerPool(size=4)
    yield p
    p.shutdown(timeout=1.0)


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder(vectors={"query": QUERY_VECTOR})


@pytest.fixture
def chat() -> FakeChat:
    return FakeChat()
