# memrag/runtime/pool.py
"""Shared bounded worker pool for embedding fan-out and parallel scoring."""

from __future__ import annotations

import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Iterable, List, Optional, TypeVar

from memrag.core.exceptions import EngineError
from memrag.logging.logger import get_logger
from memrag.logging.tags import RUNTIME

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class PoolClosedError(EngineError):
    """Raised when work is submitted after shutdown."""

    pass


def default_pool_size() -> int:
    return max(2, os.cpu_count() or 1)


class WorkerPool:
    """
    Bounded thread pool shared by the DocumentStore and RetrievalEngine.

    The number of threads never grows with corpus size; large fan-outs
    queue behind the fixed workers.

    shutdown() drains in-flight work for up to `timeout` seconds, then
    cancels everything still queued.
    """

    def __init__(self, size: Optional[int] = None, name: str = "memrag"):
        self.size = size or default_pool_size()
        self._executor = ThreadPoolExecutor(max_workers=self.size, thread_name_prefix=name)
        self._lock = threading.Lock()
        self._pending: set[Future] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, fn: Callable[..., R], *args: Any, **kwargs: Any) -> "Future[R]":
        with self._lock:
            if self._closed:
                raise PoolClosedError("Worker pool is shut down")
            future = self._executor.submit(fn, *args, **kwargs)
            self._pending.add(future)
        future.add_done_callback(self._discard)
        return future

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def map_all(self, fn: Callable[[T], R], items: Iterable[T]) -> List["Future[R]"]:
        """Submit one task per item; returns futures in item order."""
        return [self.submit(fn, item) for item in items]

    def shutdown(self, timeout: float = 5.0) -> bool:
        """
        Gracefully drain, then force-cancel.

        Returns:
            True if all in-flight work finished within the timeout
        """
        with self._lock:
            if self._closed:
                return True
            self._closed = True
            pending = list(self._pending)

        done, not_done = wait(pending, timeout=timeout)
        drained = not not_done
        if not drained:
            logger.warning(
                f"{RUNTIME} {len(not_done)} task(s) still running after {timeout}s; cancelling"
            )

        self._executor.shutdown(wait=False, cancel_futures=True)
        logger.debug(f"{RUNTIME} Worker pool shut down (drained={drained})")
        return drained

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()
