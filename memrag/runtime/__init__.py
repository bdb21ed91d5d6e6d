# memrag/runtime/__init__.py
from memrag.runtime.pool import PoolClosedError, WorkerPool, default_pool_size

__all__ = ["WorkerPool", "PoolClosedError", "default_pool_size"]
