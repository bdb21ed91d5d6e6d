# memrag/config/__init__.py
"""
Configuration for memrag.

Usage:
    from memrag.config import load_config

    config = load_config()               # package defaults (+ $MEMRAG_CONFIG)
    config = load_config("memrag.yaml")  # defaults + file overrides
"""

from memrag.config.loader import deep_merge, get_config_source, load_config, load_config_dict
from memrag.config.schema import (
    CacheConfig,
    ChunkingConfig,
    LoggingConfig,
    MemragConfig,
    OllamaConfig,
    RetrievalConfig,
    RuntimeConfig,
)

__all__ = [
    "load_config",
    "load_config_dict",
    "deep_merge",
    "get_config_source",
    "MemragConfig",
    "OllamaConfig",
    "ChunkingConfig",
    "RetrievalConfig",
    "CacheConfig",
    "RuntimeConfig",
    "LoggingConfig",
]
