# memrag/core/exceptions.py
"""
Core exceptions for memrag.

Hierarchy:
    EngineError
    ├── QueryError - invalid or malformed query
    ├── KnowledgeError - corpus access or mutation failures
    ├── GenerationError - answer generation failures
    └── ConfigurationError - invalid or missing configuration

Subsystems extend these (see retrieval.exceptions, llm.exceptions,
vector_db.exceptions) so callers can catch everything with EngineError.
"""


class EngineError(Exception):
    """
    Base exception for all memrag errors.

    Examples:
        >>> try:
        ...     answer = service.query("What is in the report?")
        ... except EngineError as e:
        ...     print(f"Query failed: {e}")
    """

    pass


class QueryError(EngineError):
    """
    Invalid or malformed query.

    Raised for empty query text or a non-positive top_k.
    """

    pass


class KnowledgeError(EngineError):
    """Corpus access or mutation failed."""

    pass


class GenerationError(EngineError):
    """Answer generation failed (LLM call, prompt assembly)."""

    pass


class ConfigurationError(EngineError):
    """Configuration is missing or invalid."""

    pass


__all__ = [
    "EngineError",
    "QueryError",
    "KnowledgeError",
    "GenerationError",
    "ConfigurationError",
]
