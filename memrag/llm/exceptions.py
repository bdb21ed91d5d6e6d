# memrag/llm/exceptions.py
"""
LLM exceptions.

Hierarchy:
    GenerationError (from memrag.core)
    └── LLMError - LLM call failures
        ├── LLMResponseError - Invalid or error-bearing LLM response
        ├── StreamTimeoutError - Streaming call exceeded its timeout
        └── StreamCancelledError - Streaming call cancelled by the caller
"""

from memrag.core.exceptions import GenerationError


class LLMError(GenerationError):
    """LLM call failed."""

    pass


class LLMResponseError(LLMError):
    """LLM returned invalid or unparseable response."""

    pass


class StreamTimeoutError(LLMError):
    """Streaming response did not finish within its timeout."""

    pass


class StreamCancelledError(LLMError):
    """Streaming response was cancelled before it finished."""

    pass
