# memrag/core/http.py
"""
HTTP client factory for the local model runtime.

Every gateway (embedding, chat) builds its client here so timeouts, headers
and error mapping stay consistent.

Usage:
    from memrag.core.http import create_api_client, raise_for_status

    client = create_api_client("http://localhost:11434", timeout_type="embedding")
    response = client.post("/api/embeddings", json=payload)
    raise_for_status(response, provider="ollama", endpoint="/api/embeddings")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from memrag.logging.logger import get_logger

logger = get_logger(__name__)


# =============================================================================
# Errors
# =============================================================================


@dataclass
class APIError(Exception):
    """
    Structured API error with details.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code (if available)
        provider: API provider name (e.g., "ollama")
        endpoint: API endpoint that failed
        details: Additional error details from the API response
        original_error: The original exception that caused this error
    """

    message: str
    status_code: Optional[int] = None
    provider: Optional[str] = None
    endpoint: Optional[str] = None
    details: Optional[str] = None
    original_error: Optional[Exception] = None

    def __str__(self) -> str:
        parts = [self.message]

        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")

        if self.details:
            parts.append(f"- {self.details}")

        return " ".join(parts)


class ModelNotFoundError(APIError):
    """Raised when the requested model is not pulled on the runtime."""

    pass


class APITimeoutError(APIError):
    """Raised when a request exceeds its timeout."""

    pass


class APIConnectionError(APIError):
    """Raised when the runtime cannot be reached."""

    pass


# =============================================================================
# Default Configuration
# =============================================================================

DEFAULT_TIMEOUTS = {
    "default": 30.0,
    "embedding": 60.0,
    "chat": 120.0,
    "stream": 300.0,
}

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


# =============================================================================
# Client Factory
# =============================================================================


def create_api_client(
    base_url: str,
    timeout: Optional[float] = None,
    timeout_type: str = "default",
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any,
) -> httpx.Client:
    """
    Create a configured HTTP client.

    Args:
        base_url: Base URL of the runtime (e.g., "http://localhost:11434")
        timeout: Request timeout in seconds (or use timeout_type)
        timeout_type: Preset timeout type ("default", "embedding", "chat", "stream")
        headers: Additional headers to include
        **kwargs: Passed through to httpx.Client (e.g., transport)

    Returns:
        Configured httpx.Client instance
    """
    if timeout is None:
        timeout = DEFAULT_TIMEOUTS.get(timeout_type, DEFAULT_TIMEOUTS["default"])

    final_headers = dict(DEFAULT_HEADERS)
    if headers:
        final_headers.update(headers)

    client = httpx.Client(
        base_url=base_url,
        headers=final_headers,
        timeout=timeout,
        **kwargs,
    )

    logger.debug(f"Created HTTP client for {base_url} (timeout={timeout}s)")

    return client


# =============================================================================
# Error Handling
# =============================================================================


def _extract_details(response: httpx.Response) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] if response.text else None

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            return error.get("message")
        return data.get("message") or error
    return None


def handle_api_error(
    exc: Exception,
    provider: str = "unknown",
    endpoint: str = "",
) -> APIError:
    """
    Convert an httpx exception to a structured APIError.

    Example:
        try:
            response = client.post("/api/chat", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise handle_api_error(exc, provider="ollama", endpoint="/api/chat")
    """
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        details = _extract_details(exc.response)

        if status_code == 404:
            return ModelNotFoundError(
                message=f"{provider} resource not found",
                status_code=status_code,
                provider=provider,
                endpoint=endpoint,
                details=details,
                original_error=exc,
            )
        return APIError(
            message=f"{provider} API request failed",
            status_code=status_code,
            provider=provider,
            endpoint=endpoint,
            details=details,
            original_error=exc,
        )

    if isinstance(exc, httpx.ConnectError):
        return APIConnectionError(
            message=f"Failed to connect to {provider}",
            provider=provider,
            endpoint=endpoint,
            details=str(exc),
            original_error=exc,
        )

    if isinstance(exc, httpx.TimeoutException):
        return APITimeoutError(
            message=f"{provider} request timed out",
            provider=provider,
            endpoint=endpoint,
            details="Consider increasing the timeout for this operation",
            original_error=exc,
        )

    return APIError(
        message=f"{provider} request failed: {exc}",
        provider=provider,
        endpoint=endpoint,
        original_error=exc,
    )


def raise_for_status(
    response: httpx.Response,
    provider: str = "unknown",
    endpoint: str = "",
) -> None:
    """
    Check response status and raise the matching APIError if failed.

    Streaming responses must be read before calling this so error details
    are available.
    """
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise handle_api_error(exc, provider=provider, endpoint=endpoint) from exc
