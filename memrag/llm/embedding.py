# memrag/llm/embedding.py
"""Ollama embedding gateway."""

from __future__ import annotations

from typing import Any, List, Optional

import httpx

from memrag.core.http import APIError, create_api_client, handle_api_error, raise_for_status
from memrag.logging.logger import get_logger
from memrag.logging.tags import EMBEDDING
from memrag.retrieval.exceptions import EmbeddingError

logger = get_logger(__name__)

EMBEDDINGS_ENDPOINT = "/api/embeddings"


class OllamaEmbedder:
    """
    Embedding adapter for a local Ollama runtime.

    One request per text; Ollama's /api/embeddings has no batch form, so
    parallelism comes from the caller's worker pool. The underlying
    httpx.Client is thread-safe.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        timeout: Optional[float] = None,
        **client_kwargs: Any,
    ) -> None:
        self.base_url = base_url
        self._client = create_api_client(
            base_url, timeout=timeout, timeout_type="embedding", **client_kwargs
        )

    def embed(self, model: str, text: str) -> List[float]:
        payload = {"model": model, "prompt": text}
        try:
            response = self._client.post(EMBEDDINGS_ENDPOINT, json=payload)
            raise_for_status(response, provider="ollama", endpoint=EMBEDDINGS_ENDPOINT)
            data = response.json()
        except APIError as e:
            raise EmbeddingError(str(e)) from e
        except httpx.HTTPError as e:
            raise EmbeddingError(
                str(handle_api_error(e, provider="ollama", endpoint=EMBEDDINGS_ENDPOINT))
            ) from e
        except ValueError as e:
            raise EmbeddingError(f"Invalid JSON from {EMBEDDINGS_ENDPOINT}: {e}") from e

        vector = data.get("embedding") if isinstance(data, dict) else None
        if not isinstance(vector, list) or not vector:
            raise EmbeddingError(f"Ollama returned no embedding for model '{model}'")

        logger.debug(f"{EMBEDDING} {model}: {len(vector)} dims")
        return [float(v) for v in vector]

    def embed_texts(self, model: str, texts: List[str]) -> List[List[float]]:
        return [self.embed(model, text) for text in texts]

    def close(self) -> None:
        self._client.close()
