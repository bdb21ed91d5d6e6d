# tests/test_ollama_embedding.py
import json

import httpx
import pytest

from memrag.core.http import APIError, ModelNotFoundError, handle_api_error
from memrag.llm.embedding import OllamaEmbedder
from memrag.retrieval.exceptions import EmbeddingError

pytestmark = pytest.mark.tier2


def make_embedder(handler) -> OllamaEmbedder:
    return OllamaEmbedder("http://ollama.test", transport=httpx.MockTransport(handler))


def test_embed_posts_model_and_prompt():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"embedding": [0.1, 0.2, 0.3]})

    embedder = make_embedder(handler)
    assert embedder.embed("mxbai-embed-large", "hello") == [0.1, 0.2, 0.3]
    assert seen["path"] == "/api/embeddings"
    assert seen["body"] == {"model": "mxbai-embed-large", "prompt": "hello"}


@pytest.mark.parametrize("payload", [{}, {"embedding": []}, {"embedding": None}])
def test_missing_or_empty_vector_is_an_error(payload):
    embedder = make_embedder(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(EmbeddingError):
        embedder.embed("m", "text")


def test_http_error_status_maps_to_embedding_error():
    embedder = make_embedder(
        lambda request: httpx.Response(404, json={"error": "model 'nope' not found"})
    )
    with pytest.raises(EmbeddingError) as exc_info:
        embedder.embed("nope", "text")

    assert isinstance(exc_info.value.__cause__, ModelNotFoundError)
    assert "not found" in str(exc_info.value)


def test_connection_failure_maps_to_embedding_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(EmbeddingError) as exc_info:
        make_embedder(handler).embed("m", "text")
    assert "Failed to connect" in str(exc_info.value)


def test_invalid_json_is_an_error():
    embedder = make_embedder(lambda request: httpx.Response(200, content=b"not json"))
    with pytest.raises(EmbeddingError):
        embedder.embed("m", "text")


def test_handle_api_error_timeout_message():
    request = httpx.Request("POST", "http://ollama.test/api/embeddings")
    error = handle_api_error(httpx.ReadTimeout("slow", request=request), provider="ollama")
    assert isinstance(error, APIError)
    assert "timed out" in str(error)
