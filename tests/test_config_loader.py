# tests/test_config_loader.py
"""
Tests for layered configuration loading.

Verifies:
1. Package defaults load and validate with no user config
2. User YAML (explicit path or $MEMRAG_CONFIG) overrides a subset of keys
3. Unknown keys, invalid values and bad YAML fail with ConfigError subclasses
"""

import pytest

from memrag.config.loader import CONFIG_ENV_VAR, deep_merge, get_config_source, load_config
from memrag.core.config import ConfigNotFoundError, ConfigParseError, ConfigValidationError

pytestmark = pytest.mark.tier1


@pytest.fixture(autouse=True)
def no_env_config(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


def test_defaults():
    config = load_config()

    assert config.ollama.base_url == "http://localhost:11434"
    assert config.ollama.embedding_model == "mxbai-embed-large"
    assert config.chunking.chunk_size == 1000
    assert config.chunking.chunk_overlap == 200
    assert config.retrieval.relevance_floor == 0.5
    assert config.retrieval.diversity_threshold == 0.7
    assert config.retrieval.fetch_size == 10
    assert config.retrieval.context_limit == 5
    assert config.cache.max_size == 100
    assert config.cache.ttl_seconds == 300.0
    assert config.runtime.pool_size is None
    assert config.runtime.shutdown_timeout == 5.0


def test_user_file_overrides_subset(tmp_path):
    path = tmp_path / "memrag.yaml"
    path.write_text("ollama:\n  chat_model: llama3.2\nchunking:\n  chunk_size: 800\n")

    config = load_config(path)

    assert config.ollama.chat_model == "llama3.2"
    assert config.ollama.embedding_model == "mxbai-embed-large"
    assert config.chunking.chunk_size == 800
    assert config.chunking.chunk_overlap == 200


def test_env_var_points_at_user_config(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("cache:\n  enabled: false\n")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

    assert load_config().cache.enabled is False
    assert str(path) in get_config_source()


def test_missing_user_config(tmp_path):
    with pytest.raises(ConfigNotFoundError):
        load_config(tmp_path / "absent.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("chunking: [unclosed\n")
    with pytest.raises(ConfigParseError):
        load_config(path)


@pytest.mark.parametrize(
    "body",
    [
        "chunking:\n  chunk_sise: 10\n",
        "chunking:\n  chunk_size: 0\n",
        "chunking:\n  chunk_size: 100\n  chunk_overlap: 100\n",
        "retrieval:\n  fetch_size: 0\n",
        "surprise: true\n",
    ],
)
def test_schema_violations(tmp_path, body):
    path = tmp_path / "invalid.yaml"
    path.write_text(body)
    with pytest.raises(ConfigValidationError):
        load_config(path)


def test_deep_merge_replaces_lists_and_merges_dicts():
    base = {"a": 1, "b": {"c": 2, "d": 3}, "e": [1, 2]}
    merged = deep_merge(base, {"b": {"c": 10}, "e": [3]})

    assert merged == {"a": 1, "b": {"c": 10, "d": 3}, "e": [3]}
    assert base["b"]["c"] == 2
