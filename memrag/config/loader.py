# memrag/config/loader.py
"""
Layered configuration loading.

Merge order:
    1. Package defaults (memrag/config/default.yaml) - always loaded
    2. User config (explicit path, or $MEMRAG_CONFIG) - overrides defaults

The result is validated against MemragConfig, so every value is guaranteed
to exist. Callers never need fallback logic.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from memrag.config.schema import MemragConfig
from memrag.core.config import ConfigValidationError, load_yaml
from memrag.logging.logger import get_logger

logger = get_logger(__name__)

CONFIG_ENV_VAR = "MEMRAG_CONFIG"
DEFAULTS_PATH = Path(__file__).parent / "default.yaml"


# =============================================================================
# Deep Merge
# =============================================================================


def deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Values from `override` take precedence over `base`.
    Nested dicts are merged recursively. Lists are replaced entirely.

    Examples:
        >>> deep_merge({"a": 1, "b": {"c": 2, "d": 3}}, {"b": {"c": 10}})
        {'a': 1, 'b': {'c': 10, 'd': 3}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


# =============================================================================
# Loading Functions
# =============================================================================


def _resolve_user_path(path: Optional[Union[str, Path]]) -> Optional[Path]:
    if path is not None:
        return Path(path)
    env_value = os.environ.get(CONFIG_ENV_VAR)
    if env_value:
        return Path(env_value)
    return None


def load_config_dict(path: Optional[Union[str, Path]] = None) -> dict[str, Any]:
    """
    Load the merged configuration as a raw dictionary (no validation).

    Raises:
        ConfigNotFoundError: If an explicit user config doesn't exist
        ConfigParseError: If any YAML file is invalid
    """
    defaults = load_yaml(DEFAULTS_PATH)

    user_path = _resolve_user_path(path)
    if user_path is None:
        logger.debug("Using package defaults only")
        return defaults

    user_config = load_yaml(user_path)
    logger.debug(f"Merged config: defaults + {user_path}")
    return deep_merge(defaults, user_config)


def load_config(path: Optional[Union[str, Path]] = None) -> MemragConfig:
    """
    Load and validate the complete configuration.

    Raises:
        ConfigNotFoundError, ConfigParseError: from loading
        ConfigValidationError: If the merged config doesn't match the schema
    """
    data = load_config_dict(path)
    try:
        return MemragConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(
            f"Invalid configuration: {e}", path=_resolve_user_path(path)
        ) from e


def get_config_source(path: Optional[Union[str, Path]] = None) -> str:
    """Human-readable description of where config is loaded from."""
    user_path = _resolve_user_path(path)
    if user_path is not None:
        return f"{user_path} (overriding defaults)"
    return f"{DEFAULTS_PATH} (package defaults)"


__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULTS_PATH",
    "deep_merge",
    "load_config",
    "load_config_dict",
    "get_config_source",
]
