"""
Configuration loader for streamgate.

Loads and merges configuration from multiple sources:
1. Default values
2. Global config (~/.streamgate/config.yaml)
3. Environment variables (STREAMGATE_<SECTION>__<KEY>)
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from streamgate.config.merger import deep_merge, set_nested_value
from streamgate.config.schema import Config
from streamgate.storage.paths import get_global_config_path

ENV_PREFIX = "STREAMGATE_"

# Not configuration keys; consumed elsewhere.
_RESERVED_ENV = {"STREAMGATE_HOME"}


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed configuration dictionary (empty if the file does not exist).

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigurationError(f"Expected a mapping at the top of {path}")
    return content


def save_yaml_file(path: Path, config: dict[str, Any]) -> None:
    """
    Save a configuration dictionary to a YAML file.

    Raises:
        ConfigurationError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
    except OSError as e:
        raise ConfigurationError(f"Cannot write {path}: {e}") from e


def env_key_to_path(key: str) -> str:
    """
    Convert an environment variable name to a config key path.

    Double underscores separate nesting levels so that field names may
    contain single underscores:

        STREAMGATE_GATEWAY__FALLBACK_TO_FREE -> gateway.fallback_to_free
        STREAMGATE_PROVIDERS__GROQ__SSE_BUFFERING -> providers.groq.sse_buffering
    """
    return ".".join(part.lower() for part in key[len(ENV_PREFIX) :].split("__"))


def parse_env_value(value: str) -> Any:
    """
    Parse an environment variable value to the appropriate type.

    Returns:
        Parsed value (bool, int, float, list of strings, or string).
    """
    lowered = value.lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False

    if re.match(r"^-?\d+$", value):
        return int(value)

    if re.match(r"^-?\d+\.\d+$", value):
        return float(value)

    if "," in value:
        return [item.strip() for item in value.split(",") if item.strip()]

    return value


def apply_env_overrides(
    config: dict[str, Any],
    environ: dict[str, str] | None = None,
) -> dict[str, Any]:
    """
    Apply STREAMGATE_* environment variable overrides to configuration.

    Args:
        config: Configuration dictionary to modify.
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        Configuration with environment overrides applied.
    """
    environ = os.environ if environ is None else environ

    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX) or key in _RESERVED_ENV:
            continue
        config = set_nested_value(config, env_key_to_path(key), parse_env_value(value))

    return config


def load_config(
    config_path: Path | None = None,
    skip_env: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Args:
        config_path: Explicit config file. Defaults to the global config path.
        skip_env: Skip environment variable overrides.

    Returns:
        Merged and validated Config object.

    Raises:
        ConfigurationError: If configuration is invalid.
    """
    config_dict = Config().model_dump(mode="json")

    path = config_path or get_global_config_path()
    if path.exists():
        config_dict = deep_merge(config_dict, load_yaml_file(path))

    if not skip_env:
        config_dict = apply_env_overrides(config_dict)

    try:
        return Config.model_validate(config_dict)
    except Exception as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e


# Singleton for cached config
_cached_config: Config | None = None


def get_config(reload: bool = False) -> Config:
    """
    Get the global configuration instance.

    Uses a cached instance. Use reload=True to force a re-read.
    """
    global _cached_config

    if _cached_config is None or reload:
        _cached_config = load_config()

    return _cached_config


def clear_config_cache() -> None:
    """Clear the cached configuration."""
    global _cached_config
    _cached_config = None
