"""
Configuration layer for streamgate.

Pydantic schema, YAML loading, and environment overrides.
"""

from streamgate.config.loader import (
    ConfigurationError,
    apply_env_overrides,
    clear_config_cache,
    env_key_to_path,
    get_config,
    load_config,
    load_yaml_file,
    parse_env_value,
    save_yaml_file,
)
from streamgate.config.merger import (
    deep_merge,
    get_nested_value,
    set_nested_value,
)
from streamgate.config.schema import (
    AdapterConfig,
    AdapterConfigUpdate,
    AnthropicSettings,
    AuditLogConfig,
    Config,
    GroqSettings,
    HuggingFaceSettings,
    MockSettings,
    OpenAISettings,
    ProviderSettings,
    ProvidersConfig,
)

__all__ = [
    # Schema
    "Config",
    "AdapterConfig",
    "AdapterConfigUpdate",
    "ProviderSettings",
    "ProvidersConfig",
    "OpenAISettings",
    "AnthropicSettings",
    "GroqSettings",
    "HuggingFaceSettings",
    "MockSettings",
    "AuditLogConfig",
    # Loader
    "ConfigurationError",
    "load_config",
    "get_config",
    "clear_config_cache",
    "load_yaml_file",
    "save_yaml_file",
    "apply_env_overrides",
    "env_key_to_path",
    "parse_env_value",
    # Merger
    "deep_merge",
    "get_nested_value",
    "set_nested_value",
]
