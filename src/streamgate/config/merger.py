"""
Configuration merger for streamgate.

Deep merge of layered config dictionaries, with +key / -key list operations
so a user file can extend or prune a default provider list.
"""

from typing import Any


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries with list operation support.

    Merge rules:
    - Scalar values: override replaces base
    - Dicts: recursive deep merge
    - Lists (default): override replaces base
    - '+key' with a list: append unseen items to base list
    - '-key' with a list: remove items from base list
    - None value: remove key from result

    Args:
        base: Base configuration dictionary.
        override: Override configuration dictionary.

    Returns:
        Merged configuration dictionary.

    Examples:
        >>> deep_merge({"gateway": {"preferred_providers": ["openai"]}},
        ...            {"gateway": {"+preferred_providers": ["groq"]}})
        {'gateway': {'preferred_providers': ['openai', 'groq']}}
    """
    result = base.copy()

    for key, value in override.items():
        if key.startswith("+") and isinstance(value, list):
            actual_key = key[1:]
            current = result.get(actual_key)
            if isinstance(current, (list, tuple)):
                result[actual_key] = list(current) + [item for item in value if item not in current]
            else:
                result[actual_key] = value

        elif key.startswith("-") and isinstance(value, list):
            actual_key = key[1:]
            current = result.get(actual_key)
            if isinstance(current, (list, tuple, set, frozenset)):
                result[actual_key] = [item for item in current if item not in value]

        elif value is None:
            result.pop(key, None)

        elif isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)

        else:
            result[key] = value

    return result


def get_nested_value(config: dict[str, Any], key_path: str) -> Any:
    """
    Get a nested value by dot-separated path.

    Returns None if any segment is missing.

    Examples:
        >>> get_nested_value({"gateway": {"fallback_to_free": True}}, "gateway.fallback_to_free")
        True
    """
    current: Any = config
    for key in key_path.split("."):
        if isinstance(current, dict) and key in current:
            current = current[key]
        else:
            return None
    return current


def set_nested_value(config: dict[str, Any], key_path: str, value: Any) -> dict[str, Any]:
    """
    Set a nested value by dot-separated path, creating dicts as needed.

    Returns:
        The same (mutated) configuration dictionary.
    """
    keys = key_path.split(".")
    current = config

    for key in keys[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]

    current[keys[-1]] = value
    return config
