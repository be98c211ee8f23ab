"""
Path utilities for streamgate.

Provides consistent path resolution for configuration, secrets, and audit files.
"""

import os
from pathlib import Path


def get_streamgate_home() -> Path:
    """
    Get the streamgate home directory.

    Resolution order:
    1. STREAMGATE_HOME environment variable
    2. Default: ~/.streamgate

    Returns:
        Path to the streamgate home directory.
    """
    env_home = os.environ.get("STREAMGATE_HOME")
    if env_home:
        return Path(env_home).expanduser().resolve()
    return Path.home() / ".streamgate"


def get_global_config_path() -> Path:
    """
    Get the path to the global configuration file.

    Returns:
        Path to ~/.streamgate/config.yaml
    """
    return get_streamgate_home() / "config.yaml"


def get_secrets_dir() -> Path:
    """Get the encrypted secrets directory (~/.streamgate/secrets/)."""
    return get_streamgate_home() / "secrets"


def get_audit_log_path() -> Path:
    """Get the default audit log file (~/.streamgate/audit.jsonl)."""
    return get_streamgate_home() / "audit.jsonl"
