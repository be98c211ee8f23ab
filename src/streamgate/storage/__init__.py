"""Storage path helpers for streamgate."""

from streamgate.storage.paths import (
    get_audit_log_path,
    get_global_config_path,
    get_secrets_dir,
    get_streamgate_home,
)

__all__ = [
    "get_streamgate_home",
    "get_global_config_path",
    "get_secrets_dir",
    "get_audit_log_path",
]
