"""
Encrypted API key storage for streamgate.
"""

from streamgate.secrets.manager import (
    DecryptionError,
    SecretsError,
    SecretsManager,
    provider_env_vars,
)

__all__ = ["SecretsManager", "SecretsError", "DecryptionError", "provider_env_vars"]
