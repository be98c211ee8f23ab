"""
Encrypted credential storage for streamgate.

Provider API keys can be kept in ~/.streamgate/secrets instead of a shell
profile. Stored keys are exported into the environment at startup, which
is where every adaptor looks for its credential. Keys already present in
the environment always win.
"""

import logging
import os
from collections.abc import MutableMapping
from pathlib import Path

from cryptography.fernet import Fernet, InvalidToken

from streamgate.config.schema import ProvidersConfig

logger = logging.getLogger(__name__)

MASTER_KEY_FILE = "master.key"
SECRET_SUFFIX = ".enc"


class SecretsError(Exception):
    """Base exception for secrets-related errors."""

    pass


class DecryptionError(SecretsError):
    """Stored secret could not be decrypted."""

    pass


def provider_env_vars(providers: ProvidersConfig | None = None) -> dict[str, str]:
    """Map provider name -> credential environment variable."""
    providers = providers or ProvidersConfig()
    return {
        "openai": providers.openai.api_key_env,
        "anthropic": providers.anthropic.api_key_env,
        "groq": providers.groq.api_key_env,
        "huggingface": providers.huggingface.api_key_env,
    }


class SecretsManager:
    """
    Fernet-encrypted secrets, one file per provider.

    The master key lives next to the secrets with owner-only permissions.
    """

    def __init__(
        self,
        secrets_dir: Path | None = None,
        providers: ProvidersConfig | None = None,
        environ: MutableMapping[str, str] | None = None,
    ):
        """
        Initialize the secrets manager.

        Args:
            secrets_dir: Where secrets are stored. Defaults to ~/.streamgate/secrets/
            providers: Backend settings, for credential variable names.
            environ: Environment to export into. Defaults to os.environ.
        """
        if secrets_dir is None:
            from streamgate.storage.paths import get_secrets_dir

            secrets_dir = get_secrets_dir()

        self.secrets_dir = Path(secrets_dir)
        self.env_vars = provider_env_vars(providers)
        self._environ = environ
        self._fernet: Fernet | None = None

    @property
    def environ(self) -> MutableMapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def _ensure_secrets_dir(self) -> None:
        self.secrets_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
        try:
            self.secrets_dir.chmod(0o700)
        except OSError:
            logger.warning(f"Could not set permissions on secrets directory: {self.secrets_dir}")

    def _get_fernet(self) -> Fernet:
        if self._fernet is None:
            self._ensure_secrets_dir()
            key_path = self.secrets_dir / MASTER_KEY_FILE
            if key_path.exists():
                key = key_path.read_bytes()
            else:
                key = Fernet.generate_key()
                key_path.write_bytes(key)
                try:
                    key_path.chmod(0o600)
                except OSError:
                    logger.warning("Could not set permissions on master key file")
                logger.info("Generated new master key")
            self._fernet = Fernet(key)
        return self._fernet

    def _path(self, name: str) -> Path:
        return self.secrets_dir / f"{name}{SECRET_SUFFIX}"

    def set(self, name: str, value: str) -> None:
        """Encrypt and store a secret."""
        path = self._path(name)
        path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        path.write_bytes(self._get_fernet().encrypt(value.encode()))
        try:
            path.chmod(0o600)
        except OSError:
            logger.warning(f"Could not set permissions on secret file: {name}")
        logger.info(f"Stored secret: {name}")

    def get(self, name: str) -> str | None:
        """
        Retrieve a decrypted secret.

        Returns:
            The secret value, or None if not stored.

        Raises:
            DecryptionError: If the master key no longer matches.
        """
        path = self._path(name)
        if not path.exists():
            return None

        try:
            return self._get_fernet().decrypt(path.read_bytes()).decode()
        except InvalidToken as e:
            raise DecryptionError(
                f"Failed to decrypt secret '{name}'. Master key may have changed."
            ) from e

    def delete(self, name: str) -> bool:
        """Delete a secret. Returns False if it did not exist."""
        path = self._path(name)
        if not path.exists():
            return False
        path.unlink()
        logger.info(f"Deleted secret: {name}")
        return True

    def list(self) -> list[str]:
        """Names of all stored secrets."""
        if not self.secrets_dir.exists():
            return []
        return sorted(p.stem for p in self.secrets_dir.glob(f"*{SECRET_SUFFIX}") if p.is_file())

    def get_env_var_name(self, provider: str) -> str:
        """Credential variable for a provider (<NAME>_API_KEY if unknown)."""
        return self.env_vars.get(provider.lower(), f"{provider.upper()}_API_KEY")

    def load_to_env(self, name: str) -> bool:
        """
        Export one stored secret to its environment variable.

        Returns:
            True if the variable is set afterwards.
        """
        env_var = self.get_env_var_name(name)
        if self.environ.get(env_var):
            logger.debug(f"{env_var} already set in environment, skipping")
            return True

        value = self.get(name)
        if not value:
            return False

        self.environ[env_var] = value
        logger.debug(f"Loaded secret {name} into {env_var}")
        return True

    def load_all_to_env(self) -> dict[str, bool]:
        """Export every stored secret. Returns name -> loaded."""
        return {name: self.load_to_env(name) for name in self.list()}
