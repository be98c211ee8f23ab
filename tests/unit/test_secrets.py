"""
Unit tests for encrypted credential storage.
"""

from pathlib import Path

import pytest
from cryptography.fernet import Fernet

from streamgate.config import ProvidersConfig
from streamgate.providers import GroqAdaptor
from streamgate.secrets import DecryptionError, SecretsManager, provider_env_vars


class TestSecretsManager:
    """Tests for SecretsManager."""

    def test_set_and_get_secret(self, temp_dir: Path):
        """Test storing and retrieving a secret."""
        secrets = SecretsManager(secrets_dir=temp_dir / "secrets")
        secrets.set("groq", "gsk-test-123")

        assert secrets.get("groq") == "gsk-test-123"
        assert b"gsk-test-123" not in (temp_dir / "secrets" / "groq.enc").read_bytes()

    def test_get_nonexistent_secret(self, temp_dir: Path):
        """Test getting a secret that doesn't exist."""
        assert SecretsManager(secrets_dir=temp_dir / "secrets").get("openai") is None

    def test_delete_secret(self, temp_dir: Path):
        """Test deleting a secret."""
        secrets = SecretsManager(secrets_dir=temp_dir / "secrets")
        secrets.set("openai", "sk")

        assert secrets.delete("openai") is True
        assert secrets.get("openai") is None
        assert secrets.delete("openai") is False

    def test_list_secrets(self, temp_dir: Path):
        """Test listing stored names."""
        secrets = SecretsManager(secrets_dir=temp_dir / "secrets")
        assert secrets.list() == []

        secrets.set("openai", "key1")
        secrets.set("anthropic", "key2")
        assert secrets.list() == ["anthropic", "openai"]

    def test_default_dir_under_home(self, streamgate_home: Path):
        """Test that secrets default to STREAMGATE_HOME/secrets."""
        assert SecretsManager().secrets_dir == streamgate_home.resolve() / "secrets"

    def test_master_key_change(self, temp_dir: Path):
        """Test that a replaced master key makes secrets unreadable."""
        secrets_dir = temp_dir / "secrets"
        SecretsManager(secrets_dir=secrets_dir).set("groq", "gsk")
        (secrets_dir / "master.key").write_bytes(Fernet.generate_key())

        with pytest.raises(DecryptionError):
            SecretsManager(secrets_dir=secrets_dir).get("groq")

    def test_env_var_names(self, temp_dir: Path):
        """Test the provider -> variable mapping."""
        secrets = SecretsManager(secrets_dir=temp_dir)
        assert secrets.get_env_var_name("Groq") == "GROQ_API_KEY"
        assert secrets.get_env_var_name("huggingface") == "HUGGINGFACE_API_KEY"
        assert secrets.get_env_var_name("mistral") == "MISTRAL_API_KEY"

        renamed = provider_env_vars(
            ProvidersConfig.model_validate({"openai": {"api_key_env": "OAI_KEY"}})
        )
        assert renamed["openai"] == "OAI_KEY"

    def test_load_to_env(self, temp_dir: Path):
        """Test exporting stored keys without clobbering existing ones."""
        environ = {"OPENAI_API_KEY": "from-shell"}
        secrets = SecretsManager(secrets_dir=temp_dir / "secrets", environ=environ)
        secrets.set("openai", "stored-openai")
        secrets.set("groq", "stored-groq")

        assert secrets.load_all_to_env() == {"groq": True, "openai": True}
        assert environ == {"OPENAI_API_KEY": "from-shell", "GROQ_API_KEY": "stored-groq"}

    def test_loaded_key_enables_adaptor(self, temp_dir: Path):
        """Test that an exported secret makes the backend available."""
        environ: dict[str, str] = {}
        secrets = SecretsManager(secrets_dir=temp_dir / "secrets", environ=environ)
        secrets.set("groq", "gsk")

        adaptor = GroqAdaptor(environ=environ)
        assert adaptor.is_available() is False
        secrets.load_to_env("groq")
        assert adaptor.is_available() is True
