"""
Unit tests for CLI commands.
"""

import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from streamgate import __version__
from streamgate.cli.app import app
from streamgate.secrets import SecretsManager


@pytest.fixture(autouse=True)
def instant_mock(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make the demo provider type without delay."""
    monkeypatch.setenv("STREAMGATE_PROVIDERS__MOCK__TOKEN_DELAY", "0")


def test_version(cli_runner: CliRunner) -> None:
    """Test --version flag."""
    result = cli_runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help(cli_runner: CliRunner) -> None:
    """Test --help flag."""
    result = cli_runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("chat", "status", "config", "secrets"):
        assert command in result.output


class TestChat:
    """Tests for streamgate chat."""

    def test_demo_reply(self, cli_runner: CliRunner) -> None:
        """Test that a bare environment still answers via the demo provider."""
        result = cli_runner.invoke(app, ["chat", "hello"])
        assert result.exit_code == 0
        assert "Provider: mock" in result.output
        assert "free (demo)" in result.output

    def test_json_output(self, cli_runner: CliRunner) -> None:
        """Test the collected JSON form."""
        result = cli_runner.invoke(app, ["chat", "hello", "--system", "be brief", "--json"])
        assert result.exit_code == 0

        payload = json.loads(result.stdout)
        assert payload["provider"] == "mock"
        assert payload["cost"] == "free (demo)"
        assert payload["response"]

    def test_prefer_mock(self, cli_runner: CliRunner) -> None:
        """Test that --prefer can select the mock deliberately."""
        result = cli_runner.invoke(app, ["chat", "hi", "--prefer", "mock", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["cost"] == "free (demo only)"

    def test_disabled_preference(self, cli_runner: CliRunner) -> None:
        """Test that a preferred but disabled provider is not used."""
        result = cli_runner.invoke(
            app, ["chat", "hi", "--prefer", "mock", "--enable", "groq", "--no-fallback", "--json"]
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["cost"] == "free (demo)"

    def test_audit_log_written(
        self, cli_runner: CliRunner, streamgate_home: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that buffered audit events reach disk when the command ends."""
        monkeypatch.setenv("STREAMGATE_AUDIT_LOG__ENABLE", "true")

        result = cli_runner.invoke(app, ["chat", "hello"])
        assert result.exit_code == 0

        lines = (streamgate_home / "audit.jsonl").read_text().splitlines()
        events = [json.loads(line)["event_type"] for line in lines]
        assert events[0] == "request_start"
        assert events[-1] == "request_routed"

    def test_broken_config(self, cli_runner: CliRunner, streamgate_home: Path) -> None:
        """Test that an invalid config file is reported, not raised."""
        (streamgate_home / "config.yaml").write_text("gateway:\n  fallback_to_free: maybe\n")
        result = cli_runner.invoke(app, ["chat", "hi"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output


class TestStatus:
    """Tests for streamgate status."""

    def test_table(self, cli_runner: CliRunner) -> None:
        """Test the provider table with no credentials."""
        result = cli_runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "groq" in result.output
        assert "Only the demo provider is available" in result.output

    def test_json(self, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the JSON form reflects credentials."""
        monkeypatch.setenv("HUGGINGFACE_API_KEY", "hf-test")
        result = cli_runner.invoke(app, ["status", "--json"])
        assert result.exit_code == 0

        payload = json.loads(result.stdout)
        rows = {row["name"]: row for row in payload["providers"]}
        assert rows["huggingface"]["available"] is True
        assert rows["openai"]["available"] is False
        assert payload["active"] == "huggingface"

    def test_setup(self, cli_runner: CliRunner) -> None:
        """Test setup instructions."""
        result = cli_runner.invoke(app, ["status", "setup"])
        assert result.exit_code == 0
        assert "GROQ_API_KEY" in result.output
        assert "OPENAI_MODEL" in result.output


class TestConfigCommands:
    """Tests for streamgate config."""

    def test_path(self, cli_runner: CliRunner, streamgate_home: Path) -> None:
        """Test printing the config location."""
        result = cli_runner.invoke(app, ["config", "path"])
        assert result.exit_code == 0
        assert "config.yaml" in result.stdout

    def test_set_and_show(self, cli_runner: CliRunner, streamgate_home: Path) -> None:
        """Test writing a value and reading it back."""
        result = cli_runner.invoke(app, ["config", "set", "gateway.fallback_to_free", "false"])
        assert result.exit_code == 0

        saved = yaml.safe_load((streamgate_home / "config.yaml").read_text())
        assert saved == {"gateway": {"fallback_to_free": False}}

        result = cli_runner.invoke(app, ["config", "show", "gateway", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["fallback_to_free"] is False

    def test_set_list_value(self, cli_runner: CliRunner, streamgate_home: Path) -> None:
        """Test that comma-separated values become lists."""
        result = cli_runner.invoke(
            app, ["config", "set", "gateway.preferred_providers", "groq,huggingface"]
        )
        assert result.exit_code == 0

        saved = yaml.safe_load((streamgate_home / "config.yaml").read_text())
        assert saved["gateway"]["preferred_providers"] == ["groq", "huggingface"]

    def test_set_invalid_key(self, cli_runner: CliRunner, streamgate_home: Path) -> None:
        """Test that unknown gateway fields are refused."""
        result = cli_runner.invoke(app, ["config", "set", "gateway.fallback_to_fre", "false"])
        assert result.exit_code == 1
        assert not (streamgate_home / "config.yaml").exists()

    def test_show_missing_section(self, cli_runner: CliRunner) -> None:
        """Test an unknown section."""
        result = cli_runner.invoke(app, ["config", "show", "nope"])
        assert result.exit_code == 1

    def test_show_yaml(self, cli_runner: CliRunner) -> None:
        """Test the default YAML view."""
        result = cli_runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "preferred_providers" in result.output


class TestSecretsCommands:
    """Tests for streamgate secrets."""

    def test_set_list_delete(self, cli_runner: CliRunner, streamgate_home: Path) -> None:
        """Test the full key lifecycle."""
        result = cli_runner.invoke(app, ["secrets", "set", "groq", "--value", "gsk-test"])
        assert result.exit_code == 0
        assert SecretsManager(secrets_dir=streamgate_home / "secrets").get("groq") == "gsk-test"

        result = cli_runner.invoke(app, ["secrets", "list"])
        assert result.exit_code == 0
        assert "groq" in result.output
        assert "GROQ_API_KEY" in result.output

        result = cli_runner.invoke(app, ["secrets", "delete", "groq"])
        assert result.exit_code == 0
        assert SecretsManager(secrets_dir=streamgate_home / "secrets").list() == []

    def test_set_prompts(self, cli_runner: CliRunner, streamgate_home: Path) -> None:
        """Test hidden prompt input."""
        result = cli_runner.invoke(app, ["secrets", "set", "openai"], input="sk-prompted\n")
        assert result.exit_code == 0
        assert SecretsManager(secrets_dir=streamgate_home / "secrets").get("openai") == (
            "sk-prompted"
        )

    def test_delete_missing(self, cli_runner: CliRunner) -> None:
        """Test deleting a key that was never stored."""
        result = cli_runner.invoke(app, ["secrets", "delete", "groq"])
        assert result.exit_code == 1

    def test_stored_key_enables_provider(
        self, cli_runner: CliRunner, streamgate_home: Path
    ) -> None:
        """Test that stored keys are exported before commands run."""
        SecretsManager(secrets_dir=streamgate_home / "secrets").set("groq", "gsk")

        result = cli_runner.invoke(app, ["status", "--json"])
        assert result.exit_code == 0
        rows = {row["name"]: row for row in json.loads(result.stdout)["providers"]}
        assert rows["groq"]["available"] is True
