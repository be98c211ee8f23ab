"""
Unit tests for status reporting and error classification.
"""

import anthropic
import httpx
import openai
import pytest

from streamgate.config import AdapterConfig, ProvidersConfig
from streamgate.providers import (
    ConfigError,
    FailureType,
    NetworkError,
    ProviderStatus,
    UpstreamHTTPError,
    UpstreamProtocolError,
    UpstreamStreamError,
    active_provider,
    build_default_registry,
    classify_error,
    format_setup_instructions,
    get_provider_status,
    only_mock_available,
)


class TestProviderStatus:
    """Tests for the status projection."""

    def test_no_credentials(self):
        """Test that only the mock is available without keys."""
        statuses = get_provider_status(build_default_registry(environ={}), AdapterConfig())

        assert [s.name for s in statuses] == ["anthropic", "openai", "groq", "huggingface", "mock"]
        assert [s.name for s in statuses if s.available] == ["mock"]
        assert only_mock_available(statuses)
        assert active_provider(statuses) == "mock"

    def test_with_credentials(self):
        """Test rows for configured providers."""
        registry = build_default_registry(environ={"GROQ_API_KEY": "g", "OPENAI_API_KEY": "o"})
        config = AdapterConfig(enabled_providers=frozenset({"groq"}))
        rows = {s.name: s for s in get_provider_status(registry, config)}

        assert rows["groq"] == ProviderStatus("groq", True, "free (rate limited)", True)
        assert rows["openai"] == ProviderStatus("openai", True, "paid", False)
        assert not only_mock_available(list(rows.values()))

    def test_active_provider_is_registry_order(self):
        """Test that the first available row is reported as active."""
        statuses = [
            ProviderStatus("a", False, "paid", True),
            ProviderStatus("b", True, "paid", True),
            ProviderStatus("mock", True, "free (demo only)", True),
        ]
        assert active_provider(statuses) == "b"
        assert active_provider([]) == "mock"

    def test_setup_instructions_follow_settings(self):
        """Test that renamed credential variables show up in the help."""
        providers = ProvidersConfig.model_validate({"groq": {"api_key_env": "MY_GROQ"}})
        text = format_setup_instructions(providers)
        assert "MY_GROQ=" in text
        assert "CLAUDE_MODEL=claude-3-5-sonnet-20241022" in text


def _response(status):
    return httpx.Response(status, request=httpx.Request("POST", "https://api.example.com"))


class TestClassifyError:
    """Tests for classify_error."""

    @pytest.mark.parametrize(
        "error,expected",
        [
            (ConfigError("no key"), FailureType.CONFIG_ERROR),
            (UpstreamHTTPError("500", status_code=500), FailureType.HTTP_ERROR),
            (UpstreamProtocolError("bad json"), FailureType.PROTOCOL_ERROR),
            (NetworkError("refused"), FailureType.NETWORK_ERROR),
            (UpstreamStreamError("cut"), FailureType.STREAM_ERROR),
            (httpx.ConnectError("refused"), FailureType.NETWORK_ERROR),
            (ValueError("other"), FailureType.UNKNOWN),
        ],
    )
    def test_taxonomy(self, error, expected):
        """Test package and httpx exceptions."""
        assert classify_error(error) is expected

    def test_sdk_errors(self):
        """Test SDK exceptions, including auth before generic status."""
        request = httpx.Request("POST", "https://api.example.com")
        assert classify_error(openai.APIConnectionError(request=request)) is (
            FailureType.NETWORK_ERROR
        )
        assert classify_error(
            anthropic.AuthenticationError("bad key", response=_response(401), body=None)
        ) is FailureType.CONFIG_ERROR
        assert classify_error(
            openai.APIStatusError("server", response=_response(500), body=None)
        ) is FailureType.HTTP_ERROR

    def test_http_status_error(self):
        """Test httpx status errors."""
        response = _response(502)
        error = httpx.HTTPStatusError("bad gateway", request=response.request, response=response)
        assert classify_error(error) is FailureType.HTTP_ERROR
