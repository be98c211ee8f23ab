"""
Provider exceptions for streamgate.

Pre-stream errors (raised before a chunk sequence exists) are caught by the
failover controller and turned into a selection-advance. Mid-stream errors
surface on the stream the caller already holds.
"""

from enum import Enum

import anthropic
import httpx
import openai


class FailureType(Enum):
    """Classification of provider failures for reporting."""

    CONFIG_ERROR = "config_error"
    HTTP_ERROR = "http_error"
    PROTOCOL_ERROR = "protocol_error"
    NETWORK_ERROR = "network_error"
    STREAM_ERROR = "stream_error"
    UNKNOWN = "unknown"


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.provider = provider


class ConfigError(ProviderError):
    """Required credential is absent."""

    pass


class UpstreamHTTPError(ProviderError):
    """Backend answered with a non-success HTTP status while connecting."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, provider)
        self.status_code = status_code


class UpstreamProtocolError(ProviderError):
    """Backend returned a payload that could not be interpreted."""

    pass


class NetworkError(ProviderError):
    """Connection-level failure (refused, reset, timeout)."""

    pass


class UpstreamStreamError(ProviderError):
    """Backend reported an error after output had started."""

    pass


def classify_error(error: BaseException) -> FailureType:
    """
    Classify an exception into a failure type.

    Understands this package's taxonomy plus the transport exceptions of
    httpx and the openai / anthropic SDKs.

    Args:
        error: The exception to classify.

    Returns:
        The failure type classification.
    """
    if isinstance(error, ConfigError):
        return FailureType.CONFIG_ERROR
    if isinstance(error, UpstreamHTTPError):
        return FailureType.HTTP_ERROR
    if isinstance(error, UpstreamProtocolError):
        return FailureType.PROTOCOL_ERROR
    if isinstance(error, NetworkError):
        return FailureType.NETWORK_ERROR
    if isinstance(error, UpstreamStreamError):
        return FailureType.STREAM_ERROR

    if isinstance(error, httpx.HTTPStatusError):
        return FailureType.HTTP_ERROR
    if isinstance(error, httpx.TransportError):
        return FailureType.NETWORK_ERROR

    # Both SDKs share the same exception layout.
    for sdk in (openai, anthropic):
        if isinstance(error, sdk.APIConnectionError):
            return FailureType.NETWORK_ERROR
        if isinstance(error, sdk.AuthenticationError):
            return FailureType.CONFIG_ERROR
        if isinstance(error, sdk.APIStatusError):
            return FailureType.HTTP_ERROR
        if isinstance(error, sdk.APIResponseValidationError):
            return FailureType.PROTOCOL_ERROR

    return FailureType.UNKNOWN
