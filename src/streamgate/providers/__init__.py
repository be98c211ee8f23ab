"""
streamgate provider layer.

Unified streaming access to several chat backends with:
- Native SDK backends (OpenAI, Anthropic)
- Raw SSE and single-shot HTTP backends (Groq, Hugging Face)
- An always-available mock backend
- Ordered failover with a guaranteed terminal fallback
"""

from streamgate.providers.anthropic_sdk import AnthropicAdaptor
from streamgate.providers.base import CredentialedAdaptor, ProviderAdaptor, iter_events
from streamgate.providers.events import (
    AuditEventReporter,
    CompositeEventReporter,
    GatewayEvent,
    GatewayEventReporter,
    GatewayEventType,
    LoggingEventReporter,
    RecordingEventReporter,
)
from streamgate.providers.exceptions import (
    ConfigError,
    FailureType,
    NetworkError,
    ProviderError,
    UpstreamHTTPError,
    UpstreamProtocolError,
    UpstreamStreamError,
    classify_error,
)
from streamgate.providers.fallback import (
    DEMO_COST,
    EMERGENCY_COST,
    ControllerState,
    FailoverController,
    FallbackAttempt,
    select_primary,
)
from streamgate.providers.groq import GroqAdaptor
from streamgate.providers.huggingface import HuggingFaceAdaptor
from streamgate.providers.manager import Gateway, clear_gateway, get_gateway
from streamgate.providers.mock import MockAdaptor
from streamgate.providers.models import (
    ChatMessage,
    MessageRole,
    ProviderStatus,
    StreamEnd,
    StreamEvent,
    StreamFailure,
    StreamOutcome,
    TextDelta,
    collapse_system,
)
from streamgate.providers.openai_sdk import OpenAIAdaptor
from streamgate.providers.registry import ProviderRegistry, build_default_registry
from streamgate.providers.status import (
    active_provider,
    format_setup_instructions,
    get_provider_status,
    only_mock_available,
)

__all__ = [
    # Gateway
    "Gateway",
    "get_gateway",
    "clear_gateway",
    # Models
    "ChatMessage",
    "MessageRole",
    "StreamOutcome",
    "ProviderStatus",
    "TextDelta",
    "StreamEnd",
    "StreamFailure",
    "StreamEvent",
    "collapse_system",
    # Adaptors
    "ProviderAdaptor",
    "CredentialedAdaptor",
    "AnthropicAdaptor",
    "OpenAIAdaptor",
    "GroqAdaptor",
    "HuggingFaceAdaptor",
    "MockAdaptor",
    "iter_events",
    # Registry / status
    "ProviderRegistry",
    "build_default_registry",
    "get_provider_status",
    "active_provider",
    "only_mock_available",
    "format_setup_instructions",
    # Failover
    "FailoverController",
    "FallbackAttempt",
    "ControllerState",
    "select_primary",
    "DEMO_COST",
    "EMERGENCY_COST",
    # Events
    "GatewayEvent",
    "GatewayEventType",
    "GatewayEventReporter",
    "LoggingEventReporter",
    "RecordingEventReporter",
    "AuditEventReporter",
    "CompositeEventReporter",
    # Exceptions
    "ProviderError",
    "ConfigError",
    "UpstreamHTTPError",
    "UpstreamProtocolError",
    "NetworkError",
    "UpstreamStreamError",
    "FailureType",
    "classify_error",
]
