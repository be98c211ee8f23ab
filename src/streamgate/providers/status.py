"""
Provider status reporting.

Read-only projection of the registry for status pages and the CLI. Only
the cheap is_available() / get_cost() checks are used; nothing here
touches the network.
"""

from streamgate.config.schema import AdapterConfig, ProvidersConfig
from streamgate.providers.models import ProviderStatus
from streamgate.providers.registry import MOCK_PROVIDER, ProviderRegistry


def get_provider_status(
    registry: ProviderRegistry,
    config: AdapterConfig,
) -> list[ProviderStatus]:
    """Status row for every registered provider, in registry order."""
    return [
        ProviderStatus(
            name=name,
            available=adaptor.is_available(),
            cost=adaptor.get_cost(),
            enabled=config.is_enabled(name),
        )
        for name, adaptor in registry.items()
    ]


def active_provider(statuses: list[ProviderStatus]) -> str:
    """Name of the first available provider, or the mock backend."""
    for status in statuses:
        if status.available:
            return status.name
    return MOCK_PROVIDER


def only_mock_available(statuses: list[ProviderStatus]) -> bool:
    """True when no real backend has credentials configured."""
    available = [status.name for status in statuses if status.available]
    return available == [MOCK_PROVIDER]


def format_setup_instructions(providers: ProvidersConfig | None = None) -> str:
    """Environment variable help text for enabling real providers."""
    providers = providers or ProvidersConfig()
    return f"""
# AI Provider Setup Instructions
# Export any of these variables to enable a provider:

# FREE OPTIONS:
{providers.groq.api_key_env}=your_free_groq_key_here            # https://groq.com/
{providers.huggingface.api_key_env}=your_free_hf_key_here      # https://huggingface.co/settings/tokens

# PAID OPTIONS:
{providers.anthropic.api_key_env}=your_anthropic_key_here       # Claude models
{providers.anthropic.model_env}={providers.anthropic.default_model}   # Optional: model override
{providers.openai.api_key_env}=your_openai_key_here             # GPT models
{providers.openai.model_env}={providers.openai.default_model}   # Optional: model override

# Providers are tried in the order of gateway.preferred_providers.
# The mock provider is always available as a last resort.
"""
