"""
Provider registry for streamgate.

A fixed name -> adaptor mapping built once at startup. The mock adaptor is
always present because it is the failover controller's last resort.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping

import httpx

from streamgate.config.schema import ProvidersConfig
from streamgate.providers.anthropic_sdk import AnthropicAdaptor
from streamgate.providers.base import ProviderAdaptor
from streamgate.providers.groq import GroqAdaptor
from streamgate.providers.huggingface import HuggingFaceAdaptor
from streamgate.providers.mock import MockAdaptor
from streamgate.providers.openai_sdk import OpenAIAdaptor

logger = logging.getLogger(__name__)

MOCK_PROVIDER = MockAdaptor.name


class ProviderRegistry:
    """Immutable, ordered collection of adaptors keyed by name."""

    def __init__(self, adaptors: Iterable[ProviderAdaptor]):
        providers: dict[str, ProviderAdaptor] = {}
        for adaptor in adaptors:
            if not adaptor.name:
                raise ValueError(f"Adaptor {adaptor!r} has no name")
            if adaptor.name in providers:
                raise ValueError(f"Duplicate provider name: {adaptor.name}")
            providers[adaptor.name] = adaptor

        if MOCK_PROVIDER not in providers:
            providers[MOCK_PROVIDER] = MockAdaptor()

        self._providers = providers

    def get(self, name: str) -> ProviderAdaptor | None:
        return self._providers.get(name)

    @property
    def mock(self) -> ProviderAdaptor:
        """The terminal fallback adaptor."""
        return self._providers[MOCK_PROVIDER]

    def names(self) -> list[str]:
        return list(self._providers)

    def items(self) -> list[tuple[str, ProviderAdaptor]]:
        return list(self._providers.items())

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __iter__(self) -> Iterator[ProviderAdaptor]:
        return iter(self._providers.values())

    def __len__(self) -> int:
        return len(self._providers)

    async def aclose(self) -> None:
        """Close transport resources of every adaptor."""
        for adaptor in self._providers.values():
            await adaptor.aclose()


def build_default_registry(
    providers: ProvidersConfig | None = None,
    environ: Mapping[str, str] | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ProviderRegistry:
    """
    Build the standard five-backend registry.

    Args:
        providers: Per-backend settings. Defaults to ProvidersConfig().
        environ: Credential source. Defaults to os.environ (read live).
        http_client: Shared client for the HTTP backends. Each backend
            creates its own if omitted.
    """
    providers = providers or ProvidersConfig()
    return ProviderRegistry(
        [
            AnthropicAdaptor(providers.anthropic, environ=environ),
            OpenAIAdaptor(providers.openai, environ=environ),
            GroqAdaptor(providers.groq, client=http_client, environ=environ),
            HuggingFaceAdaptor(providers.huggingface, client=http_client, environ=environ),
            MockAdaptor(providers.mock),
        ]
    )
