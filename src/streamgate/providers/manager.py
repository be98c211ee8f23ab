"""
Gateway facade for streamgate.

Main entry point for callers: route a conversation to the best available
provider, report provider status, and adjust the selection policy at
runtime.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from streamgate.config.schema import AdapterConfig, AdapterConfigUpdate, Config, ProvidersConfig
from streamgate.providers.base import ProviderAdaptor
from streamgate.providers.events import (
    CompositeEventReporter,
    GatewayEvent,
    GatewayEventReporter,
    GatewayEventType,
    LoggingEventReporter,
)
from streamgate.providers.fallback import FailoverController, select_primary
from streamgate.providers.models import ChatMessage, ProviderStatus, StreamOutcome
from streamgate.providers.registry import ProviderRegistry, build_default_registry
from streamgate.providers.status import format_setup_instructions, get_provider_status

logger = logging.getLogger(__name__)


def coerce_messages(messages: Sequence[ChatMessage | Mapping[str, Any]]) -> list[ChatMessage]:
    """
    Accept ChatMessage objects or {"role", "content"} dicts.

    Raises:
        ValueError: If a role is not user, assistant, or system.
    """
    return [
        message if isinstance(message, ChatMessage) else ChatMessage.from_dict(dict(message))
        for message in messages
    ]


class Gateway:
    """
    Multi-provider streaming gateway.

    The registry is fixed for the gateway's lifetime. The selection policy
    (AdapterConfig) is immutable and replaced wholesale by configure(), so
    a request in flight always sees one complete policy.
    """

    def __init__(
        self,
        registry: ProviderRegistry | None = None,
        config: AdapterConfig | None = None,
        reporter: GatewayEventReporter | None = None,
        providers_config: ProvidersConfig | None = None,
    ):
        """
        Initialize the gateway.

        Args:
            registry: Adaptors by name. Built from providers_config if omitted.
            config: Selection policy. Defaults to AdapterConfig().
            reporter: Receives routing events. Defaults to logging.
            providers_config: Backend settings, used for the default registry
                and setup instructions.
        """
        self.providers_config = providers_config or ProvidersConfig()
        self.registry = registry or build_default_registry(self.providers_config)
        self._config = config or AdapterConfig()
        self.reporter = reporter or LoggingEventReporter()

    @classmethod
    def from_config(cls, config: Config) -> "Gateway":
        """Build a gateway from the loaded application config."""
        reporter: GatewayEventReporter = LoggingEventReporter()
        if config.audit_log.enable:
            from streamgate.audit import get_audit_logger
            from streamgate.providers.events import AuditEventReporter

            reporter = CompositeEventReporter(
                reporter, AuditEventReporter(get_audit_logger(config.audit_log))
            )

        return cls(
            config=config.gateway,
            reporter=reporter,
            providers_config=config.providers,
        )

    @property
    def config(self) -> AdapterConfig:
        """The current selection policy."""
        return self._config

    def configure(
        self,
        update: AdapterConfigUpdate | None = None,
        **fields: Any,
    ) -> AdapterConfig:
        """
        Replace the selection policy by shallow-merging an update.

        Fields not present in the update keep their current value.

        Args:
            update: Partial config. Alternatively pass fields as keywords.

        Returns:
            The new policy.
        """
        if update is None:
            update = AdapterConfigUpdate(**fields)
        elif fields:
            raise TypeError("Pass either an AdapterConfigUpdate or keyword fields, not both")

        new_config = self._config.merge(update)
        self._config = new_config

        changes = update.changes()
        if changes:
            try:
                self.reporter.report(
                    GatewayEvent(
                        type=GatewayEventType.CONFIG_CHANGED,
                        data={"changed": sorted(changes)},
                    )
                )
            except Exception as e:
                logger.warning(f"Event reporter failed (non-fatal): {e}")

        return new_config

    def get_available_provider(self) -> ProviderAdaptor | None:
        """First preferred provider that is enabled and available, if any."""
        name = select_primary(self._config, self.registry)
        return self.registry.get(name) if name else None

    def get_provider_status(self) -> list[ProviderStatus]:
        """Name, availability, cost, and enabled flag for every provider."""
        return get_provider_status(self.registry, self._config)

    async def stream_chat(
        self,
        messages: Sequence[ChatMessage | Mapping[str, Any]],
    ) -> StreamOutcome:
        """
        Stream a chat response from the best available provider.

        Provider failures before streaming are absorbed by failover; this
        always returns an outcome. Errors after streaming has started are
        raised by the returned stream itself.

        Args:
            messages: Conversation in order.

        Returns:
            StreamOutcome with the chunk stream, provider name, and cost tier.
        """
        controller = FailoverController(self.registry, self._config, self.reporter)
        outcome = await controller.run(coerce_messages(messages))
        logger.info(f"Using AI provider: {outcome.provider_name} ({outcome.cost_tier})")
        return outcome

    def get_setup_instructions(self) -> str:
        """Environment variable help text."""
        return format_setup_instructions(self.providers_config)

    async def aclose(self) -> None:
        """Close transport resources held by the adaptors."""
        await self.registry.aclose()


# Singleton instance
_gateway: Gateway | None = None


def get_gateway(reload: bool = False) -> Gateway:
    """
    Get the global gateway instance.

    Args:
        reload: Force recreation from freshly loaded config.
    """
    global _gateway

    if _gateway is None or reload:
        from streamgate.config import get_config

        _gateway = Gateway.from_config(get_config(reload=reload))

    return _gateway


def clear_gateway() -> None:
    """Clear the global gateway instance."""
    global _gateway
    _gateway = None
