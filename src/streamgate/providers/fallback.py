"""
Failover controller for streamgate.

Picks a backend for one request, moves down the preference list when a
backend fails before producing output, and finally falls back to the mock
backend so a request always gets a stream.
"""

import logging
from collections.abc import AsyncIterator, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum

from streamgate.config.schema import AdapterConfig
from streamgate.providers.base import ProviderAdaptor
from streamgate.providers.events import (
    GatewayEvent,
    GatewayEventReporter,
    GatewayEventType,
    LoggingEventReporter,
)
from streamgate.providers.exceptions import FailureType, classify_error
from streamgate.providers.mock import MockAdaptor
from streamgate.providers.models import ChatMessage, StreamOutcome
from streamgate.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)

# Cost labels for the terminal fallback, which is never a deliberate choice.
DEMO_COST = "free (demo)"
EMERGENCY_COST = "free (emergency fallback)"


class ControllerState(str, Enum):
    """Where a request is in the selection process."""

    SELECTING = "selecting"
    STREAMING = "streaming"
    FAILOVER_SCAN = "failover_scan"
    TERMINAL_FALLBACK = "terminal_fallback"
    SUCCESS = "success"


@dataclass
class FallbackAttempt:
    """Record of a provider that failed before streaming."""

    provider: str
    error: Exception
    failure_type: FailureType


def is_eligible(name: str, config: AdapterConfig, registry: ProviderRegistry) -> bool:
    """A provider is eligible when it is registered, enabled, and available."""
    if not config.is_enabled(name):
        return False

    adaptor = registry.get(name)
    if adaptor is None:
        return False

    try:
        return adaptor.is_available()
    except Exception as e:
        logger.warning(f"Availability check for {name} raised, treating as unavailable: {e}")
        return False


def select_primary(config: AdapterConfig, registry: ProviderRegistry) -> str | None:
    """
    First name in preferred_providers that is eligible.

    Returns:
        The provider name, or None if nothing qualifies.
    """
    for name in config.preferred_providers:
        if is_eligible(name, config, registry):
            return name
    return None


class FailoverController:
    """
    Runs the selection state machine for a single request.

    The config is captured at construction, so a concurrent configure()
    never changes the rules halfway through a request.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        config: AdapterConfig,
        reporter: GatewayEventReporter | None = None,
    ):
        self.registry = registry
        self.config = config
        self.reporter = reporter or LoggingEventReporter()
        self.state = ControllerState.SELECTING
        self.attempts: list[FallbackAttempt] = []

    async def run(self, messages: Sequence[ChatMessage]) -> StreamOutcome:
        """
        Route the request and return its outcome.

        Never raises for provider failures: the worst case is the mock
        backend's canned reply with an emergency cost label.
        """
        self._report(GatewayEventType.REQUEST_START, data={"message_count": len(messages)})

        primary = select_primary(self.config, self.registry)
        if primary is None:
            logger.info("No preferred provider is available, using demo fallback")
            return await self._terminal_fallback(messages, DEMO_COST)

        self.state = ControllerState.STREAMING
        adaptor = self.registry.get(primary)
        self._report(
            GatewayEventType.PROVIDER_SELECTED,
            provider=primary,
            data={"cost": adaptor.get_cost() if adaptor else None},
        )

        outcome = await self._attempt(primary, messages)
        if outcome is not None:
            return outcome

        if self.config.fallback_to_free:
            self.state = ControllerState.FAILOVER_SCAN
            for name in self.remaining_candidates(primary):
                self._report(GatewayEventType.FALLBACK_ATTEMPT, provider=name)
                outcome = await self._attempt(name, messages)
                if outcome is not None:
                    return outcome

        return await self._terminal_fallback(messages, EMERGENCY_COST)

    def remaining_candidates(self, failed: str) -> Iterator[str]:
        """Eligible providers strictly after the failed one in preference order."""
        preferred = self.config.preferred_providers
        start = preferred.index(failed) + 1 if failed in preferred else len(preferred)
        for name in preferred[start:]:
            if is_eligible(name, self.config, self.registry):
                yield name

    async def _attempt(
        self,
        name: str,
        messages: Sequence[ChatMessage],
    ) -> StreamOutcome | None:
        adaptor = self.registry.get(name)
        if adaptor is None:
            return None

        try:
            stream = await adaptor.stream_chat(messages)
        except Exception as e:
            failure_type = classify_error(e)
            self.attempts.append(FallbackAttempt(provider=name, error=e, failure_type=failure_type))
            self._report(
                GatewayEventType.PROVIDER_FAILED,
                provider=name,
                detail=str(e),
                failure_type=failure_type,
            )
            return None

        return self._success(adaptor, stream, adaptor.get_cost())

    async def _terminal_fallback(
        self,
        messages: Sequence[ChatMessage],
        cost: str,
    ) -> StreamOutcome:
        self.state = ControllerState.TERMINAL_FALLBACK
        adaptor = self.registry.mock
        self._report(
            GatewayEventType.TERMINAL_FALLBACK,
            provider=adaptor.name,
            data={"cost": cost, "failed_providers": self.failed_providers},
        )

        try:
            stream = await adaptor.stream_chat(messages)
        except Exception as e:
            # A replaced mock misbehaved; the built-in one cannot fail.
            self._report(
                GatewayEventType.PROVIDER_FAILED,
                provider=adaptor.name,
                detail=str(e),
                failure_type=classify_error(e),
            )
            adaptor = MockAdaptor()
            stream = await adaptor.stream_chat(messages)

        return self._success(adaptor, stream, cost)

    def _success(
        self,
        adaptor: ProviderAdaptor,
        stream: AsyncIterator[bytes],
        cost: str,
    ) -> StreamOutcome:
        if self.state is not ControllerState.TERMINAL_FALLBACK:
            self.state = ControllerState.SUCCESS
        self._report(GatewayEventType.REQUEST_ROUTED, provider=adaptor.name, data={"cost": cost})
        return StreamOutcome(stream=stream, provider_name=adaptor.name, cost_tier=cost)

    def _report(
        self,
        event_type: GatewayEventType,
        provider: str | None = None,
        detail: str | None = None,
        failure_type: FailureType | None = None,
        data: dict | None = None,
    ) -> None:
        event = GatewayEvent(
            type=event_type,
            provider=provider,
            detail=detail,
            failure_type=failure_type,
            data=data or {},
        )
        try:
            self.reporter.report(event)
        except Exception as e:
            logger.warning(f"Event reporter failed (non-fatal): {e}")

    @property
    def failed_providers(self) -> list[str]:
        return [attempt.provider for attempt in self.attempts]

    def get_attempt_summary(self) -> str:
        """Human-readable summary of failed attempts."""
        if not self.attempts:
            return "No failed attempts"

        lines = [
            f"  - {attempt.provider}: {attempt.failure_type.value} ({attempt.error})"
            for attempt in self.attempts
        ]
        return "Failed attempts:\n" + "\n".join(lines)
