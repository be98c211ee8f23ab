"""
Structured gateway event reporting.

The failover controller describes what it does (selection, failures,
fallbacks) as GatewayEvent values and hands them to a reporter, so the
observability backend can change without touching selection logic.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

from streamgate.providers.exceptions import FailureType

if TYPE_CHECKING:
    from streamgate.audit.logger import AuditLogger

logger = logging.getLogger(__name__)


class GatewayEventType(str, Enum):
    """Kinds of gateway events."""

    REQUEST_START = "request_start"
    PROVIDER_SELECTED = "provider_selected"
    PROVIDER_FAILED = "provider_failed"
    FALLBACK_ATTEMPT = "fallback_attempt"
    TERMINAL_FALLBACK = "terminal_fallback"
    REQUEST_ROUTED = "request_routed"
    CONFIG_CHANGED = "config_changed"


@dataclass
class GatewayEvent:
    """One thing the gateway did or observed."""

    type: GatewayEventType
    provider: str | None = None
    detail: str | None = None
    failure_type: FailureType | None = None
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.type.value,
        }
        if self.provider is not None:
            result["provider"] = self.provider
        if self.detail is not None:
            result["detail"] = self.detail
        if self.failure_type is not None:
            result["failure_type"] = self.failure_type.value
        result.update(self.data)
        return result


class GatewayEventReporter(Protocol):
    """Anything that can receive gateway events."""

    def report(self, event: GatewayEvent) -> None: ...


_WARNING_EVENTS = {
    GatewayEventType.PROVIDER_FAILED,
    GatewayEventType.TERMINAL_FALLBACK,
}


class LoggingEventReporter:
    """Default reporter: one log record per event."""

    def __init__(self, log: logging.Logger | None = None):
        self._log = log or logger

    def report(self, event: GatewayEvent) -> None:
        level = logging.WARNING if event.type in _WARNING_EVENTS else logging.INFO
        parts = [event.type.value]
        if event.provider:
            parts.append(f"provider={event.provider}")
        if event.failure_type:
            parts.append(f"failure={event.failure_type.value}")
        if event.detail:
            parts.append(f"detail={event.detail}")
        self._log.log(level, " ".join(parts))


class RecordingEventReporter:
    """Keeps every event in memory. Useful for tests and diagnostics."""

    def __init__(self) -> None:
        self.events: list[GatewayEvent] = []

    def report(self, event: GatewayEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[GatewayEventType]:
        return [event.type for event in self.events]

    def clear(self) -> None:
        self.events.clear()


class AuditEventReporter:
    """Forwards events to the JSON Lines audit log."""

    def __init__(self, audit_logger: "AuditLogger"):
        self.audit_logger = audit_logger

    def report(self, event: GatewayEvent) -> None:
        self.audit_logger.log_gateway_event(event)


class CompositeEventReporter:
    """Fans one event out to several reporters."""

    def __init__(self, *reporters: GatewayEventReporter):
        self.reporters = list(reporters)

    def report(self, event: GatewayEvent) -> None:
        for reporter in self.reporters:
            reporter.report(event)
