"""
Provider data models for streamgate.

Defines the shared message shape, the per-request stream outcome, the
status projection, and the tagged events adaptors normalize into.
"""

from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class MessageRole(str, Enum):
    """Valid message roles."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatMessage:
    """One role-tagged conversation turn."""

    role: str  # "system" | "user" | "assistant"
    content: str

    def __post_init__(self) -> None:
        # Normalizes MessageRole members to their plain value.
        object.__setattr__(self, "role", MessageRole(self.role).value)

    def to_dict(self) -> dict[str, str]:
        """Convert to the {"role", "content"} dict most wire formats use."""
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatMessage":
        return cls(role=data["role"], content=data.get("content") or "")

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        """Create a system message."""
        return cls(role=MessageRole.SYSTEM.value, content=content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        """Create a user message."""
        return cls(role=MessageRole.USER.value, content=content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        """Create an assistant message."""
        return cls(role=MessageRole.ASSISTANT.value, content=content)


def collapse_system(
    messages: Sequence[ChatMessage],
) -> tuple[str | None, list[ChatMessage]]:
    """
    Split a conversation into a single system instruction and the rest.

    Only the first system message is kept; later ones are discarded. The
    non-system messages keep their order.

    Args:
        messages: Conversation in order.

    Returns:
        (first system content or None, non-system messages)
    """
    system: str | None = None
    rest: list[ChatMessage] = []
    for message in messages:
        if message.role == MessageRole.SYSTEM.value:
            if system is None:
                system = message.content
            continue
        rest.append(message)
    return system, rest


# =============================================================================
# Normalized stream events
# =============================================================================


@dataclass(frozen=True)
class TextDelta:
    """Incremental text produced by a backend."""

    text: str
    kind: str = "text_delta"


@dataclass(frozen=True)
class StreamEnd:
    """Backend signalled a normal end of output."""

    kind: str = "end"


@dataclass(frozen=True)
class StreamFailure:
    """Backend signalled an error after output had started."""

    detail: str
    kind: str = "error"


StreamEvent = Union[TextDelta, StreamEnd, StreamFailure]


# =============================================================================
# Gateway results
# =============================================================================


@dataclass
class StreamOutcome:
    """
    Result of one gateway request.

    The stream is single-pass and not restartable. Whoever receives the
    outcome owns the stream and must drain it or call aclose().
    """

    stream: AsyncIterator[bytes]
    provider_name: str
    cost_tier: str

    async def collect(self) -> str:
        """Drain the stream and return the decoded text."""
        parts = [chunk async for chunk in self.stream]
        return b"".join(parts).decode("utf-8")


@dataclass(frozen=True)
class ProviderStatus:
    """Read-only status row for a registered provider."""

    name: str
    available: bool
    cost: str
    enabled: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "available": self.available,
            "cost": self.cost,
            "enabled": self.enabled,
        }
