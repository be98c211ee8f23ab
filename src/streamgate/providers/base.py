"""
Provider adaptor contract for streamgate.

Every backend implements is_available / get_cost / stream_chat. stream_chat
is a coroutine: awaiting it performs all work needed to establish the
upstream call, and only then hands back a lazy chunk sequence. Anything
raised by the await is a pre-stream failure; anything raised while
iterating the returned sequence is a mid-stream failure.
"""

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator, AsyncIterator, Mapping, Sequence
from contextlib import aclosing

from streamgate.config.schema import ProviderSettings
from streamgate.providers.exceptions import ConfigError, UpstreamStreamError
from streamgate.providers.models import (
    ChatMessage,
    StreamEnd,
    StreamEvent,
    StreamFailure,
    TextDelta,
)

logger = logging.getLogger(__name__)


class ProviderAdaptor(ABC):
    """Base class for all backends."""

    name: str = ""
    cost: str = ""

    def is_available(self) -> bool:
        """Cheap, synchronous, side-effect free readiness check."""
        return True

    def get_cost(self) -> str:
        """Static descriptive cost label."""
        return self.cost

    @abstractmethod
    async def stream_chat(
        self,
        messages: Sequence[ChatMessage],
        model_override: str | None = None,
    ) -> AsyncIterator[bytes]:
        """
        Start a chat completion and return its UTF-8 chunk sequence.

        Args:
            messages: Conversation in order.
            model_override: Model to use instead of the configured one.

        Returns:
            A single-pass async iterator of byte chunks.

        Raises:
            ProviderError: If the request fails before output exists.
        """

    async def aclose(self) -> None:
        """Release transport resources held by the adaptor."""
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class CredentialedAdaptor(ProviderAdaptor):
    """
    Adaptor whose availability depends on an API key environment variable.

    Credentials and model overrides are read from the environment on every
    call so that exporting a key at runtime takes effect immediately.
    """

    def __init__(
        self,
        settings: ProviderSettings,
        environ: Mapping[str, str] | None = None,
    ):
        self.settings = settings
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def api_key(self) -> str | None:
        return self.environ.get(self.settings.api_key_env) or None

    def is_available(self) -> bool:
        return self.api_key() is not None

    def require_api_key(self) -> str:
        """Return the API key or raise ConfigError if it is not set."""
        key = self.api_key()
        if key is None:
            raise ConfigError(
                f"{self.settings.api_key_env} is not set. "
                "Add it to your environment to enable this provider.",
                provider=self.name,
            )
        return key

    def resolve_model(self, model_override: str | None = None) -> str:
        """Override argument, then model env var, then configured default."""
        if model_override:
            return model_override
        return self.environ.get(self.settings.model_env) or self.settings.default_model


def encode_chunk(text: str) -> bytes:
    return text.encode("utf-8")


async def iter_events(
    events: AsyncGenerator[StreamEvent, None],
    provider: str,
) -> AsyncIterator[bytes]:
    """
    Turn normalized stream events into UTF-8 chunks.

    TextDelta becomes one chunk (empty deltas are dropped), StreamEnd closes
    the sequence, and StreamFailure raises UpstreamStreamError on it. The
    event source is closed when the sequence finishes or is closed early.
    """
    async with aclosing(events):
        async for event in events:
            if isinstance(event, TextDelta):
                if event.text:
                    yield encode_chunk(event.text)
            elif isinstance(event, StreamEnd):
                return
            elif isinstance(event, StreamFailure):
                logger.debug(f"Provider {provider} failed mid-stream: {event.detail}")
                raise UpstreamStreamError(event.detail, provider=provider)
