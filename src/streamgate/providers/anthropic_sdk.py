"""
Anthropic backend via the official SDK.

Only one system instruction is accepted: the first system message becomes
the ``system`` argument and later ones are discarded.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator, Mapping, Sequence
from typing import Any

import anthropic
import httpx

from streamgate.config.schema import AnthropicSettings
from streamgate.providers.base import CredentialedAdaptor, iter_events
from streamgate.providers.exceptions import NetworkError, UpstreamHTTPError
from streamgate.providers.models import (
    ChatMessage,
    StreamEnd,
    StreamEvent,
    StreamFailure,
    TextDelta,
    collapse_system,
)

logger = logging.getLogger(__name__)


def normalize_event(event: Any) -> StreamEvent | None:
    """
    Map a raw SDK stream event onto a tagged StreamEvent.

    Returns None for bookkeeping events (message_start, content_block_start,
    ping, ...) that carry no text.
    """
    kind = getattr(event, "type", None)
    if kind == "content_block_delta":
        delta = getattr(event, "delta", None)
        if getattr(delta, "type", None) == "text_delta":
            return TextDelta(delta.text)
        return None
    if kind == "message_stop":
        return StreamEnd()
    if kind == "error":
        error = getattr(event, "error", None)
        return StreamFailure(str(getattr(error, "message", None) or error or "unknown error"))
    return None


class AnthropicAdaptor(CredentialedAdaptor):
    """Claude models through ``AsyncAnthropic.messages.create(stream=True)``."""

    name = "anthropic"
    cost = "paid"

    def __init__(
        self,
        settings: AnthropicSettings | None = None,
        client: anthropic.AsyncAnthropic | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        super().__init__(settings or AnthropicSettings(), environ)
        self._client = client
        self._client_key: str | None = None
        self._owns_client = client is None

    def _get_client(self) -> anthropic.AsyncAnthropic:
        api_key = self.require_api_key()
        if self._owns_client and self._client_key != api_key:
            # Rebuilt on key rotation; open streams keep the old client.
            self._client = None
        if self._client is None:
            self._client_key = api_key
            self._client = anthropic.AsyncAnthropic(
                api_key=api_key,
                base_url=self.settings.base_url,
                timeout=self.settings.timeout_seconds,
            )
        return self._client

    def build_request(
        self,
        messages: Sequence[ChatMessage],
        model: str,
    ) -> dict[str, Any]:
        system, rest = collapse_system(messages)
        request: dict[str, Any] = {
            "model": model,
            "max_tokens": self.settings.max_tokens,
            "messages": [message.to_dict() for message in rest],
        }
        if system:
            request["system"] = system
        return request

    async def stream_chat(
        self,
        messages: Sequence[ChatMessage],
        model_override: str | None = None,
    ) -> AsyncIterator[bytes]:
        self.require_api_key()
        request = self.build_request(messages, self.resolve_model(model_override))

        try:
            raw = await self._get_client().messages.create(**request, stream=True)
        except anthropic.APIConnectionError as e:
            raise NetworkError(f"Anthropic connection failed: {e}", provider=self.name) from e
        except anthropic.APIStatusError as e:
            raise UpstreamHTTPError(
                f"Anthropic API error: {e.message}",
                provider=self.name,
                status_code=e.status_code,
            ) from e

        return iter_events(self._events(raw), self.name)

    async def _events(self, raw: Any) -> AsyncGenerator[StreamEvent, None]:
        try:
            async for sdk_event in raw:
                event = normalize_event(sdk_event)
                if event is not None:
                    yield event
            yield StreamEnd()
        except (anthropic.APIError, httpx.HTTPError) as e:
            # The SDK raises server-sent error events as APIError.
            yield StreamFailure(f"Anthropic stream interrupted: {e}")
        finally:
            await raw.close()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.close()
            self._client = None
