"""
Groq backend: OpenAI-compatible chat completions over raw SSE.

Free but rate limited. Get a key at https://groq.com/
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator, Mapping, Sequence
from typing import Any

import httpx

from streamgate.config.schema import GroqSettings
from streamgate.providers.base import CredentialedAdaptor, iter_events
from streamgate.providers.exceptions import NetworkError, UpstreamHTTPError
from streamgate.providers.models import (
    ChatMessage,
    MessageRole,
    StreamEnd,
    StreamEvent,
    StreamFailure,
    collapse_system,
)
from streamgate.providers.sse import SSELineSplitter, parse_sse_line

logger = logging.getLogger(__name__)


class GroqAdaptor(CredentialedAdaptor):
    """Raw-SSE HTTP backend."""

    name = "groq"
    cost = "free (rate limited)"

    def __init__(
        self,
        settings: GroqSettings | None = None,
        client: httpx.AsyncClient | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        super().__init__(settings or GroqSettings(), environ)
        self.settings: GroqSettings
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.timeout_seconds)
        return self._client

    def build_payload(
        self,
        messages: Sequence[ChatMessage],
        model: str,
    ) -> dict[str, Any]:
        """
        Build the request body.

        The first system message goes back in as element 0 of the message
        array; any later system messages are dropped.
        """
        system, rest = collapse_system(messages)
        outgoing: list[dict[str, str]] = []
        if system:
            outgoing.append({"role": MessageRole.SYSTEM.value, "content": system})
        outgoing.extend(message.to_dict() for message in rest)

        return {
            "model": model,
            "messages": outgoing,
            "stream": True,
            "max_tokens": self.settings.max_tokens,
        }

    async def stream_chat(
        self,
        messages: Sequence[ChatMessage],
        model_override: str | None = None,
    ) -> AsyncIterator[bytes]:
        api_key = self.require_api_key()
        client = self._get_client()

        request = client.build_request(
            "POST",
            str(self.settings.base_url),
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            json=self.build_payload(messages, self.resolve_model(model_override)),
        )

        try:
            response = await client.send(request, stream=True)
        except httpx.TransportError as e:
            raise NetworkError(f"Groq connection failed: {e}", provider=self.name) from e

        if not response.is_success:
            await response.aclose()
            raise UpstreamHTTPError(
                f"Groq API error: {response.status_code} {response.reason_phrase}",
                provider=self.name,
                status_code=response.status_code,
            )

        return iter_events(self._events(response), self.name)

    async def _events(self, response: httpx.Response) -> AsyncGenerator[StreamEvent, None]:
        splitter = SSELineSplitter(buffered=self.settings.sse_buffering)
        try:
            async for data in response.aiter_bytes():
                for line in splitter.feed(data):
                    event = parse_sse_line(line)
                    if event is not None:
                        yield event
            for line in splitter.flush():
                event = parse_sse_line(line)
                if event is not None:
                    yield event
            # Body ended without the [DONE] sentinel.
            yield StreamEnd()
        except httpx.HTTPError as e:
            yield StreamFailure(f"Groq stream interrupted: {e}")
        finally:
            await response.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
