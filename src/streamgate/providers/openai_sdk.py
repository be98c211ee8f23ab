"""
OpenAI backend via the official SDK.

The message list is sent verbatim, system messages included.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator, Mapping, Sequence
from typing import Any

import httpx
import openai

from streamgate.config.schema import OpenAISettings
from streamgate.providers.base import CredentialedAdaptor, iter_events
from streamgate.providers.exceptions import NetworkError, UpstreamHTTPError
from streamgate.providers.models import (
    ChatMessage,
    StreamEnd,
    StreamEvent,
    StreamFailure,
    TextDelta,
)

logger = logging.getLogger(__name__)


def chunk_delta(chunk: Any) -> str | None:
    """Incremental text carried by one ChatCompletionChunk, if any."""
    choices = getattr(chunk, "choices", None)
    if not choices:
        return None
    delta = getattr(choices[0], "delta", None)
    return getattr(delta, "content", None)


class OpenAIAdaptor(CredentialedAdaptor):
    """GPT models through ``AsyncOpenAI.chat.completions.create(stream=True)``."""

    name = "openai"
    cost = "paid"

    def __init__(
        self,
        settings: OpenAISettings | None = None,
        client: openai.AsyncOpenAI | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        super().__init__(settings or OpenAISettings(), environ)
        self._client = client
        self._client_key: str | None = None
        self._owns_client = client is None

    def _get_client(self) -> openai.AsyncOpenAI:
        api_key = self.require_api_key()
        if self._owns_client and self._client_key != api_key:
            # Rebuilt on key rotation; open streams keep the old client.
            self._client = None
        if self._client is None:
            self._client_key = api_key
            self._client = openai.AsyncOpenAI(
                api_key=api_key,
                base_url=self.settings.base_url,
                timeout=self.settings.timeout_seconds,
            )
        return self._client

    async def stream_chat(
        self,
        messages: Sequence[ChatMessage],
        model_override: str | None = None,
    ) -> AsyncIterator[bytes]:
        self.require_api_key()

        try:
            raw = await self._get_client().chat.completions.create(
                model=self.resolve_model(model_override),
                stream=True,
                messages=[message.to_dict() for message in messages],
            )
        except openai.APIConnectionError as e:
            raise NetworkError(f"OpenAI connection failed: {e}", provider=self.name) from e
        except openai.APIStatusError as e:
            raise UpstreamHTTPError(
                f"OpenAI API error: {e.message}",
                provider=self.name,
                status_code=e.status_code,
            ) from e

        return iter_events(self._events(raw), self.name)

    async def _events(self, raw: Any) -> AsyncGenerator[StreamEvent, None]:
        try:
            async for chunk in raw:
                content = chunk_delta(chunk)
                if content:
                    yield TextDelta(content)
            yield StreamEnd()
        except (openai.APIError, httpx.HTTPError) as e:
            yield StreamFailure(f"OpenAI stream interrupted: {e}")
        finally:
            await raw.close()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.close()
            self._client = None
