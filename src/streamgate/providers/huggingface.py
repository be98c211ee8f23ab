"""
Hugging Face Inference API backend.

The API answers with the complete generated text in one response, so the
adaptor presents it as a stream of exactly one chunk.
Free tier keys: https://huggingface.co/settings/tokens
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator, Mapping, Sequence
from typing import Any

import httpx

from streamgate.config.schema import HuggingFaceSettings
from streamgate.providers.base import CredentialedAdaptor, iter_events
from streamgate.providers.exceptions import (
    NetworkError,
    UpstreamHTTPError,
    UpstreamProtocolError,
)
from streamgate.providers.models import ChatMessage, StreamEnd, StreamEvent, TextDelta

logger = logging.getLogger(__name__)

ASSISTANT_CUE = "assistant:"
EMPTY_GENERATION = "No response generated"


def format_prompt(messages: Sequence[ChatMessage]) -> str:
    """Flatten the conversation into role-prefixed lines ending with the assistant cue."""
    lines = [f"{message.role}: {message.content}" for message in messages]
    return "\n".join(lines) + "\n" + ASSISTANT_CUE


def extract_generated_text(data: Any) -> str:
    """Read generated_text from the first element of the response array."""
    if isinstance(data, list) and data and isinstance(data[0], dict):
        text = data[0].get("generated_text")
        if isinstance(text, str) and text:
            return text
    return EMPTY_GENERATION


class HuggingFaceAdaptor(CredentialedAdaptor):
    """Single-shot HTTP backend presented as a stream."""

    name = "huggingface"
    cost = "free (rate limited)"

    def __init__(
        self,
        settings: HuggingFaceSettings | None = None,
        client: httpx.AsyncClient | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        super().__init__(settings or HuggingFaceSettings(), environ)
        self.settings: HuggingFaceSettings
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.timeout_seconds)
        return self._client

    def model_url(self, model: str) -> str:
        return f"{str(self.settings.base_url).rstrip('/')}/{model}"

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "inputs": prompt,
            "parameters": {
                "max_new_tokens": self.settings.max_new_tokens,
                "temperature": self.settings.temperature,
            },
            "options": {
                "wait_for_model": True,
            },
        }

    async def stream_chat(
        self,
        messages: Sequence[ChatMessage],
        model_override: str | None = None,
    ) -> AsyncIterator[bytes]:
        api_key = self.require_api_key()
        prompt = format_prompt(messages)

        try:
            response = await self._get_client().post(
                self.model_url(self.resolve_model(model_override)),
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "Content-Type": "application/json",
                },
                json=self.build_payload(prompt),
            )
        except httpx.TransportError as e:
            raise NetworkError(f"Hugging Face connection failed: {e}", provider=self.name) from e

        if not response.is_success:
            raise UpstreamHTTPError(
                f"Hugging Face API error: {response.status_code} {response.reason_phrase}",
                provider=self.name,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamProtocolError(
                f"Hugging Face returned invalid JSON: {e}", provider=self.name
            ) from e

        # The model echoes the prompt; only the continuation is returned.
        text = extract_generated_text(data).replace(prompt, "", 1).strip()
        return iter_events(self._events(text), self.name)

    async def _events(self, text: str) -> AsyncGenerator[StreamEvent, None]:
        yield TextDelta(text)
        yield StreamEnd()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
