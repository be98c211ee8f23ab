"""
Mock/demo backend for running without any API keys.

Always available and never fails, which makes it the terminal fallback
of the failover controller.
"""

import asyncio
import random
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence

from streamgate.config.schema import MockSettings
from streamgate.providers.base import ProviderAdaptor, encode_chunk
from streamgate.providers.models import ChatMessage

DEFAULT_PROMPT = "Hello"


def response_templates(last_message: str) -> list[str]:
    """Canned replies; the second one echoes the caller's last message."""
    return [
        "This is a demo AI response. To use real AI, please configure API keys "
        "for Groq, Hugging Face, OpenAI, or Anthropic.",
        f'I understand you said: "{last_message}". This is a simulated response '
        "for demonstration purposes.",
        "For production use, please add real AI provider API keys to your environment.",
        "This mock AI helps you test the application without requiring paid API access.",
    ]


class MockAdaptor(ProviderAdaptor):
    """Synthetic offline backend that types out a canned reply."""

    name = "mock"
    cost = "free (demo only)"

    def __init__(
        self,
        settings: MockSettings | None = None,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings or MockSettings()
        self._rng = rng or random.Random()
        self._sleep = sleep

    def is_available(self) -> bool:
        return True

    def pick_response(self, messages: Sequence[ChatMessage]) -> str:
        last = (messages[-1].content if messages else "") or DEFAULT_PROMPT
        return self._rng.choice(response_templates(last))

    async def stream_chat(
        self,
        messages: Sequence[ChatMessage],
        model_override: str | None = None,
    ) -> AsyncIterator[bytes]:
        return self._type_out(self.pick_response(messages))

    async def _type_out(self, text: str) -> AsyncIterator[bytes]:
        words = text.split()
        last = len(words) - 1
        for index, word in enumerate(words):
            if index:
                await self._sleep(self.settings.token_delay)
            yield encode_chunk(word if index == last else word + " ")
