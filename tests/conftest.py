"""
Pytest configuration and fixtures for streamgate tests.
"""

import logging
import os
import tempfile
from collections.abc import AsyncIterator, Callable, Generator, Iterable
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

PROVIDER_ENV_VARS = [
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GROQ_API_KEY",
    "HUGGINGFACE_API_KEY",
    "OPENAI_MODEL",
    "CLAUDE_MODEL",
    "GROQ_MODEL",
    "HUGGINGFACE_MODEL",
]


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def streamgate_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """
    Isolate every test from the real home directory and credentials.

    Points STREAMGATE_HOME at a temp dir, removes provider and STREAMGATE_*
    variables, and resets module-level caches before and after the test.
    """
    from streamgate.audit import clear_audit_logger
    from streamgate.config import clear_config_cache
    from streamgate.providers import clear_gateway

    for name in PROVIDER_ENV_VARS:
        # setenv first so monkeypatch also undoes values exported by the test.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    for name in list(os.environ):
        if name.startswith("STREAMGATE_"):
            monkeypatch.delenv(name, raising=False)

    home = temp_dir / ".streamgate"
    home.mkdir()
    monkeypatch.setenv("STREAMGATE_HOME", str(home))

    clear_config_cache()
    clear_gateway()
    clear_audit_logger()

    logger = logging.getLogger("streamgate")
    handlers = list(logger.handlers)
    propagate = logger.propagate
    level = logger.level

    yield home

    # The CLI installs a RichHandler and stops propagation; undo it so
    # caplog keeps working in later tests.
    logger.handlers = handlers
    logger.propagate = propagate
    logger.setLevel(level)

    clear_config_cache()
    clear_gateway()
    clear_audit_logger()


# =============================================================================
# HTTP helpers
# =============================================================================


async def byte_stream(
    chunks: Iterable[bytes],
    error: Exception | None = None,
) -> AsyncIterator[bytes]:
    """Response body delivered as separate reads, optionally failing at the end."""
    for chunk in chunks:
        yield chunk
    if error is not None:
        raise error


@pytest.fixture
def make_http_client() -> Callable[..., httpx.AsyncClient]:
    """
    Build an httpx.AsyncClient backed by MockTransport.

    The returned factory takes a handler(request) -> httpx.Response; every
    request seen is appended to factory.requests.
    """
    requests: list[httpx.Request] = []

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        return httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))

    factory.requests = requests  # type: ignore[attr-defined]
    return factory


class FakeSleep:
    """Records requested delays instead of sleeping."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def body() -> Callable[..., AsyncIterator[bytes]]:
    """Factory for multi-read response bodies (see byte_stream)."""
    return byte_stream
