"""
Server-sent event line handling for OpenAI-compatible chat streams.

Response bodies arrive as arbitrary byte reads. Each read is decoded and
split on newlines; lines of the form ``data: <json>`` carry a chunk and
``data: [DONE]`` ends the stream.
"""

import codecs
import json
import logging
from typing import Any

from streamgate.providers.exceptions import UpstreamProtocolError
from streamgate.providers.models import StreamEnd, StreamEvent, TextDelta

logger = logging.getLogger(__name__)

SSE_DATA_PREFIX = "data: "
SSE_DONE = "[DONE]"


class SSELineSplitter:
    """
    Split raw body reads into text lines.

    Unbuffered (the default) mirrors the upstream client this gateway grew
    from: every read is decoded and split on its own, so a line that
    straddles two reads comes out as two fragments and neither parses.
    Buffered mode carries the trailing partial line (and any partial UTF-8
    sequence) over to the next read.
    """

    def __init__(self, buffered: bool = False):
        self.buffered = buffered
        self._pending = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def feed(self, data: bytes) -> list[str]:
        """Return the lines made available by one body read."""
        if not self.buffered:
            return data.decode("utf-8", errors="replace").split("\n")

        text = self._pending + self._decoder.decode(data)
        *lines, self._pending = text.split("\n")
        return lines

    def flush(self) -> list[str]:
        """Return whatever is left once the body is exhausted."""
        if not self.buffered:
            return []
        text = self._pending + self._decoder.decode(b"", final=True)
        self._pending = ""
        return [text] if text else []


def decode_sse_payload(data: str) -> StreamEvent | None:
    """
    Decode the JSON payload of one ``data:`` line.

    Returns:
        StreamEnd for the [DONE] sentinel, TextDelta when the payload
        carries choices[0].delta.content, otherwise None.

    Raises:
        UpstreamProtocolError: If the payload is not valid JSON.
    """
    if data == SSE_DONE:
        return StreamEnd()

    try:
        payload: Any = json.loads(data)
    except json.JSONDecodeError as e:
        raise UpstreamProtocolError(f"Malformed SSE payload: {e}") from e

    try:
        content = payload["choices"][0]["delta"]["content"]
    except (KeyError, IndexError, TypeError):
        return None

    if isinstance(content, str) and content:
        return TextDelta(content)
    return None


def parse_sse_line(line: str) -> StreamEvent | None:
    """
    Interpret one SSE line.

    Lines without the data prefix are ignored. Payloads that fail to parse
    are skipped rather than treated as fatal.
    """
    line = line.rstrip("\r")
    if not line.startswith(SSE_DATA_PREFIX):
        return None

    try:
        return decode_sse_payload(line[len(SSE_DATA_PREFIX) :])
    except UpstreamProtocolError as e:
        logger.debug(f"Skipping SSE line: {e}")
        return None
