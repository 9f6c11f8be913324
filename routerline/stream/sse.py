# stream/sse.py

import json
from dataclasses import dataclass
from typing import AsyncIterable, AsyncIterator, Iterable, Optional, Union

from ..errors import ProtocolError

DATA_PREFIX = "data:"
COMMENT_PREFIX = ":"
DONE_SENTINEL = "[DONE]"

Line = Union[str, bytes]


@dataclass(frozen=True)
class StreamChunk:
    """One decoded stream event. `delta` is None for role-only or empty chunks."""
    delta: Optional[str] = None


def parse_chunk(payload: str) -> StreamChunk:
    """
    Decode the JSON payload of one `data:` event.

    Raises:
        ProtocolError: If the payload is not valid chunk JSON.
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ProtocolError(f"JSON parse error: {e}", payload) from e

    if not isinstance(data, dict):
        raise ProtocolError("chunk is not an object", payload)

    choices = data.get("choices") or []
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return StreamChunk()

    delta = choices[0].get("delta") or {}
    content = delta.get("content") if isinstance(delta, dict) else None
    if isinstance(content, str) and content:
        return StreamChunk(content)
    return StreamChunk()


async def _iterate(lines: Union[Iterable[Line], AsyncIterable[Line]]) -> AsyncIterator[str]:
    if hasattr(lines, '__aiter__'):
        async for line in lines:
            yield line.decode('utf-8', errors='replace') if isinstance(line, bytes) else line
    else:
        for line in lines:
            yield line.decode('utf-8', errors='replace') if isinstance(line, bytes) else line


async def parse_sse_lines(lines: Union[Iterable[Line], AsyncIterable[Line]], logger=None) -> AsyncIterator[str]:
    """
    Turn the lines of an event-stream body into content deltas.

    The sequence ends at `data: [DONE]` or when the lines run out; both are a
    normal end. Comments, blank lines, unknown fields and undecodable chunks
    are skipped. Errors raised by the line source propagate unchanged after
    the deltas already yielded.

    Args:
        lines: Sync or async iterable of body lines (str or bytes)
        logger: Optional logger for skipped chunks

    Yields:
        str: Non-empty content deltas, in stream order
    """
    async for line in _iterate(lines):
        stripped = line.strip()
        if not stripped or line.startswith(COMMENT_PREFIX):
            continue
        if not line.startswith(DATA_PREFIX):
            continue

        payload = line[len(DATA_PREFIX):].strip()
        if payload == DONE_SENTINEL:
            break

        try:
            chunk = parse_chunk(payload)
        except ProtocolError as e:
            if logger:
                logger.debug(f"Skipping malformed chunk: {e}")
            continue

        if chunk.delta:
            yield chunk.delta
