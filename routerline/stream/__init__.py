# stream/__init__.py

from .sse import StreamChunk, parse_chunk, parse_sse_lines, DONE_SENTINEL
from .remote import ChatCompletionsClient

__all__ = ['StreamChunk', 'parse_chunk', 'parse_sse_lines', 'DONE_SENTINEL', 'ChatCompletionsClient']
