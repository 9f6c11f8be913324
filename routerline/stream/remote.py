# stream/remote.py

import json
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

import httpx

from ..config import ClientConfig
from ..errors import RequestBuildError, TransportError, UpstreamError
from .sse import parse_sse_lines


class ChatCompletionsClient:
    """Handler for streaming chat-completion requests."""

    def __init__(self, config: ClientConfig, logger=None, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            config: Client configuration (endpoint, key, model, limits)
            logger: Optional Logger instance
            transport: Optional httpx transport, used by tests to stub the API
        """
        self.config = config
        self.logger = logger
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout),
            transport=transport,
        )
        if self.logger:
            self.logger.debug(f"Initialized chat client: {self.config.endpoint}")

    def build_payload(self, messages: List[Dict[str, str]]) -> Dict:
        """Return the JSON body for a streaming completion request."""
        payload = {
            'model': self.config.model,
            'messages': messages,
            'stream': True,
        }
        if self.config.max_tokens:
            payload['max_tokens'] = self.config.max_tokens
        return payload

    def build_headers(self) -> Dict[str, str]:
        return {
            'Authorization': f"Bearer {self.config.api_key.strip()}",
            'Content-Type': 'application/json',
            'HTTP-Referer': self.config.referer,
            'X-Title': self.config.title,
        }

    def build_request(self, messages: List[Dict[str, str]]) -> httpx.Request:
        """
        Serialize the request.

        Raises:
            RequestBuildError: If the body cannot be encoded or the URL is invalid.
        """
        try:
            body = json.dumps(self.build_payload(messages))
        except (TypeError, ValueError) as e:
            raise RequestBuildError(f"Request serialization error: {e}") from e
        try:
            return self.client.build_request(
                'POST', self.config.endpoint,
                content=body.encode('utf-8'),
                headers=self.build_headers(),
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError) as e:
            raise RequestBuildError(f"Request creation error: {e}") from e

    @asynccontextmanager
    async def open_stream(self, messages: List[Dict[str, str]]) -> AsyncIterator[AsyncIterator[str]]:
        """
        Send the request and, once a success status arrives, provide the deltas.

        Entering the context waits for the response headers. A non-success
        status is raised as UpstreamError with the full body and never reaches
        the stream parser. `config.timeout` bounds the whole exchange, from
        sending the request to the last body line.

        Raises:
            RequestBuildError, TransportError, UpstreamError
        """
        request = self.build_request(messages)
        deadline = asyncio.get_running_loop().time() + self.config.timeout
        if self.logger:
            self.logger.debug(f"Starting stream request with {len(messages)} messages, model={self.config.model}")

        try:
            async with asyncio.timeout_at(deadline):
                response = await self.client.send(request, stream=True)
        except TimeoutError as e:
            raise self._timed_out() from e
        except httpx.TimeoutException as e:
            if self.logger:
                self.logger.error(f"Stream timeout: {e}")
            raise TransportError(f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            if self.logger:
                self.logger.error(f"Connection error: {e}")
            raise TransportError(f"API request error: {e}") from e

        try:
            if not response.is_success:
                body = await self._read_error_body(response, deadline)
                if self.logger:
                    self.logger.error(f"Endpoint error: {response.status_code} - {body}")
                raise UpstreamError(response.status_code, body)
            yield parse_sse_lines(self._read_lines(response, deadline), logger=self.logger)
        finally:
            await response.aclose()

    def _timed_out(self) -> TransportError:
        if self.logger:
            self.logger.error(f"Request exceeded {self.config.timeout}s")
        return TransportError(f"Request timed out after {self.config.timeout}s")

    async def _read_error_body(self, response: httpx.Response, deadline: float) -> str:
        try:
            async with asyncio.timeout_at(deadline):
                raw = await response.aread()
        except TimeoutError as e:
            raise self._timed_out() from e
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to read error response: {e}") from e
        return raw.decode('utf-8', errors='replace')

    async def _read_lines(self, response: httpx.Response, deadline: float) -> AsyncIterator[str]:
        """Yield body lines until the deadline, mapping read failures to TransportError."""
        lines = response.aiter_lines()
        try:
            while True:
                try:
                    async with asyncio.timeout_at(deadline):
                        line = await anext(lines)
                except StopAsyncIteration:
                    return
                yield line
        except TimeoutError as e:
            raise self._timed_out() from e
        except httpx.TimeoutException as e:
            if self.logger:
                self.logger.error(f"Stream read timeout: {e}")
            raise TransportError(f"Stream read timed out: {e}") from e
        except httpx.HTTPError as e:
            if self.logger:
                self.logger.error(f"Stream read error: {e}")
            raise TransportError(f"Stream read error: {e}") from e

    async def stream_chat(self, messages: List[Dict[str, str]]) -> AsyncIterator[str]:
        """Convenience generator yielding the deltas of one completion."""
        async with self.open_stream(messages) as deltas:
            async for delta in deltas:
                yield delta

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit - ensures proper client cleanup."""
        if self.client:
            await self.client.aclose()
