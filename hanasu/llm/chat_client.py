"""Streaming chat client for sending prompts and consuming token streams."""

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Callable, Optional

import aiohttp

from ..errors import ConfigurationError, MalformedStreamChunk, UpstreamError
from ..models.events import Delta, Done, Failed, TranslationEvent
from .providers import ChatProvider, get_provider
from .sse import ServerSentEventBuffer, DONE_MARKER

logger = logging.getLogger(__name__)


class StreamingChatClient:
    """Sends prompts to a chat provider and yields incremental text events."""

    def __init__(self,
                 api_key: str,
                 provider: Optional[ChatProvider] = None,
                 model: str = "gpt-4o-mini",
                 base_url: Optional[str] = None,
                 read_timeout: float = 30.0,
                 session_factory: Callable[..., aiohttp.ClientSession] = aiohttp.ClientSession):
        """Initialize streaming chat client.

        Args:
            api_key: Provider API key
            provider: Request/response strategy (defaults to OpenAI)
            model: Model name sent with each request
            base_url: Override for the provider's API root
            read_timeout: Seconds to wait for the next streamed bytes
            session_factory: Creates the aiohttp session used per request
        """
        if not api_key:
            raise ConfigurationError("An API key is required for LLM requests")
        self.api_key = api_key
        self.provider = provider or get_provider("openai")
        self.model = model
        self.url = self.provider.endpoint(base_url)
        self.read_timeout = read_timeout
        self._session_factory = session_factory

        logger.info(f"StreamingChatClient initialized: provider={self.provider.name}, model={model}")

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=None, sock_connect=10, sock_read=self.read_timeout)

    async def stream_chat(self, system_prompt: str, prompt: str,
                          temperature: float = 0.3) -> AsyncIterator[TranslationEvent]:
        """Send a streaming request and yield Delta events, then Done or Failed.

        Cancelling the consuming task closes the connection; it never
        produces a Failed event.
        """
        payload = self.provider.build_payload(self.model, system_prompt, prompt, temperature, True)
        buffer = ServerSentEventBuffer()

        try:
            async with self._session_factory(timeout=self._timeout()) as session:
                async with session.post(self.url, headers=self._headers(), json=payload) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        logger.error(f"{self.provider.name} API error: {response.status} - {error_text[:200]}")
                        raise UpstreamError(f"HTTP {response.status}: {response.reason}", status=response.status)

                    async for chunk in response.content.iter_any():
                        for data in buffer.feed(chunk):
                            if data == DONE_MARKER:
                                yield Done()
                                return
                            fragment = self._decode_fragment(data)
                            if fragment:
                                yield Delta(fragment)

                    for data in buffer.flush():
                        if data == DONE_MARKER:
                            yield Done()
                            return
                        fragment = self._decode_fragment(data)
                        if fragment:
                            yield Delta(fragment)

            logger.warning("Stream closed without a terminal marker; treating as complete")
            yield Done()
        except UpstreamError as e:
            yield Failed(str(e))
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"{self.provider.name} request failed: {e!r}")
            yield Failed(f"Network error: {e!r}")

    def _decode_fragment(self, data: str) -> Optional[str]:
        """Decode one payload; malformed payloads are skipped, not fatal."""
        try:
            try:
                record = json.loads(data)
            except json.JSONDecodeError as e:
                raise MalformedStreamChunk(f"Invalid JSON: {e}")
            return self.provider.extract_delta(record)
        except MalformedStreamChunk as e:
            logger.warning(f"Skipping malformed stream chunk ({e}): {data[:100]!r}")
            return None

    async def complete(self, system_prompt: str, prompt: str, temperature: float = 0.1) -> str:
        """Send a non-streaming request and return the message text.

        Raises:
            UpstreamError: If the request fails or the reply has no text
        """
        payload = self.provider.build_payload(self.model, system_prompt, prompt, temperature, False)

        try:
            async with self._session_factory(timeout=self._timeout()) as session:
                async with session.post(self.url, headers=self._headers(), json=payload) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        logger.error(f"{self.provider.name} API error: {response.status} - {error_text[:200]}")
                        raise UpstreamError(f"HTTP {response.status}: {response.reason}", status=response.status)
                    data: Any = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise UpstreamError(f"Network error: {e!r}") from e

        try:
            content = self.provider.extract_message(data)
        except MalformedStreamChunk as e:
            raise UpstreamError(f"Unexpected response: {e}") from e
        if not content:
            raise UpstreamError("No content received from the model")
        return content.strip()
