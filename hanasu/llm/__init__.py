"""Streaming LLM access: providers, SSE decoding and the chat client."""

from .providers import ChatProvider, get_provider, PROVIDERS
from .sse import ServerSentEventBuffer, DONE_MARKER
from .chat_client import StreamingChatClient

__all__ = [
    "ChatProvider",
    "get_provider",
    "PROVIDERS",
    "ServerSentEventBuffer",
    "DONE_MARKER",
    "StreamingChatClient",
]
