"""Transport layer for the editor bridge.

This package contains all IO and network handling.

Components:
- channel: MessageChannel protocol implemented by every transport
- ws: WebSocket connection management
- ws_client: WebSocket message iteration
- relay: MessageChannel over a WebSocket relay
- http: HTTP fetching of remote image data
"""

from .channel import MessageChannel, MessageListener
from .http import ImageFetcher
from .relay import RelayChannel
from .ws import connect_websocket
from .ws_client import EditorWsClient, EditorWsMessage, EditorWsMessageType

__all__ = [
    "EditorWsClient",
    "EditorWsMessage",
    "EditorWsMessageType",
    "ImageFetcher",
    "MessageChannel",
    "MessageListener",
    "RelayChannel",
    "connect_websocket",
]
