"""WebSocket helpers for the cross-frame message relay."""

from __future__ import annotations

import asyncio

import websockets
from websockets.asyncio.client import ClientConnection
from websockets.exceptions import (
    InvalidHandshake,
    InvalidURI,
    WebSocketException,
)

from ..errors import (
    EditorBridgeConnectionError,
    EditorBridgeHandshakeError,
    EditorBridgeTimeout,
)


async def connect_websocket(
    url: str,
    *,
    ping_interval: int | None = 20,
    timeout: float = 15.0,
) -> ClientConnection:
    """Connect to the relay WebSocket endpoint.

    Args:
        url: Relay URL (ws:// or wss://)
        ping_interval: Interval for ping frames
        timeout: Connection timeout
    """
    try:
        return await asyncio.wait_for(
            websockets.connect(
                url,
                ping_interval=ping_interval,
                close_timeout=5,
                max_size=None,
            ),
            timeout=timeout,
        )
    except TimeoutError as err:
        raise EditorBridgeTimeout("WebSocket connection timed out") from err
    except (InvalidHandshake, InvalidURI) as err:
        raise EditorBridgeHandshakeError("WebSocket handshake failed") from err
    except (OSError, WebSocketException) as err:
        raise EditorBridgeConnectionError("WebSocket connection failed") from err
