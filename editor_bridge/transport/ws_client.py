"""WebSocket client wrapper for the message relay."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from websockets.asyncio.client import ClientConnection
from websockets.exceptions import ConnectionClosed

from ..errors import EditorBridgeConnectionError, ProtocolError
from .ws import connect_websocket

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class EditorWsMessageType(Enum):
    """Normalized WebSocket message types."""

    TEXT = "text"
    CLOSED = "closed"
    ERROR = "error"


@dataclass(frozen=True)
class EditorWsMessage:
    """Normalized WebSocket message payload."""

    type: EditorWsMessageType
    data: str | None = None


class EditorWsClient:
    """Wrapper around the websockets library for relay traffic."""

    def __init__(self) -> None:
        self._ws: ClientConnection | None = None

    @property
    def connected(self) -> bool:
        return self._ws is not None

    async def connect(
        self,
        url: str,
        *,
        ping_interval: int = 20,
        timeout: float = 15.0,
    ) -> None:
        """Connect to the relay websocket."""
        self._ws = await connect_websocket(
            url,
            ping_interval=ping_interval,
            timeout=timeout,
        )

    async def close(self) -> None:
        """Close the websocket connection."""
        if self._ws is not None:
            await self._ws.close()
            self._ws = None

    async def send_json(self, payload: dict[str, Any]) -> None:
        """Send a JSON payload to the websocket."""
        if self._ws is None:
            raise EditorBridgeConnectionError("WebSocket is not connected")
        try:
            await self._ws.send(json.dumps(payload))
        except ConnectionClosed as err:
            raise EditorBridgeConnectionError("WebSocket closed while sending") from err

    def __aiter__(self) -> AsyncIterator[EditorWsMessage]:
        if self._ws is None:
            raise EditorBridgeConnectionError("WebSocket is not connected")
        return self._iter_messages()

    async def _iter_messages(self) -> AsyncIterator[EditorWsMessage]:
        if self._ws is None:
            raise EditorBridgeConnectionError("WebSocket is not connected")

        try:
            async for msg in self._ws:
                # Relay frames are JSON text; binary frames are ignored
                if isinstance(msg, bytes):
                    continue
                yield EditorWsMessage(EditorWsMessageType.TEXT, msg)
        except ConnectionClosed:
            yield EditorWsMessage(type=EditorWsMessageType.CLOSED)
        except Exception:
            yield EditorWsMessage(type=EditorWsMessageType.ERROR)
        else:
            # Normal iteration completion means the peer closed gracefully.
            yield EditorWsMessage(type=EditorWsMessageType.CLOSED)

    @staticmethod
    def decode_json(message: EditorWsMessage) -> dict[str, Any]:
        """Decode a TEXT message payload into a JSON object."""
        if message.type is not EditorWsMessageType.TEXT:
            raise ProtocolError("Only TEXT messages can be decoded")
        if not isinstance(message.data, str):
            raise ProtocolError("Message data is not a string")
        try:
            result = json.loads(message.data)
        except json.JSONDecodeError as err:
            raise ProtocolError(f"Invalid JSON frame: {err}") from err
        if not isinstance(result, dict):
            raise ProtocolError("Frame is not a JSON object")
        return result
