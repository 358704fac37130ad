"""Message channel over a WebSocket relay.

The relay is the page hosting the editor frame. It forwards ``postMessage``
traffic in both directions as JSON frames:

- outbound: ``{"type": "post_message", "target_origin": ..., "data": {...}}``
- inbound:  ``{"type": "message", "origin": ..., "data": {...}}``

Usage:
    channel = RelayChannel("ws://localhost:8765/relay")
    await channel.connect()
    session = EditorSession(channel)
    ...
    await channel.close()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from ..errors import EditorBridgeError, ProtocolError
from .channel import MessageListener
from .ws_client import EditorWsClient, EditorWsMessageType

_LOGGER = logging.getLogger(__name__)


class RelayChannel:
    """MessageChannel implementation backed by a relay WebSocket."""

    def __init__(
        self,
        url: str,
        *,
        ping_interval: int = 20,
        timeout: float = 15.0,
    ) -> None:
        self.url = url
        self._ping_interval = ping_interval
        self._timeout = timeout

        self._ws: EditorWsClient | None = None
        self._outbox: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._listeners: list[MessageListener] = []
        self._reader_task: asyncio.Task[None] | None = None
        self._writer_task: asyncio.Task[None] | None = None

    @property
    def is_connected(self) -> bool:
        return self._ws is not None and self._ws.connected

    async def connect(self) -> None:
        """Connect to the relay and start the reader and writer tasks.

        Raises:
            EditorBridgeTimeout: If the connection times out.
            EditorBridgeHandshakeError: If the handshake fails.
            EditorBridgeConnectionError: If the relay is unreachable.
        """
        _LOGGER.info("Connecting to relay %s", self.url)
        ws_client = EditorWsClient()
        await ws_client.connect(
            self.url, ping_interval=self._ping_interval, timeout=self._timeout
        )
        self._ws = ws_client

        self._reader_task = asyncio.create_task(self._read())
        self._writer_task = asyncio.create_task(self._write())

    async def close(self) -> None:
        """Stop background tasks and close the relay connection."""
        for task in (self._reader_task, self._writer_task):
            if task is None:
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._reader_task = None
        self._writer_task = None

        if self._ws is not None:
            await self._ws.close()
            self._ws = None
        _LOGGER.info("Relay %s closed", self.url)

    def post_message(self, message: dict[str, Any], target_origin: str) -> None:
        """Queue a message for the editor. Messages are sent in call order."""
        if not target_origin or target_origin == "*":
            raise ValueError("target_origin must be a concrete origin")
        self._outbox.put_nowait(
            {"type": "post_message", "target_origin": target_origin, "data": message}
        )

    def add_listener(self, listener: MessageListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    async def _write(self) -> None:
        """Drain the outbox one frame at a time to keep ordering."""
        while True:
            frame = await self._outbox.get()
            if self._ws is None:
                _LOGGER.warning("Dropping %s frame: relay not connected", frame["type"])
                continue
            try:
                await self._ws.send_json(frame)
            except EditorBridgeError as err:
                _LOGGER.error("Failed to send frame to relay: %s", err)

    async def _read(self) -> None:
        if self._ws is None:
            return

        async for msg in self._ws:
            if msg.type is EditorWsMessageType.TEXT:
                try:
                    frame = EditorWsClient.decode_json(msg)
                except ProtocolError as err:
                    _LOGGER.warning("Invalid relay frame: %s", err)
                    continue

                if frame.get("type") != "message":
                    _LOGGER.debug("Ignoring relay frame type: %s", frame.get("type"))
                    continue
                origin = frame.get("origin")
                if not isinstance(origin, str):
                    _LOGGER.warning("Relay frame without sender origin")
                    continue
                self._dispatch(frame.get("data"), origin)

            elif msg.type is EditorWsMessageType.CLOSED:
                _LOGGER.info("Relay closed the connection")
                break

            elif msg.type is EditorWsMessageType.ERROR:
                _LOGGER.error("Relay connection error")
                break

    def _dispatch(self, data: Any, origin: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(data, origin)
            except Exception as err:
                _LOGGER.exception("Message listener error: %s", err)
