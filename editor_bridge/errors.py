"""Error types for the editor bridge.

Transport and configuration layers raise these; the session translates them
into published state and host events instead of letting them escape.
"""

from __future__ import annotations


class EditorBridgeError(Exception):
    """Base error for editor bridge failures."""


class EditorBridgeTimeout(EditorBridgeError):
    """Timeout while communicating with the relay or an image host."""


class EditorBridgeConnectionError(EditorBridgeError):
    """Network connection to the relay or an image host failed."""


class EditorBridgeHandshakeError(EditorBridgeError):
    """WebSocket handshake with the relay failed."""


class EditorBridgeResponseError(EditorBridgeError):
    """HTTP response error while fetching image data."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status


class ProtocolError(EditorBridgeError):
    """A wire frame could not be parsed."""


class ConfigError(EditorBridgeError):
    """Editor configuration is missing or invalid."""
