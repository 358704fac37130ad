"""Pytest configuration and fixtures for editor_bridge tests."""

from __future__ import annotations

import base64
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from editor_bridge import EditorConfig, EditorSession

EDITOR_URL = "https://e.example"
EDITOR_ORIGIN = "https://e.example"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


class RecordingChannel:
    """In-memory MessageChannel recording posts and delivering messages."""

    def __init__(self) -> None:
        self.posted: list[tuple[dict[str, Any], str]] = []
        self.listeners: list[Callable[[Any, str], None]] = []

    def post_message(self, message: dict[str, Any], target_origin: str) -> None:
        self.posted.append((message, target_origin))

    def add_listener(self, listener: Callable[[Any, str], None]) -> Callable[[], None]:
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)

    def deliver(self, data: Any, origin: str = EDITOR_ORIGIN) -> None:
        for listener in list(self.listeners):
            listener(data, origin)

    @property
    def sent_types(self) -> list[str]:
        return [message["type"] for message, _origin in self.posted]


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def session(channel: RecordingChannel, tmp_path) -> EditorSession:
    """Session configured for EDITOR_URL, still loading."""
    editor = EditorSession(channel, session_id="test", download_dir=tmp_path)
    editor.configure(
        EditorConfig(
            endpoint_url=EDITOR_URL,
            webhook_url="https://hooks.example/export",
            user_id="u1",
        )
    )
    return editor


@pytest.fixture
def ready_session(session: EditorSession, channel: RecordingChannel) -> EditorSession:
    """Session that has received editor_ready."""
    channel.deliver({"type": "editor_ready"})
    return session


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp ClientSession."""
    import aiohttp

    return MagicMock(spec=aiohttp.ClientSession)


def create_mock_response(
    status: int = 200,
    read_data: bytes | None = None,
    headers: dict[str, str] | None = None,
) -> AsyncMock:
    """Create a configured mock aiohttp response.

    Args:
        status: HTTP status code
        read_data: Data to return from read() call
        headers: Response headers

    Returns:
        Configured AsyncMock response
    """
    response = AsyncMock()
    response.status = status
    response.headers = headers or {}

    if read_data is not None:
        response.read.return_value = read_data

    response.__aenter__.return_value = response
    response.__aexit__.return_value = None

    return response
