"""Cross-frame messaging primitive used by editor sessions."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

# Receives (data, origin) for every inbound message
MessageListener = Callable[[Any, str], None]


class MessageChannel(Protocol):
    """Transport carrying messages between the host and the embedded editor.

    ``post_message`` must deliver messages in call order and only to a
    receiver whose origin equals ``target_origin``. Listeners receive the
    message data together with the sender origin reported by the platform.
    """

    def post_message(self, message: dict[str, Any], target_origin: str) -> None:
        """Post a message to the embedded editor."""
        ...

    def add_listener(self, listener: MessageListener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        ...
