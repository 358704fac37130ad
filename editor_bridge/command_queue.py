"""Outbound command queue gated on editor readiness."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable

from .protocol import Command

_LOGGER = logging.getLogger(__name__)


class CommandQueue:
    """Buffer commands until the editor is ready, then flush in FIFO order.

    While the gate is closed every command is appended to the buffer. Opening
    the gate flushes the buffer exactly once. Commands enqueued while a flush
    is running (for example from a send hook) are appended behind the
    commands being flushed and go out in the same flush.
    """

    def __init__(self, send: Callable[[Command], None]) -> None:
        self._send = send
        self._pending: deque[Command] = deque()
        self._open = False
        self._flushing = False

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def pending(self) -> tuple[Command, ...]:
        """Snapshot of the buffered commands, oldest first."""
        return tuple(self._pending)

    def enqueue(self, command: Command) -> bool:
        """Send the command now if the gate is open, otherwise buffer it.

        Returns:
            True if the command was sent immediately, False if buffered.
        """
        if self._open and not self._flushing:
            self._send(command)
            return True

        self._pending.append(command)
        _LOGGER.debug(
            "Queued %s command (%d pending)", command.kind.value, len(self._pending)
        )
        return False

    def open(self) -> int:
        """Open the gate and flush buffered commands.

        Opening an already open gate is a no-op.

        Returns:
            Number of commands flushed.
        """
        if self._open:
            return 0

        self._open = True
        self._flushing = True
        flushed = 0
        try:
            while self._pending:
                command = self._pending.popleft()
                self._send(command)
                flushed += 1
        finally:
            self._flushing = False

        if flushed:
            _LOGGER.debug("Flushed %d queued commands", flushed)
        return flushed

    def close(self) -> None:
        """Close the gate. Buffered commands are kept for the next open()."""
        self._open = False

    def clear(self) -> None:
        self._pending.clear()
