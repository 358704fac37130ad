"""Tests for CommandQueue ordering and flush semantics."""

from __future__ import annotations

from editor_bridge.command_queue import CommandQueue
from editor_bridge.protocol import Command, LoadImage, Redo, Undo


def _recording_queue() -> tuple[CommandQueue, list[Command]]:
    sent: list[Command] = []
    return CommandQueue(sent.append), sent


class TestCommandQueue:
    """Tests for CommandQueue."""

    def test_buffers_while_closed(self) -> None:
        queue, sent = _recording_queue()

        assert queue.enqueue(Undo()) is False
        assert queue.enqueue(Redo()) is False

        assert sent == []
        assert queue.pending == (Undo(), Redo())

    def test_open_flushes_in_fifo_order(self) -> None:
        queue, sent = _recording_queue()
        commands = [LoadImage(image=f"img{i}") for i in range(10)]
        for command in commands:
            queue.enqueue(command)

        flushed = queue.open()

        assert flushed == 10
        assert sent == commands
        assert queue.pending == ()

    def test_sends_immediately_when_open(self) -> None:
        queue, sent = _recording_queue()
        queue.open()

        assert queue.enqueue(Undo()) is True
        assert sent == [Undo()]
        assert queue.pending == ()

    def test_second_open_does_not_resend(self) -> None:
        queue, sent = _recording_queue()
        queue.enqueue(Undo())
        queue.open()

        assert queue.open() == 0
        assert sent == [Undo()]

    def test_enqueue_during_flush_goes_last(self) -> None:
        sent: list[Command] = []
        queue: CommandQueue

        def send(command: Command) -> None:
            sent.append(command)
            if command == LoadImage(image="first"):
                queue.enqueue(LoadImage(image="during"))

        queue = CommandQueue(send)
        queue.enqueue(LoadImage(image="first"))
        queue.enqueue(LoadImage(image="second"))

        queue.open()

        assert sent == [
            LoadImage(image="first"),
            LoadImage(image="second"),
            LoadImage(image="during"),
        ]
        assert queue.pending == ()

    def test_close_keeps_buffer(self) -> None:
        queue, sent = _recording_queue()
        queue.open()
        queue.close()

        queue.enqueue(Undo())
        assert queue.is_open is False
        assert sent == []

        queue.open()
        assert sent == [Undo()]

    def test_clear(self) -> None:
        queue, sent = _recording_queue()
        queue.enqueue(Undo())
        queue.clear()
        queue.open()
        assert sent == []
