"""Editor session: one embedding surface talking to one embedded editor.

The session owns the readiness state machine, the outbound command queue,
origin validation of inbound messages and the download round trip. Every
action and every inbound message is handled synchronously; failures are
absorbed and surfaced as published state plus host events.

Usage:
    session = EditorSession(channel)
    session.on_event(my_event_handler)
    session.configure(EditorConfig(endpoint_url="https://editor.example.com"))
    session.load_image("https://cdn.example.com/cat.png", "user-42")
    ...
    session.close()
"""

from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from .command_queue import CommandQueue
from .config import EditorConfig
from .download import (
    DOWNLOAD_FAILED_MESSAGE,
    DownloadCoordinator,
    DownloadError,
    is_remote_url,
)
from .errors import EditorBridgeError, ProtocolError
from .origin import OriginValidator
from .protocol import (
    Command,
    EditorErrorNotice,
    ExportError,
    ExportImage,
    ImageData,
    ImageLoaded,
    LoadImage,
    Notification,
    NotificationKind,
    Redo,
    ResetCanvas,
    Undo,
    parse_notification,
)
from .state import (
    EditorEvent,
    EventName,
    ExportStatus,
    PublishedState,
    ReadinessState,
    SessionState,
)
from .transport.channel import MessageChannel
from .transport.http import ImageFetcher

_LOGGER = logging.getLogger(__name__)

EDITOR_TIMEOUT_MESSAGE = "Editor failed to respond"
NO_WEBHOOK_MESSAGE = "No webhook URL configured"
NOT_AN_IMAGE_MESSAGE = "Selected file is not an image"
READ_FAILED_MESSAGE = "Error reading selected file"
INVALID_URL_MESSAGE = "Invalid editor URL"

_IMAGE_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
)


def guess_content_type(
    data: bytes, *, filename: str | None = None, content_type: str | None = None
) -> str | None:
    """Determine the media type of uploaded file bytes.

    An explicit content type wins, then the filename extension, then the
    leading bytes of the file.
    """
    if content_type:
        return content_type.lower()
    if filename:
        guessed, _encoding = mimetypes.guess_type(filename)
        if guessed:
            return guessed
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    for signature, mime in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return mime
    return None


class EditorSession:
    """Host-side endpoint of the cross-frame editor protocol."""

    def __init__(
        self,
        channel: MessageChannel,
        *,
        session_id: str | None = None,
        download_dir: Path | str | None = None,
        fetcher: ImageFetcher | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize session and subscribe to the channel.

        Args:
            channel: Transport used to reach the embedded editor
            session_id: Identifier used in log messages (generated if omitted)
            download_dir: Directory downloads are saved into
            fetcher: HTTP fetcher for image data delivered as remote URLs
            clock: Time source for export timestamps
        """
        self.session_id = session_id or uuid4().hex[:8]

        self._channel = channel
        self._config: EditorConfig | None = None
        self._state = SessionState()
        self._validator = OriginValidator()
        self._queue = CommandQueue(self._post)
        self._downloads = DownloadCoordinator(download_dir)
        self._fetcher = fetcher
        self._clock = clock or (lambda: datetime.now(tz=UTC))

        self._event_callbacks: list[Callable[[EditorEvent], None]] = []
        self._state_callbacks: list[Callable[[PublishedState], None]] = []
        self._last_published = self._state.publish()

        self._ready_timer: asyncio.TimerHandle | None = None
        self._download_timer: asyncio.TimerHandle | None = None
        self._fetch_tasks: set[asyncio.Task[None]] = set()
        self._closed = False

        # Each session owns its own subscription
        self._unsubscribe = channel.add_listener(self.handle_message)

    # -------------------------------------------------------------------------
    # Public API: State
    # -------------------------------------------------------------------------

    @property
    def published_state(self) -> PublishedState:
        return self._state.publish()

    @property
    def readiness(self) -> ReadinessState:
        return self._state.readiness

    @property
    def is_ready(self) -> bool:
        return self._state.ready

    @property
    def config(self) -> EditorConfig | None:
        return self._config

    @property
    def pending_commands(self) -> tuple[Command, ...]:
        return self._queue.pending

    @property
    def pending_download(self) -> str | None:
        return self._downloads.pending

    # -------------------------------------------------------------------------
    # Public API: Callbacks
    # -------------------------------------------------------------------------

    def on_event(self, callback: Callable[[EditorEvent], None]) -> Callable[[], None]:
        """Subscribe to host events. Returns a callable that unsubscribes."""
        self._event_callbacks.append(callback)
        return lambda: self._remove(self._event_callbacks, callback)

    def on_state_changed(
        self, callback: Callable[[PublishedState], None]
    ) -> Callable[[], None]:
        """Subscribe to published state changes. Returns an unsubscribe callable."""
        self._state_callbacks.append(callback)
        return lambda: self._remove(self._state_callbacks, callback)

    # -------------------------------------------------------------------------
    # Public API: Configuration
    # -------------------------------------------------------------------------

    def configure(self, config: EditorConfig) -> None:
        """Apply host configuration.

        Changing the endpoint URL moves the session back to loading and resets
        readiness, modification, export status and any pending download.
        Queued commands are kept and go to the new endpoint once it is ready.
        """
        if self._closed:
            _LOGGER.warning("[%s] Configure called on closed session", self.session_id)
            return

        previous_url = self._config.endpoint_url if self._config else None
        self._config = config
        if config.download_dir is not None:
            self._downloads.download_dir = config.download_dir

        if config.endpoint_url != previous_url:
            self._change_endpoint(config.endpoint_url)

        _LOGGER.debug(
            "[%s] Properties updated - webhook: %s, userId: %s",
            self.session_id,
            config.webhook_url,
            config.user_id,
        )
        self._maybe_auto_load()

    # -------------------------------------------------------------------------
    # Public API: Actions
    # -------------------------------------------------------------------------

    def send_command(self, command: Command) -> bool:
        """Send a command now if the editor is ready, otherwise queue it.

        Returns:
            True if the command was sent or queued, False if rejected.
        """
        if not self._check_action(command.kind.value, require_ready=False):
            return False
        if not self._queue.enqueue(command):
            _LOGGER.info(
                "[%s] Editor not ready, queued %s", self.session_id, command.kind.value
            )
        return True

    def load_image(self, image_url: str, user_id: str = "") -> bool:
        """Load an image (URL or data URL), queueing until the editor is ready."""
        if not self._check_action("load image", require_ready=False):
            return False
        if not image_url:
            _LOGGER.warning("[%s] No image URL provided to load image", self.session_id)
            return False

        _LOGGER.info("[%s] Loading image for user %r", self.session_id, user_id)
        return self.send_command(LoadImage(image=image_url, user_id=user_id))

    def export_image(self, webhook_url: str = "", user_id: str = "") -> bool:
        """Ask the editor to export to the configured webhook.

        The configured webhook URL and user id take precedence over the
        arguments.
        """
        config = self._config
        if config is None or not self._check_action("export", require_ready=True):
            return False

        webhook = config.webhook_url or webhook_url
        user = config.user_id or user_id

        if not webhook:
            _LOGGER.error("[%s] No webhook URL configured", self.session_id)
            self._fail_export(NO_WEBHOOK_MESSAGE)
            return False

        _LOGGER.info("[%s] Exporting to webhook %s", self.session_id, webhook)
        return self.send_command(ExportImage(webhook_url=webhook, user_id=user))

    def reset_canvas(self) -> bool:
        """Clear the editor canvas."""
        if not self._check_action("reset", require_ready=True):
            return False

        self.send_command(ResetCanvas())
        self._state.clear_canvas()
        self._publish()
        return True

    def undo(self) -> bool:
        if not self._check_action("undo", require_ready=True):
            return False
        return self.send_command(Undo())

    def redo(self) -> bool:
        if not self._check_action("redo", require_ready=True):
            return False
        return self.send_command(Redo())

    def upload_image_file(
        self,
        file_bytes: bytes,
        user_id: str = "",
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> bool:
        """Load raw image file bytes into the editor as a data URL."""
        if not self._check_action("upload image", require_ready=False):
            return False

        mime = guess_content_type(
            file_bytes, filename=filename, content_type=content_type
        )
        if mime is None or not mime.startswith("image/"):
            _LOGGER.error("[%s] Selected file is not an image", self.session_id)
            self._report_error(NOT_AN_IMAGE_MESSAGE)
            return False

        data_url = f"data:{mime};base64,{base64.b64encode(file_bytes).decode('ascii')}"

        self._state.current_image_ref = data_url
        self._state.current_user_id = user_id
        self._publish()

        _LOGGER.info(
            "[%s] Uploading %d byte %s image", self.session_id, len(file_bytes), mime
        )
        return self.send_command(LoadImage(image=data_url, user_id=user_id))

    def upload_image_path(self, path: Path | str, user_id: str = "") -> bool:
        """Read an image file from disk and upload it."""
        if not self._check_action("upload image", require_ready=False):
            return False

        path = Path(path)
        try:
            file_bytes = path.read_bytes()
        except OSError as err:
            _LOGGER.error("[%s] Error reading %s: %s", self.session_id, path, err)
            self._report_error(READ_FAILED_MESSAGE)
            return False

        return self.upload_image_file(file_bytes, user_id, filename=path.name)

    def download_edited_image(self, filename: str | None = None) -> bool:
        """Request the canvas contents and save them once they arrive.

        A second request before the first reply replaces the first.
        """
        if not self._check_action("download image", require_ready=True):
            return False

        command = self._downloads.request(filename)
        self._cancel_download_timer()
        if self._config is not None:
            self._download_timer = self._call_later(
                self._config.download_timeout, self._on_download_timeout
            )

        _LOGGER.info(
            "[%s] Requested image data for %s", self.session_id, self._downloads.pending
        )
        return self.send_command(command)

    def reset(self) -> None:
        """Reset the surface to a blank canvas with no image or user."""
        if self._closed:
            return
        _LOGGER.info("[%s] Resetting element", self.session_id)
        if self.is_ready and self._validator.origin is not None:
            self._queue.enqueue(ResetCanvas())

        self._state.clear_canvas()
        self._state.current_user_id = ""
        self._publish()

    def close(self) -> None:
        """Tear down the surface: stop listening and drop pending work."""
        if self._closed:
            return

        _LOGGER.info("[%s] Closing session", self.session_id)
        self._closed = True
        self._unsubscribe()

        self._cancel_ready_timer()
        self._cancel_download_timer()
        for task in list(self._fetch_tasks):
            task.cancel()
        self._fetch_tasks.clear()
        self._downloads.cancel()

    # -------------------------------------------------------------------------
    # Inbound dispatch
    # -------------------------------------------------------------------------

    def handle_message(self, data: Any, origin: str) -> None:
        """Validate and dispatch one inbound message.

        Messages from any origin other than the endpoint's are dropped
        without touching state or raising events.
        """
        if self._closed:
            return

        if not self._validator.accepts(origin):
            _LOGGER.warning(
                "[%s] Received message from unauthorized origin: %s",
                self.session_id,
                origin,
            )
            return

        try:
            notification = parse_notification(data)
        except ProtocolError as err:
            _LOGGER.warning("[%s] Invalid message: %s", self.session_id, err)
            return

        _LOGGER.debug("[%s] Received message: %s", self.session_id, notification.kind.value)
        self._dispatch(notification)

    def _dispatch(self, notification: Notification) -> None:
        kind = notification.kind

        if kind is NotificationKind.EDITOR_READY:
            self._handle_editor_ready()
        elif isinstance(notification, ImageLoaded):
            self._handle_image_loaded(notification)
        elif kind is NotificationKind.IMAGE_MODIFIED:
            self._state.modified = True
            self._publish()
            self._emit(EventName.IMAGE_MODIFIED)
        elif kind is NotificationKind.EXPORT_STARTED:
            self._state.export_status = ExportStatus.EXPORTING
            self._state.error_message = ""
            self._publish()
            self._emit(EventName.EXPORT_STARTED)
        elif kind is NotificationKind.EXPORT_SUCCESS:
            self._handle_export_success()
        elif isinstance(notification, ExportError):
            message = notification.error or "Export failed"
            _LOGGER.error("[%s] Export error: %s", self.session_id, message)
            self._state.export_status = ExportStatus.ERROR
            self._fail_export(message)
        elif isinstance(notification, EditorErrorNotice):
            message = notification.error or "Unknown error"
            _LOGGER.error("[%s] Editor error: %s", self.session_id, message)
            self._report_error(message)
        elif isinstance(notification, ImageData):
            self._handle_image_data(notification)
        else:
            _LOGGER.debug(
                "[%s] Unknown message type: %s",
                self.session_id,
                getattr(notification, "type", kind.value),
            )

    def _handle_editor_ready(self) -> None:
        if self._state.ready:
            _LOGGER.debug("[%s] Editor already ready", self.session_id)
            return

        self._cancel_ready_timer()
        self._set_readiness(ReadinessState.READY)
        self._state.error_message = ""

        flushed = self._queue.open()
        _LOGGER.info(
            "[%s] Editor is ready (%d queued commands sent)", self.session_id, flushed
        )

        self._publish()
        self._emit(EventName.EDITOR_LOADED)

    def _handle_image_loaded(self, notification: ImageLoaded) -> None:
        self._state.current_image_ref = notification.image or ""
        self._state.current_user_id = notification.user_id or ""
        self._state.modified = False
        self._state.error_message = ""
        self._publish()
        self._emit(
            EventName.IMAGE_LOADED,
            {
                "url": self._state.current_image_ref,
                "userId": self._state.current_user_id,
            },
        )

    def _handle_export_success(self) -> None:
        timestamp = self._clock()
        self._state.export_status = ExportStatus.SUCCESS
        self._state.last_export_timestamp = timestamp
        self._state.error_message = ""
        self._publish()
        self._emit(EventName.EXPORT_COMPLETED, {"timestamp": timestamp})

    def _handle_image_data(self, notification: ImageData) -> None:
        if self._downloads.pending is not None and is_remote_url(
            notification.image_data or ""
        ):
            self._start_remote_download(notification)
            return

        try:
            path = self._downloads.complete(notification)
        except DownloadError as err:
            _LOGGER.error(
                "[%s] Invalid image data received for download: %s",
                self.session_id,
                err,
            )
            if self._downloads.pending is None:
                self._cancel_download_timer()
            self._report_error(DOWNLOAD_FAILED_MESSAGE)
            return

        self._cancel_download_timer()
        _LOGGER.info("[%s] Image download saved to %s", self.session_id, path)

    # -------------------------------------------------------------------------
    # Internal: Downloads of remote image data
    # -------------------------------------------------------------------------

    def _start_remote_download(self, notification: ImageData) -> None:
        filename, url = self._downloads.claim(notification)
        self._cancel_download_timer()

        if self._fetcher is None:
            _LOGGER.error(
                "[%s] Image data is a remote URL but no fetcher is configured",
                self.session_id,
            )
            self._report_error(DOWNLOAD_FAILED_MESSAGE)
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            _LOGGER.error("[%s] No event loop to fetch %s", self.session_id, url)
            self._report_error(DOWNLOAD_FAILED_MESSAGE)
            return

        task = loop.create_task(self._fetch_and_save(self._fetcher, filename, url))
        self._fetch_tasks.add(task)
        task.add_done_callback(self._fetch_tasks.discard)

    async def _fetch_and_save(
        self, fetcher: ImageFetcher, filename: str, url: str
    ) -> None:
        try:
            data, _content_type = await fetcher.fetch(url)
            path = await asyncio.to_thread(self._downloads.save, filename, data)
        except EditorBridgeError as err:
            _LOGGER.error("[%s] Download of %s failed: %s", self.session_id, url, err)
            self._report_error(DOWNLOAD_FAILED_MESSAGE)
            return

        _LOGGER.info("[%s] Image download saved to %s", self.session_id, path)

    # -------------------------------------------------------------------------
    # Internal: Readiness State Machine
    # -------------------------------------------------------------------------

    def _set_readiness(self, readiness: ReadinessState) -> None:
        if self._state.readiness is not readiness:
            _LOGGER.debug(
                "[%s] State: %s → %s",
                self.session_id,
                self._state.readiness.value,
                readiness.value,
            )
            self._state.readiness = readiness

    def _change_endpoint(self, url: str) -> None:
        _LOGGER.info("[%s] Updating editor URL to: %s", self.session_id, url)
        self._validator.url = url

        has_origin = self._validator.origin is not None
        self._set_readiness(
            ReadinessState.LOADING if has_origin else ReadinessState.UNINITIALIZED
        )
        self._state.enter_loading()
        self._queue.close()
        self._downloads.cancel()
        self._cancel_download_timer()
        self._cancel_ready_timer()
        self._publish()

        if not has_origin:
            _LOGGER.error("[%s] Editor URL has no origin: %s", self.session_id, url)
            self._report_error(INVALID_URL_MESSAGE)
            return

        if self._config is not None:
            self._ready_timer = self._call_later(
                self._config.ready_timeout, self._on_ready_timeout
            )

    def _maybe_auto_load(self) -> None:
        config = self._config
        if config is None or not config.auto_load or not config.initial_image_url:
            return
        if self._state.auto_load_executed:
            return

        self._state.auto_load_executed = True
        _LOGGER.debug("[%s] Auto-loading initial image", self.session_id)
        self.load_image(config.initial_image_url, config.user_id)

    # -------------------------------------------------------------------------
    # Internal: Timeouts
    # -------------------------------------------------------------------------

    def _call_later(
        self, delay: float | None, callback: Callable[[], None]
    ) -> asyncio.TimerHandle | None:
        if delay is None:
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            _LOGGER.debug("[%s] No running event loop, timeout not armed", self.session_id)
            return None
        return loop.call_later(delay, callback)

    def _cancel_ready_timer(self) -> None:
        if self._ready_timer is not None:
            self._ready_timer.cancel()
            self._ready_timer = None

    def _cancel_download_timer(self) -> None:
        if self._download_timer is not None:
            self._download_timer.cancel()
            self._download_timer = None

    def _on_ready_timeout(self) -> None:
        self._ready_timer = None
        if self._closed or self._state.ready:
            return

        _LOGGER.error("[%s] Editor did not announce readiness", self.session_id)
        self._queue.clear()
        self._report_error(EDITOR_TIMEOUT_MESSAGE)

    def _on_download_timeout(self) -> None:
        self._download_timer = None
        if self._closed or self._downloads.pending is None:
            return

        _LOGGER.error(
            "[%s] No image data received for %s",
            self.session_id,
            self._downloads.pending,
        )
        self._downloads.cancel()
        self._report_error(EDITOR_TIMEOUT_MESSAGE)

    # -------------------------------------------------------------------------
    # Internal: Outbound
    # -------------------------------------------------------------------------

    def _check_action(self, action: str, *, require_ready: bool) -> bool:
        if self._closed:
            _LOGGER.warning("[%s] Session closed, cannot %s", self.session_id, action)
            return False
        if self._config is None or self._validator.origin is None:
            _LOGGER.error(
                "[%s] Editor URL not configured, cannot %s", self.session_id, action
            )
            return False
        if require_ready and not self._state.ready:
            _LOGGER.warning("[%s] Editor not ready, cannot %s", self.session_id, action)
            return False
        return True

    def _post(self, command: Command) -> None:
        """Post a command, pinned to the current endpoint origin."""
        origin = self._validator.origin
        if origin is None:
            _LOGGER.error(
                "[%s] Dropping %s: no editor origin", self.session_id, command.kind.value
            )
            return

        try:
            self._channel.post_message(command.to_wire(), origin)
        except (EditorBridgeError, ValueError) as err:
            _LOGGER.error(
                "[%s] Failed to post %s: %s", self.session_id, command.kind.value, err
            )
            return
        _LOGGER.debug("[%s] Sent %s", self.session_id, command.kind.value)

    # -------------------------------------------------------------------------
    # Internal: Published state and events
    # -------------------------------------------------------------------------

    def _report_error(self, message: str) -> None:
        self._state.error_message = message
        self._publish()
        self._emit(EventName.EDITOR_ERROR, {"error": message})

    def _fail_export(self, message: str) -> None:
        self._state.error_message = message
        self._publish()
        self._emit(EventName.EXPORT_FAILED, {"error": message})

    def _publish(self) -> None:
        snapshot = self._state.publish()
        if snapshot == self._last_published:
            return
        self._last_published = snapshot

        for callback in list(self._state_callbacks):
            try:
                callback(snapshot)
            except Exception as err:
                _LOGGER.exception("[%s] State callback error: %s", self.session_id, err)

    def _emit(self, name: EventName, payload: dict[str, Any] | None = None) -> None:
        event = EditorEvent(name=name, payload=payload or {})
        for callback in list(self._event_callbacks):
            try:
                callback(event)
            except Exception as err:
                _LOGGER.exception("[%s] Event callback error: %s", self.session_id, err)

    @staticmethod
    def _remove(callbacks: list[Any], callback: Any) -> None:
        if callback in callbacks:
            callbacks.remove(callback)
