"""Wire protocol between the host and the embedded editor.

Commands flow host -> editor, notifications flow editor -> host. Both are
plain JSON objects discriminated by their ``type`` field; this module maps
them to immutable dataclasses and back.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from .errors import ProtocolError

_LOGGER = logging.getLogger(__name__)


class CommandKind(Enum):
    """Outbound command types understood by the editor."""

    LOAD_IMAGE = "load_image"
    EXPORT = "export"
    RESET = "reset"
    UNDO = "undo"
    REDO = "redo"
    GET_IMAGE_DATA = "get_image_data"


class NotificationKind(Enum):
    """Inbound notification types emitted by the editor."""

    EDITOR_READY = "editor_ready"
    IMAGE_LOADED = "image_loaded"
    IMAGE_MODIFIED = "image_modified"
    EXPORT_STARTED = "export_started"
    EXPORT_SUCCESS = "export_success"
    EXPORT_ERROR = "export_error"
    ERROR = "error"
    IMAGE_DATA = "image_data"
    UNKNOWN = "unknown"


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Command:
    """Base class for outbound commands."""

    kind: ClassVar[CommandKind]

    def _fields(self) -> dict[str, Any]:
        return {}

    def to_wire(self) -> dict[str, Any]:
        """Serialize into the JSON object posted to the editor."""
        return {"type": self.kind.value, **self._fields()}


@dataclass(frozen=True)
class LoadImage(Command):
    """Load an image (URL or data URL) into the canvas."""

    kind: ClassVar[CommandKind] = CommandKind.LOAD_IMAGE

    image: str
    user_id: str = ""

    def _fields(self) -> dict[str, Any]:
        return {"image": self.image, "userId": self.user_id}


@dataclass(frozen=True)
class ExportImage(Command):
    """Ask the editor to export the canvas to a webhook."""

    kind: ClassVar[CommandKind] = CommandKind.EXPORT

    webhook_url: str
    user_id: str = ""

    def _fields(self) -> dict[str, Any]:
        return {"webhookUrl": self.webhook_url, "userId": self.user_id}


@dataclass(frozen=True)
class ResetCanvas(Command):
    kind: ClassVar[CommandKind] = CommandKind.RESET


@dataclass(frozen=True)
class Undo(Command):
    kind: ClassVar[CommandKind] = CommandKind.UNDO


@dataclass(frozen=True)
class Redo(Command):
    kind: ClassVar[CommandKind] = CommandKind.REDO


@dataclass(frozen=True)
class GetImageData(Command):
    """Request the current canvas contents as an ``image_data`` reply."""

    kind: ClassVar[CommandKind] = CommandKind.GET_IMAGE_DATA

    format: str = "png"

    def _fields(self) -> dict[str, Any]:
        return {"format": self.format}


# -----------------------------------------------------------------------------
# Notifications
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Notification:
    """Base class for inbound notifications."""

    kind: ClassVar[NotificationKind]


@dataclass(frozen=True)
class EditorReady(Notification):
    kind: ClassVar[NotificationKind] = NotificationKind.EDITOR_READY


@dataclass(frozen=True)
class ImageLoaded(Notification):
    kind: ClassVar[NotificationKind] = NotificationKind.IMAGE_LOADED

    image: str | None = None
    user_id: str | None = None


@dataclass(frozen=True)
class ImageModified(Notification):
    kind: ClassVar[NotificationKind] = NotificationKind.IMAGE_MODIFIED


@dataclass(frozen=True)
class ExportStarted(Notification):
    kind: ClassVar[NotificationKind] = NotificationKind.EXPORT_STARTED


@dataclass(frozen=True)
class ExportSuccess(Notification):
    kind: ClassVar[NotificationKind] = NotificationKind.EXPORT_SUCCESS


@dataclass(frozen=True)
class ExportError(Notification):
    kind: ClassVar[NotificationKind] = NotificationKind.EXPORT_ERROR

    error: str | None = None


@dataclass(frozen=True)
class EditorErrorNotice(Notification):
    kind: ClassVar[NotificationKind] = NotificationKind.ERROR

    error: str | None = None


@dataclass(frozen=True)
class ImageData(Notification):
    """Canvas contents sent in reply to ``get_image_data``."""

    kind: ClassVar[NotificationKind] = NotificationKind.IMAGE_DATA

    image_data: str | None = None


@dataclass(frozen=True)
class UnknownNotification(Notification):
    """A notification whose type this bridge does not understand."""

    kind: ClassVar[NotificationKind] = NotificationKind.UNKNOWN

    type: str = ""
    payload: dict[str, Any] = field(default_factory=lambda: {})


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    """Read an optional string field.

    Scalars are stringified; any other non-string value is treated as absent
    so the receiver falls back to its default.
    """
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        _LOGGER.debug("Coercing field %r to string: %r", key, value)
        return str(value)
    _LOGGER.debug("Ignoring non-string field %r: %r", key, value)
    return None


def parse_notification(data: Any) -> Notification:
    """Parse an inbound wire object into a Notification.

    Raises:
        ProtocolError: If data is not an object or lacks a string ``type``.
    """
    if not isinstance(data, Mapping):
        raise ProtocolError("Notification must be a JSON object")

    msg_type = data.get("type")
    if not isinstance(msg_type, str) or not msg_type:
        raise ProtocolError("Notification has no type")

    try:
        kind = NotificationKind(msg_type)
    except ValueError:
        kind = NotificationKind.UNKNOWN

    if kind is NotificationKind.EDITOR_READY:
        return EditorReady()
    if kind is NotificationKind.IMAGE_LOADED:
        return ImageLoaded(
            image=_optional_str(data, "image"),
            user_id=_optional_str(data, "userId"),
        )
    if kind is NotificationKind.IMAGE_MODIFIED:
        return ImageModified()
    if kind is NotificationKind.EXPORT_STARTED:
        return ExportStarted()
    if kind is NotificationKind.EXPORT_SUCCESS:
        return ExportSuccess()
    if kind is NotificationKind.EXPORT_ERROR:
        return ExportError(error=_optional_str(data, "error"))
    if kind is NotificationKind.ERROR:
        return EditorErrorNotice(error=_optional_str(data, "error"))
    if kind is NotificationKind.IMAGE_DATA:
        return ImageData(image_data=_optional_str(data, "imageData"))

    # "unknown" on the wire is just another unrecognized type
    return UnknownNotification(type=msg_type, payload=dict(data))
