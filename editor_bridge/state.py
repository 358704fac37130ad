"""Session state, published state and host events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ReadinessState(Enum):
    """Readiness of the embedded editor."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class ExportStatus(Enum):
    """Progress of the most recent export."""

    IDLE = "idle"
    EXPORTING = "exporting"
    SUCCESS = "success"
    ERROR = "error"


class EventName(Enum):
    """Events raised to the host. Values are the host-facing names."""

    EDITOR_LOADED = "Editor loaded"
    IMAGE_LOADED = "Image loaded"
    IMAGE_MODIFIED = "Image modified"
    EXPORT_STARTED = "Export started"
    EXPORT_COMPLETED = "Export completed"
    EXPORT_FAILED = "Export failed"
    EDITOR_ERROR = "Editor error"


@dataclass(frozen=True)
class EditorEvent:
    """A fire-and-observe event delivered to host subscribers."""

    name: EventName
    payload: dict[str, Any] = field(default_factory=lambda: {})


@dataclass(frozen=True)
class PublishedState:
    """Read-only projection of the session state exposed to the host."""

    is_loaded: bool
    is_modified: bool
    export_status: ExportStatus
    current_image_url: str
    current_user_id: str
    error_message: str
    last_export_timestamp: datetime | None


@dataclass
class SessionState:
    """Mutable per-surface state. Owned by exactly one EditorSession.

    Attributes:
        readiness: Readiness state machine position.
        modified: Whether the canvas has unsaved edits.
        export_status: Progress of the most recent export.
        current_image_ref: Image URL or data URL currently loaded.
        current_user_id: User the current image belongs to.
        error_message: Last error message, empty when none.
        last_export_timestamp: Time of the last successful export.
        auto_load_executed: Whether auto-load already ran for this endpoint.
    """

    readiness: ReadinessState = ReadinessState.UNINITIALIZED
    modified: bool = False
    export_status: ExportStatus = ExportStatus.IDLE
    current_image_ref: str = ""
    current_user_id: str = ""
    error_message: str = ""
    last_export_timestamp: datetime | None = None
    auto_load_executed: bool = False

    @property
    def ready(self) -> bool:
        return self.readiness is ReadinessState.READY

    def enter_loading(self) -> None:
        """Reset for a newly configured endpoint URL. Readiness is set by the caller."""
        self.modified = False
        self.export_status = ExportStatus.IDLE
        self.auto_load_executed = False

    def clear_canvas(self) -> None:
        """Forget the loaded image after a canvas reset."""
        self.modified = False
        self.current_image_ref = ""
        self.export_status = ExportStatus.IDLE
        self.error_message = ""

    def publish(self) -> PublishedState:
        return PublishedState(
            is_loaded=self.ready,
            is_modified=self.modified,
            export_status=self.export_status,
            current_image_url=self.current_image_ref,
            current_user_id=self.current_user_id,
            error_message=self.error_message,
            last_export_timestamp=self.last_export_timestamp,
        )
