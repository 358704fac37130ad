"""Host-side bridge to an embedded, cross-origin image editor."""

__version__ = "0.1.0"

from .client import connect_session
from .command_queue import CommandQueue
from .config import DEFAULT_EDITOR_URL, EditorConfig, config_from_dict, load_config
from .download import (
    DownloadCoordinator,
    DownloadError,
    decode_data_url,
    normalize_filename,
)
from .errors import (
    ConfigError,
    EditorBridgeConnectionError,
    EditorBridgeError,
    EditorBridgeHandshakeError,
    EditorBridgeResponseError,
    EditorBridgeTimeout,
    ProtocolError,
)
from .origin import OriginValidator, origin_of
from .protocol import (
    Command,
    CommandKind,
    EditorErrorNotice,
    EditorReady,
    ExportError,
    ExportImage,
    ExportStarted,
    ExportSuccess,
    GetImageData,
    ImageData,
    ImageLoaded,
    ImageModified,
    LoadImage,
    Notification,
    NotificationKind,
    Redo,
    ResetCanvas,
    Undo,
    UnknownNotification,
    parse_notification,
)
from .session import EditorSession
from .state import (
    EditorEvent,
    EventName,
    ExportStatus,
    PublishedState,
    ReadinessState,
    SessionState,
)
from .transport import ImageFetcher, MessageChannel, RelayChannel

__all__ = [
    "DEFAULT_EDITOR_URL",
    "Command",
    "CommandKind",
    "CommandQueue",
    "ConfigError",
    "DownloadCoordinator",
    "DownloadError",
    "EditorBridgeConnectionError",
    "EditorBridgeError",
    "EditorBridgeHandshakeError",
    "EditorBridgeResponseError",
    "EditorBridgeTimeout",
    "EditorConfig",
    "EditorErrorNotice",
    "EditorEvent",
    "EditorReady",
    "EditorSession",
    "EventName",
    "ExportError",
    "ExportImage",
    "ExportStarted",
    "ExportStatus",
    "ExportSuccess",
    "GetImageData",
    "ImageData",
    "ImageFetcher",
    "ImageLoaded",
    "ImageModified",
    "LoadImage",
    "MessageChannel",
    "Notification",
    "NotificationKind",
    "OriginValidator",
    "ProtocolError",
    "PublishedState",
    "ReadinessState",
    "Redo",
    "RelayChannel",
    "ResetCanvas",
    "SessionState",
    "Undo",
    "UnknownNotification",
    "__version__",
    "config_from_dict",
    "connect_session",
    "decode_data_url",
    "load_config",
    "normalize_filename",
    "origin_of",
    "parse_notification",
]
