"""Host configuration for an editor session.

Configuration is plain data. It can be built directly or loaded from a YAML
file using the host element's property names::

    editor_url: https://editor.example.com
    webhook_url: https://hooks.example.com/export
    user_id: user-42
    auto_load_on_start: true
    initial_image_url: https://cdn.example.com/start.png
    download_dir: ./downloads
    ready_timeout: 30
    relay_url: ws://localhost:8765/relay
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

DEFAULT_EDITOR_URL = "https://lmqkf0940zey.space.minimax.io"


@dataclass(frozen=True)
class EditorConfig:
    """Configuration pushed by the host into an editor session.

    Attributes:
        endpoint_url: URL of the embedded editor document.
        webhook_url: Export destination passed to the editor.
        user_id: Default user identifier for exports.
        auto_load: Load ``initial_image_url`` once the endpoint is configured.
        initial_image_url: Image loaded by auto-load.
        download_dir: Directory downloads are saved into (cwd when unset).
        ready_timeout: Seconds to wait for ``editor_ready``; None waits forever.
        download_timeout: Seconds to wait for ``image_data``; None waits forever.
        relay_url: WebSocket relay carrying the cross-frame messages.
    """

    endpoint_url: str = DEFAULT_EDITOR_URL
    webhook_url: str = ""
    user_id: str = ""
    auto_load: bool = False
    initial_image_url: str = ""
    download_dir: Path | None = None
    ready_timeout: float | None = None
    download_timeout: float | None = None
    relay_url: str | None = None


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file with error handling."""
    if not path.exists():
        raise ConfigError(f"File not found: {path}")
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Invalid YAML in {path}: {err}") from err
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {path}")
    return data


def _get_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"{key} must be a string")
    return value


def _get_timeout(data: dict[str, Any], key: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{key} must be a number of seconds")
    if value <= 0:
        raise ConfigError(f"{key} must be positive")
    return float(value)


def config_from_dict(data: dict[str, Any]) -> EditorConfig:
    """Build an EditorConfig from host property names.

    An empty ``editor_url`` falls back to DEFAULT_EDITOR_URL.

    Raises:
        ConfigError: If a value has the wrong type.
    """
    auto_load = data.get("auto_load_on_start", False)
    if not isinstance(auto_load, bool):
        raise ConfigError("auto_load_on_start must be a boolean")

    download_dir = _get_str(data, "download_dir")

    return EditorConfig(
        endpoint_url=_get_str(data, "editor_url") or DEFAULT_EDITOR_URL,
        webhook_url=_get_str(data, "webhook_url"),
        user_id=_get_str(data, "user_id"),
        auto_load=auto_load,
        initial_image_url=_get_str(data, "initial_image_url"),
        download_dir=Path(download_dir) if download_dir else None,
        ready_timeout=_get_timeout(data, "ready_timeout"),
        download_timeout=_get_timeout(data, "download_timeout"),
        relay_url=_get_str(data, "relay_url") or None,
    )


def load_config(path: Path | str) -> EditorConfig:
    """Load editor configuration from a YAML file.

    Raises:
        ConfigError: If the file is missing, malformed or has invalid values.
    """
    return config_from_dict(_load_yaml(Path(path)))
