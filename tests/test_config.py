"""Tests for editor configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from editor_bridge.config import (
    DEFAULT_EDITOR_URL,
    EditorConfig,
    config_from_dict,
    load_config,
)
from editor_bridge.errors import ConfigError


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "editor.yaml"
    path.write_text(
        "editor_url: https://e.example/editor\n"
        "webhook_url: https://hooks.example/export\n"
        "user_id: u1\n"
        "auto_load_on_start: true\n"
        "initial_image_url: https://cdn.example/start.png\n"
        "download_dir: downloads\n"
        "ready_timeout: 30\n"
        "download_timeout: 12.5\n"
        "relay_url: ws://localhost:8765/relay\n"
    )
    return path


class TestLoadConfig:
    """Tests for load_config()."""

    def test_loads_all_fields(self, config_file: Path) -> None:
        config = load_config(config_file)

        assert config == EditorConfig(
            endpoint_url="https://e.example/editor",
            webhook_url="https://hooks.example/export",
            user_id="u1",
            auto_load=True,
            initial_image_url="https://cdn.example/start.png",
            download_dir=Path("downloads"),
            ready_timeout=30.0,
            download_timeout=12.5,
            relay_url="ws://localhost:8765/relay",
        )

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")

        config = load_config(path)

        assert config.endpoint_url == DEFAULT_EDITOR_URL
        assert config.webhook_url == ""
        assert config.auto_load is False
        assert config.ready_timeout is None
        assert config.relay_url is None

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="File not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("editor_url: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_non_mapping_document(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)


class TestConfigFromDict:
    """Tests for config_from_dict() validation."""

    def test_blank_editor_url_falls_back(self) -> None:
        assert config_from_dict({"editor_url": ""}).endpoint_url == DEFAULT_EDITOR_URL

    @pytest.mark.parametrize(
        ("data", "message"),
        [
            ({"editor_url": 42}, "editor_url"),
            ({"auto_load_on_start": "yes"}, "auto_load_on_start"),
            ({"ready_timeout": "soon"}, "ready_timeout"),
            ({"ready_timeout": True}, "ready_timeout"),
            ({"download_timeout": 0}, "download_timeout"),
        ],
    )
    def test_rejects_invalid_values(self, data: dict, message: str) -> None:
        with pytest.raises(ConfigError, match=message):
            config_from_dict(data)
