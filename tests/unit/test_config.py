"""Tests for editor configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from questgraph.config import (
    CONFIG_FILENAME,
    ConfigError,
    EditorConfig,
    LayoutConfig,
    load_editor_config,
)

if TYPE_CHECKING:
    from pathlib import Path


class TestLayoutConfig:
    def test_defaults(self) -> None:
        config = LayoutConfig()

        assert config.direction == "TB"
        assert (config.node_width, config.node_height) == (300, 150)
        assert (config.horizontal_spacing, config.vertical_spacing) == (80, 60)

    def test_from_dict(self) -> None:
        config = LayoutConfig.from_dict({"direction": "lr", "node_width": 280})

        assert config.direction == "LR"
        assert config.node_width == 280
        assert config.vertical_spacing == 60

    def test_env_overrides_direction(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("QG_LAYOUT_DIRECTION", "lr")

        assert LayoutConfig(direction="TB").get_direction() == "LR"

    def test_to_options(self) -> None:
        options = LayoutConfig(horizontal_spacing=10).to_options()

        assert options.direction == "TB"
        assert options.horizontal_spacing == 10

    def test_explicit_direction_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("QG_LAYOUT_DIRECTION", "TB")

        assert LayoutConfig().to_options("lr").direction == "LR"

    def test_unknown_direction(self) -> None:
        with pytest.raises(ValueError, match="Unknown layout direction 'DIAGONAL'"):
            LayoutConfig().to_options("diagonal")


class TestLoadEditorConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        config = load_editor_config(tmp_path)

        assert config == EditorConfig(config_dir=tmp_path)
        assert config.recent_project_path == tmp_path / "recent-project.json"

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")

        assert load_editor_config(tmp_path).layout == LayoutConfig()

    def test_loads_yaml(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text(
            "# editor defaults\nlayout:\n  direction: LR\n  horizontal_spacing: 100\n"
        )

        config = load_editor_config(tmp_path)

        assert config.layout.direction == "LR"
        assert config.layout.horizontal_spacing == 100
        assert config.layout.node_width == 300

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("layout: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_editor_config(tmp_path)

    def test_top_level_must_be_mapping(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("- one\n- two\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_editor_config(tmp_path)

    def test_layout_must_be_mapping(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("layout: sideways\n")

        with pytest.raises(ConfigError, match="'layout' must be a mapping"):
            load_editor_config(tmp_path)

    def test_invalid_number(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("layout:\n  node_width: wide\n")

        with pytest.raises(ConfigError):
            load_editor_config(tmp_path)

    def test_invalid_direction(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("layout:\n  direction: diagonal\n")

        with pytest.raises(ConfigError, match="DIAGONAL"):
            load_editor_config(tmp_path)
