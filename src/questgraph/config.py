"""Editor configuration loading.

Reads user-level editor defaults from ~/.config/questgraph/config.yaml.
Per-project preferences (auto-save, grid) live in the project document
itself; this file only holds defaults that apply across projects.

Example config.yaml::

    layout:
      direction: LR
      node_width: 280
      horizontal_spacing: 100
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from questgraph.graph.layout import LayoutOptions
from questgraph.observability.logging import get_logger

log = get_logger(__name__)

# XDG-compliant default config directory
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "questgraph"
CONFIG_FILENAME = "config.yaml"
RECENT_PROJECT_FILENAME = "recent-project.json"

LAYOUT_DIRECTION_ENV = "QG_LAYOUT_DIRECTION"
_DIRECTIONS = ("TB", "LR")


class ConfigError(Exception):
    """Raised when editor configuration cannot be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load editor config at {path}: {reason}")


@dataclass
class LayoutConfig:
    """Default auto-layout settings.

    The direction can be overridden with the QG_LAYOUT_DIRECTION
    environment variable.
    """

    direction: str = "TB"
    node_width: float = 300
    node_height: float = 150
    horizontal_spacing: float = 80
    vertical_spacing: float = 60

    def get_direction(self) -> str:
        """Get the effective layout direction (environment, then config)."""
        return (os.getenv(LAYOUT_DIRECTION_ENV) or self.direction).upper()

    def to_options(self, direction: str | None = None) -> LayoutOptions:
        """Build layout options, with an optional explicit direction.

        Raises:
            ValueError: If the resulting direction is not TB or LR.
        """
        effective = (direction or self.get_direction()).upper()
        if effective not in _DIRECTIONS:
            msg = f"Unknown layout direction '{effective}'. Supported: {', '.join(_DIRECTIONS)}"
            raise ValueError(msg)
        return LayoutOptions(
            direction="LR" if effective == "LR" else "TB",
            node_width=self.node_width,
            node_height=self.node_height,
            horizontal_spacing=self.horizontal_spacing,
            vertical_spacing=self.vertical_spacing,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LayoutConfig:
        """Create config from dictionary.

        Args:
            data: Dictionary with direction, node sizes and spacings.

        Returns:
            LayoutConfig instance.
        """
        defaults = cls()
        return cls(
            direction=str(data.get("direction", defaults.direction)).upper(),
            node_width=float(data.get("node_width", defaults.node_width)),
            node_height=float(data.get("node_height", defaults.node_height)),
            horizontal_spacing=float(data.get("horizontal_spacing", defaults.horizontal_spacing)),
            vertical_spacing=float(data.get("vertical_spacing", defaults.vertical_spacing)),
        )


@dataclass
class EditorConfig:
    """User-level editor configuration."""

    config_dir: Path = DEFAULT_CONFIG_DIR
    layout: LayoutConfig = field(default_factory=LayoutConfig)

    @property
    def recent_project_path(self) -> Path:
        return self.config_dir / RECENT_PROJECT_FILENAME

    @classmethod
    def from_dict(cls, data: dict[str, Any], config_dir: Path = DEFAULT_CONFIG_DIR) -> EditorConfig:
        layout_data = data.get("layout") or {}
        if not isinstance(layout_data, dict):
            raise ValueError("'layout' must be a mapping")
        return cls(config_dir=config_dir, layout=LayoutConfig.from_dict(dict(layout_data)))


def load_editor_config(config_dir: Path | None = None) -> EditorConfig:
    """Load the user's editor configuration.

    Args:
        config_dir: Override config directory (for testing).
            Defaults to ~/.config/questgraph/.

    Returns:
        EditorConfig; defaults when the file does not exist or is empty.

    Raises:
        ConfigError: If the file cannot be read, parsed, or holds invalid values.
    """
    config_dir = config_dir or DEFAULT_CONFIG_DIR
    config_path = config_dir / CONFIG_FILENAME

    if not config_path.exists():
        return EditorConfig(config_dir=config_dir)

    yaml = YAML()
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)
    except OSError as e:
        raise ConfigError(config_path, str(e)) from e
    except YAMLError as e:
        raise ConfigError(config_path, f"Invalid YAML: {e}") from e

    if data is None:
        return EditorConfig(config_dir=config_dir)
    if not isinstance(data, dict):
        raise ConfigError(config_path, "Top level must be a mapping")

    try:
        config = EditorConfig.from_dict(dict(data), config_dir=config_dir)
    except (TypeError, ValueError) as e:
        raise ConfigError(config_path, str(e)) from e

    if config.layout.direction not in _DIRECTIONS:
        raise ConfigError(config_path, f"Unknown layout direction '{config.layout.direction}'")

    log.debug("editor_config_loaded", path=str(config_path))
    return config
