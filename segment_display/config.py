"""
Display configuration.

Options can come from a YAML file:

    display:
      width: 800
      height: 300
      lines: 2
      cells_per_line: 20
      skew_angle: -15
      padding: 20
      row_gap: 10
      foreground_color: orangered
      background_dim_color: "#FFFFFF1D"
      canvas_background_color: black
      shapes_dir: /path/to/svgs     # optional

Command line flags override file values.
"""

import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from segment_display.core.geometry import (
    DEFAULT_CELLS_PER_LINE,
    DEFAULT_LINES,
    DEFAULT_PADDING,
    DEFAULT_ROW_GAP,
    DEFAULT_SKEW_ANGLE,
)
from segment_display.errors import ConfigurationError
from segment_display.utils.color import Color, parse_color

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 300
DEFAULT_FOREGROUND = (255, 69, 0, 255)  # OrangeRed
DEFAULT_BACKGROUND_DIM = (255, 255, 255, 0x1d)
DEFAULT_CANVAS_BACKGROUND = (0, 0, 0, 255)

_COLOR_FIELDS = ("foreground_color", "background_dim_color", "canvas_background_color")

# YAML keys that differ from the attribute names
_YAML_ALIASES = {
    "width": "target_width",
    "height": "target_height",
    "skew_angle": "skew_angle_degrees",
    "padding": "padding_px",
    "row_gap": "row_gap_px",
}


@dataclass
class DisplayConfig:
    """Configuration for one segment display canvas."""
    target_width: int = DEFAULT_WIDTH
    target_height: int = DEFAULT_HEIGHT
    lines: int = DEFAULT_LINES
    cells_per_line: int = DEFAULT_CELLS_PER_LINE
    skew_angle_degrees: float = DEFAULT_SKEW_ANGLE
    padding_px: float = DEFAULT_PADDING
    row_gap_px: float = DEFAULT_ROW_GAP
    foreground_color: Color = DEFAULT_FOREGROUND
    background_dim_color: Color = DEFAULT_BACKGROUND_DIM
    canvas_background_color: Color = DEFAULT_CANVAS_BACKGROUND
    shapes_dir: Optional[str] = None

    @property
    def cell_count(self) -> int:
        return self.lines * self.cells_per_line

    def validate(self) -> "DisplayConfig":
        """
        Check option ranges that can be checked without shapes.

        Raises:
            ConfigurationError: On an invalid value
        """
        if self.target_width <= 0 or self.target_height <= 0:
            raise ConfigurationError(
                f"Canvas size must be positive, got {self.target_width}x{self.target_height}"
            )
        if self.lines < 1:
            raise ConfigurationError(f"lines must be >= 1, got {self.lines}")
        if self.cells_per_line <= 1:
            raise ConfigurationError(f"cells_per_line must be > 1, got {self.cells_per_line}")
        if self.padding_px < 0 or self.row_gap_px < 0:
            raise ConfigurationError("padding and row_gap must not be negative")
        return self

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data = asdict(self)
        for name in _COLOR_FIELDS:
            data[name] = list(data[name])
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DisplayConfig":
        """
        Create from a dictionary of options (attribute names or YAML aliases).

        Raises:
            ConfigurationError: On unknown keys or unparsable values
        """
        known = {f.name: f for f in fields(cls)}
        kwargs = {}
        for key, value in (data or {}).items():
            name = _YAML_ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unknown display option: {key}")
            try:
                if name in _COLOR_FIELDS:
                    value = parse_color(value)
                elif name == "shapes_dir":
                    value = str(value) if value is not None else None
                elif name in ("target_width", "target_height", "lines", "cells_per_line"):
                    value = int(value)
                else:
                    value = float(value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid value for {key}: {value!r} ({e})") from e
            kwargs[name] = value
        return cls(**kwargs).validate()


def load_config(path: Union[str, Path]) -> DisplayConfig:
    """
    Load a DisplayConfig from the `display` section of a YAML file.

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    config_file = Path(path)
    if not config_file.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        with open(config_file, 'r') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config {path} must be a mapping")

    config = DisplayConfig.from_dict(data.get('display', {}))
    logger.info(f"Config loaded: {config.target_width}x{config.target_height}, "
                f"grid={config.lines}x{config.cells_per_line}, skew={config.skew_angle_degrees}")
    return config
