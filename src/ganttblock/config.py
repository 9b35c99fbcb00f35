"""Configuration for ganttblock (ganttblock.yaml).

Example::

    canvas_width: 1200
    layout:
      row_height: 40
      default_axis_ticks: 8
      default_date_format: "%b %d"
    links:
      deep_link_scheme: obsidian
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigError

DEFAULT_CONFIG_FILENAME = "ganttblock.yaml"


class LayoutConfig(BaseModel):
    """Pixel constants used by the layout engine."""

    row_height: float = Field(default=50.0, gt=0)
    height_padding: float = Field(default=100.0, ge=0)  # Title slot above, axis slot below
    task_padding: float = Field(default=5.0, ge=0)  # Vertical inset of bars within a row
    width_scale: float = Field(default=0.95, gt=0, le=1)
    group_column_size: float = Field(default=0.1, ge=0, lt=1)  # Fraction of the canvas width
    corner_radius: float = Field(default=10.0, ge=0)
    line_height: float = Field(default=15.0, gt=0)
    label_margin: float = Field(default=5.0, ge=0)
    task_glyph_width: float = Field(default=6.0, gt=0)  # Average glyph width for bar labels
    group_glyph_width: float = Field(default=8.0, gt=0)  # Average glyph width for group labels
    title_y: float = 20.0
    axis_position: float = Field(default=0.95, gt=0, le=1)  # Axis y as a fraction of height
    default_axis_ticks: int = Field(default=6, ge=0)
    default_date_format: str = "%Y-%m-%d"
    milestone_landing_offset: float = 0.65  # Connector stop before a milestone, in row heights
    arrow_length: float = 10.0
    arrow_half_width: float = 5.0


class LinkConfig(BaseModel):
    """Accepted shapes for click action URLs."""

    deep_link_scheme: str = Field(default="obsidian", pattern=r"^[A-Za-z][A-Za-z0-9+.-]*$")


class GanttBlockConfig(BaseModel):
    """Top-level configuration."""

    canvas_width: float = Field(default=800.0, gt=0)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    links: LinkConfig = Field(default_factory=LinkConfig)


def load_config(config_path: Path | str) -> GanttBlockConfig:
    """Load configuration from a YAML file.

    Raises:
        ConfigError: If the file is missing, empty, not YAML, or fails validation
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config YAML: {e}") from e

    if not data:
        raise ConfigError(f"Empty configuration file: {config_path}")
    if not isinstance(data, dict):
        raise ConfigError("Config YAML must contain a dictionary at the root level")

    try:
        return GanttBlockConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e
