"""Pixel-space draw instructions produced by the layout engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum


class ShapeKind(str, Enum):
    """Kinds of primitives a draw surface must support."""

    RECT = "rect"
    LINE = "line"
    PATH = "path"
    TEXT = "text"


class ActionKind(str, Enum):
    """What a click on a drawn item does."""

    NAVIGATE = "navigate"  # Open the URL in place
    POPUP = "popup"  # Show the URL in a transient surface


class TextAnchor(str, Enum):
    """Horizontal alignment of text relative to its x coordinate."""

    START = "start"
    MIDDLE = "middle"


@dataclass(slots=True, frozen=True)
class Point:
    x: float
    y: float

    def offset(self, dx: float, dy: float) -> Point:
        return Point(self.x + dx, self.y + dy)


@dataclass(slots=True, frozen=True)
class Rect:
    """Axis-aligned rectangle, optionally rotated (degrees) about its center."""

    x: float
    y: float
    width: float
    height: float
    rx: float = 0.0
    ry: float = 0.0
    rotation: float = 0.0

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)


@dataclass(slots=True, frozen=True)
class Line:
    start: Point
    end: Point


@dataclass(slots=True, frozen=True)
class PathCommand:
    """One path command: ``M``/``L`` take one point, ``C`` three, ``Z`` none."""

    op: str
    points: tuple[Point, ...] = ()


@dataclass(slots=True, frozen=True)
class Path:
    commands: tuple[PathCommand, ...]

    @property
    def end(self) -> Point:
        """Last explicit point of the path."""
        for command in reversed(self.commands):
            if command.points:
                return command.points[-1]
        raise ValueError("Path has no points")


@dataclass(slots=True, frozen=True)
class Text:
    """Multi-line text; line ``n`` sits at ``y + (n + 1) * line_height``."""

    x: float
    y: float
    lines: tuple[str, ...]
    line_height: float
    anchor: TextAnchor = TextAnchor.START


Shape = Rect | Line | Path | Text


@dataclass(slots=True, frozen=True)
class ClickAction:
    kind: ActionKind
    url: str


@dataclass(slots=True, frozen=True)
class DrawInstruction:
    """One primitive to draw, in order, on a named layer."""

    kind: ShapeKind
    shape: Shape
    style: str
    layer: str
    action: ClickAction | None = None
    item_id: str | None = None
    progress: float | None = None


@dataclass(slots=True, frozen=True)
class TimeRange:
    start: datetime
    end: datetime

    @property
    def span(self) -> timedelta:
        return self.end - self.start


@dataclass(slots=True, frozen=True)
class RowPlacement:
    """Where a task or milestone ended up."""

    item_id: str
    index: int
    is_task: bool
    start_x: float
    end_x: float
    top: float
    height: float
    style_class: str

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2


@dataclass(slots=True, frozen=True)
class GroupBand:
    """Contiguous rows [start, end) belonging to one group."""

    title: str
    group_index: int
    start: int
    end: int
    style: str

    @property
    def count(self) -> int:
        return self.end - self.start


@dataclass(slots=True, frozen=True)
class Geometry:
    """Complete layout of one chart, ready for a draw surface."""

    width: float
    height: float
    time_range: TimeRange
    rows: tuple[RowPlacement, ...] = ()
    bands: tuple[GroupBand, ...] = ()
    instructions: tuple[DrawInstruction, ...] = ()

    def for_layer(self, layer: str) -> list[DrawInstruction]:
        """Instructions on one layer, in draw order."""
        return [i for i in self.instructions if i.layer == layer]

    def get_row(self, item_id: str) -> RowPlacement | None:
        for row in self.rows:
            if row.item_id == item_id:
                return row
        return None
