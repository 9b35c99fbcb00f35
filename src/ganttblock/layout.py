"""Layout engine: turn a parsed Schedule into ordered draw instructions.

The engine is a pure function of the schedule, the canvas width, the
configuration and the "now" instant. Rows are laid out top to bottom with one
empty row-height slot above them for the title::

    y = 0           title
    y = 1 * row     row 0
    y = 2 * row     row 1
    ...
    y = 0.95 * h    time axis

and time maps linearly onto the plot area to the right of the group label column.
"""

from __future__ import annotations

import math
import textwrap
from datetime import datetime, timedelta

from .actions import build_click_action
from .config import GanttBlockConfig
from .dates import naive_utc
from .exceptions import ReferenceNotFoundError
from .geometry import (
    ClickAction,
    DrawInstruction,
    Geometry,
    GroupBand,
    Line,
    Point,
    Rect,
    RowPlacement,
    ShapeKind,
    Text,
    TextAnchor,
    TimeRange,
)
from .logger import debug_enabled, get_logger
from .models import Milestone, OptionKey, Schedule, Task
from .routing import route_dependencies

logger = get_logger()

EPOCH = datetime(1970, 1, 1)
MILESTONE_ROTATION = 45.0

LAYER_GRID = "grid"
LAYER_GROUP_BLOCKS = "group-block"
LAYER_GROUP_LABELS = "group-block-label"
LAYER_TODAY_MARKER = "today-marker"
LAYER_TASKS = "tasks"
LAYER_TASK_LABELS = "tasks-labels"
LAYER_MILESTONES = "milestones"
LAYER_MILESTONE_LABELS = "milestones-labels"
LAYER_DEPENDENCIES = "dependencies"
LAYER_TITLE = "title"


def compute_time_range(schedule: Schedule, now: datetime) -> TimeRange:
    """Earliest start to latest end over all tasks and milestones.

    An empty schedule spans "now"; a zero-length range is widened by one day.
    """
    items = schedule.items()
    if items:
        start = min(item.start_date for item in items)
        end = max(item.end_instant for item in items)
    else:
        start = end = now

    if start == end:
        end = end + timedelta(days=1)
    return TimeRange(start=start, end=end)


def row_sort_key(item: Milestone) -> float:
    """Row ordering key: start instant (seconds) times (group index + 1).

    Items without a group count as group -1, so they all share key 0. This is not
    a chronological order across groups; it reproduces the established row order.
    """
    group_position = item.group_index if item.group_index is not None else -1
    return (item.start_date - EPOCH).total_seconds() * (group_position + 1)


def order_items(schedule: Schedule) -> list[Milestone]:
    """Tasks then milestones, stably sorted by :func:`row_sort_key`."""
    return sorted(schedule.items(), key=row_sort_key)


def compute_group_bands(schedule: Schedule) -> list[GroupBand]:
    """Assign each group a contiguous row range, in declaration order."""
    bands: list[GroupBand] = []
    position = 0
    for index, group in enumerate(schedule.groups):
        count = sum(1 for item in schedule.items() if item.group_index == index)
        bands.append(
            GroupBand(
                title=group.title,
                group_index=index,
                start=position,
                end=position + count,
                style="even" if index % 2 == 0 else "odd",
            )
        )
        position += count
    return bands


def wrap_label(text: str, available_width: float, glyph_width: float) -> tuple[str, ...]:
    """Greedy word wrap to the number of glyphs that fit in ``available_width``.

    Words are only split when a single word is longer than a whole line.
    """
    if not text.strip():
        return ()
    max_chars = max(1, math.floor(available_width / glyph_width))
    return tuple(textwrap.wrap(text, width=max_chars, break_on_hyphens=False))


def tick_instants(time_range: TimeRange, count: int) -> list[datetime]:
    """``count`` instants evenly spaced from start to end, both included."""
    if count <= 0:
        return []
    if count == 1:
        return [time_range.start]
    step = time_range.span / (count - 1)
    return [time_range.start + step * i for i in range(count)]


class LayoutEngine:
    """Compute the geometry of one chart render."""

    def __init__(
        self,
        schedule: Schedule,
        canvas_width: float,
        *,
        config: GanttBlockConfig | None = None,
        now: datetime | None = None,
    ):
        """Initialize the engine.

        Args:
            schedule: Parsed schedule (read only)
            canvas_width: Width of the drawing in pixels
            config: Optional configuration (defaults apply when omitted)
            now: Instant used for the today marker and for an empty schedule.
                 Defaults to the current local time. An offset-aware value is
                 converted to naive UTC like schedule dates.
        """
        if canvas_width <= 0:
            raise ValueError(f"Canvas width must be positive, got {canvas_width}")

        self.schedule = schedule
        self.canvas_width = canvas_width
        self.config = config or GanttBlockConfig()
        self.layout_config = self.config.layout
        self.now = naive_utc(now) if now else datetime.now()  # noqa: DTZ005 - naive instants
        self.time_range = compute_time_range(schedule, self.now)

    @property
    def row_count(self) -> int:
        return len(self.schedule.tasks) + len(self.schedule.milestones)

    @property
    def height(self) -> float:
        return self.row_count * self.layout_config.row_height + self.layout_config.height_padding

    @property
    def plot_left(self) -> float:
        return self.canvas_width * self.layout_config.group_column_size

    @property
    def plot_width(self) -> float:
        return self.canvas_width * (1 - self.layout_config.group_column_size)

    def x_for(self, moment: datetime) -> float:
        """Map an instant to an x coordinate on the canvas."""
        span = self.time_range.span.total_seconds()
        fraction = (moment - self.time_range.start).total_seconds() / span
        return fraction * self.layout_config.width_scale * self.plot_width + self.plot_left

    def row_top(self, index: int) -> float:
        """Top y of a row; the slot above row 0 is left for the title."""
        return (index + 1) * self.layout_config.row_height

    def layout(self) -> Geometry:
        """Validate the schedule and compute all draw instructions.

        Raises:
            ReferenceNotFoundError: If a dependency or click names an unknown item
            InvalidURLError: If a click URL has neither accepted shape
            InvalidOptionError: If the axisticks option is not an integer
        """
        self._validate_references()
        actions = self._build_actions()

        ordered = order_items(self.schedule)
        if debug_enabled():
            for item in ordered:
                logger.debug(f"Row key {item.id}: {row_sort_key(item):.0f}")
        rows = self._place_rows(ordered)
        bands = compute_group_bands(self.schedule)

        instructions: list[DrawInstruction] = []
        instructions.extend(self._axis_instructions())
        instructions.extend(self._group_instructions(bands))
        instructions.extend(self._today_marker_instructions())
        instructions.extend(self._task_instructions(ordered, rows, actions))
        instructions.extend(self._milestone_instructions(ordered, rows, actions))
        instructions.extend(self._dependency_instructions(ordered, rows))
        instructions.extend(self._title_instructions())

        logger.steps(
            f"Layout: {len(rows)} rows, {len(bands)} group bands, "
            f"{self.time_range.start.isoformat()} to {self.time_range.end.isoformat()}, "
            f"canvas {self.canvas_width:g}x{self.height:g}"
        )
        return Geometry(
            width=self.canvas_width,
            height=self.height,
            time_range=self.time_range,
            rows=tuple(rows),
            bands=tuple(bands),
            instructions=tuple(instructions),
        )

    def _validate_references(self) -> None:
        all_ids = self.schedule.get_all_ids()
        for item in self.schedule.items():
            for dep_id in item.dependencies:
                if dep_id not in all_ids:
                    raise ReferenceNotFoundError(
                        f"Task not found '{dep_id}' (dependency of '{item.id}')"
                    )
        for event in self.schedule.events:
            if event.task_id not in all_ids:
                raise ReferenceNotFoundError(f"Click target not found '{event.task_id}'")

    def _build_actions(self) -> dict[str, ClickAction]:
        """Validate every event; the first event per item wins."""
        actions: dict[str, ClickAction] = {}
        for event in self.schedule.events:
            action = build_click_action(event, self.config.links.deep_link_scheme)
            actions.setdefault(event.task_id, action)
        return actions

    def _place_rows(self, ordered: list[Milestone]) -> list[RowPlacement]:
        rows: list[RowPlacement] = []
        for index, item in enumerate(ordered):
            start_x = self.x_for(item.start_date)
            rows.append(
                RowPlacement(
                    item_id=item.id,
                    index=index,
                    is_task=isinstance(item, Task),
                    start_x=start_x,
                    end_x=self.x_for(item.end_instant),
                    top=self.row_top(index),
                    height=self.layout_config.row_height,
                    style_class=item.style_class,
                )
            )
        return rows

    def _axis_instructions(self) -> list[DrawInstruction]:
        options = self.schedule.options
        tick_count = options.get_int(OptionKey.AXIS_TICKS, self.layout_config.default_axis_ticks)
        # At most one tick per plot pixel
        max_ticks = max(1, int(self.plot_width))
        if tick_count > max_ticks:
            logger.details(f"Capping axis ticks at {max_ticks} (requested {tick_count})")
            tick_count = max_ticks
        date_format = (
            options.get(OptionKey.OUTPUT_DATE_FORMAT) or self.layout_config.default_date_format
        )
        axis_y = self.height * self.layout_config.axis_position

        instructions = [
            DrawInstruction(
                kind=ShapeKind.LINE,
                shape=Line(
                    Point(self.plot_left, axis_y), Point(self.x_for(self.time_range.end), axis_y)
                ),
                style="domain",
                layer=LAYER_GRID,
            )
        ]
        for moment in tick_instants(self.time_range, tick_count):
            x = self.x_for(moment)
            instructions.append(
                DrawInstruction(
                    kind=ShapeKind.LINE,
                    shape=Line(Point(x, 0.0), Point(x, axis_y)),
                    style="tick",
                    layer=LAYER_GRID,
                )
            )
            instructions.append(
                DrawInstruction(
                    kind=ShapeKind.TEXT,
                    shape=Text(
                        x=x,
                        y=axis_y,
                        lines=(moment.strftime(date_format),),
                        line_height=self.layout_config.line_height,
                        anchor=TextAnchor.MIDDLE,
                    ),
                    style="tick-label",
                    layer=LAYER_GRID,
                )
            )
        return instructions

    def _group_instructions(self, bands: list[GroupBand]) -> list[DrawInstruction]:
        cfg = self.layout_config
        blocks = [
            DrawInstruction(
                kind=ShapeKind.RECT,
                shape=Rect(
                    x=0.0,
                    y=self.row_top(band.start),
                    width=self.canvas_width,
                    height=band.count * cfg.row_height,
                ),
                style=band.style,
                layer=LAYER_GROUP_BLOCKS,
            )
            for band in bands
        ]
        labels = [
            DrawInstruction(
                kind=ShapeKind.TEXT,
                shape=Text(
                    x=cfg.label_margin,
                    y=self.row_top(band.start) + cfg.label_margin,
                    lines=wrap_label(band.title, self.plot_left, cfg.group_glyph_width),
                    line_height=cfg.line_height,
                ),
                style=band.style,
                layer=LAYER_GROUP_LABELS,
            )
            for band in bands
        ]
        return blocks + labels

    def _today_marker_instructions(self) -> list[DrawInstruction]:
        if not self.schedule.options.is_on(OptionKey.TODAY_MARKER):
            return []
        x = self.x_for(self.now)
        return [
            DrawInstruction(
                kind=ShapeKind.LINE,
                shape=Line(Point(x, 0.0), Point(x, self.height)),
                style="today-marker",
                layer=LAYER_TODAY_MARKER,
            )
        ]

    def _label_y(self, row: RowPlacement, line_count: int) -> float:
        """Text y that roughly centers ``line_count`` lines on the row."""
        cfg = self.layout_config
        return row.center_y + cfg.task_padding - (0.5 * line_count + 0.5) * cfg.line_height

    def _task_instructions(
        self,
        ordered: list[Milestone],
        rows: list[RowPlacement],
        actions: dict[str, ClickAction],
    ) -> list[DrawInstruction]:
        cfg = self.layout_config
        bars: list[DrawInstruction] = []
        labels: list[DrawInstruction] = []
        for item, row in zip(ordered, rows, strict=True):
            if not row.is_task:
                continue
            width = row.end_x - row.start_x
            action = actions.get(item.id)
            bars.append(
                DrawInstruction(
                    kind=ShapeKind.RECT,
                    shape=Rect(
                        x=row.start_x,
                        y=row.top + cfg.task_padding,
                        width=width,
                        height=cfg.row_height - 2 * cfg.task_padding,
                        rx=cfg.corner_radius,
                        ry=cfg.corner_radius,
                    ),
                    style=item.style_class,
                    layer=LAYER_TASKS,
                    action=action,
                    item_id=item.id,
                    progress=item.progress,
                )
            )
            lines = wrap_label(item.title, width, cfg.task_glyph_width)
            labels.append(
                DrawInstruction(
                    kind=ShapeKind.TEXT,
                    shape=Text(
                        x=(row.start_x + row.end_x) / 2,
                        y=self._label_y(row, len(lines)),
                        lines=lines,
                        line_height=cfg.line_height,
                        anchor=TextAnchor.MIDDLE,
                    ),
                    style=item.style_class,
                    layer=LAYER_TASK_LABELS,
                    action=action,
                    item_id=item.id,
                )
            )
        return bars + labels

    def _milestone_instructions(
        self,
        ordered: list[Milestone],
        rows: list[RowPlacement],
        actions: dict[str, ClickAction],
    ) -> list[DrawInstruction]:
        cfg = self.layout_config
        side = cfg.row_height - 2 * cfg.task_padding
        half_diagonal = side * math.sqrt(2) / 2
        diamonds: list[DrawInstruction] = []
        labels: list[DrawInstruction] = []
        for item, row in zip(ordered, rows, strict=True):
            if row.is_task:
                continue
            action = actions.get(item.id)
            diamonds.append(
                DrawInstruction(
                    kind=ShapeKind.RECT,
                    shape=Rect(
                        x=row.start_x - side / 2,
                        y=row.center_y - side / 2,
                        width=side,
                        height=side,
                        rotation=MILESTONE_ROTATION,
                    ),
                    style=item.style_class,
                    layer=LAYER_MILESTONES,
                    action=action,
                    item_id=item.id,
                    progress=item.progress,
                )
            )
            lines = (item.title,) if item.title else ()
            labels.append(
                DrawInstruction(
                    kind=ShapeKind.TEXT,
                    shape=Text(
                        x=row.start_x + half_diagonal + cfg.label_margin,
                        y=self._label_y(row, len(lines)),
                        lines=lines,
                        line_height=cfg.line_height,
                    ),
                    style=item.style_class,
                    layer=LAYER_MILESTONE_LABELS,
                    action=action,
                    item_id=item.id,
                )
            )
        return diamonds + labels

    def _dependency_instructions(
        self, ordered: list[Milestone], rows: list[RowPlacement]
    ) -> list[DrawInstruction]:
        if not self.schedule.options.is_on(OptionKey.DEPENDENCIES):
            return []

        dependencies = {item.id: item.dependencies for item in ordered}
        instructions: list[DrawInstruction] = []
        for connector in route_dependencies(rows, dependencies, self.layout_config):
            instructions.append(
                DrawInstruction(
                    kind=ShapeKind.PATH,
                    shape=connector.path,
                    style=f"{connector.style_class} path",
                    layer=LAYER_DEPENDENCIES,
                )
            )
            instructions.append(
                DrawInstruction(
                    kind=ShapeKind.PATH,
                    shape=connector.arrow_head,
                    style=f"{connector.style_class} arrow-head",
                    layer=LAYER_DEPENDENCIES,
                )
            )
        return instructions

    def _title_instructions(self) -> list[DrawInstruction]:
        title = self.schedule.options.get(OptionKey.TITLE)
        if not title:
            return []
        return [
            DrawInstruction(
                kind=ShapeKind.TEXT,
                shape=Text(
                    x=self.canvas_width / 2,
                    y=self.layout_config.title_y - self.layout_config.line_height,
                    lines=(title,),
                    line_height=self.layout_config.line_height,
                    anchor=TextAnchor.MIDDLE,
                ),
                style="title",
                layer=LAYER_TITLE,
            )
        ]


def layout(
    schedule: Schedule,
    canvas_width: float,
    *,
    config: GanttBlockConfig | None = None,
    now: datetime | None = None,
) -> Geometry:
    """Lay out a schedule on a canvas of the given width."""
    return LayoutEngine(schedule, canvas_width, config=config, now=now).layout()
