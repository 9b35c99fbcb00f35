"""Dependency connector routing.

A connector leaves the source row at its right edge (a milestone's center),
runs horizontally for at most one row height, then bends into the target row and
lands on the target's left edge::

    [ source ]----.
                   \\
                    `--->[ target ]

Edges pointing backwards in time (target starting at or before the source) are
not routed.
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import LayoutConfig
from .geometry import Path, PathCommand, Point, RowPlacement
from .logger import get_logger

logger = get_logger()


@dataclass(slots=True, frozen=True)
class DependencyEdge:
    """Directed edge from a prerequisite to the item that depends on it."""

    source_id: str
    target_id: str


@dataclass(slots=True, frozen=True)
class Connector:
    edge: DependencyEdge
    path: Path
    arrow_head: Path
    style_class: str  # Style class of the source item


def collect_edges(
    rows: list[RowPlacement], dependencies: dict[str, tuple[str, ...]]
) -> list[DependencyEdge]:
    """One edge per (dependency, item) pair, in row order then declaration order."""
    return [
        DependencyEdge(source_id=dep_id, target_id=row.item_id)
        for row in rows
        for dep_id in dependencies.get(row.item_id, ())
    ]


def is_back_edge(source: RowPlacement, target: RowPlacement) -> bool:
    """Check whether the target starts at or before the source's start."""
    return target.start_x <= source.start_x


def route_edge(
    edge: DependencyEdge,
    source: RowPlacement,
    target: RowPlacement,
    config: LayoutConfig,
) -> Connector | None:
    """Compute the connector for one edge, or None for a back edge."""
    if is_back_edge(source, target):
        logger.details(
            f"Skipping dependency {edge.source_id} -> {edge.target_id}: "
            "target does not start after the source"
        )
        return None

    landing_x = target.start_x
    if not target.is_task:
        # The diamond's left tip sits left of its anchor
        landing_x -= config.row_height * config.milestone_landing_offset

    source_x = min(source.end_x, landing_x)
    turn_x = min(source_x + config.row_height, landing_x)

    start = Point(source_x, source.center_y)
    turn = Point(turn_x, source.center_y)
    corner = Point(turn_x, target.center_y)
    landing = Point(landing_x, target.center_y)

    path = Path(
        commands=(
            PathCommand("M", (start,)),
            PathCommand("L", (turn,)),
            PathCommand("C", (corner, corner, landing)),
        )
    )
    arrow_head = Path(
        commands=(
            PathCommand("M", (landing,)),
            PathCommand("L", (landing.offset(-config.arrow_length, config.arrow_half_width),)),
            PathCommand("L", (landing.offset(-config.arrow_length, -config.arrow_half_width),)),
            PathCommand("Z"),
        )
    )
    logger.details(
        f"Routed dependency {edge.source_id} -> {edge.target_id} "
        f"from x={source_x:.1f} to x={landing_x:.1f}"
    )
    return Connector(edge=edge, path=path, arrow_head=arrow_head, style_class=source.style_class)


def route_dependencies(
    rows: list[RowPlacement],
    dependencies: dict[str, tuple[str, ...]],
    config: LayoutConfig,
) -> list[Connector]:
    """Route every dependency edge between placed rows, skipping back edges."""
    rows_by_id = {row.item_id: row for row in rows}
    connectors: list[Connector] = []
    for edge in collect_edges(rows, dependencies):
        connector = route_edge(edge, rows_by_id[edge.source_id], rows_by_id[edge.target_id], config)
        if connector is not None:
            connectors.append(connector)
    return connectors
