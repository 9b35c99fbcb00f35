"""SVG backend for chart rendering."""

from __future__ import annotations

from html import escape

from ganttblock.geometry import (
    ActionKind,
    ClickAction,
    DrawInstruction,
    Line,
    Path,
    Point,
    Rect,
    Text,
    TextAnchor,
)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"


def format_number(value: float) -> str:
    """Format a coordinate with at most two decimals and no trailing zeros."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _format_point(point: Point) -> str:
    return f"{format_number(point.x)} {format_number(point.y)}"


def format_path_data(path: Path) -> str:
    """Serialize path commands to an SVG ``d`` attribute."""
    parts: list[str] = []
    for command in path.commands:
        if command.points:
            parts.append(command.op + " ".join(_format_point(p) for p in command.points))
        else:
            parts.append(command.op)
    return " ".join(parts)


def _attributes(**values: str | float | None) -> str:
    """Render attributes, skipping None and mapping ``_`` to ``-``."""
    rendered: list[str] = []
    for name, value in values.items():
        if value is None:
            continue
        text = format_number(value) if isinstance(value, float | int) else value
        rendered.append(f'{name.rstrip("_").replace("_", "-")}="{escape(text, quote=True)}"')
    return " ".join(rendered)


class SvgSurface:
    """Draw surface producing a standalone SVG document string.

    Consecutive instructions on the same layer share one ``<g class="layer">``.
    Click actions wrap the element in an ``<a>``; popups open in a new window.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []
        self._layer: str | None = None

    def create_canvas(self, width: float, height: float) -> None:
        self.lines = [
            f'<svg xmlns="{SVG_NAMESPACE}" '
            + _attributes(
                viewBox=f"0 0 {format_number(width)} {format_number(height)}",
                width=width,
                height=height,
            )
            + ">"
        ]
        self._layer = None

    def add_rect(self, rect: Rect, instruction: DrawInstruction) -> None:
        transform = None
        if rect.rotation:
            center = rect.center
            transform = (
                f"rotate({format_number(rect.rotation)} "
                f"{format_number(center.x)} {format_number(center.y)})"
            )
        element = "<rect " + _attributes(
            class_=instruction.style,
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
            rx=rect.rx or None,
            ry=rect.ry or None,
            transform=transform,
            data_id=instruction.item_id,
            data_progress=instruction.progress,
        ) + "/>"
        self._append(instruction, element)

    def add_line(self, line: Line, instruction: DrawInstruction) -> None:
        element = "<line " + _attributes(
            class_=instruction.style,
            x1=line.start.x,
            y1=line.start.y,
            x2=line.end.x,
            y2=line.end.y,
        ) + "/>"
        self._append(instruction, element)

    def add_path(self, path: Path, instruction: DrawInstruction) -> None:
        element = "<path " + _attributes(class_=instruction.style, d=format_path_data(path)) + "/>"
        self._append(instruction, element)

    def add_text(self, text: Text, instruction: DrawInstruction) -> None:
        anchor = None if text.anchor == TextAnchor.START else text.anchor.value
        spans = "".join(
            "<tspan " + _attributes(x=text.x, dy=text.line_height) + f">{escape(line)}</tspan>"
            for line in text.lines
        )
        element = (
            "<text "
            + _attributes(
                class_=instruction.style,
                x=text.x,
                y=text.y,
                text_anchor=anchor,
                data_id=instruction.item_id,
            )
            + f">{spans}</text>"
        )
        self._append(instruction, element)

    def finish(self) -> str:
        self._close_layer()
        self.lines.append("</svg>")
        return "\n".join(self.lines)

    def _append(self, instruction: DrawInstruction, element: str) -> None:
        if instruction.layer != self._layer:
            self._close_layer()
            self.lines.append(f'  <g class="{escape(instruction.layer, quote=True)}">')
            self._layer = instruction.layer
        if instruction.action is not None:
            element = f"{_link_open(instruction.action)}{element}</a>"
        self.lines.append(f"    {element}")

    def _close_layer(self) -> None:
        if self._layer is not None:
            self.lines.append("  </g>")
            self._layer = None


def _link_open(action: ClickAction) -> str:
    if action.kind == ActionKind.POPUP:
        return "<a " + _attributes(href=action.url, target="_blank", data_action="popup") + ">"
    return "<a " + _attributes(href=action.url) + ">"


def error_svg(message: str, width: float = 800.0, line_height: float = 15.0) -> str:
    """Render an error message as a small SVG document, shown in place of a chart."""
    lines = message.splitlines() or [message]
    height = (len(lines) + 2) * line_height
    spans = "".join(
        "<tspan " + _attributes(x=10.0, dy=line_height) + f">{escape(line)}</tspan>"
        for line in lines
    )
    return "\n".join(
        [
            f'<svg xmlns="{SVG_NAMESPACE}" '
            + _attributes(
                viewBox=f"0 0 {format_number(width)} {format_number(height)}",
                width=width,
                height=height,
            )
            + ">",
            f'  <text class="error" x="10" y="0">{spans}</text>',
            "</svg>",
        ]
    )
