"""Base abstractions for draw surfaces."""

from __future__ import annotations

from typing import Protocol

from ganttblock.geometry import DrawInstruction, Geometry, Line, Path, Rect, ShapeKind, Text


class DrawSurface(Protocol):
    """Protocol for drawing backends.

    A surface receives already-positioned primitives in order and materializes
    them (SVG markup, a canvas, a test recorder...). It makes no layout decisions.
    """

    def create_canvas(self, width: float, height: float) -> None:
        """Start a new drawing of the given size."""
        ...

    def add_rect(self, rect: Rect, instruction: DrawInstruction) -> None:
        """Draw a (possibly rotated, rounded) rectangle."""
        ...

    def add_line(self, line: Line, instruction: DrawInstruction) -> None:
        """Draw a straight line."""
        ...

    def add_path(self, path: Path, instruction: DrawInstruction) -> None:
        """Draw a path made of move/line/curve/close commands."""
        ...

    def add_text(self, text: Text, instruction: DrawInstruction) -> None:
        """Draw one or more lines of text."""
        ...

    def finish(self) -> object:
        """Finalize and return the rendered node (opaque to callers)."""
        ...


def paint(geometry: Geometry, surface: DrawSurface) -> object:
    """Replay a geometry's instructions onto a surface and return its output."""
    surface.create_canvas(geometry.width, geometry.height)
    for instruction in geometry.instructions:
        shape = instruction.shape
        if instruction.kind == ShapeKind.RECT and isinstance(shape, Rect):
            surface.add_rect(shape, instruction)
        elif instruction.kind == ShapeKind.LINE and isinstance(shape, Line):
            surface.add_line(shape, instruction)
        elif instruction.kind == ShapeKind.PATH and isinstance(shape, Path):
            surface.add_path(shape, instruction)
        elif instruction.kind == ShapeKind.TEXT and isinstance(shape, Text):
            surface.add_text(shape, instruction)
        else:
            raise ValueError(
                f"Instruction kind {instruction.kind.value} does not match shape "
                f"{type(shape).__name__}"
            )
    return surface.finish()
