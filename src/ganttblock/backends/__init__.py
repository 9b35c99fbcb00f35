"""Draw surfaces that materialize chart geometry."""

from ganttblock.backends.base import DrawSurface, paint
from ganttblock.backends.svg import SvgSurface, error_svg

__all__ = [
    "DrawSurface",
    "SvgSurface",
    "error_svg",
    "paint",
]
