"""Command-line interface for ganttblock."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer

from . import context
from .backends import SvgSurface, error_svg, paint
from .config import GanttBlockConfig
from .dates import parse_absolute_date
from .exceptions import GanttBlockError
from .geometry import Geometry
from .layout import layout
from .loader import discover_config, load_schedule
from .logger import setup_logger

app = typer.Typer(
    name="ganttblock",
    help="Render Gantt charts from a small line-oriented text DSL",
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show steps, 2=show details, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: ganttblock.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for ganttblock commands."""
    setup_logger(verbose)
    context.set_config_path(config)


def _parse_now_option(now: str | None) -> datetime | None:
    """Parse the --now option like a schedule date (offsets become naive UTC)."""
    if now is None:
        return None

    try:
        return parse_absolute_date(now)
    except GanttBlockError:
        typer.echo(
            f"Error: Invalid --now value '{now}'. Use YYYY-MM-DD or YYYY-MM-DDTHH:MM format.",
            err=True,
        )
        raise typer.Exit(1) from None


def _build_geometry(file: Path, width: float | None, now: datetime | None) -> Geometry:
    config = discover_config(file)
    schedule = load_schedule(file)
    canvas_width = width if width is not None else config.canvas_width
    return layout(schedule, canvas_width, config=config, now=now)


def _write_output(content: str, output_path: Path | None, what: str) -> None:
    """Output or write a rendered document."""
    if output_path:
        # Inline SVG is valid markdown HTML, so .md files only need blank lines around it
        if output_path.suffix.lower() == ".md":
            content = f"\n{content}\n"
        output_path.write_text(content + "\n", encoding="utf-8")
        typer.echo(f"{what} written to {output_path}")
    else:
        typer.echo(content)


@app.command()
def render(
    file: Annotated[Path, typer.Argument(help="Path to the schedule file")],
    *,
    width: Annotated[
        float | None, typer.Option("--width", "-w", help="Canvas width in pixels", min=1)
    ] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
    now: Annotated[
        str | None, typer.Option("--now", help="Instant used as today (YYYY-MM-DD[THH:MM])")
    ] = None,
    inline_errors: Annotated[
        bool,
        typer.Option("--inline-errors", help="Render errors as an SVG instead of failing"),
    ] = False,
) -> None:
    """Render a schedule to SVG."""
    now_value = _parse_now_option(now)

    try:
        chart = _build_geometry(file, width, now_value)
        svg = paint(chart, SvgSurface())
    except GanttBlockError as e:
        if not inline_errors:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1) from None
        svg = error_svg(str(e), width or GanttBlockConfig().canvas_width)

    assert isinstance(svg, str)
    _write_output(svg, output, "Chart")


@app.command()
def check(
    file: Annotated[Path, typer.Argument(help="Path to the schedule file")],
) -> None:
    """Parse and validate a schedule, then print a summary."""
    try:
        config = discover_config(file)
        schedule = load_schedule(file)
        chart = layout(schedule, config.canvas_width, config=config)
    except GanttBlockError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(f"{file}: OK")
    typer.echo(f"  Groups: {len(schedule.groups)}")
    typer.echo(f"  Tasks: {len(schedule.tasks)}")
    typer.echo(f"  Milestones: {len(schedule.milestones)}")
    typer.echo(f"  Click events: {len(schedule.events)}")
    if schedule.items():
        typer.echo(
            f"  Range: {chart.time_range.start.isoformat()} to "
            f"{chart.time_range.end.isoformat()}"
        )


@app.command()
def geometry(
    file: Annotated[Path, typer.Argument(help="Path to the schedule file")],
    *,
    width: Annotated[
        float | None, typer.Option("--width", "-w", help="Canvas width in pixels", min=1)
    ] = None,
    now: Annotated[
        str | None, typer.Option("--now", help="Instant used as today (YYYY-MM-DD[THH:MM])")
    ] = None,
) -> None:
    """Dump the computed draw instructions as JSON."""
    now_value = _parse_now_option(now)

    try:
        result = _build_geometry(file, width, now_value)
    except GanttBlockError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(json.dumps(asdict(result), indent=2, default=str))


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
