"""Schedule and configuration loading."""

from __future__ import annotations

from pathlib import Path

from . import context
from .config import DEFAULT_CONFIG_FILENAME, GanttBlockConfig, load_config
from .exceptions import ParseError
from .logger import get_logger
from .models import Schedule
from .parser import ScheduleParser

logger = get_logger()


def discover_config(
    schedule_path: Path | None = None,
    config_path: Path | None = None,
) -> GanttBlockConfig:
    """Discover configuration from various locations.

    Search order:
    1. Explicit config_path argument
    2. Global context (set via CLI --config)
    3. schedule directory / ganttblock.yaml
    4. Current directory / ganttblock.yaml

    An explicitly requested file that does not exist is an error; when nothing is
    found the defaults apply.
    """
    explicit = config_path or context.get_config_path()
    if explicit is not None:
        logger.steps(f"Using config {explicit}")
        return load_config(explicit)

    candidates = []
    if schedule_path is not None:
        candidates.append(Path(schedule_path).parent / DEFAULT_CONFIG_FILENAME)
    candidates.append(Path(DEFAULT_CONFIG_FILENAME))

    for candidate in candidates:
        if candidate.exists():
            logger.steps(f"Using config {candidate}")
            return load_config(candidate)

    logger.details("No config file found, using defaults")
    return GanttBlockConfig()


def load_schedule(path: Path | str) -> Schedule:
    """Read a schedule file (UTF-8) and parse it.

    Raises:
        ParseError: If the file does not exist or its contents fail to parse
    """
    path = Path(path)
    if not path.exists():
        raise ParseError(f"File not found: {path}")

    text = path.read_text(encoding="utf-8")
    logger.steps(f"Loaded {path}")
    return ScheduleParser().parse(text)
