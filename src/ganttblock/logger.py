"""Verbosity-controlled logging for ganttblock.

The ``-v`` count selects how much of the parse and layout pipeline is reported:
warnings only, one line per stage (``steps``), one line per item or edge
(``details``), or everything down to sort keys and coordinates (``debug``).
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

STEPS_LEVEL = 25
DETAILS_LEVEL = 15

logging.addLevelName(STEPS_LEVEL, "STEPS")
logging.addLevelName(DETAILS_LEVEL, "DETAILS")

# Indexed by the -v count
_VERBOSITY_LEVELS = (logging.WARNING, STEPS_LEVEL, DETAILS_LEVEL, logging.DEBUG)


class GanttLogger(logging.Logger):
    """Logger with ``steps`` and ``details`` levels between the standard ones."""

    def steps(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_at(STEPS_LEVEL, msg, args, kwargs)

    def details(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_at(DETAILS_LEVEL, msg, args, kwargs)

    def _log_at(self, level: int, msg: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        if self.isEnabledFor(level):
            self._log(level, msg, args, **kwargs)


def _create_logger() -> GanttLogger:
    previous = logging.getLoggerClass()
    logging.setLoggerClass(GanttLogger)
    try:
        logger = logging.getLogger("ganttblock")
    finally:
        logging.setLoggerClass(previous)
    assert isinstance(logger, GanttLogger)
    return logger


_logger = _create_logger()


def get_logger() -> GanttLogger:
    return _logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Route ganttblock messages at ``verbosity`` (0-3) to ``stream`` (stderr by default).

    Reconfiguring replaces the previous handler.
    """
    index = min(max(verbosity, 0), len(_VERBOSITY_LEVELS) - 1)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))

    _logger.handlers = [handler]
    _logger.setLevel(_VERBOSITY_LEVELS[index])
    _logger.propagate = False


def reset_logger() -> None:
    """Drop handlers and return to warnings only, propagating to the root logger."""
    _logger.handlers = []
    _logger.setLevel(logging.WARNING)
    _logger.propagate = True


def debug_enabled() -> bool:
    return _logger.isEnabledFor(logging.DEBUG)
