"""State shared between the CLI's global options and the commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class CliState:
    config_path: Path | None = None  # From --config; None means discover


_state = CliState()


def get_config_path() -> Path | None:
    return _state.config_path


def set_config_path(path: Path | None) -> None:
    _state.config_path = path


def reset_state() -> None:
    """Forget everything set by a previous invocation (used between tests)."""
    global _state  # noqa: PLW0603
    _state = CliState()
