"""Pytest configuration and fixtures for ganttblock tests."""

from __future__ import annotations

from datetime import datetime

import pytest

from ganttblock import context
from ganttblock.logger import reset_logger
from ganttblock.models import Schedule
from ganttblock.parser import ScheduleParser

# Two chained tasks spanning 2024-01-01..2024-01-09 and a milestone at the end
SIMPLE_SCHEDULE = """\
task Design,t1,c1,2024-01-01,4D
task Build,t2,c2,after t1,4D,t1
milestone Ship,m1,crit,after t2,t2
"""

GROUPED_SCHEDULE = """\
option title Release plan
group Backend
task Design API,api,design,2024-01-01,2W
task Build API,build,dev,1D after api,3W,api,40%
group Frontend
task Mockups,ui,design,2024-01-08,10D
milestone Release,rel,crit,after build,build ui
click rel,goto,https://example.com/release
"""


@pytest.fixture(autouse=True)
def clean_global_state() -> None:
    """Reset the logger and the CLI config path before each test for isolation."""
    reset_logger()
    context.reset_state()


@pytest.fixture
def parser() -> ScheduleParser:
    """Create a parser instance."""
    return ScheduleParser()


@pytest.fixture
def simple_schedule(parser: ScheduleParser) -> Schedule:
    return parser.parse(SIMPLE_SCHEDULE)


@pytest.fixture
def grouped_schedule(parser: ScheduleParser) -> Schedule:
    return parser.parse(GROUPED_SCHEDULE)


@pytest.fixture
def now() -> datetime:
    """Fixed instant used as "today"."""
    return datetime(2024, 1, 5)


@pytest.fixture
def simple_text() -> str:
    return SIMPLE_SCHEDULE
