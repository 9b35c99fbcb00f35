"""Data models for ganttblock schedules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .exceptions import InvalidOptionError

OPTION_ON = "on"


class EventType(str, Enum):
    """Click action types a schedule item can carry."""

    POPUP = "popup"
    GOTO = "goto"


class OptionKey(str, Enum):
    """Render options understood by the layout engine."""

    TITLE = "title"
    AXIS_TICKS = "axisticks"
    TODAY_MARKER = "todaymarker"
    DEPENDENCIES = "dependencies"
    INPUT_DATE_FORMAT = "inputdateformat"
    OUTPUT_DATE_FORMAT = "outputdateformat"
    BUSINESS_DAYS = "businessdays"  # Reserved, not used by the layout yet

    @classmethod
    def is_known(cls, key: str) -> bool:
        """Check whether a lower-cased key names a recognized option."""
        return key in {member.value for member in cls}


@dataclass(frozen=True)
class Group:
    """A labeled band of adjacent rows."""

    title: str


@dataclass(frozen=True, kw_only=True)
class Milestone:
    """A schedule item with a single instant."""

    id: str
    title: str
    start_date: datetime
    style_class: str = ""
    dependencies: tuple[str, ...] = ()
    progress: float | None = None
    group_index: int | None = None  # Position in Schedule.groups, not an owning reference

    @property
    def end_instant(self) -> datetime:
        """Instant that relative dates and the time range see as this item's end."""
        return self.start_date


@dataclass(frozen=True, kw_only=True)
class Task(Milestone):
    """A schedule item spanning start_date..end_date."""

    end_date: datetime

    @property
    def end_instant(self) -> datetime:
        return self.end_date


@dataclass(frozen=True)
class Event:
    """A click action bound to a task or milestone."""

    task_id: str
    type: EventType
    url: str


def _default_options() -> dict[str, str]:
    return {}


@dataclass
class RenderOptions:
    """Raw option values keyed by lower-cased option name.

    Values stay strings; the typed accessors are meant to be called where the
    value is used.
    """

    values: dict[str, str] = field(default_factory=_default_options)

    def set(self, key: str, value: str) -> None:
        """Store a raw option value (a later value for the same key wins)."""
        self.values[key.lower()] = value

    def has(self, key: OptionKey) -> bool:
        """Check whether an option was given."""
        return key.value in self.values

    def get(self, key: OptionKey) -> str | None:
        """Get the raw string value of an option."""
        return self.values.get(key.value)

    def is_on(self, key: OptionKey) -> bool:
        """Interpret an option as an on/off switch (only "on" enables it)."""
        value = self.get(key)
        return value is not None and value.strip().lower() == OPTION_ON

    def get_int(self, key: OptionKey, default: int) -> int:
        """Interpret an option as an integer.

        Raises:
            InvalidOptionError: If the value is present but not an integer
        """
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value.strip())
        except ValueError as e:
            raise InvalidOptionError(
                f"Option '{key.value}' must be an integer, got '{value}'"
            ) from e


def _default_groups() -> list[Group]:
    return []


def _default_tasks() -> list[Task]:
    return []


def _default_milestones() -> list[Milestone]:
    return []


def _default_events() -> list[Event]:
    return []


@dataclass
class Schedule:
    """Complete parsed chart: options, groups, tasks, milestones and click events."""

    options: RenderOptions = field(default_factory=RenderOptions)
    groups: list[Group] = field(default_factory=_default_groups)
    tasks: list[Task] = field(default_factory=_default_tasks)
    milestones: list[Milestone] = field(default_factory=_default_milestones)
    events: list[Event] = field(default_factory=_default_events)

    def id_exists(self, item_id: str) -> bool:
        """Check whether a task or milestone with this ID has been added."""
        return self.get_item(item_id) is not None

    def get_task(self, item_id: str) -> Task | None:
        """Get a task by its ID."""
        for task in self.tasks:
            if task.id == item_id:
                return task
        return None

    def get_milestone(self, item_id: str) -> Milestone | None:
        """Get a milestone by its ID."""
        for milestone in self.milestones:
            if milestone.id == item_id:
                return milestone
        return None

    def get_item(self, item_id: str) -> Milestone | None:
        """Get a task or milestone by its ID (tasks take precedence)."""
        return self.get_task(item_id) or self.get_milestone(item_id)

    def get_event(self, item_id: str) -> Event | None:
        """Get the first click event registered for an item."""
        for event in self.events:
            if event.task_id == item_id:
                return event
        return None

    def get_group(self, item: Milestone) -> Group | None:
        """Resolve an item's group back-reference."""
        if item.group_index is None:
            return None
        return self.groups[item.group_index]

    def items(self) -> list[Milestone]:
        """All tasks followed by all milestones, in declaration order."""
        return [*self.tasks, *self.milestones]

    def get_all_ids(self) -> set[str]:
        """Get all task and milestone IDs."""
        return {item.id for item in self.items()}
