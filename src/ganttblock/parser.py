"""Parser for gantt schedule text.

Each line starts with a keyword::

    option title Release plan
    group Backend
    task Design API,api,design,2024-01-01,2W
    task Build API,build,dev,1D after api,3W,api,40%
    milestone Release,rel,crit,after build,build
    click rel,goto,https://example.com/release
    %% comments and blank lines are ignored
"""

from __future__ import annotations

from datetime import datetime

from .dates import parse_absolute_date, parse_duration, resolve_end_date, split_relative
from .exceptions import (
    DuplicateKeyError,
    GanttSyntaxError,
    ParseError,
    ReferenceNotFoundError,
    UnknownEventTypeError,
)
from .logger import get_logger
from .models import Event, EventType, Group, Milestone, OptionKey, Schedule, Task

logger = get_logger()

KEYWORD_OPTION = "option "
KEYWORD_CLICK = "click "
KEYWORD_GROUP = "group "
KEYWORD_TASK = "task "
KEYWORD_MILESTONE = "milestone "
KEYWORD_COMMENT = "%%"

TASK_FIELDS = (5, 7)
MILESTONE_FIELDS = (4, 6)
CLICK_FIELDS = 3


def _keyword_list() -> str:
    keywords = [
        KEYWORD_COMMENT,
        KEYWORD_GROUP,
        KEYWORD_MILESTONE,
        KEYWORD_OPTION,
        KEYWORD_TASK,
        KEYWORD_CLICK,
    ]
    return ", ".join(k.strip() for k in keywords)


def _split_dependencies(field: str) -> tuple[str, ...]:
    return tuple(token for token in field.split() if token)


def _parse_progress(field: str) -> float | None:
    """Turn ``"40%"`` / ``"40"`` into 0.4; an empty field means no progress."""
    text = field.replace(" ", "").strip()
    text = text.removesuffix("%")
    if not text:
        return None
    try:
        return float(text) / 100
    except ValueError as e:
        raise GanttSyntaxError(f"Progress '{field.strip()}' should be a number") from e


class ScheduleParser:
    """Line-oriented parser producing a :class:`Schedule`.

    Every reference (dependency, relative date, click target) must name an item
    defined on an earlier line, so a single pass resolves everything.
    """

    def parse(self, text: str | None) -> Schedule:
        """Parse schedule text.

        Raises:
            ParseError: On the first malformed line. The message starts with the
                line number.
        """
        schedule = Schedule()
        if text is None:
            return schedule

        current_group: int | None = None
        for line_number, raw_line in enumerate(text.splitlines(), start=1):
            try:
                current_group = self._parse_line(raw_line.lstrip(), schedule, current_group)
            except ParseError as e:
                raise type(e)(f"Line {line_number}: {e}") from e

        logger.steps(
            f"Parsed schedule: {len(schedule.groups)} groups, {len(schedule.tasks)} tasks, "
            f"{len(schedule.milestones)} milestones, {len(schedule.events)} click events"
        )
        return schedule

    def _parse_line(self, line: str, schedule: Schedule, current_group: int | None) -> int | None:
        """Parse one left-stripped line and return the (possibly new) current group.

        Keywords keep their trailing space, so ``group `` alone is an untitled group.
        """
        lowered = line.lower()

        if lowered.startswith(KEYWORD_OPTION):
            self.parse_option(line[len(KEYWORD_OPTION) :].strip(), schedule)
        elif lowered.startswith(KEYWORD_CLICK):
            self.parse_click(line[len(KEYWORD_CLICK) :].strip(), schedule)
        elif lowered.startswith(KEYWORD_GROUP):
            return self.parse_group(line[len(KEYWORD_GROUP) :].strip(), schedule)
        elif lowered.startswith(KEYWORD_TASK):
            self.parse_task(line[len(KEYWORD_TASK) :].strip(), schedule, current_group)
        elif lowered.startswith(KEYWORD_MILESTONE):
            self.parse_milestone(line[len(KEYWORD_MILESTONE) :].strip(), schedule, current_group)
        elif line.startswith(KEYWORD_COMMENT) or not line:
            pass
        else:
            raise GanttSyntaxError(
                f"Expecting the line to start with a keyword ({_keyword_list()}), "
                f"got '{line.rstrip()}'"
            )
        return current_group

    def parse_option(self, body: str, schedule: Schedule) -> None:
        """Parse ``<key> <value...>``; lines without a value are ignored."""
        tokens = body.split()
        if len(tokens) < 2:  # noqa: PLR2004 - key and at least one value token
            logger.details(f"Ignoring option without a value: '{body}'")
            return

        key = tokens[0].lower()
        value = " ".join(tokens[1:])
        if not OptionKey.is_known(key):
            logger.warning(f"Unrecognized option '{key}' will be ignored")
        schedule.options.set(key, value)
        logger.details(f"Option {key} = {value}")

    def parse_group(self, body: str, schedule: Schedule) -> int:
        """Append a group and return its index (the new current group)."""
        schedule.groups.append(Group(title=body.strip()))
        logger.details(f"Group '{body.strip()}'")
        return len(schedule.groups) - 1

    def parse_task(self, body: str, schedule: Schedule, group_index: int | None) -> None:
        """Parse ``title,id,class,start,end-or-duration[,deps][,progress]``."""
        fields = body.split(",")
        low, high = TASK_FIELDS
        if not low <= len(fields) <= high:
            raise GanttSyntaxError(
                f"Invalid task '{body}'. A task should have {low} to {high} "
                "arguments separated by a comma"
            )
        item_id = self._new_item_id(fields[1], body, schedule)

        start_date = self.resolve_date(fields[3], schedule)
        end_date = resolve_end_date(fields[4], start_date)
        dependencies: tuple[str, ...] = ()
        if len(fields) > 5:  # noqa: PLR2004
            dependencies = self._parse_dependencies(fields[5], item_id, schedule)
        progress = _parse_progress(fields[6]) if len(fields) > 6 else None  # noqa: PLR2004

        task = Task(
            id=item_id,
            title=fields[0].strip(),
            style_class=fields[2].strip(),
            start_date=start_date,
            end_date=end_date,
            dependencies=dependencies,
            progress=progress,
            group_index=group_index,
        )
        schedule.tasks.append(task)
        logger.details(f"Task {item_id}: {start_date.isoformat()} -> {end_date.isoformat()}")

    def parse_milestone(self, body: str, schedule: Schedule, group_index: int | None) -> None:
        """Parse ``title,id,class,date[,deps][,progress]``."""
        fields = body.split(",")
        low, high = MILESTONE_FIELDS
        if not low <= len(fields) <= high:
            raise GanttSyntaxError(
                f"Invalid milestone '{body}'. A milestone should have {low} to {high} "
                "arguments separated by a comma"
            )
        item_id = self._new_item_id(fields[1], body, schedule)

        start_date = self.resolve_date(fields[3], schedule)
        dependencies: tuple[str, ...] = ()
        if len(fields) > 4:  # noqa: PLR2004
            dependencies = self._parse_dependencies(fields[4], item_id, schedule)
        progress = _parse_progress(fields[5]) if len(fields) > 5 else None  # noqa: PLR2004

        milestone = Milestone(
            id=item_id,
            title=fields[0].strip(),
            style_class=fields[2].strip(),
            start_date=start_date,
            dependencies=dependencies,
            progress=progress,
            group_index=group_index,
        )
        schedule.milestones.append(milestone)
        logger.details(f"Milestone {item_id}: {start_date.isoformat()}")

    def parse_click(self, body: str, schedule: Schedule) -> None:
        """Parse ``id,type,url``."""
        fields = [f.strip() for f in body.split(",")]
        if len(fields) != CLICK_FIELDS:
            raise GanttSyntaxError(
                f"Invalid click '{body}'. A click should have {CLICK_FIELDS} arguments "
                "separated by a comma (id, type, url)"
            )
        task_id, type_name, url = fields
        if not schedule.id_exists(task_id):
            raise ReferenceNotFoundError(
                f"Element not found in click '{body}'. Cannot find task or milestone '{task_id}'"
            )

        try:
            event_type = EventType(type_name.lower())
        except ValueError as e:
            valid = ", ".join(t.value for t in EventType)
            raise UnknownEventTypeError(
                f"Event type '{type_name.lower()}' not recognized. "
                f"Please use another event type ({valid})"
            ) from e

        schedule.events.append(Event(task_id=task_id, type=event_type, url=url))
        logger.details(f"Click {task_id}: {event_type.value} {url}")

    def resolve_date(self, text: str, schedule: Schedule) -> datetime:
        """Resolve an absolute date or ``"<duration> after <id>"``.

        A relative date counts from the end of a task or from a milestone's date.

        Raises:
            ReferenceNotFoundError: If the referenced ID is not defined yet
        """
        relative = split_relative(text)
        if relative is None:
            return parse_absolute_date(text)

        duration, reference_id = relative
        reference = schedule.get_item(reference_id)
        if reference is None:
            raise ReferenceNotFoundError(
                f"Element not found in '{text.strip()}'. "
                f"'{reference_id}' is not defined as a task or milestone"
            )
        anchor = reference.end_instant
        return parse_duration(duration, anchor)

    def _new_item_id(self, field: str, body: str, schedule: Schedule) -> str:
        item_id = field.strip()
        if not item_id:
            raise GanttSyntaxError(f"Missing ID in '{body}'")
        if schedule.id_exists(item_id):
            raise DuplicateKeyError(
                f"Duplicate key in '{body}'. The element ID '{item_id}' already exists"
            )
        return item_id

    def _parse_dependencies(
        self, field: str, item_id: str, schedule: Schedule
    ) -> tuple[str, ...]:
        dependencies = _split_dependencies(field)
        for dep_id in dependencies:
            if not schedule.id_exists(dep_id):
                raise ReferenceNotFoundError(
                    f"Element not found: '{item_id}' depends on '{dep_id}', "
                    "which is not defined before it"
                )
        return dependencies


def parse_schedule(text: str | None) -> Schedule:
    """Parse schedule text into a :class:`Schedule`."""
    return ScheduleParser().parse(text)
