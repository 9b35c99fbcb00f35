"""Tests for schedule data models."""

from datetime import datetime

import pytest

from ganttblock.exceptions import InvalidOptionError
from ganttblock.models import Group, Milestone, OptionKey, RenderOptions, Schedule, Task


class TestRenderOptions:
    """Test the raw option bag and its typed accessors."""

    def test_is_on_only_for_on(self) -> None:
        options = RenderOptions()
        options.set("todaymarker", "ON")
        options.set("dependencies", "yes")

        assert options.is_on(OptionKey.TODAY_MARKER)
        assert not options.is_on(OptionKey.DEPENDENCIES)
        assert not options.is_on(OptionKey.TITLE)

    def test_get_int(self) -> None:
        options = RenderOptions()
        assert options.get_int(OptionKey.AXIS_TICKS, 6) == 6

        options.set("AxisTicks", " 10 ")
        assert options.has(OptionKey.AXIS_TICKS)
        assert options.get_int(OptionKey.AXIS_TICKS, 6) == 10

    def test_get_int_invalid(self) -> None:
        options = RenderOptions({"axisticks": "lots"})
        with pytest.raises(InvalidOptionError, match="'axisticks' must be an integer"):
            options.get_int(OptionKey.AXIS_TICKS, 6)

    def test_known_keys(self) -> None:
        assert OptionKey.is_known("outputdateformat")
        assert OptionKey.is_known("businessdays")
        assert not OptionKey.is_known("colour")


class TestSchedule:
    """Test schedule lookups."""

    @pytest.fixture
    def schedule(self) -> Schedule:
        return Schedule(
            groups=[Group("Core")],
            tasks=[
                Task(
                    id="t1",
                    title="Build",
                    start_date=datetime(2024, 1, 1),
                    end_date=datetime(2024, 1, 5),
                    group_index=0,
                )
            ],
            milestones=[Milestone(id="m1", title="Ship", start_date=datetime(2024, 1, 6))],
        )

    def test_lookups(self, schedule: Schedule) -> None:
        assert schedule.get_task("t1") is not None
        assert schedule.get_task("m1") is None
        assert schedule.get_milestone("m1") is not None
        assert schedule.get_item("m1") is schedule.milestones[0]
        assert schedule.get_item("nope") is None
        assert schedule.id_exists("t1")
        assert schedule.get_all_ids() == {"t1", "m1"}

    def test_end_instant(self, schedule: Schedule) -> None:
        assert schedule.tasks[0].end_instant == datetime(2024, 1, 5)
        assert schedule.milestones[0].end_instant == datetime(2024, 1, 6)

    def test_group_back_reference(self, schedule: Schedule) -> None:
        assert schedule.get_group(schedule.tasks[0]) == Group("Core")
        assert schedule.get_group(schedule.milestones[0]) is None

    def test_items_lists_tasks_first(self, schedule: Schedule) -> None:
        assert [item.id for item in schedule.items()] == ["t1", "m1"]
