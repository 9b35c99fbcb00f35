"""Tests for the date and duration grammar."""

from datetime import datetime, timedelta, timezone

import pytest

from ganttblock.dates import (
    absolute_date_outcome,
    add_months,
    duration_outcome,
    naive_utc,
    parse_absolute_date,
    parse_duration,
    resolve_end_date,
    split_relative,
)
from ganttblock.exceptions import GanttSyntaxError, InvalidDateError, UnknownUnitError

ORIGIN = datetime(2024, 1, 1)


class TestParseDuration:
    """Test durations added to an origin instant."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("3D", datetime(2024, 1, 4)),
            ("2W", datetime(2024, 1, 15)),
            ("12H", datetime(2024, 1, 1, 12)),
            ("30m", datetime(2024, 1, 1, 0, 30)),
            ("45S", datetime(2024, 1, 1, 0, 0, 45)),
            ("2M", datetime(2024, 3, 1)),
            ("1Y", datetime(2025, 1, 1)),
            ("-1W", datetime(2023, 12, 25)),
            ("1.5D", datetime(2024, 1, 2, 12)),
            (" 3D ", datetime(2024, 1, 4)),
        ],
    )
    def test_units(self, text: str, expected: datetime) -> None:
        assert parse_duration(text, ORIGIN) == expected

    def test_month_and_minute_are_distinct(self) -> None:
        """Unit letters are case-sensitive."""
        assert parse_duration("1M", ORIGIN) != parse_duration("1m", ORIGIN)
        assert parse_duration("1M", ORIGIN) == datetime(2024, 2, 1)
        assert parse_duration("1m", ORIGIN) == datetime(2024, 1, 1, 0, 1)

    def test_unknown_unit(self) -> None:
        with pytest.raises(UnknownUnitError, match="Unknown unit in '3d'"):
            parse_duration("3d", ORIGIN)

    @pytest.mark.parametrize("text", ["D", "xD", "nanD", "infD"])
    def test_non_numeric_magnitude(self, text: str) -> None:
        with pytest.raises(GanttSyntaxError, match="should be a number"):
            parse_duration(text, ORIGIN)

    def test_fractional_months_rejected(self) -> None:
        with pytest.raises(GanttSyntaxError, match="whole number of months"):
            parse_duration("1.5M", ORIGIN)

    def test_half_year_is_six_months(self) -> None:
        assert parse_duration("0.5Y", ORIGIN) == datetime(2024, 7, 1)

    def test_out_of_range(self) -> None:
        with pytest.raises(GanttSyntaxError, match="out of range"):
            parse_duration("100000Y", ORIGIN)

    def test_outcome_does_not_raise(self) -> None:
        outcome = duration_outcome("3x", ORIGIN)
        assert not outcome.ok
        assert isinstance(outcome.error, UnknownUnitError)
        assert outcome.value is None


class TestAddMonths:
    """Test calendar month arithmetic with day overflow."""

    def test_rollover_non_leap_year(self) -> None:
        assert add_months(datetime(2023, 1, 31), 1) == datetime(2023, 3, 3)

    def test_rollover_leap_year(self) -> None:
        assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 3, 2)

    def test_crosses_year_boundary(self) -> None:
        assert add_months(datetime(2024, 11, 15, 8), 3) == datetime(2025, 2, 15, 8)

    def test_negative_months(self) -> None:
        assert add_months(datetime(2024, 3, 10), -3) == datetime(2023, 12, 10)


class TestAbsoluteDates:
    """Test absolute ISO-8601 literals."""

    def test_date_only(self) -> None:
        assert parse_absolute_date("2024-01-31") == datetime(2024, 1, 31)

    def test_date_time(self) -> None:
        assert parse_absolute_date(" 2024-01-31T09:30 ") == datetime(2024, 1, 31, 9, 30)

    def test_offset_converted_to_naive_utc(self) -> None:
        assert parse_absolute_date("2024-01-31T09:30+02:00") == datetime(2024, 1, 31, 7, 30)

    def test_naive_utc(self) -> None:
        aware = datetime(2024, 1, 31, 9, 30, tzinfo=timezone(timedelta(hours=2)))
        assert naive_utc(aware) == datetime(2024, 1, 31, 7, 30)
        assert naive_utc(datetime(2024, 1, 31)) == datetime(2024, 1, 31)

    @pytest.mark.parametrize("text", ["2024-13-01", "tomorrow", ""])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(InvalidDateError, match="Invalid date"):
            parse_absolute_date(text)

    def test_invalid_date_is_syntax_error(self) -> None:
        outcome = absolute_date_outcome("not-a-date")
        assert isinstance(outcome.error, GanttSyntaxError)


class TestResolveEndDate:
    """Test the duration-then-absolute-date fallback."""

    def test_duration(self) -> None:
        assert resolve_end_date("3D", ORIGIN) == datetime(2024, 1, 4)

    def test_absolute_date(self) -> None:
        assert resolve_end_date("2024-01-10", ORIGIN) == datetime(2024, 1, 10)

    def test_neither(self) -> None:
        """Only the absolute-date error surfaces."""
        with pytest.raises(InvalidDateError):
            resolve_end_date("soonish", ORIGIN)


class TestSplitRelative:
    """Test splitting relative date references."""

    def test_duration_and_reference(self) -> None:
        assert split_relative("3D after t1") == ("3D", "t1")

    def test_bare_after_uses_zero_days(self) -> None:
        assert split_relative("after t1") == ("0D", "t1")

    def test_surrounding_whitespace(self) -> None:
        assert split_relative("  2W after  api ") == ("2W", "api")

    def test_absolute_date_is_not_relative(self) -> None:
        assert split_relative("2024-01-01") is None

    @pytest.mark.parametrize("text", ["1D after a after b", "after a after b"])
    def test_multiple_markers(self, text: str) -> None:
        with pytest.raises(GanttSyntaxError, match="Invalid relative date"):
            split_relative(text)
