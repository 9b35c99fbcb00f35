"""Date and duration grammar for schedule text.

Durations are a signed number followed by a single, case-sensitive unit letter::

    3D    three days             -1W   one week earlier
    12H   twelve hours           30m   thirty minutes
    2M    two calendar months    1Y    twelve calendar months
    45S   forty-five seconds

Absolute dates are ISO-8601 calendar literals such as ``2024-01-31`` or
``2024-01-31T09:30``.

The parse functions here never raise: they return a :class:`DateOutcome` that
either carries the resolved instant or the error that would be raised, so callers
can branch on failure explicitly (see :func:`resolve_end_date`).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from .exceptions import GanttSyntaxError, InvalidDateError, ParseError, UnknownUnitError

AFTER_MARKER = " after "
AFTER_PREFIX = "after "
DEFAULT_RELATIVE_DURATION = "0D"

DAYS_PER_WEEK = 7
MONTHS_PER_YEAR = 12


class DurationUnit(str, Enum):
    """Duration unit letters. Matching is case-sensitive: ``M`` is months, ``m`` minutes."""

    DAY = "D"
    WEEK = "W"
    HOUR = "H"
    MINUTE = "m"
    MONTH = "M"
    SECOND = "S"
    YEAR = "Y"


_UNITS = {unit.value: unit for unit in DurationUnit}


@dataclass(slots=True, frozen=True)
class DateOutcome:
    """Result of a date or duration parse: exactly one of value or error is set."""

    value: datetime | None = None
    error: ParseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> datetime:
        """Return the value or raise the stored error."""
        if self.error is not None:
            raise self.error
        assert self.value is not None
        return self.value


def add_months(moment: datetime, months: int) -> datetime:
    """Add calendar months, rolling day overflow into the following month.

    The day of month is kept as an offset from the first of the target month, so
    2023-01-31 + 1 month lands on 2023-03-03 and 2024-01-31 + 1 month on 2024-03-02.
    """
    years, month_index = divmod(moment.month - 1 + months, MONTHS_PER_YEAR)
    first_of_month = moment.replace(year=moment.year + years, month=month_index + 1, day=1)
    return first_of_month + timedelta(days=moment.day - 1)


def _apply_duration(origin: datetime, unit: DurationUnit, amount: float) -> datetime:
    if unit is DurationUnit.DAY:
        return origin + timedelta(days=amount)
    if unit is DurationUnit.WEEK:
        return origin + timedelta(days=amount * DAYS_PER_WEEK)
    if unit is DurationUnit.HOUR:
        return origin + timedelta(hours=amount)
    if unit is DurationUnit.MINUTE:
        return origin + timedelta(minutes=amount)
    if unit is DurationUnit.SECOND:
        return origin + timedelta(seconds=amount)

    months = amount * MONTHS_PER_YEAR if unit is DurationUnit.YEAR else amount
    if not months.is_integer():
        raise GanttSyntaxError(
            f"Duration of {amount:g}{unit.value} is not a whole number of months"
        )
    return add_months(origin, int(months))


def duration_outcome(text: str, origin: datetime) -> DateOutcome:
    """Parse a duration and add it to ``origin``."""
    text = text.strip()
    if not text:
        return DateOutcome(error=GanttSyntaxError("Empty duration"))

    unit = _UNITS.get(text[-1])
    if unit is None:
        return DateOutcome(
            error=UnknownUnitError(
                f"Unknown unit in '{text}'. The unit should be one of the following: "
                f"{', '.join(_UNITS)}"
            )
        )

    magnitude = text[:-1].strip()
    try:
        amount = float(magnitude)
    except ValueError:
        amount = math.nan
    if not math.isfinite(amount):
        return DateOutcome(
            error=GanttSyntaxError(f"Duration '{text}': '{magnitude}' should be a number")
        )

    try:
        return DateOutcome(value=_apply_duration(origin, unit, amount))
    except GanttSyntaxError as e:
        return DateOutcome(error=e)
    except (OverflowError, ValueError) as e:
        return DateOutcome(error=GanttSyntaxError(f"Duration '{text}' is out of range: {e}"))


def naive_utc(moment: datetime) -> datetime:
    """Convert an offset-aware instant to naive UTC; naive instants pass through."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def absolute_date_outcome(text: str) -> DateOutcome:
    """Parse an ISO-8601 date or date-time literal.

    Literals with a UTC offset are converted to UTC and made naive so that every
    instant in a schedule compares with every other.
    """
    text = text.strip()
    try:
        moment = datetime.fromisoformat(text)
    except ValueError:
        return DateOutcome(
            error=InvalidDateError(
                f"Invalid date '{text}'. Expected a date like 2024-01-31 or 2024-01-31T09:30"
            )
        )
    return DateOutcome(value=naive_utc(moment))


def parse_duration(text: str, origin: datetime) -> datetime:
    """Add a duration to ``origin``.

    Raises:
        UnknownUnitError: If the last character is not a duration unit
        GanttSyntaxError: If the magnitude is not a number
    """
    return duration_outcome(text, origin).unwrap()


def parse_absolute_date(text: str) -> datetime:
    """Parse an absolute date literal.

    Raises:
        InvalidDateError: If the literal is not an ISO-8601 date
    """
    return absolute_date_outcome(text).unwrap()


def resolve_end_date(text: str, start: datetime) -> datetime:
    """Resolve a task end field: a duration from ``start``, else an absolute date.

    Only the absolute-date error can surface; a failed duration parse just selects
    the fallback.
    """
    outcome = duration_outcome(text, start)
    if outcome.ok:
        return outcome.unwrap()
    return absolute_date_outcome(text).unwrap()


def split_relative(text: str) -> tuple[str, str] | None:
    """Split ``"<duration> after <id>"`` into its duration and reference ID.

    Returns None when the text is not relative. A bare ``"after <id>"`` yields the
    default zero-day duration.

    Raises:
        GanttSyntaxError: If the text has more than one ``after`` marker
    """
    text = text.strip()
    if text.startswith(AFTER_PREFIX):
        duration, reference = "", text[len(AFTER_PREFIX) :]
        if AFTER_MARKER in f" {reference}":
            raise _relative_syntax_error(text)
    elif AFTER_MARKER in text:
        parts = text.split(AFTER_MARKER)
        if len(parts) != 2:  # noqa: PLR2004 - duration and reference
            raise _relative_syntax_error(text)
        duration, reference = parts
    else:
        return None

    duration = duration.strip() or DEFAULT_RELATIVE_DURATION
    return duration, reference.strip()


def _relative_syntax_error(text: str) -> GanttSyntaxError:
    return GanttSyntaxError(
        f"Invalid relative date '{text}'. Syntax should be '1D{AFTER_MARKER}taskId' "
        "where 1D is a duration (number + unit of time)"
    )
