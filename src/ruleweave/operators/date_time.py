"""
Date and time operators.

Dates are parsed permissively: datetime/date instances, epoch milliseconds,
or ISO 8601 strings. Naive values are taken as UTC. Anything unparseable
makes the comparison False.

Times are "HH:MM" or "HH:MM:SS" strings compared as seconds of the day.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from typing import Any

from .base import (
    BaseOperator,
    NegatedOperator,
    OperatorCategory,
    OperatorContext,
    OperatorMetadata,
    is_array,
    is_number,
    is_string,
    negated_metadata,
)

_TIME_RE = re.compile(r"^([0-9]{1,2}):([0-9]{2})(?::([0-9]{2}))?$")

_DATE_INPUTS = ("date", "string", "number")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_date(value: Any) -> datetime | None:
    """
    Parse a value into an aware UTC datetime.

    Returns:
        The datetime, or None when the value cannot be read as a date
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if is_number(value):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if is_string(value):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def parse_time(value: Any) -> int | None:
    """Convert "HH:MM[:SS]" to seconds of the day, or None if invalid."""
    if not is_string(value):
        return None
    match = _TIME_RE.match(value)
    if not match:
        return None

    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = int(match.group(3)) if match.group(3) else 0
    if hours > 23 or minutes > 59 or seconds > 59:
        return None
    return hours * 3600 + minutes * 60 + seconds


def _dates(context: OperatorContext) -> tuple[datetime, datetime] | None:
    field_date = parse_date(context.field_value)
    constraint_date = parse_date(context.constraint_value)
    if field_date is None or constraint_date is None:
        return None
    return field_date, constraint_date


def _times(context: OperatorContext) -> tuple[int, int] | None:
    field_time = parse_time(context.field_value)
    constraint_time = parse_time(context.constraint_value)
    if field_time is None or constraint_time is None:
        return None
    return field_time, constraint_time


def _is_pair(value: Any) -> bool:
    return is_array(value) and len(value) == 2


class _DateOperator(BaseOperator):
    """Field and constraint must both read as dates."""

    def is_valid_field_type(self, value: Any) -> bool:
        return parse_date(value) is not None

    def is_valid_constraint_type(self, value: Any) -> bool:
        return parse_date(value) is not None


# =============================================================================
# Date Comparison
# =============================================================================


def _date_metadata(name: str, display: str, description: str, example: str) -> OperatorMetadata:
    return OperatorMetadata(
        name=name,
        display_name=display,
        category=OperatorCategory.DATE_TIME,
        description=description,
        accepted_field_types=_DATE_INPUTS,
        expected_value_type="date",
        requires_value=True,
        is_negatable=True,
        example=example,
    )


class DateAfterOperator(_DateOperator):
    metadata = _date_metadata(
        "date-after",
        "Date After",
        "Checks if the field date is after the provided date",
        '{"field": "createdAt", "operator": "date-after", "value": "2024-01-01"}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = _dates(context)
        return pair is not None and pair[0] > pair[1]


class DateBeforeOperator(_DateOperator):
    metadata = _date_metadata(
        "date-before",
        "Date Before",
        "Checks if the field date is before the provided date",
        '{"field": "birthday", "operator": "date-before", "value": "2000-01-01"}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = _dates(context)
        return pair is not None and pair[0] < pair[1]


class DateAfterOrEqualsOperator(_DateOperator):
    metadata = _date_metadata(
        "date-after-or-equals",
        "Date After Or Equals",
        "Checks if the field date is after or equals the provided date",
        '{"field": "startDate", "operator": "date-after-or-equals", "value": "2024-01-01"}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = _dates(context)
        return pair is not None and pair[0] >= pair[1]


class DateBeforeOrEqualsOperator(_DateOperator):
    metadata = _date_metadata(
        "date-before-or-equals",
        "Date Before Or Equals",
        "Checks if the field date is before or equals the provided date",
        '{"field": "endDate", "operator": "date-before-or-equals", "value": "2024-12-31"}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = _dates(context)
        return pair is not None and pair[0] <= pair[1]


class DateEqualsOperator(_DateOperator):
    metadata = _date_metadata(
        "date-equals",
        "Date Equals",
        "Checks if the field date equals the provided date",
        '{"field": "appointmentDate", "operator": "date-equals", "value": "2024-01-15"}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = _dates(context)
        return pair is not None and pair[0] == pair[1]


class DateNotEqualsOperator(NegatedOperator):
    positive = DateEqualsOperator
    metadata = negated_metadata(
        DateEqualsOperator,
        "date-not-equals",
        "Date Not Equals",
        "Checks if the field date does not equal the provided date",
        '{"field": "lastLogin", "operator": "date-not-equals", "value": "2024-01-01"}',
    )


class DateBetweenOperator(_DateOperator):
    metadata = OperatorMetadata(
        name="date-between",
        display_name="Date Between",
        category=OperatorCategory.DATE_TIME,
        description="Checks if the field date is between two dates (inclusive)",
        accepted_field_types=_DATE_INPUTS,
        expected_value_type="array",
        requires_value=True,
        is_negatable=True,
        example='{"field": "eventDate", "operator": "date-between", '
        '"value": ["2024-01-01", "2024-12-31"]}',
    )

    def is_valid_constraint_type(self, value: Any) -> bool:
        return _is_pair(value) and all(parse_date(v) is not None for v in value)

    def check(self, context: OperatorContext) -> bool:
        bounds = context.constraint_value
        if not _is_pair(bounds):
            return False
        field_date = parse_date(context.field_value)
        start = parse_date(bounds[0])
        end = parse_date(bounds[1])
        if field_date is None or start is None or end is None:
            return False
        return start <= field_date <= end


class DateNotBetweenOperator(NegatedOperator):
    positive = DateBetweenOperator
    metadata = negated_metadata(
        DateBetweenOperator,
        "date-not-between",
        "Date Not Between",
        "Checks if the field date is outside two dates",
        '{"field": "holiday", "operator": "date-not-between", '
        '"value": ["2024-06-01", "2024-08-31"]}',
    )


# =============================================================================
# Relative To Now
# =============================================================================


def _now_metadata(name: str, display: str, description: str) -> OperatorMetadata:
    return OperatorMetadata(
        name=name,
        display_name=display,
        category=OperatorCategory.DATE_TIME,
        description=description,
        accepted_field_types=_DATE_INPUTS,
        expected_value_type="void",
        requires_value=False,
        is_negatable=True,
        example=f'{{"field": "expiresAt", "operator": "{name}"}}',
    )


class DateAfterNowOperator(_DateOperator):
    metadata = _now_metadata(
        "date-after-now", "Date After Now", "Checks if the field date is after the current date"
    )

    def check(self, context: OperatorContext) -> bool:
        field_date = parse_date(context.field_value)
        return field_date is not None and field_date > _utcnow()


class DateBeforeNowOperator(_DateOperator):
    metadata = _now_metadata(
        "date-before-now", "Date Before Now", "Checks if the field date is before the current date"
    )

    def check(self, context: OperatorContext) -> bool:
        field_date = parse_date(context.field_value)
        return field_date is not None and field_date < _utcnow()


class DateAfterNowOrEqualsOperator(_DateOperator):
    metadata = _now_metadata(
        "date-after-now-or-equals",
        "Date After Now Or Equals",
        "Checks if the field date is after or equal to the current date",
    )

    def check(self, context: OperatorContext) -> bool:
        field_date = parse_date(context.field_value)
        return field_date is not None and field_date >= _utcnow()


class DateBeforeNowOrEqualsOperator(_DateOperator):
    metadata = _now_metadata(
        "date-before-now-or-equals",
        "Date Before Now Or Equals",
        "Checks if the field date is before or equal to the current date",
    )

    def check(self, context: OperatorContext) -> bool:
        field_date = parse_date(context.field_value)
        return field_date is not None and field_date <= _utcnow()


class DateEqualsToNowOperator(_DateOperator):
    """Compares the calendar day (UTC) only."""

    metadata = _now_metadata(
        "date-equals-to-now",
        "Date Equals Now",
        "Checks if the field date falls on the current day",
    )

    def check(self, context: OperatorContext) -> bool:
        field_date = parse_date(context.field_value)
        return field_date is not None and field_date.date() == _utcnow().date()


class DateNotEqualsToNowOperator(NegatedOperator):
    positive = DateEqualsToNowOperator
    metadata = negated_metadata(
        DateEqualsToNowOperator,
        "date-not-equals-to-now",
        "Date Not Equals Now",
        "Checks if the field date does not fall on the current day",
        '{"field": "lastSeen", "operator": "date-not-equals-to-now"}',
    )


# =============================================================================
# Date Type Check
# =============================================================================


class DateOperator(BaseOperator):
    metadata = OperatorMetadata(
        name="date",
        display_name="Is Date",
        category=OperatorCategory.DATE_TIME,
        description="Checks if the value can be read as a date",
        accepted_field_types=("any",),
        expected_value_type="void",
        requires_value=False,
        is_negatable=False,
        example='{"field": "birthDate", "operator": "date"}',
    )

    def check(self, context: OperatorContext) -> bool:
        return parse_date(context.field_value) is not None


class NotDateOperator(NegatedOperator):
    positive = DateOperator
    metadata = negated_metadata(
        DateOperator,
        "not-date",
        "Is Not Date",
        "Checks if the value cannot be read as a date",
        '{"field": "comment", "operator": "not-date"}',
    )


# =============================================================================
# Time Of Day
# =============================================================================


class _TimeOperator(BaseOperator):
    """Shared guards for single-value time comparisons."""

    def is_valid_field_type(self, value: Any) -> bool:
        return is_string(value)

    def is_valid_constraint_type(self, value: Any) -> bool:
        return is_string(value)


def _time_metadata(name: str, display: str, description: str, example: str) -> OperatorMetadata:
    return OperatorMetadata(
        name=name,
        display_name=display,
        category=OperatorCategory.DATE_TIME,
        description=description,
        accepted_field_types=("string",),
        expected_value_type="string",
        requires_value=True,
        is_negatable=True,
        example=example,
    )


class TimeAfterOperator(_TimeOperator):
    metadata = _time_metadata(
        "time-after",
        "Time After",
        "Checks if the field time is after the provided time",
        '{"field": "openingTime", "operator": "time-after", "value": "09:00:00"}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = _times(context)
        return pair is not None and pair[0] > pair[1]


class TimeBeforeOperator(_TimeOperator):
    metadata = _time_metadata(
        "time-before",
        "Time Before",
        "Checks if the field time is before the provided time",
        '{"field": "closingTime", "operator": "time-before", "value": "18:00:00"}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = _times(context)
        return pair is not None and pair[0] < pair[1]


class TimeEqualsOperator(_TimeOperator):
    metadata = _time_metadata(
        "time-equals",
        "Time Equals",
        "Checks if the field time equals the provided time",
        '{"field": "meetingTime", "operator": "time-equals", "value": "14:30:00"}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = _times(context)
        return pair is not None and pair[0] == pair[1]


class TimeNotEqualsOperator(_TimeOperator):
    """Both times must parse; not a plain inverse of time-equals."""

    metadata = _time_metadata(
        "time-not-equals",
        "Time Not Equals",
        "Checks if the field time differs from the provided time",
        '{"field": "breakTime", "operator": "time-not-equals", "value": "12:00:00"}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = _times(context)
        return pair is not None and pair[0] != pair[1]


class TimeAfterOrEqualsOperator(_TimeOperator):
    metadata = _time_metadata(
        "time-after-or-equals",
        "Time After Or Equals",
        "Checks if the field time is after or equal to the provided time",
        '{"field": "startTime", "operator": "time-after-or-equals", "value": "09:00:00"}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = _times(context)
        return pair is not None and pair[0] >= pair[1]


class TimeBeforeOrEqualsOperator(_TimeOperator):
    metadata = _time_metadata(
        "time-before-or-equals",
        "Time Before Or Equals",
        "Checks if the field time is before or equal to the provided time",
        '{"field": "endTime", "operator": "time-before-or-equals", "value": "17:00:00"}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = _times(context)
        return pair is not None and pair[0] <= pair[1]


class _TimeRangeOperator(BaseOperator):
    def is_valid_field_type(self, value: Any) -> bool:
        return is_string(value)

    def is_valid_constraint_type(self, value: Any) -> bool:
        return _is_pair(value) and all(is_string(v) for v in value)

    def _bounds(self, context: OperatorContext) -> tuple[int, int, int] | None:
        bounds = context.constraint_value
        if not _is_pair(bounds):
            return None
        field_time = parse_time(context.field_value)
        start = parse_time(bounds[0])
        end = parse_time(bounds[1])
        if field_time is None or start is None or end is None:
            return None
        return field_time, start, end


def _time_range_metadata(name: str, display: str, description: str) -> OperatorMetadata:
    return OperatorMetadata(
        name=name,
        display_name=display,
        category=OperatorCategory.DATE_TIME,
        description=description,
        accepted_field_types=("string",),
        expected_value_type="array",
        requires_value=True,
        is_negatable=True,
        example=f'{{"field": "workHours", "operator": "{name}", '
        '"value": ["09:00:00", "17:00:00"]}',
    )


class TimeBetweenOperator(_TimeRangeOperator):
    metadata = _time_range_metadata(
        "time-between", "Time Between", "Checks if the field time is between two times (inclusive)"
    )

    def check(self, context: OperatorContext) -> bool:
        bounds = self._bounds(context)
        return bounds is not None and bounds[1] <= bounds[0] <= bounds[2]


class TimeNotBetweenOperator(_TimeRangeOperator):
    """Strictly outside the range; invalid times are False, not True."""

    metadata = _time_range_metadata(
        "time-not-between", "Time Not Between", "Checks if the field time is outside two times"
    )

    def check(self, context: OperatorContext) -> bool:
        bounds = self._bounds(context)
        return bounds is not None and (bounds[0] < bounds[1] or bounds[0] > bounds[2])


DATE_TIME_OPERATORS: list[type[BaseOperator]] = [
    DateAfterOperator,
    DateBeforeOperator,
    DateAfterOrEqualsOperator,
    DateBeforeOrEqualsOperator,
    DateEqualsOperator,
    DateNotEqualsOperator,
    DateBetweenOperator,
    DateNotBetweenOperator,
    DateAfterNowOperator,
    DateBeforeNowOperator,
    DateAfterNowOrEqualsOperator,
    DateBeforeNowOrEqualsOperator,
    DateEqualsToNowOperator,
    DateNotEqualsToNowOperator,
    DateOperator,
    NotDateOperator,
    TimeAfterOperator,
    TimeBeforeOperator,
    TimeEqualsOperator,
    TimeNotEqualsOperator,
    TimeAfterOrEqualsOperator,
    TimeBeforeOrEqualsOperator,
    TimeBetweenOperator,
    TimeNotBetweenOperator,
]
