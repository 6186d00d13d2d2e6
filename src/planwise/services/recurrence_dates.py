"""Date arithmetic for recurrence patterns.

Computes when the next occurrence of a pattern falls and the target/limit
window of a newly scheduled occurrence. Pure functions; the time of day of
the input is carried through unchanged.
"""

from __future__ import annotations

import calendar
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from planwise.models import (
    DayOfMonthPattern,
    IntervalPattern,
    NoPattern,
    RecurrencePattern,
    WeekdayPattern,
)

# Target sits at this fraction of the window, the limit at its end.
TARGET_FRACTION = 0.6

ONE_SHOT_TARGET_DAYS = 1
ONE_SHOT_LIMIT_DAYS = 7


@dataclass(frozen=True)
class OccurrenceWindow:
    """Target and limit dates of an occurrence."""

    target_date: datetime
    limit_date: datetime


def _weekday(moment: datetime) -> int:
    """Weekday with Sunday as 0 (Python's weekday() has Monday as 0)."""
    return (moment.weekday() + 1) % 7


def _on_day(moment: datetime, year: int, month: int, day: int) -> datetime:
    """Move ``moment`` to a calendar day, clamping to the month's last day."""
    last_day = calendar.monthrange(year, month)[1]
    return moment.replace(year=year, month=month, day=min(day, last_day))


def next_weekday(from_date: datetime, weekdays: tuple[int, ...]) -> datetime:
    """Soonest selected weekday strictly after the weekday of ``from_date``."""
    current = _weekday(from_date)
    for day in sorted(weekdays):
        if day > current:
            return from_date + timedelta(days=day - current)
    return from_date + timedelta(days=7 - current + min(weekdays))


def next_day_of_month(from_date: datetime, days: tuple[int, ...]) -> datetime:
    """Soonest selected day of month strictly after ``from_date``'s day.

    Days past the end of a month are clamped to its last day. A clamped
    candidate must still fall after today, otherwise the search moves to the
    following month, where the smallest selected day is used.
    """
    sorted_days = sorted(days)
    for day in sorted_days:
        candidate = _on_day(from_date, from_date.year, from_date.month, day)
        if candidate.day > from_date.day:
            return candidate

    if from_date.month == 12:
        year, month = from_date.year + 1, 1
    else:
        year, month = from_date.year, from_date.month + 1
    return _on_day(from_date, year, month, sorted_days[0])


def next_occurrence_date(from_date: datetime, pattern: RecurrencePattern) -> datetime:
    """Date of the occurrence following one that starts at ``from_date``.

    Always strictly after ``from_date``.
    """
    match pattern:
        case IntervalPattern(days=days):
            return from_date + timedelta(days=days)
        case WeekdayPattern(weekdays=weekdays):
            return next_weekday(from_date, weekdays)
        case DayOfMonthPattern(days=days):
            return next_day_of_month(from_date, days)
        case NoPattern():
            return from_date + timedelta(days=1)
    raise TypeError(f"Unsupported recurrence pattern: {pattern!r}")


def occurrence_window(
    start_date: datetime,
    pattern: RecurrencePattern,
    one_shot_target_days: int = ONE_SHOT_TARGET_DAYS,
    one_shot_limit_days: int = ONE_SHOT_LIMIT_DAYS,
) -> OccurrenceWindow:
    """Target and limit dates for an occurrence starting at ``start_date``.

    Interval patterns put the target at 60% of the interval and the limit at
    its end. Weekday and day-of-month patterns use the next pattern date as
    the limit and 60% of the gap (at least one day) as the target. Without a
    pattern the target and limit are fixed offsets.
    """
    match pattern:
        case IntervalPattern(days=days):
            return OccurrenceWindow(
                target_date=start_date + timedelta(days=math.floor(days * TARGET_FRACTION)),
                limit_date=start_date + timedelta(days=days),
            )
        case WeekdayPattern() | DayOfMonthPattern():
            next_date = next_occurrence_date(start_date, pattern)
            days_until_next = (next_date - start_date).days
            target_days = max(1, math.floor(TARGET_FRACTION * days_until_next))
            return OccurrenceWindow(
                target_date=start_date + timedelta(days=target_days),
                limit_date=next_date,
            )
        case NoPattern():
            return OccurrenceWindow(
                target_date=start_date + timedelta(days=one_shot_target_days),
                limit_date=start_date + timedelta(days=one_shot_limit_days),
            )
    raise TypeError(f"Unsupported recurrence pattern: {pattern!r}")


class RecurrenceDateCalculator:
    """Object facade over the date functions, configured with one-shot defaults."""

    def __init__(
        self,
        one_shot_target_days: int = ONE_SHOT_TARGET_DAYS,
        one_shot_limit_days: int = ONE_SHOT_LIMIT_DAYS,
    ):
        self.one_shot_target_days = one_shot_target_days
        self.one_shot_limit_days = one_shot_limit_days

    def next_occurrence_date(
        self, from_date: datetime, pattern: RecurrencePattern
    ) -> datetime:
        return next_occurrence_date(from_date, pattern)

    def occurrence_window(
        self, start_date: datetime, pattern: RecurrencePattern
    ) -> OccurrenceWindow:
        return occurrence_window(
            start_date,
            pattern,
            one_shot_target_days=self.one_shot_target_days,
            one_shot_limit_days=self.one_shot_limit_days,
        )
