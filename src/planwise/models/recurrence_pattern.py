"""Recurrence patterns as a closed set of variants.

A recurrence carries nullable interval, weekday and day-of-month fields.
They are turned into exactly one pattern variant here, so date and period
code matches on the variant instead of re-checking which field is set.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class IntervalPattern:
    """Every ``days`` days."""

    days: int


@dataclass(frozen=True)
class WeekdayPattern:
    """Specific weekdays, Sunday=0 .. Saturday=6, sorted ascending."""

    weekdays: tuple[int, ...]


@dataclass(frozen=True)
class DayOfMonthPattern:
    """Specific days of the month (1-31), sorted ascending."""

    days: tuple[int, ...]


@dataclass(frozen=True)
class NoPattern:
    """No repetition (one-shot or finite tasks)."""


RecurrencePattern = IntervalPattern | WeekdayPattern | DayOfMonthPattern | NoPattern


def pattern_from_fields(
    interval: int | None,
    weekdays: list[int],
    days_of_month: list[int],
) -> RecurrencePattern:
    """Pick the active pattern. Interval wins over weekdays over days of month."""
    if interval:
        return IntervalPattern(days=interval)
    if weekdays:
        return WeekdayPattern(weekdays=tuple(sorted(set(weekdays))))
    if days_of_month:
        return DayOfMonthPattern(days=tuple(sorted(set(days_of_month))))
    return NoPattern()
