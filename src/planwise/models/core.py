"""Task, recurrence and occurrence data models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    field_validator,
    model_validator,
)

from .recurrence_pattern import RecurrencePattern, pattern_from_fields


class DayOfWeek(str, Enum):
    """Weekday tags used by weekday recurrences."""

    SUN = "Sun"
    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"
    SAT = "Sat"

    @property
    def index(self) -> int:
        """Day number with Sunday as 0, matching the calendar grid."""
        return list(DayOfWeek).index(self)


class OccurrenceStatus(str, Enum):
    """Lifecycle states of an occurrence."""

    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    SKIPPED = "Skipped"

    @property
    def is_terminal(self) -> bool:
        return self in (OccurrenceStatus.COMPLETED, OccurrenceStatus.SKIPPED)

    def can_transition_to(self, target: OccurrenceStatus) -> bool:
        return target in STATUS_TRANSITIONS[self]


STATUS_TRANSITIONS: dict[OccurrenceStatus, frozenset[OccurrenceStatus]] = {
    OccurrenceStatus.PENDING: frozenset(
        {
            OccurrenceStatus.IN_PROGRESS,
            OccurrenceStatus.COMPLETED,
            OccurrenceStatus.SKIPPED,
        }
    ),
    OccurrenceStatus.IN_PROGRESS: frozenset(
        {OccurrenceStatus.COMPLETED, OccurrenceStatus.SKIPPED}
    ),
    OccurrenceStatus.COMPLETED: frozenset(),
    OccurrenceStatus.SKIPPED: frozenset(),
}

ACTIVE_STATUSES = frozenset({OccurrenceStatus.PENDING, OccurrenceStatus.IN_PROGRESS})


class PeriodState(BaseModel):
    """Per-period quota counter and its anchor.

    Instances are immutable; PeriodTracker is the only producer of new
    values.

    Attributes:
        completed_occurrences: Occurrences resolved in the current period
        last_period_start: Instant the current period started
    """

    model_config = ConfigDict(frozen=True)

    completed_occurrences: int = Field(default=0, ge=0)
    last_period_start: datetime | None = None


class _RecurrenceFields(BaseModel):
    """Pattern fields shared by Recurrence and RecurrenceCreate."""

    interval: int | None = Field(default=None, gt=0)
    days_of_week: list[DayOfWeek] | None = None
    days_of_month: list[int] | None = None
    max_occurrences: int | None = Field(default=None, gt=0)
    end_date: datetime | None = None

    @field_validator("days_of_month")
    @classmethod
    def validate_days_of_month(cls, v: list[int] | None) -> list[int] | None:
        if v is None:
            return v
        for day in v:
            if not 1 <= day <= 31:
                raise ValueError(f"day of month must be between 1 and 31, got {day}")
        return sorted(set(v))

    @field_validator("days_of_week")
    @classmethod
    def validate_days_of_week(cls, v: list[DayOfWeek] | None) -> list[DayOfWeek] | None:
        if v is None:
            return v
        return sorted(set(v), key=lambda day: day.index)

    @model_validator(mode="after")
    def check_single_day_selection(self):
        if self.days_of_week and self.days_of_month:
            raise ValueError("days_of_week and days_of_month cannot both be set")
        return self

    _pattern: RecurrencePattern = PrivateAttr()

    def model_post_init(self, __context: Any) -> None:
        self._pattern = pattern_from_fields(
            interval=self.interval,
            weekdays=[day.index for day in self.days_of_week or []],
            days_of_month=self.days_of_month or [],
        )

    @property
    def pattern(self) -> RecurrencePattern:
        """The active recurrence pattern, decided once at construction."""
        return self._pattern

    @property
    def is_one_shot(self) -> bool:
        """True for a single occurrence with no repeating pattern."""
        return (
            self.max_occurrences == 1
            and not self.interval
            and not self.days_of_week
            and not self.days_of_month
        )


class Recurrence(_RecurrenceFields):
    """Recurrence attached to a task.

    Attributes:
        id: Unique identifier
        interval: Period length in days
        days_of_week: Weekday selection (exclusive with days_of_month)
        days_of_month: Day-of-month selection (exclusive with days_of_week)
        max_occurrences: Quota of occurrences per period
        end_date: After this instant the owning task is deactivated
        period: Period counter state, written only by PeriodTracker
    """

    id: str
    period: PeriodState = Field(default_factory=PeriodState)


class RecurrenceCreate(_RecurrenceFields):
    """Model for creating a recurrence."""


class RecurrenceUpdate(BaseModel):
    """Partial recurrence update. Only provided fields are written."""

    period: PeriodState | None = None
    end_date: datetime | None = None


class Task(BaseModel):
    """Task model representing a user-defined unit of work.

    Attributes:
        id: Unique identifier for the task
        owner_id: Owning user
        name: Display name
        description: Optional detailed description
        importance: Importance level (1=lowest, 10=highest)
        is_active: False once the task is soft-deleted or finished
        is_fixed: Occupies a fixed wall-clock slot
        fixed_start_time: Slot start as "HH:MM[:SS]" (fixed tasks)
        fixed_end_time: Slot end as "HH:MM[:SS]" (fixed tasks)
        recurrence: Optional recurrence
        created_at: Creation timestamp
    """

    id: str
    owner_id: str
    name: str
    description: str | None = None
    importance: int = Field(default=5, ge=1, le=10)
    is_active: bool = True
    is_fixed: bool = False
    fixed_start_time: str | None = None
    fixed_end_time: str | None = None
    recurrence: Recurrence | None = None
    created_at: datetime


class TaskCreate(BaseModel):
    """Model for creating a new task.

    Attributes:
        name: Display name (required)
        description: Optional detailed description
        importance: Importance level (1-10)
        is_fixed: Whether the task occupies a fixed slot
        fixed_start_time: Slot start time (required when fixed)
        fixed_end_time: Slot end time (required when fixed)
        recurrence: Optional recurrence definition
        target_date: Explicit target for the first occurrence
        limit_date: Explicit limit for the first occurrence
        target_time_consumption: Effort estimate in hours
    """

    name: str = Field(min_length=1)
    description: str | None = None
    importance: int = Field(default=5, ge=1, le=10)
    is_fixed: bool = False
    fixed_start_time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}(:\d{2})?$")
    fixed_end_time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}(:\d{2})?$")
    recurrence: RecurrenceCreate | None = None
    target_date: datetime | None = None
    limit_date: datetime | None = None
    target_time_consumption: float | None = Field(default=None, ge=0)


class TaskUpdate(BaseModel):
    """Partial task update. Only provided fields are written."""

    name: str | None = None
    description: str | None = None
    importance: int | None = Field(default=None, ge=1, le=10)
    is_active: bool | None = None


class _OccurrenceDateCheck(BaseModel):
    @model_validator(mode="after")
    def check_target_before_limit(self):
        target = getattr(self, "target_date", None)
        limit = getattr(self, "limit_date", None)
        if target is not None and limit is not None and target > limit:
            raise ValueError("target_date must not be after limit_date")
        return self


class Occurrence(_OccurrenceDateCheck):
    """A concrete, dated instance of a task.

    Attributes:
        id: Unique identifier
        task_id: Owning task
        start_date: When the work window opens
        target_date: Soft goal
        limit_date: Hard deadline
        target_time_consumption: Effort estimate in hours
        time_consumed: Actual effort in hours (synced from calendar events)
        status: Lifecycle state
        urgency: Cached urgency, recomputed on every read
        completed_at: Set only on transition to Completed
        created_at: Creation timestamp
    """

    id: str
    task_id: str
    start_date: datetime
    target_date: datetime | None = None
    limit_date: datetime | None = None
    target_time_consumption: float | None = None
    time_consumed: float = 0.0
    status: OccurrenceStatus = OccurrenceStatus.PENDING
    urgency: float = 0.0
    completed_at: datetime | None = None
    created_at: datetime

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


class OccurrenceCreate(_OccurrenceDateCheck):
    """Model for creating an occurrence."""

    task_id: str
    start_date: datetime
    target_date: datetime | None = None
    limit_date: datetime | None = None
    target_time_consumption: float | None = Field(default=None, ge=0)


class OccurrenceDates(BaseModel):
    """Caller overrides applied when the engine creates an occurrence."""

    target_date: datetime | None = None
    limit_date: datetime | None = None
    target_time_consumption: float | None = Field(default=None, ge=0)


class OccurrenceUpdate(BaseModel):
    """Partial occurrence update. Only provided fields are written."""

    target_date: datetime | None = None
    limit_date: datetime | None = None
    target_time_consumption: float | None = Field(default=None, ge=0)
    time_consumed: float | None = Field(default=None, ge=0)


class CalendarEvent(BaseModel):
    """A scheduled time block, optionally linked to an occurrence.

    Attributes:
        id: Unique identifier
        owner_id: Owning user
        occurrence_id: Linked occurrence
        start: Block start
        finish: Block end
        is_fixed: Generated from a fixed task slot
        is_completed: Whether the block was completed
        dedicated_time: Hours actually spent
        completed_at: Completion timestamp
    """

    id: str
    owner_id: str
    occurrence_id: str | None = None
    start: datetime
    finish: datetime
    is_fixed: bool = False
    is_completed: bool = False
    dedicated_time: float | None = None
    completed_at: datetime | None = None


class CalendarEventCreate(BaseModel):
    """Model for creating a calendar event."""

    owner_id: str
    occurrence_id: str | None = None
    start: datetime
    finish: datetime
    is_fixed: bool = False
