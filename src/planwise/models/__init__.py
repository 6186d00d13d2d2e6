"""planwise domain models.

This package contains Pydantic models that represent the core domain entities
of the planner: tasks, recurrences, occurrences and calendar events, plus the
result types returned by the engine services.
"""

from .config_models import AppConfig, EngineConfig, StorageConfig
from .core import (
    ACTIVE_STATUSES,
    STATUS_TRANSITIONS,
    CalendarEvent,
    CalendarEventCreate,
    DayOfWeek,
    Occurrence,
    OccurrenceCreate,
    OccurrenceDates,
    OccurrenceStatus,
    OccurrenceUpdate,
    PeriodState,
    Recurrence,
    RecurrenceCreate,
    RecurrenceUpdate,
    Task,
    TaskCreate,
    TaskUpdate,
)
from .recurrence_pattern import (
    DayOfMonthPattern,
    IntervalPattern,
    NoPattern,
    RecurrencePattern,
    WeekdayPattern,
)
from .results import (
    BacklogReport,
    BacklogResolution,
    PendingOccurrenceRef,
    UrgencyResult,
)
from .task_type import TaskType, classify_task_type

__all__ = [
    # Task models
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskType",
    "classify_task_type",
    # Recurrence models
    "DayOfWeek",
    "PeriodState",
    "Recurrence",
    "RecurrenceCreate",
    "RecurrenceUpdate",
    "RecurrencePattern",
    "IntervalPattern",
    "WeekdayPattern",
    "DayOfMonthPattern",
    "NoPattern",
    # Occurrence models
    "Occurrence",
    "OccurrenceCreate",
    "OccurrenceDates",
    "OccurrenceStatus",
    "OccurrenceUpdate",
    "ACTIVE_STATUSES",
    "STATUS_TRANSITIONS",
    # Calendar models
    "CalendarEvent",
    "CalendarEventCreate",
    # Results
    "UrgencyResult",
    "BacklogReport",
    "BacklogResolution",
    "PendingOccurrenceRef",
    # Config models
    "AppConfig",
    "EngineConfig",
    "StorageConfig",
]
