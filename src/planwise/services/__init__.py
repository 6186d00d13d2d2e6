"""Services module for planwise - Recurrence engine and business logic layer."""

from .backlog import BacklogService
from .lifecycle import OccurrenceLifecycleManager
from .period_tracker import PeriodTracker
from .recurrence_dates import (
    OccurrenceWindow,
    RecurrenceDateCalculator,
    next_occurrence_date,
    occurrence_window,
)
from .task_service import TaskService
from .urgency import UrgencyScorer

__all__ = [
    "TaskService",
    "OccurrenceLifecycleManager",
    "BacklogService",
    "PeriodTracker",
    "RecurrenceDateCalculator",
    "OccurrenceWindow",
    "next_occurrence_date",
    "occurrence_window",
    "UrgencyScorer",
]
