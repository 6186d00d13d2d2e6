"""Result models returned by the engine services."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from .core import OccurrenceStatus


class UrgencyResult(BaseModel):
    """Urgency score for one occurrence at one instant.

    Attributes:
        urgency: Score in [0, 20], rounded to 2 decimals
        is_overdue: True once the limit date has passed
        days_until_target: Whole days until the target (negative when past)
        days_until_limit: Whole days until the limit (negative when past)
    """

    urgency: float
    is_overdue: bool = False
    days_until_target: int | None = None
    days_until_limit: int | None = None


class PendingOccurrenceRef(BaseModel):
    """Short reference to a non-terminal occurrence."""

    id: str
    start_date: datetime
    limit_date: datetime | None = None
    status: OccurrenceStatus


class BacklogReport(BaseModel):
    """Backlog state of one task.

    Attributes:
        pending_count: Non-terminal occurrences
        oldest_pending_date: Start date of the oldest non-terminal occurrence
        overdue_count: Non-terminal occurrences past their limit date
        estimated_missing_count: Occurrences the pattern says should exist but don't
        has_severe_backlog: Any overdue or missing occurrence
        pending_occurrences: References to the non-terminal occurrences, oldest first
    """

    pending_count: int = 0
    oldest_pending_date: datetime | None = None
    overdue_count: int = 0
    estimated_missing_count: int = Field(default=0, ge=0)
    has_severe_backlog: bool = False
    pending_occurrences: list[PendingOccurrenceRef] = Field(default_factory=list)


class BacklogResolution(BaseModel):
    """Outcome of a bulk catch-up.

    Attributes:
        created_count: Occurrences generated to catch up with now
        skipped_count: Overdue occurrences marked Skipped
        truncated: The iteration ceiling or timeout stopped the run early
    """

    created_count: int = 0
    skipped_count: int = 0
    truncated: bool = False
