"""Task service - Business logic for task creation and management.

This service layer sits between commands and the engine. It validates task
configuration, persists the task, and either pre-generates the schedule of a
fixed task or hands the task to the lifecycle manager for its first
occurrence.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta

from planwise.exceptions import ConfigurationError
from planwise.models import (
    CalendarEventCreate,
    DayOfMonthPattern,
    EngineConfig,
    OccurrenceCreate,
    OccurrenceDates,
    RecurrencePattern,
    Task,
    TaskCreate,
    TaskType,
    TaskUpdate,
    WeekdayPattern,
    classify_task_type,
)
from planwise.models.strategy import StrategyContext
from planwise.services.lifecycle import OccurrenceLifecycleManager
from planwise.utils.clock import utc_now
from planwise.utils.logger import get_logger


def _parse_time(value: str) -> time:
    return time.fromisoformat(value)


def _matches(day: date, pattern: RecurrencePattern) -> bool:
    match pattern:
        case WeekdayPattern(weekdays=weekdays):
            return (day.weekday() + 1) % 7 in weekdays
        case DayOfMonthPattern(days=days):
            last_day = calendar.monthrange(day.year, day.month)[1]
            return day.day in {min(d, last_day) for d in days}
    return False


def fixed_schedule_days(
    first_day: date,
    last_day: date,
    pattern: RecurrencePattern,
    max_occurrences: int | None = None,
) -> list[date]:
    """Calendar days in [first_day, last_day] selected by a day pattern.

    Day-of-month selections past a month's end land on its last day. At most
    ``max_occurrences`` days are returned when a quota is set.
    """
    days = []
    current = first_day
    while current <= last_day:
        if _matches(current, pattern):
            days.append(current)
            if max_occurrences and len(days) >= max_occurrences:
                break
        current += timedelta(days=1)
    return days


class TaskService:
    """Service for task business logic.

    Args:
        storage: Repositories of the active storage strategy
        lifecycle: Lifecycle manager used for the first occurrence
        config: Engine settings, used when no lifecycle manager is given
    """

    def __init__(
        self,
        storage: StrategyContext,
        lifecycle: OccurrenceLifecycleManager | None = None,
        config: EngineConfig | None = None,
    ):
        self.storage = storage
        self.lifecycle = lifecycle or OccurrenceLifecycleManager(storage, config)

    async def create_task(
        self, owner_id: str, data: TaskCreate, now: datetime | None = None
    ) -> Task:
        """Create a task and its first occurrence(s).

        Args:
            owner_id: Owning user
            data: Task definition
            now: Reference instant (default: current UTC time)

        Returns:
            The created task with its recurrence loaded

        Raises:
            ConfigurationError: If the fixed-slot or recurrence settings are inconsistent
        """
        now = now or utc_now()
        self.validate(data)

        task = await self.storage.tasks.add(owner_id, data, data.recurrence)
        get_logger("tasks").info("created task %s (%s)", task.id, task.name)

        if data.is_fixed:
            await self._schedule_fixed(task, data, now)
        else:
            await self.lifecycle.create_initial_occurrence(
                task.id,
                OccurrenceDates(
                    target_date=data.target_date,
                    limit_date=data.limit_date,
                    target_time_consumption=data.target_time_consumption,
                ),
                now=now,
            )
        return await self.storage.tasks.get_with_recurrence(task.id)

    @staticmethod
    def validate(data: TaskCreate) -> None:
        """Reject inconsistent fixed-slot settings.

        Raises:
            ConfigurationError: If a fixed task lacks its times, its date or
                its end date, or its slot ends before it starts
        """
        if not data.is_fixed:
            return

        if not data.fixed_start_time or not data.fixed_end_time:
            raise ConfigurationError(
                "Fixed tasks must have fixed_start_time and fixed_end_time defined"
            )
        if _parse_time(data.fixed_end_time) <= _parse_time(data.fixed_start_time):
            raise ConfigurationError("fixed_end_time must be after fixed_start_time")

        recurrence = data.recurrence
        has_day_pattern = recurrence is not None and bool(
            recurrence.days_of_week or recurrence.days_of_month
        )
        if not has_day_pattern and data.target_date is None:
            raise ConfigurationError(
                "Fixed tasks need either a target_date or a recurrence with "
                "days_of_week/days_of_month"
            )
        if has_day_pattern and recurrence.end_date is None:
            raise ConfigurationError(
                "Fixed repetitive tasks must have an end_date to limit event generation"
            )

    async def _schedule_fixed(self, task: Task, data: TaskCreate, now: datetime) -> None:
        """Pre-generate one occurrence and one fixed calendar event per slot."""
        recurrence = data.recurrence
        if recurrence is not None and (recurrence.days_of_week or recurrence.days_of_month):
            days = fixed_schedule_days(
                now.date(),
                recurrence.end_date.date(),
                recurrence.pattern,
                recurrence.max_occurrences,
            )
        else:
            days = [data.target_date.date()]

        start_time = _parse_time(data.fixed_start_time)
        end_time = _parse_time(data.fixed_end_time)
        for day in days:
            start = datetime.combine(day, start_time, tzinfo=now.tzinfo)
            finish = datetime.combine(day, end_time, tzinfo=now.tzinfo)
            occurrence = await self.storage.occurrences.add(
                OccurrenceCreate(
                    task_id=task.id,
                    start_date=start,
                    target_date=finish,
                    limit_date=finish,
                    target_time_consumption=data.target_time_consumption,
                )
            )
            await self.storage.events.add(
                CalendarEventCreate(
                    owner_id=task.owner_id,
                    occurrence_id=occurrence.id,
                    start=start,
                    finish=finish,
                    is_fixed=True,
                )
            )

        get_logger("tasks").info(
            "scheduled %d fixed slot(s) for task %s", len(days), task.id
        )

    async def get_task(self, task_id: str) -> Task:
        """Get a specific task by ID, with its recurrence."""
        return await self.storage.tasks.get_with_recurrence(task_id)

    async def deactivate_task(self, task_id: str) -> Task:
        """Soft-delete a task. Its occurrences are kept."""
        task = await self.storage.tasks.update(task_id, TaskUpdate(is_active=False))
        get_logger("tasks").info("deactivated task %s", task_id)
        return task

    async def classify(self, task_id: str) -> TaskType:
        task = await self.storage.tasks.get_with_recurrence(task_id)
        return classify_task_type(task)
