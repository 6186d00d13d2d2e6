"""Occurrence lifecycle - creation, resolution and chaining.

Per task the lifecycle runs NoOccurrence -> Pending -> Completed|Skipped ->
(chained) Pending -> ... until the recurrence ends or a one-shot task is
resolved. At most one occurrence per task is Pending or InProgress; every
read-decide-write sequence below runs under the storage's per-task lock.
"""

from __future__ import annotations

from datetime import datetime

from planwise.exceptions import ConfigurationError, InvalidTransitionError
from planwise.models import (
    EngineConfig,
    NoPattern,
    Occurrence,
    OccurrenceCreate,
    OccurrenceDates,
    OccurrenceStatus,
    OccurrenceUpdate,
    RecurrenceUpdate,
    Task,
    TaskUpdate,
)
from planwise.models.strategy import StrategyContext
from planwise.services.period_tracker import PeriodTracker
from planwise.services.recurrence_dates import RecurrenceDateCalculator
from planwise.services.urgency import UrgencyScorer
from planwise.utils.clock import utc_now
from planwise.utils.logger import get_logger


class OccurrenceLifecycleManager:
    """Drives occurrences of a task through their states.

    Args:
        storage: Repositories of the active storage strategy
        config: Engine settings (one-shot window defaults)
    """

    def __init__(self, storage: StrategyContext, config: EngineConfig | None = None):
        self.storage = storage
        self.config = config or EngineConfig()
        self.dates = RecurrenceDateCalculator(
            one_shot_target_days=self.config.one_shot_target_days,
            one_shot_limit_days=self.config.one_shot_limit_days,
        )
        self.periods = PeriodTracker()
        self.scorer = UrgencyScorer()

    # -- creation ---------------------------------------------------------

    async def create_initial_occurrence(
        self,
        task_id: str,
        dates: OccurrenceDates | None = None,
        now: datetime | None = None,
    ) -> Occurrence | None:
        """Create the first occurrence of a task.

        A task without recurrence gets one occurrence starting now, dated
        only with what the caller supplies. A recurring task goes through
        chained creation starting from now.

        Returns:
            The new occurrence, or None if the task already has one
        """
        now = now or utc_now()
        dates = dates or OccurrenceDates()

        async with self.storage.tasks.task_lock(task_id):
            task = await self.storage.tasks.get_with_recurrence(task_id)
            if task.recurrence is not None:
                return await self._create_next_locked(task, now, dates)

            if await self.storage.occurrences.get_latest(task_id) is not None:
                return None

            occurrence = await self.storage.occurrences.add(
                OccurrenceCreate(
                    task_id=task_id,
                    start_date=now,
                    target_date=dates.target_date,
                    limit_date=dates.limit_date,
                    target_time_consumption=dates.target_time_consumption,
                )
            )
            get_logger("lifecycle").info(
                "created occurrence %s for single task %s", occurrence.id, task_id
            )
            return occurrence

    async def create_next_occurrence(
        self,
        task_id: str,
        dates: OccurrenceDates | None = None,
        now: datetime | None = None,
    ) -> Occurrence | None:
        """Chain the next occurrence of a recurring task.

        No-op while the latest occurrence is still Pending or InProgress.

        Returns:
            The new occurrence, or None when nothing was created

        Raises:
            NotFoundError: If the task does not exist
            ConfigurationError: If the task has no recurrence
        """
        now = now or utc_now()
        async with self.storage.tasks.task_lock(task_id):
            task = await self.storage.tasks.get_with_recurrence(task_id)
            return await self._create_next_locked(task, now, dates or OccurrenceDates())

    async def create_occurrence(
        self,
        task_id: str,
        start_date: datetime,
        dates: OccurrenceDates | None = None,
    ) -> Occurrence | None:
        """Add an occurrence by hand at ``start_date``.

        Dates not supplied are derived from the task's recurrence pattern.

        Returns:
            The new occurrence, or None while another one is still active
        """
        dates = dates or OccurrenceDates()
        async with self.storage.tasks.task_lock(task_id):
            task = await self.storage.tasks.get_with_recurrence(task_id)
            latest = await self.storage.occurrences.get_latest(task_id)
            if latest is not None and not latest.is_terminal:
                return None

            pattern = task.recurrence.pattern if task.recurrence else NoPattern()
            return await self._add_occurrence(task, start_date, pattern, dates, latest)

    async def _create_next_locked(
        self, task: Task, now: datetime, dates: OccurrenceDates
    ) -> Occurrence | None:
        recurrence = task.recurrence
        if recurrence is None:
            raise ConfigurationError(f"Task '{task.id}' has no recurrence to chain from")

        if not task.is_active:
            return None

        latest = await self.storage.occurrences.get_latest(task.id)
        if latest is not None and not latest.is_terminal:
            get_logger("lifecycle").debug(
                "task %s still has active occurrence %s", task.id, latest.id
            )
            return None

        # Fixed tasks get their whole schedule up front and never chain.
        if task.is_fixed:
            if latest is not None:
                await self._deactivate(task, "fixed schedule finished")
            return None

        period_changed = self.periods.start_first_period(recurrence, now)
        period_changed |= self.periods.apply_rollover_if_due(recurrence, now)
        if period_changed:
            await self.storage.recurrences.update(
                recurrence.id, RecurrenceUpdate(period=recurrence.period)
            )

        if recurrence.end_date is not None and now > recurrence.end_date:
            await self._deactivate(task, "recurrence ended")
            return None

        if recurrence.is_one_shot:
            if latest is not None:
                await self._deactivate(task, "one-shot occurrence resolved")
                return None
            start_date = now
        elif self.periods.has_reached_period_cap(recurrence):
            if not recurrence.interval:
                await self._deactivate(task, "occurrence quota used up")
                return None
            start_date = self.periods.start_next_period(
                recurrence, after=latest.start_date if latest else None
            )
            await self.storage.recurrences.update(
                recurrence.id, RecurrenceUpdate(period=recurrence.period)
            )
        elif latest is None:
            start_date = now
        else:
            start_date = self.dates.next_occurrence_date(
                latest.start_date, recurrence.pattern
            )

        return await self._add_occurrence(task, start_date, recurrence.pattern, dates, latest)

    async def _add_occurrence(self, task, start_date, pattern, dates, previous) -> Occurrence:
        window = self.dates.occurrence_window(start_date, pattern)
        target_time_consumption = dates.target_time_consumption
        if target_time_consumption is None and previous is not None:
            target_time_consumption = previous.target_time_consumption

        occurrence = await self.storage.occurrences.add(
            OccurrenceCreate(
                task_id=task.id,
                start_date=start_date,
                target_date=dates.target_date or window.target_date,
                limit_date=dates.limit_date or window.limit_date,
                target_time_consumption=target_time_consumption,
            )
        )
        get_logger("lifecycle").info(
            "created occurrence %s for task %s starting %s",
            occurrence.id,
            task.id,
            start_date.isoformat(),
        )
        return occurrence

    # -- transitions ------------------------------------------------------

    async def resolve_occurrence(
        self,
        occurrence_id: str,
        outcome: OccurrenceStatus,
        completed_at: datetime | None = None,
        now: datetime | None = None,
    ) -> Occurrence:
        """Complete or skip an occurrence and chain the next one.

        Both outcomes count toward the period quota of a recurring task.
        Resolving the occurrence of a task without recurrence deactivates
        the task.

        Returns:
            The resolved occurrence

        Raises:
            NotFoundError: If the occurrence does not exist
            InvalidTransitionError: If the occurrence is already resolved or
                ``outcome`` is not Completed or Skipped
        """
        if not outcome.is_terminal:
            raise InvalidTransitionError("resolution", outcome.value)

        now = now or utc_now()
        task_id = (await self.storage.occurrences.get(occurrence_id)).task_id

        async with self.storage.tasks.task_lock(task_id):
            occurrence = await self.storage.occurrences.get(occurrence_id)
            if not occurrence.status.can_transition_to(outcome):
                raise InvalidTransitionError(occurrence.status.value, outcome.value)

            if outcome == OccurrenceStatus.COMPLETED:
                completed_at = completed_at or now
            else:
                completed_at = None
            resolved = await self.storage.occurrences.update_status(
                occurrence_id, outcome, completed_at=completed_at
            )
            get_logger("lifecycle").info(
                "occurrence %s of task %s marked %s", occurrence_id, task_id, outcome.value
            )

            task = await self.storage.tasks.get_with_recurrence(task_id)
            if task.recurrence is None:
                await self._deactivate(task, "single occurrence resolved")
            else:
                self.periods.record_completion(task.recurrence, now)
                await self.storage.recurrences.update(
                    task.recurrence.id, RecurrenceUpdate(period=task.recurrence.period)
                )
                await self._create_next_locked(task, now, OccurrenceDates())

        return self.scorer.annotate(resolved, now)

    async def complete_occurrence(
        self,
        occurrence_id: str,
        completed_at: datetime | None = None,
        now: datetime | None = None,
    ) -> Occurrence:
        return await self.resolve_occurrence(
            occurrence_id, OccurrenceStatus.COMPLETED, completed_at=completed_at, now=now
        )

    async def skip_occurrence(
        self, occurrence_id: str, now: datetime | None = None
    ) -> Occurrence:
        return await self.resolve_occurrence(
            occurrence_id, OccurrenceStatus.SKIPPED, now=now
        )

    async def start_occurrence(
        self, occurrence_id: str, now: datetime | None = None
    ) -> Occurrence:
        """Move a Pending occurrence to InProgress."""
        now = now or utc_now()
        occurrence = await self.storage.occurrences.get(occurrence_id)
        async with self.storage.tasks.task_lock(occurrence.task_id):
            occurrence = await self.storage.occurrences.get(occurrence_id)
            if not occurrence.status.can_transition_to(OccurrenceStatus.IN_PROGRESS):
                raise InvalidTransitionError(
                    occurrence.status.value, OccurrenceStatus.IN_PROGRESS.value
                )
            started = await self.storage.occurrences.update_status(
                occurrence_id, OccurrenceStatus.IN_PROGRESS
            )
        return self.scorer.annotate(started, now)

    async def _deactivate(self, task: Task, reason: str) -> None:
        if task.is_active:
            await self.storage.tasks.update(task.id, TaskUpdate(is_active=False))
            task.is_active = False
        get_logger("lifecycle").info("deactivated task %s: %s", task.id, reason)

    # -- reads ------------------------------------------------------------

    async def get_occurrence(
        self, occurrence_id: str, now: datetime | None = None
    ) -> Occurrence:
        occurrence = await self.storage.occurrences.get(occurrence_id)
        return self.scorer.annotate(occurrence, now or utc_now())

    async def list_occurrences(
        self,
        task_id: str,
        now: datetime | None = None,
        *,
        active_only: bool = False,
    ) -> list[Occurrence]:
        """Occurrences of a task ordered by start date, urgency recomputed."""
        occurrences = await self.storage.occurrences.list_by_task(task_id)
        if active_only:
            occurrences = [o for o in occurrences if not o.is_terminal]
        return self.scorer.annotate_all(occurrences, now or utc_now())

    async def preview_next_occurrence_date(
        self, task_id: str, now: datetime | None = None
    ) -> datetime | None:
        """Start date the next chained occurrence would get, without creating it."""
        now = now or utc_now()
        task = await self.storage.tasks.get_with_recurrence(task_id)
        if task.recurrence is None or task.recurrence.is_one_shot:
            return None
        latest = await self.storage.occurrences.get_latest(task_id)
        if latest is None:
            return now
        return self.dates.next_occurrence_date(latest.start_date, task.recurrence.pattern)

    async def sync_time_consumed(self, occurrence_id: str) -> Occurrence:
        """Recompute ``time_consumed`` from the linked calendar events.

        Call after a linked event is completed or deleted.
        """
        await self.storage.occurrences.get(occurrence_id)
        events = await self.storage.events.list_by_occurrence(occurrence_id)
        total = sum(event.dedicated_time or 0.0 for event in events)
        return await self.storage.occurrences.update(
            occurrence_id, OccurrenceUpdate(time_consumed=total)
        )
