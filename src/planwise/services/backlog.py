"""Backlog detection and bulk catch-up.

A backlog is the occurrences a recurrence says should exist but don't, plus
non-terminal occurrences already past their limit date. Resolving it is
destructive: skipped occurrences cannot be reopened, so callers confirm with
the user first.
"""

from __future__ import annotations

import time
from datetime import datetime

from planwise.models import (
    BacklogReport,
    BacklogResolution,
    EngineConfig,
    NoPattern,
    Occurrence,
    OccurrenceCreate,
    OccurrenceStatus,
    PendingOccurrenceRef,
    RecurrencePattern,
)
from planwise.models.strategy import StrategyContext
from planwise.services.recurrence_dates import RecurrenceDateCalculator
from planwise.utils.clock import utc_now
from planwise.utils.logger import get_logger


class _RunBudget:
    """Iteration ceiling plus optional wall-clock deadline for one run."""

    def __init__(self, max_iterations: int, timeout: float | None):
        self.remaining = max_iterations
        self.deadline = time.monotonic() + timeout if timeout else None
        self.exhausted = False

    def take(self) -> bool:
        if self.remaining <= 0 or (
            self.deadline is not None and time.monotonic() >= self.deadline
        ):
            self.exhausted = True
            return False
        self.remaining -= 1
        return True


class BacklogService:
    """Detects and resolves backlog for recurring tasks."""

    def __init__(self, storage: StrategyContext, config: EngineConfig | None = None):
        self.storage = storage
        self.config = config or EngineConfig()
        self.dates = RecurrenceDateCalculator(
            one_shot_target_days=self.config.one_shot_target_days,
            one_shot_limit_days=self.config.one_shot_limit_days,
        )

    async def detect_backlog(
        self, task_id: str, now: datetime | None = None
    ) -> BacklogReport:
        """Report pending, overdue and missing occurrences of a task.

        Raises:
            NotFoundError: If the task does not exist
        """
        now = now or utc_now()
        task = await self.storage.tasks.get_with_recurrence(task_id)
        if task.recurrence is None:
            return BacklogReport()

        occurrences = await self.storage.occurrences.list_by_task(task_id)
        pending = [o for o in occurrences if not o.is_terminal]
        overdue = [o for o in pending if self._is_overdue(o, now)]

        missing = 0
        if occurrences and not task.recurrence.is_one_shot:
            missing = self._estimate_missing(
                occurrences[-1].start_date,
                task.recurrence.pattern,
                now,
                end_date=task.recurrence.end_date,
            )

        return BacklogReport(
            pending_count=len(pending),
            oldest_pending_date=pending[0].start_date if pending else None,
            overdue_count=len(overdue),
            estimated_missing_count=missing,
            has_severe_backlog=bool(overdue) or missing > 0,
            pending_occurrences=[
                PendingOccurrenceRef(
                    id=o.id,
                    start_date=o.start_date,
                    limit_date=o.limit_date,
                    status=o.status,
                )
                for o in pending
            ],
        )

    def _estimate_missing(
        self,
        latest_start: datetime,
        pattern: RecurrencePattern,
        now: datetime,
        end_date: datetime | None = None,
    ) -> int:
        if isinstance(pattern, NoPattern):
            return 0

        count = 0
        cursor = latest_start
        for _ in range(self.config.max_backlog_iterations):
            cursor = self.dates.next_occurrence_date(cursor, pattern)
            if cursor > now or (end_date is not None and cursor > end_date):
                return count
            count += 1

        get_logger("backlog").warning(
            "missing-occurrence estimate stopped at %d steps", count
        )
        return count

    async def resolve_backlog(
        self,
        task_id: str,
        now: datetime | None = None,
        timeout: float | None = None,
    ) -> BacklogResolution:
        """Generate missing occurrences up to now, then skip the overdue ones.

        Every non-terminal occurrence except the newest is marked Skipped if
        its limit date has passed. These skips neither chain new occurrences
        nor count toward the period quota.

        Args:
            task_id: Task to catch up
            now: Reference instant (default: current UTC time)
            timeout: Seconds before the run stops early (default: engine config)

        Returns:
            Counts of created and skipped occurrences; ``truncated`` is set
            when the iteration ceiling or timeout cut the run short

        Raises:
            NotFoundError: If the task does not exist
        """
        now = now or utc_now()
        if timeout is None:
            timeout = self.config.backlog_timeout
        budget = _RunBudget(self.config.max_backlog_iterations, timeout)
        log = get_logger("backlog")

        async with self.storage.tasks.task_lock(task_id):
            task = await self.storage.tasks.get_with_recurrence(task_id)
            created = 0

            recurrence = task.recurrence
            latest = await self.storage.occurrences.get_latest(task_id)
            if (
                recurrence is not None
                and latest is not None
                and not recurrence.is_one_shot
                and not isinstance(recurrence.pattern, NoPattern)
            ):
                while True:
                    next_start = self.dates.next_occurrence_date(
                        latest.start_date, recurrence.pattern
                    )
                    if next_start > now:
                        break
                    if recurrence.end_date is not None and next_start > recurrence.end_date:
                        break
                    if not budget.take():
                        break
                    latest = await self._add_catch_up(latest, next_start, recurrence.pattern)
                    created += 1

            skipped = 0
            occurrences = await self.storage.occurrences.list_by_task(task_id)
            pending = [o for o in occurrences if not o.is_terminal]
            for occurrence in pending[:-1]:
                if not self._is_overdue(occurrence, now):
                    continue
                if not budget.take():
                    break
                await self.storage.occurrences.update_status(
                    occurrence.id, OccurrenceStatus.SKIPPED
                )
                skipped += 1

        if budget.exhausted:
            log.warning(
                "backlog run for task %s truncated after %d created, %d skipped",
                task_id,
                created,
                skipped,
            )
        log.info(
            "backlog for task %s: created %d, skipped %d", task_id, created, skipped
        )
        return BacklogResolution(
            created_count=created, skipped_count=skipped, truncated=budget.exhausted
        )

    async def _add_catch_up(
        self, previous: Occurrence, start_date: datetime, pattern: RecurrencePattern
    ) -> Occurrence:
        window = self.dates.occurrence_window(start_date, pattern)
        return await self.storage.occurrences.add(
            OccurrenceCreate(
                task_id=previous.task_id,
                start_date=start_date,
                target_date=window.target_date,
                limit_date=window.limit_date,
                target_time_consumption=previous.target_time_consumption,
            )
        )

    @staticmethod
    def _is_overdue(occurrence: Occurrence, now: datetime) -> bool:
        return occurrence.limit_date is not None and occurrence.limit_date < now
