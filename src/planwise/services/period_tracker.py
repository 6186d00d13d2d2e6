"""Per-period quota tracking for interval recurrences.

A period is a rolling window of ``interval`` days anchored at
``PeriodState.last_period_start``. The tracker is the only code that builds
new ``PeriodState`` values; callers persist ``recurrence.period`` afterwards.
Weekday and day-of-month recurrences without an interval never roll over.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from planwise.models import PeriodState, Recurrence


class PeriodTracker:
    """Rolls recurrence periods over and counts resolutions per period."""

    @staticmethod
    def should_rollover(
        last_period_start: datetime | None, interval: int | None, now: datetime
    ) -> bool:
        """True once ``now`` reaches the end of the current period."""
        if not interval or last_period_start is None:
            return False
        return now >= last_period_start + timedelta(days=interval)

    @staticmethod
    def advance(last_period_start: datetime, interval: int) -> datetime:
        """Start of the period following the one that began at ``last_period_start``."""
        return last_period_start + timedelta(days=interval)

    def _current_period_start(
        self, last_period_start: datetime, interval: int, now: datetime
    ) -> datetime:
        """Anchor of the period containing ``now``, in whole steps of ``interval``."""
        elapsed_periods = (now - last_period_start) // timedelta(days=interval)
        return last_period_start + timedelta(days=interval * elapsed_periods)

    def apply_rollover_if_due(self, recurrence: Recurrence, now: datetime) -> bool:
        """Reset the counter and move the anchor if the period has elapsed.

        When several periods have elapsed the anchor lands on the period that
        contains ``now``, so a second call with the same ``now`` is a no-op.

        Returns:
            True if a rollover happened
        """
        state = recurrence.period
        if not self.should_rollover(state.last_period_start, recurrence.interval, now):
            return False

        recurrence.period = PeriodState(
            completed_occurrences=0,
            last_period_start=self._current_period_start(
                state.last_period_start, recurrence.interval, now
            ),
        )
        return True

    def record_completion(self, recurrence: Recurrence, now: datetime) -> bool:
        """Count one resolved occurrence toward the current period.

        If the period elapsed before this resolution, roll over first so the
        resolution is the first one of the new period.

        Returns:
            True if a rollover happened
        """
        if self.apply_rollover_if_due(recurrence, now):
            recurrence.period = recurrence.period.model_copy(
                update={"completed_occurrences": 1}
            )
            return True

        state = recurrence.period
        recurrence.period = PeriodState(
            completed_occurrences=state.completed_occurrences + 1,
            last_period_start=state.last_period_start,
        )
        return False

    @staticmethod
    def has_reached_period_cap(recurrence: Recurrence) -> bool:
        """True when a quota is set and the current period has used it up."""
        if not recurrence.max_occurrences:
            return False
        return recurrence.period.completed_occurrences >= recurrence.max_occurrences

    def start_first_period(self, recurrence: Recurrence, now: datetime) -> bool:
        """Anchor the first period at ``now`` if no period has started yet.

        Returns:
            True if the anchor was set
        """
        if recurrence.period.last_period_start is not None:
            return False
        recurrence.period = PeriodState(
            completed_occurrences=recurrence.period.completed_occurrences,
            last_period_start=now,
        )
        return True

    def start_next_period(
        self, recurrence: Recurrence, after: datetime | None = None
    ) -> datetime:
        """Move the anchor to the next period and reset the counter.

        The anchor advances in whole intervals until it lies strictly after
        ``after``, so the first occurrence of the new period never shares a
        start date with the occurrence it follows.

        Returns:
            Start of the new period
        """
        state = recurrence.period
        next_start = self.advance(state.last_period_start, recurrence.interval)
        while after is not None and next_start <= after:
            next_start = self.advance(next_start, recurrence.interval)
        recurrence.period = PeriodState(completed_occurrences=0, last_period_start=next_start)
        return next_start
