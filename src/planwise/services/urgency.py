"""Urgency scoring for occurrences.

Urgency is a 0-20 score of time pressure derived only from dates. It is never
trusted as stored: every read path recomputes it through ``UrgencyScorer``.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta

from planwise.models import Occurrence, UrgencyResult

ONE_DAY = timedelta(days=1)

# Floor reported once an occurrence exists, so "created" differs from "no dates".
MIN_DATED_URGENCY = 0.5
TARGET_URGENCY = 6.0
LIMIT_URGENCY = 10.0
MAX_OVERDUE_BONUS = 10.0
OVERDUE_BONUS_PER_DAY = 0.5


def _days(delta: timedelta) -> float:
    return delta / ONE_DAY


def _whole_days(delta: timedelta) -> int:
    return math.floor(_days(delta))


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


class UrgencyScorer:
    """Piecewise urgency curve over the creation, target and limit dates.

    Branches, first match wins:

    1. No target and no limit: 0.
    2. Past the limit: 10 plus half a point per overdue day, capped at 20.
    3. Compressed deadline (limit - target < (target - created) / 2): an
       accelerating ``x * ln(1 + x) / ln 2`` curve over [created, limit].
    4. Between target and limit: 6 rising toward 10.
    5. Before the target: ``6 * sqrt(fraction)`` of the way to the target.
    6. Limit only: linear ramp of elapsed over remaining time, capped at 10.
    """

    def score(
        self,
        now: datetime,
        created_at: datetime,
        target_date: datetime | None = None,
        limit_date: datetime | None = None,
    ) -> UrgencyResult:
        days_until_target = (
            _whole_days(target_date - now) if target_date is not None else None
        )
        days_until_limit = _whole_days(limit_date - now) if limit_date is not None else None

        if target_date is None and limit_date is None:
            return UrgencyResult(urgency=0.0)

        is_overdue = limit_date is not None and now > limit_date
        if is_overdue:
            urgency = self._overdue(now, limit_date)
        elif (
            target_date is not None
            and limit_date is not None
            and limit_date - target_date < (target_date - created_at) / 2
        ):
            urgency = self._compressed(now, created_at, limit_date)
        elif target_date is not None and now >= target_date:
            urgency = self._in_window(now, target_date)
        elif target_date is not None:
            urgency = self._before_target(now, created_at, target_date)
        else:
            urgency = self._limit_only(now, created_at, limit_date)

        return UrgencyResult(
            urgency=round(urgency, 2),
            is_overdue=is_overdue,
            days_until_target=days_until_target,
            days_until_limit=days_until_limit,
        )

    @staticmethod
    def _overdue(now: datetime, limit_date: datetime) -> float:
        # Any fraction of a day past the limit already counts as one day.
        days_overdue = abs(_whole_days(limit_date - now))
        return LIMIT_URGENCY + min(days_overdue * OVERDUE_BONUS_PER_DAY, MAX_OVERDUE_BONUS)

    @staticmethod
    def _compressed(now: datetime, created_at: datetime, limit_date: datetime) -> float:
        days_passed = _days(now - created_at)
        if days_passed <= 0:
            return MIN_DATED_URGENCY
        total_days = _days(limit_date - created_at)
        x = _clamp(days_passed / total_days) if total_days > 0 else 1.0
        curve = LIMIT_URGENCY * (x * math.log1p(x)) / math.log(2)
        return max(MIN_DATED_URGENCY, min(LIMIT_URGENCY, curve))

    @staticmethod
    def _in_window(now: datetime, target_date: datetime) -> float:
        days_since_target = _whole_days(now - target_date)
        score = days_since_target * math.log1p(days_since_target)
        normalized = score / (1 + score)
        return TARGET_URGENCY + (LIMIT_URGENCY - TARGET_URGENCY) * normalized

    @staticmethod
    def _before_target(now: datetime, created_at: datetime, target_date: datetime) -> float:
        days_passed = _days(now - created_at)
        if days_passed <= 0:
            return MIN_DATED_URGENCY
        span = _days(target_date - created_at)
        fraction = _clamp(days_passed / span) if span > 0 else 1.0
        return max(MIN_DATED_URGENCY, min(TARGET_URGENCY, TARGET_URGENCY * math.sqrt(fraction)))

    @staticmethod
    def _limit_only(now: datetime, created_at: datetime, limit_date: datetime) -> float:
        remaining = _days(limit_date - now)
        if remaining <= 0:
            return LIMIT_URGENCY
        elapsed = _days(now - created_at)
        if elapsed <= 0:
            return MIN_DATED_URGENCY
        return max(MIN_DATED_URGENCY, min(LIMIT_URGENCY, LIMIT_URGENCY * elapsed / remaining))

    def annotate(self, occurrence: Occurrence, now: datetime) -> Occurrence:
        """Copy of ``occurrence`` with ``urgency`` recomputed for ``now``.

        Resolved occurrences carry no time pressure and score 0.
        """
        if occurrence.is_terminal:
            return occurrence.model_copy(update={"urgency": 0.0})
        result = self.score(
            now,
            occurrence.created_at,
            occurrence.target_date,
            occurrence.limit_date,
        )
        return occurrence.model_copy(update={"urgency": result.urgency})

    def annotate_all(self, occurrences: list[Occurrence], now: datetime) -> list[Occurrence]:
        return [self.annotate(occurrence, now) for occurrence in occurrences]
