"""Tests for OccurrenceLifecycleManager over the in-memory storage."""

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from planwise.exceptions import ConfigurationError, InvalidTransitionError, NotFoundError
from planwise.models import (
    CalendarEventCreate,
    EngineConfig,
    OccurrenceDates,
    OccurrenceStatus,
    TaskUpdate,
)
from planwise.services.lifecycle import OccurrenceLifecycleManager
from planwise.services.task_service import TaskService


@pytest.fixture()
def lifecycle(storage):
    return OccurrenceLifecycleManager(storage)


@pytest.fixture()
def service(storage, lifecycle):
    return TaskService(storage, lifecycle)


async def _occurrences(storage, task_id):
    return await storage.occurrences.list_by_task(task_id)


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


class TestInitialOccurrence:
    @pytest.mark.asyncio
    async def test_interval_task_gets_windowed_occurrence(self, service, storage, make_task, now):
        task = await service.create_task("owner", make_task(interval=7), now=now)

        [occurrence] = await _occurrences(storage, task.id)
        assert occurrence.start_date == now
        assert occurrence.target_date == now + timedelta(days=4)
        assert occurrence.limit_date == now + timedelta(days=7)
        assert occurrence.status == OccurrenceStatus.PENDING
        assert task.recurrence.period.last_period_start == now

    @pytest.mark.asyncio
    async def test_single_task_keeps_caller_dates_only(self, service, storage, make_task, now):
        data = make_task(limit_date=now + timedelta(days=3), target_time_consumption=2.0)
        task = await service.create_task("owner", data, now=now)

        [occurrence] = await _occurrences(storage, task.id)
        assert occurrence.target_date is None
        assert occurrence.limit_date == now + timedelta(days=3)
        assert occurrence.target_time_consumption == 2.0

    @pytest.mark.asyncio
    async def test_caller_target_overrides_window(self, service, storage, make_task, now):
        target = now + timedelta(days=2)
        task = await service.create_task(
            "owner", make_task(interval=7, target_date=target), now=now
        )

        [occurrence] = await _occurrences(storage, task.id)
        assert occurrence.target_date == target
        assert occurrence.limit_date == now + timedelta(days=7)

    @pytest.mark.asyncio
    async def test_second_initial_call_is_noop(self, service, lifecycle, make_task, now):
        task = await service.create_task("owner", make_task(), now=now)
        assert await lifecycle.create_initial_occurrence(task.id, now=now) is None

    @pytest.mark.asyncio
    async def test_unknown_task_raises(self, lifecycle):
        with pytest.raises(NotFoundError):
            await lifecycle.create_initial_occurrence("missing")


class TestCreateNext:
    @pytest.mark.asyncio
    async def test_noop_while_latest_is_active(self, service, lifecycle, storage, make_task, now):
        task = await service.create_task("owner", make_task(interval=7), now=now)

        assert await lifecycle.create_next_occurrence(task.id, now=now) is None
        assert len(await _occurrences(storage, task.id)) == 1

    @pytest.mark.asyncio
    async def test_task_without_recurrence_raises(self, service, lifecycle, make_task, now):
        task = await service.create_task("owner", make_task(), now=now)

        with pytest.raises(ConfigurationError):
            await lifecycle.create_next_occurrence(task.id, now=now)

    @pytest.mark.asyncio
    async def test_inactive_task_does_not_chain(self, storage, lifecycle, make_task, now):
        data = make_task(interval=7)
        task = await storage.tasks.add("owner", data, data.recurrence)
        await storage.tasks.update(task.id, TaskUpdate(is_active=False))

        assert await lifecycle.create_next_occurrence(task.id, now=now) is None

    @pytest.mark.asyncio
    async def test_concurrent_requests_create_one_occurrence(
        self, storage, lifecycle, make_task, now
    ):
        data = make_task(interval=7)
        task = await storage.tasks.add("owner", data, data.recurrence)

        results = await asyncio.gather(
            *(lifecycle.create_next_occurrence(task.id, now=now) for _ in range(5))
        )

        assert sum(r is not None for r in results) == 1
        assert len(await _occurrences(storage, task.id)) == 1

    @pytest.mark.asyncio
    async def test_manual_occurrence_respects_active_one(
        self, service, lifecycle, make_task, now
    ):
        task = await service.create_task("owner", make_task(interval=7), now=now)
        assert await lifecycle.create_occurrence(task.id, now + timedelta(days=1)) is None


# ---------------------------------------------------------------------------
# Resolution and chaining
# ---------------------------------------------------------------------------


class TestResolve:
    @pytest.mark.asyncio
    async def test_complete_chains_next_interval(self, service, lifecycle, storage, make_task, now):
        task = await service.create_task("owner", make_task(interval=7), now=now)
        [first] = await _occurrences(storage, task.id)

        resolved = await lifecycle.complete_occurrence(first.id, now=now)

        assert resolved.status == OccurrenceStatus.COMPLETED
        assert resolved.completed_at == now
        assert resolved.urgency == 0.0
        occurrences = await _occurrences(storage, task.id)
        assert len(occurrences) == 2
        assert occurrences[1].start_date == now + timedelta(days=7)
        assert occurrences[1].status == OccurrenceStatus.PENDING

    @pytest.mark.asyncio
    async def test_weekday_chain(self, service, lifecycle, storage, make_task, now):
        task = await service.create_task(
            "owner", make_task(days_of_week=["Mon", "Thu"]), now=now
        )
        [first] = await _occurrences(storage, task.id)

        await lifecycle.complete_occurrence(first.id, now=now)

        second = (await _occurrences(storage, task.id))[1]
        assert second.start_date > first.start_date
        assert (second.start_date.weekday() + 1) % 7 in (1, 4)
        assert second.start_date - first.start_date <= timedelta(days=4)

    @pytest.mark.asyncio
    async def test_skip_chains_without_completed_at(
        self, service, lifecycle, storage, make_task, now
    ):
        task = await service.create_task("owner", make_task(interval=3), now=now)
        [first] = await _occurrences(storage, task.id)

        skipped = await lifecycle.skip_occurrence(first.id, now=now)

        assert skipped.status == OccurrenceStatus.SKIPPED
        assert skipped.completed_at is None
        assert len(await _occurrences(storage, task.id)) == 2

    @pytest.mark.asyncio
    async def test_resolving_twice_is_rejected(self, service, lifecycle, storage, make_task, now):
        task = await service.create_task("owner", make_task(interval=7), now=now)
        [first] = await _occurrences(storage, task.id)
        await lifecycle.complete_occurrence(first.id, now=now)

        with pytest.raises(InvalidTransitionError):
            await lifecycle.skip_occurrence(first.id, now=now)
        assert len(await _occurrences(storage, task.id)) == 2

    @pytest.mark.asyncio
    async def test_non_terminal_outcome_is_rejected(
        self, service, lifecycle, storage, make_task, now
    ):
        task = await service.create_task("owner", make_task(interval=7), now=now)
        [first] = await _occurrences(storage, task.id)

        with pytest.raises(InvalidTransitionError):
            await lifecycle.resolve_occurrence(first.id, OccurrenceStatus.IN_PROGRESS)

    @pytest.mark.asyncio
    async def test_start_then_complete(self, service, lifecycle, storage, make_task, now):
        task = await service.create_task("owner", make_task(interval=7), now=now)
        [first] = await _occurrences(storage, task.id)

        started = await lifecycle.start_occurrence(first.id, now=now)
        assert started.status == OccurrenceStatus.IN_PROGRESS
        with pytest.raises(InvalidTransitionError):
            await lifecycle.start_occurrence(first.id, now=now)

        completed = await lifecycle.complete_occurrence(first.id, now=now)
        assert completed.status == OccurrenceStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_single_task_deactivates(self, service, lifecycle, storage, make_task, now):
        task = await service.create_task("owner", make_task(), now=now)
        [first] = await _occurrences(storage, task.id)

        await lifecycle.complete_occurrence(first.id, now=now)

        assert (await storage.tasks.get_with_recurrence(task.id)).is_active is False
        assert len(await _occurrences(storage, task.id)) == 1

    @pytest.mark.asyncio
    async def test_one_shot_deactivates(self, service, lifecycle, storage, make_task, now):
        task = await service.create_task("owner", make_task(max_occurrences=1), now=now)
        [first] = await _occurrences(storage, task.id)
        assert first.limit_date == now + timedelta(days=7)

        await lifecycle.complete_occurrence(first.id, now=now)

        assert (await storage.tasks.get_with_recurrence(task.id)).is_active is False
        assert len(await _occurrences(storage, task.id)) == 1

    @pytest.mark.asyncio
    async def test_finite_recurring_stops_at_quota(
        self, service, lifecycle, storage, make_task, now
    ):
        task = await service.create_task("owner", make_task(max_occurrences=3), now=now)

        for _ in range(3):
            latest = await storage.occurrences.get_latest(task.id)
            await lifecycle.complete_occurrence(latest.id, now=now)

        occurrences = await _occurrences(storage, task.id)
        assert len(occurrences) == 3
        assert all(o.status == OccurrenceStatus.COMPLETED for o in occurrences)
        stored = await storage.tasks.get_with_recurrence(task.id)
        assert stored.is_active is False
        assert stored.recurrence.period.completed_occurrences == 3

    @pytest.mark.asyncio
    async def test_interval_quota_moves_to_next_period(
        self, service, lifecycle, storage, make_task, now
    ):
        task = await service.create_task(
            "owner", make_task(interval=7, max_occurrences=2), now=now
        )

        first = await storage.occurrences.get_latest(task.id)
        await lifecycle.complete_occurrence(first.id, now=now)
        second = await storage.occurrences.get_latest(task.id)
        await lifecycle.complete_occurrence(second.id, now=now + timedelta(days=1))

        third = await storage.occurrences.get_latest(task.id)
        assert second.start_date == now + timedelta(days=7)
        assert third.start_date == now + timedelta(days=14)
        stored = await storage.tasks.get_with_recurrence(task.id)
        assert stored.recurrence.period.completed_occurrences == 0
        assert stored.recurrence.period.last_period_start == now + timedelta(days=14)
        assert stored.is_active is True

    @pytest.mark.asyncio
    async def test_next_period_occurrence_completed_early(
        self, service, lifecycle, storage, make_task, now
    ):
        task = await service.create_task(
            "owner", make_task(interval=7, max_occurrences=1), now=now
        )

        for hours in range(1, 5):
            latest = await storage.occurrences.get_latest(task.id)
            await lifecycle.complete_occurrence(latest.id, now=now + timedelta(hours=hours))
            stored = await storage.tasks.get_with_recurrence(task.id)
            assert stored.recurrence.period.completed_occurrences <= 1

        starts = [o.start_date for o in await _occurrences(storage, task.id)]
        assert sorted(starts) == [now + timedelta(days=7 * i) for i in range(5)]

    @pytest.mark.asyncio
    async def test_end_date_deactivates(self, service, lifecycle, storage, make_task, now):
        task = await service.create_task(
            "owner", make_task(interval=1, end_date=now + timedelta(days=2)), now=now
        )
        [first] = await _occurrences(storage, task.id)

        await lifecycle.complete_occurrence(first.id, now=now + timedelta(days=3))

        assert (await storage.tasks.get_with_recurrence(task.id)).is_active is False
        assert len(await _occurrences(storage, task.id)) == 1

    @pytest.mark.asyncio
    async def test_estimate_is_inherited(self, service, lifecycle, storage, make_task, now):
        task = await service.create_task(
            "owner", make_task(interval=7, target_time_consumption=1.5), now=now
        )
        [first] = await _occurrences(storage, task.id)

        await lifecycle.complete_occurrence(first.id, now=now)

        second = await storage.occurrences.get_latest(task.id)
        assert second.target_time_consumption == 1.5


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


class TestReads:
    @pytest.mark.asyncio
    async def test_list_recomputes_urgency(self, service, lifecycle, make_task, now):
        task = await service.create_task("owner", make_task(interval=7), now=now)

        [occurrence] = await lifecycle.list_occurrences(task.id, now=now + timedelta(days=8))

        assert occurrence.urgency > 10

    @pytest.mark.asyncio
    async def test_active_only(self, service, lifecycle, storage, make_task, now):
        task = await service.create_task("owner", make_task(interval=7), now=now)
        first = await storage.occurrences.get_latest(task.id)
        await lifecycle.complete_occurrence(first.id, now=now)

        active = await lifecycle.list_occurrences(task.id, now=now, active_only=True)

        assert len(active) == 1
        assert active[0].id != first.id

    @pytest.mark.asyncio
    async def test_preview(self, service, lifecycle, storage, make_task, now):
        recurring = await service.create_task("owner", make_task(interval=5), now=now)
        one_shot = await service.create_task("owner", make_task(max_occurrences=1), now=now)
        single = await service.create_task("owner", make_task(), now=now)

        assert await lifecycle.preview_next_occurrence_date(recurring.id) == now + timedelta(days=5)
        assert await lifecycle.preview_next_occurrence_date(one_shot.id) is None
        assert await lifecycle.preview_next_occurrence_date(single.id) is None
        assert len(await _occurrences(storage, recurring.id)) == 1

    @pytest.mark.asyncio
    async def test_sync_time_consumed(self, service, lifecycle, storage, make_task, now):
        task = await service.create_task("owner", make_task(), now=now)
        [occurrence] = await _occurrences(storage, task.id)
        store = storage.strategy.store
        for hours in (1.5, 0.5, None):
            event = await storage.events.add(
                CalendarEventCreate(
                    owner_id="owner",
                    occurrence_id=occurrence.id,
                    start=now,
                    finish=now + timedelta(hours=2),
                )
            )
            store.events[event.id] = event.model_copy(update={"dedicated_time": hours})

        synced = await lifecycle.sync_time_consumed(occurrence.id)

        assert synced.time_consumed == 2.0

    @pytest.mark.asyncio
    async def test_sync_unknown_occurrence(self, lifecycle):
        with pytest.raises(NotFoundError):
            await lifecycle.sync_time_consumed("missing")


def test_config_sets_one_shot_window(storage):
    lifecycle = OccurrenceLifecycleManager(
        storage, EngineConfig(one_shot_target_days=2, one_shot_limit_days=3)
    )
    assert lifecycle.dates.one_shot_target_days == 2
    assert lifecycle.dates.one_shot_limit_days == 3


@pytest.mark.asyncio
async def test_caller_dates_on_next(storage, lifecycle, make_task, now):
    data = make_task(interval=7)
    task = await storage.tasks.add("owner", data, data.recurrence)
    limit = now + timedelta(days=5)

    occurrence = await lifecycle.create_next_occurrence(
        task.id, OccurrenceDates(limit_date=limit), now=now
    )

    assert occurrence.limit_date == limit
    assert occurrence.target_date == now + timedelta(days=4)
