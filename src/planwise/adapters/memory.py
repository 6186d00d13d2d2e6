"""In-process repository implementations.

All four repositories share one MemoryStore. Records are kept as pydantic
models and handed out as deep copies, so callers never mutate stored state
behind the repository's back.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from contextlib import AbstractAsyncContextManager
from datetime import datetime

from planwise.adapters.sqlite.utils import generate_uuid
from planwise.exceptions import NotFoundError
from planwise.models import (
    CalendarEvent,
    CalendarEventCreate,
    Occurrence,
    OccurrenceCreate,
    OccurrenceStatus,
    OccurrenceUpdate,
    Recurrence,
    RecurrenceCreate,
    RecurrenceUpdate,
    Task,
    TaskCreate,
    TaskUpdate,
)
from planwise.repositories import (
    CalendarEventRepository,
    OccurrenceRepository,
    RecurrenceRepository,
    TaskRepository,
)
from planwise.utils.clock import utc_now


class MemoryStore:
    """Shared state of the in-memory repositories."""

    def __init__(self):
        self.tasks: dict[str, Task] = {}
        self.recurrences: dict[str, Recurrence] = {}
        self.task_recurrence: dict[str, str] = {}
        self.occurrences: dict[str, Occurrence] = {}
        self.events: dict[str, CalendarEvent] = {}
        self.locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)


class MemoryTaskRepository(TaskRepository):
    """Dict-backed task repository."""

    def __init__(self, store: MemoryStore):
        self.store = store

    async def get_with_recurrence(self, task_id: str) -> Task:
        task = self.store.tasks.get(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)

        recurrence_id = self.store.task_recurrence.get(task_id)
        recurrence = self.store.recurrences.get(recurrence_id) if recurrence_id else None
        return task.model_copy(
            update={"recurrence": recurrence.model_copy(deep=True) if recurrence else None},
            deep=True,
        )

    async def add(
        self,
        owner_id: str,
        task_data: TaskCreate,
        recurrence: RecurrenceCreate | None = None,
    ) -> Task:
        task = Task(
            id=generate_uuid(),
            owner_id=owner_id,
            name=task_data.name,
            description=task_data.description,
            importance=task_data.importance,
            is_fixed=task_data.is_fixed,
            fixed_start_time=task_data.fixed_start_time,
            fixed_end_time=task_data.fixed_end_time,
            created_at=utc_now(),
        )
        self.store.tasks[task.id] = task

        if recurrence is not None:
            stored = Recurrence(id=generate_uuid(), **recurrence.model_dump())
            self.store.recurrences[stored.id] = stored
            self.store.task_recurrence[task.id] = stored.id

        return await self.get_with_recurrence(task.id)

    async def update(self, task_id: str, updates: TaskUpdate) -> Task:
        task = self.store.tasks.get(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)

        self.store.tasks[task_id] = task.model_copy(
            update=updates.model_dump(exclude_none=True)
        )
        return await self.get_with_recurrence(task_id)

    def task_lock(self, task_id: str) -> AbstractAsyncContextManager[None]:
        return self.store.locks[task_id]


class MemoryRecurrenceRepository(RecurrenceRepository):
    """Dict-backed recurrence repository."""

    def __init__(self, store: MemoryStore):
        self.store = store

    async def get(self, recurrence_id: str) -> Recurrence:
        recurrence = self.store.recurrences.get(recurrence_id)
        if recurrence is None:
            raise NotFoundError("Recurrence", recurrence_id)
        return recurrence.model_copy(deep=True)

    async def update(self, recurrence_id: str, updates: RecurrenceUpdate) -> Recurrence:
        recurrence = self.store.recurrences.get(recurrence_id)
        if recurrence is None:
            raise NotFoundError("Recurrence", recurrence_id)

        changes = {}
        if updates.period is not None:
            changes["period"] = updates.period
        if updates.end_date is not None:
            changes["end_date"] = updates.end_date
        self.store.recurrences[recurrence_id] = recurrence.model_copy(update=changes)
        return await self.get(recurrence_id)


class MemoryOccurrenceRepository(OccurrenceRepository):
    """Dict-backed occurrence repository."""

    def __init__(self, store: MemoryStore):
        self.store = store

    def _require(self, occurrence_id: str) -> Occurrence:
        occurrence = self.store.occurrences.get(occurrence_id)
        if occurrence is None:
            raise NotFoundError("Occurrence", occurrence_id)
        return occurrence

    async def get(self, occurrence_id: str) -> Occurrence:
        return self._require(occurrence_id).model_copy(deep=True)

    async def get_latest(self, task_id: str) -> Occurrence | None:
        occurrences = await self.list_by_task(task_id)
        return occurrences[-1] if occurrences else None

    async def list_by_task(self, task_id: str) -> list[Occurrence]:
        # sorted() is stable, so equal start dates keep insertion order
        occurrences = [
            o.model_copy(deep=True)
            for o in self.store.occurrences.values()
            if o.task_id == task_id
        ]
        return sorted(occurrences, key=lambda o: o.start_date)

    async def add(self, data: OccurrenceCreate) -> Occurrence:
        if data.task_id not in self.store.tasks:
            raise NotFoundError("Task", data.task_id)

        occurrence = Occurrence(
            id=generate_uuid(),
            created_at=utc_now(),
            **data.model_dump(),
        )
        self.store.occurrences[occurrence.id] = occurrence
        return occurrence.model_copy(deep=True)

    async def update_status(
        self,
        occurrence_id: str,
        status: OccurrenceStatus,
        completed_at: datetime | None = None,
    ) -> Occurrence:
        occurrence = self._require(occurrence_id)
        self.store.occurrences[occurrence_id] = occurrence.model_copy(
            update={"status": status, "completed_at": completed_at}
        )
        return await self.get(occurrence_id)

    async def update(self, occurrence_id: str, updates: OccurrenceUpdate) -> Occurrence:
        occurrence = self._require(occurrence_id)
        self.store.occurrences[occurrence_id] = occurrence.model_copy(
            update=updates.model_dump(exclude_none=True)
        )
        return await self.get(occurrence_id)


class MemoryCalendarEventRepository(CalendarEventRepository):
    """Dict-backed calendar event repository."""

    def __init__(self, store: MemoryStore):
        self.store = store

    async def add(self, data: CalendarEventCreate) -> CalendarEvent:
        event = CalendarEvent(id=generate_uuid(), **data.model_dump())
        self.store.events[event.id] = event
        return event.model_copy(deep=True)

    async def list_by_occurrence(self, occurrence_id: str) -> list[CalendarEvent]:
        return [
            e.model_copy(deep=True)
            for e in self.store.events.values()
            if e.occurrence_id == occurrence_id
        ]
