"""Repository abstraction layer for planwise.

This module defines the abstract base classes (interfaces) for the storage
collaborator the engine depends on, following the hexagonal architecture
(Ports & Adapters) pattern.

Every method is atomic at the single-row level. Multi-step sequences
(read latest occurrence, decide, write the next one) are serialized per task
by holding ``TaskRepository.task_lock`` around them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime

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


class TaskRepository(ABC):
    """Abstract base class for task persistence operations."""

    @abstractmethod
    async def get_with_recurrence(self, task_id: str) -> Task:
        """Get a task with its recurrence loaded.

        Args:
            task_id: Unique identifier for the task

        Returns:
            Task object, ``recurrence`` populated when one exists

        Raises:
            NotFoundError: If task does not exist
        """
        raise NotImplementedError(
            "TaskRepository.get_with_recurrence() must be implemented by adapter"
        )

    @abstractmethod
    async def add(
        self,
        owner_id: str,
        task_data: TaskCreate,
        recurrence: RecurrenceCreate | None = None,
    ) -> Task:
        """Create a new task, and its recurrence when given.

        Args:
            owner_id: Owning user
            task_data: TaskCreate object with task details
            recurrence: Recurrence to attach (may differ from task_data.recurrence)

        Returns:
            Created Task object with generated ID and timestamps
        """
        raise NotImplementedError("TaskRepository.add() must be implemented by adapter")

    @abstractmethod
    async def update(self, task_id: str, updates: TaskUpdate) -> Task:
        """Update an existing task.

        Raises:
            NotFoundError: If task does not exist
        """
        raise NotImplementedError(
            "TaskRepository.update() must be implemented by adapter"
        )

    @abstractmethod
    def task_lock(self, task_id: str) -> AbstractAsyncContextManager[None]:
        """Serialize read-decide-write sequences for one task.

        Returns:
            Async context manager held for the duration of the sequence
        """
        raise NotImplementedError(
            "TaskRepository.task_lock() must be implemented by adapter"
        )


class RecurrenceRepository(ABC):
    """Abstract base class for recurrence persistence operations."""

    @abstractmethod
    async def get(self, recurrence_id: str) -> Recurrence:
        """Get a recurrence by ID.

        Raises:
            NotFoundError: If recurrence does not exist
        """
        raise NotImplementedError(
            "RecurrenceRepository.get() must be implemented by adapter"
        )

    @abstractmethod
    async def update(self, recurrence_id: str, updates: RecurrenceUpdate) -> Recurrence:
        """Update period state or end date of a recurrence.

        Raises:
            NotFoundError: If recurrence does not exist
        """
        raise NotImplementedError(
            "RecurrenceRepository.update() must be implemented by adapter"
        )


class OccurrenceRepository(ABC):
    """Abstract base class for occurrence persistence operations."""

    @abstractmethod
    async def get(self, occurrence_id: str) -> Occurrence:
        """Get an occurrence by ID.

        Raises:
            NotFoundError: If occurrence does not exist
        """
        raise NotImplementedError(
            "OccurrenceRepository.get() must be implemented by adapter"
        )

    @abstractmethod
    async def get_latest(self, task_id: str) -> Occurrence | None:
        """Get the occurrence with the latest start date for a task.

        Returns:
            Latest Occurrence, or None when the task has none
        """
        raise NotImplementedError(
            "OccurrenceRepository.get_latest() must be implemented by adapter"
        )

    @abstractmethod
    async def list_by_task(self, task_id: str) -> list[Occurrence]:
        """List all occurrences of a task, ordered by start date."""
        raise NotImplementedError(
            "OccurrenceRepository.list_by_task() must be implemented by adapter"
        )

    @abstractmethod
    async def add(self, data: OccurrenceCreate) -> Occurrence:
        """Create an occurrence in Pending state."""
        raise NotImplementedError(
            "OccurrenceRepository.add() must be implemented by adapter"
        )

    @abstractmethod
    async def update_status(
        self,
        occurrence_id: str,
        status: OccurrenceStatus,
        completed_at: datetime | None = None,
    ) -> Occurrence:
        """Set the status of an occurrence.

        Raises:
            NotFoundError: If occurrence does not exist
        """
        raise NotImplementedError(
            "OccurrenceRepository.update_status() must be implemented by adapter"
        )

    @abstractmethod
    async def update(self, occurrence_id: str, updates: OccurrenceUpdate) -> Occurrence:
        """Update dates, estimates or consumed time of an occurrence.

        Raises:
            NotFoundError: If occurrence does not exist
        """
        raise NotImplementedError(
            "OccurrenceRepository.update() must be implemented by adapter"
        )


class CalendarEventRepository(ABC):
    """Abstract base class for calendar event persistence operations."""

    @abstractmethod
    async def add(self, data: CalendarEventCreate) -> CalendarEvent:
        """Create a calendar event."""
        raise NotImplementedError(
            "CalendarEventRepository.add() must be implemented by adapter"
        )

    @abstractmethod
    async def list_by_occurrence(self, occurrence_id: str) -> list[CalendarEvent]:
        """List the events linked to an occurrence."""
        raise NotImplementedError(
            "CalendarEventRepository.list_by_occurrence() must be implemented by adapter"
        )
