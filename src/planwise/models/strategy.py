"""
Strategy Pattern: Storage Strategy Container

A storage strategy bundles every repository implementation of one backend
(in-process memory or local SQLite). The strategy is picked once at startup
and wrapped in a StrategyContext that the engine services receive; services
never know which backend they are talking to.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from planwise.repositories.repository import (
    CalendarEventRepository,
    OccurrenceRepository,
    RecurrenceRepository,
    TaskRepository,
)


class StorageStrategy(ABC):
    """
    Abstract base class for storage strategies.

    A strategy encapsulates ALL repository implementations for a given
    storage backend.
    """

    @abstractmethod
    def get_task_repository(self) -> TaskRepository:
        """Get task repository implementation for this strategy."""

    @abstractmethod
    def get_recurrence_repository(self) -> RecurrenceRepository:
        """Get recurrence repository implementation for this strategy."""

    @abstractmethod
    def get_occurrence_repository(self) -> OccurrenceRepository:
        """Get occurrence repository implementation for this strategy."""

    @abstractmethod
    def get_calendar_event_repository(self) -> CalendarEventRepository:
        """Get calendar event repository implementation for this strategy."""

    @property
    @abstractmethod
    def storage_type(self) -> str:
        """Get storage type identifier (for logging/debugging)."""


class MemoryStrategy(StorageStrategy):
    """
    In-process storage strategy.

    All repositories share one MemoryStore; nothing survives the process.
    Used by tests and for dry runs.
    """

    def __init__(self):
        # Import here to avoid circular dependencies
        from planwise.adapters.memory import (
            MemoryCalendarEventRepository,
            MemoryOccurrenceRepository,
            MemoryRecurrenceRepository,
            MemoryStore,
            MemoryTaskRepository,
        )

        self.store = MemoryStore()
        self._task_repo = MemoryTaskRepository(self.store)
        self._recurrence_repo = MemoryRecurrenceRepository(self.store)
        self._occurrence_repo = MemoryOccurrenceRepository(self.store)
        self._event_repo = MemoryCalendarEventRepository(self.store)

    def get_task_repository(self) -> TaskRepository:
        return self._task_repo

    def get_recurrence_repository(self) -> RecurrenceRepository:
        return self._recurrence_repo

    def get_occurrence_repository(self) -> OccurrenceRepository:
        return self._occurrence_repo

    def get_calendar_event_repository(self) -> CalendarEventRepository:
        return self._event_repo

    @property
    def storage_type(self) -> str:
        return "memory"


class LocalStrategy(StorageStrategy):
    """
    Local SQLite storage strategy.

    All repositories use the same SQLite database file.
    """

    def __init__(self, db_path: str):
        """
        Initialize local strategy.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path

        # Import here to avoid circular dependencies
        from planwise.adapters.sqlite import (
            SqliteCalendarEventRepository,
            SqliteOccurrenceRepository,
            SqliteRecurrenceRepository,
            SqliteTaskRepository,
        )

        self._task_repo = SqliteTaskRepository(db_path=db_path)
        self._recurrence_repo = SqliteRecurrenceRepository(db_path=db_path)
        self._occurrence_repo = SqliteOccurrenceRepository(db_path=db_path)
        self._event_repo = SqliteCalendarEventRepository(db_path=db_path)

    def get_task_repository(self) -> TaskRepository:
        return self._task_repo

    def get_recurrence_repository(self) -> RecurrenceRepository:
        return self._recurrence_repo

    def get_occurrence_repository(self) -> OccurrenceRepository:
        return self._occurrence_repo

    def get_calendar_event_repository(self) -> CalendarEventRepository:
        return self._event_repo

    @property
    def storage_type(self) -> str:
        return "local"


class StrategyContext:
    """
    Strategy context that provides access to all repositories.

    Usage:
        storage = StrategyContext(LocalStrategy(db_path="/path/to/db"))
        lifecycle = OccurrenceLifecycleManager(storage)
    """

    def __init__(self, strategy: StorageStrategy):
        self._strategy = strategy

    @property
    def tasks(self) -> TaskRepository:
        return self._strategy.get_task_repository()

    @property
    def recurrences(self) -> RecurrenceRepository:
        return self._strategy.get_recurrence_repository()

    @property
    def occurrences(self) -> OccurrenceRepository:
        return self._strategy.get_occurrence_repository()

    @property
    def events(self) -> CalendarEventRepository:
        return self._strategy.get_calendar_event_repository()

    @property
    def storage_type(self) -> str:
        """Get storage type (for logging/debugging only)."""
        return self._strategy.storage_type

    @property
    def strategy(self) -> StorageStrategy:
        return self._strategy
