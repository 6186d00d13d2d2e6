"""Adapters module - Repository implementations for different storage backends.

This package contains concrete implementations (adapters) for the repository interfaces:
- memory: In-process storage
- sqlite: Local SQLite database storage
"""

from .memory import (
    MemoryCalendarEventRepository,
    MemoryOccurrenceRepository,
    MemoryRecurrenceRepository,
    MemoryStore,
    MemoryTaskRepository,
)
from .sqlite import (
    SqliteCalendarEventRepository,
    SqliteOccurrenceRepository,
    SqliteRecurrenceRepository,
    SqliteTaskRepository,
)

__all__ = [
    # In-memory adapters
    "MemoryStore",
    "MemoryTaskRepository",
    "MemoryRecurrenceRepository",
    "MemoryOccurrenceRepository",
    "MemoryCalendarEventRepository",
    # SQLite adapters
    "SqliteTaskRepository",
    "SqliteRecurrenceRepository",
    "SqliteOccurrenceRepository",
    "SqliteCalendarEventRepository",
]
