"""SQLite adapter module - Local database storage implementation."""

from planwise.adapters.sqlite.connection import DatabaseConnection, get_connection
from planwise.adapters.sqlite.occurrence_repository import (
    SqliteCalendarEventRepository,
    SqliteOccurrenceRepository,
)
from planwise.adapters.sqlite.task_repository import (
    SqliteRecurrenceRepository,
    SqliteTaskRepository,
)

__all__ = [
    "SqliteTaskRepository",
    "SqliteRecurrenceRepository",
    "SqliteOccurrenceRepository",
    "SqliteCalendarEventRepository",
    "DatabaseConnection",
    "get_connection",
]
