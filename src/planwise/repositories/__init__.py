"""Repository interfaces for planwise.

This package contains abstract base classes (ABCs) that define the contracts
for data persistence operations. These are the "Ports" in the Hexagonal Architecture.

Implementations (Adapters) are in:
- planwise.adapters.memory (in-process storage)
- planwise.adapters.sqlite (local storage)
"""

from .repository import (
    CalendarEventRepository,
    OccurrenceRepository,
    RecurrenceRepository,
    TaskRepository,
)

__all__ = [
    "TaskRepository",
    "RecurrenceRepository",
    "OccurrenceRepository",
    "CalendarEventRepository",
]
