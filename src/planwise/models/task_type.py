"""Task type classification."""

from __future__ import annotations

from typing import Literal

from .core import Task

TaskType = Literal[
    "single",
    "finite_recurring",
    "habit",
    "habit_plus",
    "fixed_single",
    "fixed_repetitive",
]


def classify_task_type(task: Task) -> TaskType:
    """Derive the task type from its fixed flag and recurrence.

    - fixed_single: fixed with no recurrence or a quota of one
    - fixed_repetitive: fixed with a repeating recurrence
    - single: no recurrence, or a quota of one without interval
    - finite_recurring: a quota above one without interval
    - habit_plus: interval with specific days or a quota above one
    - habit: plain interval
    """
    recurrence = task.recurrence

    if task.is_fixed:
        if recurrence is None or recurrence.max_occurrences == 1:
            return "fixed_single"
        return "fixed_repetitive"

    if recurrence is None:
        return "single"

    if recurrence.max_occurrences == 1 and not recurrence.interval:
        return "single"

    if recurrence.max_occurrences and recurrence.max_occurrences > 1 and not recurrence.interval:
        return "finite_recurring"

    if recurrence.interval:
        has_specific_days = bool(recurrence.days_of_week or recurrence.days_of_month)
        if has_specific_days or (recurrence.max_occurrences or 0) > 1:
            return "habit_plus"
        return "habit"

    return "single"
