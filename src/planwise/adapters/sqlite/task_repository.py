"""SQLite implementations of TaskRepository and RecurrenceRepository."""

from __future__ import annotations

import asyncio
import sqlite3
from collections import defaultdict
from contextlib import AbstractAsyncContextManager

from planwise.adapters.sqlite.connection import get_connection
from planwise.adapters.sqlite.utils import (
    build_update_clause,
    from_json_list,
    generate_uuid,
    now_iso,
    parse_datetime,
    to_db_datetime,
    to_json_list,
)
from planwise.exceptions import NotFoundError
from planwise.models import (
    PeriodState,
    Recurrence,
    RecurrenceCreate,
    RecurrenceUpdate,
    Task,
    TaskCreate,
    TaskUpdate,
)
from planwise.repositories import RecurrenceRepository, TaskRepository


class SqliteRepository:
    """Shared connection handling for the SQLite repositories."""

    def __init__(
        self,
        db_path: str | None = None,
        connection: sqlite3.Connection | None = None,
    ):
        """Initialize the repository.

        Args:
            db_path: Optional database file path. If None, uses default location.
            connection: Already configured connection, used instead of db_path
        """
        self.db_path = db_path
        self._connection = connection

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection


def row_to_recurrence(row: sqlite3.Row) -> Recurrence:
    return Recurrence(
        id=row["id"],
        interval=row["interval"],
        days_of_week=from_json_list(row["days_of_week"]),
        days_of_month=from_json_list(row["days_of_month"]),
        max_occurrences=row["max_occurrences"],
        end_date=parse_datetime(row["end_date"]),
        period=PeriodState(
            completed_occurrences=row["completed_occurrences"],
            last_period_start=parse_datetime(row["last_period_start"]),
        ),
    )


def row_to_task(row: sqlite3.Row, recurrence: Recurrence | None = None) -> Task:
    return Task(
        id=row["id"],
        owner_id=row["owner_id"],
        name=row["name"],
        description=row["description"],
        importance=row["importance"],
        is_active=bool(row["is_active"]),
        is_fixed=bool(row["is_fixed"]),
        fixed_start_time=row["fixed_start_time"],
        fixed_end_time=row["fixed_end_time"],
        recurrence=recurrence,
        created_at=parse_datetime(row["created_at"]),
    )


class SqliteTaskRepository(SqliteRepository, TaskRepository):
    """SQLite implementation of task repository.

    ``task_lock`` serializes engine sequences within this process only.
    """

    def __init__(
        self,
        db_path: str | None = None,
        connection: sqlite3.Connection | None = None,
    ):
        super().__init__(db_path=db_path, connection=connection)
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def get_with_recurrence(self, task_id: str) -> Task:
        row = self.connection.execute(
            "SELECT * FROM tasks WHERE id = ?", (task_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError("Task", task_id)

        recurrence_row = self.connection.execute(
            "SELECT * FROM recurrences WHERE task_id = ?", (task_id,)
        ).fetchone()
        recurrence = row_to_recurrence(recurrence_row) if recurrence_row else None
        return row_to_task(row, recurrence)

    async def add(
        self,
        owner_id: str,
        task_data: TaskCreate,
        recurrence: RecurrenceCreate | None = None,
    ) -> Task:
        task_id = generate_uuid()
        self.connection.execute(
            """
            INSERT INTO tasks (
                id, owner_id, name, description, importance, is_active,
                is_fixed, fixed_start_time, fixed_end_time, created_at
            ) VALUES (?, ?, ?, ?, ?, 1, ?, ?, ?, ?)
            """,
            (
                task_id,
                owner_id,
                task_data.name,
                task_data.description,
                task_data.importance,
                task_data.is_fixed,
                task_data.fixed_start_time,
                task_data.fixed_end_time,
                now_iso(),
            ),
        )

        if recurrence is not None:
            self.connection.execute(
                """
                INSERT INTO recurrences (
                    id, task_id, interval, days_of_week, days_of_month,
                    max_occurrences, completed_occurrences, end_date
                ) VALUES (?, ?, ?, ?, ?, ?, 0, ?)
                """,
                (
                    generate_uuid(),
                    task_id,
                    recurrence.interval,
                    to_json_list(recurrence.days_of_week),
                    to_json_list(recurrence.days_of_month),
                    recurrence.max_occurrences,
                    to_db_datetime(recurrence.end_date),
                ),
            )

        self.connection.commit()
        return await self.get_with_recurrence(task_id)

    async def update(self, task_id: str, updates: TaskUpdate) -> Task:
        set_clause, params = build_update_clause(updates.model_dump())
        if set_clause:
            cursor = self.connection.execute(
                f"UPDATE tasks SET {set_clause} WHERE id = ?", (*params, task_id)
            )
            self.connection.commit()
            if cursor.rowcount == 0:
                raise NotFoundError("Task", task_id)
        return await self.get_with_recurrence(task_id)

    def task_lock(self, task_id: str) -> AbstractAsyncContextManager[None]:
        return self._locks[task_id]


class SqliteRecurrenceRepository(SqliteRepository, RecurrenceRepository):
    """SQLite implementation of recurrence repository."""

    async def get(self, recurrence_id: str) -> Recurrence:
        row = self.connection.execute(
            "SELECT * FROM recurrences WHERE id = ?", (recurrence_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError("Recurrence", recurrence_id)
        return row_to_recurrence(row)

    async def update(self, recurrence_id: str, updates: RecurrenceUpdate) -> Recurrence:
        columns = {"end_date": to_db_datetime(updates.end_date)}
        if updates.period is not None:
            columns["completed_occurrences"] = updates.period.completed_occurrences
            columns["last_period_start"] = to_db_datetime(updates.period.last_period_start)

        set_clause, params = build_update_clause(columns)
        if set_clause:
            cursor = self.connection.execute(
                f"UPDATE recurrences SET {set_clause} WHERE id = ?",
                (*params, recurrence_id),
            )
            self.connection.commit()
            if cursor.rowcount == 0:
                raise NotFoundError("Recurrence", recurrence_id)
        return await self.get(recurrence_id)
