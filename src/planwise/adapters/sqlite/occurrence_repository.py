"""SQLite implementations of OccurrenceRepository and CalendarEventRepository."""

from __future__ import annotations

import sqlite3
from datetime import datetime

from planwise.adapters.sqlite.task_repository import SqliteRepository
from planwise.adapters.sqlite.utils import (
    build_update_clause,
    generate_uuid,
    now_iso,
    parse_datetime,
    to_db_datetime,
)
from planwise.exceptions import NotFoundError
from planwise.models import (
    CalendarEvent,
    CalendarEventCreate,
    Occurrence,
    OccurrenceCreate,
    OccurrenceStatus,
    OccurrenceUpdate,
)
from planwise.repositories import CalendarEventRepository, OccurrenceRepository


def row_to_occurrence(row: sqlite3.Row) -> Occurrence:
    return Occurrence(
        id=row["id"],
        task_id=row["task_id"],
        start_date=parse_datetime(row["start_date"]),
        target_date=parse_datetime(row["target_date"]),
        limit_date=parse_datetime(row["limit_date"]),
        target_time_consumption=row["target_time_consumption"],
        time_consumed=row["time_consumed"],
        status=OccurrenceStatus(row["status"]),
        urgency=row["urgency"],
        completed_at=parse_datetime(row["completed_at"]),
        created_at=parse_datetime(row["created_at"]),
    )


def row_to_event(row: sqlite3.Row) -> CalendarEvent:
    return CalendarEvent(
        id=row["id"],
        owner_id=row["owner_id"],
        occurrence_id=row["occurrence_id"],
        start=parse_datetime(row["start"]),
        finish=parse_datetime(row["finish"]),
        is_fixed=bool(row["is_fixed"]),
        is_completed=bool(row["is_completed"]),
        dedicated_time=row["dedicated_time"],
        completed_at=parse_datetime(row["completed_at"]),
    )


class SqliteOccurrenceRepository(SqliteRepository, OccurrenceRepository):
    """SQLite implementation of occurrence repository.

    Equal start dates are ordered by insertion (rowid).
    """

    async def get(self, occurrence_id: str) -> Occurrence:
        row = self.connection.execute(
            "SELECT * FROM occurrences WHERE id = ?", (occurrence_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError("Occurrence", occurrence_id)
        return row_to_occurrence(row)

    async def get_latest(self, task_id: str) -> Occurrence | None:
        row = self.connection.execute(
            """
            SELECT * FROM occurrences WHERE task_id = ?
            ORDER BY start_date DESC, rowid DESC LIMIT 1
            """,
            (task_id,),
        ).fetchone()
        return row_to_occurrence(row) if row else None

    async def list_by_task(self, task_id: str) -> list[Occurrence]:
        rows = self.connection.execute(
            "SELECT * FROM occurrences WHERE task_id = ? ORDER BY start_date, rowid",
            (task_id,),
        ).fetchall()
        return [row_to_occurrence(row) for row in rows]

    async def add(self, data: OccurrenceCreate) -> Occurrence:
        occurrence_id = generate_uuid()
        try:
            self.connection.execute(
                """
                INSERT INTO occurrences (
                    id, task_id, start_date, target_date, limit_date,
                    target_time_consumption, status, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    occurrence_id,
                    data.task_id,
                    to_db_datetime(data.start_date),
                    to_db_datetime(data.target_date),
                    to_db_datetime(data.limit_date),
                    data.target_time_consumption,
                    OccurrenceStatus.PENDING.value,
                    now_iso(),
                ),
            )
        except sqlite3.IntegrityError as e:
            raise NotFoundError("Task", data.task_id) from e
        self.connection.commit()
        return await self.get(occurrence_id)

    async def update_status(
        self,
        occurrence_id: str,
        status: OccurrenceStatus,
        completed_at: datetime | None = None,
    ) -> Occurrence:
        cursor = self.connection.execute(
            "UPDATE occurrences SET status = ?, completed_at = ? WHERE id = ?",
            (status.value, to_db_datetime(completed_at), occurrence_id),
        )
        self.connection.commit()
        if cursor.rowcount == 0:
            raise NotFoundError("Occurrence", occurrence_id)
        return await self.get(occurrence_id)

    async def update(self, occurrence_id: str, updates: OccurrenceUpdate) -> Occurrence:
        set_clause, params = build_update_clause(
            {
                "target_date": to_db_datetime(updates.target_date),
                "limit_date": to_db_datetime(updates.limit_date),
                "target_time_consumption": updates.target_time_consumption,
                "time_consumed": updates.time_consumed,
            }
        )
        if set_clause:
            cursor = self.connection.execute(
                f"UPDATE occurrences SET {set_clause} WHERE id = ?",
                (*params, occurrence_id),
            )
            self.connection.commit()
            if cursor.rowcount == 0:
                raise NotFoundError("Occurrence", occurrence_id)
        return await self.get(occurrence_id)


class SqliteCalendarEventRepository(SqliteRepository, CalendarEventRepository):
    """SQLite implementation of calendar event repository."""

    async def add(self, data: CalendarEventCreate) -> CalendarEvent:
        event_id = generate_uuid()
        self.connection.execute(
            """
            INSERT INTO calendar_events (id, owner_id, occurrence_id, start, finish, is_fixed)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                event_id,
                data.owner_id,
                data.occurrence_id,
                to_db_datetime(data.start),
                to_db_datetime(data.finish),
                data.is_fixed,
            ),
        )
        self.connection.commit()
        row = self.connection.execute(
            "SELECT * FROM calendar_events WHERE id = ?", (event_id,)
        ).fetchone()
        return row_to_event(row)

    async def list_by_occurrence(self, occurrence_id: str) -> list[CalendarEvent]:
        rows = self.connection.execute(
            "SELECT * FROM calendar_events WHERE occurrence_id = ? ORDER BY start",
            (occurrence_id,),
        ).fetchall()
        return [row_to_event(row) for row in rows]
