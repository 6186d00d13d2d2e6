"""Migration 001: tasks, recurrences, occurrences and calendar events."""

import sqlite3

from planwise.adapters.sqlite.schema import ALL_INDEXES, ALL_TABLES

from .runner import Migration


class InitialSchemaMigration(Migration):
    @property
    def version(self) -> int:
        return 1

    @property
    def description(self) -> str:
        return "Initial planner schema"

    def up(self, connection: sqlite3.Connection) -> None:
        for statement in ALL_TABLES:
            connection.execute(statement)
        for index_sql in ALL_INDEXES:
            connection.execute(index_sql)


initial_migration = InitialSchemaMigration()

MIGRATIONS = [initial_migration]
