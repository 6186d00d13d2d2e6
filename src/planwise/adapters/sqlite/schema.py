"""Database schema definitions for the local SQLite store.

Datetimes are stored as ISO-8601 text in UTC so that lexical order matches
chronological order. Day selections are stored as JSON arrays.
"""

from __future__ import annotations

# Tasks table
CREATE_TASKS_TABLE = """
CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    name TEXT NOT NULL,
    description TEXT,
    importance INTEGER NOT NULL DEFAULT 5,
    is_active BOOLEAN NOT NULL DEFAULT 1,
    is_fixed BOOLEAN NOT NULL DEFAULT 0,
    fixed_start_time TEXT,
    fixed_end_time TEXT,
    created_at DATETIME NOT NULL
)
"""

# Recurrences table - at most one per task
CREATE_RECURRENCES_TABLE = """
CREATE TABLE IF NOT EXISTS recurrences (
    id TEXT PRIMARY KEY,
    task_id TEXT NOT NULL UNIQUE,
    interval INTEGER,
    days_of_week TEXT,
    days_of_month TEXT,
    max_occurrences INTEGER,
    completed_occurrences INTEGER NOT NULL DEFAULT 0,
    last_period_start DATETIME,
    end_date DATETIME,
    FOREIGN KEY (task_id) REFERENCES tasks(id) ON DELETE CASCADE
)
"""

# Occurrences table
CREATE_OCCURRENCES_TABLE = """
CREATE TABLE IF NOT EXISTS occurrences (
    id TEXT PRIMARY KEY,
    task_id TEXT NOT NULL,
    start_date DATETIME NOT NULL,
    target_date DATETIME,
    limit_date DATETIME,
    target_time_consumption REAL,
    time_consumed REAL NOT NULL DEFAULT 0,
    status TEXT NOT NULL DEFAULT 'Pending'
        CHECK (status IN ('Pending', 'InProgress', 'Completed', 'Skipped')),
    urgency REAL NOT NULL DEFAULT 0,
    completed_at DATETIME,
    created_at DATETIME NOT NULL,
    FOREIGN KEY (task_id) REFERENCES tasks(id) ON DELETE CASCADE
)
"""

# Calendar events table
CREATE_CALENDAR_EVENTS_TABLE = """
CREATE TABLE IF NOT EXISTS calendar_events (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    occurrence_id TEXT,
    start DATETIME NOT NULL,
    finish DATETIME NOT NULL,
    is_fixed BOOLEAN NOT NULL DEFAULT 0,
    is_completed BOOLEAN NOT NULL DEFAULT 0,
    dedicated_time REAL,
    completed_at DATETIME,
    FOREIGN KEY (occurrence_id) REFERENCES occurrences(id) ON DELETE SET NULL
)
"""

CREATE_OCCURRENCE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_occurrences_task_start ON occurrences(task_id, start_date)",
    "CREATE INDEX IF NOT EXISTS idx_occurrences_status ON occurrences(status)",
]

CREATE_EVENT_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_events_occurrence ON calendar_events(occurrence_id)",
    "CREATE INDEX IF NOT EXISTS idx_events_owner ON calendar_events(owner_id)",
]

# All table creation statements in dependency order
ALL_TABLES = [
    CREATE_TASKS_TABLE,
    CREATE_RECURRENCES_TABLE,
    CREATE_OCCURRENCES_TABLE,
    CREATE_CALENDAR_EVENTS_TABLE,
]

ALL_INDEXES = CREATE_OCCURRENCE_INDEXES + CREATE_EVENT_INDEXES
