"""Utility functions for SQLite adapter."""

from __future__ import annotations

import json
import uuid
from datetime import datetime
from typing import Any

from planwise.utils.clock import ensure_utc, utc_now


def generate_uuid() -> str:
    """Generate a new UUID as string.

    Returns:
        UUID string (e.g., "123e4567-e89b-12d3-a456-426614174000")
    """
    return str(uuid.uuid4())


def now_iso() -> str:
    """Current UTC timestamp in ISO format."""
    return utc_now().isoformat()


def to_db_datetime(value: datetime | None) -> str | None:
    """Serialize a datetime as UTC ISO text, so stored values sort chronologically."""
    if value is None:
        return None
    return ensure_utc(value).isoformat()


def parse_datetime(value: str | datetime | None) -> datetime | None:
    """Parse datetime from various formats.

    Args:
        value: String, datetime object, or None

    Returns:
        Timezone-aware UTC datetime or None
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def to_json_list(values: list | None) -> str | None:
    if values is None:
        return None
    return json.dumps([getattr(v, "value", v) for v in values])


def from_json_list(value: str | None) -> list | None:
    if value is None:
        return None
    return json.loads(value)


def build_update_clause(updates: dict[str, Any]) -> tuple[str, list[Any]]:
    """Build SQL UPDATE SET clause from updates dictionary.

    Args:
        updates: Dictionary of column names to new values; None values are skipped

    Returns:
        Tuple of (SET clause string, parameters list)
    """
    set_parts = []
    params = []

    for key, value in updates.items():
        if value is not None:
            set_parts.append(f"{key} = ?")
            params.append(value)

    return ", ".join(set_parts), params
