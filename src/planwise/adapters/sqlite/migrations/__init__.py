"""Schema migrations for the local SQLite store."""

from .m001_initial_schema import MIGRATIONS
from .runner import Migration, MigrationRunner

__all__ = ["MIGRATIONS", "Migration", "MigrationRunner"]
