"""Database layer — SQLite snapshot store with whole-file commits and repositories."""

from meapi.db.database import Database, Session
from meapi.db.schema import SCHEMA_DDL

__all__ = ["Database", "Session", "SCHEMA_DDL"]
