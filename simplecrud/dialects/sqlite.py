"""SQLite dialect."""

import logging
import sqlite3
import urllib.parse
from typing import ClassVar

from .base import ColumnInfo, Dialect

logger = logging.getLogger(__name__)


class SqliteDialect(Dialect):
    """Dialect for SQLite (scheme sqlite)."""

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ("sqlite",)

    def connect(self, url: str):
        parsed = urllib.parse.urlparse(url)
        path = (parsed.path or "")[1:] or parsed.hostname or ":memory:"
        logger.info("Connecting to SQLite database %s", path)
        # isolation_level=None: autocommit, transactions are explicit BEGIN statements
        conn = sqlite3.connect(path, isolation_level=None)
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def errors(self):
        return (sqlite3.Error,)

    def list_tables(self, connection) -> set[str]:
        rows = self._fetch(
            connection,
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%'",
        )
        return {name for name, in rows}

    def list_columns(self, connection, table: str) -> list[ColumnInfo]:
        rows = self._fetch(connection, f"PRAGMA table_info({self.quote(table)})")
        # cid, name, type, notnull, dflt_value, pk
        return [ColumnInfo(name=row[1], raw_type=row[2] or "") for row in rows]
