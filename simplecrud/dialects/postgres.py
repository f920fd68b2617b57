"""PostgreSQL dialect."""

import logging
import urllib.parse
from typing import ClassVar, Optional

from .base import ColumnInfo, Dialect

logger = logging.getLogger(__name__)


class PostgresDialect(Dialect):
    """Dialect for PostgreSQL (schemes postgresql, postgres)."""

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ("postgresql", "postgres")
    QUOTE: ClassVar[str] = '"'
    PARAMSTYLE: ClassVar[str] = "pyformat"
    INSERT_RETURNING: ClassVar[bool] = True

    def sql_limit(self, limit: Optional[int], offset: Optional[int] = None) -> str:
        if not limit:
            return ""
        if offset:
            return f"LIMIT {int(limit)} OFFSET {int(offset)}"
        return f"LIMIT {int(limit)}"

    def connect(self, url: str):
        import psycopg2  # pylint: disable=import-outside-toplevel,import-error
        parsed = urllib.parse.urlparse(url)
        logger.info("Connecting to PostgreSQL database %s on %s", parsed.path[1:], parsed.hostname)
        connection = psycopg2.connect(
            host=parsed.hostname,
            user=parsed.username,
            password=parsed.password,
            database=(parsed.path or "")[1:],
            port=parsed.port,
        )
        connection.autocommit = True
        return connection

    def errors(self):
        import psycopg2  # pylint: disable=import-outside-toplevel,import-error
        return (psycopg2.Error,)

    def list_tables(self, connection) -> set[str]:
        rows = self._fetch(
            connection,
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_schema = current_schema() AND table_type = 'BASE TABLE'",
        )
        return {name for name, in rows}

    def list_columns(self, connection, table: str) -> list[ColumnInfo]:
        rows = self._fetch(
            connection,
            "SELECT column_name, data_type FROM information_schema.columns "
            "WHERE table_schema = current_schema() AND table_name = %s "
            "ORDER BY ordinal_position",
            (table,),
        )
        return [ColumnInfo(name=name, raw_type=raw_type) for name, raw_type in rows]
