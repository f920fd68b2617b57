"""MySQL dialect."""

import logging
import urllib.parse
from typing import ClassVar

from .base import ColumnInfo, Dialect

logger = logging.getLogger(__name__)


class MysqlDialect(Dialect):
    """Dialect for MySQL (scheme mysql)."""

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ("mysql",)
    PARAMSTYLE: ClassVar[str] = "pyformat"

    def connect(self, url: str):
        import pymysql  # pylint: disable=import-outside-toplevel,import-error
        parsed = urllib.parse.urlparse(url)
        logger.info("Connecting to MySQL database %s on %s", parsed.path[1:], parsed.hostname)
        return pymysql.connect(
            host=parsed.hostname,
            user=parsed.username,
            password=parsed.password,
            database=(parsed.path or "")[1:] or None,
            port=parsed.port or 3306,
            autocommit=True,
        )

    def errors(self):
        import pymysql  # pylint: disable=import-outside-toplevel,import-error
        return (pymysql.err.Error,)

    def list_tables(self, connection) -> set[str]:
        return {name for name, *_ in self._fetch(connection, "SHOW TABLES")}

    def list_columns(self, connection, table: str) -> list[ColumnInfo]:
        rows = self._fetch(connection, f"DESCRIBE {self.quote(table)}")
        # Field, Type, Null, Key, Default, Extra
        return [ColumnInfo(name=row[0], raw_type=row[1]) for row in rows]
