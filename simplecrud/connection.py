"""Execution capability: named connection registry and statement execution."""

import logging
import urllib.parse
from typing import Any, Iterator, Optional

from .dialects import ColumnInfo, Dialect, get_dialect_for_scheme
from .errors import ExecutionError
from .transaction import TransactionManager

logger = logging.getLogger("simplecrud")


class Result:
    """Rows returned by a statement plus the cursor counters."""

    __slots__ = ("rows", "columns", "rowcount", "lastrowid")

    def __init__(self, rows: list[dict[str, Any]], columns: list[str],
                 rowcount: int = -1, lastrowid: Optional[int] = None):
        self.rows = rows
        self.columns = columns
        self.rowcount = rowcount
        self.lastrowid = lastrowid

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def first(self) -> Optional[dict[str, Any]]:
        """Return the first row, or None."""
        return self.rows[0] if self.rows else None

    def scalar(self) -> Any:
        """Return the first column of the first row, or None."""
        if not self.rows:
            return None
        return self.rows[0][self.columns[0]]

    def __repr__(self) -> str:
        return f"<Result rows={len(self.rows)} rowcount={self.rowcount}>"


class Connection:
    """A driver connection together with its dialect."""

    def __init__(self, raw: Any, dialect: Dialect, url: str = ""):
        self.raw = raw
        self.dialect = dialect
        self.url = url
        self._transactions = TransactionManager(self)

    @classmethod
    def from_url(cls, url: str) -> "Connection":
        """Open a connection with the dialect matching the URL scheme."""
        dialect = get_dialect_for_scheme(urllib.parse.urlparse(url).scheme)
        return cls(dialect.connect(url), dialect, url=url)

    def execute(self, sql: str, params: Optional[dict[str, Any]] = None) -> Result:
        """Run one statement written with `:name` placeholders.

        Raises:
            ExecutionError: on any driver error; the driver exception is chained.
        """
        params = dict(params or {})
        logger.debug("%s %r", sql, params)
        statement, parameters = self.dialect.prepare(sql, params)
        cursor = self.raw.cursor()
        try:
            cursor.execute(statement, parameters)
            columns = [d[0] for d in cursor.description or ()]
            rows = [dict(zip(columns, row)) for row in cursor.fetchall()] if columns else []
            return Result(rows, columns, rowcount=cursor.rowcount, lastrowid=cursor.lastrowid)
        except self.dialect.errors() as error:
            raise ExecutionError(f"Error executing `{sql}`: {error}", sql=sql, params=params) from error
        finally:
            cursor.close()

    def list_tables(self) -> set[str]:
        """Return the names of every table."""
        try:
            return self.dialect.list_tables(self.raw)
        except self.dialect.errors() as error:
            raise ExecutionError(f"Error listing tables: {error}") from error

    def list_columns(self, table: str) -> list[ColumnInfo]:
        """Return the columns of table."""
        try:
            return self.dialect.list_columns(self.raw, table)
        except self.dialect.errors() as error:
            raise ExecutionError(f"Error listing columns of `{table}`: {error}") from error

    def transaction(self):
        """Context manager: BEGIN/COMMIT/ROLLBACK, SAVEPOINTs when nested."""
        return self._transactions.transaction()

    @property
    def in_transaction(self) -> bool:
        return self._transactions.level > 0

    def close(self) -> None:
        self.raw.close()


_urls: dict[str, str] = {}


def connect(database_url: str, name: str = "default") -> None:
    """Register a database URL under a name."""
    _urls[name] = database_url


def get_connection(name: str = "default") -> Connection:
    """Open a new Connection for the URL registered under name."""
    try:
        url = _urls[name]
    except KeyError as error:
        raise ValueError(f"No connection configured with name=`{name}`") from error
    return Connection.from_url(url)


__all__ = ["Connection", "Result", "connect", "get_connection"]
