"""Base Dialect type: subclasses implement connection and introspection for each engine."""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict

from ..utils.placeholders import to_pyformat


class ColumnInfo(BaseModel):
    """A column as reported by schema introspection."""

    model_config = ConfigDict(frozen=True)

    name: str
    raw_type: str = ""


class Dialect(BaseModel, ABC):
    """Base for database dialects; subclasses implement connect() and introspection."""

    model_config = {"arbitrary_types_allowed": True}

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ()
    """URL schemes this dialect handles (e.g. ('postgresql', 'postgres'))."""

    QUOTE: ClassVar[str] = "`"
    """Character used to quote identifiers."""

    PARAMSTYLE: ClassVar[str] = "named"
    """DB-API paramstyle of the driver: 'named' (`:name`) or 'pyformat' (`%(name)s`)."""

    INSERT_RETURNING: ClassVar[bool] = False
    """If True, inserts read the new id from `RETURNING id` instead of cursor.lastrowid."""

    def quote(self, identifier: str) -> str:
        """Quote a table or column name."""
        q = self.QUOTE
        return q + identifier.replace(q, q + q) + q

    def sql_limit(self, limit: Optional[int], offset: Optional[int] = None) -> str:
        """Return the LIMIT clause (without leading space) or an empty string."""
        if not limit:
            return ""
        if offset:
            return f"LIMIT {int(offset)}, {int(limit)}"
        return f"LIMIT {int(limit)}"

    def prepare(self, sql: str, params: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Adapt a statement written with `:name` placeholders to the driver paramstyle."""
        if self.PARAMSTYLE == "pyformat":
            return to_pyformat(sql), params
        return sql, params

    @abstractmethod
    def connect(self, url: str) -> Any:
        """Return a new raw driver connection (autocommit) for the given URL."""
        ...  # pylint: disable=unnecessary-ellipsis

    @abstractmethod
    def errors(self) -> tuple[type[BaseException], ...]:
        """Exception types raised by the driver, wrapped by Connection.execute()."""
        ...  # pylint: disable=unnecessary-ellipsis

    @abstractmethod
    def list_tables(self, connection: Any) -> set[str]:
        """Return the names of every table in the database."""
        ...  # pylint: disable=unnecessary-ellipsis

    @abstractmethod
    def list_columns(self, connection: Any, table: str) -> list[ColumnInfo]:
        """Return the columns of table, in declaration order."""
        ...  # pylint: disable=unnecessary-ellipsis

    @staticmethod
    def _fetch(connection: Any, sql: str, params: tuple = ()) -> list[tuple]:
        cursor = connection.cursor()
        try:
            cursor.execute(sql, params)
            return list(cursor.fetchall())
        finally:
            cursor.close()
