"""Database: the top-level context owning the connection and the per-context caches.

Entities, table and column lists, and inferred relationships are cached for the
lifetime of the context under one re-entrant lock; `close()` clears them. The
caches only save introspection round trips and never change results.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, Optional

from .connection import Connection, Result, get_connection
from .dialects import ColumnInfo, Dialect
from .entity import Behavior, Entity
from .errors import EntityNotFoundError
from .field import FieldFactory
from .relations import Relationship, resolve_relationship

logger = logging.getLogger("simplecrud")

Resolver = Callable[[str], Optional[Behavior]]


class _Schema(Mapping):
    """Field names of every table, read lazily from the database."""

    def __init__(self, db: "Database"):
        self._db = db

    def __getitem__(self, table: str) -> list[str]:
        if table not in self._db.tables:
            raise KeyError(table)
        return [column.name for column in self._db.columns(table)]

    def __contains__(self, table: object) -> bool:
        return table in self._db.tables

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._db.tables))

    def __len__(self) -> int:
        return len(self._db.tables)


class Database:
    """Connection context: entity factory, schema cache and shared attributes.

    Args:
        connection: The Connection statements are executed on.
        resolvers: Functions tried in order for each entity name; the first one
            returning a Behavior wins.
        field_factory: Codec registry used to build fields.
        autocreate: If True, any existing table gets a default Entity.
        attributes: Initial read-only attributes shared with entities and rows.
    """

    def __init__(self, connection: Connection,
                 resolvers: Iterable[Resolver] = (),
                 field_factory: Optional[FieldFactory] = None,
                 autocreate: bool = True,
                 attributes: Optional[Mapping[str, Any]] = None):
        self.connection = connection
        self.resolvers: tuple[Resolver, ...] = tuple(resolvers)
        self.field_factory = field_factory or FieldFactory()
        self.autocreate = autocreate
        self._attributes: dict[str, Any] = dict(attributes or {})
        self.attributes: Mapping[str, Any] = MappingProxyType(self._attributes)
        self.lock = threading.RLock()
        self._entities: dict[str, Entity] = {}
        self._tables: Optional[frozenset[str]] = None
        self._columns: dict[str, list[ColumnInfo]] = {}
        self._relationships: dict[tuple[str, str], Relationship] = {}
        self.schema: Mapping[str, list[str]] = _Schema(self)

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "Database":
        """Open a database from a URL such as `sqlite:///path/to/file.sqlite3`."""
        return cls(Connection.from_url(url), **kwargs)

    @classmethod
    def from_name(cls, name: str = "default", **kwargs) -> "Database":
        """Open the database registered with `connect(url, name)`."""
        return cls(get_connection(name), **kwargs)

    @property
    def dialect(self) -> Dialect:
        return self.connection.dialect

    def set_attribute(self, name: str, value: Any) -> None:
        """Set an attribute visible (read-only) from every entity and row."""
        self._attributes[name] = value

    # --- execution ---

    def execute(self, sql: str, params: Optional[dict[str, Any]] = None) -> Result:
        return self.connection.execute(sql, params)

    def transaction(self):
        """Context manager grouping statements in a transaction (savepoint when nested)."""
        return self.connection.transaction()

    # --- schema ---

    @property
    def tables(self) -> frozenset[str]:
        """Names of every table, listed once per context."""
        if self._tables is None:
            with self.lock:
                if self._tables is None:
                    self._tables = frozenset(self.connection.list_tables())
        return self._tables

    def columns(self, table: str) -> list[ColumnInfo]:
        """Columns of table, listed once per context."""
        with self.lock:
            if table not in self._columns:
                self._columns[table] = self.connection.list_columns(table)
            return self._columns[table]

    def relationship(self, source: str, target: str) -> Relationship:
        """How source relates to target; see resolve_relationship().

        Raises:
            RelationNotFoundError: if no relationship can be inferred.
        """
        key = (source, target)
        with self.lock:
            if key not in self._relationships:
                self._relationships[key] = resolve_relationship(source, target, self.schema)
            return self._relationships[key]

    # --- entities ---

    def _find_behavior(self, name: str) -> Optional[Behavior]:
        for resolver in self.resolvers:
            behavior = resolver(name)
            if behavior is not None:
                return behavior
        return None

    def has(self, name: str) -> bool:
        """True if an entity can be created for name."""
        if name in self._entities:
            return True
        if self.autocreate and name in self.tables:
            return True
        return self._find_behavior(name) is not None

    def entity(self, name: str) -> Entity:
        """Return the (cached) Entity for name.

        Raises:
            EntityNotFoundError: if no resolver knows name and the table does not exist.
        """
        with self.lock:
            if name in self._entities:
                return self._entities[name]
            try:
                behavior = self._find_behavior(name)
                if behavior is None and not (self.autocreate and name in self.tables):
                    raise EntityNotFoundError(f"Entity `{name}` not found")
                entity = Entity(name, self, behavior)
            except EntityNotFoundError:
                raise
            except Exception as error:
                raise EntityNotFoundError(f"Error getting the `{name}` entity") from error
            logger.debug("Created entity %s", name)
            self._entities[name] = entity
            return entity

    __getitem__ = entity
    __contains__ = has

    # --- lifetime ---

    def clear_cache(self) -> None:
        """Forget entities, tables, columns and relationships."""
        with self.lock:
            self._entities.clear()
            self._tables = None
            self._columns.clear()
            self._relationships.clear()

    def close(self) -> None:
        """Clear the caches and close the connection."""
        self.clear_cache()
        self.connection.close()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = ["Database", "Resolver"]
