"""Base query builder: WHERE fragments, bound marks, relation constraints, LIMIT.

Builders are mutable: chained calls update the builder and return it. Rendering
(`sql`, `bindings`) never changes the builder, and `run()` executes exactly one
statement.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from pydantic import BaseModel, Field, PrivateAttr

from ..connection import Result
from ..errors import QueryBindingError
from ..relations import Relationship, RelationshipKind
from ..row import Row, RowCollection
from ..utils.placeholders import find_placeholders

logger = logging.getLogger("simplecrud")


def _mark_name(name: str) -> str:
    return name[1:] if name.startswith(":") else name


class Query(BaseModel):
    """Common state and clauses of every statement on one entity."""

    model_config = {"arbitrary_types_allowed": True}

    entity: Any
    """The Entity this query targets."""
    where_clauses: list[tuple[str, dict[str, Any]]] = Field(default_factory=list)
    """WHERE fragments with the marks bound by each, AND-combined."""
    bound_marks: dict[str, Any] = Field(default_factory=dict)
    """Marks added with marks(), not tied to a fragment."""
    limit_value: Optional[int] = None
    """Optional LIMIT (stored to avoid shadowing the limit() method)."""
    offset_value: Optional[int] = None
    """Optional offset of the LIMIT clause."""

    _generated: int = PrivateAttr(default=0)

    @property
    def table(self) -> str:
        return self.entity.name

    @property
    def _dialect(self):
        return self.entity.db.dialect

    def _quote(self, identifier: str) -> str:
        return self._dialect.quote(identifier)

    # --- clauses ---

    def where(self, fragment: str, marks: Optional[dict[str, Any]] = None):
        """Add a WHERE fragment; placeholders are `:name`, bound from marks."""
        marks = {_mark_name(k): v for k, v in (marks or {}).items()}
        self.where_clauses.append((fragment, marks))
        return self

    def marks(self, marks: dict[str, Any]):
        """Bind values for placeholders used in fragments added without marks."""
        self.bound_marks.update({_mark_name(k): v for k, v in marks.items()})
        return self

    @property
    def _id_column(self) -> str:
        """How by_id() names the id column."""
        return "id"

    def by_id(self, id: Any):
        """Restrict to one id, or to any id of a list/tuple/set."""
        if isinstance(id, (list, tuple, set, frozenset)):
            names = {f"id_{i}": value for i, value in enumerate(id)}
            if not names:
                return self.where("1 = 0")
            return self.where(f"{self._id_column} IN (" + ", ".join(":" + n for n in names) + ")", names)
        return self.where(f"{self._id_column} = :id", {"id": id})

    def limit(self, limit: int):
        self.limit_value = limit
        return self

    def offset(self, offset: int):
        self.offset_value = offset
        return self

    def related_with(self, owner: Row | RowCollection):
        """Restrict to the rows related to a row, or to any row of a collection.

        Raises:
            RelationNotFoundError: if the tables are not related.
        """
        rows = [owner] if isinstance(owner, Row) else list(owner)
        relationship = self.entity.db.relationship(owner.entity.name, self.table)
        return self.constrain(relationship, rows)

    def constrain(self, relationship: Relationship, rows: list[Row]):
        """Restrict to the rows related through relationship (whose target is this table) to rows."""
        self._constrain(relationship, rows)
        return self

    def _in(self, column_sql: str, values: Iterable[Any]) -> tuple[str, dict[str, Any]]:
        """Render `column IN (...)` with generated marks; `1 = 0` for no values."""
        values = list(dict.fromkeys(v for v in values if v is not None))
        if not values:
            return "1 = 0", {}
        marks = {}
        for value in values:
            marks[f"__rel_{self._generated}"] = value
            self._generated += 1
        return f"{column_sql} IN (" + ", ".join(":" + name for name in marks) + ")", marks

    def _constrain(self, relationship: Relationship, rows: list[Row]) -> None:
        q = self._quote
        table = q(self.table)
        if relationship.kind is RelationshipKind.DIRECT:
            fragment, marks = self._in(
                f"{table}.{q('id')}", (row[relationship.foreign_key] for row in rows)
            )
        elif relationship.kind is RelationshipKind.REVERSE:
            fragment, marks = self._in(
                f"{table}.{q(relationship.foreign_key)}", (row.id for row in rows)
            )
        else:
            inner, marks = self._in(q(relationship.foreign_key), (row.id for row in rows))
            fragment = (
                f"{table}.{q('id')} IN (SELECT {q(relationship.target_key)} "
                f"FROM {q(relationship.join_table)} WHERE {inner})"
            )
        self.where(fragment, marks)

    # --- SQL-generating methods (sql_*) ---

    @property
    def sql_where(self) -> str:
        """WHERE clause (with leading space) or empty string when there are no fragments."""
        if not self.where_clauses:
            return ""
        return " WHERE (" + ") AND (".join(fragment for fragment, _ in self.where_clauses) + ")"

    @property
    def sql_limit(self) -> str:
        """LIMIT clause (with leading space) or empty string."""
        clause = self._dialect.sql_limit(self.limit_value, self.offset_value)
        return " " + clause if clause else ""

    @property
    def sql(self) -> str:
        """The complete statement, with `:name` placeholders."""
        raise NotImplementedError("Subclasses must implement `sql` property")

    def _statement_marks(self) -> dict[str, Any]:
        """Marks generated by the statement itself (e.g. SET values)."""
        return {}

    @property
    def bindings(self) -> dict[str, Any]:
        """Values bound to the placeholders of `sql`.

        Raises:
            QueryBindingError: if a placeholder is not bound, a mark is not
                used, or one name is bound to different values.
        """
        marks: dict[str, Any] = {}
        sources = [m for _, m in self.where_clauses] + [self.bound_marks, self._statement_marks()]
        for source in sources:
            for name, value in source.items():
                if name in marks and marks[name] != value:
                    raise QueryBindingError(
                        f"Placeholder :{name} bound to different values: {marks[name]!r} and {value!r}"
                    )
                marks[name] = value
        placeholders = find_placeholders(self.sql)
        missing = placeholders - set(marks)
        if missing:
            raise QueryBindingError(
                f"Unbound placeholder(s) in query on `{self.table}`: "
                + ", ".join(":" + name for name in sorted(missing))
            )
        unused = set(marks) - placeholders
        if unused:
            raise QueryBindingError(
                f"Bound value(s) not used by query on `{self.table}`: "
                + ", ".join(":" + name for name in sorted(unused))
            )
        return marks

    def __str__(self) -> str:
        return self.sql

    # --- execution ---

    def run(self) -> Result:
        """Render, check bindings and execute the statement."""
        sql = self.sql
        return self.entity.db.execute(sql, self.bindings)

    def get(self) -> Any:
        """Run and return the decoded result of the statement."""
        raise NotImplementedError("Subclasses must implement `get`")
