"""SELECT queries returning rows."""

from __future__ import annotations

from typing import Any, Iterator, Optional

from pydantic import Field

from ..relations import Relationship, RelationshipKind
from ..row import Row, RowCollection
from .base import Query

RELATION_KEY = "__relation_id"
"""Alias of the join table column added by many-to-many relation constraints."""


class Select(Query):
    """SELECT one row (`one=True`) or all matching rows."""

    one: bool = False
    order_by_clauses: list[str] = Field(default_factory=list)
    joins: list[str] = Field(default_factory=list)
    extra_columns: list[str] = Field(default_factory=list)

    def order_by(self, fragment: str, direction: Optional[str] = None) -> Select:
        """Append an ORDER BY fragment (e.g. `order_by("id DESC")` or `order_by("id", "DESC")`)."""
        self.order_by_clauses.append(f"{fragment} {direction}" if direction else fragment)
        return self

    @property
    def _id_column(self) -> str:
        # joined tables have their own `id`
        return f"{self._quote(self.table)}.{self._quote('id')}"

    def _constrain(self, relationship: Relationship, rows: list[Row]) -> None:
        # only the first many-to-many constraint joins and feeds iter_linked()
        if relationship.kind is not RelationshipKind.MANY_TO_MANY or self.joins:
            super()._constrain(relationship, rows)
            return
        q = self._quote
        join = q(relationship.join_table)
        owner_column = f"{join}.{q(relationship.foreign_key)}"
        self.joins.append(
            f"INNER JOIN {join} ON ({join}.{q(relationship.target_key)} = {q(self.table)}.{q('id')})"
        )
        self.extra_columns.append(f"{owner_column} AS {q(RELATION_KEY)}")
        fragment, marks = self._in(owner_column, (row.id for row in rows))
        self.where(fragment, marks)

    @property
    def sql_order(self) -> str:
        if not self.order_by_clauses:
            return ""
        return " ORDER BY " + ", ".join(self.order_by_clauses)

    @property
    def sql_limit(self) -> str:
        limit = 1 if self.one else self.limit_value
        clause = self._dialect.sql_limit(limit, self.offset_value)
        return " " + clause if clause else ""

    @property
    def sql(self) -> str:
        table = self._quote(self.table)
        columns = "*"
        if self.extra_columns:
            columns = ", ".join([f"{table}.*"] + self.extra_columns)
        sql = f"SELECT {columns} FROM {table}"
        for join in self.joins:
            sql += " " + join
        return sql + self.sql_where + self.sql_order + self.sql_limit

    def iter_linked(self) -> Iterator[tuple[Any, Row]]:
        """Run and yield `(owner id, row)` for many-to-many batches.

        A row linked to several owners is yielded once per owner, as the same
        Row instance.
        """
        rows: dict[Any, Row] = {}
        for raw in self.run():
            link = raw.pop(RELATION_KEY, None)
            row = rows.get(raw.get("id"))
            if row is None:
                row = self.entity.make_row(raw)
                rows[row.id] = row
            yield link, row

    def get(self) -> Row | RowCollection | None:
        """Run and return a Row or None (one), or a RowCollection (all)."""
        rows = [row for _, row in self.iter_linked()]
        if self.one:
            return rows[0] if rows else None
        return RowCollection(self.entity, rows)
