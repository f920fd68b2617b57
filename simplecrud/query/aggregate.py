"""Aggregate queries returning one scalar: COUNT and SUM."""

from __future__ import annotations

from typing import Any

from .base import Query


class Aggregate(Query):
    """Base of queries reducing every matching row to one value; LIMIT does not apply."""

    def limit(self, limit: int):
        raise ValueError(f"{type(self).__name__} queries do not support limit()")

    def offset(self, offset: int):
        raise ValueError(f"{type(self).__name__} queries do not support offset()")


class Count(Aggregate):
    """SELECT COUNT(*) of matching rows."""

    @property
    def sql(self) -> str:
        return f"SELECT COUNT(*) FROM {self._quote(self.table)}" + self.sql_where

    def get(self) -> int:
        return int(self.run().scalar() or 0)


class Sum(Aggregate):
    """SELECT SUM(field) of matching rows; 0 when no row matches."""

    field: str

    @property
    def sql(self) -> str:
        if self.field not in self.entity.fields:
            raise ValueError(f"Invalid field for sum on `{self.table}`: {self.field}")
        q = self._quote
        return f"SELECT SUM({q(self.field)}) FROM {q(self.table)}" + self.sql_where

    def get(self) -> Any:
        value = self.run().scalar()
        if value is None:
            return 0
        return self.entity.fields[self.field].decode(value)
