"""INSERT queries."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from .base import Query


class Insert(Query):
    """INSERT one row; `get()` returns its id."""

    data_values: dict[str, Any] = Field(default_factory=dict)
    """Encoded values to insert."""

    def data(self, data: dict[str, Any]) -> Insert:
        """Set column values (encoded through the entity's codecs)."""
        self.data_values.update(self.entity.encode(data))
        return self

    def _statement_marks(self) -> dict[str, Any]:
        return {f"__{name}": value for name, value in self.data_values.items()}

    @property
    def sql(self) -> str:
        if not self.data_values:
            raise ValueError(f"Cannot insert into `{self.table}` without data")
        q = self._quote
        columns = ", ".join(q(name) for name in self.data_values)
        values = ", ".join(f":__{name}" for name in self.data_values)
        sql = f"INSERT INTO {q(self.table)} ({columns}) VALUES ({values})"
        if self._dialect.INSERT_RETURNING:
            sql += f" RETURNING {q('id')}"
        return sql

    def get(self) -> Any:
        """Run and return the id of the inserted row."""
        result = self.run()
        id_field = self.entity.fields.get("id")
        if self.data_values.get("id") is not None:
            new_id = self.data_values["id"]
        elif self._dialect.INSERT_RETURNING:
            new_id = result.scalar()
        else:
            new_id = result.lastrowid
        return id_field.decode(new_id) if id_field else new_id
