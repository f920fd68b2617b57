"""UPDATE queries."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from .base import Query


class Update(Query):
    """UPDATE matching rows; `get()` returns the number of affected rows."""

    data_values: dict[str, Any] = Field(default_factory=dict)

    def data(self, data: dict[str, Any]) -> Update:
        """Set column values (encoded through the entity's codecs)."""
        self.data_values.update(self.entity.encode(data))
        return self

    def _statement_marks(self) -> dict[str, Any]:
        return {f"__{name}": value for name, value in self.data_values.items()}

    @property
    def sql(self) -> str:
        if not self.data_values:
            raise ValueError(f"Cannot update `{self.table}` without data")
        q = self._quote
        assignments = ", ".join(f"{q(name)} = :__{name}" for name in self.data_values)
        return f"UPDATE {q(self.table)} SET {assignments}" + self.sql_where + self.sql_limit

    def get(self) -> int:
        return self.run().rowcount
