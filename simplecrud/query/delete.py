"""DELETE queries."""

from __future__ import annotations

from .base import Query


class Delete(Query):
    """DELETE matching rows; `get()` returns the number of deleted rows (0 when none matched)."""

    @property
    def sql(self) -> str:
        return f"DELETE FROM {self._quote(self.table)}" + self.sql_where + self.sql_limit

    def get(self) -> int:
        return self.run().rowcount
