"""Exceptions raised by simplecrud."""

from typing import Any, Optional


class SimpleCrudError(Exception):
    """Base class for every error raised by simplecrud."""


class RelationNotFoundError(SimpleCrudError, LookupError):
    """No relationship can be inferred between two tables from their names."""

    def __init__(self, source: str, target: str, reason: Optional[str] = None):
        self.source = source
        self.target = target
        message = f"No relationship found between `{source}` and `{target}`"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class QueryBindingError(SimpleCrudError, ValueError):
    """Placeholders and bound values of a query do not match."""


class EntityNotFoundError(SimpleCrudError, LookupError):
    """The requested table has no schema match and no registered behavior."""


class ExecutionError(SimpleCrudError):
    """A statement failed in the database driver; the original error is the `__cause__`."""

    def __init__(self, message: str, sql: str = "", params: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.sql = sql
        self.params = params or {}


class TransactionError(SimpleCrudError):
    """Transaction used out of its scope."""


class RelationResolvingError(SimpleCrudError, RuntimeError):
    """A relation was read again while its own resolution was still running."""
