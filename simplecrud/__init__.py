"""simplecrud: relationship inference, fluent queries and lazy relations over SQL tables."""

from .codecs import Codec
from .connection import Connection, Result, connect, get_connection
from .database import Database
from .entity import Behavior, Entity, behaviors_from
from .errors import (
    EntityNotFoundError,
    ExecutionError,
    QueryBindingError,
    RelationNotFoundError,
    RelationResolvingError,
    SimpleCrudError,
    TransactionError,
)
from .field import Field, FieldFactory
from .relations import Relationship, RelationshipKind, resolve_relationship
from .row import Relation, RelationState, Row, RowCollection

__all__ = [
    "Behavior",
    "Codec",
    "Connection",
    "Database",
    "Entity",
    "EntityNotFoundError",
    "ExecutionError",
    "Field",
    "FieldFactory",
    "QueryBindingError",
    "Relation",
    "RelationNotFoundError",
    "RelationResolvingError",
    "RelationState",
    "Relationship",
    "RelationshipKind",
    "Result",
    "Row",
    "RowCollection",
    "SimpleCrudError",
    "TransactionError",
    "behaviors_from",
    "connect",
    "get_connection",
    "resolve_relationship",
]
