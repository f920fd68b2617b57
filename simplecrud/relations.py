"""Relationship inference between tables from naming conventions alone.

Given tables `post` and `category`:

- `post` has `category_id`: post -> category is DIRECT (a post belongs to a
  category) and category -> post is REVERSE (a category has many posts);
- otherwise a table `category_post` holding `category_id` and `post_id`
  makes the relationship MANY_TO_MANY in both directions.
"""

from __future__ import annotations

import enum
import logging
from typing import Collection, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from .errors import RelationNotFoundError

logger = logging.getLogger("simplecrud")


def foreign_key(table: str) -> str:
    """Name of the column referencing table (`post` -> `post_id`)."""
    return f"{table}_id"


def join_table_name(a: str, b: str) -> str:
    """Name of the many-to-many join table between a and b (`post`, `category` -> `category_post`)."""
    return "_".join(sorted((a, b)))


class RelationshipKind(str, enum.Enum):
    DIRECT = "direct"
    """Source holds `<target>_id`: each source row belongs to at most one target row."""
    REVERSE = "reverse"
    """Target holds `<source>_id`: each source row has many target rows."""
    MANY_TO_MANY = "many_to_many"
    """A join table holds `<source>_id` and `<target>_id`."""


class Relationship(BaseModel):
    """How rows of `source` relate to rows of `target`."""

    model_config = ConfigDict(frozen=True)

    kind: RelationshipKind
    source: str
    target: str
    join_table: Optional[str] = None

    @property
    def foreign_key(self) -> str:
        """The foreign key column: `<target>_id` in source for DIRECT, `<source>_id` otherwise."""
        if self.kind is RelationshipKind.DIRECT:
            return foreign_key(self.target)
        return foreign_key(self.source)

    @property
    def target_key(self) -> str:
        """Column of the join table referencing target (many-to-many only)."""
        return foreign_key(self.target)

    @property
    def is_many(self) -> bool:
        """True if a source row relates to a collection of target rows."""
        return self.kind is not RelationshipKind.DIRECT

    def reversed(self) -> Relationship:
        """The same relationship seen from target."""
        kind = {
            RelationshipKind.DIRECT: RelationshipKind.REVERSE,
            RelationshipKind.REVERSE: RelationshipKind.DIRECT,
            RelationshipKind.MANY_TO_MANY: RelationshipKind.MANY_TO_MANY,
        }[self.kind]
        return Relationship(kind=kind, source=self.target, target=self.source, join_table=self.join_table)


def resolve_relationship(source: str, target: str,
                         tables: Mapping[str, Collection[str]]) -> Relationship:
    """Infer how source relates to target.

    Args:
        source: Table the relation is read from.
        target: Related table.
        tables: Field names of every known table, keyed by table name.

    Raises:
        RelationNotFoundError: for self relations, unknown tables, or when no
            naming pattern applies.
    """
    if source == target:
        raise RelationNotFoundError(source, target, "self relations are not supported")
    for table in (source, target):
        if table not in tables:
            raise RelationNotFoundError(source, target, f"unknown table `{table}`")

    if foreign_key(target) in tables[source]:
        relationship = Relationship(kind=RelationshipKind.DIRECT, source=source, target=target)
    elif foreign_key(source) in tables[target]:
        relationship = Relationship(kind=RelationshipKind.REVERSE, source=source, target=target)
    else:
        join_table = join_table_name(source, target)
        if join_table not in tables or not {foreign_key(source), foreign_key(target)} <= set(tables[join_table]):
            raise RelationNotFoundError(source, target)
        relationship = Relationship(
            kind=RelationshipKind.MANY_TO_MANY, source=source, target=target, join_table=join_table
        )
    logger.debug("Resolved %s -> %s as %s", source, target, relationship.kind.value)
    return relationship


__all__ = [
    "Relationship",
    "RelationshipKind",
    "foreign_key",
    "join_table_name",
    "resolve_relationship",
]
