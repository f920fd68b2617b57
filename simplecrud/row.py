"""Rows, row collections and lazily resolved relations.

A relation is read by table name: `post.related("category")`. The value is
memoized on the row the first time it is resolved and never recomputed for
that Row instance. Resolving a relation on a RowCollection runs one query for
every member at once and stores each member's share in its own memo, members
without a match included (as None or an empty collection).
"""

from __future__ import annotations

import enum
import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator, Optional

from .errors import RelationResolvingError
from .relations import Relationship, RelationshipKind

if TYPE_CHECKING:
    from .entity import Entity
    from .query import Select

logger = logging.getLogger("simplecrud")


class RelationState(enum.Enum):
    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"


_RESOLVING = object()


class Relation:
    """Handle on the rows related to a Row or a RowCollection through a table name."""

    def __init__(self, owner: Row | RowCollection, name: str):
        """
        Raises:
            RelationNotFoundError: if no relationship can be inferred.
        """
        self.owner = owner
        self.name = name
        db = owner.entity.db
        self.relationship: Relationship = db.relationship(owner.entity.name, name)
        self.target: "Entity" = db.entity(name)

    @property
    def state(self) -> RelationState:
        return self.owner.relation_state(self.name)

    def query(self) -> "Select":
        """An unexecuted SELECT of the related rows, to refine before running."""
        return self.target.select_all().related_with(self.owner)

    def resolve(self) -> Row | RowCollection | None:
        """Return the related value, querying only if it is not memoized yet."""
        return self.owner._resolve(self)

    def __repr__(self) -> str:
        return f"<Relation {self.owner.entity.name} -> {self.name} ({self.relationship.kind.value}, {self.state.value})>"


def _resolve_batch(relation: Relation, rows: list[Row]) -> None:
    """Resolve relation for every row with one query and memoize each row's share."""
    name = relation.name
    relationship = relation.relationship
    target = relation.target
    logger.debug("Resolving %s -> %s for %d row(s)", relationship.source, name, len(rows))
    for row in rows:
        row._relations[name] = _RESOLVING
    try:
        query = target.select_all().constrain(relationship, rows)
        if relationship.kind is RelationshipKind.DIRECT:
            related = {row.id: row for row in query.get()}
            for row in rows:
                row._relations[name] = related.get(row._data.get(relationship.foreign_key))
            return
        groups: dict[Any, list[Row]] = defaultdict(list)
        if relationship.kind is RelationshipKind.REVERSE:
            for related_row in query.get():
                groups[related_row[relationship.foreign_key]].append(related_row)
        else:
            id_field = rows[0].entity.fields.get("id") if rows else None
            for link, related_row in query.iter_linked():
                groups[id_field.decode(link) if id_field else link].append(related_row)
        for row in rows:
            row._relations[name] = RowCollection(target, groups.get(row.id, ()))
    except BaseException:
        for row in rows:
            if row._relations.get(name) is _RESOLVING:
                del row._relations[name]
        raise


class Row:
    """One record: decoded field values, its entity, and the memo of resolved relations."""

    def __init__(self, entity: "Entity", data: dict[str, Any]):
        self._entity = entity
        self._data: dict[str, Any] = dict(data)
        self._relations: dict[str, Any] = {}

    @property
    def entity(self) -> "Entity":
        return self._entity

    @property
    def attributes(self):
        """Read-only attributes of the database context."""
        return self._entity.attributes

    @property
    def id(self) -> Any:
        return self._data.get("id")

    # --- field access ---

    def __getitem__(self, name: str) -> Any:
        try:
            return self._data[name]
        except KeyError:
            raise KeyError(f"`{self._entity.name}` row has no field `{name}`") from None

    def __setitem__(self, name: str, value: Any) -> None:
        if name not in self._entity.fields:
            raise ValueError(f"Invalid field for {self._entity.name}: {name}")
        self._data[name] = self._entity.fields[name].normalize(value)

    def __contains__(self, name: object) -> bool:
        return name in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def keys(self):
        return self._data.keys()

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def get(self, name: str) -> Any:
        """Return the value of field name, or a Relation handle for a related table.

        Raises:
            RelationNotFoundError: if name is neither a field nor a related table.
        """
        if name in self._data or name in self._entity.fields:
            return self._data.get(name)
        return self.relation(name)

    # --- relations ---

    def relation(self, name: str) -> Relation:
        return Relation(self, name)

    def related(self, name: str) -> Row | RowCollection | None:
        """Related Row (or None) for belongs-to, RowCollection otherwise."""
        return self.relation(name).resolve()

    def relation_state(self, name: str) -> RelationState:
        if name not in self._relations:
            return RelationState.UNRESOLVED
        if self._relations[name] is _RESOLVING:
            return RelationState.RESOLVING
        return RelationState.RESOLVED

    def _resolve(self, relation: Relation) -> Row | RowCollection | None:
        state = self.relation_state(relation.name)
        if state is RelationState.RESOLVING:
            raise RelationResolvingError(f"Relation `{relation.name}` of {self!r} is being resolved")
        if state is RelationState.UNRESOLVED:
            _resolve_batch(relation, [self])
        return self._relations[relation.name]

    def relate(self, other: Row) -> None:
        """Link other to this row: set the foreign key, or insert the join table row.

        Memoized relations are left as they are.
        """
        relationship = self._relationship_with(other)
        if relationship.kind is RelationshipKind.DIRECT:
            self[relationship.foreign_key] = other.id
            self.save()
        elif relationship.kind is RelationshipKind.REVERSE:
            other[relationship.foreign_key] = self.id
            other.save()
        else:
            join = self._entity.db.entity(relationship.join_table)
            join.insert().data({relationship.foreign_key: self.id, relationship.target_key: other.id}).run()

    def unrelate(self, other: Row) -> None:
        """Unlink other from this row: clear the foreign key, or delete the join table row."""
        relationship = self._relationship_with(other)
        if relationship.kind is RelationshipKind.DIRECT:
            if self._data.get(relationship.foreign_key) == other.id:
                self[relationship.foreign_key] = None
                self.save()
        elif relationship.kind is RelationshipKind.REVERSE:
            if other._data.get(relationship.foreign_key) == self.id:
                other[relationship.foreign_key] = None
                other.save()
        else:
            join = self._entity.db.entity(relationship.join_table)
            join.delete().where(
                f"{relationship.foreign_key} = :source_id", {"source_id": self.id}
            ).where(
                f"{relationship.target_key} = :target_id", {"target_id": other.id}
            ).run()

    def _relationship_with(self, other: Row) -> Relationship:
        if self.id is None or other.id is None:
            raise ValueError("Both rows must be saved before relating them")
        return self._entity.db.relationship(self._entity.name, other.entity.name)

    # --- persistence ---

    def save(self) -> Row:
        """Insert the row if it has no id or is absent, update it otherwise."""
        data = {name: value for name, value in self._data.items()
                if name != "id" and name in self._entity.fields}
        self._data["id"] = self._entity.set(self.id, data)
        return self

    def delete(self) -> None:
        """Delete the row from the database; its id becomes None."""
        if self.id is not None:
            self._entity.unset(self.id)
        self._data["id"] = None

    def call(self, name: str, *args, **kwargs) -> Any:
        """Call a row method of the entity's behavior bundle."""
        try:
            method = self._entity.behavior.row_methods[name]
        except KeyError:
            raise AttributeError(f"`{self._entity.name}` rows have no method `{name}`") from None
        return method(self, *args, **kwargs)

    def __repr__(self) -> str:
        return f"<Row {self._entity.name}#{self.id}>"


class RowCollection:
    """Rows of one entity keyed by id, iterated in insertion order."""

    def __init__(self, entity: "Entity", rows: Iterable[Row] = ()):
        self._entity = entity
        self._rows: dict[Any, Row] = {}
        self._relations: dict[str, RowCollection] = {}
        for row in rows:
            self.add(row)

    @property
    def entity(self) -> "Entity":
        return self._entity

    def add(self, row: Row) -> RowCollection:
        """Append a row; a row whose id is already present is ignored."""
        if row.id is None:
            raise ValueError("Cannot add a row without id to a RowCollection")
        self._rows.setdefault(row.id, row)
        return self

    def ids(self) -> list[Any]:
        return list(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows.values())

    def __len__(self) -> int:
        return len(self._rows)

    def __getitem__(self, id: Any) -> Row:
        return self._rows[id]

    def __contains__(self, id: object) -> bool:
        return id in self._rows

    def filter(self, predicate: Callable[[Row], bool]) -> RowCollection:
        return RowCollection(self._entity, (row for row in self if predicate(row)))

    def to_list(self) -> list[dict[str, Any]]:
        return [row.to_dict() for row in self]

    def get(self, name: str) -> list[Any] | Relation:
        """Return the values of field name for every row, or a Relation handle."""
        if name in self._entity.fields:
            return [row._data.get(name) for row in self]
        return self.relation(name)

    def relation(self, name: str) -> Relation:
        return Relation(self, name)

    def related(self, name: str) -> RowCollection:
        """Every row related to any member, resolved with one query for the whole collection."""
        return self.relation(name).resolve()

    def relation_state(self, name: str) -> RelationState:
        if name in self._relations:
            return RelationState.RESOLVED
        if any(row.relation_state(name) is RelationState.RESOLVING for row in self):
            return RelationState.RESOLVING
        return RelationState.UNRESOLVED

    def _resolve(self, relation: Relation) -> RowCollection:
        name = relation.name
        if name in self._relations:
            return self._relations[name]
        states = {row: row.relation_state(name) for row in self}
        if RelationState.RESOLVING in states.values():
            raise RelationResolvingError(f"Relation `{name}` is being resolved")
        pending = [row for row, state in states.items() if state is RelationState.UNRESOLVED]
        if pending or not self._rows:
            _resolve_batch(relation, pending)
        value = RowCollection(relation.target)
        for row in self:
            memo = row._relations[name]
            if isinstance(memo, Row):
                value.add(memo)
            elif memo is not None:
                for related_row in memo:
                    value.add(related_row)
        self._relations[name] = value
        return value

    def __repr__(self) -> str:
        return f"<RowCollection {self._entity.name} ids={self.ids()}>"


__all__ = ["Row", "RowCollection", "Relation", "RelationState"]
