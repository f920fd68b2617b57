"""Entity: one table, its fields, query factories and keyed access."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField

from .codecs import Codec
from .field import Field
from .query import Count, Delete, Insert, Select, Sum, Update
from .row import Row

if TYPE_CHECKING:
    from .database import Database

logger = logging.getLogger("simplecrud")


class Behavior(BaseModel):
    """Customization bundle for one entity.

    Attributes:
        codecs: Codec per field name, taking precedence over the FieldFactory.
        entity_methods: Functions called as `entity.call(name, *args)`; they receive the entity first.
        row_methods: Functions called as `row.call(name, *args)`; they receive the row first.
        init: Called with the entity once, when the database creates it.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    codecs: dict[str, Codec] = PydanticField(default_factory=dict)
    entity_methods: dict[str, Callable[..., Any]] = PydanticField(default_factory=dict)
    row_methods: dict[str, Callable[..., Any]] = PydanticField(default_factory=dict)
    init: Optional[Callable[..., Any]] = None


def behaviors_from(behaviors: Mapping[str, Behavior]) -> Callable[[str], Optional[Behavior]]:
    """Build an entity resolver looking up a Behavior by table name."""
    def resolver(name: str) -> Optional[Behavior]:
        return behaviors.get(name)
    return resolver


class Entity:
    """A table of the database.

    Query factories return a fresh builder on each call. Keyed access
    (`get`, `has`, `set`, `unset`, and the matching `entity[id]` operators)
    work on the `id` primary key.
    """

    def __init__(self, name: str, db: "Database", behavior: Optional[Behavior] = None):
        self.name = name
        self.db = db
        self.behavior = behavior or Behavior()
        self._fields: Optional[dict[str, Field]] = None
        if self.behavior.init is not None:
            self.behavior.init(self)

    @property
    def attributes(self) -> Mapping[str, Any]:
        """Read-only attributes of the database context."""
        return self.db.attributes

    @property
    def fields(self) -> dict[str, Field]:
        """Fields of the table, introspected on first access."""
        if self._fields is None:
            with self.db.lock:
                if self._fields is None:
                    self._fields = self.db.field_factory.make_fields(
                        self.db.columns(self.name), self.behavior.codecs
                    )
        return self._fields

    # --- conversion ---

    def encode(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Convert Python values to database values.

        Raises:
            ValueError: for a key that is not a field.
        """
        fields = self.fields
        encoded = {}
        for name, value in data.items():
            if name not in fields:
                raise ValueError(f"Invalid key found in data for {self.name}: {name}")
            encoded[name] = fields[name].encode(value)
        return encoded

    def decode(self, raw: Mapping[str, Any]) -> dict[str, Any]:
        """Convert database values to Python values; unknown columns are kept as they are."""
        fields = self.fields
        return {
            name: fields[name].decode(value) if name in fields else value
            for name, value in raw.items()
        }

    def make_row(self, raw: Mapping[str, Any]) -> Row:
        """Build a Row from a raw database row."""
        return Row(self, self.decode(raw))

    def create(self, data: Optional[Mapping[str, Any]] = None) -> Row:
        """Build an unsaved Row: every field present, values normalized by their codec."""
        data = dict(data or {})
        fields = self.fields
        unknown = set(data) - set(fields)
        if unknown:
            raise ValueError(f"Invalid key(s) found in data for {self.name}: {', '.join(sorted(unknown))}")
        values = {name: None for name in fields}
        values.update({name: fields[name].normalize(value) for name, value in data.items()})
        return Row(self, values)

    # --- query factories ---

    def select_one(self) -> Select:
        return Select(entity=self, one=True)

    def select_all(self) -> Select:
        return Select(entity=self)

    def insert(self) -> Insert:
        return Insert(entity=self)

    def update(self) -> Update:
        return Update(entity=self)

    def delete(self) -> Delete:
        return Delete(entity=self)

    def count(self) -> Count:
        return Count(entity=self)

    def sum(self, field: str) -> Sum:
        return Sum(entity=self, field=field)

    # --- keyed access ---

    def get(self, id: Any) -> Optional[Row]:
        """Return the row with this id, or None."""
        return self.select_one().by_id(id).get()

    def has(self, id: Any) -> bool:
        return id is not None and self.count().by_id(id).get() > 0

    def set(self, id: Any, data: Mapping[str, Any]) -> Any:
        """Insert (id is None or absent) or update (id present) a row; return its id."""
        data = {name: value for name, value in data.items() if name != "id"}
        if self.has(id):
            if data:
                self.update().data(data).by_id(id).run()
            return id
        if id is not None:
            data["id"] = id
        return self.insert().data(data).get()

    def unset(self, id: Any) -> int:
        """Delete the row with this id; return the number of deleted rows."""
        return self.delete().by_id(id).get()

    __getitem__ = get
    __contains__ = has
    __setitem__ = set
    __delitem__ = unset

    def call(self, name: str, *args, **kwargs) -> Any:
        """Call a method of the behavior bundle."""
        try:
            method = self.behavior.entity_methods[name]
        except KeyError:
            raise AttributeError(f"Entity `{self.name}` has no method `{name}`") from None
        return method(self, *args, **kwargs)

    def __repr__(self) -> str:
        return f"<Entity {self.name}>"


__all__ = ["Behavior", "Entity", "behaviors_from"]
