"""Field descriptors and the codec registry that assigns a codec to each column.

A field's codec is chosen, first match wins, from:

1. the codecs given by the entity's behavior bundle (by field name);
2. codecs registered on the FieldFactory by field name;
3. name patterns (`id`, `*_id`, `pubdate`, `*At`, `active`, `isX`/`inX`/`hasX`);
4. the column type reported by the database;
5. the raw (identity) codec.
"""

from __future__ import annotations

import re
from typing import Any, ClassVar, Iterable, Mapping, Optional
from re import Pattern

from pydantic import BaseModel, ConfigDict

from .codecs import BOOLEAN, DATE, DATETIME, FLOAT, INTEGER, JSON, RAW, SET, Codec
from .dialects import ColumnInfo


def normalize_type(raw_type: str) -> str:
    """Lower-case a column type and drop its length and modifiers (`int(11) unsigned` -> `int`)."""
    words = (raw_type or "").lower().split("(")[0].split()
    return words[0] if words else ""


class Field(BaseModel):
    """A column of an entity with the codec converting its values."""

    model_config = ConfigDict(frozen=True)

    name: str
    raw_type: str = ""
    codec: Codec = RAW

    def encode(self, value: Any) -> Any:
        return self.codec.encode(value)

    def decode(self, value: Any) -> Any:
        return self.codec.decode(value)

    def normalize(self, value: Any) -> Any:
        """Return value as it would read back after a write."""
        return self.codec.decode(self.codec.encode(value))


class FieldFactory:
    """Registry assigning codecs to columns by name and type."""

    NAME_PATTERNS: ClassVar[tuple[tuple[Pattern[str], Codec], ...]] = (
        (re.compile(r"^id$"), INTEGER),
        (re.compile(r"_id$"), INTEGER),
        (re.compile(r"^pubdate$"), DATETIME),
        (re.compile(r"At$"), DATETIME),
        (re.compile(r"^active$"), BOOLEAN),
        (re.compile(r"^(is|in|has)[A-Z]"), BOOLEAN),
    )

    TYPES: ClassVar[dict[str, Codec]] = {
        "int": INTEGER,
        "integer": INTEGER,
        "tinyint": INTEGER,
        "smallint": INTEGER,
        "mediumint": INTEGER,
        "bigint": INTEGER,
        "serial": INTEGER,
        "bigserial": INTEGER,
        "float": FLOAT,
        "real": FLOAT,
        "double": FLOAT,
        "decimal": FLOAT,
        "numeric": FLOAT,
        "datetime": DATETIME,
        "timestamp": DATETIME,
        "date": DATE,
        "json": JSON,
        "jsonb": JSON,
        "set": SET,
        "bool": BOOLEAN,
        "boolean": BOOLEAN,
    }

    def __init__(self):
        self._names: dict[str, Codec] = {}
        self._patterns: list[tuple[Pattern[str], Codec]] = list(self.NAME_PATTERNS)
        self._types: dict[str, Codec] = dict(self.TYPES)

    def register_name(self, name: str, codec: Codec) -> "FieldFactory":
        """Use codec for every field called name."""
        self._names[name] = codec
        return self

    def register_pattern(self, pattern: str | Pattern[str], codec: Codec) -> "FieldFactory":
        """Use codec for field names matching pattern; checked before the default patterns."""
        self._patterns.insert(0, (re.compile(pattern), codec))
        return self

    def register_type(self, raw_type: str, codec: Codec) -> "FieldFactory":
        """Use codec for columns of the given database type."""
        self._types[normalize_type(raw_type)] = codec
        return self

    def codec_for(self, name: str, raw_type: str = "",
                  overrides: Optional[Mapping[str, Codec]] = None) -> Codec:
        """Return the codec for a column."""
        if overrides and name in overrides:
            return overrides[name]
        if name in self._names:
            return self._names[name]
        for pattern, codec in self._patterns:
            if pattern.search(name):
                return codec
        return self._types.get(normalize_type(raw_type), RAW)

    def make(self, column: ColumnInfo, overrides: Optional[Mapping[str, Codec]] = None) -> Field:
        """Build the Field for an introspected column."""
        return Field(
            name=column.name,
            raw_type=column.raw_type,
            codec=self.codec_for(column.name, column.raw_type, overrides),
        )

    def make_fields(self, columns: Iterable[ColumnInfo],
                    overrides: Optional[Mapping[str, Codec]] = None) -> dict[str, Field]:
        """Build the Field of every column, keyed by name, in column order."""
        return {column.name: self.make(column, overrides) for column in columns}


__all__ = ["Field", "FieldFactory", "normalize_type"]
