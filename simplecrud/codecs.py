"""Codecs: bidirectional conversion between database values and Python values.

A codec is stateless; one instance is shared by every field using it. `encode`
turns a Python value into what the driver stores, `decode` turns what the
driver returns into a Python value. `None` always maps to `None`.
"""

from __future__ import annotations

import datetime
import json
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, TypeAdapter

_INT = TypeAdapter(int)
_FLOAT = TypeAdapter(float)
_BOOL = TypeAdapter(bool)
_DATETIME = TypeAdapter(datetime.datetime)
_DATE = TypeAdapter(datetime.date)


class Codec(BaseModel, ABC):
    """Base for codecs."""

    model_config = ConfigDict(frozen=True)

    NAME: ClassVar[str] = ""

    @abstractmethod
    def encode(self, value: Any) -> Any:
        """Convert a Python value to its database representation."""

    @abstractmethod
    def decode(self, value: Any) -> Any:
        """Convert a database value to its Python representation."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class RawCodec(Codec):
    """Identity codec for fields without a known type."""

    NAME: ClassVar[str] = "raw"

    def encode(self, value):
        return value

    def decode(self, value):
        return value


class IntegerCodec(Codec):
    NAME: ClassVar[str] = "integer"

    def encode(self, value):
        if value is None or value == "":
            return None
        return _INT.validate_python(value)

    def decode(self, value):
        return self.encode(value)


class FloatCodec(Codec):
    NAME: ClassVar[str] = "float"

    def encode(self, value):
        if value is None or value == "":
            return None
        return _FLOAT.validate_python(value)

    def decode(self, value):
        return self.encode(value)


class BooleanCodec(Codec):
    """Booleans are stored as 1/0."""

    NAME: ClassVar[str] = "boolean"

    def encode(self, value):
        if value is None:
            return None
        return int(_BOOL.validate_python(value))

    def decode(self, value):
        if value is None:
            return None
        return _BOOL.validate_python(value)


class DatetimeCodec(Codec):
    """Datetimes are stored as `YYYY-MM-DD HH:MM:SS` strings.

    Sub-second precision and timezone information are dropped on encode, so
    `decode(encode(v))` equals `v` truncated to the second.
    """

    NAME: ClassVar[str] = "datetime"
    FORMAT: ClassVar[str] = "%Y-%m-%d %H:%M:%S"

    def encode(self, value):
        value = self.decode(value)
        if value is None:
            return None
        return value.strftime(self.FORMAT)

    def decode(self, value):
        if value is None or value == "" or str(value).startswith("0000-00-00"):
            return None
        value = _DATETIME.validate_python(value)
        return value.replace(microsecond=0, tzinfo=None)


class DateCodec(Codec):
    """Dates are stored as `YYYY-MM-DD` strings."""

    NAME: ClassVar[str] = "date"
    FORMAT: ClassVar[str] = "%Y-%m-%d"

    def encode(self, value):
        value = self.decode(value)
        if value is None:
            return None
        return value.strftime(self.FORMAT)

    def decode(self, value):
        if value is None or value == "" or str(value).startswith("0000-00-00"):
            return None
        if isinstance(value, datetime.datetime):
            return value.date()
        return _DATE.validate_python(value)


class JsonCodec(Codec):
    NAME: ClassVar[str] = "json"

    def encode(self, value):
        if value is None:
            return None
        return json.dumps(value, ensure_ascii=False)

    def decode(self, value):
        if not isinstance(value, (str, bytes)):
            # drivers such as psycopg2 already decode json columns
            return value
        return json.loads(value)


class SetCodec(Codec):
    """Sets of strings stored comma-separated (MySQL SET columns)."""

    NAME: ClassVar[str] = "set"

    def encode(self, value):
        if value is None:
            return None
        return ",".join(sorted(str(item) for item in value))

    def decode(self, value):
        if value is None:
            return None
        if isinstance(value, (set, frozenset, list, tuple)):
            return set(value)
        return set(value.split(",")) if value else set()


RAW = RawCodec()
INTEGER = IntegerCodec()
FLOAT = FloatCodec()
BOOLEAN = BooleanCodec()
DATETIME = DatetimeCodec()
DATE = DateCodec()
JSON = JsonCodec()
SET = SetCodec()


__all__ = [
    "Codec",
    "RawCodec",
    "IntegerCodec",
    "FloatCodec",
    "BooleanCodec",
    "DatetimeCodec",
    "DateCodec",
    "JsonCodec",
    "SetCodec",
    "RAW",
    "INTEGER",
    "FLOAT",
    "BOOLEAN",
    "DATETIME",
    "DATE",
    "JSON",
    "SET",
]
