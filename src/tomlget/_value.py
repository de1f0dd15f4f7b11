"""Value — the dynamically tagged document node.

A Value holds exactly one payload and a ValueType tag naming its kind. The
constructor infers the tag from the payload and normalizes plain Python data
(str, datetime types, nested lists and dicts) into the canonical payloads:

| ValueType        | payload                 |
|------------------|-------------------------|
| BOOLEAN          | bool                    |
| INTEGER          | int                     |
| FLOATING         | float                   |
| STRING           | String                  |
| LOCAL_DATE       | LocalDate               |
| LOCAL_TIME       | LocalTime               |
| LOCAL_DATETIME   | LocalDatetime           |
| OFFSET_DATETIME  | OffsetDatetime          |
| ARRAY            | list[Value]             |
| TABLE            | dict[str, Value]        |
| EMPTY            | None                    |

INV: the tag always matches the payload. Values are mutable containers for
their children (arrays and tables own them); extraction only mutates a node
when asked to move out of it.
"""

from __future__ import annotations

import datetime as dt
import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tomlget._datetime import (
    LocalDate,
    LocalDatetime,
    LocalTime,
    OffsetDatetime,
)
from tomlget._errors import TypeMismatchError

if TYPE_CHECKING:
    from tomlget._diagnostics import Location


class ValueType(enum.Enum):
    """Variant tag of a Value."""

    EMPTY = "empty"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOATING = "floating"
    STRING = "string"
    LOCAL_DATE = "local_date"
    LOCAL_TIME = "local_time"
    LOCAL_DATETIME = "local_datetime"
    OFFSET_DATETIME = "offset_datetime"
    ARRAY = "array"
    TABLE = "table"

    def __str__(self) -> str:
        return self.value


class StringKind(enum.Enum):
    """How a string was written: "basic" or 'literal'."""

    BASIC = "basic"
    LITERAL = "literal"


@dataclass(frozen=True, slots=True)
class String:
    """The text payload, remembering how it was quoted."""

    text: str
    kind: StringKind = StringKind.BASIC

    def __str__(self) -> str:
        return self.text


class Value:
    """A document node holding exactly one tagged payload."""

    __slots__ = ("_location", "_payload", "_type")

    def __init__(self, payload: Any = None, location: Location | None = None) -> None:
        self._type, self._payload = _normalize(payload)
        self._location = location

    @property
    def type(self) -> ValueType:
        return self._type

    @property
    def location(self) -> Location | None:
        return self._location

    @property
    def payload(self) -> Any:
        """The stored payload, without a tag check."""
        return self._payload

    def is_type(self, tag: ValueType) -> bool:
        return self._type is tag

    def is_table(self) -> bool:
        return self._type is ValueType.TABLE

    def is_array(self) -> bool:
        return self._type is ValueType.ARRAY

    def cast(self, tag: ValueType) -> Any:
        """Return the payload if the node holds ``tag``.

        Raises:
            TypeMismatchError: the node holds a different variant.
        """
        if self._type is not tag:
            raise TypeMismatchError((tag,), self._type, self._location)
        return self._payload

    def take(self) -> Value:
        """Move the payload into a new Value and leave this one EMPTY."""
        moved = Value(location=self._location)
        moved._type, moved._payload = self._type, self._payload
        self.reset()
        return moved

    def restore(self, moved: Value) -> None:
        """Take back the payload of ``moved`` (the inverse of take())."""
        self._type, self._payload = moved._type, moved._payload
        moved.reset()

    def reset(self) -> None:
        """Drop the payload. The node becomes EMPTY; its location is kept."""
        self._type = ValueType.EMPTY
        self._payload = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self._type is other._type and self._payload == other._payload

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Value({self._type}, {self._payload!r})"


def _normalize(payload: Any) -> tuple[ValueType, Any]:
    """Infer the tag of a payload and convert it to its canonical form."""
    match payload:
        case None:
            return ValueType.EMPTY, None
        case Value():
            msg = "a Value cannot wrap another Value; use Value.take() or copy.deepcopy()"
            raise TypeError(msg)
        case bool():
            return ValueType.BOOLEAN, payload
        case int():
            return ValueType.INTEGER, int(payload)
        case float():
            return ValueType.FLOATING, float(payload)
        case String():
            return ValueType.STRING, payload
        case str():
            return ValueType.STRING, String(str(payload))
        case LocalDate():
            return ValueType.LOCAL_DATE, payload
        case LocalTime():
            return ValueType.LOCAL_TIME, payload
        case LocalDatetime():
            return ValueType.LOCAL_DATETIME, payload
        case OffsetDatetime():
            return ValueType.OFFSET_DATETIME, payload
        case dt.datetime():
            if payload.utcoffset() is None:
                return ValueType.LOCAL_DATETIME, LocalDatetime.from_datetime(payload)
            return ValueType.OFFSET_DATETIME, OffsetDatetime.from_datetime(payload)
        case dt.date():
            return ValueType.LOCAL_DATE, LocalDate.from_date(payload)
        case dt.time():
            if payload.tzinfo is not None:
                msg = "a time of day cannot carry a UTC offset"
                raise TypeError(msg)
            return ValueType.LOCAL_TIME, LocalTime.from_time(payload)
        case list() | tuple():
            return ValueType.ARRAY, [_child(item) for item in payload]
        case Mapping():
            table: dict[str, Value] = {}
            for key, item in payload.items():
                if not isinstance(key, str):
                    msg = f"table keys must be strings, got {type(key).__name__}"
                    raise TypeError(msg)
                table[key] = _child(item)
            return ValueType.TABLE, table
        case _:
            msg = f"cannot store {type(payload).__name__} in a Value"
            raise TypeError(msg)


def _child(item: Any) -> Value:
    return item if isinstance(item, Value) else Value(item)
