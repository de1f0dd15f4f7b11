"""Compiled conversions — the runtime half of get().

Registry.resolve() classifies a target type once and compiles it into a tree
of these frozen dataclasses; convert() then applies the tree to a node.

| Rule | Conversion                | Source variant                        |
|------|---------------------------|---------------------------------------|
| 1    | ExactConversion           | the variant whose payload type is T   |
| 2    | IdentityConversion        | any                                   |
| 3    | IntegralConversion        | integer                               |
| 4    | FloatingConversion        | floating                              |
| 5    | TextConversion            | string                                |
| 6    | DurationConversion        | local_time                            |
| 7    | TimestampConversion       | local_date / local_datetime / offset  |
| 8    | SequenceConversion        | array                                 |
| 9    | FixedSequenceConversion   | array (exact length)                  |
| 10   | PairConversion            | array (exactly 2)                     |
| 11   | TupleConversion           | array (exactly N)                     |
| 12   | MapConversion             | table                                 |
| 13   | HookConversion            | whatever T.from_toml accepts          |
| 14   | ConverterConversion       | whatever the converter accepts        |

INV: fail-fast. The first failing element aborts the whole conversion and no
partial container escapes. Arity is checked before any element is converted.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tomlget._errors import ArityMismatchError, TypeMismatchError
from tomlget._value import ValueType

if TYPE_CHECKING:
    from collections.abc import Callable

    from tomlget._types import Converter
    from tomlget._value import Value

_TIMESTAMP_SOURCES = (
    ValueType.LOCAL_DATE,
    ValueType.LOCAL_DATETIME,
    ValueType.OFFSET_DATETIME,
)


def _require(node: Value, tag: ValueType, target: Any) -> Any:
    if node.type is not tag:
        raise TypeMismatchError((tag,), node.type, node.location, target)
    return node.payload


def _require_length(node: Value, size: int, target: Any) -> list[Value]:
    items: list[Value] = _require(node, ValueType.ARRAY, target)
    if len(items) != size:
        raise ArityMismatchError(size, len(items), node.location, target)
    return items


# ── Leaf rules ────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ExactConversion:
    """Return the stored payload of one exact variant."""

    target: type
    tag: ValueType

    def convert(self, node: Value) -> Any:
        return _require(node, self.tag, self.target)


@dataclass(frozen=True, slots=True)
class IdentityConversion:
    """Return the node itself."""

    def convert(self, node: Value) -> Value:
        return node


@dataclass(frozen=True, slots=True)
class IntegralConversion:
    target: type

    def convert(self, node: Value) -> Any:
        return self.target(_require(node, ValueType.INTEGER, self.target))


@dataclass(frozen=True, slots=True)
class FloatingConversion:
    target: type

    def convert(self, node: Value) -> Any:
        return self.target(_require(node, ValueType.FLOATING, self.target))


@dataclass(frozen=True, slots=True)
class TextConversion:
    """Text from the string variant.

    ``str`` gets the stored string object itself; subclasses are constructed.
    """

    target: type

    def convert(self, node: Value) -> Any:
        text = _require(node, ValueType.STRING, self.target).text
        return text if self.target is str else self.target(text)


@dataclass(frozen=True, slots=True)
class DurationConversion:
    """Time since midnight, truncated toward zero to microseconds."""

    target: type

    def convert(self, node: Value) -> Any:
        nanoseconds = _require(node, ValueType.LOCAL_TIME, self.target).total_nanoseconds
        return self.target(microseconds=nanoseconds // 1000)


@dataclass(frozen=True, slots=True)
class TimestampConversion:
    """A datetime from any of the three date-bearing variants.

    local_date and local_datetime become naive datetimes (midnight for a
    bare date); offset_datetime becomes an aware datetime.
    """

    target: type

    def convert(self, node: Value) -> Any:
        payload = node.payload
        match node.type:
            case ValueType.LOCAL_DATE:
                return self.target.combine(payload.to_date(), dt.time())
            case ValueType.LOCAL_DATETIME:
                return self.target.combine(payload.date.to_date(), payload.time.to_time())
            case ValueType.OFFSET_DATETIME:
                tz = payload.offset.to_timezone()
                return self.target.combine(
                    payload.date.to_date(), payload.time.to_time(tz)
                )
        raise TypeMismatchError(_TIMESTAMP_SOURCES, node.type, node.location, self.target)


# ── Compound rules ────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class SequenceConversion:
    """Element-wise conversion of an array, sized to the array.

    factory turns the converted list into the target container; None keeps
    the list as-is.
    """

    target: Any
    element: Conversion
    factory: Callable[[list[Any]], Any] | None = None

    def convert(self, node: Value) -> Any:
        items = _require(node, ValueType.ARRAY, self.target)
        result = [self.element.convert(item) for item in items]
        return result if self.factory is None else self.factory(result)


@dataclass(frozen=True, slots=True)
class FixedSequenceConversion:
    """Like SequenceConversion, but the array must hold exactly ``size`` elements."""

    target: Any
    element: Conversion
    size: int
    factory: Callable[[list[Any]], Any] | None = None

    def convert(self, node: Value) -> Any:
        items = _require_length(node, self.size, self.target)
        result = [self.element.convert(item) for item in items]
        return result if self.factory is None else self.factory(result)


@dataclass(frozen=True, slots=True)
class PairConversion:
    target: Any
    first: Conversion
    second: Conversion

    def convert(self, node: Value) -> tuple[Any, Any]:
        items = _require_length(node, 2, self.target)
        return (self.first.convert(items[0]), self.second.convert(items[1]))


@dataclass(frozen=True, slots=True)
class TupleConversion:
    """Positional conversion with one declared conversion per index."""

    target: Any
    elements: tuple[Conversion, ...]

    def convert(self, node: Value) -> tuple[Any, ...]:
        items = _require_length(node, len(self.elements), self.target)
        return tuple(c.convert(item) for c, item in zip(self.elements, items, strict=True))


@dataclass(frozen=True, slots=True)
class MapConversion:
    """One entry per table entry; keys are built from the table's text keys."""

    target: Any
    key: type
    value: Conversion
    factory: Callable[[dict[Any, Any]], Any] | None = None

    def convert(self, node: Value) -> Any:
        table = _require(node, ValueType.TABLE, self.target)
        if self.key is str:
            result = {k: self.value.convert(v) for k, v in table.items()}
        else:
            result = {self.key(k): self.value.convert(v) for k, v in table.items()}
        return result if self.factory is None else self.factory(result)


# ── Customization rules ───────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class HookConversion:
    """Default-construct T, then let it populate itself."""

    target: type

    def convert(self, node: Value) -> Any:
        instance = self.target()
        instance.from_toml(node)
        return instance


@dataclass(frozen=True, slots=True)
class ConverterConversion:
    """Delegate to an externally registered converter."""

    target: type
    converter: Converter[Any]

    def convert(self, node: Value) -> Any:
        return self.converter(node)


type Conversion = (
    ExactConversion
    | IdentityConversion
    | IntegralConversion
    | FloatingConversion
    | TextConversion
    | DurationConversion
    | TimestampConversion
    | SequenceConversion
    | FixedSequenceConversion
    | PairConversion
    | TupleConversion
    | MapConversion
    | HookConversion
    | ConverterConversion
)
