"""Type registry — classification, customization and the get()/find() entry points.

Registry.resolve() maps a requested target type to exactly one rule, in this
priority (first match wins, and the rules are built to be mutually exclusive):

     1  exact payload type (bool, int, float, String, LocalDate, LocalTime,
        LocalDatetime, OffsetDatetime, list, dict)
     2  Value                                     identity
     3  numbers.Integral, not bool/int            from integer
     4  numbers.Real, not Integral/float          from floating
     5  str and str subclasses                    from string
     6  datetime.timedelta                        from local_time
     7  datetime.datetime                         from date-bearing variants
     8  list[E], tuple[E, ...], deque[E], Sequence[E]
     9  Annotated[<rule 8 type>, FixedLength(n)]
    10  tuple[A, B]
    11  tuple[A, B, C, ...]  (N != 2)
    12  dict[K, V], Mapping[K, V], OrderedDict[K, V]  with K text-constructible
    13  classes with a from_toml(self, value) hook, default-constructible
    14  classes with a registered converter

Enums are excluded from rules 3-5; they need a converter. Anything else is an
UnsupportedConversionError, raised before the node is looked at.

Architecture follows the builder/frozen pattern:
- RegistryBuilder → .converter(T, fn) → .build() → Registry (immutable)
- Registry.resolve() compiles a target type into a Conversion (cached)
- Registry.get()/find() apply the compiled Conversion to a node
- module-level get()/find()/resolve() called from inside a hook or converter
  use the registry that is running the enclosing extraction

Example::

    registry = (
        RegistryBuilder()
        .converter(Point, lambda v: Point(*get(v, tuple[int, int])))
        .build()
    )
    origin = registry.find(doc, "origin", Point)
"""

from __future__ import annotations

import collections
import collections.abc
import contextvars
import copy
import datetime as dt
import enum
import logging
import numbers
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Annotated, Any, TypeAliasType, get_args, get_origin

from tomlget._conversions import (
    ConverterConversion,
    DurationConversion,
    ExactConversion,
    FixedSequenceConversion,
    FloatingConversion,
    HookConversion,
    IdentityConversion,
    IntegralConversion,
    MapConversion,
    PairConversion,
    SequenceConversion,
    TextConversion,
    TimestampConversion,
    TupleConversion,
)
from tomlget._datetime import LocalDate, LocalDatetime, LocalTime, OffsetDatetime
from tomlget._errors import (
    AmbiguousConversionError,
    UnsupportedConversionError,
    describe_type,
)
from tomlget._lookup import lookup
from tomlget._types import (
    Access,
    FixedLength,
    has_from_toml_hook,
    is_default_constructible,
)
from tomlget._value import String, Value, ValueType

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from tomlget._conversions import Conversion
    from tomlget._types import Converter

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Limits
# ═══════════════════════════════════════════════════════════════════════════════

MAX_DEPTH = 32

# Registry whose get/find is currently running; module-level calls made from
# hooks and converters resolve through it.
_ACTIVE_REGISTRY: contextvars.ContextVar[Registry | None] = contextvars.ContextVar(
    "tomlget_active_registry", default=None
)

# ═══════════════════════════════════════════════════════════════════════════════
# Rule tables
# ═══════════════════════════════════════════════════════════════════════════════

# Rule 1: payload type → variant tag.
_EXACT_TYPES: Mapping[type, ValueType] = MappingProxyType(
    {
        bool: ValueType.BOOLEAN,
        int: ValueType.INTEGER,
        float: ValueType.FLOATING,
        String: ValueType.STRING,
        LocalDate: ValueType.LOCAL_DATE,
        LocalTime: ValueType.LOCAL_TIME,
        LocalDatetime: ValueType.LOCAL_DATETIME,
        OffsetDatetime: ValueType.OFFSET_DATETIME,
        list: ValueType.ARRAY,
        dict: ValueType.TABLE,
    }
)

# Rule 8: sequence origin → container factory (None keeps the list).
_SEQUENCE_FACTORIES: Mapping[Any, Callable[[list[Any]], Any] | None] = MappingProxyType(
    {
        list: None,
        collections.abc.Sequence: None,
        collections.abc.MutableSequence: None,
        collections.deque: collections.deque,
    }
)

# Rule 12: mapping origin → container factory (None keeps the dict).
_MAP_FACTORIES: Mapping[Any, Callable[[dict[Any, Any]], Any] | None] = MappingProxyType(
    {
        dict: None,
        collections.abc.Mapping: None,
        collections.abc.MutableMapping: None,
        collections.OrderedDict: collections.OrderedDict,
    }
)


def _is_text_type(target: Any) -> bool:
    return (
        isinstance(target, type)
        and issubclass(target, str)
        and not issubclass(target, enum.Enum)
    )


def _leaf_conversion(target: type) -> Conversion | None:
    """Rules 1-7 for a plain class, or None if none applies."""
    tag = _EXACT_TYPES.get(target)
    if tag is not None:
        return ExactConversion(target, tag)
    if target is Value:
        return IdentityConversion()
    if not issubclass(target, enum.Enum):
        if issubclass(target, numbers.Integral) and not issubclass(target, bool):
            return IntegralConversion(target)
        if issubclass(target, numbers.Real):
            return FloatingConversion(target)
        if issubclass(target, str):
            return TextConversion(target)
    if issubclass(target, dt.timedelta):
        return DurationConversion(target)
    if issubclass(target, dt.datetime):
        return TimestampConversion(target)
    return None


# ═══════════════════════════════════════════════════════════════════════════════
# Builder
# ═══════════════════════════════════════════════════════════════════════════════


class RegistryBuilder:
    """Builder for constructing a Registry.

    Register converters for user types, then call build() to produce an
    immutable Registry. Registration rejects anything that would make a
    type's conversion ambiguous.
    """

    def __init__(self) -> None:
        self._converters: dict[type, Converter[Any]] = {}

    def converter[T](self, target: type[T], fn: Converter[T]) -> RegistryBuilder:
        """Register ``fn`` as the conversion for ``target``.

        Raises:
            AmbiguousConversionError: target is not a class, already has a
                converter, defines a from_toml hook, or is handled by a
                built-in rule.
        """
        if not isinstance(target, type):
            raise AmbiguousConversionError(
                target, "converters can only be registered for classes"
            )
        if target in self._converters:
            raise AmbiguousConversionError(target, "a converter is already registered")
        if has_from_toml_hook(target):
            raise AmbiguousConversionError(target, "the type defines a from_toml hook")
        if _leaf_conversion(target) is not None:
            raise AmbiguousConversionError(target, "the type is handled by a built-in rule")
        self._converters[target] = fn
        logger.debug("registered converter for %s", describe_type(target))
        return self

    def build(self) -> Registry:
        """Freeze the registry. No further registration is possible."""
        logger.debug("froze registry with %d converter(s)", len(self._converters))
        return Registry(_converters=MappingProxyType(dict(self._converters)))


# ═══════════════════════════════════════════════════════════════════════════════
# Registry
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Registry:
    """Immutable set of converters plus a per-type resolution cache.

    Constructed via RegistryBuilder. A Registry() with no converters handles
    every built-in rule and the from_toml hook.
    """

    _converters: MappingProxyType[type, Converter[Any]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    _cache: dict[Any, Conversion] = field(
        default_factory=dict, repr=False, compare=False
    )

    def get(self, value: Value, target: Any, *, access: Access = Access.BORROW) -> Any:
        """Extract ``value`` as ``target``.

        Raises:
            UnsupportedConversionError: target matches no rule (raised
                before the node is inspected)
            TypeMismatchError: a leaf rule met the wrong variant
            ArityMismatchError: a fixed-arity target met a different length
        """
        conversion = self.resolve(target)
        if not isinstance(value, Value):
            msg = f"get() expects a Value, got {type(value).__name__}"
            raise TypeError(msg)
        return self._run(conversion, value, access)

    def find(
        self,
        table: Value | Mapping[str, Value],
        key: str,
        target: Any = None,
        *,
        name: str | None = None,
        access: Access = Access.BORROW,
    ) -> Any:
        """Look up ``key`` in a table and extract the entry as ``target``.

        Without a target the entry node itself is returned: borrowed,
        deep-copied, or moved out of the table according to ``access``.

        Raises:
            KeyNotFoundError: the key is absent
            TypeMismatchError: ``table`` is a node that is not a table, or
                the entry does not fit ``target``
        """
        conversion = None if target is None else self.resolve(target)
        entry = lookup(table, key, name)
        if conversion is None:
            match access:
                case Access.BORROW:
                    return entry
                case Access.COPY:
                    return copy.deepcopy(entry)
                case Access.MOVE:
                    return entry.take()
        return self._run(conversion, entry, access)

    def resolve(self, target: Any) -> Conversion:
        """Classify ``target`` and compile it into a Conversion (cached).

        Raises:
            UnsupportedConversionError: no rule applies to target or to one
                of its element/value types.
        """
        try:
            cached = self._cache.get(target)
        except TypeError:
            # Unhashable Annotated metadata; compile without caching.
            return self._classify(target, 0)
        if cached is None:
            cached = self._classify(target, 0)
            self._cache[target] = cached
            logger.debug("resolved %s to %s", describe_type(target), type(cached).__name__)
        return cached

    def _run(self, conversion: Conversion, node: Value, access: Access) -> Any:
        token = _ACTIVE_REGISTRY.set(self)
        try:
            return _apply(conversion, node, access)
        finally:
            _ACTIVE_REGISTRY.reset(token)

    @property
    def converter_count(self) -> int:
        """Number of registered converters."""
        return len(self._converters)

    def contains_converter(self, target: type) -> bool:
        """Check if a converter is registered for ``target``."""
        return target in self._converters

    def converter_types(self) -> list[type]:
        """Return all types with a registered converter (sorted by name)."""
        return sorted(self._converters, key=describe_type)

    # ── Classification ────────────────────────────────────────────────────

    def _classify(self, target: Any, depth: int) -> Conversion:
        if depth > MAX_DEPTH:
            raise UnsupportedConversionError(
                target, f"type nesting exceeds maximum depth {MAX_DEPTH}"
            )
        if isinstance(target, TypeAliasType):
            return self._classify(target.__value__, depth + 1)

        origin = get_origin(target)
        if origin is None:
            if not isinstance(target, type):
                raise UnsupportedConversionError(target, "not a class or generic type")
            leaf = _leaf_conversion(target)
            if leaf is not None:
                return leaf
            return self._classify_custom(target)

        args = get_args(target)
        if origin is Annotated:
            return self._classify_annotated(target, args[0], depth)

        sequence = self._sequence_parts(target, origin, args, depth)
        if sequence is not None:
            element, factory = sequence
            return SequenceConversion(target, element, factory)

        if origin is tuple:
            elements = tuple(self._classify(a, depth + 1) for a in args)
            if len(elements) == 2:
                return PairConversion(target, elements[0], elements[1])
            return TupleConversion(target, elements)

        if origin in _MAP_FACTORIES:
            if len(args) != 2:
                raise UnsupportedConversionError(target, "map types need key and value types")
            key, value = args
            if not _is_text_type(key):
                raise UnsupportedConversionError(
                    target, f"map key {describe_type(key)} is not constructible from text"
                )
            return MapConversion(
                target, key, self._classify(value, depth + 1), _MAP_FACTORIES[origin]
            )

        raise UnsupportedConversionError(target, "no rule matches this generic type")

    def _classify_annotated(self, target: Any, base: Any, depth: int) -> Conversion:
        sizes = [m for m in target.__metadata__ if isinstance(m, FixedLength)]
        if not sizes:
            return self._classify(base, depth + 1)
        if len(sizes) > 1:
            raise UnsupportedConversionError(target, "more than one FixedLength given")
        sequence = self._sequence_parts(base, get_origin(base), get_args(base), depth)
        if sequence is None:
            raise UnsupportedConversionError(
                target, "FixedLength only applies to resizable sequence types"
            )
        element, factory = sequence
        return FixedSequenceConversion(target, element, sizes[0].size, factory)

    def _sequence_parts(
        self, target: Any, origin: Any, args: tuple[Any, ...], depth: int
    ) -> tuple[Conversion, Callable[[list[Any]], Any] | None] | None:
        """Element conversion and factory for a rule 8 type, else None."""
        if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
            return self._classify(args[0], depth + 1), tuple
        if origin in _SEQUENCE_FACTORIES:
            if len(args) != 1:
                raise UnsupportedConversionError(target, "sequence types need an element type")
            return self._classify(args[0], depth + 1), _SEQUENCE_FACTORIES[origin]
        return None

    def _classify_custom(self, target: type) -> Conversion:
        """Rules 13 and 14: member hook first, then registered converter."""
        if has_from_toml_hook(target):
            if not is_default_constructible(target):
                raise UnsupportedConversionError(
                    target, "from_toml hook requires a default-constructible type"
                )
            return HookConversion(target)
        converter = self._converters.get(target)
        if converter is not None:
            return ConverterConversion(target, converter)
        raise UnsupportedConversionError(
            target, "no built-in rule, no from_toml hook and no registered converter"
        )


def _apply(conversion: Conversion, node: Value, access: Access) -> Any:
    match access:
        case Access.BORROW:
            return conversion.convert(node)
        case Access.COPY:
            return conversion.convert(copy.deepcopy(node))
        case Access.MOVE:
            # Results may keep the node they were given; convert the detached
            # payload and hand it back to the source only on failure.
            moved = node.take()
            try:
                return conversion.convert(moved)
            except BaseException:
                node.restore(moved)
                raise
    msg = f"unknown access mode: {access!r}"
    raise ValueError(msg)


# ═══════════════════════════════════════════════════════════════════════════════
# Module-level entry points (active or default registry)
# ═══════════════════════════════════════════════════════════════════════════════

DEFAULT_REGISTRY = Registry()


def _current_registry(registry: Registry | None) -> Registry:
    """Explicit registry, else the one running an enclosing get/find, else default."""
    if registry is not None:
        return registry
    active = _ACTIVE_REGISTRY.get()
    return DEFAULT_REGISTRY if active is None else active


def get(
    value: Value,
    target: Any,
    *,
    access: Access = Access.BORROW,
    registry: Registry | None = None,
) -> Any:
    """Extract ``value`` as ``target``. See Registry.get()."""
    return _current_registry(registry).get(value, target, access=access)


def find(
    table: Value | Mapping[str, Value],
    key: str,
    target: Any = None,
    *,
    name: str | None = None,
    access: Access = Access.BORROW,
    registry: Registry | None = None,
) -> Any:
    """Look up ``key`` and extract it as ``target``. See Registry.find()."""
    return _current_registry(registry).find(table, key, target, name=name, access=access)


def resolve(target: Any, *, registry: Registry | None = None) -> Conversion:
    """Compile ``target`` without converting anything. See Registry.resolve()."""
    return _current_registry(registry).resolve(target)
