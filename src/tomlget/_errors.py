"""Error types raised by extraction, lookup, registration and loading.

Every error derives from ExtractionError and keeps its structured fields as
attributes; the message is rendered once, at construction, with the node's
source location when one is known.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from tomlget._diagnostics import format_underline

if TYPE_CHECKING:
    from tomlget._diagnostics import Location
    from tomlget._value import ValueType


def describe_type(target: Any) -> str:
    """Short human-readable name for a requested target type."""
    if isinstance(target, type) and not getattr(target, "__args__", None):
        module = target.__module__
        if module in ("builtins", "tomlget._value", "tomlget._datetime"):
            return target.__qualname__
        return f"{module}.{target.__qualname__}"
    return repr(target)


def _annotate(head: str, location: Location | None, label: str) -> str:
    if location is None:
        return f"{head}: {label}"
    return format_underline(head, [(location, label)])


class ExtractionError(Exception):
    """Base class for all tomlget errors."""


class TypeMismatchError(ExtractionError, TypeError):
    """A leaf rule required a variant the node does not hold."""

    def __init__(
        self,
        expected: tuple[ValueType, ...],
        actual: ValueType,
        location: Location | None = None,
        target: Any = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        self.location = location
        self.target = target
        wanted = " or ".join(str(t) for t in expected)
        head = f"[error] bad_cast to {wanted}"
        if target is not None:
            head = f"{head} (requested {describe_type(target)})"
        super().__init__(_annotate(head, location, f"the actual type is {actual}"))


class ArityMismatchError(ExtractionError, ValueError):
    """A fixed-arity target does not match the source array length."""

    def __init__(
        self,
        expected: int,
        actual: int,
        location: Location | None = None,
        target: Any = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        self.location = location
        self.target = target
        name = describe_type(target) if target is not None else "fixed-size target"
        head = (
            f"[error] {name} requires {expected} elements, "
            f"but there are {actual} elements in the array"
        )
        super().__init__(_annotate(head, location, "here"))


class KeyNotFoundError(ExtractionError, LookupError):
    """find() was asked for a key the table does not contain."""

    def __init__(
        self,
        key: str,
        name: str | None = None,
        location: Location | None = None,
    ) -> None:
        self.key = key
        self.name = name
        self.location = location
        head = f'[error] key "{key}" not found'
        if name is not None:
            head = f"{head} in {name}"
        if location is None:
            super().__init__(head)
        else:
            super().__init__(format_underline(head, [(location, "in this table")]))


class UnsupportedConversionError(ExtractionError, TypeError):
    """The requested type matches no rule and has no customization path."""

    def __init__(self, target: Any, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"[error] no conversion to {describe_type(target)}: {reason}")


class AmbiguousConversionError(ExtractionError):
    """A converter registration conflicts with another conversion path."""

    def __init__(self, target: Any, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(
            f"[error] cannot register a converter for {describe_type(target)}: {reason}"
        )


class DocumentError(ExtractionError, ValueError):
    """Loaded data cannot be represented as a document tree."""

    def __init__(self, message: str, location: Location | None = None) -> None:
        self.location = location
        if location is None:
            super().__init__(f"[error] {message}")
        else:
            super().__init__(format_underline(f"[error] {message}", [(location, "here")]))
