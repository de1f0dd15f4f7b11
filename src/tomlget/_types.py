"""Core protocols, markers and type aliases for tomlget.

- FromToml is the member-hook customization point
- Converter is the shape of an externally registered conversion
- FixedLength marks a sequence target as fixed-size
- Access selects borrow / copy / move semantics for get() and find()
"""

from __future__ import annotations

import enum
import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tomlget._value import Value


@runtime_checkable
class FromToml(Protocol):
    """Populate a default-constructed instance from a document node.

    A class implementing this protocol is extracted by calling ``T()`` and
    then ``instance.from_toml(value)``. The hook may call get()/find()
    recursively; any error it raises propagates unchanged.
    """

    def from_toml(self, value: Value, /) -> None: ...


# An external conversion: build a T from a node.
type Converter[T] = Callable[[Value], T]


@dataclass(frozen=True, slots=True)
class FixedLength:
    """Annotated metadata fixing the length of a sequence target.

    >>> from typing import Annotated
    >>> Triple = Annotated[list[int], FixedLength(3)]
    """

    size: int

    def __post_init__(self) -> None:
        if self.size < 0:
            msg = f"FixedLength size must be non-negative, got {self.size}"
            raise ValueError(msg)


class Access(enum.Enum):
    """How an extraction treats the source node.

    BORROW  results may alias the source tree (no copying)
    COPY    the source is deep-copied first; results never alias it
    MOVE    on success the consumed node is detached and left EMPTY
    """

    BORROW = "borrow"
    COPY = "copy"
    MOVE = "move"


def has_from_toml_hook(cls: type) -> bool:
    """True if ``cls`` defines ``from_toml`` as a plain instance method."""
    try:
        attr = inspect.getattr_static(cls, "from_toml")
    except AttributeError:
        return False
    if isinstance(attr, (classmethod, staticmethod)):
        return False
    return callable(attr)


def is_default_constructible(cls: type) -> bool:
    """True if ``cls()`` is a valid call according to its signature."""
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        # No introspectable signature (some builtins).
        # Assume a no-argument constructor.
        return True
    return all(
        p.default is not inspect.Parameter.empty
        or p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        for p in signature.parameters.values()
    )