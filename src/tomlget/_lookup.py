"""Keyed lookup — the table-membership half of find().

lookup() accepts either a table node or a table-like mapping of nodes (for
example the dict returned by ``get(node, dict)``) and returns the entry node.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tomlget._errors import KeyNotFoundError, TypeMismatchError
from tomlget._value import Value, ValueType

UNKNOWN_TABLE = "unknown table"


def lookup(table: Value | Mapping[str, Value], key: str, name: str | None = None) -> Value:
    """Return the entry node stored under ``key``.

    Raises:
        TypeMismatchError: ``table`` is a node that does not hold a table.
        KeyNotFoundError: the key is absent. For a node the message points
            at the table's location; for a mapping it names the table
            (``name``, default "unknown table").
    """
    if isinstance(table, Value):
        if not table.is_table():
            raise TypeMismatchError((ValueType.TABLE,), table.type, table.location)
        entries: dict[str, Value] = table.payload
        if key not in entries:
            raise KeyNotFoundError(key, name, table.location)
        return entries[key]

    if isinstance(table, Mapping):
        if key not in table:
            raise KeyNotFoundError(key, name if name is not None else UNKNOWN_TABLE)
        entry: Any = table[key]
        if not isinstance(entry, Value):
            msg = f"table entry {key!r} must be a Value, got {type(entry).__name__}"
            raise TypeError(msg)
        return entry

    msg = f"find() expects a Value or a mapping of Values, got {type(table).__name__}"
    raise TypeError(msg)
