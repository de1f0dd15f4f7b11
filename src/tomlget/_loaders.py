"""Document builders: plain Python data, TOML text and YAML text → Value trees.

  dict / list / scalars → from_python()  → Value
  TOML text             → loads()/load() → Value   (stdlib tomllib)
  YAML text             → load_yaml()    → Value   (PyYAML, with locations)

Only load_yaml() records where each node came from: it walks PyYAML's
composed node graph, whose marks carry line and column. tomllib returns
plain Python objects, so TOML-built trees carry no locations.

Data with no document representation (null, non-string keys, binary, sets)
raises DocumentError. Nesting deeper than MAX_DOCUMENT_DEPTH is rejected, and
load_yaml() stops once alias expansion would build more than MAX_DOCUMENT_NODES
nodes.
"""

from __future__ import annotations

import datetime as dt
import logging
import tomllib
from collections.abc import Mapping
from typing import IO, TYPE_CHECKING, Any

import yaml

from tomlget._diagnostics import Location
from tomlget._errors import DocumentError
from tomlget._value import String, StringKind, Value

if TYPE_CHECKING:
    from typing import BinaryIO

logger = logging.getLogger(__name__)

MAX_DOCUMENT_DEPTH = 128
MAX_DOCUMENT_NODES = 100_000

_SCALARS = (bool, int, float, str, dt.date, dt.time)


# ═══════════════════════════════════════════════════════════════════════════════
# Plain Python data
# ═══════════════════════════════════════════════════════════════════════════════


def from_python(data: Any) -> Value:
    """Build a Value tree from plain Python data (e.g. tomllib output).

    Raises:
        DocumentError: the data contains something with no document
            representation, or is nested too deeply.
    """
    return _from_python(data, 0)


def _from_python(data: Any, depth: int) -> Value:
    if depth > MAX_DOCUMENT_DEPTH:
        msg = f"document nesting exceeds maximum depth {MAX_DOCUMENT_DEPTH}"
        raise DocumentError(msg)
    if isinstance(data, Value):
        return data
    if isinstance(data, Mapping):
        table: dict[str, Value] = {}
        for key, item in data.items():
            if not isinstance(key, str):
                msg = f"table keys must be strings, got {type(key).__name__}"
                raise DocumentError(msg)
            table[key] = _from_python(item, depth + 1)
        return Value(table)
    if isinstance(data, (list, tuple)):
        return Value([_from_python(item, depth + 1) for item in data])
    if isinstance(data, _SCALARS):
        try:
            return Value(data)
        except TypeError as e:
            raise DocumentError(str(e)) from e
    if data is None:
        msg = "null has no document representation"
        raise DocumentError(msg)
    msg = f"cannot represent {type(data).__name__} in a document"
    raise DocumentError(msg)


# ═══════════════════════════════════════════════════════════════════════════════
# TOML
# ═══════════════════════════════════════════════════════════════════════════════


def loads(text: str) -> Value:
    """Parse TOML text into a table Value.

    Raises:
        tomllib.TOMLDecodeError: the text is not valid TOML.
    """
    return from_python(tomllib.loads(text))


def load(fp: BinaryIO) -> Value:
    """Parse a TOML file opened in binary mode into a table Value."""
    return from_python(tomllib.load(fp))


# ═══════════════════════════════════════════════════════════════════════════════
# YAML
# ═══════════════════════════════════════════════════════════════════════════════


def load_yaml(stream: str | bytes | IO[str] | IO[bytes], name: str | None = None) -> Value:
    """Parse a single YAML document into a Value tree with source locations.

    ``name`` labels locations in error messages; it defaults to the stream's
    ``name`` attribute, or ``<yaml>``. An empty document yields an empty table.

    Raises:
        yaml.YAMLError: the text is not valid YAML.
        DocumentError: the document holds data with no document
            representation (null, binary, non-string keys, duplicate keys),
            expands to more than MAX_DOCUMENT_NODES nodes, or a bytes
            stream is not valid UTF-8.
    """
    source = str(name or getattr(stream, "name", None) or "<yaml>")
    text = stream if isinstance(stream, (str, bytes)) else stream.read()
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            msg = f"document is not valid UTF-8 (byte offset {e.start}: {e.reason})"
            raise DocumentError(msg) from e

    loader = yaml.SafeLoader(text)
    try:
        root = loader.get_single_node()
        if root is None:
            return Value({})
        builder = _YamlBuilder(loader, source, text.splitlines())
        value = builder.build(root, 0)
    finally:
        loader.dispose()
    logger.debug("loaded YAML document from %s", source)
    return value


class _YamlBuilder:
    """Walks a composed YAML node graph and builds located Values."""

    def __init__(self, loader: yaml.SafeLoader, source: str, lines: list[str]) -> None:
        self._loader = loader
        self._source = source
        self._lines = lines
        self._count = 0

    def build(self, node: yaml.Node, depth: int) -> Value:
        location = self._location(node)
        if depth > MAX_DOCUMENT_DEPTH:
            msg = f"document nesting exceeds maximum depth {MAX_DOCUMENT_DEPTH}"
            raise DocumentError(msg, location)
        self._count += 1
        if self._count > MAX_DOCUMENT_NODES:
            msg = f"document expands to more than {MAX_DOCUMENT_NODES} nodes"
            raise DocumentError(msg, location)

        if isinstance(node, yaml.MappingNode):
            return Value(self._build_table(node, depth), location)
        if isinstance(node, yaml.SequenceNode):
            return Value([self.build(item, depth + 1) for item in node.value], location)
        return self._build_scalar(node, location)

    def _build_table(self, node: yaml.MappingNode, depth: int) -> dict[str, Value]:
        self._loader.flatten_mapping(node)
        table: dict[str, Value] = {}
        for key_node, value_node in node.value:
            key = self._loader.construct_object(key_node)
            if not isinstance(key, str):
                msg = f"table keys must be strings, got {type(key).__name__}"
                raise DocumentError(msg, self._location(key_node))
            if key in table:
                msg = f'duplicate key "{key}"'
                raise DocumentError(msg, self._location(key_node))
            table[key] = self.build(value_node, depth + 1)
        return table

    def _build_scalar(self, node: yaml.Node, location: Location) -> Value:
        data = self._loader.construct_object(node)
        if data is None:
            msg = "null has no document representation"
            raise DocumentError(msg, location)
        if isinstance(data, str):
            kind = StringKind.LITERAL if node.style == "'" else StringKind.BASIC
            return Value(String(data, kind), location)
        if not isinstance(data, _SCALARS):
            msg = f"cannot represent {type(data).__name__} in a document"
            raise DocumentError(msg, location)
        try:
            return Value(data, location)
        except TypeError as e:
            raise DocumentError(str(e), location) from e

    def _location(self, node: yaml.Node) -> Location:
        start, end = node.start_mark, node.end_mark
        line_text = self._lines[start.line] if start.line < len(self._lines) else ""
        if end.line == start.line:
            length = end.column - start.column
        else:
            length = len(line_text) - start.column
        return Location(
            source=self._source,
            line=start.line + 1,
            column=start.column + 1,
            line_text=line_text,
            length=max(length, 1),
        )
