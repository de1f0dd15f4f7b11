"""tomlget — typed extraction from TOML document trees.

All public types are exported from this module for flat imports:

    from tomlget import Value, get, find, loads

    doc = loads('ports = [80, 443]\\nname = "edge"')
    ports = find(doc, "ports", list[int])
"""

__version__ = "0.1.0"

# Value model
from tomlget._datetime import (
    LocalDate,
    LocalDatetime,
    LocalTime,
    OffsetDatetime,
    TimeOffset,
)
from tomlget._value import String, StringKind, Value, ValueType

# Diagnostics
from tomlget._diagnostics import Location, format_underline

# Errors
from tomlget._errors import (
    AmbiguousConversionError,
    ArityMismatchError,
    DocumentError,
    ExtractionError,
    KeyNotFoundError,
    TypeMismatchError,
    UnsupportedConversionError,
)

# Conversions — see tomlget._conversions for the rule table
from tomlget._conversions import (
    Conversion,
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

# Registry and entry points — see tomlget._registry for the resolution order
from tomlget._registry import (
    DEFAULT_REGISTRY,
    MAX_DEPTH,
    Registry,
    RegistryBuilder,
    find,
    get,
    resolve,
)

# Loaders
from tomlget._loaders import (
    MAX_DOCUMENT_DEPTH,
    MAX_DOCUMENT_NODES,
    from_python,
    load,
    load_yaml,
    loads,
)
from tomlget._types import Access, Converter, FixedLength, FromToml

__all__ = [
    # Value model
    "Value",
    "ValueType",
    "String",
    "StringKind",
    "LocalDate",
    "LocalTime",
    "LocalDatetime",
    "OffsetDatetime",
    "TimeOffset",
    # Diagnostics
    "Location",
    "format_underline",
    # Errors
    "ExtractionError",
    "TypeMismatchError",
    "ArityMismatchError",
    "KeyNotFoundError",
    "UnsupportedConversionError",
    "AmbiguousConversionError",
    "DocumentError",
    # Protocols and markers
    "Access",
    "Converter",
    "FixedLength",
    "FromToml",
    # Conversions
    "Conversion",
    "ExactConversion",
    "IdentityConversion",
    "IntegralConversion",
    "FloatingConversion",
    "TextConversion",
    "DurationConversion",
    "TimestampConversion",
    "SequenceConversion",
    "FixedSequenceConversion",
    "PairConversion",
    "TupleConversion",
    "MapConversion",
    "HookConversion",
    "ConverterConversion",
    # Registry
    "RegistryBuilder",
    "Registry",
    "DEFAULT_REGISTRY",
    "MAX_DEPTH",
    "get",
    "find",
    "resolve",
    # Loaders
    "from_python",
    "loads",
    "load",
    "load_yaml",
    "MAX_DOCUMENT_DEPTH",
    "MAX_DOCUMENT_NODES",
]
