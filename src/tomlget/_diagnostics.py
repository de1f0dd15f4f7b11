"""Source locations and location-annotated error messages.

A Location points at a region of one line of a source document. Loaders that
know where a node came from attach one to the node; error types render it with
format_underline():

    [error] bad_cast to integer (requested int)
     --> config.yaml
       |
     3 | port: "eighty"
       |       ^^^^^^^^ the actual type is string
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True, slots=True)
class Location:
    """A region within a single source line.

    line and column are 1-based. length is the number of columns to
    underline, at least 1.
    """

    source: str
    line: int
    column: int
    line_text: str = ""
    length: int = 1

    def __str__(self) -> str:
        return f"{self.source}:{self.line}:{self.column}"


def format_underline(
    message: str, regions: Sequence[tuple[Location | None, str]]
) -> str:
    """Render a message followed by one annotated snippet per located region.

    Regions without a location are skipped; if none has one, the message is
    returned as-is.
    """
    located = [(loc, label) for loc, label in regions if loc is not None]
    if not located:
        return message

    width = max(len(str(loc.line)) for loc, _ in located)
    gutter = " " * (width + 1)
    lines = [message]
    for loc, label in located:
        marker = " " * (loc.column - 1) + "^" * max(loc.length, 1)
        lines.append(f"{gutter[:-1]}--> {loc.source}")
        lines.append(f"{gutter} |")
        lines.append(f" {loc.line:>{width}} | {loc.line_text}")
        lines.append(f"{gutter} | {marker} {label}".rstrip())
    return "\n".join(lines)
