"""Conformance fixture loader for tomlget.

Loads YAML fixtures from tests/fixtures/ and turns them into extraction cases
for parametrized testing. Each fixture document holds a TOML ``document`` and
a list of ``cases``; a case names a top-level ``key``, a ``target`` type from
TARGETS, and either an ``expect`` value or an ``error`` class name (with
optional ``error_fields`` to compare against the error's attributes).
"""

from __future__ import annotations

import collections
import datetime as dt
from dataclasses import dataclass, field
from fractions import Fraction
from pathlib import Path
from typing import Annotated, Any

import yaml

from tomlget import FixedLength, Value

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"


class Port(int):
    """An int subclass: extracted through the integral rule."""


class Name(str):
    """A str subclass: extracted through the text rule."""


# Target type names usable in fixtures.
TARGETS: dict[str, Any] = {
    "bool": bool,
    "int": int,
    "float": float,
    "str": str,
    "Value": Value,
    "Port": Port,
    "Name": Name,
    "Fraction": Fraction,
    "datetime": dt.datetime,
    "timedelta": dt.timedelta,
    "list[int]": list[int],
    "list[str]": list[str],
    "list[list[int]]": list[list[int]],
    "tuple[int, ...]": tuple[int, ...],
    "deque[int]": collections.deque[int],
    "FixedLength(2)[int]": Annotated[list[int], FixedLength(2)],
    "FixedLength(3)[int]": Annotated[list[int], FixedLength(3)],
    "tuple[int, str]": tuple[int, str],
    "tuple[int, int]": tuple[int, int],
    "tuple[int, str, float]": tuple[int, str, float],
    "dict[str, int]": dict[str, int],
    "dict[str, list[int]]": dict[str, list[int]],
    "dict[str, dict[str, int]]": dict[str, dict[str, int]],
}


@dataclass
class FixtureCase:
    """A single extraction case from a conformance fixture."""

    fixture_name: str
    case_name: str
    document: str
    key: str
    target: Any
    expect: Any = None
    error: str | None = None
    error_fields: dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return f"{self.fixture_name}::{self.case_name}"


def normalize(result: Any) -> Any:
    """Bring container results into the shapes YAML can express."""
    match result:
        case tuple() | list() | collections.deque():
            return [normalize(item) for item in result]
        case dict():
            return {k: normalize(v) for k, v in result.items()}
        case _:
            return result


# ─── Fixture loading ────────────────────────────────────────────────────────


def load_fixtures() -> list[FixtureCase]:
    """Load all conformance fixtures."""
    cases: list[FixtureCase] = []
    for yaml_file in sorted(FIXTURE_DIR.glob("*.yaml")):
        cases.extend(_load_file(yaml_file))
    return cases


def _load_file(path: Path) -> list[FixtureCase]:
    """Load a single fixture YAML file (may contain multiple documents)."""
    cases: list[FixtureCase] = []
    with path.open() as f:
        for doc in yaml.safe_load_all(f):
            if doc is None:
                continue
            for case in doc["cases"]:
                cases.append(
                    FixtureCase(
                        fixture_name=f"{path.stem}/{doc['name']}",
                        case_name=case["name"],
                        document=doc["document"],
                        key=case["key"],
                        target=TARGETS[case["target"]],
                        expect=case.get("expect"),
                        error=case.get("error"),
                        error_fields=case.get("error_fields", {}),
                    )
                )
    return cases
