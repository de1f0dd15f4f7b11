"""Extraction benchmarks for tomlget.

Measures the two halves of get(): classifying a target type into a
Conversion (cold and cached), and applying a cached Conversion to nodes of
growing size.

Run: uv run pytest tests/bench/test_bench_get.py --benchmark-only
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated

from tomlget import FixedLength, Registry, Value, find, from_python, get, loads

# ── Fixtures ─────────────────────────────────────────────────────────────────

NESTED = dict[str, list[tuple[int, str]]]
TRIPLE = Annotated[list[int], FixedLength(3)]

SMALL_ARRAY = from_python(list(range(10)))
LARGE_ARRAY = from_python(list(range(10_000)))
WIDE_TABLE = from_python({f"k{i}": [[i, str(i)]] for i in range(1_000)})

SERVICE_DOC = loads(
    """
name = "edge"
ports = [80, 443, 8080]

[[routes]]
path = "/api"
weight = 3

[[routes]]
path = "/static"
weight = 1
"""
)


@dataclass
class Route:
    path: str = ""
    weight: int = 0

    def from_toml(self, value: Value, /) -> None:
        self.path = find(value, "path", str)
        self.weight = find(value, "weight", int)


@dataclass
class Service:
    name: str = ""
    ports: list[int] = field(default_factory=list)
    routes: list[Route] = field(default_factory=list)

    def from_toml(self, value: Value, /) -> None:
        self.name = find(value, "name", str)
        self.ports = find(value, "ports", TRIPLE)
        self.routes = find(value, "routes", list[Route])


# ── Resolution ───────────────────────────────────────────────────────────────


def test_bench_resolve_cold_leaf(benchmark):
    benchmark(lambda: Registry().resolve(int))


def test_bench_resolve_cold_nested(benchmark):
    benchmark(lambda: Registry().resolve(NESTED))


def test_bench_resolve_cached_nested(benchmark):
    registry = Registry()
    registry.resolve(NESTED)
    benchmark(registry.resolve, NESTED)


# ── Extraction ───────────────────────────────────────────────────────────────


def test_bench_get_leaf(benchmark):
    node = Value(42)
    benchmark(get, node, int)


def test_bench_get_small_array(benchmark):
    benchmark(get, SMALL_ARRAY, list[int])


def test_bench_get_large_array(benchmark):
    benchmark(get, LARGE_ARRAY, list[int])


def test_bench_get_wide_table(benchmark):
    benchmark(get, WIDE_TABLE, NESTED)


def test_bench_get_hook_tree(benchmark):
    result = benchmark(get, SERVICE_DOC, Service)
    assert [r.path for r in result.routes] == ["/api", "/static"]
