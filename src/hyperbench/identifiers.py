"""Fully qualified benchmark identifiers.

A leaf's identifier is derived from its position in the tree alone:
group names are joined with ``/``, the leaf name closes the path, and
each series value is attached with ``:`` to the next named component
below it.  For example::

    group("g", [series([1, 2], lambda n: bench("b", ...))])

yields ``g/b:1`` and ``g/b:2``.

Discovery walks brackets with an empty :class:`Resource`, so no setup or
teardown runs and no resource is acquired.  The walk order is the same
depth-first, left-to-right order the runner uses.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from hyperbench.benchmark import (
    Benchmark,
    Bracket,
    Group,
    Leaf,
    Resource,
    Series,
    as_forest,
)

BenchmarkId = str

BENCH = "bench"
GROUP = "group"
SERIES = "series"

Component = tuple[str, str]


def qualified_name(components: Iterable[Component]) -> BenchmarkId:
    """Build a BenchmarkId from root-to-leaf path components.

    Raises:
        ValueError: If the path does not end with exactly one bench component.
    """
    parts: list[str] = []
    index = ""
    for kind, text in components:
        if kind == SERIES:
            index += ":" + text
        elif kind == GROUP:
            parts.append(text + index)
            index = ""
        elif kind == BENCH:
            parts.append(text + index)
            return "/".join(parts)
        else:
            raise ValueError(f"Unknown path component kind: {kind!r}")
    raise ValueError("Benchmark path does not end at a benchmark case")


def series_label(value: object) -> str:
    """Render a series value for use in an identifier."""
    return str(value)


def _walk(benchmark: Benchmark, path: tuple[Component, ...]) -> Iterator[BenchmarkId]:
    if isinstance(benchmark, Leaf):
        yield qualified_name(path + ((BENCH, benchmark.name),))
    elif isinstance(benchmark, Group):
        inner = path + ((GROUP, benchmark.name),)
        for child in benchmark.children:
            yield from _walk(child, inner)
    elif isinstance(benchmark, Bracket):
        yield from _walk(benchmark.continuation(Resource.empty()), path)
    elif isinstance(benchmark, Series):
        for value in benchmark:
            yield from _walk(
                benchmark.continuation(value),
                path + ((SERIES, series_label(value)),),
            )
    else:
        raise TypeError(f"Not a benchmark: {benchmark!r}")


def iter_identifiers(benchmarks: Benchmark | Iterable[Benchmark]) -> Iterator[BenchmarkId]:
    """Lazily yield the identifiers of every leaf, depth-first.

    Safe on unbounded series: identifiers are produced on demand.
    """
    for benchmark in as_forest(benchmarks):
        yield from _walk(benchmark, ())


def identifiers(benchmarks: Benchmark | Iterable[Benchmark]) -> list[BenchmarkId]:
    """Materialize all identifiers of a finite tree or forest."""
    return list(iter_identifiers(benchmarks))


def find_duplicates(ids: Iterable[BenchmarkId]) -> list[BenchmarkId]:
    """Return identifiers that occur more than once, in first-seen order."""
    seen: set[str] = set()
    dups: list[str] = []
    for ident in ids:
        if ident in seen and ident not in dups:
            dups.append(ident)
        seen.add(ident)
    return dups
