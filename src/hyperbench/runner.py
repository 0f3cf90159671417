"""Benchmark tree execution.

The runner walks a benchmark tree depth-first, left to right.  At each
leaf it takes the next identifier from an :class:`IdentifierCursor`,
asks the selector for a strategy, and runs the strategy against the
leaf's runnable.  Identifiers come from
:func:`hyperbench.identifiers.iter_identifiers`, which walks the tree
in the same order, so the n-th leaf visited always receives the n-th
identifier.

Brackets acquire their resource before the sub-tree runs and release
it in a ``finally`` block, so teardown happens exactly once whether the
sub-tree completes, raises, or the consumer of :func:`iter_benchmark`
stops early.  Series are expanded value by value, on demand.
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
from hyperbench.identifiers import BenchmarkId, iter_identifiers
from hyperbench.logging import get_logger
from hyperbench.measurement import Sample
from hyperbench.selector import Selector

log = get_logger("runner")

RunResult = tuple[BenchmarkId, Sample]


class IdentifierCursor:
    """Queue of precomputed identifiers consumed during a run."""

    def __init__(self, ids: Iterable[BenchmarkId]) -> None:
        self._ids = iter(ids)
        self.consumed = 0

    def pop(self) -> BenchmarkId:
        """Return the next identifier.

        Raises:
            RuntimeError: If the queue is exhausted.  This means the tree
                walked differently for identifiers and for execution.
        """
        try:
            ident = next(self._ids)
        except StopIteration:
            raise RuntimeError(
                f"Identifier queue exhausted after {self.consumed} benchmarks; "
                "benchmark tree does not match its identifiers"
            ) from None
        self.consumed += 1
        return ident


def _walk(
    benchmark: Benchmark,
    selector: Selector,
    cursor: IdentifierCursor,
) -> Iterator[RunResult]:
    if isinstance(benchmark, Leaf):
        ident = cursor.pop()
        strategy = selector(ident)
        if strategy is None:
            log.debug("Skipping %s", ident)
            return
        log.debug("Running %s with %r", ident, strategy)
        yield ident, strategy(benchmark.runnable)
    elif isinstance(benchmark, Group):
        for child in benchmark.children:
            yield from _walk(child, selector, cursor)
    elif isinstance(benchmark, Bracket):
        value = benchmark.setup()
        log.debug("Acquired bracket resource %r", value)
        try:
            yield from _walk(benchmark.continuation(Resource(value)), selector, cursor)
        finally:
            log.debug("Releasing bracket resource %r", value)
            benchmark.teardown(value)
    elif isinstance(benchmark, Series):
        for value in benchmark:
            yield from _walk(benchmark.continuation(value), selector, cursor)
    else:
        raise TypeError(f"Not a benchmark: {benchmark!r}")


def iter_benchmark(
    selector: Selector,
    benchmarks: Benchmark | Iterable[Benchmark],
) -> Iterator[RunResult]:
    """Lazily run benchmarks, yielding ``(identifier, sample)`` pairs.

    Each case runs only when the next pair is requested, so unbounded
    series can be consumed partially.  Closing the iterator early
    releases any bracket resources still held.
    """
    forest = as_forest(benchmarks)
    cursor = IdentifierCursor(iter_identifiers(forest))
    for benchmark in forest:
        yield from _walk(benchmark, selector, cursor)


def run_benchmark(
    selector: Selector,
    benchmarks: Benchmark | Iterable[Benchmark],
) -> list[RunResult]:
    """Run every selected case of a finite tree and collect the samples.

    Args:
        selector: Name-indexed sampling strategy.  Cases for which it
            returns ``None`` are skipped.
        benchmarks: A benchmark or a sequence of top-level benchmarks.

    Returns:
        ``(identifier, sample)`` pairs in depth-first order.
    """
    return list(iter_benchmark(selector, benchmarks))
