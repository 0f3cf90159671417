"""Strategy selectors.

A selector maps a fully qualified :data:`BenchmarkId` to the sampling
strategy to use for that case, or ``None`` to skip the case.  Skipping
is not an error: the runner produces nothing for skipped cases.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from hyperbench.identifiers import BenchmarkId
from hyperbench.strategy import SamplingStrategy

Selector = Callable[[BenchmarkId], Optional[SamplingStrategy]]


def uniform(strategy: SamplingStrategy) -> Selector:
    """Use *strategy* for every benchmark."""

    def select(bench_id: BenchmarkId) -> SamplingStrategy | None:
        return strategy

    return select


def filtered(predicate: Callable[[BenchmarkId], bool], strategy: SamplingStrategy) -> Selector:
    """Use *strategy* for benchmarks satisfying *predicate*; skip the rest."""

    def select(bench_id: BenchmarkId) -> SamplingStrategy | None:
        return strategy if predicate(bench_id) else None

    return select


def matching(patterns: Iterable[str], strategy: SamplingStrategy) -> Selector:
    """Select benchmarks whose identifier contains any of *patterns*.

    With no patterns every benchmark is selected.
    """
    pats = [p for p in patterns if p]
    if not pats:
        return uniform(strategy)
    return filtered(lambda bench_id: any(p in bench_id for p in pats), strategy)
