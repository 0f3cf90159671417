"""Sampling strategies.

A sampling strategy decides how many batches of which sizes to run for a
benchmark case, runs them, and returns the resulting :class:`Sample`.

Strategies form a monoid under :func:`combine`: running ``combine(a, b)``
runs *a* then *b* against the same case and concatenates the samples.
:data:`IDENTITY` runs nothing and returns the empty sample.  Larger
strategies are built from the primitives below:

- :func:`fixed` -- one batch of a given size.
- :func:`repeat` -- a strategy run *n* times in sequence.
- :func:`geometric` -- repeated fixed batches over a geometric series
  of sizes; :func:`default_strategy` is ``geometric(100, 20, 1.2)``.
- :func:`time_bound` -- batches of the given sizes until a wall-clock
  budget is exceeded.  The budget is checked only after a batch has
  completed, so a run can overshoot by up to one batch.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator

from hyperbench.benchmark import ValueSource, check_restartable, iter_values
from hyperbench.measurement import (
    EMPTY_SAMPLE,
    Measurement,
    Sample,
    combine_samples,
    concat_samples,
)
from hyperbench.timing import Clock, Runnable, chrono, monotonic_ns


@dataclass(frozen=True)
class SamplingStrategy:
    """A policy that samples the runtime of one runnable case."""

    run: Callable[[Runnable], Sample]
    description: str = ""

    def __call__(self, runnable: Runnable) -> Sample:
        return self.run(runnable)

    def __repr__(self) -> str:
        return f"SamplingStrategy({self.description or '<anonymous>'})"


def _run_nothing(runnable: Runnable) -> Sample:
    return EMPTY_SAMPLE


IDENTITY = SamplingStrategy(_run_nothing, "identity")


def combine(a: SamplingStrategy, b: SamplingStrategy) -> SamplingStrategy:
    """Run *a* then *b* on the same case, concatenating their samples."""
    if a is IDENTITY:
        return b
    if b is IDENTITY:
        return a

    def run(runnable: Runnable) -> Sample:
        first = a.run(runnable)
        return combine_samples(first, b.run(runnable))

    return SamplingStrategy(run, f"{a.description} + {b.description}")


def combine_all(strategies: Iterable[SamplingStrategy]) -> SamplingStrategy:
    """Combine *strategies* left to right; equivalent to folding :func:`combine`."""
    parts = [s for s in strategies if s is not IDENTITY]
    if not parts:
        return IDENTITY
    if len(parts) == 1:
        return parts[0]

    def run(runnable: Runnable) -> Sample:
        return concat_samples(s.run(runnable) for s in parts)

    return SamplingStrategy(run, " + ".join(s.description for s in parts))


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


def _check_batch_size(batch_size: int) -> None:
    if batch_size < 0:
        raise ValueError(f"Batch size cannot be negative (got {batch_size}).")


def fixed(batch_size: int, *, clock: Clock = monotonic_ns) -> SamplingStrategy:
    """Sample a single batch of exactly *batch_size* iterations."""
    _check_batch_size(batch_size)

    def run(runnable: Runnable) -> Sample:
        duration = chrono(runnable, batch_size, clock=clock)
        return Sample.of(Measurement(duration=duration, batch_size=batch_size))

    return SamplingStrategy(run, f"fixed({batch_size})")


def repeat(n: int, strategy: SamplingStrategy) -> SamplingStrategy:
    """Run *strategy* *n* times sequentially and concatenate the samples."""
    if n < 0:
        raise ValueError(f"Repeat count cannot be negative (got {n}).")

    def run(runnable: Runnable) -> Sample:
        return concat_samples(strategy.run(runnable) for _ in range(n))

    return SamplingStrategy(run, f"repeat({n}, {strategy.description})")


def geometric_series(ratio: float, limit: int) -> Iterator[int]:
    """Yield ``floor(ratio**k)`` for k = 1, 2, ... up to *limit*.

    Consecutive equal values are collapsed, since a ratio close to 1
    grows slowly and repeats the same integer many times.

    Raises:
        ValueError: If *ratio* is not greater than 1.
    """
    if not ratio > 1:
        raise ValueError(f"Geometric ratio must be bigger than 1 (got {ratio}).")
    return _geometric_series(ratio, limit)


def _geometric_series(ratio: float, limit: int) -> Iterator[int]:
    previous: int | None = None
    k = 1
    while True:
        size = math.floor(ratio**k)
        if size > limit:
            return
        if size != previous:
            yield size
            previous = size
        k += 1


def geometric(
    n_samples: int,
    limit: int,
    ratio: float,
    *,
    clock: Clock = monotonic_ns,
) -> SamplingStrategy:
    """Sample *n_samples* batches of each size in ``geometric_series(ratio, limit)``."""
    sizes = list(geometric_series(ratio, limit))
    combined = combine_all(repeat(n_samples, fixed(size, clock=clock)) for size in sizes)
    return SamplingStrategy(combined.run, f"geometric({n_samples}, {limit}, {ratio})")


def default_strategy() -> SamplingStrategy:
    """100 samples per batch size, sizes 1..20 with ratio 1.2."""
    return geometric(100, 20, 1.2)


def time_bound(
    max_duration: int,
    batch_sizes: ValueSource,
    *,
    clock: Clock = monotonic_ns,
) -> SamplingStrategy:
    """Sample batches of the given sizes until *max_duration* ns have elapsed.

    Elapsed time is counted from the start of the strategy.  After each
    completed batch, if it exceeds *max_duration* sampling stops.  A batch
    in progress is never interrupted.  Sampling also stops when
    *batch_sizes* runs out.  A negative batch size raises ValueError when
    it is reached.

    Args:
        max_duration: Time budget in nanoseconds.
        batch_sizes: Batch sizes, possibly unbounded; a re-iterable or a
            zero-argument factory returning an iterator.
        clock: Monotonic nanosecond clock.
    """
    check_restartable(batch_sizes, "batch_sizes")

    def run(runnable: Runnable) -> Sample:
        start = clock()
        collected: list[Measurement] = []
        for batch_size in iter_values(batch_sizes):
            _check_batch_size(batch_size)
            duration = chrono(runnable, batch_size, clock=clock)
            collected.append(Measurement(duration=duration, batch_size=batch_size))
            if clock() - start > max_duration:
                break
        return Sample(tuple(collected))

    return SamplingStrategy(run, f"time_bound({max_duration}ns)")
