"""Shared test fixtures for hyperbench tests."""

from __future__ import annotations

from hyperbench.benchmark import Benchmark, bench


class FakeClock:
    """Monotonic nanosecond clock that only moves when told to."""

    def __init__(self, start: int = 0) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, nanos: int) -> None:
        self.now += nanos


class Workload:
    """Runnable that records batch sizes and advances a fake clock.

    Each iteration costs *cost_per_iteration* nanoseconds of fake time.
    """

    def __init__(
        self,
        clock: FakeClock | None = None,
        cost_per_iteration: int = 0,
        fail_on_call: int | None = None,
    ) -> None:
        self.clock = clock
        self.cost_per_iteration = cost_per_iteration
        self.fail_on_call = fail_on_call
        self.calls: list[int] = []

    def __call__(self, batch_size: int) -> None:
        self.calls.append(batch_size)
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise RuntimeError("workload failed")
        if self.clock is not None:
            self.clock.advance(batch_size * self.cost_per_iteration)

    @property
    def total_iterations(self) -> int:
        return sum(self.calls)


def recording_leaf(name: str, log: list[str], tag: str | None = None) -> Benchmark:
    """A leaf whose runnable appends *tag* (default: *name*) to *log*."""
    label = tag or name

    def runnable(batch_size: int) -> None:
        log.append(label)

    return bench(name, runnable)


def noop(batch_size: int) -> None:
    """A runnable that does nothing."""
