"""Timing of benchmark batches.

All durations are integer nanoseconds read from a monotonic clock, so
they are never negative and unaffected by system clock adjustments.
The clock is a zero-argument callable so tests can substitute a fake.
"""

from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], int]
Runnable = Callable[[int], object]

monotonic_ns: Clock = time.monotonic_ns


def chrono(runnable: Runnable, batch_size: int, *, clock: Clock = monotonic_ns) -> int:
    """Run one batch of *batch_size* iterations and return its duration in ns."""
    start = clock()
    runnable(batch_size)
    end = clock()
    return max(end - start, 0)


def seconds_to_ns(seconds: float) -> int:
    """Convert seconds to integer nanoseconds."""
    return int(round(seconds * 1_000_000_000))
