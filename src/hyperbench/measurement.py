"""Measurements and samples.

A :class:`Measurement` is one observed batch: how long it took and how
many logical iterations it covered.  A :class:`Sample` is an ordered run
of measurements.  Samples combine by concatenation, with
:data:`EMPTY_SAMPLE` as the identity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import chain
from typing import Any, Iterable, Iterator


@dataclass(frozen=True)
class Measurement:
    """A single batch observation."""

    duration: int  # nanoseconds
    batch_size: int

    def to_dict(self) -> dict[str, int]:
        """Serialize to a JSON-compatible dict."""
        return {"duration": self.duration, "batch_size": self.batch_size}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Measurement:
        """Deserialize from a dict."""
        return cls(duration=int(data["duration"]), batch_size=int(data["batch_size"]))


@dataclass(frozen=True)
class Sample:
    """An ordered collection of measurements."""

    measurements: tuple[Measurement, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.measurements)

    def __iter__(self) -> Iterator[Measurement]:
        return iter(self.measurements)

    @property
    def total_duration(self) -> int:
        """Sum of all measured durations in nanoseconds."""
        return sum(m.duration for m in self.measurements)

    @property
    def total_iterations(self) -> int:
        """Sum of all batch sizes."""
        return sum(m.batch_size for m in self.measurements)

    def to_list(self) -> list[dict[str, int]]:
        """Serialize to a list of measurement dicts."""
        return [m.to_dict() for m in self.measurements]

    @classmethod
    def of(cls, *measurements: Measurement) -> Sample:
        """Build a sample from positional measurements."""
        return cls(tuple(measurements))


EMPTY_SAMPLE = Sample()


def combine_samples(a: Sample, b: Sample) -> Sample:
    """Concatenate two samples, *a* first."""
    if not a.measurements:
        return b
    if not b.measurements:
        return a
    return Sample(a.measurements + b.measurements)


def concat_samples(samples: Iterable[Sample]) -> Sample:
    """Concatenate any number of samples in order."""
    return Sample(tuple(chain.from_iterable(s.measurements for s in samples)))
