"""Reduction of samples into reports."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from hyperbench.identifiers import BenchmarkId
from hyperbench.measurement import Measurement, Sample

log = logging.getLogger("hyperbench")


@dataclass(frozen=True)
class Report:
    """Summary of one benchmark case."""

    bench_name: str
    time_in_nanos: float  # mean per iteration
    sample: Sample | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        d: dict[str, Any] = {
            "bench_name": self.bench_name,
            "time_in_nanos": self.time_in_nanos,
        }
        if self.sample is not None:
            d["measurements"] = self.sample.to_list()
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Report:
        """Deserialize from a dict."""
        measurements = data.get("measurements")
        sample = None
        if measurements is not None:
            sample = Sample(tuple(Measurement.from_dict(m) for m in measurements))
        return cls(
            bench_name=data["bench_name"],
            time_in_nanos=float(data["time_in_nanos"]),
            sample=sample,
        )


def analyze(package_name: str, name: str, sample: Sample) -> Report:
    """Reduce *sample* to the mean time per iteration.

    The mean is weighted by batch size: total duration over total
    iterations, not the average of per-batch means.

    Raises:
        ValueError: If the sample covers zero iterations.
    """
    total_iterations = sample.total_iterations
    if total_iterations == 0:
        raise ValueError(
            f"Cannot analyze {package_name}:{name}: sample has no iterations "
            f"({len(sample)} measurements)"
        )
    return Report(
        bench_name=f"{package_name}:{name}",
        time_in_nanos=sample.total_duration / total_iterations,
        sample=sample,
    )


def analyze_all(
    package_name: str,
    results: Iterable[tuple[BenchmarkId, Sample]],
    *,
    raw: bool = False,
) -> list[Report]:
    """Analyze every ``(identifier, sample)`` pair from a run.

    Args:
        package_name: Prefix for every report name.
        results: Output of :func:`hyperbench.runner.run_benchmark`.
        raw: Keep the raw sample in each report.

    Cases whose sample covers no iterations are logged and omitted.
    """
    reports: list[Report] = []
    for ident, sample in results:
        if sample.total_iterations == 0:
            log.warning("No iterations sampled for %s, omitting from reports", ident)
            continue
        report = analyze(package_name, ident, sample)
        if not raw:
            report = Report(report.bench_name, report.time_in_nanos)
        reports.append(report)
    return reports
