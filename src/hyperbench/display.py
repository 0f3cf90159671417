"""Terminal and JSON formatting for benchmark reports.

Produces an aligned table for the console and a JSON document for
external analysis tools.  No external dependencies.
"""

from __future__ import annotations

import json
import math
from typing import Iterable

from hyperbench.analysis import Report


def format_time_ns(nanos: float, precision: int = 2) -> str:
    """Format a nanosecond duration with adaptive units."""
    if math.isnan(nanos):
        return "N/A"
    if nanos < 1_000:
        return f"{nanos:.{precision}f}ns"
    if nanos < 1_000_000:
        return f"{nanos / 1_000:.{precision}f}\u00b5s"
    if nanos < 1_000_000_000:
        return f"{nanos / 1_000_000:.{precision}f}ms"
    return f"{nanos / 1_000_000_000:.{precision}f}s"


def format_reports(reports: Iterable[Report]) -> str:
    """Format reports as an aligned table, in run order."""
    rows = list(reports)
    if not rows:
        return "No benchmarks were run."

    width = max(30, max(len(r.bench_name) for r in rows))
    lines: list[str] = []
    lines.append(f"{'Benchmark':<{width}s} {'Time/iter':>12s} {'Batches':>8s} {'Iters':>10s}")
    lines.append("\u2500" * (width + 33))
    for r in rows:
        batches = str(len(r.sample)) if r.sample is not None else "-"
        iters = str(r.sample.total_iterations) if r.sample is not None else "-"
        lines.append(
            f"{r.bench_name:<{width}s} {format_time_ns(r.time_in_nanos):>12s} "
            f"{batches:>8s} {iters:>10s}"
        )
    return "\n".join(lines)


def reports_to_json(reports: Iterable[Report], *, indent: int | None = 2) -> str:
    """Serialize reports to a JSON document ``{"reports": [...]}``."""
    return json.dumps({"reports": [r.to_dict() for r in reports]}, indent=indent)


def reports_from_json(text: str) -> list[Report]:
    """Parse a document produced by :func:`reports_to_json`."""
    data = json.loads(text)
    if not isinstance(data, dict) or "reports" not in data:
        raise ValueError("Expected a JSON object with a 'reports' list")
    return [Report.from_dict(item) for item in data["reports"]]
