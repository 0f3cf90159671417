"""hyperbench: micro-benchmarks with composable sampling strategies.

Benchmarks are organized as a tree of named cases, groups, resource
brackets and parameter series.  Each case is run under a sampling
strategy chosen by name, and its measurements are reduced to the mean
time per iteration.
"""

from hyperbench.analysis import Report, analyze, analyze_all
from hyperbench.benchmark import (
    Benchmark,
    Bracket,
    Group,
    Leaf,
    Resource,
    Series,
    bench,
    bench_each,
    bracket,
    group,
    series,
)
from hyperbench.cli import default_main, make_cli
from hyperbench.identifiers import BenchmarkId, identifiers, iter_identifiers
from hyperbench.measurement import EMPTY_SAMPLE, Measurement, Sample, combine_samples
from hyperbench.runner import iter_benchmark, run_benchmark
from hyperbench.selector import filtered, matching, uniform
from hyperbench.shuffle import Generator, reorder, shuffle
from hyperbench.strategy import (
    IDENTITY,
    SamplingStrategy,
    combine,
    combine_all,
    default_strategy,
    fixed,
    geometric,
    geometric_series,
    repeat,
    time_bound,
)

__version__ = "0.1.0"

__all__ = [
    "Benchmark",
    "BenchmarkId",
    "Bracket",
    "EMPTY_SAMPLE",
    "Generator",
    "Group",
    "IDENTITY",
    "Leaf",
    "Measurement",
    "Report",
    "Resource",
    "Sample",
    "SamplingStrategy",
    "Series",
    "analyze",
    "analyze_all",
    "bench",
    "bench_each",
    "bracket",
    "combine",
    "combine_all",
    "combine_samples",
    "default_main",
    "default_strategy",
    "filtered",
    "fixed",
    "geometric",
    "geometric_series",
    "group",
    "identifiers",
    "iter_benchmark",
    "iter_identifiers",
    "make_cli",
    "matching",
    "reorder",
    "repeat",
    "run_benchmark",
    "series",
    "shuffle",
    "time_bound",
    "uniform",
]
