"""Command-line entry point for benchmark suites.

A benchmark program defines its tree and hands it to
:func:`default_main`::

    from hyperbench import bench, group, default_main

    benchmarks = [
        group("parse", [bench("small", parse_small), bench("large", parse_large)]),
    ]

    if __name__ == "__main__":
        default_main("mylib", benchmarks)

The resulting command supports selecting cases by pattern, randomizing
their order, choosing a sampling strategy, and writing a JSON report.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Sequence

import click

from hyperbench.analysis import analyze_all
from hyperbench.benchmark import Benchmark, as_forest
from hyperbench.config import (
    STRATEGY_KINDS,
    RunConfig,
    StrategyDef,
    build_selector,
    check_config,
    config_from_profile,
    load_profile,
)
from hyperbench.display import format_reports, reports_to_json
from hyperbench.identifiers import find_duplicates, iter_identifiers
from hyperbench.logging import get_logger, setup_logging
from hyperbench.runner import iter_benchmark
from hyperbench.shuffle import Generator, reorder, shuffle

log = get_logger("cli")


def _strategy_from_options(
    kind: str | None,
    samples: int | None,
    limit: int | None,
    ratio: float | None,
    batch_size: int | None,
    time_limit: float | None,
) -> StrategyDef | None:
    """Build a StrategyDef from CLI options, or None if none were given."""
    values: dict[str, Any] = {
        "samples": samples,
        "limit": limit,
        "ratio": ratio,
        "batch_size": batch_size,
        "time_limit_s": time_limit,
    }
    given = {k: v for k, v in values.items() if v is not None}
    if kind is None and not given:
        return None
    return StrategyDef(kind=kind or "geometric", **given)


def run_suite(config: RunConfig, benchmarks: Sequence[Benchmark]) -> None:
    """Execute a configured run and print its reports.

    *config* is expected to have passed :func:`check_config`.
    """
    forest: list[Benchmark] = list(benchmarks)
    if config.seed is not None:
        log.debug("Reordering benchmarks with seed %d", config.seed)
        forest = reorder(shuffle, Generator(config.seed), forest)

    if config.list_only:
        seen: list[str] = []
        for ident in iter_identifiers(forest):
            click.echo(ident)
            seen.append(ident)
        for dup in find_duplicates(seen):
            log.warning("Duplicate benchmark identifier: %s", dup)
        return

    selector = build_selector(config)
    results = []
    for ident, sample in iter_benchmark(selector, forest):
        log.info("%s: %d batches", ident, len(sample))
        results.append((ident, sample))
    log.info("Ran %d benchmarks", len(results))

    reports = analyze_all(config.package_name, results, raw=config.raw)
    to_stdout = config.json_path is not None and str(config.json_path) == "-"
    # The JSON document owns stdout when written there.
    if not to_stdout:
        click.echo(format_reports(reports))

    if config.json_path is not None:
        text = reports_to_json(reports)
        if to_stdout:
            click.echo(text)
        else:
            config.json_path.write_text(text + "\n")
            log.info("Wrote %s", config.json_path)


def make_cli(
    package_name: str,
    benchmarks: Benchmark | Iterable[Benchmark],
) -> click.Command:
    """Build the click command that runs *benchmarks*."""
    forest = as_forest(benchmarks)

    @click.command(name=package_name)
    @click.option(
        "--profile",
        "profile_path",
        type=click.Path(exists=True, path_type=Path),
        default=None,
        help="YAML profile defining strategies and selection.",
    )
    @click.option(
        "--strategy",
        type=click.Choice(list(STRATEGY_KINDS)),
        default=None,
        help="Sampling strategy (default: geometric).",
    )
    @click.option("--samples", type=int, default=None, help="Batches per batch size.")
    @click.option("--limit", type=int, default=None, help="Largest geometric batch size.")
    @click.option("--ratio", type=float, default=None, help="Geometric progression ratio.")
    @click.option("--batch-size", type=int, default=None, help="Batch size for fixed/time-bound.")
    @click.option(
        "--time-limit",
        type=float,
        default=None,
        help="Time budget in seconds for time-bound sampling.",
    )
    @click.option(
        "--pattern",
        "patterns",
        type=str,
        multiple=True,
        help="Only run benchmarks whose name contains PATTERN (repeatable).",
    )
    @click.option("--seed", type=int, default=None, help="Randomize order with this seed.")
    @click.option("--list", "list_only", is_flag=True, help="List benchmark names and exit.")
    @click.option("--raw", is_flag=True, help="Include raw measurements in the JSON report.")
    @click.option(
        "--json",
        "json_path",
        type=click.Path(path_type=Path),
        default=None,
        help="Write a JSON report to this file ('-' for stdout).",
    )
    @click.option("-v", "--verbose", is_flag=True, help="Show detailed output.")
    @click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
    @click.option(
        "--log-file",
        type=click.Path(path_type=Path),
        default=None,
        help="Write a DEBUG log to this file.",
    )
    def main(  # noqa: PLR0913
        profile_path: Path | None,
        strategy: str | None,
        samples: int | None,
        limit: int | None,
        ratio: float | None,
        batch_size: int | None,
        time_limit: float | None,
        patterns: tuple[str, ...],
        seed: int | None,
        list_only: bool,
        raw: bool,
        json_path: Path | None,
        verbose: bool,
        quiet: bool,
        log_file: Path | None,
    ) -> None:
        """Run the benchmark suite.

        \b
        Examples:
            # Default geometric sampling of every benchmark
            python benchmarks.py

            # Only parser benchmarks, 5 seconds each, in random order
            python benchmarks.py --pattern parse/ \\
                --strategy time-bound --time-limit 5 --batch-size 10 --seed 42
        """
        setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

        cli_overrides: dict[str, Any] = {
            "package_name": package_name,
            "strategy": _strategy_from_options(
                strategy, samples, limit, ratio, batch_size, time_limit
            ),
            "patterns": list(patterns),
            "seed": seed,
            "list_only": list_only,
            "raw": raw,
            "json_path": json_path,
        }

        try:
            profile_data = load_profile(profile_path) if profile_path else {}
            config = config_from_profile(profile_data, cli_overrides=cli_overrides)
            check_config(config)
        except (ValueError, FileNotFoundError) as exc:
            click.echo(f"Error: {exc}", err=True)
            raise SystemExit(1) from None

        run_suite(config, forest)

    return main


def default_main(
    package_name: str,
    benchmarks: Benchmark | Iterable[Benchmark],
    args: Sequence[str] | None = None,
) -> None:
    """Parse the command line and run *benchmarks*."""
    make_cli(package_name, benchmarks).main(args=args, standalone_mode=True)
