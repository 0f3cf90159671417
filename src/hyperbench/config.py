"""Run configuration and YAML profile loading.

Handles:
- Loading run profiles from YAML files.
- Merging CLI options with profile values.
- Validating the final configuration before execution.
- Building the sampling strategy and strategy selector for a run.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from hyperbench.identifiers import BenchmarkId
from hyperbench.selector import Selector, matching
from hyperbench.strategy import (
    SamplingStrategy,
    combine_all,
    fixed,
    geometric,
    repeat,
    time_bound,
)
from hyperbench.timing import seconds_to_ns

log = logging.getLogger("hyperbench")

STRATEGY_KINDS = ("geometric", "fixed", "time-bound")


# ---------------------------------------------------------------------------
# Strategy definitions
# ---------------------------------------------------------------------------


@dataclass
class StrategyDef:
    """Declarative description of one sampling strategy."""

    kind: str = "geometric"
    samples: int = 100  # batches per size (geometric, fixed)
    limit: int = 20  # largest batch size (geometric)
    ratio: float = 1.2  # progression ratio (geometric)
    batch_size: int = 1  # batch size (fixed, time-bound)
    time_limit_s: float = 5.0  # budget (time-bound)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dict holding only the fields *kind* uses."""
        d: dict[str, Any] = {"kind": self.kind}
        if self.kind == "geometric":
            d.update(samples=self.samples, limit=self.limit, ratio=self.ratio)
        elif self.kind == "fixed":
            d.update(samples=self.samples, batch_size=self.batch_size)
        elif self.kind == "time-bound":
            d.update(batch_size=self.batch_size, time_limit_s=self.time_limit_s)
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StrategyDef:
        """Deserialize from a dict, ignoring unknown fields."""
        known = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k.replace("-", "_"): v for k, v in data.items()}
        return cls(**{k: v for k, v in filtered.items() if k in known})


def build_strategy(defs: list[StrategyDef]) -> SamplingStrategy:
    """Build the combined sampling strategy for a list of definitions."""
    return combine_all(_build_one(d) for d in defs)


def _build_one(d: StrategyDef) -> SamplingStrategy:
    if d.kind == "geometric":
        return geometric(d.samples, d.limit, d.ratio)
    if d.kind == "fixed":
        return repeat(d.samples, fixed(d.batch_size))
    if d.kind == "time-bound":
        size = d.batch_size
        return time_bound(seconds_to_ns(d.time_limit_s), lambda: itertools.repeat(size))
    raise ValueError(f"Unknown strategy kind '{d.kind}'. Valid kinds: {', '.join(STRATEGY_KINDS)}")


# ---------------------------------------------------------------------------
# RunConfig
# ---------------------------------------------------------------------------


@dataclass
class RunConfig:
    """Resolved configuration for a benchmark run."""

    package_name: str = ""

    # Sampling
    strategies: list[StrategyDef] = field(default_factory=lambda: [StrategyDef()])
    # Identifier substring -> strategies; first matching entry wins.
    overrides: dict[str, list[StrategyDef]] = field(default_factory=dict)

    # Selection and ordering
    patterns: list[str] = field(default_factory=list)
    seed: int | None = None  # None = run in declaration order

    # Output
    raw: bool = False
    json_path: Path | None = None
    list_only: bool = False


def build_selector(config: RunConfig) -> Selector:
    """Build the strategy selector for *config*.

    Benchmarks not matching :attr:`RunConfig.patterns` are skipped.  The
    others use the first override whose key is a substring of their
    identifier, or the default strategies.
    """
    default = build_strategy(config.strategies)
    overrides = [(key, build_strategy(defs)) for key, defs in config.overrides.items()]
    base = matching(config.patterns, default)

    def select(bench_id: BenchmarkId) -> SamplingStrategy | None:
        chosen = base(bench_id)
        if chosen is None:
            return None
        for key, strategy in overrides:
            if key in bench_id:
                return strategy
        return chosen

    return select


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


def validate_config(config: RunConfig) -> list[ValidationError]:
    """Validate a run configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []

    if not config.package_name or not config.package_name.strip():
        errors.append(
            ValidationError(
                field="package_name",
                message="Package name must be non-empty.",
            )
        )

    if not config.strategies:
        errors.append(
            ValidationError(
                field="strategies",
                message="No sampling strategy defined; every benchmark would be empty.",
            )
        )

    for i, d in enumerate(config.strategies):
        errors.extend(_validate_strategy(f"strategies[{i}]", d))

    for key, defs in config.overrides.items():
        if not key:
            errors.append(
                ValidationError(
                    field="overrides",
                    message="Override patterns must be non-empty.",
                )
            )
        for i, d in enumerate(defs):
            errors.extend(_validate_strategy(f"overrides.{key}[{i}]", d))

    if config.list_only and config.json_path is not None:
        errors.append(
            ValidationError(
                field="json_path",
                message="--list runs nothing; the JSON report will not be written.",
                severity="warning",
            )
        )

    return errors


def _validate_strategy(where: str, d: StrategyDef) -> list[ValidationError]:
    errors: list[ValidationError] = []
    if d.kind not in STRATEGY_KINDS:
        errors.append(
            ValidationError(
                field=f"{where}.kind",
                message=(
                    f"Unknown strategy kind '{d.kind}'. Valid kinds: {', '.join(STRATEGY_KINDS)}"
                ),
            )
        )
        return errors

    if d.kind in ("geometric", "fixed") and d.samples < 1:
        errors.append(
            ValidationError(
                field=f"{where}.samples",
                message=f"Need at least 1 sample per batch size (got {d.samples}).",
            )
        )
    if d.kind == "geometric":
        if not d.ratio > 1:
            errors.append(
                ValidationError(
                    field=f"{where}.ratio",
                    message=f"Geometric ratio must be bigger than 1 (got {d.ratio}).",
                )
            )
        if d.limit < 1:
            errors.append(
                ValidationError(
                    field=f"{where}.limit",
                    message=f"Batch size limit must be at least 1 (got {d.limit}).",
                )
            )
    if d.kind in ("fixed", "time-bound") and d.batch_size < 1:
        errors.append(
            ValidationError(
                field=f"{where}.batch_size",
                message=f"Batch size must be at least 1 (got {d.batch_size}).",
            )
        )
    if d.kind == "time-bound" and d.time_limit_s <= 0:
        errors.append(
            ValidationError(
                field=f"{where}.time_limit_s",
                message=f"Time limit must be positive (got {d.time_limit_s}).",
            )
        )
    return errors


def check_config(config: RunConfig) -> None:
    """Log warnings and raise on fatal validation errors.

    Raises:
        ValueError: If the configuration has any error-severity problems.
    """
    errors = validate_config(config)
    for w in (e for e in errors if e.severity == "warning"):
        log.warning("Config warning: %s: %s", w.field, w.message)
    fatal = [e for e in errors if e.severity == "error"]
    if fatal:
        messages = [f"  {e.field}: {e.message}" for e in fatal]
        raise ValueError("Invalid run configuration:\n" + "\n".join(messages))


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load a run profile from a YAML file.

    Profile format::

        package_name: "mylib"
        seed: 1234
        raw: false
        patterns: ["parse/"]

        strategies:
          - kind: geometric
            samples: 100
            limit: 20
            ratio: 1.2

        overrides:
          "network/":
            - kind: time-bound
              time_limit_s: 5
              batch_size: 10

    Returns:
        The parsed YAML as a dict.
    """
    try:
        import yaml
    except ImportError as exc:
        raise ImportError(
            "PyYAML is required for loading run profiles. Install it with: pip install pyyaml"
        ) from exc

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    data = yaml.safe_load(profile_path.read_text())
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")

    return data


def _parse_strategy_list(where: str, raw: Any) -> list[StrategyDef]:
    if isinstance(raw, dict):
        raw = [raw]
    if not isinstance(raw, list):
        raise ValueError(f"Profile '{where}' must be a list of strategy mappings")
    defs: list[StrategyDef] = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValueError(
                f"Strategy in '{where}' must be a mapping, got {type(item).__name__}"
            )
        defs.append(StrategyDef.from_dict(item))
    return defs


def config_from_profile(
    profile_data: dict[str, Any],
    *,
    cli_overrides: dict[str, Any] | None = None,
) -> RunConfig:
    """Build a RunConfig from a parsed YAML profile.

    CLI overrides take precedence over profile values.  Keys match
    RunConfig field names; a ``strategy`` key holds a single
    :class:`StrategyDef` that replaces the profile's strategies.

    Args:
        profile_data: Parsed YAML profile dict.
        cli_overrides: Dict of CLI option values.  ``None`` values and
            empty sequences are ignored.

    Returns:
        RunConfig populated from the profile and overrides.
    """
    cli = {k: v for k, v in (cli_overrides or {}).items() if v not in (None, (), [])}

    config = RunConfig(
        package_name=cli.get("package_name") or profile_data.get("package_name", ""),
        seed=cli.get("seed", profile_data.get("seed")),
        raw=bool(cli.get("raw") or profile_data.get("raw", False)),
        list_only=bool(cli.get("list_only", False)),
    )

    if "strategies" in profile_data:
        config.strategies = _parse_strategy_list("strategies", profile_data["strategies"])
    if "strategy" in cli:
        config.strategies = [cli["strategy"]]

    overrides_data = profile_data.get("overrides", {}) or {}
    if not isinstance(overrides_data, dict):
        raise ValueError("Profile 'overrides' must be a mapping of pattern -> strategies")
    for key, raw in overrides_data.items():
        config.overrides[str(key)] = _parse_strategy_list(f"overrides.{key}", raw)

    patterns = cli.get("patterns") or profile_data.get("patterns", [])
    if isinstance(patterns, str):
        patterns = [patterns]
    config.patterns = [str(p) for p in patterns]

    json_path = cli.get("json_path") or profile_data.get("json_path")
    if json_path:
        config.json_path = Path(json_path)

    return config
