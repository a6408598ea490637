"""Benchmark configuration and YAML profile loading.

Handles:
- Default settings for a benchmark run.
- Loading benchmark profiles from YAML files.
- Merging CLI options over profile values.
- Validating the final configuration before execution.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from timed.logging import get_logger

log = get_logger("bench.config")

DEFAULT_BASELINE_ITERATIONS = 500


# ---------------------------------------------------------------------------
# BenchConfig
# ---------------------------------------------------------------------------


@dataclass
class BenchConfig:
    """Resolved configuration for one benchmark."""

    title: str = "Benchmark"
    info: str = ""

    # Iteration control
    iterations: int = 1  # Measured iterations
    warmup: int = 0  # Unmeasured iterations run first
    baseline_iterations: int = DEFAULT_BASELINE_ITERATIONS  # Idle-loop runs for overhead

    @property
    def total_iterations(self) -> int:
        """Iterations actually executed (warmup + measured)."""
        return self.warmup + self.iterations

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


def validate_config(config: BenchConfig) -> list[ValidationError]:
    """Validate a benchmark configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []

    if not config.title or not config.title.strip():
        errors.append(ValidationError(field="title", message="Benchmark title must be non-empty."))

    if config.iterations < 1:
        errors.append(
            ValidationError(
                field="iterations",
                message=f"Need at least 1 measured iteration (got {config.iterations}).",
            )
        )
    elif config.iterations < 3:
        errors.append(
            ValidationError(
                field="iterations",
                message=(
                    f"Only {config.iterations} measured iteration(s); "
                    f"spread statistics will not be meaningful."
                ),
                severity="warning",
            )
        )

    if config.warmup < 0:
        errors.append(
            ValidationError(
                field="warmup",
                message=f"Warmup iterations cannot be negative (got {config.warmup}).",
            )
        )

    if config.baseline_iterations < 0:
        errors.append(
            ValidationError(
                field="baseline_iterations",
                message=(
                    f"Baseline iterations cannot be negative (got {config.baseline_iterations})."
                ),
            )
        )
    elif config.baseline_iterations == 0:
        errors.append(
            ValidationError(
                field="baseline_iterations",
                message="Baseline disabled; timer overhead will not be subtracted.",
                severity="warning",
            )
        )

    return errors


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load a benchmark profile from a YAML file.

    Profile format::

        title: "list append"
        info: "CPython, no preallocation"
        iterations: 1000
        warmup: 10
        baseline_iterations: 500

        # Only used by ``timed bench run``.
        setup: "workloads:reset"
        target: "workloads:append"
        clean: "workloads:clear"

    Returns:
        The parsed YAML as a dict.
    """
    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    data = yaml.safe_load(profile_path.read_text())

    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")

    return data


def config_from_profile(
    profile_data: dict[str, Any],
    *,
    cli_overrides: dict[str, Any] | None = None,
) -> BenchConfig:
    """Build a BenchConfig from a parsed YAML profile.

    CLI overrides that are not None take precedence over profile
    values.  Keys in either mapping that are not BenchConfig fields
    are ignored here.

    Raises:
        ValueError: If a numeric setting is not an integer.
    """
    known = {f.name for f in fields(BenchConfig)}
    values: dict[str, Any] = {k: v for k, v in profile_data.items() if k in known}
    for key, value in (cli_overrides or {}).items():
        if key in known and value is not None:
            values[key] = value

    for key in ("iterations", "warmup", "baseline_iterations"):
        if key in values and (isinstance(values[key], bool) or not isinstance(values[key], int)):
            raise ValueError(f"Profile '{key}' must be an integer, got {values[key]!r}")
    for key in ("title", "info"):
        if key in values and values[key] is not None:
            values[key] = str(values[key])

    unknown = sorted(set(profile_data) - known - {"setup", "target", "clean"})
    if unknown:
        log.warning("Ignoring unknown profile keys: %s", ", ".join(unknown))

    return BenchConfig(**values)
