"""CLI commands for timed bench.

Subcommands:
    timed bench run         Benchmark a module:callable target
    timed bench calibrate   Measure the overhead of each timer
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any

import click

from timed.bench.config import config_from_profile, load_profile
from timed.bench.display import format_duration, format_result
from timed.bench.runner import Benchmark, load_operations
from timed.logging import get_logger
from timed.timing import CALIBRATION_ITERATIONS, CPUTimer, WallTimer

log = get_logger("cli")

DEFAULT_CLI_ITERATIONS = 5


@click.group()
def bench() -> None:
    """Benchmark Python callables with wall-clock and CPU timers."""


# ---------------------------------------------------------------------------
# bench run
# ---------------------------------------------------------------------------


@bench.command()
@click.argument("target", required=False)
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(exists=True, path_type=Path),
    help="YAML profile with settings (and optionally the target).",
)
@click.option(
    "--setup",
    default=None,
    help="module:callable called once before benchmarking.",
)
@click.option(
    "--clean",
    default=None,
    help="module:callable called before every iteration, outside the timed region.",
)
@click.option(
    "-n",
    "--iterations",
    type=int,
    default=None,
    help=f"Measured iterations (default: {DEFAULT_CLI_ITERATIONS}).",
)
@click.option("--warmup", type=int, default=None, help="Unmeasured iterations (default: 0).")
@click.option(
    "--baseline-iterations",
    type=int,
    default=None,
    help="Idle-loop runs used to measure timer overhead (default: 500).",
)
@click.option("--title", default=None, help="Report title.")
@click.option("--info", default=None, help="Extra line shown under the title.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON (nanoseconds).")
@click.option("--progress", is_flag=True, help="Log every iteration.")
def run(  # noqa: PLR0913
    target: str | None,
    profile_path: Path | None,
    setup: str | None,
    clean: str | None,
    iterations: int | None,
    warmup: int | None,
    baseline_iterations: int | None,
    title: str | None,
    info: str | None,
    as_json: bool,
    progress: bool,
) -> None:
    """Benchmark TARGET and print the baseline-adjusted report.

    TARGET, --setup and --clean name callables as ``module:attribute``.
    The current directory is added to the import path.

    \b
    Examples:
        timed bench run workloads:sort_small -n 200
        timed bench run workloads:append --setup workloads:reset --clean workloads:clear
        timed bench run --profile bench-append.yaml --iterations 50
    """
    profile_data: dict[str, Any] = {}
    if profile_path is not None:
        try:
            profile_data = load_profile(profile_path)
        except (OSError, ValueError) as exc:
            click.echo(f"Error: {exc}", err=True)
            raise SystemExit(1) from exc
    profile_data.setdefault("iterations", DEFAULT_CLI_ITERATIONS)

    target = target or profile_data.get("target")
    if not target:
        raise click.UsageError("Provide TARGET or a profile with a 'target' key.")

    cli_overrides: dict[str, object] = {
        "title": title,
        "info": info,
        "iterations": iterations,
        "warmup": warmup,
        "baseline_iterations": baseline_iterations,
    }

    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        config = config_from_profile(profile_data, cli_overrides=cli_overrides)
        op, precedent_op = load_operations(
            str(target),
            setup=setup if setup is not None else str(profile_data.get("setup") or ""),
            clean=clean if clean is not None else str(profile_data.get("clean") or ""),
        )
        result = Benchmark(op, precedent_op, config).run(verbose=progress)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        click.echo("\nBenchmark interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904
    except Exception as exc:  # noqa: BLE001
        log.debug("Target raised", exc_info=True)
        click.echo(f"Error: target raised {type(exc).__name__}: {exc}", err=True)
        raise SystemExit(1) from exc

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        click.echo(format_result(result))


# ---------------------------------------------------------------------------
# bench calibrate
# ---------------------------------------------------------------------------


@bench.command()
@click.option(
    "--iterations",
    type=int,
    default=CALIBRATION_ITERATIONS,
    show_default=True,
    help="Empty start/stop cycles per timer.",
)
def calibrate(iterations: int) -> None:
    """Measure the overhead of an empty start/stop cycle for each timer."""
    if iterations < 1:
        raise click.UsageError("--iterations must be at least 1")

    for label, timer in (("Wall timer", WallTimer()), ("CPU timer ", CPUTimer())):
        baseline = timer.calibrate(iterations)
        click.echo(f"{label} overhead: {format_duration(baseline)} ({int(baseline)} ns)")
