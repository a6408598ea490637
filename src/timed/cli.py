"""Command-line interface for timed.

Provides the ``timed`` entry point with ``convert``, ``reformat``,
``stats`` and ``sleep`` subcommands, plus the ``bench`` group.
"""

from __future__ import annotations

import json
from pathlib import Path

import click

from timed import __version__
from timed.bench.display import format_duration, format_number, format_stats
from timed.duration import Duration
from timed.errors import TimedError
from timed.logging import setup_logging
from timed.stats import summarize
from timed.timing import CPUTimer, WallTimer, busy_wait, sleep


@click.group()
@click.version_option(version=__version__, prog_name="timed")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Also write a DEBUG log to this file.",
)
def main(verbose: bool, quiet: bool, log_file: Path | None) -> None:
    """timed: measure wall and CPU time, convert durations, run micro-benchmarks."""
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)


# Register subgroups.
from timed.bench_cli import bench as bench_group  # noqa: E402

main.add_command(bench_group)


def _fail(exc: Exception) -> None:
    click.echo(f"Error: {exc}", err=True)
    raise SystemExit(1) from exc


# ---------------------------------------------------------------------------
# convert
# ---------------------------------------------------------------------------


@main.command()
@click.argument("value", type=float)
@click.argument("unit")
@click.option(
    "--to",
    "targets",
    multiple=True,
    help="Target unit (repeatable). Default: the adaptive unit.",
)
def convert(value: float, unit: str, targets: tuple[str, ...]) -> None:
    """Convert VALUE expressed in UNIT to other units.

    Units: d|days, h|hours, m|minutes, s|seconds, ms|milliseconds,
    us|microseconds, ns|nanoseconds.

    \b
    Examples:
        timed convert 1.5 s --to ms
        timed convert 90 minutes
    """
    try:
        duration = Duration.from_unit_value(value, unit)
        if not targets:
            click.echo(f"{format_duration(duration)} ({int(duration)} ns)")
            return
        for target in targets:
            click.echo(f"{format_number(duration.time_in_unit(target))} {target}")
    except (TimedError, ValueError) as exc:
        _fail(exc)


# ---------------------------------------------------------------------------
# reformat
# ---------------------------------------------------------------------------


@main.command()
@click.argument("text")
@click.option("--parse", "parse_fmt", required=True, help="Template TEXT is written in.")
@click.option(
    "--format",
    "out_fmt",
    default="auto",
    show_default=True,
    help="Output template.",
)
def reformat(text: str, parse_fmt: str, out_fmt: str) -> None:
    """Parse TEXT with one template and print it with another.

    Templates use %d %h %m %s %ms %us %ns placeholders and %% for a
    literal percent sign.

    \b
    Examples:
        timed reformat "10:10:10" --parse "%s:%ms:%us" --format "%ns"
        timed reformat "1d 10h" --parse "%d %h" --format "%h hours"
    """
    try:
        duration = Duration.parse(text, parse_fmt)
        click.echo(duration.format(out_fmt))
    except TimedError as exc:
        _fail(exc)


# ---------------------------------------------------------------------------
# stats
# ---------------------------------------------------------------------------


@main.command("stats")
@click.argument("samples", nargs=-1)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON (nanoseconds).")
def stats_cmd(samples: tuple[str, ...], as_json: bool) -> None:
    """Summarize duration SAMPLES such as 10ms 12.5ms 11ms.

    With no SAMPLES, reads whitespace-separated quantities from stdin.
    """
    tokens = list(samples) or click.get_text_stream("stdin").read().split()
    try:
        durations = [Duration.parse_quantity(token) for token in tokens]
        summary = summarize(durations)
    except TimedError as exc:
        _fail(exc)
        return

    if as_json:
        click.echo(json.dumps(summary.to_dict(), indent=2))
    else:
        click.echo(format_stats(summary))


# ---------------------------------------------------------------------------
# sleep
# ---------------------------------------------------------------------------


@main.command("sleep")
@click.argument("seconds", type=float, default=5.0)
@click.option("--busy", is_flag=True, help="Busy-wait instead of sleeping.")
def sleep_cmd(seconds: float, busy: bool) -> None:
    """Time a sleep of SECONDS with both timers.

    A sleep shows wall time only; --busy burns CPU for the same span,
    so wall and CPU time come out close.
    """
    try:
        span = Duration.from_unit_value(seconds, "s")
    except ValueError as exc:
        _fail(exc)
        return

    click.echo(f"{'Spinning' if busy else 'Sleeping'} for {format_number(seconds)} seconds...")
    wall_timer = WallTimer()
    cpu_timer = CPUTimer()
    wall_timer.start()
    cpu_timer.start()
    if busy:
        busy_wait(span)
    else:
        sleep(span)
    cpu_timer.stop()
    wall_timer.stop()
    click.echo(f"Wall Time: {wall_timer.get_time()}")
    click.echo(f"CPU Time : {cpu_timer.get_time()}")
