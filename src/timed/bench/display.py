"""Text formatting for benchmark results and duration statistics.

The benchmark report layout is fixed: title, optional info line,
iteration count, then wall-time and CPU-time blocks with min, max,
mean, SD, median and %err in that order, all in nanoseconds.
"""

from __future__ import annotations

import math

from timed.bench.config import BenchConfig
from timed.bench.results import BenchResult
from timed.duration import Duration
from timed.stats import Summary, summarize

_REPORT_FIELDS = ("min", "max", "mean", "SD", "median", "%err")


# ---------------------------------------------------------------------------
# Value formatting
# ---------------------------------------------------------------------------


def format_number(value: float) -> str:
    """Format a float without exponent or trailing zeros."""
    if math.isnan(value):
        return "N/A"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.6f}".rstrip("0").rstrip(".")


def format_duration(value: Duration | float) -> str:
    """Format a Duration (or a nanosecond count) in its adaptive unit."""
    if not isinstance(value, Duration):
        if math.isnan(value):
            return "N/A"
        value = Duration.from_unit_value(max(value, 0.0), "ns")
    return str(value.adaptive_unit())


def format_pct_error(value: float) -> str:
    if math.isnan(value):
        return "N/A"
    return f"{value:.6g}"


# ---------------------------------------------------------------------------
# Benchmark report
# ---------------------------------------------------------------------------


def format_config(config: BenchConfig) -> str:
    """One-line description of a benchmark that has not run yet."""
    noun = "iteration" if config.iterations == 1 else "iterations"
    return f"{config.title} ({config.iterations} {noun})"


def _report_values(summary: Summary) -> list[str]:
    return [
        str(int(summary.min)),
        str(int(summary.max)),
        str(round(summary.mean)),
        str(round(summary.stddev)),
        str(round(summary.median)),
        format_pct_error(summary.mape),
    ]


def _format_block(heading: str, samples: list[Duration]) -> list[str]:
    lines = [f" {heading} [ns]:"]
    if not samples:
        lines.append("  (no samples)")
        return lines
    for name, value in zip(_REPORT_FIELDS, _report_values(summarize(samples))):
        lines.append(f"  {name + ':':<11s}{value}")
    return lines


def format_result(result: BenchResult) -> str:
    """Format the full benchmark report, baseline-adjusted.

    Example::

        Benchmark: 'list append'
         Iterations: 3
         WallTime [ns]:
          min:       95
          max:       140
          ...
    """
    lines = [f"Benchmark: '{result.title}'"]
    if result.info:
        lines.append(f"Info: {result.info}")
    lines.append(f" Iterations: {result.iterations}")
    lines.extend(_format_block("WallTime", result.adjusted_wall_times()))
    lines.extend(_format_block("CPUTime", result.adjusted_cpu_times()))
    return "\n".join(lines)


def format_summary(result: BenchResult) -> str:
    """Two-line ``mean +/- SD`` summary used by :func:`timed.bench.runner.timed`."""
    lines = []
    for label, samples in (
        ("Wall Time", result.adjusted_wall_times()),
        ("CPU Time ", result.adjusted_cpu_times()),
    ):
        if not samples:
            lines.append(f"{label}: N/A")
            continue
        summary = summarize(samples)
        lines.append(f"{label}: ({summary.mean:.0f} +/- {summary.stddev:.0f}) ns")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Ad-hoc sample statistics
# ---------------------------------------------------------------------------


def format_stats(summary: Summary) -> str:
    """Aggregates of a nanosecond sample, shown in adaptive units."""
    rows = [
        ("samples", str(summary.n)),
        ("min", format_duration(summary.min)),
        ("max", format_duration(summary.max)),
        ("mean", format_duration(summary.mean)),
        ("stddev", format_duration(summary.stddev)),
        ("median", format_duration(summary.median)),
        ("%err", format_pct_error(summary.mape)),
    ]
    width = max(len(name) for name, _ in rows) + 2
    return "\n".join(f"{name + ':':<{width}s}{value}" for name, value in rows)
