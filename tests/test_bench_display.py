"""Tests for timed.bench.display — report and statistics formatting."""

from __future__ import annotations

import unittest

from bench_test_helpers import make_result

from timed.bench.config import BenchConfig
from timed.bench.display import (
    format_config,
    format_duration,
    format_number,
    format_pct_error,
    format_result,
    format_stats,
    format_summary,
)
from timed.duration import Duration
from timed.stats import summarize


# ---------------------------------------------------------------------------
# Value formatting
# ---------------------------------------------------------------------------


class TestFormatNumber(unittest.TestCase):
    """Tests for format_number()."""

    def test_integral_float(self) -> None:
        """Integral values drop the decimal point."""
        self.assertEqual(format_number(3.0), "3")
        self.assertEqual(format_number(1500), "1500")

    def test_fraction(self) -> None:
        """Fractions keep six significant digits."""
        self.assertEqual(format_number(1.5), "1.5")
        self.assertEqual(format_number(0.1234567), "0.123457")

    def test_tiny_value(self) -> None:
        """Values that round away show as 0."""
        self.assertEqual(format_number(0.0000001), "0")

    def test_nan(self) -> None:
        """NaN shows as N/A."""
        self.assertEqual(format_number(float("nan")), "N/A")


class TestFormatDuration(unittest.TestCase):
    """Tests for format_duration()."""

    def test_duration(self) -> None:
        """Durations show in their adaptive unit."""
        self.assertEqual(format_duration(Duration(seconds=11)), "11.00 s")
        self.assertEqual(format_duration(Duration(milliseconds=750)), "750.00 ms")

    def test_nanosecond_float(self) -> None:
        """Plain numbers are read as nanoseconds."""
        self.assertEqual(format_duration(1500.0), "1500.00 ns")
        self.assertEqual(format_duration(750_000.0), "750.00 us")

    def test_unit_follows_components(self) -> None:
        """2 ms has no millisecond or microsecond component over 500, so it reads in ns."""
        self.assertEqual(format_duration(2_000_000.4), "2000000.00 ns")
        self.assertEqual(format_duration(Duration(hours=1)), "3600000000000.00 ns")

    def test_nan(self) -> None:
        """NaN shows as N/A."""
        self.assertEqual(format_duration(float("nan")), "N/A")


class TestFormatPctError(unittest.TestCase):
    """Tests for format_pct_error()."""

    def test_value(self) -> None:
        """Percent errors show six significant digits."""
        self.assertEqual(format_pct_error(0.5), "0.5")
        self.assertEqual(format_pct_error(0.0), "0")
        self.assertEqual(format_pct_error(0.012345678), "0.0123457")

    def test_nan(self) -> None:
        """An undefined percent error shows as N/A."""
        self.assertEqual(format_pct_error(float("nan")), "N/A")


# ---------------------------------------------------------------------------
# Benchmark report
# ---------------------------------------------------------------------------


class TestFormatConfig(unittest.TestCase):
    """Tests for format_config()."""

    def test_singular(self) -> None:
        """One iteration is singular."""
        self.assertEqual(format_config(BenchConfig(title="append")), "append (1 iteration)")

    def test_plural(self) -> None:
        """Several iterations are plural."""
        config = BenchConfig(title="append", iterations=20)
        self.assertEqual(format_config(config), "append (20 iterations)")


class TestFormatResult(unittest.TestCase):
    """Tests for the full benchmark report."""

    def test_full_report(self) -> None:
        """Every report line for a known sample."""
        result = make_result([100, 200, 400], [50, 50, 50], title="list append", info="CPython")
        expected = [
            "Benchmark: 'list append'",
            "Info: CPython",
            " Iterations: 3",
            " WallTime [ns]:",
            "  min:       100",
            "  max:       400",
            "  mean:      233",
            "  SD:        125",
            "  median:    200",
            "  %err:      0.5",
            " CPUTime [ns]:",
            "  min:       50",
            "  max:       50",
            "  mean:      50",
            "  SD:        0",
            "  median:    50",
            "  %err:      0",
        ]
        self.assertEqual(format_result(result).splitlines(), expected)

    def test_no_info_line(self) -> None:
        """An empty info string omits the Info line."""
        lines = format_result(make_result([10, 20, 30])).splitlines()
        self.assertEqual(lines[0], "Benchmark: 'Benchmark'")
        self.assertEqual(lines[1], " Iterations: 3")
        self.assertFalse(any(line.startswith("Info:") for line in lines))

    def test_baseline_subtracted(self) -> None:
        """Reported times have the timer baseline taken off."""
        result = make_result([110, 120], [60, 64], wall_baseline=10, cpu_baseline=4)
        lines = format_result(result).splitlines()
        self.assertEqual(lines[lines.index(" WallTime [ns]:") + 1], "  min:       100")
        self.assertEqual(lines[lines.index(" CPUTime [ns]:") + 1], "  min:       56")

    def test_zero_sample_shows_na(self) -> None:
        """A sample that adjusts to zero makes the percent error undefined."""
        result = make_result([10, 20], wall_baseline=10)
        lines = format_result(result).splitlines()
        wall_block = lines[lines.index(" WallTime [ns]:") :]
        self.assertIn("  %err:      N/A", wall_block)

    def test_no_samples(self) -> None:
        """A run with no samples says so instead of raising."""
        lines = format_result(make_result([])).splitlines()
        self.assertEqual(
            lines,
            [
                "Benchmark: 'Benchmark'",
                " Iterations: 0",
                " WallTime [ns]:",
                "  (no samples)",
                " CPUTime [ns]:",
                "  (no samples)",
            ],
        )


class TestFormatSummary(unittest.TestCase):
    """Tests for format_summary()."""

    def test_mean_plus_minus_sd(self) -> None:
        """The summary is mean +/- SD per timer."""
        result = make_result([100, 300], [50, 50])
        self.assertEqual(
            format_summary(result).splitlines(),
            ["Wall Time: (200 +/- 100) ns", "CPU Time : (50 +/- 0) ns"],
        )

    def test_no_samples(self) -> None:
        """No samples shows N/A."""
        self.assertEqual(
            format_summary(make_result([])).splitlines(),
            ["Wall Time: N/A", "CPU Time : N/A"],
        )


# ---------------------------------------------------------------------------
# Ad-hoc statistics
# ---------------------------------------------------------------------------


class TestFormatStats(unittest.TestCase):
    """Tests for format_stats()."""

    def test_rows(self) -> None:
        """One row per aggregate, durations in adaptive units."""
        lines = format_stats(summarize([Duration(microseconds=1), Duration(microseconds=3)])).splitlines()
        self.assertEqual(len(lines), 7)
        self.assertEqual(lines[0], "samples: 2")
        self.assertEqual(lines[1], "min:     1000.00 ns")
        self.assertEqual(lines[2], "max:     3000.00 ns")
        self.assertEqual(lines[6], "%err:    0.666667")

    def test_zero_sample(self) -> None:
        """A zero sample shows the percent error as N/A."""
        lines = format_stats(summarize([0, 10])).splitlines()
        self.assertEqual(lines[-1], "%err:    N/A")


if __name__ == "__main__":
    unittest.main()
