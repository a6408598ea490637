"""Tests for timed.cli — the top-level Click CLI."""

from __future__ import annotations

import json
import logging
import tempfile
import unittest
from pathlib import Path

from click.testing import CliRunner, Result

from timed import __version__
from timed.cli import main


def _reset_logging() -> None:
    logger = logging.getLogger("timed")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


class CliTestCase(unittest.TestCase):
    """Invokes ``main`` and drops the handlers it installs afterwards."""

    def invoke(self, args: list[str], **kwargs: object) -> Result:
        self.addCleanup(_reset_logging)
        return CliRunner().invoke(main, args, **kwargs)  # type: ignore[arg-type]


class TestMainGroup(CliTestCase):
    """Tests for the top-level group options."""

    def test_help(self) -> None:
        """The group lists every subcommand."""
        result = self.invoke(["--help"])
        self.assertEqual(result.exit_code, 0)
        for command in ("convert", "reformat", "stats", "sleep", "bench"):
            self.assertIn(command, result.output)

    def test_version(self) -> None:
        """--version prints the package version."""
        result = self.invoke(["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)

    def test_log_file(self) -> None:
        """--log-file writes a log file."""
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp) / "timed.log"
            result = self.invoke(["--log-file", str(log_path), "stats", "1ms", "2ms"])
            _reset_logging()
            self.assertEqual(result.exit_code, 0)
            self.assertTrue(log_path.exists())


# ---------------------------------------------------------------------------
# convert
# ---------------------------------------------------------------------------


class TestConvert(CliTestCase):
    """Tests for timed convert."""

    def test_adaptive_default(self) -> None:
        """Without --to, the value shows in its adaptive unit plus ns."""
        result = self.invoke(["convert", "90", "minutes"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output.strip(), "90.00 m (5400000000000 ns)")

    def test_targets(self) -> None:
        """Each --to prints one line."""
        result = self.invoke(["convert", "1.5", "s", "--to", "ms", "--to", "us"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output.splitlines(), ["1500 ms", "1500000 us"])

    def test_fractional_target(self) -> None:
        """Fractional results keep their decimals."""
        result = self.invoke(["convert", "90", "s", "--to", "minutes"])
        self.assertEqual(result.output.strip(), "1.5 minutes")

    def test_unknown_unit(self) -> None:
        """An unknown source unit exits 1 with the unit named."""
        result = self.invoke(["convert", "1", "fortnights"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error: Unknown unit: 'fortnights'", result.output)

    def test_unknown_target_unit(self) -> None:
        """An unknown --to unit exits 1."""
        result = self.invoke(["convert", "1", "s", "--to", "sec"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Unknown unit", result.output)

    def test_negative_value(self) -> None:
        """Negative values exit 1."""
        result = self.invoke(["convert", "--", "-1", "s"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("non-negative", result.output)


# ---------------------------------------------------------------------------
# reformat
# ---------------------------------------------------------------------------


class TestReformat(CliTestCase):
    """Tests for timed reformat."""

    def test_to_nanoseconds(self) -> None:
        """Parse s:ms:us and print total nanoseconds."""
        result = self.invoke(["reformat", "10:10:10", "--parse", "%s:%ms:%us", "--format", "%ns"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output.strip(), "10010010000")

    def test_hours(self) -> None:
        """'%h' alone includes days."""
        result = self.invoke(["reformat", "1d 10h", "--parse", "%d %h", "--format", "%h hours"])
        self.assertEqual(result.output.strip(), "34 hours")

    def test_auto_format(self) -> None:
        """Without --format the auto template is used."""
        result = self.invoke(["reformat", "1d 10h", "--parse", "%d %h"])
        self.assertEqual(result.output.strip(), "1d:10h:0m-0s")

    def test_parse_is_required(self) -> None:
        """--parse is a required option."""
        result = self.invoke(["reformat", "10"])
        self.assertEqual(result.exit_code, 2)

    def test_bad_template(self) -> None:
        """A malformed template exits 1."""
        result = self.invoke(["reformat", "10", "--parse", "%q"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Invalid time format", result.output)


# ---------------------------------------------------------------------------
# stats
# ---------------------------------------------------------------------------


class TestStats(CliTestCase):
    """Tests for timed stats."""

    def test_table(self) -> None:
        """Samples are summarized as a table."""
        result = self.invoke(["stats", "10ms", "20ms", "40ms"])
        self.assertEqual(result.exit_code, 0, result.output)
        lines = result.output.splitlines()
        self.assertEqual(lines[0], "samples: 3")
        self.assertEqual(lines[-1], "%err:    0.5")

    def test_json(self) -> None:
        """--json emits the summary in nanoseconds."""
        result = self.invoke(["stats", "10ms", "20ms", "40ms", "--json"])
        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(result.output)
        self.assertEqual(data["n"], 3)
        self.assertEqual(data["min"], 10_000_000)
        self.assertEqual(data["median"], 20_000_000)
        self.assertEqual(data["mape"], 0.5)

    def test_json_zero_sample_is_strict_json(self) -> None:
        """A zero sample reports the MAPE as null, not NaN."""
        result = self.invoke(["stats", "0ns", "10ns", "--json"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertNotIn("NaN", result.output)
        self.assertIsNone(json.loads(result.output)["mape"])

    def test_reads_stdin(self) -> None:
        """With no arguments, samples come from stdin."""
        result = self.invoke(["stats"], input="1ms\n3ms\n")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("samples: 2", result.output)

    def test_bad_quantity(self) -> None:
        """An unparseable sample exits 1."""
        result = self.invoke(["stats", "abc"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error:", result.output)

    def test_no_samples(self) -> None:
        """Empty input exits 1."""
        result = self.invoke(["stats"], input="")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("at least one sample", result.output)


# ---------------------------------------------------------------------------
# sleep
# ---------------------------------------------------------------------------


class TestSleep(CliTestCase):
    """Tests for timed sleep."""

    def test_sleep(self) -> None:
        """A sleep reports both timers."""
        result = self.invoke(["sleep", "0"])
        self.assertEqual(result.exit_code, 0, result.output)
        lines = result.output.splitlines()
        self.assertEqual(lines[0], "Sleeping for 0 seconds...")
        self.assertTrue(lines[1].startswith("Wall Time: "))
        self.assertTrue(lines[2].startswith("CPU Time : "))

    def test_busy(self) -> None:
        """--busy spins instead of sleeping."""
        result = self.invoke(["sleep", "0.01", "--busy"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Spinning for 0.01 seconds...", result.output)

    def test_negative(self) -> None:
        """A negative span exits 1."""
        result = self.invoke(["sleep", "--", "-1"])
        self.assertEqual(result.exit_code, 1)


if __name__ == "__main__":
    unittest.main()
