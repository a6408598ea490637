"""Per-benchmark timing samples and their baselines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from timed.duration import Duration
from timed.stats import summarize


@dataclass
class BenchResult:
    """Raw wall/CPU samples of one benchmark plus the idle-loop baselines.

    Samples are stored unadjusted; :meth:`adjusted_wall_times` and
    :meth:`adjusted_cpu_times` subtract the baseline, clamping at zero.
    """

    title: str = "Benchmark"
    info: str = ""
    wall_times: list[Duration] = field(default_factory=list)
    cpu_times: list[Duration] = field(default_factory=list)
    wall_time_baseline: Duration = field(default_factory=Duration)
    cpu_time_baseline: Duration = field(default_factory=Duration)

    @property
    def iterations(self) -> int:
        return len(self.wall_times)

    def add_wall_time(self, time: Duration) -> None:
        self.wall_times.append(time)

    def add_cpu_time(self, time: Duration) -> None:
        self.cpu_times.append(time)

    def adjusted_wall_times(self) -> list[Duration]:
        return [t - self.wall_time_baseline for t in self.wall_times]

    def adjusted_cpu_times(self) -> list[Duration]:
        return [t - self.cpu_time_baseline for t in self.cpu_times]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict; times are in nanoseconds."""
        data: dict[str, Any] = {
            "title": self.title,
            "info": self.info,
            "iterations": self.iterations,
            "wall_time_baseline_ns": int(self.wall_time_baseline),
            "cpu_time_baseline_ns": int(self.cpu_time_baseline),
            "wall_times_ns": [int(t) for t in self.wall_times],
            "cpu_times_ns": [int(t) for t in self.cpu_times],
        }
        if self.wall_times:
            data["wall_time"] = summarize(self.adjusted_wall_times()).to_dict()
        if self.cpu_times:
            data["cpu_time"] = summarize(self.adjusted_cpu_times()).to_dict()
        return data
