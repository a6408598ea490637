"""Benchmark execution engine.

Orchestrates:
1. Configuration validation
2. Idle-loop baseline measurement (timer overhead)
3. Warmup iterations (timed but discarded)
4. Measured iterations, each preceded by the optional precedent
   operation that resets state outside the timed region
5. Progress reporting
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import Any, Callable

from timed.bench.config import BenchConfig, validate_config
from timed.bench.display import format_config, format_result, format_summary
from timed.bench.results import BenchResult
from timed.duration import Duration
from timed.logging import get_logger
from timed.stats import duration_mean
from timed.timing import ClockFn, CPUTimer, WallTimer

log = get_logger("bench")

Operation = Callable[[], Any]


def _noop() -> None:
    return None


# ---------------------------------------------------------------------------
# Progress callback
# ---------------------------------------------------------------------------


@dataclass
class BenchProgress:
    """Progress info passed to the callback after every iteration."""

    phase: str  # "warmup" or "measure"
    iteration: int  # 1-based within the phase
    total_iterations: int
    wall_time: Duration
    cpu_time: Duration


ProgressCallback = Callable[[BenchProgress], None]


def _log_progress(progress: BenchProgress) -> None:
    marker = "W" if progress.phase == "warmup" else "M"
    log.info(
        "  %s%d/%d  wall %s  cpu %s",
        marker,
        progress.iteration,
        progress.total_iterations,
        progress.wall_time,
        progress.cpu_time,
    )


# ---------------------------------------------------------------------------
# Benchmark
# ---------------------------------------------------------------------------


class Benchmark:
    """Times an operation over a number of iterations.

    Usage::

        bm = Benchmark(lambda: sorted(data), config=BenchConfig(iterations=100))
        result = bm.run()
        print(bm)

    Args:
        op: The operation to time.
        precedent_op: Run before every iteration, outside the timed
            region, to reset state.
        config: Iteration counts and report labels.
        progress_callback: Called after each iteration.
        wall_clock: Clock for the wall timers (nanoseconds).
        cpu_clock: Clock for the CPU timers (nanoseconds).
    """

    def __init__(
        self,
        op: Operation,
        precedent_op: Operation | None = None,
        config: BenchConfig | None = None,
        *,
        progress_callback: ProgressCallback | None = None,
        wall_clock: ClockFn | None = None,
        cpu_clock: ClockFn | None = None,
    ) -> None:
        self.op = op
        self.precedent_op = precedent_op or _noop
        self.config = config or BenchConfig()
        self.progress_callback = progress_callback
        self._wall_clock = wall_clock
        self._cpu_clock = cpu_clock
        self.result = BenchResult(title=self.config.title, info=self.config.info)
        self.has_run = False

    def run(self, verbose: bool = False) -> BenchResult:
        """Execute the benchmark and return its result.

        Args:
            verbose: Log every iteration when no progress callback is set.

        Raises:
            ValueError: If the configuration is invalid.
        """
        errors = validate_config(self.config)
        for w in (e for e in errors if e.severity == "warning"):
            log.warning("Config warning: %s: %s", w.field, w.message)
        fatal = [e for e in errors if e.severity == "error"]
        if fatal:
            messages = [f"  {e.field}: {e.message}" for e in fatal]
            raise ValueError("Invalid benchmark configuration:\n" + "\n".join(messages))

        callback = self.progress_callback or (_log_progress if verbose else None)
        cfg = self.config
        self.result = BenchResult(title=cfg.title, info=cfg.info)
        self._set_timer_baselines()

        wall_timer = WallTimer(self._wall_clock)
        cpu_timer = CPUTimer(self._cpu_clock)
        log.debug("Running %s", format_config(cfg))

        for i in range(cfg.total_iterations):
            self.precedent_op()
            wall_timer.start()
            cpu_timer.start()
            self.op()
            cpu_time = cpu_timer.stop()
            wall_time = wall_timer.stop()

            warmup = i < cfg.warmup
            if not warmup:
                self.result.add_wall_time(wall_time)
                self.result.add_cpu_time(cpu_time)

            if callback is not None:
                callback(
                    BenchProgress(
                        phase="warmup" if warmup else "measure",
                        iteration=i + 1 if warmup else i - cfg.warmup + 1,
                        total_iterations=cfg.warmup if warmup else cfg.iterations,
                        wall_time=wall_time,
                        cpu_time=cpu_time,
                    )
                )

        self.has_run = True
        return self.result

    def _set_timer_baselines(self) -> None:
        """Measure the mean cost of timing an empty operation."""
        wall_timer = WallTimer(self._wall_clock)
        cpu_timer = CPUTimer(self._cpu_clock)
        wall_samples: list[Duration] = []
        cpu_samples: list[Duration] = []

        for _ in range(self.config.baseline_iterations):
            wall_timer.start()
            cpu_timer.start()
            _noop()
            cpu_samples.append(cpu_timer.stop())
            wall_samples.append(wall_timer.stop())

        if wall_samples:
            self.result.wall_time_baseline = duration_mean(wall_samples)
            self.result.cpu_time_baseline = duration_mean(cpu_samples)
        log.debug(
            "Timer baselines: wall %s, cpu %s",
            self.result.wall_time_baseline,
            self.result.cpu_time_baseline,
        )

    def __str__(self) -> str:
        if self.has_run:
            return format_result(self.result)
        return format_config(self.config)


# ---------------------------------------------------------------------------
# One-shot helpers
# ---------------------------------------------------------------------------


def timed(
    op: Operation,
    iterations: int = 5,
    clean_op: Operation | None = None,
) -> BenchResult:
    """Benchmark *op* with default settings and log a mean +/- SD summary."""
    bm = Benchmark(op, clean_op, BenchConfig(iterations=iterations))
    result = bm.run()
    for line in format_summary(result).splitlines():
        log.info("%s", line)
    return result


def resolve_target(target: str) -> Operation:
    """Import the callable named by a ``module:attribute`` target.

    The attribute part may be dotted to reach into classes, e.g.
    ``"mypkg.workloads:Sorter.small"``.

    Raises:
        ValueError: If *target* is malformed, the module cannot be
            imported, an attribute is missing, or the object is not
            callable.
    """
    module_name, sep, attr_path = target.partition(":")
    module_name = module_name.strip()
    attr_path = attr_path.strip()
    if not sep or not module_name or not attr_path:
        raise ValueError(f"Target must look like 'module:callable' (got {target!r})")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise ValueError(f"Cannot import module {module_name!r}: {exc}") from exc

    for name in attr_path.split("."):
        try:
            obj = getattr(obj, name)
        except AttributeError:
            raise ValueError(f"{target!r} has no attribute {name!r}") from None

    if not callable(obj):
        raise ValueError(f"{target!r} is not callable (got {type(obj).__name__})")
    log.debug("Resolved %s", target)
    return obj


def load_operations(
    target: str,
    setup: str | None = None,
    clean: str | None = None,
) -> tuple[Operation, Operation | None]:
    """Resolve the benchmark, setup and clean targets.

    All three are ``module:callable`` strings.  *setup* is called once,
    immediately; state shared between the callables lives in their
    module.

    Returns:
        ``(op, precedent_op)``; *precedent_op* is None when *clean* is empty.

    Raises:
        ValueError: If any target cannot be resolved.
    """
    op = resolve_target(target)
    precedent_op = resolve_target(clean) if clean else None
    if setup:
        resolve_target(setup)()
    return op, precedent_op
