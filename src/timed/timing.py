"""Wall-clock and CPU-time stopwatches.

Both timers record a list of ``(start, end)`` clock readings in
nanoseconds.  The last interval is open (``end is None``) exactly while
the timer is running.  Durations are reported as
:class:`~timed.duration.Duration` values, minus an optional
per-instance calibration baseline.

Timers are not thread-safe: drive each instance from one thread.  The
wall timer still measures end-to-end time of work that spawns threads;
the CPU timer only counts CPU time of the thread that calls it.
"""

from __future__ import annotations

import sys
import time
from typing import Callable, Protocol

from timed.duration import Duration
from timed.logging import get_logger
from timed.stats import duration_mean

log = get_logger("timing")

ClockFn = Callable[[], int]
Interval = tuple[int, "int | None"]

CALIBRATION_ITERATIONS = 1000


class Stopwatch(Protocol):
    """Operations shared by :class:`WallTimer` and :class:`CPUTimer`."""

    @property
    def running(self) -> bool: ...

    @property
    def stopped(self) -> bool: ...

    @property
    def baseline(self) -> Duration: ...

    @property
    def intervals(self) -> list[Interval]: ...

    def start(self) -> None: ...

    def pause(self) -> Duration: ...

    def stop(self) -> Duration: ...

    def reset(self) -> None: ...

    def calibrate(self, iterations: int = CALIBRATION_ITERATIONS) -> Duration: ...

    def get_time(self) -> Duration: ...


# ---------------------------------------------------------------------------
# Interval bookkeeping
# ---------------------------------------------------------------------------


class _IntervalLog:
    """Start/stop state machine over raw clock readings."""

    __slots__ = ("clock", "intervals", "running", "stopped")

    def __init__(self, clock: ClockFn) -> None:
        self.clock = clock
        self.intervals: list[list[int | None]] = []
        self.running = False
        self.stopped = False

    def clear(self) -> None:
        self.intervals.clear()
        self.running = False
        self.stopped = False

    def open(self) -> None:
        if self.running:
            return
        if self.stopped:
            self.clear()
        self.running = True
        self.intervals.append([self.clock(), None])

    def close(self, *, stop: bool) -> int | None:
        """Close the open interval; return its length, or None if none was open."""
        if stop and self.intervals:
            self.stopped = True
        if not self.running:
            return None
        now = self.clock()
        interval = self.intervals[-1]
        interval[1] = now
        self.running = False
        return now - interval[0]  # type: ignore[operator]

    def elapsed(self) -> int:
        now = self.clock() if self.running else 0
        total = 0
        for start, end in self.intervals:
            total += (now if end is None else end) - start  # type: ignore[operator]
        return max(total, 0)

    @property
    def state(self) -> str:
        if self.running:
            return "running"
        if self.stopped:
            return "stopped"
        return "paused" if self.intervals else "idle"

    def snapshot(self) -> list[Interval]:
        return [(start, end) for start, end in self.intervals]  # type: ignore[misc]


def _calibrate(timer: WallTimer | CPUTimer, iterations: int) -> Duration:
    samples: list[Duration] = []
    for _ in range(iterations):
        timer.start()
        samples.append(timer.stop())
    return duration_mean(samples) if samples else Duration()


# ---------------------------------------------------------------------------
# WallTimer
# ---------------------------------------------------------------------------


class WallTimer:
    """Measures elapsed wall time on a monotonic clock.

    Usage::

        timer = WallTimer()
        timer.start()
        do_work()
        elapsed = timer.stop()

    or as a context manager::

        with WallTimer() as timer:
            do_work()
        print(timer.get_time())
    """

    def __init__(self, clock: ClockFn | None = None) -> None:
        self._log = _IntervalLog(clock or time.perf_counter_ns)
        self._baseline = Duration()

    @property
    def running(self) -> bool:
        return self._log.running

    @property
    def stopped(self) -> bool:
        return self._log.stopped

    @property
    def baseline(self) -> Duration:
        return self._baseline

    @property
    def intervals(self) -> list[Interval]:
        return self._log.snapshot()

    def start(self) -> None:
        """Start or resume.  After :meth:`stop`, starting clears the history."""
        self._log.open()

    def pause(self) -> Duration:
        """Pause and return the length of the interval just closed.

        Returns a zero Duration if the timer is not running.
        """
        ns = self._log.close(stop=False)
        return Duration(nanoseconds=ns or 0)

    def stop(self) -> Duration:
        """Stop and return the cumulative time of this run."""
        self._log.close(stop=True)
        return self.get_time()

    def reset(self) -> None:
        """Forget all intervals.  The calibration baseline is kept."""
        self._log.clear()

    def calibrate(self, iterations: int = CALIBRATION_ITERATIONS) -> Duration:
        """Measure the cost of an empty start/stop cycle and subtract it from now on."""
        self._baseline = _calibrate(WallTimer(self._log.clock), iterations)
        log.debug("Wall timer baseline: %s over %d cycles", self._baseline, iterations)
        return self._baseline

    def get_time(self) -> Duration:
        """Cumulative time, including the running interval, minus the baseline."""
        return Duration(nanoseconds=self._log.elapsed()) - self._baseline

    def __enter__(self) -> WallTimer:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def __repr__(self) -> str:
        return f"WallTimer({self._log.state}, {self.get_time()})"


# ---------------------------------------------------------------------------
# CPUTimer
# ---------------------------------------------------------------------------


def _zero_clock() -> int:
    return 0


def thread_cpu_clock() -> ClockFn:
    """Return a CPU clock for the calling thread, in nanoseconds.

    Falls back to a clock that always reads zero (with a warning) when
    the platform has no per-thread CPU clock.
    """
    clock = getattr(time, "thread_time_ns", None)
    if clock is not None:
        try:
            clock()
        except OSError:
            clock = None
    if clock is None:
        log.warning(
            "CPU timer is not supported on this platform (%s); CPU times will read as 0. "
            "Consider using WallTimer instead.",
            sys.platform,
        )
        return _zero_clock
    return clock


class CPUTimer:
    """Measures CPU time consumed by the calling thread.

    Sleeping or waiting on I/O does not advance this timer, and CPU
    time burnt by other threads is not counted.
    """

    def __init__(self, clock: ClockFn | None = None) -> None:
        self._log = _IntervalLog(clock or thread_cpu_clock())
        self._baseline = Duration()

    @property
    def running(self) -> bool:
        return self._log.running

    @property
    def stopped(self) -> bool:
        return self._log.stopped

    @property
    def baseline(self) -> Duration:
        return self._baseline

    @property
    def intervals(self) -> list[Interval]:
        return self._log.snapshot()

    def start(self) -> None:
        self._log.open()

    def pause(self) -> Duration:
        ns = self._log.close(stop=False)
        return Duration(nanoseconds=ns or 0)

    def stop(self) -> Duration:
        self._log.close(stop=True)
        return self.get_time()

    def reset(self) -> None:
        self._log.clear()

    def calibrate(self, iterations: int = CALIBRATION_ITERATIONS) -> Duration:
        self._baseline = _calibrate(CPUTimer(self._log.clock), iterations)
        log.debug("CPU timer baseline: %s over %d cycles", self._baseline, iterations)
        return self._baseline

    def get_time(self) -> Duration:
        return Duration(nanoseconds=self._log.elapsed()) - self._baseline

    def __enter__(self) -> CPUTimer:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def __repr__(self) -> str:
        return f"CPUTimer({self._log.state}, {self.get_time()})"


# ---------------------------------------------------------------------------
# Waiting helpers
# ---------------------------------------------------------------------------


def sleep(duration: Duration) -> None:
    """Block the calling thread for *duration* without using CPU."""
    time.sleep(duration.total_seconds())


def busy_wait(duration: Duration, clock: ClockFn | None = None) -> None:
    """Spin on the CPU until *duration* of wall time has passed."""
    timer = WallTimer(clock)
    timer.start()
    while timer.get_time() < duration:
        pass
    timer.stop()
