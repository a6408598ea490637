"""timed: wall-clock and CPU timers, a nanosecond Duration, and benchmarks."""

from timed.duration import Duration, TimeValueUnit
from timed.errors import EmptyInput, FormatError, InvalidUnit, TimedError
from timed.timing import CPUTimer, Stopwatch, WallTimer

__version__ = "0.3.0"

__all__ = [
    "CPUTimer",
    "Duration",
    "EmptyInput",
    "FormatError",
    "InvalidUnit",
    "Stopwatch",
    "TimeValueUnit",
    "TimedError",
    "WallTimer",
    "__version__",
]
