"""Aggregate statistics over timing samples.

Generic functions work on plain numbers.  The ``duration_*`` variants
convert every :class:`~timed.duration.Duration` to its nanosecond count,
run the generic aggregate, and wrap the result back into a Duration
(except the MAPE, which is dimensionless).  The generic functions
delegate to the Duration variants when handed Duration samples.

All functions take any iterable and work on a private copy; sample
order never matters.
"""

from __future__ import annotations

import math
import statistics
from dataclasses import dataclass
from typing import Iterable, Sequence, TypeVar, Union

from timed.duration import Duration
from timed.errors import EmptyInput

Number = Union[int, float]
N = TypeVar("N", int, float)


def _samples(values: Iterable, operation: str) -> list:
    data = list(values)
    if not data:
        raise EmptyInput(operation)
    return data


def _is_durations(data: Sequence) -> bool:
    """True when every sample is a Duration, False when none is.

    Raises:
        TypeError: If Durations and plain numbers are mixed.
    """
    kinds = {isinstance(x, Duration) for x in data}
    if len(kinds) > 1:
        raise TypeError("Cannot mix Duration and numeric samples")
    return kinds == {True}


def _truncating_half(total: int) -> int:
    """Integer half of *total*, truncated toward zero."""
    half = abs(total) // 2
    return half if total >= 0 else -half


# ---------------------------------------------------------------------------
# Generic aggregates
# ---------------------------------------------------------------------------


def minimum(values: Iterable[N]) -> N:
    """Smallest sample.

    Raises:
        EmptyInput: If *values* is empty.
    """
    data = _samples(values, "minimum")
    if _is_durations(data):
        return duration_min(data)  # type: ignore[return-value]
    return min(data)


def maximum(values: Iterable[N]) -> N:
    """Largest sample.

    Raises:
        EmptyInput: If *values* is empty.
    """
    data = _samples(values, "maximum")
    if _is_durations(data):
        return duration_max(data)  # type: ignore[return-value]
    return max(data)


def mean(values: Iterable[Number]) -> float:
    """Arithmetic mean as a float.

    Raises:
        EmptyInput: If *values* is empty.
    """
    data = _samples(values, "mean")
    if _is_durations(data):
        return duration_mean(data)  # type: ignore[return-value]
    return statistics.fmean(data)


def stddev(values: Iterable[Number]) -> float:
    """Population standard deviation (divides by N, not N-1).

    Raises:
        EmptyInput: If *values* is empty.
    """
    data = _samples(values, "stddev")
    if _is_durations(data):
        return duration_stddev(data)  # type: ignore[return-value]
    return float(statistics.pstdev(data))


def median(values: Iterable[N]) -> N | float:
    """Middle sample of a sorted copy.

    For an even count the two middle samples are averaged.  When both
    are integers the average is truncated to an integer, so
    ``median([1, 2, 3, 4]) == 2``.

    Raises:
        EmptyInput: If *values* is empty.
    """
    data = _samples(values, "median")
    if _is_durations(data):
        return duration_median(data)  # type: ignore[return-value]

    ordered = sorted(data)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 1:
        return ordered[mid]

    lo, hi = ordered[mid - 1], ordered[mid]
    if isinstance(lo, int) and isinstance(hi, int):
        return _truncating_half(lo + hi)
    return (lo + hi) / 2


def median_absolute_percent_error(values: Iterable[Number]) -> float:
    """Median of ``|x - median(x)| / x`` over all samples.

    A robust, dimensionless dispersion measure.  Samples must be
    non-zero: a zero sample raises ``ZeroDivisionError``.

    Raises:
        EmptyInput: If *values* is empty.
    """
    data = _samples(values, "median_absolute_percent_error")
    if _is_durations(data):
        return duration_mape(data)

    center = median(data)
    errors = [abs((x - center) / x) for x in data]
    return float(median(errors))


mape = median_absolute_percent_error


# ---------------------------------------------------------------------------
# Duration aggregates
# ---------------------------------------------------------------------------


def _nanoseconds(values: Iterable[Duration]) -> list[int]:
    return [d.total_nanoseconds for d in values]


def duration_min(values: Iterable[Duration]) -> Duration:
    """Shortest duration, or a zero Duration for empty input."""
    data = list(values)
    if not data:
        return Duration()
    return min(data)


def duration_max(values: Iterable[Duration]) -> Duration:
    """Longest duration, or a zero Duration for empty input."""
    data = list(values)
    if not data:
        return Duration()
    return max(data)


def duration_mean(values: Iterable[Duration]) -> Duration:
    """Mean duration, rounded to the nearest nanosecond."""
    return Duration.from_unit_value(mean(_nanoseconds(values)), "ns")


def duration_stddev(values: Iterable[Duration]) -> Duration:
    """Dispersion of the durations, expressed as a Duration.

    This is the median absolute percent error of the nanosecond counts
    wrapped as a nanosecond Duration, not a population standard
    deviation.  Use ``stddev(int(d) for d in values)`` for the latter.
    """
    return Duration.from_unit_value(median_absolute_percent_error(_nanoseconds(values)), "ns")


def duration_median(values: Iterable[Duration]) -> Duration:
    return Duration(nanoseconds=median(_nanoseconds(values)))


def duration_mape(values: Iterable[Duration]) -> float:
    return median_absolute_percent_error(_nanoseconds(values))


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


@dataclass
class Summary:
    """All report aggregates for one sample, in nanoseconds for durations."""

    n: int
    min: float
    max: float
    mean: float
    stddev: float
    median: float
    mape: float  # NaN when any sample is zero

    def to_dict(self) -> dict[str, float | int | None]:
        """Serialize to a JSON-safe dict with rounded values.

        A NaN MAPE becomes ``None`` so the dict dumps as strict JSON.
        """
        return {
            "n": self.n,
            "min": self.min,
            "max": self.max,
            "mean": round(self.mean, 6),
            "stddev": round(self.stddev, 6),
            "median": self.median,
            "mape": None if math.isnan(self.mape) else round(self.mape, 6),
        }


def summarize(values: Iterable[Number] | Iterable[Duration]) -> Summary:
    """Compute every report aggregate in one call.

    Durations are summarized as nanosecond counts.  The MAPE is NaN
    instead of raising when a sample is zero.

    Raises:
        EmptyInput: If *values* is empty.
    """
    data = _samples(values, "summarize")
    if _is_durations(data):
        data = _nanoseconds(data)

    if any(x == 0 for x in data):
        dispersion = float("nan")
    else:
        dispersion = median_absolute_percent_error(data)

    return Summary(
        n=len(data),
        min=minimum(data),
        max=maximum(data),
        mean=mean(data),
        stddev=stddev(data),
        median=median(data),
        mape=dispersion,
    )
