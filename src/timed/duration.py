"""Nanosecond-exact duration type with unit conversion, parsing and formatting.

A :class:`Duration` stores a single unsigned 64-bit nanosecond count.
The day/hour/minute/second/millisecond/microsecond/nanosecond
components are derived from it on demand, so they can never drift out
of sync with the total.

Template mini-language (shared by :meth:`Duration.parse` and
:meth:`Duration.format`)::

    %d   days            %ms  milliseconds
    %h   hours           %us  microseconds
    %m   minutes         %ns  nanoseconds
    %s   seconds         %%   a literal '%'

Any other character is a literal.  Note that ``%ms`` always means
milliseconds; there is no way to write "minutes followed by an 's'".
"""

from __future__ import annotations

import math
import operator
import re
from dataclasses import dataclass
from fractions import Fraction
from typing import Any

from timed.errors import FormatError, InvalidUnit

NS_PER_US = 1_000
NS_PER_MS = 1_000 * NS_PER_US
NS_PER_S = 1_000 * NS_PER_MS
NS_PER_M = 60 * NS_PER_S
NS_PER_H = 60 * NS_PER_M
NS_PER_D = 24 * NS_PER_H

_U64 = 1 << 64
_I64_MAX = (1 << 63) - 1

# Coarsest first.  Order matters for format() and adaptive_unit().
UNIT_NANOSECONDS: dict[str, int] = {
    "d": NS_PER_D,
    "h": NS_PER_H,
    "m": NS_PER_M,
    "s": NS_PER_S,
    "ms": NS_PER_MS,
    "us": NS_PER_US,
    "ns": 1,
}

UNIT_ALIASES: dict[str, str] = {
    "d": "d",
    "days": "d",
    "h": "h",
    "hours": "h",
    "m": "m",
    "minutes": "m",
    "s": "s",
    "seconds": "s",
    "ms": "ms",
    "milliseconds": "ms",
    "us": "us",
    "microseconds": "us",
    "ns": "ns",
    "nanoseconds": "ns",
}

_UNIT_ORDER = list(UNIT_NANOSECONDS)

_DIGITS = re.compile(r"[0-9]*")
_QUANTITY = re.compile(r"\s*([0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?)\s*([A-Za-z]+)\s*")

_LITERAL = "literal"
_UNIT = "unit"


def canonical_unit(unit: str) -> str:
    """Return the short label (``d``, ``h``, ... ``ns``) for *unit*.

    Raises:
        InvalidUnit: If *unit* is not an accepted unit string.
    """
    try:
        return UNIT_ALIASES[unit]
    except (KeyError, TypeError):
        raise InvalidUnit(unit) from None


_HALF = Fraction(1, 2)


def _round_half_up(value: float | Fraction) -> int:
    """Round exactly to the nearest integer; halves round up."""
    return math.floor(Fraction(value) + _HALF)


def _check_finite(factor: float) -> None:
    if not math.isfinite(factor):
        raise ValueError(f"Duration scale factor must be finite (got {factor})")


# ---------------------------------------------------------------------------
# TimeValueUnit
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TimeValueUnit:
    """A duration expressed in one chosen unit, e.g. ``1.5 s``.

    Used for construction and display only; :class:`Duration` is the
    canonical form.
    """

    value: float = 0.0
    unit: str = "ns"

    def __str__(self) -> str:
        return f"{self.value:.2f} {self.unit}"


# ---------------------------------------------------------------------------
# Template tokenizer
# ---------------------------------------------------------------------------


def _tokenize(template: str) -> list[tuple[str, str]]:
    """Split a template into ``(_UNIT, label)`` and ``(_LITERAL, text)`` tokens."""
    tokens: list[tuple[str, str]] = []
    literal: list[str] = []
    i = 0
    n = len(template)

    while i < n:
        c = template[i]
        if c != "%":
            literal.append(c)
            i += 1
            continue

        if i + 1 >= n:
            raise FormatError(template, "dangling '%'")
        marker = template[i + 1]

        if marker == "%":
            literal.append("%")
            i += 2
            continue
        if marker in "mun" and template[i + 2 : i + 3] == "s":
            unit = marker + "s"
            i += 3
        elif marker in "dhms":
            unit = marker
            i += 2
        elif marker in "un":
            raise FormatError(template, f"'%{marker}' must be followed by 's'")
        else:
            raise FormatError(template, f"unknown marker '%{marker}'")

        if literal:
            tokens.append((_LITERAL, "".join(literal)))
            literal = []
        tokens.append((_UNIT, unit))

    if literal:
        tokens.append((_LITERAL, "".join(literal)))
    return tokens


def _field_moduli(units: list[str]) -> dict[str, int | None]:
    """Map each unit in a template to the size of its nearest coarser peer.

    A field reports its count *within* that coarser unit.  ``None``
    means no coarser unit is present, so the field reports the total.
    """
    present = set(units)
    moduli: dict[str, int | None] = {}
    for unit in present:
        modulus: int | None = None
        for coarser in _UNIT_ORDER[: _UNIT_ORDER.index(unit)]:
            if coarser in present:
                modulus = UNIT_NANOSECONDS[coarser]
        moduli[unit] = modulus
    return moduli


# ---------------------------------------------------------------------------
# Duration
# ---------------------------------------------------------------------------


class Duration:
    """An exact, non-negative elapsed-time quantity.

    Construct from components (any non-negative integers; they are
    summed, so ``Duration(hours=36)`` is one and a half days), from a
    value in a single unit, or by parsing text.

    Arithmetic never raises on underflow: ``a - b`` is zero when
    ``b > a``.  Results wrap modulo 2**64 like an unsigned counter;
    scaling by a float is computed exactly before rounding to the nearest
    nanosecond.  The one exception is a non-finite scale factor (inf or
    NaN), which raises ``ValueError``.  Durations are immutable, so
    ``d += other`` rebinds ``d``.
    """

    __slots__ = ("_ns",)

    def __init__(
        self,
        days: int = 0,
        hours: int = 0,
        minutes: int = 0,
        seconds: int = 0,
        milliseconds: int = 0,
        microseconds: int = 0,
        nanoseconds: int = 0,
    ) -> None:
        total = 0
        for value, size in zip(
            (days, hours, minutes, seconds, milliseconds, microseconds, nanoseconds),
            UNIT_NANOSECONDS.values(),
        ):
            value = operator.index(value)
            if value < 0:
                raise ValueError(f"Duration components must be non-negative (got {value})")
            total += value * size
        self._ns = total % _U64

    # -- alternative constructors ------------------------------------------

    @classmethod
    def from_nanoseconds(cls, nanoseconds: int) -> Duration:
        return cls(nanoseconds=nanoseconds)

    @classmethod
    def from_unit_value(cls, value: float, unit: str) -> Duration:
        """Build a Duration from a (possibly fractional) value in *unit*.

        The result is rounded to the nearest nanosecond.

        Raises:
            InvalidUnit: If *unit* is not recognized.
            ValueError: If *value* is negative or not finite.
        """
        size = UNIT_NANOSECONDS[canonical_unit(unit)]
        if not math.isfinite(value):
            raise ValueError(f"Duration value must be finite (got {value})")
        if value < 0:
            raise ValueError(f"Duration value must be non-negative (got {value})")
        if isinstance(value, int):
            return cls(nanoseconds=value * size)
        return cls(nanoseconds=_round_half_up(Fraction(value) * size))

    @classmethod
    def from_value_unit(cls, tvu: TimeValueUnit) -> Duration:
        return cls.from_unit_value(tvu.value, tvu.unit)

    @classmethod
    def parse(cls, text: str, fmt: str) -> Duration:
        """Parse *text* according to the template *fmt*.

        Each placeholder reads the run of ASCII digits at the current
        position (no digits reads as 0).  A literal in the template
        skips forward past its next occurrence in *text*; if it does
        not occur, the rest of the text is consumed and any remaining
        placeholders read as 0.

        Examples::

            >>> int(Duration.parse("10:10:10", "%s:%ms:%us"))
            10010010000
            >>> Duration.parse("1d 10h", "%d %h").time_in_unit("h")
            34.0

        Raises:
            FormatError: If *fmt* is malformed, or a digit run in *text*
                exceeds the interpreter's integer string limit.
        """
        total = 0
        pos = 0
        for kind, token in _tokenize(fmt):
            if kind == _LITERAL:
                found = text.find(token, pos)
                pos = len(text) if found < 0 else found + len(token)
                continue
            match = _DIGITS.match(text, pos)
            digits = match.group() if match else ""
            if digits:
                try:
                    value = int(digits)
                except ValueError:
                    raise FormatError(
                        fmt, f"a run of {len(digits)} digits is too long to read"
                    ) from None
                total += value * UNIT_NANOSECONDS[token]
                pos += len(digits)
        return cls(nanoseconds=total)

    @classmethod
    def parse_quantity(cls, text: str) -> Duration:
        """Parse a single ``<number><unit>`` quantity such as ``"1.5ms"``.

        Raises:
            FormatError: If *text* is not a number followed by a unit.
            InvalidUnit: If the unit is not recognized.
        """
        match = _QUANTITY.fullmatch(text)
        if match is None:
            raise FormatError(text, "expected <number><unit>, e.g. '1.5ms'")
        value, unit = match.groups()
        number = float(value)
        if number.is_integer() and "." not in value and "e" not in value.lower():
            return cls.from_unit_value(int(value), unit)
        return cls.from_unit_value(number, unit)

    # -- components --------------------------------------------------------

    def components(self) -> tuple[int, int, int, int, int, int, int]:
        """Return ``(days, hours, minutes, seconds, ms, us, ns)``."""
        rest, ns = divmod(self._ns, 1000)
        rest, us = divmod(rest, 1000)
        rest, ms = divmod(rest, 1000)
        rest, s = divmod(rest, 60)
        days, rest = divmod(rest, 60 * 24)
        h, m = divmod(rest, 60)
        return days, h, m, s, ms, us, ns

    @property
    def days(self) -> int:
        return self._ns // NS_PER_D

    @property
    def hours(self) -> int:
        return self._ns // NS_PER_H % 24

    @property
    def minutes(self) -> int:
        return self._ns // NS_PER_M % 60

    @property
    def seconds(self) -> int:
        return self._ns // NS_PER_S % 60

    @property
    def milliseconds(self) -> int:
        return self._ns // NS_PER_MS % 1000

    @property
    def microseconds(self) -> int:
        return self._ns // NS_PER_US % 1000

    @property
    def nanoseconds(self) -> int:
        return self._ns % 1000

    @property
    def total_nanoseconds(self) -> int:
        return self._ns

    # -- conversions -------------------------------------------------------

    def time_in_unit(self, unit: str) -> float:
        """Return the whole duration as a float in *unit*.

        Raises:
            InvalidUnit: If *unit* is not recognized.
        """
        return self._ns / UNIT_NANOSECONDS[canonical_unit(unit)]

    def total_days(self) -> float:
        return self.time_in_unit("d")

    def total_hours(self) -> float:
        return self.time_in_unit("h")

    def total_minutes(self) -> float:
        return self.time_in_unit("m")

    def total_seconds(self) -> float:
        return self.time_in_unit("s")

    def total_milliseconds(self) -> float:
        return self.time_in_unit("ms")

    def total_microseconds(self) -> float:
        return self.time_in_unit("us")

    def adaptive_unit(self) -> TimeValueUnit:
        """Pick the best-fit display unit for this duration.

        Thresholds are checked on the component view, coarsest first:
        more than 4 days; any days or more than 12 hours; more than 10
        minutes, 10 seconds, 500 ms or 500 us.  Anything else is shown in
        nanoseconds, so ``Duration(hours=1)`` reads as ``3600000000000.00 ns``.
        The value is always the whole duration in the chosen unit.
        """
        days, hours, minutes, seconds, ms, us, _ = self.components()
        if days > 4:
            unit = "d"
        elif days > 0 or hours > 12:
            unit = "h"
        elif minutes > 10:
            unit = "m"
        elif seconds > 10:
            unit = "s"
        elif ms > 500:
            unit = "ms"
        elif us > 500:
            unit = "us"
        else:
            unit = "ns"
        return TimeValueUnit(self.time_in_unit(unit), unit)

    def as_signed(self) -> int:
        """Nanoseconds reinterpreted as a signed 64-bit integer."""
        return self._ns - _U64 if self._ns > _I64_MAX else self._ns

    def __int__(self) -> int:
        return self._ns

    def __float__(self) -> float:
        return float(self._ns)

    def __bool__(self) -> bool:
        return self._ns != 0

    # -- formatting --------------------------------------------------------

    def _auto_template(self) -> str:
        if self.days > 0:
            return "%dd:%hh:%mm-%ss"
        if self.seconds > 0 or self.milliseconds > 0:
            return "%mm%ss%msms"
        return "%nsns"

    def format(self, fmt: str = "auto") -> str:
        """Render this duration with the template *fmt*.

        ``"auto"`` picks a template from the magnitude.  A field shows
        its count within the nearest coarser unit present in the
        template, or the total when there is none: ``"%h"`` alone
        includes days as 24 hours each, and ``"%ns"`` alone is the
        total nanosecond count.

        Raises:
            FormatError: If *fmt* is malformed.
        """
        if fmt == "auto":
            fmt = self._auto_template()
        tokens = _tokenize(fmt)
        moduli = _field_moduli([t for kind, t in tokens if kind == _UNIT])

        parts: list[str] = []
        for kind, token in tokens:
            if kind == _LITERAL:
                parts.append(token)
                continue
            modulus = moduli[token]
            ns = self._ns if modulus is None else self._ns % modulus
            parts.append(str(ns // UNIT_NANOSECONDS[token]))
        return "".join(parts)

    def __str__(self) -> str:
        return self.format("auto")

    def __repr__(self) -> str:
        return f"Duration(nanoseconds={self._ns})"

    def __format__(self, spec: str) -> str:
        if not spec:
            return str(self)
        return self.format(spec)

    # -- arithmetic --------------------------------------------------------

    @staticmethod
    def _other_ns(other: Any) -> int | None:
        if isinstance(other, Duration):
            return other._ns
        if isinstance(other, int) and not isinstance(other, bool):
            return other
        return None

    @classmethod
    def _wrap(cls, ns: int) -> Duration:
        return cls(nanoseconds=max(ns, 0) % _U64)

    def __add__(self, other: Any) -> Duration:
        ns = self._other_ns(other)
        if ns is None:
            return NotImplemented
        return self._wrap(self._ns + ns)

    __radd__ = __add__

    def __sub__(self, other: Any) -> Duration:
        ns = self._other_ns(other)
        if ns is None:
            return NotImplemented
        return self._wrap(self._ns - ns)

    def __rsub__(self, other: Any) -> Duration:
        ns = self._other_ns(other)
        if ns is None:
            return NotImplemented
        return self._wrap(ns - self._ns)

    def __mul__(self, other: Any) -> Duration:
        if isinstance(other, Duration):
            # Product of nanosecond counts, kept for compatibility.
            return self._wrap(self._ns * other._ns)
        if isinstance(other, bool) or not isinstance(other, (int, float)):
            return NotImplemented
        if isinstance(other, int):
            return self._wrap(self._ns * other)
        _check_finite(other)
        return self._wrap(_round_half_up(self._ns * Fraction(other)))

    __rmul__ = __mul__

    def __truediv__(self, other: Any) -> Duration:
        if isinstance(other, bool) or not isinstance(other, (int, float)):
            return NotImplemented
        if isinstance(other, float):
            _check_finite(other)
        if other == 0:
            raise ZeroDivisionError("Duration division by zero")
        return self._wrap(_round_half_up(Fraction(self._ns) / Fraction(other)))

    # -- comparison --------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._ns == other._ns

    def __ne__(self, other: object) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._ns != other._ns

    def __lt__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._ns < other._ns

    def __le__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._ns <= other._ns

    def __gt__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._ns > other._ns

    def __ge__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._ns >= other._ns

    def __hash__(self) -> int:
        return hash(self._ns)

    def __reduce__(self) -> tuple[Any, ...]:
        return (Duration.from_nanoseconds, (self._ns,))
