"""Error types raised by timed.

All errors are local and synchronous: they are raised to the immediate
caller and never retried.  Each one also subclasses ``ValueError`` so
callers that only care about "bad input" can catch that.
"""

from __future__ import annotations


class TimedError(Exception):
    """Base class for all timed errors."""


class InvalidUnit(TimedError, ValueError):
    """A unit token is not one of the recognized unit strings."""

    def __init__(self, unit: str) -> None:
        self.unit = unit
        super().__init__(f"Unknown unit: {unit!r}")


class FormatError(TimedError, ValueError):
    """A parse/format template is malformed."""

    def __init__(self, template: str, detail: str = "") -> None:
        self.template = template
        message = f"Invalid time format: {template!r}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class EmptyInput(TimedError, ValueError):
    """An aggregate was requested over a zero-length sample."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"{operation}() requires at least one sample")
