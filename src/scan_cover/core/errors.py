"""
Typed failures raised by the scan cover core.

None of these are fatal: loaders catch the parse/reference errors per
record, and geometry code guards degenerate vectors explicitly.
"""

from __future__ import annotations


class ScanCoverError(Exception):
    """Base class for all scan cover errors."""


class InstanceParseError(ScanCoverError, ValueError):
    """A record of an instance file could not be parsed."""

    def __init__(self, message: str, line_no: int = 0):
        self.line_no = line_no
        if line_no:
            message = f"line {line_no}: {message}"
        super().__init__(message)


class OrbitReferenceError(ScanCoverError, IndexError):
    """A link refers to an orbit index outside the instance's orbit list."""


class GeometryDegenerateError(ScanCoverError, ValueError):
    """A direction is undefined, e.g. two satellites share one position."""
