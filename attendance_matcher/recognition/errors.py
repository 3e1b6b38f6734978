"""
Matcher error types.

Raised per call to the direct caller; never stored on the matcher.
"""

from typing import Optional


class MatcherError(ValueError):
    """Base class for face matching errors."""


class DimensionMismatch(MatcherError):
    """Two descriptors that must be compared have different lengths."""

    def __init__(self, expected: int, actual: int, label: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        self.label = label

        where = f' (identity {label})' if label is not None else ''
        super().__init__(
            f'Descriptor length mismatch{where}: expected {expected}, got {actual}'
        )


class EmptyQuery(MatcherError):
    """Query descriptor has zero length."""

    def __init__(self, message: str = 'Query descriptor is empty'):
        super().__init__(message)


class NonFiniteQuery(MatcherError):
    """Query descriptor contains NaN or infinite values."""

    def __init__(self, message: str = 'Query descriptor contains non-finite values'):
        super().__init__(message)
