"""lsq_toolkit.core.errors

Exception types raised by the estimator and the line search.

Numerical degeneracy (a rank-deficient normal matrix) is deliberately *not*
an exception: it is reported through the decomposition object so the caller
decides what to do with it.
"""

from __future__ import annotations

from typing import Sequence, Tuple


class LsqError(ValueError):
    """Base class for lsq_toolkit errors."""


class DimensionMismatchError(LsqError):
    """A vector, matrix or estimator does not match the estimator dimension."""

    def __init__(self, what: str, expected: Sequence[int], actual: Tuple[int, ...]):
        self.what = what
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        super().__init__(
            f"{what}: expected shape {self.expected}, got {self.actual}"
        )


class InvalidBracketError(LsqError):
    """The points passed to the line search do not bracket a minimum."""
