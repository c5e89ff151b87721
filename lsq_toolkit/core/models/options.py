"""
Configuration options for the estimator and the line search.

SolverOptions controls how the normal matrix is inverted (in particular the
singular-value cut-off), LineSearchOptions the stopping rules of the
golden-section search.
"""

import math
import sys
from dataclasses import dataclass
from typing import Optional, Dict, Any


DEFAULT_LINE_SEARCH_TOL = math.sqrt(sys.float_info.epsilon)


@dataclass
class SolverOptions:
    """
    Options for solving the accumulated information-form system.

    Attributes:
        rcond: Relative singular-value cut-off. Singular values
            s_i <= rcond * max(s) are treated as zero in the pseudo-inverse
            (default: 1e-12). Use 0.0 to drop exact zeros only.
        absolute_tolerance: Optional absolute cut-off; singular values at or
            below it are also treated as zero (default: None)
        warn_on_rank_deficiency: Log a warning when a solve finds a
            rank-deficient system (default: True)
    """

    rcond: float = 1e-12
    absolute_tolerance: Optional[float] = None
    warn_on_rank_deficiency: bool = True

    def __post_init__(self):
        """Validate options after initialization."""
        if not math.isfinite(self.rcond) or self.rcond < 0:
            raise ValueError("rcond must be a finite non-negative number")

        if self.absolute_tolerance is not None and self.absolute_tolerance < 0:
            raise ValueError("absolute_tolerance cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize options to dictionary."""
        return {
            "rcond": self.rcond,
            "absolute_tolerance": self.absolute_tolerance,
            "warn_on_rank_deficiency": self.warn_on_rank_deficiency,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SolverOptions':
        """
        Create SolverOptions from a dictionary.

        Args:
            data: Dictionary with option values

        Returns:
            New SolverOptions instance
        """
        return cls(
            rcond=data.get("rcond", 1e-12),
            absolute_tolerance=data.get("absolute_tolerance"),
            warn_on_rank_deficiency=data.get("warn_on_rank_deficiency", True),
        )

    @classmethod
    def default(cls) -> 'SolverOptions':
        """Create options with default values."""
        return cls()

    @classmethod
    def strict(cls) -> 'SolverOptions':
        """
        Create options that never truncate non-zero singular values.

        Returns:
            SolverOptions with rcond=0
        """
        return cls(rcond=0.0)

    def __repr__(self) -> str:
        return (
            f"SolverOptions("
            f"rcond={self.rcond}, "
            f"atol={self.absolute_tolerance})"
        )


@dataclass
class LineSearchOptions:
    """
    Options for the golden-section line search.

    Attributes:
        max_iterations: Maximum number of iterations, the initial bracketing
            step included (default: 100)
        tolerance: Relative width at which the search stops
            (default: sqrt(machine epsilon))
        check_bracket: Evaluate the function at both bracket ends and verify
            f(a) >= f(b) <= f(c) before searching (default: False)
    """

    max_iterations: int = 100
    tolerance: float = DEFAULT_LINE_SEARCH_TOL
    check_bracket: bool = False

    def __post_init__(self):
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")

        if not self.tolerance > 0:
            raise ValueError("tolerance must be positive")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_iterations": self.max_iterations,
            "tolerance": self.tolerance,
            "check_bracket": self.check_bracket,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LineSearchOptions':
        return cls(
            max_iterations=data.get("max_iterations", 100),
            tolerance=data.get("tolerance", DEFAULT_LINE_SEARCH_TOL),
            check_bracket=data.get("check_bracket", False),
        )

    @classmethod
    def default(cls) -> 'LineSearchOptions':
        return cls()
