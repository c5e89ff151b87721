"""
Core numerical routines.

Pure Python + NumPy; no I/O of any kind.
"""

from .errors import LsqError, DimensionMismatchError, InvalidBracketError

from .models import SolverOptions, LineSearchOptions

from .results import LineSearchResult

from .solver import SVD, WLS, WLSEstimator, fixed_size_wls, reduce_estimators

from .optimize import (
    GOLDEN_RATIO_SECTION,
    golden_section_search,
    golden_section_search_with_options,
)

__all__ = [
    # Errors
    "LsqError",
    "DimensionMismatchError",
    "InvalidBracketError",

    # Options
    "SolverOptions",
    "LineSearchOptions",

    # Results
    "LineSearchResult",

    # Estimation
    "SVD",
    "WLS",
    "WLSEstimator",
    "fixed_size_wls",
    "reduce_estimators",

    # Line search
    "GOLDEN_RATIO_SECTION",
    "golden_section_search",
    "golden_section_search_with_options",
]
