"""
lsq_toolkit - incremental weighted least squares and line search

Two independent building blocks for estimation and optimization code:

- WLS: accumulates weighted linear measurements and regularisation priors
  in information form (inverse covariance + information vector) and solves
  them through an SVD pseudo-inverse.
- golden_section_search: bracketed minimization of a unimodal scalar
  function.

Conventions:
- Vectors and matrices are NumPy float arrays
- Weights are inverse variances
- A prior of strength p means "parameter is zero with variance 1/p"
"""

__version__ = "1.0.0"

from .core import (
    LsqError,
    DimensionMismatchError,
    InvalidBracketError,
    SolverOptions,
    LineSearchOptions,
    LineSearchResult,
    SVD,
    WLS,
    WLSEstimator,
    fixed_size_wls,
    reduce_estimators,
    GOLDEN_RATIO_SECTION,
    golden_section_search,
    golden_section_search_with_options,
)

__all__ = [
    # Version
    "__version__",

    # Errors
    "LsqError",
    "DimensionMismatchError",
    "InvalidBracketError",

    # Options / results
    "SolverOptions",
    "LineSearchOptions",
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
