"""
Configuration models.

- SolverOptions: singular-value thresholding for the estimator solve
- LineSearchOptions: stopping rules for the golden-section search
"""

from .options import SolverOptions, LineSearchOptions, DEFAULT_LINE_SEARCH_TOL

__all__ = [
    "SolverOptions",
    "LineSearchOptions",
    "DEFAULT_LINE_SEARCH_TOL",
]
