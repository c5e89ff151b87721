"""lsq_toolkit.core.optimize.golden_section

Golden-section line minimization of a unimodal scalar function.

The search starts from a bracketing triple a < b < c with f(a) >= f(b) <= f(c)
and keeps four ordered points a < x1 < x2 < c. Every iteration discards the
outer segment beyond the worse interior point, so the bracket shrinks by the
constant factor 1 - g ~= 0.618 with a single new function evaluation:

    f(x1) > f(x2):   a  x1  x2  c   ->   x1  x2  new  c
    otherwise:       a  x1  x2  c   ->   a  new  x1  x2

Stopping rule (Numerical Recipes): |c - a| <= tol * (|x1| + |x2|).
Running out of iterations is not an error; the best point so far is
returned with converged=False.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional

from ..errors import InvalidBracketError
from ..models.options import DEFAULT_LINE_SEARCH_TOL, LineSearchOptions
from ..results.line_search import LineSearchResult

logger = logging.getLogger(__name__)

# (3 - sqrt(5)) / 2: fraction of a segment at which the new point is placed
GOLDEN_RATIO_SECTION = (3.0 - math.sqrt(5.0)) / 2.0


def _check_bracket_order(a: float, b: float, c: float) -> None:
    if not all(math.isfinite(x) for x in (a, b, c)):
        raise InvalidBracketError(f"Bracket points must be finite, got ({a}, {b}, {c})")
    if not a < b < c:
        raise InvalidBracketError(f"Bracket must satisfy a < b < c, got ({a}, {b}, {c})")


def golden_section_search(
    a: float,
    b: float,
    c: float,
    func: Callable[[float], float],
    max_iterations: int = 100,
    tol: float = DEFAULT_LINE_SEARCH_TOL,
    fb: Optional[float] = None,
    check_bracket: bool = False,
) -> LineSearchResult:
    """Minimize `func` inside the bracket (a, b, c).

    Args:
        a: The most negative point of the bracket
        b: The central point, with f(b) no larger than f(a) and f(c)
        c: The most positive point of the bracket
        func: Function to minimize, called with a single float
        max_iterations: Maximum number of iterations (the initial four-point
            bracketing step counts as the first)
        tol: Relative tolerance on the bracket width
        fb: f(b) if already known; evaluated once otherwise
        check_bracket: Also evaluate f(a) and f(c) and require
            f(a) >= f(b) <= f(c)

    Returns:
        LineSearchResult; `as_tuple()` gives (position, value)

    Raises:
        InvalidBracketError: the bracket is not finite and ordered, or fails
            the unimodality check when check_bracket is set
        ValueError: max_iterations < 1 or tol <= 0
    """
    if max_iterations < 1:
        raise ValueError("max_iterations must be at least 1")
    if not tol > 0:
        raise ValueError("tol must be positive")

    a, b, c = float(a), float(b), float(c)
    _check_bracket_order(a, b, c)

    evaluations = 0

    def f(x: float) -> float:
        nonlocal evaluations
        evaluations += 1
        return float(func(x))

    if fb is None:
        fb = f(b)
    fb = float(fb)

    if check_bracket:
        fa, fc = f(a), f(c)
        if not (fa >= fb <= fc):
            raise InvalidBracketError(
                f"Function values do not bracket a minimum: f(a)={fa}, f(b)={fb}, f(c)={fc}"
            )

    g = GOLDEN_RATIO_SECTION

    # Initial step: turn the 3 point bracket into an ordered 4 point one
    # by splitting the larger of the two segments.
    if abs(b - a) > abs(c - b):
        x1 = b - g * (b - a)
        x2 = b
        fx1 = f(x1)
        fx2 = fb
    else:
        x1 = b
        x2 = b + g * (c - b)
        fx1 = fb
        fx2 = f(x2)

    iterations = 1
    while abs(c - a) > tol * (abs(x1) + abs(x2)) and iterations < max_iterations:
        if fx1 > fx2:
            a = x1
            x1 = x2
            x2 = x1 + g * (c - x1)
            fx1 = fx2
            fx2 = f(x2)
        else:
            c = x2
            x2 = x1
            x1 = x2 - g * (x2 - a)
            fx2 = fx1
            fx1 = f(x1)
        iterations += 1

    converged = not abs(c - a) > tol * (abs(x1) + abs(x2))
    if not converged:
        logger.debug(
            "Golden-section search stopped after %d iterations, bracket width %.3g",
            iterations, abs(c - a),
        )

    if fx1 < fx2:
        position, value = x1, fx1
    else:
        position, value = x2, fx2

    return LineSearchResult(
        position=position,
        value=value,
        iterations=iterations,
        evaluations=evaluations,
        converged=converged,
        bracket=(a, c),
    )


def golden_section_search_with_options(
    a: float,
    b: float,
    c: float,
    func: Callable[[float], float],
    options: Optional[LineSearchOptions] = None,
    fb: Optional[float] = None,
) -> LineSearchResult:
    """golden_section_search driven by a LineSearchOptions object."""
    options = options or LineSearchOptions.default()
    return golden_section_search(
        a, b, c, func,
        max_iterations=options.max_iterations,
        tol=options.tolerance,
        fb=fb,
        check_bracket=options.check_bracket,
    )
