"""
Result of a one-dimensional line search.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


def _json_safe_value(value: Any) -> Any:
    """Convert non-JSON-safe floats (nan/inf) to None."""
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
    return value


@dataclass
class LineSearchResult:
    """
    Outcome of a golden-section search.

    Attributes:
        position: Abscissa of the best point found
        value: Function value at `position`
        iterations: Iterations performed, the initial bracketing step included
        evaluations: Number of calls made to the function
        converged: True if the width tolerance was met before max_iterations
        bracket: Final (lower, upper) ends of the search interval
    """

    position: float
    value: float
    iterations: int
    evaluations: int
    converged: bool
    bracket: Optional[Tuple[float, float]] = None

    @property
    def width(self) -> float:
        """Width of the final bracket (nan if unknown)."""
        if self.bracket is None:
            return math.nan
        return abs(self.bracket[1] - self.bracket[0])

    def as_tuple(self) -> Tuple[float, float]:
        """Return (position, value)."""
        return self.position, self.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": _json_safe_value(self.position),
            "value": _json_safe_value(self.value),
            "iterations": self.iterations,
            "evaluations": self.evaluations,
            "converged": self.converged,
            "bracket": [_json_safe_value(x) for x in self.bracket] if self.bracket else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LineSearchResult':
        bracket = data.get("bracket")

        def _num(x):
            return math.nan if x is None else float(x)

        return cls(
            position=_num(data.get("position")),
            value=_num(data.get("value")),
            iterations=int(data.get("iterations", 0)),
            evaluations=int(data.get("evaluations", 0)),
            converged=bool(data.get("converged", False)),
            bracket=(_num(bracket[0]), _num(bracket[1])) if bracket else None,
        )

    def __repr__(self) -> str:
        status = "converged" if self.converged else "max iterations"
        return (
            f"LineSearchResult(x={self.position:.10g}, f={self.value:.10g}, "
            f"iter={self.iterations}, {status})"
        )
