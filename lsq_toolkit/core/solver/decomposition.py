"""lsq_toolkit.core.solver.decomposition

Singular value decomposition of a square normal matrix.

The estimator never inverts its inverse-covariance matrix directly. It
factorizes it as C = U diag(s) V^T and solves through the pseudo-inverse

    x = V diag(1/s_i) U^T b

where every singular value at or below the threshold contributes zero instead
of 1/s_i. The threshold is

    max(rcond * s_max, absolute_tolerance)

so it is always visible to the caller through SolverOptions and the
`threshold` property. A system with dropped singular values is reported as
rank deficient (`rank < size`, `is_singular`), never raised.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from ..errors import DimensionMismatchError
from ..models.options import SolverOptions

logger = logging.getLogger(__name__)


class SVD:
    """Pseudo-inverse solver built on numpy.linalg.svd."""

    def __init__(self, options: Optional[SolverOptions] = None):
        self.options = options or SolverOptions.default()
        self._U: Optional[np.ndarray] = None
        self._s: Optional[np.ndarray] = None
        self._Vt: Optional[np.ndarray] = None
        self._threshold: float = 0.0

    # ------------------------------------------------------------------
    # Factorization
    # ------------------------------------------------------------------

    def compute(self, matrix: np.ndarray) -> "SVD":
        """Factorize a square matrix, replacing any previous factorization."""
        M = np.asarray(matrix, dtype=float)
        if M.ndim != 2 or M.shape[0] != M.shape[1]:
            n = M.shape[0] if M.ndim else 0
            raise DimensionMismatchError("SVD input must be square", (n, n), M.shape)

        U, s, Vt = np.linalg.svd(M)
        self._U, self._s, self._Vt = U, s, Vt

        s_max = float(s[0]) if s.size else 0.0
        threshold = self.options.rcond * s_max
        if self.options.absolute_tolerance is not None:
            threshold = max(threshold, self.options.absolute_tolerance)
        self._threshold = threshold

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "SVD of %dx%d matrix: s_max=%.6g s_min=%.6g rank=%d",
                M.shape[0], M.shape[1], s_max, float(s[-1]) if s.size else 0.0, self.rank,
            )
        return self

    @property
    def is_computed(self) -> bool:
        return self._s is not None

    def _require(self) -> None:
        if self._s is None:
            raise RuntimeError("SVD.compute() must be called before using the decomposition")

    # ------------------------------------------------------------------
    # Solving
    # ------------------------------------------------------------------

    def _inverse_singular_values(self) -> np.ndarray:
        s = self._s
        inv = np.zeros_like(s)
        keep = s > self._threshold
        inv[keep] = 1.0 / s[keep]
        return inv

    def backsub(self, rhs: np.ndarray) -> np.ndarray:
        """Solve C x = rhs through the truncated pseudo-inverse.

        Args:
            rhs: length-N vector, or N x K matrix of right-hand sides

        Returns:
            x with the same shape as rhs
        """
        self._require()
        b = np.asarray(rhs, dtype=float)
        n = self._s.shape[0]
        if b.ndim not in (1, 2) or b.shape[0] != n:
            raise DimensionMismatchError("backsub right-hand side", (n,), b.shape)

        s_inv = self._inverse_singular_values()
        projected = self._U.T @ b
        if b.ndim == 1:
            return self._Vt.T @ (s_inv * projected)
        return self._Vt.T @ (s_inv[:, None] * projected)

    def pseudo_inverse(self) -> np.ndarray:
        """Truncated pseudo-inverse V diag(1/s) U^T."""
        self._require()
        s_inv = self._inverse_singular_values()
        return (self._Vt.T * s_inv) @ self._U.T

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def singular_values(self) -> np.ndarray:
        self._require()
        return self._s

    @property
    def U(self) -> np.ndarray:
        self._require()
        return self._U

    @property
    def Vt(self) -> np.ndarray:
        self._require()
        return self._Vt

    @property
    def threshold(self) -> float:
        """Singular values at or below this value are treated as zero."""
        self._require()
        return self._threshold

    @property
    def rank(self) -> int:
        self._require()
        return int(np.count_nonzero(self._s > self._threshold))

    @property
    def is_singular(self) -> bool:
        return self.rank < self._s.shape[0]

    @property
    def condition_number(self) -> float:
        """s_max / s_min, or inf when the system is rank deficient."""
        if self.is_singular:
            return float("inf")
        return float(self._s[0] / self._s[-1])

    @property
    def determinant(self) -> float:
        """Product of the singular values (absolute value of det(C))."""
        self._require()
        return float(np.prod(self._s))

    def __repr__(self) -> str:
        if self._s is None:
            return "SVD(<not computed>)"
        return f"SVD(size={self._s.shape[0]}, rank={self.rank}, threshold={self._threshold:.3g})"
