"""lsq_toolkit.core.solver.wls

Incremental weighted least squares in information form.

Rather than storing the design matrix, the estimator accumulates the normal
equations directly:

    C_inv  = P + sum_k J_k w_k J_k^T      (inverse covariance / Fisher information)
    vector =     sum_k J_k w_k m_k        (information vector)

where P is a zero-mean Gaussian prior on the parameters. The solution is

    mu = pinv(C_inv) @ vector

computed through an SVD so that rank-deficient systems still produce an
answer (see decomposition.py for the singular-value threshold).

Because both accumulators are plain sums, measurements can be split across
several estimators and merged afterwards with `combine` before one solve.

This module contains no I/O; it only needs NumPy.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, Optional, Type, Union

import numpy as np

from ..errors import DimensionMismatchError
from ..models.options import SolverOptions
from .decomposition import SVD

logger = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray, Iterable[float]]

_FIXED_TYPES: Dict[tuple, type] = {}


def _estimator_size(size) -> int:
    n = int(size)
    if n != size:
        raise ValueError(f"Estimator size must be an integer, got {size!r}")
    if n < 1:
        raise ValueError(f"Estimator size must be at least 1, got {n}")
    return n


class WLS:
    """Weighted least-squares estimator with a Bayesian regularisation prior.

    Run-time sized estimators are created with ``WLS(size, prior)``.
    Fixed-size estimator types come from ``WLS.fixed(size)``; their instances
    only take the prior. Both use the same code path, and every supplied
    array is checked against the estimator dimension.

    Estimators are not copyable with ``copy.copy``/``copy.deepcopy``; use
    ``clone()`` when an independent copy of the accumulators is wanted.
    """

    SIZE: Optional[int] = None

    def __init__(
        self,
        size: int,
        prior: float = 0.0,
        options: Optional[SolverOptions] = None,
    ):
        size = _estimator_size(size)
        if self.SIZE is not None and size != self.SIZE:
            raise DimensionMismatchError("estimator size", (self.SIZE,), (size,))

        self._size = size
        self.options = options or SolverOptions.default()
        self._svd = SVD(self.options)
        self._mu = np.zeros(size, dtype=float)
        self.clear(prior)

    @classmethod
    def fixed(cls, size: int) -> Type["WLS"]:
        """Return the estimator type whose dimension is fixed to `size`.

        The same type object is returned for repeated calls, so instances
        of ``WLS.fixed(3)`` can be recognised with isinstance.
        """
        if cls.SIZE is not None:
            raise TypeError(f"{cls.__name__} already has a fixed size of {cls.SIZE}")
        size = _estimator_size(size)

        key = (cls, size)
        if key not in _FIXED_TYPES:
            base = cls

            def __init__(self, prior: float = 0.0, options: Optional[SolverOptions] = None):
                base.__init__(self, size, prior, options)

            _FIXED_TYPES[key] = type(
                f"{cls.__name__}{size}",
                (cls,),
                {"SIZE": size, "__init__": __init__, "__module__": cls.__module__},
            )
        return _FIXED_TYPES[key]

    @classmethod
    def from_measurements(
        cls,
        jacobian_rows: np.ndarray,
        measurements: ArrayLike,
        weights: Optional[ArrayLike] = None,
        prior: float = 0.0,
        options: Optional[SolverOptions] = None,
    ) -> "WLS":
        """Build an estimator from a stacked design matrix.

        Called on a fixed-size type, the design matrix must have that many
        columns.

        Args:
            jacobian_rows: M x N matrix, one Jacobian row per measurement
            measurements: length-M measurement vector
            weights: length-M inverse variances (default: all 1)
            prior: isotropic prior strength
            options: solver options

        Returns:
            Estimator holding all M measurements (not yet solved)
        """
        A = np.asarray(jacobian_rows, dtype=float)
        if A.ndim != 2:
            raise DimensionMismatchError("design matrix", (-1, -1), A.shape)
        if cls.SIZE is None:
            est = cls(A.shape[1], prior=prior, options=options)
        elif A.shape[1] != cls.SIZE:
            raise DimensionMismatchError("design matrix", (A.shape[0], cls.SIZE), A.shape)
        else:
            est = cls(prior=prior, options=options)
        w = 1.0 if weights is None else weights
        est.add_measurements(measurements, A.T, w)
        return est

    # ------------------------------------------------------------------
    # Shape helpers
    # ------------------------------------------------------------------

    def _vector(self, v: ArrayLike, what: str) -> np.ndarray:
        arr = np.asarray(v, dtype=float)
        if arr.shape != (self._size,):
            raise DimensionMismatchError(what, (self._size,), arr.shape)
        return arr

    def _square(self, m: ArrayLike, what: str) -> np.ndarray:
        arr = np.asarray(m, dtype=float)
        if arr.shape != (self._size, self._size):
            raise DimensionMismatchError(what, (self._size, self._size), arr.shape)
        return arr

    # ------------------------------------------------------------------
    # Accumulation
    # ------------------------------------------------------------------

    def clear(self, prior: float = 0.0) -> None:
        """Drop all measurements and apply a constant regularisation term.

        Equivalent to a prior that says every parameter is zero with
        variance 1/prior. With prior=0 the system starts empty.
        """
        prior = float(prior)
        if not prior >= 0.0:
            raise ValueError(f"prior cannot be negative, got {prior}")

        n = self._size
        self._C_inv = prior * np.eye(n)
        self._vector_acc = np.zeros(n, dtype=float)
        self._weighted_sq_sum = 0.0
        self._num_measurements = 0
        self._invalidate()

    def add_prior(self, prior: ArrayLike) -> None:
        """Add a zero-mean regularisation term to the inverse covariance.

        - scalar v: v added to every diagonal entry (sigma^2 = 1/v for all)
        - length-N vector v: v[i] added to diagonal entry i
        - N x N matrix M: M added to the inverse covariance as is
        """
        arr = np.asarray(prior, dtype=float)
        n = self._size
        if arr.ndim == 0:
            self._C_inv[np.diag_indices(n)] += float(arr)
        elif arr.ndim == 1:
            self._C_inv[np.diag_indices(n)] += self._vector(arr, "prior vector")
        elif arr.ndim == 2:
            self._C_inv += self._square(arr, "prior matrix")
        else:
            raise DimensionMismatchError("prior", (n, n), arr.shape)
        self._invalidate()

    def add_measurement(self, m: float, J: ArrayLike, weight: float = 1.0) -> None:
        """Add a single scalar measurement.

        Args:
            m: measured value
            J: Jacobian of the measurement w.r.t. the parameters (length N)
            weight: inverse variance of the measurement
        """
        J = self._vector(J, "measurement Jacobian")
        m = float(m)
        weight = float(weight)

        Jw = J * weight
        self._C_inv += np.outer(J, Jw)
        self._vector_acc += Jw * m
        self._weighted_sq_sum += weight * m * m
        self._num_measurements += 1
        self._invalidate()

    def add_measurements(self, m: ArrayLike, J: ArrayLike, invcov: ArrayLike = 1.0) -> None:
        """Add a block of K (possibly correlated) measurements at once.

        Args:
            m: measurement vector (length K)
            J: Jacobian matrix, N x K; column k is the Jacobian of m[k]
            invcov: inverse covariance of the measurements. A K x K matrix,
                a length-K vector (diagonal) or a scalar (isotropic).
        """
        m = np.asarray(m, dtype=float)
        if m.ndim != 1:
            raise DimensionMismatchError("measurement vector", (-1,), m.shape)
        k = m.shape[0]

        J = np.asarray(J, dtype=float)
        if J.shape != (self._size, k):
            raise DimensionMismatchError("measurement Jacobian", (self._size, k), J.shape)

        W = np.asarray(invcov, dtype=float)
        if W.ndim == 0:
            W = float(W) * np.eye(k)
        elif W.ndim == 1 and W.shape == (k,):
            W = np.diag(W)
        elif W.shape != (k, k):
            raise DimensionMismatchError("measurement inverse covariance", (k, k), W.shape)

        JW = J @ W
        self._C_inv += JW @ J.T
        self._vector_acc += JW @ m
        self._weighted_sq_sum += float(m @ W @ m)
        self._num_measurements += k
        self._invalidate()

    def add_df(self, m: ArrayLike, J: ArrayLike, weight: ArrayLike = 1.0) -> None:
        """Add measurements, dispatching on the shape of `m`.

        A scalar `m` goes to add_measurement (weight is an inverse variance),
        a vector `m` to add_measurements (weight is the inverse covariance).
        """
        if np.ndim(m) == 0:
            self.add_measurement(m, J, weight)
        else:
            self.add_measurements(m, J, weight)

    def combine(self, other: "WLS") -> "WLS":
        """Add the measurements and priors of another estimator to this one."""
        if not isinstance(other, WLS):
            raise TypeError(f"Cannot combine WLS with {type(other).__name__}")
        if other.size != self._size:
            raise DimensionMismatchError("combined estimator", (self._size,), (other.size,))

        self._C_inv += other._C_inv
        self._vector_acc += other._vector_acc
        self._weighted_sq_sum += other._weighted_sq_sum
        self._num_measurements += other._num_measurements
        self._invalidate()
        return self

    def __iadd__(self, other: "WLS") -> "WLS":
        return self.combine(other)

    # ------------------------------------------------------------------
    # Solving
    # ------------------------------------------------------------------

    def compute(self) -> np.ndarray:
        """Decompose the inverse covariance and solve for mu."""
        self._svd.compute(self._C_inv)
        self._mu = self._svd.backsub(self._vector_acc)
        self._solved = True
        self._decomposed = True

        if self._svd.is_singular and self.options.warn_on_rank_deficiency:
            logger.warning(
                "Rank-deficient system: rank %d of %d (threshold %.3g)",
                self._svd.rank, self._size, self._svd.threshold,
            )
        return self._mu

    def _invalidate(self) -> None:
        self._solved = False
        self._decomposed = False

    def _require_solved(self) -> None:
        if not self._solved:
            raise RuntimeError("compute() must be called after the last update")

    def _require_decomposed(self) -> None:
        # set by compute() only; assigning mu leaves it unchanged
        if not self._decomposed:
            raise RuntimeError("compute() must be called after the last update to C_inv")

    def covariance(self) -> np.ndarray:
        """Covariance estimate of mu: the pseudo-inverse of C_inv."""
        self._require_decomposed()
        return self._svd.pseudo_inverse()

    def standard_deviations(self) -> np.ndarray:
        return np.sqrt(np.maximum(np.diag(self.covariance()), 0.0))

    def cost(self) -> float:
        """Weighted squared residual at mu, prior penalty included.

        sum_k w_k (m_k - J_k . mu)^2 + mu^T P mu, evaluated from the
        accumulators as  sum w m^2 - 2 mu . vector + mu^T C_inv mu.
        """
        self._require_solved()
        mu = self._mu
        value = self._weighted_sq_sum - 2.0 * float(mu @ self._vector_acc) + float(mu @ self._C_inv @ mu)
        return max(value, 0.0)

    def degrees_of_freedom(self) -> int:
        """Number of scalar measurements minus the rank of the solve."""
        self._require_decomposed()
        return self._num_measurements - self._svd.rank

    def variance_factor(self) -> float:
        """A posteriori variance of unit weight, nan without redundancy."""
        dof = self.degrees_of_freedom()
        if dof <= 0:
            return math.nan
        return self.cost() / dof

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        return self._size

    @property
    def C_inv(self) -> np.ndarray:
        """Inverse covariance matrix (mutable; call compute() after edits)."""
        return self._C_inv

    @C_inv.setter
    def C_inv(self, value: ArrayLike) -> None:
        self._C_inv = self._square(value, "inverse covariance").copy()
        self._invalidate()

    @property
    def vector(self) -> np.ndarray:
        """Information vector."""
        return self._vector_acc

    @vector.setter
    def vector(self, value: ArrayLike) -> None:
        self._vector_acc = self._vector(value, "information vector").copy()
        self._solved = False

    @property
    def mu(self) -> np.ndarray:
        """Solved parameter vector; only valid after compute()."""
        self._require_solved()
        return self._mu

    @mu.setter
    def mu(self, value: ArrayLike) -> None:
        self._mu = self._vector(value, "mu").copy()
        self._solved = True

    @property
    def svd(self) -> SVD:
        return self._svd

    @property
    def is_solved(self) -> bool:
        return self._solved

    @property
    def num_measurements(self) -> int:
        return self._num_measurements

    @property
    def weighted_sq_sum(self) -> float:
        return self._weighted_sq_sum

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------

    def clone(self) -> "WLS":
        """Independent estimator with copies of all accumulators."""
        twin = object.__new__(type(self))
        twin._size = self._size
        twin.options = self.options
        twin._svd = SVD(self.options)
        twin._C_inv = self._C_inv.copy()
        twin._vector_acc = self._vector_acc.copy()
        twin._weighted_sq_sum = self._weighted_sq_sum
        twin._num_measurements = self._num_measurements
        twin._mu = self._mu.copy()
        twin._solved = False
        twin._decomposed = False
        return twin

    def __copy__(self):
        raise TypeError("WLS estimators are not copyable; use clone()")

    def __deepcopy__(self, memo):
        raise TypeError("WLS estimators are not copyable; use clone()")

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}("
            f"size={self._size}, "
            f"measurements={self._num_measurements}, "
            f"solved={self._solved})"
        )


WLSEstimator = WLS


def fixed_size_wls(size: int) -> Type[WLS]:
    """Shorthand for WLS.fixed(size)."""
    return WLS.fixed(size)


def reduce_estimators(estimators: Iterable[WLS]) -> WLS:
    """Merge estimators pairwise into a new one; the inputs are not modified.

    All estimators must have the same dimension.
    """
    level = [est.clone() for est in estimators]
    if not level:
        raise ValueError("reduce_estimators needs at least one estimator")

    while len(level) > 1:
        merged = []
        for i in range(0, len(level) - 1, 2):
            merged.append(level[i].combine(level[i + 1]))
        if len(level) % 2:
            merged.append(level[-1])
        level = merged

    logger.debug("Reduced estimators into %r", level[0])
    return level[0]
