"""lsq_toolkit.core.solver

Information-form weighted least squares and its SVD back-end.
"""

from .decomposition import SVD
from .wls import WLS, WLSEstimator, fixed_size_wls, reduce_estimators

__all__ = [
    "SVD",
    "WLS",
    "WLSEstimator",
    "fixed_size_wls",
    "reduce_estimators",
]
