"""Linear algebra utilities for expodist.

Numerically stable operations on symmetric positive definite (SPD)
matrices. Every inverse and log-determinant in the package goes through a
Cholesky factorization of the symmetrized input rather than a generic
``inv``/``slogdet``.
"""

import warnings
from typing import Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.linalg import cholesky, solve_triangular, LinAlgError

from expodist.exceptions import DimensionMismatch, NotPositiveDefinite

#: Absolute tolerance used when checking that a matrix is symmetric.
SYMMETRY_ATOL = 1e-8


def symmetrize(A: ArrayLike) -> NDArray:
    r"""
    Return the symmetric part :math:`(A + A^T) / 2` of a square matrix.
    """
    A = np.asarray(A)
    return 0.5 * (A + A.T)


def is_symmetric(A: ArrayLike, *, atol: float = SYMMETRY_ATOL) -> bool:
    """Check symmetry up to ``atol`` (relative to the largest entry)."""
    A = np.asarray(A)
    scale = max(1.0, float(np.max(np.abs(A)))) if A.size else 1.0
    return bool(np.allclose(A, A.T, rtol=0.0, atol=atol * scale))


def spd_cholesky(A: ArrayLike) -> NDArray:
    r"""
    Lower Cholesky factor of a symmetric positive definite matrix.

    The input is symmetrized first, so tiny rounding asymmetries do not
    change the result.

    Parameters
    ----------
    A : array_like, shape (d, d)
        Symmetric positive definite matrix.

    Returns
    -------
    L : ndarray, shape (d, d)
        Lower triangular factor with :math:`L L^T = A`.

    Raises
    ------
    DimensionMismatch
        If ``A`` is not square.
    NotPositiveDefinite
        If the factorization fails.

    Examples
    --------
    >>> import numpy as np
    >>> from expodist.utils import spd_cholesky
    >>> L = spd_cholesky(np.array([[4.0, 2.0], [2.0, 3.0]]))
    >>> np.allclose(L @ L.T, [[4.0, 2.0], [2.0, 3.0]])
    True
    """
    A = np.asarray(A)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise DimensionMismatch(f"Expected a square matrix, got shape {A.shape}")
    if not np.all(np.isfinite(A)):
        raise NotPositiveDefinite("Matrix contains non-finite entries")
    try:
        return cholesky(symmetrize(A), lower=True)
    except LinAlgError as e:
        raise NotPositiveDefinite(f"Matrix is not positive definite: {e}") from e


def cholesky_logdet(L: NDArray) -> float:
    r"""
    Log-determinant from a Cholesky factor: :math:`\log|A| = 2\sum_i \log L_{ii}`.
    """
    return 2.0 * np.sum(np.log(np.diag(L)))


def cholesky_inv(L: NDArray) -> NDArray:
    r"""
    Inverse of :math:`A = L L^T` given its lower Cholesky factor.

    Uses :math:`A^{-1} = L^{-T} L^{-1}` via two triangular solves. The
    result is symmetrized.
    """
    d = L.shape[0]
    L_inv = solve_triangular(L, np.eye(d, dtype=L.dtype), lower=True)
    return symmetrize(L_inv.T @ L_inv)


def spd_logdet(A: ArrayLike) -> float:
    """Log-determinant of an SPD matrix."""
    return cholesky_logdet(spd_cholesky(A))


def spd_inv(A: ArrayLike) -> NDArray:
    """Inverse of an SPD matrix."""
    return cholesky_inv(spd_cholesky(A))


def spd_inv_logdet(A: ArrayLike) -> Tuple[NDArray, float]:
    """
    Inverse and log-determinant of an SPD matrix from one factorization.

    Returns
    -------
    A_inv : ndarray, shape (d, d)
    logdet : float
        :math:`\\log|A|` (of ``A``, not of its inverse).
    """
    L = spd_cholesky(A)
    return cholesky_inv(L), cholesky_logdet(L)


def warn_if_asymmetric(A: ArrayLike, name: str, *, atol: float = SYMMETRY_ATOL) -> None:
    """
    Emit a ``RuntimeWarning`` when ``A`` is not symmetric.

    Callers go on to use the symmetric part of ``A``.
    """
    if not is_symmetric(A, atol=atol):
        warnings.warn(
            f"{name} is not symmetric; using its symmetric part (A + A^T) / 2",
            RuntimeWarning,
            stacklevel=3,
        )
