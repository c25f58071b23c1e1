"""
Multivariate Normal distribution as an exponential family.

The multivariate Normal distribution has PDF:

.. math::
    p(x|\\mu,\\Sigma) = (2\\pi)^{-d/2} |\\Sigma|^{-1/2}
    \\exp\\left(-\\frac{1}{2} (x-\\mu)^T \\Sigma^{-1} (x-\\mu)\\right)

for :math:`x \\in \\mathbb{R}^d`, where :math:`\\mu` is the mean vector
and :math:`\\Sigma` is the covariance matrix.

Exponential family form:

- :math:`\\log h(x) = -\\frac{d}{2}\\log(2\\pi)` (base measure)
- :math:`t(x) = [x, \\text{vec}(xx^T)]` (sufficient statistics)
- :math:`\\eta = [\\Lambda\\mu, -\\frac{1}{2}\\text{vec}(\\Lambda)]` where :math:`\\Lambda = \\Sigma^{-1}`
- :math:`A(\\eta) = \\frac{1}{2}\\mu^T\\Lambda\\mu - \\frac{1}{2}\\log|\\Lambda|`

Parametrizations:

- Standard: :math:`\\mu` (mean, d-vector), :math:`\\Sigma` (covariance, d×d positive definite)
- Natural: :math:`\\eta = [\\Lambda\\mu, \\text{vec}(-\\frac{1}{2}\\Lambda)]`, length :math:`d + d^2`
- Expectation: :math:`[E[X], E[XX^T]] = [\\mu, \\Sigma + \\mu\\mu^T]`

The natural parameters only ever reach :math:`\\Lambda` through its
Cholesky factor, so the log partition function is evaluated as
:math:`\\frac{1}{2}(\\|L^{-1}\\Lambda\\mu\\|^2 - \\log|\\Lambda|)` with
:math:`\\Lambda = LL^T`.
"""

from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray
from scipy.stats import multivariate_normal as scipy_multivariate_normal
from scipy.linalg import solve_triangular

from expodist.base import DefaultParameter, DeltaDistribution, ExponentialFamily
from expodist.exceptions import DimensionMismatch, InvalidArgument
from expodist.params import NormalParams
from expodist.utils import (
    as_generator,
    cholesky_inv,
    cholesky_logdet,
    is_symmetric,
    spd_cholesky,
    spd_inv,
    warn_if_asymmetric,
)

_LOG_2PI = np.log(2 * np.pi)


def _split_natural(eta: NDArray, d: int) -> Tuple[NDArray, NDArray]:
    """
    Split Normal natural parameters into :math:`\\Lambda\\mu` and :math:`\\Lambda`.

    Returns
    -------
    Lambda_mu : ndarray, shape (d,)
    Lambda : ndarray, shape (d, d)
    """
    return eta[:d], -2 * eta[d:].reshape(d, d)


class Normal(ExponentialFamily):
    """
    Multivariate Normal distribution in exponential family form.

    Parameters
    ----------
    mu : array_like, optional
        Mean vector, shape ``(d,)``. Defaults to zeros.
    sigma : array_like, optional
        Covariance matrix, shape ``(d, d)``, symmetric positive definite.
        Defaults to the identity.
    dim : int, optional
        Dimension. Required when neither ``mu`` nor ``sigma`` is given.
    dtype : dtype, optional
        Encoding type.

    Raises
    ------
    DimensionMismatch
        If ``len(mu)`` differs from either side of ``sigma``.
    InvalidArgument
        If ``sigma`` is not symmetric.
    NotPositiveDefinite
        If ``sigma`` is not positive definite.

    Examples
    --------
    >>> n = Normal([0.0, 0.0])
    >>> n.lognorm()
    0.0
    >>> n.basemeasure([1.0, 2.0])
    -1.8378770664093453

    >>> Normal([1.0, 2.0], [[1.0, 0.5], [0.5, 2.0]]).gradlognorm(vectorize=False)
    (array([1., 2.]), array([[2. , 2.5],
           [2.5, 6. ]]))

    See Also
    --------
    NormalDiag : Diagonal covariance variant
    DeltaNormal : Point-mass limit
    """

    def __init__(
        self,
        mu: Optional[ArrayLike] = None,
        sigma: Optional[ArrayLike] = None,
        *,
        dim: Optional[int] = None,
        dtype: DTypeLike = None,
    ):
        if mu is not None and np.ndim(mu) != 1:
            raise DimensionMismatch(f"mu must be a vector, got shape {np.shape(mu)}")
        if sigma is not None and np.ndim(sigma) != 2:
            raise DimensionMismatch(
                f"sigma must be a matrix, got shape {np.shape(sigma)}"
            )
        dim = self._resolve_dim(dim, mu, sigma)
        dtype = self._resolve_dtype(dtype, mu, sigma)

        mu = np.zeros(dim, dtype=dtype) if mu is None else np.array(mu, dtype=dtype)
        sigma = (np.eye(dim, dtype=dtype) if sigma is None
                 else np.array(sigma, dtype=dtype))
        if sigma.shape != (dim, dim):
            raise DimensionMismatch(
                f"Dimension mismatch: mu has length {dim}, sigma has shape {sigma.shape}"
            )
        if not is_symmetric(sigma):
            raise InvalidArgument("Covariance matrix must be symmetric")

        Lambda = spd_inv(sigma)
        eta = np.concatenate([Lambda @ mu, -0.5 * Lambda.ravel()]).astype(dtype)
        super().__init__(DefaultParameter(eta), dim)

    @property
    def mu(self) -> NDArray:
        """Mean vector."""
        return self.stdparam().mu

    @property
    def sigma(self) -> NDArray:
        """Covariance matrix."""
        return self.stdparam().sigma

    @classmethod
    def _natural_dim(cls, dim: int) -> int:
        return dim + dim * dim

    def _natural_to_classical(self, eta: NDArray) -> NormalParams:
        """
        Convert natural to standard parameters.

        :math:`\\Sigma = \\Lambda^{-1}` and :math:`\\mu = \\Sigma\\,(\\Lambda\\mu)`.
        Raises ``NotPositiveDefinite`` if :math:`\\Lambda` is not PD.
        """
        Lambda_mu, Lambda = _split_natural(eta, self._dim)
        sigma = spd_inv(Lambda)
        mu = sigma @ Lambda_mu
        return NormalParams(mu=mu.astype(self.dtype), sigma=sigma.astype(self.dtype))

    def update(self, eta: ArrayLike) -> 'Normal':
        eta = self._check_natural(eta, self._natural_dim(self._dim))
        warn_if_asymmetric(_split_natural(eta, self._dim)[1], "Precision matrix")
        return super().update(eta)

    # ============================================================
    # Exponential family structure
    # ============================================================

    def basemeasure(self, x: ArrayLike) -> float:
        """Log base measure: :math:`-\\frac{d}{2}\\log(2\\pi)`."""
        self._check_vector(x)
        return float(-0.5 * self._dim * _LOG_2PI)

    def stats(self, x: ArrayLike) -> NDArray:
        """Sufficient statistics: :math:`t(x) = [x, \\text{vec}(xx^T)]`."""
        x = self._check_vector(x)
        return np.concatenate([x, np.outer(x, x).ravel()])

    def _log_partition(self, eta: NDArray) -> float:
        """
        Log partition function.

        .. math::
            A(\\eta) = \\frac{1}{2}\\left(\\|L^{-1}\\Lambda\\mu\\|^2 - \\log|\\Lambda|\\right),
            \\quad \\Lambda = LL^T
        """
        Lambda_mu, Lambda = _split_natural(eta, self._dim)
        L = spd_cholesky(Lambda)
        z = solve_triangular(L, Lambda_mu, lower=True)
        return float(0.5 * (np.dot(z, z) - cholesky_logdet(L)))

    def _natural_to_expectation(self, eta: NDArray) -> NDArray:
        """Analytical gradient: :math:`[\\mu, \\text{vec}(\\Sigma + \\mu\\mu^T)]`."""
        Lambda_mu, Lambda = _split_natural(eta, self._dim)
        sigma = cholesky_inv(spd_cholesky(Lambda))
        mu = sigma @ Lambda_mu
        return np.concatenate([mu, (sigma + np.outer(mu, mu)).ravel()]).astype(self.dtype)

    def splitgrad(self, grad: ArrayLike) -> Tuple[NDArray, NDArray]:
        """
        Split a gradient into :math:`E[X]` and :math:`E[XX^T]`.

        Returns
        -------
        E_x : ndarray, shape (d,)
        E_xxT : ndarray, shape (d, d)
        """
        grad = self._check_natural(grad, self._natural_dim(self._dim))
        d = self._dim
        return grad[:d], grad[d:].reshape(d, d)

    def mean(self) -> NDArray:
        """Mean of the distribution: :math:`E[X] = \\mu`."""
        return self.stdparam().mu

    def sample(
        self,
        n: int = 1,
        random_state: Optional[Union[int, np.random.Generator]] = None,
    ) -> NDArray:
        """
        Generate samples using :math:`X = \\mu + L Z` where :math:`Z \\sim N(0, I)`
        and :math:`\\Sigma = LL^T`.

        Returns
        -------
        samples : ndarray, shape (n, d)
        """
        rng = as_generator(random_state)
        mu, sigma = self.stdparam()
        L = spd_cholesky(sigma)
        z = rng.standard_normal((n, self._dim))
        return (mu + z @ L.T).astype(self.dtype)

    def to_scipy(self):
        """Convert to ``scipy.stats.multivariate_normal``."""
        mu, sigma = self.stdparam()
        return scipy_multivariate_normal(
            mean=mu.astype(np.float64), cov=sigma.astype(np.float64)
        )


class DeltaNormal(DeltaDistribution):
    """
    δ-equivalent of the :class:`Normal` distribution.

    A point mass at :math:`\\mu`; only the location is stored.

    Parameters
    ----------
    mu : array_like, optional
        Location. Defaults to zeros.
    dim : int, optional
        Dimension. Required when ``mu`` is omitted.
    dtype : dtype, optional
        Encoding type.

    Examples
    --------
    >>> DeltaNormal([1.0, 2.0]).gradlognorm()
    array([1., 2., 1., 2., 2., 4.])
    """

    def __init__(
        self,
        mu: Optional[ArrayLike] = None,
        *,
        dim: Optional[int] = None,
        dtype: DTypeLike = None,
    ):
        if mu is not None and np.ndim(mu) != 1:
            raise DimensionMismatch(f"mu must be a vector, got shape {np.shape(mu)}")
        dim = self._resolve_dim(dim, mu)
        dtype = self._resolve_dtype(dtype, mu)
        if mu is None:
            mu = np.zeros(dim, dtype=dtype)
        super().__init__(mu, dtype)

    def gradlognorm(self, vectorize: bool = True) -> Union[NDArray, Tuple[NDArray, NDArray]]:
        """
        Limit of :math:`E[t(X)]`: :math:`[\\mu, \\text{vec}(\\mu\\mu^T)]`.

        Parameters
        ----------
        vectorize : bool, optional
            If False, return the pair :math:`(\\mu, \\mu\\mu^T)`.
        """
        mu = self._mu
        if vectorize:
            return np.concatenate([mu, np.outer(mu, mu).ravel()])
        return mu.copy(), np.outer(mu, mu)

    def splitgrad(self, grad: ArrayLike) -> Tuple[NDArray, NDArray]:
        """Split a gradient into its vector and ``(d, d)`` matrix blocks."""
        d = self._dim
        grad = self._check_natural(grad, d + d * d)
        return grad[:d], grad[d:].reshape(d, d)

    def update(self, eta: ArrayLike) -> 'DeltaNormal':
        """
        Move to the mean of the Normal with natural parameters ``eta``:
        :math:`\\mu = \\Lambda^{-1}(\\Lambda\\mu)`.
        """
        d = self._dim
        eta = self._check_natural(eta, d + d * d)
        Lambda_mu, Lambda = _split_natural(eta, d)
        warn_if_asymmetric(Lambda, "Precision matrix")
        self._set_location(spd_inv(Lambda) @ Lambda_mu)
        return self
