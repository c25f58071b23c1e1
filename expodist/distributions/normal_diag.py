"""
Normal distribution with diagonal covariance as an exponential family.

Same family as :class:`~expodist.distributions.normal.Normal` restricted
to :math:`\\Sigma = \\text{diag}(v)`; every d×d operation reduces to an
elementwise one on the variance vector :math:`v`.

Exponential family form:

- :math:`\\log h(x) = -\\frac{d}{2}\\log(2\\pi)` (base measure)
- :math:`t(x) = [x, x^2]` (sufficient statistics, elementwise square)
- :math:`\\eta = [\\mu / v, -\\frac{1}{2v}]` (natural parameters)
- :math:`A(\\eta) = \\frac{1}{2}\\sum_i \\log v_i + \\frac{1}{2}\\sum_i \\mu_i^2 / v_i`

Parametrizations:

- Standard: :math:`\\mu` (mean, d-vector), :math:`v` (variances, d-vector, positive)
- Natural: :math:`\\eta = [\\mu / v, -\\frac{1}{2v}]`, length :math:`2d`
- Expectation: :math:`[E[X], E[X^2]] = [\\mu, v + \\mu^2]`
"""

from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray
from scipy.stats import multivariate_normal as scipy_multivariate_normal

from expodist.base import DefaultParameter, DeltaDistribution, ExponentialFamily
from expodist.exceptions import DimensionMismatch, InvalidArgument
from expodist.params import NormalDiagParams
from expodist.utils import as_generator

_LOG_2PI = np.log(2 * np.pi)


def _split_natural(eta: NDArray, d: int) -> Tuple[NDArray, NDArray]:
    """Return :math:`(\\mu / v, v)` from natural parameters; ``v`` must be positive."""
    half_precision = eta[d:]
    if not np.all(half_precision < 0):
        raise InvalidArgument(
            f"Second natural parameter block must be negative, got {half_precision}"
        )
    return eta[:d], 1.0 / (-2.0 * half_precision)


class NormalDiag(ExponentialFamily):
    """
    Normal distribution with diagonal covariance in exponential family form.

    Parameters
    ----------
    mu : array_like, optional
        Mean vector, shape ``(d,)``. Defaults to zeros.
    v : array_like, optional
        Variance vector, shape ``(d,)``, positive. Defaults to ones.
    dim : int, optional
        Dimension. Required when neither ``mu`` nor ``v`` is given.
    dtype : dtype, optional
        Encoding type.

    Examples
    --------
    >>> n = NormalDiag([1.0, -1.0], [2.0, 0.5])
    >>> n.naturalparam()
    array([ 0.5 , -2.  , -0.25, -1.  ])
    >>> n.sigma
    array([[2. , 0. ],
           [0. , 0.5]])
    """

    def __init__(
        self,
        mu: Optional[ArrayLike] = None,
        v: Optional[ArrayLike] = None,
        *,
        dim: Optional[int] = None,
        dtype: DTypeLike = None,
    ):
        for name, a in (("mu", mu), ("v", v)):
            if a is not None and np.ndim(a) != 1:
                raise DimensionMismatch(
                    f"{name} must be a vector, got shape {np.shape(a)}"
                )
        dim = self._resolve_dim(dim, mu, v)
        dtype = self._resolve_dtype(dtype, mu, v)

        mu = np.zeros(dim, dtype=dtype) if mu is None else np.array(mu, dtype=dtype)
        v = np.ones(dim, dtype=dtype) if v is None else np.array(v, dtype=dtype)
        if mu.shape != v.shape:
            raise DimensionMismatch(
                f"Dimension mismatch: mu has length {mu.shape[0]}, v has length {v.shape[0]}"
            )
        if not np.all(v > 0):
            raise InvalidArgument(f"Variances must be positive, got {v}")

        eta = np.concatenate([mu / v, -0.5 / v]).astype(dtype)
        super().__init__(DefaultParameter(eta), dim)

    @property
    def mu(self) -> NDArray:
        """Mean vector."""
        return self.stdparam().mu

    @property
    def v(self) -> NDArray:
        """Variance vector."""
        return self.stdparam().v

    @property
    def sigma(self) -> NDArray:
        """Covariance matrix :math:`\\text{diag}(v)`, built on each access."""
        return np.diag(self.stdparam().v)

    @classmethod
    def _natural_dim(cls, dim: int) -> int:
        return 2 * dim

    def _natural_to_classical(self, eta: NDArray) -> NormalDiagParams:
        Lambda_mu, v = _split_natural(eta, self._dim)
        return NormalDiagParams(
            mu=(v * Lambda_mu).astype(self.dtype), v=v.astype(self.dtype)
        )

    # ============================================================
    # Exponential family structure
    # ============================================================

    def basemeasure(self, x: ArrayLike) -> float:
        """Log base measure: :math:`-\\frac{d}{2}\\log(2\\pi)`."""
        self._check_vector(x)
        return float(-0.5 * self._dim * _LOG_2PI)

    def stats(self, x: ArrayLike) -> NDArray:
        """Sufficient statistics: :math:`t(x) = [x, x^2]`."""
        x = self._check_vector(x)
        return np.concatenate([x, x ** 2])

    def _log_partition(self, eta: NDArray) -> float:
        Lambda_mu, v = _split_natural(eta, self._dim)
        mu = v * Lambda_mu
        return float(0.5 * np.sum(np.log(v)) + 0.5 * np.sum(mu ** 2 / v))

    def _natural_to_expectation(self, eta: NDArray) -> NDArray:
        Lambda_mu, v = _split_natural(eta, self._dim)
        mu = v * Lambda_mu
        return np.concatenate([mu, v + mu ** 2]).astype(self.dtype)

    def splitgrad(self, grad: ArrayLike) -> Tuple[NDArray, NDArray]:
        """Split a gradient into :math:`E[X]` and :math:`E[X^2]`."""
        grad = self._check_natural(grad, self._natural_dim(self._dim))
        d = self._dim
        return grad[:d], grad[d:]

    def mean(self) -> NDArray:
        """Mean of the distribution: :math:`E[X] = \\mu`."""
        return self.stdparam().mu

    def sample(
        self,
        n: int = 1,
        random_state: Optional[Union[int, np.random.Generator]] = None,
    ) -> NDArray:
        """
        Generate samples using :math:`X = \\mu + \\sqrt{v} \\odot Z`.

        Returns
        -------
        samples : ndarray, shape (n, d)
        """
        rng = as_generator(random_state)
        mu, v = self.stdparam()
        z = rng.standard_normal((n, self._dim))
        return (mu + np.sqrt(v) * z).astype(self.dtype)

    def to_scipy(self):
        """Convert to ``scipy.stats.multivariate_normal`` with diagonal covariance."""
        mu, v = self.stdparam()
        return scipy_multivariate_normal(
            mean=mu.astype(np.float64), cov=np.diag(v.astype(np.float64))
        )


class DeltaNormalDiag(DeltaDistribution):
    """
    δ-equivalent of the :class:`NormalDiag` distribution.

    Examples
    --------
    >>> DeltaNormalDiag([1.0, 2.0]).gradlognorm()
    array([1., 2., 1., 4.])
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
        """Limit of :math:`E[t(X)]`: :math:`[\\mu, \\mu^2]`."""
        mu = self._mu
        if vectorize:
            return np.concatenate([mu, mu ** 2])
        return mu.copy(), mu ** 2

    def splitgrad(self, grad: ArrayLike) -> Tuple[NDArray, NDArray]:
        """Split a gradient into its two length-``d`` blocks."""
        d = self._dim
        grad = self._check_natural(grad, 2 * d)
        return grad[:d], grad[d:]

    def update(self, eta: ArrayLike) -> 'DeltaNormalDiag':
        """Move to the mean :math:`\\mu = v \\odot (\\mu / v)` of the NormalDiag at ``eta``."""
        d = self._dim
        eta = self._check_natural(eta, 2 * d)
        Lambda_mu, v = _split_natural(eta, d)
        self._set_location(v * Lambda_mu)
        return self
