"""
Dirichlet distribution as an exponential family.

The Dirichlet distribution has PDF:

.. math::
    p(x|\\alpha) = \\frac{\\Gamma(\\sum_i \\alpha_i)}{\\prod_i \\Gamma(\\alpha_i)}
    \\prod_i x_i^{\\alpha_i - 1}

for :math:`x` on the probability simplex, with concentration
:math:`\\alpha_i > 0`. It is the conjugate prior of the categorical
distribution.

Exponential family form:

- :math:`\\log h(x) = -\\log x` (elementwise, summed in the density)
- :math:`t(x) = \\log x` (sufficient statistics)
- :math:`\\eta = \\alpha` (natural parameters, identity map)
- :math:`A(\\eta) = \\sum_i \\log\\Gamma(\\alpha_i) - \\log\\Gamma(\\sum_i \\alpha_i)`

Parametrizations:

- Standard: :math:`\\alpha` (concentration, d-vector, positive)
- Natural: :math:`\\eta = \\alpha`
- Expectation: :math:`E[\\log x_i] = \\psi(\\alpha_i) - \\psi(\\sum_j \\alpha_j)`
"""

from typing import Optional, Union

import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray
from scipy.stats import dirichlet as scipy_dirichlet
from scipy.special import digamma

from expodist.base import DefaultParameter, DeltaDistribution, ExponentialFamily
from expodist.exceptions import DimensionMismatch, InvalidArgument
from expodist.params import DirichletParams
from expodist.utils import as_generator, log_mvbeta


def _simplex_rtol(dtype: DTypeLike) -> float:
    """Relative tolerance on the simplex sum: square root of the dtype's epsilon."""
    return float(np.sqrt(np.finfo(dtype).eps))


class Dirichlet(ExponentialFamily):
    """
    Dirichlet distribution in exponential family form.

    Parameters
    ----------
    alpha : array_like, optional
        Concentration vector, all entries positive. Defaults to ones.
    dim : int, optional
        Dimension of the support. Required when ``alpha`` is omitted.
    dtype : dtype, optional
        Encoding type. Defaults to the type of ``alpha`` or ``float64``.

    Examples
    --------
    >>> Dirichlet(dim=2, dtype=np.float32).alpha
    array([1., 1.], dtype=float32)

    >>> d = Dirichlet([1.0, 2.0, 3.0])
    >>> d.mean()
    array([0.16666667, 0.33333333, 0.5       ])

    See Also
    --------
    DeltaDirichlet : Point-mass limit on the simplex
    """

    def __init__(
        self,
        alpha: Optional[ArrayLike] = None,
        *,
        dim: Optional[int] = None,
        dtype: DTypeLike = None,
    ):
        if alpha is not None and np.ndim(alpha) != 1:
            raise DimensionMismatch(
                f"alpha must be a vector, got shape {np.shape(alpha)}"
            )
        dim = self._resolve_dim(dim, alpha)
        dtype = self._resolve_dtype(dtype, alpha)
        if alpha is None:
            alpha = np.ones(dim, dtype=dtype)
        alpha = np.array(alpha, dtype=dtype)
        if not np.all(alpha > 0):
            raise InvalidArgument(f"Concentration must be positive, got {alpha}")
        super().__init__(DefaultParameter(alpha), dim)

    @property
    def alpha(self) -> NDArray:
        """Concentration vector."""
        return self.stdparam().alpha

    @classmethod
    def _natural_dim(cls, dim: int) -> int:
        return dim

    def _natural_to_classical(self, eta: NDArray) -> DirichletParams:
        if not np.all(eta > 0):
            raise InvalidArgument(
                f"Dirichlet natural parameters must be positive, got {eta}"
            )
        return DirichletParams(alpha=np.array(eta, dtype=self.dtype))

    def basemeasure(self, x: ArrayLike) -> NDArray:
        """Log base measure: :math:`-\\log x` elementwise."""
        x = self._check_vector(x)
        return -np.log(x)

    def stats(self, x: ArrayLike) -> NDArray:
        """Sufficient statistics: :math:`t(x) = \\log x`."""
        x = self._check_vector(x)
        return np.log(x)

    def _log_partition(self, eta: NDArray) -> float:
        """Log of the multivariate Beta function of :math:`\\alpha = \\eta`."""
        return log_mvbeta(eta)

    def _natural_to_expectation(self, eta: NDArray) -> NDArray:
        """
        Analytical gradient: :math:`E[\\log x_i] = \\psi(\\alpha_i) - \\psi(\\sum_j \\alpha_j)`.
        """
        return digamma(eta) - digamma(np.sum(eta))

    def mean(self) -> NDArray:
        """Mean of the distribution: :math:`\\alpha / \\sum_i \\alpha_i`."""
        alpha = self.naturalparam()
        return alpha / np.sum(alpha)

    def sample(
        self,
        n: int = 1,
        random_state: Optional[Union[int, np.random.Generator]] = None,
    ) -> NDArray:
        """
        Draw ``n`` points of the simplex using ``scipy.stats.dirichlet``.

        Returns
        -------
        samples : ndarray, shape (n, d)
        """
        rng = as_generator(random_state)
        alpha = self.stdparam().alpha.astype(np.float64)
        draws = scipy_dirichlet(alpha).rvs(size=n, random_state=rng)
        return np.asarray(draws, dtype=self.dtype).reshape(n, self._dim)

    def to_scipy(self):
        """Convert to ``scipy.stats.dirichlet``."""
        return scipy_dirichlet(self.stdparam().alpha.astype(np.float64))


class DeltaDirichlet(DeltaDistribution):
    """
    δ-equivalent of the :class:`Dirichlet` distribution.

    A point mass at :math:`\\mu` on the simplex. :math:`\\sum_i \\mu_i = 1`
    is enforced at construction, up to a relative tolerance of
    :math:`\\sqrt{\\epsilon}` for the dtype.

    Parameters
    ----------
    mu : array_like, optional
        Location on the simplex. Defaults to the uniform vector.
    dim : int, optional
        Dimension of the support. Required when ``mu`` is omitted.
    dtype : dtype, optional
        Encoding type.

    Raises
    ------
    InvalidArgument
        If ``mu`` has negative entries or does not sum to one.

    Examples
    --------
    >>> DeltaDirichlet(dim=2, dtype=np.float32).mu
    array([0.5, 0.5], dtype=float32)
    >>> DeltaDirichlet([0.4, 0.5])
    Traceback (most recent call last):
        ...
    expodist.exceptions.InvalidArgument: input of the DeltaDirichlet should sum up to one (got 0.9)
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
            mu = np.ones(dim, dtype=dtype) / dim
        super().__init__(mu, dtype)
        if np.any(self._mu < 0):
            raise InvalidArgument(
                f"input of the DeltaDirichlet must be non-negative (got {self._mu})"
            )
        total = np.sum(self._mu)
        if not np.isclose(total, 1.0, rtol=_simplex_rtol(self.dtype), atol=0.0):
            raise InvalidArgument(
                f"input of the DeltaDirichlet should sum up to one (got {total:.6g})"
            )

    def gradlognorm(self) -> NDArray:
        """Limit of :math:`E[\\log x]`: :math:`\\log\\mu` elementwise."""
        return np.log(self._mu)

    def update(self, eta: ArrayLike) -> 'DeltaDirichlet':
        """
        Move to the mode of the Dirichlet with natural parameters ``eta``.

        .. math::
            \\mu = \\frac{\\eta - 1}{\\sum_i (\\eta_i - 1)}

        Raises
        ------
        InvalidArgument
            If any entry of ``eta`` is below one, or all equal one (the
            mode is then not unique).
        """
        eta = self._check_natural(eta, self._dim)
        if not np.all(eta >= 1):
            raise InvalidArgument(f"Expected eta >= 1, got {eta}")
        excess = eta - 1
        total = np.sum(excess)
        if total <= 0:
            raise InvalidArgument(
                "Dirichlet with all natural parameters equal to one has no unique mode"
            )
        self._set_location(excess / total)
        return self
