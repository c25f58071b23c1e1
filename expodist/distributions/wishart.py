"""
Wishart distribution as an exponential family.

The Wishart distribution has PDF:

.. math::
    p(X|W, v) = \\frac{|X|^{(v-d-1)/2} \\exp(-\\frac{1}{2}\\text{tr}(W^{-1}X))}
    {2^{vd/2} |W|^{v/2} \\Gamma_d(v/2)}

for :math:`X` a d×d symmetric positive definite matrix, with scale
:math:`W` (SPD) and degrees of freedom :math:`v > d - 1`. It is the
conjugate prior of the precision matrix of a Normal.

Exponential family form:

- :math:`\\log h(X) = -\\frac{d+1}{2}\\log|X| - \\frac{d(d-1)}{4}\\log\\pi`
- :math:`t(X) = [\\text{vec}(X), \\log|X|]` (sufficient statistics)
- :math:`\\eta = [-\\frac{1}{2}\\text{vec}(W^{-1}), v/2]` (natural parameters)
- :math:`A(\\eta) = \\frac{1}{2}(-v\\log|M| + vd\\log 2) + \\sum_{i=1}^{d}\\log\\Gamma(\\frac{v+1-i}{2})`
  with :math:`M = W^{-1} = -2\\,\\text{reshape}(\\eta_1)` and :math:`v = 2\\eta_2`

The :math:`\\pi` factor of the multivariate Gamma function
:math:`\\Gamma_d` does not depend on the parameters and is carried by the
base measure.

Parametrizations:

- Standard: :math:`W` (scale, d×d SPD), :math:`v` (degrees of freedom)
- Natural: :math:`\\eta = [-\\frac{1}{2}\\text{vec}(W^{-1}), v/2]`, length :math:`d^2 + 1`
- Expectation: :math:`[E[X], E[\\log|X|]] = [vW, \\sum_i\\psi(\\frac{v+1-i}{2}) + d\\log 2 + \\log|W|]`

All inverses and log-determinants go through a Cholesky factorization of
the symmetrized matrix.
"""

from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray
from scipy.stats import wishart as scipy_wishart

from expodist.base import DefaultParameter, ExponentialFamily
from expodist.exceptions import DimensionMismatch, InvalidArgument
from expodist.params import WishartParams
from expodist.utils import (
    as_generator,
    is_symmetric,
    multidigamma,
    multigammaln_nopi,
    spd_inv,
    spd_inv_logdet,
    spd_logdet,
    warn_if_asymmetric,
)

_LOG2 = np.log(2.0)


class Wishart(ExponentialFamily):
    """
    Wishart distribution in exponential family form.

    Parameters
    ----------
    W : array_like, optional
        Scale matrix, shape ``(d, d)``, symmetric positive definite.
        Defaults to the identity.
    v : float, optional
        Degrees of freedom, :math:`v > d - 1`. Defaults to ``d``.
    dim : int, optional
        Dimension. Required when ``W`` is omitted.
    dtype : dtype, optional
        Encoding type. Defaults to the type of ``W`` or ``float64``.

    Raises
    ------
    DimensionMismatch
        If ``W`` is not square.
    InvalidArgument
        If ``W`` is not symmetric or :math:`v \\le d - 1`.
    NotPositiveDefinite
        If ``W`` is not positive definite.

    Examples
    --------
    >>> w = Wishart(np.array([[1.0, 0.5], [0.5, 1.0]]), 2)
    >>> W, v = w.stdparam()
    >>> v
    2.0
    >>> w.mean()
    array([[2., 1.],
           [1., 2.]])

    Notes
    -----
    The natural parameter vector stores :math:`\\text{vec}(W^{-1})` in
    full (:math:`d^2` entries) rather than its upper triangle. Gradients
    w.r.t. the off-diagonal entries are therefore w.r.t. each entry
    separately, which is why :math:`\\nabla_{\\eta_1} A = vW` has no factor
    of two on the off-diagonal.
    """

    def __init__(
        self,
        W: Optional[ArrayLike] = None,
        v: Optional[float] = None,
        *,
        dim: Optional[int] = None,
        dtype: DTypeLike = None,
    ):
        if W is not None and np.ndim(W) != 2:
            raise DimensionMismatch(f"W must be a matrix, got shape {np.shape(W)}")
        dim = self._resolve_dim(dim, W)
        dtype = self._resolve_dtype(dtype, W, v)
        if W is None:
            W = np.eye(dim, dtype=dtype)
        W = np.array(W, dtype=dtype)
        if W.shape != (dim, dim):
            raise DimensionMismatch(f"W must be square, got shape {W.shape}")
        if not is_symmetric(W):
            raise InvalidArgument("Scale matrix W must be symmetric")
        v = float(dim if v is None else v)
        _check_dof(v, dim)

        M = spd_inv(W)
        eta = np.concatenate([-0.5 * M.ravel(), [0.5 * v]]).astype(dtype)
        super().__init__(DefaultParameter(eta), dim)

    @property
    def W(self) -> NDArray:
        """Scale matrix."""
        return self.stdparam().W

    @property
    def v(self) -> float:
        """Degrees of freedom."""
        return self.stdparam().v

    @classmethod
    def _natural_dim(cls, dim: int) -> int:
        return dim * dim + 1

    def _split_natural(self, eta: NDArray) -> Tuple[NDArray, float]:
        """Recover :math:`M = W^{-1}` and :math:`v` from :math:`\\eta`."""
        d = self._dim
        M = -2 * eta[:-1].reshape(d, d)
        v = 2 * eta[-1]
        return M, float(v)

    def _natural_to_classical(self, eta: NDArray) -> WishartParams:
        M, v = self._split_natural(eta)
        _check_dof(v, self._dim)
        W = spd_inv(M)
        return WishartParams(W=W.astype(self.dtype), v=v)

    def update(self, eta: ArrayLike) -> 'Wishart':
        eta = self._check_natural(eta, self._natural_dim(self._dim))
        warn_if_asymmetric(self._split_natural(eta)[0], "Inverse scale matrix")
        return super().update(eta)

    # ============================================================
    # Exponential family structure
    # ============================================================

    def basemeasure(self, X: ArrayLike) -> float:
        """
        Log base measure:
        :math:`-\\frac{d+1}{2}\\log|X| - \\frac{d(d-1)}{4}\\log\\pi`.
        """
        X = self._check_square(X)
        d = self._dim
        return float(-0.5 * (d + 1) * spd_logdet(X) - 0.25 * d * (d - 1) * np.log(np.pi))

    def stats(self, X: ArrayLike) -> NDArray:
        """Sufficient statistics: :math:`t(X) = [\\text{vec}(X), \\log|X|]`."""
        X = self._check_square(X)
        return np.concatenate([X.ravel(), [spd_logdet(X)]]).astype(self.dtype)

    def _log_partition(self, eta: NDArray) -> float:
        """
        Log partition function, evaluated without materializing :math:`W`.

        .. math::
            A(\\eta) = \\frac{1}{2}(-v\\log|M| + vd\\log 2)
            + \\sum_{i=1}^{d}\\log\\Gamma(\\frac{v+1-i}{2})
        """
        d = self._dim
        M, v = self._split_natural(eta)
        logdet_M = spd_logdet(M)
        return float(0.5 * (-v * logdet_M + v * d * _LOG2) + multigammaln_nopi(0.5 * v, d))

    def _natural_to_expectation(self, eta: NDArray) -> NDArray:
        """
        Analytical gradient :math:`[\\text{vec}(vW), E[\\log|X|]]`.

        .. math::
            E[\\log|X|] = \\sum_{i=1}^{d}\\psi(\\frac{v+1-i}{2}) + d\\log 2 + \\log|W|
        """
        d = self._dim
        M, v = self._split_natural(eta)
        W, logdet_M = spd_inv_logdet(M)
        E_logdet = multidigamma(0.5 * v, d) + d * _LOG2 - logdet_M
        return np.concatenate([(v * W).ravel(), [E_logdet]]).astype(self.dtype)

    def splitgrad(self, grad: ArrayLike) -> Tuple[NDArray, float]:
        """
        Split a gradient into its matrix block and scalar.

        Returns
        -------
        E_X : ndarray, shape (d, d)
        E_logdet : float
        """
        grad = self._check_natural(grad, self._natural_dim(self._dim))
        d = self._dim
        return grad[:-1].reshape(d, d), grad[-1]

    def mean(self) -> NDArray:
        """Mean of the distribution: :math:`E[X] = vW`."""
        W, v = self.stdparam()
        return v * W

    def sample(
        self,
        n: int = 1,
        random_state: Optional[Union[int, np.random.Generator]] = None,
    ) -> NDArray:
        """
        Draw ``n`` matrices using ``scipy.stats.wishart``.

        Scale and degrees of freedom come from :meth:`stdparam`.

        Returns
        -------
        samples : ndarray, shape (n, d, d)
        """
        rng = as_generator(random_state)
        draws = self.to_scipy().rvs(size=n, random_state=rng)
        return np.asarray(draws, dtype=self.dtype).reshape(n, self._dim, self._dim)

    def to_scipy(self):
        """Convert to ``scipy.stats.wishart``."""
        W, v = self.stdparam()
        return scipy_wishart(df=v, scale=W.astype(np.float64))


def _check_dof(v: float, d: int) -> None:
    if not v > d - 1:
        raise InvalidArgument(
            f"Degrees of freedom must satisfy v > d - 1 = {d - 1}, got {v}"
        )
