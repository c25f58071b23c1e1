"""
Base class for exponential family distributions.

Exponential families have the canonical form:

.. math::
    p(x|\\eta) = h(x) \\exp(\\eta^T t(x) - A(\\eta))

where:

- :math:`\\eta`: natural parameters (vector)
- :math:`t(x)`: sufficient statistics, ``stats(x)``
- :math:`A(\\eta)`: log-normalizer (log partition function), ``lognorm()``
- :math:`\\log h(x)`: log base measure, ``basemeasure(x)``

The log-normalizer satisfies:

.. math::
    \\nabla A(\\eta) = E[t(X)]

so ``gradlognorm()`` returns the expected sufficient statistics.

Supports two parametrizations:

- **Natural**: :math:`\\eta`, stored in a parameter object
  (:class:`~expodist.base.parameter.AbstractParameter`)
- **Standard**: domain-specific parameters (e.g. :math:`\\mu`,
  :math:`\\Sigma` for Normal), returned by ``stdparam()`` as a frozen
  dataclass and always derived from the natural form
"""

import copy
import dataclasses
from abc import abstractmethod
from typing import Any, Optional, Tuple, Type, Union

import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray

from expodist.base.distribution import Distribution
from expodist.base.parameter import AbstractParameter, DefaultParameter
from expodist.exceptions import DimensionMismatch


class ExponentialFamily(Distribution):
    """
    Abstract base class for stochastic exponential family distributions.

    Subclasses must implement:

    - ``_natural_dim(dim)``: length of the natural-parameter vector.
    - ``_natural_to_classical(eta)``: validate ``eta`` and return the
      standard parameters. Raises if ``eta`` is outside the natural domain.
    - ``_log_partition(eta)``: :math:`A(\\eta)`.
    - ``_natural_to_expectation(eta)``: :math:`\\nabla A(\\eta)`.
    - ``basemeasure(x)``, ``stats(x)``, ``mean()``, ``sample(n)``.

    The parameter object is the single source of truth. Standard
    parameters are recomputed from it on demand, so writing through
    ``param.realform()`` is immediately reflected everywhere.

    Parameters
    ----------
    param : AbstractParameter
        Parameter holding the natural parameters.
    dim : int
        Dimension of the support.

    Examples
    --------
    >>> d = Dirichlet([1.0, 2.0, 3.0])
    >>> d.naturalparam()
    array([1., 2., 3.])
    >>> d.update(np.array([2.0, 2.0, 2.0])).mean()
    array([0.33333333, 0.33333333, 0.33333333])

    Notes
    -----
    The log-normalizer :math:`A(\\eta)` is convex and its gradient gives the
    expectation parameters :math:`E[t(X)]`. ``lognorm`` and
    ``gradlognorm`` accept an optional ``eta`` so they can be evaluated away
    from the current parameters (e.g. for finite differences) without
    mutating the distribution.

    References
    ----------
    Barndorff-Nielsen, O. E. (1978). Information and exponential families
    in statistical theory.
    """

    def __init__(self, param: AbstractParameter, dim: int):
        super().__init__(dim)
        n = self._natural_dim(self._dim)
        if len(param) != n:
            raise DimensionMismatch(
                f"Expected {n} natural parameters for d={self._dim}, got {len(param)}"
            )
        self._param = param

    @property
    def param(self) -> AbstractParameter:
        """Parameter object holding the natural parameters."""
        return self._param

    @property
    def dtype(self) -> np.dtype:
        return self._param.dtype

    # ============================================================
    # Factory methods
    # ============================================================

    @classmethod
    def from_natural_params(
        cls,
        eta: ArrayLike,
        param_cls: Type[AbstractParameter] = DefaultParameter,
        dtype: DTypeLike = None,
    ) -> 'ExponentialFamily':
        """
        Create distribution from natural parameters.

        The dimension is inferred from ``len(eta)``.

        Parameters
        ----------
        eta : array_like
            Natural parameter vector.
        param_cls : type, optional
            Parameter implementation used for storage.
        dtype : dtype, optional
            Encoding type. Defaults to the type of ``eta``.

        Returns
        -------
        dist : ExponentialFamily

        Examples
        --------
        >>> Normal.from_natural_params(np.array([0.0, -0.5])).stdparam()
        NormalParams(mu=array([0.]), sigma=array([[1.]]))
        """
        eta = np.asarray(eta)
        if eta.ndim != 1:
            raise DimensionMismatch(f"Expected a vector, got shape {eta.shape}")
        dtype = cls._resolve_dtype(dtype, eta)
        dim = cls._dim_from_natural(eta.shape[0])
        instance = cls(dim=dim, dtype=dtype)
        eta = eta.astype(dtype)
        instance._natural_to_classical(eta)
        instance._param = param_cls.from_naturalform(eta)
        return instance

    @classmethod
    def _dim_from_natural(cls, n: int) -> int:
        """Invert ``_natural_dim``; raise if no dimension matches ``n``."""
        d = 1
        while cls._natural_dim(d) <= n:
            if cls._natural_dim(d) == n:
                return d
            d += 1
        raise DimensionMismatch(
            f"Invalid natural parameter length {n} for {cls.__name__}"
        )

    def astype(self, dtype: DTypeLike) -> 'ExponentialFamily':
        """
        Copy of the distribution with its parameter cast to ``dtype``.

        The original distribution is not modified.
        """
        new = copy.copy(self)
        new._param = self._param.reallocate(dtype)
        return new

    # ============================================================
    # Parametrizations
    # ============================================================

    def naturalparam(self) -> NDArray:
        """
        Natural parameters :math:`\\eta`.

        Returns
        -------
        eta : ndarray
            Natural parameter vector.
        """
        return self._param.naturalform()

    def stdparam(self, eta: Optional[ArrayLike] = None):
        """
        Standard parameters as a frozen dataclass.

        Parameters
        ----------
        eta : array_like, optional
            Natural parameters to convert. Defaults to the current ones.

        Returns
        -------
        params : dataclass
            Standard parameters, e.g. ``WishartParams(W, v)``.
        """
        if eta is None:
            return self._natural_to_classical(self.naturalparam())
        eta = self._check_natural(eta, self._natural_dim(self._dim))
        return self._natural_to_classical(eta)

    def update(self, eta: ArrayLike) -> 'ExponentialFamily':
        """
        Set parameters from natural parametrization, in place.

        ``eta`` is validated before anything is written, so a failed
        update leaves the distribution unchanged. The values are copied
        into the parameter storage; ``eta`` itself is never retained.

        Parameters
        ----------
        eta : array_like
            Natural parameter vector.

        Returns
        -------
        self : ExponentialFamily
            Returns self for method chaining.
        """
        eta = self._check_natural(eta, self._natural_dim(self._dim))
        self._natural_to_classical(eta)
        self._param.set_naturalform(eta)
        return self

    def _natural(self, eta: Optional[ArrayLike]) -> NDArray:
        # caller-supplied eta must lie in the domain, same as for stdparam
        if eta is None:
            return self.naturalparam()
        eta = self._check_natural(eta, self._natural_dim(self._dim))
        self._natural_to_classical(eta)
        return eta

    # ============================================================
    # Exponential family structure
    # ============================================================

    def lognorm(self, eta: Optional[ArrayLike] = None) -> float:
        """
        Log-normalizer :math:`A(\\eta)`.

        Parameters
        ----------
        eta : array_like, optional
            Natural parameters. Defaults to the current ones.

        Raises
        ------
        DimensionMismatch
            If ``eta`` has the wrong length.
        InvalidArgument, NotPositiveDefinite
            If ``eta`` lies outside the natural parameter domain.
        """
        return self._log_partition(self._natural(eta))

    def gradlognorm(
        self,
        eta: Optional[ArrayLike] = None,
        vectorize: bool = True,
    ) -> Union[NDArray, Tuple[Any, ...]]:
        """
        Gradient of the log-normalizer: :math:`\\nabla A(\\eta) = E[t(X)]`.

        Parameters
        ----------
        eta : array_like, optional
            Natural parameters. Defaults to the current ones.
        vectorize : bool, optional
            If False, return the blocks given by :meth:`splitgrad`.

        Returns
        -------
        grad : ndarray or tuple
            Expected sufficient statistics.

        Raises
        ------
        DimensionMismatch, InvalidArgument, NotPositiveDefinite
            As for :meth:`lognorm`.
        """
        grad = self._natural_to_expectation(self._natural(eta))
        return grad if vectorize else self.splitgrad(grad)

    def splitgrad(self, grad: ArrayLike) -> Union[NDArray, Tuple[Any, ...]]:
        """
        Split a vector laid out like the sufficient statistics into blocks.

        Single-block families return the vector unchanged.
        """
        return np.asarray(grad)

    @abstractmethod
    def basemeasure(self, x: ArrayLike) -> Union[float, NDArray]:
        """Log base measure :math:`\\log h(x)`."""
        pass

    @abstractmethod
    def stats(self, x: ArrayLike) -> NDArray:
        """Sufficient statistics :math:`t(x)`."""
        pass

    @abstractmethod
    def mean(self) -> NDArray:
        """Mean of the distribution."""
        pass

    @abstractmethod
    def sample(
        self,
        n: int = 1,
        random_state: Optional[Union[int, np.random.Generator]] = None,
    ) -> NDArray:
        """
        Draw ``n`` samples.

        Parameters
        ----------
        n : int, optional
            Number of samples.
        random_state : int or Generator, optional
            Random number generator or seed.

        Returns
        -------
        samples : ndarray
            Leading axis of length ``n``.
        """
        pass

    @classmethod
    @abstractmethod
    def _natural_dim(cls, dim: int) -> int:
        """Length of the natural-parameter vector for dimension ``dim``."""
        pass

    @abstractmethod
    def _natural_to_classical(self, eta: NDArray):
        """
        Validate ``eta`` and convert it to standard parameters.

        Raises
        ------
        InvalidArgument, NotPositiveDefinite
            If ``eta`` is outside the natural parameter domain.
        """
        pass

    @abstractmethod
    def _log_partition(self, eta: NDArray) -> float:
        """Log partition function :math:`A(\\eta)`."""
        pass

    @abstractmethod
    def _natural_to_expectation(self, eta: NDArray) -> NDArray:
        """Analytical gradient :math:`\\nabla A(\\eta)`."""
        pass

    # ============================================================
    # PDF using exponential family form
    # ============================================================

    def logpdf(self, x: ArrayLike) -> float:
        """
        Log probability density using exponential family form.

        Computes:

        .. math::
            \\log p(x|\\eta) = \\log h(x) + \\eta^T t(x) - A(\\eta)

        Vector-valued base measures (Dirichlet) are summed.

        Parameters
        ----------
        x : array_like
            Single point of the support.

        Returns
        -------
        logpdf : float
        """
        eta = self.naturalparam()
        log_h = np.sum(self.basemeasure(x))
        t_x = self.stats(x)
        return float(log_h + np.dot(eta, t_x) - self._log_partition(eta))

    def pdf(self, x: ArrayLike) -> float:
        """Probability density: p(x|η) = exp(logpdf(x))."""
        return float(np.exp(self.logpdf(x)))

    # ============================================================
    # String representation
    # ============================================================

    def __repr__(self) -> str:
        """String representation of the distribution."""
        params = self.stdparam()
        items = (
            (f.name, getattr(params, f.name)) for f in dataclasses.fields(params)
        )
        param_str = ", ".join(
            f"{k}={float(v):.4f}" if np.ndim(v) == 0
            else f"{k}={np.array2string(np.asarray(v), precision=4)}"
            for k, v in items
        )
        return f"{self.__class__.__name__}[d={self._dim}, {self.dtype}]({param_str})"
