"""
Root base class shared by all distributions.

A distribution has a support dimension ``dim`` (D) and an encoding
``dtype``, both fixed at construction. Two families derive from it:

- :class:`~expodist.base.ExponentialFamily`: stochastic distributions with
  a density, a log-normalizer and sampling.
- :class:`~expodist.base.DeltaDistribution`: point masses, the zero
  variance limits of the stochastic ones.

The families expose different operation sets, so the shared root only
holds what both need: the gradient of the log-normalizer, the in-place
``update`` from natural parameters, and input validation helpers.
"""

from abc import ABC, abstractmethod
from typing import Any, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray

from expodist.exceptions import DimensionMismatch, InvalidArgument


class Distribution(ABC):
    """
    Abstract base class for all distributions.

    Parameters
    ----------
    dim : int
        Dimension D of the support.

    Attributes
    ----------
    _dim : int
        Dimension of the support, immutable after construction.
    """

    def __init__(self, dim: int):
        dim = int(dim)
        if dim < 1:
            raise InvalidArgument(f"Dimension must be a positive integer, got {dim}")
        self._dim = dim

    @property
    def dim(self) -> int:
        """Dimension of the support."""
        return self._dim

    @property
    @abstractmethod
    def dtype(self) -> np.dtype:
        """Numeric type of the stored parameters."""
        pass

    @abstractmethod
    def gradlognorm(self, *args, **kwargs) -> Union[NDArray, Tuple[Any, ...]]:
        """
        Gradient of the log-normalizer w.r.t. the natural parameters.

        For a stochastic distribution this is :math:`E[t(X)]`; for a point
        mass it is :math:`t(\\mu)`.
        """
        pass

    @abstractmethod
    def update(self, eta: ArrayLike) -> 'Distribution':
        """
        Replace the parameters from a natural-parameter vector, in place.

        Returns
        -------
        self : Distribution
            Returns self for method chaining.
        """
        pass

    # ============================================================
    # Input validation helpers
    # ============================================================

    def _check_vector(self, x: ArrayLike) -> NDArray:
        """Return ``x`` as an array, checking it is a D-vector."""
        x = np.asarray(x, dtype=self.dtype)
        if x.shape != (self._dim,):
            raise DimensionMismatch(
                f"expected input dimension {self._dim} got {x.size}"
            )
        return x

    def _check_square(self, X: ArrayLike) -> NDArray:
        """Return ``X`` as an array, checking it is D x D."""
        X = np.asarray(X, dtype=self.dtype)
        if X.shape != (self._dim, self._dim):
            raise DimensionMismatch(
                f"expected input of shape ({self._dim}, {self._dim}) got {X.shape}"
            )
        return X

    def _check_natural(self, eta: ArrayLike, n: int) -> NDArray:
        """Return ``eta`` as a 1-D array of length ``n``."""
        eta = np.asarray(eta)
        if eta.ndim != 1 or eta.shape[0] != n:
            raise DimensionMismatch(
                f"Expected {n} natural parameters for d={self._dim}, "
                f"got shape {eta.shape}"
            )
        return eta

    @staticmethod
    def _resolve_dtype(dtype: DTypeLike, *arrays: Any) -> np.dtype:
        """
        Pick the encoding type: explicit ``dtype`` first, then the first
        floating input, otherwise ``float64``.
        """
        if dtype is not None:
            return np.dtype(dtype)
        for a in arrays:
            if a is None:
                continue
            a = np.asarray(a)
            if np.issubdtype(a.dtype, np.floating):
                return a.dtype
        return np.dtype(np.float64)

    @staticmethod
    def _resolve_dim(dim: Any, *arrays: Any) -> int:
        """Dimension from the first non-None input, else ``dim``."""
        for a in arrays:
            if a is None:
                continue
            inferred = int(np.shape(a)[0]) if np.ndim(a) > 0 else 1
            if dim is not None and int(dim) != inferred:
                raise DimensionMismatch(
                    f"dim={dim} does not match parameter dimension {inferred}"
                )
            return inferred
        if dim is None:
            raise InvalidArgument("Either parameters or dim must be provided")
        return int(dim)

    def __repr__(self) -> str:
        """String representation of the distribution."""
        return f"{self.__class__.__name__}(dim={self._dim}, dtype={self.dtype})"
