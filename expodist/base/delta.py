"""
Base class for δ (point-mass) distributions.

A δ-distribution is the zero-variance limit of a stochastic exponential
family: all its mass sits at a location :math:`\\mu`. It has no density,
no log-normalizer and nothing to sample, but it still answers the two
questions an inference loop asks of a factor:

- ``gradlognorm()``: the limit of :math:`E[t(X)]`, i.e. :math:`t(\\mu)`
  or a simple function of :math:`\\mu`.
- ``update(eta)``: move the location to the point estimate (mode or
  mean) of the stochastic distribution with natural parameters ``eta``.

This makes a δ-distribution a drop-in replacement where a deterministic
(e.g. MAP) update is wanted instead of a full posterior.
"""

import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray

from expodist.base.distribution import Distribution


class DeltaDistribution(Distribution):
    """
    Abstract base class for point-mass distributions.

    Parameters
    ----------
    mu : array_like
        Location of the point mass. Copied.
    dtype : dtype, optional
        Encoding type. Defaults to the type of ``mu`` (``float64`` for
        integer input).
    """

    def __init__(self, mu: ArrayLike, dtype: DTypeLike = None):
        dtype = self._resolve_dtype(dtype, mu)
        mu = np.array(mu, dtype=dtype).reshape(-1)
        super().__init__(mu.shape[0])
        self._mu = mu

    @property
    def mu(self) -> NDArray:
        """Location of the point mass (a copy)."""
        return self._mu.copy()

    @property
    def dtype(self) -> np.dtype:
        return self._mu.dtype

    def _set_location(self, mu: NDArray) -> None:
        self._mu = np.asarray(mu, dtype=self.dtype).reshape(self._dim).copy()

    def __repr__(self) -> str:
        """String representation of the distribution."""
        mu_str = np.array2string(self._mu, precision=4)
        return f"{self.__class__.__name__}[d={self._dim}, {self.dtype}](mu={mu_str})"
