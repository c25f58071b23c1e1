"""Special functions built on ``scipy.special``."""

import numpy as np
from numpy.typing import ArrayLike
from scipy.special import digamma, gammaln


def multidigamma(a: float, d: int) -> float:
    r"""
    Multivariate digamma sum :math:`\sum_{i=1}^{d} \psi(a + (1 - i)/2)`.

    This is the derivative of :math:`\log\Gamma_d(a)` without the
    constant :math:`\pi` term and appears in :math:`E[\log|X|]` for a
    Wishart variable, with :math:`a = v/2`.
    """
    i = np.arange(1, d + 1)
    return float(np.sum(digamma(a + 0.5 * (1 - i))))


def multigammaln_nopi(a: float, d: int) -> float:
    r"""
    :math:`\sum_{i=1}^{d} \log\Gamma(a + (1 - i)/2)`.

    Equals ``scipy.special.multigammaln(a, d)`` minus
    :math:`\frac{d(d-1)}{4}\log\pi`. The :math:`\pi` term belongs to the
    Wishart base measure, not to its log-normalizer.
    """
    i = np.arange(1, d + 1)
    return float(np.sum(gammaln(a + 0.5 * (1 - i))))


def log_mvbeta(alpha: ArrayLike) -> float:
    r"""
    Log of the multivariate Beta function
    :math:`\sum_i \log\Gamma(\alpha_i) - \log\Gamma(\sum_i \alpha_i)`.
    """
    alpha = np.asarray(alpha)
    return float(np.sum(gammaln(alpha)) - gammaln(np.sum(alpha)))
