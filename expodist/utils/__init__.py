"""Utility functions for expodist package."""

from .linalg import (
    SYMMETRY_ATOL,
    symmetrize,
    is_symmetric,
    spd_cholesky,
    cholesky_logdet,
    cholesky_inv,
    spd_logdet,
    spd_inv,
    spd_inv_logdet,
    warn_if_asymmetric,
)
from .special import multidigamma, multigammaln_nopi, log_mvbeta
from .random import as_generator

__all__ = [
    'SYMMETRY_ATOL', 'symmetrize', 'is_symmetric',
    'spd_cholesky', 'cholesky_logdet', 'cholesky_inv',
    'spd_logdet', 'spd_inv', 'spd_inv_logdet', 'warn_if_asymmetric',
    'multidigamma', 'multigammaln_nopi', 'log_mvbeta',
    'as_generator',
]
