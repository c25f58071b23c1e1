"""
Frozen dataclass containers for standard parameters.

Each distribution's standard (interpretable) parameters are returned by
``stdparam()`` as a frozen dataclass with ``slots=True``. This provides:

- **Attribute access**: ``params.W`` instead of ``params[0]``
- **Immutability**: prevents accidental reassignment of fields
- **Unpacking**: ``W, v = wishart.stdparam()`` works like a tuple
- **Dict conversion**: ``dataclasses.asdict(params)`` when needed

Examples
--------
>>> import numpy as np
>>> from expodist.params import WishartParams
>>> p = WishartParams(W=np.eye(2), v=3.0)
>>> p.v
3.0
>>> W, v = p
>>> p.v = 4.0  # Raises FrozenInstanceError

Notes
-----
The ``frozen=True`` flag prevents attribute reassignment, but numpy arrays
are internally mutable. The arrays are freshly computed on every
``stdparam()`` call, so modifying them never affects a distribution.
"""

from dataclasses import dataclass, fields
import numpy as np


class _ParamsBase:
    """Mixin providing dict-style access and tuple unpacking.

    Allows ``params.mu``, ``params['mu']`` and ``mu, sigma = params``,
    plus ``items()``, ``keys()``, ``values()`` for iteration.
    """

    __slots__ = ()

    def __getitem__(self, key: str):
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key)

    def __contains__(self, key: str) -> bool:
        return hasattr(self, key)

    def __iter__(self):
        return iter(self.values())

    def __len__(self) -> int:
        return len(fields(self))

    def keys(self):
        """Yield field names."""
        return (f.name for f in fields(self))

    def values(self):
        """Yield field values."""
        return (getattr(self, f.name) for f in fields(self))

    def items(self):
        """Yield ``(name, value)`` pairs."""
        return ((f.name, getattr(self, f.name)) for f in fields(self))


@dataclass(frozen=True, slots=True)
class DirichletParams(_ParamsBase):
    """
    Standard parameters for the Dirichlet distribution.

    Attributes
    ----------
    alpha : np.ndarray
        Concentration vector, shape ``(d,)``, all entries positive.
    """
    alpha: np.ndarray


@dataclass(frozen=True, slots=True)
class WishartParams(_ParamsBase):
    """
    Standard parameters for the Wishart distribution.

    Attributes
    ----------
    W : np.ndarray
        Scale matrix, shape ``(d, d)``, symmetric positive definite.
    v : float
        Degrees of freedom, :math:`v > d - 1`.
    """
    W: np.ndarray
    v: float


@dataclass(frozen=True, slots=True)
class NormalParams(_ParamsBase):
    """
    Standard parameters for the full-covariance Normal distribution.

    Attributes
    ----------
    mu : np.ndarray
        Mean vector, shape ``(d,)``.
    sigma : np.ndarray
        Covariance matrix, shape ``(d, d)``.
    """
    mu: np.ndarray
    sigma: np.ndarray


@dataclass(frozen=True, slots=True)
class NormalDiagParams(_ParamsBase):
    """
    Standard parameters for the diagonal-covariance Normal distribution.

    Attributes
    ----------
    mu : np.ndarray
        Mean vector, shape ``(d,)``.
    v : np.ndarray
        Diagonal of the covariance matrix, shape ``(d,)``.
    """
    mu: np.ndarray
    v: np.ndarray


__all__ = [
    "DirichletParams",
    "WishartParams",
    "NormalParams",
    "NormalDiagParams",
]
