"""
Parameter objects for exponential family distributions.

A parameter owns a single numeric vector :math:`\\xi` (the *real form*,
i.e. what is actually stored) and exposes it in *natural form*
:math:`\\eta`, the canonical parameter of the exponential family:

.. math::
    p(x|\\eta) = h(x) \\exp(\\eta^T t(x) - A(\\eta))

The map :math:`\\xi(\\eta)` is a bijection. :class:`DefaultParameter` uses
the identity, :class:`LogParameter` stores :math:`\\xi = \\log\\eta` for
natural parameters constrained to be positive. Distributions only ever
talk to the :class:`AbstractParameter` interface, so a different storage
can be swapped in without changing call sites.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray

from expodist.exceptions import DimensionMismatch, InvalidArgument


def _as_float_vector(x: ArrayLike, dtype: DTypeLike = None) -> NDArray:
    """Copy ``x`` into a fresh 1-D floating array."""
    x = np.asarray(x)
    if dtype is None:
        dtype = x.dtype if np.issubdtype(x.dtype, np.floating) else np.float64
    return np.array(x, dtype=dtype).reshape(-1)


class AbstractParameter(ABC):
    """
    Abstract parameter of a member of the exponential family.

    Subclasses must implement:

    - ``naturalform()``: natural parameter :math:`\\eta`.
    - ``realform()``: stored vector :math:`\\xi`. Modifying the returned
      array in place modifies the parameter.
    - ``jacobian()``: :math:`\\partial\\xi / \\partial\\eta`.
    - ``set_naturalform(eta)``: overwrite the storage so that
      ``naturalform()`` returns ``eta``.
    - ``from_naturalform(eta)``: classmethod building a new parameter.
    - ``reallocate(dtype)``: copy with storage cast to ``dtype``.
    - ``todict()`` / ``fromdict(d)``: structural round-trip.
    """

    @abstractmethod
    def naturalform(self) -> NDArray:
        """Natural form :math:`\\eta` of the parameter."""
        pass

    @abstractmethod
    def realform(self) -> NDArray:
        """Stored vector :math:`\\xi` (the internal buffer, not a copy)."""
        pass

    @abstractmethod
    def jacobian(self) -> NDArray:
        """Jacobian :math:`\\partial\\xi / \\partial\\eta`, shape ``(n, n)``."""
        pass

    @abstractmethod
    def set_naturalform(self, eta: ArrayLike) -> None:
        """Overwrite the storage in place with the real form of ``eta``."""
        pass

    @classmethod
    @abstractmethod
    def from_naturalform(cls, eta: ArrayLike) -> 'AbstractParameter':
        """Build a parameter of this type representing ``eta``."""
        pass

    @abstractmethod
    def reallocate(self, dtype: DTypeLike) -> 'AbstractParameter':
        """Copy of the parameter with its storage cast to ``dtype``."""
        pass

    @abstractmethod
    def todict(self) -> Dict[str, Any]:
        """Fields needed to rebuild the parameter with :meth:`fromdict`."""
        pass

    @classmethod
    @abstractmethod
    def fromdict(cls, d: Dict[str, Any]) -> 'AbstractParameter':
        """
        Rebuild a parameter from :meth:`todict` output.

        Raises
        ------
        KeyError
            If a required field is missing.
        """
        pass

    @property
    def dtype(self) -> np.dtype:
        """Numeric type of the storage."""
        return self.realform().dtype

    def __len__(self) -> int:
        return self.realform().shape[0]

    def grad_realform(self, grad: ArrayLike) -> NDArray:
        """
        Transport a gradient w.r.t. :math:`\\eta` into a gradient w.r.t. :math:`\\xi`.

        By the chain rule, with :math:`J = \\partial\\xi/\\partial\\eta`:

        .. math::
            \\nabla_\\xi f = J^{-T} \\nabla_\\eta f

        Parameters
        ----------
        grad : array_like, shape (n,)
            Gradient taken in natural-parameter space.

        Returns
        -------
        grad_xi : ndarray, shape (n,)
        """
        grad = np.asarray(grad)
        if grad.shape != (len(self),):
            raise DimensionMismatch(
                f"Expected gradient of length {len(self)}, got shape {grad.shape}"
            )
        return np.linalg.solve(self.jacobian().T, grad)

    def _check_length(self, eta: NDArray) -> None:
        if eta.shape != (len(self),):
            raise DimensionMismatch(
                f"Expected {len(self)} natural parameters, got {eta.size}"
            )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.realform()!r})"


class DefaultParameter(AbstractParameter):
    """
    Parameter stored directly in natural form (identity map).

    ``naturalform()`` and ``realform()`` return the same array object.

    Parameters
    ----------
    xi : array_like
        Natural parameter vector. Copied; integer input is promoted to
        ``float64``.

    Examples
    --------
    >>> p = DefaultParameter([1.0, 2.0])
    >>> p.naturalform() is p.realform()
    True
    >>> p.todict()
    {'xi': array([1., 2.])}
    """

    def __init__(self, xi: ArrayLike):
        self._xi = _as_float_vector(xi)

    def naturalform(self) -> NDArray:
        return self._xi

    def realform(self) -> NDArray:
        return self._xi

    def jacobian(self) -> NDArray:
        return np.eye(len(self), dtype=self.dtype)

    def set_naturalform(self, eta: ArrayLike) -> None:
        eta = np.asarray(eta)
        self._check_length(eta)
        self._xi[...] = eta

    @classmethod
    def from_naturalform(cls, eta: ArrayLike) -> 'DefaultParameter':
        return cls(eta)

    def reallocate(self, dtype: DTypeLike) -> 'DefaultParameter':
        return DefaultParameter(self._xi.astype(dtype))

    def grad_realform(self, grad: ArrayLike) -> NDArray:
        # Identity jacobian: no solve needed.
        grad = np.asarray(grad)
        if grad.shape != (len(self),):
            raise DimensionMismatch(
                f"Expected gradient of length {len(self)}, got shape {grad.shape}"
            )
        return grad.copy()

    def todict(self) -> Dict[str, Any]:
        return {'xi': self._xi}

    @classmethod
    def fromdict(cls, d: Dict[str, Any]) -> 'DefaultParameter':
        return cls(d['xi'])


class LogParameter(AbstractParameter):
    """
    Parameter stored as the logarithm of a positive natural parameter.

    :math:`\\xi = \\log\\eta`, :math:`\\eta = \\exp(\\xi)`. Useful when every
    natural parameter must stay positive (e.g. Dirichlet concentrations):
    any real :math:`\\xi` maps to a valid :math:`\\eta`.

    ``naturalform()`` returns a new array; write through ``realform()`` or
    ``set_naturalform``.

    Parameters
    ----------
    xi : array_like
        Log of the natural parameter vector.
    """

    def __init__(self, xi: ArrayLike):
        self._xi = _as_float_vector(xi)

    def naturalform(self) -> NDArray:
        return np.exp(self._xi)

    def realform(self) -> NDArray:
        return self._xi

    def jacobian(self) -> NDArray:
        # d log(eta) / d eta = 1 / eta
        return np.diag(np.exp(-self._xi))

    def set_naturalform(self, eta: ArrayLike) -> None:
        eta = np.asarray(eta)
        self._check_length(eta)
        if np.any(eta <= 0):
            raise InvalidArgument(
                "LogParameter requires strictly positive natural parameters"
            )
        self._xi[...] = np.log(eta)

    @classmethod
    def from_naturalform(cls, eta: ArrayLike) -> 'LogParameter':
        eta = np.asarray(eta)
        if np.any(eta <= 0):
            raise InvalidArgument(
                "LogParameter requires strictly positive natural parameters"
            )
        return cls(np.log(_as_float_vector(eta)))

    def reallocate(self, dtype: DTypeLike) -> 'LogParameter':
        return LogParameter(self._xi.astype(dtype))

    def todict(self) -> Dict[str, Any]:
        return {'xi': self._xi}

    @classmethod
    def fromdict(cls, d: Dict[str, Any]) -> 'LogParameter':
        return cls(d['xi'])


__all__ = ["AbstractParameter", "DefaultParameter", "LogParameter"]
