"""
Exceptions raised by expodist.

All errors are raised at the call that detects them. They subclass the
builtin exception a caller would otherwise catch (``ValueError`` or
``numpy.linalg.LinAlgError``) so existing handlers keep working.
"""

from numpy.linalg import LinAlgError


class DimensionMismatch(ValueError):
    """Input shape does not match the fixed dimension of a distribution."""


class InvalidArgument(ValueError):
    """A value violates a constraint of the distribution (support, sum, sign)."""


class NotPositiveDefinite(LinAlgError):
    """A matrix that must be symmetric positive definite is not."""


__all__ = ["DimensionMismatch", "InvalidArgument", "NotPositiveDefinite"]
