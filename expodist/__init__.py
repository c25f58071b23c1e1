"""
expodist: exponential family distributions with a uniform interface.

Implements the Dirichlet, Wishart, full and diagonal covariance Normal
distributions, and the δ (point-mass) limits of the Dirichlet and Normal
families, all exposing the same natural/standard parameter algebra.

Key features:
- Natural and standard parametrizations linked by a parameter object
- Closed-form log-normalizer and its gradient (expected sufficient statistics)
- Cholesky-based inverses and log-determinants for SPD matrices
- Frozen dataclass parameter containers (expodist.params)
"""

from expodist.base import (
    AbstractParameter,
    DefaultParameter,
    LogParameter,
    Distribution,
    ExponentialFamily,
    DeltaDistribution,
)
from expodist.distributions import (
    Dirichlet,
    DeltaDirichlet,
    Wishart,
    Normal,
    DeltaNormal,
    NormalDiag,
    DeltaNormalDiag,
)
from expodist.exceptions import DimensionMismatch, InvalidArgument, NotPositiveDefinite
from expodist.params import (
    DirichletParams,
    WishartParams,
    NormalParams,
    NormalDiagParams,
)

__version__ = "0.1.0"

__all__ = [
    # Parameters
    "AbstractParameter",
    "DefaultParameter",
    "LogParameter",
    # Base classes
    "Distribution",
    "ExponentialFamily",
    "DeltaDistribution",
    # Distributions
    "Dirichlet",
    "DeltaDirichlet",
    "Wishart",
    "Normal",
    "DeltaNormal",
    "NormalDiag",
    "DeltaNormalDiag",
    # Exceptions
    "DimensionMismatch",
    "InvalidArgument",
    "NotPositiveDefinite",
    # Parameter dataclasses
    "DirichletParams",
    "WishartParams",
    "NormalParams",
    "NormalDiagParams",
]
