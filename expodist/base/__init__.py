"""Base classes for distributions and their parameters."""

from .parameter import AbstractParameter, DefaultParameter, LogParameter
from .distribution import Distribution
from .exponential_family import ExponentialFamily
from .delta import DeltaDistribution

__all__ = [
    "AbstractParameter",
    "DefaultParameter",
    "LogParameter",
    "Distribution",
    "ExponentialFamily",
    "DeltaDistribution",
]
