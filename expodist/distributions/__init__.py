"""Exponential family distributions and their point-mass limits."""

from .dirichlet import Dirichlet, DeltaDirichlet
from .wishart import Wishart
from .normal import Normal, DeltaNormal
from .normal_diag import NormalDiag, DeltaNormalDiag

__all__ = ['Dirichlet', 'DeltaDirichlet', 'Wishart', 'Normal', 'DeltaNormal',
           'NormalDiag', 'DeltaNormalDiag']
