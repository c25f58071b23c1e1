"""
Tests for parameter objects.

Covers the natural/real form link, the Jacobian and gradient transport,
``reallocate`` and the ``todict``/``fromdict`` round trip, and the use of
a non-identity parameter inside a distribution.
"""

import numpy as np
import pytest

from expodist.base import DefaultParameter, LogParameter
from expodist.distributions import Dirichlet
from expodist.exceptions import DimensionMismatch, InvalidArgument


# ============================================================
# DefaultParameter
# ============================================================

class TestDefaultParameter:
    """Identity parameterization."""

    def test_forms_share_storage(self):
        p = DefaultParameter([1.0, 2.0])
        assert p.naturalform() is p.realform()
        p.realform()[0] = 5.0
        assert p.naturalform()[0] == 5.0

    def test_input_is_copied(self):
        eta = np.array([1.0, 2.0])
        p = DefaultParameter(eta)
        eta[0] = 10.0
        assert p.naturalform()[0] == 1.0

    def test_integer_input_promoted(self):
        p = DefaultParameter([1, 2, 3])
        assert p.dtype == np.float64
        assert len(p) == 3

    def test_jacobian_is_identity(self):
        p = DefaultParameter([1.0, 2.0, 3.0])
        np.testing.assert_array_equal(p.jacobian(), np.eye(3))

    def test_set_naturalform(self):
        p = DefaultParameter([1.0, 2.0])
        storage = p.realform()
        p.set_naturalform(np.array([3.0, 4.0]))
        np.testing.assert_array_equal(p.naturalform(), [3.0, 4.0])
        # written in place
        assert p.realform() is storage

    def test_set_naturalform_wrong_length(self):
        p = DefaultParameter([1.0, 2.0])
        with pytest.raises(DimensionMismatch):
            p.set_naturalform(np.array([1.0, 2.0, 3.0]))

    def test_grad_realform(self):
        p = DefaultParameter([1.0, 2.0])
        g = np.array([0.5, -1.0])
        np.testing.assert_array_equal(p.grad_realform(g), g)

    def test_reallocate(self):
        p = DefaultParameter([1.0, 2.0])
        q = p.reallocate(np.float32)
        assert q.dtype == np.float32
        assert p.dtype == np.float64
        q.realform()[0] = 9.0
        assert p.naturalform()[0] == 1.0

    def test_dict_roundtrip(self):
        p = DefaultParameter([1.0, 2.0])
        q = DefaultParameter.fromdict(p.todict())
        np.testing.assert_array_equal(q.naturalform(), p.naturalform())

    def test_fromdict_missing_field(self):
        with pytest.raises(KeyError):
            DefaultParameter.fromdict({})


# ============================================================
# LogParameter
# ============================================================

class TestLogParameter:
    """Positive natural parameters stored as their logarithm."""

    def test_from_naturalform(self):
        p = LogParameter.from_naturalform([1.0, np.e])
        np.testing.assert_allclose(p.realform(), [0.0, 1.0])
        np.testing.assert_allclose(p.naturalform(), [1.0, np.e])

    def test_rejects_non_positive(self):
        with pytest.raises(InvalidArgument):
            LogParameter.from_naturalform([1.0, -1.0])
        p = LogParameter([0.0, 0.0])
        with pytest.raises(InvalidArgument):
            p.set_naturalform(np.array([1.0, 0.0]))
        np.testing.assert_array_equal(p.realform(), [0.0, 0.0])

    def test_jacobian(self):
        eta = np.array([0.5, 2.0, 4.0])
        p = LogParameter.from_naturalform(eta)
        np.testing.assert_allclose(p.jacobian(), np.diag(1.0 / eta))

    def test_grad_realform_chain_rule(self):
        """d f / d xi = eta * d f / d eta for xi = log(eta)."""
        eta = np.array([0.5, 2.0, 4.0])
        g = np.array([1.0, -2.0, 0.25])
        p = LogParameter.from_naturalform(eta)
        np.testing.assert_allclose(p.grad_realform(g), eta * g)

    def test_grad_realform_wrong_length(self):
        p = LogParameter([0.0, 0.0])
        with pytest.raises(DimensionMismatch):
            p.grad_realform(np.ones(3))

    def test_dict_roundtrip(self):
        p = LogParameter.from_naturalform([0.5, 2.0])
        q = LogParameter.fromdict(p.todict())
        np.testing.assert_allclose(q.naturalform(), [0.5, 2.0])
        with pytest.raises(KeyError):
            LogParameter.fromdict({'eta': [1.0]})


# ============================================================
# Parameters inside a distribution
# ============================================================

class TestParameterInDistribution:
    def test_write_through_realform(self):
        d = Dirichlet([1.0, 2.0])
        d.param.realform()[0] = 5.0
        np.testing.assert_array_equal(d.alpha, [5.0, 2.0])

    def test_log_parameter_same_distribution(self):
        alpha = np.array([1.0, 2.0, 3.0])
        d_default = Dirichlet(alpha)
        d_log = Dirichlet.from_natural_params(alpha, param_cls=LogParameter)
        assert isinstance(d_log.param, LogParameter)
        np.testing.assert_allclose(d_log.naturalparam(), alpha)
        assert np.isclose(d_log.lognorm(), d_default.lognorm())
        np.testing.assert_allclose(d_log.gradlognorm(), d_default.gradlognorm())

    def test_log_parameter_update(self):
        d = Dirichlet.from_natural_params([1.0, 1.0], param_cls=LogParameter)
        d.update(np.array([2.0, 4.0]))
        np.testing.assert_allclose(d.param.realform(), np.log([2.0, 4.0]))
        np.testing.assert_allclose(d.mean(), [1 / 3, 2 / 3])
