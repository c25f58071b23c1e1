"""
Tests for the Wishart distribution.
"""

import numpy as np
import pytest
from scipy import stats
from scipy.special import multigammaln

from expodist.distributions import Wishart
from expodist.exceptions import DimensionMismatch, InvalidArgument, NotPositiveDefinite


@pytest.fixture
def scale():
    return np.array([[2.0, 0.3], [0.3, 1.0]])


class TestWishartConstruction:
    def test_identity_recovered(self):
        w = Wishart(np.array([[1.0, 0.0], [0.0, 1.0]]), 2)
        W, v = w.stdparam()
        np.testing.assert_allclose(W, np.eye(2))
        assert v == pytest.approx(2.0)

    def test_default(self):
        w = Wishart(dim=3)
        np.testing.assert_allclose(w.W, np.eye(3))
        assert w.v == 3.0

    def test_natural_params(self, scale):
        w = Wishart(scale, 4.0)
        eta = w.naturalparam()
        assert eta.shape == (5,)
        np.testing.assert_allclose(eta[:4], -0.5 * np.linalg.inv(scale).ravel())
        assert eta[4] == 2.0

    def test_not_square(self):
        with pytest.raises(DimensionMismatch):
            Wishart(np.ones((2, 3)), 3.0)

    def test_not_symmetric(self):
        with pytest.raises(InvalidArgument):
            Wishart(np.array([[1.0, 0.5], [0.0, 1.0]]), 3.0)

    def test_not_positive_definite(self):
        with pytest.raises(NotPositiveDefinite):
            Wishart(np.array([[1.0, 2.0], [2.0, 1.0]]), 3.0)

    def test_degrees_of_freedom(self):
        with pytest.raises(InvalidArgument):
            Wishart(np.eye(3), 2.0)


class TestWishartFamily:
    def test_lognorm(self, scale):
        v = 4.0
        w = Wishart(scale, v)
        d = 2
        # log normalizer of scipy's density without the pi term
        expected = (0.5 * v * d * np.log(2) + 0.5 * v * np.linalg.slogdet(scale)[1]
                    + multigammaln(0.5 * v, d) - 0.25 * d * (d - 1) * np.log(np.pi))
        assert w.lognorm() == pytest.approx(expected)

    def test_gradlognorm_blocks(self, scale):
        v = 4.0
        w = Wishart(scale, v)
        E_X, E_logdet = w.gradlognorm(vectorize=False)
        np.testing.assert_allclose(E_X, v * scale)
        assert np.isscalar(E_logdet) or np.ndim(E_logdet) == 0

    def test_expected_logdet_vs_samples(self, scale):
        w = Wishart(scale, 5.0)
        X = w.sample(20000, random_state=1)
        logdets = np.linalg.slogdet(X)[1]
        _, E_logdet = w.gradlognorm(vectorize=False)
        assert np.mean(logdets) == pytest.approx(E_logdet, abs=0.05)

    def test_splitgrad(self):
        w = Wishart(dim=2)
        g = np.arange(5.0)
        M, s = w.splitgrad(g)
        np.testing.assert_array_equal(M, [[0.0, 1.0], [2.0, 3.0]])
        assert s == 4.0

    def test_mean(self, scale):
        np.testing.assert_allclose(Wishart(scale, 4.0).mean(), 4.0 * scale)

    def test_stats(self, scale):
        w = Wishart(dim=2)
        t = w.stats(scale)
        np.testing.assert_allclose(t[:4], scale.ravel())
        assert t[4] == pytest.approx(np.linalg.slogdet(scale)[1])

    def test_stats_dimension(self):
        with pytest.raises(DimensionMismatch):
            Wishart(dim=2).stats(np.eye(3))

    def test_basemeasure(self, scale):
        X = np.array([[1.5, 0.2], [0.2, 0.8]])
        # -(d+1)/2 log|X| - d(d-1)/4 log(pi) with d = 2
        expected = -1.5 * np.linalg.slogdet(X)[1] - 0.5 * np.log(np.pi)
        assert Wishart(scale, 4.0).basemeasure(X) == pytest.approx(expected)

    def test_lognorm_outside_domain(self):
        w = Wishart(np.eye(2), 3.0)
        eta = np.array([-0.5, 0.0, 0.0, -0.5, 0.25])  # v = 0.5 <= d - 1
        with pytest.raises(InvalidArgument):
            w.lognorm(eta)
        with pytest.raises(InvalidArgument):
            w.gradlognorm(eta)
        with pytest.raises(NotPositiveDefinite):
            w.lognorm(np.array([0.5, 0.0, 0.0, 0.5, 1.5]))
        assert w.v == 3.0

    def test_logpdf_vs_scipy(self, scale):
        X = np.array([[1.5, 0.2], [0.2, 0.8]])
        w = Wishart(scale, 4.0)
        expected = stats.wishart(df=4.0, scale=scale).logpdf(X)
        assert w.logpdf(X) == pytest.approx(expected)

    def test_logpdf_vs_scipy_3d(self):
        rng = np.random.default_rng(3)
        A = rng.standard_normal((3, 3))
        W = A @ A.T + np.eye(3)
        X = stats.wishart(df=6.0, scale=W).rvs(random_state=rng)
        w = Wishart(W, 6.0)
        assert w.logpdf(X) == pytest.approx(stats.wishart(df=6.0, scale=W).logpdf(X))

    def test_update(self, scale):
        w = Wishart(dim=2)
        target = Wishart(scale, 5.0)
        w.update(target.naturalparam())
        np.testing.assert_allclose(w.W, scale)
        assert w.v == pytest.approx(5.0)

    def test_update_invalid_dof(self):
        w = Wishart(dim=2)
        eta = w.naturalparam().copy()
        eta[-1] = 0.25  # v = 0.5 <= d - 1
        with pytest.raises(InvalidArgument):
            w.update(eta)
        assert w.v == 2.0

    def test_update_asymmetric_warns(self):
        w = Wishart(dim=2)
        eta = np.array([-0.5, -0.1, 0.0, -0.5, 1.5])
        with pytest.warns(RuntimeWarning, match="not symmetric"):
            w.update(eta)
        np.testing.assert_allclose(w.W, w.W.T)

    def test_sample(self, scale):
        w = Wishart(scale, 4.0)
        X = w.sample(10, random_state=0)
        assert X.shape == (10, 2, 2)
        np.testing.assert_allclose(X, np.swapaxes(X, 1, 2))

    def test_sample_single_matrix(self):
        X = Wishart(dim=3).sample(random_state=0)
        assert X.shape == (1, 3, 3)

    def test_sample_mean(self, scale):
        w = Wishart(scale, 4.0)
        X = w.sample(20000, random_state=2)
        np.testing.assert_allclose(X.mean(axis=0), w.mean(), atol=0.2)
