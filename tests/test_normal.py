"""
Tests for the full-covariance Normal distribution and its point-mass limit.
"""

import numpy as np
import pytest
from scipy import stats

from expodist.distributions import Normal, DeltaNormal
from expodist.exceptions import DimensionMismatch, InvalidArgument, NotPositiveDefinite


@pytest.fixture
def mu():
    return np.array([1.0, -0.5])


@pytest.fixture
def sigma():
    return np.array([[2.0, 0.4], [0.4, 1.0]])


# ============================================================
# Normal
# ============================================================

class TestNormalConstruction:
    def test_default(self):
        n = Normal(dim=3)
        np.testing.assert_array_equal(n.mu, np.zeros(3))
        np.testing.assert_allclose(n.sigma, np.eye(3))

    def test_natural_params(self, mu, sigma):
        n = Normal(mu, sigma)
        Lambda = np.linalg.inv(sigma)
        expected = np.concatenate([Lambda @ mu, -0.5 * Lambda.ravel()])
        np.testing.assert_allclose(n.naturalparam(), expected)

    def test_dimension_mismatch(self):
        with pytest.raises(DimensionMismatch):
            Normal([0.0, 0.0, 0.0], np.eye(2))

    def test_sigma_not_square(self):
        with pytest.raises(DimensionMismatch):
            Normal([0.0, 0.0], np.ones((2, 3)))

    def test_sigma_not_symmetric(self):
        with pytest.raises(InvalidArgument):
            Normal([0.0, 0.0], [[1.0, 0.5], [0.0, 1.0]])

    def test_sigma_not_positive_definite(self):
        with pytest.raises(NotPositiveDefinite):
            Normal([0.0, 0.0], [[1.0, 2.0], [2.0, 1.0]])

    def test_dim_from_sigma(self):
        n = Normal(sigma=2 * np.eye(2))
        np.testing.assert_array_equal(n.mu, [0.0, 0.0])

    def test_float32(self, mu, sigma):
        n = Normal(mu, sigma, dtype=np.float32)
        assert n.dtype == np.float32
        assert n.mean().dtype == np.float32


class TestNormalFamily:
    def test_standard_lognorm_is_zero(self):
        assert Normal([0.0, 0.0]).lognorm() == 0.0

    def test_basemeasure(self):
        n = Normal([0.0, 0.0])
        assert n.basemeasure([0.3, -1.2]) == pytest.approx(-np.log(2 * np.pi))

    def test_basemeasure_dimension(self):
        with pytest.raises(DimensionMismatch):
            Normal([0.0, 0.0]).basemeasure([1.0, 2.0, 3.0])

    def test_stats(self):
        n = Normal(dim=2)
        np.testing.assert_array_equal(n.stats([1.0, 2.0]), [1.0, 2.0, 1.0, 2.0, 2.0, 4.0])

    def test_stats_dimension(self):
        with pytest.raises(DimensionMismatch):
            Normal(dim=2).stats([1.0, 2.0, 3.0])

    def test_lognorm(self, mu, sigma):
        n = Normal(mu, sigma)
        expected = 0.5 * (np.linalg.slogdet(sigma)[1] + mu @ np.linalg.solve(sigma, mu))
        assert n.lognorm() == pytest.approx(expected)

    def test_gradlognorm(self, mu, sigma):
        n = Normal(mu, sigma)
        g = n.gradlognorm()
        np.testing.assert_allclose(g[:2], mu)
        np.testing.assert_allclose(g[2:], (sigma + np.outer(mu, mu)).ravel())

    def test_gradlognorm_pair(self, mu, sigma):
        E_x, E_xxT = Normal(mu, sigma).gradlognorm(vectorize=False)
        np.testing.assert_allclose(E_x, mu)
        np.testing.assert_allclose(E_xxT, sigma + np.outer(mu, mu))

    def test_logpdf_vs_scipy(self, mu, sigma):
        n = Normal(mu, sigma)
        x = np.array([0.3, 0.7])
        expected = stats.multivariate_normal(mean=mu, cov=sigma).logpdf(x)
        assert n.logpdf(x) == pytest.approx(expected)

    def test_update(self, mu, sigma):
        n = Normal(dim=2)
        n.update(Normal(mu, sigma).naturalparam())
        np.testing.assert_allclose(n.mu, mu)
        np.testing.assert_allclose(n.sigma, sigma)

    def test_update_not_positive_definite(self, mu, sigma):
        n = Normal(mu, sigma)
        eta = np.concatenate([np.zeros(2), 0.5 * np.eye(2).ravel()])
        with pytest.raises(NotPositiveDefinite):
            n.update(eta)
        np.testing.assert_allclose(n.sigma, sigma)

    def test_update_asymmetric_warns(self):
        n = Normal(dim=2)
        Lambda = np.array([[1.0, 0.2], [0.0, 1.0]])
        eta = np.concatenate([np.zeros(2), -0.5 * Lambda.ravel()])
        with pytest.warns(RuntimeWarning, match="not symmetric"):
            n.update(eta)
        np.testing.assert_allclose(n.sigma, np.linalg.inv(0.5 * (Lambda + Lambda.T)))

    def test_sample(self, mu, sigma):
        n = Normal(mu, sigma)
        X = n.sample(50000, random_state=0)
        assert X.shape == (50000, 2)
        np.testing.assert_allclose(X.mean(axis=0), mu, atol=0.03)
        np.testing.assert_allclose(np.cov(X.T), sigma, atol=0.05)

    def test_sample_default_n(self):
        assert Normal(dim=3).sample(random_state=0).shape == (1, 3)

    def test_repr(self, mu, sigma):
        r = repr(Normal(mu, sigma))
        assert r.startswith("Normal[d=2, float64](mu=")


# ============================================================
# DeltaNormal
# ============================================================

class TestDeltaNormal:
    def test_default(self):
        np.testing.assert_array_equal(DeltaNormal(dim=2).mu, [0.0, 0.0])

    def test_gradlognorm(self):
        d = DeltaNormal([1.0, 2.0])
        np.testing.assert_array_equal(d.gradlognorm(), [1.0, 2.0, 1.0, 2.0, 2.0, 4.0])

    def test_gradlognorm_pair(self):
        m, M = DeltaNormal([1.0, 2.0]).gradlognorm(vectorize=False)
        np.testing.assert_array_equal(m, [1.0, 2.0])
        np.testing.assert_array_equal(M, [[1.0, 2.0], [2.0, 4.0]])

    def test_splitgrad(self):
        d = DeltaNormal([1.0, 2.0])
        m, M = d.splitgrad(d.gradlognorm())
        np.testing.assert_array_equal(M, np.outer(m, m))

    def test_update(self, mu, sigma):
        d = DeltaNormal(dim=2)
        d.update(Normal(mu, sigma).naturalparam())
        np.testing.assert_allclose(d.mu, mu)

    def test_update_wrong_length(self):
        with pytest.raises(DimensionMismatch):
            DeltaNormal(dim=2).update(np.zeros(4))

    def test_limit_of_normal(self, mu):
        """gradlognorm of a Normal approaches the point mass as sigma -> 0."""
        n = Normal(mu, 1e-10 * np.eye(2))
        np.testing.assert_allclose(
            n.gradlognorm(), DeltaNormal(mu).gradlognorm(), atol=1e-8
        )
