"""
Unit tests for posterior summaries.

Tests cover:
- Student-t marginal posteriors and priors of coefficients
- Inverse-gamma noise variance posterior
- Posterior predictive at a point and over a temperature fan
"""

import math

import pytest
import numpy as np
from numpy.testing import assert_allclose
from scipy import stats

from regression import PriorSpec, bayesian_regression, build_design_matrix, design_row
from summaries import (
    fan_range,
    parameter_posterior,
    parameter_prior,
    posterior_predictive_fan,
    predictive_at,
    predictive_means,
    sigma_posterior,
)


@pytest.fixture
def posterior():
    rng = np.random.default_rng(11)
    t = np.linspace(25.0, 80.0, 24)
    y = 800.0 + 30.0 * np.maximum(0.0, 60.0 - t) + rng.normal(0.0, 25.0, 24)
    nig = PriorSpec(baseload=400, slope=20, noise_scale=600.0).to_nig(2)
    X = build_design_matrix(t, "3PH", 60.0)
    return bayesian_regression(X, y, nig.mu0, nig.Lambda0, nig.a0, nig.b0)


class TestParameterPosterior:
    """Tests for coefficient marginal posteriors."""

    def test_student_t_parameters(self, posterior) -> None:
        for j in range(2):
            summary = parameter_posterior(posterior, j)
            assert summary.mean == posterior.mu_n[j]
            assert summary.nu == 2 * posterior.a_n
            assert_allclose(
                summary.scale,
                math.sqrt(posterior.b_n / posterior.a_n * posterior.Lambda_n_inv[j, j]),
            )

    def test_curve(self, posterior) -> None:
        summary = parameter_posterior(posterior, 1)
        xs, dens = summary.points[:, 0], summary.points[:, 1]
        assert summary.points.shape == (200, 2)
        assert_allclose(xs[0], summary.mean - 4 * summary.scale)
        assert_allclose(xs[-1], summary.mean + 4 * summary.scale)
        assert np.all(np.diff(xs) > 0)
        mass = np.sum(dens) * (xs[1] - xs[0])
        assert 0.99 < mass < 1.01

    def test_curve_is_read_only(self, posterior) -> None:
        summary = parameter_posterior(posterior, 0)
        with pytest.raises(ValueError):
            summary.points[0, 1] = 0.0

    def test_intervals_match_scipy(self, posterior) -> None:
        summary = parameter_posterior(posterior, 0)
        for mass, ci in ((0.5, summary.ci50), (0.8, summary.ci80), (0.95, summary.ci95)):
            expected = stats.t.interval(mass, summary.nu, loc=summary.mean, scale=summary.scale)
            assert_allclose(ci, expected, atol=1e-6 * summary.scale)

    def test_intervals_nest(self, posterior) -> None:
        s = parameter_posterior(posterior, 1)
        assert s.ci95[0] < s.ci80[0] < s.ci50[0] < s.mean < s.ci50[1] < s.ci80[1] < s.ci95[1]

    @pytest.mark.parametrize("index", [2, 5, -1])
    def test_out_of_range_index_raises_error(self, posterior, index: int) -> None:
        with pytest.raises(IndexError):
            parameter_posterior(posterior, index)


class TestParameterPrior:
    """Tests for coefficient marginal priors."""

    def test_student_t_parameters(self) -> None:
        prior = PriorSpec(baseload=400, slope=20, strength=0.01, noise_shape=4.0, noise_scale=100.0)
        summary = parameter_prior(prior, 1, 2)
        assert summary.mean == 20.0
        assert summary.nu == 8.0
        assert_allclose(summary.scale, math.sqrt(100.0 / 4.0 / 0.01))

    def test_slope2_for_three_params(self) -> None:
        prior = PriorSpec(baseload=400, slope=20, slope2=35)
        assert parameter_prior(prior, 2, 3).mean == 35.0

    def test_out_of_range_index_raises_error(self) -> None:
        with pytest.raises(IndexError):
            parameter_prior(PriorSpec(), 2, 2)


class TestSigmaPosterior:
    """Tests for the noise variance posterior."""

    def test_mode_and_mean(self, posterior) -> None:
        summary = sigma_posterior(posterior)
        a, b = posterior.a_n, posterior.b_n
        assert_allclose(summary.mode, b / (a + 1))
        assert_allclose(summary.mean, b / (a - 1))

    def test_curve(self, posterior) -> None:
        summary = sigma_posterior(posterior)
        xs, dens = summary.points[:, 0], summary.points[:, 1]
        assert np.all(xs > 0)
        assert_allclose(xs[-1], 3 * summary.mean * 199 / 200)
        assert_allclose(
            dens,
            stats.invgamma.pdf(xs, posterior.a_n, scale=posterior.b_n),
            rtol=1e-9,
            atol=1e-12 * dens.max(),
        )
        # Density peaks at the grid point closest to the mode.
        assert abs(xs[np.argmax(dens)] - summary.mode) <= xs[1] - xs[0]


class TestPredictive:
    """Tests for the posterior predictive."""

    def test_predictive_at(self, posterior) -> None:
        x_star = design_row(40.0, "3PH", 60.0)
        pred = predictive_at(posterior, x_star, temp=40.0)

        scale = math.sqrt(
            posterior.b_n / posterior.a_n
            * (1 + x_star @ posterior.Lambda_n_inv @ x_star)
        )
        assert pred.temp == 40.0
        assert_allclose(pred.mean, x_star @ posterior.mu_n)
        assert_allclose(pred.scale, scale)
        assert pred.nu == posterior.nu
        expected = stats.t.interval(0.95, pred.nu, loc=pred.mean, scale=pred.scale)
        assert_allclose(pred.ci95, expected, atol=1e-6 * scale)

    def test_predictive_wider_than_noise(self, posterior) -> None:
        pred = predictive_at(posterior, [1.0, 0.0])
        assert pred.scale > math.sqrt(posterior.noise_variance)

    def test_bad_row_raises_error(self, posterior) -> None:
        with pytest.raises(ValueError, match="x_star"):
            predictive_at(posterior, [1.0, 2.0, 3.0])

    def test_fan(self, posterior) -> None:
        lo, hi = fan_range([25.0, 80.0])
        assert (lo, hi) == (22.0, 83.0)

        fan = posterior_predictive_fan(posterior, "3PH", 60.0, None, lo, hi)
        temps = np.array([p.temp for p in fan])
        assert len(fan) == 100
        assert_allclose(temps[[0, -1]], [lo, hi])
        assert np.all(np.diff(temps) > 0)

        for p in fan:
            assert p.ci95[0] < p.ci80[0] < p.ci50[0] < p.mean < p.ci50[1] < p.ci80[1] < p.ci95[1]

        means = predictive_means(posterior, "3PH", 60.0, None, temps)
        assert_allclose([p.mean for p in fan], means)

    def test_fan_matches_pointwise(self, posterior) -> None:
        fan = posterior_predictive_fan(posterior, "3PH", 60.0, None, 20.0, 90.0, n_points=8)
        for p in fan:
            single = predictive_at(posterior, design_row(p.temp, "3PH", 60.0), temp=p.temp)
            assert_allclose(p.ci80, single.ci80)
            assert_allclose(p.scale, single.scale)

    def test_fan_widens_when_extrapolating(self, posterior) -> None:
        fan = posterior_predictive_fan(posterior, "3PH", 60.0, None, 0.0, 85.0)
        scales = np.array([p.scale for p in fan])
        assert scales[0] == scales.max()

    def test_fan_invalid_range(self, posterior) -> None:
        with pytest.raises(ValueError, match="temp_max"):
            posterior_predictive_fan(posterior, "3PH", 60.0, None, 50.0, 50.0)

    def test_fan_shape_mismatch(self, posterior) -> None:
        with pytest.raises(ValueError, match="coefficients"):
            posterior_predictive_fan(posterior, "5P", 50.0, 65.0, 20.0, 90.0)
