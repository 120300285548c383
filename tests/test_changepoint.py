"""
Unit tests for the change-point posterior.

Tests cover:
- Candidate grid policy for single and double change points
- Normalization of the change-point posterior
- MAP selection and tie-breaking
- Empty scans and InsufficientDataError
- Change-point OLS comparison fit
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose

import changepoint.search as search
from changepoint import (
    ChangePointCandidate,
    InsufficientDataError,
    ScanSettings,
    candidate_grid,
    change_point_posterior,
    fit_ols_with_change_point,
    map_candidate,
)
from regression import NIGPrior, PriorSpec, default_prior_spec
from workbench import get_dataset


@pytest.fixture
def heating():
    data = get_dataset("heating")
    return data.temperatures, data.usage


@pytest.fixture
def mixed():
    data = get_dataset("mixed")
    return data.temperatures, data.usage


class TestCandidateGrid:
    """Tests for the scan grid."""

    def test_single_change_point(self, heating) -> None:
        t, _ = heating
        grid = list(candidate_grid(t, "3PH"))
        assert len(grid) == 97
        assert grid[0] == (27.0, None)
        assert grid[-1] == (75.0, None)

    def test_custom_step(self, heating) -> None:
        t, _ = heating
        assert len(list(candidate_grid(t, "3PC", step=1.0))) == 49

    def test_two_change_points(self, mixed) -> None:
        t, _ = mixed
        grid = list(candidate_grid(t, "5P"))
        assert len(grid) == 630
        for cp_h, cp_c in grid:
            assert 40.0 <= cp_h <= 74.0
            assert cp_c - cp_h >= 6.0
            assert cp_c <= 80.0

    def test_narrow_range_is_empty(self) -> None:
        assert list(candidate_grid([50, 51, 52, 53], "3PH")) == []

    def test_invalid_settings(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            ScanSettings(step=0.0)
        with pytest.raises(ValueError, match="min_separation"):
            ScanSettings(min_separation=-1.0)


class TestChangePointPosterior:
    """Tests for the normalized change-point posterior."""

    @pytest.mark.parametrize("key", ["heating", "cooling", "mixed"])
    def test_posterior_normalized(self, key: str) -> None:
        data = get_dataset(key)
        t, y = data.temperatures, data.usage
        shape = data.suggested_shape
        candidates = change_point_posterior(t, y, shape, default_prior_spec(t, y, shape))

        probs = np.array([c.posterior for c in candidates])
        assert len(candidates) > 0
        assert abs(probs.sum() - 1.0) < 1e-9
        assert np.all((probs >= 0) & (probs <= 1))

    def test_posterior_follows_log_ml(self, heating) -> None:
        t, y = heating
        candidates = change_point_posterior(t, y, "3PH", default_prior_spec(t, y, "3PH"))
        log_ml = np.array([c.log_ml for c in candidates])
        probs = np.array([c.posterior for c in candidates])
        assert np.argmax(log_ml) == np.argmax(probs)
        # Ratio of posteriors equals exp of the log-ML difference.
        i, j = np.argsort(probs)[::-1][:2]
        assert_allclose(probs[i] / probs[j], np.exp(log_ml[i] - log_ml[j]), rtol=1e-8)

    def test_recovers_true_change_point(self) -> None:
        rng = np.random.default_rng(3)
        t = np.linspace(20.0, 85.0, 40)
        y = 500.0 + 40.0 * np.maximum(0.0, 55.0 - t) + rng.normal(0.0, 20.0, 40)

        candidates = change_point_posterior(t, y, "3PH", default_prior_spec(t, y, "3PH"))
        best = map_candidate(candidates)
        assert abs(best.cp - 55.0) <= 2.0
        assert best.cp2 is None
        assert_allclose(best.params.mu_n, [500.0, 40.0], rtol=0.1)

    def test_mixed_respects_separation(self, mixed) -> None:
        t, y = mixed
        candidates = change_point_posterior(t, y, "5P", default_prior_spec(t, y, "5P"))
        best = map_candidate(candidates)
        assert best.cp2 - best.cp >= 6.0
        assert best.params.n_params == 3

    def test_singular_candidates_dropped(self, heating, monkeypatch) -> None:
        """Test that a failed regression removes only its own candidate."""
        t, y = heating
        real = search.bayesian_regression
        calls = {"n": 0}

        def flaky(*args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 1:
                return None
            return real(*args, **kwargs)

        monkeypatch.setattr(search, "bayesian_regression", flaky)
        candidates = change_point_posterior(t, y, "3PH", default_prior_spec(t, y, "3PH"))

        assert len(candidates) == 96
        assert candidates[0].cp == 27.5
        assert abs(sum(c.posterior for c in candidates) - 1.0) < 1e-9

    def test_empty_scan(self) -> None:
        t = [50.0, 51.0, 52.0, 53.0]
        y = [100.0, 101.0, 99.0, 100.0]
        assert change_point_posterior(t, y, "3PH", PriorSpec()) == []

    def test_singular_prior_precision_gives_empty_scan(self, mixed) -> None:
        """Test that a degenerate Λ₀ yields no candidates instead of NaN posteriors."""

        class UnderflowingPrior(PriorSpec):
            def to_nig(self, n_params: int) -> NIGPrior:
                return NIGPrior(np.zeros(n_params), 1e-120 * np.eye(n_params), 3.0, 1e6)

        t, y = mixed
        assert change_point_posterior(t, y, "5P", UnderflowingPrior()) == []
        with pytest.raises(InsufficientDataError):
            map_candidate(change_point_posterior(t, y, "5P", UnderflowingPrior()))

    def test_length_mismatch(self) -> None:
        with pytest.raises(ValueError, match="equal length"):
            change_point_posterior([30, 50, 70], [1, 2], "3PH", PriorSpec())


class TestMapCandidate:
    """Tests for MAP selection."""

    def test_first_maximum_wins(self) -> None:
        candidates = [
            ChangePointCandidate(cp=cp, cp2=None, log_ml=0.0, posterior=p, params=None)
            for cp, p in ((40.0, 0.2), (41.0, 0.4), (42.0, 0.4))
        ]
        assert map_candidate(candidates).cp == 41.0

    def test_empty_raises_error(self) -> None:
        with pytest.raises(InsufficientDataError):
            map_candidate([])

    def test_error_is_value_error(self) -> None:
        assert issubclass(InsufficientDataError, ValueError)


class TestChangePointOLS:
    """Tests for the change-point OLS comparison fit."""

    def test_heating_fit(self, heating) -> None:
        t, y = heating
        fit = fit_ols_with_change_point(t, y, "3PH")
        assert fit is not None
        assert 27.0 <= fit.cp <= 75.0
        assert fit.cp2 is None
        assert fit.beta[1] > 0
        assert fit.r2 > 0.9

    def test_minimizes_residuals(self, heating) -> None:
        t, y = heating
        fit = fit_ols_with_change_point(t, y, "3PH", settings=ScanSettings(step=1.0))
        other = fit_ols_with_change_point(t, y, "3PH", settings=ScanSettings(step=0.5))
        # The finer grid contains the coarser one.
        assert other.ss_res <= fit.ss_res + 1e-6

    def test_mixed_fit(self, mixed) -> None:
        t, y = mixed
        fit = fit_ols_with_change_point(t, y, "5P")
        assert fit is not None
        assert fit.cp2 - fit.cp >= 6.0
        assert np.all(fit.beta[1:] > 0)

    def test_wrong_sign_slope_rejected(self, heating) -> None:
        """Test that heating data admit no positive cooling slope."""
        t, y = heating
        assert fit_ols_with_change_point(t, y, "3PC") is None
