"""
Posterior over change-point locations.

Each candidate threshold (or pair of thresholds for 5P) defines a design
matrix X(cp). With the NIG prior the evidence p(y | cp) is available in
closed form, so under a uniform prior over the grid

    P(cp | y) = exp(log p(y | cp) − log Σ_k p(y | cp_k))

Raw log marginal likelihoods can differ by hundreds of units between
candidates; the normalizer is computed with logsumexp, which subtracts the
maximum before exponentiating.

Grid policy (keeps the 2-D scan small enough for interactive use):
- 3PH / 3PC: cp ∈ [t_min + 3, t_max − 3] every 0.5
- 5P: cp_h ∈ [t_min + 4, t_max − 10] every 1,
      cp_c ∈ [cp_h + 6, t_max − 4] every 1
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple
import logging
import numpy as np
from numpy.typing import NDArray
from scipy.special import logsumexp

from regression import (
    HEATING_COOLING,
    OLSFit,
    PosteriorParameters,
    PriorSpec,
    bayesian_regression,
    build_design_matrix,
    fit_ols,
    n_params,
    validate_shape,
)

logger = logging.getLogger(__name__)


DEFAULT_CP_STEP = 0.5
SINGLE_MARGIN = 3.0
HEATING_LOW_MARGIN = 4.0
HEATING_HIGH_MARGIN = 10.0
COOLING_HIGH_MARGIN = 4.0
# Heating threshold must precede cooling threshold by at least this much.
MIN_SEPARATION = 6.0
DEFAULT_2D_STEP = 1.0


class InsufficientDataError(ValueError):
    """Raised when a change-point scan leaves no usable posterior."""


class ScanSettings:
    """Grid margins and steps for the change-point scan."""

    def __init__(
        self,
        # Single change point
        step: float = DEFAULT_CP_STEP,
        margin: float = SINGLE_MARGIN,
        # Two change points
        step_2d: float = DEFAULT_2D_STEP,
        heating_low_margin: float = HEATING_LOW_MARGIN,
        heating_high_margin: float = HEATING_HIGH_MARGIN,
        cooling_high_margin: float = COOLING_HIGH_MARGIN,
        min_separation: float = MIN_SEPARATION,
    ) -> None:
        """
        Initialize scan settings.

        Parameters
        ----------
        step : float
            Grid spacing for 3PH/3PC. Default 0.5.
        margin : float
            Distance kept from each temperature extreme for 3PH/3PC. Default 3.
        step_2d : float
            Grid spacing for both 5P thresholds. Default 1.
        heating_low_margin : float
            Lowest heating threshold is t_min + this. Default 4.
        heating_high_margin : float
            Highest heating threshold is t_max − this. Default 10.
        cooling_high_margin : float
            Highest cooling threshold is t_max − this. Default 4.
        min_separation : float
            Minimum cooling − heating gap for 5P. Default 6.
        """
        if step <= 0 or step_2d <= 0:
            raise ValueError(
                f"Grid steps must be positive. Got step={step}, step_2d={step_2d}"
            )
        if min_separation < 0:
            raise ValueError(f"min_separation must be >= 0. Got {min_separation}")

        self.step = float(step)
        self.margin = float(margin)
        self.step_2d = float(step_2d)
        self.heating_low_margin = float(heating_low_margin)
        self.heating_high_margin = float(heating_high_margin)
        self.cooling_high_margin = float(cooling_high_margin)
        self.min_separation = float(min_separation)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"ScanSettings(step={self.step}, margin={self.margin}, "
            f"step_2d={self.step_2d}, min_separation={self.min_separation})"
        )


@dataclass(frozen=True, eq=False)
class ChangePointCandidate:
    """
    One scored change-point location.

    Attributes
    ----------
    cp : float
        Change point (heating change point for 5P)
    cp2 : float or None
        Cooling change point for 5P, None otherwise
    log_ml : float
        Log marginal likelihood of the data at this location
    posterior : float
        Normalized posterior probability over the scanned grid
    params : PosteriorParameters
        Coefficient/noise posterior at this location
    """

    cp: float
    cp2: Optional[float]
    log_ml: float
    posterior: float
    params: PosteriorParameters


def _axis(lo: float, hi: float, step: float) -> NDArray[np.float64]:
    """lo, lo + step, …, up to hi inclusive; empty if hi < lo."""
    if hi < lo:
        return np.empty(0)
    count = int(np.floor((hi - lo) / step + 1e-9)) + 1
    return lo + step * np.arange(count)


def candidate_grid(
    temperatures: Sequence[float],
    model_shape: str,
    step: Optional[float] = None,
    settings: Optional[ScanSettings] = None,
) -> Iterator[Tuple[float, Optional[float]]]:
    """
    Yield candidate (cp, cp2) pairs in scan order.

    Parameters
    ----------
    temperatures : Sequence[float]
        Observed temperatures (defines the scan range)
    model_shape : str
        "3PH", "3PC" or "5P"
    step : float, optional
        Overrides settings.step for single change-point shapes
    settings : ScanSettings, optional
        Grid policy. Defaults to ScanSettings().

    Yields
    ------
    (cp, cp2) : Tuple[float, Optional[float]]
        cp2 is None for 3PH/3PC.
    """
    validate_shape(model_shape)
    settings = settings or ScanSettings()
    t = np.asarray(temperatures, dtype=np.float64)
    t_min, t_max = float(np.min(t)), float(np.max(t))

    if model_shape != HEATING_COOLING:
        step = settings.step if step is None else step
        if step <= 0:
            raise ValueError(f"step must be positive. Got {step}")
        for cp in _axis(t_min + settings.margin, t_max - settings.margin, step):
            yield float(cp), None
        return

    heating = _axis(
        t_min + settings.heating_low_margin,
        t_max - settings.heating_high_margin,
        settings.step_2d,
    )
    for cp_h in heating:
        cooling = _axis(
            cp_h + settings.min_separation,
            t_max - settings.cooling_high_margin,
            settings.step_2d,
        )
        for cp_c in cooling:
            yield float(cp_h), float(cp_c)


def _validate_observations(
    temperatures: Sequence[float],
    y: Sequence[float],
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    t = np.asarray(temperatures, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if t.ndim != 1 or t.shape != y.shape:
        raise ValueError(
            f"temperatures and y must be 1-D and equal length. "
            f"Got shapes {t.shape} and {y.shape}"
        )
    if t.size == 0:
        raise ValueError("At least one observation is required")
    return t, y


def change_point_posterior(
    temperatures: Sequence[float],
    y: Sequence[float],
    model_shape: str,
    prior: PriorSpec,
    step: Optional[float] = None,
    settings: Optional[ScanSettings] = None,
) -> List[ChangePointCandidate]:
    """
    Score every grid location by marginal likelihood and normalize.

    Parameters
    ----------
    temperatures : Sequence[float]
        Outdoor temperatures, length n
    y : Sequence[float]
        Energy use, length n
    model_shape : str
        "3PH", "3PC" or "5P"
    prior : PriorSpec
        Prior knobs; expanded per candidate with PriorSpec.to_nig
    step : float, optional
        Grid spacing for 3PH/3PC (default 0.5)
    settings : ScanSettings, optional
        Full grid policy

    Returns
    -------
    List[ChangePointCandidate]
        Candidates in scan order with posteriors summing to 1. Empty when no
        location yields a non-singular system: callers must treat that as
        "no usable posterior".
    """
    validate_shape(model_shape)
    t, y = _validate_observations(temperatures, y)
    nig = prior.to_nig(n_params(model_shape))

    scored = []
    n_dropped = 0
    for cp1, cp2 in candidate_grid(t, model_shape, step=step, settings=settings):
        X = build_design_matrix(t, model_shape, cp1, cp2)
        post = bayesian_regression(X, y, nig.mu0, nig.Lambda0, nig.a0, nig.b0)
        if post is None:
            n_dropped += 1
            logger.debug("Dropped singular candidate cp=%s cp2=%s", cp1, cp2)
            continue
        scored.append((cp1, cp2, post))

    if not scored:
        logger.warning(
            "No valid %s change-point candidates (%d singular)", model_shape, n_dropped
        )
        return []

    log_ml = np.array([post.log_ml for _, _, post in scored])
    posterior = np.exp(log_ml - logsumexp(log_ml))

    logger.info(
        "Scanned %d %s candidates (%d dropped); max log-ML %.3f",
        len(scored), model_shape, n_dropped, float(np.max(log_ml)),
    )

    return [
        ChangePointCandidate(
            cp=cp1, cp2=cp2, log_ml=post.log_ml, posterior=float(prob), params=post
        )
        for (cp1, cp2, post), prob in zip(scored, posterior)
    ]


def map_candidate(candidates: Sequence[ChangePointCandidate]) -> ChangePointCandidate:
    """
    Maximum a posteriori candidate; ties go to the first in scan order.

    Raises
    ------
    InsufficientDataError
        If the candidate set is empty.
    """
    if len(candidates) == 0:
        raise InsufficientDataError(
            "Change-point scan produced no valid candidates; not enough data "
            "spread to fit this model shape"
        )
    posteriors = np.array([c.posterior for c in candidates])
    return candidates[int(np.argmax(posteriors))]


def fit_ols_with_change_point(
    temperatures: Sequence[float],
    energy: Sequence[float],
    model_shape: str,
    settings: Optional[ScanSettings] = None,
) -> Optional[OLSFit]:
    """
    Classic change-point OLS over the same grid: minimum residual SS.

    Candidates must have R² > 0 and strictly positive slope(s).

    Returns
    -------
    OLSFit or None
        Best fit with `cp` (and `cp2` for 5P) set, or None if no candidate
        qualifies.
    """
    validate_shape(model_shape)
    t, y = _validate_observations(temperatures, energy)
    n_slopes = n_params(model_shape) - 1

    best: Optional[OLSFit] = None
    best_cps: Tuple[Optional[float], Optional[float]] = (None, None)
    best_ss = np.inf

    for cp1, cp2 in candidate_grid(t, model_shape, settings=settings):
        fit = fit_ols(build_design_matrix(t, model_shape, cp1, cp2), y)
        if fit is None or not fit.r2 > 0:
            continue
        if np.any(fit.beta[1:1 + n_slopes] <= 0):
            continue
        if fit.ss_res < best_ss:
            best, best_cps, best_ss = fit, (cp1, cp2), fit.ss_res

    if best is None:
        return None

    return OLSFit(
        beta=best.beta,
        y_hat=best.y_hat,
        residuals=best.residuals,
        r2=best.r2,
        cv_rmse=best.cv_rmse,
        nmbe=best.nmbe,
        rmse=best.rmse,
        se=best.se,
        cp=best_cps[0],
        cp2=best_cps[1],
    )
