"""
Change-point location search.

Scans candidate thresholds over the observed temperature range, scores each
with the conjugate marginal likelihood and normalizes the scores into a
posterior over locations.
"""

from changepoint.search import (
    DEFAULT_CP_STEP,
    MIN_SEPARATION,
    ChangePointCandidate,
    InsufficientDataError,
    ScanSettings,
    candidate_grid,
    change_point_posterior,
    fit_ols_with_change_point,
    map_candidate,
)

__all__ = [
    "DEFAULT_CP_STEP",
    "MIN_SEPARATION",
    "ChangePointCandidate",
    "InsufficientDataError",
    "ScanSettings",
    "candidate_grid",
    "change_point_posterior",
    "fit_ols_with_change_point",
    "map_candidate",
]
