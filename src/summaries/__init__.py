"""
Posterior summaries for visualization.

**Marginals (marginals.py):**
- parameter_posterior / parameter_prior: Student-t density curves and
  50/80/95% credible intervals per coefficient
- sigma_posterior: inverse-gamma density of the noise variance

**Predictive (predictive.py):**
- predictive_at: Student-t predictive for one design row
- posterior_predictive_fan: mean and credible bands over a temperature grid
"""

from summaries.marginals import (
    MarginalSummary,
    SigmaSummary,
    parameter_posterior,
    parameter_prior,
    sigma_posterior,
)
from summaries.predictive import (
    FAN_MARGIN,
    PredictiveDistribution,
    fan_range,
    posterior_predictive_fan,
    predictive_at,
    predictive_means,
)

__all__ = [
    "MarginalSummary",
    "SigmaSummary",
    "parameter_posterior",
    "parameter_prior",
    "sigma_posterior",
    "FAN_MARGIN",
    "PredictiveDistribution",
    "fan_range",
    "posterior_predictive_fan",
    "predictive_at",
    "predictive_means",
]
