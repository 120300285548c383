"""
Monte Carlo simulation over conjugate regression posteriors.

- PosteriorSampler: exact joint (σ², β) draws from an NIG posterior
- savings_posterior: empirical distribution of reporting-period savings
- Random variates (Box–Muller, Marsaglia–Tsang) on an injected Generator

**Usage:**
```python
from simulation import ReportingObservation, savings_posterior

reporting = [ReportingObservation(temp=30, actual=4100), ...]
result = savings_posterior(post, "3PH", 58.0, None, reporting, random_seed=7)
print(result.mean, result.ci95)
```
"""

from simulation.random_draws import (
    gamma,
    inverse_gamma,
    make_rng,
    multivariate_normal,
    standard_normal,
)
from simulation.simulator import PosteriorSampler
from simulation.savings import (
    DEFAULT_N_SAMPLES,
    HISTOGRAM_BINS,
    HistogramBin,
    ReportingObservation,
    SavingsPosterior,
    expected_savings,
    savings_posterior,
    summarize_samples,
    synthesize_reporting_period,
)

__all__ = [
    "gamma",
    "inverse_gamma",
    "make_rng",
    "multivariate_normal",
    "standard_normal",
    "PosteriorSampler",
    "DEFAULT_N_SAMPLES",
    "HISTOGRAM_BINS",
    "HistogramBin",
    "ReportingObservation",
    "SavingsPosterior",
    "expected_savings",
    "savings_posterior",
    "summarize_samples",
    "synthesize_reporting_period",
]
