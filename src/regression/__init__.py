"""
Change-point regression: designs, priors, conjugate update, OLS baseline.

**Design matrices (design.py):**
- Hinge-function designs for 3PH, 3PC and 5P energy models

**Priors (priors.py):**
- PriorSpec: slider-level prior knobs (baseload, slopes, strength, noise)
- NIGPrior: algebraic Normal-Inverse-Gamma prior (μ₀, Λ₀, a₀, b₀)
- default_prior_spec: weakly-informative prior scaled to the data

**Conjugate update (conjugate.py):**
- bayesian_regression: exact NIG posterior and log marginal likelihood

**OLS baseline (ols.py):**
- fit_ols: least squares with Guideline 14 statistics
"""

from regression.design import (
    HEATING,
    COOLING,
    HEATING_COOLING,
    MODEL_SHAPES,
    PARAM_NAMES,
    build_design_matrix,
    design_row,
    n_params,
    validate_shape,
)
from regression.priors import (
    DEFAULT_PRIOR_STRENGTH,
    NIGPrior,
    PriorSpec,
    default_prior_spec,
)
from regression.conjugate import PosteriorParameters, bayesian_regression
from regression.ols import OLSFit, fit_ols, fit_statistics

__all__ = [
    # Designs
    "HEATING",
    "COOLING",
    "HEATING_COOLING",
    "MODEL_SHAPES",
    "PARAM_NAMES",
    "build_design_matrix",
    "design_row",
    "n_params",
    "validate_shape",
    # Priors
    "DEFAULT_PRIOR_STRENGTH",
    "NIGPrior",
    "PriorSpec",
    "default_prior_spec",
    # Conjugate update
    "PosteriorParameters",
    "bayesian_regression",
    # OLS
    "OLSFit",
    "fit_ols",
    "fit_statistics",
]
