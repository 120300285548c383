"""
Conjugate Normal-Inverse-Gamma linear regression.

Prior:      β | σ² ~ N(μ₀, σ² Λ₀⁻¹),   σ² ~ IG(a₀, b₀)
Posterior:  β | σ², y ~ N(μₙ, σ² Λₙ⁻¹),   σ² | y ~ IG(aₙ, bₙ)

    Λₙ = Λ₀ + XᵀX
    μₙ = Λₙ⁻¹ (Λ₀ μ₀ + Xᵀy)
    aₙ = a₀ + n/2
    bₙ = b₀ + ½ (yᵀy + μ₀ᵀΛ₀μ₀ − μₙᵀΛₙμₙ)

Log marginal likelihood (evidence), used to score change-point locations:

    log p(y) = −n/2 log 2π + ½ log|Λ₀| − ½ log|Λₙ|
               + a₀ log b₀ − aₙ log bₙ + log Γ(aₙ) − log Γ(a₀)

The update is exact; the only error is floating-point rounding.
"""

from dataclasses import dataclass
from typing import Optional, Sequence
import logging
import math
import numpy as np
from numpy.typing import NDArray

from linalg import cross, gram, invert, log_abs_determinant, mat_add, mat_vec, quad_form
from regression.ols import fit_statistics
from special import log_gamma

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class PosteriorParameters:
    """
    NIG posterior for one design matrix.

    Attributes
    ----------
    mu_n : NDArray[np.float64]
        Posterior mean of β, shape (p,)
    Lambda_n : NDArray[np.float64]
        Posterior precision (per unit σ²), shape (p, p)
    Lambda_n_inv : NDArray[np.float64]
        Its inverse, shape (p, p)
    a_n : float
        Inverse-gamma shape a₀ + n/2
    b_n : float
        Inverse-gamma scale
    log_ml : float
        Log marginal likelihood of y under the prior
    n_obs : int
        Number of observations
    n_params : int
        Number of coefficients
    beta_ols : NDArray[np.float64]
        OLS reference estimate (XᵀX)⁻¹Xᵀy
    r2 : float
        OLS R²
    cv_rmse_ols : float
        OLS CV(RMSE) in percent
    """

    mu_n: NDArray[np.float64]
    Lambda_n: NDArray[np.float64]
    Lambda_n_inv: NDArray[np.float64]
    a_n: float
    b_n: float
    log_ml: float
    n_obs: int
    n_params: int
    beta_ols: NDArray[np.float64]
    r2: float
    cv_rmse_ols: float

    @property
    def noise_variance(self) -> float:
        """Posterior scale of σ², bₙ/aₙ."""
        return self.b_n / self.a_n

    @property
    def nu(self) -> float:
        """Degrees of freedom of the Student-t marginals, 2aₙ."""
        return 2.0 * self.a_n

    def coefficient_scale(self, index: int) -> float:
        """Student-t scale of β_index: √(bₙ/aₙ · [Λₙ⁻¹]_jj)."""
        return math.sqrt(self.noise_variance * self.Lambda_n_inv[index, index])


def bayesian_regression(
    X: NDArray[np.float64],
    y: Sequence[float],
    mu0: Sequence[float],
    Lambda0: NDArray[np.float64],
    a0: float,
    b0: float,
) -> Optional[PosteriorParameters]:
    """
    Exact NIG posterior update.

    Parameters
    ----------
    X : NDArray[np.float64]
        Design matrix, shape (n, p)
    y : Sequence[float]
        Response, length n
    mu0 : Sequence[float]
        Prior mean, length p
    Lambda0 : NDArray[np.float64]
        Prior precision, shape (p, p), invertible
    a0 : float
        Prior shape (> 0)
    b0 : float
        Prior scale (> 0)

    Returns
    -------
    PosteriorParameters or None
        None when Λ₀, XᵀX or Λₙ is singular, or the data leave no positive bₙ;
        callers treat this as "no posterior for this design".

    Raises
    ------
    ValueError
        If array shapes are inconsistent.
    """
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    mu0 = np.asarray(mu0, dtype=np.float64)
    Lambda0 = np.asarray(Lambda0, dtype=np.float64)

    if X.ndim != 2:
        raise ValueError(f"X must be 2-D. Got shape {X.shape}")
    n, p = X.shape
    if y.shape != (n,):
        raise ValueError(f"y must have shape ({n},). Got {y.shape}")
    if mu0.shape != (p,) or Lambda0.shape != (p, p):
        raise ValueError(
            f"Prior shapes must be ({p},) and ({p}, {p}). "
            f"Got {mu0.shape} and {Lambda0.shape}"
        )

    # The evidence needs log|Λ₀|; an underflowed determinant would give
    # log_ml = -inf for every design and NaN change-point posteriors.
    log_det_Lambda0 = log_abs_determinant(Lambda0)
    if invert(Lambda0) is None or not math.isfinite(log_det_Lambda0):
        logger.debug("Singular prior precision; no posterior")
        return None

    XtX = gram(X)
    Xty = cross(X, y)

    # A degenerate design (e.g. an all-zero hinge column) fails here even
    # though the prior alone would keep Λₙ invertible.
    XtX_inv = invert(XtX)
    Lambda_n = mat_add(Lambda0, XtX)
    Lambda_n_inv = invert(Lambda_n)
    if XtX_inv is None or Lambda_n_inv is None:
        logger.debug("Singular system for design with shape %s", X.shape)
        return None

    mu_n = mat_vec(Lambda_n_inv, mat_vec(Lambda0, mu0) + Xty)
    a_n = a0 + n / 2.0
    b_n = b0 + 0.5 * (float(y @ y) + quad_form(mu0, Lambda0) - quad_form(mu_n, Lambda_n))
    if not b_n > 0:
        logger.debug("Non-positive posterior scale b_n=%g; design rejected", b_n)
        return None

    log_ml = (
        -n / 2.0 * math.log(2.0 * math.pi)
        + 0.5 * log_det_Lambda0
        - 0.5 * log_abs_determinant(Lambda_n)
        + a0 * math.log(b0)
        - a_n * math.log(b_n)
        + log_gamma(a_n)
        - log_gamma(a0)
    )

    # OLS reference only; it never feeds the update above.
    beta_ols = mat_vec(XtX_inv, Xty)
    stats = fit_statistics(X, y, beta_ols)

    # Posteriors are shared by summaries, fans and samplers.
    for arr in (mu_n, Lambda_n, Lambda_n_inv, beta_ols):
        arr.flags.writeable = False

    return PosteriorParameters(
        mu_n=mu_n,
        Lambda_n=Lambda_n,
        Lambda_n_inv=Lambda_n_inv,
        a_n=a_n,
        b_n=b_n,
        log_ml=log_ml,
        n_obs=n,
        n_params=p,
        beta_ols=beta_ols,
        r2=stats["r2"],
        cv_rmse_ols=stats["cv_rmse"],
    )
