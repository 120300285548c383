"""
Ordinary least squares baseline.

OLS is never used in the Bayesian update. It is reported next to the
posterior so a learner can compare the point estimate with the full
posterior. The change-point variant (minimum residual sum of squares with
positive slopes) lives with the Bayesian scan in changepoint.search.

Fit statistics follow ASHRAE Guideline 14 conventions:
    CV(RMSE) = 100 · √(SSres / (n − p)) / ȳ
    NMBE     = 100 · Σ residuals / ((n − p) · ȳ)
"""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence
import numpy as np
from numpy.typing import NDArray

from linalg import cross, gram, invert, mat_vec


@dataclass(frozen=True, eq=False)
class OLSFit:
    """Least-squares fit with Guideline 14 statistics."""

    beta: NDArray[np.float64]
    y_hat: NDArray[np.float64]
    residuals: NDArray[np.float64]
    r2: float
    cv_rmse: float
    nmbe: float
    rmse: float
    se: NDArray[np.float64]
    cp: Optional[float] = None
    cp2: Optional[float] = None

    @property
    def ss_res(self) -> float:
        return float(self.residuals @ self.residuals)


def fit_statistics(
    X: NDArray[np.float64],
    y: NDArray[np.float64],
    beta: NDArray[np.float64],
) -> Dict[str, float]:
    """
    Residual-based goodness-of-fit statistics for coefficients beta.

    Statistics with a zero denominator (constant response, n <= p, zero mean)
    are NaN rather than a misleading finite number.

    Returns
    -------
    stats : Dict[str, float]
        - 'ss_res', 'ss_tot': residual and total sums of squares
        - 'r2': coefficient of determination
        - 'rmse': √(SSres / (n − p))
        - 'cv_rmse': RMSE / ȳ in percent
        - 'nmbe': normalized mean bias error in percent
    """
    n, p = X.shape
    y_hat = mat_vec(X, beta)
    residuals = y - y_hat
    y_mean = float(np.mean(y))

    ss_res = float(residuals @ residuals)
    ss_tot = float(np.sum((y - y_mean) ** 2))
    dof = n - p

    r2 = 1.0 - ss_res / ss_tot if ss_tot > 0 else np.nan
    rmse = float(np.sqrt(ss_res / dof)) if dof > 0 else np.nan
    if dof > 0 and y_mean != 0:
        cv_rmse = rmse / y_mean * 100.0
        nmbe = float(np.sum(residuals)) / (dof * y_mean) * 100.0
    else:
        cv_rmse = np.nan
        nmbe = np.nan

    return {
        "ss_res": ss_res,
        "ss_tot": ss_tot,
        "r2": r2,
        "rmse": rmse,
        "cv_rmse": cv_rmse,
        "nmbe": nmbe,
    }


def fit_ols(
    X: NDArray[np.float64],
    y: Sequence[float],
) -> Optional[OLSFit]:
    """
    Least-squares fit β = (XᵀX)⁻¹Xᵀy.

    Parameters
    ----------
    X : NDArray[np.float64]
        Design matrix, shape (n, p)
    y : Sequence[float]
        Response, length n

    Returns
    -------
    OLSFit or None
        None when XᵀX is singular.
    """
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    XtX_inv = invert(gram(X))
    if XtX_inv is None:
        return None

    beta = mat_vec(XtX_inv, cross(X, y))
    stats = fit_statistics(X, y, beta)
    y_hat = mat_vec(X, beta)

    mse = stats["rmse"] ** 2
    se = np.sqrt(mse * np.diag(XtX_inv))

    return OLSFit(
        beta=beta,
        y_hat=y_hat,
        residuals=y - y_hat,
        r2=stats["r2"],
        cv_rmse=stats["cv_rmse"],
        nmbe=stats["nmbe"],
        rmse=stats["rmse"],
        se=se,
    )
