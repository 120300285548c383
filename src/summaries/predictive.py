"""
Posterior predictive distribution and fan-chart data.

For a new temperature with design row x*:

    y* | y ~ t_{2aₙ}(x*ᵀμₙ, √(bₙ/aₙ · (1 + x*ᵀΛₙ⁻¹x*)))

The "1 +" term is the observation noise; x*ᵀΛₙ⁻¹x* is the coefficient
uncertainty, which grows away from the bulk of the training temperatures
and gives the fan its shape.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import math
import numpy as np
from numpy.typing import NDArray

from linalg import mat_vec, quad_form
from regression import PosteriorParameters, build_design_matrix
from special import StudentT


# Fan extends this far beyond the observed temperatures on each side.
FAN_MARGIN = 3.0
FAN_POINTS = 100


@dataclass(frozen=True)
class PredictiveDistribution:
    """Student-t predictive summary at one temperature."""

    temp: Optional[float]
    mean: float
    scale: float
    nu: float
    ci50: Tuple[float, float]
    ci80: Tuple[float, float]
    ci95: Tuple[float, float]


def _band_quantiles(nu: float) -> NDArray[np.float64]:
    """Standard t_ν quantiles at 2.5, 10, 25, 75, 90, 97.5 percent."""
    std = StudentT(nu)
    return np.array([std.quantile(p) for p in (0.025, 0.10, 0.25, 0.75, 0.90, 0.975)])


def _predictive(
    params: PosteriorParameters,
    x_star: NDArray[np.float64],
    q: NDArray[np.float64],
    temp: Optional[float],
) -> PredictiveDistribution:
    mean = float(x_star @ params.mu_n)
    scale = math.sqrt(params.noise_variance * (1.0 + quad_form(x_star, params.Lambda_n_inv)))
    # Location-scale family: every quantile is mean + scale · standard quantile.
    b = mean + scale * q
    return PredictiveDistribution(
        temp=temp,
        mean=mean,
        scale=scale,
        nu=params.nu,
        ci50=(float(b[2]), float(b[3])),
        ci80=(float(b[1]), float(b[4])),
        ci95=(float(b[0]), float(b[5])),
    )


def predictive_at(
    params: PosteriorParameters,
    x_star: Sequence[float],
    temp: Optional[float] = None,
) -> PredictiveDistribution:
    """
    Posterior predictive for one design row.

    Parameters
    ----------
    params : PosteriorParameters
        NIG posterior
    x_star : Sequence[float]
        Design row, length n_params
    temp : float, optional
        Temperature the row was built from (carried through for plotting)

    Returns
    -------
    PredictiveDistribution
    """
    x_star = np.asarray(x_star, dtype=np.float64)
    if x_star.shape != (params.n_params,):
        raise ValueError(
            f"x_star must have shape ({params.n_params},). Got {x_star.shape}"
        )
    return _predictive(params, x_star, _band_quantiles(params.nu), temp)


def fan_range(
    temperatures: Sequence[float],
    margin: float = FAN_MARGIN,
) -> Tuple[float, float]:
    """Observed temperature range widened by `margin` on each side."""
    t = np.asarray(temperatures, dtype=np.float64)
    return float(np.min(t)) - margin, float(np.max(t)) + margin


def posterior_predictive_fan(
    params: PosteriorParameters,
    model_shape: str,
    cp1: Optional[float],
    cp2: Optional[float],
    temp_min: float,
    temp_max: float,
    n_points: int = FAN_POINTS,
) -> List[PredictiveDistribution]:
    """
    Predictive mean and 50/80/95% bands over an even temperature grid.

    Parameters
    ----------
    params : PosteriorParameters
        NIG posterior (normally the MAP change-point candidate's)
    model_shape : str
        "3PH", "3PC" or "5P"
    cp1, cp2 : float or None
        Change points the posterior was fitted with
    temp_min, temp_max : float
        Grid bounds (see fan_range for the usual margin)
    n_points : int
        Number of grid temperatures. Default 100.

    Returns
    -------
    List[PredictiveDistribution]
        One entry per grid temperature, ascending.
    """
    if n_points < 2:
        raise ValueError(f"n_points must be >= 2. Got {n_points}")
    if not temp_max > temp_min:
        raise ValueError(
            f"temp_max must exceed temp_min. Got [{temp_min}, {temp_max}]"
        )

    temps = np.linspace(temp_min, temp_max, n_points)
    X = build_design_matrix(temps, model_shape, cp1, cp2)
    if X.shape[1] != params.n_params:
        raise ValueError(
            f"{model_shape} has {X.shape[1]} coefficients but the posterior has "
            f"{params.n_params}"
        )

    q = _band_quantiles(params.nu)
    return [_predictive(params, X[i], q, float(temps[i])) for i in range(n_points)]


def predictive_means(
    params: PosteriorParameters,
    model_shape: str,
    cp1: Optional[float],
    cp2: Optional[float],
    temperatures: Sequence[float],
) -> NDArray[np.float64]:
    """Posterior mean prediction x*ᵀμₙ at each temperature."""
    X = build_design_matrix(temperatures, model_shape, cp1, cp2)
    return mat_vec(X, params.mu_n)
