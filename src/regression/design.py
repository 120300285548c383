"""
Design matrices for change-point energy models.

Energy use E is regressed on outdoor temperature T through hinge functions:

    3PH:  E = β₀ + β₁ (cp − T)⁺                         # heating
    3PC:  E = β₀ + β₁ (T − cp)⁺                         # cooling
    5P:   E = β₀ + β₁ (cp_h − T)⁺ + β₂ (T − cp_c)⁺      # heating + cooling

with (u)⁺ = max(0, u). The first column is always the intercept; hinge
columns are non-negative. A hinge column that is identically zero (threshold
outside the data) is left as is: it makes XᵀX singular, and the regression
core reports that as a failed fit.
"""

from typing import Optional, Sequence
import numpy as np
from numpy.typing import NDArray


HEATING = "3PH"
COOLING = "3PC"
HEATING_COOLING = "5P"

MODEL_SHAPES = (HEATING, COOLING, HEATING_COOLING)

PARAM_NAMES = {
    HEATING: ("baseload", "heating slope"),
    COOLING: ("baseload", "cooling slope"),
    HEATING_COOLING: ("baseload", "heating slope", "cooling slope"),
}


def validate_shape(model_shape: str) -> str:
    """Return model_shape unchanged, or raise ValueError if it is unknown."""
    if model_shape not in MODEL_SHAPES:
        raise ValueError(
            f"model_shape must be one of {MODEL_SHAPES}. Got {model_shape!r}"
        )
    return model_shape


def n_params(model_shape: str) -> int:
    """Number of regression coefficients for a model shape."""
    return len(PARAM_NAMES[validate_shape(model_shape)])


def _check_thresholds(
    model_shape: str,
    cp1: Optional[float],
    cp2: Optional[float],
) -> None:
    if cp1 is None:
        raise ValueError(f"{model_shape} requires a change point (cp1)")
    if model_shape == HEATING_COOLING and cp2 is None:
        raise ValueError("5P requires both heating (cp1) and cooling (cp2) change points")


def build_design_matrix(
    temperatures: Sequence[float],
    model_shape: str,
    cp1: Optional[float] = None,
    cp2: Optional[float] = None,
) -> NDArray[np.float64]:
    """
    Build the hinge-function design matrix.

    Parameters
    ----------
    temperatures : Sequence[float]
        Outdoor temperatures, length n
    model_shape : str
        One of "3PH", "3PC", "5P"
    cp1 : float, optional
        Change point (heating change point for 5P). Required.
    cp2 : float, optional
        Cooling change point. Required for 5P, ignored otherwise.

    Returns
    -------
    NDArray[np.float64]
        Design matrix, shape (n, p) with p = 2 (3PH/3PC) or 3 (5P)

    Raises
    ------
    ValueError
        If the shape is unknown or a required change point is missing.

    Examples
    --------
    >>> build_design_matrix([30, 50, 70], "3PH", 45)
    array([[ 1., 15.],
           [ 1.,  0.],
           [ 1.,  0.]])
    """
    validate_shape(model_shape)
    _check_thresholds(model_shape, cp1, cp2)

    t = np.asarray(temperatures, dtype=np.float64).reshape(-1)
    ones = np.ones_like(t)

    if model_shape == HEATING:
        columns = [ones, np.maximum(0.0, cp1 - t)]
    elif model_shape == COOLING:
        columns = [ones, np.maximum(0.0, t - cp1)]
    else:
        columns = [ones, np.maximum(0.0, cp1 - t), np.maximum(0.0, t - cp2)]

    return np.column_stack(columns)


def design_row(
    temperature: float,
    model_shape: str,
    cp1: Optional[float] = None,
    cp2: Optional[float] = None,
) -> NDArray[np.float64]:
    """Single design row x* for one temperature, shape (p,)."""
    return build_design_matrix([temperature], model_shape, cp1, cp2)[0]
