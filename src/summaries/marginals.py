"""
Marginal posterior and prior summaries for plotting.

Under the NIG model each coefficient is marginally Student-t:

    posterior:  β_j | y ~ t_{2aₙ}(μₙⱼ, √(bₙ/aₙ · [Λₙ⁻¹]ⱼⱼ))
    prior:      β_j     ~ t_{2a₀}(μ₀ⱼ, √(b₀/a₀ · [Λ₀⁻¹]ⱼⱼ))

and the noise variance is σ² | y ~ InvGamma(aₙ, bₙ).

Density curves use 200 evenly spaced points over ±4 scale units, which
covers the visible mass for ν ≥ 2.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import math
import numpy as np
from numpy.typing import NDArray

from linalg import invert
from regression import PosteriorParameters, PriorSpec
from special import StudentT, inverse_gamma_pdf


CURVE_POINTS = 200
CURVE_HALF_WIDTH = 4.0
CREDIBLE_MASSES = (0.50, 0.80, 0.95)


@dataclass(frozen=True, eq=False)
class MarginalSummary:
    """
    Density curve and credible intervals of one coefficient.

    Attributes
    ----------
    points : NDArray[np.float64]
        (value, density) pairs, shape (n_points, 2), ordered by value
    mean : float
        Location of the Student-t (posterior mean when ν > 1)
    nu : float
        Degrees of freedom
    scale : float
        Student-t scale
    ci50, ci80, ci95 : Tuple[float, float]
        Equal-tailed credible intervals
    """

    points: NDArray[np.float64]
    mean: float
    nu: float
    scale: float
    ci50: Tuple[float, float]
    ci80: Tuple[float, float]
    ci95: Tuple[float, float]


@dataclass(frozen=True, eq=False)
class SigmaSummary:
    """Inverse-gamma density curve of the noise variance σ²."""

    points: NDArray[np.float64]
    mode: float
    mean: Optional[float]


def _check_index(index: int, n_params: int) -> None:
    if isinstance(index, bool) or not (0 <= index < n_params):
        raise IndexError(
            f"param index must be in [0, {n_params - 1}]. Got {index}"
        )


def _summarize(nu: float, loc: float, scale: float, n_points: int) -> MarginalSummary:
    if n_points < 2:
        raise ValueError(f"n_points must be >= 2. Got {n_points}")

    dist = StudentT(nu, loc, scale)
    xs = np.linspace(loc - CURVE_HALF_WIDTH * scale, loc + CURVE_HALF_WIDTH * scale, n_points)
    densities = np.array([dist.pdf(x) for x in xs])
    points = np.column_stack([xs, densities])
    points.flags.writeable = False

    ci50, ci80, ci95 = (dist.interval(mass) for mass in CREDIBLE_MASSES)
    return MarginalSummary(
        points=points, mean=loc, nu=nu, scale=scale, ci50=ci50, ci80=ci80, ci95=ci95
    )


def parameter_posterior(
    params: PosteriorParameters,
    index: int,
    n_points: int = CURVE_POINTS,
) -> MarginalSummary:
    """
    Marginal posterior of coefficient `index`.

    Parameters
    ----------
    params : PosteriorParameters
        NIG posterior
    index : int
        Coefficient index, 0 ≤ index < params.n_params (0 is the baseload)
    n_points : int
        Curve resolution. Default 200.

    Returns
    -------
    MarginalSummary

    Raises
    ------
    IndexError
        If index is outside [0, n_params). An out-of-range index is a caller
        bug, never answered with an empty or zero summary.
    """
    _check_index(index, params.n_params)
    return _summarize(
        nu=params.nu,
        loc=float(params.mu_n[index]),
        scale=params.coefficient_scale(index),
        n_points=n_points,
    )


def parameter_prior(
    prior: PriorSpec,
    index: int,
    n_params: int,
    n_points: int = CURVE_POINTS,
) -> MarginalSummary:
    """
    Marginal prior of coefficient `index` for a model with n_params terms.

    Raises
    ------
    IndexError
        If index is outside [0, n_params).
    ValueError
        If the prior precision is numerically singular.
    """
    _check_index(index, n_params)
    nig = prior.to_nig(n_params)
    Lambda0_inv = invert(nig.Lambda0)
    if Lambda0_inv is None:
        raise ValueError(f"Prior precision is singular (strength={prior.strength})")

    return _summarize(
        nu=2.0 * nig.a0,
        loc=float(nig.mu0[index]),
        scale=math.sqrt(nig.b0 / nig.a0 * Lambda0_inv[index, index]),
        n_points=n_points,
    )


def sigma_posterior(
    params: PosteriorParameters,
    n_points: int = CURVE_POINTS,
) -> SigmaSummary:
    """
    Posterior density of σ² ~ InvGamma(aₙ, bₙ).

    The curve spans (0, 3·mean] (3·2·mode when the mean is undefined) and
    excludes zero, where the density vanishes.

    Returns
    -------
    SigmaSummary
        Curve, mode bₙ/(aₙ+1), mean bₙ/(aₙ−1) or None when aₙ ≤ 1
    """
    a, b = params.a_n, params.b_n
    mode = b / (a + 1.0)
    mean = b / (a - 1.0) if a > 1.0 else None
    span = 3.0 * (mean if mean is not None else 2.0 * mode)

    xs = span * np.arange(1, n_points) / n_points
    densities = np.array([inverse_gamma_pdf(x, a, b) for x in xs])
    points = np.column_stack([xs, densities])
    points.flags.writeable = False
    return SigmaSummary(points=points, mode=mode, mean=mean)
