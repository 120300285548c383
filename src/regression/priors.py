"""
Normal-Inverse-Gamma prior specification.

Prior:
    σ²      ~ InvGamma(a₀, b₀)                   # Noise variance
    β | σ²  ~ Normal(μ₀, σ² Λ₀⁻¹)                # Coefficients
    Λ₀      = strength · I                       # Diagonal precision

The user-facing knobs (baseload, slopes, strength, noise shape/scale) live in
PriorSpec; PriorSpec.to_nig(p) expands them into the algebraic quantities the
conjugate update needs for a model with p coefficients.
"""

from typing import Optional, Sequence
import numpy as np
from numpy.typing import NDArray

from linalg import SINGULAR_TOL
from regression.design import validate_shape


# Near-vague default: the data dominate after a handful of observations.
DEFAULT_PRIOR_STRENGTH = 1e-4
DEFAULT_NOISE_SHAPE = 3.0


class NIGPrior:
    """
    Algebraic Normal-Inverse-Gamma prior.

    Attributes
    ----------
    mu0 : NDArray[np.float64]
        Prior mean of β, shape (p,)
    Lambda0 : NDArray[np.float64]
        Prior precision of β (per unit σ²), shape (p, p)
    a0 : float
        Inverse-gamma shape
    b0 : float
        Inverse-gamma scale
    """

    def __init__(
        self,
        mu0: NDArray[np.float64],
        Lambda0: NDArray[np.float64],
        a0: float,
        b0: float,
    ) -> None:
        self.mu0 = np.asarray(mu0, dtype=np.float64)
        self.Lambda0 = np.asarray(Lambda0, dtype=np.float64)
        self.a0 = float(a0)
        self.b0 = float(b0)

        p = self.mu0.shape[0]
        if self.Lambda0.shape != (p, p):
            raise ValueError(
                f"Lambda0 must have shape ({p}, {p}). Got {self.Lambda0.shape}"
            )
        if self.a0 <= 0 or self.b0 <= 0:
            raise ValueError(
                f"a0 and b0 must be positive. Got a0={self.a0}, b0={self.b0}"
            )

    @property
    def n_params(self) -> int:
        return self.mu0.shape[0]

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"NIGPrior(mu0={self.mu0.tolist()}, "
            f"Lambda0_diag={np.diag(self.Lambda0).tolist()}, "
            f"a0={self.a0}, b0={self.b0})"
        )


class PriorSpec:
    """Specification of priors for change-point regression coefficients."""

    def __init__(
        self,
        # Coefficient means
        baseload: float = 0.0,
        slope: float = 0.0,
        slope2: Optional[float] = None,
        # Precision multiplier
        strength: float = DEFAULT_PRIOR_STRENGTH,
        # Noise variance
        noise_shape: float = DEFAULT_NOISE_SHAPE,
        noise_scale: float = 1.0,
    ) -> None:
        """
        Initialize prior specification.

        Parameters
        ----------
        baseload : float
            Prior mean for β₀ (weather-independent load). Default 0.0.
        slope : float
            Prior mean for β₁ (heating or cooling slope). Default 0.0.
        slope2 : float, optional
            Prior mean for β₂ (5P cooling slope). Falls back to `slope`.
        strength : float
            Diagonal prior precision. Higher → stronger prior.
            Default DEFAULT_PRIOR_STRENGTH (near-vague). Values below
            SINGULAR_TOL would make Λ₀ numerically singular.
        noise_shape : float
            Inverse-gamma shape a₀ for σ². Default 3.0.
        noise_scale : float
            Inverse-gamma scale b₀ for σ². Default 1.0.

        Raises
        ------
        ValueError
            If strength, noise_shape or noise_scale is not positive, or
            strength is below SINGULAR_TOL.
        """
        if strength <= 0:
            raise ValueError(f"strength must be positive. Got {strength}")
        if strength < SINGULAR_TOL:
            raise ValueError(
                f"strength must be at least {SINGULAR_TOL:g}; smaller values make "
                f"the prior precision singular. Got {strength}"
            )
        if noise_shape <= 0:
            raise ValueError(f"noise_shape must be positive. Got {noise_shape}")
        if noise_scale <= 0:
            raise ValueError(f"noise_scale must be positive. Got {noise_scale}")

        self.baseload = float(baseload)
        self.slope = float(slope)
        self.slope2 = float(slope2) if slope2 is not None else None
        self.strength = float(strength)
        self.noise_shape = float(noise_shape)
        self.noise_scale = float(noise_scale)

    def mean_vector(self, n_params: int) -> NDArray[np.float64]:
        """Prior mean μ₀ for a model with n_params coefficients (2 or 3)."""
        if n_params == 2:
            return np.array([self.baseload, self.slope])
        if n_params == 3:
            slope2 = self.slope2 if self.slope2 is not None else self.slope
            return np.array([self.baseload, self.slope, slope2])
        raise ValueError(f"n_params must be 2 or 3. Got {n_params}")

    def to_nig(self, n_params: int) -> NIGPrior:
        """
        Expand into the algebraic NIG prior for n_params coefficients.

        Returns
        -------
        NIGPrior
            μ₀, Λ₀ = strength·I, a₀, b₀
        """
        return NIGPrior(
            mu0=self.mean_vector(n_params),
            Lambda0=np.eye(n_params) * self.strength,
            a0=self.noise_shape,
            b0=self.noise_scale,
        )

    def replace(self, **changes) -> "PriorSpec":
        """Copy with some fields changed (e.g. a slider moved)."""
        fields = {
            "baseload": self.baseload,
            "slope": self.slope,
            "slope2": self.slope2,
            "strength": self.strength,
            "noise_shape": self.noise_shape,
            "noise_scale": self.noise_scale,
        }
        unknown = set(changes) - set(fields)
        if unknown:
            raise ValueError(f"Unknown prior fields: {sorted(unknown)}")
        fields.update(changes)
        return PriorSpec(**fields)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"PriorSpec(baseload={self.baseload}, slope={self.slope}, "
            f"slope2={self.slope2}, strength={self.strength}, "
            f"noise_shape={self.noise_shape}, noise_scale={self.noise_scale})"
        )


def default_prior_spec(
    temperatures: Sequence[float],
    energy: Sequence[float],
    model_shape: str,
    strength: float = DEFAULT_PRIOR_STRENGTH,
) -> PriorSpec:
    """
    Weakly-informative starting prior derived from the data scale.

    - baseload ≈ half the mean response
    - slope(s) ≈ 2 · sd(energy) / range(temperature)
    - noise scale ≈ observed variance, noise shape 3

    Values are rounded to whole units, like slider positions. The noise scale
    is floored at 1 so a constant response still yields a valid prior.

    Parameters
    ----------
    temperatures : Sequence[float]
        Outdoor temperatures
    energy : Sequence[float]
        Energy use, same length
    model_shape : str
        "3PH", "3PC" or "5P"
    strength : float
        Prior precision multiplier. Default DEFAULT_PRIOR_STRENGTH.

    Returns
    -------
    PriorSpec
    """
    validate_shape(model_shape)
    t = np.asarray(temperatures, dtype=np.float64)
    y = np.asarray(energy, dtype=np.float64)
    if t.size == 0 or t.shape != y.shape:
        raise ValueError(
            f"temperatures and energy must be non-empty and equal length. "
            f"Got {t.size} and {y.size}"
        )

    y_mean = float(np.mean(y))
    y_sd = float(np.std(y))
    t_range = float(np.max(t) - np.min(t))
    slope = round(2.0 * y_sd / t_range) if t_range > 0 else 0.0

    return PriorSpec(
        baseload=round(0.5 * y_mean),
        slope=slope,
        slope2=slope,
        strength=strength,
        noise_shape=DEFAULT_NOISE_SHAPE,
        noise_scale=max(round(y_sd * y_sd), 1.0),
    )
