"""
Joint posterior sampler for NIG regression posteriors.

Draws (σ², β) pairs from

    σ² | y      ~ InvGamma(aₙ, bₙ)
    β  | σ², y  ~ N(μₙ, σ² Λₙ⁻¹)

Each pair is an exact, independent posterior draw: no chains, no burn-in,
no convergence diagnostics. These draws propagate full parameter uncertainty
into derived quantities (e.g. total savings) whose distribution has no closed
form.
"""

from typing import Optional, Tuple
import numpy as np
from numpy.typing import NDArray

from linalg import mat_scale
from regression import PosteriorParameters
from simulation.random_draws import inverse_gamma, make_rng, multivariate_normal


class PosteriorSampler:
    """
    Monte Carlo sampler over a conjugate regression posterior.

    Attributes
    ----------
    params : PosteriorParameters
        NIG posterior to draw from
    rng : np.random.Generator
        Random source (injected or seeded)
    """

    def __init__(
        self,
        params: PosteriorParameters,
        rng: Optional[np.random.Generator] = None,
        random_seed: Optional[int] = None,
    ) -> None:
        """
        Initialize posterior sampler.

        Parameters
        ----------
        params : PosteriorParameters
            NIG posterior
        rng : np.random.Generator, optional
            Random source. Takes precedence over random_seed.
        random_seed : int, optional
            Seed for a fresh generator when rng is None.
        """
        self.params = params
        self.rng = make_rng(rng, random_seed)

    def draw_noise_variance(self) -> float:
        """σ² ~ InvGamma(aₙ, bₙ)."""
        return inverse_gamma(self.params.a_n, self.params.b_n, self.rng)

    def draw_coefficients(self, sigma2: float) -> NDArray[np.float64]:
        """β ~ N(μₙ, σ² Λₙ⁻¹) for a given σ²."""
        cov = mat_scale(self.params.Lambda_n_inv, sigma2)
        return multivariate_normal(self.params.mu_n, cov, self.rng)

    def draw(self, n_samples: int) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """
        Draw n_samples joint posterior samples.

        Parameters
        ----------
        n_samples : int
            Number of independent draws (> 0)

        Returns
        -------
        sigma2 : NDArray[np.float64]
            Noise variance draws, shape (n_samples,)
        beta : NDArray[np.float64]
            Coefficient draws, shape (n_samples, n_params)
        """
        if n_samples <= 0:
            raise ValueError(f"n_samples must be positive. Got {n_samples}")

        sigma2 = np.zeros(n_samples)
        beta = np.zeros((n_samples, self.params.n_params))
        for s in range(n_samples):
            sigma2[s] = self.draw_noise_variance()
            beta[s, :] = self.draw_coefficients(sigma2[s])

        return sigma2, beta

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"PosteriorSampler(n_params={self.params.n_params}, "
            f"a_n={self.params.a_n:.3g}, b_n={self.params.b_n:.6g})"
        )
