"""
Random variate generators driven by an explicit numpy Generator.

Only uniform draws are taken from the generator; the transforms are spelled
out so the sampling path is the same on every platform and numpy version:

- Normal: Box–Muller
- Gamma(shape, 1): Marsaglia–Tsang squeeze/accept-reject, with the
  boost G(k) = G(k + 1) · U^(1/k) for shape k < 1
- Inverse-gamma: b / Gamma(a, 1)
- Multivariate normal: μ + L z with L the Cholesky factor of the covariance
"""

from typing import Optional
import math
import numpy as np
from numpy.typing import NDArray

from linalg import cholesky


def make_rng(
    rng: Optional[np.random.Generator] = None,
    random_seed: Optional[int] = None,
) -> np.random.Generator:
    """
    Resolve the random source for a sampling run.

    An explicit generator wins; otherwise a new one is seeded from
    `random_seed` (fresh OS entropy when None).
    """
    if rng is not None:
        return rng
    return np.random.default_rng(random_seed)


def _open_uniform(rng: np.random.Generator) -> float:
    """Uniform draw on (0, 1)."""
    u = 0.0
    while u == 0.0:
        u = rng.random()
    return u


def standard_normal(rng: np.random.Generator) -> float:
    """One N(0, 1) draw by the Box–Muller transform."""
    u = _open_uniform(rng)
    v = _open_uniform(rng)
    return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)


def gamma(shape: float, rng: np.random.Generator, scale: float = 1.0) -> float:
    """
    One Gamma(shape, scale) draw (Marsaglia & Tsang, 2000).

    Parameters
    ----------
    shape : float
        Shape k > 0
    rng : np.random.Generator
        Random source
    scale : float
        Scale θ. Default 1.0.

    Returns
    -------
    float
        Positive draw
    """
    if shape < 1.0:
        return gamma(shape + 1.0, rng, scale) * _open_uniform(rng) ** (1.0 / shape)

    d = shape - 1.0 / 3.0
    c = 1.0 / math.sqrt(9.0 * d)
    while True:
        x = standard_normal(rng)
        v = 1.0 + c * x
        while v <= 0.0:
            x = standard_normal(rng)
            v = 1.0 + c * x
        v = v * v * v
        u = _open_uniform(rng)
        if u < 1.0 - 0.0331 * x ** 4:
            return d * v * scale
        if math.log(u) < 0.5 * x * x + d * (1.0 - v + math.log(v)):
            return d * v * scale


def inverse_gamma(a: float, b: float, rng: np.random.Generator) -> float:
    """One InvGamma(shape=a, scale=b) draw."""
    return b / gamma(a, rng)


def multivariate_normal(
    mean: NDArray[np.float64],
    cov: NDArray[np.float64],
    rng: np.random.Generator,
) -> NDArray[np.float64]:
    """
    One N(mean, cov) draw via the Cholesky factor of cov.

    Parameters
    ----------
    mean : NDArray[np.float64]
        Mean vector, shape (p,)
    cov : NDArray[np.float64]
        Covariance matrix, shape (p, p)
    rng : np.random.Generator
        Random source

    Returns
    -------
    NDArray[np.float64]
        Draw, shape (p,)
    """
    mean = np.asarray(mean, dtype=np.float64)
    L = cholesky(cov)
    z = np.array([standard_normal(rng) for _ in range(mean.shape[0])])
    return mean + L @ z
