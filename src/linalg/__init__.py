"""
Dense linear algebra for the regression engine.

Small-matrix primitives (at most 3×3 in practice) shared by the OLS baseline
and the conjugate Bayesian update:
- Products, transpose, sums, Gram matrices (XᵀX, Xᵀy)
- Gauss-Jordan inversion returning None for singular systems
- Determinants (closed form up to 3×3, LU otherwise)
- Cholesky factorization with a diagonal floor
"""

from linalg.dense import (
    SINGULAR_TOL,
    identity,
    transpose,
    mat_mul,
    mat_vec,
    mat_add,
    mat_scale,
    quad_form,
    gram,
    cross,
    invert,
    determinant,
    log_abs_determinant,
    cholesky,
)

__all__ = [
    "SINGULAR_TOL",
    "identity",
    "transpose",
    "mat_mul",
    "mat_vec",
    "mat_add",
    "mat_scale",
    "quad_form",
    "gram",
    "cross",
    "invert",
    "determinant",
    "log_abs_determinant",
    "cholesky",
]
