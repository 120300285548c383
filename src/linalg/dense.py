"""
Dense linear algebra for small regression systems.

Every matrix handled by the engine is at most 3×3 (the 5P model has three
coefficients), so the routines here favour transparent elimination loops over
LAPACK calls. The loops make the singular-system contract explicit:

    invert(M) is None   ⇔   some pivot |M_kk| < SINGULAR_TOL after partial pivoting

Callers treat None as a recoverable failure (e.g. drop one change-point
candidate) rather than an exception.

The Gram products XᵀX and Xᵀy are accumulated here and nowhere else, so the
OLS baseline and the conjugate update share exactly the same arithmetic.
"""

from typing import Optional
import numpy as np
from numpy.typing import NDArray


SINGULAR_TOL = 1e-14
CHOLESKY_FLOOR = 1e-15


def identity(n: int) -> NDArray[np.float64]:
    """n×n identity matrix."""
    return np.eye(n, dtype=np.float64)


def transpose(A: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.asarray(A, dtype=np.float64).T.copy()


def mat_mul(A: NDArray[np.float64], B: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Matrix product A @ B.

    Raises
    ------
    ValueError
        If the inner dimensions disagree.
    """
    A = np.asarray(A, dtype=np.float64)
    B = np.asarray(B, dtype=np.float64)
    if A.shape[1] != B.shape[0]:
        raise ValueError(
            f"Cannot multiply shapes {A.shape} and {B.shape}"
        )
    return A @ B


def mat_vec(A: NDArray[np.float64], v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Matrix-vector product A v."""
    return np.asarray(A, dtype=np.float64) @ np.asarray(v, dtype=np.float64)


def mat_add(A: NDArray[np.float64], B: NDArray[np.float64]) -> NDArray[np.float64]:
    A = np.asarray(A, dtype=np.float64)
    B = np.asarray(B, dtype=np.float64)
    if A.shape != B.shape:
        raise ValueError(f"Cannot add shapes {A.shape} and {B.shape}")
    return A + B


def mat_scale(A: NDArray[np.float64], s: float) -> NDArray[np.float64]:
    return np.asarray(A, dtype=np.float64) * s


def quad_form(x: NDArray[np.float64], A: NDArray[np.float64]) -> float:
    """Quadratic form xᵀ A x."""
    x = np.asarray(x, dtype=np.float64)
    return float(x @ mat_vec(A, x))


def gram(X: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Gram matrix XᵀX of a design matrix.

    Parameters
    ----------
    X : NDArray[np.float64]
        Design matrix, shape (n, p)

    Returns
    -------
    NDArray[np.float64]
        Symmetric matrix, shape (p, p)
    """
    X = np.asarray(X, dtype=np.float64)
    return X.T @ X


def cross(X: NDArray[np.float64], y: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Cross product Xᵀy.

    Parameters
    ----------
    X : NDArray[np.float64]
        Design matrix, shape (n, p)
    y : NDArray[np.float64]
        Response vector, shape (n,)

    Returns
    -------
    NDArray[np.float64]
        Shape (p,)
    """
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if X.shape[0] != y.shape[0]:
        raise ValueError(
            f"X has {X.shape[0]} rows but y has {y.shape[0]} entries"
        )
    return X.T @ y


def invert(M: NDArray[np.float64]) -> Optional[NDArray[np.float64]]:
    """
    Invert a square matrix by Gauss-Jordan elimination with partial pivoting.

    The augmented system [M | I] is reduced column by column. At each column
    the row with the largest pivot magnitude is swapped into place; if that
    magnitude is below SINGULAR_TOL the matrix is declared singular.

    Parameters
    ----------
    M : NDArray[np.float64]
        Square matrix, shape (n, n)

    Returns
    -------
    NDArray[np.float64] or None
        M⁻¹, or None when M is (numerically) singular.
    """
    M = np.asarray(M, dtype=np.float64)
    n = M.shape[0]
    if M.shape != (n, n):
        raise ValueError(f"Matrix must be square. Got shape {M.shape}")

    aug = np.hstack([M, np.eye(n)])

    for col in range(n):
        max_row = col + int(np.argmax(np.abs(aug[col:, col])))
        if max_row != col:
            aug[[col, max_row]] = aug[[max_row, col]]

        pivot = aug[col, col]
        if abs(pivot) < SINGULAR_TOL:
            return None

        aug[col] /= pivot
        for row in range(n):
            if row == col:
                continue
            aug[row] -= aug[row, col] * aug[col]

    return aug[:, n:].copy()


def determinant(M: NDArray[np.float64]) -> float:
    """
    Determinant of a square matrix.

    Closed-form cofactor expansion for 1×1, 2×2 and 3×3; LU decomposition with
    partial pivoting for anything larger (returns 0.0 on a vanishing pivot).
    """
    M = np.asarray(M, dtype=np.float64)
    n = M.shape[0]
    if M.shape != (n, n):
        raise ValueError(f"Matrix must be square. Got shape {M.shape}")

    if n == 1:
        return float(M[0, 0])
    if n == 2:
        return float(M[0, 0] * M[1, 1] - M[0, 1] * M[1, 0])
    if n == 3:
        return float(
            M[0, 0] * (M[1, 1] * M[2, 2] - M[1, 2] * M[2, 1])
            - M[0, 1] * (M[1, 0] * M[2, 2] - M[1, 2] * M[2, 0])
            + M[0, 2] * (M[1, 0] * M[2, 1] - M[1, 1] * M[2, 0])
        )

    A = M.copy()
    det = 1.0
    for i in range(n):
        max_row = i + int(np.argmax(np.abs(A[i:, i])))
        if max_row != i:
            A[[i, max_row]] = A[[max_row, i]]
            det = -det
        if abs(A[i, i]) < SINGULAR_TOL:
            return 0.0
        det *= A[i, i]
        for k in range(i + 1, n):
            A[k, i:] -= (A[k, i] / A[i, i]) * A[i, i:]

    return float(det)


def log_abs_determinant(M: NDArray[np.float64]) -> float:
    """log|det(M)|; -inf for a singular matrix."""
    det = determinant(M)
    if det == 0.0:
        return -np.inf
    return float(np.log(abs(det)))


def cholesky(S: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Lower-triangular Cholesky factor L with L Lᵀ = S.

    Diagonal terms are floored at CHOLESKY_FLOOR before the square root, so a
    positive semi-definite (or slightly indefinite, through rounding) input
    yields a finite factor instead of NaN.

    Parameters
    ----------
    S : NDArray[np.float64]
        Symmetric matrix, shape (n, n)

    Returns
    -------
    NDArray[np.float64]
        Lower-triangular factor, shape (n, n)
    """
    S = np.asarray(S, dtype=np.float64)
    n = S.shape[0]
    if S.shape != (n, n):
        raise ValueError(f"Matrix must be square. Got shape {S.shape}")

    L = np.zeros((n, n))
    for i in range(n):
        for j in range(i + 1):
            s = S[i, j] - L[i, :j] @ L[j, :j]
            if i == j:
                L[i, j] = np.sqrt(max(s, CHOLESKY_FLOOR))
            else:
                L[i, j] = s / L[j, j]
    return L
