"""
Unit tests for the dense linear algebra kernel.

Tests cover:
- Gauss-Jordan inversion and the singular (None) contract
- Determinants: closed form and LU paths
- Cholesky factorization and its diagonal floor
- Gram products shared by OLS and Bayesian paths
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose, assert_array_almost_equal

from linalg import (
    cholesky,
    cross,
    determinant,
    gram,
    identity,
    invert,
    log_abs_determinant,
    mat_add,
    mat_mul,
    mat_scale,
    mat_vec,
    quad_form,
    transpose,
)


class TestInvert:
    """Tests for Gauss-Jordan inversion."""

    def test_two_by_two(self) -> None:
        """Test inverse against numpy."""
        M = np.array([[4.0, 7.0], [2.0, 6.0]])
        assert_allclose(invert(M), np.linalg.inv(M), rtol=1e-12)

    def test_requires_pivoting(self) -> None:
        """Test matrix with a zero leading entry (needs row swap)."""
        M = np.array([[0.0, 1.0], [1.0, 0.0]])
        assert_array_almost_equal(invert(M), M)

    def test_three_by_three_spd(self) -> None:
        """Test a symmetric positive-definite 3×3 matrix."""
        A = np.array([[2.0, 1.0, 0.5], [1.0, 3.0, 0.2], [0.5, 0.2, 1.5]])
        inv = invert(A)
        assert_allclose(inv, np.linalg.inv(A), rtol=1e-10)
        assert_allclose(A @ inv, np.eye(3), atol=1e-12)

    def test_singular_returns_none(self) -> None:
        """Test that a singular matrix yields None instead of raising."""
        M = np.array([[1.0, 2.0], [2.0, 4.0]])
        assert invert(M) is None

    def test_zero_column_returns_none(self) -> None:
        """Test Gram matrix of a design with an all-zero column."""
        X = np.array([[1.0, 0.0], [1.0, 0.0], [1.0, 0.0]])
        assert invert(gram(X)) is None

    def test_non_square_raises(self) -> None:
        with pytest.raises(ValueError, match="square"):
            invert(np.ones((2, 3)))

    def test_input_not_modified(self) -> None:
        """Test that inversion works on a copy."""
        M = np.array([[4.0, 7.0], [2.0, 6.0]])
        original = M.copy()
        invert(M)
        assert_array_almost_equal(M, original)


class TestDeterminant:
    """Tests for determinants."""

    @pytest.mark.parametrize("n", [1, 2, 3, 4, 5])
    def test_matches_numpy(self, n: int) -> None:
        """Test closed-form (n ≤ 3) and LU (n > 3) paths."""
        rng = np.random.default_rng(n)
        M = rng.normal(size=(n, n))
        assert_allclose(determinant(M), np.linalg.det(M), rtol=1e-10)

    def test_singular_lu_path(self) -> None:
        """Test that a rank-deficient 4×4 matrix has zero determinant."""
        M = np.array([
            [1.0, 2.0, 3.0, 4.0],
            [2.0, 4.0, 6.0, 8.0],
            [1.0, 0.0, 0.0, 0.0],
            [0.0, 1.0, 0.0, 0.0],
        ])
        assert abs(determinant(M)) < 1e-12

    def test_log_abs_determinant(self) -> None:
        M = np.diag([2.0, 3.0, 4.0])
        assert_allclose(log_abs_determinant(M), np.log(24.0))
        assert log_abs_determinant(np.zeros((2, 2))) == -np.inf


class TestCholesky:
    """Tests for Cholesky factorization."""

    def test_reconstructs_matrix(self) -> None:
        S = np.array([[4.0, 2.0, 0.6], [2.0, 5.0, 1.0], [0.6, 1.0, 3.0]])
        L = cholesky(S)
        assert_allclose(L @ L.T, S, rtol=1e-12)
        assert_allclose(L, np.linalg.cholesky(S), rtol=1e-12)

    def test_lower_triangular(self) -> None:
        S = np.array([[2.0, 0.5], [0.5, 1.0]])
        L = cholesky(S)
        assert L[0, 1] == 0.0

    def test_semidefinite_input_is_finite(self) -> None:
        """Test that the diagonal floor avoids NaN on a singular input."""
        L = cholesky(np.zeros((3, 3)))
        assert np.all(np.isfinite(L))
        assert np.all(np.diag(L) > 0)


class TestProducts:
    """Tests for products and elementwise helpers."""

    def test_gram_and_cross(self) -> None:
        X = np.array([[1.0, 15.0], [1.0, 0.0], [1.0, 3.0]])
        y = np.array([10.0, 20.0, 30.0])
        assert_allclose(gram(X), X.T @ X)
        assert_allclose(cross(X, y), X.T @ y)

    def test_cross_length_mismatch(self) -> None:
        with pytest.raises(ValueError, match="rows"):
            cross(np.ones((3, 2)), np.ones(4))

    def test_mat_mul_shape_mismatch(self) -> None:
        with pytest.raises(ValueError, match="multiply"):
            mat_mul(np.ones((2, 3)), np.ones((2, 3)))

    def test_basic_helpers(self) -> None:
        A = np.array([[1.0, 2.0], [3.0, 4.0]])
        x = np.array([1.0, -1.0])
        assert_allclose(mat_mul(A, identity(2)), A)
        assert_allclose(transpose(A), A.T)
        assert_allclose(mat_add(A, A), 2 * A)
        assert_allclose(mat_scale(A, 0.5), A / 2)
        assert_allclose(mat_vec(A, x), [-1.0, -1.0])
        assert quad_form(x, A) == pytest.approx(0.0)
