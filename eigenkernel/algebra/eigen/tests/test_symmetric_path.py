"""
Test suite for the symmetric path: Householder tridiagonalization and the
implicit-shift QL iteration.

Compares with numpy's LAPACK driver and checks orthogonality, ordering and
the immutability of the returned arrays.
"""

import numpy as np
import pytest

from eigenkernel.algebra.eigen import (
    tridiagonalize, diagonalize_tridiagonal, symmetric_eigen,
    TridiagonalForm, SymmetricEigenResult, NumericalNonConvergenceError,
)

# ----------------------------------
#! Helper functions to create test matrices
# ----------------------------------

def create_symmetric_matrix(n, seed=42):
    """Random symmetric matrix, exactly symmetric bitwise."""
    rng = np.random.default_rng(seed)
    B   = rng.standard_normal((n, n))
    return 0.5 * (B + B.T)

def create_tridiagonal_matrix(n, diagonal=2.0, off_diagonal=-1.0):
    """Symmetric tridiagonal matrix (1D Laplacian)."""
    A = np.diag(np.full(n, diagonal))
    if n > 1:
        A += np.diag(np.full(n - 1, off_diagonal), k=1)
        A += np.diag(np.full(n - 1, off_diagonal), k=-1)
    return A

# ----------------------------------
#! Tridiagonalization
# ----------------------------------

class TestTridiagonalize:

    @pytest.mark.parametrize("n", [1, 2, 3, 7, 20])
    def test_similarity(self, n):
        A       = create_symmetric_matrix(n, seed=n)
        form    = tridiagonalize(A)
        Q       = form.transform
        T       = form.matrix()

        assert isinstance(form, TridiagonalForm)
        assert np.allclose(Q.T @ Q, np.eye(n), atol=1e-12)
        assert np.allclose(Q @ T @ Q.T, A, atol=1e-12)

    def test_first_off_diagonal_is_zero(self):
        form = tridiagonalize(create_symmetric_matrix(5))
        assert form.off_diagonal[0] == 0.0

    def test_input_untouched(self):
        A       = create_symmetric_matrix(6)
        A_copy  = A.copy()
        tridiagonalize(A)
        assert np.array_equal(A, A_copy)

    def test_read_only(self):
        form = tridiagonalize(create_symmetric_matrix(4))
        with pytest.raises(ValueError):
            form.diagonal[0] = 1.0
        with pytest.raises(ValueError):
            form.transform[0, 0] = 1.0

    def test_zero_matrix(self):
        form = tridiagonalize(np.zeros((4, 4)))
        assert np.allclose(form.diagonal, 0.0)
        assert np.allclose(form.off_diagonal, 0.0)
        assert np.allclose(form.transform @ form.transform.T, np.eye(4))

# ----------------------------------
#! QL iteration
# ----------------------------------

class TestSymmetricEigen:

    @pytest.mark.parametrize("n", [1, 2, 5, 10, 30])
    def test_against_numpy(self, n):
        A       = create_symmetric_matrix(n, seed=100 + n)
        result  = symmetric_eigen(A)
        assert isinstance(result, SymmetricEigenResult)
        assert np.allclose(result.eigenvalues, np.linalg.eigvalsh(A), atol=1e-10)

    @pytest.mark.parametrize("n", [3, 8, 25])
    def test_eigen_equation_and_orthogonality(self, n):
        A       = create_symmetric_matrix(n, seed=7 * n)
        result  = symmetric_eigen(A)
        V       = result.eigenvectors
        D       = np.diag(result.eigenvalues)
        assert np.allclose(A @ V, V @ D, atol=1e-10)
        assert np.allclose(V.T @ V, np.eye(n), atol=1e-12)
        assert np.allclose(V @ D @ V.T, A, atol=1e-10)

    def test_ascending_order(self):
        result = symmetric_eigen(create_symmetric_matrix(15, seed=1))
        assert np.all(np.diff(result.eigenvalues) >= 0.0)

    def test_simple_2x2(self):
        result = symmetric_eigen(np.array([[2.0, 1.0], [1.0, 2.0]]))
        assert np.allclose(result.eigenvalues, [1.0, 3.0], atol=1e-14)
        # eigenvector of 3 is (1, 1)/sqrt(2) up to sign
        assert np.allclose(np.abs(result.eigenvectors[:, 1]), [2 ** -0.5, 2 ** -0.5], atol=1e-14)

    def test_diagonal_matrix(self):
        result = symmetric_eigen(np.diag([3.0, 1.0, 2.0]))
        assert np.allclose(result.eigenvalues, [1.0, 2.0, 3.0], atol=1e-14)
        assert np.allclose(np.abs(result.eigenvectors), np.eye(3)[:, [1, 2, 0]], atol=1e-14)

    def test_identity(self):
        result = symmetric_eigen(np.eye(5))
        assert np.allclose(result.eigenvalues, 1.0)
        assert np.allclose(result.eigenvectors.T @ result.eigenvectors, np.eye(5), atol=1e-14)

    def test_one_by_one(self):
        result = symmetric_eigen(np.array([[-4.5]]))
        assert result.eigenvalues[0] == -4.5
        assert np.allclose(result.eigenvectors, [[1.0]])
        assert result.iterations == 0

    def test_laplacian_spectrum(self):
        n       = 12
        result  = symmetric_eigen(create_tridiagonal_matrix(n))
        k       = np.arange(1, n + 1)
        exact   = 2.0 - 2.0 * np.cos(k * np.pi / (n + 1))
        assert np.allclose(result.eigenvalues, np.sort(exact), atol=1e-12)

    def test_degenerate_spectrum(self):
        rng     = np.random.default_rng(3)
        Q, _    = np.linalg.qr(rng.standard_normal((6, 6)))
        A       = Q @ np.diag([1.0, 1.0, 1.0, 2.0, 2.0, 5.0]) @ Q.T
        A       = 0.5 * (A + A.T)
        result  = symmetric_eigen(A)
        V       = result.eigenvectors
        assert np.allclose(result.eigenvalues, [1.0, 1.0, 1.0, 2.0, 2.0, 5.0], atol=1e-12)
        assert np.allclose(V.T @ V, np.eye(6), atol=1e-12)

    def test_result_read_only_and_converged(self):
        result = symmetric_eigen(create_symmetric_matrix(4))
        assert result.converged
        assert result.iterations > 0
        assert np.all(result.imag == 0.0)
        with pytest.raises(ValueError):
            result.eigenvalues[0] = 0.0

    def test_pipeline_stages_compose(self):
        A       = create_symmetric_matrix(9, seed=11)
        staged  = diagonalize_tridiagonal(tridiagonalize(A))
        direct  = symmetric_eigen(A)
        assert np.array_equal(staged.eigenvalues, direct.eigenvalues)
        assert np.array_equal(staged.eigenvectors, direct.eigenvectors)

    def test_form_not_modified_by_iteration(self):
        form    = tridiagonalize(create_symmetric_matrix(6))
        d0      = form.diagonal.copy()
        diagonalize_tridiagonal(form)
        assert np.array_equal(form.diagonal, d0)

# ----------------------------------
#! Reference implementation
# ----------------------------------

class TestAgainstScipy:

    def test_eigenvectors_up_to_sign(self):
        sla         = pytest.importorskip("scipy.linalg")
        A           = create_symmetric_matrix(12, seed=19)
        w, U        = sla.eigh(A)
        result      = symmetric_eigen(A)
        V           = result.eigenvectors
        assert np.allclose(result.eigenvalues, w, atol=1e-10)
        # simple spectrum: columns agree up to sign
        overlaps    = np.abs(np.sum(U * V, axis=0))
        assert np.allclose(overlaps, 1.0, atol=1e-8)

# ----------------------------------
#! Iteration budget
# ----------------------------------

class TestSymmetricBudget:

    def test_budget_exhausted(self):
        A = create_symmetric_matrix(6, seed=3)
        with pytest.raises(NumericalNonConvergenceError) as exc:
            symmetric_eigen(A, max_iter=1)
        assert exc.value.method     == 'ql'
        assert exc.value.iterations == 1
        assert 0 <= exc.value.index < 6

    def test_default_budget_suffices(self):
        result = symmetric_eigen(create_symmetric_matrix(40, seed=5))
        assert result.converged

# ----------------------------------
#! EOF
# ----------------------------------
