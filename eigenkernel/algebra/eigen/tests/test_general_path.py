"""
Test suite for the general path: Hessenberg reduction, Francis double-shift
QR iteration and the complex division used in the back-substitution.
"""

import numpy as np
import pytest

from eigenkernel.algebra.eigen import (
    hessenberg_reduce, schur_eigen, general_eigen, cdiv,
    HessenbergForm, GeneralEigenResult, NumericalNonConvergenceError,
)

# ----------------------------------
#! Helpers
# ----------------------------------

def create_general_matrix(n, seed=42):
    """Random non-symmetric matrix, generically with complex pairs."""
    rng = np.random.default_rng(seed)
    return rng.standard_normal((n, n))

def block_diagonal(real, imag):
    """D with [[l, m], [-m, l]] blocks for the complex pairs."""
    n = len(real)
    D = np.diag(real)
    for i in range(n):
        if imag[i] > 0:
            D[i, i + 1] = imag[i]
        elif imag[i] < 0:
            D[i, i - 1] = imag[i]
    return D

def sorted_complex(values):
    return np.sort_complex(np.asarray(values, dtype=np.complex128))

# ----------------------------------
#! Complex division
# ----------------------------------

class TestComplexDivision:

    def test_basic(self):
        q = cdiv(1.0, 2.0, 3.0, 4.0)
        assert isinstance(q, complex)
        assert np.isclose(q, (11.0 + 2.0j) / 25.0, rtol=1e-15)

    def test_purely_imaginary_divisor(self):
        assert np.isclose(cdiv(1.0, 0.0, 0.0, 1.0), -1.0j)

    @pytest.mark.parametrize("x, y", [
        (3.0 - 1.0j, 0.5 + 7.0j),
        (-2.0 + 0.25j, -4.0 - 1.0j),
        (1e-3 + 5.0j, 2.0 + 2.0j),
    ])
    def test_matches_python_division(self, x, y):
        q = cdiv(x.real, x.imag, y.real, y.imag)
        assert np.isclose(q, x / y, rtol=1e-14)

    def test_no_overflow_for_large_components(self):
        # |y|^2 overflows, the result does not
        q = cdiv(1e300, 1e300, 1e300, 1e300)
        assert np.isfinite(q.real) and np.isfinite(q.imag)
        assert np.isclose(q, 1.0 + 0.0j)

# ----------------------------------
#! Hessenberg reduction
# ----------------------------------

class TestHessenbergReduce:

    @pytest.mark.parametrize("n", [1, 2, 3, 6, 15])
    def test_similarity(self, n):
        A       = create_general_matrix(n, seed=n)
        form    = hessenberg_reduce(A)
        H, Q    = form.hessenberg, form.transform

        assert isinstance(form, HessenbergForm)
        assert np.array_equal(np.tril(H, k=-2), np.zeros((n, n)))
        assert np.allclose(Q.T @ Q, np.eye(n), atol=1e-12)
        assert np.allclose(Q @ H @ Q.T, A, atol=1e-12)

    def test_input_untouched(self):
        A       = create_general_matrix(5)
        A_copy  = A.copy()
        hessenberg_reduce(A)
        assert np.array_equal(A, A_copy)

    def test_read_only(self):
        form = hessenberg_reduce(create_general_matrix(4))
        with pytest.raises(ValueError):
            form.hessenberg[0, 0] = 0.0

# ----------------------------------
#! Real Schur iteration
# ----------------------------------

class TestGeneralEigen:

    def test_rotation_generator(self):
        result = general_eigen(np.array([[0.0, -1.0], [1.0, 0.0]]))
        assert isinstance(result, GeneralEigenResult)
        assert np.allclose(result.real, [0.0, 0.0], atol=1e-15)
        assert np.allclose(result.imag, [1.0, -1.0], atol=1e-15)

    def test_upper_triangular(self):
        result = general_eigen(np.array([[1.0, 2.0], [0.0, 3.0]]))
        assert np.allclose(np.sort(result.real), [1.0, 3.0], atol=1e-14)
        assert np.all(result.imag == 0.0)

    @pytest.mark.parametrize("n", [1, 2, 3, 5, 8, 20])
    def test_against_numpy(self, n):
        A       = create_general_matrix(n, seed=200 + n)
        result  = general_eigen(A)
        ours    = sorted_complex(result.eigenvalues)
        ref     = sorted_complex(np.linalg.eigvals(A))
        assert np.allclose(ours, ref, atol=1e-9)

    @pytest.mark.parametrize("n", [4, 9, 16])
    def test_block_eigen_equation(self, n):
        A       = create_general_matrix(n, seed=3 * n)
        result  = general_eigen(A)
        V       = result.eigenvectors
        D       = block_diagonal(result.real, result.imag)
        assert np.allclose(A @ V, V @ D, atol=1e-9)

    def test_conjugate_pairs_are_adjacent(self):
        result = general_eigen(create_general_matrix(12, seed=9))
        e, d   = result.imag, result.real
        i      = 0
        while i < len(e):
            if e[i] != 0.0:
                assert e[i] > 0.0
                assert e[i + 1] == -e[i]
                assert d[i + 1] == d[i]
                i += 2
            else:
                i += 1

    def test_nilpotent_block(self):
        result = general_eigen(np.array([[0.0, 1.0], [0.0, 0.0]]))
        assert np.allclose(result.real, 0.0)
        assert np.allclose(result.imag, 0.0)
        assert np.all(np.isfinite(result.eigenvectors))

    def test_zero_matrix(self):
        result = general_eigen(np.zeros((3, 3)))
        assert np.allclose(result.real, 0.0)
        assert np.allclose(result.imag, 0.0)
        assert result.converged
        assert result.iterations == 0
        assert np.allclose(result.eigenvectors, np.eye(3))

    def test_zero_matrix_from_hessenberg_form(self):
        result = schur_eigen(hessenberg_reduce(np.zeros((4, 4))), max_iter=1)
        assert result.iterations == 0
        assert np.array_equal(result.real, np.zeros(4))

    def test_companion_matrix_roots(self):
        # x^3 - 6x^2 + 11x - 6 = (x - 1)(x - 2)(x - 3)
        C       = np.array([[6.0, -11.0, 6.0],
                            [1.0,   0.0, 0.0],
                            [0.0,   1.0, 0.0]])
        result  = general_eigen(C)
        assert np.allclose(np.sort(result.real), [1.0, 2.0, 3.0], atol=1e-10)
        assert np.allclose(result.imag, 0.0)

    def test_pipeline_stages_compose(self):
        A       = create_general_matrix(7, seed=21)
        staged  = schur_eigen(hessenberg_reduce(A))
        direct  = general_eigen(A)
        assert np.array_equal(staged.real, direct.real)
        assert np.array_equal(staged.eigenvectors, direct.eigenvectors)

    def test_result_read_only(self):
        result = general_eigen(create_general_matrix(3))
        with pytest.raises(ValueError):
            result.real[0] = 0.0

# ----------------------------------
#! Reference implementation
# ----------------------------------

class TestAgainstScipy:

    def test_eigenvalues(self):
        sla     = pytest.importorskip("scipy.linalg")
        A       = create_general_matrix(14, seed=77)
        ours    = sorted_complex(general_eigen(A).eigenvalues)
        ref     = sorted_complex(sla.eigvals(A))
        assert np.allclose(ours, ref, atol=1e-9)

    def test_hessenberg_same_spectrum(self):
        sla     = pytest.importorskip("scipy.linalg")
        A       = create_general_matrix(10, seed=5)
        H_ref   = sla.hessenberg(A)
        H       = hessenberg_reduce(A).hessenberg
        assert np.allclose(sorted_complex(np.linalg.eigvals(H)), sorted_complex(np.linalg.eigvals(H_ref)), atol=1e-9)

# ----------------------------------
#! Iteration budget
# ----------------------------------

class TestGeneralBudget:

    def test_budget_exhausted(self):
        A = create_general_matrix(6, seed=17)
        with pytest.raises(NumericalNonConvergenceError) as exc:
            general_eigen(A, max_iter=1)
        assert exc.value.method     == 'qr'
        assert exc.value.iterations == 1
        assert 0 <= exc.value.index < 6

    def test_error_is_runtime_error(self):
        with pytest.raises(RuntimeError):
            general_eigen(create_general_matrix(6, seed=17), max_iter=1)

# ----------------------------------
#! EOF
# ----------------------------------
