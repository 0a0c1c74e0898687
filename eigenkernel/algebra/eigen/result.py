"""
Eigen-decomposition Result Types

Immutable containers produced by the symmetric and general pipelines and by the
intermediate reductions. Every array stored in them is marked read-only.
"""

import numpy as np
from typing import NamedTuple
from numpy.typing import NDArray

# ---------------------------------------------------------------------------------

def freeze(*arrays: NDArray) -> None:
    """Mark the arrays read-only."""
    for arr in arrays:
        arr.flags.writeable = False

# ---------------------------------------------------------------------------------
#! Intermediate forms
# ---------------------------------------------------------------------------------

class TridiagonalForm(NamedTuple):
    r"""
    Householder tridiagonalization of a symmetric matrix, A = Q T Q^T.

    Attributes:
        diagonal:
            Diagonal of T.
        off_diagonal:
            Subdiagonal of T stored at positions 1..n-1 (entry 0 is zero).
        transform:
            Accumulated orthogonal transform Q.
    """
    diagonal        : NDArray
    off_diagonal    : NDArray
    transform       : NDArray

    def matrix(self) -> NDArray:
        """Dense tridiagonal matrix T."""
        sub = self.off_diagonal[1:]
        return np.diag(self.diagonal) + np.diag(sub, k=1) + np.diag(sub, k=-1)

class HessenbergForm(NamedTuple):
    r"""
    Orthogonal Hessenberg reduction of a general matrix, A = Q H Q^T.

    Attributes:
        hessenberg:
            Upper Hessenberg matrix H (zeros below the first subdiagonal).
        transform:
            Accumulated orthogonal transform Q.
    """
    hessenberg      : NDArray
    transform       : NDArray

# ---------------------------------------------------------------------------------
#! Final results
# ---------------------------------------------------------------------------------

class SymmetricEigenResult(NamedTuple):
    """
    Result of the tridiagonal QL pipeline.

    Attributes:
        eigenvalues:
            Real eigenvalues in ascending order.
        eigenvectors:
            Orthonormal eigenvectors as columns.
        iterations:
            Total number of QL sweeps.
        converged:
            Always True, non-convergence raises instead.
    """
    eigenvalues     : NDArray
    eigenvectors    : NDArray
    iterations      : int   = 0
    converged       : bool  = True

    @property
    def real(self) -> NDArray:
        return self.eigenvalues

    @property
    def imag(self) -> NDArray:
        return np.zeros_like(self.eigenvalues)

    def __repr__(self):
        return (f"SymmetricEigenResult(n={len(self.eigenvalues)}, "
                f"converged={self.converged}, iterations={self.iterations})")

class GeneralEigenResult(NamedTuple):
    """
    Result of the Hessenberg / real Schur pipeline.

    Complex conjugate pairs occupy neighbouring slots i, i+1 with
    real[i] == real[i+1] and imag[i] == -imag[i+1] > 0.

    Attributes:
        real:
            Real parts of the eigenvalues (in deflation order).
        imag:
            Imaginary parts of the eigenvalues.
        eigenvectors:
            Real eigenvector matrix V with A V = V D, D block diagonal.
            For a complex pair the columns i, i+1 hold the real and the
            imaginary part of the eigenvector of real[i] + 1j imag[i].
        iterations:
            Total number of QR sweeps.
        converged:
            Always True, non-convergence raises instead.
    """
    real            : NDArray
    imag            : NDArray
    eigenvectors    : NDArray
    iterations      : int   = 0
    converged       : bool  = True

    @property
    def eigenvalues(self) -> NDArray:
        return self.real + 1j * self.imag

    def __repr__(self):
        n_cpx = int(np.count_nonzero(self.imag))
        return (f"GeneralEigenResult(n={len(self.real)}, complex={n_cpx}, "
                f"converged={self.converged}, iterations={self.iterations})")

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
