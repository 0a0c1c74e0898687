r"""
Symmetric Eigenvalue Decomposition (tred2 + tql2)

Computes all eigenvalues and orthonormal eigenvectors of a real symmetric
matrix in two stages:

    1. Householder reduction to tridiagonal form,
        $$
        A = Q T Q^T,
        $$
       with the orthogonal Q accumulated in place (tred2).
    2. Implicit-shift QL iteration on T, rotations accumulated into Q,
       followed by an ascending sort of the eigenpairs (tql2).

Both stages are compiled with numba; the Python wrappers copy the input,
run the kernels on private buffers and return immutable results.

References:
    - Bowdler, Martin, Reinsch, Wilkinson, "Handbook for Automatic Computation",
      Vol. II - Linear Algebra (Algol tred2 / tql2), and EISPACK.
    - Golub & Van Loan, "Matrix Computations" (4th ed.), Chapter 8.

File        : eigenkernel/algebra/eigen/symmetric.py
"""

import math
from typing import Optional, Tuple, TYPE_CHECKING

import numba
import numpy as np
from numpy.typing import NDArray

from .result import TridiagonalForm, SymmetricEigenResult, freeze
from .errors import NumericalNonConvergenceError
from .config import get_default_config

if TYPE_CHECKING:
    from ...common.flog import Logger

# ----------------------------------------------------------------------------------------
#! Constants
# ----------------------------------------------------------------------------------------

EPS         = 2.0 ** -52    # relative machine precision of float64
TINY_NORM   = 1e-32         # substitute for an exactly zero Householder norm

# ----------------------------------------------------------------------------------------
#! Kernels
# ----------------------------------------------------------------------------------------

@numba.njit(cache=True, error_model='numpy')
def _tred2(V: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    '''
    Householder tridiagonalization. V holds the symmetric matrix on entry and
    the accumulated orthogonal transform on exit.

    Returns (d, e, V): diagonal, subdiagonal (e[0] = 0) and the transform.
    '''
    n   = V.shape[0]
    d   = np.zeros(n)
    e   = np.zeros(n)
    for j in range(n):
        d[j] = V[n - 1, j]

    for i in range(n - 1, 0, -1):
        # scale the sub-row to avoid under/overflow
        scale   = 0.0
        h       = 0.0
        for k in range(i):
            scale += abs(d[k])

        if scale == 0.0:
            # already reduced, copy the row through
            e[i] = d[i - 1]
            for j in range(i):
                d[j]    = V[i - 1, j]
                V[i, j] = 0.0
                V[j, i] = 0.0
        else:
            for k in range(i):
                d[k]    /= scale
                h       += d[k] * d[k]
            f = d[i - 1]
            g = math.sqrt(h)
            if f > 0:
                g = -g
            e[i]        = scale * g
            h           = h - f * g
            d[i - 1]    = f - g
            for j in range(i):
                e[j] = 0.0

            # similarity transformation on the remaining columns
            for j in range(i):
                f       = d[j]
                V[j, i] = f
                g       = e[j] + V[j, j] * f
                for k in range(j + 1, i):
                    g       += V[k, j] * d[k]
                    e[k]    += V[k, j] * f
                e[j] = g

            f = 0.0
            if h == 0.0:
                h = TINY_NORM
            for j in range(i):
                e[j]    /= h
                f       += e[j] * d[j]
            hh = f / (h + h)
            for j in range(i):
                e[j] -= hh * d[j]
            for j in range(i):
                f = d[j]
                g = e[j]
                for k in range(j, i):
                    V[k, j] -= (f * e[k] + g * d[k])
                d[j]    = V[i - 1, j]
                V[i, j] = 0.0
        d[i] = h

    # accumulate the transformations
    for i in range(n - 1):
        V[n - 1, i] = V[i, i]
        V[i, i]     = 1.0
        h           = d[i + 1]
        if h != 0.0:
            for k in range(i + 1):
                d[k] = V[k, i + 1] / h
            for j in range(i + 1):
                g = 0.0
                for k in range(i + 1):
                    g += V[k, i + 1] * V[k, j]
                for k in range(i + 1):
                    V[k, j] -= g * d[k]
        for k in range(i + 1):
            V[k, i + 1] = 0.0

    for j in range(n):
        d[j]        = V[n - 1, j]
        V[n - 1, j] = 0.0
    V[n - 1, n - 1] = 1.0
    e[0]            = 0.0
    return d, e, V

@numba.njit(cache=True, error_model='numpy')
def _tql2(d: np.ndarray, e: np.ndarray, V: np.ndarray, max_iter: int):
    '''
    Implicit-shift QL on the tridiagonal (d, e), rotations accumulated into V.

    Returns (d, e, V, iterations, failed). failed is -1 on success, otherwise
    the index of the eigenvalue that exhausted max_iter.
    '''
    n = d.shape[0]
    for i in range(1, n):
        e[i - 1] = e[i]
    e[n - 1] = 0.0

    f       = 0.0
    tst1    = 0.0
    total   = 0
    for l in range(n):
        # find a small subdiagonal element
        tst1    = max(tst1, abs(d[l]) + abs(e[l]))
        m       = l
        while m < n:
            if abs(e[m]) <= EPS * tst1:
                break
            m += 1

        # m == l means d[l] is already an eigenvalue
        if m > l:
            it = 0
            while True:
                it      += 1
                total   += 1

                # implicit shift
                g = d[l]
                p = (d[l + 1] - g) / (2.0 * e[l])
                r = math.hypot(p, 1.0)
                if p < 0:
                    r = -r
                d[l]        = e[l] / (p + r)
                d[l + 1]    = e[l] * (p + r)
                dl1         = d[l + 1]
                h           = g - d[l]
                for i in range(l + 2, n):
                    d[i] -= h
                f += h

                # QL sweep from m-1 back to l
                p   = d[m]
                c   = 1.0
                c2  = c
                c3  = c
                el1 = e[l + 1]
                s   = 0.0
                s2  = 0.0
                for i in range(m - 1, l - 1, -1):
                    c3          = c2
                    c2          = c
                    s2          = s
                    g           = c * e[i]
                    h           = c * p
                    r           = math.hypot(p, e[i])
                    e[i + 1]    = s * r
                    s           = e[i] / r
                    c           = p / r
                    p           = c * d[i] - s * g
                    d[i + 1]    = h + s * (c * g + s * d[i])
                    for k in range(n):
                        h           = V[k, i + 1]
                        V[k, i + 1] = s * V[k, i] + c * h
                        V[k, i]     = c * V[k, i] - s * h

                p       = -s * s2 * c3 * el1 * e[l] / dl1
                e[l]    = s * p
                d[l]    = c * p
                if abs(e[l]) <= EPS * tst1:
                    break
                if it >= max_iter:
                    return d, e, V, total, l

        d[l] = d[l] + f
        e[l] = 0.0

    # selection sort of the eigenpairs, ascending
    for i in range(n - 1):
        k = i
        p = d[i]
        for j in range(i + 1, n):
            if d[j] < p:
                k = j
                p = d[j]
        if k != i:
            d[k] = d[i]
            d[i] = p
            for j in range(n):
                p       = V[j, i]
                V[j, i] = V[j, k]
                V[j, k] = p
    return d, e, V, total, -1

# ----------------------------------------------------------------------------------------
#! Pipeline
# ----------------------------------------------------------------------------------------

def tridiagonalize(A: NDArray) -> TridiagonalForm:
    """
    Householder reduction of a symmetric matrix to tridiagonal form.

    Only the lower triangle of A is referenced.

    Args:
        A: Symmetric (n, n) matrix, left untouched.

    Returns:
        TridiagonalForm with A = Q T Q^T.
    """
    V       = np.array(A, dtype=np.float64, order='C', copy=True)
    d, e, V = _tred2(V)
    freeze(d, e, V)
    return TridiagonalForm(diagonal=d, off_diagonal=e, transform=V)

def diagonalize_tridiagonal(form        : TridiagonalForm,
                            max_iter    : Optional[int]         = None,
                            logger      : Optional['Logger']    = None) -> SymmetricEigenResult:
    """
    Implicit-shift QL iteration on a tridiagonal form.

    Args:
        form:
            Output of `tridiagonalize` (its arrays are copied, not modified).
        max_iter:
            Iterations allowed per eigenvalue (default from EigenConfig).
        logger:
            Optional logger for progress messages.

    Returns:
        SymmetricEigenResult with ascending eigenvalues and orthonormal eigenvectors.

    Raises:
        NumericalNonConvergenceError: an eigenvalue needed more than max_iter sweeps.
    """
    max_iter    = get_default_config().resolve(max_iter=max_iter).max_iter
    d           = np.array(form.diagonal, dtype=np.float64, copy=True)
    e           = np.array(form.off_diagonal, dtype=np.float64, copy=True)
    V           = np.array(form.transform, dtype=np.float64, order='C', copy=True)

    d, e, V, total, failed = _tql2(d, e, V, int(max_iter))
    if failed >= 0:
        if logger:
            logger.error(f"QL iteration stalled at eigenvalue {failed} after {total} sweeps", lvl=1)
        raise NumericalNonConvergenceError(index=int(failed), iterations=int(max_iter), method='ql')

    if logger:
        logger.debug(f"QL iteration converged after {total} sweeps (n={d.shape[0]})", lvl=1)
    freeze(d, V)
    return SymmetricEigenResult(eigenvalues=d, eigenvectors=V, iterations=int(total), converged=True)

def symmetric_eigen(A           : NDArray,
                    max_iter    : Optional[int]         = None,
                    logger      : Optional['Logger']    = None) -> SymmetricEigenResult:
    """
    All eigenpairs of a symmetric matrix, eigenvalues ascending.

    Example:
        >>> res = symmetric_eigen(np.array([[2.0, 1.0], [1.0, 2.0]]))
        >>> res.eigenvalues
        array([1., 3.])
    """
    return diagonalize_tridiagonal(tridiagonalize(A), max_iter=max_iter, logger=logger)

# ----------------------------------------------------------------------------------------
#! End of File
# ----------------------------------------------------------------------------------------
