r"""
Orthogonal Reduction to Upper Hessenberg Form (orthes + ortran)

For a general real matrix A builds an orthogonal Q and an upper Hessenberg H,
    $$
    A = Q H Q^T, \qquad H_{ij} = 0 \text{ for } i > j + 1,
    $$
by Householder reflections applied column by column below the first
subdiagonal. Q is formed afterwards by applying the stored reflections to the
identity in reverse order.

References:
    - Martin & Wilkinson, "Handbook for Automatic Computation",
      Vol. II - Linear Algebra (Algol orthes / ortran), and EISPACK.

File        : eigenkernel/algebra/eigen/hessenberg.py
"""

import math

import numba
import numpy as np
from numpy.typing import NDArray

from .result import HessenbergForm, freeze

# ----------------------------------------------------------------------------------------
#! Kernel
# ----------------------------------------------------------------------------------------

@numba.njit(cache=True, error_model='numpy')
def _orthes(H: np.ndarray):
    '''
    In-place Householder reduction of H. Below the first subdiagonal H keeps
    the unnormalised Householder vectors, which the ortran stage reads back.

    Returns (H, V): the reduced matrix and the accumulated transform.
    '''
    n       = H.shape[0]
    low     = 0
    high    = n - 1
    ort     = np.zeros(n)

    for m in range(low + 1, high):
        # scale column
        scale = 0.0
        for i in range(m, high + 1):
            scale += abs(H[i, m - 1])

        if scale != 0.0:
            # Householder vector
            h = 0.0
            for i in range(high, m - 1, -1):
                ort[i]  = H[i, m - 1] / scale
                h       += ort[i] * ort[i]
            g = math.sqrt(h)
            if ort[m] > 0:
                g = -g
            h       = h - ort[m] * g
            ort[m]  = ort[m] - g

            # H = (I - u u^T / h) H (I - u u^T / h)
            for j in range(m, n):
                f = 0.0
                for i in range(high, m - 1, -1):
                    f += ort[i] * H[i, j]
                f = f / h
                for i in range(m, high + 1):
                    H[i, j] -= f * ort[i]

            for i in range(high + 1):
                f = 0.0
                for j in range(high, m - 1, -1):
                    f += ort[j] * H[i, j]
                f = f / h
                for j in range(m, high + 1):
                    H[i, j] -= f * ort[j]

            ort[m]      = scale * ort[m]
            H[m, m - 1] = scale * g

    # accumulate transformations (ortran)
    V = np.eye(n)
    for m in range(high - 1, low, -1):
        if H[m, m - 1] != 0.0:
            for i in range(m + 1, high + 1):
                ort[i] = H[i, m - 1]
            for j in range(m, high + 1):
                g = 0.0
                for i in range(m, high + 1):
                    g += ort[i] * V[i, j]
                # double division avoids possible underflow
                g = (g / ort[m]) / H[m, m - 1]
                for i in range(m, high + 1):
                    V[i, j] += g * ort[i]
    return H, V

# ----------------------------------------------------------------------------------------
#! Pipeline
# ----------------------------------------------------------------------------------------

def hessenberg_reduce(A: NDArray) -> HessenbergForm:
    """
    Reduce a general square matrix to upper Hessenberg form.

    Args:
        A: (n, n) real matrix, left untouched.

    Returns:
        HessenbergForm(hessenberg=H, transform=Q) with A = Q H Q^T.

    Example:
        >>> form = hessenberg_reduce(A)
        >>> np.allclose(form.transform @ form.hessenberg @ form.transform.T, A)
        True
    """
    H       = np.array(A, dtype=np.float64, order='C', copy=True)
    H, V    = _orthes(H)
    # drop the stored reflection vectors
    H       = np.triu(H, k=-1)
    freeze(H, V)
    return HessenbergForm(hessenberg=H, transform=V)

# ----------------------------------------------------------------------------------------
#! End of File
# ----------------------------------------------------------------------------------------
