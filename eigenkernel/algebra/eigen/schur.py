r"""
Real Schur Iteration and Eigenvectors of a General Matrix (hqr2)

Starting from the Hessenberg form A = Q H Q^T, the Francis double-shift QR
iteration drives H to real Schur form
    $$
    H \to T, \qquad T \text{ quasi upper triangular},
    $$
with 1x1 blocks for real eigenvalues and 2x2 blocks for complex conjugate
pairs. Eigenvectors of T follow by back-substitution (complex ones through a
stable complex division) and are mapped back to the original basis with the
accumulated transform.

Key Features:
    - Deflation of 1x1 and 2x2 trailing blocks
    - Exceptional shifts at iterations 10 (Wilkinson) and 30
    - Overflow rescaling during back-substitution
    - Iteration budget per deflation step with a typed error

References:
    - Martin, Peters & Wilkinson, "Handbook for Automatic Computation",
      Vol. II - Linear Algebra (Algol hqr2), and EISPACK.
    - R. L. Smith, "Algorithm 116: Complex division", CACM 5 (1962).

File        : eigenkernel/algebra/eigen/schur.py
"""

import math
from typing import Optional, TYPE_CHECKING

import numba
import numpy as np
from numpy.typing import NDArray

from .result import HessenbergForm, GeneralEigenResult, freeze
from .hessenberg import hessenberg_reduce
from .errors import NumericalNonConvergenceError
from .config import get_default_config

if TYPE_CHECKING:
    from ...common.flog import Logger

# ----------------------------------------------------------------------------------------

EPS = 2.0 ** -52

# ----------------------------------------------------------------------------------------
#! Complex division
# ----------------------------------------------------------------------------------------

@numba.njit(cache=True, error_model='numpy')
def cdiv(xr: float, xi: float, yr: float, yi: float) -> complex:
    '''
    (xr + i xi) / (yr + i yi), pivoting on the larger denominator component
    so that no squared magnitude is formed.
    '''
    if abs(yr) > abs(yi):
        r = yi / yr
        d = yr + r * yi
        return complex((xr + r * xi) / d, (xi - r * xr) / d)
    r = yr / yi
    d = yi + r * yr
    return complex((r * xr + xi) / d, (r * xi - xr) / d)

# ----------------------------------------------------------------------------------------
#! Kernel
# ----------------------------------------------------------------------------------------

@numba.njit(cache=True, error_model='numpy')
def _hqr2(H: np.ndarray, V: np.ndarray, max_iter: int):
    '''
    Hessenberg H to real Schur form, eigenvalues into (d, e), eigenvectors
    into V. H and V are overwritten.

    Returns (d, e, V, iterations, failed); failed is -1 on success or the
    index of the eigenvalue whose deflation exhausted max_iter.
    '''
    nn      = H.shape[0]
    n       = nn - 1
    low     = 0
    high    = nn - 1
    d       = np.zeros(nn)
    e       = np.zeros(nn)
    exshift = 0.0
    p       = 0.0
    q       = 0.0
    r       = 0.0
    s       = 0.0
    z       = 0.0
    t       = 0.0
    w       = 0.0
    x       = 0.0
    y       = 0.0

    # matrix norm
    norm = 0.0
    for i in range(nn):
        for j in range(max(i - 1, 0), nn):
            norm += abs(H[i, j])

    it      = 0
    total   = 0

    # zero matrix: every eigenvalue is 0 and the transform already holds the vectors
    if norm == 0.0:
        return d, e, V, total, -1

    # outer loop over the eigenvalue index
    while n >= low:
        # look for a single small subdiagonal element
        l = n
        while l > low:
            s = abs(H[l - 1, l - 1]) + abs(H[l, l])
            if s == 0.0:
                s = norm
            if abs(H[l, l - 1]) < EPS * s:
                break
            l -= 1

        if l == n:
            # one root
            H[n, n] = H[n, n] + exshift
            d[n]    = H[n, n]
            e[n]    = 0.0
            n       -= 1
            it      = 0
        elif l == n - 1:
            # two roots
            w           = H[n, n - 1] * H[n - 1, n]
            p           = (H[n - 1, n - 1] - H[n, n]) / 2.0
            q           = p * p + w
            z           = math.sqrt(abs(q))
            H[n, n]     = H[n, n] + exshift
            H[n - 1, n - 1] = H[n - 1, n - 1] + exshift
            x           = H[n, n]

            if q >= 0:
                # real pair
                if p >= 0:
                    z = p + z
                else:
                    z = p - z
                d[n - 1]    = x + z
                d[n]        = d[n - 1]
                if z != 0.0:
                    d[n] = x - w / z
                e[n - 1]    = 0.0
                e[n]        = 0.0
                x           = H[n, n - 1]
                s           = abs(x) + abs(z)
                p           = x / s
                q           = z / s
                r           = math.sqrt(p * p + q * q)
                p           = p / r
                q           = q / r

                # row modification
                for j in range(n - 1, nn):
                    z               = H[n - 1, j]
                    H[n - 1, j]     = q * z + p * H[n, j]
                    H[n, j]         = q * H[n, j] - p * z
                # column modification
                for i in range(n + 1):
                    z               = H[i, n - 1]
                    H[i, n - 1]     = q * z + p * H[i, n]
                    H[i, n]         = q * H[i, n] - p * z
                # accumulate transformations
                for i in range(low, high + 1):
                    z               = V[i, n - 1]
                    V[i, n - 1]     = q * z + p * V[i, n]
                    V[i, n]         = q * V[i, n] - p * z
            else:
                # complex pair
                d[n - 1]    = x + p
                d[n]        = x + p
                e[n - 1]    = z
                e[n]        = -z
            n   -= 2
            it  = 0
        else:
            if it >= max_iter:
                return d, e, V, total, n

            # no convergence yet, form shift
            x = H[n, n]
            y = 0.0
            w = 0.0
            if l < n:
                y = H[n - 1, n - 1]
                w = H[n, n - 1] * H[n - 1, n]

            # Wilkinson's original ad hoc shift
            if it == 10:
                exshift += x
                for i in range(low, n + 1):
                    H[i, i] -= x
                s = abs(H[n, n - 1]) + abs(H[n - 1, n - 2])
                x = 0.75 * s
                y = x
                w = -0.4375 * s * s

            # MATLAB's ad hoc shift
            if it == 30:
                s = (y - x) / 2.0
                s = s * s + w
                if s > 0:
                    s = math.sqrt(s)
                    if y < x:
                        s = -s
                    s = x - w / ((y - x) / 2.0 + s)
                    for i in range(low, n + 1):
                        H[i, i] -= s
                    exshift += s
                    x = 0.964
                    y = x
                    w = x

            it      += 1
            total   += 1

            # look for two consecutive small subdiagonal elements
            m = n - 2
            while m >= l:
                z = H[m, m]
                r = x - z
                s = y - z
                p = (r * s - w) / H[m + 1, m] + H[m, m + 1]
                q = H[m + 1, m + 1] - z - r - s
                r = H[m + 2, m + 1]
                s = abs(p) + abs(q) + abs(r)
                p = p / s
                q = q / s
                r = r / s
                if m == l:
                    break
                if abs(H[m, m - 1]) * (abs(q) + abs(r)) < \
                        EPS * (abs(p) * (abs(H[m - 1, m - 1]) + abs(z) + abs(H[m + 1, m + 1]))):
                    break
                m -= 1

            for i in range(m + 2, n + 1):
                H[i, i - 2] = 0.0
                if i > m + 2:
                    H[i, i - 3] = 0.0

            # double QR step on rows l:n and columns m:n
            for k in range(m, n):
                notlast = k != n - 1
                if k != m:
                    p = H[k, k - 1]
                    q = H[k + 1, k - 1]
                    r = H[k + 2, k - 1] if notlast else 0.0
                    x = abs(p) + abs(q) + abs(r)
                    if x == 0.0:
                        continue
                    p = p / x
                    q = q / x
                    r = r / x

                s = math.sqrt(p * p + q * q + r * r)
                if p < 0:
                    s = -s
                if s != 0:
                    if k != m:
                        H[k, k - 1] = -s * x
                    elif l != m:
                        H[k, k - 1] = -H[k, k - 1]
                    p = p + s
                    x = p / s
                    y = q / s
                    z = r / s
                    q = q / p
                    r = r / p

                    # row modification
                    for j in range(k, nn):
                        p = H[k, j] + q * H[k + 1, j]
                        if notlast:
                            p           += r * H[k + 2, j]
                            H[k + 2, j] -= p * z
                        H[k, j]     -= p * x
                        H[k + 1, j] -= p * y

                    # column modification
                    for i in range(min(n, k + 3) + 1):
                        p = x * H[i, k] + y * H[i, k + 1]
                        if notlast:
                            p           += z * H[i, k + 2]
                            H[i, k + 2] -= p * r
                        H[i, k]     -= p
                        H[i, k + 1] -= p * q

                    # accumulate transformations
                    for i in range(low, high + 1):
                        p = x * V[i, k] + y * V[i, k + 1]
                        if notlast:
                            p           += z * V[i, k + 2]
                            V[i, k + 2] -= p * r
                        V[i, k]     -= p
                        V[i, k + 1] -= p * q

    # back-substitute to find the vectors of the upper triangular form
    for ni in range(nn - 1, -1, -1):
        p = d[ni]
        q = e[ni]

        if q == 0:
            # real vector
            l           = ni
            H[ni, ni]   = 1.0
            for i in range(ni - 1, -1, -1):
                w = H[i, i] - p
                r = 0.0
                for j in range(l, ni + 1):
                    r += H[i, j] * H[j, ni]
                if e[i] < 0.0:
                    z = w
                    s = r
                else:
                    l = i
                    if e[i] == 0.0:
                        if w != 0.0:
                            H[i, ni] = -r / w
                        else:
                            H[i, ni] = -r / (EPS * norm)
                    else:
                        # solve real equations
                        x           = H[i, i + 1]
                        y           = H[i + 1, i]
                        q           = (d[i] - p) * (d[i] - p) + e[i] * e[i]
                        t           = (x * s - z * r) / q
                        H[i, ni]    = t
                        if abs(x) > abs(z):
                            H[i + 1, ni] = (-r - w * t) / x
                        else:
                            H[i + 1, ni] = (-s - y * t) / z

                    # overflow control
                    t = abs(H[i, ni])
                    if (EPS * t) * t > 1:
                        for j in range(i, ni + 1):
                            H[j, ni] = H[j, ni] / t

        elif q < 0:
            # complex vector, last component imaginary so the matrix is triangular
            l = ni - 1
            if abs(H[ni, ni - 1]) > abs(H[ni - 1, ni]):
                H[ni - 1, ni - 1]   = q / H[ni, ni - 1]
                H[ni - 1, ni]       = -(H[ni, ni] - p) / H[ni, ni - 1]
            else:
                c                   = cdiv(0.0, -H[ni - 1, ni], H[ni - 1, ni - 1] - p, q)
                H[ni - 1, ni - 1]   = c.real
                H[ni - 1, ni]       = c.imag
            H[ni, ni - 1]   = 0.0
            H[ni, ni]       = 1.0

            for i in range(ni - 2, -1, -1):
                ra = 0.0
                sa = 0.0
                for j in range(l, ni + 1):
                    ra += H[i, j] * H[j, ni - 1]
                    sa += H[i, j] * H[j, ni]
                w = H[i, i] - p

                if e[i] < 0.0:
                    z = w
                    r = ra
                    s = sa
                else:
                    l = i
                    if e[i] == 0:
                        c               = cdiv(-ra, -sa, w, q)
                        H[i, ni - 1]    = c.real
                        H[i, ni]        = c.imag
                    else:
                        # solve complex equations
                        x   = H[i, i + 1]
                        y   = H[i + 1, i]
                        vr  = (d[i] - p) * (d[i] - p) + e[i] * e[i] - q * q
                        vi  = (d[i] - p) * 2.0 * q
                        if vr == 0.0 and vi == 0.0:
                            vr = EPS * norm * (abs(w) + abs(q) + abs(x) + abs(y) + abs(z))
                        c               = cdiv(x * r - z * ra + q * sa, x * s - z * sa - q * ra, vr, vi)
                        H[i, ni - 1]    = c.real
                        H[i, ni]        = c.imag
                        if abs(x) > (abs(z) + abs(q)):
                            H[i + 1, ni - 1]    = (-ra - w * H[i, ni - 1] + q * H[i, ni]) / x
                            H[i + 1, ni]        = (-sa - w * H[i, ni] - q * H[i, ni - 1]) / x
                        else:
                            c                   = cdiv(-r - y * H[i, ni - 1], -s - y * H[i, ni], z, q)
                            H[i + 1, ni - 1]    = c.real
                            H[i + 1, ni]        = c.imag

                    # overflow control
                    t = max(abs(H[i, ni - 1]), abs(H[i, ni]))
                    if (EPS * t) * t > 1:
                        for j in range(i, ni + 1):
                            H[j, ni - 1]    = H[j, ni - 1] / t
                            H[j, ni]        = H[j, ni] / t

    # back transformation to the eigenvectors of the original matrix
    for j in range(nn - 1, low - 1, -1):
        for i in range(low, high + 1):
            z = 0.0
            for k in range(low, min(j, high) + 1):
                z += V[i, k] * H[k, j]
            V[i, j] = z
    return d, e, V, total, -1

# ----------------------------------------------------------------------------------------
#! Pipeline
# ----------------------------------------------------------------------------------------

def schur_eigen(form        : HessenbergForm,
                max_iter    : Optional[int]         = None,
                logger      : Optional['Logger']    = None) -> GeneralEigenResult:
    """
    Eigenvalues and eigenvectors from a Hessenberg form.

    Args:
        form:
            Output of `hessenberg_reduce` (copied, not modified).
        max_iter:
            Iterations allowed per deflation step (default from EigenConfig).
        logger:
            Optional logger for progress messages.

    Returns:
        GeneralEigenResult in deflation order (no sorting).

    Raises:
        NumericalNonConvergenceError: a deflation needed more than max_iter sweeps.
    """
    max_iter    = get_default_config().resolve(max_iter=max_iter).max_iter
    H           = np.array(form.hessenberg, dtype=np.float64, order='C', copy=True)
    V           = np.array(form.transform, dtype=np.float64, order='C', copy=True)

    d, e, V, total, failed = _hqr2(H, V, int(max_iter))
    if failed >= 0:
        if logger:
            logger.error(f"QR iteration stalled at eigenvalue {failed} after {total} sweeps", lvl=1)
        raise NumericalNonConvergenceError(index=int(failed), iterations=int(max_iter), method='qr')

    if logger:
        n_pairs = int(np.count_nonzero(e > 0))
        logger.debug(f"QR iteration converged after {total} sweeps ({n_pairs} complex pairs)", lvl=1)
    freeze(d, e, V)
    return GeneralEigenResult(real=d, imag=e, eigenvectors=V, iterations=int(total), converged=True)

def general_eigen(A         : NDArray,
                max_iter    : Optional[int]         = None,
                logger      : Optional['Logger']    = None) -> GeneralEigenResult:
    """
    All eigenpairs of a general real matrix via Hessenberg + real Schur form.

    Example:
        >>> res = general_eigen(np.array([[0.0, -1.0], [1.0, 0.0]]))
        >>> res.real, res.imag
        (array([0., 0.]), array([ 1., -1.]))
    """
    return schur_eigen(hessenberg_reduce(A), max_iter=max_iter, logger=logger)

# ----------------------------------------------------------------------------------------
#! End of File
# ----------------------------------------------------------------------------------------
