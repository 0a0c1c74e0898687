"""
Eigenvalue Decomposition of a Real Square Matrix

Classifies the input as symmetric or general and runs the numerically
appropriate classical algorithm:

    - symmetric : Householder tridiagonalization + implicit-shift QL,
                  A = V D V^T with V orthogonal and D diagonal (ascending),
    - general   : Hessenberg reduction + Francis double-shift QR,
                  A V = V D with D block diagonal; complex pairs
                  lambda +- i mu appear as 2x2 blocks [[lambda, mu], [-mu, lambda]].

The decomposition is computed once, in the constructor. The accessors are pure
and can be called any number of times.

Example:
    >>> dec = EigenvalueDecomposition([[2.0, 0.0], [0.0, 3.0]])
    >>> dec.get_real_eigenvalues()
    array([2., 3.])

----------------------------------------------
File        : eigenkernel/algebra/eigen/decomposition.py
----------------------------------------------
"""

import time
import logging
from typing import Optional, Union, Dict

import numpy as np
from numpy.typing import NDArray, ArrayLike

from .result import SymmetricEigenResult, GeneralEigenResult
from .symmetric import symmetric_eigen
from .schur import general_eigen
from .errors import InvalidInputError, EigenErrorMsg
from .config import EigenConfig, get_default_config
from ...common.flog import Logger, get_global_logger, log_timing_summary

# Asymmetry below this multiple of max|A| is reported as rounding noise
_ROUNDING_ASYMMETRY = 1e-12

# ----------------------------------------------------------------------------------------
#! Input handling
# ----------------------------------------------------------------------------------------

def as_square_matrix(A: ArrayLike) -> NDArray:
    """
    Validate and copy the input into a C-contiguous float64 array.

    Raises:
        InvalidInputError: not numeric, complex, not 2D, not square, empty or non-finite.
    """
    try:
        arr = np.asarray(A)
    except (ValueError, TypeError) as e:
        # ragged nested sequences
        raise InvalidInputError(f"Matrix cannot be converted to an array: {e}") from e

    if arr.dtype == object or not (np.issubdtype(arr.dtype, np.number) or arr.dtype == np.bool_):
        raise InvalidInputError(f"Matrix must be numeric, got dtype {arr.dtype}")
    if np.iscomplexobj(arr):
        raise InvalidInputError("Complex-valued matrices are not supported")
    if arr.size == 0:
        raise InvalidInputError(f"Matrix must not be empty, got shape {arr.shape}", code=EigenErrorMsg.EMPTY_MATRIX)
    if arr.ndim != 2:
        raise InvalidInputError(f"Matrix must be 2D, got shape {arr.shape}", code=EigenErrorMsg.NOT_SQUARE)
    if arr.shape[0] != arr.shape[1]:
        raise InvalidInputError(f"Matrix must be square, got shape {arr.shape}", code=EigenErrorMsg.NOT_SQUARE)

    arr = np.array(arr, dtype=np.float64, order='C', copy=True)
    if not np.all(np.isfinite(arr)):
        raise InvalidInputError("Matrix contains NaN or infinite entries", code=EigenErrorMsg.NON_FINITE)
    return arr

def is_symmetric(A: NDArray, tol: float = 0.0) -> bool:
    """
    Symmetry test used to route the decomposition.

    Args:
        A:
            Square matrix.
        tol:
            0.0 compares A[i, j] == A[j, i] exactly; a positive value accepts
            max|A - A^T| <= tol.
    """
    if tol < 0:
        raise InvalidInputError(f"tol must be non-negative, got {tol}", code=EigenErrorMsg.INVALID_ARGUMENT)
    A = np.asarray(A)
    if tol == 0.0:
        return bool(np.array_equal(A, A.T))
    return bool(np.max(np.abs(A - A.T)) <= tol)

# ----------------------------------------------------------------------------------------
#! Decomposition
# ----------------------------------------------------------------------------------------

class EigenvalueDecomposition:
    """
    Eigenvalues and eigenvectors of a real square matrix.

    If A is symmetric, A = V D V^T with orthogonal V and diagonal D. Otherwise
    A V = V D, where D is block diagonal with the real eigenvalues in 1x1
    blocks and every complex pair lambda +- i mu in a 2x2 block
    [[lambda, mu], [-mu, lambda]]. V may then be badly conditioned.

    Args:
        A:
            (n, n) real matrix (array or nested sequence), n >= 1.
        symmetry_tol:
            Tolerance of the symmetry test (default from EigenConfig, 0.0 = exact).
        max_iter:
            Iterations allowed per deflated eigenvalue (default from EigenConfig).
        logger:
            Logger for progress messages (default: the global logger).
        config:
            Base configuration; symmetry_tol and max_iter override it.

    Raises:
        InvalidInputError:
            Malformed matrix or arguments, raised before any computation.
        NumericalNonConvergenceError:
            An eigenvalue was not deflated within max_iter iterations.
    """

    def __init__(self,
                A               : ArrayLike,
                symmetry_tol    : Optional[float]           = None,
                max_iter        : Optional[int]             = None,
                logger          : Optional[Logger]          = None,
                config          : Optional[EigenConfig]     = None):
        self.config     = (config if config is not None else get_default_config()).resolve(
                            symmetry_tol=symmetry_tol, max_iter=max_iter)
        self._log       = logger if logger is not None else get_global_logger()
        self.timings    : Dict[str, float] = {}

        t0              = time.perf_counter()
        self._A         = as_square_matrix(A)
        self._A.flags.writeable = False
        self.n          = self._A.shape[0]
        t1              = time.perf_counter()
        self.timings['validate'] = t1 - t0

        self.is_symmetric = is_symmetric(self._A, self.config.symmetry_tol)
        t2              = time.perf_counter()
        self.timings['classify'] = t2 - t1

        if not self.is_symmetric:
            self._warn_rounding_asymmetry()

        self._say(f"Decomposing {self.n}x{self.n} matrix ({'symmetric' if self.is_symmetric else 'general'} path)")
        solve           = self._log.timing(symmetric_eigen if self.is_symmetric else general_eigen, lvl=1)
        self.result : Union[SymmetricEigenResult, GeneralEigenResult] = \
            solve(self._A, max_iter=self.config.max_iter, logger=self._log)
        self.timings['decompose'] = solve.elapsed
        self._say(f"Done in {self.result.iterations} iterations, {self.timings['decompose']:.4e} s", lvl=1)

    # ------------------------------------------------------------------------------------

    def _say(self, msg: str, lvl: int = 0):
        self._log.say(msg, log=logging.INFO if self.config.verbose else logging.DEBUG, lvl=lvl)

    def _warn_rounding_asymmetry(self):
        asym    = float(np.max(np.abs(self._A - self._A.T)))
        scale   = max(1.0, float(np.max(np.abs(self._A))))
        if asym <= _ROUNDING_ASYMMETRY * scale:
            self._log.warning(f"Matrix is symmetric up to {asym:.2e} but not exactly; using the general path "
                            f"(pass symmetry_tol >= {asym:.2e} to treat it as symmetric)", lvl=1)

    # ------------------------------------------------------------------------------------
    #! Accessors
    # ------------------------------------------------------------------------------------

    @property
    def matrix(self) -> NDArray:
        """Read-only view of the decomposed matrix."""
        return self._A

    def get_eigenvectors(self) -> NDArray:
        """
        Eigenvector matrix with every column scaled to unit Euclidean norm.

        For a complex pair the two columns (real and imaginary part) are
        scaled independently. Use `get_complex_eigenvectors` for the
        eigenvectors themselves.
        """
        V       = np.array(self.result.eigenvectors, copy=True)
        norms   = np.linalg.norm(V, axis=0)
        nz      = norms > 0.0
        V[:, nz] /= norms[nz]
        return V

    def get_real_eigenvalues(self) -> NDArray:
        """Real parts of the eigenvalues, d = real(diag(D))."""
        return self.result.real

    def get_imag_eigenvalues(self) -> NDArray:
        """Imaginary parts of the eigenvalues, e = imag(diag(D))."""
        return self.result.imag

    def get_eigenvalues(self) -> NDArray:
        """Eigenvalues as complex numbers."""
        return self.result.real + 1j * self.result.imag

    def get_diagonal_eigenvalues(self) -> NDArray:
        """
        Block diagonal eigenvalue matrix D.

        Real eigenvalues sit on the diagonal; a positive imaginary part e[i] goes
        to (i, i+1) and a negative one to (i, i-1).
        """
        d   = self.result.real
        e   = self.result.imag
        D   = np.diag(d)
        for i in range(self.n):
            if e[i] > 0:
                D[i, i + 1] = e[i]
            elif e[i] < 0:
                D[i, i - 1] = e[i]
        return D

    def get_complex_eigenvectors(self) -> NDArray:
        """
        Complex eigenvectors as unit-norm columns.

        Column i of the real matrix V holds the real part and column i+1 the
        imaginary part of the eigenvector of d[i] + 1j e[i] (e[i] > 0); the
        partner column is its conjugate.
        """
        V   = np.asarray(self.result.eigenvectors)
        e   = self.result.imag
        W   = V.astype(np.complex128)
        for i in range(self.n):
            if e[i] > 0:
                W[:, i]     = V[:, i] + 1j * V[:, i + 1]
                W[:, i + 1] = V[:, i] - 1j * V[:, i + 1]
        norms   = np.linalg.norm(W, axis=0)
        nz      = norms > 0.0
        W[:, nz] /= norms[nz]
        return W

    def residual_norms(self) -> NDArray:
        r"""
        Residual norms ||A v_i - \lambda_i v_i|| of the unit-norm complex eigenpairs.
        """
        W   = self.get_complex_eigenvectors()
        lam = self.get_eigenvalues()
        return np.linalg.norm(self._A @ W - W * lam[np.newaxis, :], axis=0)

    # ------------------------------------------------------------------------------------

    def summary(self, logger: Optional[Logger] = None, lvl: int = 0):
        """
        Log the path taken, iteration count and phase timings.
        """
        logger = logger if logger is not None else self._log
        log_timing_summary(logger,
                        phase_durations = self.timings,
                        title           = "Eigen Decomposition",
                        lvl             = lvl,
                        extra_info      = [f"n={self.n}, path={'symmetric' if self.is_symmetric else 'general'}, "
                                            f"iterations={self.result.iterations}"])

    def __repr__(self):
        return (f"EigenvalueDecomposition(n={self.n}, symmetric={self.is_symmetric}, "
                f"iterations={self.result.iterations})")

# ----------------------------------------------------------------------------------------
#! Convenience Function
# ----------------------------------------------------------------------------------------

def eigen_decomposition(A               : ArrayLike,
                        symmetry_tol    : Optional[float]   = None,
                        max_iter        : Optional[int]     = None,
                        logger          : Optional[Logger]  = None) -> EigenvalueDecomposition:
    """
    Convenience function for the full eigen-decomposition.

    Example:
        >>> dec = eigen_decomposition(np.array([[0.0, -1.0], [1.0, 0.0]]))
        >>> dec.get_imag_eigenvalues()
        array([ 1., -1.])
    """
    return EigenvalueDecomposition(A, symmetry_tol=symmetry_tol, max_iter=max_iter, logger=logger)

# ----------------------------------------------------------------------------------------
#! End of File
# ----------------------------------------------------------------------------------------
