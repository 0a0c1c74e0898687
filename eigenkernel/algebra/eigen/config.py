# file        :   eigenkernel/algebra/eigen/config.py

'''
Default parameters of the dense eigen-decomposition engine.

The defaults are read once from the environment and can be overridden per call:

- PY_EIGEN_MAX_ITER :
    iteration budget per deflated eigenvalue in the QL / QR iterations (default 50),
- PY_EIGEN_SYM_TOL  :
    tolerance of the symmetry test, 0 means exact equality (default 0.0),
- PY_EIGEN_VERBOSE  :
    when '1', progress messages are logged at info level instead of debug.
'''

import os
import numbers
from dataclasses import dataclass, replace
from typing import Optional

from .errors import InvalidInputError, EigenErrorMsg

# ---------------------------------------------------------------------
#! Environment variable names
# ---------------------------------------------------------------------

PY_EIGEN_MAX_ITER_STR   : str   = "PY_EIGEN_MAX_ITER"
PY_EIGEN_SYM_TOL_STR    : str   = "PY_EIGEN_SYM_TOL"
PY_EIGEN_VERBOSE_STR    : str   = "PY_EIGEN_VERBOSE"

DEFAULT_MAX_ITER        : int   = 50
DEFAULT_SYM_TOL         : float = 0.0

# ---------------------------------------------------------------------

@dataclass(frozen=True)
class EigenConfig:
    """
    Parameters shared by every decomposition.

    Attributes:
        max_iter (int):
            Iterations allowed per deflation step before
            NumericalNonConvergenceError is raised. The exceptional
            shifts fire at iterations 10 and 30, so budgets below 31 skip
            the second one.
        symmetry_tol (float):
            Largest |A - A^T| entry still treated as symmetric.
            0.0 keeps the bitwise test.
        verbose (bool):
            Promote progress messages from debug to info.
    """
    max_iter        : int   = DEFAULT_MAX_ITER
    symmetry_tol    : float = DEFAULT_SYM_TOL
    verbose         : bool  = False

    @classmethod
    def from_env(cls) -> 'EigenConfig':
        try:
            max_iter        = int(os.environ.get(PY_EIGEN_MAX_ITER_STR, DEFAULT_MAX_ITER))
            symmetry_tol    = float(os.environ.get(PY_EIGEN_SYM_TOL_STR, DEFAULT_SYM_TOL))
        except ValueError as e:
            raise InvalidInputError(f"Malformed eigen configuration in the environment: {e}",
                                    code=EigenErrorMsg.INVALID_ARGUMENT) from e
        verbose = os.environ.get(PY_EIGEN_VERBOSE_STR, "0").lower() in ("1", "true", "yes", "on")
        return cls(max_iter=max_iter, symmetry_tol=symmetry_tol, verbose=verbose).validate()

    def validate(self) -> 'EigenConfig':
        if not isinstance(self.max_iter, numbers.Integral) or isinstance(self.max_iter, bool) or self.max_iter < 1:
            raise InvalidInputError(f"max_iter must be a positive integer, got {self.max_iter}",
                                    code=EigenErrorMsg.INVALID_ARGUMENT)
        if not isinstance(self.symmetry_tol, numbers.Real) or not (self.symmetry_tol >= 0.0):
            raise InvalidInputError(f"symmetry_tol must be non-negative, got {self.symmetry_tol}",
                                    code=EigenErrorMsg.INVALID_ARGUMENT)
        return self

    def resolve(self,
                symmetry_tol    : Optional[float]   = None,
                max_iter        : Optional[int]     = None) -> 'EigenConfig':
        """
        Apply per-call overrides; None keeps the configured value.
        """
        overrides = {}
        if symmetry_tol is not None:
            overrides['symmetry_tol'] = float(symmetry_tol)
        if max_iter is not None:
            overrides['max_iter'] = max_iter
        return replace(self, **overrides).validate()

# ---------------------------------------------------------------------

_DEFAULT_CONFIG : Optional[EigenConfig] = None

def get_default_config() -> EigenConfig:
    """
    Configuration read from the environment on first use.
    """
    global _DEFAULT_CONFIG
    if _DEFAULT_CONFIG is None:
        _DEFAULT_CONFIG = EigenConfig.from_env()
    return _DEFAULT_CONFIG

def reset_default_config() -> None:
    """
    Forget the cached configuration so the environment is read again.
    """
    global _DEFAULT_CONFIG
    _DEFAULT_CONFIG = None

# ---------------------------------------------------------------------
#! EOF
# ---------------------------------------------------------------------
