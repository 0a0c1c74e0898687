"""
Dense Eigenvalue Decomposition Module

Eigenvalues and eigenvectors of real square matrices by the classical
EISPACK algorithms, compiled with numba.

Pipeline:
    - symmetric : tridiagonalize -> diagonalize_tridiagonal   (tred2, tql2)
    - general   : hessenberg_reduce -> schur_eigen            (orthes, hqr2)

Entry Points:
    - EigenvalueDecomposition: classifies the input, runs the right path and
      exposes eigenvectors, eigenvalues and the block diagonal D
    - eigen_decomposition: convenience function around the class
    - select_components: dominant eigenpairs for PCA-like reductions

Results:
    - SymmetricEigenResult, GeneralEigenResult: immutable tagged results
    - TridiagonalForm, HessenbergForm: intermediate reductions

Errors:
    - InvalidInputError, NumericalNonConvergenceError (both EigenError)

This module uses lazy imports to minimize startup overhead; numba compiles
the kernels on first use.

-----------------------------------------------------------
Version         : 0.1
-----------------------------------------------------------
"""

from typing import TYPE_CHECKING
import importlib

# -----------------------------------------------------------------------------------------------
# Lazy Import Configuration
# -----------------------------------------------------------------------------------------------

_LAZY_IMPORTS = {
    # Engine
    'EigenvalueDecomposition'       : ('.decomposition', 'EigenvalueDecomposition'),
    'eigen_decomposition'           : ('.decomposition', 'eigen_decomposition'),
    'is_symmetric'                  : ('.decomposition', 'is_symmetric'),
    'as_square_matrix'              : ('.decomposition', 'as_square_matrix'),
    # Symmetric path
    'tridiagonalize'                : ('.symmetric', 'tridiagonalize'),
    'diagonalize_tridiagonal'       : ('.symmetric', 'diagonalize_tridiagonal'),
    'symmetric_eigen'               : ('.symmetric', 'symmetric_eigen'),
    # General path
    'hessenberg_reduce'             : ('.hessenberg', 'hessenberg_reduce'),
    'schur_eigen'                   : ('.schur', 'schur_eigen'),
    'general_eigen'                 : ('.schur', 'general_eigen'),
    'cdiv'                          : ('.schur', 'cdiv'),
    # Results
    'TridiagonalForm'               : ('.result', 'TridiagonalForm'),
    'HessenbergForm'                : ('.result', 'HessenbergForm'),
    'SymmetricEigenResult'          : ('.result', 'SymmetricEigenResult'),
    'GeneralEigenResult'            : ('.result', 'GeneralEigenResult'),
    # Errors
    'EigenError'                    : ('.errors', 'EigenError'),
    'EigenErrorMsg'                 : ('.errors', 'EigenErrorMsg'),
    'InvalidInputError'             : ('.errors', 'InvalidInputError'),
    'NumericalNonConvergenceError'  : ('.errors', 'NumericalNonConvergenceError'),
    # Configuration
    'EigenConfig'                   : ('.config', 'EigenConfig'),
    'get_default_config'            : ('.config', 'get_default_config'),
    'reset_default_config'          : ('.config', 'reset_default_config'),
    # Component selection
    'select_components'             : ('.selection', 'select_components'),
    'ComponentSelection'            : ('.selection', 'ComponentSelection'),
}

_LAZY_CACHE = {}

# For type checking only
if TYPE_CHECKING:
    from .decomposition import EigenvalueDecomposition, eigen_decomposition, is_symmetric, as_square_matrix
    from .symmetric     import tridiagonalize, diagonalize_tridiagonal, symmetric_eigen
    from .hessenberg    import hessenberg_reduce
    from .schur         import schur_eigen, general_eigen, cdiv
    from .result        import TridiagonalForm, HessenbergForm, SymmetricEigenResult, GeneralEigenResult
    from .errors        import EigenError, EigenErrorMsg, InvalidInputError, NumericalNonConvergenceError
    from .config        import EigenConfig, get_default_config, reset_default_config
    from .selection     import select_components, ComponentSelection

# -----------------------------------------------------------------------------------------------

def __getattr__(name: str):
    """
    Module-level __getattr__ for lazy imports.
    """
    if name in _LAZY_CACHE:
        return _LAZY_CACHE[name]

    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_path, attr_name  = _LAZY_IMPORTS[name]
    module                  = importlib.import_module(module_path, package=__name__)
    result                  = getattr(module, attr_name)
    _LAZY_CACHE[name]       = result
    return result

def __dir__():
    return sorted(list(globals().keys()) + list(_LAZY_IMPORTS.keys()))

__all__ = list(_LAZY_IMPORTS.keys())

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
