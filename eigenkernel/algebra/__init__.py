"""
Linear algebra subpackage.

Currently hosts the dense eigen-decomposition engine in `algebra.eigen`.
The frequently used names are re-exported lazily from here, so

    >>> from eigenkernel.algebra import EigenvalueDecomposition

does not import numba until the attribute is first touched.

# -----------------------------------------------------------------------------------------------
Version         : 0.1
Description     : Algebra module with lazy imports
# -----------------------------------------------------------------------------------------------
"""

from typing import TYPE_CHECKING
import importlib

# -----------------------------------------------------------------------------------------------
# Lazy Import Configuration
# -----------------------------------------------------------------------------------------------

_LAZY_IMPORTS = {
    'eigen'                         : ('.eigen', None),  # None means import the whole module
    'EigenvalueDecomposition'       : ('.eigen.decomposition', 'EigenvalueDecomposition'),
    'eigen_decomposition'           : ('.eigen.decomposition', 'eigen_decomposition'),
    'EigenConfig'                   : ('.eigen.config', 'EigenConfig'),
    'get_logger'                    : ('..common.flog', 'get_global_logger'),
}

_LAZY_CACHE = {}

if TYPE_CHECKING:
    from .                          import eigen
    from .eigen.decomposition       import EigenvalueDecomposition, eigen_decomposition
    from .eigen.config              import EigenConfig

def __getattr__(name: str):
    if name in _LAZY_CACHE:
        return _LAZY_CACHE[name]
    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_path, attr_name  = _LAZY_IMPORTS[name]
    module                  = importlib.import_module(module_path, package=__name__)
    result                  = module if attr_name is None else getattr(module, attr_name)
    _LAZY_CACHE[name]       = result
    return result

def __dir__():
    return sorted(list(globals().keys()) + list(_LAZY_IMPORTS.keys()))

__all__ = list(_LAZY_IMPORTS.keys())

# -----------------------------------------------------------------------------------------------
#! EOF
# -----------------------------------------------------------------------------------------------
