# eigenkernel/__init__.py

"""
eigenkernel - dense eigenvalue decomposition of real square matrices.

The package implements the classical EISPACK pipeline in numba-compiled
kernels:

    - symmetric input : Householder tridiagonalization + implicit-shift QL,
    - general input   : orthogonal Hessenberg reduction + Francis double-shift QR,

and exposes the eigenvalues, eigenvectors and the block diagonal eigenvalue
matrix through `EigenvalueDecomposition`.

Modules:
--------
- algebra   : Eigen-decomposition engine (algebra.eigen) and its pipeline stages
- common    : Logging utilities

Examples:
---------
>>> import eigenkernel as ek
>>> dec = ek.EigenvalueDecomposition([[2.0, 1.0], [1.0, 2.0]])
>>> dec.get_real_eigenvalues()
array([1., 3.])

Version : 0.1.0
License : MIT
"""

import importlib

# Package metadata
__version__         = "0.1.0"
__license__         = "MIT"

MODULE_DESCRIPTION  = "Dense real eigen-decomposition: tred2/tql2 and orthes/hqr2 in numba."

# Subpackages (not imported by default)
__all__             = ["algebra", "common", "EigenvalueDecomposition", "eigen_decomposition"]

# Top-level shortcuts into algebra.eigen
_SHORTCUTS          = {
    "EigenvalueDecomposition"   : ".algebra.eigen.decomposition",
    "eigen_decomposition"       : ".algebra.eigen.decomposition",
}

def get_module_description(module_name):
    """
    Get the description of a subpackage.

    Parameters
    ----------
    module_name : str
        The name of the subpackage.
    """
    descriptions = {
        "algebra"   : "Eigen-decomposition engine: symmetric and general paths, result types, errors, config.",
        "common"    : "Logger with indentation levels, process-wide logger and timing tables.",
    }
    return descriptions.get(module_name, "Module not found.")

def list_available_modules():
    return ["algebra", "common"]

# Lazy import subpackages on attribute access (PEP 562)
def __getattr__(name):
    if name in _SHORTCUTS:
        return getattr(importlib.import_module(_SHORTCUTS[name], __name__), name)
    if name in ("algebra", "common"):
        return importlib.import_module(f".{name}", __name__)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

def __dir__():
    return sorted(list(globals().keys()) + __all__)

# ---------------------------------------------------------------------
#! EOF
# ---------------------------------------------------------------------
