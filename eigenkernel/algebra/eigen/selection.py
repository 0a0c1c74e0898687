"""
Selection of Dominant Eigenpairs

Dimensionality-reduction routines (PCA, LDA) diagonalise a covariance or
scatter matrix and keep the eigenvectors with the largest eigenvalues. This
module implements that ranking step on top of an EigenvalueDecomposition:
either a fixed number of components, or the shortest prefix explaining a
requested share of the total variance.

Building the covariance matrix and projecting data are left to the caller.
"""

from typing import NamedTuple, Optional

import numpy as np
from numpy.typing import NDArray

from .decomposition import EigenvalueDecomposition
from .errors import InvalidInputError, EigenErrorMsg

# ----------------------------------------------------------------------------------------

MIN_TOTAL_VARIANCE = 0.1
MAX_TOTAL_VARIANCE = 0.99

class ComponentSelection(NamedTuple):
    """
    Attributes:
        eigenvalues:
            Selected eigenvalues, largest magnitude first.
        eigenvectors:
            Matching unit-norm eigenvectors as columns.
        explained_variance_ratio:
            |lambda_i| / sum_j |lambda_j| of each selected eigenvalue.
    """
    eigenvalues                 : NDArray
    eigenvectors                : NDArray
    explained_variance_ratio    : NDArray

    @property
    def n_components(self) -> int:
        return len(self.eigenvalues)

# ----------------------------------------------------------------------------------------

def select_components(decomposition     : EigenvalueDecomposition,
                    n_components        : Optional[int]     = None,
                    total_variance      : Optional[float]   = None) -> ComponentSelection:
    """
    Rank the eigenpairs by eigenvalue magnitude and keep the dominant ones.

    Exactly one of the criteria has to be given.

    Args:
        decomposition:
            Decomposition with real eigenvalues.
        n_components:
            Number of eigenpairs to keep, 1 <= n_components <= n.
        total_variance:
            Share of sum|lambda| to preserve, in [0.1, 0.99]; the smallest
            prefix reaching it is kept.

    Returns:
        ComponentSelection.

    Raises:
        InvalidInputError: invalid criteria or complex eigenvalues.

    Example:
        >>> cov = np.cov(data, rowvar=False)
        >>> sel = select_components(EigenvalueDecomposition(cov), total_variance=0.9)
        >>> projected = (data - data.mean(axis=0)) @ sel.eigenvectors
    """
    if (n_components is None) == (total_variance is None):
        raise InvalidInputError("Either total_variance or n_components has to be specified",
                                code=EigenErrorMsg.INVALID_ARGUMENT)
    if total_variance is not None and not (MIN_TOTAL_VARIANCE <= total_variance <= MAX_TOTAL_VARIANCE):
        raise InvalidInputError(f"total_variance must lie in [{MIN_TOTAL_VARIANCE}, {MAX_TOTAL_VARIANCE}], "
                                f"got {total_variance}", code=EigenErrorMsg.INVALID_ARGUMENT)
    if n_components is not None and (n_components <= 0 or n_components > decomposition.n):
        raise InvalidInputError(f"n_components must lie in [1, {decomposition.n}], got {n_components}",
                                code=EigenErrorMsg.INVALID_ARGUMENT)
    if np.any(decomposition.get_imag_eigenvalues() != 0.0):
        raise InvalidInputError("Component selection requires real eigenvalues")

    values  = np.asarray(decomposition.get_real_eigenvalues())
    vectors = decomposition.get_eigenvectors()

    # stable sort keeps the original order among equal magnitudes
    order   = np.argsort(-np.abs(values), kind='stable')
    values  = values[order]
    vectors = vectors[:, order]

    total   = np.sum(np.abs(values))
    ratio   = np.abs(values) / total if total > 0 else np.zeros_like(values)

    if n_components is None:
        cumulative      = np.cumsum(ratio)
        reached         = np.nonzero(cumulative >= total_variance)[0]
        n_components    = int(reached[0]) + 1 if reached.size else len(values)

    return ComponentSelection(eigenvalues               = values[:n_components],
                            eigenvectors                = vectors[:, :n_components],
                            explained_variance_ratio    = ratio[:n_components])

# ----------------------------------------------------------------------------------------
#! End of File
# ----------------------------------------------------------------------------------------
