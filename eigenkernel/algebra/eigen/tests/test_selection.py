"""
Tests for select_components (dominant eigenpairs for PCA-like reductions).
"""

import numpy as np
import pytest

from eigenkernel.algebra.eigen import (
    EigenvalueDecomposition, select_components, ComponentSelection,
    InvalidInputError, EigenErrorMsg,
)

# ----------------------------------

PCA_SAMPLES = np.array([
    [2.5, 2.4], [0.5, 0.7], [2.2, 2.9], [1.9, 2.2], [3.1, 3.0],
    [2.3, 2.7], [2.0, 1.6], [1.0, 1.1], [1.5, 1.6], [1.1, 0.9],
])

@pytest.fixture
def pca_decomposition():
    cov = np.cov(PCA_SAMPLES.T)
    return EigenvalueDecomposition(0.5 * (cov + cov.T))

# ----------------------------------

class TestSelectComponents:

    def test_first_principal_component(self, pca_decomposition):
        sel = select_components(pca_decomposition, n_components=1)
        assert isinstance(sel, ComponentSelection)
        assert sel.n_components == 1
        assert np.isclose(sel.eigenvalues[0], 1.28402771, atol=1e-8)
        assert np.allclose(np.abs(sel.eigenvectors[:, 0]), [0.677873399, 0.735178656], atol=1e-8)

    def test_ranked_by_magnitude(self, pca_decomposition):
        sel = select_components(pca_decomposition, n_components=2)
        assert np.allclose(sel.eigenvalues, [1.28402771, 0.0490833989], atol=1e-8)
        assert np.isclose(np.sum(sel.explained_variance_ratio), 1.0)

    @pytest.mark.parametrize("total_variance, expected", [(0.5, 1), (0.9, 1), (0.99, 2)])
    def test_total_variance(self, pca_decomposition, total_variance, expected):
        sel = select_components(pca_decomposition, total_variance=total_variance)
        assert sel.n_components == expected
        assert sel.eigenvectors.shape == (2, expected)

    def test_negative_eigenvalues_ranked_by_magnitude(self):
        dec = EigenvalueDecomposition(np.diag([1.0, -5.0, 2.0]))
        sel = select_components(dec, n_components=2)
        assert np.allclose(sel.eigenvalues, [-5.0, 2.0])
        assert np.allclose(sel.explained_variance_ratio, [0.625, 0.25])

    def test_projection_shape(self, pca_decomposition):
        sel         = select_components(pca_decomposition, n_components=1)
        centered    = PCA_SAMPLES - PCA_SAMPLES.mean(axis=0)
        projected   = centered @ sel.eigenvectors
        assert projected.shape == (10, 1)

    @pytest.mark.parametrize("kwargs", [
        {},
        {"n_components": 1, "total_variance": 0.9},
        {"total_variance": 0.05},
        {"total_variance": 1.0},
        {"n_components": 0},
        {"n_components": 3},
    ])
    def test_invalid_criteria(self, pca_decomposition, kwargs):
        with pytest.raises(InvalidInputError) as exc:
            select_components(pca_decomposition, **kwargs)
        assert exc.value.code == EigenErrorMsg.INVALID_ARGUMENT

    def test_complex_spectrum_rejected(self):
        dec = EigenvalueDecomposition(np.array([[0.0, -1.0], [1.0, 0.0]]))
        with pytest.raises(InvalidInputError):
            select_components(dec, n_components=1)

# ----------------------------------
#! EOF
# ----------------------------------
