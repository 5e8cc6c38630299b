import numpy as np
import pytest

from majsvm.data import from_arrays


@pytest.fixture
def separable_binary():
    """Four linearly separable points, two per class."""
    X = np.array([[-2.0, -1.0],
                  [-1.0, -2.0],
                  [1.0, 2.0],
                  [2.0, 1.0]])
    y = np.array([1, 1, 2, 2])
    return from_arrays(X, y)


@pytest.fixture
def blobs():
    """Three well separated Gaussian blobs in two dimensions."""
    rng = np.random.default_rng(0)
    centers = np.array([[0.0, 4.0], [-4.0, -2.0], [4.0, -2.0]])
    X = np.vstack([c + 0.5 * rng.standard_normal((20, 2)) for c in centers])
    y = np.repeat([1, 2, 3], 20)
    return from_arrays(X, y)


@pytest.fixture
def overlapping():
    """Four overlapping classes, so that many instances violate the margin."""
    rng = np.random.default_rng(1)
    centers = np.array([[0.0, 0.0], [1.0, 0.5], [0.5, 1.0], [1.0, 1.0]])
    X = np.vstack([c + 0.8 * rng.standard_normal((15, 2)) for c in centers])
    y = np.repeat([1, 2, 3, 4], 15)
    return from_arrays(X, y)
