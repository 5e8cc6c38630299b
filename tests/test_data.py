import dataclasses

import numpy as np
import pytest

from majsvm.data import Data, augment, from_arrays, get_data


def test_augment():
    Z = augment([[2.0, 3.0], [4.0, 5.0]])
    np.testing.assert_array_equal(Z, [[1, 2, 3], [1, 4, 5]])


def test_from_arrays(separable_binary):
    assert (separable_binary.n, separable_binary.m, separable_binary.K) == (4, 2, 2)
    np.testing.assert_array_equal(separable_binary.Z[:, 0], 1.0)
    np.testing.assert_array_equal(separable_binary.X, separable_binary.Z[:, 1:])


def test_from_arrays_explicit_K():
    dataset = from_arrays(np.zeros((2, 1)), [1, 2], K=5)
    assert dataset.K == 5


def test_from_arrays_label_count():
    with pytest.raises(ValueError, match="labels"):
        from_arrays(np.zeros((3, 2)), [1, 2])


def test_dataset_is_immutable(separable_binary):
    with pytest.raises(dataclasses.FrozenInstanceError):
        separable_binary.n = 10
    with pytest.raises(ValueError):
        separable_binary.Z[0, 0] = 5.0
    with pytest.raises(ValueError):
        separable_binary.y[0] = 2


def test_dataset_does_not_share_input():
    X = np.array([[1.0], [2.0]])
    y = np.array([1, 2])
    dataset = from_arrays(X, y)
    X[0, 0] = 100.0
    y[0] = 2
    assert dataset.Z[0, 1] == 1.0
    assert dataset.y[0] == 1


@pytest.mark.parametrize("data,shape", [(Data.IRIS, (150, 4)), (Data.WINE, (178, 13))])
def test_get_data(data, shape):
    X, y = get_data(data)
    assert X.shape == shape
    assert y.min() == 0


def test_get_data_invalid():
    with pytest.raises(ValueError):
        get_data('mnist')


@pytest.mark.parametrize("y,K", [([0, 0, 1, 1, 2, 2], None), ([1, 2, 2, 3, 3, 4], 3), ([-1, 1, 1, 2, 2, 2], None)])
def test_from_arrays_label_range(y, K):
    with pytest.raises(ValueError, match="Labels must lie in"):
        from_arrays(np.zeros((6, 2)), y, K=K)
