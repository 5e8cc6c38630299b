import numpy as np
import pytest

from majsvm.data import from_arrays
from majsvm.exceptions import KernelError
from majsvm.kernels import (KernelType, LinearKernel, PolyKernel, RBFKernel,
                            SigmoidKernel, cross_kernel_matrix, kernel_matrix,
                            kernelize, make_kernel)

KERNELS = [
    PolyKernel(gamma=0.5, coef=1.0, degree=3),
    RBFKernel(gamma=0.7),
    SigmoidKernel(gamma=0.1, coef=-0.5),
]


@pytest.fixture
def X():
    return np.random.default_rng(3).standard_normal((8, 3))


@pytest.mark.parametrize("kernel", KERNELS)
def test_kernel_matrix_is_symmetric(kernel, X):
    K = kernel_matrix(kernel, X)
    assert K.shape == (8, 8)
    assert np.array_equal(K, K.T)


@pytest.mark.parametrize("kernel", KERNELS)
def test_kernel_matrix_matches_pairwise(kernel, X):
    K = kernel_matrix(kernel, X)
    for i in range(X.shape[0]):
        for j in range(X.shape[0]):
            assert K[i, j] == pytest.approx(kernel.compute(X[i], X[j]))


@pytest.mark.parametrize("gamma", [1e-3, 0.5, 1.0, 10.0])
def test_rbf_self_similarity(gamma, X):
    kernel = RBFKernel(gamma=gamma)
    for x in X:
        assert kernel.compute(x, x) == 1.0
    np.testing.assert_allclose(np.diag(kernel_matrix(kernel, X)), 1.0)


def test_pairwise_formulas():
    x1 = np.array([1.0, 2.0])
    x2 = np.array([0.5, -1.0])
    assert PolyKernel(gamma=2.0, coef=1.0, degree=2).compute(x1, x2) == pytest.approx((2.0 * -1.5 + 1.0) ** 2)
    assert RBFKernel(gamma=0.5).compute(x1, x2) == pytest.approx(np.exp(-0.5 * 9.25))
    assert SigmoidKernel(gamma=0.5, coef=0.1).compute(x1, x2) == pytest.approx(np.tanh(-0.75 + 0.1))


def test_poly_degree_is_truncated():
    assert PolyKernel(degree=3.7).degree == 3


def test_linear_kernel_is_not_evaluated():
    with pytest.raises(ValueError):
        LinearKernel().compute(np.ones(2), np.ones(2))


def test_make_kernel():
    assert make_kernel('linear') == LinearKernel()
    assert make_kernel('rbf', gamma=0.3) == RBFKernel(gamma=0.3)
    assert make_kernel(KernelType.POLY, gamma=2.0, coef=1.0, degree=4) == PolyKernel(2.0, 1.0, 4)
    assert make_kernel('sigmoid', gamma=0.2, coef=0.1, degree=9) == SigmoidKernel(0.2, 0.1)


def test_make_kernel_unknown():
    with pytest.raises(ValueError, match="Unknown kernel type"):
        make_kernel('laplacian')


def test_cross_kernel_matrix(X):
    kernel = RBFKernel(gamma=0.4)
    C = cross_kernel_matrix(kernel, X[:3], X[3:])
    assert C.shape == (3, 5)
    assert C[1, 2] == pytest.approx(kernel.compute(X[1], X[5]))


def test_kernelize_is_pure(X):
    dataset = from_arrays(X, np.array([1, 2] * 4))
    kernel = RBFKernel(gamma=0.5)
    kdata = kernelize(dataset, kernel)

    assert kdata.m == 8
    assert kdata.Z.shape == (8, 9)
    np.testing.assert_array_equal(kdata.Z[:, 0], 1.0)
    np.testing.assert_allclose(kdata.Z[:, 1:], kernel_matrix(kernel, X))
    assert kdata.kernel == kernel

    assert dataset.m == 3
    assert dataset.kernel == LinearKernel()
    np.testing.assert_array_equal(dataset.Z[:, 1:], X)
    np.testing.assert_array_equal(kdata.RAW, dataset.RAW)


def test_kernelize_linear_returns_dataset(X):
    dataset = from_arrays(X, np.array([1, 2] * 4))
    assert kernelize(dataset, LinearKernel()) is dataset


def test_kernelize_cholesky(X):
    dataset = from_arrays(X, np.array([1, 2] * 4))
    kernel = RBFKernel(gamma=0.5)
    kdata = kernelize(dataset, kernel, use_cholesky=True)
    L = kdata.Z[:, 1:]
    np.testing.assert_allclose(L, np.tril(L))
    np.testing.assert_allclose(L @ L.T, kernel_matrix(kernel, X), atol=1e-10)
    np.testing.assert_array_equal(kdata.kernel_factor, L)


def test_kernelize_cholesky_not_positive_definite():
    # Two identical rows give a singular kernel matrix
    dataset = from_arrays(np.array([[1.0], [1.0], [2.0]]), np.array([1, 2, 2]))
    with pytest.raises(KernelError) as excinfo:
        kernelize(dataset, PolyKernel(gamma=1.0, coef=0.0, degree=1), use_cholesky=True)
    assert excinfo.value.status == 2
