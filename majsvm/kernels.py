import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

import numpy as np
from scipy.linalg import lapack, solve_triangular
from sklearn.metrics.pairwise import polynomial_kernel, rbf_kernel, sigmoid_kernel

from majsvm.exceptions import KernelError

logger = logging.getLogger(__name__)


class KernelType(Enum):
    LINEAR = 'linear'
    POLY = 'poly'
    RBF = 'rbf'
    SIGMOID = 'sigmoid'


@dataclass(frozen=True)
class LinearKernel:
    """
    The identity feature map. A linear kernel is never evaluated: the data is
    used as is.
    """
    kind: ClassVar[KernelType] = KernelType.LINEAR

    def compute(self, x1, x2):
        raise ValueError("Linear kernels are not evaluated; use the raw features.")

    def matrix(self, X1, X2):
        raise ValueError("Linear kernels are not evaluated; use the raw features.")


@dataclass(frozen=True)
class PolyKernel:
    """
    Polynomial kernel k(x1, x2) = (gamma * <x1, x2> + coef) ** degree.

    The degree is truncated to an integer.
    """
    gamma: float = 1.0
    coef: float = 0.0
    degree: float = 2.0
    kind: ClassVar[KernelType] = KernelType.POLY

    def __post_init__(self):
        object.__setattr__(self, 'degree', int(self.degree))

    def compute(self, x1, x2):
        return (self.gamma * np.dot(x1, x2) + self.coef) ** self.degree

    def matrix(self, X1, X2):
        return polynomial_kernel(X1, X2, degree=self.degree, gamma=self.gamma,
                                 coef0=self.coef)


@dataclass(frozen=True)
class RBFKernel:
    """Radial basis function kernel k(x1, x2) = exp(-gamma * ||x1 - x2||^2)."""
    gamma: float = 1.0
    kind: ClassVar[KernelType] = KernelType.RBF

    def compute(self, x1, x2):
        diff = np.asarray(x1, dtype=float) - np.asarray(x2, dtype=float)
        return np.exp(-self.gamma * np.dot(diff, diff))

    def matrix(self, X1, X2):
        return rbf_kernel(X1, X2, gamma=self.gamma)


@dataclass(frozen=True)
class SigmoidKernel:
    """Sigmoid kernel k(x1, x2) = tanh(gamma * <x1, x2> + coef)."""
    gamma: float = 1.0
    coef: float = 0.0
    kind: ClassVar[KernelType] = KernelType.SIGMOID

    def compute(self, x1, x2):
        return np.tanh(self.gamma * np.dot(x1, x2) + self.coef)

    def matrix(self, X1, X2):
        return sigmoid_kernel(X1, X2, gamma=self.gamma, coef0=self.coef)


def make_kernel(kind, gamma=1.0, coef=0.0, degree=2.0):
    """
    Build a kernel from its name, keeping only the parameters it uses.

    Parameters
    ----------
    kind : str or KernelType
        One of 'linear', 'poly', 'rbf', 'sigmoid'.
    gamma, coef, degree : float
        Kernel parameters; ignored where the kernel does not use them.
    """
    try:
        kind = KernelType(kind)
    except ValueError:
        raise ValueError(
            f"Unknown kernel type {kind!r}. Supported types: "
            f"{', '.join(k.value for k in KernelType)}."
        ) from None

    if kind == KernelType.LINEAR:
        return LinearKernel()
    if kind == KernelType.POLY:
        return PolyKernel(gamma=gamma, coef=coef, degree=degree)
    if kind == KernelType.RBF:
        return RBFKernel(gamma=gamma)
    return SigmoidKernel(gamma=gamma, coef=coef)


def kernel_matrix(kernel, X):
    """
    Compute the symmetric kernel matrix of the rows of X.

    Only the upper triangle is kept from the evaluation and mirrored into the
    lower triangle, so the result is exactly symmetric.
    """
    X = np.asarray(X, dtype=float)
    K = kernel.matrix(X, X)  # Shape: (n, n)
    upper = np.triu(K)
    return upper + np.triu(K, k=1).T


def cross_kernel_matrix(kernel, X_test, X_train):
    """Kernel evaluations between test rows and training rows, shape (n_test, n_train)."""
    return kernel.matrix(np.asarray(X_test, dtype=float),
                         np.asarray(X_train, dtype=float))


def cholesky_factor(K):
    """
    Lower Cholesky factor L of K = L L^T, via LAPACK dpotrf.

    Raises KernelError with the LAPACK status if K is not positive definite.
    """
    L, info = lapack.dpotrf(K, lower=1, clean=1)
    if info != 0:
        raise KernelError(info)
    return L


def kernelize(dataset, kernel, use_cholesky=False):
    """
    Return a copy of the dataset with its features replaced by the kernel matrix.

    The new augmented matrix is [1 | K], or [1 | L] with K = L L^T when
    use_cholesky is set, and m becomes n. The input dataset is not modified.
    A linear kernel returns the dataset unchanged.
    """
    if kernel.kind == KernelType.LINEAR:
        return dataset

    n = dataset.n
    K = kernel_matrix(kernel, dataset.RAW[:, 1:])  # Shape: (n, n)

    factor = None
    if use_cholesky:
        factor = cholesky_factor(K)
        logger.info("Got Cholesky.")
        K = factor

    Z = np.hstack([np.ones((n, 1)), K])  # Shape: (n, n+1)
    return dataclasses.replace(dataset, Z=Z, m=n, kernel=kernel,
                               kernel_factor=factor)


def kernel_test_matrix(model, dataset):
    """
    Map a test dataset into the feature space of a kernelized model.

    Parameters
    ----------
    model : Model
        Trained model holding the raw training data and the kernel.
    dataset : Dataset
        Test data in raw (linear) representation.

    Returns
    -------
    Z : ndarray of shape (n_test, n_train+1)
    """
    K_test = cross_kernel_matrix(model.kernel, dataset.RAW[:, 1:],
                                 model.train_raw[:, 1:])  # Shape: (n_test, n_train)
    if model.kernel_factor is not None:
        # Rows of L are the training features, so test features r solve r L^T = k
        K_test = solve_triangular(model.kernel_factor, K_test.T, lower=True).T
    return np.hstack([np.ones((K_test.shape[0], 1)), K_test])
