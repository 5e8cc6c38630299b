from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from majsvm.kernels import LinearKernel

MAX_ITER = 100000000


@dataclass
class Hyperparameters:
    """
    Parameters of a single training run.

    Parameters
    ----------
    p : float, default=1.0
        Exponent of the L_p norm combining the errors of an instance, in [1, 2].
    lambda_ : float, default=2**-8
        Regularization parameter.
    kappa : float, default=0.0
        Huber hinge parameter, > -1.
    epsilon : float, default=1e-6
        Stopping criterion on the relative loss change.
    weight_idx : int, default=1
        Instance weights: 1 for unit weights, 2 for group-size weights.
    kernel : kernel variant, default=LinearKernel()
    use_cholesky : bool, default=False
        Replace the kernel matrix by its Cholesky factor.
    max_iter : int, default=MAX_ITER
        Maximum number of MM iterations.
    random_state : int or None, default=None
        Seed for the initialization of V.
    """
    p: float = 1.0
    lambda_: float = 2 ** -8
    kappa: float = 0.0
    epsilon: float = 1e-6
    weight_idx: int = 1
    kernel: Any = field(default_factory=LinearKernel)
    use_cholesky: bool = False
    max_iter: int = MAX_ITER
    random_state: Optional[int] = None

    def __post_init__(self):
        if not 1.0 <= self.p <= 2.0:
            raise ValueError(f"p must be in [1, 2], got {self.p}.")
        if self.lambda_ <= 0:
            raise ValueError(f"lambda_ must be positive, got {self.lambda_}.")
        if self.kappa <= -1:
            raise ValueError(f"kappa must be larger than -1, got {self.kappa}.")
        if self.epsilon <= 0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}.")
        if self.weight_idx not in (1, 2):
            raise ValueError(f"weight_idx must be 1 or 2, got {self.weight_idx}.")
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be at least 1, got {self.max_iter}.")


class Model:
    """
    Parameters and work buffers of a GenSVM model.

    Attributes
    ----------
    V : ndarray of shape (m+1, K-1)
        Augmented weight matrix [t; W], the optimized quantity.
    Vbar : ndarray of shape (m+1, K-1)
        V from the previous iteration.
    U : ndarray of shape (K, K-1)
        Simplex matrix.
    UU : ndarray of shape (n, K, K-1)
        Simplex differences u_{y_i} - u_j.
    Q : ndarray of shape (n, K)
        Errors q_i^(j).
    H : ndarray of shape (n, K)
        Huber weighted errors.
    R : ndarray of shape (n, K)
        1 where a non-true class is active in the majorization.
    rho : ndarray of shape (n,)
        Instance weights.
    """

    def __init__(self, params=None):
        params = Hyperparameters() if params is None else params
        self.p = params.p
        self.lambda_ = params.lambda_
        self.kappa = params.kappa
        self.epsilon = params.epsilon
        self.weight_idx = params.weight_idx
        self.kernel = params.kernel
        self.use_cholesky = params.use_cholesky
        self.max_iter = params.max_iter

        self.n = 0
        self.m = 0
        self.K = 0
        self.V = None
        self.Vbar = None
        self.U = None
        self.UU = None
        self.Q = None
        self.H = None
        self.R = None
        self.rho = None

        self.data_file = None
        self.train_raw = None
        self.kernel_factor = None
        self.status = None
        self.n_iter = 0
        self.loss = None
        self.training_error = None
        self.history = []

    def allocate(self, n, m, K):
        """
        Size every dimension dependent buffer for n instances, m features and
        K classes. Buffers are only recreated when the dimensions change.
        """
        if K < 2:
            raise ValueError(f"At least 2 classes are required, got K={K}.")
        if (n, m, K) == (self.n, self.m, self.K) and self.V is not None:
            return
        if K != self.K:
            self.U = np.zeros((K, K - 1))
        if (m, K) != (self.m, self.K) or self.V is None:
            self.V = np.zeros((m + 1, K - 1))
            self.Vbar = np.zeros((m + 1, K - 1))
        if (n, K) != (self.n, self.K) or self.UU is None:
            self.UU = np.zeros((n, K, K - 1))
            self.Q = np.zeros((n, K))
            self.H = np.zeros((n, K))
            self.R = np.zeros((n, K))
        if n != self.n or self.rho is None:
            self.rho = np.zeros(n)
        self.n, self.m, self.K = n, m, K

    @property
    def t(self):
        """Translation vector, shape (K-1,)."""
        return self.V[0]

    @property
    def W(self):
        """Weight matrix, shape (m, K-1)."""
        return self.V[1:]

    @property
    def is_kernelized(self):
        return self.train_raw is not None
