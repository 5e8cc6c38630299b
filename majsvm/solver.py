import logging

import numpy as np
from scipy.linalg import lapack

from majsvm.exceptions import NotPositiveDefiniteError, SingularSystemError

logger = logging.getLogger(__name__)


def solve_cholesky(A, B):
    """
    Solve A X = B for symmetric positive definite A with LAPACK dposv.

    Raises NotPositiveDefiniteError with the order of the failing leading
    minor if A is not positive definite.
    """
    _, X, info = lapack.dposv(A, B, lower=1)
    if info > 0:
        raise NotPositiveDefiniteError(info)
    if info < 0:
        raise ValueError(f"Illegal value in argument {-info} of dposv.")
    return X


def solve_indefinite(A, B):
    """
    Solve A X = B for symmetric, possibly indefinite A with LAPACK dsysv.

    Raises SingularSystemError with the LAPACK status on failure.
    """
    _, _, X, info = lapack.dsysv(A, B, lower=1)
    if info != 0:
        raise SingularSystemError(info)
    return X


def solve_system(A, B, method='auto', logger=logger):
    """
    Solve the symmetric system A X = B.

    Parameters
    ----------
    A : ndarray of shape (d, d)
        Symmetric system matrix.
    B : ndarray of shape (d, r)
        Right-hand sides.
    method : str, default='auto'
        'cholesky' requires A to be positive definite, 'indefinite' uses the
        symmetric indefinite solver directly, and 'auto' tries the positive
        definite solver first and falls back to the indefinite one.

    Returns
    -------
    X : ndarray of shape (d, r)
    """
    A = np.asarray(A, dtype=float)
    B = np.asarray(B, dtype=float)
    if method == 'cholesky':
        return solve_cholesky(A, B)
    if method == 'indefinite':
        return solve_indefinite(A, B)
    if method != 'auto':
        raise ValueError("Invalid method. Supported methods: 'auto', 'cholesky', 'indefinite'.")

    try:
        return solve_cholesky(A, B)
    except NotPositiveDefiniteError as e:
        logger.warning("Received nonzero status from dposv: %i, "
                       "falling back to dsysv.", e.pivot)
    return solve_indefinite(A, B)
