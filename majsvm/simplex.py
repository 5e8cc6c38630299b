import numpy as np


def simplex(K):
    """
    Generate the vertices of a regular simplex centered at the origin.

    Column j places vertex j+1 at a new coordinate while vertices 0..j share
    the same negative offset, so the rows built for K-1 classes keep their
    coordinates when a class is added.

    Parameters
    ----------
    K : int
        Number of classes, at least 2.

    Returns
    -------
    U : ndarray of shape (K, K-1)
        Row k is the vertex of class k+1. All pairwise distances are 1, so
        every row has norm sqrt((K-1) / (2K)) rather than 1.
    """
    if K < 2:
        raise ValueError(f"A simplex needs at least 2 vertices, got K={K}.")

    U = np.zeros((K, K - 1))
    for j in range(K - 1):
        U[: j + 1, j] = -1.0 / np.sqrt(2.0 * (j + 1) * (j + 2))
        U[j + 1, j] = np.sqrt((j + 1) / (2.0 * (j + 2)))
    return U


def simplex_diff(U, y):
    """
    Compute UU[i, j] = u_{y_i} - u_j for every instance and class.

    Parameters
    ----------
    U : ndarray of shape (K, K-1)
    y : ndarray of shape (n,)
        Labels in [1, K].

    Returns
    -------
    UU : ndarray of shape (n, K, K-1)
    """
    y = np.asarray(y, dtype=int)
    return U[y - 1][:, np.newaxis, :] - U[np.newaxis, :, :]
