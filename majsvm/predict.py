import logging

import numpy as np

from majsvm.kernels import kernel_test_matrix
from majsvm.simplex import simplex

logger = logging.getLogger(__name__)


def nearest_vertex(S, U):
    """
    Label of the nearest simplex vertex for every row of S.

    Parameters
    ----------
    S : ndarray of shape (n, K-1)
        Instances mapped to simplex space.
    U : ndarray of shape (K, K-1)
        Simplex vertices.

    Returns
    -------
    labels : ndarray of shape (n,)
        Labels in [1, K]. Ties go to the vertex with the lowest index.
    """
    dists = np.linalg.norm(S[:, np.newaxis, :] - U[np.newaxis, :, :], axis=2)  # Shape: (n, K)
    # argmin returns the first minimum
    return np.argmin(dists, axis=1) + 1


def predict_labels(model, dataset):
    """
    Predict class labels by mapping the data to simplex space with V and
    assigning each instance to the nearest simplex vertex.
    """
    if model.is_kernelized:
        Z = kernel_test_matrix(model, dataset)
    else:
        Z = dataset.Z
    if Z.shape[1] != model.V.shape[0]:
        raise ValueError(
            f"Data has {Z.shape[1] - 1} features, model expects {model.V.shape[0] - 1}."
        )
    S = Z @ model.V  # Shape: (n, K-1)
    return nearest_vertex(S, simplex(model.K))


def prediction_perf(y, predy):
    """Percentage of correctly classified instances."""
    y = np.asarray(y)
    predy = np.asarray(predy)
    return float(np.mean(y == predy) * 100.0)


def predict(model, dataset, logger=logger):
    """
    Predict labels for a dataset.

    Returns
    -------
    labels : ndarray of shape (n,)
    accuracy : float or None
        Percentage correct when the dataset is labeled, None otherwise.
    """
    labels = predict_labels(model, dataset)
    accuracy = None
    if dataset.y is not None:
        accuracy = prediction_perf(dataset.y, labels)
        logger.info("Predictive performance: %.2f%%", accuracy)
    return labels, accuracy
