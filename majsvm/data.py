import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import numpy as np
import pandas as pd
from sklearn.datasets import load_iris, load_wine

from majsvm.exceptions import DataFormatError
from majsvm.kernels import LinearKernel

logger = logging.getLogger(__name__)


def _readonly(a):
    if a is None:
        return None
    a = np.array(a, copy=True)
    a.setflags(write=False)
    return a


@dataclass(frozen=True)
class Dataset:
    """
    A labeled (or unlabeled) dataset in augmented form.

    Attributes
    ----------
    n : int
        Number of instances.
    m : int
        Number of features; equal to n after kernelization.
    K : int
        Number of classes.
    y : ndarray of shape (n,) or None
        Class labels in [1, K].
    Z : ndarray of shape (n, m+1)
        Augmented feature matrix, first column all ones.
    RAW : ndarray of shape (n, m_raw+1)
        Augmented raw feature matrix. Same as Z until the data is kernelized.
    kernel : kernel variant
        The kernel Z was built with.
    kernel_factor : ndarray of shape (n, n) or None
        Lower Cholesky factor of the kernel matrix when Z holds it.

    All arrays are read-only, so one Dataset can be shared between training runs.
    """
    n: int
    m: int
    K: int
    y: Optional[np.ndarray]
    Z: np.ndarray
    RAW: np.ndarray
    kernel: Any = field(default_factory=LinearKernel)
    kernel_factor: Optional[np.ndarray] = None

    def __post_init__(self):
        for name in ('y', 'Z', 'RAW', 'kernel_factor'):
            object.__setattr__(self, name, _readonly(getattr(self, name)))

    @property
    def X(self):
        """Raw features without the column of ones."""
        return self.RAW[:, 1:]


def augment(X):
    """Prepend a column of ones to X."""
    X = np.asarray(X, dtype=float)
    return np.hstack([np.ones((X.shape[0], 1)), X])


def from_arrays(X, y=None, K=None):
    """
    Build a Dataset from a feature matrix and labels in [1, K].

    Parameters
    ----------
    X : array-like of shape (n, m)
    y : array-like of shape (n,), optional
    K : int, optional
        Number of classes. Defaults to max(y).
    """
    Z = augment(X)
    n, m = Z.shape[0], Z.shape[1] - 1
    if y is not None:
        y = np.asarray(y, dtype=int).reshape(-1)
        if y.shape[0] != n:
            raise ValueError(f"Found {y.shape[0]} labels for {n} instances.")
        if K is None:
            K = int(y.max())
        if y.min() < 1 or y.max() > K:
            raise ValueError(
                f"Labels must lie in [1, {K}], found range [{y.min()}, {y.max()}]."
            )
    return Dataset(n=n, m=m, K=0 if K is None else int(K), y=y, Z=Z, RAW=Z)


def read_data(data_file):
    """
    Read a dataset from a text file.

    The first line holds n and m. Every following line holds m feature values,
    optionally followed by an integer label. Labels starting at 0 are shifted
    to start at 1.

    Parameters
    ----------
    data_file : str
        Path to the data file.

    Returns
    -------
    Dataset
    """
    try:
        with open(data_file, 'r') as fid:
            header = fid.readline().split()
            try:
                n, m = int(header[0]), int(header[1])
            except (IndexError, ValueError):
                raise DataFormatError(data_file, "first line must hold n and m.") from None
            try:
                df = pd.read_csv(fid, sep=r'\s+', header=None, dtype=float)
            except pd.errors.EmptyDataError:
                df = pd.DataFrame()
            except (pd.errors.ParserError, ValueError) as e:
                raise DataFormatError(data_file, f"could not parse data ({e}).") from e
    except OSError as e:
        raise DataFormatError(data_file, f"could not be opened ({e.strerror}).") from e

    values = df.to_numpy(dtype=float)  # Shape: (rows, m) or (rows, m+1)
    if values.shape[0] < n or values.shape[1] < m:
        raise DataFormatError(data_file, "not enough data found.")
    if values.shape[0] > n or values.shape[1] > m + 1:
        raise DataFormatError(
            data_file,
            f"expected {n} rows of {m} features, found a {values.shape[0]} x "
            f"{values.shape[1]} table."
        )
    if np.isnan(values[:, :m]).any():
        raise DataFormatError(data_file, "not enough data found.")

    X = values[:, :m]
    y = None
    K = 0
    if values.shape[1] == m + 1:
        labels = values[:, m]
        if np.isnan(labels).any():
            raise DataFormatError(data_file, "some instances have no label.")
        if np.any(labels != np.floor(labels)):
            raise DataFormatError(data_file, "class labels must be integers.")
        y = labels.astype(int)
        min_y = y.min()
        if min_y < 0:
            raise DataFormatError(
                data_file, f"wrong class labels, minimum value is: {min_y}"
            )
        if min_y == 0:
            y = y + 1
        K = int(y.max())

    dataset = from_arrays(X, y, K=K)
    logger.info("Successfully read data file: %s", data_file)
    return dataset


class Data(Enum):
    IRIS = 'iris'
    WINE = 'wine'


def get_data(data):
    """Return (X, y) for one of the bundled scikit-learn datasets, labels from 0."""
    if data == Data.IRIS:
        bunch = load_iris()
    elif data == Data.WINE:
        bunch = load_wine()
    else:
        raise ValueError('Invalid data type')
    return bunch.data, bunch.target
