import logging

__version__ = '0.1.0'

logging.getLogger(__name__).addHandler(logging.NullHandler())

from majsvm.data import Dataset, from_arrays, read_data  # noqa: E402
from majsvm.model import Hyperparameters, Model  # noqa: E402
from majsvm.optimize import ConvergenceState, train  # noqa: E402
from majsvm.predict import predict  # noqa: E402
