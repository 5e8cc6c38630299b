import logging
from datetime import datetime

import numpy as np

from majsvm import __version__
from majsvm.exceptions import DataFormatError
from majsvm.model import Hyperparameters, Model

logger = logging.getLogger(__name__)


def _get_value(lines, idx, key, cast, filename):
    try:
        name, value = lines[idx].split('=', 1)
    except (IndexError, ValueError):
        raise DataFormatError(filename, f"expected '{key} = ...' on line {idx + 1}.") from None
    if name.strip() != key:
        raise DataFormatError(filename, f"expected '{key} = ...' on line {idx + 1}.")
    try:
        return cast(value.strip())
    except ValueError:
        raise DataFormatError(filename, f"invalid value for {key}: {value.strip()!r}.") from None


def read_model(model_filename):
    """
    Read a model written by write_model.

    Returns
    -------
    Model
        Model with its parameters, dimensions and V restored.
    """
    try:
        with open(model_filename, 'r') as fid:
            lines = fid.read().splitlines()
    except OSError as e:
        raise DataFormatError(model_filename, f"could not be opened ({e.strerror}).") from e

    # Skip the banner, timestamp, blank line and "Model:"
    p = _get_value(lines, 4, 'p', float, model_filename)
    lambda_ = _get_value(lines, 5, 'lambda', float, model_filename)
    kappa = _get_value(lines, 6, 'kappa', float, model_filename)
    epsilon = _get_value(lines, 7, 'epsilon', float, model_filename)
    weight_idx = _get_value(lines, 8, 'weight_idx', int, model_filename)

    # Skip to the data section
    data_file = _get_value(lines, 11, 'filename', str, model_filename)
    n = _get_value(lines, 12, 'n', int, model_filename)
    m = _get_value(lines, 13, 'm', int, model_filename)
    K = _get_value(lines, 14, 'K', int, model_filename)

    # Skip to the output
    rows = [line.split() for line in lines[17:] if line.strip()]
    try:
        V = np.array([[float(v) for v in row] for row in rows])
    except ValueError:
        raise DataFormatError(model_filename, "V contains non-numeric values.") from None
    if V.size != (m + 1) * (K - 1) or len(rows) != m + 1:
        raise DataFormatError(model_filename, "Not enough elements of V found.")

    params = Hyperparameters(p=p, lambda_=lambda_, kappa=kappa, epsilon=epsilon,
                             weight_idx=weight_idx)
    model = Model(params)
    model.allocate(n, m, K)
    model.V[:] = V.reshape(m + 1, K - 1)
    model.data_file = data_file or None
    return model


def write_model(model, output_filename):
    """
    Write the model parameters, data dimensions and V to a text file.
    """
    now = datetime.now().astimezone()
    offset = now.utcoffset()
    minutes = int(offset.total_seconds() // 60) if offset is not None else 0
    sign = '+' if minutes >= 0 else '-'
    hours, minutes = divmod(abs(minutes), 60)

    with open(output_filename, 'w') as fid:
        fid.write(f"Output file for majsvm (version {__version__})\n")
        fid.write(f"Generated on: {now.strftime('%c')} (UTC {sign}{hours:02d}:{minutes:02d})\n\n")
        fid.write("Model:\n")
        fid.write(f"p = {model.p:.16f}\n")
        fid.write(f"lambda = {model.lambda_:.16f}\n")
        fid.write(f"kappa = {model.kappa:.16f}\n")
        fid.write(f"epsilon = {model.epsilon:g}\n")
        fid.write(f"weight_idx = {model.weight_idx}\n")
        fid.write("\n")
        fid.write("Data:\n")
        fid.write(f"filename = {model.data_file or ''}\n")
        fid.write(f"n = {model.n}\n")
        fid.write(f"m = {model.m}\n")
        fid.write(f"K = {model.K}\n")
        fid.write("\n")
        fid.write("Output:\n")
        for row in model.V:
            fid.write(" ".join(f"{v:+.16f}" for v in row) + "\n")
    logger.info("Wrote model to %s", output_filename)


def write_predictions(dataset, predy, output_filename):
    """Write the raw features of every instance followed by its predicted label."""
    with open(output_filename, 'w') as fid:
        for x, label in zip(dataset.X, predy):
            fid.write(" ".join(f"{v:f}" for v in x) + f" {int(label)}\n")
