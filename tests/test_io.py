import numpy as np
import pytest

from majsvm.data import from_arrays, read_data
from majsvm.exceptions import DataFormatError
from majsvm.io import read_model, write_model, write_predictions
from majsvm.model import Hyperparameters, Model


def write(tmp_path, text, name='data.txt'):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


def test_read_labeled_data(tmp_path):
    path = write(tmp_path, "3 2\n1.0 2.0 1\n3.0 4.0 2\n5.0 6.0 3\n")
    dataset = read_data(path)
    assert (dataset.n, dataset.m, dataset.K) == (3, 2, 3)
    np.testing.assert_array_equal(dataset.y, [1, 2, 3])
    np.testing.assert_array_equal(dataset.Z, [[1, 1, 2], [1, 3, 4], [1, 5, 6]])
    np.testing.assert_array_equal(dataset.RAW, dataset.Z)


def test_read_zero_based_labels(tmp_path):
    path = write(tmp_path, "3 1\n0.5 0\n1.5 1\n2.5 2\n")
    dataset = read_data(path)
    np.testing.assert_array_equal(dataset.y, [1, 2, 3])
    assert dataset.K == 3


def test_read_unlabeled_data(tmp_path):
    path = write(tmp_path, "2 3\n1 2 3\n4 5 6\n")
    dataset = read_data(path)
    assert dataset.y is None
    assert dataset.K == 0
    assert dataset.Z.shape == (2, 4)


def test_read_negative_labels(tmp_path):
    path = write(tmp_path, "2 1\n1.0 -1\n2.0 1\n")
    with pytest.raises(DataFormatError, match="wrong class labels, minimum value is: -1"):
        read_data(path)


@pytest.mark.parametrize("text", [
    "3 2\n1 2 1\n3 4 2\n",
    "2 3\n1 2\n3 4\n",
    "2 2\n",
])
def test_read_not_enough_data(tmp_path, text):
    with pytest.raises(DataFormatError, match="not enough data"):
        read_data(write(tmp_path, text))


def test_read_too_much_data(tmp_path):
    with pytest.raises(DataFormatError, match="expected 1 rows"):
        read_data(write(tmp_path, "1 1\n1 1\n2 1\n"))


def test_read_missing_label(tmp_path):
    with pytest.raises(DataFormatError, match="no label"):
        read_data(write(tmp_path, "2 1\n1.0 1\n2.0\n"))


@pytest.mark.parametrize("header", ["", "two 2", "3"])
def test_read_bad_header(tmp_path, header):
    with pytest.raises(DataFormatError, match="first line"):
        read_data(write(tmp_path, header + "\n1 2 1\n"))


def test_read_non_numeric(tmp_path):
    with pytest.raises(DataFormatError):
        read_data(write(tmp_path, "2 1\n1.0 1\nabc 2\n"))


def test_read_missing_file(tmp_path):
    with pytest.raises(DataFormatError) as excinfo:
        read_data(str(tmp_path / 'missing.txt'))
    assert excinfo.value.filename.endswith('missing.txt')


def make_model():
    params = Hyperparameters(p=1.5, lambda_=2 ** -4, kappa=0.5, epsilon=1e-6, weight_idx=2)
    model = Model(params)
    model.allocate(10, 3, 4)
    model.V[:] = np.random.default_rng(0).standard_normal((4, 3))
    model.data_file = 'train.txt'
    return model


def test_model_roundtrip(tmp_path):
    model = make_model()
    path = str(tmp_path / 'model.txt')
    write_model(model, path)
    loaded = read_model(path)

    assert (loaded.n, loaded.m, loaded.K) == (10, 3, 4)
    assert loaded.p == 1.5
    assert loaded.lambda_ == 2 ** -4
    assert loaded.kappa == 0.5
    assert loaded.epsilon == 1e-6
    assert loaded.weight_idx == 2
    assert loaded.data_file == 'train.txt'
    np.testing.assert_allclose(loaded.V, model.V, rtol=1e-14, atol=1e-15)


def test_model_file_layout(tmp_path):
    model = make_model()
    model.data_file = None
    path = tmp_path / 'model.txt'
    write_model(model, str(path))
    lines = path.read_text().splitlines()

    assert lines[0].startswith("Output file for majsvm (version ")
    assert lines[1].startswith("Generated on: ")
    assert lines[3] == "Model:"
    assert lines[4] == "p = 1.5000000000000000"
    assert lines[7] == "epsilon = 1e-06"
    assert lines[10] == "Data:"
    assert lines[11] == "filename = "
    assert lines[16] == "Output:"
    assert len(lines) == 17 + 4
    assert all(len(line.split()) == 3 for line in lines[17:])
    assert read_model(str(path)).data_file is None


def test_read_model_truncated_V(tmp_path):
    path = tmp_path / 'model.txt'
    write_model(make_model(), str(path))
    lines = path.read_text().splitlines()
    path.write_text("\n".join(lines[:-1]) + "\n")
    with pytest.raises(DataFormatError, match="Not enough elements"):
        read_model(str(path))


def test_read_model_bad_field(tmp_path):
    path = tmp_path / 'model.txt'
    write_model(make_model(), str(path))
    lines = path.read_text().splitlines()
    lines[5] = "lambda = abc"
    path.write_text("\n".join(lines) + "\n")
    with pytest.raises(DataFormatError, match="lambda"):
        read_model(str(path))


def test_write_predictions(tmp_path):
    dataset = from_arrays(np.array([[1.0, 2.5], [-3.0, 0.0]]))
    path = tmp_path / 'pred.txt'
    write_predictions(dataset, np.array([2, 1]), str(path))
    assert path.read_text().splitlines() == [
        "1.000000 2.500000 2",
        "-3.000000 0.000000 1",
    ]


def test_read_non_integer_labels(tmp_path):
    with pytest.raises(DataFormatError, match="integers"):
        read_data(write(tmp_path, "2 1\n1.0 1\n2.0 1.5\n"))
