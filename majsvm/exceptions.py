import numpy as np


class MajSVMError(Exception):
    """Base class for all errors raised by majsvm."""


class DataFormatError(MajSVMError, ValueError):
    """A data or model file does not match the expected format."""

    def __init__(self, filename, message):
        self.filename = filename
        super().__init__(f"{filename}: {message}")


class KernelError(MajSVMError):
    """The kernel matrix could not be factorized."""

    def __init__(self, status):
        self.status = status
        super().__init__(
            f"Error ({status}) computing Cholesky decomposition of kernel matrix."
        )


class SolverError(MajSVMError, np.linalg.LinAlgError):
    """The linear system of an MM iteration could not be solved."""


class NotPositiveDefiniteError(SolverError):
    def __init__(self, pivot):
        self.pivot = pivot
        super().__init__(
            f"System matrix is not positive definite "
            f"(leading minor of order {pivot})."
        )


class SingularSystemError(SolverError):
    def __init__(self, status):
        self.status = status
        super().__init__(f"Indefinite solve failed with status {status}.")
