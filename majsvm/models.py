import logging
from enum import Enum

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.utils.validation import check_X_y, check_array, check_is_fitted

from majsvm.data import from_arrays
from majsvm.kernels import KernelType, kernel_test_matrix, make_kernel
from majsvm.model import MAX_ITER, Hyperparameters
from majsvm.optimize import ConvergenceState, train
from majsvm.predict import predict_labels

logger = logging.getLogger(__name__)


class Weights(Enum):
    UNIT = 'unit'
    GROUP = 'group'


WEIGHT_IDX = {Weights.UNIT.value: 1, Weights.GROUP.value: 2}


class GenSVMClassifier(BaseEstimator, ClassifierMixin):
    def __init__(self,
                 p=1.0,
                 lambda_=2 ** -8,
                 kappa=0.0,
                 epsilon=1e-6,
                 weights=Weights.UNIT.value,
                 kernel='linear',
                 gamma=1.0,
                 coef=0.0,
                 degree=2.0,
                 use_cholesky=False,
                 max_iter=MAX_ITER,
                 random_state=None,
                 warm_start=False,
                 verbose=False):
        """
        Multiclass SVM trained by iterative majorization (GenSVM).

        Classes are encoded as the vertices of a regular simplex in K-1
        dimensions. Training minimizes a Huber hinge loss on the distances
        to the simplex vertices plus an L2 penalty on the weights; new
        instances get the label of the nearest vertex.

        Parameters
        ----------
        p : float, default=1.0
            Exponent of the L_p norm over the errors of an instance, in [1, 2].
        lambda_ : float, default=2**-8
            The regularization parameter.
        kappa : float, default=0.0
            The Huber hinge parameter, larger than -1.
        epsilon : float, default=1e-6
            Stopping criterion on the relative change of the loss.
        weights : str, default='unit'
            Instance weights. Supported types: 'unit', 'group'.
        kernel : str, default='linear'
            Supported types: 'linear', 'poly', 'rbf', 'sigmoid'.
        gamma : float, default=1.0
            Kernel parameter for 'poly', 'rbf' and 'sigmoid'.
        coef : float, default=0.0
            Kernel parameter for 'poly' and 'sigmoid'.
        degree : float, default=2.0
            Degree of the 'poly' kernel, truncated to an integer.
        use_cholesky : bool, default=False
            Train on the Cholesky factor of the kernel matrix.
        max_iter : int, default=100000000
            The maximum number of majorization iterations.
        random_state : int, default=None
            Seed for the random starting point.
        warm_start : bool, default=False
            Start from the solution of the previous call to fit.
        verbose : bool, default=False
            Whether to log progress information during training.

        Attributes
        ----------
        classes_ : ndarray of shape (n_classes,)
            The class labels.
        model_ : Model
            The trained model.
        coef_ : ndarray of shape (n_features, n_classes-1)
            Weight matrix W.
        intercept_ : ndarray of shape (n_classes-1,)
            Translation vector t.
        n_iter_ : int
            Number of iterations run.
        """
        self.p = p
        self.lambda_ = lambda_
        self.kappa = kappa
        self.epsilon = epsilon
        self.weights = weights
        self.kernel = kernel
        self.gamma = gamma
        self.coef = coef
        self.degree = degree
        self.use_cholesky = use_cholesky
        self.max_iter = max_iter
        self.random_state = random_state
        self.warm_start = warm_start
        self.verbose = verbose

    def _get_hyperparameters(self):
        if self.weights not in WEIGHT_IDX:
            raise ValueError("Invalid weights parameter. Must be 'unit' or 'group'.")
        return Hyperparameters(
            p=self.p,
            lambda_=self.lambda_,
            kappa=self.kappa,
            epsilon=self.epsilon,
            weight_idx=WEIGHT_IDX[self.weights],
            kernel=make_kernel(self.kernel, gamma=self.gamma, coef=self.coef,
                               degree=self.degree),
            use_cholesky=self.use_cholesky,
            max_iter=self.max_iter,
            random_state=self.random_state,
        )

    def fit(self, X, y):
        """
        Fit the model according to the given training data.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Training vectors.
        y : array-like of shape (n_samples,)
            Target values.

        Returns
        -------
        self : object
            Fitted estimator.
        """
        X, y = check_X_y(X, y)
        params = self._get_hyperparameters()

        classes, y_idx = np.unique(y, return_inverse=True)
        if len(classes) < 2:
            raise ValueError("At least 2 classes are required, got "
                             f"{len(classes)}.")

        # Kernel models have one row of V per training instance
        n_rows = (X.shape[0] if params.kernel.kind != KernelType.LINEAR else X.shape[1]) + 1

        seed_model = None
        if self.warm_start and hasattr(self, 'model_'):
            if not np.array_equal(classes, self.classes_):
                logger.warning("Classes changed since the last fit, ignoring warm start.")
            elif self.model_.V.shape != (n_rows, len(classes) - 1):
                logger.warning("Model shape changed since the last fit, ignoring warm start.")
            else:
                seed_model = self.model_
        self.classes_ = classes

        dataset = from_arrays(X, y_idx + 1, K=len(classes))

        run_logger = logging.getLogger(f"{__name__}.{type(self).__name__}")
        run_logger.setLevel(logging.INFO if self.verbose else logging.NOTSET)

        self.model_ = train(dataset, params, seed_model=seed_model, logger=run_logger)
        if self.model_.status == ConvergenceState.MAX_ITER_REACHED:
            logger.warning("GenSVM did not converge within %i iterations.", self.max_iter)

        self.n_iter_ = self.model_.n_iter
        self.coef_ = self.model_.W.copy()
        self.intercept_ = self.model_.t.copy()
        return self

    def decision_function(self, X):
        """
        Map the input samples to simplex space.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Input samples.

        Returns
        -------
        S : ndarray of shape (n_samples, n_classes-1)
            Coordinates of the samples in simplex space.
        """
        check_is_fitted(self, ['classes_', 'model_'])
        X = check_array(X)
        dataset = from_arrays(X)
        if self.model_.is_kernelized:
            Z = kernel_test_matrix(self.model_, dataset)
        else:
            Z = dataset.Z
        return Z @ self.model_.V

    def predict(self, X):
        """
        Perform classification by nearest simplex vertex.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Input samples.

        Returns
        -------
        y_pred : array-like of shape (n_samples,)
            Predicted class label per sample.
        """
        check_is_fitted(self, ['classes_', 'model_'])
        X = check_array(X)
        labels = predict_labels(self.model_, from_arrays(X))
        return self.classes_[labels - 1]
