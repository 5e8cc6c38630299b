import logging
from enum import Enum

import numpy as np
from scipy import sparse

from majsvm import majorization
from majsvm.kernels import kernelize
from majsvm.model import Model
from majsvm.simplex import simplex, simplex_diff
from majsvm.solver import solve_system

logger = logging.getLogger(__name__)

PRINT_ITER = 100
STEP_DOUBLING_ITER = 50


class ConvergenceState(Enum):
    INIT = 'init'
    ITERATING = 'iterating'
    CONVERGED = 'converged'
    MAX_ITER_REACHED = 'max_iter_reached'


def initialize_weights(y, K, weight_idx):
    """
    Instance weights rho.

    weight_idx=1 gives unit weights, weight_idx=2 weights every instance by
    n / (K * n_k), with n_k the size of its class.
    """
    n = y.shape[0]
    if weight_idx == 1:
        return np.ones(n)
    if weight_idx == 2:
        groups = np.bincount(y - 1, minlength=K)  # Shape: (K,)
        return n / (groups[y - 1] * K)
    raise ValueError(f"Unknown weight specification: {weight_idx}.")


def initialize_V(Z, K, rng):
    """
    Random starting point, scaled per column by the range of that column of Z.

    Every entry of row i is drawn uniformly between 1/min(Z[:, i]) and
    1/max(Z[:, i]), with near-zero extremes replaced by -1 and 1.
    """
    cmin = Z.min(axis=0)  # Shape: (m+1,)
    cmax = Z.max(axis=0)
    cmin = np.where(np.abs(cmin) < 1e-10, -1.0, cmin)
    cmax = np.where(np.abs(cmax) < 1e-10, 1.0, cmax)
    u = rng.random((Z.shape[1], K - 1))
    return 1.0 / cmin[:, np.newaxis] + (1.0 / cmax - 1.0 / cmin)[:, np.newaxis] * u


def _update_errors(model, Z, mask):
    model.Q[:] = majorization.calculate_errors(Z, model.V, model.UU)
    model.H[:] = majorization.calculate_huber(model.Q, model.kappa, mask)
    model.R[:] = majorization.calculate_active(model.H)


def get_loss(model, Z, mask):
    """Recompute Q, H and R from the current V and return the loss."""
    _update_errors(model, Z, mask)
    return majorization.get_loss(model.H, model.rho, model.V, model.p, model.lambda_)


def get_update(model, Z, Z_products, mask, logger=logger):
    """
    Perform one MM update of V.

    Builds the majorization at the current V, solves
    (Z'AZ + lambda J) V_new = Z'AZ V + Z'B and stores the previous V in Vbar.
    Q, H and R must be up to date with V.

    Parameters
    ----------
    Z : ndarray of shape (n, m+1)
    Z_products : ndarray or sparse matrix
        Z itself, or its CSR form when the sparse path is used.
    mask : ndarray of shape (n, K)
    """
    alpha, beta = majorization.get_alpha_beta(
        model.Q, model.H, model.R, mask, model.UU, model.rho, model.p, model.kappa
    )
    ZAZ, ZB = majorization.get_ZAZ_ZB(Z_products, alpha, beta)

    rhs = ZAZ @ model.V + ZB  # Shape: (m+1, K-1)

    # Regularize everything but the translation
    lhs = ZAZ.copy()
    idx = np.arange(1, model.m + 1)
    lhs[idx, idx] += model.lambda_

    V_new = solve_system(lhs, rhs, logger=logger)

    model.Vbar[:] = model.V
    model.V[:] = V_new


def step_doubling(model):
    """V <- 2 V - Vbar."""
    model.V[:] = 2.0 * model.V - model.Vbar


def train(dataset, params, seed_model=None, logger=logger):
    """
    Fit a GenSVM model by iterative majorization.

    Parameters
    ----------
    dataset : Dataset
        Labeled training data in raw (linear) representation.
    params : Hyperparameters
    seed_model : Model, optional
        Model whose V is used as the starting point. Must have the same
        shape as the model being trained.
    logger : logging.Logger, optional
        Sink for progress messages.

    Returns
    -------
    model : Model
        Trained model; model.status is CONVERGED or MAX_ITER_REACHED.
    """
    if dataset.y is None:
        raise ValueError("Training requires a labeled dataset.")
    counts = np.bincount(np.asarray(dataset.y) - 1, minlength=dataset.K)
    if dataset.K < 2 or np.any(counts == 0):
        empty = np.flatnonzero(counts == 0) + 1
        raise ValueError(
            f"Every class in [1, {dataset.K}] needs at least one instance, "
            f"classes without instances: {empty.tolist()}."
        )

    model = Model(params)
    model.status = ConvergenceState.INIT

    data = kernelize(dataset, params.kernel, use_cholesky=params.use_cholesky)
    if data is not dataset:
        model.train_raw = dataset.RAW
        model.kernel_factor = data.kernel_factor

    model.allocate(data.n, data.m, data.K)
    n, m, K = model.n, model.m, model.K
    y = np.asarray(data.y)
    Z = np.asarray(data.Z)

    model.U[:] = simplex(K)
    model.UU[:] = simplex_diff(model.U, y)
    model.rho[:] = initialize_weights(y, K, params.weight_idx)

    mask = np.ones((n, K))
    mask[np.arange(n), y - 1] = 0.0

    if seed_model is not None:
        if seed_model.V.shape != model.V.shape:
            raise ValueError(
                f"Seed model has V of shape {seed_model.V.shape}, "
                f"expected {model.V.shape}."
            )
        model.V[:] = seed_model.V
    else:
        rng = np.random.default_rng(params.random_state)
        model.V[:] = initialize_V(Z, K, rng)

    Z_products = Z
    if majorization.use_sparse(Z):
        Z_products = sparse.csr_matrix(Z)
        logger.debug("Using sparse products for Z.")

    logger.info("Starting main loop.")
    logger.info("Dataset: n = %i, m = %i, K = %i", n, m, K)
    logger.info("Parameters: kappa = %f, p = %f, lambda = %.16f, epsilon = %g",
                model.kappa, model.p, model.lambda_, model.epsilon)

    model.status = ConvergenceState.ITERATING
    L = get_loss(model, Z, mask)
    Lbar = L
    model.history = [L]
    it = 0
    while True:
        if it >= model.max_iter:
            model.status = ConvergenceState.MAX_ITER_REACHED
            break

        get_update(model, Z, Z_products, mask, logger=logger)
        if it > STEP_DOUBLING_ITER:
            step_doubling(model)

        Lbar = L
        L = get_loss(model, Z, mask)
        model.history.append(L)
        it += 1

        if L > Lbar:
            logger.warning("Negative step occurred in majorization "
                           "(iter = %i, L = %.16f, Lbar = %.16f).", it, L, Lbar)

        if Lbar < np.finfo(float).eps:
            rel_diff = 0.0
        else:
            rel_diff = abs(Lbar - L) / Lbar
        if it % PRINT_ITER == 0:
            logger.debug("iter = %i, L = %.16f, Lbar = %.16f, reldiff = %.16f",
                         it, L, Lbar, rel_diff)
        if rel_diff < model.epsilon:
            model.status = ConvergenceState.CONVERGED
            break

    if model.status == ConvergenceState.MAX_ITER_REACHED:
        logger.warning("Maximum number of iterations reached.")

    model.n_iter = it
    model.loss = L
    model.training_error = abs(Lbar - L) / Lbar if Lbar > 0 else 0.0
    logger.info("Optimization finished, iter = %i, loss = %.16f, "
                "rel. diff. = %.16f", it, L, model.training_error)
    logger.info("Number of support vectors: %i",
                majorization.num_support_vectors(model.Q, mask))
    return model
