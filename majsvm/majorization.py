"""
Quadratic majorization of the GenSVM loss.

For the current V every instance i and non-true class j get an error
q = z_i' V (u_{y_i} - u_j) and a Huber hinge value h(q). The loss term
(sum_j h(q_ij)^p)^(1/p) of an instance is bounded from above by a quadratic
in the errors, with coefficients a_ij and b_ij - a_ij q_ij. Summing these
bounds over the instances gives a weighted least squares problem in V whose
normal equations are (Z'AZ + lambda J) V = Z'AZ Vbar + Z'B.
"""
import numpy as np
from scipy import sparse

# Use the sparse products when fewer than this fraction of Z is nonzero
SPARSE_THRESHOLD = 0.25


def calculate_errors(Z, V, UU):
    """
    Compute the error matrix Q.

    Parameters
    ----------
    Z : ndarray of shape (n, m+1)
    V : ndarray of shape (m+1, K-1)
    UU : ndarray of shape (n, K, K-1)

    Returns
    -------
    Q : ndarray of shape (n, K)
        Q[i, j] = z_i' V (u_{y_i} - u_j), zero at the true class.
    """
    ZV = Z @ V  # Shape: (n, K-1)
    return np.einsum('ik,ijk->ij', ZV, UU)


def calculate_huber(Q, kappa, mask):
    """
    Huber hinge of the errors, zero outside the mask of non-true classes.

    h(q) = 1 - q - (kappa + 1) / 2       if q <= -kappa
         = (1 - q)^2 / (2 kappa + 2)     if -kappa < q <= 1
         = 0                             if q > 1
    """
    H = np.zeros_like(Q)
    linear = Q <= -kappa
    quadratic = (~linear) & (Q <= 1.0)
    H[linear] = 1.0 - Q[linear] - (kappa + 1.0) / 2.0
    H[quadratic] = (1.0 - Q[quadratic]) ** 2 / (2.0 * kappa + 2.0)
    return H * mask


def calculate_active(H):
    """Indicator of the (instance, class) pairs with a positive Huber error."""
    return (H > 0).astype(float)


def is_simple(R):
    """An instance is simple when at most one of its classes is active."""
    return R.sum(axis=1) <= 1


def calculate_omega(H, p):
    """
    omega_i = (1/p) * (sum_j h_ij^p)^(1/p - 1), for rows with a positive sum.
    """
    return (1.0 / p) * np.sum(H ** p, axis=1) ** (1.0 / p - 1.0)


def ab_simple(Q, kappa):
    """
    Majorization coefficients when the instance loss reduces to a single hinge.

    Returns
    -------
    a : ndarray of shape (n, K)
    b_aq : ndarray of shape (n, K)
        b - a * q.
    """
    a = np.empty_like(Q)
    b_aq = np.zeros_like(Q)

    linear = Q <= -kappa
    quadratic = (~linear) & (Q <= 1.0)
    zero = Q > 1.0

    a[linear] = 0.25 / (0.5 - kappa / 2.0 - Q[linear])
    b_aq[linear] = 0.5

    a[quadratic] = 1.0 / (2.0 * kappa + 2.0)
    b_aq[quadratic] = (1.0 - Q[quadratic]) * a[quadratic]

    a[zero] = -0.25 / (0.5 - kappa / 2.0 - Q[zero])
    return a, b_aq


def ab_non_simple(Q, kappa, p):
    """
    Majorization coefficients for h(q)^p in the general case.

    Returns
    -------
    a : ndarray of shape (n, K)
    b_aq : ndarray of shape (n, K)
        b - a * q.
    """
    a = np.empty_like(Q)
    b_aq = np.zeros_like(Q)

    linear = Q <= -kappa
    quadratic = (~linear) & (Q <= 1.0)
    zero = Q > 1.0

    if 2.0 - p < 1e-2:
        a[:] = 1.5
        b_aq[linear] = 0.5 - kappa / 2.0 - Q[linear]
        b_aq[quadratic] = (1.0 - Q[quadratic]) ** 3 / (2.0 * (kappa + 1.0) ** 2)
        return a, b_aq

    a2g2 = 0.25 * p * (2.0 * p - 1.0) * ((kappa + 1.0) / 2.0) ** (p - 2.0)

    lower = Q <= (p + kappa - 1.0) / (p - 2.0)
    middle = (~lower) & (Q <= 1.0)

    a[lower] = 0.25 * p ** 2 * (0.5 - kappa / 2.0 - Q[lower]) ** (p - 2.0)
    a[middle] = a2g2
    base = (p / (p - 2.0)) * (0.5 - kappa / 2.0 - Q[zero])
    a[zero] = 0.25 * p ** 2 * base ** (p - 2.0)

    b_aq[linear] = 0.5 * p * (0.5 - kappa / 2.0 - Q[linear]) ** (p - 1.0)
    b_aq[quadratic] = (p * (1.0 - Q[quadratic]) ** (2.0 * p - 1.0)
                       / (2.0 * kappa + 2.0) ** p)
    b_aq[zero] = (a[zero] * (2.0 * Q[zero] + kappa - 1.0) / (p - 2.0)
                  + 0.5 * p * base ** (p - 1.0))
    return a, b_aq


def get_alpha_beta(Q, H, R, mask, UU, rho, p, kappa):
    """
    Per instance weights of the majorizing least squares problem.

    Parameters
    ----------
    Q, H, R : ndarray of shape (n, K)
        Errors, Huber errors and active indicator for the current V.
    mask : ndarray of shape (n, K)
        1 for non-true classes, 0 for the true class.
    UU : ndarray of shape (n, K, K-1)
    rho : ndarray of shape (n,)
    p, kappa : float

    Returns
    -------
    alpha : ndarray of shape (n,)
        Diagonal of A.
    beta : ndarray of shape (n, K-1)
        Rows of B.
    """
    n = Q.shape[0]
    simple = is_simple(R)  # Shape: (n,)

    a_s, b_s = ab_simple(Q, kappa)
    if simple.all():
        a, b_aq = a_s, b_s
    else:
        a_n, b_n = ab_non_simple(Q, kappa, p)
        a = np.where(simple[:, np.newaxis], a_s, a_n)
        b_aq = np.where(simple[:, np.newaxis], b_s, b_n)
    a = a * mask
    b_aq = b_aq * mask

    omega = np.ones(n)
    omega[~simple] = calculate_omega(H[~simple], p)

    scale = rho * omega / n  # Shape: (n,)
    alpha = scale * a.sum(axis=1)
    beta = scale[:, np.newaxis] * np.einsum('ij,ijk->ik', b_aq, UU)
    return alpha, beta


def use_sparse(Z):
    """Whether Z has few enough nonzeros for the sparse products to pay off."""
    return np.count_nonzero(Z) < SPARSE_THRESHOLD * Z.size


def get_ZAZ_ZB_dense(Z, alpha, beta):
    """Z'AZ and Z'B with dense products. Returns shapes (m+1, m+1), (m+1, K-1)."""
    ZAZ = Z.T @ (alpha[:, np.newaxis] * Z)
    ZB = Z.T @ beta
    return ZAZ, ZB


def get_ZAZ_ZB_sparse(Z, alpha, beta):
    """
    Z'AZ and Z'B for a scipy.sparse Z.

    Parameters
    ----------
    Z : sparse matrix of shape (n, m+1)
        CSR representation of the augmented data.
    """
    Z = sparse.csr_matrix(Z)
    ZAZ = (Z.T @ sparse.diags(alpha) @ Z).toarray()
    ZB = np.asarray(Z.T @ beta)
    return ZAZ, ZB


def get_ZAZ_ZB(Z, alpha, beta):
    if sparse.issparse(Z):
        return get_ZAZ_ZB_sparse(Z, alpha, beta)
    return get_ZAZ_ZB_dense(Z, alpha, beta)


def get_loss(H, rho, V, p, lambda_):
    """
    L(V) = (1/n) sum_i rho_i (sum_j h_ij^p)^(1/p) + lambda ||W||_F^2.
    """
    n = H.shape[0]
    rows = np.sum(H ** p, axis=1) ** (1.0 / p)
    return np.sum(rho * rows) / n + lambda_ * np.sum(V[1:] ** 2)


def num_support_vectors(Q, mask):
    """Number of instances with at least one non-true class error q <= 1."""
    outside = (Q > 1.0) | (mask == 0)
    return int(np.sum(~outside.all(axis=1)))
