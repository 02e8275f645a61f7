import numpy as np
from scipy.sparse import issparse

def get_cov(residuals, J):
    """
    Estimate the parameter covariance matrix and standard errors from the
    residuals and Jacobian at the solution: cov = s^2 (J^T J)^-1 with
    s^2 = RSS / (n_obs - n_params).

    Parameters
    ----------
    residuals : np.ndarray
        residual vector at the solution
    J : np.ndarray or sparse matrix
        Jacobian of the residuals, shape (n_obs, n_params)

    Returns
    -------
    cov_matrix : np.ndarray
        (n_params, n_params) covariance matrix. All nan if J^T J is singular
        or the residuals are not finite.
    std_errors : np.ndarray
        square root of the diagonal of `cov_matrix`
    """

    if issparse(J):
        J = J.toarray()
    J = np.atleast_2d(np.asarray(J, dtype=float))

    num_params = J.shape[1]
    nan_out = (np.full((num_params, num_params), np.nan),
               np.full(num_params, np.nan))

    finite = np.isfinite(residuals)
    if not np.all(finite) or not np.all(np.isfinite(J)):
        return nan_out

    # Poorly constrained fits still get a (large) error estimate
    dof = max(int(np.sum(finite)) - num_params, 1)
    chi2_red = np.sum(residuals**2) / dof

    try:
        cov_matrix = chi2_red * np.linalg.inv(J.T @ J)
    except np.linalg.LinAlgError:
        return nan_out

    with np.errstate(invalid='ignore'):
        std_errors = np.sqrt(np.diagonal(cov_matrix))

    return cov_matrix, std_errors
