import numpy as np

def predict_with_error(model,
                       parameters,
                       free_names,
                       cov_matrix,
                       time,
                       epsilon=1e-6):
    """
    Calculate growth model predictions and their standard errors.

    Uses linear error propagation based on a first-order Taylor expansion of
    the model around the fitted parameters. The Jacobian of the model output
    with respect to the free parameters is calculated by central differences.

    Parameters
    ----------
    model : GrowthModel
        model to evaluate
    parameters : dict
        full parameter set (fitted and fixed)
    free_names : list of str
        parameters whose uncertainty is propagated, in the order of the rows
        and columns of `cov_matrix`
    cov_matrix : np.ndarray
        covariance matrix of the free parameters
    time : array-like
        times at which to predict
    epsilon : float, optional
        relative step used for numerical differentiation

    Returns
    -------
    calc_values : pandas.DataFrame
        model output (`time`, `y` and any state columns)
    calc_se : np.ndarray
        standard error of `y` at each time
    """

    parameters = dict(parameters)
    calc_values = model.evaluate(time, parameters)
    y = calc_values["y"].to_numpy(dtype=float)

    if len(free_names) == 0:
        return calc_values, np.zeros_like(y)

    cov_matrix = np.asarray(cov_matrix, dtype=float)

    # If the covariance matrix is invalid, we can't propagate error.
    if np.any(np.isnan(cov_matrix)):
        return calc_values, np.full_like(y, np.nan)

    J_pred = np.zeros((y.size, len(free_names)))
    for i, name in enumerate(free_names):

        step = epsilon * max(abs(parameters[name]), 1.0)

        params_plus = dict(parameters)
        params_plus[name] += step
        pred_plus = model.evaluate(time, params_plus)["y"].to_numpy(dtype=float)

        params_minus = dict(parameters)
        params_minus[name] -= step
        pred_minus = model.evaluate(time, params_minus)["y"].to_numpy(dtype=float)

        J_pred[:, i] = (pred_plus - pred_minus) / (2 * step)

    # Var(y) = diag(J @ Cov(p) @ J.T)
    calc_var = np.sum((J_pred @ cov_matrix) * J_pred, axis=1)

    with np.errstate(invalid='ignore'):
        calc_se = np.sqrt(calc_var)

    return calc_values, calc_se
