import numpy as np
from scipy.optimize import least_squares

import logging

from growthrates.errors import (
    ConfigurationError,
    ModelEvaluationError
)
from growthrates.fitting._util import get_cov

logger = logging.getLogger(__name__)


def _guarded_residuals(free_values, cost, num_obs):
    """
    Evaluate a cost function for `scipy.optimize.least_squares`.

    A model that cannot be evaluated at a trial point (e.g. an ODE that blows
    up) yields an all-nan residual vector. The trust-region algorithm treats
    a non-finite trial point as a failed step and shrinks its radius, so the
    point is rejected rather than accepted or silently zeroed. At the initial
    point least_squares raises instead, which ends the fit.

    Parameters
    ----------
    free_values : np.ndarray
        values of the free parameters
    cost : CostFunction
        residual function
    num_obs : int
        length of the residual vector

    Returns
    -------
    np.ndarray
        residual vector
    """

    try:
        return cost(free_values)
    except ModelEvaluationError as e:
        logger.debug("rejecting trial point %s: %s", free_values, e)
        return np.full(num_obs, np.nan)


METHODS = ("auto", "trf", "dogbox", "lm")


def check_method(method, is_bounded):
    """
    Make sure a least_squares method name is known and compatible with the
    bounds of the problem.

    Parameters
    ----------
    method : str
        'auto', 'trf', 'dogbox' or 'lm'
    is_bounded : bool
        whether any free parameter has a finite bound

    Raises
    ------
    ConfigurationError
        if `method` is not recognized, or is 'lm' for a bounded problem
    """

    if method not in METHODS:
        raise ConfigurationError(
            f"method '{method}' not recognized. Should be one of: "
            f"{', '.join(METHODS)}"
        )

    if method == "lm" and is_bounded:
        raise ConfigurationError(
            "method 'lm' cannot be used with finite bounds. Use 'trf', "
            "'dogbox' or 'auto'."
        )


def choose_method(is_bounded, num_obs, num_params):
    """
    Pick a least_squares algorithm. Levenberg-Marquardt ('lm') is used for
    unconstrained problems with at least as many observations as free
    parameters; the bounded trust-region reflective method ('trf') otherwise.
    """

    if is_bounded or num_obs < num_params:
        return "trf"
    return "lm"


def run_least_squares(cost,
                      guesses,
                      lower_bounds=None,
                      upper_bounds=None,
                      method="trf",
                      ftol=1e-8,
                      xtol=1e-8,
                      gtol=1e-8,
                      max_nfev=None):
    """
    Minimize the sum of squared residuals of a cost function.

    This function wraps `scipy.optimize.least_squares` and calculates the
    parameter covariance matrix and standard errors at the solution. With
    method 'trf' every iterate, and every finite-difference step used to
    build the Jacobian, stays inside the bounds.

    Parameters
    ----------
    cost : CostFunction
        callable taking the free-parameter vector and returning residuals
    guesses : np.ndarray
        1D array of starting values
    lower_bounds, upper_bounds : np.ndarray, optional
        1D arrays of bounds. Default to -inf and +inf.
    method : str, default="trf"
        'trf', 'dogbox' or 'lm'. 'lm' does not support bounds; they must be
        infinite.
    ftol : float, default=1e-8
        stop when the relative decrease of the cost in an accepted step falls
        below this value
    xtol, gtol : float, default=1e-8
        tolerances on step size and gradient norm
    max_nfev : int, optional
        maximum number of function evaluations. If None, least_squares picks
        a default based on the number of parameters.

    Returns
    -------
    params : np.ndarray
        best-fit parameter values
    std_errors : np.ndarray
        standard error for each fitted parameter
    cov_matrix : np.ndarray
        covariance matrix of the fitted parameters
    fit : scipy.optimize.OptimizeResult
        result of the least_squares call. `fit.status > 0` means a
        convergence criterion was met; 0 means max_nfev was exhausted.

    Raises
    ------
    ValueError
        from least_squares, e.g. if the residuals are not finite at the
        starting point
    """

    guesses = np.asarray(guesses, dtype=float)

    if lower_bounds is None:
        lower_bounds = np.full_like(guesses, -np.inf)
    if upper_bounds is None:
        upper_bounds = np.full_like(guesses, np.inf)

    kwargs = {"method":method,
              "ftol":ftol,
              "xtol":xtol,
              "gtol":gtol,
              "x_scale":"jac",
              "max_nfev":max_nfev,
              "args":(cost, len(cost.y))}

    if method == "lm":
        if np.any(np.isfinite(lower_bounds)) or np.any(np.isfinite(upper_bounds)):
            raise ValueError("method 'lm' cannot be used with finite bounds.")
    else:
        kwargs["bounds"] = (lower_bounds, upper_bounds)

    fit = least_squares(_guarded_residuals, x0=guesses, **kwargs)

    cov_matrix, std_errors = get_cov(residuals=fit.fun, J=fit.jac)

    return fit.x, std_errors, cov_matrix, fit
