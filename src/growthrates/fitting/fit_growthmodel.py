import numpy as np
import pandas as pd

import logging

from growthrates.errors import ModelEvaluationError
from growthrates.models import get_model
from growthrates.fitting.fit_spec import build_fit_spec
from growthrates.fitting.cost import CostFunction
from growthrates.fitting.least_squares import (
    run_least_squares,
    check_method,
    choose_method
)
from growthrates.fitting.results import (
    SingleFitResult,
    CONVERGED,
    NON_CONVERGED,
    EVALUATION_FAILED
)

logger = logging.getLogger(__name__)


def _check_data(time, y):

    time = np.asarray(time, dtype=float).ravel()
    y = np.asarray(y, dtype=float).ravel()

    if time.size == 0:
        raise ValueError("time and y must contain at least one observation")
    if time.shape != y.shape:
        raise ValueError(
            f"time ({time.size}) and y ({y.size}) must have the same length"
        )

    return time, y


def _failed_result(cost, spec, model, message, nfev=0):
    """
    Result for a fit whose model could not be evaluated: the starting values
    are reported and every goodness-of-fit value is nan.
    """

    logger.debug("fit of %s failed: %s", model.name, message)

    nan_errors = {p: np.nan for p in spec.which}

    return SingleFitResult(fitted={p: spec.initial[p] for p in spec.which},
                           fixed=spec.fixed,
                           residual_sum_of_squares=np.nan,
                           observations=pd.DataFrame({"time":cost.time,
                                                      "y":cost.y}),
                           model=model,
                           converged=False,
                           status=EVALUATION_FAILED,
                           message=message,
                           residuals=np.full(len(cost.y), np.nan),
                           transform=spec.transform,
                           std_errors=nan_errors,
                           cov=pd.DataFrame(np.nan,
                                            index=list(spec.which),
                                            columns=list(spec.which)),
                           nfev=nfev)


def _evaluate_only(cost, spec, model):
    """
    Evaluate the cost at `initial` without optimizing.
    """

    try:
        residuals = cost(np.zeros(0))
    except ModelEvaluationError as e:
        return _failed_result(cost, spec, model, str(e), nfev=1)

    rss = float(np.sum(residuals**2))
    if not np.isfinite(rss):
        return _failed_result(cost, spec, model,
                              "residuals are not finite at the initial values",
                              nfev=1)

    return SingleFitResult(fitted={},
                           fixed=spec.fixed,
                           residual_sum_of_squares=rss,
                           observations=pd.DataFrame({"time":cost.time,
                                                      "y":cost.y}),
                           model=model,
                           converged=True,
                           status=CONVERGED,
                           message="no parameters to optimize; model evaluated at initial values",
                           residuals=residuals,
                           transform=spec.transform,
                           std_errors={},
                           cov=pd.DataFrame(),
                           nfev=1)


def run_fit(model,
            spec,
            time,
            y,
            method="auto",
            ftol=1e-10,
            xtol=1e-10,
            gtol=1e-10,
            max_nfev=None):
    """
    Fit a growth model to one time series using a validated FitSpec.

    Parameters
    ----------
    model : GrowthModel
        model to fit
    spec : FitSpec
        validated fit settings (see `build_fit_spec`)
    time, y : array-like
        observations
    method : str, default="auto"
        least_squares method. 'auto' picks 'lm' for unbounded problems and
        'trf' otherwise.
    ftol, xtol, gtol : float
        optimizer tolerances
    max_nfev : int, optional
        maximum number of model evaluations

    Returns
    -------
    SingleFitResult

    Raises
    ------
    ConfigurationError
        if `method` is not recognized or is 'lm' for a bounded problem
    """

    time, y = _check_data(time, y)
    check_method(method, spec.is_bounded)

    cost = CostFunction(model,
                        time,
                        y,
                        fixed=spec.fixed,
                        which=spec.which,
                        transform=spec.transform)

    if len(spec.which) == 0:
        return _evaluate_only(cost, spec, model)

    if method == "auto":
        method = choose_method(spec.is_bounded, len(y), len(spec.which))

    try:
        params, std_errors, cov_matrix, fit = run_least_squares(
            cost,
            spec.guesses,
            lower_bounds=spec.lower_bounds,
            upper_bounds=spec.upper_bounds,
            method=method,
            ftol=ftol,
            xtol=xtol,
            gtol=gtol,
            max_nfev=max_nfev
        )
    except (ValueError, np.linalg.LinAlgError, ModelEvaluationError) as e:
        return _failed_result(cost, spec, model, str(e))

    residuals = np.asarray(fit.fun, dtype=float)
    rss = float(np.sum(residuals**2))
    if not np.isfinite(rss):
        return _failed_result(cost, spec, model,
                              "residuals are not finite at the solution",
                              nfev=fit.nfev)

    converged = bool(fit.status > 0)
    status = CONVERGED if converged else NON_CONVERGED

    which = list(spec.which)
    fitted = dict(zip(which, params.tolist()))

    logger.debug("fit of %s finished (%s) after %d evaluations",
                 model.name, status, fit.nfev)

    return SingleFitResult(fitted=fitted,
                           fixed=spec.fixed,
                           residual_sum_of_squares=rss,
                           observations=pd.DataFrame({"time":time, "y":y}),
                           model=model,
                           converged=converged,
                           status=status,
                           message=fit.message,
                           residuals=residuals,
                           transform=spec.transform,
                           std_errors=dict(zip(which, std_errors.tolist())),
                           cov=pd.DataFrame(cov_matrix,
                                            index=which,
                                            columns=which),
                           nfev=int(fit.nfev))


def fit_growthmodel(model,
                    initial,
                    time,
                    y,
                    lower=None,
                    upper=None,
                    which=None,
                    transform="identity",
                    method="auto",
                    ftol=1e-10,
                    xtol=1e-10,
                    gtol=1e-10,
                    max_nfev=None):
    """
    Fit a growth model to a single time series by bounded nonlinear least
    squares.

    Parameters
    ----------
    model : GrowthModel or str
        model instance or name in `growthrates.models.MODEL_LIBRARY`
    initial : dict or pandas.Series
        starting value for every model parameter
    time : array-like
        observation times
    y : array-like
        observed population values
    lower, upper : None, float, dict or pandas.Series, optional
        box constraints on the optimized parameters. Missing entries are
        unbounded.
    which : str or list of str, optional
        parameters to optimize; the rest are held at `initial`. Defaults to
        all parameters. An empty list evaluates the model at `initial`
        without optimizing.
    transform : str or callable, default="identity"
        transform applied to observed and predicted values before residuals
        are calculated ('identity', 'log', 'log1p', 'sqrt' or a callable)
    method : str, default="auto"
        least_squares method ('auto', 'trf', 'dogbox' or 'lm')
    ftol, xtol, gtol : float, default=1e-10
        optimizer tolerances
    max_nfev : int, optional
        maximum number of model evaluations

    Returns
    -------
    SingleFitResult
        always returned for numerical problems. Check `status`:
        'converged', 'non_converged' (budget exhausted; best point
        reported) or 'evaluation_failed' (model could not be evaluated).

    Raises
    ------
    ConfigurationError
        if the parameters, bounds, `which` or transform do not match the
        model, or `method` is unknown or incompatible with the bounds
    ValueError
        if time and y are empty or differ in length

    Examples
    --------
    >>> fit = fit_growthmodel("grow_logistic",
    ...                       initial={"y0":0.5, "mumax":0.1, "K":10},
    ...                       time=t, y=y,
    ...                       lower={"y0":0, "mumax":0, "K":0},
    ...                       upper={"y0":5, "mumax":2, "K":50})
    >>> fit.full_parameters
    """

    model = get_model(model)
    spec = build_fit_spec(model,
                          initial,
                          lower=lower,
                          upper=upper,
                          which=which,
                          transform=transform)

    return run_fit(model,
                   spec,
                   time,
                   y,
                   method=method,
                   ftol=ftol,
                   xtol=xtol,
                   gtol=gtol,
                   max_nfev=max_nfev)
