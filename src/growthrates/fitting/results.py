"""
Result containers for single and batch growth model fits.
"""
import numpy as np
import pandas as pd

from collections.abc import Mapping
from dataclasses import dataclass, field

from growthrates.fitting.transforms import get_transform, apply_transform
from growthrates.fitting.predict_with_error import predict_with_error

CONVERGED = "converged"
NON_CONVERGED = "non_converged"
EVALUATION_FAILED = "evaluation_failed"


@dataclass(frozen=True)
class SingleFitResult:
    """
    Result of fitting a growth model to one time series.

    A result is returned for every fit, including fits that did not converge
    (best parameters found, `converged=False`) and fits whose model could not
    be evaluated (`fitted` holds the starting values and the residual sum of
    squares is nan). Check `status` or `converged` before using parameters.

    Attributes
    ----------
    fitted : dict
        optimized parameters
    fixed : dict
        parameters held constant
    residual_sum_of_squares : float
        sum of squared residuals on the transformed scale
    observations : pandas.DataFrame
        data used in the fit (`time` and `y` columns)
    model : GrowthModel
        the fitted model
    converged : bool
        whether the optimizer met a convergence criterion
    status : str
        'converged', 'non_converged' or 'evaluation_failed'
    message : str
        optimizer or error message
    residuals : np.ndarray
        transform(y_obs) - transform(y_pred) at the solution
    transform : object
        residual transform used for the fit (name or callable)
    std_errors : dict
        standard errors of the fitted parameters
    cov : pandas.DataFrame
        covariance matrix of the fitted parameters
    nfev : int
        number of cost function evaluations
    """

    fitted: dict
    fixed: dict
    residual_sum_of_squares: float
    observations: pd.DataFrame
    model: object
    converged: bool
    status: str = CONVERGED
    message: str = None
    residuals: np.ndarray = None
    transform: object = "identity"
    std_errors: dict = field(default_factory=dict)
    cov: pd.DataFrame = None
    nfev: int = 0

    def __repr__(self):
        params = ", ".join(f"{k}={v:.4g}" for k, v in self.full_parameters.items())
        return f"<SingleFitResult {self.model.name}({params}) status={self.status}>"

    @property
    def full_parameters(self):
        """dict: fitted and fixed parameters together, in model order."""
        merged = {**self.fixed, **self.fitted}
        return {p: merged[p] for p in self.model.parameter_names}

    @property
    def transform_name(self):
        return get_transform(self.transform)[0]

    @property
    def r_squared(self):
        """
        float: 1 - var(residuals)/var(y_obs), both on the transformed scale.
        """

        if self.residuals is None or len(self.residuals) < 2:
            return np.nan

        _, fcn = get_transform(self.transform)
        y_obs = apply_transform(fcn, self.observations["y"])

        var_obs = np.var(y_obs, ddof=1)
        if not np.isfinite(var_obs) or var_obs == 0:
            return np.nan

        return float(1 - np.var(self.residuals, ddof=1) / var_obs)

    def coef(self):
        """
        Full parameter set as a pandas Series.
        """
        return pd.Series(self.full_parameters, name=self.model.name, dtype=float)

    def predict(self, time=None, with_error=False):
        """
        Evaluate the fitted model.

        Parameters
        ----------
        time : array-like, optional
            times at which to predict. Defaults to the observation times.
        with_error : bool, default=False
            if True, add a `y_std` column with the standard error of each
            prediction, propagated from the parameter covariance matrix.

        Returns
        -------
        pandas.DataFrame
            model output with `time` and `y` columns
        """

        if time is None:
            time = self.observations["time"].to_numpy()

        if not with_error:
            return self.model.evaluate(time, self.full_parameters)

        free = list(self.fitted)
        if self.cov is None or len(free) == 0:
            cov = np.zeros((0, 0))
        else:
            cov = self.cov.loc[free, free].to_numpy()

        out, y_std = predict_with_error(self.model,
                                        self.full_parameters,
                                        free,
                                        cov,
                                        time)
        out["y_std"] = y_std

        return out

    def summary(self):
        """
        Parameter table with estimates, standard errors and t values.

        Returns
        -------
        pandas.DataFrame
            indexed by parameter name, with columns `estimate`, `std_error`,
            `t_value` and `free`
        """

        names = list(self.model.parameter_names)
        estimate = [self.full_parameters[p] for p in names]
        std_error = [self.std_errors.get(p, np.nan) for p in names]

        out = pd.DataFrame({"estimate":estimate,
                            "std_error":std_error,
                            "free":[p in self.fitted for p in names]},
                           index=pd.Index(names, name="parameter"))

        with np.errstate(divide="ignore", invalid="ignore"):
            out["t_value"] = out["estimate"] / out["std_error"]

        return out[["estimate", "std_error", "t_value", "free"]]


@dataclass(frozen=True)
class FailedFit:
    """
    Marker for a group whose fit raised an unrecoverable error. Keeps the
    group in the batch so the batch size is always known.
    """

    group: tuple
    message: str
    error_type: str = None
    status: str = EVALUATION_FAILED

    @property
    def converged(self):
        return False


def _failure_reason(result):
    """
    Short description of why a fit is not in the converged state.
    """

    if result.status == NON_CONVERGED:
        return f"{NON_CONVERGED}: {result.message}"

    if isinstance(result, FailedFit) and result.error_type:
        return f"{EVALUATION_FAILED}: {result.error_type}: {result.message}"

    return f"{EVALUATION_FAILED}: {result.message}"


class BatchFitResult(Mapping):
    """
    Ordered collection of growth model fits keyed by group.

    Behaves as a read-only mapping from group tuples (one value per grouping
    column) to SingleFitResult objects or FailedFit markers, in the order the
    groups were found in the data.

    Parameters
    ----------
    fits : dict
        group tuple -> SingleFitResult or FailedFit, in group order
    grouping : list-like of str
        names of the grouping columns
    model : GrowthModel, optional
        model that was fitted to every group
    """

    def __init__(self, fits, grouping, model=None):

        self._fits = dict(fits)
        self._grouping = tuple(grouping)
        self._model = model
        self._failures = tuple((k, _failure_reason(v))
                               for k, v in self._fits.items()
                               if v.status != CONVERGED)

    def _key(self, key):
        if not isinstance(key, tuple) and len(self._grouping) == 1:
            return (key,)
        return key

    def __getitem__(self, key):
        return self._fits[self._key(key)]

    def __contains__(self, key):
        return self._key(key) in self._fits

    def __iter__(self):
        return iter(self._fits)

    def __len__(self):
        return len(self._fits)

    def __repr__(self):
        model_name = self._model.name if self._model is not None else "?"
        return (f"<BatchFitResult model={model_name} groups={len(self)} "
                f"failures={len(self._failures)}>")

    @property
    def grouping(self):
        """tuple: names of the grouping columns."""
        return self._grouping

    @property
    def model(self):
        return self._model

    @property
    def failures(self):
        """tuple: (group, reason) for every group that did not converge."""
        return self._failures

    def statuses(self):
        """
        pandas.Series of fit status, indexed by group.
        """
        return pd.Series({k: v.status for k, v in self._fits.items()},
                         dtype=object)

    def coef(self):
        """
        DataFrame of full parameter sets, one row per group.
        """
        table = to_table(self)
        return table[list(self._grouping) + self._parameter_names()]

    def r_squared(self):
        """
        pandas.Series of r_squared, one entry per group.
        """
        return to_table(self).set_index(list(self._grouping))["r_squared"]

    def to_table(self):
        return to_table(self)

    def _parameter_names(self):

        if self._model is not None:
            return list(self._model.parameter_names)

        names = []
        for v in self._fits.values():
            if isinstance(v, SingleFitResult):
                names.extend(p for p in v.model.parameter_names if p not in names)
        return names


def to_table(batch):
    """
    Build a tidy results table from a batch fit.

    Parameters
    ----------
    batch : BatchFitResult

    Returns
    -------
    pandas.DataFrame
        one row per group in group order. Columns are the grouping columns,
        every model parameter (fitted and fixed), `r_squared`,
        `residual_sum_of_squares`, `converged` and `status`. Groups whose fit
        failed outright have nan parameters and metrics.
    """

    parameter_names = batch._parameter_names()

    rows = []
    for key, result in batch.items():

        row = dict(zip(batch.grouping, key))
        if isinstance(result, SingleFitResult):
            params = result.full_parameters
            row.update({p: params.get(p, np.nan) for p in parameter_names})
            row["r_squared"] = result.r_squared
            row["residual_sum_of_squares"] = result.residual_sum_of_squares
        else:
            row.update({p: np.nan for p in parameter_names})
            row["r_squared"] = np.nan
            row["residual_sum_of_squares"] = np.nan

        row["converged"] = bool(result.converged)
        row["status"] = result.status
        rows.append(row)

    columns = (list(batch.grouping) + parameter_names +
               ["r_squared", "residual_sum_of_squares", "converged", "status"])

    return pd.DataFrame(rows, columns=columns)
