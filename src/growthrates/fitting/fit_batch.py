import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from tqdm.auto import tqdm

import logging
import warnings

from growthrates.errors import (
    ConfigurationError,
    BatchFitWarning
)
from growthrates.models import get_model
from growthrates.util.validation import check_number
from growthrates.util.dataframe import (
    check_columns,
    multisplit,
    as_grouping
)
from growthrates.util.parse_formula import parse_formula
from growthrates.fitting.fit_spec import build_fit_spec
from growthrates.fitting.fit_growthmodel import run_fit
from growthrates.fitting.least_squares import check_method
from growthrates.fitting.results import (
    BatchFitResult,
    FailedFit
)

logger = logging.getLogger(__name__)

_FIT_KWARGS = ("method", "ftol", "xtol", "gtol", "max_nfev")

# Number of failed groups listed in the batch warning
_MAX_REPORTED = 5


def _per_group_table(table, grouping, groups, label):
    """
    Index a per-group settings table by group.

    Parameters
    ----------
    table : pandas.DataFrame
        grouping columns plus one column per parameter
    grouping : tuple
        grouping column names
    groups : iterable of tuple
        group keys found in the data
    label : str
        name of the setting (for error messages)

    Returns
    -------
    dict
        group key -> {parameter: value}

    Raises
    ------
    ConfigurationError
        if the grouping columns are missing or any group is absent or
        repeated in the table
    """

    try:
        check_columns(table, grouping)
    except ConfigurationError as e:
        raise ConfigurationError(f"{label} table: {e}") from e

    param_columns = [c for c in table.columns if c not in grouping]

    rows = multisplit(table, grouping)

    missing = [k for k in groups if k not in rows]
    repeated = [k for k in groups if k in rows and len(rows[k]) > 1]
    if missing or repeated:
        err = f"{label} table must have exactly one row for every group.\n"
        if missing:
            err += f"    missing groups: {missing}\n"
        if repeated:
            err += f"    repeated groups: {repeated}\n"
        raise ConfigurationError(err)

    out = {}
    for k in groups:
        row = rows[k].iloc[0]
        out[k] = {c: row[c] for c in param_columns}

    return out


def _resolve_setting(value, grouping, groups, label):
    """
    Turn a shared setting or a per-group table into a per-group lookup.
    """

    if isinstance(value, pd.DataFrame):
        return _per_group_table(value, grouping, groups, label)

    return {k: value for k in groups}


def _check_data_columns(data, time, y):

    for c in (time, y):
        if not pd.api.types.is_numeric_dtype(data[c]):
            raise ConfigurationError(
                f"column '{c}' must be numeric (found {data[c].dtype})"
            )


def _fit_group(key, model, spec, time, y, fit_kwargs):
    """
    Fit one group. Runs inside a worker, so anything other than a
    configuration problem is reported as a FailedFit instead of raised.
    """

    logger.debug("fitting group %s", key)

    try:
        return run_fit(model, spec, time, y, **fit_kwargs)
    except ConfigurationError:
        raise
    except Exception as e:
        logger.debug("group %s raised %s: %s", key, type(e).__name__, e)
        return FailedFit(group=key,
                         message=str(e),
                         error_type=type(e).__name__)


def _warn_failures(batch):

    failures = batch.failures
    if len(failures) == 0:
        return

    msg = f"{len(failures)} of {len(batch)} groups did not converge:\n"
    for key, reason in failures[:_MAX_REPORTED]:
        msg += f"    {key}: {reason}\n"
    if len(failures) > _MAX_REPORTED:
        msg += f"    ... and {len(failures) - _MAX_REPORTED} more\n"

    warnings.warn(msg, BatchFitWarning)


def fit_batch(model,
              data,
              grouping,
              initial,
              lower=None,
              upper=None,
              which=None,
              transform="identity",
              time="time",
              y="value",
              cores=None,
              progress=False,
              **fit_kwargs):
    """
    Fit a growth model independently to every group in a dataframe.

    Parameters
    ----------
    model : GrowthModel or str
        model instance or name in `growthrates.models.MODEL_LIBRARY`
    data : pandas.DataFrame
        long-format data with the time, value and grouping columns
    grouping : str or list of str
        column(s) defining the groups. Every distinct combination is fit
        separately.
    initial : dict, pandas.Series or pandas.DataFrame
        starting values. A mapping is shared by all groups. A dataframe has
        the grouping columns plus one column per parameter and exactly one
        row per group.
    lower, upper : None, float, dict, pandas.Series or pandas.DataFrame
        box constraints, shared or per group (as for `initial`). Missing or
        nan entries are unbounded.
    which : str or list of str, optional
        parameters to optimize. Defaults to all.
    transform : str or callable, default="identity"
        residual transform
    time : str, default="time"
        name of the time column
    y : str, default="value"
        name of the dependent column
    cores : int, optional
        number of worker processes. None uses every core; 1 runs the fits
        sequentially in this process.
    progress : bool, default=False
        show a tqdm progress bar over groups
    **fit_kwargs
        'method', 'ftol', 'xtol', 'gtol' and/or 'max_nfev', passed to every
        fit

    Returns
    -------
    BatchFitResult
        one entry per group, in the order groups first appear in `data`.
        Groups that did not converge or failed are listed in
        `BatchFitResult.failures` and summarized in a BatchFitWarning.

    Raises
    ------
    ConfigurationError
        for any structural problem (unknown model, missing columns,
        parameter mismatch in any group, per-group tables that do not cover
        every group, an unknown `method` or 'lm' with bounds). Raised
        before any fit starts.
    """

    model = get_model(model)
    grouping = as_grouping(grouping)

    if not isinstance(data, pd.DataFrame):
        raise ConfigurationError("data must be a pandas DataFrame.")

    check_columns(data, list(grouping) + [time, y])
    _check_data_columns(data, time, y)

    if cores is not None:
        try:
            cores = check_number(cores, "cores", cast_type=int, min_allowed=1)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    unknown = [k for k in fit_kwargs if k not in _FIT_KWARGS]
    if unknown:
        raise ConfigurationError(
            f"unrecognized fit argument(s) {unknown}. Should be one of: "
            f"{', '.join(_FIT_KWARGS)}"
        )

    method = fit_kwargs.get("method", "auto")

    groups = multisplit(data, grouping)
    keys = list(groups)

    initial_lookup = _resolve_setting(initial, grouping, keys, "initial")
    lower_lookup = _resolve_setting(lower, grouping, keys, "lower")
    upper_lookup = _resolve_setting(upper, grouping, keys, "upper")

    # Build every spec before dispatch so no fit starts on a bad request
    tasks = []
    for key, sub_df in groups.items():
        try:
            spec = build_fit_spec(model,
                                  initial_lookup[key],
                                  lower=lower_lookup[key],
                                  upper=upper_lookup[key],
                                  which=which,
                                  transform=transform)
            check_method(method, spec.is_bounded)
        except ConfigurationError as e:
            raise ConfigurationError(f"group {key}: {e}") from e

        tasks.append((key,
                      spec,
                      sub_df[time].to_numpy(dtype=float),
                      sub_df[y].to_numpy(dtype=float)))

    logger.info("fitting %s to %d group(s) on %s core(s)",
                model.name, len(tasks), "all" if cores is None else cores)

    task_iter = tqdm(tasks, disable=not progress)

    if cores == 1:
        results = [_fit_group(key, model, spec, t, v, fit_kwargs)
                   for key, spec, t, v in task_iter]
    else:
        n_jobs = -1 if cores is None else cores
        with Parallel(n_jobs=n_jobs) as parallel:
            results = parallel(delayed(_fit_group)(key, model, spec, t, v, fit_kwargs)
                               for key, spec, t, v in task_iter)

    batch = BatchFitResult(dict(zip(keys, results)), grouping, model=model)

    logger.info("%d of %d group(s) converged",
                len(batch) - len(batch.failures), len(batch))
    _warn_failures(batch)

    return batch


def all_growthmodels(formula,
                     data,
                     initial,
                     model=None,
                     lower=None,
                     upper=None,
                     which=None,
                     transform="identity",
                     cores=None,
                     progress=False,
                     **fit_kwargs):
    """
    Fit a growth model to every group in a dataframe, described by a
    formula.

    Parameters
    ----------
    formula : str
        "value ~ grow_logistic(time) | strain + conc + replicate". The model
        call may be replaced by a bare time column ("value ~ time | strain")
        when `model` is given.
    data : pandas.DataFrame
        long-format data
    initial : dict, pandas.Series or pandas.DataFrame
        starting values, shared or per group
    model : GrowthModel or str, optional
        model to fit when the formula does not name one

    Other parameters are passed to `fit_batch`.

    Returns
    -------
    BatchFitResult
    """

    parsed = parse_formula(formula)

    if parsed.model is not None and model is not None:
        raise ConfigurationError(
            "a model was given both in the formula and as an argument"
        )
    if parsed.model is None and model is None:
        raise ConfigurationError(
            f"formula '{formula}' does not name a model and no model was given"
        )
    if len(parsed.grouping) == 0:
        raise ConfigurationError(
            f"formula '{formula}' has no grouping columns ('| a + b')"
        )

    model = parsed.model if model is None else model

    return fit_batch(model,
                     data,
                     grouping=parsed.grouping,
                     initial=initial,
                     lower=lower,
                     upper=upper,
                     which=which,
                     transform=transform,
                     time=parsed.time,
                     y=parsed.value,
                     cores=cores,
                     progress=progress,
                     **fit_kwargs)
