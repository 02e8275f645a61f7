"""
Maximum growth rates from the log-linear part of a growth curve, using the
heuristic "growth rates made easy" approach of Hall et al. (2014), Mol. Biol.
Evol. 31: 232-38.

1. Fit a linear regression of log(y) against time to every window of `h`
   consecutive points.
2. Find the window with the highest slope and collect every window with a
   slope of at least `quota` times that maximum.
3. Fit one linear regression to the span from the first to the last
   collected window.
"""
import numpy as np
import pandas as pd

import warnings
from collections.abc import Mapping
from dataclasses import dataclass

from growthrates.errors import EasyLinearWarning
from growthrates.models import grow_exponential
from growthrates.util.validation import check_number
from growthrates.util.dataframe import (
    check_columns,
    multisplit,
    as_grouping
)
from growthrates.util.parse_formula import parse_formula


def run_window_ols(x_arrays, y_arrays):
    """
    Vectorized ordinary least squares for many small datasets.

    Parameters
    ----------
    x_arrays : np.ndarray
        2D array of x-coordinates, shape (n_datasets, n_points)
    y_arrays : np.ndarray
        2D array of y-coordinates, shape (n_datasets, n_points)

    Returns
    -------
    slopes : np.ndarray
        slope of each dataset
    intercepts : np.ndarray
        intercept of each dataset
    se_slopes : np.ndarray
        standard error of each slope (nan with fewer than 3 points)
    r_squared : np.ndarray
        coefficient of determination of each fit
    """

    x = np.asarray(x_arrays, dtype=float)
    y = np.asarray(y_arrays, dtype=float)

    if x.ndim == 1:
        x = x[np.newaxis, :]
        y = y[np.newaxis, :]

    n_points = x.shape[1]

    x_mean = np.mean(x, axis=1)
    y_mean = np.mean(y, axis=1)

    dx = x - x_mean[:, np.newaxis]
    dy = y - y_mean[:, np.newaxis]

    ss_xx = np.sum(dx**2, axis=1)
    ss_xy = np.sum(dx * dy, axis=1)
    ss_yy = np.sum(dy**2, axis=1)

    slopes = np.divide(ss_xy, ss_xx, out=np.full_like(ss_xy, np.nan), where=ss_xx != 0)
    intercepts = y_mean - slopes * x_mean

    residuals = y - (intercepts[:, np.newaxis] + slopes[:, np.newaxis] * x)
    rss = np.sum(residuals**2, axis=1)

    # A flat window is fit perfectly by a flat line
    r_squared = np.divide(rss, ss_yy, out=np.zeros_like(rss), where=ss_yy != 0)
    r_squared = 1 - r_squared

    df = n_points - 2
    if df > 0:
        rse = np.sqrt(rss / df)
        se_slopes = np.divide(rse, np.sqrt(ss_xx),
                              out=np.full_like(ss_xx, np.nan), where=ss_xx != 0)
    else:
        se_slopes = np.full_like(slopes, np.nan)

    return slopes, intercepts, se_slopes, r_squared


@dataclass(frozen=True)
class EasyLinearResult:
    """
    Result of `fit_easylinear`.

    Attributes
    ----------
    par : dict
        `y0` (first observed value), `y0_lm` (intercept of the log-linear
        fit, back-transformed), `mumax` (maximum growth rate) and `lag`
        (time at which the log-linear fit crosses log(y0))
    ndx : np.ndarray
        zero-based indices of the points used in the final regression
    r_squared : float
        coefficient of determination of the final regression
    slope_std_error : float
        standard error of `mumax`
    obs : pandas.DataFrame
        `time` and `y` of the input data
    """

    par: dict
    ndx: np.ndarray
    r_squared: float
    slope_std_error: float
    obs: pd.DataFrame

    def coef(self):
        return pd.Series(self.par, dtype=float)

    def predict(self, time=None):
        """
        Exponential growth curve through the log-linear segment:
        y = y0_lm * exp(mumax * t).
        """

        if time is None:
            time = self.obs["time"].to_numpy()

        return grow_exponential.evaluate(time, {"y0":self.par["y0_lm"],
                                                "mumax":self.par["mumax"]})


def fit_easylinear(time, y, h=5, quota=0.95):
    """
    Estimate the maximum growth rate from the steepest log-linear segment of
    a growth curve.

    Parameters
    ----------
    time : array-like
        observation times, without duplicates
    y : array-like
        positive population values
    h : int, default=5
        number of points in each regression window. Must be at least 2 and
        less than the number of points.
    quota : float, default=0.95
        windows with a slope of at least `quota * max(slope)` are included
        in the final regression

    Returns
    -------
    EasyLinearResult

    Raises
    ------
    ValueError
        if `time` has duplicates, any `y` is not positive, or `h` is out of
        range

    Warns
    -----
    EasyLinearWarning
        if no window grows at `quota` times the maximum rate. `mumax` and
        `lag` are nan and every point is reported as used.
    """

    time = np.asarray(time, dtype=float).ravel()
    y = np.asarray(y, dtype=float).ravel()

    if time.shape != y.shape:
        raise ValueError(
            f"time ({time.size}) and y ({y.size}) must have the same length"
        )

    quota = check_number(quota, "quota", min_allowed=0, max_allowed=1)
    h = check_number(h, "h", cast_type=int)

    if len(np.unique(time)) != len(time):
        raise ValueError("time must not contain duplicated values")
    if np.any(~(y > 0)):
        raise ValueError("dependent variable y must be positive")
    if h < 2 or h > len(time) - 1:
        raise ValueError("h must be > 1 and < N")

    ylog = np.log(y)
    num_points = len(time)

    # Windows start at every point that leaves h points before the last one
    num_windows = num_points - h
    x_windows = np.lib.stride_tricks.sliding_window_view(time, h)[:num_windows]
    y_windows = np.lib.stride_tricks.sliding_window_view(ylog, h)[:num_windows]

    slopes, _, _, _ = run_window_ols(x_windows, y_windows)

    candidates = np.zeros(0, dtype=int)
    if np.any(np.isfinite(slopes)):
        slope_quota = quota * np.nanmax(slopes)
        with np.errstate(invalid="ignore"):
            candidates = np.flatnonzero(slopes >= slope_quota)

    y0_data = y[0]
    if len(candidates) > 0:

        ndx = np.arange(candidates.min(), candidates.max() + h)
        slope, intercept, se_slope, r2 = run_window_ols(time[ndx], ylog[ndx])

        y0_lm = float(np.exp(intercept[0]))
        mumax = float(slope[0])
        slope_std_error = float(se_slope[0])
        r_squared = float(r2[0])
        with np.errstate(divide="ignore", invalid="ignore"):
            lag = float((np.log(y0_data) - np.log(y0_lm)) / mumax)

    else:
        warnings.warn(
            f"no positively growing segment of length h >= {h} found",
            EasyLinearWarning
        )
        ndx = np.arange(num_points)
        y0_lm = float(np.mean(y))
        mumax = np.nan
        lag = np.nan
        slope_std_error = np.nan
        r_squared = np.nan

    return EasyLinearResult(par={"y0":float(y0_data),
                                 "y0_lm":y0_lm,
                                 "mumax":mumax,
                                 "lag":lag},
                            ndx=ndx,
                            r_squared=r_squared,
                            slope_std_error=slope_std_error,
                            obs=pd.DataFrame({"time":time, "y":y}))


class EasyLinearBatch(Mapping):
    """
    Ordered mapping from group tuples to EasyLinearResult objects.
    """

    def __init__(self, fits, grouping):
        self._fits = dict(fits)
        self._grouping = tuple(grouping)

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

    @property
    def grouping(self):
        return self._grouping

    def to_table(self):
        """
        One row per group: grouping columns, `y0`, `y0_lm`, `mumax`, `lag`
        and `r_squared`.
        """

        rows = []
        for key, fit in self._fits.items():
            row = dict(zip(self._grouping, key))
            row.update(fit.par)
            row["r_squared"] = fit.r_squared
            rows.append(row)

        columns = list(self._grouping) + ["y0", "y0_lm", "mumax", "lag", "r_squared"]

        return pd.DataFrame(rows, columns=columns)


def all_easylinear(data,
                   grouping=None,
                   time="time",
                   y="value",
                   h=5,
                   quota=0.95,
                   formula=None):
    """
    Run `fit_easylinear` on every group in a dataframe.

    Parameters
    ----------
    data : pandas.DataFrame
        long-format growth data
    grouping : str or list of str
        column(s) defining the groups
    time, y : str
        names of the time and dependent columns
    h : int, default=5
        window width
    quota : float, default=0.95
        slope quota for windows in the final regression
    formula : str, optional
        "value ~ time | strain + conc + replicate". If given, replaces
        `grouping`, `time` and `y`.

    Returns
    -------
    EasyLinearBatch
        one result per group, in the order groups first appear in `data`

    Raises
    ------
    ValueError
        if any group cannot be fit (the message names the group)
    """

    if formula is not None:
        parsed = parse_formula(formula)
        grouping = parsed.grouping
        time = parsed.time
        y = parsed.value

    grouping = as_grouping(grouping)
    check_columns(data, list(grouping) + [time, y])

    fits = {}
    for key, sub_df in multisplit(data, grouping).items():

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            try:
                fits[key] = fit_easylinear(sub_df[time],
                                           sub_df[y],
                                           h=h,
                                           quota=quota)
            except ValueError as e:
                raise ValueError(f"group {key}: {e}") from e

        for w in caught:
            warnings.warn(f"group {key}: {w.message}", w.category)

    return EasyLinearBatch(fits, grouping)
