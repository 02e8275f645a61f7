"""
Monotonic transforms applied to observed and predicted values before
residuals are calculated. Fitting on the log scale equalizes the variance
across the exponential range of growth data.
"""
import numpy as np

from growthrates.errors import ConfigurationError


def identity(v):
    return v


TRANSFORMS = {
    "identity":identity,
    "none":identity,
    "log":np.log,
    "log1p":np.log1p,
    "sqrt":np.sqrt,
}


def get_transform(transform):
    """
    Resolve a transform specification.

    Parameters
    ----------
    transform : str or callable
        key in TRANSFORMS or a function applied elementwise to a numpy array

    Returns
    -------
    name : str
        name of the transform
    fcn : callable
        the transform function

    Raises
    ------
    ConfigurationError
        if `transform` is an unknown name or not callable
    """

    if transform is None:
        transform = "identity"

    if isinstance(transform, str):
        if transform not in TRANSFORMS:
            raise ConfigurationError(
                f"transform '{transform}' not recognized. Should be one of: "
                f"{', '.join(TRANSFORMS)} (or a callable)"
            )
        name = "identity" if transform == "none" else transform
        return name, TRANSFORMS[transform]

    if callable(transform):
        return getattr(transform, "__name__", "custom"), transform

    raise ConfigurationError("transform must be a string or a callable.")


def apply_transform(fcn, values):
    """
    Apply a transform without raising floating point warnings; invalid
    values (e.g. the log of a negative number) come back as nan.
    """

    with np.errstate(all="ignore"):
        return np.asarray(fcn(np.asarray(values, dtype=float)), dtype=float)
