import numpy as np

def check_number(value,
                 param_name=None,
                 cast_type=float,
                 min_allowed=None,
                 max_allowed=None,
                 inclusive_min=True,
                 inclusive_max=True,
                 allow_none=False):
    """
    Validate and cast a scalar numerical argument.

    Parameters
    ----------
    value : Any
        value to validate
    param_name : str, optional
        name of the argument, used in error messages
    cast_type : callable, default=float
        type to cast the value to (e.g. `int`, `float`)
    min_allowed, max_allowed : int or float, optional
        allowed range. None means no limit.
    inclusive_min, inclusive_max : bool, default=True
        whether the limits themselves are allowed
    allow_none : bool, default=False
        if True, None is returned unchanged

    Returns
    -------
    int, float or None
        the cast value

    Raises
    ------
    ValueError
        if the value is not a finite scalar, cannot be cast, or falls outside
        the allowed range
    """

    if value is None:
        if allow_none:
            return None
        raise ValueError(f"{param_name} cannot be None")

    reason = None
    if isinstance(value, (bool, np.bool_)) or not np.isscalar(value):
        reason = "Value must be a numeric scalar."
    else:
        try:
            v_cast = cast_type(value)
        except (ValueError, TypeError) as e:
            reason = str(e)

    if reason is None:
        if not np.isfinite(v_cast):
            reason = "Value must be finite."
        elif min_allowed is not None and (v_cast < min_allowed or
                                          (not inclusive_min and v_cast == min_allowed)):
            op = ">=" if inclusive_min else ">"
            reason = f"Value must be {op} {min_allowed}."
        elif max_allowed is not None and (v_cast > max_allowed or
                                          (not inclusive_max and v_cast == max_allowed)):
            op = "<=" if inclusive_max else "<"
            reason = f"Value must be {op} {max_allowed}."

    if reason is not None:
        raise ValueError(
            f"Could not process parameter '{param_name}' with value '{value}'.\n"
            f"Reason: {reason}"
        )

    return v_cast
