import re
from collections import namedtuple

from growthrates.errors import ConfigurationError

Formula = namedtuple("Formula", ["value", "time", "model", "grouping"])

_NAME = r"[A-Za-z_.][A-Za-z0-9_.]*"
_MODEL_CALL = re.compile(rf"({_NAME})\s*\(\s*({_NAME})\s*(?:,[^()]*)?\)")
_BARE_NAME = re.compile(_NAME)


def parse_formula(formula):
    """
    Parse a growth formula into its column and model references.

    Two forms are understood:

        "value ~ time | strain + conc + replicate"
        "value ~ grow_logistic(time) | strain + conc + replicate"

    The left hand side names the dependent column. The right hand side names
    the time column, optionally wrapped in a model call. Everything after `|`
    is a `+` separated list of grouping columns; the grouping part may be
    omitted. Arguments after the time column inside a model call (for
    example `grow_logistic(time, parms)`) are ignored.

    Parameters
    ----------
    formula : str
        formula to parse

    Returns
    -------
    Formula
        namedtuple with fields `value`, `time`, `model` (None when the right
        hand side is a bare column) and `grouping` (tuple of column names)

    Raises
    ------
    ConfigurationError
        if the formula cannot be parsed
    """

    if not isinstance(formula, str):
        raise ConfigurationError("formula must be a string.")

    if formula.count("~") != 1:
        raise ConfigurationError(f"formula '{formula}' must contain exactly one '~'")

    lhs, rhs = formula.split("~")
    lhs = lhs.strip()
    if not _BARE_NAME.fullmatch(lhs):
        raise ConfigurationError(f"could not parse dependent variable '{lhs}'")

    grouping = ()
    if "|" in rhs:
        rhs, group_part = rhs.split("|", 1)
        grouping = tuple(g.strip() for g in group_part.split("+"))
        for g in grouping:
            if not _BARE_NAME.fullmatch(g):
                raise ConfigurationError(
                    f"could not parse grouping term '{g}' in '{formula}'"
                )

    rhs = rhs.strip()
    hit = _MODEL_CALL.fullmatch(rhs)
    if hit:
        model, time = hit.group(1), hit.group(2)
    elif _BARE_NAME.fullmatch(rhs):
        model, time = None, rhs
    else:
        raise ConfigurationError(f"could not parse independent variable '{rhs}'")

    return Formula(value=lhs, time=time, model=model, grouping=grouping)
