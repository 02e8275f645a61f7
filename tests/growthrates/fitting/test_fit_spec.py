import pytest

import numpy as np
import pandas as pd

from growthrates.errors import ConfigurationError
from growthrates.models import grow_logistic
from growthrates.fitting.fit_spec import FitSpec, build_fit_spec

INITIAL = {"y0":0.5, "mumax":0.1, "K":10}


def test_build_fit_spec_defaults():

    spec = build_fit_spec(grow_logistic, INITIAL)

    assert isinstance(spec, FitSpec)
    assert spec.which == ("y0", "mumax", "K")
    assert spec.fixed == {}
    assert np.array_equal(spec.guesses, [0.5, 0.1, 10])
    assert np.all(np.isinf(spec.lower_bounds))
    assert np.all(np.isinf(spec.upper_bounds))
    assert not spec.is_bounded
    assert spec.transform == "identity"


def test_build_fit_spec_which_and_bounds():

    spec = build_fit_spec(grow_logistic,
                          pd.Series({"K":10, "y0":0.5, "mumax":0.1}),
                          lower={"mumax":0},
                          upper=50,
                          which=["K", "mumax"])

    # Model order, not input order
    assert list(spec.initial) == ["y0", "mumax", "K"]
    assert spec.which == ("mumax", "K")
    assert spec.fixed == {"y0":0.5}
    assert np.array_equal(spec.lower_bounds, [0, -np.inf])
    assert np.array_equal(spec.upper_bounds, [50, 50])
    assert spec.is_bounded

    spec = build_fit_spec(grow_logistic, INITIAL, which="K")
    assert spec.which == ("K",)

    spec = build_fit_spec(grow_logistic, INITIAL, which=[])
    assert spec.which == ()
    assert spec.fixed == {"y0":0.5, "mumax":0.1, "K":10.0}


def test_build_fit_spec_nan_bounds():

    spec = build_fit_spec(grow_logistic, INITIAL,
                          lower={"y0":np.nan, "mumax":0},
                          upper=np.nan)
    assert np.array_equal(spec.lower_bounds, [-np.inf, 0, -np.inf])
    assert np.all(np.isinf(spec.upper_bounds))


def test_build_fit_spec_bounds_for_fixed_ignored():

    # Lower bound above the fixed K value is irrelevant because K is fixed
    spec = build_fit_spec(grow_logistic, INITIAL,
                          lower={"K":100}, which=["y0", "mumax"])
    assert "K" not in spec.lower


@pytest.mark.parametrize("kwargs,match", [
    ({"initial":{"y0":0.5, "mumax":0.1}}, "missing"),
    ({"initial":{**INITIAL, "extra":1}}, "not in model"),
    ({"initial":{**INITIAL, "K":np.nan}}, "finite"),
    ({"initial":{**INITIAL, "K":"ten"}}, "numeric"),
    ({"initial":None}, "must be given"),
    ({"which":["y0", "lag"]}, "not in initial"),
    ({"which":["y0", "y0"]}, "duplicated"),
    ({"lower":{"lag":0}}, "not in the model"),
    ({"lower":{"K":20}, "upper":{"K":5}}, "less than"),
    ({"lower":{"K":10}, "upper":{"K":10}}, "which"),
    ({"lower":{"K":20}}, "outside"),
    ({"upper":{"mumax":0.01}}, "outside"),
    ({"lower":"zero"}, "numeric"),
    ({"transform":"cube"}, "not recognized"),
])
def test_build_fit_spec_errors(kwargs, match):

    args = {"initial":INITIAL}
    args.update(kwargs)

    with pytest.raises(ConfigurationError, match=match):
        build_fit_spec(grow_logistic, **args)


def test_build_fit_spec_initial_on_bound():

    # Starting exactly on a bound is allowed
    spec = build_fit_spec(grow_logistic, INITIAL, lower={"y0":0.5})
    assert spec.lower["y0"] == 0.5
