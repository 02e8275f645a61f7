import pytest

import numpy as np

from growthrates.models import ClosedFormModel, grow_logistic
from growthrates.fitting.predict_with_error import predict_with_error


def _line(time, parameters):
    return parameters["m"] * time + parameters["b"]


line_model = ClosedFormModel(_line, ["m", "b"], name="line")


def test_predict_with_error_linear():

    # Var(m*x + b) = x^2 var(m) + var(b) + 2 x cov(m,b)
    cov = np.array([[0.04, 0.01], [0.01, 0.09]])
    x = np.array([0.0, 1.0, 2.0])

    values, se = predict_with_error(line_model, {"m":2, "b":1},
                                    ["m", "b"], cov, x)

    assert np.allclose(values["y"], [1, 3, 5])
    expected = np.sqrt(x**2 * 0.04 + 0.09 + 2 * x * 0.01)
    assert np.allclose(se, expected, rtol=1e-5)


def test_predict_with_error_partial():

    # Only m is uncertain
    x = np.array([0.0, 1.0, 2.0])
    _, se = predict_with_error(line_model, {"m":2, "b":1}, ["m"],
                               np.array([[0.04]]), x)
    assert np.allclose(se, 0.2 * x, rtol=1e-5)


def test_predict_with_error_no_free():

    values, se = predict_with_error(grow_logistic,
                                    {"y0":1, "mumax":0.3, "K":20},
                                    [], np.zeros((0, 0)), [0, 1, 2])
    assert np.array_equal(se, [0, 0, 0])
    assert values["y"].iloc[0] == pytest.approx(1)


def test_predict_with_error_nan_cov():

    _, se = predict_with_error(line_model, {"m":2, "b":1}, ["m", "b"],
                               np.full((2, 2), np.nan), [0, 1])
    assert np.all(np.isnan(se))
