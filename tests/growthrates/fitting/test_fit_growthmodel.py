import pytest
import math

import numpy as np

from growthrates.errors import ConfigurationError, ModelEvaluationError
from growthrates.models import (
    ClosedFormModel,
    grow_logistic,
    grow_logistic_ode,
)
from growthrates.models.closed_form import logistic
from growthrates.fitting.cost import CostFunction
from growthrates.fitting.fit_growthmodel import fit_growthmodel
from growthrates.fitting.results import SingleFitResult

START = {"y0":0.5, "mumax":0.1, "K":10}
LOWER = {"y0":0, "mumax":0, "K":0}
UPPER = {"y0":5, "mumax":2, "K":50}


def test_evaluate_only(logistic_data):

    time, y = logistic_data

    result = fit_growthmodel(grow_logistic, START, time, y, which=[])

    cost = CostFunction(grow_logistic, time, y, fixed=START, which=[])
    expected = np.sum(cost(np.zeros(0))**2)

    assert isinstance(result, SingleFitResult)
    assert result.converged
    assert result.status == "converged"
    assert result.fitted == {}
    assert result.full_parameters == {"y0":0.5, "mumax":0.1, "K":10.0}
    assert result.residual_sum_of_squares == pytest.approx(expected)
    assert result.nfev == 1


def test_recovery_from_truth(logistic_data, logistic_truth):

    time, y = logistic_data

    result = fit_growthmodel(grow_logistic, logistic_truth, time, y)

    assert result.converged
    assert result.residual_sum_of_squares < 1e-8
    for p, v in logistic_truth.items():
        assert result.fitted[p] == pytest.approx(v, rel=1e-6)


def test_logistic_example(logistic_data, logistic_truth):

    time, y = logistic_data

    result = fit_growthmodel("grow_logistic", START, time, y,
                             lower=LOWER, upper=UPPER)

    assert result.converged
    assert result.status == "converged"
    for p, v in logistic_truth.items():
        assert abs(result.fitted[p] - v) / v < 0.1

    assert list(result.observations.columns) == ["time", "y"]
    assert result.residuals.shape == y.shape
    assert set(result.std_errors) == {"y0", "mumax", "K"}
    assert list(result.cov.index) == ["y0", "mumax", "K"]


def test_logistic_example_noisy(logistic_truth):

    time = np.arange(0, 51, 5, dtype=float)
    rng = np.random.default_rng(20)
    y = logistic(time, logistic_truth)
    y = y * (1 + rng.normal(0, 0.02, size=y.shape))

    result = fit_growthmodel(grow_logistic, START, time, y,
                             lower=LOWER, upper=UPPER)

    assert result.converged
    for p, v in logistic_truth.items():
        assert abs(result.fitted[p] - v) / v < 0.1
    assert result.residual_sum_of_squares > 0
    assert 0.99 < result.r_squared <= 1


def test_bounds_respected(logistic_data):

    time, y = logistic_data
    seen = []

    def recording_logistic(t, parameters):
        seen.append(dict(parameters))
        return logistic(t, parameters)

    model = ClosedFormModel(recording_logistic, ["y0", "mumax", "K"])

    lower = {"y0":0.8, "mumax":0.05, "K":15}
    upper = {"y0":1.5, "mumax":0.25, "K":18}
    result = fit_growthmodel(model, {"y0":1.0, "mumax":0.2, "K":16},
                             time, y, lower=lower, upper=upper)

    assert len(seen) > 1
    for params in seen:
        for p in lower:
            assert lower[p] <= params[p] <= upper[p]

    # Truth (mumax=0.3, K=20) is outside the box, so the fit sits on a bound
    assert result.fitted["K"] == pytest.approx(18, rel=1e-2)


def test_partial_fit(logistic_data, logistic_truth):

    time, y = logistic_data

    result = fit_growthmodel(grow_logistic,
                             {"y0":1.0, "mumax":0.1, "K":15},
                             time, y,
                             which=["mumax", "K"])

    assert result.fixed == {"y0":1.0}
    assert set(result.fitted) == {"mumax", "K"}
    assert list(result.full_parameters) == ["y0", "mumax", "K"]
    assert result.fitted["mumax"] == pytest.approx(0.3, rel=1e-4)
    assert result.fitted["K"] == pytest.approx(20, rel=1e-4)


def test_ode_fit(logistic_data, logistic_truth):

    time, y = logistic_data

    result = fit_growthmodel(grow_logistic_ode,
                             {"y0":1.0, "mumax":0.2, "K":15},
                             time, y,
                             lower={"mumax":0, "K":1},
                             which=["mumax", "K"])

    assert result.converged
    assert result.fitted["mumax"] == pytest.approx(0.3, rel=1e-2)
    assert result.fitted["K"] == pytest.approx(20, rel=1e-2)


def test_log_transform(logistic_data):

    time, y = logistic_data

    result = fit_growthmodel(grow_logistic, START, time, y,
                             lower=LOWER, upper=UPPER, transform="log")

    assert result.converged
    assert result.transform_name == "log"
    assert result.fitted["mumax"] == pytest.approx(0.3, rel=1e-3)
    assert np.allclose(result.residuals, 0, atol=1e-4)


def test_non_converged(logistic_data):

    time, y = logistic_data

    result = fit_growthmodel(grow_logistic, START, time, y,
                             lower=LOWER, upper=UPPER, max_nfev=2)

    assert not result.converged
    assert result.status == "non_converged"
    assert isinstance(result.message, str)
    assert np.isfinite(result.residual_sum_of_squares)
    assert set(result.fitted) == {"y0", "mumax", "K"}


def test_evaluation_failed(logistic_data):

    time, y = logistic_data
    y = y.copy()
    y[3] = -1.0

    # log of a negative observation cannot be evaluated
    result = fit_growthmodel(grow_logistic, START, time, y,
                             lower=LOWER, upper=UPPER, transform="log")

    assert not result.converged
    assert result.status == "evaluation_failed"
    assert result.fitted == START
    assert np.isnan(result.residual_sum_of_squares)
    assert np.isnan(result.r_squared)


def test_evaluation_failed_at_start(logistic_data):

    time, y = logistic_data

    def _raise(t, parameters):
        raise ModelEvaluationError("cannot evaluate")

    model = ClosedFormModel(_raise, ["y0", "mumax", "K"], name="broken")

    result = fit_growthmodel(model, START, time, y)
    assert result.status == "evaluation_failed"

    result = fit_growthmodel(model, START, time, y, which=[])
    assert result.status == "evaluation_failed"
    assert "cannot evaluate" in result.message


def test_rejected_trial_points(logistic_data, logistic_truth):

    time, y = logistic_data

    def picky_logistic(t, parameters):
        if parameters["K"] > 25:
            raise ModelEvaluationError("K too large")
        return logistic(t, parameters)

    model = ClosedFormModel(picky_logistic, ["y0", "mumax", "K"])

    result = fit_growthmodel(model, START, time, y, method="trf")

    assert result.converged
    for p, v in logistic_truth.items():
        assert result.fitted[p] == pytest.approx(v, rel=1e-3)


def test_fit_growthmodel_errors(logistic_data):

    time, y = logistic_data

    with pytest.raises(ValueError, match="same length"):
        fit_growthmodel(grow_logistic, START, time, y[:-1])

    with pytest.raises(ValueError, match="at least one"):
        fit_growthmodel(grow_logistic, START, [], [])

    with pytest.raises(ConfigurationError):
        fit_growthmodel(grow_logistic, {"y0":1}, time, y)

    with pytest.raises(ConfigurationError):
        fit_growthmodel("not_a_model", START, time, y)

    with pytest.raises(ConfigurationError, match="outside"):
        fit_growthmodel(grow_logistic, START, time, y, lower={"K":20})


def _exp_pointwise(t, parameters):
    # math.exp raises OverflowError instead of returning inf
    return [parameters["y0"] * math.exp(parameters["mumax"] * ti) for ti in t]


def test_model_exception_at_start():

    time = np.linspace(0, 30, 16)
    y = np.exp(0.2 * time)

    model = ClosedFormModel(_exp_pointwise, ["y0", "mumax"])

    result = fit_growthmodel(model, {"y0":1, "mumax":50}, time, y)

    assert isinstance(result, SingleFitResult)
    assert result.status == "evaluation_failed"
    assert result.fitted == {"y0":1.0, "mumax":50.0}
    assert np.isnan(result.residual_sum_of_squares)

    result = fit_growthmodel(model, {"y0":1, "mumax":50}, time, y, which=[])
    assert result.status == "evaluation_failed"
    assert "OverflowError" in result.message


def test_model_exception_at_trial_points(logistic_data, logistic_truth):

    time, y = logistic_data

    def overflowing_logistic(t, parameters):
        if parameters["K"] > 25:
            math.exp(1000)
        return logistic(t, parameters)

    model = ClosedFormModel(overflowing_logistic, ["y0", "mumax", "K"])

    result = fit_growthmodel(model, START, time, y, method="trf")

    assert result.converged
    for p, v in logistic_truth.items():
        assert result.fitted[p] == pytest.approx(v, rel=1e-3)


@pytest.mark.parametrize("kwargs,match", [
    ({"method":"bogus"}, "not recognized"),
    ({"method":"lm", "lower":LOWER, "upper":UPPER}, "finite bounds"),
    ({"method":"lm", "lower":{"K":0}}, "finite bounds"),
    ({"method":"bogus", "which":[]}, "not recognized"),
])
def test_bad_method(logistic_data, kwargs, match):

    time, y = logistic_data
    seen = []

    def recording_logistic(t, parameters):
        seen.append(parameters)
        return logistic(t, parameters)

    model = ClosedFormModel(recording_logistic, ["y0", "mumax", "K"])

    with pytest.raises(ConfigurationError, match=match):
        fit_growthmodel(model, START, time, y, **kwargs)

    assert seen == []


def test_lm_without_bounds(logistic_data, logistic_truth):

    time, y = logistic_data

    result = fit_growthmodel(grow_logistic, logistic_truth, time, y,
                             method="lm")
    assert result.converged

    # Bounds on fixed parameters do not count
    result = fit_growthmodel(grow_logistic, logistic_truth, time, y,
                             lower={"y0":0}, which=["mumax", "K"],
                             method="lm")
    assert result.converged
