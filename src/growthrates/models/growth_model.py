"""
Growth model classes. A growth model maps a vector of times and a named set
of parameters to a predicted population measure `y`. The fitting engine only
ever calls `GrowthModel.evaluate`, so closed-form and ODE-based models can be
used interchangeably.
"""
import numpy as np
import pandas as pd

from growthrates.errors import (
    ConfigurationError,
    ModelEvaluationError,
)
from growthrates.models.ode_solver import integrate


class GrowthModel:
    """
    Base class for growth models.

    Subclasses implement `_evaluate(time, parameters)`, which receives a 1D
    float array of times and a validated dictionary of parameter values and
    returns a dataframe with `time` and `y` columns.

    Parameters
    ----------
    parameter_names : list-like of str
        ordered names of the model parameters
    name : str, optional
        human readable name of the model
    """

    def __init__(self, parameter_names, name=None):

        parameter_names = tuple(str(p) for p in parameter_names)
        if len(parameter_names) == 0:
            raise ConfigurationError("a growth model needs at least one parameter.")
        if len(set(parameter_names)) != len(parameter_names):
            raise ConfigurationError(
                f"duplicated parameter names: {parameter_names}"
            )

        self._parameter_names = parameter_names
        self._name = name if name is not None else type(self).__name__

    def __repr__(self):
        return f"<{type(self).__name__} {self._name}({', '.join(self._parameter_names)})>"

    def __call__(self, time, parameters):
        return self.evaluate(time, parameters)

    def check_parameters(self, parameters):
        """
        Validate a parameter mapping against `parameter_names`.

        Parameters
        ----------
        parameters : dict or pandas.Series
            mapping of parameter names to values, in any order. Names not
            used by the model are ignored.

        Returns
        -------
        dict
            parameter values cast to float, in model order

        Raises
        ------
        ModelEvaluationError
            if a parameter is missing or cannot be cast to float
        """

        missing = [p for p in self._parameter_names if p not in parameters]
        if missing:
            raise ModelEvaluationError(
                f"model '{self._name}' is missing parameter(s): {missing}"
            )

        try:
            return {p: float(parameters[p]) for p in self._parameter_names}
        except (TypeError, ValueError) as e:
            raise ModelEvaluationError(
                f"model '{self._name}' parameters must be numeric: {e}"
            ) from e

    def evaluate(self, time, parameters):
        """
        Evaluate the model.

        Parameters
        ----------
        time : array-like
            times at which to evaluate the model. They need not be sorted and
            may contain duplicates.
        parameters : dict or pandas.Series
            values for every name in `parameter_names`

        Returns
        -------
        pandas.DataFrame
            one row per requested time, in the requested order, with columns
            `time` and `y` (plus state columns for multi-state ODE models)

        Raises
        ------
        ModelEvaluationError
            if the parameters are invalid or the model cannot be evaluated
            with them
        """

        time = np.asarray(time, dtype=float).ravel()
        parameters = self.check_parameters(parameters)

        return self._evaluate(time, parameters)

    def _evaluate(self, time, parameters):
        raise NotImplementedError

    @property
    def parameter_names(self):
        """tuple: ordered names of the model parameters."""
        return self._parameter_names

    @property
    def name(self):
        """str: name of the model."""
        return self._name


class ClosedFormModel(GrowthModel):
    """
    Growth model defined by an algebraic function of time.

    Parameters
    ----------
    func : callable
        function with signature `func(time, parameters)` where `time` is a 1D
        float array and `parameters` is a dict of floats. Returns an array
        with the same shape as `time` (or a scalar, which is broadcast).
    parameter_names : list-like of str
        ordered names of the parameters `func` reads
    name : str, optional
        name of the model. Defaults to `func.__name__`.
    """

    def __init__(self, func, parameter_names, name=None):

        if not callable(func):
            raise ConfigurationError("func must be callable.")
        if name is None:
            name = getattr(func, "__name__", None)

        super().__init__(parameter_names, name=name)
        self._func = func

    def _evaluate(self, time, parameters):

        # Over/underflow and invalid values are allowed to produce inf/nan;
        # the fitter decides what to do with them.
        with np.errstate(all="ignore"):
            try:
                y = np.asarray(self._func(time, parameters), dtype=float)
            except (ArithmeticError, ValueError) as e:
                raise ModelEvaluationError(
                    f"model '{self._name}' could not be evaluated with "
                    f"parameters {parameters}: {type(e).__name__}: {e}"
                ) from e

        try:
            y = np.broadcast_to(y, time.shape).copy()
        except ValueError as e:
            raise ModelEvaluationError(
                f"model '{self._name}' returned shape {y.shape} for "
                f"{time.size} time points"
            ) from e

        return pd.DataFrame({"time": time, "y": y})

    @property
    def func(self):
        """callable: the model function."""
        return self._func


class OdeModel(GrowthModel):
    """
    Growth model defined by a system of ordinary differential equations.

    Parameters
    ----------
    derivs : callable
        function with signature `derivs(t, state, rates)` returning the
        derivatives of the states, in the order of `states`. `state` is a
        dict of current state values and `rates` is a dict of the rate
        parameters.
    states : dict
        dictionary keying each state variable to the name of the parameter
        holding its initial value at `t0`. Example: `{"yi":"yi","ya":"ya"}`.
    parameter_names : list-like of str
        ordered names of all model parameters. Every parameter that is not an
        initial state value is passed to `derivs` as a rate parameter.
    name : str, optional
        name of the model. Defaults to `derivs.__name__`.
    observed : list-like of str, optional
        states summed to give `y`. Defaults to all states.
    t0 : float, default=0.0
        time at which the initial state applies
    method : str, default="LSODA"
        `scipy.integrate.solve_ivp` method
    rtol, atol : float
        integration tolerances
    """

    def __init__(self,
                 derivs,
                 states,
                 parameter_names,
                 name=None,
                 observed=None,
                 t0=0.0,
                 method="LSODA",
                 rtol=1e-6,
                 atol=1e-9):

        if not callable(derivs):
            raise ConfigurationError("derivs must be callable.")
        if name is None:
            name = getattr(derivs, "__name__", None)

        super().__init__(parameter_names, name=name)

        states = dict(states)
        if len(states) == 0:
            raise ConfigurationError("an ODE model needs at least one state.")

        unknown = [p for p in states.values() if p not in self._parameter_names]
        if unknown:
            raise ConfigurationError(
                f"initial state parameter(s) {unknown} not in parameter_names"
            )

        if observed is None:
            observed = tuple(states)
        else:
            observed = tuple(observed)
            bad = [s for s in observed if s not in states]
            if bad or len(observed) == 0:
                raise ConfigurationError(
                    f"observed states {observed} must be a non-empty subset "
                    f"of {tuple(states)}"
                )

        self._derivs = derivs
        self._states = states
        self._observed = observed
        self._rate_names = tuple(p for p in self._parameter_names
                                 if p not in states.values())
        self._t0 = float(t0)
        self._method = method
        self._rtol = rtol
        self._atol = atol

    def _evaluate(self, time, parameters):

        initial_state = {s: parameters[p] for s, p in self._states.items()}
        rates = {p: parameters[p] for p in self._rate_names}

        solution = integrate(initial_state,
                             time,
                             self._derivs,
                             rates,
                             t0=self._t0,
                             method=self._method,
                             rtol=self._rtol,
                             atol=self._atol)

        y = solution[list(self._observed)].sum(axis=1).to_numpy()

        out = pd.DataFrame({"time": time, "y": y})
        for s in self._states:
            if s not in out.columns:
                out[s] = solution[s].to_numpy()

        return out

    @property
    def states(self):
        """tuple: names of the state variables."""
        return tuple(self._states)

    @property
    def observed(self):
        """tuple: states summed to give y."""
        return self._observed

    @property
    def rate_names(self):
        """tuple: parameters passed to the derivative function."""
        return self._rate_names

    @property
    def t0(self):
        """float: time at which the initial state applies."""
        return self._t0
