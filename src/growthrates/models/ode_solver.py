import numpy as np
import pandas as pd
from scipy.integrate import solve_ivp

from growthrates.errors import OdeIntegrationError

def integrate(initial_state,
              times,
              derivative_fn,
              rate_parameters,
              t0=0.0,
              method="LSODA",
              rtol=1e-6,
              atol=1e-9):
    """
    Integrate a system of ordinary differential equations over a set of times.

    This is a thin wrapper around `scipy.integrate.solve_ivp`. The solver
    needs strictly increasing output times, so the requested times are
    reduced to their sorted unique values, integrated, and then mapped back
    onto the requested order (duplicates included).

    Parameters
    ----------
    initial_state : dict
        dictionary keying state-variable names to their values at `t0`. The
        order of the keys sets the order of the state vector.
    times : array-like
        1D array of times at which to report the state. Order does not matter
        and duplicates are allowed. All times must be >= `t0`.
    derivative_fn : callable
        function with signature `derivative_fn(t, state, rate_parameters)`
        where `state` is a dict keying state names to current values. It must
        return the derivatives as a sequence in the same order as
        `initial_state`.
    rate_parameters : dict
        dictionary of parameters passed unchanged to `derivative_fn`.
    t0 : float, default=0.0
        time at which `initial_state` applies
    method : str, default="LSODA"
        integration method passed to `solve_ivp`
    rtol, atol : float
        relative and absolute tolerances passed to `solve_ivp`

    Returns
    -------
    pandas.DataFrame
        dataframe with a `time` column (the requested times, in the requested
        order) and one column per state variable.

    Raises
    ------
    OdeIntegrationError
        if a time precedes `t0`, an input is not finite, the solver reports a
        failure, or the solution contains non-finite values.
    """

    state_names = list(initial_state.keys())
    y_init = np.array([initial_state[s] for s in state_names], dtype=float)

    times = np.asarray(times, dtype=float).ravel()

    if not np.all(np.isfinite(y_init)):
        raise OdeIntegrationError(
            f"initial state is not finite: {dict(zip(state_names, y_init))}"
        )
    if not np.all(np.isfinite(times)):
        raise OdeIntegrationError("integration times must be finite.")
    if times.size > 0 and np.min(times) < t0:
        raise OdeIntegrationError(
            f"cannot integrate backwards: time {np.min(times)} precedes t0={t0}"
        )

    unique_times, inverse = np.unique(times, return_inverse=True)
    inverse = inverse.ravel()

    # The initial state is reported directly at t0
    states = np.empty((unique_times.size, len(state_names)), dtype=float)
    at_start = unique_times == t0
    states[at_start] = y_init

    later = unique_times[~at_start]
    if later.size > 0:

        def _rhs(t, y):
            state = dict(zip(state_names, y))
            return np.asarray(derivative_fn(t, state, rate_parameters),
                              dtype=float)

        with np.errstate(all="ignore"):
            try:
                sol = solve_ivp(_rhs,
                                (t0, later[-1]),
                                y_init,
                                method=method,
                                t_eval=later,
                                rtol=rtol,
                                atol=atol)
            except (ValueError, ArithmeticError) as e:
                raise OdeIntegrationError(f"ODE integration failed: {e}") from e

        if not sol.success or sol.y.shape[1] != later.size:
            raise OdeIntegrationError(f"ODE integration failed: {sol.message}")

        states[~at_start] = sol.y.T

    if not np.all(np.isfinite(states)):
        raise OdeIntegrationError("ODE solution contains non-finite values.")

    out = pd.DataFrame(states[inverse], columns=state_names)
    out.insert(0, "time", times)

    return out
