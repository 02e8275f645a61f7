"""
Closed-form growth models. Each function has the signature
`f(time, parameters)`:

- `time`: 1D numpy array of times.
- `parameters`: dict of parameter values keyed by name.

The functions are wrapped as `ClosedFormModel` instances at the bottom of the
module.
"""
import numpy as np

from growthrates.models.growth_model import ClosedFormModel


def exponential(time, parameters):
    """
    Exponential growth.

    Notes
    -----
    - Mathematical Form: y = y0 * exp(mumax * t)
    - Parameters: y0 (initial abundance), mumax (intrinsic growth rate)
    """

    return parameters["y0"] * np.exp(parameters["mumax"] * time)


def logistic(time, parameters):
    """
    Logistic growth.

    Notes
    -----
    - Mathematical Form: y = K * y0 / (y0 + (K - y0) * exp(-mumax * t))
    - Parameters: y0 (initial abundance), mumax (intrinsic growth rate),
      K (carrying capacity)
    """

    y0 = parameters["y0"]
    mumax = parameters["mumax"]
    K = parameters["K"]

    return K * y0 / (y0 + (K - y0) * np.exp(-mumax * time))


def gompertz(time, parameters):
    """
    Gompertz growth model.

    Notes
    -----
    - Mathematical Form: y = K * exp(log(y0/K) * exp(-mumax * t))
    - Parameters: y0, mumax, K. mumax is the rate constant of the Gompertz
      curve, not the maximum slope of log(y).
    """

    y0 = parameters["y0"]
    mumax = parameters["mumax"]
    K = parameters["K"]

    return K * np.exp(np.log(y0 / K) * np.exp(-mumax * time))


def gompertz3(time, parameters):
    """
    Gompertz growth model reparameterized with a lag time (Zwietering 1990).

    Notes
    -----
    - Mathematical Form:
      y = y0 * (K/y0)^exp(-exp(e * mumax * (lambda - t) / log(K/y0) + 1))
    - Parameters: y0, mumax (maximum slope of log(y)), K, lambda (lag time)
    """

    y0 = parameters["y0"]
    mumax = parameters["mumax"]
    K = parameters["K"]
    lag = parameters["lambda"]

    log_ratio = np.log(K / y0)
    inner = np.exp(1) * mumax * (lag - time) / log_ratio + 1

    return y0 * np.exp(log_ratio * np.exp(-np.exp(inner)))


def richards(time, parameters):
    """
    Richards growth model (theta-logistic).

    Notes
    -----
    - Mathematical Form:
      y = K * (1 - exp(-beta * mumax * t) * (1 - (y0/K)^(-beta)))^(-1/beta)
    - Parameters: y0, mumax, K, beta (shape). beta = 1 is the logistic model.
    """

    y0 = parameters["y0"]
    mumax = parameters["mumax"]
    K = parameters["K"]
    beta = parameters["beta"]

    return K * (1 - np.exp(-beta * mumax * time) * (1 - (y0 / K)**(-beta)))**(-1 / beta)


def baranyi(time, parameters):
    """
    Baranyi and Roberts (1994) growth model.

    Notes
    -----
    - Mathematical Form:
      A = t + 1/mumax * log(exp(-mumax*t) + exp(-h0) - exp(-mumax*t - h0))
      log(y) = log(y0) + mumax*A - log(1 + (exp(mumax*A) - 1) / (K/y0))
    - Parameters: y0, mumax, K, h0 (physiological state; lag = h0/mumax)
    """

    y0 = parameters["y0"]
    mumax = parameters["mumax"]
    K = parameters["K"]
    h0 = parameters["h0"]

    A = time + 1 / mumax * np.log(np.exp(-mumax * time)
                                  + np.exp(-h0)
                                  - np.exp(-mumax * time - h0))
    log_y = (np.log(y0) + mumax * A
             - np.log(1 + (np.exp(mumax * A) - 1) / np.exp(np.log(K) - np.log(y0))))

    return np.exp(log_y)


def huang(time, parameters):
    """
    Huang (2011) growth model.

    Notes
    -----
    - Mathematical Form:
      B = t + 1/alpha * log((1 + exp(-alpha*(t - lambda))) / (1 + exp(alpha*lambda)))
      log(y) = log(y0) + log(K) - log(y0 + (K - y0) * exp(-mumax * B))
    - Parameters: y0, mumax, K, alpha (lag transition sharpness), lambda
      (lag time)
    """

    y0 = parameters["y0"]
    mumax = parameters["mumax"]
    K = parameters["K"]
    alpha = parameters["alpha"]
    lag = parameters["lambda"]

    B = time + 1 / alpha * np.log((1 + np.exp(-alpha * (time - lag)))
                                  / (1 + np.exp(alpha * lag)))
    log_y = np.log(y0) + np.log(K) - np.log(y0 + (K - y0) * np.exp(-mumax * B))

    return np.exp(log_y)


grow_exponential = ClosedFormModel(exponential,
                                   ["y0", "mumax"],
                                   name="grow_exponential")

grow_logistic = ClosedFormModel(logistic,
                                ["y0", "mumax", "K"],
                                name="grow_logistic")

grow_gompertz = ClosedFormModel(gompertz,
                                ["y0", "mumax", "K"],
                                name="grow_gompertz")

grow_gompertz3 = ClosedFormModel(gompertz3,
                                 ["y0", "mumax", "K", "lambda"],
                                 name="grow_gompertz3")

grow_richards = ClosedFormModel(richards,
                                ["y0", "mumax", "K", "beta"],
                                name="grow_richards")

grow_baranyi = ClosedFormModel(baranyi,
                               ["y0", "mumax", "K", "h0"],
                               name="grow_baranyi")

grow_huang = ClosedFormModel(huang,
                             ["y0", "mumax", "K", "alpha", "lambda"],
                             name="grow_huang")
