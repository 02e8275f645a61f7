"""
Exception and warning classes raised by growthrates.

Structural problems with a fit request (bad parameter names, bounds that
exclude the starting values, per-group tables that do not cover every group)
raise ConfigurationError before any numerical work is done. Numerical
failures while evaluating a model raise ModelEvaluationError; the fitting
engine catches these and reports them in-band rather than propagating them
out of a batch.
"""

class GrowthratesError(Exception):
    """
    Base class for all growthrates errors.
    """

class ConfigurationError(GrowthratesError, ValueError):
    """
    A fit request is malformed (parameter name mismatch, inconsistent bounds,
    missing per-group settings, unknown model or transform).
    """

class ModelEvaluationError(GrowthratesError):
    """
    A growth model could not be evaluated for a specific parameter vector.
    """

class OdeIntegrationError(ModelEvaluationError):
    """
    The ODE solver failed to integrate a model over the requested times.
    """

class BatchFitWarning(UserWarning):
    """
    One or more groups in a batch fit did not converge or failed.
    """

class EasyLinearWarning(UserWarning):
    """
    The windowed log-linear estimator could not find a growing segment.
    """
