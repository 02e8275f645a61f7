"""
A library of growth models for fitting population density vs. time data. The
core data structure defined here is MODEL_LIBRARY, which keys model names to
the GrowthModel instances used by the fitting engine.
"""

from .growth_model import (
    GrowthModel,
    ClosedFormModel,
    OdeModel,
)

from .ode_solver import (
    integrate
)

from .closed_form import (
    grow_exponential,
    grow_logistic,
    grow_gompertz,
    grow_gompertz3,
    grow_richards,
    grow_baranyi,
    grow_huang,
)

from .ode_models import (
    grow_logistic_ode,
    grow_genlogistic,
    grow_twostep,
)

from growthrates.errors import ConfigurationError


MODEL_LIBRARY = {
    "grow_exponential":grow_exponential,
    "grow_logistic":grow_logistic,
    "grow_gompertz":grow_gompertz,
    "grow_gompertz3":grow_gompertz3,
    "grow_richards":grow_richards,
    "grow_baranyi":grow_baranyi,
    "grow_huang":grow_huang,
    "grow_logistic_ode":grow_logistic_ode,
    "grow_genlogistic":grow_genlogistic,
    "grow_twostep":grow_twostep,
}


def get_model(model):
    """
    Resolve a model reference.

    Parameters
    ----------
    model : GrowthModel or str
        a model instance (returned unchanged) or a key in MODEL_LIBRARY

    Returns
    -------
    GrowthModel

    Raises
    ------
    ConfigurationError
        if `model` is a string not found in MODEL_LIBRARY or is not a
        GrowthModel
    """

    if isinstance(model, GrowthModel):
        return model

    if isinstance(model, str):
        if model not in MODEL_LIBRARY:
            raise ConfigurationError(
                f"model '{model}' not recognized. Available models are: "
                f"{', '.join(MODEL_LIBRARY)}"
            )
        return MODEL_LIBRARY[model]

    raise ConfigurationError(
        f"model must be a GrowthModel or a model name, not {type(model).__name__}"
    )
