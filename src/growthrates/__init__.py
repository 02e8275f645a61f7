"""
growthrates package initialization.

Exports the growth models, the fitting engine and the error classes for
package-level use.
"""

from .__version__ import __version__

from . import errors
from . import models
from . import fitting
from . import util

from .errors import (
    GrowthratesError,
    ConfigurationError,
    ModelEvaluationError,
    OdeIntegrationError,
    BatchFitWarning,
    EasyLinearWarning,
)

from .models import (
    GrowthModel,
    ClosedFormModel,
    OdeModel,
    MODEL_LIBRARY,
    get_model,
)

from .fitting import (
    fit_growthmodel,
    fit_batch,
    all_growthmodels,
    to_table,
    fit_easylinear,
    all_easylinear,
)

from .util import (
    multisplit,
    parse_formula,
)
