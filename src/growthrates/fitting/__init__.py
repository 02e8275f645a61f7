"""
Nonlinear least-squares fitting of growth models to single time series and to
grouped collections of time series, plus the windowed log-linear estimator.
"""

from .transforms import (
    TRANSFORMS,
    get_transform,
)

from .fit_spec import (
    FitSpec,
    build_fit_spec,
)

from .cost import (
    CostFunction
)

from .least_squares import (
    run_least_squares
)

from .predict_with_error import (
    predict_with_error
)

from .results import (
    SingleFitResult,
    FailedFit,
    BatchFitResult,
    to_table,
)

from .fit_growthmodel import (
    fit_growthmodel,
    run_fit,
)

from .fit_batch import (
    fit_batch,
    all_growthmodels,
)

from .easylinear import (
    fit_easylinear,
    all_easylinear,
    run_window_ols,
    EasyLinearResult,
    EasyLinearBatch,
)
