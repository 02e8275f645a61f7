import numpy as np

from growthrates.fitting.transforms import get_transform, apply_transform


class CostFunction:
    """
    Residual function for a growth model fit.

    Calling the object with a vector of free parameter values returns the
    residual vector `transform(y_obs) - transform(y_pred)`. The vector is not
    squared; the optimizer minimizes the sum of its squares. Non-finite
    residuals are returned unchanged so the optimizer can reject the step.

    Parameters
    ----------
    model : GrowthModel
        model to evaluate
    time : array-like
        observation times
    y : array-like
        observed values
    fixed : dict
        parameters held constant
    which : list-like of str
        names of the free parameters, matching the order of the values the
        object is called with
    transform : str or callable, default="identity"
        transform applied to observed and predicted values

    Raises
    ------
    ModelEvaluationError
        (on call) propagated from the model
    """

    def __init__(self, model, time, y, fixed, which, transform="identity"):

        self._model = model
        self._time = np.asarray(time, dtype=float).ravel()
        self._y = np.asarray(y, dtype=float).ravel()

        if self._time.shape != self._y.shape:
            raise ValueError(
                f"time ({self._time.size}) and y ({self._y.size}) must have "
                "the same length"
            )

        self._fixed = dict(fixed)
        self._which = tuple(which)
        self._transform_name, self._transform = get_transform(transform)
        self._y_transformed = apply_transform(self._transform, self._y)

    def parameters(self, free_values):
        """
        Assemble the full parameter dictionary from free values.
        """

        free_values = np.asarray(free_values, dtype=float).ravel()
        if free_values.size != len(self._which):
            raise ValueError(
                f"expected {len(self._which)} free values, got {free_values.size}"
            )

        parameters = dict(self._fixed)
        parameters.update(zip(self._which, free_values.tolist()))

        return parameters

    def predict(self, free_values):
        """
        Model prediction (untransformed) at the observation times.
        """

        out = self._model.evaluate(self._time, self.parameters(free_values))
        return out["y"].to_numpy(dtype=float)

    def __call__(self, free_values):

        y_pred = apply_transform(self._transform, self.predict(free_values))
        return self._y_transformed - y_pred

    @property
    def model(self):
        return self._model

    @property
    def time(self):
        return self._time

    @property
    def y(self):
        return self._y

    @property
    def y_transformed(self):
        return self._y_transformed

    @property
    def which(self):
        return self._which

    @property
    def fixed(self):
        return dict(self._fixed)

    @property
    def transform_name(self):
        return self._transform_name
