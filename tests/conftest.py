import pytest
import numpy as np
import pandas as pd

from growthrates.models.closed_form import logistic


@pytest.fixture(scope="session")
def logistic_truth():
    """True parameters of the synthetic logistic curves."""
    return {"y0":1.0, "mumax":0.3, "K":20.0}


@pytest.fixture
def logistic_data(logistic_truth):
    """Noiseless logistic growth curve sampled every time unit."""
    time = np.linspace(0, 30, 31)
    y = logistic(time, logistic_truth)
    return time, y


@pytest.fixture
def grouped_growth_df():
    """
    Long-format table with four strain/conc groups, each a noiseless
    logistic curve with its own growth rate. Strain 'B' comes first so group
    order differs from sorted order.
    """

    time = np.linspace(0, 30, 16)
    mumax = {("B", 0):0.2, ("B", 1):0.25, ("A", 0):0.3, ("A", 1):0.35}

    rows = []
    for (strain, conc), mu in mumax.items():
        y = logistic(time, {"y0":1.0, "mumax":mu, "K":20.0})
        rows.append(pd.DataFrame({"strain":strain,
                                  "conc":conc,
                                  "time":time,
                                  "value":y}))

    return pd.concat(rows, ignore_index=True)
