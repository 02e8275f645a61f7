"""
Growth models defined as differential equations. Derivative functions have
the signature `derivs(t, state, rates)` and return derivatives in the order
the model's states are declared.
"""
from growthrates.models.growth_model import OdeModel


def logistic_derivs(t, state, rates):
    """
    dy/dt = mumax * y * (1 - y/K)
    """
    y = state["y"]
    return [rates["mumax"] * y * (1 - y / rates["K"])]


def genlogistic_derivs(t, state, rates):
    """
    Generalized logistic growth (Tsoularis and Wallace 2002).

    dy/dt = mumax * y^alpha * (1 - (y/K)^beta)^gamma

    With alpha = beta = gamma = 1 this is the ordinary logistic model.
    Negative y (or y > K with non-integer gamma) gives non-finite derivatives,
    which the solver reports as an integration failure.
    """
    y = state["y"]
    return [rates["mumax"]
            * y**rates["alpha"]
            * (1 - (y / rates["K"])**rates["beta"])**rates["gamma"]]


def twostep_derivs(t, state, rates):
    """
    Two-compartment model: cells switch from an inactive (yi) to an active
    (ya) state at rate kw; only active cells grow, with logistic limitation
    by the total population.

    dyi/dt = -kw * yi
    dya/dt = kw * yi + mumax * (1 - (yi + ya)/K) * ya
    """
    yi = state["yi"]
    ya = state["ya"]
    kw = rates["kw"]
    return [-kw * yi,
            kw * yi + rates["mumax"] * (1 - (yi + ya) / rates["K"]) * ya]


grow_logistic_ode = OdeModel(logistic_derivs,
                             states={"y": "y0"},
                             parameter_names=["y0", "mumax", "K"],
                             name="grow_logistic_ode")

grow_genlogistic = OdeModel(genlogistic_derivs,
                            states={"y": "y0"},
                            parameter_names=["y0", "mumax", "K",
                                             "alpha", "beta", "gamma"],
                            name="grow_genlogistic")

grow_twostep = OdeModel(twostep_derivs,
                        states={"yi": "yi", "ya": "ya"},
                        parameter_names=["yi", "ya", "kw", "mumax", "K"],
                        name="grow_twostep")
