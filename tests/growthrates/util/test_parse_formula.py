import pytest

from growthrates.errors import ConfigurationError
from growthrates.util.parse_formula import parse_formula, Formula


@pytest.mark.parametrize("formula, expected", [
    ("value ~ time | strain + conc + replicate",
     Formula("value", "time", None, ("strain", "conc", "replicate"))),
    ("value ~ grow_logistic(time) | strain + conc",
     Formula("value", "time", "grow_logistic", ("strain", "conc"))),
    ("od~grow_exponential( hours , p )|well",
     Formula("od", "hours", "grow_exponential", ("well",))),
    ("value ~ time",
     Formula("value", "time", None, ())),
])
def test_parse_formula(formula, expected):
    assert parse_formula(formula) == expected


@pytest.mark.parametrize("formula, match", [
    (5, "string"),
    ("value time | strain", "exactly one"),
    ("value ~ time ~ x", "exactly one"),
    ("log(value) ~ time", "dependent"),
    ("value ~ time | strain + ", "grouping"),
    ("value ~ time * 2 | strain", "independent"),
])
def test_parse_formula_errors(formula, match):
    with pytest.raises(ConfigurationError, match=match):
        parse_formula(formula)
