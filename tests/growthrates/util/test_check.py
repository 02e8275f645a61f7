import pytest
import numpy as np

from growthrates.util.validation import check_number

# ----------------------------------------------------------------------------
# test check_number
# ----------------------------------------------------------------------------

@pytest.mark.parametrize("value, kwargs, expected", [
    (5, {}, 5.0),
    (5.5, {"cast_type": int}, 5),
    (np.int64(3), {"cast_type": int}, 3),
    ("2.5", {}, 2.5),
    (None, {"allow_none": True}, None),
    (0, {"min_allowed": 0}, 0.0),
    (10, {"max_allowed": 10}, 10.0),
    (0.1, {"min_allowed": 0, "inclusive_min": False}, 0.1),
    (9.9, {"max_allowed": 10, "inclusive_max": False}, 9.9),
])
def test_check_number_success(value, kwargs, expected):
    assert check_number(value, **kwargs) == expected


@pytest.mark.parametrize("value, kwargs, match", [
    (None, {"param_name": "h"}, "h cannot be None"),
    ([1, 2], {}, "numeric scalar"),
    (True, {}, "numeric scalar"),
    ("abc", {}, "could not convert string to float"),
    (np.inf, {}, "finite"),
    (-1, {"min_allowed": 0}, "must be >= 0"),
    (0, {"min_allowed": 0, "inclusive_min": False}, "must be > 0"),
    (11, {"max_allowed": 10}, "must be <= 10"),
    (10, {"max_allowed": 10, "inclusive_max": False}, "must be < 10"),
])
def test_check_number_failures(value, kwargs, match):
    with pytest.raises(ValueError, match=match):
        check_number(value, **kwargs)


def test_check_number_names_parameter():
    with pytest.raises(ValueError, match="'cores'"):
        check_number(0, "cores", cast_type=int, min_allowed=1)
