"""
Utility functions shared across growthrates: validation, dataframe splitting,
formula parsing, file IO and command line helpers.
"""

from .validation import (
    check_number
)

from .dataframe import (
    check_columns,
    multisplit,
    as_grouping,
)

from .parse_formula import (
    parse_formula,
    Formula,
)

from .io import (
    read_dataframe,
    read_yaml,
)

from .cli import (
    generalized_main
)
