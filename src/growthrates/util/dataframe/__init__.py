from .check_columns import (
    check_columns
)

from .multisplit import (
    multisplit,
    as_grouping,
)
