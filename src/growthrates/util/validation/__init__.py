from .check import (
    check_number
)
