"""
Pure domain layer.

Value objects with NO dependencies on I/O, clocks, or configuration.
All domain objects are immutable and deterministic.
"""

from lob_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from lob_kernel.domain.values import (
    Currency,
    Money,
    add,
    multiply,
    parse_amount,
    subtract,
    sum_money,
    to_display_string,
)

__all__ = [
    "CurrencyInfo",
    "CurrencyRegistry",
    "Currency",
    "Money",
    "add",
    "subtract",
    "multiply",
    "sum_money",
    "parse_amount",
    "to_display_string",
]
