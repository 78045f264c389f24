"""
Calculation configuration schema.

YAML is parsed into these frozen dataclasses by the loader; nothing else in
the repository reads the YAML directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from lob_engines.leave_accrual import BalancePolicy, LeaveType


@dataclass(frozen=True)
class LeaveConfig:
    """Leave screen defaults."""

    balance_policy: BalancePolicy = BalancePolicy.WARN
    # (leave_type, yearly days), used when the backend sends none
    default_entitlements: tuple[tuple[LeaveType, Decimal], ...] = ()

    def entitlement(self, leave_type: LeaveType) -> Decimal:
        return dict(self.default_entitlements).get(leave_type, Decimal("0"))


@dataclass(frozen=True)
class TaxConfig:
    """GST defaults for new invoices."""

    cgst_percentage: Decimal = Decimal("9")
    sgst_percentage: Decimal = Decimal("9")

    @property
    def tax_percentage(self) -> Decimal:
        return self.cgst_percentage + self.sgst_percentage


@dataclass(frozen=True)
class CalculationConfig:
    """Everything the screens need to call the engines consistently."""

    currency: str
    locale: str
    leave: LeaveConfig
    tax: TaxConfig
    version: int = 1
    checksum: str = ""
