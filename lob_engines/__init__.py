"""
Module: lob_engines
Responsibility:
    Package entrypoint that re-exports all public symbols from the pure
    calculation engine sub-modules.  This is the canonical import surface
    for the screen layer.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import lob_kernel (and sibling engine modules).
    MUST NOT import lob_config; callers pass configured values in.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
    - Decimal-only arithmetic: amounts and day counts are ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from lob_engines.sale_ledger import SaleLedger, compute_net
    from lob_engines.invoice_ledger import compute_totals, split_gst
    from lob_engines.leave_accrual import expand_selection, validate_request
    from lob_engines.active_days import expand_range, diff
"""

from lob_kernel.logging_config import get_logger

logger = get_logger("engines")

from lob_engines.active_days import (
    ActiveDayDiff,
    Reconciliation,
    build_active_days_payload,
    clamp_to_range,
    days_between,
    diff,
    expand_range,
    is_weekend,
    reconcile,
)
from lob_engines.invoice_ledger import (
    GstSplit,
    InvoiceItem,
    InvoiceLedger,
    InvoiceTotals,
    add_item,
    build_invoice_payload,
    compute_totals,
    remove_item,
    split_gst,
    tax_percentage_from_split,
    update_item,
    validate_tax_percentage,
)
from lob_engines.leave_accrual import (
    BalanceCheck,
    BalancePolicy,
    BalanceStatus,
    LeaveBalance,
    LeaveBalanceSheet,
    LeaveSummary,
    LeaveType,
    PolicyDecision,
    ShiftType,
    apply_policy,
    build_leave_request,
    expand_selection,
    remaining_balance,
    summarize_request,
    validate_request,
)
from lob_engines.sale_ledger import (
    Installment,
    PaymentMode,
    PaymentStatus,
    SaleBalance,
    SaleLedger,
    add_installment,
    build_sale_payload,
    compute_balance,
    compute_net,
    derive_payment_status,
    remove_installment,
    update_installment,
)

__all__ = [
    # Sale ledger
    "Installment",
    "PaymentMode",
    "PaymentStatus",
    "SaleBalance",
    "SaleLedger",
    "compute_net",
    "compute_balance",
    "add_installment",
    "remove_installment",
    "update_installment",
    "derive_payment_status",
    "build_sale_payload",
    # Invoice ledger
    "InvoiceItem",
    "InvoiceLedger",
    "InvoiceTotals",
    "GstSplit",
    "add_item",
    "remove_item",
    "update_item",
    "compute_totals",
    "split_gst",
    "validate_tax_percentage",
    "tax_percentage_from_split",
    "build_invoice_payload",
    # Leave accrual
    "LeaveType",
    "ShiftType",
    "BalancePolicy",
    "BalanceStatus",
    "BalanceCheck",
    "PolicyDecision",
    "LeaveBalance",
    "LeaveBalanceSheet",
    "LeaveSummary",
    "expand_selection",
    "remaining_balance",
    "validate_request",
    "apply_policy",
    "summarize_request",
    "build_leave_request",
    # Active days
    "ActiveDayDiff",
    "Reconciliation",
    "days_between",
    "expand_range",
    "clamp_to_range",
    "diff",
    "reconcile",
    "is_weekend",
    "build_active_days_payload",
]

logger.debug("engines_package_loaded", extra={
    "module_count": 4,
    "modules": ["sale_ledger", "invoice_ledger", "leave_accrual", "active_days"],
})
