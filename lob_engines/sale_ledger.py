"""
Sale Ledger Engine - net amount, total received and balance due for a sale.

A sale is a gross amount less a discount, paid off through an ordered list
of installments. Pure functions with no I/O; the screen layer calls them on
every edit and the REST client persists the payload they build.

Usage:
    from datetime import date
    from lob_engines.sale_ledger import Installment, SaleLedger
    from lob_kernel.domain.values import Money

    ledger = SaleLedger(
        gross_amount=Money.of("10000", "INR"),
        discount=Money.of("1500", "INR"),
    )
    ledger = ledger.with_installment(
        Installment(Money.of("3000", "INR"), date(2025, 1, 10)),
    )
    print(ledger.net_amount)    # Money: 8500 INR
    print(ledger.balance_due)   # Money: 5500 INR
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Any, Sequence

from lob_engines.tracer import traced_engine
from lob_kernel.domain.values import Money, subtract, sum_money
from lob_kernel.exceptions import (
    CurrencyMismatchError,
    DiscountExceedsGrossError,
    InstallmentNotFoundError,
    NegativeAmountError,
    OverpaymentError,
    ValidationError,
)
from lob_kernel.logging_config import get_logger

logger = get_logger("engines.sale_ledger")


class PaymentMode(str, Enum):
    """How an installment was paid."""

    CASH = "cash"
    CHEQUE = "cheque"
    UPI = "upi"
    BANK_TRANSFER = "bank_transfer"


class PaymentStatus(str, Enum):
    """Payment status recorded on the sale."""

    COMPLETED = "completed"
    PENDING = "pending"  # Partially paid
    NOT_YET = "not_yet"  # Nothing received


@dataclass(frozen=True)
class Installment:
    """
    A single recorded partial payment toward a sale.

    Immutable value object; the amount must be strictly positive.
    """

    amount: Money
    payment_date: date
    mode: PaymentMode = PaymentMode.CASH
    notes: str = ""

    def __post_init__(self) -> None:
        if not self.amount.is_positive:
            raise ValidationError(
                "Please enter a valid payment amount", field="payment_amount",
            )
        if not isinstance(self.mode, PaymentMode):
            try:
                object.__setattr__(self, "mode", PaymentMode(self.mode))
            except ValueError as e:
                raise ValidationError(
                    f"Unknown payment mode: {self.mode!r}", field="mode_of_payment",
                ) from e


@dataclass(frozen=True)
class SaleBalance:
    """Derived figures for a sale at one point in time."""

    net_amount: Money
    total_received: Money
    balance_due: Money

    @property
    def is_settled(self) -> bool:
        return self.balance_due.is_zero


# ---------------------------------------------------------------------------
# Core calculations
# ---------------------------------------------------------------------------


@traced_engine("sale_ledger", "1.0", fingerprint_fields=("gross", "discount"))
def compute_net(gross: Money, discount: Money) -> Money:
    """
    Net amount = gross - discount.

    Raises:
        NegativeAmountError: if gross or discount is negative.
        DiscountExceedsGrossError: if discount > gross.
        CurrencyMismatchError: if the currencies differ.
    """
    if gross.is_negative:
        logger.warning("sale_gross_negative", extra={"gross": str(gross.amount)})
        raise NegativeAmountError(gross.amount, field="amount")
    if discount.is_negative:
        logger.warning("sale_discount_negative", extra={"discount": str(discount.amount)})
        raise NegativeAmountError(discount.amount, field="discount")
    if discount > gross:
        logger.warning("sale_discount_exceeds_gross", extra={
            "gross": str(gross.amount),
            "discount": str(discount.amount),
        })
        raise DiscountExceedsGrossError(gross.amount, discount.amount)
    return subtract(gross, discount, field="discount")


@traced_engine("sale_ledger", "1.0", fingerprint_fields=("net", "payments"))
def compute_balance(net: Money, payments: Sequence[Installment]) -> SaleBalance:
    """
    Sum installments (in input order) and derive the balance due.

    The library only reports an overpayment; whether that blocks or warns
    is the caller's decision.

    Raises:
        OverpaymentError: if the installments sum to more than ``net``.
        CurrencyMismatchError: if an installment is in another currency.
    """
    total_received = sum_money((p.amount for p in payments), net.currency)
    if total_received > net:
        logger.warning("sale_overpayment_detected", extra={
            "net_amount": str(net.amount),
            "total_received": str(total_received.amount),
            "installment_count": len(payments),
        })
        raise OverpaymentError(total_received.amount, net.amount)

    balance = SaleBalance(
        net_amount=net,
        total_received=total_received,
        balance_due=net - total_received,
    )
    logger.debug("sale_balance_computed", extra={
        "net_amount": str(net.amount),
        "total_received": str(total_received.amount),
        "balance_due": str(balance.balance_due.amount),
    })
    return balance


# ---------------------------------------------------------------------------
# Installment sequence operations
# ---------------------------------------------------------------------------


def _check_index(payments: Sequence[Installment], index: int) -> None:
    if not 0 <= index < len(payments):
        raise InstallmentNotFoundError(index, len(payments))


def add_installment(
    payments: Sequence[Installment],
    installment: Installment,
) -> tuple[Installment, ...]:
    """Append an installment, returning a new sequence."""
    return (*payments, installment)


def remove_installment(
    payments: Sequence[Installment],
    index: int,
) -> tuple[Installment, ...]:
    """Remove the installment at ``index``, returning a new sequence."""
    _check_index(payments, index)
    return tuple(p for i, p in enumerate(payments) if i != index)


def update_installment(
    payments: Sequence[Installment],
    index: int,
    installment: Installment,
) -> tuple[Installment, ...]:
    """Replace the installment at ``index``, returning a new sequence."""
    _check_index(payments, index)
    updated = list(payments)
    updated[index] = installment
    return tuple(updated)


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SaleLedger:
    """
    Immutable sale: gross, discount and the ordered installments.

    ``discount <= gross`` is enforced on construction. Installments may
    temporarily exceed the net amount while the form is being edited;
    ``validate()`` reports that at submission time.
    """

    gross_amount: Money
    discount: Money
    payments: tuple[Installment, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "payments", tuple(self.payments))
        compute_net(self.gross_amount, self.discount)
        for installment in self.payments:
            if installment.amount.currency != self.gross_amount.currency:
                raise CurrencyMismatchError(
                    self.gross_amount.currency.code,
                    installment.amount.currency.code,
                    "record",
                )

    @property
    def currency(self) -> str:
        return self.gross_amount.currency.code

    @property
    def net_amount(self) -> Money:
        return self.gross_amount - self.discount

    @property
    def total_received(self) -> Money:
        return sum_money((p.amount for p in self.payments), self.gross_amount.currency)

    @property
    def balance_due(self) -> Money:
        """max(0, net - received); never negative."""
        remaining = self.net_amount - self.total_received
        if remaining.is_negative:
            return Money.zero(self.gross_amount.currency)
        return remaining

    @property
    def is_overpaid(self) -> bool:
        return self.total_received > self.net_amount

    @property
    def payment_status(self) -> PaymentStatus:
        return derive_payment_status(self)

    def with_installment(self, installment: Installment) -> SaleLedger:
        return replace(self, payments=add_installment(self.payments, installment))

    def without_installment(self, index: int) -> SaleLedger:
        return replace(self, payments=remove_installment(self.payments, index))

    def with_updated_installment(self, index: int, installment: Installment) -> SaleLedger:
        return replace(self, payments=update_installment(self.payments, index, installment))

    def validate(self) -> SaleBalance:
        """Submission-time check; raises OverpaymentError when overpaid."""
        return compute_balance(self.net_amount, self.payments)


def derive_payment_status(ledger: SaleLedger) -> PaymentStatus:
    """
    Status implied by the installments.

    No installments -> NOT_YET; nothing left to pay -> COMPLETED;
    otherwise PENDING.
    """
    if not ledger.payments:
        return PaymentStatus.NOT_YET
    if ledger.balance_due.is_zero:
        return PaymentStatus.COMPLETED
    return PaymentStatus.PENDING


def _wire_amount(value: Money) -> str:
    return str(value.round().amount)


def build_sale_payload(
    ledger: SaleLedger,
    event_id: int,
    sale_date: date,
    payment_status: PaymentStatus | str | None = None,
) -> dict[str, Any]:
    """
    Build the create/update sale request body for the REST client.

    A zero gross amount is rejected and the ledger is validated before
    anything is built. An explicit ``payment_status`` overrides the derived
    one (the form lets the user pick it).
    """
    if ledger.gross_amount.is_zero:
        raise ValidationError(
            "Please enter a valid amount greater than 0", field="amount",
        )
    ledger.validate()
    if payment_status is None:
        status = derive_payment_status(ledger)
    else:
        try:
            status = PaymentStatus(payment_status)
        except ValueError as e:
            raise ValidationError(
                f"Unknown payment status: {payment_status!r}", field="payment_status",
            ) from e

    payload: dict[str, Any] = {
        "event": event_id,
        "amount": _wire_amount(ledger.gross_amount),
        "discount": _wire_amount(ledger.discount),
        "date": sale_date.isoformat(),
        "payment_status": status.value,
    }
    if ledger.payments:
        payload["payments"] = [
            {
                "payment_amount": _wire_amount(p.amount),
                "payment_date": p.payment_date.isoformat(),
                "mode_of_payment": p.mode.value,
                "notes": p.notes,
            }
            for p in ledger.payments
        ]

    logger.info("sale_payload_built", extra={
        "event": event_id,
        "net_amount": str(ledger.net_amount.amount),
        "installment_count": len(ledger.payments),
        "payment_status": status.value,
    })
    return payload
