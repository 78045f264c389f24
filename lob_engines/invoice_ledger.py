"""
Invoice Ledger Engine - subtotal, flat-rate GST and total for an invoice.

The item list is the single source of truth: the total is always derived
from it and never entered independently. Tax is applied once, on the
subtotal (not compounded per line), and may be split into CGST and SGST
parts that always sum back to the tax amount exactly.

Usage:
    from decimal import Decimal
    from lob_engines.invoice_ledger import add_item, compute_totals
    from lob_kernel.domain.values import Money

    items = add_item((), "Stage setup", 2, Money.of("500", "INR"))
    items = add_item(items, "Lighting", 1, Money.of("1000", "INR"))
    totals = compute_totals(items, Decimal("18"), "INR")
    print(totals.subtotal)    # Money: 2000 INR
    print(totals.tax_amount)  # Money: 360 INR
    print(totals.total)       # Money: 2360 INR
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import ROUND_DOWN, Decimal
from typing import Any, Sequence

from lob_engines.tracer import traced_engine
from lob_kernel.domain.values import Currency, Money, multiply, sum_money, to_decimal
from lob_kernel.exceptions import (
    CurrencyMismatchError,
    EmptyFieldError,
    InvalidQuantityError,
    InvalidTaxPercentageError,
    InvoiceItemNotFoundError,
    NegativeAmountError,
)
from lob_kernel.logging_config import get_logger

logger = get_logger("engines.invoice_ledger")

_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class InvoiceItem:
    """
    One invoice line.

    Immutable value object. Quantity may be fractional (hours, metres) but
    must be positive.
    """

    description: str
    quantity: Decimal
    unit_price: Money

    def __post_init__(self) -> None:
        description = (self.description or "").strip()
        if not description:
            raise EmptyFieldError("description")
        object.__setattr__(self, "description", description)

        quantity = to_decimal(self.quantity, field="quantity")
        if quantity <= 0:
            raise InvalidQuantityError(quantity)
        object.__setattr__(self, "quantity", quantity)

        if self.unit_price.is_negative:
            raise NegativeAmountError(self.unit_price.amount, field="unit_price")

    @property
    def line_amount(self) -> Money:
        """quantity x unit price, unrounded."""
        return multiply(self.unit_price, self.quantity)


@dataclass(frozen=True)
class InvoiceTotals:
    """Derived invoice figures. ``total == subtotal + tax_amount`` exactly."""

    subtotal: Money
    tax_amount: Money
    total: Money
    tax_percentage: Decimal


@dataclass(frozen=True)
class GstSplit:
    """Tax amount divided into its central and state halves."""

    cgst: Money
    sgst: Money

    @property
    def total(self) -> Money:
        return self.cgst + self.sgst


def validate_tax_percentage(tax_percentage: Decimal | int | str) -> Decimal:
    """Return the percentage as Decimal, or raise if outside [0, 100]."""
    pct = to_decimal(tax_percentage, field="tax_percentage")
    if pct < 0 or pct > _HUNDRED:
        raise InvalidTaxPercentageError(pct)
    return pct


def tax_percentage_from_split(
    cgst_percentage: Decimal | int | str,
    sgst_percentage: Decimal | int | str,
) -> Decimal:
    """Combined GST rate from its CGST and SGST rates (9 + 9 -> 18)."""
    return validate_tax_percentage(
        validate_tax_percentage(cgst_percentage) + validate_tax_percentage(sgst_percentage)
    )


# ---------------------------------------------------------------------------
# Item sequence operations
# ---------------------------------------------------------------------------


def add_item(
    items: Sequence[InvoiceItem],
    description: str,
    quantity: Decimal | int | str,
    unit_price: Money,
) -> tuple[InvoiceItem, ...]:
    """
    Append a new line, returning a new sequence.

    Raises:
        EmptyFieldError: description empty or blank.
        InvalidQuantityError: quantity <= 0.
        NegativeAmountError: unit price < 0.
    """
    item = InvoiceItem(description=description, quantity=quantity, unit_price=unit_price)
    return (*items, item)


def _check_index(items: Sequence[InvoiceItem], index: int) -> None:
    if not 0 <= index < len(items):
        raise InvoiceItemNotFoundError(index, len(items))


def remove_item(items: Sequence[InvoiceItem], index: int) -> tuple[InvoiceItem, ...]:
    """Remove the line at ``index``, returning a new sequence."""
    _check_index(items, index)
    return tuple(item for i, item in enumerate(items) if i != index)


def update_item(
    items: Sequence[InvoiceItem],
    index: int,
    item: InvoiceItem,
) -> tuple[InvoiceItem, ...]:
    """Replace the line at ``index``, returning a new sequence."""
    _check_index(items, index)
    updated = list(items)
    updated[index] = item
    return tuple(updated)


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------


@traced_engine("invoice_ledger", "1.0", fingerprint_fields=("items", "tax_percentage"))
def compute_totals(
    items: Sequence[InvoiceItem],
    tax_percentage: Decimal | int | str,
    currency: str | Currency = "INR",
) -> InvoiceTotals:
    """
    Subtotal, tax and total for a list of lines.

    Args:
        items: Invoice lines (may be empty -> all zero).
        tax_percentage: Flat rate in [0, 100] applied to the subtotal.
        currency: Currency of the invoice; every line must match.

    Raises:
        InvalidTaxPercentageError: rate outside [0, 100].
        CurrencyMismatchError: a line priced in another currency.
    """
    pct = validate_tax_percentage(tax_percentage)
    subtotal = sum_money((item.line_amount for item in items), currency)
    # scaleb shifts the exponent, so pct / 100 is exact
    tax_amount = multiply(subtotal, pct.scaleb(-2))
    totals = InvoiceTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        total=subtotal + tax_amount,
        tax_percentage=pct,
    )

    logger.debug("invoice_totals_computed", extra={
        "item_count": len(items),
        "subtotal": str(subtotal.amount),
        "tax_percentage": str(pct),
        "tax_amount": str(tax_amount.amount),
        "total": str(totals.total.amount),
    })
    return totals


def split_gst(
    tax_amount: Money,
    cgst_percentage: Decimal | int | str | None = None,
    sgst_percentage: Decimal | int | str | None = None,
) -> GstSplit:
    """
    Split a GST amount into its CGST and SGST parts.

    Without rates the two parts are equal halves. With rates, SGST gets
    ``sgst / (cgst + sgst)`` of the tax. Either way SGST is truncated to the
    currency's minor unit and CGST takes the rest, so any odd cent lands on
    CGST and the parts always sum back to ``tax_amount`` exactly.
    """
    if tax_amount.is_negative:
        raise NegativeAmountError(tax_amount.amount, field="tax_amount")

    share = Decimal("0.5")
    if cgst_percentage is not None or sgst_percentage is not None:
        cgst_pct = validate_tax_percentage(cgst_percentage or 0)
        sgst_pct = validate_tax_percentage(sgst_percentage or 0)
        combined = cgst_pct + sgst_pct
        if combined != 0:
            share = sgst_pct / combined

    sgst = Money(
        amount=(tax_amount.amount * share).quantize(
            tax_amount.currency.minor_unit, rounding=ROUND_DOWN,
        ),
        currency=tax_amount.currency,
    )
    return GstSplit(cgst=tax_amount - sgst, sgst=sgst)


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InvoiceLedger:
    """
    Immutable invoice: ordered lines plus the CGST and SGST rates.

    The flat rate applied to the subtotal is ``cgst + sgst``; the rates are
    kept separately because the invoice records each one.
    """

    items: tuple[InvoiceItem, ...] = ()
    cgst_percentage: Decimal = Decimal("9")
    sgst_percentage: Decimal = Decimal("9")
    currency: str = "INR"

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        object.__setattr__(self, "cgst_percentage", validate_tax_percentage(self.cgst_percentage))
        object.__setattr__(self, "sgst_percentage", validate_tax_percentage(self.sgst_percentage))
        tax_percentage_from_split(self.cgst_percentage, self.sgst_percentage)
        if not isinstance(self.currency, Currency):
            object.__setattr__(self, "currency", Currency(self.currency))
        object.__setattr__(self, "currency", self.currency.code)
        for item in self.items:
            if item.unit_price.currency.code != self.currency:
                raise CurrencyMismatchError(
                    self.currency, item.unit_price.currency.code, "invoice",
                )

    @property
    def tax_percentage(self) -> Decimal:
        return self.cgst_percentage + self.sgst_percentage

    @property
    def totals(self) -> InvoiceTotals:
        return compute_totals(self.items, self.tax_percentage, self.currency)

    @property
    def gst_split(self) -> GstSplit:
        return split_gst(self.totals.tax_amount, self.cgst_percentage, self.sgst_percentage)

    def with_item(
        self,
        description: str,
        quantity: Decimal | int | str,
        unit_price: Money,
    ) -> InvoiceLedger:
        return replace(self, items=add_item(self.items, description, quantity, unit_price))

    def without_item(self, index: int) -> InvoiceLedger:
        return replace(self, items=remove_item(self.items, index))

    def with_updated_item(self, index: int, item: InvoiceItem) -> InvoiceLedger:
        return replace(self, items=update_item(self.items, index, item))


def _plain_decimal(value: Decimal) -> str:
    return format(value.normalize(), "f")


def build_invoice_payload(
    ledger: InvoiceLedger,
    client_id: int,
    invoice_date: date,
    invoice_number: str,
    event_id: int | None = None,
    discount: Money | None = None,
) -> dict[str, Any]:
    """
    Build the create/update invoice request body for the REST client.

    ``total_amount`` is the subtotal and ``final_amount`` the tax-inclusive
    total. ``discount`` is recorded on the invoice as entered; it does not
    change the GST base or the final amount.

    Raises:
        EmptyFieldError: blank invoice number or no items.
        NegativeAmountError: negative discount.
        CurrencyMismatchError: discount in another currency.
    """
    invoice_number = (invoice_number or "").strip()
    if not invoice_number:
        raise EmptyFieldError("invoice_number")
    if not ledger.items:
        raise EmptyFieldError("items")

    if discount is None:
        discount = Money.zero(ledger.currency)
    elif discount.currency.code != ledger.currency:
        raise CurrencyMismatchError(ledger.currency, discount.currency.code, "invoice")
    if discount.is_negative:
        raise NegativeAmountError(discount.amount, field="discount")

    totals = ledger.totals
    payload: dict[str, Any] = {
        "invoice_number": invoice_number,
        "client": client_id,
        "date": invoice_date.isoformat(),
        "total_amount": str(totals.subtotal.round().amount),
        "discount": str(discount.round().amount),
        "final_amount": str(totals.total.round().amount),
        "cgst": _plain_decimal(ledger.cgst_percentage),
        "sgst": _plain_decimal(ledger.sgst_percentage),
        "items": [
            {
                "sr_no": i,
                "particulars": item.description,
                "quantity": _plain_decimal(item.quantity),
                "amount": str(item.line_amount.round().amount),
            }
            for i, item in enumerate(ledger.items, start=1)
        ],
    }
    if event_id is not None:
        payload["event"] = event_id

    logger.info("invoice_payload_built", extra={
        "invoice_number": invoice_number,
        "client": client_id,
        "item_count": len(ledger.items),
        "final_amount": payload["final_amount"],
    })
    return payload
