"""
Typed Exception Hierarchy for the LOB calculation kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Screens turn every failure of the calculation core into a user-facing
message. Matching on message text is fragile, so every error here has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (field name, offending values, index)

Example:
    try:
        net = compute_net(gross, discount)
    except DiscountExceedsGrossError as e:
        show_error(field=e.field, code=e.code)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LobKernelError (base)
    |
    +-- ValidationError
    |   +-- InvalidAmountError
    |   +-- NegativeAmountError
    |   +-- DiscountExceedsGrossError
    |   +-- OverpaymentError
    |   +-- InvalidQuantityError
    |   +-- InvalidTaxPercentageError
    |   +-- EmptyFieldError
    |   +-- InvalidDateRangeError
    |   +-- CurrencyError
    |       +-- InvalidCurrencyError
    |       +-- CurrencyMismatchError
    |
    +-- NotFoundError
    |   +-- InstallmentNotFoundError
    |   +-- InvoiceItemNotFoundError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | INVALID_AMOUNT              | Text/float that is not a decimal amount
                | NEGATIVE_AMOUNT             | Money below zero where forbidden
                | DISCOUNT_EXCEEDS_GROSS      | Sale discount larger than gross amount
                | OVERPAYMENT                 | Installments exceed the net amount
                | INVALID_QUANTITY            | Invoice item quantity <= 0
                | INVALID_TAX_PERCENTAGE      | Tax percentage outside [0, 100]
                | EMPTY_FIELD                 | Required text/collection left empty
                | INVALID_DATE_RANGE          | End date before start date
                | INVALID_CURRENCY            | Not a known ISO 4217 code
                | CURRENCY_MISMATCH           | Mixed currencies in one operation
----------------|-----------------------------|-----------------------------------------
Not found       | INSTALLMENT_NOT_FOUND       | Payment index out of range
                | INVOICE_ITEM_NOT_FOUND      | Line item index out of range
----------------|-----------------------------|-----------------------------------------
Configuration   | CONFIGURATION_ERROR         | YAML config fails validation

Exceeding a leave balance is NOT an exception: it is returned as a
``BalanceCheck`` result so the caller's policy decides what happens.
"""

from __future__ import annotations

from decimal import Decimal


class LobKernelError(Exception):
    """
    Base exception for all calculation kernel errors.

    All subclasses must have a `code` class attribute
    for machine-readable error identification.
    """

    code: str = "LOB_KERNEL_ERROR"


# Validation exceptions


class ValidationError(LobKernelError):
    """Input violates a stated precondition."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class InvalidAmountError(ValidationError):
    """Raw input could not be interpreted as a decimal amount."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, raw_value: str, field: str | None = None):
        self.raw_value = raw_value
        super().__init__(f"Invalid amount: {raw_value!r}", field=field)


class NegativeAmountError(ValidationError):
    """A money value fell below zero where the domain forbids it."""

    code: str = "NEGATIVE_AMOUNT"

    def __init__(self, amount: Decimal | str, field: str | None = None):
        self.amount = str(amount)
        label = field or "amount"
        super().__init__(f"{label} cannot be negative: {amount}", field=field)


class DiscountExceedsGrossError(ValidationError):
    """Sale discount is larger than the gross amount."""

    code: str = "DISCOUNT_EXCEEDS_GROSS"

    def __init__(self, gross: Decimal | str, discount: Decimal | str):
        self.gross = str(gross)
        self.discount = str(discount)
        super().__init__(
            f"Discount ({discount}) cannot be greater than amount ({gross})",
            field="discount",
        )


class OverpaymentError(ValidationError):
    """Total received from installments exceeds the net amount."""

    code: str = "OVERPAYMENT"

    def __init__(self, total_received: Decimal | str, net_amount: Decimal | str):
        self.total_received = str(total_received)
        self.net_amount = str(net_amount)
        super().__init__(
            f"Total received ({total_received}) cannot exceed "
            f"net amount ({net_amount})",
            field="payments",
        )


class InvalidQuantityError(ValidationError):
    """Invoice line quantity is zero or negative."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, quantity: Decimal | str):
        self.quantity = str(quantity)
        super().__init__(
            f"Quantity must be greater than 0: {quantity}", field="quantity",
        )


class InvalidTaxPercentageError(ValidationError):
    """Tax percentage lies outside [0, 100]."""

    code: str = "INVALID_TAX_PERCENTAGE"

    def __init__(self, tax_percentage: Decimal | str):
        self.tax_percentage = str(tax_percentage)
        super().__init__(
            f"Tax percentage must be between 0 and 100: {tax_percentage}",
            field="tax_percentage",
        )


class EmptyFieldError(ValidationError):
    """A required text field or collection is empty."""

    code: str = "EMPTY_FIELD"

    def __init__(self, field: str):
        super().__init__(f"{field} is required", field=field)


class InvalidDateRangeError(ValidationError):
    """End date precedes start date."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, start: str, end: str):
        self.start = start
        self.end = end
        super().__init__(
            f"End date ({end}) cannot be before start date ({start})",
            field="end_date",
        )


class CurrencyError(ValidationError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Currency code is not a known ISO 4217 code."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency_code: str):
        self.currency_code = currency_code
        super().__init__(
            f"Invalid ISO 4217 currency code: {currency_code!r}",
            field="currency",
        )


class CurrencyMismatchError(CurrencyError):
    """One operation mixed two currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, left: str, right: str, operation: str = "combine"):
        self.left = left
        self.right = right
        self.operation = operation
        super().__init__(
            f"Cannot {operation} Money with different currencies: "
            f"{left} and {right}",
            field="currency",
        )


# Lookup exceptions


class NotFoundError(LobKernelError):
    """Index or id based lookup missed."""

    code: str = "NOT_FOUND"

    def __init__(self, message: str, index: int | None = None):
        self.index = index
        super().__init__(message)


class InstallmentNotFoundError(NotFoundError):
    """Payment installment index is out of range."""

    code: str = "INSTALLMENT_NOT_FOUND"

    def __init__(self, index: int, count: int):
        self.count = count
        super().__init__(
            f"Installment not found at index {index} "
            f"(sale has {count} installment(s))",
            index=index,
        )


class InvoiceItemNotFoundError(NotFoundError):
    """Invoice line item index is out of range."""

    code: str = "INVOICE_ITEM_NOT_FOUND"

    def __init__(self, index: int, count: int):
        self.count = count
        super().__init__(
            f"Invoice item not found at index {index} "
            f"(invoice has {count} item(s))",
            index=index,
        )


# Configuration exceptions


class ConfigurationError(LobKernelError):
    """Configuration file failed validation."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message)
