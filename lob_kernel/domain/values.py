"""
Values -- Immutable, self-validating money value objects.

Responsibility:
    Provides the foundational value types for every amount the sale, invoice
    and expense screens compute: Currency and Money, plus the small set of
    arithmetic helpers (add / subtract / multiply / sum) and the single
    presentation-time formatter.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every engine. No outward dependencies except
    lob_kernel.domain.currency (CurrencyRegistry) and lob_kernel.exceptions.

Invariants enforced:
    - Amounts are Decimal, never float. Floats are rejected at construction.
    - Rounding to the currency's minor unit happens only in
      ``to_display_string`` / ``Money.round``, never mid-computation.
    - A zero amount is always positive zero (no ``-0.00``).

Failure modes:
    - InvalidAmountError when an amount cannot be read as a Decimal
    - NegativeAmountError from ``subtract`` when the result would be negative
    - CurrencyMismatchError when arithmetic mixes different currencies
    - InvalidCurrencyError for unknown ISO 4217 codes
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from lob_kernel.domain.currency import CurrencyRegistry
from lob_kernel.exceptions import (
    CurrencyMismatchError,
    InvalidAmountError,
    NegativeAmountError,
    ValidationError,
)

ZERO = Decimal("0")


def to_decimal(value: Decimal | int | str, field: str | None = None) -> Decimal:
    """Convert an exact numeric input to Decimal. Floats are refused."""
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmountError(repr(value), field=field)
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise InvalidAmountError(str(value), field=field) from e
    else:
        raise InvalidAmountError(repr(value), field=field)
    if not result.is_finite():
        raise InvalidAmountError(str(value), field=field)
    return _positive_zero(result)


def _positive_zero(value: Decimal) -> Decimal:
    if value.is_zero() and value.is_signed():
        return value.copy_abs()
    return value


@dataclass(frozen=True, slots=True)
class Currency:
    """
    ISO 4217 currency code value object.

    Validated and normalized (uppercased) on construction.
    """

    code: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", CurrencyRegistry.validate(self.code))

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    @property
    def minor_unit(self) -> Decimal:
        """Smallest representable amount for this currency."""
        return CurrencyRegistry.require(self.code).minor_unit

    @property
    def symbol(self) -> str:
        return CurrencyRegistry.require(self.code).display_symbol

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs a Decimal amount with its Currency. Arithmetic operators
        enforce the same-currency constraint and never round.

    Non-goals:
        - Does NOT perform currency conversion
        - Does NOT auto-round -- callers must explicitly call .round()
        - Does NOT forbid negatives; domain rules live in ``subtract`` and
          in the engines
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        """
        Factory method for creating Money.

        Args:
            amount: The monetary amount (no float allowed).
            currency: ISO 4217 currency code or Currency object.
        """
        return cls(amount=to_decimal(amount), currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        """Create a zero amount in the given currency."""
        return cls(amount=ZERO, currency=currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == ZERO

    @property
    def is_positive(self) -> bool:
        return self.amount > ZERO

    @property
    def is_negative(self) -> bool:
        return self.amount < ZERO

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Round to the currency's decimal places (presentation only)."""
        info = CurrencyRegistry.require(self.currency.code)
        rounded = self.amount.quantize(Decimal(info.quantize_string), rounding=rounding)
        return Money(amount=rounded, currency=self.currency)

    def _check_currency(self, other: Money, operation: str) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(
                self.currency.code, other.currency.code, operation,
            )

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "add")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "subtract")
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __neg__(self) -> Money:
        return Money(amount=-self.amount, currency=self.currency)

    def __abs__(self) -> Money:
        return Money(amount=abs(self.amount), currency=self.currency)

    def __mul__(self, factor: Decimal | int | str) -> Money:
        if isinstance(factor, float):
            raise InvalidAmountError(repr(factor), field="factor")
        if not isinstance(factor, (Decimal, int, str)) or isinstance(factor, bool):
            return NotImplemented
        return Money(
            amount=self.amount * to_decimal(factor, field="factor"),
            currency=self.currency,
        )

    def __rmul__(self, factor: Decimal | int | str) -> Money:
        return self.__mul__(factor)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"


# ---------------------------------------------------------------------------
# Arithmetic helpers
# ---------------------------------------------------------------------------


def add(a: Money, b: Money) -> Money:
    """Add two amounts of the same currency."""
    return a + b


def subtract(
    a: Money,
    b: Money,
    *,
    allow_negative: bool = False,
    field: str | None = None,
) -> Money:
    """
    Subtract ``b`` from ``a``.

    Raises:
        NegativeAmountError: when the result is below zero and
            ``allow_negative`` is False.
        CurrencyMismatchError: when the currencies differ.
    """
    result = a - b
    if result.is_negative and not allow_negative:
        raise NegativeAmountError(result.amount, field=field)
    return result


def multiply(a: Money, factor: Decimal | int | str) -> Money:
    """Scale an amount by an exact factor (quantity, rate, fraction)."""
    return a * factor


def sum_money(values: Iterable[Money], currency: str | Currency) -> Money:
    """Sum amounts in iteration order, starting from zero in ``currency``."""
    total = Money.zero(currency)
    for value in values:
        total = total + value
    return total


def parse_amount(
    raw: str | int | Decimal | None,
    currency: str | Currency,
    field: str | None = None,
) -> Money:
    """
    Read a user-typed amount ("1,500", " 250.75 ", "") into Money.

    Empty input reads as zero, matching the form defaults.
    """
    if raw is None:
        return Money.zero(currency)
    if isinstance(raw, str):
        cleaned = raw.replace(",", "").strip()
        if not cleaned:
            return Money.zero(currency)
        return Money(amount=to_decimal(cleaned, field=field), currency=currency)
    return Money(amount=to_decimal(raw, field=field), currency=currency)


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------

# locale -> (group separator, decimal separator, grouping, symbol first)
_LOCALE_FORMATS: dict[str, tuple[str, str, str, bool]] = {
    "en-IN": (",", ".", "indian", True),
    "en-US": (",", ".", "thousands", True),
    "en-GB": (",", ".", "thousands", True),
    "de-DE": (".", ",", "thousands", False),
}

SUPPORTED_LOCALES: frozenset[str] = frozenset(_LOCALE_FORMATS)


def _group_thousands(digits: str, sep: str) -> str:
    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return sep.join(groups)


def _group_indian(digits: str, sep: str) -> str:
    # 12,34,56,789: last three digits, then pairs
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    groups.insert(0, head)
    return sep.join(groups) + sep + tail


def to_display_string(
    value: Money,
    locale: str = "en-IN",
    currency_code: str | None = None,
) -> str:
    """
    Format an amount for display with exactly the currency's fraction digits.

    This is the only place amounts are rounded (half-up).
    ``currency_code`` overrides the symbol shown and must match the value's
    currency when given.
    """
    if locale not in _LOCALE_FORMATS:
        raise ValidationError(f"Unsupported locale: {locale!r}", field="locale")
    if currency_code is not None and CurrencyRegistry.validate(currency_code) != value.currency.code:
        raise CurrencyMismatchError(value.currency.code, currency_code, "format")

    group_sep, decimal_sep, grouping, symbol_first = _LOCALE_FORMATS[locale]
    rounded = value.round().amount
    negative = rounded < ZERO
    text = format(abs(rounded), "f")
    int_part, _, frac_part = text.partition(".")

    if grouping == "indian":
        int_part = _group_indian(int_part, group_sep)
    else:
        int_part = _group_thousands(int_part, group_sep)

    number = f"{int_part}{decimal_sep}{frac_part}" if frac_part else int_part
    symbol = value.currency.symbol
    formatted = f"{symbol}{number}" if symbol_first else f"{number} {symbol}"
    return f"-{formatted}" if negative else formatted
