"""
Tests for currency validation and precision.

- Codes are validated and normalized at the domain boundary.
- Rounding precision is derived from the currency, never hard-coded.
"""

import pytest
from decimal import Decimal

from lob_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from lob_kernel.domain.values import Currency
from lob_kernel.exceptions import InvalidCurrencyError, ValidationError


class TestCodeValidation:
    """Tests for ISO 4217 enforcement."""

    def test_valid_currency_codes_accepted(self):
        """Known codes validate to themselves."""
        for code in ["INR", "USD", "EUR", "GBP", "JPY", "AED", "KWD"]:
            assert CurrencyRegistry.is_valid(code)
            assert CurrencyRegistry.validate(code) == code

    def test_lowercase_and_whitespace_normalized(self):
        assert CurrencyRegistry.validate("inr") == "INR"
        assert CurrencyRegistry.validate(" usd ") == "USD"

    def test_invalid_codes_rejected(self):
        for code in ["XXY", "ABC", "123", "US", "", None]:
            assert not CurrencyRegistry.is_valid(code)

    def test_validate_raises_typed_error(self):
        """Unknown codes raise InvalidCurrencyError carrying the code."""
        with pytest.raises(InvalidCurrencyError, match="Invalid ISO 4217 currency code") as exc_info:
            CurrencyRegistry.validate("XXY")
        assert exc_info.value.currency_code == "XXY"
        assert exc_info.value.code == "INVALID_CURRENCY"

    def test_invalid_currency_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            Currency("ABC")

    def test_default_currency_is_rupee(self):
        assert CurrencyRegistry.DEFAULT_CURRENCY == "INR"
        assert "INR" in CurrencyRegistry.all_codes()


class TestPrecision:
    """Precision and symbols come from the registry."""

    def test_two_decimal_currencies(self):
        assert CurrencyRegistry.get_decimal_places("INR") == 2
        assert Currency("INR").minor_unit == Decimal("0.01")

    def test_zero_decimal_currency(self):
        assert CurrencyRegistry.get_decimal_places("JPY") == 0
        assert Currency("JPY").minor_unit == Decimal("1")

    def test_three_decimal_currency(self):
        info = CurrencyRegistry.require("KWD")
        assert info.decimal_places == 3
        assert info.quantize_string == "0.000"
        assert info.minor_unit == Decimal("0.001")

    def test_rupee_symbol(self):
        assert Currency("INR").symbol == "₹"

    def test_symbol_falls_back_to_code(self):
        assert CurrencyInfo("AED", 2, "UAE Dirham").display_symbol == "AED"

    def test_get_info_unknown_returns_none(self):
        assert CurrencyRegistry.get_info("ZZZ") is None
