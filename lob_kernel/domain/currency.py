"""Currency -- ISO 4217 registry, precision and display symbols."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar

from lob_kernel.exceptions import InvalidCurrencyError


@dataclass(frozen=True)
class CurrencyInfo:
    """Information about a single ISO 4217 currency."""

    code: str
    decimal_places: int
    name: str
    symbol: str = ""

    @property
    def minor_unit(self) -> Decimal:
        """Smallest representable amount (0.01 for two-decimal currencies)."""
        return Decimal(1).scaleb(-self.decimal_places)

    @property
    def quantize_string(self) -> str:
        """Exponent template for Decimal.quantize() ("0.00", "0.000", "0")."""
        return str(Decimal(0).scaleb(-self.decimal_places))

    @property
    def display_symbol(self) -> str:
        """Symbol used for display, falling back to the ISO code."""
        return self.symbol or self.code


class CurrencyRegistry:
    """Registry of the ISO 4217 currencies the app bills and pays in."""

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        # Home currency
        "INR": CurrencyInfo("INR", 2, "Indian Rupee", "₹"),
        # Major currencies
        "USD": CurrencyInfo("USD", 2, "US Dollar", "$"),
        "EUR": CurrencyInfo("EUR", 2, "Euro", "€"),
        "GBP": CurrencyInfo("GBP", 2, "Pound Sterling", "£"),
        "JPY": CurrencyInfo("JPY", 0, "Japanese Yen", "¥"),
        "CHF": CurrencyInfo("CHF", 2, "Swiss Franc"),
        "CAD": CurrencyInfo("CAD", 2, "Canadian Dollar", "CA$"),
        "AUD": CurrencyInfo("AUD", 2, "Australian Dollar", "A$"),
        "SGD": CurrencyInfo("SGD", 2, "Singapore Dollar", "S$"),
        # Regional (South Asia / Gulf)
        "AED": CurrencyInfo("AED", 2, "UAE Dirham"),
        "SAR": CurrencyInfo("SAR", 2, "Saudi Riyal"),
        "QAR": CurrencyInfo("QAR", 2, "Qatari Riyal"),
        "BDT": CurrencyInfo("BDT", 2, "Bangladeshi Taka", "৳"),
        "LKR": CurrencyInfo("LKR", 2, "Sri Lankan Rupee"),
        "NPR": CurrencyInfo("NPR", 2, "Nepalese Rupee"),
        "PKR": CurrencyInfo("PKR", 2, "Pakistani Rupee"),
        # Three decimal currencies
        "BHD": CurrencyInfo("BHD", 3, "Bahraini Dinar"),
        "KWD": CurrencyInfo("KWD", 3, "Kuwaiti Dinar"),
        "OMR": CurrencyInfo("OMR", 3, "Omani Rial"),
    }

    DEFAULT_CURRENCY: ClassVar[str] = "INR"

    @classmethod
    def is_valid(cls, code: str) -> bool:
        """Check if a currency code is known."""
        if not code or not isinstance(code, str):
            return False
        return code.upper().strip() in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        """Get currency information by code."""
        if not code or not isinstance(code, str):
            return None
        return cls._CURRENCIES.get(code.upper().strip())

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        """Get decimal places for a currency."""
        return cls.require(code).decimal_places

    @classmethod
    def require(cls, code: str) -> CurrencyInfo:
        """Get currency information, raising for unknown codes."""
        info = cls.get_info(code)
        if info is None:
            raise InvalidCurrencyError(str(code))
        return info

    @classmethod
    def validate(cls, code: str) -> str:
        """Validate and normalize a currency code."""
        return cls.require(code).code

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        """Get all valid currency codes."""
        return frozenset(cls._CURRENCIES.keys())
