"""
LOB Kernel - shared value objects for the line-of-business calculation core.

- Decimal-only Money with ISO 4217 currencies
- Typed, coded exceptions for every validation failure
- Structured JSON logging
"""

__version__ = "0.1.0"
