"""
Configuration Loader (``lob_config.loader``).

Responsibility
--------------
Loads the YAML configuration file and parses it into the frozen
``lob_config.schema`` dataclasses.  The single public entry point for
runtime config is ``lob_config.get_active_config()``.

Invariants enforced
-------------------
* Every parse or validation failure raises ``ConfigurationError`` naming
  the offending key; there are no silent defaults for invalid values.
* Amounts and percentages are read as ``Decimal`` (YAML floats are read
  through ``repr`` so ``9.5`` stays ``9.5``).
* ``compute_checksum`` produces a deterministic SHA-256 hash of the parsed
  document for change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid values  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from lob_config.schema import CalculationConfig, LeaveConfig, TaxConfig
from lob_engines.invoice_ledger import tax_percentage_from_split
from lob_engines.leave_accrual import BalancePolicy, LeaveType
from lob_kernel.domain.currency import CurrencyRegistry
from lob_kernel.domain.values import SUPPORTED_LOCALES
from lob_kernel.exceptions import ConfigurationError, ValidationError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the top level is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {path}")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed configuration document."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_decimal(value: Any, key: str) -> Decimal:
    """Read a YAML scalar (int, float or string) as Decimal."""
    if isinstance(value, bool) or value is None:
        raise ConfigurationError(f"{key} must be a number, got {value!r}", key=key)
    try:
        return Decimal(repr(value) if isinstance(value, float) else str(value))
    except InvalidOperation as e:
        raise ConfigurationError(f"{key} must be a number, got {value!r}", key=key) from e


def parse_leave(data: dict[str, Any]) -> LeaveConfig:
    """Parse the ``leave`` section."""
    raw_policy = data.get("balance_policy", BalancePolicy.WARN.value)
    try:
        policy = BalancePolicy(raw_policy)
    except ValueError as e:
        allowed = ", ".join(p.value for p in BalancePolicy)
        raise ConfigurationError(
            f"leave.balance_policy must be one of {allowed}, got {raw_policy!r}",
            key="leave.balance_policy",
        ) from e

    entitlements: dict[LeaveType, Decimal] = {}
    for name, days in (data.get("default_entitlements") or {}).items():
        key = f"leave.default_entitlements.{name}"
        try:
            leave_type = LeaveType(name)
        except ValueError as e:
            raise ConfigurationError(f"Unknown leave type: {name!r}", key=key) from e
        amount = parse_decimal(days, key)
        if amount < 0:
            raise ConfigurationError(f"{key} cannot be negative", key=key)
        entitlements[leave_type] = amount

    return LeaveConfig(balance_policy=policy, default_entitlements=tuple(entitlements.items()))


def parse_tax(data: dict[str, Any]) -> TaxConfig:
    """Parse the ``tax`` section; the combined rate must stay within [0, 100]."""
    cgst = parse_decimal(data.get("cgst_percentage", "9"), "tax.cgst_percentage")
    sgst = parse_decimal(data.get("sgst_percentage", "9"), "tax.sgst_percentage")
    try:
        tax_percentage_from_split(cgst, sgst)
    except ValidationError as e:
        raise ConfigurationError(str(e), key="tax") from e
    return TaxConfig(cgst_percentage=cgst, sgst_percentage=sgst)


def parse_version(value: Any) -> int:
    """Parse the integer ``version`` key."""
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"version must be an integer, got {value!r}", key="version",
        ) from e


def parse_config(data: dict[str, Any]) -> CalculationConfig:
    """
    Parse a whole configuration document.

    Raises:
        ConfigurationError: on an unknown currency or locale, or any
            invalid section value.
    """
    currency = str(data.get("currency", CurrencyRegistry.DEFAULT_CURRENCY))
    if not CurrencyRegistry.is_valid(currency):
        raise ConfigurationError(f"Unknown currency: {currency!r}", key="currency")

    locale = str(data.get("locale", "en-IN"))
    if locale not in SUPPORTED_LOCALES:
        raise ConfigurationError(f"Unsupported locale: {locale!r}", key="locale")

    return CalculationConfig(
        currency=CurrencyRegistry.validate(currency),
        locale=locale,
        leave=parse_leave(data.get("leave") or {}),
        tax=parse_tax(data.get("tax") or {}),
        version=parse_version(data.get("version", 1)),
        checksum=compute_checksum(data),
    )
