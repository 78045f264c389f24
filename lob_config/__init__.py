"""
lob_config -- single public entrypoint for calculation configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Screens read the configured currency, locale,
    leave balance policy and GST rates from the returned
    ``CalculationConfig`` and pass them to the engines explicitly.

Architecture position:
    Configuration -- sits above ``lob_kernel`` and ``lob_engines``.  The
    engines MUST NEVER import from ``lob_config``.

Failure modes:
    - ``FileNotFoundError`` -- the requested YAML file does not exist.
    - ``ConfigurationError`` -- validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``LOB_CONFIG_TRACE`` log entry with the version and checksum.
"""

from __future__ import annotations

from pathlib import Path

from lob_config.loader import load_yaml_file, parse_config
from lob_config.schema import CalculationConfig, LeaveConfig, TaxConfig
from lob_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(path: Path | str | None = None) -> CalculationConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: YAML file to load; the bundled ``defaults.yaml`` when None.

    Returns:
        A validated, frozen ``CalculationConfig``.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config = parse_config(load_yaml_file(config_path))

    _logger.info(
        "LOB_CONFIG_TRACE",
        extra={
            "trace_type": "LOB_CONFIG_TRACE",
            "config_path": str(config_path),
            "version": config.version,
            "checksum": config.checksum,
            "currency": config.currency,
            "locale": config.locale,
            "balance_policy": config.leave.balance_policy.value,
        },
    )
    return config


__all__ = [
    "CalculationConfig",
    "LeaveConfig",
    "TaxConfig",
    "DEFAULT_CONFIG_PATH",
    "get_active_config",
]
