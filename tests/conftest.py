"""
Pytest fixtures for the calculation kernel test suite.

Provides:
- Logging state reset between tests
- Fixed calendar dates (engines never read the clock)
"""

from datetime import date

import pytest

from lob_kernel.logging_config import LogContext, reset_logging


@pytest.fixture(autouse=True)
def _clean_logging():
    """Loggers propagate to the root so caplog sees engine traces."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def leave_dates() -> list[date]:
    """Monday to Wednesday of one week."""
    return [date(2025, 3, 3), date(2025, 3, 4), date(2025, 3, 5)]
