"""
Active Day Expander (``lob_engines.active_days``).

Expands an event's start/end dates into calendar days and reconciles a
user-edited subset of "active days" against that range.

Pure functions, no clock reads: every date is passed in explicitly.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from lob_engines.leave_accrual import calendar_day
from lob_engines.tracer import traced_engine
from lob_kernel.exceptions import InvalidDateRangeError
from lob_kernel.logging_config import get_logger

logger = get_logger("engines.active_days")

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class ActiveDayDiff:
    """Minimal change between two active-day selections."""

    added: frozenset[date]
    removed: frozenset[date]

    @property
    def is_empty(self) -> bool:
        return not self.added and not self.removed


@dataclass(frozen=True)
class Reconciliation:
    """Active days kept inside the event range, and those dropped."""

    active_days: tuple[date, ...]
    dropped: tuple[date, ...]


def _check_range(start: date, end: date) -> None:
    if end < start:
        logger.warning("active_days_invalid_range", extra={
            "start": start.isoformat(),
            "end": end.isoformat(),
        })
        raise InvalidDateRangeError(start.isoformat(), end.isoformat())


def days_between(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end`` (0 for a one-day event)."""
    _check_range(start, end)
    return (end - start).days


@traced_engine("active_days", "1.0", fingerprint_fields=("start", "end"))
def expand_range(start: date, end: date) -> tuple[date, ...]:
    """
    Every date from ``start`` to ``end`` inclusive, ascending.

    Raises:
        InvalidDateRangeError: if ``end`` precedes ``start``.
    """
    start, end = calendar_day(start), calendar_day(end)
    count = days_between(start, end) + 1
    return tuple(start + i * _ONE_DAY for i in range(count))


def clamp_to_range(
    dates: Iterable[date],
    start: date,
    end: date,
) -> tuple[date, ...]:
    """Drop dates outside ``[start, end]``; result sorted and de-duplicated."""
    start, end = calendar_day(start), calendar_day(end)
    _check_range(start, end)
    return tuple(sorted({d for d in map(calendar_day, dates) if start <= d <= end}))


def diff(old: Iterable[date], new: Iterable[date]) -> ActiveDayDiff:
    """Dates to add and to remove to turn ``old`` into ``new``."""
    old_set = frozenset(map(calendar_day, old))
    new_set = frozenset(map(calendar_day, new))
    return ActiveDayDiff(added=new_set - old_set, removed=old_set - new_set)


def reconcile(
    active_days: Iterable[date],
    start: date,
    end: date,
) -> Reconciliation:
    """
    Re-fit stored active days to a (possibly changed) event range.

    Returns the surviving days and the ones that fell outside the range.
    """
    requested = frozenset(map(calendar_day, active_days))
    kept = clamp_to_range(requested, start, end)
    dropped = tuple(sorted(requested.difference(kept)))
    if dropped:
        logger.info("active_days_dropped_outside_range", extra={
            "start": calendar_day(start).isoformat(),
            "end": calendar_day(end).isoformat(),
            "dropped_count": len(dropped),
        })
    return Reconciliation(active_days=kept, dropped=dropped)


def is_weekend(day: date) -> bool:
    """Saturday or Sunday."""
    return day.weekday() >= 5


def build_active_days_payload(dates: Iterable[date]) -> list[dict[str, str]]:
    """``[{"date": "YYYY-MM-DD"}, ...]`` in ascending order, one per day."""
    return [{"date": d.isoformat()} for d in sorted(set(map(calendar_day, dates)))]
