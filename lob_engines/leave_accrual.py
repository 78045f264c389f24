"""
Leave Accrual Engine (``lob_engines.leave_accrual``).

Responsibility
--------------
Pure leave-day arithmetic for the leave application screens:

* consumed days for a multi-date selection and shift fraction
* remaining balance per leave type (total - used - planned)
* balance check returning a result, never raising
* caller-injected enforcement policy (strict / warn / allow)
* request payload and summary for the REST client and the summary card

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.
Request status transitions (pending -> approved/rejected) belong to the HR
backend, not to this module.

Failure modes
-------------
* Exceeding the balance is returned as ``BalanceCheck`` (not an exception).
* Raises ``ValidationError`` subclasses only for invalid arguments.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from lob_engines.tracer import traced_engine
from lob_kernel.domain.values import to_decimal
from lob_kernel.exceptions import EmptyFieldError, NegativeAmountError, ValidationError
from lob_kernel.logging_config import get_logger

logger = get_logger("engines.leave_accrual")

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


class LeaveType(str, Enum):
    """Leave categories tracked by the HR backend."""

    ANNUAL = "Annual Leave"
    SICK = "Sick Leave"
    CASUAL = "Casual Leave"
    STUDY = "Study Leave"
    OPTIONAL = "Optional Leave"

    @property
    def key(self) -> str:
        """Prefix of the balance fields in API payloads ("annual_leave")."""
        return self.value.lower().replace(" ", "_")


class ShiftType(str, Enum):
    """Portion of the working day a leave date covers."""

    FULL_DAY = "full_shift"
    FIRST_HALF = "first_half"
    SECOND_HALF = "second_half"

    @property
    def fraction(self) -> Decimal:
        return Decimal("1") if self is ShiftType.FULL_DAY else Decimal("0.5")


class BalancePolicy(str, Enum):
    """How a screen enforces requests that exceed the available balance."""

    STRICT = "strict"  # Block submission
    WARN = "warn"  # Submit after the user confirms
    ALLOW = "allow"  # Submit without asking


class BalanceStatus(str, Enum):
    OK = "ok"
    EXCEEDS_BALANCE = "exceeds_balance"


class PolicyDecision(str, Enum):
    """What the screen should do with a request."""

    PROCEED = "proceed"
    CONFIRM = "confirm"
    BLOCK = "block"


@dataclass(frozen=True)
class BalanceCheck:
    """Outcome of comparing requested days with the available balance."""

    status: BalanceStatus
    requested: Decimal
    available: Decimal
    shortfall: Decimal = _ZERO

    @property
    def is_ok(self) -> bool:
        return self.status is BalanceStatus.OK

    @property
    def exceeds_balance(self) -> bool:
        return self.status is BalanceStatus.EXCEEDS_BALANCE


def _coerce_enum(enum_cls: type[Enum], value: Any, field: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as e:
        raise ValidationError(f"Unknown {field}: {value!r}", field=field) from e


def calendar_day(value: date | datetime) -> date:
    """Reduce a date or datetime to its Y-M-D calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def unique_days(dates: Iterable[date | datetime]) -> tuple[date, ...]:
    """Distinct calendar days, ascending."""
    return tuple(sorted({calendar_day(d) for d in dates}))


# ---------------------------------------------------------------------------
# Core calculations
# ---------------------------------------------------------------------------


@traced_engine("leave_accrual", "1.0", fingerprint_fields=("dates", "shift_type"))
def expand_selection(
    dates: Iterable[date | datetime],
    shift_type: ShiftType | str,
) -> Decimal:
    """
    Days consumed by a selection: unique calendar days x shift fraction.

    Order and repeated selections of the same day do not change the result.
    """
    shift = _coerce_enum(ShiftType, shift_type, "shift_type")
    days = unique_days(dates)
    return len(days) * shift.fraction


def _non_negative(value: Decimal | int | str, field: str) -> Decimal:
    amount = to_decimal(value, field=field)
    if amount < _ZERO:
        raise NegativeAmountError(amount, field=field)
    return amount


def remaining_balance(
    total: Decimal | int | str,
    used: Decimal | int | str,
    planned: Decimal | int | str = 0,
) -> Decimal:
    """
    Available days = total - used - planned.

    May be negative when the type is already over-allocated; that is
    reported as-is so the caller can show an over-budget warning.

    Raises:
        NegativeAmountError: if any input is negative.
    """
    return (
        _non_negative(total, "total")
        - _non_negative(used, "used")
        - _non_negative(planned, "planned")
    )


def validate_request(
    consumed_days: Decimal | int,
    available: Decimal | int,
) -> BalanceCheck:
    """
    Compare requested days with the available balance. Never raises.

    Returns OK when the request fits, otherwise EXCEEDS_BALANCE with the
    shortfall (requested - available).
    """
    requested = consumed_days if isinstance(consumed_days, Decimal) else Decimal(str(consumed_days))
    avail = available if isinstance(available, Decimal) else Decimal(str(available))
    if requested <= avail:
        return BalanceCheck(BalanceStatus.OK, requested, avail)
    return BalanceCheck(
        BalanceStatus.EXCEEDS_BALANCE,
        requested,
        avail,
        shortfall=requested - avail,
    )


def apply_policy(
    check: BalanceCheck,
    policy: BalancePolicy | str,
    acknowledged: bool = False,
) -> PolicyDecision:
    """
    Turn a balance check into a screen decision under ``policy``.

    strict blocks any excess; warn asks for confirmation until the user has
    acknowledged it; allow never stops the request.
    """
    policy = _coerce_enum(BalancePolicy, policy, "balance_policy")
    if check.is_ok or policy is BalancePolicy.ALLOW:
        return PolicyDecision.PROCEED
    if policy is BalancePolicy.STRICT:
        decision = PolicyDecision.BLOCK
    else:
        decision = PolicyDecision.PROCEED if acknowledged else PolicyDecision.CONFIRM

    logger.info("leave_balance_policy_applied", extra={
        "policy": policy.value,
        "requested": str(check.requested),
        "available": str(check.available),
        "shortfall": str(check.shortfall),
        "acknowledged": acknowledged,
        "decision": decision.value,
    })
    return decision


# ---------------------------------------------------------------------------
# Balances
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LeaveBalance:
    """Entitlement, usage and approved future leave for one leave type."""

    leave_type: LeaveType
    total: Decimal
    used: Decimal = _ZERO
    planned: Decimal = _ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "leave_type", _coerce_enum(LeaveType, self.leave_type, "leave_type"))
        object.__setattr__(self, "total", _non_negative(self.total, "total"))
        object.__setattr__(self, "used", _non_negative(self.used, "used"))
        object.__setattr__(self, "planned", _non_negative(self.planned, "planned"))

    @property
    def available(self) -> Decimal:
        return remaining_balance(self.total, self.used, self.planned)

    def _share(self, part: Decimal) -> Decimal:
        if self.total == _ZERO:
            return _ZERO
        return part / self.total * _HUNDRED

    @property
    def used_percentage(self) -> Decimal:
        return self._share(self.used)

    @property
    def planned_percentage(self) -> Decimal:
        return self._share(self.planned)

    @property
    def available_percentage(self) -> Decimal:
        return self._share(self.available)


def _api_number(value: Any, field: str) -> Decimal:
    # JSON numbers arrive as int/float; floats go through repr() to keep 1.5 as 1.5
    if value is None or value == "":
        return _ZERO
    if isinstance(value, float):
        return to_decimal(repr(value), field=field)
    return to_decimal(value, field=field)


@dataclass(frozen=True)
class LeaveBalanceSheet:
    """Balances for every leave type of one employee."""

    balances: tuple[LeaveBalance, ...]

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> LeaveBalanceSheet:
        """
        Read the backend's flat balance shape.

        Expects ``<type>_total`` / ``<type>_used`` / ``<type>_planned`` keys
        (e.g. ``annual_leave_total``); a missing key counts as zero.
        """
        balances = []
        for leave_type in LeaveType:
            prefix = leave_type.key
            balances.append(LeaveBalance(
                leave_type=leave_type,
                total=_api_number(payload.get(f"{prefix}_total"), f"{prefix}_total"),
                used=_api_number(payload.get(f"{prefix}_used"), f"{prefix}_used"),
                planned=_api_number(payload.get(f"{prefix}_planned"), f"{prefix}_planned"),
            ))
        return cls(balances=tuple(balances))

    def for_type(self, leave_type: LeaveType | str) -> LeaveBalance:
        wanted = _coerce_enum(LeaveType, leave_type, "leave_type")
        for balance in self.balances:
            if balance.leave_type is wanted:
                return balance
        return LeaveBalance(leave_type=wanted, total=_ZERO)

    def available(self, leave_type: LeaveType | str) -> Decimal:
        return self.for_type(leave_type).available


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LeaveSummary:
    """Pre-submission summary shown to the applicant."""

    leave_type: LeaveType
    shift_type: ShiftType
    dates: tuple[date, ...]
    consumed_days: Decimal
    check: BalanceCheck

    @property
    def available(self) -> Decimal:
        return self.check.available

    @property
    def will_exceed_balance(self) -> bool:
        return self.check.exceeds_balance


def summarize_request(
    leave_type: LeaveType | str,
    dates: Iterable[date | datetime],
    shift_type: ShiftType | str,
    balance: LeaveBalance | LeaveBalanceSheet,
) -> LeaveSummary:
    """Sorted unique dates, consumed days and the balance check."""
    leave = _coerce_enum(LeaveType, leave_type, "leave_type")
    shift = _coerce_enum(ShiftType, shift_type, "shift_type")
    if isinstance(balance, LeaveBalanceSheet):
        balance = balance.for_type(leave)
    days = unique_days(dates)
    consumed = expand_selection(days, shift)
    return LeaveSummary(
        leave_type=leave,
        shift_type=shift,
        dates=days,
        consumed_days=consumed,
        check=validate_request(consumed, balance.available),
    )


def build_leave_request(
    leave_type: LeaveType | str,
    dates: Iterable[date | datetime],
    shift_type: ShiftType | str,
    reason: str,
) -> dict[str, Any]:
    """
    Build the create-leave request body for the REST client.

    ``from_date``/``to_date`` span the selection; ``specific_dates`` lists
    every selected day so non-contiguous leave survives the round trip.

    Raises:
        EmptyFieldError: no dates selected or blank reason.
    """
    leave = _coerce_enum(LeaveType, leave_type, "leave_type")
    shift = _coerce_enum(ShiftType, shift_type, "shift_type")
    days = unique_days(dates)
    if not days:
        raise EmptyFieldError("dates")
    reason = (reason or "").strip()
    if not reason:
        raise EmptyFieldError("reason")

    payload = {
        "leave_type": leave.value,
        "from_date": days[0].isoformat(),
        "to_date": days[-1].isoformat(),
        "shift_type": shift.value,
        "reason": reason,
        "specific_dates": [d.isoformat() for d in days],
        "total_days": str(expand_selection(days, shift)),
    }
    logger.info("leave_request_built", extra={
        "leave_type": leave.value,
        "shift_type": shift.value,
        "day_count": len(days),
        "total_days": payload["total_days"],
    })
    return payload
