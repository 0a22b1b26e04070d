"""Rules applied to an absence request.

Each check returns a message when the request fails it, or None.
"""

from datetime import date
from typing import Callable, NamedTuple, Optional

from utils.holidays import count_business_days
from utils.time import date_ranges_overlap, iter_days

from .accrual import is_in_main_period, remaining_days
from .types import (
    FAMILY_EVENT_DAYS,
    FAMILY_EVENT_LABELS,
    Absence,
    AbsenceRequest,
    AbsenceType,
    FamilyEventType,
    LeaveBalance,
)

# A sick leave cannot be declared further ahead than a planned hospital stay
SICK_LEAVE_MAX_DAYS_AHEAD = 30

# Vacations this long are the main leave and belong in May-October
MAIN_LEAVE_MIN_DAYS = 12


class CheckInput(NamedTuple):
    request: AbsenceRequest
    existing: list[Absence]
    balance: Optional[LeaveBalance]
    today: date
    region: Optional[str]


def check_overlap(data: CheckInput) -> Optional[str]:
    request = data.request
    for absence in data.existing:
        if absence.employee_id != request.employee_id or not absence.is_active:
            continue
        if date_ranges_overlap(request.start_date, request.end_date, absence.start_date, absence.end_date):
            return "An absence is already declared over these dates. Please choose different dates."
    return None


def check_balance(data: CheckInput) -> Optional[str]:
    request = data.request
    if request.absence_type != AbsenceType.VACATION:
        return None
    if data.balance is None:
        return "The leave balance has not been initialized yet. Please retry or contact your employer."

    requested = count_business_days(request.start_date, request.end_date, data.region)
    remaining = remaining_days(data.balance)
    if requested > remaining:
        return f"Insufficient leave balance: {requested} day(s) requested, {remaining:.1f} day(s) available."
    return None


def check_family_event(data: CheckInput) -> Optional[str]:
    request = data.request
    if request.absence_type != AbsenceType.FAMILY_EVENT:
        return None
    if not request.family_event_type:
        return "Please select the type of family event."

    try:
        event = FamilyEventType(request.family_event_type)
    except ValueError:
        return "Unknown family event type."

    max_days = FAMILY_EVENT_DAYS[event]
    requested = count_business_days(request.start_date, request.end_date, data.region)
    if requested > max_days:
        return f"{FAMILY_EVENT_LABELS[event]}: {max_days} day(s) granted at most, {requested} day(s) requested."
    return None


def check_sick_leave(data: CheckInput) -> Optional[str]:
    request = data.request
    if request.absence_type != AbsenceType.SICK:
        return None
    if (request.start_date - data.today).days > SICK_LEAVE_MAX_DAYS_AHEAD:
        return f"A sick leave cannot be declared more than {SICK_LEAVE_MAX_DAYS_AHEAD} days in advance."
    return None


def check_leave_period(data: CheckInput) -> Optional[str]:
    request = data.request
    if request.absence_type != AbsenceType.VACATION:
        return None
    days = count_business_days(request.start_date, request.end_date, data.region)
    outside = any(not is_in_main_period(day) for day in iter_days(request.start_date, request.end_date))
    if days >= MAIN_LEAVE_MIN_DAYS and outside:
        return (
            f"The main leave (at least {MAIN_LEAVE_MIN_DAYS} days) should be taken between May and October. "
            "Fractionation days may apply."
        )
    return None


class AbsenceCheck(NamedTuple):
    name: str
    run: Callable[[CheckInput], Optional[str]]
    blocking: bool


# Evaluated in order; the first blocking failure ends the evaluation
ABSENCE_CHECKS = (
    AbsenceCheck("overlap", check_overlap, blocking=True),
    AbsenceCheck("balance", check_balance, blocking=True),
    AbsenceCheck("family_event", check_family_event, blocking=True),
    AbsenceCheck("sick_leave", check_sick_leave, blocking=True),
    AbsenceCheck("leave_period", check_leave_period, blocking=False),
)
