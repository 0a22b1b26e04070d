"""Paid leave accrual.

Sources:
- Art. L3141-3: 2.5 working days of leave per month of effective work, 30 days a year at most
- Art. L3141-4: one month of effective work is 24 working days (Monday to Saturday)
- Art. L3141-7: fractions of a day are always rounded up
- The accrual year runs from June 1 to May 31
"""

import math
from datetime import date, timedelta
from typing import Optional

from compliance.types import Contract
from utils.holidays import count_business_days
from utils.time import count_working_days, iter_days

from .types import LeaveBalance

DAYS_PER_MONTH = 2.5
MAX_DAYS_PER_YEAR = 30
WORKING_DAYS_PER_MONTH = 24
MAX_MONTHS_PER_YEAR = 12

LEAVE_YEAR_START_MONTH = 6

# Main leave period, May 1 to October 31
MAIN_PERIOD_FIRST_MONTH = 5
MAIN_PERIOD_LAST_MONTH = 10


def leave_year_label(day: date) -> str:
    """Leave year containing ``day``, e.g. "2025-2026" for 2025-09-01 and 2026-03-01."""
    if day.month >= LEAVE_YEAR_START_MONTH:
        return f"{day.year}-{day.year + 1}"
    return f"{day.year - 1}-{day.year}"


def leave_year_bounds(label: str) -> tuple[date, date]:
    """First and last day of a leave year label."""
    try:
        first, second = (int(part) for part in label.split("-"))
    except ValueError:
        raise ValueError(f"Invalid leave year: {label!r}") from None
    if second != first + 1:
        raise ValueError(f"Invalid leave year: {label!r}")
    return date(first, LEAVE_YEAR_START_MONTH, 1), date(second, 5, 31)


def leave_year_start(day: date) -> date:
    return leave_year_bounds(leave_year_label(day))[0]


def _days_for_months(months: int) -> int:
    return math.ceil(min(months * DAYS_PER_MONTH, MAX_DAYS_PER_YEAR))


def acquired_days(contract: Contract, year_start: date, as_of: date) -> int:
    """Leave days earned on a contract between the leave year start and ``as_of``."""
    start = year_start
    if contract.start_date is not None and contract.start_date > year_start:
        start = contract.start_date
    if start > as_of:
        return 0

    months = count_working_days(start, as_of) // WORKING_DAYS_PER_MONTH
    return _days_for_months(months)


def acquired_from_months(months: int) -> int:
    """Leave days for a month count entered by hand, for history predating the system."""
    if months <= 0:
        return 0
    return _days_for_months(months)


def default_months_worked(contract_start: date, today: Optional[date] = None) -> int:
    """Suggested month count for the current leave year, capped at 12."""
    today = today or date.today()
    if contract_start > today:
        return 0
    start = max(contract_start, leave_year_start(today))
    return min(count_working_days(start, today) // WORKING_DAYS_PER_MONTH, MAX_MONTHS_PER_YEAR)


def remaining_days(balance: LeaveBalance) -> float:
    """acquired - taken + adjustment; negative when more was taken than earned."""
    return balance.acquired_days - balance.taken_days + balance.adjustment_days


def fractionation_bonus(days_outside_main_period: int) -> int:
    """Extra days when part of the leave is taken outside May-October."""
    if days_outside_main_period >= 6:
        return 2
    if days_outside_main_period >= 3:
        return 1
    return 0


def is_in_main_period(day: date) -> bool:
    return MAIN_PERIOD_FIRST_MONTH <= day.month <= MAIN_PERIOD_LAST_MONTH


def days_outside_main_period(start: date, end: date, region: Optional[str] = None) -> int:
    """Business days of a leave falling outside May-October."""
    total = 0
    for day in iter_days(start, end):
        if not is_in_main_period(day):
            total += count_business_days(day, day, region)
    return total


def justification_due_date(start: date) -> date:
    """A sick leave certificate is due within 48h of the first day."""
    return start + timedelta(days=2)
