"""Paid leave accrual, balances and absence request validation (IDCC 3239)."""

from .types import (
    FAMILY_EVENT_DAYS,
    Absence,
    AbsenceRequest,
    AbsenceStatus,
    AbsenceType,
    AbsenceValidationResult,
    FamilyEventType,
    LeaveBalance,
    LeaveBalanceError,
    TakenDaysUpdate,
)
from .accrual import (
    acquired_days,
    acquired_from_months,
    days_outside_main_period,
    default_months_worked,
    fractionation_bonus,
    justification_due_date,
    leave_year_bounds,
    leave_year_label,
    remaining_days,
)
from .balance import add_taken_days, initialize_balance, initialize_balance_with_override, restore_taken_days
from .validator import validate_absence_request

__all__ = [
    "FAMILY_EVENT_DAYS",
    "Absence",
    "AbsenceRequest",
    "AbsenceStatus",
    "AbsenceType",
    "AbsenceValidationResult",
    "FamilyEventType",
    "LeaveBalance",
    "LeaveBalanceError",
    "TakenDaysUpdate",
    "acquired_days",
    "acquired_from_months",
    "days_outside_main_period",
    "default_months_worked",
    "fractionation_bonus",
    "justification_due_date",
    "leave_year_bounds",
    "leave_year_label",
    "remaining_days",
    "add_taken_days",
    "initialize_balance",
    "initialize_balance_with_override",
    "restore_taken_days",
    "validate_absence_request",
]
