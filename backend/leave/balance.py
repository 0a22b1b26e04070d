"""Leave balance records and the changes approvals make to them.

Persistence owns the balances. These functions only compute the record to
insert or the new taken-days value to write.
"""

import logging
from datetime import date
from typing import Optional

from compliance.types import Contract

from .accrual import acquired_days, leave_year_bounds, remaining_days
from .types import LeaveBalance, LeaveBalanceError, TakenDaysUpdate

logger = logging.getLogger(__name__)


def initialize_balance(
    contract: Contract,
    leave_year: str,
    as_of: Optional[date] = None,
) -> LeaveBalance:
    """Balance computed from the contract's worked days so far in the leave year."""
    year_start, _ = leave_year_bounds(leave_year)
    acquired = acquired_days(contract, year_start, as_of or date.today())
    logger.debug("Initialized balance for contract %s, %s: %d day(s) acquired", contract.id, leave_year, acquired)
    return LeaveBalance(
        contract_id=contract.id,
        leave_year=leave_year,
        acquired_days=acquired,
        employee_id=contract.employee_id,
        employer_id=contract.employer_id,
    )


def initialize_balance_with_override(
    contract: Contract,
    leave_year: str,
    acquired: float,
    taken: float,
    existing: Optional[LeaveBalance] = None,
) -> LeaveBalance:
    """Seed a balance by hand when the history predates the system.

    Raises:
        LeaveBalanceError: if a balance already exists for this leave year
    """
    leave_year_bounds(leave_year)
    if existing is not None:
        logger.warning(
            "Balance already exists for contract %s, %s; manual seed ignored",
            contract.id, leave_year,
        )
        raise LeaveBalanceError(f"A balance already exists for contract {contract.id} in {leave_year}")
    if acquired < 0 or taken < 0:
        raise LeaveBalanceError("Acquired and taken days cannot be negative")

    return LeaveBalance(
        contract_id=contract.id,
        leave_year=leave_year,
        acquired_days=acquired,
        taken_days=taken,
        is_manual_init=True,
        employee_id=contract.employee_id,
        employer_id=contract.employer_id,
    )


def _update(balance: LeaveBalance, taken: float) -> TakenDaysUpdate:
    new_balance = LeaveBalance(
        contract_id=balance.contract_id,
        leave_year=balance.leave_year,
        acquired_days=balance.acquired_days,
        taken_days=taken,
        adjustment_days=balance.adjustment_days,
    )
    return TakenDaysUpdate(
        contract_id=balance.contract_id,
        leave_year=balance.leave_year,
        delta=taken - balance.taken_days,
        taken_days=taken,
        remaining_days=remaining_days(new_balance),
    )


def add_taken_days(balance: Optional[LeaveBalance], days: float) -> TakenDaysUpdate:
    """Taken days after an approved vacation of ``days`` business days."""
    if balance is None:
        raise LeaveBalanceError("Leave balance not found")
    if days < 0:
        raise LeaveBalanceError(f"Cannot take a negative number of days: {days}")
    return _update(balance, balance.taken_days + days)


def restore_taken_days(balance: Optional[LeaveBalance], days: float) -> TakenDaysUpdate:
    """Taken days after a vacation is cancelled, never below zero."""
    if balance is None:
        raise LeaveBalanceError("Leave balance not found")
    if days < 0:
        raise LeaveBalanceError(f"Cannot restore a negative number of days: {days}")
    return _update(balance, max(0.0, balance.taken_days - days))
