"""Validation of absence requests."""

import logging
from datetime import date
from typing import Optional

from .checks import ABSENCE_CHECKS, CheckInput
from .types import Absence, AbsenceRequest, AbsenceValidationResult, LeaveBalance

logger = logging.getLogger(__name__)


def validate_absence_request(
    request: AbsenceRequest,
    existing_absences: list[Absence],
    balance: Optional[LeaveBalance],
    today: Optional[date] = None,
    region: Optional[str] = None,
) -> AbsenceValidationResult:
    """
    Run the absence rules in order and stop at the first blocking error.

    Args:
        request: The absence being requested
        existing_absences: Absences already on record; pending and approved ones count
        balance: Leave balance of the current leave year, or None if not initialized
        today: Reference date for notice rules, defaults to the current date
        region: Public holiday calendar used to count business days

    Returns:
        AbsenceValidationResult, valid when it holds no error
    """
    result = AbsenceValidationResult()
    try:
        if request.end_date < request.start_date:
            raise ValueError(f"End date {request.end_date} is before start date {request.start_date}")
        data = CheckInput(request, list(existing_absences), balance, today or date.today(), region)

        for check in ABSENCE_CHECKS:
            message = check.run(data)
            if message is None:
                continue
            if check.blocking:
                result.errors.append(message)
                logger.debug("Absence request for %s refused by %s check", request.employee_id, check.name)
                break
            result.warnings.append(message)
    except (ValueError, TypeError, KeyError, AttributeError) as exc:
        logger.warning("Absence validation failed on malformed input: %s", exc)
        return AbsenceValidationResult(errors=["The absence request could not be validated because its data is invalid."])

    return result
