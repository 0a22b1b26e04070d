"""Compliance validation engine that orchestrates all validators."""

import logging
from datetime import timedelta
from typing import Optional

from utils.time import minutes_to_time, parse_time_to_minutes

from .hours import shifts_in_week, shifts_on_day, total_effective_hours
from .types import (
    AlternativeSlot,
    ComplianceContext,
    ComplianceResult,
    ComplianceRules,
    ComplianceSummary,
    QuickValidationResult,
    Shift,
    Violation,
    ViolationSeverity,
    ViolationType,
    WeeklyRestStatus,
)
from .validators import (
    AbsenceConflictValidator,
    BaseValidator,
    ConsecutiveNightsValidator,
    DailyHoursValidator,
    DailyRestValidator,
    Guard24hValidator,
    GuardAmplitudeValidator,
    MandatoryBreakValidator,
    NightPresenceDurationValidator,
    ShiftOverlapValidator,
    WeeklyHoursValidator,
    WeeklyRestValidator,
    find_overlapping_shifts,
    find_previous_shift,
    weekly_rest_status,
)

logger = logging.getLogger(__name__)

MAX_ALTERNATIVES = 3


class ComplianceEngine:
    """
    Main engine for running compliance validation.

    Every validator runs; none can stop the others. The result is valid when
    no validator produced an error.
    """

    def __init__(self, rules: Optional[ComplianceRules] = None):
        """Initialize with all validators."""
        self.rules = rules or ComplianceRules()
        self.validators: list[BaseValidator] = [
            ShiftOverlapValidator(),
            DailyRestValidator(),
            DailyHoursValidator(),
            WeeklyHoursValidator(),
            WeeklyRestValidator(),
            MandatoryBreakValidator(),
            AbsenceConflictValidator(),
            Guard24hValidator(),
            GuardAmplitudeValidator(),
            NightPresenceDurationValidator(),
            ConsecutiveNightsValidator(),
        ]
        # Pre-submission gate: overlap, previous-shift rest and the hard caps
        self.quick_validators: list[BaseValidator] = [
            ShiftOverlapValidator(),
            DailyRestValidator(check_next=False),
            DailyHoursValidator(),
            WeeklyHoursValidator(),
        ]

    def build_context(self, shift: Shift, existing_shifts: list[Shift], absences: Optional[list] = None) -> ComplianceContext:
        """
        Build a ComplianceContext for one candidate shift.

        Only active shifts of the same employee are kept, and a stored copy of
        the candidate (same id) is dropped so an edit never conflicts with itself.
        """
        shift.check()
        siblings = []
        for other in existing_shifts:
            if other.employee_id != shift.employee_id or not other.is_active:
                continue
            if shift.id is not None and other.id == shift.id:
                continue
            other.check()
            siblings.append(other)

        return ComplianceContext(
            shift=shift,
            siblings=siblings,
            absences=list(absences or []),
            rules=self.rules,
        )

    def validate(self, shift: Shift, existing_shifts: list[Shift], absences: Optional[list] = None) -> ComplianceResult:
        """
        Run all compliance validations.

        Args:
            shift: The candidate shift
            existing_shifts: Other shifts to compare against
            absences: Absences of the employee; approved ones block the shift

        Returns:
            ComplianceResult with all violations found
        """
        result = ComplianceResult()
        try:
            context = self.build_context(shift, existing_shifts, absences)
            for validator in self.validators:
                validator.validate(context, result)
        except (ValueError, TypeError, KeyError) as exc:
            logger.warning("Compliance validation failed on malformed input: %s", exc)
            return validation_error_result(exc)

        logger.debug(
            "Validated shift %s for %s on %s: %d error(s), %d warning(s)",
            shift.id, shift.employee_id, shift.date, result.error_count, result.warning_count,
        )
        return result

    def quick_validate(self, shift: Shift, existing_shifts: list[Shift]) -> QuickValidationResult:
        """Blocking checks only, for gating a form before full validation."""
        result = ComplianceResult()
        try:
            context = self.build_context(shift, existing_shifts)
            for validator in self.quick_validators:
                validator.validate(context, result)
        except (ValueError, TypeError, KeyError) as exc:
            logger.warning("Quick validation failed on malformed input: %s", exc)
            result = validation_error_result(exc)

        blocking = [v.message for v in result.errors]
        return QuickValidationResult(can_create=not blocking, blocking_errors=blocking)

    def summary(self, employee_id: str, day, existing_shifts: list[Shift]) -> ComplianceSummary:
        """Remaining daily and weekly capacity plus weekly rest status for one employee."""
        try:
            shifts = [s for s in existing_shifts if s.employee_id == employee_id and s.is_active]
            for s in shifts:
                s.check()
            used_today = total_effective_hours(shifts_on_day(shifts, day))
            used_week = total_effective_hours(shifts_in_week(shifts, day))
            rest = weekly_rest_status(day, shifts, self.rules)
        except (ValueError, TypeError, KeyError) as exc:
            logger.warning("Compliance summary failed on malformed input: %s", exc)
            return ComplianceSummary(
                remaining_daily_hours=0.0,
                remaining_weekly_hours=0.0,
                weekly_rest=WeeklyRestStatus(longest_rest_hours=0.0, is_compliant=False),
                errors=validation_error_result(exc).errors,
            )

        remaining_daily = max(0.0, self.rules.daily_max_hours - used_today)
        remaining_weekly = max(0.0, self.rules.weekly_max_hours - used_week)

        recommendations = []
        if remaining_daily <= self.rules.daily_warning_remaining_hours:
            recommendations.append(f"Only {remaining_daily:.1f}h available today.")
        if remaining_weekly <= 8:
            recommendations.append(f"Only {remaining_weekly:.1f}h available this week.")
        if not rest.is_compliant:
            recommendations.append(
                f"Insufficient weekly rest: {rest.longest_rest_hours:.1f}h "
                f"(minimum {self.rules.min_weekly_rest_hours:g}h)."
            )

        return ComplianceSummary(
            remaining_daily_hours=remaining_daily,
            remaining_weekly_hours=remaining_weekly,
            weekly_rest=rest,
            recommendations=recommendations,
        )

    def suggest_alternatives(self, shift: Shift, existing_shifts: list[Shift], result: ComplianceResult) -> list[AlternativeSlot]:
        """Propose up to three slots that clear rest or overlap errors."""
        try:
            return self._alternatives(shift, existing_shifts, result)[:MAX_ALTERNATIVES]
        except (ValueError, TypeError, KeyError) as exc:
            logger.warning("No alternative slots for malformed input: %s", exc)
            return []

    def _alternatives(self, shift: Shift, existing_shifts: list[Shift], result: ComplianceResult) -> list[AlternativeSlot]:
        context = self.build_context(shift, existing_shifts)
        duration = shift.span_minutes
        suggestions = []

        for error in result.errors:
            if error.rule_type == ViolationType.DAILY_REST:
                previous = find_previous_shift(shift, context.siblings)
                if previous is None:
                    continue
                earliest = previous.end_datetime + timedelta(hours=self.rules.min_daily_rest_hours)
                start_minutes = earliest.hour * 60 + earliest.minute
                suggestions.append(AlternativeSlot(
                    date=earliest.date(),
                    start_time=minutes_to_time(start_minutes),
                    end_time=minutes_to_time(start_minutes + duration),
                    reason="Respects the 11h daily rest",
                ))

            elif error.rule_type == ViolationType.SHIFT_OVERLAP:
                for other in find_overlapping_shifts(shift, context.siblings):
                    end = other.end_datetime
                    start_minutes = parse_time_to_minutes(other.end_time)
                    suggestions.append(AlternativeSlot(
                        date=end.date(),
                        start_time=other.end_time,
                        end_time=minutes_to_time(start_minutes + duration),
                        reason="After the existing shift",
                    ))

        return suggestions


def validation_error_result(exc: Exception) -> ComplianceResult:
    """A single blocking error standing in for input that could not be read."""
    result = ComplianceResult()
    result.add_violation(Violation(
        rule_type=ViolationType.VALIDATION_ERROR,
        severity=ViolationSeverity.ERROR,
        message="The shift could not be validated because its data is invalid.",
        details={"reason": str(exc)},
    ))
    return result


def validate_shift(
    shift: Shift,
    existing_shifts: list[Shift],
    absences: Optional[list] = None,
    rules: Optional[ComplianceRules] = None,
) -> ComplianceResult:
    """Full validation of a candidate shift against its siblings and absences."""
    return ComplianceEngine(rules).validate(shift, existing_shifts, absences)


def quick_validate(shift: Shift, existing_shifts: list[Shift], rules: Optional[ComplianceRules] = None) -> QuickValidationResult:
    return ComplianceEngine(rules).quick_validate(shift, existing_shifts)


def get_compliance_summary(employee_id: str, day, existing_shifts: list[Shift], rules: Optional[ComplianceRules] = None) -> ComplianceSummary:
    return ComplianceEngine(rules).summary(employee_id, day, existing_shifts)


def suggest_alternatives(
    shift: Shift,
    existing_shifts: list[Shift],
    result: ComplianceResult,
    rules: Optional[ComplianceRules] = None,
) -> list[AlternativeSlot]:
    return ComplianceEngine(rules).suggest_alternatives(shift, existing_shifts, result)
