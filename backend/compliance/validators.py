"""Compliance validators for household employment rules (IDCC 3239)."""

from abc import ABC, abstractmethod
from datetime import date, datetime, time, timedelta
from typing import Optional

from utils.time import hours_between, week_end, week_start

from .hours import (
    effective_hours,
    segment_spans,
    segment_net_minutes,
    shifts_in_week,
    shifts_on_day,
    total_effective_hours,
)
from .types import (
    ComplianceContext,
    ComplianceResult,
    ComplianceRules,
    RestPeriod,
    SegmentType,
    Shift,
    ShiftType,
    Violation,
    ViolationSeverity,
    ViolationType,
    WeeklyRestStatus,
)


class BaseValidator(ABC):
    """Base class for compliance validators."""

    @abstractmethod
    def validate(self, context: ComplianceContext, result: ComplianceResult) -> None:
        """Validate compliance and add violations to result."""
        pass


def find_previous_shift(shift: Shift, siblings: list[Shift]) -> Optional[Shift]:
    """Latest sibling ending at or before the shift's start."""
    start = shift.start_datetime
    previous = [s for s in siblings if s.end_datetime <= start]
    return max(previous, key=lambda s: s.end_datetime, default=None)


def find_next_shift(shift: Shift, siblings: list[Shift]) -> Optional[Shift]:
    """Earliest sibling starting at or after the shift's end."""
    end = shift.end_datetime
    following = [s for s in siblings if s.start_datetime >= end]
    return min(following, key=lambda s: s.start_datetime, default=None)


def find_overlapping_shifts(shift: Shift, siblings: list[Shift]) -> list[Shift]:
    start, end = shift.start_datetime, shift.end_datetime
    return [s for s in siblings if start < s.end_datetime and s.start_datetime < end]


def weekly_rest_status(day: date, shifts: list[Shift], rules: Optional[ComplianceRules] = None) -> WeeklyRestStatus:
    """Rest periods around the week of ``day``.

    The window runs from the Sunday before the week to the end of the Monday
    after it, so a rest straddling a week boundary still counts.
    """
    rules = rules or ComplianceRules()
    first_day = week_start(day) - timedelta(days=1)
    last_day = week_end(day) + timedelta(days=1)
    window_start = datetime.combine(first_day, time.min)
    window_end = datetime.combine(last_day + timedelta(days=1), time.min)

    relevant = sorted(
        (s for s in shifts if first_day <= s.date <= last_day),
        key=lambda s: s.start_datetime,
    )

    periods = []
    cursor = window_start
    for s in relevant:
        start = s.start_datetime
        if start > cursor:
            periods.append(RestPeriod(cursor, start, hours_between(cursor, start)))
        cursor = max(cursor, s.end_datetime)
    if window_end > cursor:
        periods.append(RestPeriod(cursor, window_end, hours_between(cursor, window_end)))

    longest = max((p.hours for p in periods), default=0.0)
    return WeeklyRestStatus(
        longest_rest_hours=longest,
        is_compliant=longest >= rules.min_weekly_rest_hours,
        rest_periods=periods,
    )


class ShiftOverlapValidator(BaseValidator):
    """A caregiver works one shift at a time."""

    def validate(self, context: ComplianceContext, result: ComplianceResult) -> None:
        overlapping = find_overlapping_shifts(context.shift, context.siblings)
        if not overlapping:
            return

        other = overlapping[0]
        result.add_violation(Violation(
            rule_type=ViolationType.SHIFT_OVERLAP,
            severity=ViolationSeverity.ERROR,
            message=f"Overlaps an existing shift on {other.date.isoformat()} from {other.start_time} to {other.end_time}",
            details={
                "conflicting_shift_id": other.id,
                "conflicting_shift_date": other.date.isoformat(),
                "conflicting_shift_start": other.start_time,
                "conflicting_shift_end": other.end_time,
            },
        ))


class DailyRestValidator(BaseValidator):
    """Validates 11 consecutive hours of rest before and after the shift."""

    def __init__(self, check_next: bool = True):
        self.check_next = check_next

    def validate(self, context: ComplianceContext, result: ComplianceResult) -> None:
        shift = context.shift
        rules = context.rules

        previous = find_previous_shift(shift, context.siblings)
        if previous is not None:
            rest_hours = self._rest_hours(previous, shift)
            if rest_hours is not None and rest_hours < rules.min_daily_rest_hours:
                earliest = previous.end_datetime + timedelta(hours=rules.min_daily_rest_hours)
                result.add_violation(Violation(
                    rule_type=ViolationType.DAILY_REST,
                    severity=ViolationSeverity.ERROR,
                    message=(
                        f"Insufficient daily rest: {rest_hours:.1f}h instead of {rules.min_daily_rest_hours:g}h minimum. "
                        f"The shift cannot start before {earliest:%Y-%m-%d %H:%M}."
                    ),
                    details={
                        "rest_hours": round(rest_hours, 1),
                        "min_required": rules.min_daily_rest_hours,
                        "previous_shift_end": previous.end_datetime.isoformat(),
                        "suggested_start": earliest.isoformat(),
                    },
                ))

        if not self.check_next:
            return

        following = find_next_shift(shift, context.siblings)
        if following is not None:
            rest_hours = self._rest_hours(shift, following)
            if rest_hours is not None and rest_hours < rules.min_daily_rest_hours:
                result.add_violation(Violation(
                    rule_type=ViolationType.DAILY_REST,
                    severity=ViolationSeverity.ERROR,
                    message=(
                        f"Rest before the following shift ({following.date.isoformat()} at {following.start_time}) "
                        f"would be only {rest_hours:.1f}h."
                    ),
                    details={
                        "rest_hours": round(rest_hours, 1),
                        "min_required": rules.min_daily_rest_hours,
                        "next_shift_id": following.id,
                        "next_shift_start": following.start_datetime.isoformat(),
                    },
                ))

    @staticmethod
    def _rest_hours(earlier: Shift, later: Shift) -> Optional[float]:
        # Presence shifts are themselves rest time
        if earlier.is_presence or later.is_presence:
            return None
        return hours_between(earlier.end_datetime, later.start_datetime)


class DailyHoursValidator(BaseValidator):
    """Validates the 10h daily cap on effective work."""

    def validate(self, context: ComplianceContext, result: ComplianceResult) -> None:
        shift = context.shift
        rules = context.rules
        # Guards have their own 12h effective cap
        if shift.shift_type == ShiftType.GUARD_24H:
            return

        existing = total_effective_hours(shifts_on_day(context.siblings, shift.date))
        new_hours = effective_hours(shift)
        total = existing + new_hours
        remaining = rules.daily_max_hours - total
        result.daily_hours = round(total, 2)

        details = {
            "total_hours": round(total, 1),
            "existing_hours": round(existing, 1),
            "new_shift_hours": round(new_hours, 1),
            "max_allowed": rules.daily_max_hours,
            "remaining_hours": round(remaining, 1),
        }
        if remaining <= 0:
            result.add_violation(Violation(
                rule_type=ViolationType.DAILY_MAX_HOURS,
                severity=ViolationSeverity.ERROR,
                message=f"Daily maximum reached: {total:.1f}h of work on {shift.date.isoformat()} ({rules.daily_max_hours:g}h maximum).",
                details=details,
            ))
        elif remaining <= rules.daily_warning_remaining_hours:
            result.add_violation(Violation(
                rule_type=ViolationType.DAILY_MAX_HOURS,
                severity=ViolationSeverity.WARNING,
                message=f"Only {remaining:.1f}h left before the {rules.daily_max_hours:g}h daily maximum.",
                details=details,
            ))


class WeeklyHoursValidator(BaseValidator):
    """Validates the 48h weekly cap, with an early warning at 44h."""

    def validate(self, context: ComplianceContext, result: ComplianceResult) -> None:
        shift = context.shift
        rules = context.rules

        existing = total_effective_hours(shifts_in_week(context.siblings, shift.date))
        new_hours = effective_hours(shift)
        total = existing + new_hours
        result.weekly_hours = round(total, 2)

        details = {
            "total_hours": round(total, 1),
            "existing_hours": round(existing, 1),
            "new_shift_hours": round(new_hours, 1),
            "max_allowed": rules.weekly_max_hours,
            "week_start": week_start(shift.date).isoformat(),
            "week_end": week_end(shift.date).isoformat(),
        }
        if total >= rules.weekly_max_hours:
            result.add_violation(Violation(
                rule_type=ViolationType.WEEKLY_MAX_HOURS,
                severity=ViolationSeverity.ERROR,
                message=f"Weekly maximum exceeded: {total:.1f}h instead of {rules.weekly_max_hours:g}h maximum.",
                details=details,
            ))
        elif total >= rules.weekly_warning_hours:
            result.add_violation(Violation(
                rule_type=ViolationType.WEEKLY_MAX_HOURS,
                severity=ViolationSeverity.WARNING,
                message=f"{total:.1f}h scheduled this week (recommended maximum: {rules.weekly_warning_hours:g}h).",
                details=details,
            ))


class WeeklyRestValidator(BaseValidator):
    """Validates 35 consecutive hours of rest within the week."""

    def validate(self, context: ComplianceContext, result: ComplianceResult) -> None:
        shift = context.shift
        status = weekly_rest_status(shift.date, context.siblings + [shift], context.rules)
        if status.is_compliant:
            return

        result.add_violation(Violation(
            rule_type=ViolationType.WEEKLY_REST,
            severity=ViolationSeverity.ERROR,
            message=(
                f"Insufficient weekly rest: {status.longest_rest_hours:.1f}h instead of "
                f"{context.rules.min_weekly_rest_hours:g}h minimum."
            ),
            details={
                "longest_rest_hours": round(status.longest_rest_hours, 1),
                "min_required": context.rules.min_weekly_rest_hours,
                "week_start": week_start(shift.date).isoformat(),
                "week_end": week_end(shift.date).isoformat(),
            },
        ))


class MandatoryBreakValidator(BaseValidator):
    """Validates the 20 min break after 6h of continuous effective work."""

    def validate(self, context: ComplianceContext, result: ComplianceResult) -> None:
        shift = context.shift
        rules = context.rules

        if shift.shift_type == ShiftType.GUARD_24H:
            # Standby segments are rest, so only one long effective segment needs a break
            for span in segment_spans(shift.guard_segments):
                if span.segment.type != SegmentType.EFFECTIVE:
                    continue
                self._check(result, rules, span.duration_minutes, span.segment.break_minutes or 0, segment=span.index)
            return

        if shift.is_presence:
            return
        self._check(result, rules, shift.span_minutes, shift.break_minutes or 0)

    @staticmethod
    def _check(result, rules, duration, break_minutes, segment=None):
        # The break is not subtracted: the question is whether it is long enough
        if duration <= rules.break_after_minutes or break_minutes >= rules.min_break_minutes:
            return

        details = {
            "duration_minutes": duration,
            "break_minutes": break_minutes,
            "min_break_minutes": rules.min_break_minutes,
        }
        if segment is not None:
            details["segment_index"] = segment
        result.add_violation(Violation(
            rule_type=ViolationType.MANDATORY_BREAK,
            severity=ViolationSeverity.WARNING,
            message=(
                f"Insufficient break: {break_minutes} min for {duration / 60:.1f}h of work. "
                f"A break of at least {rules.min_break_minutes} min is required beyond 6h of work."
            ),
            details=details,
        ))


class AbsenceConflictValidator(BaseValidator):
    """No shift during an approved absence of the same employee."""

    def validate(self, context: ComplianceContext, result: ComplianceResult) -> None:
        shift = context.shift
        for absence in context.absences:
            absence_type = getattr(absence.absence_type, "value", absence.absence_type)
            if absence.employee_id != shift.employee_id or absence.status != "approved":
                continue
            if absence.start_date <= shift.date <= absence.end_date:
                result.add_violation(Violation(
                    rule_type=ViolationType.ABSENCE_CONFLICT,
                    severity=ViolationSeverity.ERROR,
                    message=(
                        f"The employee is absent ({absence_type}) from "
                        f"{absence.start_date.isoformat()} to {absence.end_date.isoformat()}."
                    ),
                    details={
                        "absence_id": absence.id,
                        "absence_type": absence_type,
                    },
                ))
                return


class Guard24hValidator(BaseValidator):
    """Effective work inside a 24h guard is capped at 12h."""

    def validate(self, context: ComplianceContext, result: ComplianceResult) -> None:
        shift = context.shift
        rules = context.rules
        if shift.shift_type != ShiftType.GUARD_24H:
            return

        if not shift.guard_segments:
            result.add_violation(Violation(
                rule_type=ViolationType.GUARD_24H_EFFECTIVE_MAX,
                severity=ViolationSeverity.ERROR,
                message="A 24h guard needs its segments to be defined.",
            ))
            return

        effective_minutes = 0
        longest_night = 0
        for span in segment_spans(shift.guard_segments):
            if span.segment.type == SegmentType.EFFECTIVE:
                effective_minutes += segment_net_minutes(span)
            elif span.segment.type == SegmentType.PRESENCE_NIGHT:
                longest_night = max(longest_night, span.duration_minutes)

        effective = effective_minutes / 60
        if effective > rules.guard_max_effective_hours:
            result.add_violation(Violation(
                rule_type=ViolationType.GUARD_24H_EFFECTIVE_MAX,
                severity=ViolationSeverity.ERROR,
                message=f"{effective:.1f}h of effective work in the guard ({rules.guard_max_effective_hours:g}h maximum).",
                details={"effective_hours": round(effective, 1), "max_allowed": rules.guard_max_effective_hours},
            ))
        elif longest_night / 60 > rules.guard_night_warning_hours:
            result.add_violation(Violation(
                rule_type=ViolationType.GUARD_24H_EFFECTIVE_MAX,
                severity=ViolationSeverity.WARNING,
                message=f"Night presence segment of {longest_night / 60:.1f}h exceeds {rules.guard_night_warning_hours:g}h.",
                details={"night_presence_hours": round(longest_night / 60, 1)},
            ))


class GuardAmplitudeValidator(BaseValidator):
    """Shifts chained through presence time may not span more than 24h."""

    def validate(self, context: ComplianceContext, result: ComplianceResult) -> None:
        shift = context.shift
        rules = context.rules

        ordered = sorted(context.siblings + [shift], key=lambda s: s.start_datetime)
        chain: list[Shift] = []
        for current in ordered:
            if chain:
                previous = chain[-1]
                gap = hours_between(previous.end_datetime, current.start_datetime)
                chained = gap <= rules.guard_chain_gap_hours and (previous.is_presence or current.is_presence)
                if not chained:
                    if any(s is shift for s in chain):
                        break
                    chain = []
            chain.append(current)

        if len(chain) < 2 or not any(s is shift for s in chain):
            return

        amplitude = hours_between(chain[0].start_datetime, max(s.end_datetime for s in chain))
        if amplitude > rules.guard_max_amplitude_hours:
            result.add_violation(Violation(
                rule_type=ViolationType.GUARD_MAX_AMPLITUDE,
                severity=ViolationSeverity.ERROR,
                message=f"Chained guard spans {amplitude:.1f}h ({rules.guard_max_amplitude_hours:g}h maximum).",
                details={"amplitude_hours": round(amplitude, 1), "chain_length": len(chain)},
            ))


class NightPresenceDurationValidator(BaseValidator):
    """A single night presence lasts at most 12h."""

    def validate(self, context: ComplianceContext, result: ComplianceResult) -> None:
        shift = context.shift
        rules = context.rules
        if shift.shift_type != ShiftType.PRESENCE_NIGHT:
            return

        hours = (shift.span_minutes - (shift.break_minutes or 0)) / 60
        if hours > rules.night_presence_max_hours:
            result.add_violation(Violation(
                rule_type=ViolationType.NIGHT_PRESENCE_MAX_DURATION,
                severity=ViolationSeverity.ERROR,
                message=f"Night presence of {hours:.1f}h ({rules.night_presence_max_hours:g}h maximum).",
                details={
                    "duration_hours": round(hours, 1),
                    "excess_hours": round(hours - rules.night_presence_max_hours, 1),
                },
            ))


def count_consecutive_nights(shift: Shift, siblings: list[Shift]) -> int:
    """Length of the run of night-presence dates that includes the shift's date."""
    nights = {s.date for s in siblings if s.shift_type == ShiftType.PRESENCE_NIGHT}
    nights.add(shift.date)

    count = 1
    day = shift.date - timedelta(days=1)
    while day in nights:
        count += 1
        day -= timedelta(days=1)
    day = shift.date + timedelta(days=1)
    while day in nights:
        count += 1
        day += timedelta(days=1)
    return count


class ConsecutiveNightsValidator(BaseValidator):
    """At most 5 consecutive nights of presence."""

    def validate(self, context: ComplianceContext, result: ComplianceResult) -> None:
        shift = context.shift
        rules = context.rules
        if shift.shift_type != ShiftType.PRESENCE_NIGHT:
            return

        count = count_consecutive_nights(shift, context.siblings)
        if count > rules.max_consecutive_nights:
            result.add_violation(Violation(
                rule_type=ViolationType.CONSECUTIVE_NIGHTS_MAX,
                severity=ViolationSeverity.ERROR,
                message=f"{count} consecutive nights of presence ({rules.max_consecutive_nights} maximum).",
                details={"consecutive_nights": count, "max_allowed": rules.max_consecutive_nights},
            ))
