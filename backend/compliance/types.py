"""Type definitions for the compliance module."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from utils.time import parse_time_to_minutes, shift_bounds, span_minutes


class ViolationType(str, Enum):
    """Stable rule identifiers. Other layers key help texts off these values."""
    DAILY_REST = "DAILY_REST"
    WEEKLY_REST = "WEEKLY_REST"
    MANDATORY_BREAK = "MANDATORY_BREAK"
    WEEKLY_MAX_HOURS = "WEEKLY_MAX_HOURS"
    DAILY_MAX_HOURS = "DAILY_MAX_HOURS"
    SHIFT_OVERLAP = "SHIFT_OVERLAP"
    ABSENCE_CONFLICT = "ABSENCE_CONFLICT"
    GUARD_24H_EFFECTIVE_MAX = "GUARD_24H_EFFECTIVE_MAX"
    GUARD_MAX_AMPLITUDE = "GUARD_MAX_AMPLITUDE"
    NIGHT_PRESENCE_MAX_DURATION = "NIGHT_PRESENCE_MAX_DURATION"
    CONSECUTIVE_NIGHTS_MAX = "CONSECUTIVE_NIGHTS_MAX"
    VALIDATION_ERROR = "VALIDATION_ERROR"  # Malformed input, never a business rule


class ViolationSeverity(str, Enum):
    """Severity levels for violations."""
    ERROR = "error"  # Blocks the shift
    WARNING = "warning"  # Flags but allows the shift


class ShiftType(str, Enum):
    EFFECTIVE = "effective"
    PRESENCE_DAY = "presence_day"
    PRESENCE_NIGHT = "presence_night"
    GUARD_24H = "guard_24h"


class ShiftStatus(str, Enum):
    PLANNED = "planned"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ABSENT = "absent"


class SegmentType(str, Enum):
    EFFECTIVE = "effective"
    PRESENCE_DAY = "presence_day"
    PRESENCE_NIGHT = "presence_night"


# Legal references quoted in every violation
RULE_REFERENCES = {
    ViolationType.DAILY_REST: "Minimum daily rest of 11 consecutive hours (Art. L3131-1 Code du travail)",
    ViolationType.WEEKLY_REST: "Minimum weekly rest of 35 consecutive hours (Art. L3132-2 Code du travail)",
    ViolationType.MANDATORY_BREAK: "20-minute break required after 6 hours of work (Art. L3121-16 Code du travail)",
    ViolationType.WEEKLY_MAX_HOURS: "Maximum working time of 48 hours per week (Art. L3121-20 Code du travail)",
    ViolationType.DAILY_MAX_HOURS: "Maximum working time of 10 hours per day (Art. L3121-18 Code du travail)",
    ViolationType.SHIFT_OVERLAP: "A caregiver can only work one shift at a time",
    ViolationType.ABSENCE_CONFLICT: "No shift may be planned during an approved absence",
    ViolationType.GUARD_24H_EFFECTIVE_MAX: "At most 12 hours of effective work within a 24h guard (Art. 137.1 IDCC 3239)",
    ViolationType.GUARD_MAX_AMPLITUDE: "A chained guard may not exceed a 24-hour amplitude (Art. 137.1 IDCC 3239)",
    ViolationType.NIGHT_PRESENCE_MAX_DURATION: "Night presence limited to 12 consecutive hours (Art. 148 IDCC 3239)",
    ViolationType.CONSECUTIVE_NIGHTS_MAX: "At most 5 consecutive nights of presence (Art. 148 IDCC 3239)",
    ViolationType.VALIDATION_ERROR: "Input validation",
}


# Night interventions from which a night presence counts as effective work
REQUALIFICATION_INTERVENTIONS = 4


class ShiftDataError(ValueError):
    """A shift whose times or break cannot be interpreted."""


@dataclass
class Violation:
    """A single compliance violation."""
    rule_type: ViolationType
    severity: ViolationSeverity
    message: str = ""
    details: dict = field(default_factory=dict)

    @property
    def code(self) -> str:
        return self.rule_type.value

    @property
    def rule(self) -> str:
        return RULE_REFERENCES[self.rule_type]

    @property
    def blocking(self) -> bool:
        return self.severity == ViolationSeverity.ERROR

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
            "rule": self.rule,
            "blocking": self.blocking,
            "details": self.details,
        }


@dataclass(frozen=True)
class GuardSegment:
    """One slice of a 24h guard. It ends where the next segment starts."""
    start_time: str  # HH:MM format
    type: SegmentType
    break_minutes: Optional[int] = None  # Only effective segments carry a break

    @property
    def is_effective(self) -> bool:
        return self.type == SegmentType.EFFECTIVE


@dataclass
class Shift:
    """A planned or completed work period for one employee."""
    employee_id: str
    date: date
    start_time: str  # HH:MM format
    end_time: str  # HH:MM format, may be earlier than start (crosses midnight)
    break_minutes: int = 0
    id: Optional[str] = None
    contract_id: Optional[str] = None
    shift_type: ShiftType = ShiftType.EFFECTIVE
    status: ShiftStatus = ShiftStatus.PLANNED
    has_night_action: bool = False
    night_interventions_count: int = 0
    guard_segments: list[GuardSegment] = field(default_factory=list)

    @property
    def start_datetime(self) -> datetime:
        return shift_bounds(self.date, self.start_time, self.end_time)[0]

    @property
    def end_datetime(self) -> datetime:
        return shift_bounds(self.date, self.start_time, self.end_time)[1]

    @property
    def span_minutes(self) -> int:
        return span_minutes(self.start_time, self.end_time)

    @property
    def is_active(self) -> bool:
        return self.status in (ShiftStatus.PLANNED, ShiftStatus.COMPLETED)

    @property
    def is_presence(self) -> bool:
        return self.shift_type in (ShiftType.PRESENCE_DAY, ShiftType.PRESENCE_NIGHT)

    @property
    def is_guard(self) -> bool:
        return self.shift_type == ShiftType.GUARD_24H

    @property
    def is_requalified(self) -> bool:
        """Night presence with 4+ interventions is paid and counted as effective work."""
        return self.night_interventions_count >= REQUALIFICATION_INTERVENTIONS

    def check(self) -> None:
        """Raise ShiftDataError unless times parse and 0 <= break < span."""
        try:
            parse_time_to_minutes(self.start_time)
            parse_time_to_minutes(self.end_time)
            span = self.span_minutes
            for segment in self.guard_segments:
                parse_time_to_minutes(segment.start_time)
        except (TypeError, ValueError) as exc:
            raise ShiftDataError(f"Shift {self.id or '<new>'}: {exc}") from exc
        if not isinstance(self.date, date):
            raise ShiftDataError(f"Shift {self.id or '<new>'}: invalid date {self.date!r}")
        if self.break_minutes is None or self.break_minutes < 0 or self.break_minutes >= span:
            raise ShiftDataError(
                f"Shift {self.id or '<new>'}: break of {self.break_minutes} min "
                f"does not fit a {span} min span"
            )


@dataclass
class Contract:
    """Employment contract figures the engine needs."""
    id: str
    weekly_hours: float
    hourly_rate: float
    start_date: Optional[date] = None
    employee_id: Optional[str] = None
    employer_id: Optional[str] = None
    contract_type: str = "CDI"  # "CDI" or "CDD"
    end_date: Optional[date] = None
    withholding_tax_rate: Optional[float] = None


@dataclass
class ComplianceRules:
    """Thresholds of the household employment agreement (IDCC 3239)."""
    min_daily_rest_hours: float = 11.0
    min_weekly_rest_hours: float = 35.0

    # Breaks
    break_after_minutes: int = 360
    min_break_minutes: int = 20

    # Working time caps
    daily_max_hours: float = 10.0
    daily_warning_remaining_hours: float = 2.0
    weekly_warning_hours: float = 44.0
    weekly_max_hours: float = 48.0

    # Guards and night presence
    guard_max_effective_hours: float = 12.0
    guard_night_warning_hours: float = 12.0
    guard_max_amplitude_hours: float = 24.0
    guard_chain_gap_hours: float = 2.0
    night_presence_max_hours: float = 12.0
    max_consecutive_nights: int = 5


@dataclass
class ComplianceContext:
    """Context for validating one candidate shift."""
    shift: Shift
    siblings: list[Shift]  # Same employee, active, candidate excluded
    absences: list[Any] = field(default_factory=list)  # leave.types.Absence
    rules: ComplianceRules = field(default_factory=ComplianceRules)


@dataclass
class ComplianceResult:
    """Result of compliance validation."""
    violations: list[Violation] = field(default_factory=list)
    is_compliant: bool = True
    daily_hours: float = 0.0
    weekly_hours: float = 0.0

    def add_violation(self, violation: Violation):
        """Add a violation to the result."""
        self.violations.append(violation)
        if violation.severity == ViolationSeverity.ERROR:
            self.is_compliant = False

    @property
    def valid(self) -> bool:
        return self.is_compliant

    @property
    def errors(self) -> list[Violation]:
        return [v for v in self.violations if v.severity == ViolationSeverity.ERROR]

    @property
    def warnings(self) -> list[Violation]:
        return [v for v in self.violations if v.severity == ViolationSeverity.WARNING]

    @property
    def error_count(self) -> int:
        """Count of error-level violations."""
        return sum(1 for v in self.violations if v.severity == ViolationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        """Count of warning-level violations."""
        return sum(1 for v in self.violations if v.severity == ViolationSeverity.WARNING)

    def codes(self) -> list[str]:
        return [v.code for v in self.violations]

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "valid": self.valid,
            "errors": [v.to_dict() for v in self.errors],
            "warnings": [v.to_dict() for v in self.warnings],
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "daily_hours": self.daily_hours,
            "weekly_hours": self.weekly_hours,
        }


@dataclass
class QuickValidationResult:
    can_create: bool
    blocking_errors: list[str] = field(default_factory=list)


@dataclass
class RestPeriod:
    start: datetime
    end: datetime
    hours: float


@dataclass
class WeeklyRestStatus:
    longest_rest_hours: float
    is_compliant: bool
    rest_periods: list[RestPeriod] = field(default_factory=list)


@dataclass
class ComplianceSummary:
    remaining_daily_hours: float
    remaining_weekly_hours: float
    weekly_rest: WeeklyRestStatus
    recommendations: list[str] = field(default_factory=list)
    # Set when the shifts could not be read; capacities are then zero
    errors: list[Violation] = field(default_factory=list)


@dataclass
class AlternativeSlot:
    date: date
    start_time: str
    end_time: str
    reason: str
