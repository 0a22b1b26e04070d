from datetime import date

from pydantic import BaseModel, field_validator

from compliance.types import (
    ComplianceResult,
    Contract,
    GuardSegment,
    SegmentType,
    Shift,
    ShiftStatus,
    ShiftType,
    Violation,
)
from leave.accrual import remaining_days
from leave.types import Absence, AbsenceRequest, AbsenceStatus, AbsenceType, AbsenceValidationResult, LeaveBalance
from payroll.calculator import ComputedPay
from utils.time import minutes_to_time, parse_date, parse_time_to_minutes


def _date_before(value):
    # Accepts ISO and French "dd/mm/yyyy" dates
    if value is None or isinstance(value, date):
        return value
    return parse_date(value)


def _time_before(value):
    try:
        return minutes_to_time(parse_time_to_minutes(value))
    except TypeError as exc:
        raise ValueError(str(exc)) from exc


# ==================== Shift editing ====================

class GuardSegmentSchema(BaseModel):
    start_time: str  # "HH:MM"
    type: SegmentType
    break_minutes: int | None = None

    @field_validator("start_time", mode="before")
    @classmethod
    def normalize_time(cls, v):
        return _time_before(v)

    def to_domain(self) -> GuardSegment:
        return GuardSegment(start_time=self.start_time, type=self.type, break_minutes=self.break_minutes)

    @classmethod
    def from_domain(cls, segment: GuardSegment) -> "GuardSegmentSchema":
        return cls(start_time=segment.start_time, type=segment.type, break_minutes=segment.break_minutes)


class ShiftSchema(BaseModel):
    employee_id: str
    date: date
    start_time: str  # "HH:MM"
    end_time: str    # "HH:MM", earlier than start_time when crossing midnight
    break_minutes: int = 0
    id: str | None = None
    contract_id: str | None = None
    shift_type: ShiftType = ShiftType.EFFECTIVE
    status: ShiftStatus = ShiftStatus.PLANNED
    has_night_action: bool = False
    night_interventions_count: int = 0
    guard_segments: list[GuardSegmentSchema] = []

    @field_validator("date", mode="before")
    @classmethod
    def parse_shift_date(cls, v):
        return _date_before(v)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def normalize_time(cls, v):
        return _time_before(v)

    @field_validator("break_minutes", "night_interventions_count")
    @classmethod
    def not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    def to_domain(self) -> Shift:
        return Shift(
            employee_id=self.employee_id,
            date=self.date,
            start_time=self.start_time,
            end_time=self.end_time,
            break_minutes=self.break_minutes,
            id=self.id,
            contract_id=self.contract_id,
            shift_type=self.shift_type,
            status=self.status,
            has_night_action=self.has_night_action,
            night_interventions_count=self.night_interventions_count,
            guard_segments=[s.to_domain() for s in self.guard_segments],
        )

    @classmethod
    def from_domain(cls, shift: Shift) -> "ShiftSchema":
        return cls(
            employee_id=shift.employee_id,
            date=shift.date,
            start_time=shift.start_time,
            end_time=shift.end_time,
            break_minutes=shift.break_minutes,
            id=shift.id,
            contract_id=shift.contract_id,
            shift_type=shift.shift_type,
            status=shift.status,
            has_night_action=shift.has_night_action,
            night_interventions_count=shift.night_interventions_count,
            guard_segments=[GuardSegmentSchema.from_domain(s) for s in shift.guard_segments],
        )


class ContractSchema(BaseModel):
    id: str
    weekly_hours: float
    hourly_rate: float
    start_date: date | None = None
    employee_id: str | None = None
    employer_id: str | None = None
    contract_type: str = "CDI"  # "CDI" or "CDD"
    end_date: date | None = None
    withholding_tax_rate: float | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_contract_date(cls, v):
        return _date_before(v)

    @field_validator("contract_type")
    @classmethod
    def known_contract_type(cls, v: str) -> str:
        if v not in ("CDI", "CDD"):
            raise ValueError("contract_type must be CDI or CDD")
        return v

    @field_validator("weekly_hours", "hourly_rate")
    @classmethod
    def positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    def to_domain(self) -> Contract:
        return Contract(**self.model_dump())


class ComplianceViolationSchema(BaseModel):
    """Compliance violation found on a shift."""
    code: str  # "DAILY_REST", "WEEKLY_MAX_HOURS", etc.
    severity: str  # "error", "warning"
    message: str
    rule: str
    blocking: bool
    details: dict | None = None

    @classmethod
    def from_domain(cls, violation: Violation) -> "ComplianceViolationSchema":
        return cls(**violation.to_dict())


class ValidateShiftRequest(BaseModel):
    shift: ShiftSchema
    existing_shifts: list[ShiftSchema] = []
    absences: list["AbsenceSchema"] = []


class ValidateShiftResponse(BaseModel):
    valid: bool
    errors: list[ComplianceViolationSchema] = []
    warnings: list[ComplianceViolationSchema] = []
    daily_hours: float = 0
    weekly_hours: float = 0

    @classmethod
    def from_domain(cls, result: ComplianceResult) -> "ValidateShiftResponse":
        return cls(
            valid=result.valid,
            errors=[ComplianceViolationSchema.from_domain(v) for v in result.errors],
            warnings=[ComplianceViolationSchema.from_domain(v) for v in result.warnings],
            daily_hours=result.daily_hours,
            weekly_hours=result.weekly_hours,
        )


class ComputedPaySchema(BaseModel):
    base_pay: float
    sunday_majoration: float = 0
    holiday_majoration: float = 0
    night_majoration: float = 0
    overtime_majoration: float = 0
    presence_day_pay: float = 0
    presence_night_allowance: float = 0
    total_pay: float
    holiday_name: str | None = None
    errors: list[ComplianceViolationSchema] = []

    @classmethod
    def from_domain(cls, pay: ComputedPay) -> "ComputedPaySchema":
        data = {name: getattr(pay, name) for name in cls.model_fields if name != "errors"}
        return cls(**data, errors=[ComplianceViolationSchema.from_domain(v) for v in pay.errors])


# ==================== Absence requests ====================

class AbsenceSchema(BaseModel):
    id: str
    employee_id: str
    absence_type: AbsenceType
    start_date: date
    end_date: date
    status: AbsenceStatus = AbsenceStatus.PENDING
    family_event_type: str | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_absence_date(cls, v):
        return _date_before(v)

    def to_domain(self) -> Absence:
        return Absence(
            id=self.id,
            employee_id=self.employee_id,
            absence_type=self.absence_type,
            start_date=self.start_date,
            end_date=self.end_date,
            status=self.status,
            family_event_type=self.family_event_type,
        )


class AbsenceRequestSchema(BaseModel):
    employee_id: str
    absence_type: AbsenceType
    start_date: date
    end_date: date
    family_event_type: str | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_request_date(cls, v):
        return _date_before(v)

    def to_domain(self) -> AbsenceRequest:
        return AbsenceRequest(
            employee_id=self.employee_id,
            absence_type=self.absence_type,
            start_date=self.start_date,
            end_date=self.end_date,
            family_event_type=self.family_event_type,
        )


class AbsenceValidationResponse(BaseModel):
    valid: bool
    errors: list[str] = []
    warnings: list[str] = []

    @classmethod
    def from_domain(cls, result: AbsenceValidationResult) -> "AbsenceValidationResponse":
        return cls(**result.to_dict())


# ==================== Balance maintenance ====================

class LeaveBalanceSchema(BaseModel):
    contract_id: str
    leave_year: str  # "2025-2026"
    acquired_days: float = 0
    taken_days: float = 0
    adjustment_days: float = 0
    remaining_days: float | None = None  # Derived, ignored on input
    is_manual_init: bool = False
    employee_id: str | None = None
    employer_id: str | None = None
    id: str | None = None

    def to_domain(self) -> LeaveBalance:
        return LeaveBalance(**self.model_dump(exclude={"remaining_days"}))

    @classmethod
    def from_domain(cls, balance: LeaveBalance) -> "LeaveBalanceSchema":
        return cls(
            contract_id=balance.contract_id,
            leave_year=balance.leave_year,
            acquired_days=balance.acquired_days,
            taken_days=balance.taken_days,
            adjustment_days=balance.adjustment_days,
            remaining_days=remaining_days(balance),
            is_manual_init=balance.is_manual_init,
            employee_id=balance.employee_id,
            employer_id=balance.employer_id,
            id=balance.id,
        )


ValidateShiftRequest.model_rebuild()
