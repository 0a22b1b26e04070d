import pytest
from datetime import date

from compliance.types import (
    ComplianceContext,
    ComplianceRules,
    Contract,
    GuardSegment,
    SegmentType,
    Shift,
    ShiftStatus,
    ShiftType,
)
from leave.types import Absence, AbsenceRequest, AbsenceStatus, AbsenceType, LeaveBalance


# 2025-01-13 is a Monday; the week runs to Sunday 2025-01-19
MONDAY = date(2025, 1, 13)


@pytest.fixture
def make_shift():
    """Factory to create Shift objects."""
    counter = {"n": 0}

    def _make_shift(
        day: date = MONDAY,
        start_time: str = "09:00",
        end_time: str = "17:00",
        break_minutes: int = 0,
        employee_id: str = "emp-1",
        shift_type: ShiftType = ShiftType.EFFECTIVE,
        status: ShiftStatus = ShiftStatus.PLANNED,
        has_night_action: bool = False,
        night_interventions_count: int = 0,
        guard_segments: list[GuardSegment] = None,
        id: str = None,
    ) -> Shift:
        counter["n"] += 1
        return Shift(
            id=id or f"shift-{counter['n']}",
            employee_id=employee_id,
            contract_id="contract-1",
            date=day,
            start_time=start_time,
            end_time=end_time,
            break_minutes=break_minutes,
            shift_type=shift_type,
            status=status,
            has_night_action=has_night_action,
            night_interventions_count=night_interventions_count,
            guard_segments=guard_segments or [],
        )
    return _make_shift


@pytest.fixture
def make_guard(make_shift):
    """Factory to create 24h guard shifts from (start, type, break) triples."""
    def _make_guard(segments, day: date = MONDAY, **kwargs) -> Shift:
        guard_segments = [
            GuardSegment(start_time=start, type=SegmentType(kind), break_minutes=brk)
            for start, kind, brk in segments
        ]
        first = guard_segments[0].start_time
        return make_shift(
            day=day,
            start_time=first,
            end_time=first,
            shift_type=ShiftType.GUARD_24H,
            guard_segments=guard_segments,
            **kwargs,
        )
    return _make_guard


@pytest.fixture
def make_context():
    """Factory to create ComplianceContext objects."""
    def _make_context(shift: Shift, siblings: list[Shift] = None, absences: list = None,
                      rules: ComplianceRules = None) -> ComplianceContext:
        return ComplianceContext(
            shift=shift,
            siblings=siblings or [],
            absences=absences or [],
            rules=rules or ComplianceRules(),
        )
    return _make_context


@pytest.fixture
def contract():
    """Full-time contract at 12 EUR/h."""
    return Contract(
        id="contract-1",
        employee_id="emp-1",
        employer_id="employer-1",
        weekly_hours=35.0,
        hourly_rate=12.0,
        start_date=date(2024, 1, 1),
    )


@pytest.fixture
def make_absence():
    """Factory to create existing Absence records."""
    def _make_absence(
        start_date: date,
        end_date: date,
        status: AbsenceStatus = AbsenceStatus.APPROVED,
        absence_type: AbsenceType = AbsenceType.VACATION,
        employee_id: str = "emp-1",
        id: str = "absence-1",
    ) -> Absence:
        return Absence(
            id=id,
            employee_id=employee_id,
            absence_type=absence_type,
            start_date=start_date,
            end_date=end_date,
            status=status,
        )
    return _make_absence


@pytest.fixture
def make_request():
    """Factory to create AbsenceRequest objects."""
    def _make_request(
        start_date: date = date(2026, 7, 1),
        end_date: date = date(2026, 7, 3),
        absence_type: AbsenceType = AbsenceType.VACATION,
        family_event_type: str = None,
        employee_id: str = "emp-1",
    ) -> AbsenceRequest:
        return AbsenceRequest(
            employee_id=employee_id,
            absence_type=absence_type,
            start_date=start_date,
            end_date=end_date,
            family_event_type=family_event_type,
        )
    return _make_request


@pytest.fixture
def balance():
    """Balance with 20 days remaining."""
    return LeaveBalance(
        contract_id="contract-1",
        leave_year="2025-2026",
        acquired_days=25,
        taken_days=5,
        adjustment_days=0,
    )
