"""Type definitions for paid leave and absences."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class AbsenceType(str, Enum):
    VACATION = "vacation"
    SICK = "sick"
    FAMILY_EVENT = "family_event"
    OTHER = "other"


class AbsenceStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class FamilyEventType(str, Enum):
    MARRIAGE = "marriage"
    PACS = "pacs"
    BIRTH = "birth"
    ADOPTION = "adoption"
    DEATH_SPOUSE = "death_spouse"
    DEATH_PARENT = "death_parent"
    DEATH_CHILD = "death_child"
    DEATH_SIBLING = "death_sibling"
    DEATH_IN_LAW = "death_in_law"
    CHILD_MARRIAGE = "child_marriage"
    DISABILITY_ANNOUNCEMENT = "disability_announcement"


# Days granted per family event (IDCC 3239 Art. 12)
FAMILY_EVENT_DAYS = {
    FamilyEventType.MARRIAGE: 4,
    FamilyEventType.PACS: 4,
    FamilyEventType.BIRTH: 3,
    FamilyEventType.ADOPTION: 3,
    FamilyEventType.DEATH_SPOUSE: 3,
    FamilyEventType.DEATH_PARENT: 3,
    FamilyEventType.DEATH_CHILD: 5,
    FamilyEventType.DEATH_SIBLING: 3,
    FamilyEventType.DEATH_IN_LAW: 3,
    FamilyEventType.CHILD_MARRIAGE: 1,
    FamilyEventType.DISABILITY_ANNOUNCEMENT: 2,
}

FAMILY_EVENT_LABELS = {
    FamilyEventType.MARRIAGE: "Marriage",
    FamilyEventType.PACS: "PACS",
    FamilyEventType.BIRTH: "Birth",
    FamilyEventType.ADOPTION: "Adoption",
    FamilyEventType.DEATH_SPOUSE: "Death of a spouse",
    FamilyEventType.DEATH_PARENT: "Death of a parent",
    FamilyEventType.DEATH_CHILD: "Death of a child",
    FamilyEventType.DEATH_SIBLING: "Death of a sibling",
    FamilyEventType.DEATH_IN_LAW: "Death of a parent-in-law",
    FamilyEventType.CHILD_MARRIAGE: "Marriage of a child",
    FamilyEventType.DISABILITY_ANNOUNCEMENT: "Announcement of a child's disability",
}

# Absences that block new requests and shifts on the same dates
ACTIVE_ABSENCE_STATUSES = (AbsenceStatus.PENDING, AbsenceStatus.APPROVED)


class LeaveBalanceError(ValueError):
    """A balance operation on a missing or already seeded balance."""


@dataclass
class Absence:
    """An absence already on record for an employee."""
    id: str
    employee_id: str
    absence_type: AbsenceType
    start_date: date
    end_date: date
    status: AbsenceStatus = AbsenceStatus.PENDING
    family_event_type: Optional[FamilyEventType] = None
    business_days_count: Optional[int] = None
    justification_due_date: Optional[date] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_ABSENCE_STATUSES


@dataclass
class AbsenceRequest:
    employee_id: str
    absence_type: AbsenceType
    start_date: date
    end_date: date
    family_event_type: Optional[str] = None  # Kept raw so unknown subtypes can be reported


@dataclass
class LeaveBalance:
    """Paid leave of one contract for one leave year (June 1 -> May 31)."""
    contract_id: str
    leave_year: str  # "2025-2026"
    acquired_days: float = 0.0
    taken_days: float = 0.0
    adjustment_days: float = 0.0
    is_manual_init: bool = False
    employee_id: Optional[str] = None
    employer_id: Optional[str] = None
    id: Optional[str] = None


@dataclass
class TakenDaysUpdate:
    """What persistence must write after an absence is approved or reversed."""
    contract_id: str
    leave_year: str
    delta: float  # Applied to taken_days
    taken_days: float
    remaining_days: float


@dataclass
class AbsenceValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {"valid": self.valid, "errors": list(self.errors), "warnings": list(self.warnings)}
