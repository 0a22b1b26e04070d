"""Labor law compliance module for household employment shifts."""

from .types import (
    ComplianceContext,
    ComplianceResult,
    ComplianceRules,
    Contract,
    GuardSegment,
    SegmentType,
    Shift,
    ShiftDataError,
    ShiftStatus,
    ShiftType,
    Violation,
    ViolationType,
    ViolationSeverity,
)
from .engine import (
    ComplianceEngine,
    get_compliance_summary,
    quick_validate,
    suggest_alternatives,
    validate_shift,
)
from .hours import effective_hours, effective_minutes
from .validators import BaseValidator

__all__ = [
    "ComplianceContext",
    "ComplianceResult",
    "ComplianceRules",
    "Contract",
    "GuardSegment",
    "SegmentType",
    "Shift",
    "ShiftDataError",
    "ShiftStatus",
    "ShiftType",
    "Violation",
    "ViolationType",
    "ViolationSeverity",
    "ComplianceEngine",
    "validate_shift",
    "quick_validate",
    "get_compliance_summary",
    "suggest_alternatives",
    "effective_hours",
    "effective_minutes",
    "BaseValidator",
]
