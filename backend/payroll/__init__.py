"""Pay calculation and guard segment plans."""

from .calculator import (
    MAJORATION_RATES,
    ComputedPay,
    MonthlyEstimate,
    PayLine,
    calculate_shift_pay,
    calculate_week_pay,
    estimate_monthly_cost,
    overtime_split,
    pay_breakdown,
)
from .guard import (
    DEFAULT_SEGMENTS,
    GuardSegmentError,
    GuardSegmentPlan,
    apply_min_breaks,
    min_break_for_segment,
)

__all__ = [
    "MAJORATION_RATES",
    "ComputedPay",
    "MonthlyEstimate",
    "PayLine",
    "calculate_shift_pay",
    "calculate_week_pay",
    "estimate_monthly_cost",
    "overtime_split",
    "pay_breakdown",
    "DEFAULT_SEGMENTS",
    "GuardSegmentError",
    "GuardSegmentPlan",
    "apply_min_breaks",
    "min_break_for_segment",
]
