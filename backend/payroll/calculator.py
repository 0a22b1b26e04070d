"""Gross pay of shifts under IDCC 3239.

Majorations are tracked separately and summed; none of them compounds
another.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Iterable, Optional

import config
from compliance.hours import PRESENCE_DAY_RATIO, effective_hours, segment_spans, shifts_in_week
from compliance.engine import validation_error_result
from compliance.types import Contract, SegmentType, Shift, ShiftDataError, ShiftType, Violation
from utils.holidays import get_holiday_name
from utils.time import night_hours, shift_duration_minutes

logger = logging.getLogger(__name__)

MAJORATION_RATES = {
    "sunday": 0.30,
    "holiday_habitual": 0.60,
    "holiday_exceptional": 1.00,
    "night": 0.20,
    "overtime_first_tier": 0.25,
    "overtime_second_tier": 0.50,
}

# Overtime hours per week paid at the first tier before the second applies
OVERTIME_FIRST_TIER_HOURS = 8.0

# Night presence is paid a quarter of the hourly rate, or in full once requalified
PRESENCE_NIGHT_ALLOWANCE_RATE = 0.25

WEEKS_PER_MONTH = 4.33
EMPLOYER_COST_FACTOR = 1.42


@dataclass
class ComputedPay:
    base_pay: float = 0.0
    sunday_majoration: float = 0.0
    holiday_majoration: float = 0.0
    night_majoration: float = 0.0
    overtime_majoration: float = 0.0
    presence_day_pay: float = 0.0
    presence_night_allowance: float = 0.0
    total_pay: float = 0.0
    # Hours behind the amounts, kept for breakdown display
    worked_hours: float = 0.0
    night_hours: float = 0.0
    overtime_hours_first_tier: float = 0.0
    overtime_hours_second_tier: float = 0.0
    holiday_name: Optional[str] = None
    # A single VALIDATION_ERROR when the input could not be priced
    errors: list[Violation] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        data = asdict(self)
        data["errors"] = [v.to_dict() for v in self.errors]
        return data


@dataclass
class PayLine:
    key: str
    label: str
    amount: float
    hours: Optional[float] = None


@dataclass
class MonthlyEstimate:
    base_gross: float
    sunday_majoration: float
    night_majoration: float
    gross_total: float
    employer_cost: float
    lines: list[PayLine] = field(default_factory=list)


def _money(amount: float) -> float:
    return round(amount, 2)


def overtime_split(prior_hours: float, shift_hours: float, weekly_hours: float) -> tuple[float, float]:
    """Overtime hours of a shift at the first and second tier.

    ``prior_hours`` are the week's effective hours worked before this shift;
    overtime they already generated uses up the first tier first.
    """
    prior_overtime = max(0.0, prior_hours - weekly_hours)
    total_overtime = max(0.0, prior_hours + shift_hours - weekly_hours)
    shift_overtime = total_overtime - prior_overtime

    first_tier_left = max(0.0, OVERTIME_FIRST_TIER_HOURS - prior_overtime)
    first_tier = min(shift_overtime, first_tier_left)
    return first_tier, shift_overtime - first_tier


def _prior_week_hours(shift: Shift, siblings: Iterable[Shift]) -> float:
    start = shift.start_datetime
    earlier = [
        s for s in shifts_in_week(siblings, shift.date)
        if s.is_active
        and s.employee_id == shift.employee_id
        and not (shift.id is not None and s.id == shift.id)
        and s.start_datetime < start
    ]
    return sum(effective_hours(s) for s in earlier)


def _guard_components(shift: Shift, rate: float) -> dict:
    """Base, presence and night figures of a guard, segment by segment."""
    effective_minutes = 0
    presence_day_minutes = 0
    presence_night_minutes = 0
    night = 0.0
    for span in segment_spans(shift.guard_segments):
        segment_type = span.segment.type
        if segment_type == SegmentType.EFFECTIVE:
            net = span.duration_minutes - (span.segment.break_minutes or 0)
            effective_minutes += max(0, net)
            # Effective work inside a guard always qualifies for the night rate
            night += night_hours(shift.date, span.segment.start_time, span.end_time)
        elif segment_type == SegmentType.PRESENCE_DAY:
            presence_day_minutes += span.duration_minutes
        else:
            presence_night_minutes += span.duration_minutes

    night_rate = 1.0 if shift.is_requalified else PRESENCE_NIGHT_ALLOWANCE_RATE
    return {
        "worked_hours": effective_minutes / 60,
        "base_pay": effective_minutes / 60 * rate,
        "presence_day_pay": presence_day_minutes / 60 * PRESENCE_DAY_RATIO * rate,
        "presence_night_allowance": presence_night_minutes / 60 * night_rate * rate,
        "night_hours": night,
    }


def _shift_components(shift: Shift, rate: float) -> dict:
    hours = shift_duration_minutes(shift.start_time, shift.end_time, shift.break_minutes) / 60
    night = night_hours(shift.date, shift.start_time, shift.end_time) if shift.has_night_action else 0.0
    components = {
        "worked_hours": 0.0,
        "base_pay": 0.0,
        "presence_day_pay": 0.0,
        "presence_night_allowance": 0.0,
        "night_hours": night,
    }
    if shift.shift_type == ShiftType.PRESENCE_DAY:
        components["presence_day_pay"] = hours * PRESENCE_DAY_RATIO * rate
        components["night_hours"] = 0.0
    elif shift.shift_type == ShiftType.PRESENCE_NIGHT:
        night_rate = 1.0 if shift.is_requalified else PRESENCE_NIGHT_ALLOWANCE_RATE
        components["presence_night_allowance"] = hours * night_rate * rate
    else:
        components["worked_hours"] = hours
        components["base_pay"] = hours * rate
    return components


def calculate_shift_pay(
    shift: Shift,
    contract: Contract,
    siblings: Iterable[Shift] = (),
    habitual_holiday_work: Optional[bool] = None,
    region: Optional[str] = None,
) -> ComputedPay:
    """
    Gross pay of one shift.

    Args:
        shift: The shift to price
        contract: Contract carrying the hourly rate and weekly hours
        siblings: Other shifts of the employee; those earlier in the same week
            decide how much of this shift is overtime
        habitual_holiday_work: Whether public-holiday work is habitual for this
            employee (reduced rate); defaults to the configured value
        region: Public holiday calendar, defaults to the configured region

    Returns:
        ComputedPay; when the shift or contract cannot be read, a zero pay
        whose errors hold a single VALIDATION_ERROR
    """
    try:
        return _price_shift(shift, contract, siblings, habitual_holiday_work, region)
    except (ValueError, TypeError, KeyError) as exc:
        logger.warning("Pay calculation failed on malformed input: %s", exc)
        return ComputedPay(errors=validation_error_result(exc).errors)


def _price_shift(
    shift: Shift,
    contract: Contract,
    siblings: Iterable[Shift],
    habitual_holiday_work: Optional[bool],
    region: Optional[str],
) -> ComputedPay:
    shift.check()
    if not shift.is_active:
        return ComputedPay()
    if contract.hourly_rate < 0:
        raise ShiftDataError(f"Contract {contract.id}: negative hourly rate {contract.hourly_rate}")

    rate = contract.hourly_rate
    if shift.shift_type == ShiftType.GUARD_24H:
        components = _guard_components(shift, rate)
    else:
        components = _shift_components(shift, rate)

    pay = ComputedPay(
        base_pay=_money(components["base_pay"]),
        presence_day_pay=_money(components["presence_day_pay"]),
        presence_night_allowance=_money(components["presence_night_allowance"]),
        worked_hours=round(components["worked_hours"], 2),
        night_hours=round(components["night_hours"], 2),
    )
    pay.night_majoration = _money(components["night_hours"] * rate * MAJORATION_RATES["night"])

    # Sunday and holiday uplifts apply to the paid time of the shift's date
    uplift_base = components["base_pay"] + components["presence_day_pay"]
    if shift.date.weekday() == 6:
        pay.sunday_majoration = _money(uplift_base * MAJORATION_RATES["sunday"])

    holiday_name = get_holiday_name(shift.date, region)
    if holiday_name:
        if habitual_holiday_work is None:
            habitual_holiday_work = config.HABITUAL_HOLIDAY_WORK
        holiday_rate = MAJORATION_RATES["holiday_habitual" if habitual_holiday_work else "holiday_exceptional"]
        pay.holiday_majoration = _money(uplift_base * holiday_rate)
        pay.holiday_name = holiday_name

    prior = _prior_week_hours(shift, siblings)
    first_tier, second_tier = overtime_split(prior, effective_hours(shift), contract.weekly_hours)
    pay.overtime_hours_first_tier = round(first_tier, 2)
    pay.overtime_hours_second_tier = round(second_tier, 2)
    pay.overtime_majoration = _money(
        first_tier * rate * MAJORATION_RATES["overtime_first_tier"]
        + second_tier * rate * MAJORATION_RATES["overtime_second_tier"]
    )

    pay.total_pay = _money(
        pay.base_pay
        + pay.sunday_majoration
        + pay.holiday_majoration
        + pay.night_majoration
        + pay.overtime_majoration
        + pay.presence_day_pay
        + pay.presence_night_allowance
    )

    logger.debug(
        "Priced shift %s on %s: total %.2f (base %.2f, overtime %.2fh/%.2fh)",
        shift.id, shift.date, pay.total_pay, pay.base_pay, first_tier, second_tier,
    )
    return pay


def calculate_week_pay(
    shifts: Iterable[Shift],
    contract: Contract,
    habitual_holiday_work: Optional[bool] = None,
    region: Optional[str] = None,
) -> list[tuple[Shift, ComputedPay]]:
    """Price shifts in chronological order so overtime tiers go to the later ones.

    Shifts that cannot be read are priced last, each with its validation error,
    and take no part in the overtime count.
    """
    readable, malformed = [], []
    for shift in shifts:
        if not shift.is_active:
            continue
        try:
            shift.check()
        except (ValueError, TypeError):
            malformed.append(shift)
            continue
        readable.append(shift)

    ordered = sorted(readable, key=lambda s: s.start_datetime)
    priced = []
    for index, shift in enumerate(ordered):
        pay = calculate_shift_pay(shift, contract, ordered[:index], habitual_holiday_work, region)
        priced.append((shift, pay))
    for shift in malformed:
        priced.append((shift, calculate_shift_pay(shift, contract)))
    return priced


def pay_breakdown(pay: ComputedPay) -> list[PayLine]:
    """Display lines of a computed pay; majorations that are zero are left out."""
    lines = []
    if pay.base_pay or not pay.total_pay:
        lines.append(PayLine("base_pay", "Base pay", pay.base_pay, pay.worked_hours))
    if pay.sunday_majoration:
        lines.append(PayLine("sunday_majoration", "Sunday majoration (+30%)", pay.sunday_majoration))
    if pay.holiday_majoration:
        label = f"Public holiday majoration ({pay.holiday_name})" if pay.holiday_name else "Public holiday majoration"
        lines.append(PayLine("holiday_majoration", label, pay.holiday_majoration))
    if pay.night_majoration:
        lines.append(PayLine("night_majoration", "Night majoration (+20%)", pay.night_majoration, pay.night_hours))
    if pay.overtime_majoration:
        hours = pay.overtime_hours_first_tier + pay.overtime_hours_second_tier
        lines.append(PayLine("overtime_majoration", "Overtime majoration", pay.overtime_majoration, hours))
    if pay.presence_day_pay:
        lines.append(PayLine("presence_day_pay", "Daytime presence (2/3 rate)", pay.presence_day_pay))
    if pay.presence_night_allowance:
        lines.append(PayLine("presence_night_allowance", "Night presence allowance", pay.presence_night_allowance))
    return lines


def estimate_monthly_cost(
    contract: Contract,
    sundays_per_week: float = 0.0,
    night_hours_per_week: float = 0.0,
) -> MonthlyEstimate:
    """Rough monthly gross and employer cost of a contract, for planning."""
    rate = contract.hourly_rate
    base = contract.weekly_hours * rate * WEEKS_PER_MONTH
    sunday = sundays_per_week * contract.weekly_hours / 7 * rate * MAJORATION_RATES["sunday"] * WEEKS_PER_MONTH
    night = night_hours_per_week * rate * MAJORATION_RATES["night"] * WEEKS_PER_MONTH
    gross = base + sunday + night

    lines = [PayLine("base_pay", "Base pay", _money(base), round(contract.weekly_hours * WEEKS_PER_MONTH, 2))]
    if sunday:
        lines.append(PayLine("sunday_majoration", "Sunday majoration (+30%)", _money(sunday)))
    if night:
        lines.append(PayLine("night_majoration", "Night majoration (+20%)", _money(night)))

    return MonthlyEstimate(
        base_gross=_money(base),
        sunday_majoration=_money(sunday),
        night_majoration=_money(night),
        gross_total=_money(gross),
        employer_cost=_money(gross * EMPLOYER_COST_FACTOR),
        lines=lines,
    )
