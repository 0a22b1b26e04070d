"""Unit tests for the pay calculator."""

import pytest
from datetime import date, timedelta

from compliance.types import Contract, ShiftStatus, ShiftType, ViolationType
from payroll.calculator import (
    calculate_shift_pay,
    calculate_week_pay,
    estimate_monthly_cost,
    overtime_split,
    pay_breakdown,
)

MONDAY = date(2025, 1, 13)
THURSDAY = date(2025, 1, 16)
SUNDAY = date(2025, 1, 19)


@pytest.fixture
def ten_euro_contract():
    return Contract(id="contract-10", employee_id="emp-1", weekly_hours=35.0, hourly_rate=10.0)


# ============================================================================
# Ordinary shifts
# ============================================================================


class TestShiftPay:

    def test_plain_weekday_shift(self, make_shift, ten_euro_contract):
        """8h at 10 EUR with no majoration."""
        pay = calculate_shift_pay(make_shift(day=MONDAY, start_time="09:00", end_time="17:00"), ten_euro_contract)

        assert pay.base_pay == 80
        assert pay.total_pay == 80

    def test_sunday_shift(self, make_shift, ten_euro_contract):
        pay = calculate_shift_pay(make_shift(day=SUNDAY, start_time="09:00", end_time="17:00"), ten_euro_contract)

        assert pay.sunday_majoration == 24
        assert pay.total_pay == 104

    def test_break_is_not_paid(self, make_shift, ten_euro_contract):
        pay = calculate_shift_pay(
            make_shift(day=MONDAY, start_time="09:00", end_time="17:00", break_minutes=30),
            ten_euro_contract,
        )
        assert pay.base_pay == 75

    def test_night_majoration_needs_night_action(self, make_shift, contract):
        quiet = calculate_shift_pay(make_shift(start_time="20:00", end_time="23:00"), contract)
        active = calculate_shift_pay(make_shift(start_time="20:00", end_time="23:00", has_night_action=True), contract)

        assert quiet.night_majoration == 0
        assert active.night_majoration == pytest.approx(4.8)
        assert active.night_hours == 2

    def test_exceptional_public_holiday(self, make_shift, contract):
        pay = calculate_shift_pay(
            make_shift(day=date(2025, 7, 14), start_time="09:00", end_time="17:00"),
            contract, habitual_holiday_work=False, region="france",
        )

        assert pay.holiday_majoration == 96
        assert pay.holiday_name
        assert pay.total_pay == 192

    def test_habitual_public_holiday(self, make_shift, contract):
        pay = calculate_shift_pay(
            make_shift(day=date(2025, 7, 14), start_time="09:00", end_time="17:00"),
            contract, habitual_holiday_work=True, region="france",
        )
        assert pay.holiday_majoration == pytest.approx(57.6)

    def test_sunday_and_holiday_stack(self, make_shift, ten_euro_contract):
        """15 August 2027 is a Sunday; both uplifts add up on the base."""
        pay = calculate_shift_pay(
            make_shift(day=date(2027, 8, 15), start_time="09:00", end_time="17:00"),
            ten_euro_contract, habitual_holiday_work=False, region="france",
        )

        assert pay.sunday_majoration == 24
        assert pay.holiday_majoration == 80
        assert pay.total_pay == 184

    def test_presence_day_paid_at_two_thirds(self, make_shift, contract):
        pay = calculate_shift_pay(
            make_shift(start_time="08:00", end_time="14:00", shift_type=ShiftType.PRESENCE_DAY),
            contract,
        )

        assert pay.base_pay == 0
        assert pay.presence_day_pay == 48
        assert pay.total_pay == 48

    def test_night_presence_allowance(self, make_shift, contract):
        pay = calculate_shift_pay(
            make_shift(start_time="21:00", end_time="07:00", shift_type=ShiftType.PRESENCE_NIGHT),
            contract,
        )
        assert pay.presence_night_allowance == 30

    def test_requalified_night_presence_paid_in_full(self, make_shift, contract):
        pay = calculate_shift_pay(
            make_shift(start_time="21:00", end_time="07:00", shift_type=ShiftType.PRESENCE_NIGHT,
                       night_interventions_count=4),
            contract,
        )
        assert pay.presence_night_allowance == 120

    def test_cancelled_shift_is_not_paid(self, make_shift, contract):
        pay = calculate_shift_pay(make_shift(status=ShiftStatus.CANCELLED), contract)
        assert pay.total_pay == 0

    def test_malformed_shift_returns_validation_error(self, make_shift, contract):
        """An unreadable shift is priced at zero with one blocking error, never raised."""
        pay = calculate_shift_pay(make_shift(start_time="25:99"), contract)

        assert not pay.valid
        assert pay.total_pay == 0
        assert len(pay.errors) == 1
        assert pay.errors[0].rule_type == ViolationType.VALIDATION_ERROR
        assert pay.errors[0].blocking
        assert pay.to_dict()["errors"][0]["code"] == "VALIDATION_ERROR"

    def test_break_longer_than_shift(self, make_shift, contract):
        pay = calculate_shift_pay(make_shift(start_time="09:00", end_time="10:00", break_minutes=90), contract)
        assert [v.code for v in pay.errors] == ["VALIDATION_ERROR"]

    def test_negative_rate(self, make_shift):
        contract = Contract(id="contract-x", weekly_hours=35.0, hourly_rate=-1.0)

        pay = calculate_shift_pay(make_shift(), contract)

        assert not pay.valid
        assert pay.total_pay == 0

    def test_valid_pay_has_no_errors(self, make_shift, contract):
        pay = calculate_shift_pay(make_shift(), contract)

        assert pay.valid
        assert pay.to_dict()["errors"] == []

    def test_same_input_same_output(self, make_shift, contract):
        shift = make_shift(day=SUNDAY, start_time="20:00", end_time="02:00", has_night_action=True)
        assert calculate_shift_pay(shift, contract).to_dict() == calculate_shift_pay(shift, contract).to_dict()


# ============================================================================
# Guards
# ============================================================================


class TestGuardPay:

    def test_effective_day_and_night_presence(self, make_guard, contract):
        guard = make_guard([("10:00", "effective", 0), ("22:00", "presence_night", None)], day=THURSDAY)

        pay = calculate_shift_pay(guard, contract)

        assert pay.base_pay == 144
        assert pay.presence_night_allowance == 36
        assert pay.night_majoration == pytest.approx(2.4)
        assert pay.total_pay == pytest.approx(182.4)

    def test_five_segments(self, make_guard, contract):
        guard = make_guard([
            ("10:00", "effective", 0),
            ("13:00", "presence_day", None),
            ("18:30", "effective", 0),
            ("22:00", "presence_night", None),
            ("07:00", "effective", 0),
        ], day=THURSDAY)

        pay = calculate_shift_pay(guard, contract)

        assert pay.base_pay == 114
        assert pay.presence_day_pay == 44
        assert pay.presence_night_allowance == 27
        assert pay.night_majoration == pytest.approx(2.4)
        assert pay.total_pay == pytest.approx(187.4)

    def test_sunday_guard(self, make_guard, contract):
        guard = make_guard([("10:00", "effective", 0), ("22:00", "presence_night", None)], day=SUNDAY)

        pay = calculate_shift_pay(guard, contract)

        assert pay.sunday_majoration == pytest.approx(43.2)
        assert pay.total_pay == pytest.approx(225.6)

    def test_requalified_guard(self, make_guard, contract):
        guard = make_guard(
            [("10:00", "effective", 0), ("22:00", "presence_night", None)],
            day=THURSDAY, night_interventions_count=4,
        )

        pay = calculate_shift_pay(guard, contract)

        assert pay.presence_night_allowance == 144
        assert pay.total_pay == pytest.approx(290.4)

    def test_segment_break_is_unpaid(self, make_guard, contract):
        guard = make_guard([("10:00", "effective", 30), ("18:00", "presence_night", None)], day=THURSDAY)

        pay = calculate_shift_pay(guard, contract)

        assert pay.base_pay == 90
        assert pay.presence_night_allowance == 48


# ============================================================================
# Overtime
# ============================================================================


class TestOvertime:

    def test_within_first_tier(self):
        assert overtime_split(30, 10, 35) == (5, 0)

    def test_straddling_both_tiers(self):
        assert overtime_split(40, 10, 35) == (3, 7)

    def test_no_overtime(self):
        assert overtime_split(0, 5, 35) == (0, 0)

    def test_earlier_shifts_of_the_week_count(self, make_shift, ten_euro_contract):
        siblings = [
            make_shift(day=MONDAY + timedelta(days=i), start_time="08:00", end_time="17:00")
            for i in range(4)
        ]
        shift = make_shift(day=MONDAY + timedelta(days=4), start_time="08:00", end_time="16:00")

        pay = calculate_shift_pay(shift, ten_euro_contract, siblings)

        assert pay.overtime_hours_first_tier == 7
        assert pay.overtime_hours_second_tier == 1
        assert pay.overtime_majoration == pytest.approx(22.5)

    def test_later_shifts_do_not_count(self, make_shift, ten_euro_contract):
        siblings = [
            make_shift(day=MONDAY + timedelta(days=i), start_time="08:00", end_time="17:00")
            for i in range(1, 5)
        ]
        pay = calculate_shift_pay(make_shift(day=MONDAY, start_time="08:00", end_time="16:00"), ten_euro_contract, siblings)
        assert pay.overtime_majoration == 0

    def test_week_priced_in_chronological_order(self, make_shift, ten_euro_contract):
        shifts = [
            make_shift(day=MONDAY + timedelta(days=i), start_time="08:00", end_time="17:00")
            for i in (4, 2, 0, 3, 1)
        ]

        priced = calculate_week_pay(shifts, ten_euro_contract)

        assert [s.date for s, _ in priced] == [MONDAY + timedelta(days=i) for i in range(5)]
        thursday_pay = priced[3][1]
        friday_pay = priced[4][1]
        assert thursday_pay.overtime_hours_first_tier == 1
        assert friday_pay.overtime_hours_first_tier == 7
        assert friday_pay.overtime_hours_second_tier == 2

    def test_week_with_unreadable_shift(self, make_shift, ten_euro_contract):
        good = make_shift(day=MONDAY, start_time="08:00", end_time="16:00")
        bad = make_shift(day=MONDAY + timedelta(days=1), start_time="8h", end_time="16:00")

        priced = calculate_week_pay([bad, good], ten_euro_contract)

        assert [s for s, _ in priced] == [good, bad]
        assert priced[0][1].total_pay == 80
        assert not priced[1][1].valid


# ============================================================================
# Breakdown and estimates
# ============================================================================


class TestBreakdown:

    def test_lines_skip_zero_amounts(self, make_shift, ten_euro_contract):
        pay = calculate_shift_pay(make_shift(day=SUNDAY, start_time="09:00", end_time="17:00"), ten_euro_contract)

        lines = pay_breakdown(pay)

        assert [line.key for line in lines] == ["base_pay", "sunday_majoration"]
        assert sum(line.amount for line in lines) == pay.total_pay

    def test_monthly_estimate(self, ten_euro_contract):
        estimate = estimate_monthly_cost(ten_euro_contract)

        assert estimate.base_gross == pytest.approx(1515.5)
        assert estimate.employer_cost == pytest.approx(2152.01)

    def test_monthly_estimate_with_sundays(self, ten_euro_contract):
        estimate = estimate_monthly_cost(ten_euro_contract, sundays_per_week=1)

        assert estimate.sunday_majoration == pytest.approx(64.95)
        assert estimate.gross_total == pytest.approx(1580.45)
        assert [line.key for line in estimate.lines] == ["base_pay", "sunday_majoration"]
