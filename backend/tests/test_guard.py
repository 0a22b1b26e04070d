"""Unit tests for guard segment plans."""

import pytest

from compliance.types import GuardSegment, SegmentType
from payroll.guard import (
    GuardSegmentError,
    GuardSegmentPlan,
    min_break_for_segment,
)


def seg(start, kind, brk=None):
    return GuardSegment(start_time=start, type=SegmentType(kind), break_minutes=brk)


@pytest.fixture
def default_plan():
    return GuardSegmentPlan.default()


# ============================================================================
# Minimum breaks
# ============================================================================


class TestMinimumBreak:

    def test_six_hours_needs_no_break(self):
        assert min_break_for_segment(360) == 0

    def test_beyond_six_hours_needs_twenty_minutes(self):
        assert min_break_for_segment(361) == 20

    def test_plan_derives_break_from_duration(self):
        short = GuardSegmentPlan.from_segments([seg("09:00", "effective", 0), seg("15:00", "presence_night")])
        long = GuardSegmentPlan.from_segments([seg("09:00", "effective", 0), seg("15:01", "presence_night")])

        assert short.segments[0].break_minutes == 0
        assert long.segments[0].break_minutes == 20

    def test_standby_segments_carry_no_break(self):
        plan = GuardSegmentPlan.from_segments([seg("09:00", "effective", 0), seg("21:00", "presence_day", 30)])
        assert plan.segments[1].break_minutes is None

    def test_break_grows_and_shrinks_with_duration(self):
        """The minimum is recomputed on every edit, in both directions."""
        plan = GuardSegmentPlan.from_segments([
            seg("09:00", "effective", 0),
            seg("12:00", "presence_day"),
            seg("21:00", "presence_night"),
        ])
        assert plan.segments[0].break_minutes == 0

        longer = plan.update_end(0, "16:00")
        assert longer.segments[0].break_minutes == 20

        shorter = longer.update_end(0, "12:00")
        assert shorter.segments[0].break_minutes == 0

    def test_larger_break_kept_when_segment_grows(self, default_plan):
        plan = default_plan.update_break(0, 45).update_end(0, "22:00")
        assert plan.segments[0].break_minutes == 45

    def test_larger_break_reset_when_segment_shrinks(self, default_plan):
        """Shortening a segment brings its break back to the minimum, even above 6h."""
        plan = default_plan.update_break(0, 45).update_end(0, "20:00")

        assert plan.durations()[0] == 660
        assert plan.segments[0].break_minutes == 20

    def test_split_segment_loses_larger_break(self):
        plan = GuardSegmentPlan.from_segments([seg("07:00", "effective", 45), seg("23:00", "presence_night")])

        split = plan.insert_after(0)

        # 16h splits into two 8h halves: the first shrank, the second is new
        assert split.durations()[:2] == [480, 480]
        assert split.segments[0].break_minutes == 20
        assert split.segments[1].break_minutes == 20

    def test_removal_keeps_break_of_growing_neighbour(self):
        plan = GuardSegmentPlan.from_segments([
            seg("07:00", "effective", 45),
            seg("15:00", "effective", 0),
            seg("23:00", "presence_night"),
        ])

        merged = plan.remove(1)

        assert merged.durations()[0] == 960
        assert merged.segments[0].break_minutes == 45


# ============================================================================
# Edits
# ============================================================================


class TestGuardSegmentPlan:

    def test_default_plan(self, default_plan):
        assert [s.start_time for s in default_plan.segments] == ["09:00", "21:00"]
        assert default_plan.segments[0].type == SegmentType.EFFECTIVE
        assert default_plan.segments[0].break_minutes == 20
        assert default_plan.is_contiguous()

    def test_insert_splits_segment_at_midpoint(self, default_plan):
        plan = default_plan.insert_after(0)

        assert [s.start_time for s in plan.segments] == ["09:00", "15:00", "21:00"]
        assert plan.segments[1].type == SegmentType.EFFECTIVE
        assert plan.durations() == [360, 360, 720]
        # Both halves are now 6h, so no break is required any more
        assert plan.segments[0].break_minutes == 0
        assert plan.segments[1].break_minutes == 0

    def test_insert_after_last_segment_wraps_midnight(self, default_plan):
        plan = default_plan.insert_after(1)

        assert [s.start_time for s in plan.segments] == ["09:00", "21:00", "03:00"]
        assert plan.is_contiguous()

    def test_edits_return_new_plans(self, default_plan):
        default_plan.insert_after(0)
        assert len(default_plan) == 2

    def test_remove_refused_at_two_segments(self, default_plan):
        with pytest.raises(GuardSegmentError):
            default_plan.remove(0)

    def test_remove_rederives_breaks(self, default_plan):
        plan = default_plan.insert_after(0).remove(1)

        assert [s.start_time for s in plan.segments] == ["09:00", "21:00"]
        assert plan.segments[0].break_minutes == 20

    def test_update_end_of_last_segment_is_ignored(self, default_plan):
        assert default_plan.update_end(1, "08:00") is default_plan

    def test_update_end_rejects_bad_time(self, default_plan):
        with pytest.raises(GuardSegmentError):
            default_plan.update_end(0, "25:00")

    def test_type_change_to_standby_clears_break(self, default_plan):
        plan = default_plan.update_type(0, SegmentType.PRESENCE_DAY)
        assert plan.segments[0].break_minutes is None

    def test_type_change_to_effective_defaults_break(self):
        plan = GuardSegmentPlan.from_segments([
            seg("09:00", "effective", 0),
            seg("12:00", "presence_day"),
            seg("15:00", "presence_night"),
        ])
        plan = plan.update_type(1, "effective")

        assert plan.segments[1].type == SegmentType.EFFECTIVE
        assert plan.segments[1].break_minutes == 0

    def test_unknown_type(self, default_plan):
        with pytest.raises(GuardSegmentError):
            default_plan.update_type(0, "nap")

    def test_break_clamped_to_minimum(self, default_plan):
        assert default_plan.update_break(0, 10).segments[0].break_minutes == 20
        assert default_plan.update_break(0, 45).segments[0].break_minutes == 45

    def test_standby_segment_has_no_break_to_set(self, default_plan):
        with pytest.raises(GuardSegmentError):
            default_plan.update_break(1, 10)

    def test_bad_index(self, default_plan):
        with pytest.raises(GuardSegmentError):
            default_plan.insert_after(5)

    def test_out_of_order_segments_are_not_contiguous(self):
        plan = GuardSegmentPlan.from_segments([
            seg("09:00", "effective", 0),
            seg("21:00", "presence_night"),
            seg("12:00", "effective", 0),
        ])
        assert not plan.is_contiguous()

    def test_effective_minutes_net_of_breaks(self, default_plan):
        assert default_plan.effective_minutes() == 700

    def test_minutes_by_type(self, default_plan):
        totals = default_plan.minutes_by_type()
        assert totals[SegmentType.EFFECTIVE] == 720
        assert totals[SegmentType.PRESENCE_NIGHT] == 720
        assert totals[SegmentType.PRESENCE_DAY] == 0

    def test_too_few_segments(self):
        with pytest.raises(GuardSegmentError):
            GuardSegmentPlan.from_segments([seg("09:00", "effective", 0)])

    def test_invalid_segment_time(self):
        with pytest.raises(GuardSegmentError):
            GuardSegmentPlan.from_segments([seg("9h", "effective", 0), seg("21:00", "presence_night")])

    def test_guard_error_is_a_value_error(self):
        assert issubclass(GuardSegmentError, ValueError)
