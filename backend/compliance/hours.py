"""Effective working time of shifts and guard segments."""

from collections.abc import Iterable
from datetime import date
from typing import NamedTuple

from utils.time import MINUTES_PER_DAY, parse_time_to_minutes, shift_duration_minutes, week_start

from .types import GuardSegment, SegmentType, Shift, ShiftType

# One hour of daytime presence counts as 2/3 hour of effective work (Art. 137.1 IDCC 3239)
PRESENCE_DAY_RATIO = 2 / 3


class SegmentSpan(NamedTuple):
    index: int
    segment: GuardSegment
    start_minutes: int  # Minutes after the guard's first segment start
    duration_minutes: int
    end_time: str


def segment_duration(segments: list[GuardSegment], index: int) -> int:
    """Minutes from a segment's start to the next boundary, wrapping to the first segment."""
    start = parse_time_to_minutes(segments[index].start_time)
    nxt = segments[index + 1] if index + 1 < len(segments) else segments[0]
    return (parse_time_to_minutes(nxt.start_time) - start) % MINUTES_PER_DAY


def segment_spans(segments: list[GuardSegment]) -> list[SegmentSpan]:
    spans = []
    offset = 0
    for index, segment in enumerate(segments):
        duration = segment_duration(segments, index)
        end_time = segments[index + 1].start_time if index + 1 < len(segments) else segments[0].start_time
        spans.append(SegmentSpan(index, segment, offset, duration, end_time))
        offset += duration
    return spans


def segment_net_minutes(span: SegmentSpan) -> int:
    if span.segment.type != SegmentType.EFFECTIVE:
        return span.duration_minutes
    return max(0, span.duration_minutes - (span.segment.break_minutes or 0))


def guard_effective_minutes(shift: Shift) -> float:
    total = 0.0
    for span in segment_spans(shift.guard_segments):
        if span.segment.type == SegmentType.EFFECTIVE:
            total += segment_net_minutes(span)
        elif span.segment.type == SegmentType.PRESENCE_DAY:
            total += span.duration_minutes * PRESENCE_DAY_RATIO
        elif shift.is_requalified:
            total += span.duration_minutes
    return total


def effective_minutes(shift: Shift) -> float:
    """Minutes of a shift that count as effective work for caps and overtime."""
    if shift.shift_type == ShiftType.GUARD_24H:
        return guard_effective_minutes(shift)
    net = shift_duration_minutes(shift.start_time, shift.end_time, shift.break_minutes)
    if shift.shift_type == ShiftType.PRESENCE_DAY:
        return net * PRESENCE_DAY_RATIO
    if shift.shift_type == ShiftType.PRESENCE_NIGHT:
        return net if shift.is_requalified else 0.0
    return float(net)


def effective_hours(shift: Shift) -> float:
    return effective_minutes(shift) / 60


def total_effective_hours(shifts: Iterable[Shift]) -> float:
    return sum(effective_minutes(s) for s in shifts) / 60


def shifts_on_day(shifts: Iterable[Shift], day: date) -> list[Shift]:
    return [s for s in shifts if s.date == day]


def shifts_in_week(shifts: Iterable[Shift], day: date) -> list[Shift]:
    monday = week_start(day)
    return [s for s in shifts if week_start(s.date) == monday]
