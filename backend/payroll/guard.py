"""Segment plans of 24h guard shifts.

A plan is an ordered tuple of segments; each segment ends where the next one
starts and the last one wraps to the first, so the plan always covers a full
24h cycle. Plans are immutable: every edit returns a new plan whose minimum
breaks were recomputed over the whole list.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Union

from compliance.hours import segment_duration, segment_net_minutes, segment_spans
from compliance.types import GuardSegment, SegmentType
from utils.time import MINUTES_PER_DAY, minutes_to_time, parse_time_to_minutes

logger = logging.getLogger(__name__)

# Continuous effective work beyond 6h requires a 20 min break
BREAK_THRESHOLD_MINUTES = 360
REQUIRED_BREAK_MINUTES = 20

MIN_SEGMENTS = 2


class GuardSegmentError(ValueError):
    """An edit that would leave the guard plan unusable."""


DEFAULT_SEGMENTS = (
    GuardSegment(start_time="09:00", type=SegmentType.EFFECTIVE, break_minutes=0),
    GuardSegment(start_time="21:00", type=SegmentType.PRESENCE_NIGHT),
)


def min_break_for_segment(duration_minutes: int) -> int:
    """Minimum break of an effective segment lasting ``duration_minutes``."""
    if duration_minutes > BREAK_THRESHOLD_MINUTES:
        return REQUIRED_BREAK_MINUTES
    return 0


def apply_min_breaks(
    segments: tuple[GuardSegment, ...],
    previous_durations: Optional[list[Optional[int]]] = None,
) -> tuple[GuardSegment, ...]:
    """Recompute every break from the segment durations.

    ``previous_durations`` holds each segment's duration before the edit, or
    None for a segment the edit created. A long effective segment keeps a
    stored break above the minimum unless it got shorter, in which case it
    falls back to the minimum. A short one has no break. Standby segments
    never carry a break.
    """
    derived = []
    for index, segment in enumerate(segments):
        if not segment.is_effective:
            derived.append(replace(segment, break_minutes=None))
            continue
        duration = segment_duration(list(segments), index)
        required = min_break_for_segment(duration)
        before = previous_durations[index] if previous_durations is not None else None
        if not required:
            derived.append(replace(segment, break_minutes=0))
        elif before is not None and duration < before:
            derived.append(replace(segment, break_minutes=required))
        else:
            derived.append(replace(segment, break_minutes=max(segment.break_minutes or 0, required)))
    return tuple(derived)


def _normalize(segment: GuardSegment) -> GuardSegment:
    segment_type = SegmentType(segment.type)
    return GuardSegment(
        start_time=minutes_to_time(parse_time_to_minutes(segment.start_time)),
        type=segment_type,
        break_minutes=(segment.break_minutes or 0) if segment_type == SegmentType.EFFECTIVE else None,
    )


@dataclass(frozen=True)
class GuardSegmentPlan:
    segments: tuple[GuardSegment, ...]

    @classmethod
    def default(cls) -> "GuardSegmentPlan":
        return cls(apply_min_breaks(DEFAULT_SEGMENTS))

    @classmethod
    def from_segments(cls, segments: list[GuardSegment]) -> "GuardSegmentPlan":
        """Build a plan from stored segments, normalizing times and breaks."""
        if len(segments) < MIN_SEGMENTS:
            raise GuardSegmentError(f"A guard needs at least {MIN_SEGMENTS} segments, got {len(segments)}")
        try:
            normalized = tuple(_normalize(s) for s in segments)
        except (TypeError, ValueError) as exc:
            raise GuardSegmentError(f"Invalid guard segment: {exc}") from exc
        return cls(apply_min_breaks(normalized))

    def __len__(self) -> int:
        return len(self.segments)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.segments):
            raise GuardSegmentError(f"No segment at index {index}")

    def _rebuilt(self, segments: list[GuardSegment], previous_durations: list) -> "GuardSegmentPlan":
        return GuardSegmentPlan(apply_min_breaks(tuple(segments), previous_durations))

    def insert_after(self, index: int) -> "GuardSegmentPlan":
        """Split segment ``index`` at its midpoint; the second half becomes effective work."""
        self._check_index(index)
        start = parse_time_to_minutes(self.segments[index].start_time)
        midpoint = (start + segment_duration(list(self.segments), index) // 2) % MINUTES_PER_DAY

        segments = list(self.segments)
        segments.insert(index + 1, GuardSegment(
            start_time=minutes_to_time(midpoint),
            type=SegmentType.EFFECTIVE,
            break_minutes=0,
        ))
        logger.debug("Inserted guard segment at %s after index %d", minutes_to_time(midpoint), index)
        previous = self.durations()
        previous.insert(index + 1, None)
        return self._rebuilt(segments, previous)

    def remove(self, index: int) -> "GuardSegmentPlan":
        self._check_index(index)
        if len(self.segments) <= MIN_SEGMENTS:
            raise GuardSegmentError(f"A guard keeps at least {MIN_SEGMENTS} segments")
        segments = list(self.segments)
        del segments[index]
        previous = self.durations()
        del previous[index]
        return self._rebuilt(segments, previous)

    def update_end(self, index: int, end_time: Union[str, int]) -> "GuardSegmentPlan":
        """Move the boundary after segment ``index``.

        The last segment ends where the first begins, so its end is not edited here.
        """
        self._check_index(index)
        if index == len(self.segments) - 1:
            return self
        try:
            new_start = minutes_to_time(parse_time_to_minutes(end_time))
        except (TypeError, ValueError) as exc:
            raise GuardSegmentError(f"Invalid end time: {exc}") from exc

        segments = list(self.segments)
        segments[index + 1] = replace(segments[index + 1], start_time=new_start)
        return self._rebuilt(segments, self.durations())

    def update_type(self, index: int, segment_type: Union[SegmentType, str]) -> "GuardSegmentPlan":
        self._check_index(index)
        try:
            segment_type = SegmentType(segment_type)
        except ValueError as exc:
            raise GuardSegmentError(str(exc)) from exc

        current = self.segments[index]
        if segment_type == SegmentType.EFFECTIVE:
            break_minutes = current.break_minutes or 0
        else:
            break_minutes = None

        segments = list(self.segments)
        segments[index] = replace(current, type=segment_type, break_minutes=break_minutes)
        return self._rebuilt(segments, self.durations())

    def update_break(self, index: int, break_minutes: int) -> "GuardSegmentPlan":
        """Set the break of an effective segment, never below its minimum."""
        self._check_index(index)
        current = self.segments[index]
        if not current.is_effective:
            raise GuardSegmentError(f"Segment {index} is {current.type.value} and has no break")
        if break_minutes < 0:
            raise GuardSegmentError(f"Negative break: {break_minutes}")

        minimum = self.min_break(index)
        segments = list(self.segments)
        segments[index] = replace(current, break_minutes=max(minimum, break_minutes))
        return GuardSegmentPlan(tuple(segments))

    def min_break(self, index: int) -> int:
        self._check_index(index)
        if not self.segments[index].is_effective:
            return 0
        return min_break_for_segment(segment_duration(list(self.segments), index))

    def durations(self) -> list[int]:
        return [span.duration_minutes for span in segment_spans(list(self.segments))]

    def is_contiguous(self) -> bool:
        """True when boundaries are in order and cover exactly 24h."""
        durations = self.durations()
        return all(d > 0 for d in durations) and sum(durations) == MINUTES_PER_DAY

    def effective_minutes(self) -> int:
        return sum(
            segment_net_minutes(span)
            for span in segment_spans(list(self.segments))
            if span.segment.is_effective
        )

    def minutes_by_type(self) -> dict[SegmentType, int]:
        totals = {segment_type: 0 for segment_type in SegmentType}
        for span in segment_spans(list(self.segments)):
            totals[span.segment.type] += span.duration_minutes
        return totals

    def to_list(self) -> list[GuardSegment]:
        return list(self.segments)

