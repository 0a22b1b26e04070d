"""Time-related utility functions.

Wall-clock times travel as "HH:MM" strings at the edges and are turned into
minute-of-day integers for every computation, so midnight crossing is plain
integer arithmetic.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union

from dateutil import parser
from dateutil.relativedelta import relativedelta, MO

MINUTES_PER_DAY = 24 * 60

# Legal night window 21:00 -> 06:00 (next day)
NIGHT_START_MINUTES = 21 * 60
NIGHT_END_MINUTES = 6 * 60

# Night windows expressed relative to midnight of the shift's start day. A shift
# spans at most 48h of that axis once its end has been normalized.
_NIGHT_WINDOWS = (
    (NIGHT_START_MINUTES - MINUTES_PER_DAY, NIGHT_END_MINUTES),
    (NIGHT_START_MINUTES, NIGHT_END_MINUTES + MINUTES_PER_DAY),
    (NIGHT_START_MINUTES + MINUTES_PER_DAY, NIGHT_END_MINUTES + 2 * MINUTES_PER_DAY),
)

TimeValue = Union[str, time, int]


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def parse_time_to_minutes(value: TimeValue) -> int:
    """Convert "HH:MM" (or "HH:MM:SS", a time, a minute count) to minute-of-day.

    Raises:
        ValueError: if the value is not a valid wall-clock time
        TypeError: if the value has an unsupported type
    """
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if isinstance(value, bool):
        raise TypeError(f"Unsupported time value: {value!r}")
    if isinstance(value, int):
        if not 0 <= value < MINUTES_PER_DAY:
            raise ValueError(f"Minute of day out of range: {value}")
        return value
    if not isinstance(value, str):
        raise TypeError(f"Unsupported time value: {value!r}")

    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time format: {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Invalid time format: {value!r}")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """Format a minute count as "HH:MM", wrapping past midnight."""
    minutes = minutes % MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_date(value: Union[str, date, datetime]) -> date:
    """Accept an ISO string, a French "dd/mm/yyyy" string, a date or a datetime."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid date: {value!r}")
    value = value.strip()
    if "/" in value:
        return parser.parse(value, dayfirst=True).date()
    return parser.isoparse(value).date()


def span_minutes(start: TimeValue, end: TimeValue) -> int:
    """Elapsed minutes from start to end; end <= start means the next day."""
    start_m = parse_time_to_minutes(start)
    end_m = parse_time_to_minutes(end)
    if end_m <= start_m:
        end_m += MINUTES_PER_DAY
    return end_m - start_m


def shift_duration_minutes(start: TimeValue, end: TimeValue, break_minutes: Optional[int] = 0) -> int:
    """Worked minutes of a shift: span minus break, never negative."""
    return max(0, span_minutes(start, end) - (break_minutes or 0))


def night_hours(day: Optional[date], start: Optional[TimeValue], end: Optional[TimeValue]) -> float:
    """Hours of the span falling inside the 21:00-06:00 window.

    The window does not depend on the calendar day; ``day`` is accepted so
    callers can pass a shift's fields through unchanged. Missing or malformed
    times count as zero night hours.
    """
    if start is None or end is None:
        return 0.0
    try:
        start_m = parse_time_to_minutes(start)
        end_m = start_m + span_minutes(start, end)
    except (TypeError, ValueError):
        return 0.0

    night = 0
    for window_start, window_end in _NIGHT_WINDOWS:
        night += max(0, min(end_m, window_end) - max(start_m, window_start))
    return night / 60


def shift_bounds(day: date, start: TimeValue, end: TimeValue) -> tuple[datetime, datetime]:
    """Start and end datetimes of a shift starting on ``day``."""
    start_m = parse_time_to_minutes(start)
    start_dt = datetime.combine(day, time(start_m // 60, start_m % 60))
    return start_dt, start_dt + timedelta(minutes=span_minutes(start, end))


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def week_start(day: date) -> date:
    """Monday of the calendar week containing ``day``."""
    return day + relativedelta(weekday=MO(-1))


def week_end(day: date) -> date:
    """Sunday of the calendar week containing ``day``."""
    return week_start(day) + relativedelta(days=6)


def iter_days(start: date, end: date):
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def count_working_days(start: date, end: date) -> int:
    """Count Monday-Saturday days between start and end inclusive."""
    return sum(1 for day in iter_days(start, end) if day.weekday() != 6)


def date_ranges_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    """Inclusive date-range intersection."""
    return start1 <= end2 and start2 <= end1
