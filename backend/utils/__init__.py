from .time import (
    utc_now,
    parse_time_to_minutes,
    minutes_to_time,
    parse_date,
    shift_duration_minutes,
    night_hours,
    shift_bounds,
    week_start,
    week_end,
    count_working_days,
    date_ranges_overlap,
)
from .holidays import (
    get_public_holidays,
    is_public_holiday,
    count_business_days,
)

__all__ = [
    "utc_now",
    "parse_time_to_minutes",
    "minutes_to_time",
    "parse_date",
    "shift_duration_minutes",
    "night_hours",
    "shift_bounds",
    "week_start",
    "week_end",
    "count_working_days",
    "date_ranges_overlap",
    "get_public_holidays",
    "is_public_holiday",
    "count_business_days",
]
