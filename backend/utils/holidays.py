"""French public holidays, via workalendar."""

import logging
from datetime import date
from functools import lru_cache
from typing import Optional

from workalendar.europe import France, FranceAlsaceMoselle

import config
from .time import iter_days

logger = logging.getLogger(__name__)

_CALENDARS = {
    "france": France,
    "alsace-moselle": FranceAlsaceMoselle,
}


@lru_cache(maxsize=64)
def _holidays_for(region: str, year: int) -> dict[date, str]:
    try:
        calendar_cls = _CALENDARS[region]
    except KeyError:
        raise ValueError(f"Unknown holiday region: {region!r}") from None
    holidays = {day: name for day, name in calendar_cls().holidays(year)}
    logger.debug("Loaded %d public holidays for %s %d", len(holidays), region, year)
    return holidays


def get_public_holidays(year: int, region: Optional[str] = None) -> dict[date, str]:
    """Return {date: name} for every public holiday of ``year``."""
    return dict(_holidays_for(region or config.HOLIDAY_REGION, year))


def is_public_holiday(day: date, region: Optional[str] = None) -> bool:
    return day in _holidays_for(region or config.HOLIDAY_REGION, day.year)


def get_holiday_name(day: date, region: Optional[str] = None) -> Optional[str]:
    return _holidays_for(region or config.HOLIDAY_REGION, day.year).get(day)


def count_business_days(start: date, end: date, region: Optional[str] = None) -> int:
    """Count Monday-Saturday days between start and end inclusive, public holidays excluded."""
    return sum(
        1 for day in iter_days(start, end)
        if day.weekday() != 6 and not is_public_holiday(day, region)
    )
