"""
Date and Time utilities

This module handles the date/time formats found in programme feeds.
Parsing is best-effort: every helper returns None for input it cannot
interpret rather than raising.
"""
from datetime import datetime, time, timezone
import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)


# '5 Jan 2020 10:00:00', usually embedded in an RFC 822 pubDate
_PUB_DATE_RE = re.compile(r"(\d{1,2}) (\w{3}) (\d+) (\d{2}):(\d{2}):(\d{2})", re.ASCII)
_TIME_OF_DAY_RE = re.compile(r"^(\d{1,2}):(\d{1,2}):(\d{1,2})", re.ASCII)

MONTHS = {
    "Jan": 1,
    "Feb": 2,
    "Mar": 3,
    "Apr": 4,
    "May": 5,
    "Jun": 6,
    "Jul": 7,
    "Aug": 8,
    "Sep": 9,
    "Oct": 10,
    "Nov": 11,
    "Dec": 12,
}


def parse_pub_date(date_str: str) -> Optional[datetime]:
    """
    Parse a feed pubDate and convert it to the local time zone

    The day/month/year/time fields are read as UTC. Month names must be
    English three-letter abbreviations with a leading capital.

    Args:
        date_str: Text like 'Sun, 5 Jan 2020 10:00:00 +0000'

    Returns:
        Timezone-aware datetime in local time, or None if unparseable
    """
    match = _PUB_DATE_RE.search(date_str)
    if match is None:
        return None

    day, month_name, year, hour, minute, second = match.groups()
    month = MONTHS.get(month_name)
    if month is None:
        logger.debug(f"Unknown month abbreviation in pubDate: {date_str!r}")
        return None

    try:
        dt_utc = datetime(
            int(year), month, int(day),
            int(hour), int(minute), int(second),
            tzinfo=timezone.utc
        )
    except ValueError:
        logger.debug(f"Out of range pubDate: {date_str!r}")
        return None

    return dt_utc.astimezone()


def parse_time_of_day(time_str: str) -> Optional[time]:
    """
    Parse an 'H:M:S' offset such as a thumbnail's time attribute

    Args:
        time_str: Text starting with e.g. '09:30:05'

    Returns:
        datetime.time, or None if the text does not start with a valid time
    """
    match = _TIME_OF_DAY_RE.match(time_str)
    if match is None:
        return None

    hour, minute, second = (int(part) for part in match.groups())
    try:
        return time(hour, minute, second)
    except ValueError:
        return None
