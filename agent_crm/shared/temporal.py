"""
Temporal normalization shared by reminders and appointments.

Times arrive in several encodings (HH:MM:SS, H:MM, full ISO datetimes, bare
times with offsets) and are reduced to a canonical "HH:MM:SS" string. A time
that cannot be parsed becomes None instead of raising, so a bad time never
blocks the create/update it arrived with. Dates are reduced to "YYYY-MM-DD"
and timestamps to ISO-8601 strings for output; absent dates become "".
"""

import calendar
import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional, Union

from dateutil import tz
from dateutil.parser import isoparse

from ..config import REMINDER_TIMEZONE

logger = logging.getLogger(__name__)

_HH_MM_SS = re.compile(r"^\d{2}:\d{2}:\d{2}$")
_H_MM = re.compile(r"^\d{1,2}:\d{2}$")
_EPOCH_DATE = "1970-01-01"
# Bare clock time with optional fraction and offset; compact forms like "0930" are not times
_CLOCK_TIME = re.compile(r"^\d{1,2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}(:?\d{2})?)?$")
_NULL_LITERALS = {"", "null", "undefined"}


def _in_range(hours: int, minutes: int, seconds: int = 0) -> bool:
    return 0 <= hours <= 23 and 0 <= minutes <= 59 and 0 <= seconds <= 59


def _utc_time_string(value: datetime) -> str:
    # Naive datetimes are taken as UTC
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%H:%M:%S")


def _try_isoparse(value: str) -> Optional[datetime]:
    try:
        return isoparse(value)
    except (ValueError, OverflowError, TypeError):
        return None


def normalize_time(value: Any) -> Optional[str]:
    """
    Normalize a time-of-day value to "HH:MM:SS".

    Accepted, in order: exact HH:MM:SS, H:MM / HH:MM, an ISO-8601 datetime
    (time taken in UTC), a bare time parsed against an epoch date.
    Returns None for empty input, the literals "null"/"undefined", out of
    range components and anything else that fails to parse.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return _utc_time_string(value)
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")

    clean = str(value).strip()
    if clean in _NULL_LITERALS:
        return None

    if _HH_MM_SS.match(clean):
        hours, minutes, seconds = (int(part) for part in clean.split(":"))
        if _in_range(hours, minutes, seconds):
            return clean
        logger.warning(f"🕐 Time out of range, dropping: {clean}")
        return None

    if _H_MM.match(clean):
        hours, minutes = (int(part) for part in clean.split(":"))
        if _in_range(hours, minutes):
            return f"{hours:02d}:{minutes:02d}:00"
        logger.warning(f"🕐 Time out of range, dropping: {clean}")
        return None

    if "T" in clean or "-" in clean:
        parsed = _try_isoparse(clean)
        if parsed is not None:
            return _utc_time_string(parsed)

    if _CLOCK_TIME.match(clean):
        parsed = _try_isoparse(f"{_EPOCH_DATE}T{clean}")
        if parsed is not None:
            return _utc_time_string(parsed)

    logger.warning(f"🕐 Cannot parse time format, dropping: {clean}")
    return None


def parse_time(value: Any) -> Optional[time]:
    """Normalize then convert to a datetime.time (None when unparseable)"""
    normalized = normalize_time(value)
    if normalized is None:
        return None
    return time.fromisoformat(normalized)


def normalize_date_to_iso_date(value: Any) -> str:
    """Reduce a date/datetime/string to its YYYY-MM-DD portion ("" when absent)"""
    if value is None or value == "":
        return ""

    if isinstance(value, str):
        if "-" in value:
            return value.split("T")[0].split(" ")[0]
        return value

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()

    if isinstance(value, date):
        return value.isoformat()

    return str(value)


def normalize_datetime_to_iso_string(value: Any) -> str:
    """Render a timestamp as an ISO-8601 string ("" when absent, strings pass through)"""
    if value is None or value == "":
        return ""

    if isinstance(value, str):
        return value

    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    if isinstance(value, date):
        return value.isoformat()

    return str(value)


def parse_iso_date(value: Union[str, date, datetime]) -> date:
    """Strict date parsing for request parameters. Raises ValueError."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = normalize_date_to_iso_date(value)
    if not text:
        raise ValueError("Date is required")
    return date.fromisoformat(text)


def reference_timezone():
    zone = tz.gettz(REMINDER_TIMEZONE)
    if zone is None:
        logger.warning(f"⚠️ Unknown REMINDER_TIMEZONE '{REMINDER_TIMEZONE}', using UTC")
        return tz.UTC
    return zone


def today_in_reference_tz() -> date:
    """Current calendar day in the agents' reference timezone"""
    return datetime.now(reference_timezone()).date()


def start_of_week(day: date) -> date:
    """Monday of the week containing day"""
    return day - timedelta(days=day.weekday())


def birthday_in_year(date_of_birth: date, year: int) -> date:
    """Birthday occurrence in a given year; Feb 29 falls back to Feb 28 in non-leap years"""
    if date_of_birth.month == 2 and date_of_birth.day == 29 and not calendar.isleap(year):
        return date(year, 2, 28)
    return date(year, date_of_birth.month, date_of_birth.day)


def is_birthday_on(date_of_birth: date, day: date) -> bool:
    return birthday_in_year(date_of_birth, day.year) == day


def has_birthday_within(date_of_birth: date, today: date, days: int) -> bool:
    """True when the next birthday falls in [today, today + days]"""
    window_end = today + timedelta(days=days)
    for year in (today.year, today.year + 1):
        if today <= birthday_in_year(date_of_birth, year) <= window_end:
            return True
    return False


def calculate_age(date_of_birth: date, today: date) -> int:
    age = today.year - date_of_birth.year
    if today < birthday_in_year(date_of_birth, today.year):
        age -= 1
    return age
