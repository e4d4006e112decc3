"""
Civil timezone utilities shared across the app.

All dates and times shown to users are expressed in Brazil's civil time
(America/Sao_Paulo), whatever the host's TZ setting is. Every helper goes
through ``to_civil`` so host-local calendar fields are never read.
"""

import logging
import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from autoservice.models import CivilTimestamp

logger = logging.getLogger(__name__)

CIVIL_TIMEZONE_NAME = 'America/Sao_Paulo'

# Sao Paulo has not observed daylight saving time since 2019.
CIVIL_UTC_OFFSET = timezone(timedelta(hours=-3), 'BRT')

TIME_FORMAT = '%H:%M:%S'

_DATE_RE = re.compile(r'^([0-9]{4})-([0-9]{2})-([0-9]{2})$')
_TIME_RE = re.compile(r'^([0-9]{2}):([0-9]{2})(?::([0-9]{2})(?:\.([0-9]{1,6}))?)?$')


class InvalidFormatError(ValueError):
    """Raised when date or time text is not a well-formed civil value."""

    def __init__(self, message: str, value: str = ''):
        super().__init__(message)
        self.value = value


def get_civil_timezone() -> tzinfo:
    """Return the civil timezone, or a fixed UTC-03:00 zone without tz data."""
    try:
        return ZoneInfo(CIVIL_TIMEZONE_NAME)
    except ZoneInfoNotFoundError:
        logger.warning("Timezone data for %s not found; using fixed UTC-03:00", CIVIL_TIMEZONE_NAME)
        return CIVIL_UTC_OFFSET


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_civil(instant: datetime) -> datetime:
    """
    Re-express an instant in the civil timezone.

    Args:
        instant: Aware datetime, or naive datetime interpreted as UTC

    Returns:
        Aware datetime whose fields are civil wall-clock values

    Raises:
        OverflowError: If the instant falls outside the representable range
            once moved into the civil zone (e.g. year 1 under the LMT offset)
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(get_civil_timezone())


def current_civil_instant() -> CivilTimestamp:
    """Current instant with calendar/clock fields in the civil timezone."""
    return CivilTimestamp(to_civil(utc_now()))


def current_date() -> str:
    """Current civil date as YYYY-MM-DD."""
    return current_civil_instant().date_str


def current_time() -> str:
    """Current civil wall-clock time as HH:MM:SS (24-hour)."""
    return current_civil_instant().time_str


def format_civil_date(instant: datetime) -> str:
    """Format an instant as its YYYY-MM-DD date in the civil timezone."""
    return to_civil(instant).date().isoformat()


def format_civil_time(instant: datetime) -> str:
    """Format an instant as its HH:MM:SS time in the civil timezone."""
    return to_civil(instant).strftime(TIME_FORMAT)


def parse_civil_date(date_text: str) -> date:
    """
    Parse a YYYY-MM-DD civil date.

    Raises:
        InvalidFormatError: If the text is not a real calendar date in that shape
    """
    if not isinstance(date_text, str):
        raise InvalidFormatError(f"Invalid date {date_text!r}: expected YYYY-MM-DD text", str(date_text))
    text = date_text.strip()
    match = _DATE_RE.match(text)
    if not match:
        raise InvalidFormatError(f"Invalid date '{date_text}': expected YYYY-MM-DD", date_text)
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidFormatError(f"Invalid date '{date_text}': {e}", date_text) from e


def parse_civil_time(time_text: str) -> time:
    """
    Parse an HH:MM, HH:MM:SS or HH:MM:SS.fff civil time of day.

    Raises:
        InvalidFormatError: If the text is not a real time of day in one of those shapes
    """
    if not isinstance(time_text, str):
        raise InvalidFormatError(f"Invalid time {time_text!r}: expected HH:MM:SS text", str(time_text))
    text = time_text.strip()
    match = _TIME_RE.match(text)
    if not match:
        raise InvalidFormatError(f"Invalid time '{time_text}': expected HH:MM:SS", time_text)
    hour, minute, second, fraction = match.groups()
    microsecond = int(fraction.ljust(6, '0')) if fraction else 0
    try:
        return time(int(hour), int(minute), int(second or 0), microsecond)
    except ValueError as e:
        raise InvalidFormatError(f"Invalid time '{time_text}': {e}", time_text) from e


def parse_civil_datetime(date_text: str, time_text: str) -> datetime:
    """
    Combine civil date and time text into an absolute instant.

    The fixed -03:00 offset is applied explicitly; the host timezone is never
    consulted.

    Args:
        date_text: Civil date as YYYY-MM-DD
        time_text: Civil time as HH:MM[:SS[.fff]]

    Returns:
        Aware datetime at UTC-03:00

    Raises:
        InvalidFormatError: If either value is malformed
    """
    civil_date = parse_civil_date(date_text)
    civil_time = parse_civil_time(time_text)
    return datetime.combine(civil_date, civil_time, tzinfo=CIVIL_UTC_OFFSET)


def shift_civil_date(days: int, start: Optional[str] = None) -> str:
    """
    Move a civil date by a number of calendar days.

    Args:
        days: Days to add (negative to go back)
        start: YYYY-MM-DD date to start from (default: today)

    Returns:
        Resulting date as YYYY-MM-DD
    """
    base = parse_civil_date(start) if start is not None else parse_civil_date(current_date())
    try:
        return (base + timedelta(days=days)).isoformat()
    except OverflowError as e:
        raise InvalidFormatError(f"Date {base.isoformat()} shifted by {days} days is out of range", str(start)) from e


def days_from_monday(day_index: int) -> int:
    """Days back to Monday for a Sunday=0..Saturday=6 day index."""
    return 6 if day_index == 0 else day_index - 1


def week_start_for(date_text: str) -> str:
    """Monday (YYYY-MM-DD) that begins the civil week containing date_text."""
    civil_date = parse_civil_date(date_text)
    day_index = (civil_date.weekday() + 1) % 7
    try:
        return (civil_date - timedelta(days=days_from_monday(day_index))).isoformat()
    except OverflowError as e:
        raise InvalidFormatError(f"Week of {date_text} starts before year 1", date_text) from e


def week_start() -> str:
    """Monday (YYYY-MM-DD) that begins the current civil week.

    Sundays roll back six days to the previous Monday.
    """
    today = current_civil_instant()
    monday = today.plus_days(-days_from_monday(today.day_of_week))
    return monday.date_str
