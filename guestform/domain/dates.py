"""
Date helpers for stay dates.

Bookings store check-in/check-out as text. Older rows use YYYY-MM-DD, rows
written by the guest form use MM-DD-YYYY. Everything that compares dates
goes through normalize_date() first so plain string comparison works.
"""
import logging
import re
from datetime import date, datetime
from typing import Optional, Union
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
US_DATE_RE = re.compile(r"^\d{2}-\d{2}-\d{4}$")

DEFAULT_CHECK_IN_TIME = "02:00 PM"
DEFAULT_CHECK_OUT_TIME = "11:00 AM"

MANILA_TZ = ZoneInfo("Asia/Manila")


def normalize_date(date_str: str) -> str:
    """
    Return the date as YYYY-MM-DD.

    MM-DD-YYYY is rewritten, YYYY-MM-DD is returned as is. Any other shape
    is passed through untouched: comparisons against it are unreliable, but
    callers get a value instead of an exception.
    """
    if ISO_DATE_RE.match(date_str):
        return date_str

    if US_DATE_RE.match(date_str):
        month, day, year = date_str.split("-")
        return f"{year}-{month.zfill(2)}-{day.zfill(2)}"

    logger.debug(f"Unrecognized date format, passing through: {date_str!r}")
    return date_str


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """Parse a stay date in either stored format. Returns None if it can't."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(normalize_date(value.strip()), "%Y-%m-%d").date()
    except ValueError:
        return None


def to_storage_format(value: Union[str, date, None]) -> str:
    """Format a date as MM-DD-YYYY, the format new bookings are written in."""
    parsed = parse_date(value)
    if parsed is None:
        return value or ""
    return parsed.strftime("%m-%d-%Y")


def format_time_ampm(value: Optional[str], is_check_in: bool = False) -> str:
    """
    Format a time as "hh:mm AM".
    Accepts 24h "14:00" or 12h "2:00 PM"; falls back to the default
    check-in/check-out time for empty or invalid input.
    """
    default = DEFAULT_CHECK_IN_TIME if is_check_in else DEFAULT_CHECK_OUT_TIME
    if not value:
        return default

    value = value.strip()
    for fmt in ("%I:%M %p", "%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(value, fmt).strftime("%I:%M %p")
        except ValueError:
            continue
    return default


def count_nights(check_in: Union[str, date], check_out: Union[str, date]) -> Optional[int]:
    start = parse_date(check_in)
    end = parse_date(check_out)
    if start is None or end is None:
        return None
    return (end - start).days


def today_in_manila(tz: ZoneInfo = MANILA_TZ) -> str:
    """Today's date in the unit's timezone, as YYYY-MM-DD."""
    return datetime.now(tz).date().isoformat()
