"""
Date and Time utilities

This module handles XMLTV timestamp parsing, timezone resolution and
normalization of decoded instants into the reader's target timezone.
Centralizes all date parsing logic to maintain consistency across the package.
"""
from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging
import re

logger = logging.getLogger(__name__)

# Tried in order, first match wins. Zone-less values are taken as UTC.
START_STOP_FORMATS: tuple[str, ...] = (
    "%Y%m%d%H%M%S %z",
    "%Y%m%d%H%M%S%z",
    "%Y%m%d%H%M%S",
)
AIR_DATE_FORMATS: tuple[str, ...] = ("%Y%m%d", "%Y")

_OFFSET_PATTERN = re.compile(r"^(?:UTC|GMT)?\s*([+-])(\d{1,2})(?::?(\d{2}))?$", re.IGNORECASE)


class DateFormatError(ValueError):
    """Raised when date format is invalid"""
    pass


def parse_xmltv_time(value: str | None, formats: tuple[str, ...] = START_STOP_FORMATS) -> datetime | None:
    """
    Parse an XMLTV timestamp against an ordered list of strptime patterns

    Args:
        value: Raw attribute or element text, e.g. '20080715003000 -0600'
        formats: Patterns to try in order

    Returns:
        Timezone-aware datetime (UTC when the text carries no offset),
        or None when no pattern matches
    """
    if not value:
        return None

    text = value.strip()
    for fmt in formats:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    return None


def to_timezone(value: datetime, target: tzinfo) -> datetime:
    """Convert an aware datetime into the target timezone"""
    return value.astimezone(target)


def resolve_timezone(value: str | tzinfo) -> tzinfo:
    """
    Resolve a timezone specification

    Args:
        value: tzinfo instance, 'UTC', a fixed offset like '+12:00' or '-0500',
            or an IANA name like 'Europe/London'

    Returns:
        tzinfo instance

    Raises:
        DateFormatError: If the name is not a known timezone
    """
    if isinstance(value, tzinfo):
        return value

    name = value.strip()
    if name.upper() in ("UTC", "Z", "GMT"):
        return timezone.utc

    match = _OFFSET_PATTERN.match(name)
    if match:
        sign, hours, minutes = match.groups()
        offset = timedelta(hours=int(hours), minutes=int(minutes or 0))
        if offset >= timedelta(hours=24):
            raise DateFormatError(f"Timezone offset out of range: '{value}'")
        return timezone(-offset if sign == "-" else offset)

    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise DateFormatError(f"Invalid timezone: '{value}'") from e


def _normalize_iso8601_string(date_str: str) -> str:
    """Normalize ISO8601 string by replacing 'Z' with '+00:00'

    Args:
        date_str: ISO8601 datetime string

    Returns:
        Normalized string with explicit timezone offset
    """
    return date_str.replace('Z', '+00:00') if date_str.endswith('Z') else date_str


def parse_iso8601_to_utc(date_str: str) -> datetime:
    """
    Parse ISO8601 date string and convert to UTC datetime

    Args:
        date_str: ISO8601 datetime string (e.g., '2025-10-09T00:00:00Z' or '2025-10-09T00:00:00+01:00')

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        DateFormatError: If the date string format is invalid
    """
    try:
        normalized = _normalize_iso8601_string(date_str)
        dt = datetime.fromisoformat(normalized)
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    except (ValueError, AttributeError) as e:
        raise DateFormatError(f"Invalid ISO8601 datetime format: '{date_str}'") from e
