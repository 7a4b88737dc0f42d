"""
Resolve YYYY-MM-DD command-line dates into a TimeWindow of absolute instants.

Dates are read in the target user's timezone. The end date is inclusive for the caller, so it
becomes the following local midnight and is used as an exclusive bound.
"""

import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

import pytz

from models import TimeWindow

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


class WindowError(ValueError):
    """Bad date string or unknown timezone."""


def load_timezone(name: str):
    """Return a pytz timezone, treating an empty name as UTC."""
    if not name:
        return pytz.utc
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError as exc:
        raise WindowError(f"Unknown timezone: {name}") from exc


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as exc:
        raise WindowError(f"failed to parse date {value!r}: expected YYYY-MM-DD") from exc


def local_midnight(day: date, tz) -> datetime:
    """Aware datetime for 00:00 on day in tz. Handles DST because pytz localizes per date."""
    return tz.normalize(tz.localize(datetime(day.year, day.month, day.day)))


def resolve_window(start: Optional[str], end: Optional[str], tz_name: str = '') -> TimeWindow:
    """Build a TimeWindow from optional start/end date strings.

    Both strings are validated before raising, so a single WindowError reports every bad value.
    """
    tz = load_timezone(tz_name)
    errors: List[str] = []
    start_at = end_at = None
    if start:
        try:
            start_at = local_midnight(parse_date(start), tz)
        except WindowError as exc:
            logger.error("failed to parse start date: %s", exc)
            errors.append(f"start: {exc}")
    if end:
        try:
            end_at = local_midnight(parse_date(end) + timedelta(days=1), tz)
        except WindowError as exc:
            logger.error("failed to parse end date: %s", exc)
            errors.append(f"end: {exc}")
    if errors:
        raise WindowError("; ".join(errors))
    if start_at is not None and end_at is not None and start_at >= end_at:
        logger.warning("start %s is after end %s; nothing can match", start, end)
    return TimeWindow(start_at, end_at)


def discovery_dates(window: TimeWindow, caller_tz_name: str = '') -> Tuple[Optional[date], Optional[date]]:
    """Inclusive date bounds for a worklogDate JQL filter, in the caller's timezone.

    worklogDate only compares whole days, so each side is widened by a day. The search may
    return extra issues, never fewer.
    """
    tz = load_timezone(caller_tz_name)
    lo = hi = None
    if window.start is not None:
        lo = window.start.astimezone(tz).date() - timedelta(days=1)
    if window.end is not None:
        # end is exclusive; the last included instant is one microsecond earlier
        hi = (window.end - timedelta(microseconds=1)).astimezone(tz).date() + timedelta(days=1)
    return lo, hi


def echo_dates(window: TimeWindow, tz_name: str = '') -> Tuple[str, str]:
    """The window as inclusive YYYY-MM-DD dates in tz_name. The end date is the day of the last included instant."""
    tz = load_timezone(tz_name)
    start = end = ''
    if window.start is not None:
        start = window.start.astimezone(tz).strftime(DATE_FORMAT)
    if window.end is not None:
        end = (window.end.astimezone(tz) - timedelta(microseconds=1)).strftime(DATE_FORMAT)
    return start, end
