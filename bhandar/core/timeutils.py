"""
Date helpers pinned to the business time zone (IST by default).

Every "today" or "current month" decision goes through this module so
tests can patch a single function.
"""
from datetime import date, datetime

from django.utils import timezone
from django.utils.dateparse import parse_date


def now():
    """Current aware datetime in the configured time zone"""
    return timezone.localtime(timezone.now())


def today():
    """Current date in the configured time zone"""
    return now().date()


def parse_date_param(value):
    """Parse a YYYY-MM-DD query parameter, returning None when absent or invalid"""
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return parse_date(str(value)[:10])
    except ValueError:
        return None


def format_date_ist(value):
    """Format a date like "15 Jan 2026"; returns "Invalid Date" for bad input"""
    parsed = parse_date_param(value)
    if parsed is None:
        return 'Invalid Date'
    return f"{parsed.day} {parsed.strftime('%b')} {parsed.year}"


def format_datetime_ist(value):
    """Format an aware datetime like "15 Jan 2026, 3:49 AM IST" """
    if not isinstance(value, datetime):
        return 'Invalid Date'
    local = timezone.localtime(value) if timezone.is_aware(value) else value
    hour = local.hour % 12 or 12
    ampm = 'PM' if local.hour >= 12 else 'AM'
    return f"{local.day} {local.strftime('%b')} {local.year}, {hour}:{local.minute:02d} {ampm} IST"
