"""
care_dates.py — care timestamp codec and staleness tiers
"""
from datetime import datetime, timedelta

TIMESTAMP_HELP = "DD.MM.YYYYTHH:MM"

FRESH = "fresh"
WARNING = "warning"
OVERDUE = "overdue"
UNKNOWN = "unknown"

ONE_DAY = timedelta(days=1)


def format_timestamp(dt):
    if dt is None:
        return ""
    return f"{dt.day:02d}.{dt.month:02d}.{dt.year:04d}T{dt.hour:02d}:{dt.minute:02d}"


def parse_timestamp(text, default=None):
    """
    Parse 'DD.MM.YYYYTHH:MM' into a naive local datetime.
    Anything unparseable gives `default` (now, if not given) instead of raising.
    """
    try:
        date_part, time_part = text.split("T")
        day, month, year = (int(x) for x in date_part.split("."))
        hour, minute = (int(x) for x in time_part.split(":"))
        return datetime(year, month, day, hour, minute)
    except Exception:
        return default if default is not None else datetime.now()


def is_valid_timestamp(text):
    marker = object()
    return parse_timestamp(text, default=marker) is not marker


def parse_form_date(text):
    """Browser <input type=date> value (YYYY-MM-DD) -> local midnight, or None."""
    text = (text or "").strip()
    if not text:
        return None
    try:
        return datetime.strptime(text, "%Y-%m-%d")
    except ValueError:
        return None


def days_ago(timestamp, now=None):
    now = now or datetime.now()
    return (now - parse_timestamp(timestamp, default=now)) // ONE_DAY


def watering_tier(days):
    if 0 <= days <= 4:
        return FRESH
    if 5 <= days <= 7:
        return WARNING
    return OVERDUE


def classify(timestamp, now=None, explicit_unknown=False):
    """
    Return (days, tier) for a watered timestamp.

    An empty or malformed timestamp counts as "now" and so reads as 0 days,
    fresh. With explicit_unknown it is reported as (None, 'unknown').
    """
    if explicit_unknown and not is_valid_timestamp(timestamp):
        return None, UNKNOWN
    days = days_ago(timestamp, now)
    return days, watering_tier(days)
