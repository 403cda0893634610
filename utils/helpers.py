"""
General helper utilities for the dating app
"""
from datetime import date, datetime, time, timedelta, timezone


def utcnow():
    """Naive UTC timestamp, the form every DateTime column stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def canonical_pair(a, b):
    """Normalize an unordered pair of user ids to (smaller, larger)"""
    return (a, b) if a <= b else (b, a)


def calculate_age(birth_date, today=None):
    """Calculate age from birth date.

    Subtracts one year when this year's birthday has not happened yet.
    """
    if not birth_date:
        return None

    today = today or utcnow().date()
    return today.year - birth_date.year - ((today.month, today.day) < (birth_date.month, birth_date.day))


def format_datetime(dt):
    """ISO-8601 for API payloads"""
    if not dt:
        return None
    return dt.isoformat()


def start_of_day(now=None):
    now = now or utcnow()
    return datetime.combine(now.date(), time.min)


def start_of_week(now=None):
    """Monday 00:00 of the current week"""
    day = start_of_day(now)
    return day - timedelta(days=day.weekday())


def parse_date(value):
    """Parse YYYY-MM-DD (or pass a date through)"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())
