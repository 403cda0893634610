"""
Input validation utilities
"""
import re

from utils.errors import InvalidInput
from utils.helpers import parse_date


def validate_phone(phone):
    """Validate phone number format"""
    if not phone or not isinstance(phone, str):
        return False

    digits_only = re.sub(r'\D', '', phone)
    return len(digits_only) >= 7


def parse_id(value, field='id'):
    """Coerce an ID argument (int or numeric string)"""
    if isinstance(value, bool) or value is None or value == '':
        raise InvalidInput(f"{field} is required")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidInput(f"{field} must be an integer id")
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field} must be an integer id")
    if parsed <= 0:
        raise InvalidInput(f"{field} must be positive")
    return parsed


def parse_limit(value, default, maximum):
    if value is None:
        return default
    try:
        limit = int(value)
    except (TypeError, ValueError):
        raise InvalidInput("limit must be an integer")
    if limit < 1:
        raise InvalidInput("limit must be at least 1")
    return min(limit, maximum)


def parse_offset(value):
    if value is None:
        return 0
    try:
        offset = int(value)
    except (TypeError, ValueError):
        raise InvalidInput("offset must be an integer")
    if offset < 0:
        raise InvalidInput("offset cannot be negative")
    return offset


def parse_birthdate(value):
    try:
        return parse_date(value)
    except (TypeError, ValueError):
        raise InvalidInput("birthdate must be an ISO date (YYYY-MM-DD)")


def require_fields(data, fields):
    """Raise InvalidInput naming every missing/blank field"""
    missing = [f for f in fields if data.get(f) is None or str(data.get(f)).strip() == '']
    if missing:
        raise InvalidInput(f"Missing required fields: {', '.join(missing)}")


def require_strings(data, fields):
    """Raise InvalidInput naming every present field that is not text"""
    wrong = [f for f in fields if data.get(f) is not None and not isinstance(data.get(f), str)]
    if wrong:
        raise InvalidInput(f"Fields must be strings: {', '.join(wrong)}")
