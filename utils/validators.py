"""
Input validation helpers
"""
import re
from datetime import datetime

from utils.errors import InvalidInput

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PIN_RE = re.compile(r"^\d{4}$")
TIME_RE = re.compile(r"^\d{1,2}:\d{2}(:\d{2})?$")


def validate_email(email):
    """Return True if email looks like an address"""
    return bool(email) and isinstance(email, str) and bool(EMAIL_RE.match(email))


def normalize_email(email):
    if not isinstance(email, str):
        return ''
    return email.strip().lower()


def validate_pin(pin):
    """4-digit numeric string"""
    return isinstance(pin, str) and bool(PIN_RE.match(pin))


def parse_time_of_day(value):
    """
    Parse "HH:MM" or "HH:MM:SS" into (hours, minutes, seconds).
    Raises ValueError on bad format or out-of-range components.
    """
    if not isinstance(value, str) or not TIME_RE.match(value.strip()):
        raise ValueError(f"Invalid time format: {value!r} - must be HH:MM or HH:MM:SS")
    parts = [int(p) for p in value.strip().split(':')]
    hours, minutes = parts[0], parts[1]
    seconds = parts[2] if len(parts) > 2 else 0
    if not (0 <= hours <= 23 and 0 <= minutes <= 59 and 0 <= seconds <= 59):
        raise ValueError(f"Invalid time components: {hours}:{minutes}:{seconds}")
    return hours, minutes, seconds


def validate_time_of_day(value):
    try:
        parse_time_of_day(value)
    except ValueError:
        return False
    return True


def parse_date(value):
    """YYYY-MM-DD to date, or None"""
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), '%Y-%m-%d').date()
    except ValueError:
        return None


def parse_pagination(args, default_limit=10, max_limit=100):
    """Read page/limit query params; both clamped to at least 1"""
    try:
        page = int(args.get('page', 1))
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(args.get('limit', default_limit))
    except (TypeError, ValueError):
        limit = default_limit
    return max(page, 1), min(max(limit, 1), max_limit)


def text_field(data, key, label=None, strip=True):
    """
    String value of data[key] (stripped unless strip=False); '' when absent or null.
    Raises InvalidInput when the value is present but not a string.
    """
    value = data.get(key)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise InvalidInput(f"{label or key} must be a string")
    return value.strip() if strip else value
