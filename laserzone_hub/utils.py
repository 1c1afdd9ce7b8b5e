"""
LaserZone Hub - Request Utilities
Safe parsing helpers for request parameters, dates and times
"""
import re
import unicodedata
from datetime import datetime

TIME_PATTERN = re.compile(r'^([01]?[0-9]|2[0-3]):[0-5][0-9]$')
DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def safe_int(value, default=0, min_val=None, max_val=None):
    """
    Safely parse an integer from a request parameter.

    Args:
        value: The value to parse (string or None)
        default: Default value if parsing fails
        min_val: Minimum allowed value (optional)
        max_val: Maximum allowed value (optional)

    Returns:
        int: Parsed integer or default
    """
    try:
        result = int(value) if value is not None else default
    except (ValueError, TypeError):
        result = default

    if min_val is not None:
        result = max(result, min_val)
    if max_val is not None:
        result = min(result, max_val)

    return result


def safe_bool(value, default=False):
    """
    Safely parse a boolean from a request parameter.
    Accepts: true, false, 1, 0, yes, no (case insensitive)
    """
    if value is None:
        return default

    if isinstance(value, bool):
        return value

    if isinstance(value, str):
        return value.lower() in ('true', '1', 'yes', 'on')

    return bool(value)


def is_number(value) -> bool:
    """True for ints and floats, False for bools and everything else"""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_valid_time(value) -> bool:
    return isinstance(value, str) and bool(TIME_PATTERN.match(value))


def time_to_minutes(value: str) -> int:
    """'14:30' -> 870"""
    hours, minutes = value.split(':')
    return int(hours) * 60 + int(minutes)


def minutes_to_time(total: int) -> str:
    """870 -> '14:30'"""
    return f"{total // 60:02d}:{total % 60:02d}"


def parse_date(value):
    """
    Parse a YYYY-MM-DD string.

    Returns:
        date or None if the value is missing or malformed
    """
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        return None


def parse_datetime(value):
    """
    Parse an ISO-8601 timestamp sent by the browser.
    Accepts a trailing 'Z' and plain YYYY-MM-DD dates; timezone-aware values
    are converted to naive UTC to match the stored columns.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed_date = parse_date(value)
        if parsed_date is None:
            return None
        return datetime.combine(parsed_date, datetime.min.time())
    if parsed.tzinfo is not None:
        parsed = (parsed - parsed.utcoffset()).replace(tzinfo=None)
    return parsed


def normalize_search_text(value) -> str:
    """Lowercase, strip diacritics (ă -> a, ș -> s) and remove whitespace"""
    if not value:
        return ''
    decomposed = unicodedata.normalize('NFD', str(value).lower())
    stripped = ''.join(ch for ch in decomposed if unicodedata.category(ch) != 'Mn')
    return re.sub(r'\s+', '', stripped)
