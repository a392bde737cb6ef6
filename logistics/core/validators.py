"""Input validation helpers shared by the API handlers."""
import re

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
PHONE_RE = re.compile(r'^[\+]?[0-9\s\-\(\)]{10,20}$')

DUPLICATE_MARKERS = ('already', 'exists', 'duplicate', 'unique')


def sanitize_input(value, max_length=255):
    """Trim strings and cap them at ``max_length``. Non-strings pass through."""
    if not isinstance(value, str):
        return value
    return value.strip()[:max_length]


def is_valid_email(email):
    return bool(email) and bool(EMAIL_RE.match(str(email).strip()))


def is_valid_phone(phone):
    return bool(phone) and bool(PHONE_RE.match(str(phone).strip()))


def is_valid_id(value):
    """Primary keys arrive as strings or ints; only positive integers are accepted."""
    text = str(value).strip()
    return text.isdecimal() and int(text) > 0


def is_duplicate_error(error):
    """True for unique-key violations, which seeding treats as success."""
    message = str(error).lower()
    return any(marker in message for marker in DUPLICATE_MARKERS)


def missing_fields(data, fields):
    """Names of required fields that are absent or blank in ``data``."""
    missing = []
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)
    return missing
