"""
Input validation utilities for booking form data.
"""

import re
from typing import Optional

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def validate_phone(phone: str) -> bool:
    """
    Validate phone number format.
    Accepts local numbers with a leading 0 or international format with +.

    Args:
        phone: Phone number string

    Returns:
        True if valid format, False otherwise
    """
    if not phone or not isinstance(phone, str):
        return False

    # Remove spaces, dashes, parentheses
    cleaned = re.sub(r"[\s\-\(\)]", "", phone)

    return bool(re.match(r"^(\+[1-9]\d{6,14}|0\d{8,9})$", cleaned))


def validate_time(value: str) -> bool:
    """Validate a 24h ``HH:MM`` time string."""
    return isinstance(value, str) and bool(_TIME_RE.match(value))


def sanitize_text(text: str, max_length: Optional[int] = None) -> str:
    """
    Sanitize user input text.

    Args:
        text: Input text
        max_length: Optional maximum length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    # Remove control characters except newlines and tabs
    sanitized = re.sub(r"[\x00-\x08\x0B-\x0C\x0E-\x1F\x7F]", "", str(text))
    sanitized = sanitized.strip()

    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
