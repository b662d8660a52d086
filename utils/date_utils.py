"""
Date string helpers for the DD/MM/YYYY format used on booking records.

Older records were saved with the browser's locale format (usually
M/D/YYYY), so lookups and reports normalize everything to DD/MM/YYYY first.
"""

import logging
import re
from datetime import date, datetime
from typing import Union

from utils.constants import MAX_DATE_YEAR, MIN_DATE_YEAR

logger = logging.getLogger(__name__)

_DDMMYYYY_RE = re.compile(r"^\d{2}/\d{2}/\d{4}$")


def _format(day: int, month: int, year: int) -> str:
    return f"{day:02d}/{month:02d}/{year}"


def is_ddmmyyyy(date_str: str) -> bool:
    """
    Check if a string is a real calendar date in DD/MM/YYYY format.

    Args:
        date_str: Date string to check

    Returns:
        True if the string matches DD/MM/YYYY and the date exists
    """
    if not isinstance(date_str, str) or not _DDMMYYYY_RE.match(date_str):
        return False

    day, month, year = (int(p) for p in date_str.split("/"))
    try:
        date(year, month, day)
    except ValueError:
        return False
    return True


def parse_ddmmyyyy(date_str: str) -> date:
    """
    Parse a DD/MM/YYYY string.

    Raises:
        ValueError: If the string is not a valid DD/MM/YYYY date
    """
    try:
        return datetime.strptime(date_str, "%d/%m/%Y").date()
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid DD/MM/YYYY date: {date_str!r}") from e


def format_date_ddmmyyyy(value: Union[date, datetime, str]) -> str:
    """
    Convert a date object or date string to DD/MM/YYYY.

    Strings already in DD/MM/YYYY are returned unchanged. Other ``a/b/yyyy``
    strings are read day-first when ``a > 12``, month-first when ``b > 12``,
    and month-first (US) when both parts could be a month.

    Returns:
        The formatted date, or an empty string when the input is invalid or
        names a day that does not exist (31/02, 31/04)
    """
    if isinstance(value, (date, datetime)):
        return _format(value.day, value.month, value.year)

    if isinstance(value, str):
        if is_ddmmyyyy(value):
            return value

        parts = value.strip().split("/")
        if len(parts) == 3:
            try:
                first, second, year = (int(p) for p in parts)
            except ValueError:
                logger.error(f"Unsupported date format: {value!r}")
                return ""

            if first > 12:
                day, month = first, second
            else:
                day, month = second, first

            if not MIN_DATE_YEAR <= year <= MAX_DATE_YEAR:
                logger.error(f"Year out of range: {value!r}")
                return ""
            try:
                parsed = date(year, month, day)
            except ValueError:
                logger.error(
                    f"Invalid date values: day={day}, month={month}, year={year}"
                )
                return ""

            return _format(parsed.day, parsed.month, parsed.year)

    logger.error(f"Unsupported date format: {value!r}")
    return ""


def convert_mdyyyy_to_ddmmyyyy(date_str: str) -> str:
    """Convert legacy M/D/YYYY strings to DD/MM/YYYY."""
    month, day, year = (int(p) for p in date_str.split("/"))
    return _format(day, month, year)


def normalize_date_string(date_str: str) -> str:
    """Return DD/MM/YYYY strings unchanged, treat anything else as M/D/YYYY."""
    if is_ddmmyyyy(date_str):
        return date_str
    return convert_mdyyyy_to_ddmmyyyy(date_str)


def month_key(date_str: str) -> str:
    """Return the ``YYYY-MM`` key of a booking date, for monthly reports."""
    parsed = parse_ddmmyyyy(format_date_ddmmyyyy(date_str))
    return f"{parsed.year:04d}-{parsed.month:02d}"
