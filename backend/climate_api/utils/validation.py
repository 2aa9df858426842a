"""
Input Validation Utilities
===========================

Common validation helpers for ids, emails and dates coming in from requests.
"""

import calendar
import re
from datetime import datetime
from typing import Optional

from bson import ObjectId


def validate_object_id(value: str) -> bool:
    """
    Validate a MongoDB ObjectId string.

    Args:
        value: Id string (24 hex characters, e.g. "65f1c2a4e4b0a1b2c3d4e5f6")

    Returns:
        True if it can be turned into an ObjectId, False otherwise
    """
    return isinstance(value, str) and ObjectId.is_valid(value)


def parse_object_id(value: str) -> Optional[ObjectId]:
    """
    Turn an id string into an ObjectId.

    Args:
        value: Id string from the URL

    Returns:
        The ObjectId, or None if the string is malformed
    """
    if not validate_object_id(value):
        return None
    return ObjectId(value)


def validate_email(email: str) -> bool:
    """
    Validate an email address (shape only, no DNS lookups).

    Args:
        email: Email address string

    Returns:
        True if it looks like name@domain.tld, False otherwise
    """
    if not email:
        return False
    return bool(re.match(r'^[^@\s]+@[^@\s]+\.[^@\s]+$', email.strip()))


def months_before(moment: datetime, months: int) -> datetime:
    """
    Step back a whole number of calendar months.

    The day is clamped to the length of the target month, so 31 March minus
    one month is 28 (or 29) February.

    Args:
        moment: Starting point
        months: How many months to go back (negative goes forward)

    Returns:
        A datetime with the same time of day and tzinfo as `moment`
    """
    year, month_index = divmod(moment.year * 12 + moment.month - 1 - months, 12)
    month = month_index + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
