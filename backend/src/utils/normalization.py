"""Input normalization for report metadata, vitals and identities."""

import re
from datetime import date, datetime, time, timezone
from typing import Optional, Union

from dateutil import parser

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_text(value: Optional[str]) -> Optional[str]:
    """Strip whitespace; blank strings become None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def normalize_email(email: Optional[str]) -> Optional[str]:
    """
    Normalize an email address for storage and comparison.

    "  Alice@Example.COM " -> "alice@example.com"

    Returns None for blank input. Does not validate the format, see
    ``is_valid_email``.
    """
    email = normalize_text(email)
    return email.lower() if email else None


def is_valid_email(email: Optional[str]) -> bool:
    """Loose syntactic check: something@domain.tld, no whitespace."""
    return bool(email) and bool(EMAIL_PATTERN.match(email))


def parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Parse a clinical date.

    Handles formats:
    - "2024-01-15" -> date(2024, 1, 15)
    - "Jan 15, 2024" -> date(2024, 1, 15)
    - "01/15/2024" -> date(2024, 1, 15)
    - date / datetime objects are passed through (datetime is truncated)

    Args:
        value: Date in various formats

    Returns:
        date, or None if blank

    Raises:
        ValueError: if the value is present but cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    value_str = normalize_text(value)
    if not value_str:
        return None

    try:
        return parser.parse(value_str).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Unrecognized date: {value_str}") from e


def parse_datetime(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """
    Parse a measurement timestamp.

    Dates without a time component are placed at midnight. Timezone-aware
    values are converted to naive UTC to match stored timestamps.

    Raises:
        ValueError: if the value is present but cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime.combine(value, time.min)
    else:
        value_str = normalize_text(value)
        if not value_str:
            return None
        try:
            parsed = parser.isoparse(value_str)
        except ValueError:
            try:
                parsed = parser.parse(value_str)
            except (ValueError, OverflowError) as e:
                raise ValueError(f"Unrecognized timestamp: {value_str}") from e

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
