"""Lenient date parsing shared by statement rows and ledger entries."""

from datetime import date, datetime
from typing import Any, Optional, Sequence
import logging

import pandas as pd

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%d.%m.%Y")


def parse_date(
    value: Any, date_formats: Sequence[str] = DEFAULT_DATE_FORMATS
) -> Optional[datetime]:
    """
    Parse a date or timestamp into a naive datetime.

    Tries each explicit format first, then falls back to the pandas parser.
    Anything unparseable yields None; callers treat that as "cannot match".

    Args:
        value: String, date, datetime or pandas Timestamp
        date_formats: strptime formats to try before the fallback

    Returns:
        Naive datetime or None
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None

    if isinstance(value, pd.Timestamp):
        return _naive(value.to_pydatetime())
    if isinstance(value, datetime):
        return _naive(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    text = str(value).strip()
    if not text:
        return None

    for fmt in date_formats:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    try:
        parsed = pd.to_datetime(text)
    except (ValueError, TypeError, OverflowError):
        logger.debug(f"Unparseable date: {text!r}")
        return None

    if pd.isna(parsed):
        return None
    return _naive(parsed.to_pydatetime())


def _naive(value: datetime) -> datetime:
    """Drop timezone info, converting aware values to UTC first."""
    if value.tzinfo is not None:
        offset = value.utcoffset()
        value = value.replace(tzinfo=None)
        if offset:
            value = value - offset
    return value
