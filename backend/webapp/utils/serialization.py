"""Serialization utilities for converting models to API responses."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from webapp.utils.clock import as_utc


def serialize_uuid(value: Optional[UUID]) -> Optional[str]:
    """
    Serialize UUID to string.

    Args:
        value: UUID value or None

    Returns:
        String representation or None
    """
    return str(value) if value else None


def serialize_datetime(value: Optional[datetime]) -> Optional[str]:
    """
    Serialize datetime to ISO format string in UTC.

    Args:
        value: Datetime value or None

    Returns:
        ISO format string or None
    """
    return as_utc(value).isoformat() if value else None
