"""Datetime helpers.

Timestamps are stored as naive UTC in ``DateTime`` columns.
"""

from datetime import datetime, timezone


def utc_now_naive() -> datetime:
    """Current UTC time without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
