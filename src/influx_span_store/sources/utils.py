"""
Utility functions for source connectors.
"""

from typing import Union
from datetime import datetime, timezone
import logging
import re
import time

from ..errors import MalformedResultError

logger = logging.getLogger(__name__)

# RFC3339 with an optional fraction of up to nine digits, as InfluxDB renders it.
_RFC3339_PATTERN = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(?P<fraction>\d{1,9}))?(?P<zone>Z|[+-]\d{2}:\d{2})$"
)


def now_ns() -> int:
    """Current UTC time as nanoseconds since the epoch."""
    return time.time_ns()


def parse_timestamp(timestamp: Union[int, str, datetime]) -> int:
    """
    Parse an engine timestamp into nanoseconds since the epoch.

    Args:
        timestamp: Epoch nanoseconds, an RFC3339 string or a datetime object

    Returns:
        Nanoseconds since the epoch

    Raises:
        MalformedResultError: If the value is not a recognizable timestamp
    """
    if isinstance(timestamp, bool):
        raise MalformedResultError(f"unexpected timestamp type: {type(timestamp).__name__}")
    if isinstance(timestamp, int):
        return timestamp
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return _datetime_to_ns(timestamp)
    if isinstance(timestamp, str):
        match = _RFC3339_PATTERN.match(timestamp)
        if not match:
            raise MalformedResultError(f"failed to parse timestamp '{timestamp}'")
        zone = match.group("zone").replace("Z", "+00:00")
        base = datetime.fromisoformat(match.group("base") + zone)
        fraction = (match.group("fraction") or "").ljust(9, "0")
        return _datetime_to_ns(base) + int(fraction)
    raise MalformedResultError(f"unexpected timestamp type: {type(timestamp).__name__}")


def _datetime_to_ns(value: datetime) -> int:
    delta = value - datetime(1970, 1, 1, tzinfo=timezone.utc)
    return (delta.days * 86400 + delta.seconds) * 10**9 + delta.microseconds * 1000
