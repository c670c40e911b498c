import email.utils as eut
import math
import re
import time
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Union

from .constants import (
    DEFAULT_RETRY_AFTER_S,
    RATE_LIMIT_LIMIT_HEADER,
    RATE_LIMIT_REMAINING_HEADER,
    RATE_LIMIT_RESET_HEADER,
    RETRY_AFTER_HEADER,
)
from .types import RateLimitInfo

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _header(headers: Mapping[str, str], name: str) -> Union[str, None]:
    # httpx.Headers is case-insensitive already; plain dicts are not
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for k, v in headers.items():
        if k.lower() == lowered:
            return v
    return None


def _parse_int(value: Union[str, None]) -> Union[int, None]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _leading_int(value: str) -> Union[int, None]:
    # "1.5" -> 1, "30 seconds" -> 30; HTTP-dates start with a weekday name
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def _epoch_to_datetime(seconds: int) -> Union[datetime, None]:
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def parse_rate_limit(headers: Mapping[str, str]) -> Union[RateLimitInfo, None]:
    """Build a RateLimitInfo from X-RateLimit-* headers.

    Returns None unless all three headers are present and numeric, and the
    reset epoch is representable, so callers never mix old and new values.
    """
    remaining = _parse_int(_header(headers, RATE_LIMIT_REMAINING_HEADER))
    limit = _parse_int(_header(headers, RATE_LIMIT_LIMIT_HEADER))
    reset = _parse_int(_header(headers, RATE_LIMIT_RESET_HEADER))
    if remaining is None or limit is None or reset is None:
        return None
    reset_time = _epoch_to_datetime(reset)
    if reset_time is None:
        return None
    return RateLimitInfo(remaining=remaining, limit=limit, reset_time=reset_time)


def parse_retry_after(
    headers: Mapping[str, str],
    now: Union[float, None] = None,
    default: int = DEFAULT_RETRY_AFTER_S,
) -> int:
    """Seconds to wait according to Retry-After (delta-seconds or HTTP-date)."""
    ra = _header(headers, RETRY_AFTER_HEADER)
    if ra is None or not ra.strip():
        return default
    seconds = _leading_int(ra)
    if seconds is not None:
        return max(0, seconds)
    # HTTP-date per RFC 7231
    try:
        ts = eut.parsedate_to_datetime(ra)
    except (TypeError, ValueError):
        return default
    if ts is None:
        return default
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    now = time.time() if now is None else now
    # Round up so short delays are not truncated to zero
    return max(0, math.ceil(ts.timestamp() - now))


def parse_limit(headers: Mapping[str, str]) -> int:
    return _parse_int(_header(headers, RATE_LIMIT_LIMIT_HEADER)) or 0
