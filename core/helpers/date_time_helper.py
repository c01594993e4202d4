"""
date_time_helper.py

Helpers for conversion and formatting of date and time values, with focus on
UTC storage and local (Asia/Tokyo) display.

Draft timestamps are epoch milliseconds; log timestamps are ISO strings.
"""

import time
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

# Local timezone for display (sites are in Japan)
LOCAL_TZ = ZoneInfo("Asia/Tokyo")


def now_millis() -> int:
    """Current wall clock in epoch milliseconds."""
    return int(time.time() * 1000)


def utc_to_local_str(utc_iso: str) -> str:
    """
    Formats a UTC ISO8601 timestamp as a human-readable local string.

    :param utc_iso: UTC time as ISO string (from DB/logs)
    :return: String in format "YYYY/MM/DD HH:MM:SS" (local time)
    """
    dt_utc = datetime.fromisoformat(utc_iso)
    if dt_utc.tzinfo is None:
        dt_utc = dt_utc.replace(tzinfo=timezone.utc)
    return dt_utc.astimezone(LOCAL_TZ).strftime("%Y/%m/%d %H:%M:%S")


def millis_to_local_str(millis: int) -> str:
    """Formats an epoch-millisecond timestamp (draft lastModified) for display."""
    dt_utc = datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    return dt_utc.astimezone(LOCAL_TZ).strftime("%Y/%m/%d %H:%M")
