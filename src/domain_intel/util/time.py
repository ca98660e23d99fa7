"""Timestamp helpers for run directories and metadata."""

import time
from datetime import datetime, timezone
from typing import Optional


def now_utc() -> datetime:
    """Current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def timestamp_str(dt: Optional[datetime] = None) -> str:
    """YYYYMMDD_HHMMSS, safe for filenames."""
    return (dt or now_utc()).strftime("%Y%m%d_%H%M%S")


def date_str(dt: Optional[datetime] = None) -> str:
    """YYYY-MM-DD, used for output directory names."""
    return (dt or now_utc()).strftime("%Y-%m-%d")


def elapsed_ms(start: float) -> float:
    """Milliseconds since a time.monotonic() reading."""
    return (time.monotonic() - start) * 1000
