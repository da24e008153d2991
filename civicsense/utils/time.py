"""Time utilities (UTC now, epoch-millisecond helpers)."""
from __future__ import annotations
from datetime import datetime, timezone

MS_PER_DAY = 24 * 60 * 60 * 1000

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def now_ms() -> int:
    """Current wall-clock instant as epoch milliseconds (the report timestamp unit)."""
    return int(utc_now().timestamp() * 1000)

def days_to_ms(days: float) -> int:
    return int(days * MS_PER_DAY)

__all__ = ["MS_PER_DAY", "utc_now", "now_ms", "days_to_ms"]
