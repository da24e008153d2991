"""
Utilities package initialization.
"""
from .logger import get_logger, log_business_event, setup_logging
from .time import now_ms, utc_now

__all__ = ["get_logger", "log_business_event", "setup_logging", "now_ms", "utc_now"]
