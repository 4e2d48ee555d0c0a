"""Utility modules."""

from cafe_backoffice.utils.clock import Clock, FixedClock, SystemClock
from cafe_backoffice.utils.logging import setup_logging

__all__ = ["setup_logging", "Clock", "SystemClock", "FixedClock"]
