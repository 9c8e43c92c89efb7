"""Time-of-day and weekday codes sent alongside the sensor parameters"""

import logging
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def time_numeric(now: Optional[datetime] = None) -> float:
    """Encode the wall-clock time as HHMMSS digits (14:05:09 -> 140509.0)"""
    now = now or datetime.now()
    try:
        return float(now.strftime("%H%M%S"))
    except ValueError as e:
        logger.debug(f"Could not encode time {now!r}: {e}")
        return 0.0


def weekday_numeric(now: Optional[datetime] = None) -> float:
    """Weekday code, Monday=0 through Sunday=6"""
    now = now or datetime.now()
    return float(now.weekday())


def weekday_name(now: Optional[datetime] = None) -> str:
    """English weekday name for display ("Monday" .. "Sunday")"""
    now = now or datetime.now()
    return WEEKDAY_NAMES[now.weekday()]
