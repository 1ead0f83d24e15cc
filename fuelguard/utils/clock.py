# fuelguard/utils/clock.py
"""
Time helpers shared by the QR registry and the quota engine.
All timestamps are naive local datetimes so "next midnight" is the operator's midnight.
"""

import math
from datetime import datetime, timedelta


def local_now() -> datetime:
    return datetime.now()


def next_midnight(moment: datetime) -> datetime:
    """The first local midnight strictly after `moment`."""
    return (moment + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)


def epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def ceil_units(delta: timedelta, unit: timedelta) -> int:
    """Ceiling of `delta` expressed in `unit` (hours, days...)."""
    return math.ceil(delta / unit)
