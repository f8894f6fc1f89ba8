from __future__ import annotations

from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo

# Log lines carry naive wall-clock times, so "now" is naive as well.
Clock = Callable[[], datetime]


def system_clock(tz: ZoneInfo) -> Clock:
    def now() -> datetime:
        return datetime.now(tz).replace(tzinfo=None)

    return now


def fixed_clock(value: datetime) -> Clock:
    """Clock that always reports ``value``."""
    naive = value.replace(tzinfo=None)

    def now() -> datetime:
        return naive

    return now
