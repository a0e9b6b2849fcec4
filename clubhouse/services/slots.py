"""
Hourly slot labels and club clock helpers
"""

from datetime import date, datetime, time as dt_time
from typing import List, Optional
from zoneinfo import ZoneInfo

from clubhouse.core.config import settings


def slot_labels() -> List[str]:
    """Bookable hour labels, "09:00" up to the last hour before closing"""
    return [f"{hour:02d}:00" for hour in range(settings.OPENING_HOUR, settings.CLOSING_HOUR)]


def club_now() -> datetime:
    """Current wall-clock time at the club, timezone-naive"""
    return datetime.now(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)


def is_open(now: Optional[datetime] = None) -> bool:
    now = now or club_now()
    return settings.OPENING_HOUR <= now.hour < settings.CLOSING_HOUR


def is_past(day: date, label: str, now: Optional[datetime] = None) -> bool:
    """A slot is past once it has started"""
    now = now or club_now()
    hour, minute = (int(part) for part in label.split(":"))
    return datetime.combine(day, dt_time(hour, minute)) <= now
