"""
Time windows for bucketing sets into calendar days and weeks.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import List, Optional
from zoneinfo import ZoneInfo

WINDOW_DAY = "day"
WINDOW_WEEK = "week"
WINDOW_KINDS = (WINDOW_DAY, WINDOW_WEEK)


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval [start, end) used for bucketing."""
    start: datetime
    end: datetime
    kind: str

    @property
    def label(self) -> str:
        return self.start.date().isoformat()

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def resolve_zone(name: Optional[str]) -> tzinfo:
    """Resolve a zone name; UTC does not need the tz database."""
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(now: Optional[datetime]) -> datetime:
    """Reference time; None means now, naive values are taken as UTC."""
    if now is None:
        return utc_now()
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def local_day(moment: datetime, zone: tzinfo) -> date:
    """Calendar day of a timestamp in the analytics zone."""
    return moment.astimezone(zone).date()


def day_start(day: date, zone: tzinfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=zone)


def lookback_start(lookback_days: int, now: datetime, zone: tzinfo) -> datetime:
    """
    Start of the calendar day `lookback_days` before now.

    Raises:
        ValueError: If lookback_days < 1
    """
    if lookback_days < 1:
        raise ValueError(f"lookback_days must be >= 1, got {lookback_days}")
    return day_start(local_day(now, zone) - timedelta(days=lookback_days), zone)


def build_windows(
    window_count: int,
    kind: str,
    now: datetime,
    zone: tzinfo,
) -> List[TimeWindow]:
    """
    Build contiguous windows ending with the one that contains now.

    Weeks start on Monday. Boundaries are local midnights, so a window
    spanning a DST change is 23 or 25 hours long.

    Args:
        window_count: Number of windows
        kind: "day" or "week"
        now: Reference time (aware)
        zone: Zone that defines day boundaries

    Returns:
        Windows ordered oldest first

    Raises:
        ValueError: On a non-positive count or unknown kind
    """
    if window_count < 1:
        raise ValueError(f"window_count must be >= 1, got {window_count}")
    if kind not in WINDOW_KINDS:
        raise ValueError(f"Unknown window kind: {kind}")

    today = local_day(now, zone)
    if kind == WINDOW_DAY:
        step = timedelta(days=1)
        current = today
    else:
        step = timedelta(weeks=1)
        current = today - timedelta(days=today.weekday())

    windows = []
    for offset in range(window_count - 1, -1, -1):
        first_day = current - step * offset
        windows.append(TimeWindow(
            start=day_start(first_day, zone),
            end=day_start(first_day + step, zone),
            kind=kind,
        ))
    return windows
