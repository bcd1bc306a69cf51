"""Human-readable timestamps for the conversation list and message bubbles."""

from datetime import datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo


def _aware(ts: datetime) -> datetime:
    # Mongo hands back naive UTC datetimes unless the client is tz-aware
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def display_zone(name: str) -> tzinfo:
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def relative_time(ts: datetime, now: Optional[datetime] = None, zone: Optional[tzinfo] = None) -> str:
    """Bucket the age of ``ts`` into "Just now", "{n}m ago", "{n}h ago", "{n}d ago" or a short date."""
    ts = _aware(ts)
    now = _aware(now) if now is not None else datetime.now(timezone.utc)
    diff_seconds = (now - ts).total_seconds()
    minutes = int(diff_seconds // 60)
    hours = int(diff_seconds // 3600)
    days = int(diff_seconds // 86400)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    if days < 7:
        return f"{days}d ago"
    local = ts.astimezone(zone or timezone.utc)
    return f"{local.month}/{local.day}/{local.year}"


def time_of_day(ts: datetime, zone: Optional[tzinfo] = None) -> str:
    local = _aware(ts).astimezone(zone or timezone.utc)
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {suffix}"
