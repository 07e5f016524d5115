from datetime import date, datetime, time, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to aware UTC. Naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def combine_local(date_str: str, time_str: str, tz_name: str) -> datetime:
    """
    Combine a ``YYYY-MM-DD`` date and ``HH:MM[:SS]`` time entered in ``tz_name``
    into an aware UTC instant.

    Raises:
        ValueError: If either part cannot be parsed or the timezone is unknown
    """
    try:
        tz = ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        raise ValueError(f"Unknown timezone: {tz_name}")
    local = datetime.combine(
        date.fromisoformat(date_str.strip()),
        time.fromisoformat(time_str.strip()),
    )
    return local.replace(tzinfo=tz).astimezone(timezone.utc)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    value = as_utc(value)
    return value.isoformat() if value else None
