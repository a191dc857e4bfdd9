"""Daily run-time gate for the periodic trigger (core domain).

The periodic trigger may tick as often as it likes; a pass only runs once the
configured time of day has been reached and no run has happened since then.
Manual triggers skip this gate entirely.
"""

from __future__ import annotations

from datetime import datetime, time
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.errors import ConfigurationError


def parse_run_time(value: str) -> time:
    """Parse an "HH:MM" run time."""

    hour_text, sep, minute_text = str(value).strip().partition(":")
    if not sep or not hour_text.isdigit() or not minute_text.isdigit():
        raise ConfigurationError(f"run_time must look like HH:MM, got {value!r}")
    hour, minute = int(hour_text), int(minute_text)
    if hour > 23 or minute > 59:
        raise ConfigurationError(f"run_time out of range: {value!r}")
    return time(hour=hour, minute=minute)


def resolve_timezone(name: Optional[str]):
    """Return a tzinfo for the IANA name, or None for the host's local zone."""

    if not name:
        return None
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError as exc:
        raise ConfigurationError(f"Unknown timezone: {name}") from exc


def to_local(timestamp: int, tz_name: Optional[str] = None) -> datetime:
    """Convert epoch seconds to an aware datetime in the site time zone."""

    tz = resolve_timezone(tz_name)
    if tz is None:
        return datetime.fromtimestamp(timestamp).astimezone()
    return datetime.fromtimestamp(timestamp, tz)


def scheduled_run_at(now: datetime, run_time: time) -> datetime:
    """Today's run instant, in the same zone as ``now``."""

    return now.replace(hour=run_time.hour, minute=run_time.minute, second=0, microsecond=0)


def is_run_due(now: datetime, run_time: time, last_run: Optional[datetime]) -> bool:
    """
    Decide whether the periodic trigger should run a pass now.

    Logic:
    - Before today's run time, never due.
    - After it, due unless a run already happened at or after today's run time.
    """

    scheduled = scheduled_run_at(now, run_time)
    if now < scheduled:
        return False
    if last_run is None:
        return True
    return last_run < scheduled
