from dataclasses import dataclass
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Any, Optional

try:
    from zoneinfo import ZoneInfo  # Python 3.9+
except Exception:  # pragma: no cover
    ZoneInfo = None  # type: ignore


@dataclass(frozen=True)
class ReminderWindow:
    """The half-open interval (now, end] a due date must fall in to be reminded."""

    now: datetime
    end: datetime

    def contains(self, ts: Optional[datetime]) -> bool:
        if ts is None:
            return False
        return self.now < ts <= self.end


def utcnow() -> datetime:
    return datetime.now(dt_timezone.utc)


def compute_window(now: datetime, minutes: int) -> ReminderWindow:
    now = to_utc_aware(now)
    return ReminderWindow(now=now, end=now + timedelta(minutes=minutes))


def to_utc_aware(dt: datetime) -> datetime:
    """
    Normalize any datetime to UTC-aware.
    - Aware datetimes are converted to UTC
    - Naive datetimes are assumed UTC and tz attached
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=dt_timezone.utc)
    return dt.astimezone(dt_timezone.utc)


def coerce_timestamp(value: Any) -> Optional[datetime]:
    """
    Best-effort conversion of a stored due date to a UTC-aware datetime.

    Firestore hands back ``DatetimeWithNanoseconds`` (a datetime subclass) for
    native timestamps; the web app may also store ISO strings or epoch
    milliseconds. Anything else returns None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_utc_aware(value)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=dt_timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            # Accept both Z and +00:00
            return to_utc_aware(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


def get_zoneinfo(tz_name: Optional[str]) -> Optional["ZoneInfo"]:
    if not tz_name or not ZoneInfo:
        return None
    try:
        return ZoneInfo(tz_name)
    except Exception:
        return None


def _localize(ts: datetime, tz_name: Optional[str]) -> datetime:
    tz = get_zoneinfo(tz_name)
    ts = to_utc_aware(ts)
    return ts.astimezone(tz) if tz is not None else ts


def format_due_time(ts: datetime, tz_name: Optional[str] = None) -> str:
    """en-PH short style used in task reminders, e.g. ``Oct 18, 03:45 PM``."""
    local = _localize(ts, tz_name)
    return f"{local:%b} {local.day}, {local:%I:%M %p}"


def format_plan_time(ts: datetime, tz_name: Optional[str] = None) -> str:
    """Same as format_due_time with the short weekday, e.g. ``Sat, Oct 18, 03:45 PM``."""
    local = _localize(ts, tz_name)
    return f"{local:%a}, {format_due_time(local, tz_name)}"


def isoformat_utc(ts: datetime) -> str:
    """ISO string with millisecond precision and a Z suffix, the shape the web app parses."""
    return to_utc_aware(ts).isoformat(timespec="milliseconds").replace("+00:00", "Z")
