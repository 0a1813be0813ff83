import datetime
from typing import Optional

MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE

MIN_DISPLAY_MINUTES = 3 * 60
MAX_DISPLAY_MINUTES = 24 * 60
DEFAULT_DISPLAY_MINUTES = 6 * 60
DEFAULT_GRID_INTERVAL_MS = 15 * MS_PER_MINUTE
WHEEL_STEP_MINUTES = 15

_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


def clamp(v, lo, hi):
    return max(lo, min(hi, v))


def trunc_div(a: int, b: int) -> int:
    # integer division rounding toward zero
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def snap_to_grid(ms: int, grid_ms: int) -> int:
    return trunc_div(ms, grid_ms) * grid_ms


def day_zone(day: datetime.date, tz: Optional[datetime.tzinfo] = None) -> datetime.tzinfo:
    """Zone to use for a whole calendar day; the local offset at noon when tz is None."""
    if tz is not None:
        return tz
    return datetime.datetime.combine(day, datetime.time(12, 0)).astimezone().tzinfo


def now() -> datetime.datetime:
    return datetime.datetime.now().astimezone()


def ensure_aware(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.astimezone()
    return value


def to_epoch_ms(value: datetime.datetime) -> int:
    delta = ensure_aware(value) - _EPOCH
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000


def to_epoch_minutes(value: datetime.datetime) -> int:
    return to_epoch_ms(value) // MS_PER_MINUTE


def from_epoch_minutes(minutes: int, tz: Optional[datetime.tzinfo] = None) -> datetime.datetime:
    value = _EPOCH + datetime.timedelta(minutes=minutes)
    # astimezone(None) applies the system zone rules to this instant
    return value.astimezone(tz)


def millis(ms: int) -> datetime.timedelta:
    return datetime.timedelta(milliseconds=ms)


def minutes_between(start: datetime.datetime, end: datetime.datetime) -> float:
    return (end - start).total_seconds() / 60.0


def format_date(value: datetime.datetime, fmt: str = "%d/%m/%Y") -> str:
    return value.strftime(fmt)
