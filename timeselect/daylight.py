import datetime
import logging
from typing import List, Optional, Tuple

from astral import Observer
from astral.sun import sunrise, sunset

from .utils import day_zone

logger = logging.getLogger(__name__)

Span = Tuple[datetime.datetime, datetime.datetime]


def sunrise_sunset(
    day: datetime.date, lat: float, lon: float, tzinfo: Optional[datetime.tzinfo] = None
) -> Optional[Span]:
    """Sunrise and sunset on ``day``; a full or empty span near the poles."""
    tzinfo = day_zone(day, tzinfo)
    day_start = datetime.datetime.combine(day, datetime.time(0, 0), tzinfo=tzinfo)
    day_end = day_start + datetime.timedelta(days=1)
    observer = Observer(latitude=lat, longitude=lon, elevation=0.0)
    try:
        rise = sunrise(observer, date=day, tzinfo=tzinfo)
        set_ = sunset(observer, date=day, tzinfo=tzinfo)
    except ValueError as exc:
        message = str(exc).lower()
        if "always above" in message:
            return day_start, day_end
        if "always below" in message:
            return day_start, day_start
        logger.debug("No sun times for %s at %.4f,%.4f: %s", day, lat, lon, exc)
        return None
    if set_ < rise:
        rise, set_ = set_, rise
    return rise, set_


def daylight_spans(
    window_start: datetime.datetime,
    window_end: datetime.datetime,
    lat: float,
    lon: float,
    tzinfo: Optional[datetime.tzinfo] = None,
) -> List[Span]:
    """Daylight periods overlapping the window, clipped to it."""
    spans: List[Span] = []
    day = window_start.astimezone(tzinfo).date() - datetime.timedelta(days=1)
    last_day = window_end.astimezone(tzinfo).date()
    while day <= last_day:
        span = sunrise_sunset(day, lat, lon, tzinfo)
        day += datetime.timedelta(days=1)
        if span is None:
            continue
        s = max(span[0], window_start)
        e = min(span[1], window_end)
        if e > s:
            spans.append((s, e))
    return spans
