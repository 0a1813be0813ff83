import datetime
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from PySide6.QtCore import QSettings

from .utils import (
    DEFAULT_DISPLAY_MINUTES,
    DEFAULT_GRID_INTERVAL_MS,
    MAX_DISPLAY_MINUTES,
    MIN_DISPLAY_MINUTES,
    clamp,
    ensure_aware,
    millis,
    now,
)

logger = logging.getLogger(__name__)

ChangeListener = Callable[["TimeInterval"], None]


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).lower() == "true"


class TimeInterval:
    """Interval between two timezone-aware instants.

    ``start <= end`` holds after every validated mutation. Listeners are
    called with the interval after each successful change, including changes
    that leave the values as they were.
    """

    def __init__(
        self,
        start: Optional[datetime.datetime] = None,
        end: Optional[datetime.datetime] = None,
    ):
        if start is None:
            start = now()
        start = ensure_aware(start)
        if end is None:
            end = start
        end = ensure_aware(end)
        if start > end:
            raise ValueError("Start must be before end.")
        self._start = start
        self._end = end
        # dict keeps registration order and gives set semantics
        self._listeners: Dict[ChangeListener, None] = {}

    # -------------------------
    # Change notification
    # -------------------------

    def add_change_listener(self, listener: Optional[ChangeListener]) -> None:
        if listener is not None:
            self._listeners[listener] = None

    def remove_change_listener(self, listener: Optional[ChangeListener]) -> None:
        if listener is None:
            return
        self._listeners.pop(listener, None)

    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # -------------------------
    # Endpoints
    # -------------------------

    @property
    def start(self) -> datetime.datetime:
        return self._start

    @start.setter
    def start(self, value: datetime.datetime) -> None:
        if value is None:
            raise TypeError("Can not set the interval to a null start.")
        value = ensure_aware(value)
        if value > self._end:
            raise ValueError("End must be after start.")
        self._start = value
        self._notify()

    @property
    def end(self) -> datetime.datetime:
        return self._end

    @end.setter
    def end(self, value: datetime.datetime) -> None:
        if value is None:
            raise TypeError("Can not set the interval to a null end.")
        value = ensure_aware(value)
        if value < self._start:
            raise ValueError("Start must be before end.")
        self._end = value
        self._notify()

    def set_start_date(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        day: Optional[int] = None,
    ) -> None:
        self.start = _replace_date(self._start, year, month, day)

    def set_end_date(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        day: Optional[int] = None,
    ) -> None:
        self.end = _replace_date(self._end, year, month, day)

    def set_start_time(self, hour: int, minute: int) -> None:
        self.start = self._start.replace(hour=hour, minute=minute)

    def set_end_time(self, hour: int, minute: int) -> None:
        self.end = self._end.replace(hour=hour, minute=minute)

    def shift_start(self, milliseconds: int) -> None:
        """Move the start by a signed amount of milliseconds.

        The order of the endpoints is not checked here; pushing the start past
        the end is the caller's responsibility.
        """
        self._start = self._start + millis(milliseconds)
        self._notify()

    def shift_end(self, milliseconds: int) -> None:
        """Move the end by a signed amount of milliseconds, unchecked."""
        self._end = self._end + millis(milliseconds)
        self._notify()

    @property
    def duration(self) -> datetime.timedelta:
        return self._end - self._start

    @property
    def duration_ms(self) -> int:
        d = self.duration
        return (d.days * 86400 + d.seconds) * 1000 + d.microseconds // 1000

    def overlaps(self, start: datetime.datetime, end: datetime.datetime) -> bool:
        return self._start < end and self._end > start

    # -------------------------
    # Value semantics
    # -------------------------

    def clone(self) -> "TimeInterval":
        return TimeInterval(self._start, self._end)

    def __copy__(self) -> "TimeInterval":
        return self.clone()

    def __deepcopy__(self, memo) -> "TimeInterval":
        return self.clone()

    def __eq__(self, other):
        if not isinstance(other, TimeInterval):
            return NotImplemented
        return self._start == other._start and self._end == other._end

    __hash__ = None

    def __lt__(self, other: "TimeInterval") -> bool:
        return self._start < other._start

    def __le__(self, other: "TimeInterval") -> bool:
        return self._start <= other._start

    def __gt__(self, other: "TimeInterval") -> bool:
        return self._start > other._start

    def __ge__(self, other: "TimeInterval") -> bool:
        return self._start >= other._start

    def __repr__(self) -> str:
        return f"TimeInterval(start={self._start.isoformat()}, end={self._end.isoformat()})"


def _replace_date(
    value: datetime.datetime,
    year: Optional[int],
    month: Optional[int],
    day: Optional[int],
) -> datetime.datetime:
    return value.replace(
        year=value.year if year is None else year,
        month=value.month if month is None else month,
        day=value.day if day is None else day,
    )


@dataclass
class SelectorSettings:
    display_minutes: int = DEFAULT_DISPLAY_MINUTES
    grid_interval_ms: int = DEFAULT_GRID_INTERVAL_MS
    date_format: str = "%d/%m/%Y"
    time_format: str = "%H:%M"

    # Optional daylight band behind the ruler
    show_daylight: bool = False
    location_lat: float = 51.5074
    location_lon: float = -0.1278

    def normalized(self) -> "SelectorSettings":
        sm = self.clone()
        sm.display_minutes = clamp(int(sm.display_minutes), MIN_DISPLAY_MINUTES, MAX_DISPLAY_MINUTES)
        if int(sm.grid_interval_ms) <= 0:
            sm.grid_interval_ms = DEFAULT_GRID_INTERVAL_MS
        return sm

    def clone(self) -> "SelectorSettings":
        return SelectorSettings(
            display_minutes=self.display_minutes,
            grid_interval_ms=self.grid_interval_ms,
            date_format=self.date_format,
            time_format=self.time_format,
            show_daylight=self.show_daylight,
            location_lat=self.location_lat,
            location_lon=self.location_lon,
        )

    def to_qsettings(self, qs: QSettings):
        qs.setValue("display_minutes", self.display_minutes)
        qs.setValue("grid_interval_ms", self.grid_interval_ms)
        qs.setValue("date_format", self.date_format)
        qs.setValue("time_format", self.time_format)
        qs.setValue("show_daylight", self.show_daylight)
        qs.setValue("location_lat", self.location_lat)
        qs.setValue("location_lon", self.location_lon)

    @staticmethod
    def from_qsettings(qs: QSettings) -> "SelectorSettings":
        sm = SelectorSettings()
        try:
            sm.display_minutes = int(qs.value("display_minutes", sm.display_minutes))
        except (TypeError, ValueError):
            logger.debug("Ignoring unreadable display_minutes setting")
        try:
            sm.grid_interval_ms = int(qs.value("grid_interval_ms", sm.grid_interval_ms))
        except (TypeError, ValueError):
            logger.debug("Ignoring unreadable grid_interval_ms setting")
        sm.date_format = str(qs.value("date_format", sm.date_format))
        sm.time_format = str(qs.value("time_format", sm.time_format))
        sm.show_daylight = parse_bool(qs.value("show_daylight", sm.show_daylight))
        try:
            sm.location_lat = float(qs.value("location_lat", sm.location_lat))
            sm.location_lon = float(qs.value("location_lon", sm.location_lon))
        except (TypeError, ValueError):
            sm.location_lat = SelectorSettings.location_lat
            sm.location_lon = SelectorSettings.location_lon
        return sm.normalized()
