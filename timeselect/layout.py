"""Geometry of a single render pass.

Everything here is computed from plain values (window bounds, widget rect,
interval) and returns Qt value types only, so it can be exercised without a
display. The widget paints what these functions return and keeps the
resulting :class:`IntervalGeometry` for hit-testing until the next paint.
"""

import datetime
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from PySide6.QtCore import QRect

from .models import TimeInterval
from .utils import (
    MS_PER_HOUR,
    format_date,
    from_epoch_minutes,
    millis,
    minutes_between,
    to_epoch_minutes,
)

LINE_STEP_MINUTES = 30
KNOB_WIDTH = 5
DATE_LABEL_Y = 10
HOUR_LABEL_Y = 20
DEFAULT_DATE_ANCHOR = 5


class LineKind:
    DAY = "day"
    HOUR = "hour"
    HALF_HOUR = "half_hour"


@dataclass
class RulerLine:
    x: int
    kind: str
    at: datetime.datetime
    label: Optional[str] = None


@dataclass
class RulerLayout:
    lines: List[RulerLine] = field(default_factory=list)
    date_label: str = ""
    date_label_x: int = DEFAULT_DATE_ANCHOR


@dataclass
class IntervalGeometry:
    body: QRect
    start_knob: QRect
    end_knob: QRect
    start_label: str = ""
    end_label: str = ""


@dataclass
class TimelineFrame:
    """Maps instants in ``[window_start, window_end)`` onto ``rect``."""

    window_start: datetime.datetime
    window_end: datetime.datetime
    rect: QRect

    @property
    def span_minutes(self) -> float:
        return max(minutes_between(self.window_start, self.window_end), 1e-9)

    def x_for(self, instant: datetime.datetime) -> int:
        offset = minutes_between(self.window_start, instant)
        return self.rect.left() + int(self.rect.width() * offset / self.span_minutes)


def ruler_lines(
    frame: TimelineFrame,
    tz: Optional[datetime.tzinfo] = None,
    date_format: str = "%d/%m/%Y",
) -> RulerLayout:
    """Half-hour guide lines for the visible window.

    Lines start at the nearest 30 minute boundary at or before the window
    start. A line whose local date differs from the previous one is a day
    line and moves the date label anchor next to it.
    """
    first = to_epoch_minutes(frame.window_start)
    first -= first % LINE_STEP_MINUTES
    count = int(frame.span_minutes // LINE_STEP_MINUTES)

    at = from_epoch_minutes(first, tz)
    day = at.date()
    layout = RulerLayout()
    for i in range(count + 1):
        at = from_epoch_minutes(first + i * LINE_STEP_MINUTES, tz)
        x = frame.x_for(at)
        if at.date() != day:
            day = at.date()
            layout.date_label_x = x + 2
            layout.lines.append(RulerLine(x, LineKind.DAY, at, str(at.hour)))
        elif at.minute == 0:
            layout.lines.append(RulerLine(x, LineKind.HOUR, at, str(at.hour)))
        else:
            layout.lines.append(RulerLine(x, LineKind.HALF_HOUR, at))
    layout.date_label = format_date(at, date_format)
    return layout


def interval_geometry(
    frame: TimelineFrame,
    interval: Optional[TimeInterval],
    time_format: str = "%H:%M",
    tz: Optional[datetime.tzinfo] = None,
) -> Optional[IntervalGeometry]:
    """Body and knob rectangles for ``interval``, or None if it is not visible.

    Offsets come from the instants themselves, so intervals crossing
    midnight, month or year boundaries land where they belong.
    """
    if interval is None:
        return None
    if not interval.overlaps(frame.window_start, frame.window_end):
        return None
    top = frame.rect.top() + DATE_LABEL_Y + 2
    height = max(1, frame.rect.bottom() - top + 1)
    x0 = frame.x_for(interval.start)
    x1 = frame.x_for(interval.end)
    return IntervalGeometry(
        body=QRect(x0, top, x1 - x0, height),
        start_knob=QRect(x0, top, KNOB_WIDTH, height),
        end_knob=QRect(x1 - KNOB_WIDTH + 1, top, KNOB_WIDTH, height),
        start_label=interval.start.astimezone(tz).strftime(time_format),
        end_label=interval.end.astimezone(tz).strftime(time_format),
    )


def centered_window(
    interval_start: datetime.datetime, display_minutes: int
) -> Tuple[datetime.datetime, datetime.datetime]:
    start = interval_start - millis(MS_PER_HOUR)
    return start, start + datetime.timedelta(minutes=display_minutes)


def needs_recenter(
    interval: Optional[TimeInterval],
    window_start: datetime.datetime,
    window_end: datetime.datetime,
) -> bool:
    """True when the interval start is not inside ``[window_start, window_end)``."""
    if interval is None:
        return False
    return not (window_start <= interval.start < window_end)
