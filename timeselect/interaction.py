"""Pointer state machine of the interval selector.

The controller owns the visible window and the drag state but knows nothing
about painting or Qt events, so gestures can be replayed in tests with plain
points. The widget feeds it the geometry of the last paint.
"""

import datetime
import logging
from typing import Optional

from PySide6.QtCore import QPoint, QRect, Qt

from .layout import IntervalGeometry, TimelineFrame, centered_window, needs_recenter
from .models import TimeInterval
from .utils import (
    DEFAULT_DISPLAY_MINUTES,
    DEFAULT_GRID_INTERVAL_MS,
    MAX_DISPLAY_MINUTES,
    MIN_DISPLAY_MINUTES,
    WHEEL_STEP_MINUTES,
    millis,
    now,
    snap_to_grid,
    to_epoch_ms,
    trunc_div,
)

logger = logging.getLogger(__name__)


class DragTarget:
    NONE = "none"
    COMPONENT = "component"
    INTERVAL_BODY = "interval_body"
    START_KNOB = "start_knob"
    END_KNOB = "end_knob"


def validate_display_minutes(minutes: int) -> int:
    minutes = int(minutes)
    if minutes < MIN_DISPLAY_MINUTES:
        raise ValueError("Display interval must not be less than 3 hours.")
    if minutes > MAX_DISPLAY_MINUTES:
        raise ValueError("Display interval must not be greater than 24 hours.")
    return minutes


class SelectionController:
    def __init__(
        self,
        display_minutes: int = DEFAULT_DISPLAY_MINUTES,
        grid_interval_ms: int = DEFAULT_GRID_INTERVAL_MS,
        window_start: Optional[datetime.datetime] = None,
    ):
        self.display_minutes = validate_display_minutes(display_minutes)
        self.grid_interval_ms = DEFAULT_GRID_INTERVAL_MS
        self.set_grid_interval(grid_interval_ms)
        self.window_start = window_start or now()
        self.interval: Optional[TimeInterval] = None
        self.geometry: Optional[IntervalGeometry] = None

        # valid only while a drag is in progress
        self.target = DragTarget.NONE
        self.last_x: Optional[int] = None

    # -------------------------
    # Window & configuration
    # -------------------------

    @property
    def window_end(self) -> datetime.datetime:
        return self.window_start + datetime.timedelta(minutes=self.display_minutes)

    @property
    def window_ms(self) -> int:
        return to_epoch_ms(self.window_end) - to_epoch_ms(self.window_start)

    def frame(self, rect: QRect) -> TimelineFrame:
        return TimelineFrame(self.window_start, self.window_end, rect)

    def set_display_minutes(self, minutes: int) -> None:
        self.display_minutes = validate_display_minutes(minutes)

    def set_grid_interval(self, grid_interval_ms: int) -> None:
        grid_interval_ms = int(grid_interval_ms)
        if grid_interval_ms <= 0:
            raise ValueError("Grid interval must be a positive amount of milliseconds.")
        self.grid_interval_ms = grid_interval_ms

    def pan(self, milliseconds: int) -> None:
        self.window_start = self.window_start + millis(milliseconds)

    def set_interval(self, interval: Optional[TimeInterval]) -> bool:
        """Bind ``interval``; returns True when the window had to be re-centered."""
        self.interval = interval
        self.geometry = None
        self.release()
        if needs_recenter(interval, self.window_start, self.window_end):
            self.show_interval()
            return True
        return False

    def show_interval(self) -> None:
        if self.interval is None:
            return
        self.window_start, _ = centered_window(self.interval.start, self.display_minutes)
        logger.debug("Window re-centered at %s", self.window_start.isoformat())

    # -------------------------
    # Hit testing
    # -------------------------

    def classify(self, pos: QPoint) -> str:
        geom = self.geometry
        if geom is not None:
            if geom.start_knob.contains(pos):
                return DragTarget.START_KNOB
            if geom.end_knob.contains(pos):
                return DragTarget.END_KNOB
            if geom.body.contains(pos):
                return DragTarget.INTERVAL_BODY
        return DragTarget.COMPONENT

    def cursor_for(self, pos: QPoint) -> Qt.CursorShape:
        if self.classify(pos) in (DragTarget.START_KNOB, DragTarget.END_KNOB):
            return Qt.SizeHorCursor
        return Qt.SizeAllCursor

    # -------------------------
    # Gestures
    # -------------------------

    @property
    def dragging(self) -> bool:
        return self.target != DragTarget.NONE

    def press(self, pos: QPoint) -> str:
        self.target = self.classify(pos)
        self.last_x = pos.x()
        logger.debug("Drag started on %s at x=%d", self.target, pos.x())
        return self.target

    def drag_to(self, pos: QPoint, width: int) -> bool:
        """Apply the horizontal motion since the last accepted position.

        Returns False when the motion is below one grid interval; the last
        position is then kept so small moves add up.
        """
        if not self.dragging or self.last_x is None or width <= 0:
            return False

        offset_px = self.last_x - pos.x()
        offset_ms = trunc_div(self.window_ms * offset_px, width)
        if abs(offset_ms) < self.grid_interval_ms:
            return False
        offset_ms = snap_to_grid(offset_ms, self.grid_interval_ms)

        interval = self.interval
        if self.target == DragTarget.COMPONENT or interval is None:
            self.pan(offset_ms)
        elif self.target == DragTarget.INTERVAL_BODY:
            interval.shift_start(-offset_ms)
            interval.shift_end(-offset_ms)
            if interval.start < self.window_start:
                self.pan(-offset_ms)
            if interval.end > self.window_end:
                self.pan(-offset_ms)
        elif self.target == DragTarget.START_KNOB:
            # the start knob stops at the end
            interval.shift_start(min(-offset_ms, interval.duration_ms))
            if interval.start < self.window_start:
                self.pan(-offset_ms)
        elif self.target == DragTarget.END_KNOB:
            interval.shift_end(max(-offset_ms, -interval.duration_ms))
            if interval.end > self.window_end:
                self.pan(-offset_ms)

        self.last_x = pos.x()
        return True

    def release(self) -> None:
        if self.dragging:
            logger.debug("Drag on %s released", self.target)
        self.target = DragTarget.NONE
        self.last_x = None

    def wheel(self, notches: int) -> bool:
        """Grow (positive) or shrink (negative) the display length by 15 minutes per notch."""
        minutes = self.display_minutes + WHEEL_STEP_MINUTES * int(notches)
        if minutes < MIN_DISPLAY_MINUTES or minutes > MAX_DISPLAY_MINUTES:
            return False
        if minutes == self.display_minutes:
            return False
        self.display_minutes = minutes
        return True
